import datetime

from django.conf import settings as djangoSettings
from django.contrib.auth.models import User
from django.db import models, transaction
from django.db.models import Q, Exists, OuterRef
from django.forms import ValidationError
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from choirdinated import consts
from choirdinated.utils.attendanceUtils import summarizeAttendance, tallyAttendance
from choirdinated.utils.modelUtils import choirLookup, groupBy, periodAktiv, permisjonAktiv, qBool, validateSameChoir, validateStartEnd
from choirdinated.utils.recurrenceUtils import expandRecurrence
from choirdinated.utils.utils import cropImage


class ChoirQuerySet(models.QuerySet):
    def provision(self, choirData, contact, voiceConfiguration=consts.VoiceConfiguration.SATB):
        '''
        Oppretter et nytt kor med standard medlemskapstyper, hendelsestyper, hendelsesstatuser og
        stemmeoppsett, samt en bruker for kontaktpersonen som blir dirigent i koret.

        contact er en dict med email, password, name og valgfritt birthDate og phone.
        Alt skjer i én transaction, så enten får man hele koret eller ingenting.
        '''
        with transaction.atomic():
            if User.objects.filter(email__iexact=contact['email']).exists():
                raise ValidationError(
                    _('Det finnes allerede en bruker med denne eposten'),
                    code='emailExists'
                )

            settings = {**consts.defaultChoirSettings, **choirData.pop('settings', {})}
            choir = self.create(**choirData, settings=settings)

            membershipTypes = {
                mt['name']: MembershipType.objects.create(choir=choir, **mt)
                for mt in consts.defaultMembershipTypes
            }

            for i, (value, displayName) in enumerate(consts.defaultEventTypes):
                ListOfValue.objects.create(choir=choir, category=consts.Category.eventType, value=value, displayName=displayName, sortOrder=i+1)

            for i, (value, displayName) in enumerate(consts.defaultEventStatuses):
                ListOfValue.objects.create(choir=choir, category=consts.Category.eventStatus, value=value, displayName=displayName, sortOrder=i+1)

            voiceGroups = {}
            for i, (value, displayName) in enumerate(consts.voiceGroupsForConfiguration[voiceConfiguration]):
                voiceGroups[value] = ListOfValue.objects.create(
                    choir=choir, category=consts.Category.voiceGroup, value=value, displayName=displayName, sortOrder=i+1
                )

            for i, (value, displayName, parentValue) in enumerate(consts.voiceTypesForConfiguration[voiceConfiguration]):
                ListOfValue.objects.create(
                    choir=choir, category=consts.Category.voiceType, value=value, displayName=displayName,
                    sortOrder=i+1, parent=voiceGroups.get(parentValue)
                )

            # Kontaktpersonen havne i sopran om det finnes, ellers første stemmegruppe
            voiceGroup = voiceGroups.get('soprano') or next(iter(voiceGroups.values()))

            user = User.objects.create_user(
                username=contact['email'],
                email=contact['email'],
                password=contact['password']
            )
            user.profile.name = contact['name']
            user.profile.birthDate = contact.get('birthDate')
            user.profile.phone = contact.get('phone', '')
            user.profile.save()

            member = Member.objects.create(
                user=user,
                choir=choir,
                membershipType=membershipTypes[consts.Role.conductor],
                voiceGroup=voiceGroup
            )
            member.periods.create(
                startDate=datetime.date.today(),
                membershipType=member.membershipType,
                voiceGroup=voiceGroup
            )

        return choir


class Choir(models.Model):
    objects = ChoirQuerySet.as_manager()

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    ORGANIZATION_TYPE_CHOICES = (
        (consts.OrganizationType.symphony, 'Symfonikor'),
        (consts.OrganizationType.opera, 'Operakor'),
        (consts.OrganizationType.independent, 'Frittstående kor')
    )
    organizationType = models.CharField(max_length=20, choices=ORGANIZATION_TYPE_CHOICES, default=consts.OrganizationType.independent)
    organizationNumber = models.CharField(max_length=9, blank=True, default='')
    foundedYear = models.PositiveIntegerField(null=True, blank=True)
    website = models.CharField(max_length=255, blank=True, default='')

    settings = models.JSONField(default=dict, blank=True)
    'Innstillinger for koret, se consts.defaultChoirSettings'

    createdAt = models.DateTimeField(auto_now_add=True)

    @property
    def holidayRegion(self):
        return self.settings.get('holidayCalendarRegion', consts.defaultHolidayRegion)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name', 'pk']
        verbose_name_plural = 'choirs'


def generateUploadTo(instance, fileName):
    return f'avatars/{instance.user_id}.{fileName.split(".")[-1]}'


class UserProfile(models.Model):
    'Personinfo om en bruker. Opprettes automatisk når en User lages, se signals/profileSignals.py'
    user = models.OneToOneField(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='profile'
    )

    name = models.CharField(max_length=255, blank=True, default='')
    birthDate = models.DateField(null=True, blank=True)
    phone = models.CharField(max_length=30, blank=True, default='')
    emergencyContact = models.CharField(max_length=255, blank=True, default='')
    emergencyPhone = models.CharField(max_length=30, blank=True, default='')
    avatar = models.ImageField(upload_to=generateUploadTo, null=True, blank=True)
    isActive = models.BooleanField(default=True)
    createdAt = models.DateTimeField(auto_now_add=True)
    lastLogin = models.DateTimeField(null=True, blank=True)

    @property
    def email(self):
        return self.user.email

    def __str__(self):
        return self.name or self.user.email

    class Meta:
        ordering = ['name', 'pk']

    def save(self, *args, **kwargs):
        # Crop bildet om det har endret seg
        if self.avatar and (not self.pk or self.avatar != UserProfile.objects.get(pk=self.pk).avatar):
            self.avatar = cropImage(self.avatar, self.avatar.name, 300, 400)
        super().save(*args, **kwargs)


class MembershipType(models.Model):
    choir = models.ForeignKey(
        Choir,
        on_delete=models.CASCADE,
        related_name='membershipTypes'
    )
    name = models.CharField(max_length=100)
    'Maskinnavnet, f.eks. "conductor". Brukes også til å avgjøre roller, se consts.Role'

    displayName = models.CharField(max_length=100)
    isActiveMembership = models.BooleanField(default=True)
    canAccessSystem = models.BooleanField(default=True)
    canVote = models.BooleanField(default=True)
    sortOrder = models.IntegerField(default=0)
    description = models.TextField(blank=True, default='')
    createdAt = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f'{self.displayName}({self.choir})'

    class Meta:
        unique_together = ('choir', 'name')
        ordering = ['choir', 'sortOrder', 'name']


class ListOfValueQuerySet(models.QuerySet):
    def matching(self, text):
        'Case-insensitive treff på enten value eller displayName'
        text = (text or '').strip()
        return self.filter(Q(value__iexact=text) | Q(displayName__iexact=text))

    def voiceTypeIdsForGroups(self, voiceGroupIds):
        'Skaffe pk-ene til de aktive stemmetypene under stemmegruppene'
        if not voiceGroupIds:
            return []
        return list(self.filter(
            category=consts.Category.voiceType,
            isActive=True,
            parent__in=voiceGroupIds
        ).values_list('pk', flat=True))


class ListOfValue(models.Model):
    '''
    Generisk verdiliste per kor, brukt til stemmegrupper, stemmetyper, hendelsestyper og
    hendelsesstatuser. Stemmetyper kan peke på en stemmegruppe gjennom parent.
    '''
    objects = ListOfValueQuerySet.as_manager()

    choir = models.ForeignKey(
        Choir,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='listOfValues'
    )

    CATEGORY_CHOICES = (
        (consts.Category.voiceGroup, 'Stemmegruppe'),
        (consts.Category.voiceType, 'Stemmetype'),
        (consts.Category.eventType, 'Hendelsestype'),
        (consts.Category.eventStatus, 'Hendelsesstatus')
    )
    category = models.CharField(max_length=30, choices=CATEGORY_CHOICES)
    value = models.CharField(max_length=100)
    displayName = models.CharField(max_length=100)
    description = models.TextField(blank=True, default='')
    isActive = models.BooleanField(default=True)
    sortOrder = models.IntegerField(default=0)

    parent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='children'
    )

    metadata = models.JSONField(default=dict, blank=True)
    createdAt = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.displayName

    class Meta:
        ordering = ['category', 'sortOrder', 'displayName', 'pk']
        verbose_name_plural = 'lists of values'

    def clean(self, *args, **kwargs):
        if self.parent_id and self.category != consts.Category.voiceType:
            raise ValidationError(
                _('Bare stemmetyper kan ha en forelder'),
                code='parentNotVoiceType'
            )

        if self.parent_id and self.parent.category != consts.Category.voiceGroup:
            raise ValidationError(
                _('En stemmetype sin forelder må være en stemmegruppe'),
                code='parentNotVoiceGroup'
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class MemberQuerySet(models.QuerySet):
    def active(self, dato=None):
        'Medlemmer med en åpen periode'
        return self.filter(Exists(MembershipPeriod.objects.filter(
            periodAktiv('', dato=dato),
            member=OuterRef('pk')
        )))

    def annotateActive(self):
        return self.annotate(
            hasOpenPeriod=Exists(MembershipPeriod.objects.filter(
                periodAktiv(''),
                member=OuterRef('pk')
            ))
        )

    def annotateOnLeave(self, dato=None):
        'Annotate isOnLeave, som er True om medlemmet har en godkjent permisjon som gjelder på dato'
        return self.annotate(
            isOnLeave=Exists(MembershipLeave.objects.filter(
                permisjonAktiv('', dato=dato),
                member=OuterRef('pk')
            ))
        )

    def eligibleFor(self, event):
        '''
        Medlemmene som skal ha oppmøte på hendelsen: aktive medlemmer i koret som ikke har
        permisjon på hendelsens dato, og som treffer stemmemålrettingen om ikke includeAllActive.
        '''
        dato = timezone.localtime(event.startTime).date()

        qs = self.filter(choirLookup(event.choir_id)).active(dato=dato).annotateOnLeave(dato=dato).filter(isOnLeave=False)

        if event.includeAllActive:
            return qs

        targetVoiceGroups = event.targetVoiceGroups or []
        targetVoiceTypes = [*(event.targetVoiceTypes or []), *ListOfValue.objects.voiceTypeIdsForGroups(targetVoiceGroups)]

        if not targetVoiceGroups and not targetVoiceTypes:
            return qs

        return qs.filter(
            qBool(targetVoiceGroups, trueOption=Q(voiceGroup__in=targetVoiceGroups)) |
            qBool(targetVoiceTypes, trueOption=Q(voiceType__in=targetVoiceTypes))
        )


class Member(models.Model):
    'Kobler en bruker til et kor, med medlemskapstype og stemmegruppe'
    objects = MemberQuerySet.as_manager()

    user = models.ForeignKey(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='members'
    )

    choir = models.ForeignKey(
        Choir,
        on_delete=models.CASCADE,
        related_name='members'
    )

    membershipType = models.ForeignKey(
        MembershipType,
        on_delete=models.PROTECT,
        related_name='members'
    )

    voiceGroup = models.ForeignKey(
        ListOfValue,
        on_delete=models.PROTECT,
        related_name='voiceGroupMembers',
        limit_choices_to={'category': consts.Category.voiceGroup}
    )

    voiceType = models.ForeignKey(
        ListOfValue,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='voiceTypeMembers',
        limit_choices_to={'category': consts.Category.voiceType}
    )

    notes = models.TextField(blank=True, default='')
    additionalData = models.JSONField(default=dict, blank=True)
    'Felt fra import som ikke ble mappet, samt _importSource og _importDate'

    createdAt = models.DateTimeField(auto_now_add=True)
    updatedAt = models.DateTimeField(auto_now=True)

    @property
    def name(self):
        profile = getattr(self.user, 'profile', None)
        if profile and profile.name:
            return profile.name
        return self.user.get_full_name() or self.user.email

    @property
    def currentPeriod(self):
        return self.periods.filter(periodAktiv('')).first()

    @property
    def isActive(self):
        return self.periods.filter(periodAktiv('')).exists()

    @property
    def isAdmin(self):
        return self.membershipType.name in consts.adminRoles

    @property
    def isGroupLeader(self):
        return self.membershipType.name in consts.groupLeaderRoles

    def __str__(self):
        return f'{self.name}({self.choir})'

    class Meta:
        unique_together = ('user', 'choir')
        ordering = ['choir', 'pk']

    def clean(self, *args, **kwargs):
        validateSameChoir(self, 'membershipType', 'voiceGroup', 'voiceType')

        if self.voiceGroup_id and self.voiceGroup.category != consts.Category.voiceGroup:
            raise ValidationError(
                _('voiceGroup må være en stemmegruppe'),
                code='invalidVoiceGroup'
            )

        if self.voiceType_id and self.voiceType.category != consts.Category.voiceType:
            raise ValidationError(
                _('voiceType må være en stemmetype'),
                code='invalidVoiceType'
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class MembershipPeriod(models.Model):
    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='periods'
    )
    startDate = models.DateField()
    endDate = models.DateField(null=True, blank=True)

    membershipType = models.ForeignKey(
        MembershipType,
        on_delete=models.PROTECT,
        related_name='periods'
    )
    voiceGroup = models.ForeignKey(
        ListOfValue,
        on_delete=models.PROTECT,
        related_name='voiceGroupPeriods'
    )
    voiceType = models.ForeignKey(
        ListOfValue,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='voiceTypePeriods'
    )

    endReason = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    createdAt = models.DateTimeField(auto_now_add=True)

    @property
    def isCurrentPeriod(self):
        return self.endDate == None

    def __str__(self):
        return f'{self.member} {self.startDate} -> {self.endDate or ""}'

    class Meta:
        ordering = ['-startDate', '-pk']

    def clean(self, *args, **kwargs):
        validateStartEnd(self)

        # Et medlem kan bare ha én åpen periode om gangen
        if self.endDate == None and MembershipPeriod.objects.filter(
            ~Q(pk=self.pk),
            periodAktiv(''),
            member=self.member_id
        ).exists():
            raise ValidationError(
                _('Medlemmet har allerede en åpen periode'),
                code='overlappingPeriod'
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class MembershipLeave(models.Model):
    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='leaves'
    )

    LEAVE_TYPE_CHOICES = (
        (consts.LeaveType.sick, 'Sykdom'),
        (consts.LeaveType.personal, 'Personlig'),
        (consts.LeaveType.work, 'Jobb'),
        (consts.LeaveType.study, 'Studier'),
        (consts.LeaveType.other, 'Annet')
    )
    leaveType = models.CharField(max_length=20, choices=LEAVE_TYPE_CHOICES, default=consts.LeaveType.other)

    startDate = models.DateField()
    expectedReturnDate = models.DateField(null=True, blank=True)
    actualReturnDate = models.DateField(null=True, blank=True)
    reason = models.TextField()

    PENDING, APPROVED, REJECTED = consts.LeaveStatus.pending, consts.LeaveStatus.approved, consts.LeaveStatus.rejected
    STATUS_CHOICES = ((PENDING, 'Venter'), (APPROVED, 'Godkjent'), (REJECTED, 'Avslått'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)

    requestedAt = models.DateTimeField(auto_now_add=True)
    approvedBy = models.ForeignKey(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='approvedLeaves'
    )
    approvedAt = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')

    @property
    def isCurrent(self):
        today = datetime.date.today()
        return self.status == MembershipLeave.APPROVED and self.startDate <= today and \
            (self.expectedReturnDate == None or self.expectedReturnDate > today)

    def __str__(self):
        return f'Permisjon {self.member} fra {self.startDate}'

    class Meta:
        ordering = ['-startDate', '-pk']

    def clean(self, *args, **kwargs):
        validateStartEnd(self, endField='expectedReturnDate')
        validateStartEnd(self, endField='actualReturnDate')

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class Season(models.Model):
    choir = models.ForeignKey(
        Choir,
        on_delete=models.CASCADE,
        related_name='seasons'
    )
    name = models.CharField(max_length=100)
    displayName = models.CharField(max_length=100)
    startDate = models.DateField()
    endDate = models.DateField()
    description = models.TextField(blank=True, default='')
    createdBy = models.ForeignKey(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    createdAt = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.displayName

    class Meta:
        unique_together = ('choir', 'name')
        ordering = ['startDate', 'pk']

    def clean(self, *args, **kwargs):
        validateStartEnd(self, canEqual=False)

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)


class HolidayQuerySet(models.QuerySet):
    def datesFor(self, choir, startDate, endDate=None):
        'Settet av aktive helligdagsdatoer i korets region, fra startDate og eventuelt til endDate'
        qs = self.filter(isActive=True, region=choir.holidayRegion, date__gte=startDate)
        if endDate:
            qs = qs.filter(date__lte=endDate)
        return set(qs.values_list('date', flat=True))


class Holiday(models.Model):
    'Helligdager, per region. Et kor bruker helligdagene i regionen fra settings.holidayCalendarRegion'
    objects = HolidayQuerySet.as_manager()

    name = models.CharField(max_length=100)
    date = models.DateField()
    region = models.CharField(max_length=10, default=consts.defaultHolidayRegion)
    isActive = models.BooleanField(default=True)
    createdAt = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f'{self.name}({self.date})'

    class Meta:
        unique_together = ('region', 'date', 'name')
        ordering = ['date', 'name']


class EventQuerySet(models.QuerySet):
    def forMember(self, member):
        '''
        Hendelsene i medlemmets kor som medlemmet treffer målrettingen til. Medlemmer med
        en medlemskapstype som ikke er aktivt medlemskap får ingen hendelser.
        '''
        if not member.membershipType.isActiveMembership:
            return self.none()

        events = []
        for event in self.filter(choirLookup(member.choir_id)).order_by('startTime'):
            if event.includeAllActive or \
                not event.targetMembershipTypes or \
                member.membershipType_id in event.targetMembershipTypes or \
                member.voiceGroup_id in (event.targetVoiceGroups or []) or \
                (member.voiceType_id and member.voiceType_id in (event.targetVoiceTypes or [])):
                events.append(event.pk)

        return self.filter(pk__in=events).order_by('startTime')

    def createRecurring(self, choir, createdBy, eventData, recurrence):
        '''
        Lage en serie av hendelser. Først lages foreldrehendelsen med regelen i recurrenceRule, så
        lages hver forekomst som en egen hendelse før den kobles til forelderen med parentEvent.

        recurrence er en dict med type, interval, endType, count, until og season.
        Returne (parentEvent, instances). Dette skjer ikke i en transaction, så feiler noe midt
        i løkka sitter man igjen med en forelder og et delvis sett av forekomster.
        '''
        startTime = eventData['startTime']
        endTime = eventData['endTime']

        holidayDates = set()
        if eventData.get('excludeHolidays', True):
            holidayDates = Holiday.objects.datesFor(choir, timezone.localtime(startTime).date(), endDate=recurrence.get('until'))

        schedule = expandRecurrence(
            startTime,
            endTime,
            recurrence['type'],
            recurrence['interval'],
            recurrence['endType'],
            count=recurrence.get('count'),
            until=recurrence.get('until'),
            holidayDates=holidayDates
        )

        parentEvent = self.create(
            choir=choir,
            createdBy=createdBy,
            isRecurring=True,
            recurrenceRule={
                'type': recurrence['type'],
                'interval': recurrence['interval'],
                'endType': recurrence['endType'],
                'count': recurrence.get('count'),
                'until': recurrence['until'].isoformat() if recurrence.get('until') else None,
                'season': recurrence.get('season') or None,
            },
            **eventData
        )

        title = eventData['title']
        if recurrence.get('season'):
            title = f'{title} ({recurrence["season"]})'

        instances = []
        for instanceStart, instanceEnd in schedule:
            event = self.create(
                choir=choir,
                createdBy=createdBy,
                **{**eventData, 'title': title, 'startTime': instanceStart, 'endTime': instanceEnd}
            )

            event.parentEvent = parentEvent
            event.save(update_fields=['parentEvent'])

            instances.append(event)

        return parentEvent, instances


class Event(models.Model):
    objects = EventQuerySet.as_manager()

    choir = models.ForeignKey(
        Choir,
        on_delete=models.CASCADE,
        related_name='events'
    )

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default='')

    type = models.ForeignKey(
        ListOfValue,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='typeEvents',
        limit_choices_to={'category': consts.Category.eventType}
    )
    status = models.ForeignKey(
        ListOfValue,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='statusEvents',
        limit_choices_to={'category': consts.Category.eventStatus}
    )

    startTime = models.DateTimeField()
    endTime = models.DateTimeField()
    location = models.CharField(max_length=255)
    room = models.CharField(max_length=100, blank=True, default='')

    # Opt-out er aktiv avmelding, der de som ikke har svart regnes som kommer
    # Opt-in er aktiv påmelding
    ATTENDANCE_MODE_CHOICES = ((consts.AttendanceMode.optIn, 'Påmelding'), (consts.AttendanceMode.optOut, 'Avmelding'))
    attendanceMode = models.CharField(max_length=10, choices=ATTENDANCE_MODE_CHOICES, default=consts.AttendanceMode.optOut)

    targetMembershipTypes = models.JSONField(default=list, blank=True)
    targetVoiceGroups = models.JSONField(default=list, blank=True)
    targetVoiceTypes = models.JSONField(default=list, blank=True)
    'Lagres utvidet, altså med stemmetypene under targetVoiceGroups'

    includeAllActive = models.BooleanField(default=True)
    notes = models.TextField(blank=True, default='')

    createdBy = models.ForeignKey(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )

    isRecurring = models.BooleanField(default=False)
    recurrenceRule = models.JSONField(null=True, blank=True)
    'Bare satt på foreldrehendelsen i en serie'

    parentEvent = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='instances'
    )

    excludeHolidays = models.BooleanField(default=True)
    calendarSyncEnabled = models.BooleanField(default=True)
    createdAt = models.DateTimeField(auto_now_add=True)

    @property
    def duration(self):
        return self.endTime - self.startTime

    def generateAttendance(self):
        '''
        Legg til not_responded oppmøter for medlemmer som skal ha oppmøte men ikke har det.
        Fjerner aldri oppmøter, de kan ha svar knyttet til seg. Returne antallet nye oppmøter.
        '''
        newAttendance = [
            EventAttendance(event=self, member=member)
            for member in Member.objects.eligibleFor(self).exclude(attendance__event=self)
        ]
        EventAttendance.objects.bulk_create(newAttendance)
        return len(newAttendance)

    def getAttendanceSummary(self):
        return summarizeAttendance(self.attendance.all(), self.attendanceMode)

    def getVoiceGroupBreakdown(self):
        '''
        Returne en liste av dicts med telling per stemmegruppe. Her telles attending rått,
        uten opt-out regelen, slik at man ser hvem som faktisk har svart.
        '''
        breakdown = []
        for voiceGroupId, rows in groupBy(self.attendance.select_related('member'), 'voiceGroupId').items():
            breakdown.append({'voiceGroupId': voiceGroupId, **tallyAttendance(rows)})
        return breakdown

    def __str__(self):
        return f'{self.title}({timezone.localtime(self.startTime).date()})'

    class Meta:
        ordering = ['startTime', 'title', 'pk']

    def clean(self, *args, **kwargs):
        validateStartEnd(self, startField='startTime', endField='endTime', canEqual=False)
        validateSameChoir(self, 'type', 'status')

    def save(self, *args, **kwargs):
        self.clean()

        # Utvid stemmegrupper til stemmetypene under dem
        if self.targetVoiceGroups:
            self.targetVoiceTypes = list(dict.fromkeys([
                *(self.targetVoiceTypes or []),
                *ListOfValue.objects.voiceTypeIdsForGroups(self.targetVoiceGroups)
            ]))

        super().save(*args, **kwargs)

        # Serieforeldre har ingen oppmøter, bare forekomstene
        if not self.isRecurring and not kwargs.get('update_fields'):
            self.generateAttendance()

    def delete(self, *args, **kwargs):
        # Slett oppmøtene før hendelsen
        self.attendance.all().delete()
        super().delete(*args, **kwargs)


class EventAttendance(models.Model):
    event = models.ForeignKey(
        Event,
        on_delete=models.CASCADE,
        related_name='attendance'
    )
    member = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name='attendance'
    )

    INTENDED_STATUS_CHOICES = (
        (consts.IntendedStatus.attending, 'Kommer'),
        (consts.IntendedStatus.notAttending, 'Kommer ikke'),
        (consts.IntendedStatus.tentative, 'Kommer kanskje'),
        (consts.IntendedStatus.notResponded, 'Ikke svart')
    )
    intendedStatus = models.CharField(max_length=20, choices=INTENDED_STATUS_CHOICES, default=consts.IntendedStatus.notResponded)
    intendedReason = models.TextField(blank=True, default='')

    ACTUAL_STATUS_CHOICES = (
        (consts.ActualStatus.present, 'Til stede'),
        (consts.ActualStatus.absent, 'Fraværende'),
        (consts.ActualStatus.late, 'For sent')
    )
    actualStatus = models.CharField(max_length=10, choices=ACTUAL_STATUS_CHOICES, null=True, blank=True)
    'Settes av en organisator etter hendelsen, None betyr ikke registrert'

    markedBy = models.ForeignKey(
        djangoSettings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='+'
    )
    markedAt = models.DateTimeField(null=True, blank=True)
    memberResponseAt = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')

    @property
    def voiceGroupId(self):
        return self.member.voiceGroup_id

    def __str__(self):
        return f'Oppmøte {self.member} -> {self.event}'

    class Meta:
        unique_together = ('event', 'member')
        ordering = ['-event__startTime', 'member']
        verbose_name_plural = 'event attendance'

    def clean(self, *args, **kwargs):
        if self.member.choir_id != self.event.choir_id:
            raise ValidationError(
                _('Medlemmet er ikke i hendelsens kor'),
                code='crossChoirAttendance'
            )

    def save(self, *args, **kwargs):
        self.clean()
        super().save(*args, **kwargs)
