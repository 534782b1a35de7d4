import datetime

from django import forms
from django.db.models import Q
from django.forms import ValidationError
from django.utils.translation import gettext_lazy as _

from choirdinated import consts
from choirdinated.models import ListOfValue, MembershipType


class IdListField(forms.Field):
    'Et felt for en JSON liste av pk-er'
    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, list):
            raise ValidationError(_('Må være en liste'), code='invalidList')
        try:
            return [int(v) for v in value]
        except (TypeError, ValueError):
            raise ValidationError(_('Må være en liste av id-er'), code='invalidId')


class DictListField(forms.Field):
    'Et felt for en JSON liste av objekter, brukt for rader i import'
    def to_python(self, value):
        if value in self.empty_values:
            return []
        if not isinstance(value, list) or not all(isinstance(row, dict) for row in value):
            raise ValidationError(_('Må være en liste av objekter'), code='invalidRows')
        return value


class ChoirFormMixin:
    'Form som tar inn choir, og begrenser valgene i ModelChoiceFields til det koret'
    def __init__(self, *args, choir, **kwargs):
        super().__init__(*args, **kwargs)
        self.choir = choir

    def cleanIdsInChoir(self, fieldName, queryset):
        ids = self.cleaned_data.get(fieldName) or []
        if len(set(ids)) != queryset.filter(pk__in=ids).count():
            raise ValidationError(_('Ukjent id for dette koret'), code='unknownId')
        return ids


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField()


class EventForm(ChoirFormMixin, forms.Form):
    title = forms.CharField(max_length=255)
    description = forms.CharField(required=False)
    typeId = forms.ModelChoiceField(queryset=ListOfValue.objects.none(), required=False)
    statusId = forms.ModelChoiceField(queryset=ListOfValue.objects.none(), required=False)
    startTime = forms.DateTimeField()
    endTime = forms.DateTimeField()
    location = forms.CharField(max_length=255)
    room = forms.CharField(max_length=100, required=False)
    attendanceMode = forms.ChoiceField(choices=[(consts.AttendanceMode.optIn, 'opt_in'), (consts.AttendanceMode.optOut, 'opt_out')])
    targetMembershipTypes = IdListField(required=False)
    targetVoiceGroups = IdListField(required=False)
    targetVoiceTypes = IdListField(required=False)
    includeAllActive = forms.NullBooleanField(required=False)
    notes = forms.CharField(required=False)
    excludeHolidays = forms.NullBooleanField(required=False)
    calendarSyncEnabled = forms.NullBooleanField(required=False)

    # Standardverdier for boolske felt som ikke er med i bodyen
    booleanDefaults = {'includeAllActive': True, 'excludeHolidays': True, 'calendarSyncEnabled': True}

    def __init__(self, *args, event=None, **kwargs):
        super().__init__(*args, **kwargs)
        # Typen og statusen hendelsen allerede har er gyldige selv om de er deaktivert siden
        current = [] if event == None else [pk for pk in [event.type_id, event.status_id] if pk]
        choirValues = ListOfValue.objects.filter(Q(isActive=True) | Q(pk__in=current), choir=self.choir)
        self.fields['typeId'].queryset = choirValues.filter(category=consts.Category.eventType)
        self.fields['statusId'].queryset = choirValues.filter(category=consts.Category.eventStatus)

    def clean_targetMembershipTypes(self):
        return self.cleanIdsInChoir('targetMembershipTypes', MembershipType.objects.filter(choir=self.choir))

    def clean_targetVoiceGroups(self):
        return self.cleanIdsInChoir('targetVoiceGroups', ListOfValue.objects.filter(choir=self.choir, category=consts.Category.voiceGroup))

    def clean_targetVoiceTypes(self):
        return self.cleanIdsInChoir('targetVoiceTypes', ListOfValue.objects.filter(choir=self.choir, category=consts.Category.voiceType))

    def clean(self):
        cleaned_data = super().clean()

        for field, default in self.booleanDefaults.items():
            if cleaned_data.get(field) == None:
                cleaned_data[field] = default

        startTime, endTime = cleaned_data.get('startTime'), cleaned_data.get('endTime')
        if startTime and endTime and endTime <= startTime:
            self.add_error('endTime', ValidationError(_('Slutt må være etter start'), code='invalidDateOrder'))

        return cleaned_data

    def eventData(self):
        'cleaned_data oversatt til kwargs for Event'
        data = {k: self.cleaned_data[k] for k in EventForm.base_fields if k not in ['typeId', 'statusId']}
        return {**data, 'type': self.cleaned_data['typeId'], 'status': self.cleaned_data['statusId']}


class RecurringEventForm(EventForm):
    recurrenceType = forms.ChoiceField(choices=[(t, t) for t in [consts.RecurrenceType.daily, consts.RecurrenceType.weekly, consts.RecurrenceType.monthly]])
    recurrenceInterval = forms.IntegerField(min_value=1, max_value=52)
    recurrenceEndType = forms.ChoiceField(choices=[(consts.RecurrenceEndType.count, 'count'), (consts.RecurrenceEndType.until, 'until')])
    recurrenceCount = forms.IntegerField(min_value=1, max_value=consts.maxOccurrences, required=False)
    recurrenceUntil = forms.DateField(required=False)
    season = forms.CharField(max_length=100, required=False)

    booleanDefaults = {'includeAllActive': False, 'excludeHolidays': True, 'calendarSyncEnabled': True}

    def clean(self):
        cleaned_data = super().clean()

        if cleaned_data.get('recurrenceEndType') == consts.RecurrenceEndType.until and not cleaned_data.get('recurrenceUntil'):
            self.add_error('recurrenceUntil', ValidationError(_('Må settes når serien slutter på en dato'), code='required'))

        if cleaned_data.get('recurrenceEndType') == consts.RecurrenceEndType.count and not cleaned_data.get('recurrenceCount'):
            cleaned_data['recurrenceCount'] = consts.defaultRecurrenceCount

        return cleaned_data

    def recurrence(self):
        return {
            'type': self.cleaned_data['recurrenceType'],
            'interval': self.cleaned_data['recurrenceInterval'],
            'endType': self.cleaned_data['recurrenceEndType'],
            'count': self.cleaned_data['recurrenceCount'] if self.cleaned_data['recurrenceEndType'] == consts.RecurrenceEndType.count else None,
            'until': self.cleaned_data['recurrenceUntil'] if self.cleaned_data['recurrenceEndType'] == consts.RecurrenceEndType.until else None,
            'season': self.cleaned_data['season'],
        }


class AttendanceResponseForm(forms.Form):
    intendedStatus = forms.ChoiceField(choices=[(s, s) for s in consts.memberResponseStatuses])
    intendedReason = forms.CharField(required=False)


class AttendanceMarkForm(forms.Form):
    actualStatus = forms.ChoiceField(choices=[(s, s) for s in consts.alleActualStatuses])
    notes = forms.CharField(required=False)


class SeasonForm(forms.Form):
    name = forms.CharField(max_length=100)
    displayName = forms.CharField(max_length=100)
    startDate = forms.DateField()
    endDate = forms.DateField()
    description = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if cleaned_data.get('startDate') and cleaned_data.get('endDate') and cleaned_data['endDate'] <= cleaned_data['startDate']:
            self.add_error('endDate', ValidationError(_('Slutt må være etter start'), code='invalidDateOrder'))
        return cleaned_data


class PeriodForm(ChoirFormMixin, forms.Form):
    startDate = forms.DateField()
    endDate = forms.DateField(required=False)
    endReason = forms.CharField(required=False)
    membershipTypeId = forms.ModelChoiceField(queryset=MembershipType.objects.none(), required=False)
    notes = forms.CharField(required=False)

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['membershipTypeId'].queryset = MembershipType.objects.filter(choir=self.choir)


class PeriodUpdateForm(PeriodForm):
    periodId = forms.IntegerField()


class PeriodEndForm(forms.Form):
    endDate = forms.DateField(required=False)
    endReason = forms.CharField(required=False)

    def clean_endDate(self):
        return self.cleaned_data['endDate'] or datetime.date.today()

    def clean_endReason(self):
        return self.cleaned_data['endReason'] or 'Membership ended'


class LeaveForm(forms.Form):
    leaveType = forms.ChoiceField(
        choices=[(t, t) for t in [consts.LeaveType.sick, consts.LeaveType.personal, consts.LeaveType.work, consts.LeaveType.study, consts.LeaveType.other]],
        required=False
    )
    startDate = forms.DateField()
    endDate = forms.DateField(required=False, help_text='Forventet tilbake')
    reason = forms.CharField()
    notes = forms.CharField(required=False)

    def clean_leaveType(self):
        return self.cleaned_data['leaveType'] or consts.LeaveType.other


class LeaveUpdateForm(LeaveForm):
    leaveId = forms.IntegerField()
    returnDate = forms.DateField(required=False)
    status = forms.ChoiceField(
        choices=[(s, s) for s in [consts.LeaveStatus.pending, consts.LeaveStatus.approved, consts.LeaveStatus.rejected]],
        required=False
    )

    def clean_status(self):
        return self.cleaned_data['status'] or consts.LeaveStatus.approved


class LeaveDeleteForm(forms.Form):
    leaveId = forms.IntegerField()


class MemberImportForm(forms.Form):
    data = DictListField()
    sourceSystem = forms.CharField(required=False)


class LookupOrgForm(forms.Form):
    orgNumber = forms.CharField(required=False)
    orgName = forms.CharField(required=False)

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get('orgNumber') and not cleaned_data.get('orgName'):
            raise ValidationError(_('Either organization number or name is required'), code='required')
        return cleaned_data


class ProvisionChoirForm(forms.Form):
    name = forms.CharField(max_length=255)
    vatNumber = forms.CharField(required=False)
    foundedYear = forms.IntegerField(required=False, min_value=1000, max_value=9999)
    rehearsalLocation = forms.CharField()
    description = forms.CharField(required=False)
    organizationType = forms.ChoiceField(choices=[
        (consts.OrganizationType.symphony, 'symphony'),
        (consts.OrganizationType.opera, 'opera'),
        (consts.OrganizationType.independent, 'independent')
    ])
    parentOrganization = forms.CharField(required=False)

    contactName = forms.CharField(max_length=255)
    contactEmail = forms.EmailField()
    contactPhone = forms.CharField(required=False)
    contactPassword = forms.CharField(min_length=8)
    contactBirthDate = forms.DateField()

    voiceConfiguration = forms.ChoiceField(choices=[(c, c) for c in consts.alleVoiceConfigurations])

    billingName = forms.CharField()
    billingAddress = forms.CharField()
    billingPostalCode = forms.CharField()
    billingCity = forms.CharField()
    billingEmail = forms.EmailField()

    def choirData(self):
        data = self.cleaned_data
        vatNumber = ''.join(data['vatNumber'].split())
        return {
            'name': data['name'],
            'description': data['description'],
            'organizationType': data['organizationType'],
            'organizationNumber': vatNumber if len(vatNumber) == 9 else '',
            'foundedYear': data['foundedYear'],
            'settings': {
                'rehearsalLocation': data['rehearsalLocation'],
                'parentOrganization': data['parentOrganization'],
                'vatNumber': data['vatNumber'],
                'billing': {
                    'name': data['billingName'],
                    'address': data['billingAddress'],
                    'postalCode': data['billingPostalCode'],
                    'city': data['billingCity'],
                    'email': data['billingEmail'],
                    'trialEndsAt': (datetime.date.today() + datetime.timedelta(days=30)).isoformat(),
                    'monthlyFee': 500,
                },
            },
        }

    def contact(self):
        return {
            'name': self.cleaned_data['contactName'],
            'email': self.cleaned_data['contactEmail'],
            'phone': self.cleaned_data['contactPhone'],
            'password': self.cleaned_data['contactPassword'],
            'birthDate': self.cleaned_data['contactBirthDate'],
        }
