import datetime
import logging
import zipfile

from openpyxl.utils.exceptions import InvalidFileException

from django.contrib.auth import authenticate, login as auth_login, logout as auth_logout
from django.contrib.auth.models import User
from django.db.models import Prefetch
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from django.views.decorators.csrf import csrf_exempt

from choirdinated import consts
from choirdinated.forms import AttendanceMarkForm, AttendanceResponseForm, EventForm, LeaveDeleteForm, LeaveForm, LeaveUpdateForm, LoginForm, LookupOrgForm, \
    MemberImportForm, PeriodEndForm, PeriodForm, PeriodUpdateForm, ProvisionChoirForm, RecurringEventForm, SeasonForm
from choirdinated.models import Choir, Event, EventAttendance, ListOfValue, Member, MembershipLeave, MembershipType, Season
from choirdinated.utils import brreg
from choirdinated.utils.importUtils import importMembers, parseSpreadsheet
from choirdinated.utils.jsonUtils import serializeAttendance, serializeEvent, serializeLeave, serializeListOfValue, serializeMember, \
    serializeMembershipType, serializePeriod, serializeSeason
from choirdinated.utils.modelUtils import choirLookup, periodAktiv
from choirdinated.utils.viewUtils import ApiError, apiTilgang, checkRole, parseJson, validateForm

logger = logging.getLogger(__name__)


# Auth

@csrf_exempt
@apiTilgang(public=True, methods=['POST'])
def login(request):
    form = validateForm(LoginForm, parseJson(request))

    # Brukernavnet er ikke nødvendigvis eposten, f.eks. for superusers
    user = User.objects.filter(email__iexact=form.cleaned_data['email']).first()
    if not user or not (user := authenticate(request, username=user.username, password=form.cleaned_data['password'])):
        raise ApiError('Invalid email or password', status=401)

    auth_login(request, user)

    return JsonResponse({
        'user': {'id': user.pk, 'email': user.email, 'name': user.profile.name},
    })


@apiTilgang(public=True, methods=['POST'])
def logout(request):
    auth_logout(request)
    return JsonResponse({'success': True})


# Events

def parseFrom(value):
    'Parse ?from= som enten et tidspunkt eller en dato'
    if not value:
        return None
    try:
        result = parse_datetime(value) or parse_date(value)
    except ValueError:
        result = None
    if result == None:
        raise ApiError('Invalid from parameter')
    if not isinstance(result, datetime.datetime):
        result = datetime.datetime.combine(result, datetime.time())
    if timezone.is_naive(result):
        result = timezone.make_aware(result)
    return result


def eventWithSummary(event):
    return serializeEvent(
        event,
        eventType=event.type.displayName if event.type else 'Annet',
        attendanceSummary=event.getAttendanceSummary()
    )


@apiTilgang(methods=['GET', 'POST'])
def eventListe(request):
    if request.method == 'POST':
        form = validateForm(EventForm, parseJson(request), choir=request.choir)
        event = Event.objects.create(choir=request.choir, createdBy=request.user, **form.eventData())
        return JsonResponse({'event': serializeEvent(event)}, status=201)

    events = Event.objects.filter(choirLookup(request.choir))
    if fra := parseFrom(request.GET.get('from')):
        events = events.filter(startTime__gte=fra)

    events = events.select_related('type').prefetch_related('attendance').order_by('-startTime')

    return JsonResponse({
        'events': [eventWithSummary(event) for event in events],
        'choirId': request.choir.pk
    })


def eventFormData(event):
    'Dataen til et eksisterende event på formen EventForm forventer, så PUT kan sende bare det som endres'
    return {
        'title': event.title,
        'description': event.description,
        'typeId': event.type_id,
        'statusId': event.status_id,
        'startTime': event.startTime.isoformat(),
        'endTime': event.endTime.isoformat(),
        'location': event.location,
        'room': event.room,
        'attendanceMode': event.attendanceMode,
        'targetMembershipTypes': event.targetMembershipTypes,
        'targetVoiceGroups': event.targetVoiceGroups,
        'targetVoiceTypes': event.targetVoiceTypes,
        'includeAllActive': event.includeAllActive,
        'notes': event.notes,
        'excludeHolidays': event.excludeHolidays,
        'calendarSyncEnabled': event.calendarSyncEnabled,
    }


@apiTilgang(methods=['GET', 'PUT', 'DELETE'])
def event(request, eventPK):
    event = get_object_or_404(Event.objects.select_related('type'), choirLookup(request.choir), pk=eventPK)

    if request.method == 'PUT':
        form = validateForm(EventForm, {**eventFormData(event), **parseJson(request)}, choir=request.choir, event=event)

        for key, value in form.eventData().items():
            setattr(event, key, value)

        # save legger til oppmøter for medlemmer som nå treffes av målrettingen
        event.save()
        return JsonResponse({'event': eventWithSummary(event)})

    if request.method == 'DELETE':
        event.delete()
        return JsonResponse({'success': True})

    return JsonResponse({'event': eventWithSummary(event)})


@apiTilgang(methods=['POST'])
def recurringEvents(request):
    form = validateForm(RecurringEventForm, parseJson(request), choir=request.choir)

    parentEvent, instances = Event.objects.createRecurring(request.choir, request.user, form.eventData(), form.recurrence())

    logger.info(f'{request.user} lagde serien {parentEvent} med {len(instances)} hendelser')

    return JsonResponse({
        'parentEvent': serializeEvent(parentEvent),
        'events': [serializeEvent(e) for e in instances],
        'totalCreated': len(instances),
    }, status=201)


@apiTilgang(methods=['GET', 'POST'])
def eventAttendance(request, eventPK):
    event = get_object_or_404(Event, choirLookup(request.choir), pk=eventPK)

    if request.method == 'POST':
        form = validateForm(AttendanceResponseForm, parseJson(request))

        attendance, created = EventAttendance.objects.update_or_create(
            event=event,
            member=request.member,
            defaults={
                'intendedStatus': form.cleaned_data['intendedStatus'],
                'intendedReason': form.cleaned_data['intendedReason'],
                'memberResponseAt': timezone.now(),
            }
        )
        return JsonResponse({'attendance': serializeAttendance(attendance)}, status=201 if created else 200)

    attendance = event.attendance.select_related(
        'member__user__profile', 'member__voiceGroup', 'member__voiceType'
    ).order_by('member__voiceGroup__sortOrder', 'member__user__profile__name')

    voiceGroups = {lov.pk: lov for lov in ListOfValue.objects.filter(choir=request.choir, category=consts.Category.voiceGroup)}

    return JsonResponse({
        'attendance': [serializeAttendance(a, includeMember=True) for a in attendance],
        'voiceGroupBreakdown': [
            {**row, 'voiceGroup': serializeListOfValue(voiceGroups.get(row['voiceGroupId']))}
            for row in event.getVoiceGroupBreakdown()
        ],
        'summary': event.getAttendanceSummary(),
    })


@apiTilgang(methods=['PUT'], roles=consts.groupLeaderRoles)
def markAttendance(request, eventPK, memberPK):
    event = get_object_or_404(Event, choirLookup(request.choir), pk=eventPK)

    if not (attendance := EventAttendance.objects.filter(event=event, member=memberPK).first()):
        raise ApiError('Attendance record not found', status=404)

    form = validateForm(AttendanceMarkForm, parseJson(request))

    attendance.actualStatus = form.cleaned_data['actualStatus']
    attendance.notes = form.cleaned_data['notes']
    attendance.markedBy = request.user
    attendance.markedAt = timezone.now()
    attendance.save()

    return JsonResponse({'attendance': serializeAttendance(attendance)})


@apiTilgang(methods=['GET'])
def myEvents(request):
    # Seriens forelder er bare en mal, forekomstene er de egentlige hendelsene
    events = Event.objects.forMember(request.member).filter(isRecurring=False).select_related('type').prefetch_related(
        Prefetch('attendance', queryset=EventAttendance.objects.filter(member=request.member), to_attr='myAttendance')
    )

    return JsonResponse({
        'events': [
            serializeEvent(
                event,
                eventType=event.type.displayName if event.type else 'Annet',
                attendance=serializeAttendance(event.myAttendance[0]) if event.myAttendance else None
            ) for event in events
        ]
    })


@apiTilgang(methods=['GET'])
def eventOptions(request):
    values = ListOfValue.objects.filter(
        choirLookup(request.choir),
        isActive=True
    ).order_by('sortOrder', 'displayName')

    def category(c):
        return [serializeListOfValue(lov) for lov in values if lov.category == c]

    return JsonResponse({
        'eventTypes': category(consts.Category.eventType),
        'eventStatuses': category(consts.Category.eventStatus),
        'voiceGroups': category(consts.Category.voiceGroup),
        'voiceTypes': category(consts.Category.voiceType),
        'membershipTypes': [serializeMembershipType(mt) for mt in MembershipType.objects.filter(choirLookup(request.choir))],
    })


# Seasons

@apiTilgang(methods=['GET', 'POST'])
def seasonListe(request):
    if request.method == 'POST':
        checkRole(request, consts.seasonRoles)

        form = validateForm(SeasonForm, parseJson(request))
        if Season.objects.filter(choir=request.choir, name=form.cleaned_data['name']).exists():
            raise ApiError('A season with this name already exists')

        season = Season.objects.create(choir=request.choir, createdBy=request.user, **form.cleaned_data)
        return JsonResponse({'season': serializeSeason(season)}, status=201)

    return JsonResponse({
        'seasons': [serializeSeason(s) for s in Season.objects.filter(choirLookup(request.choir)).order_by('startDate')]
    })


# Members

def memberQueryset(request):
    return Member.objects.filter(choirLookup(request.choir)).annotateActive().annotateOnLeave().select_related(
        'user__profile', 'membershipType', 'voiceGroup', 'voiceType'
    )


@apiTilgang(methods=['GET'])
def memberListe(request):
    members = memberQueryset(request).order_by('voiceGroup__sortOrder', 'user__profile__name')
    return JsonResponse({'members': [serializeMember(m) for m in members]})


@apiTilgang(methods=['GET'])
def member(request, memberPK):
    member = get_object_or_404(memberQueryset(request), pk=memberPK)

    return JsonResponse({
        'member': serializeMember(member),
        'periods': [serializePeriod(p) for p in member.periods.all()],
        'leaves': [serializeLeave(l) for l in member.leaves.all()],
        'recentAttendance': [
            {**serializeAttendance(a), 'event': {'id': a.event.pk, 'title': a.event.title, 'startTime': a.event.startTime}}
            for a in member.attendance.select_related('event').order_by('-event__startTime')[:20]
        ],
    })


@apiTilgang(methods=['POST', 'PUT', 'PATCH'], roles=consts.adminRoles)
def memberPeriods(request, memberPK):
    member = get_object_or_404(Member, choirLookup(request.choir), pk=memberPK)
    data = parseJson(request)

    if request.method == 'POST':
        form = validateForm(PeriodForm, data, choir=request.choir)
        period = member.periods.create(
            startDate=form.cleaned_data['startDate'],
            endDate=form.cleaned_data['endDate'],
            endReason=form.cleaned_data['endReason'],
            notes=form.cleaned_data['notes'],
            membershipType=form.cleaned_data['membershipTypeId'] or member.membershipType,
            voiceGroup=member.voiceGroup,
            voiceType=member.voiceType
        )
        return JsonResponse({'period': serializePeriod(period)}, status=201)

    if request.method == 'PUT':
        form = validateForm(PeriodUpdateForm, data, choir=request.choir)
        if not (period := member.periods.filter(pk=form.cleaned_data['periodId']).first()):
            raise ApiError('Membership period not found', status=404)

        period.startDate = form.cleaned_data['startDate']
        period.endDate = form.cleaned_data['endDate']
        period.endReason = form.cleaned_data['endReason']
        period.membershipType = form.cleaned_data['membershipTypeId'] or period.membershipType
        if 'notes' in data:
            period.notes = form.cleaned_data['notes']
        period.save()
        return JsonResponse({'period': serializePeriod(period)})

    # PATCH avslutter nåværende periode
    form = validateForm(PeriodEndForm, data)
    if not (period := member.periods.filter(periodAktiv('')).first()):
        raise ApiError('No active membership period found', status=404)

    period.endDate = form.cleaned_data['endDate']
    period.endReason = form.cleaned_data['endReason']
    period.save()
    return JsonResponse({'period': serializePeriod(period)})


@apiTilgang(methods=['POST', 'PUT', 'DELETE'], roles=consts.groupLeaderRoles)
def memberLeaves(request, memberPK):
    member = get_object_or_404(Member, choirLookup(request.choir), pk=memberPK)
    data = parseJson(request)

    if request.method == 'POST':
        # Permisjoner som legges inn av en leder er godkjent med en gang
        form = validateForm(LeaveForm, data)
        leave = member.leaves.create(
            leaveType=form.cleaned_data['leaveType'],
            startDate=form.cleaned_data['startDate'],
            expectedReturnDate=form.cleaned_data['endDate'],
            reason=form.cleaned_data['reason'],
            notes=form.cleaned_data['notes'],
            status=MembershipLeave.APPROVED,
            approvedBy=request.user,
            approvedAt=timezone.now()
        )
        return JsonResponse({'leave': serializeLeave(leave)}, status=201)

    if request.method == 'PUT':
        form = validateForm(LeaveUpdateForm, data)
        if not (leave := member.leaves.filter(pk=form.cleaned_data['leaveId']).first()):
            raise ApiError('Leave not found', status=404)

        leave.leaveType = form.cleaned_data['leaveType']
        leave.startDate = form.cleaned_data['startDate']
        leave.expectedReturnDate = form.cleaned_data['endDate']
        leave.actualReturnDate = form.cleaned_data['returnDate']
        leave.reason = form.cleaned_data['reason']
        leave.status = form.cleaned_data['status']
        leave.notes = form.cleaned_data['notes']
        leave.approvedBy = request.user
        leave.approvedAt = timezone.now()
        leave.save()
        return JsonResponse({'leave': serializeLeave(leave)})

    form = validateForm(LeaveDeleteForm, data)
    if not (leave := member.leaves.filter(pk=form.cleaned_data['leaveId']).first()):
        raise ApiError('Leave not found', status=404)
    leave.delete()
    return JsonResponse({'success': True})


@apiTilgang(methods=['POST'], roles=consts.adminRoles)
def memberImport(request):
    form = validateForm(MemberImportForm, parseJson(request))

    results = importMembers(request.choir, form.cleaned_data['data'], form.cleaned_data['sourceSystem'] or None)

    logger.info(f'{request.user} importerte {results["imported"]} medlemmer til {request.choir}, {len(results["errors"])} feil')

    return JsonResponse({'success': True, 'results': results})


@apiTilgang(methods=['POST'])
def parseExcel(request):
    if not (fil := request.FILES.get('file')):
        raise ApiError('No file provided')

    try:
        rows = parseSpreadsheet(fil, fil.name)
    except (InvalidFileException, zipfile.BadZipFile, UnicodeDecodeError):
        raise ApiError('Failed to parse Excel file')

    return JsonResponse(rows, safe=False)


# Onboarding

@csrf_exempt
@apiTilgang(public=True, methods=['POST'])
def lookupOrg(request):
    form = validateForm(LookupOrgForm, parseJson(request))

    if orgNumber := form.cleaned_data['orgNumber']:
        if not brreg.validateOrganizationNumber(orgNumber):
            raise ApiError('Invalid organization number format')

        if not (organization := brreg.lookupByOrganizationNumber(orgNumber)):
            raise ApiError('Organization not found', status=404)

        return JsonResponse({
            'success': True,
            'data': {**organization, 'suggestedOrganizationType': brreg.getChoirOrganizationType(organization)},
        })

    return JsonResponse({
        'success': True,
        'data': brreg.searchByName(form.cleaned_data['orgName']),
    })


@csrf_exempt
@apiTilgang(public=True, methods=['POST'])
def provisionChoir(request):
    form = validateForm(ProvisionChoirForm, parseJson(request))

    choir = Choir.objects.provision(form.choirData(), form.contact(), form.cleaned_data['voiceConfiguration'])
    member = choir.members.select_related('user').get()

    logger.info(f'Opprettet koret {choir} med {member.user.email} som dirigent')

    return JsonResponse({
        'success': True,
        'data': {
            'choirId': choir.pk,
            'userId': member.user_id,
            'memberId': member.pk,
            'trialEndsAt': choir.settings['billing']['trialEndsAt'],
        }
    }, status=201)
