# Fil for å definere constants som går igjen over hele appen

class Category:
    voiceGroup = 'voice_group'
    voiceType = 'voice_type'
    eventType = 'event_type'
    eventStatus = 'event_status'

alleCategories = [Category.voiceGroup, Category.voiceType, Category.eventType, Category.eventStatus]


class AttendanceMode:
    optIn = 'opt_in'
    optOut = 'opt_out'


class IntendedStatus:
    attending = 'attending'
    notAttending = 'not_attending'
    tentative = 'tentative'
    notResponded = 'not_responded'

memberResponseStatuses = [IntendedStatus.attending, IntendedStatus.notAttending, IntendedStatus.tentative]


class ActualStatus:
    present = 'present'
    absent = 'absent'
    late = 'late'

alleActualStatuses = [ActualStatus.present, ActualStatus.absent, ActualStatus.late]


class RecurrenceType:
    daily = 'daily'
    weekly = 'weekly'
    monthly = 'monthly'


class RecurrenceEndType:
    count = 'count'
    until = 'until'

maxOccurrences = 365
defaultRecurrenceCount = 10


class Role:
    admin = 'admin'
    conductor = 'conductor'
    assistantConductor = 'assistant_conductor'
    sectionLeader = 'section_leader'

adminRoles = [Role.admin, Role.conductor]
groupLeaderRoles = [*adminRoles, Role.assistantConductor, Role.sectionLeader]
seasonRoles = [Role.admin, Role.conductor]


class OrganizationType:
    symphony = 'symphony'
    opera = 'opera'
    independent = 'independent'


memberStatusOnLeave = 'I permisjon'
memberStatusActive = 'Aktiv'

defaultHolidayRegion = 'NO'

norskeMåneder = {
    'jan': 1, 'feb': 2, 'mar': 3, 'apr': 4,
    'mai': 5, 'jun': 6, 'jul': 7, 'aug': 8,
    'sep': 9, 'okt': 10, 'nov': 11, 'des': 12
}

# Standardoppsett for nye kor, brukt av provisionChoir og seed

defaultMembershipTypes = [
    {'name': 'active_member', 'displayName': 'Aktivt medlem', 'isActiveMembership': True, 'canAccessSystem': True, 'canVote': True, 'sortOrder': 1},
    {'name': Role.conductor, 'displayName': 'Dirigent', 'isActiveMembership': True, 'canAccessSystem': True, 'canVote': True, 'sortOrder': 2},
    {'name': Role.assistantConductor, 'displayName': 'Assisterende Dirigent', 'isActiveMembership': True, 'canAccessSystem': True, 'canVote': True, 'sortOrder': 3},
    {'name': Role.sectionLeader, 'displayName': 'Stemmeleder', 'isActiveMembership': True, 'canAccessSystem': True, 'canVote': True, 'sortOrder': 4},
    {'name': 'member', 'displayName': 'Medlem', 'isActiveMembership': True, 'canAccessSystem': True, 'canVote': True, 'sortOrder': 5},
    {'name': 'guest', 'displayName': 'Gjest', 'isActiveMembership': False, 'canAccessSystem': True, 'canVote': False, 'sortOrder': 6},
]

defaultEventTypes = [
    ('rehearsal', 'Øvelse'),
    ('concert', 'Konsert'),
    ('recording', 'Innspilling'),
    ('workshop', 'Workshop'),
    ('meeting', 'Møte'),
    ('social', 'Sosialt arrangement'),
]

defaultEventStatuses = [
    ('scheduled', 'Planlagt'),
    ('confirmed', 'Bekreftet'),
    ('cancelled', 'Avlyst'),
    ('completed', 'Gjennomført'),
    ('postponed', 'Utsatt'),
]

class VoiceConfiguration:
    SATB = 'SATB'
    SSAATTBB = 'SSAATTBB'
    SMATBB = 'SMATBB'

alleVoiceConfigurations = [VoiceConfiguration.SATB, VoiceConfiguration.SSAATTBB, VoiceConfiguration.SMATBB]

satbVoiceGroups = [('soprano', 'Sopran'), ('alto', 'Alt'), ('tenor', 'Tenor'), ('bass', 'Bass')]

voiceGroupsForConfiguration = {
    VoiceConfiguration.SATB: satbVoiceGroups,
    VoiceConfiguration.SSAATTBB: satbVoiceGroups,
    VoiceConfiguration.SMATBB: [
        ('soprano', 'Sopran'), ('mezzo', 'Mezzosopran'), ('alto', 'Alt'),
        ('tenor', 'Tenor'), ('baritone', 'Baryton'), ('bass', 'Bass')
    ],
}

voiceTypesForConfiguration = {
    VoiceConfiguration.SATB: [],
    VoiceConfiguration.SSAATTBB: [
        (f'{value}_{n}', f'{n}. {displayName}', value) for value, displayName in satbVoiceGroups for n in '12'
    ],
    VoiceConfiguration.SMATBB: [],
}

defaultChoirSettings = {
    'allowMemberMessaging': True,
    'requireAttendanceTracking': True,
    'autoArchiveEventsAfterDays': 365,
    'defaultEventDurationMinutes': 120,
    'holidayCalendarRegion': defaultHolidayRegion,
}


class LeaveStatus:
    pending = 'pending'
    approved = 'approved'
    rejected = 'rejected'


class LeaveType:
    sick = 'sick'
    personal = 'personal'
    work = 'work'
    study = 'study'
    other = 'other'
