import datetime
import random

from django.contrib.auth.models import User
from django.core.management.base import BaseCommand
from django.utils import timezone

from choirdinated import consts
from choirdinated.management.commands.deleteChoir import deleteChoirData
from choirdinated.models import *

demoChoirName = 'Demokoret'
demoConductorEmail = 'dirigent@example.com'

class Command(BaseCommand):
    help = 'seed database for testing and development.'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear all choirs, holidays and users that are not superusers',
        )

        parser.add_argument(
            '--adminAdmin',
            action='store_true',
            help='Create admin admin user',
        )

        parser.add_argument(
            '--testData',
            action='store_true',
            help='Create some testing data for development',
        )

    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('clear...')
            clearData(self)

        self.stdout.write('Seeding Data...')
        runSeed(self)

        if options['adminAdmin']:
            self.stdout.write('adminAdmin...')
            adminAdmin(self)

        if options['testData']:
            self.stdout.write('testData...')
            testData(self)


def clearData(self):
    'Sletter alle kor med alt innhold, helligdager og brukere som ikke er superbrukere'
    for choir in Choir.objects.all():
        self.stdout.write(f'Deleting choir {choir.name}')
        deleteChoirData(choir)
    Holiday.objects.all().delete()
    User.objects.filter(is_superuser=False).delete()


def easterSunday(year):
    'Første påskedag, etter den anonyme gregorianske algoritmen'
    a = year % 19
    b, c = divmod(year, 100)
    d, e = divmod(b, 4)
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i, k = divmod(c, 4)
    l = (32 + 2 * e + 2 * i - h - k) % 7
    m = (a + 11 * h + 22 * l) // 451
    month, day = divmod(h + l - 7 * m + 114, 31)
    return datetime.date(year, month, day + 1)


def norwegianHolidays(year):
    påske = easterSunday(year)
    return [
        ('Første nyttårsdag', datetime.date(year, 1, 1)),
        ('Skjærtorsdag', påske - datetime.timedelta(days=3)),
        ('Langfredag', påske - datetime.timedelta(days=2)),
        ('Første påskedag', påske),
        ('Andre påskedag', påske + datetime.timedelta(days=1)),
        ('Arbeidernes dag', datetime.date(year, 5, 1)),
        ('Grunnlovsdag', datetime.date(year, 5, 17)),
        ('Kristi himmelfartsdag', påske + datetime.timedelta(days=39)),
        ('Første pinsedag', påske + datetime.timedelta(days=49)),
        ('Andre pinsedag', påske + datetime.timedelta(days=50)),
        ('Første juledag', datetime.date(year, 12, 25)),
        ('Andre juledag', datetime.date(year, 12, 26)),
    ]


def getDemoChoir():
    return Choir.objects.get(name=demoChoirName)


def runSeed(self):
    'Seed helligdager og et demokor'

    # Helligdager fra i fjor til og med om to år
    thisYear = datetime.date.today().year
    for year in range(thisYear - 1, thisYear + 3):
        for name, dato in norwegianHolidays(year):
            holiday, created = Holiday.objects.get_or_create(name=name, date=dato, region=consts.defaultHolidayRegion)
            if created:
                self.stdout.write(f'Created holiday {holiday}')

    if Choir.objects.filter(name=demoChoirName).exists():
        return

    choir = Choir.objects.provision(
        {
            'name': demoChoirName,
            'description': 'Kor for utvikling og testing',
            'organizationType': consts.OrganizationType.independent,
            'settings': {'rehearsalLocation': 'Kulturhuset'},
        },
        {
            'name': 'Dirigent Demosen',
            'email': demoConductorEmail,
            'password': 'dirigent',
            'birthDate': datetime.date(1980, 1, 1),
        },
        voiceConfiguration=consts.VoiceConfiguration.SSAATTBB
    )
    self.stdout.write(f'Created choir {choir.name} at id {choir.pk}')


def adminAdmin(self):
    'Lag en superbruker admin@example.com med passord admin, som er admin i demokoret'
    user, created = User.objects.get_or_create(username='admin', defaults={'email': 'admin@example.com'})
    if created:
        user.set_password('admin')
    user.is_superuser = True
    user.is_staff = True
    user.save()

    if not user.profile.name:
        user.profile.name = 'Admin Adminsen'
        user.profile.save()

    choir = getDemoChoir()

    adminType, created = MembershipType.objects.get_or_create(
        choir=choir,
        name=consts.Role.admin,
        defaults={'displayName': 'Administrator', 'sortOrder': 0}
    )

    if not Member.objects.filter(user=user, choir=choir).exists():
        voiceGroup = choir.listOfValues.filter(category=consts.Category.voiceGroup).first()
        member = Member.objects.create(user=user, choir=choir, membershipType=adminType, voiceGroup=voiceGroup)
        member.periods.create(startDate=datetime.date.today(), membershipType=adminType, voiceGroup=voiceGroup)
        self.stdout.write(f'Created admin member at id {member.pk}')


fornavn = ['Ingrid', 'Kari', 'Nora', 'Emma', 'Sofie', 'Ola', 'Per', 'Jakob', 'Lars', 'Henrik', 'Sigrid', 'Magnus']
etternavn = ['Hansen', 'Johansen', 'Olsen', 'Larsen', 'Andersen', 'Pedersen', 'Nilsen', 'Kristiansen', 'Berg', 'Haugen']


def makeMember(choir, membershipTypeName='member', voiceGroup=None, voiceType=None, start=None):
    'Lag en bruker og et medlem med en åpen periode'
    navn = f'{random.choice(fornavn)} {random.choice(etternavn)}'
    email = f'{navn.lower().replace(" ", ".")}.{User.objects.count()}@example.com'

    user = User.objects.create_user(username=email, email=email, password='passord')
    user.profile.name = navn
    user.profile.birthDate = datetime.date(random.randrange(1950, 2005), random.randrange(1, 13), random.randrange(1, 29))
    user.profile.save()

    if not voiceGroup:
        voiceGroup = random.choice(list(choir.listOfValues.filter(category=consts.Category.voiceGroup)))
    membershipType = choir.membershipTypes.get(name=membershipTypeName)

    member = Member.objects.create(user=user, choir=choir, membershipType=membershipType, voiceGroup=voiceGroup, voiceType=voiceType)
    member.periods.create(startDate=start or datetime.date.today(), membershipType=membershipType, voiceGroup=voiceGroup, voiceType=voiceType)
    return member


def testData(self):
    'Opprett medlemmer med stemmer, en permisjon, en sesong og en serie øvelser i demokoret'
    random.seed('SeedChoirdinated!')

    choir = getDemoChoir()
    today = datetime.date.today()

    for voiceType in choir.listOfValues.filter(category=consts.Category.voiceType):
        for i in range(4):
            makeMember(choir, voiceGroup=voiceType.parent, voiceType=voiceType, start=today - datetime.timedelta(days=random.randrange(1, 2000)))

    sectionLeader = makeMember(choir, membershipTypeName=consts.Role.sectionLeader)
    self.stdout.write(f'Created section leader {sectionLeader.name}')

    onLeave = Member.objects.filter(choir=choir, membershipType__name='member').first()
    onLeave.leaves.create(
        leaveType=consts.LeaveType.study,
        startDate=today,
        expectedReturnDate=today + datetime.timedelta(days=120),
        reason='Utveksling',
        status=MembershipLeave.APPROVED
    )

    season, created = Season.objects.get_or_create(
        choir=choir,
        name=f'host{today.year}',
        defaults={
            'displayName': f'Høst {today.year}',
            'startDate': datetime.date(today.year, 8, 1),
            'endDate': datetime.date(today.year, 12, 31),
        }
    )

    # Øvelse hver tirsdag klokka 18:30
    nesteTirsdag = today + datetime.timedelta(days=(1 - today.weekday()) % 7)
    startTime = timezone.make_aware(datetime.datetime.combine(nesteTirsdag, datetime.time(18, 30)))
    parentEvent, instances = Event.objects.createRecurring(
        choir,
        User.objects.get(email=demoConductorEmail),
        {
            'title': 'Øvelse',
            'type': choir.listOfValues.get(category=consts.Category.eventType, value='rehearsal'),
            'startTime': startTime,
            'endTime': startTime + datetime.timedelta(hours=3),
            'location': 'Kulturhuset',
            'includeAllActive': True,
        },
        {
            'type': consts.RecurrenceType.weekly,
            'interval': 1,
            'endType': consts.RecurrenceEndType.count,
            'count': 12,
            'season': season.displayName,
        }
    )
    self.stdout.write(f'Created {len(instances)} rehearsals')

    concertStart = startTime + datetime.timedelta(weeks=13, days=4)
    Event.objects.create(
        choir=choir,
        title='Julekonsert',
        type=choir.listOfValues.get(category=consts.Category.eventType, value='concert'),
        startTime=concertStart,
        endTime=concertStart + datetime.timedelta(hours=2),
        location='Domkirken',
        attendanceMode=consts.AttendanceMode.optIn
    )
