from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from choirdinated.models import Choir, Event, EventAttendance, ListOfValue, Member, MembershipLeave, MembershipPeriod, MembershipType, Season


def getChoir(choirId):
    if not (choir := Choir.objects.filter(pk=choirId).first()):
        raise CommandError(f'Fant ikke kor med id {choirId}')
    return choir


def usersToDelete(choir):
    'Brukerne som bare er medlem i dette koret. Brukere med andre medlemskap beholdes'
    return User.objects.filter(members__choir=choir).exclude(members__choir__in=Choir.objects.exclude(pk=choir.pk)).distinct()


def usersToPreserve(choir):
    return User.objects.filter(members__choir=choir).filter(members__choir__in=Choir.objects.exclude(pk=choir.pk)).distinct()


def choirDeletionImpact(choir):
    'Hvor mange rader av hver type som forsvinner om koret slettes'
    return {
        'events': Event.objects.filter(choir=choir).count(),
        'attendance': EventAttendance.objects.filter(event__choir=choir).count(),
        'periods': MembershipPeriod.objects.filter(member__choir=choir).count(),
        'leaves': MembershipLeave.objects.filter(member__choir=choir).count(),
        'members': Member.objects.filter(choir=choir).count(),
        'listOfValues': ListOfValue.objects.filter(choir=choir).count(),
        'membershipTypes': MembershipType.objects.filter(choir=choir).count(),
        'seasons': Season.objects.filter(choir=choir).count(),
        'users': usersToDelete(choir).count(),
    }


def deleteChoirData(choir):
    '''
    Slett koret og alt som hører til det. Medlemmer og perioder peker på medlemskapstyper og
    stemmegrupper med PROTECT, så vi må slette i riktig rekkefølge i stedet for å la koret cascade.
    Returne antallet slettede brukere.
    '''
    with transaction.atomic():
        userIds = list(usersToDelete(choir).values_list('pk', flat=True))

        EventAttendance.objects.filter(event__choir=choir).delete()
        Event.objects.filter(choir=choir).delete()
        MembershipPeriod.objects.filter(member__choir=choir).delete()
        MembershipLeave.objects.filter(member__choir=choir).delete()
        Member.objects.filter(choir=choir).delete()
        ListOfValue.objects.filter(choir=choir).delete()
        MembershipType.objects.filter(choir=choir).delete()
        Season.objects.filter(choir=choir).delete()
        choir.delete()

        User.objects.filter(pk__in=userIds).delete()

    return len(userIds)


class Command(BaseCommand):
    help = 'slett et kor med alle hendelser, medlemmer og verdilister, samt brukere uten andre medlemskap'

    def add_arguments(self, parser):
        parser.add_argument('choirId', type=int)

        parser.add_argument(
            '--yes',
            action='store_true',
            help='Ikke spør om bekreftelse',
        )

    def handle(self, *args, **options):
        choir = getChoir(options['choirId'])

        for key, count in choirDeletionImpact(choir).items():
            self.stdout.write(f'{key}: {count}')

        if not options['yes']:
            answer = input(f'Skriv navnet på koret ({choir.name}) for å slette det: ')
            if answer.strip() != choir.name:
                raise CommandError('Avbrutt')

        choirName = choir.name
        deletedUsers = deleteChoirData(choir)

        self.stdout.write(self.style.SUCCESS(f'Slettet {choirName} og {deletedUsers} brukere'))
