from django.contrib.auth.models import User
from django.core.management.base import BaseCommand

from choirdinated.models import Choir, Event, EventAttendance, Holiday, ListOfValue, Member, MembershipLeave, MembershipPeriod, MembershipType, Season, UserProfile


class Command(BaseCommand):
    help = 'skriv ut antall rader i hver tabell, og list brukere og kor'

    def handle(self, *args, **options):
        for model in [User, UserProfile, Choir, MembershipType, ListOfValue, Member, MembershipPeriod, MembershipLeave, Season, Holiday, Event, EventAttendance]:
            self.stdout.write(f'{model.__name__}: {model.objects.count()}')

        self.stdout.write('\nBrukere:')
        for user in User.objects.order_by('pk'):
            self.stdout.write(f'  {user.pk}: {user.email or user.username}')

        self.stdout.write('\nKor:')
        for choir in Choir.objects.all():
            self.stdout.write(f'  {choir.pk}: {choir.name}')
