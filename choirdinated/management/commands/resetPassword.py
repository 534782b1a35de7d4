from django.contrib.auth.models import User
from django.core.management.base import BaseCommand, CommandError


class Command(BaseCommand):
    help = 'sett et nytt passord for en bruker, gitt id eller epost'

    def add_arguments(self, parser):
        parser.add_argument('user', help='Id eller epost til brukeren')
        parser.add_argument('newPassword')

    def handle(self, *args, **options):
        if len(options['newPassword']) < 6:
            raise CommandError('Passordet må være minst 6 tegn')

        identifier = options['user']
        if identifier.isdigit():
            user = User.objects.filter(pk=int(identifier)).first()
        else:
            user = User.objects.filter(email__iexact=identifier).first()

        if not user:
            raise CommandError(f'Fant ikke brukeren {identifier}')

        user.set_password(options['newPassword'])
        user.save()

        self.stdout.write(self.style.SUCCESS(f'Oppdaterte passordet til {user.email or user.username}'))
