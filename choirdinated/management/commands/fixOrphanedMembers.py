from django.core.management.base import BaseCommand

from choirdinated.management.commands.deleteChoir import getChoir
from choirdinated.models import Member, UserProfile


def orphanedMembers(choir):
    'Medlemmer der brukeren mangler UserProfile'
    return Member.objects.filter(choir=choir, user__profile__isnull=True).select_related('user')


def profileFromUser(user):
    return UserProfile.objects.create(
        user=user,
        name=user.get_full_name() or user.email.split('@')[0] or user.username
    )


class Command(BaseCommand):
    help = 'finn og fiks medlemmer der brukeren mangler profil'

    def add_arguments(self, parser):
        parser.add_argument('action', choices=['analyze', 'fix'])
        parser.add_argument('choirId', type=int)

        parser.add_argument(
            '--apply',
            action='store_true',
            help='Opprett profilene, uten dette er fix bare en dry run',
        )

    def handle(self, *args, **options):
        choir = getChoir(options['choirId'])
        members = list(orphanedMembers(choir))

        self.stdout.write(f'{len(members)} medlemmer i {choir.name} mangler profil')
        for member in members:
            self.stdout.write(f'  - member {member.pk}: {member.user.email or member.user.username}')

        if options['action'] == 'analyze' or not members:
            return

        if not options['apply']:
            self.stdout.write(self.style.WARNING('Dry run, bruk --apply for å opprette profilene'))
            return

        for member in members:
            profileFromUser(member.user)

        self.stdout.write(self.style.SUCCESS(f'Opprettet {len(members)} profiler'))
