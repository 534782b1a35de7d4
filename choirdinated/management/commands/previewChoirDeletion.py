from django.core.management.base import BaseCommand

from choirdinated.management.commands.deleteChoir import choirDeletionImpact, getChoir, usersToDelete, usersToPreserve


class Command(BaseCommand):
    help = 'vis hva som ville blitt slettet med deleteChoir, uten å slette noe'

    def add_arguments(self, parser):
        parser.add_argument('choirId', type=int)

    def handle(self, *args, **options):
        choir = getChoir(options['choirId'])

        self.stdout.write(f'Kor: {choir.name} (id {choir.pk})')

        for key, count in choirDeletionImpact(choir).items():
            self.stdout.write(f'  {key}: {count}')

        self.stdout.write('Brukere som slettes:')
        for user in usersToDelete(choir):
            self.stdout.write(f'  - {user.email} (id {user.pk})')

        self.stdout.write('Brukere som beholdes fordi de har andre medlemskap:')
        for user in usersToPreserve(choir):
            self.stdout.write(f'  - {user.email} (id {user.pk})')

        self.stdout.write(self.style.WARNING('Ingenting ble slettet'))
