from django.core.management.base import BaseCommand
from django.db.models import Count

from choirdinated.models import Choir


class Command(BaseCommand):
    help = 'list alle kor med antall medlemmer og hendelser'

    def handle(self, *args, **options):
        choirs = Choir.objects.annotate(
            memberCount=Count('members', distinct=True),
            eventCount=Count('events', distinct=True)
        )

        if not choirs:
            self.stdout.write('Ingen kor')
            return

        for choir in choirs:
            self.stdout.write(f'{choir.pk}: {choir.name} ({choir.memberCount} medlemmer, {choir.eventCount} hendelser)')
