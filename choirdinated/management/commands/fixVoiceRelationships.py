from django.core.management.base import BaseCommand
from django.db import transaction
from django.db.models import F, Q

from choirdinated import consts
from choirdinated.management.commands.deleteChoir import getChoir
from choirdinated.models import Event, ListOfValue, Member, MembershipPeriod
from choirdinated.utils.importUtils import findParentVoiceGroup


def mergeDuplicateVoiceGroups(choir):
    '''
    Slå sammen stemmegrupper med samme value (case-insensitive). Den eldste beholdes, og
    medlemmer, perioder, stemmetyper og målrettingen på hendelser flyttes over før duplikatene slettes.
    Returne en liste av (beholdt, slettet) par.
    '''
    groups = {}
    for voiceGroup in ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceGroup).order_by('pk'):
        groups.setdefault(voiceGroup.value.strip().lower(), []).append(voiceGroup)

    merged = []
    for keep, *duplicates in groups.values():
        for duplicate in duplicates:
            Member.objects.filter(voiceGroup=duplicate).update(voiceGroup=keep)
            MembershipPeriod.objects.filter(voiceGroup=duplicate).update(voiceGroup=keep)
            ListOfValue.objects.filter(parent=duplicate).update(parent=keep)
            for event in Event.objects.filter(choir=choir):
                if duplicate.pk in (event.targetVoiceGroups or []):
                    targets = list(dict.fromkeys(keep.pk if pk == duplicate.pk else pk for pk in event.targetVoiceGroups))
                    Event.objects.filter(pk=event.pk).update(targetVoiceGroups=targets)
            merged.append((keep, duplicate.displayName))
            duplicate.delete()

    return merged


def fixOrphanVoiceTypes(choir):
    '''
    Stemmetyper uten forelder kobles til en stemmegruppe som passer på navnet. Finnes det ingen
    gjøres stemmetypen om til en stemmegruppe. Returne (koblet, konvertert).
    '''
    groups = {g.displayName: g for g in ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceGroup)}
    groups.update({g.value: g for g in groups.values()})

    linked, converted = [], []
    for voiceType in ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceType, parent=None):
        if group := findParentVoiceGroup(voiceType.displayName, groups) or findParentVoiceGroup(voiceType.value, groups):
            voiceType.parent = group
            voiceType.save()
            linked.append((voiceType, group))
        else:
            voiceType.category = consts.Category.voiceGroup
            voiceType.save()
            converted.append(voiceType)

    return linked, converted


def invalidVoiceAssignments(choir):
    'Medlemmer der stemmegruppe eller stemmetype er feil kategori, eller stemmetypen er under en annen gruppe'
    return Member.objects.filter(
        ~Q(voiceGroup__category=consts.Category.voiceGroup) |
        (Q(voiceType__isnull=False) & ~Q(voiceType__category=consts.Category.voiceType)) |
        (Q(voiceType__parent__isnull=False) & ~Q(voiceType__parent=F('voiceGroup'))),
        choir=choir
    ).select_related('user', 'voiceGroup', 'voiceType')


class Command(BaseCommand):
    help = 'rydd i stemmegrupper og stemmetyper for et kor'

    def add_arguments(self, parser):
        parser.add_argument('choirId', type=int)

    def handle(self, *args, **options):
        choir = getChoir(options['choirId'])

        with transaction.atomic():
            self.stdout.write('1. Duplikate stemmegrupper')
            for keep, duplicateName in mergeDuplicateVoiceGroups(choir):
                self.stdout.write(f'  Slo sammen {duplicateName} inn i {keep.displayName}')

            self.stdout.write('2. Stemmetyper uten stemmegruppe')
            linked, converted = fixOrphanVoiceTypes(choir)
            for voiceType, group in linked:
                self.stdout.write(f'  Koblet {voiceType.displayName} til {group.displayName}')
            for voiceType in converted:
                self.stdout.write(f'  Gjorde {voiceType.displayName} om til en stemmegruppe')

        self.stdout.write('3. Ugyldige stemmer på medlemmer')
        invalid = invalidVoiceAssignments(choir)
        for member in invalid:
            self.stdout.write(self.style.WARNING(
                f'  {member.name}: {member.voiceGroup.displayName} / {member.voiceType.displayName if member.voiceType else "-"}'
            ))

        self.stdout.write(self.style.SUCCESS(f'Ferdig, {len(invalid)} medlemmer med ugyldige stemmer'))
