import datetime
from io import StringIO
from unittest.mock import Mock

from django.contrib.auth.models import User
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from choirdinated import consts
from choirdinated.management.commands.seed import adminAdmin, demoConductorEmail, getDemoChoir, runSeed
from choirdinated.management.commands import seed
from choirdinated.models import Choir, Event, Holiday, ListOfValue, Member, UserProfile


def runCommand(*args, **kwargs):
    out = StringIO()
    call_command(*args, stdout=out, **kwargs)
    return out.getvalue()


class SeedTestCase(TestCase):
    def testSeedErIdempotent(self):
        runCommand('seed')
        runCommand('seed')

        self.assertEqual(Choir.objects.filter(name=getDemoChoir().name).count(), 1)
        self.assertTrue(Holiday.objects.filter(date=datetime.date(datetime.date.today().year, 5, 17)).exists())

    def testAdminAdminOgTestData(self):
        runCommand('seed', '--adminAdmin', '--testData')

        admin = User.objects.get(username='admin')
        self.assertTrue(admin.is_superuser)
        self.assertEqual(Member.objects.get(user=admin).membershipType.name, consts.Role.admin)

        choir = getDemoChoir()
        parent = Event.objects.get(choir=choir, isRecurring=True)
        self.assertTrue(parent.instances.exists())
        self.assertTrue(choir.members.filter(leaves__isnull=False).exists())

    def testClear(self):
        runCommand('seed', '--testData')
        runCommand('seed', '--clear')

        # Demokoret lages på nytt, uten testdataen
        self.assertEqual(getDemoChoir().members.count(), 1)
        self.assertFalse(Event.objects.exists())

    def testPåskeErRiktig(self):
        mock_self = Mock()
        mock_self.stdout = StringIO()
        runSeed(mock_self)

        year = datetime.date.today().year
        for name, answer in [('Første påskedag', {2025: datetime.date(2025, 4, 20), 2026: datetime.date(2026, 4, 5), 2027: datetime.date(2027, 3, 28), 2028: datetime.date(2028, 4, 16)})]:
            for y in range(year - 1, year + 3):
                if y in answer:
                    self.assertEqual(Holiday.objects.get(name=name, date__year=y).date, answer[y])


class CommandsTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        mock_self = Mock()
        mock_self.stdout = StringIO()
        runSeed(mock_self)
        adminAdmin(mock_self)
        seed.testData(mock_self)

        cls.choir = getDemoChoir()

    def testListChoirs(self):
        out = runCommand('listChoirs')
        self.assertIn(f'{self.choir.pk}: {self.choir.name} ({self.choir.members.count()} medlemmer', out)

    def testCheckDbStatus(self):
        out = runCommand('checkDbStatus')
        self.assertIn(f'Member: {Member.objects.count()}', out)
        self.assertIn('admin@example.com', out)

    def testResetPassword(self):
        runCommand('resetPassword', demoConductorEmail, 'nyttpassord')
        self.assertTrue(User.objects.get(email=demoConductorEmail).check_password('nyttpassord'))

        runCommand('resetPassword', str(User.objects.get(username='admin').pk), 'adminadmin')
        self.assertTrue(User.objects.get(username='admin').check_password('adminadmin'))

    def testResetPasswordForKort(self):
        self.assertRaises(CommandError, runCommand, 'resetPassword', demoConductorEmail, 'kort')

    def testResetPasswordUkjentBruker(self):
        self.assertRaises(CommandError, runCommand, 'resetPassword', 'ingen@example.com', 'langtpassord')

    def testFixOrphanedMembers(self):
        member = self.choir.members.exclude(user__username='admin').first()
        UserProfile.objects.filter(user=member.user).delete()

        out = runCommand('fixOrphanedMembers', 'analyze', str(self.choir.pk))
        self.assertIn('1 medlemmer', out)

        runCommand('fixOrphanedMembers', 'fix', str(self.choir.pk))
        self.assertFalse(UserProfile.objects.filter(user=member.user).exists())

        runCommand('fixOrphanedMembers', 'fix', str(self.choir.pk), '--apply')
        self.assertTrue(UserProfile.objects.filter(user=member.user).exists())

    def testFixVoiceRelationships(self):
        tenor = self.choir.listOfValues.get(category=consts.Category.voiceGroup, value='tenor')
        duplicate = ListOfValue.objects.create(choir=self.choir, category=consts.Category.voiceGroup, value='Tenor', displayName='Tenor (gammel)')
        member = self.choir.members.filter(voiceGroup=tenor).first()
        Member.objects.filter(pk=member.pk).update(voiceGroup=duplicate)
        bass = self.choir.listOfValues.get(category=consts.Category.voiceGroup, value='bass')
        event = Event.objects.filter(choir=self.choir, isRecurring=False).first()
        Event.objects.filter(pk=event.pk).update(targetVoiceGroups=[duplicate.pk, tenor.pk, bass.pk])

        orphan = ListOfValue.objects.create(choir=self.choir, category=consts.Category.voiceType, value='alt3', displayName='3. Alt')
        stranger = ListOfValue.objects.create(choir=self.choir, category=consts.Category.voiceType, value='kontra', displayName='Kontra')

        runCommand('fixVoiceRelationships', str(self.choir.pk))

        self.assertFalse(ListOfValue.objects.filter(pk=duplicate.pk).exists())
        self.assertEqual(Member.objects.get(pk=member.pk).voiceGroup, tenor)
        self.assertEqual(Event.objects.get(pk=event.pk).targetVoiceGroups, [tenor.pk, bass.pk])

        orphan.refresh_from_db()
        self.assertEqual(orphan.parent.value, 'alto')

        stranger.refresh_from_db()
        self.assertEqual(stranger.category, consts.Category.voiceGroup)

    def testPreviewChoirDeletionSletterIkke(self):
        memberCount = self.choir.members.count()
        out = runCommand('previewChoirDeletion', str(self.choir.pk))

        self.assertIn(f'members: {memberCount}', out)
        self.assertEqual(self.choir.members.count(), memberCount)

    def testDeleteChoirBeholderBrukereMedAndreMedlemskap(self):
        otherChoir = Choir.objects.provision(
            {'name': 'Annet kor'},
            {'name': 'Annen Dirigent', 'email': 'annen@example.com', 'password': 'hemmelig'}
        )
        # Dirigenten i demokoret er også med i det andre koret
        conductor = User.objects.get(email=demoConductorEmail)
        Member.objects.create(
            user=conductor,
            choir=otherChoir,
            membershipType=otherChoir.membershipTypes.get(name='member'),
            voiceGroup=otherChoir.listOfValues.filter(category=consts.Category.voiceGroup).first()
        )

        out = runCommand('previewChoirDeletion', str(self.choir.pk))
        self.assertIn(demoConductorEmail, out.split('beholdes')[1])

        runCommand('deleteChoir', str(self.choir.pk), '--yes')

        self.assertFalse(Choir.objects.filter(pk=self.choir.pk).exists())
        self.assertFalse(Event.objects.filter(choir=self.choir.pk).exists())
        self.assertTrue(User.objects.filter(email=demoConductorEmail).exists())
        self.assertTrue(User.objects.filter(email='annen@example.com').exists())
        self.assertEqual(User.objects.filter(members__isnull=False).distinct().count(), 2)

    def testUkjentKor(self):
        self.assertRaises(CommandError, runCommand, 'deleteChoir', '999999', '--yes')
