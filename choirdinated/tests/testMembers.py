import datetime
from io import StringIO
from unittest.mock import Mock

from django.contrib.auth.models import User
from django.forms import ValidationError
from django.test import TestCase
from django.urls import reverse

from choirdinated import consts
from choirdinated.management.commands.seed import adminAdmin, getDemoChoir, makeMember, runSeed
from choirdinated.models import Choir, ListOfValue, Member, MembershipLeave, MembershipPeriod, Season


class MembersTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        mock_self = Mock()
        mock_self.stdout = StringIO()
        runSeed(mock_self)
        adminAdmin(mock_self)

        cls.choir = getDemoChoir()
        cls.admin = User.objects.get(username='admin')
        cls.korist = makeMember(cls.choir, start=datetime.date(2020, 8, 1))

    def testMedlemslisteMedPermisjon(self):
        today = datetime.date.today()
        self.korist.leaves.create(
            startDate=today - datetime.timedelta(days=1),
            reason='Studier',
            status=MembershipLeave.APPROVED
        )
        self.client.force_login(self.admin)

        members = {m['id']: m for m in self.client.get(reverse('memberListe')).json()['members']}
        self.assertEqual(len(members), self.choir.members.count())

        self.assertTrue(members[self.korist.pk]['isOnLeave'])
        self.assertEqual(members[self.korist.pk]['membershipStatus'], consts.memberStatusOnLeave)
        self.assertTrue(members[self.korist.pk]['isActive'])

        adminMember = Member.objects.get(user=self.admin)
        self.assertFalse(members[adminMember.pk]['isOnLeave'])
        self.assertEqual(members[adminMember.pk]['membershipStatus'], consts.memberStatusActive)

    def testMedlemDetaljer(self):
        self.client.force_login(self.korist.user)
        res = self.client.get(reverse('member', args=[self.korist.pk])).json()
        self.assertEqual(res['member']['name'], self.korist.name)
        self.assertEqual(len(res['periods']), 1)
        self.assertTrue(res['periods'][0]['isCurrentPeriod'])
        self.assertEqual(res['leaves'], [])
        self.assertEqual(res['recentAttendance'], [])

    def testMedlemIAnnetKorGir404(self):
        other = Choir.objects.provision(
            {'name': 'Annet kor'},
            {'name': 'Annen Dirigent', 'email': 'annen@example.com', 'password': 'hemmelig'}
        )
        self.client.force_login(self.admin)
        self.assertEqual(self.client.get(reverse('member', args=[other.members.get().pk])).status_code, 404)

    def testAvsluttPeriode(self):
        self.client.force_login(self.admin)
        res = self.client.patch(reverse('memberPeriods', args=[self.korist.pk]), {}, content_type='application/json')
        self.assertEqual(res.status_code, 200)

        period = res.json()['period']
        self.assertEqual(period['endDate'], datetime.date.today().isoformat())
        self.assertEqual(period['endReason'], 'Membership ended')
        self.assertFalse(Member.objects.filter(pk=self.korist.pk).active().exists())

        # Ingen åpen periode igjen å avslutte
        res = self.client.patch(reverse('memberPeriods', args=[self.korist.pk]), {}, content_type='application/json')
        self.assertEqual(res.status_code, 404)

    def testNyPeriodeNårDetFinnesEnÅpenAvvises(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('memberPeriods', args=[self.korist.pk]), {
            'startDate': '2024-01-01'
        }, content_type='application/json')
        self.assertEqual(res.status_code, 400)

    def testGjeninnmelding(self):
        self.client.force_login(self.admin)
        self.client.patch(reverse('memberPeriods', args=[self.korist.pk]), {'endDate': '2023-01-01', 'endReason': 'Flyttet'}, content_type='application/json')

        res = self.client.post(reverse('memberPeriods', args=[self.korist.pk]), {
            'startDate': '2024-01-01', 'notes': 'Tilbake'
        }, content_type='application/json')
        self.assertEqual(res.status_code, 201)
        self.assertEqual(self.korist.periods.count(), 2)
        self.assertEqual(self.korist.currentPeriod.startDate, datetime.date(2024, 1, 1))

    def testOppdaterPeriode(self):
        self.client.force_login(self.admin)
        period = self.korist.currentPeriod
        guest = self.choir.membershipTypes.get(name='guest')

        res = self.client.put(reverse('memberPeriods', args=[self.korist.pk]), {
            'periodId': period.pk, 'startDate': '2019-08-01', 'membershipTypeId': guest.pk
        }, content_type='application/json')
        self.assertEqual(res.status_code, 200)

        period.refresh_from_db()
        self.assertEqual(period.startDate, datetime.date(2019, 8, 1))
        self.assertEqual(period.membershipType, guest)

    def testPermisjonOppdaterOgSlett(self):
        self.client.force_login(self.admin)
        leave = self.korist.leaves.create(startDate=datetime.date(2025, 1, 1), reason='Syk')

        res = self.client.put(reverse('memberLeaves', args=[self.korist.pk]), {
            'leaveId': leave.pk, 'startDate': '2025-01-01', 'returnDate': '2025-02-01', 'reason': 'Syk', 'leaveType': consts.LeaveType.sick
        }, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['leave']['status'], consts.LeaveStatus.approved)
        self.assertEqual(res.json()['leave']['actualReturnDate'], '2025-02-01')

        res = self.client.delete(reverse('memberLeaves', args=[self.korist.pk]), {'leaveId': leave.pk}, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertFalse(self.korist.leaves.exists())

        res = self.client.delete(reverse('memberLeaves', args=[self.korist.pk]), {'leaveId': leave.pk}, content_type='application/json')
        self.assertEqual(res.status_code, 404)


class ModelValidationTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        mock_self = Mock()
        mock_self.stdout = StringIO()
        runSeed(mock_self)

        cls.choir = getDemoChoir()
        cls.otherChoir = Choir.objects.provision(
            {'name': 'Annet kor'},
            {'name': 'Annen Dirigent', 'email': 'annen@example.com', 'password': 'hemmelig'}
        )
        cls.member = cls.choir.members.get()

    def testToÅpnePerioderAvvises(self):
        self.assertRaises(
            ValidationError,
            MembershipPeriod.objects.create,
            member=self.member,
            startDate=datetime.date(2024, 1, 1),
            membershipType=self.member.membershipType,
            voiceGroup=self.member.voiceGroup
        )

    def testPeriodeMedSluttFørStartAvvises(self):
        self.assertRaises(
            ValidationError,
            MembershipPeriod.objects.create,
            member=self.member,
            startDate=datetime.date(2024, 1, 1),
            endDate=datetime.date(2023, 1, 1),
            membershipType=self.member.membershipType,
            voiceGroup=self.member.voiceGroup
        )

    def testSesongMedLikStartOgSluttAvvises(self):
        self.assertRaises(
            ValidationError,
            Season.objects.create,
            choir=self.choir, name='kort', displayName='Kort', startDate=datetime.date(2024, 1, 1), endDate=datetime.date(2024, 1, 1)
        )

    def testStemmegruppeFraAnnetKorAvvises(self):
        self.member.voiceGroup = self.otherChoir.listOfValues.filter(category=consts.Category.voiceGroup).first()
        self.assertRaises(ValidationError, self.member.save)

    def testStemmetypeSomStemmegruppeAvvises(self):
        self.member.voiceGroup = self.choir.listOfValues.filter(category=consts.Category.voiceType).first()
        self.assertRaises(ValidationError, self.member.save)

    def testBareStemmetyperKanHaForelder(self):
        eventType = self.choir.listOfValues.filter(category=consts.Category.eventType).first()
        eventType.parent = self.choir.listOfValues.filter(category=consts.Category.voiceGroup).first()
        self.assertRaises(ValidationError, eventType.save)

    def testPermisjonErGjeldende(self):
        today = datetime.date.today()
        leave = MembershipLeave(member=self.member, startDate=today, reason='Syk', status=MembershipLeave.APPROVED)
        self.assertTrue(leave.isCurrent)

        leave.expectedReturnDate = today
        self.assertFalse(leave.isCurrent)

        leave.expectedReturnDate = None
        leave.status = MembershipLeave.PENDING
        self.assertFalse(leave.isCurrent)

    def testProfilLagesMedBrukeren(self):
        user = User.objects.create_user(username='ny@example.com', email='ny@example.com', first_name='Ny', last_name='Bruker')
        self.assertEqual(user.profile.name, 'Ny Bruker')

    def testVoiceTypeIdsForGroups(self):
        self.assertEqual(ListOfValue.objects.voiceTypeIdsForGroups([]), [])

        sopran = self.choir.listOfValues.get(category=consts.Category.voiceGroup, value='soprano')
        self.assertEqual(len(ListOfValue.objects.voiceTypeIdsForGroups([sopran.pk])), 2)

        sopran.children.update(isActive=False)
        self.assertEqual(ListOfValue.objects.voiceTypeIdsForGroups([sopran.pk]), [])
