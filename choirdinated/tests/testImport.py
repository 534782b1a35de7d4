import csv
import datetime
import io
from io import StringIO
from unittest.mock import Mock

from openpyxl import Workbook

from django.contrib.auth.models import User
from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import TestCase
from django.urls import reverse

from choirdinated import consts
from choirdinated.management.commands.seed import adminAdmin, getDemoChoir, runSeed
from choirdinated.models import Choir, ListOfValue, Member, MembershipType
from choirdinated.utils.importUtils import findListOfValue, importMembers


def importRow(**kwargs):
    return {
        'email': 'ola.nordmann@example.com',
        'firstName': 'Ola',
        'lastName': 'Nordmann',
        'birthDate': '9. okt. 1978',
        'phone': '98765432',
        'voiceGroup': 'Tenor',
        'membershipType': 'Medlem',
        **kwargs
    }


def xlsxFile(rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    fil = io.BytesIO()
    workbook.save(fil)
    return SimpleUploadedFile('medlemmer.xlsx', fil.getvalue(), content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet')


class ImportTestCase(TestCase):
    @classmethod
    def setUpTestData(cls):
        mock_self = Mock()
        mock_self.stdout = StringIO()
        runSeed(mock_self)
        adminAdmin(mock_self)

        cls.choir = getDemoChoir()
        cls.admin = User.objects.get(username='admin')

    def testFindListOfValueMatcherValueOgDisplayName(self):
        tenor = self.choir.listOfValues.get(category=consts.Category.voiceGroup, value='tenor')

        self.assertEqual(findListOfValue(self.choir, consts.Category.voiceGroup, 'TENOR'), (tenor, False))
        self.assertEqual(findListOfValue(self.choir, consts.Category.voiceGroup, ' Sopran ')[0].value, 'soprano')

        created, wasCreated = findListOfValue(self.choir, consts.Category.voiceGroup, 'Kontratenor')
        self.assertTrue(wasCreated)
        self.assertEqual(created.displayName, 'Kontratenor')

    def testImportererMedlem(self):
        results = importMembers(self.choir, [importRow(
            voiceType='1. tenor',
            registrationDate='1. sep. 2015',
            _unmappedFields={'Allergier': 'Nøtter'}
        )], sourceSystem='Styreweb')

        self.assertEqual(results['imported'], 1)
        self.assertEqual(results['errors'], [])

        member = Member.objects.get(user__email='ola.nordmann@example.com')
        self.assertEqual(member.voiceGroup.value, 'tenor')
        self.assertEqual(member.voiceType.value, 'tenor_1')
        self.assertEqual(member.membershipType.name, 'member')
        self.assertEqual(member.user.profile.birthDate, datetime.date(1978, 10, 9))
        self.assertFalse(member.user.has_usable_password())
        self.assertEqual(member.currentPeriod.startDate, datetime.date(2015, 9, 1))
        self.assertEqual(member.additionalData['Allergier'], 'Nøtter')
        self.assertEqual(member.additionalData['_importSource'], 'Styreweb')
        self.assertIn('_importDate', member.additionalData)

    def testNyeKonfigurasjoner(self):
        results = importMembers(self.choir, [
            importRow(voiceGroup='Mezzo', voiceType='Mezzo 1', membershipType='Fast medlem'),
            importRow(email='kari@example.com', firstName='Kari', voiceGroup='Sopran', membershipType='Prosjektsanger'),
        ])

        self.assertEqual(results['imported'], 2)
        self.assertEqual(results['newConfigurations'], {
            'voiceGroups': ['Mezzo'],
            'voiceTypes': ['Mezzo 1'],
            'membershipTypes': ['Fast medlem', 'Prosjektsanger'],
        })

        mezzo = ListOfValue.objects.get(choir=self.choir, category=consts.Category.voiceType, value='Mezzo 1')
        self.assertEqual(mezzo.parent.value, 'Mezzo')

        fast = MembershipType.objects.get(choir=self.choir, name='Fast medlem')
        self.assertTrue(fast.isActiveMembership)
        self.assertTrue(fast.canVote)

        prosjekt = MembershipType.objects.get(choir=self.choir, name='Prosjektsanger')
        self.assertTrue(prosjekt.isActiveMembership)
        self.assertFalse(prosjekt.canVote)

    def testStemmerOversettesTilKoretsVerdier(self):
        results = importMembers(self.choir, [
            importRow(voiceGroup='S', voiceType='Sopran 1'),
            importRow(email='kari@example.com', firstName='Kari', voiceGroup='SOPRAN', voiceType='S2'),
            importRow(email='per@example.com', firstName='Per', voiceGroup='b', voiceType='Bass 2'),
        ])

        self.assertEqual(results['imported'], 3, msg=results['errors'])
        self.assertEqual(results['newConfigurations'], {'voiceGroups': [], 'voiceTypes': [], 'membershipTypes': []})

        for email, voiceGroup, voiceType in [
            ('ola.nordmann@example.com', 'soprano', 'soprano_1'),
            ('kari@example.com', 'soprano', 'soprano_2'),
            ('per@example.com', 'bass', 'bass_2'),
        ]:
            member = Member.objects.get(user__email=email)
            self.assertEqual((member.voiceGroup.value, member.voiceType.value), (voiceGroup, voiceType), msg=email)

        self.assertEqual(self.choir.listOfValues.filter(category=consts.Category.voiceGroup).count(), 4)

    def testKjentVerdiGjettesIkkeOm(self):
        # Mezzosopran finnes i koret, og skal ikke bli til Sopran
        operakoret = Choir.objects.provision(
            {'name': 'Operakoret'},
            {'name': 'Opera Dirigent', 'email': 'opera@example.com', 'password': 'hemmelig'},
            voiceConfiguration=consts.VoiceConfiguration.SMATBB
        )
        results = importMembers(operakoret, [importRow(voiceGroup='mezzosopran')])

        self.assertEqual(results['imported'], 1, msg=results['errors'])
        self.assertEqual(Member.objects.get(user__email='ola.nordmann@example.com').voiceGroup.value, 'mezzo')

    def testNullOgTallIFelter(self):
        results = importMembers(self.choir, [
            importRow(),
            importRow(email='kari@example.com', firstName=None, phone=98765432),
            importRow(email='per@example.com', firstName='Per', voiceGroup=None),
            importRow(email='nils@example.com', firstName='Nils', _unmappedFields='ikke et objekt'),
        ])

        self.assertEqual(results['imported'], 3)
        self.assertEqual(results['errors'], [{
            'row': 'Per Nordmann',
            'error': 'Missing required data: membershipType="Medlem", voiceGroup=""'
        }])

        kari = User.objects.get(email='kari@example.com')
        self.assertEqual(kari.first_name, '')
        self.assertEqual(kari.profile.name, 'Nordmann')
        self.assertEqual(kari.profile.phone, '98765432')

        self.assertEqual(Member.objects.get(user__email='nils@example.com').additionalData, {})

    def testImportMedNullGjennomApi(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('memberImport'), {'data': [importRow(firstName=None, birthDate=None)]}, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['results']['imported'], 0)
        self.assertEqual(res.json()['results']['errors'], [{'row': 'Nordmann', 'error': 'Birth date is required for Nordmann'}])

    def testFeilPåEnRadStopperIkkeResten(self):
        results = importMembers(self.choir, [
            importRow(email=''),
            importRow(email='uten.fodselsdato@example.com', birthDate=''),
            importRow(email='kari@example.com', firstName='Kari'),
        ])

        self.assertEqual(results['imported'], 1)
        self.assertEqual([e['row'] for e in results['errors']], ['Ola Nordmann', 'Ola Nordmann'])
        self.assertFalse(User.objects.filter(email='uten.fodselsdato@example.com').exists())

    def testEksisterendeMedlemTellesSomOppdatert(self):
        importMembers(self.choir, [importRow()])
        results = importMembers(self.choir, [importRow(email='OLA.NORDMANN@example.com')])

        self.assertEqual(results['imported'], 0)
        self.assertEqual(results['updated'], 1)
        self.assertEqual(Member.objects.filter(user__email='ola.nordmann@example.com').count(), 1)

    def testImportGjennomApi(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('memberImport'), {'data': [importRow()], 'sourceSystem': 'Excel'}, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.json()['success'])
        self.assertEqual(res.json()['results']['imported'], 1)

    def testImportKreverListe(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('memberImport'), {'data': 'ikke en liste'}, content_type='application/json')
        self.assertEqual(res.status_code, 400)

    def testParseExcel(self):
        self.client.force_login(self.admin)
        fil = xlsxFile([
            ['Fornavn', 'Etternavn', 'Fødselsdato', 'Stemme', 'Telefon'],
            ['Ola', 'Nordmann', datetime.datetime(1978, 10, 9), 'Tenor 1', 98765432],
            [None, None, None, None, None],
            ['Kari', 'Nordmann', None, 'S', None],
        ])

        res = self.client.post(reverse('parseExcel'), {'file': fil})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), [
            {'Fornavn': 'Ola', 'Etternavn': 'Nordmann', 'Fødselsdato': '9. okt 1978', 'Stemme': 'Tenor 1', 'Telefon': '98765432'},
            {'Fornavn': 'Kari', 'Etternavn': 'Nordmann', 'Stemme': 'S'},
        ])

    def testParseCsv(self):
        self.client.force_login(self.admin)
        tekst = io.StringIO()
        writer = csv.writer(tekst)
        writer.writerow(['Fornavn', 'Stemme'])
        writer.writerow(['Ola', 'Bass'])

        res = self.client.post(reverse('parseExcel'), {'file': SimpleUploadedFile('medlemmer.csv', tekst.getvalue().encode())})
        self.assertEqual(res.json(), [{'Fornavn': 'Ola', 'Stemme': 'Bass'}])

    def testParseExcelUtenFil(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('parseExcel'))
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()['error'], 'No file provided')

    def testParseExcelMedØdelagtFil(self):
        self.client.force_login(self.admin)
        res = self.client.post(reverse('parseExcel'), {'file': SimpleUploadedFile('medlemmer.xlsx', b'ikke et regneark')})
        self.assertEqual(res.status_code, 400)
