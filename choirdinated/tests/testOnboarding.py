import datetime
from unittest.mock import Mock, patch

import urllib3

from django.contrib.auth.models import User
from django.forms import ValidationError
from django.test import SimpleTestCase, TestCase
from django.urls import reverse

from choirdinated import consts
from choirdinated.models import Choir, ListOfValue, Member
from choirdinated.utils import brreg

gyldigeOrganisasjonsnummer = ['974760673', '923609016', '974 760 673']

brregEntity = {
    'organisasjonsnummer': '974760673',
    'navn': 'BERGEN FILHARMONISKE KOR',
    'organisasjonsform': {'kode': 'FLI', 'beskrivelse': 'Forening/lag/innretning'},
    'hjemmeside': 'www.example.no',
    'postadresse': {'adresse': ['Postboks 1'], 'postnummer': '5020', 'poststed': 'BERGEN', 'kommune': 'BERGEN'},
    'forretningsadresse': {'adresse': ['Grieghallen'], 'postnummer': '5015', 'poststed': 'BERGEN', 'kommune': 'BERGEN'},
    'stiftelsesdato': '1765-01-01',
    'registreringsdatoEnhetsregisteret': '1995-02-20',
    'registrertIMvaregisteret': False,
    'naeringskode1': {'kode': '90.012', 'beskrivelse': 'Utøvende kunstnere og underholdningsvirksomhet innen musikk'},
    'konkurs': False,
    'underAvvikling': False,
}


def mockHttp(status=200, data=None):
    'En PoolManager som svarer med status og data på alle requests'
    response = Mock(status=status)
    response.json.return_value = data
    http = Mock()
    http.request.return_value = response
    return http


class BrregTestCase(SimpleTestCase):
    def testGyldigeNummer(self):
        for orgNumber in gyldigeOrganisasjonsnummer:
            self.assertTrue(brreg.validateOrganizationNumber(orgNumber), msg=orgNumber)

    def testEttSifferEndretErUgyldig(self):
        for orgNumber in gyldigeOrganisasjonsnummer[:2]:
            for i in range(9):
                for siffer in '0123456789':
                    if siffer == orgNumber[i]:
                        continue
                    mutert = orgNumber[:i] + siffer + orgNumber[i+1:]
                    self.assertFalse(brreg.validateOrganizationNumber(mutert), msg=mutert)

    def testFeilLengdeErUgyldig(self):
        for orgNumber in ['', '97476067', '9747606731', 'abcdefghi']:
            self.assertFalse(brreg.validateOrganizationNumber(orgNumber), msg=orgNumber)

    def testFormatOrganizationNumber(self):
        self.assertEqual(brreg.formatOrganizationNumber('974760673'), '974 760 673')
        self.assertEqual(brreg.formatOrganizationNumber('1234'), '1234')

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookupMapperEnheten(self, getHttp):
        getHttp.return_value = mockHttp(data=brregEntity)

        organization = brreg.lookupByOrganizationNumber(' 974 760 673 ')

        getHttp.return_value.request.assert_called_once_with('GET', 'https://data.brreg.no/enhetsregisteret/api/enheter/974760673')
        self.assertEqual(organization['organizationNumber'], '974760673')
        self.assertEqual(organization['organizationTypeCode'], 'FLI')
        self.assertEqual(organization['businessAddress']['postalCode'], '5015')
        self.assertEqual(organization['primaryIndustry']['code'], '90.012')
        self.assertFalse(organization['isUnderLiquidation'])
        self.assertEqual(brreg.getChoirOrganizationType(organization), consts.OrganizationType.symphony)

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookup404GirNone(self, getHttp):
        getHttp.return_value = mockHttp(status=404)
        self.assertIsNone(brreg.lookupByOrganizationNumber('974760673'))

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookup500Raiser(self, getHttp):
        getHttp.return_value = mockHttp(status=500)
        with self.assertRaisesMessage(brreg.BrregError, 'Brreg API error: 500'):
            brreg.lookupByOrganizationNumber('974760673')

    def testIngenNyeForsøkMotBrreg(self):
        self.assertIs(brreg.getHttp().connection_pool_kw['retries'], False)

        with patch.object(urllib3.connectionpool.HTTPConnectionPool, '_make_request', side_effect=urllib3.exceptions.ProtocolError('Brreg er nede')) as makeRequest:
            self.assertRaises(urllib3.exceptions.ProtocolError, brreg.lookupByOrganizationNumber, '974760673')
        self.assertEqual(makeRequest.call_count, 1)

    def testLookupKrever9Siffer(self):
        with self.assertRaisesMessage(ValidationError, 'Organization number must be exactly 9 digits'):
            brreg.lookupByOrganizationNumber('12345')

    @patch('choirdinated.utils.brreg.getHttp')
    def testSearchByName(self, getHttp):
        getHttp.return_value = mockHttp(data={'_embedded': {'enheter': [brregEntity]}})

        results = brreg.searchByName('  filharmoniske ', limit=5)

        getHttp.return_value.request.assert_called_once_with(
            'GET', 'https://data.brreg.no/enhetsregisteret/api/enheter', fields={'navn': 'filharmoniske', 'size': '5'}
        )
        self.assertEqual([r['name'] for r in results], ['BERGEN FILHARMONISKE KOR'])

    @patch('choirdinated.utils.brreg.getHttp')
    def testSearchUtenTreffGirTomListe(self, getHttp):
        getHttp.return_value = mockHttp(data={'page': {'totalElements': 0}})
        self.assertEqual(brreg.searchByName('xyzzy'), [])

    def testSearchKreverToTegn(self):
        self.assertRaises(ValidationError, brreg.searchByName, ' a ')

    def testChoirOrganizationType(self):
        self.assertEqual(brreg.getChoirOrganizationType({'name': 'Oslo Symfonikor'}), consts.OrganizationType.symphony)
        self.assertEqual(brreg.getChoirOrganizationType({'name': 'Den Norske Opera Kor'}), consts.OrganizationType.opera)
        self.assertEqual(brreg.getChoirOrganizationType({'name': 'Kammerkoret'}), consts.OrganizationType.independent)


class OnboardingTestCase(TestCase):
    def provisionBody(self, **kwargs):
        return {
            'name': 'Testkoret',
            'vatNumber': '974 760 673',
            'foundedYear': 1990,
            'rehearsalLocation': 'Kulturhuset',
            'organizationType': consts.OrganizationType.independent,
            'contactName': 'Kari Dirigent',
            'contactEmail': 'kari@example.com',
            'contactPhone': '12345678',
            'contactPassword': 'hemmelig123',
            'contactBirthDate': '1980-05-17',
            'voiceConfiguration': consts.VoiceConfiguration.SATB,
            'billingName': 'Testkoret',
            'billingAddress': 'Gata 1',
            'billingPostalCode': '0150',
            'billingCity': 'Oslo',
            'billingEmail': 'faktura@example.com',
            **kwargs
        }

    def testProvisionChoir(self):
        res = self.client.post(reverse('provisionChoir'), self.provisionBody(), content_type='application/json')
        self.assertEqual(res.status_code, 201, msg=res.content)

        data = res.json()['data']
        choir = Choir.objects.get(pk=data['choirId'])
        self.assertEqual(choir.organizationNumber, '974760673')
        self.assertEqual(choir.settings['rehearsalLocation'], 'Kulturhuset')
        self.assertEqual(choir.settings['holidayCalendarRegion'], consts.defaultHolidayRegion)
        self.assertEqual(data['trialEndsAt'], (datetime.date.today() + datetime.timedelta(days=30)).isoformat())

        self.assertEqual(choir.membershipTypes.count(), len(consts.defaultMembershipTypes))
        self.assertEqual(choir.listOfValues.filter(category=consts.Category.eventType).count(), len(consts.defaultEventTypes))
        self.assertEqual(choir.listOfValues.filter(category=consts.Category.eventStatus).count(), len(consts.defaultEventStatuses))
        self.assertEqual(choir.listOfValues.filter(category=consts.Category.voiceGroup).count(), 4)
        self.assertFalse(choir.listOfValues.filter(category=consts.Category.voiceType).exists())

        member = Member.objects.get(pk=data['memberId'])
        self.assertEqual(member.user_id, data['userId'])
        self.assertEqual(member.membershipType.name, consts.Role.conductor)
        self.assertTrue(member.isActive)
        self.assertEqual(member.user.profile.name, 'Kari Dirigent')

        # Kontaktpersonen kan logge inn
        res = self.client.post(reverse('login'), {'email': 'kari@example.com', 'password': 'hemmelig123'}, content_type='application/json')
        self.assertEqual(res.status_code, 200)

    def testSSAATTBBGirStemmetyperMedForelder(self):
        res = self.client.post(reverse('provisionChoir'), self.provisionBody(voiceConfiguration=consts.VoiceConfiguration.SSAATTBB), content_type='application/json')
        choir = Choir.objects.get(pk=res.json()['data']['choirId'])

        voiceTypes = ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceType)
        self.assertEqual(voiceTypes.count(), 8)
        self.assertFalse(voiceTypes.filter(parent=None).exists())

    def testSMATBB(self):
        res = self.client.post(reverse('provisionChoir'), self.provisionBody(voiceConfiguration=consts.VoiceConfiguration.SMATBB), content_type='application/json')
        choir = Choir.objects.get(pk=res.json()['data']['choirId'])
        self.assertEqual(choir.listOfValues.filter(category=consts.Category.voiceGroup).count(), 6)

    def testEksisterendeEpostRullerTilbake(self):
        User.objects.create_user(username='kari@example.com', email='KARI@example.com', password='passord')

        res = self.client.post(reverse('provisionChoir'), self.provisionBody(), content_type='application/json')
        self.assertEqual(res.status_code, 400)
        self.assertFalse(Choir.objects.exists())

    def testManglendeFeltGir400(self):
        body = self.provisionBody()
        del body['contactBirthDate']
        res = self.client.post(reverse('provisionChoir'), body, content_type='application/json')
        self.assertEqual(res.status_code, 400)
        self.assertIn('contactBirthDate', res.json()['details'])

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookupOrg(self, getHttp):
        getHttp.return_value = mockHttp(data=brregEntity)

        res = self.client.post(reverse('lookupOrg'), {'orgNumber': '974760673'}, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['data']['name'], 'BERGEN FILHARMONISKE KOR')
        self.assertEqual(res.json()['data']['suggestedOrganizationType'], consts.OrganizationType.symphony)

    def testLookupOrgMedFeilKontrollsiffer(self):
        res = self.client.post(reverse('lookupOrg'), {'orgNumber': '974760674'}, content_type='application/json')
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json()['error'], 'Invalid organization number format')

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookupOrgIkkeFunnet(self, getHttp):
        getHttp.return_value = mockHttp(status=404)
        res = self.client.post(reverse('lookupOrg'), {'orgNumber': '974760673'}, content_type='application/json')
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json()['error'], 'Organization not found')

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookupOrgBrregNedeGir500(self, getHttp):
        getHttp.return_value = mockHttp(status=503)
        with self.assertLogs('choirdinated', level='ERROR'):
            res = self.client.post(reverse('lookupOrg'), {'orgNumber': '974760673'}, content_type='application/json')
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {'error': 'Internal server error'})

    @patch('choirdinated.utils.brreg.getHttp')
    def testLookupOrgPåNavn(self, getHttp):
        getHttp.return_value = mockHttp(data={})
        res = self.client.post(reverse('lookupOrg'), {'orgName': 'Ukjent kor'}, content_type='application/json')
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()['data'], [])

    def testLookupOrgUtenNoe(self):
        res = self.client.post(reverse('lookupOrg'), {}, content_type='application/json')
        self.assertEqual(res.status_code, 400)
