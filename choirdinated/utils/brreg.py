import logging
import re

import certifi
import urllib3

from django.conf import settings
from django.forms import ValidationError
from django.utils.translation import gettext_lazy as _

from choirdinated import consts

logger = logging.getLogger(__name__)

# Oppslag mot Enhetsregisteret i Brønnøysundregistrene
# https://data.brreg.no/enhetsregisteret/api/dokumentasjon/en/index.html

defaultBaseUrl = 'https://data.brreg.no/enhetsregisteret/api/enheter'

vekter = [3, 2, 7, 6, 5, 4, 3, 2]


class BrregError(Exception):
    'Brreg svarte med noe annet enn 2xx eller 404'
    def __init__(self, status):
        self.status = status
        super().__init__(f'Brreg API error: {status}')


def getHttp():
    return urllib3.PoolManager(
        cert_reqs="CERT_REQUIRED",
        ca_certs=certifi.where(),
        timeout=urllib3.Timeout(getattr(settings, 'BRREG_TIMEOUT', 5)),
        retries=False
    )


def getBaseUrl():
    return getattr(settings, 'BRREG_BASE_URL', defaultBaseUrl).rstrip('/')


def cleanOrganizationNumber(orgNumber):
    return re.sub(r'\s+', '', orgNumber or '')


def validateOrganizationNumber(orgNumber):
    'Modulo 11 sjekk av et organisasjonsnummer, siste siffer er kontrollsifferet'
    orgNumber = cleanOrganizationNumber(orgNumber)

    if not re.fullmatch(r'\d{9}', orgNumber):
        return False

    siffer = [int(s) for s in orgNumber]
    kontroll = 11 - sum(s * v for s, v in zip(siffer, vekter)) % 11

    if kontroll == 11:
        kontroll = 0
    elif kontroll == 10:
        return False

    return kontroll == siffer[8]


def formatOrganizationNumber(orgNumber):
    'Formatere til "123 456 789". Ting som ikke er 9 tegn returneres urørt'
    clean = cleanOrganizationNumber(orgNumber)
    if len(clean) != 9:
        return orgNumber
    return f'{clean[:3]} {clean[3:6]} {clean[6:]}'


def mapAddress(adresse):
    if not adresse:
        return None
    return {
        'street': adresse.get('adresse'),
        'postalCode': adresse.get('postnummer'),
        'city': adresse.get('poststed'),
        'municipality': adresse.get('kommune'),
    }


def mapEntity(entity):
    'Oversett en enhet fra Brreg til vår form'
    organisasjonsform = entity.get('organisasjonsform') or {}
    næringskode = entity.get('naeringskode1')

    return {
        'organizationNumber': entity.get('organisasjonsnummer'),
        'name': entity.get('navn'),
        'organizationType': organisasjonsform.get('beskrivelse'),
        'organizationTypeCode': organisasjonsform.get('kode'),
        'website': entity.get('hjemmeside'),
        'address': mapAddress(entity.get('postadresse')),
        'businessAddress': mapAddress(entity.get('forretningsadresse')),
        'foundingDate': entity.get('stiftelsesdato'),
        'registrationDate': entity.get('registreringsdatoEnhetsregisteret'),
        'isVATRegistered': entity.get('registrertIMvaregisteret'),
        'primaryIndustry': {
            'code': næringskode.get('kode'),
            'description': næringskode.get('beskrivelse'),
        } if næringskode else None,
        'employees': entity.get('antallAnsatte'),
        'isBankrupt': entity.get('konkurs'),
        'isUnderLiquidation': bool(entity.get('underAvvikling') or entity.get('underTvangsavviklingEllerTvangsopplosning')),
    }


def lookupByOrganizationNumber(orgNumber):
    'Returne organisasjonen, eller None om Brreg ikke kjenner til nummeret'
    orgNumber = cleanOrganizationNumber(orgNumber)

    if not re.fullmatch(r'\d{9}', orgNumber):
        raise ValidationError(
            _('Organization number must be exactly 9 digits'),
            code='invalidOrganizationNumber'
        )

    response = getHttp().request('GET', f'{getBaseUrl()}/{orgNumber}')

    if response.status == 404:
        return None

    if not 200 <= response.status < 300:
        logger.error(f'Brreg svarte {response.status} på oppslag av {orgNumber}')
        raise BrregError(response.status)

    return mapEntity(response.json())


def searchByName(name, limit=10):
    name = (name or '').strip()

    if len(name) < 2:
        raise ValidationError(
            _('Search name must be at least 2 characters'),
            code='searchNameTooShort'
        )

    response = getHttp().request('GET', getBaseUrl(), fields={'navn': name, 'size': str(limit)})

    if not 200 <= response.status < 300:
        logger.error(f'Brreg svarte {response.status} på søk etter {name}')
        raise BrregError(response.status)

    enheter = response.json().get('_embedded', {}).get('enheter')
    if not enheter:
        return []

    return [mapEntity(entity) for entity in enheter]


def getChoirOrganizationType(entity):
    'Gjett hva slags kor det er ut ifra navnet og næringskoden'
    navn = (entity.get('name') or '').lower()
    næring = ((entity.get('primaryIndustry') or {}).get('description') or '').lower()

    if any(o in navn for o in ['symfoni', 'orkester', 'filharmon']) or 'orkester' in næring:
        return consts.OrganizationType.symphony

    if 'opera' in navn or 'opera' in næring:
        return consts.OrganizationType.opera

    return consts.OrganizationType.independent
