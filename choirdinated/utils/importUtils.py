import csv
import datetime
import io
import logging
import re

from openpyxl import load_workbook

from django.contrib.auth.models import User
from django.db import DataError, IntegrityError, transaction
from django.db.models import Q
from django.forms import ValidationError

from choirdinated import consts
from choirdinated.models import ListOfValue, Member, MembershipType

logger = logging.getLogger(__name__)

# Stemmegruppene vi gjenkjenner i import, i rekkefølgen de testes.
# (navn, nøkkelord, bokstav)
voiceGroupHeuristics = [
    ('Sopran', ['sopran', 'soprano'], 's'),
    ('Alt', ['alt', 'alto'], 'a'),
    ('Tenor', ['tenor'], 't'),
    ('Bass', ['bass', 'baritone'], 'b'),
]


def guessVoiceGroup(text):
    '''
    Gjett stemmegruppen til en verdi fra et regneark. Nøkkelord testes før enkeltbokstaver,
    så "Alt" blir Alt og ikke noe annet. Returne None om vi ikke finn noe.
    '''
    lower = (text or '').strip().lower()
    if not lower:
        return None

    for name, keywords, _ in voiceGroupHeuristics:
        if any(keyword in lower for keyword in keywords):
            return name

    # Fjern tall og tegnsetting, så "S1" og "1. S" også treffe
    letters = re.sub(r'[\d.\s]', '', lower)
    for name, _, letter in voiceGroupHeuristics:
        if letters == letter:
            return name

    return None


def guessVoiceType(text):
    'Gjett stemmetypen, f.eks. "Sopran 1" -> "1. Sopran". Krever både et nummer og en stemmegruppe'
    lower = (text or '').strip().lower()

    if not (number := re.search(r'(?<!\d)([12])(?!\d)', lower)):
        return None

    if not (group := guessVoiceGroup(lower)):
        return None

    return f'{number.group(1)}. {group}'


def mapVoiceGroups(values):
    'Returne en dict fra verdi til stemmegruppe. Verdier vi ikke gjenkjenner får ingen nøkkel'
    return {value: group for value in values if (group := guessVoiceGroup(value))}


def mapVoiceTypes(values):
    return {value: voiceType for value in values if (voiceType := guessVoiceType(value))}


def findParentVoiceGroup(voiceType, groups):
    '''
    Finn stemmegruppen en stemmetype hører til. groups er en dict fra navnet på stemmegruppen
    til hva enn man vil ha tilbake (typisk en ListOfValue eller en pk).
    '''
    typeLower = voiceType.lower()

    for groupName, group in groups.items():
        groupLower = groupName.lower()

        if groupLower in typeLower or \
            groupLower.replace('sopran', 'soprano') in typeLower or \
            groupLower.replace('soprano', 'sopran') in typeLower:
            return group

        if groupLower in ['sopran', 'soprano'] and 'sopran' in typeLower:
            return group
        if groupLower == 'alto' and 'alt' in typeLower:
            return group
        if groupLower == 'tenor' and 'tenor' in typeLower:
            return group
        if groupLower == 'bass' and 'bass' in typeLower:
            return group

    return None


def findListOfValue(choir, category, raw, parent=None):
    '''
    Finn en verdi i korets liste, case-insensitive på både value og displayName.
    Lages bare om ingen av dem treffe. Returne (listOfValue, created).
    '''
    raw = raw.strip()
    if listOfValue := ListOfValue.objects.filter(choir=choir, category=category).matching(raw).first():
        return listOfValue, False

    return ListOfValue.objects.create(
        choir=choir,
        category=category,
        value=raw,
        displayName=raw,
        parent=parent
    ), True


def findMembershipType(choir, raw):
    raw = (raw or '').strip()
    if not raw:
        return None
    return MembershipType.objects.filter(Q(name__iexact=raw) | Q(displayName__iexact=raw), choir=choir).first()


def parseNorwegianDate(text):
    '''
    Parse datoer som "9. okt. 1978" eller "9. okt 1978" til et date objekt.
    Tar også ISO datoer. Returne None om vi ikke klarer å parse det.
    '''
    if isinstance(text, datetime.datetime):
        return text.date()
    if isinstance(text, datetime.date):
        return text
    if not text:
        return None

    text = str(text).strip()
    parts = [p for p in re.split(r'[\s.]+', text) if p]

    if len(parts) >= 3 and (month := consts.norskeMåneder.get(parts[1].lower()[:3])):
        try:
            return datetime.date(int(parts[2]), month, int(parts[0]))
        except ValueError:
            return None

    try:
        return datetime.date.fromisoformat(text[:10])
    except ValueError:
        return None


def formatNorwegianDate(dato):
    'Motsatt av parseNorwegianDate, 1978-10-09 -> "9. okt 1978"'
    måned = next(k for k, v in consts.norskeMåneder.items() if v == dato.month)
    return f'{dato.day}. {måned} {dato.year}'


def formatCell(value):
    if isinstance(value, (datetime.datetime, datetime.date)):
        return formatNorwegianDate(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def parseSpreadsheet(fileObj, fileName=''):
    '''
    Les første ark i en .xlsx fil (eller en .csv) til en liste av dicts, med første rad som nøkler.
    Tomme celler og tomme rader tas ikke med.
    '''
    if fileName.lower().endswith('.csv'):
        reader = csv.DictReader(io.StringIO(fileObj.read().decode('utf-8-sig')))
        return [
            {key.strip(): value.strip() for key, value in row.items() if key and value and value.strip()}
            for row in reader
            if any(value and value.strip() for value in row.values())
        ]

    workbook = load_workbook(fileObj, read_only=True, data_only=True)
    try:
        rows = workbook.worksheets[0].iter_rows(values_only=True)

        header = next(rows, None)
        if header == None:
            return []
        header = [formatCell(h) if h != None else '' for h in header]

        data = []
        for row in rows:
            rowDict = {
                header[i]: formatCell(value)
                for i, value in enumerate(row)
                if i < len(header) and header[i] and value not in (None, '')
            }
            if rowDict:
                data.append(rowDict)

        return data
    finally:
        workbook.close()


class ImportRowError(Exception):
    'En feil med en enkelt rad i importen, de andre radene importeres fortsatt'


def importErrorMessage(error):
    'Oversett databasefeil til noe brukeren forstår'
    if isinstance(error, ValidationError):
        message = '; '.join(error.messages)
    else:
        message = str(error)

    if 'UNIQUE' in message or 'duplicate' in message.lower():
        return 'Email address already exists'
    if 'FOREIGN KEY' in message or 'foreign key' in message:
        return 'Invalid reference data (choir, membership type, or voice group)'
    if 'NOT NULL' in message or 'not-null' in message:
        return 'Missing required field'
    return message


importFields = [
    'email', 'firstName', 'lastName', 'birthDate', 'phone', 'emergencyContact', 'emergencyPhone',
    'status', 'voiceGroup', 'voiceType', 'membershipType', 'registrationDate'
]


def cleanImportRow(row):
    'Alle feltene som tekst uten mellomrom rundt, også når JSON-en har null eller tall'
    cleaned = {field: '' if row.get(field) == None else str(row.get(field)).strip() for field in importFields}
    unmappedFields = row.get('_unmappedFields')
    cleaned['_unmappedFields'] = unmappedFields if isinstance(unmappedFields, dict) else {}
    return cleaned


def unknownVoiceValues(choir, category, values):
    'Verdiene som ikke allerede finnes i koret, de er de eneste vi prøver å gjette på'
    existing = ListOfValue.objects.filter(choir=choir, category=category)
    return [value for value in dict.fromkeys(values) if value and not existing.matching(value).exists()]


def importMembers(choir, rows, sourceSystem=None):
    '''
    Importere medlemmer fra rader fra et regneark som allerede er mappet til våre felt:
    email, firstName, lastName, birthDate, phone, emergencyContact, emergencyPhone, status,
    voiceGroup, voiceType, membershipType, registrationDate og _unmappedFields.

    1. Rens radene og oversett stemmegrupper og stemmetyper til navnene koret bruker
    2. Lag de som mangler, stemmegrupper før stemmetyper så vi kan sette parent
    3. Lag brukere, medlemmer og en åpen periode per rad

    Feil på en rad stopper ikke resten, de samles i errors.
    '''
    results = {
        'imported': 0,
        'updated': 0,
        'errors': [],
        'newConfigurations': {'voiceGroups': [], 'voiceTypes': [], 'membershipTypes': []},
    }

    rows = [cleanImportRow(row) for row in rows]

    # "S" -> "Sopran", "Sopran 1" -> "1. Sopran", så formatforskjeller ikke gir nye stemmegrupper
    voiceGroupMap = mapVoiceGroups(unknownVoiceValues(choir, consts.Category.voiceGroup, [row['voiceGroup'] for row in rows]))
    voiceTypeMap = mapVoiceTypes(unknownVoiceValues(choir, consts.Category.voiceType, [row['voiceType'] for row in rows]))
    for row in rows:
        row['voiceGroup'] = voiceGroupMap.get(row['voiceGroup'], row['voiceGroup'])
        row['voiceType'] = voiceTypeMap.get(row['voiceType'], row['voiceType'])

    voiceGroupNames = list(dict.fromkeys(row['voiceGroup'] for row in rows if row['voiceGroup']))
    voiceTypeNames = list(dict.fromkeys(row['voiceType'] for row in rows if row['voiceType']))
    membershipTypeNames = list(dict.fromkeys(row['membershipType'] for row in rows if row['membershipType']))

    voiceGroups = {}
    for name in voiceGroupNames:
        voiceGroups[name], created = findListOfValue(choir, consts.Category.voiceGroup, name)
        if created:
            results['newConfigurations']['voiceGroups'].append(name)

    for name in voiceTypeNames:
        if ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceType).matching(name).exists():
            continue
        findListOfValue(choir, consts.Category.voiceType, name, parent=findParentVoiceGroup(name, voiceGroups))
        results['newConfigurations']['voiceTypes'].append(name)

    for name in membershipTypeNames:
        if findMembershipType(choir, name):
            continue
        lower = name.lower()
        MembershipType.objects.create(
            choir=choir,
            name=name,
            displayName=name,
            isActiveMembership='fast' in lower or 'prosjekt' in lower,
            canAccessSystem=True,
            canVote='fast' in lower,
        )
        results['newConfigurations']['membershipTypes'].append(name)

    importDate = datetime.datetime.now().isoformat()

    for row in rows:
        rowName = f'{row["firstName"]} {row["lastName"]}'.strip()
        try:
            with transaction.atomic():
                created = importMemberRow(choir, row, sourceSystem, importDate)
            results['imported' if created else 'updated'] += 1
        except (ImportRowError, IntegrityError, DataError, ValidationError) as e:
            logger.warning(f'Import av {rowName} feilet: {e}')
            results['errors'].append({'row': rowName, 'error': importErrorMessage(e)})

    return results


def importMemberRow(choir, row, sourceSystem, importDate):
    'Importere én rad renset med cleanImportRow. Returne True om medlemmet ble laget, False om det fantes fra før'
    email = row['email']
    name = f'{row["firstName"]} {row["lastName"]}'.strip()

    if not email:
        raise ImportRowError(f'Email is required for {name}')

    if not (user := User.objects.filter(email__iexact=email).first()):
        if not (birthDate := parseNorwegianDate(row['birthDate'])):
            raise ImportRowError(f'Birth date is required for {name}')

        # Uten passord får brukeren et unusable password, de må resette det selv
        user = User.objects.create_user(
            username=email,
            email=email,
            first_name=row['firstName'][:150],
            last_name=row['lastName'][:150]
        )
        user.profile.name = name
        user.profile.birthDate = birthDate
        user.profile.phone = row['phone']
        user.profile.emergencyContact = row['emergencyContact']
        user.profile.emergencyPhone = row['emergencyPhone']
        user.profile.isActive = row['status'] != 'Inaktiv'
        user.profile.save()

    if Member.objects.filter(user=user, choir=choir).exists():
        return False

    voiceGroup = ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceGroup).matching(row['voiceGroup']).first()
    voiceType = None
    if row['voiceType']:
        voiceType = ListOfValue.objects.filter(choir=choir, category=consts.Category.voiceType).matching(row['voiceType']).first()
    membershipType = findMembershipType(choir, row['membershipType'])

    if not membershipType or not voiceGroup:
        raise ImportRowError(f'Missing required data: membershipType="{row["membershipType"]}", voiceGroup="{row["voiceGroup"]}"')

    additionalData = dict(row['_unmappedFields'])
    if sourceSystem:
        additionalData['_importSource'] = sourceSystem
        additionalData['_importDate'] = importDate

    member = Member.objects.create(
        user=user,
        choir=choir,
        membershipType=membershipType,
        voiceGroup=voiceGroup,
        voiceType=voiceType,
        additionalData=additionalData
    )

    member.periods.create(
        startDate=parseNorwegianDate(row['registrationDate']) or datetime.date.today(),
        membershipType=membershipType,
        voiceGroup=voiceGroup,
        voiceType=voiceType
    )

    return True
