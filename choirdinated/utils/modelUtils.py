import datetime

from django.db.models import Q
from django.forms import ValidationError
from django.utils.translation import gettext_lazy as _

from choirdinated import consts

# Utils for modeller

def periodAktiv(pathToPeriod='periods', dato=None):
    '''
    Produsere et Q object som querye for åpne MembershipPeriods. Et medlem er aktivt
    hvis og bare hvis det har en periode uten endDate, det finnes ingen status på medlemmet.

    Argumentet er query lookup pathen til periodene.
    - Om man gir ingen argument anntar den at vi filtrere på Member (som vi som oftest gjør).
    - Om man gir en tom streng kan vi filterere direkte på MembershipPeriod tabellen
    - Alternativt kan man gi en full path, f.eks. EventAttendance.objects.filter(periodAktiv('member__periods'))

    Om dato gis krever vi også at perioden har startet på den datoen.
    '''
    if pathToPeriod:
        pathToPeriod += '__'

    q = Q(**{f'{pathToPeriod}endDate': None})

    if dato != None:
        q &= Q(**{f'{pathToPeriod}startDate__lte': dato})

    return q


def permisjonAktiv(pathToLeave='leaves', dato=None):
    '''
    Produsere et Q object som querye for godkjente permisjoner som gjelder på dato.
    En permisjon uten expectedReturnDate varer til noen setter en.

    Eksempel:
    - Member.objects.filter(permisjonAktiv())
    - MembershipLeave.objects.filter(permisjonAktiv(''))
    '''

    # Må skriv dette fordi default parameters bare evalueres når funksjonen defineres.
    # Om sørvern hadd kjørt meir enn en dag hadd vi fått gårsdagens resultat.
    if dato == None:
        dato = datetime.date.today()

    if pathToLeave:
        pathToLeave += '__'

    return (
        Q(**{f'{pathToLeave}status': consts.LeaveStatus.approved, f'{pathToLeave}startDate__lte': dato}) &
        (
            Q(**{f'{pathToLeave}expectedReturnDate': None}) |
            Q(**{f'{pathToLeave}expectedReturnDate__gt': dato})
        )
    )


qTrue = ~Q(pk__in=[])
qFalse = Q(pk__in=[])

def qBool(value, trueOption=qTrue, falseOption=qFalse):
    'Return et Q objekt som tilsvare True eller False, til bruk i sammensatte filters'
    return trueOption if value else falseOption


def choirLookup(choir, path='choir'):
    'Returne et Q lookup for choir=choir, der vi omformer til choir__pk=choir dersom choir er en pk'
    if isinstance(choir, (int, str)):
        return Q(**{path+'__pk': choir})
    return Q(**{path: choir})


def validateStartEnd(instance, startField='startDate', endField='endDate', canEqual=True):
    '''
    Validere rekkefølgen på start og slutt, raiser ValidationError om ikke.
    Gjør ingenting om slutten ikke er satt.
    '''
    start = getattr(instance, startField)
    end = getattr(instance, endField)

    if start == None or end == None:
        return

    if end < start or (not canEqual and end == start):
        raise ValidationError(
            _('Slutt må være etter start') if not canEqual else _('Slutt må være etter eller lik start'),
            code='invalidDateOrder'
        )


def validateSameChoir(instance, *fieldNames):
    'Validere at relaterte objekt med et choir felt tilhører samme kor som instansen'
    for fieldName in fieldNames:
        related = getattr(instance, fieldName, None)
        if related != None and related.choir_id != None and related.choir_id != instance.choir_id:
            raise ValidationError(
                _(f'{fieldName} tilhører et annet kor'),
                code='crossChoirReference'
            )


def groupBy(iterable, prop):
    '''
    Enkel metode for å konverter et queryset eller en liste til en dict med liste-verdier,
    gruppert på en property.
    '''
    groups = dict()
    for obj in iterable:
        groups.setdefault(getattr(obj, prop), []).append(obj)
    return groups
