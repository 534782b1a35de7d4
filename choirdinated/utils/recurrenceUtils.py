import calendar
import datetime

from django.utils import timezone

from choirdinated import consts


def addMonths(dato, months):
    'Legg til months kalendermåneder, og klem dagen ned til lengden av måneden'
    monthIndex = dato.month - 1 + months
    year = dato.year + monthIndex // 12
    month = monthIndex % 12 + 1
    day = min(dato.day, calendar.monthrange(year, month)[1])
    return dato.replace(year=year, month=month, day=day)


def stepSlot(start, recurrenceType, interval, n):
    '''
    Starten på slot nummer n. Vi regne alltid fra den første starten, så en serie som starte
    31. januar blir 28./29. februar, så 31. mars igjen.
    '''
    if recurrenceType == consts.RecurrenceType.daily:
        return start + datetime.timedelta(days=interval * n)
    if recurrenceType == consts.RecurrenceType.weekly:
        return start + datetime.timedelta(weeks=interval * n)
    if recurrenceType == consts.RecurrenceType.monthly:
        return addMonths(start, interval * n)
    raise ValueError(f'Ukjent recurrenceType: {recurrenceType}')


def pastUntil(slotStart, until):
    'En until som bare er en dato gjelder hele dagen'
    if isinstance(until, datetime.datetime):
        if timezone.is_aware(slotStart) and timezone.is_naive(until):
            until = timezone.make_aware(until)
        return slotStart > until
    return slotStart.date() > until


def expandRecurrence(startTime, endTime, recurrenceType, interval, endType, count=None, until=None, holidayDates=()):
    '''
    Returne en ordnet liste av (start, end) par for en serie.

    - Stegingen skjer i lokal tid, så en øvelse klokka 18 forblir klokka 18 over sommertid.
    - Slots som havne på en dato i holidayDates hoppes over, men teller fortsatt mot count.
    - Uansett count stopper vi etter consts.maxOccurrences slots.
    - Er until før startTime får man en tom liste.
    '''
    if timezone.is_aware(startTime):
        startTime = timezone.localtime(startTime)
    duration = endTime - startTime

    if endType == consts.RecurrenceEndType.count:
        slots = min(count or consts.defaultRecurrenceCount, consts.maxOccurrences)
    elif endType == consts.RecurrenceEndType.until:
        if until == None:
            raise ValueError('until må settes når endType er until')
        slots = consts.maxOccurrences
    else:
        raise ValueError(f'Ukjent endType: {endType}')

    holidayDates = set(holidayDates)
    schedule = []

    for n in range(slots):
        slotStart = stepSlot(startTime, recurrenceType, interval, n)

        if endType == consts.RecurrenceEndType.until and pastUntil(slotStart, until):
            break

        if slotStart.date() in holidayDates:
            continue

        schedule.append((slotStart, slotStart + duration))

    return schedule
