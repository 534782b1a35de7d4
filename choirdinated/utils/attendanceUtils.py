from choirdinated import consts

# Hvilken nøkkel i oppsummeringen hver status telles i
intendedKeys = {
    consts.IntendedStatus.attending: 'attending',
    consts.IntendedStatus.notAttending: 'notAttending',
    consts.IntendedStatus.tentative: 'tentative',
    consts.IntendedStatus.notResponded: 'notResponded',
}

actualKeys = {
    consts.ActualStatus.present: 'present',
    consts.ActualStatus.absent: 'absent',
    consts.ActualStatus.late: 'late',
}


def tallyAttendance(rows):
    '''
    Rå telling av oppmøter. rows er hva som helst med intendedStatus og actualStatus,
    typisk EventAttendance objekter. actualStatus None telles ikke i noen bøtte.
    '''
    counts = {'total': 0, **{key: 0 for key in intendedKeys.values()}, **{key: 0 for key in actualKeys.values()}}

    for row in rows:
        counts['total'] += 1

        if key := intendedKeys.get(row.intendedStatus):
            counts[key] += 1

        if key := actualKeys.get(row.actualStatus):
            counts[key] += 1

    return counts


def summarizeAttendance(rows, attendanceMode):
    '''
    Oppsummering av oppmøter på en hendelse. På opt-out hendelser regnes de
    som ikke har svart som at de kommer, men notResponded rapporteres fortsatt.
    '''
    summary = tallyAttendance(rows)

    if attendanceMode == consts.AttendanceMode.optOut:
        summary['attending'] += summary['notResponded']

    return summary
