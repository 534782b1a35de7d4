from choirdinated import consts

# Omforme modeller til dicts som kan returneres med JsonResponse.
# Datoer og tidspunkt blir isoformat av DjangoJSONEncoder.


def serializeListOfValue(listOfValue):
    if not listOfValue:
        return None
    return {
        'id': listOfValue.pk,
        'category': listOfValue.category,
        'value': listOfValue.value,
        'displayName': listOfValue.displayName,
        'sortOrder': listOfValue.sortOrder,
        'parentId': listOfValue.parent_id,
        'isActive': listOfValue.isActive,
    }


def serializeMembershipType(membershipType):
    return {
        'id': membershipType.pk,
        'name': membershipType.name,
        'displayName': membershipType.displayName,
        'isActiveMembership': membershipType.isActiveMembership,
        'canAccessSystem': membershipType.canAccessSystem,
        'canVote': membershipType.canVote,
        'sortOrder': membershipType.sortOrder,
    }


def serializeEvent(event, **extra):
    return {
        'id': event.pk,
        'choirId': event.choir_id,
        'title': event.title,
        'description': event.description,
        'typeId': event.type_id,
        'statusId': event.status_id,
        'startTime': event.startTime,
        'endTime': event.endTime,
        'location': event.location,
        'room': event.room,
        'attendanceMode': event.attendanceMode,
        'targetMembershipTypes': event.targetMembershipTypes,
        'targetVoiceGroups': event.targetVoiceGroups,
        'targetVoiceTypes': event.targetVoiceTypes,
        'includeAllActive': event.includeAllActive,
        'notes': event.notes,
        'isRecurring': event.isRecurring,
        'recurrenceRule': event.recurrenceRule,
        'parentEventId': event.parentEvent_id,
        'excludeHolidays': event.excludeHolidays,
        'calendarSyncEnabled': event.calendarSyncEnabled,
        'createdBy': event.createdBy_id,
        'createdAt': event.createdAt,
        **extra,
    }


def serializeAttendance(attendance, includeMember=False):
    data = {
        'id': attendance.pk,
        'eventId': attendance.event_id,
        'memberId': attendance.member_id,
        'intendedStatus': attendance.intendedStatus,
        'intendedReason': attendance.intendedReason,
        'actualStatus': attendance.actualStatus,
        'markedBy': attendance.markedBy_id,
        'markedAt': attendance.markedAt,
        'memberResponseAt': attendance.memberResponseAt,
        'notes': attendance.notes,
    }
    if includeMember:
        data['member'] = {
            'id': attendance.member.pk,
            'name': attendance.member.name,
            'voiceGroup': serializeListOfValue(attendance.member.voiceGroup),
            'voiceType': serializeListOfValue(attendance.member.voiceType),
        }
    return data


def serializeSeason(season):
    return {
        'id': season.pk,
        'name': season.name,
        'displayName': season.displayName,
        'startDate': season.startDate,
        'endDate': season.endDate,
        'description': season.description,
        'createdBy': season.createdBy_id,
    }


def serializePeriod(period):
    return {
        'id': period.pk,
        'memberId': period.member_id,
        'startDate': period.startDate,
        'endDate': period.endDate,
        'membershipTypeId': period.membershipType_id,
        'voiceGroupId': period.voiceGroup_id,
        'voiceTypeId': period.voiceType_id,
        'endReason': period.endReason,
        'notes': period.notes,
        'isCurrentPeriod': period.isCurrentPeriod,
    }


def serializeLeave(leave):
    return {
        'id': leave.pk,
        'memberId': leave.member_id,
        'leaveType': leave.leaveType,
        'startDate': leave.startDate,
        'expectedReturnDate': leave.expectedReturnDate,
        'actualReturnDate': leave.actualReturnDate,
        'reason': leave.reason,
        'status': leave.status,
        'requestedAt': leave.requestedAt,
        'approvedBy': leave.approvedBy_id,
        'approvedAt': leave.approvedAt,
        'notes': leave.notes,
        'isCurrent': leave.isCurrent,
    }


def serializeProfile(profile):
    return {
        'id': profile.user_id,
        'name': profile.name,
        'email': profile.email,
        'birthDate': profile.birthDate,
        'phone': profile.phone,
        'emergencyContact': profile.emergencyContact,
        'emergencyPhone': profile.emergencyPhone,
        'avatarUrl': profile.avatar.url if profile.avatar else None,
        'isActive': profile.isActive,
        'lastLogin': profile.lastLogin,
    }


def serializeMember(member):
    '''
    Member med stemme og medlemskapstype. Forventer at querysettet er annotert med
    hasOpenPeriod og isOnLeave, se MemberQuerySet.
    '''
    isOnLeave = getattr(member, 'isOnLeave', False)
    return {
        'id': member.pk,
        'userId': member.user_id,
        'name': member.name,
        'email': member.user.email,
        'profile': serializeProfile(member.user.profile) if hasattr(member.user, 'profile') else None,
        'membershipType': serializeMembershipType(member.membershipType),
        'voiceGroup': serializeListOfValue(member.voiceGroup),
        'voiceType': serializeListOfValue(member.voiceType),
        'notes': member.notes,
        'additionalData': member.additionalData,
        'isActive': member.hasOpenPeriod if hasattr(member, 'hasOpenPeriod') else member.isActive,
        'isOnLeave': isOnLeave,
        'membershipStatus': consts.memberStatusOnLeave if isOnLeave else consts.memberStatusActive,
        'createdAt': member.createdAt,
    }
