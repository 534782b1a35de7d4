from django.contrib import admin

from choirdinated.models import *


class MembershipPeriodInline(admin.TabularInline):
    model = MembershipPeriod
    extra = 0
    show_change_link = True


class MembershipLeaveInline(admin.TabularInline):
    model = MembershipLeave
    fk_name = 'member'
    extra = 0
    show_change_link = True


@admin.register(Choir)
class ChoirAdmin(admin.ModelAdmin):
    list_display = ['name', 'organizationType', 'organizationNumber', 'createdAt']
    search_fields = ['name', 'organizationNumber']


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
    list_display = ['name', 'user', 'isActive', 'lastLogin']
    search_fields = ['name', 'user__email']


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    inlines = [MembershipPeriodInline, MembershipLeaveInline]
    list_display = ['__str__', 'choir', 'membershipType', 'voiceGroup', 'voiceType']
    list_filter = ['choir']
    search_fields = ['user__profile__name', 'user__email']


@admin.register(MembershipType)
class MembershipTypeAdmin(admin.ModelAdmin):
    list_display = ['displayName', 'name', 'choir', 'isActiveMembership', 'canAccessSystem', 'canVote']
    list_filter = ['choir']


@admin.register(ListOfValue)
class ListOfValueAdmin(admin.ModelAdmin):
    list_display = ['displayName', 'value', 'category', 'choir', 'parent', 'isActive']
    list_filter = ['choir', 'category']
    search_fields = ['value', 'displayName']


@admin.register(Season)
class SeasonAdmin(admin.ModelAdmin):
    list_display = ['displayName', 'choir', 'startDate', 'endDate']
    list_filter = ['choir']


@admin.register(Holiday)
class HolidayAdmin(admin.ModelAdmin):
    list_display = ['name', 'date', 'region', 'isActive']
    list_filter = ['region', ('date', admin.DateFieldListFilter)]


class EventAttendanceInline(admin.TabularInline):
    model = EventAttendance
    fk_name = 'event'
    extra = 0


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    inlines = [EventAttendanceInline]
    list_display = ['title', 'choir', 'startTime', 'type', 'attendanceMode', 'isRecurring']
    list_filter = ['choir', ('startTime', admin.DateFieldListFilter)]
    search_fields = ['title']
