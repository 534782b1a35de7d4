from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import path

from choirdinated import views

urlpatterns = [
    path('admin/', admin.site.urls),

    path('api/auth/login', views.login, name='login'),
    path('api/auth/logout', views.logout, name='logout'),

    path('api/events', views.eventListe, name='eventListe'),
    path('api/events/recurring', views.recurringEvents, name='recurringEvents'),
    path('api/events/my-events', views.myEvents, name='myEvents'),
    path('api/events/options', views.eventOptions, name='eventOptions'),
    path('api/events/<int:eventPK>', views.event, name='event'),
    path('api/events/<int:eventPK>/attendance', views.eventAttendance, name='eventAttendance'),
    path('api/events/<int:eventPK>/attendance/<int:memberPK>', views.markAttendance, name='markAttendance'),

    path('api/seasons', views.seasonListe, name='seasonListe'),

    path('api/members', views.memberListe, name='memberListe'),
    path('api/members/import', views.memberImport, name='memberImport'),
    path('api/members/<int:memberPK>', views.member, name='member'),
    path('api/members/<int:memberPK>/periods', views.memberPeriods, name='memberPeriods'),
    path('api/members/<int:memberPK>/leaves', views.memberLeaves, name='memberLeaves'),

    path('api/import/parse-excel', views.parseExcel, name='parseExcel'),

    path('api/onboarding/lookup-org', views.lookupOrg, name='lookupOrg'),
    path('api/onboarding/provision-choir', views.provisionChoir, name='provisionChoir'),
] + static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
