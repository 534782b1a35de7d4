import choirdinated.models
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Choir',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('organizationType', models.CharField(choices=[('symphony', 'Symfonikor'), ('opera', 'Operakor'), ('independent', 'Frittstående kor')], default='independent', max_length=20)),
                ('organizationNumber', models.CharField(blank=True, default='', max_length=9)),
                ('foundedYear', models.PositiveIntegerField(blank=True, null=True)),
                ('website', models.CharField(blank=True, default='', max_length=255)),
                ('settings', models.JSONField(blank=True, default=dict)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'verbose_name_plural': 'choirs',
                'ordering': ['name', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='UserProfile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, default='', max_length=255)),
                ('birthDate', models.DateField(blank=True, null=True)),
                ('phone', models.CharField(blank=True, default='', max_length=30)),
                ('emergencyContact', models.CharField(blank=True, default='', max_length=255)),
                ('emergencyPhone', models.CharField(blank=True, default='', max_length=30)),
                ('avatar', models.ImageField(blank=True, null=True, upload_to=choirdinated.models.generateUploadTo)),
                ('isActive', models.BooleanField(default=True)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('lastLogin', models.DateTimeField(blank=True, null=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='profile', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['name', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='MembershipType',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('displayName', models.CharField(max_length=100)),
                ('isActiveMembership', models.BooleanField(default=True)),
                ('canAccessSystem', models.BooleanField(default=True)),
                ('canVote', models.BooleanField(default=True)),
                ('sortOrder', models.IntegerField(default=0)),
                ('description', models.TextField(blank=True, default='')),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('choir', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='membershipTypes', to='choirdinated.choir')),
            ],
            options={
                'ordering': ['choir', 'sortOrder', 'name'],
                'unique_together': {('choir', 'name')},
            },
        ),
        migrations.CreateModel(
            name='ListOfValue',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('voice_group', 'Stemmegruppe'), ('voice_type', 'Stemmetype'), ('event_type', 'Hendelsestype'), ('event_status', 'Hendelsesstatus')], max_length=30)),
                ('value', models.CharField(max_length=100)),
                ('displayName', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True, default='')),
                ('isActive', models.BooleanField(default=True)),
                ('sortOrder', models.IntegerField(default=0)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('choir', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='listOfValues', to='choirdinated.choir')),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='choirdinated.listofvalue')),
            ],
            options={
                'verbose_name_plural': 'lists of values',
                'ordering': ['category', 'sortOrder', 'displayName', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='Holiday',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('date', models.DateField()),
                ('region', models.CharField(default='NO', max_length=10)),
                ('isActive', models.BooleanField(default=True)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'ordering': ['date', 'name'],
                'unique_together': {('region', 'date', 'name')},
            },
        ),
        migrations.CreateModel(
            name='Member',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notes', models.TextField(blank=True, default='')),
                ('additionalData', models.JSONField(blank=True, default=dict)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('updatedAt', models.DateTimeField(auto_now=True)),
                ('choir', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to='choirdinated.choir')),
                ('membershipType', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='members', to='choirdinated.membershiptype')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='members', to=settings.AUTH_USER_MODEL)),
                ('voiceGroup', models.ForeignKey(limit_choices_to={'category': 'voice_group'}, on_delete=django.db.models.deletion.PROTECT, related_name='voiceGroupMembers', to='choirdinated.listofvalue')),
                ('voiceType', models.ForeignKey(blank=True, limit_choices_to={'category': 'voice_type'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='voiceTypeMembers', to='choirdinated.listofvalue')),
            ],
            options={
                'ordering': ['choir', 'pk'],
                'unique_together': {('user', 'choir')},
            },
        ),
        migrations.CreateModel(
            name='MembershipPeriod',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('startDate', models.DateField()),
                ('endDate', models.DateField(blank=True, null=True)),
                ('endReason', models.TextField(blank=True, default='')),
                ('notes', models.TextField(blank=True, default='')),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='periods', to='choirdinated.member')),
                ('membershipType', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='periods', to='choirdinated.membershiptype')),
                ('voiceGroup', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='voiceGroupPeriods', to='choirdinated.listofvalue')),
                ('voiceType', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='voiceTypePeriods', to='choirdinated.listofvalue')),
            ],
            options={
                'ordering': ['-startDate', '-pk'],
            },
        ),
        migrations.CreateModel(
            name='MembershipLeave',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('leaveType', models.CharField(choices=[('sick', 'Sykdom'), ('personal', 'Personlig'), ('work', 'Jobb'), ('study', 'Studier'), ('other', 'Annet')], default='other', max_length=20)),
                ('startDate', models.DateField()),
                ('expectedReturnDate', models.DateField(blank=True, null=True)),
                ('actualReturnDate', models.DateField(blank=True, null=True)),
                ('reason', models.TextField()),
                ('status', models.CharField(choices=[('pending', 'Venter'), ('approved', 'Godkjent'), ('rejected', 'Avslått')], default='pending', max_length=20)),
                ('requestedAt', models.DateTimeField(auto_now_add=True)),
                ('approvedAt', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('approvedBy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='approvedLeaves', to=settings.AUTH_USER_MODEL)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leaves', to='choirdinated.member')),
            ],
            options={
                'ordering': ['-startDate', '-pk'],
            },
        ),
        migrations.CreateModel(
            name='Season',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('displayName', models.CharField(max_length=100)),
                ('startDate', models.DateField()),
                ('endDate', models.DateField()),
                ('description', models.TextField(blank=True, default='')),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('choir', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='seasons', to='choirdinated.choir')),
                ('createdBy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['startDate', 'pk'],
                'unique_together': {('choir', 'name')},
            },
        ),
        migrations.CreateModel(
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, default='')),
                ('startTime', models.DateTimeField()),
                ('endTime', models.DateTimeField()),
                ('location', models.CharField(max_length=255)),
                ('room', models.CharField(blank=True, default='', max_length=100)),
                ('attendanceMode', models.CharField(choices=[('opt_in', 'Påmelding'), ('opt_out', 'Avmelding')], default='opt_out', max_length=10)),
                ('targetMembershipTypes', models.JSONField(blank=True, default=list)),
                ('targetVoiceGroups', models.JSONField(blank=True, default=list)),
                ('targetVoiceTypes', models.JSONField(blank=True, default=list)),
                ('includeAllActive', models.BooleanField(default=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('isRecurring', models.BooleanField(default=False)),
                ('recurrenceRule', models.JSONField(blank=True, null=True)),
                ('excludeHolidays', models.BooleanField(default=True)),
                ('calendarSyncEnabled', models.BooleanField(default=True)),
                ('createdAt', models.DateTimeField(auto_now_add=True)),
                ('choir', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='events', to='choirdinated.choir')),
                ('createdBy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('parentEvent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='instances', to='choirdinated.event')),
                ('status', models.ForeignKey(blank=True, limit_choices_to={'category': 'event_status'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='statusEvents', to='choirdinated.listofvalue')),
                ('type', models.ForeignKey(blank=True, limit_choices_to={'category': 'event_type'}, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='typeEvents', to='choirdinated.listofvalue')),
            ],
            options={
                'ordering': ['startTime', 'title', 'pk'],
            },
        ),
        migrations.CreateModel(
            name='EventAttendance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('intendedStatus', models.CharField(choices=[('attending', 'Kommer'), ('not_attending', 'Kommer ikke'), ('tentative', 'Kommer kanskje'), ('not_responded', 'Ikke svart')], default='not_responded', max_length=20)),
                ('intendedReason', models.TextField(blank=True, default='')),
                ('actualStatus', models.CharField(blank=True, choices=[('present', 'Til stede'), ('absent', 'Fraværende'), ('late', 'For sent')], max_length=10, null=True)),
                ('markedAt', models.DateTimeField(blank=True, null=True)),
                ('memberResponseAt', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, default='')),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance', to='choirdinated.event')),
                ('markedBy', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('member', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='attendance', to='choirdinated.member')),
            ],
            options={
                'verbose_name_plural': 'event attendance',
                'ordering': ['-event__startTime', 'member'],
                'unique_together': {('event', 'member')},
            },
        ),
    ]
