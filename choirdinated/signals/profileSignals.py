from django.conf import settings
from django.db.models.signals import post_save
from django.dispatch import receiver

from choirdinated.models import UserProfile


@receiver(post_save, sender=settings.AUTH_USER_MODEL)
def createProfile(sender, instance, created, raw=False, **kwargs):
    'Alle brukere har en UserProfile, lag den når brukeren lages'
    if created and not raw:
        UserProfile.objects.get_or_create(user=instance, defaults={'name': instance.get_full_name()})
