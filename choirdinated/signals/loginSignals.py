from django.contrib.auth.signals import user_logged_in
from django.dispatch import receiver
from django.utils import timezone

from choirdinated.models import UserProfile


@receiver(user_logged_in)
def stampLastLogin(user, **kwargs):
    UserProfile.objects.filter(user=user).update(lastLogin=timezone.now())
