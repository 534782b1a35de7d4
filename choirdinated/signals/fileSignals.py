import os

from django.db.models import FileField
from django.db.models.signals import post_delete, pre_save
from django.dispatch import receiver

from choirdinated.models import UserProfile

fileFields = [f.name for f in UserProfile._meta.get_fields() if isinstance(f, FileField)]

# https://stackoverflow.com/a/16041527
@receiver(post_delete, sender=UserProfile)
def deleteFileOnDelete(sender, instance, **kwargs):
    'Slette bildet når profilen slettes'
    for fieldName in fileFields:
        if fil := getattr(instance, fieldName):
            if os.path.isfile(fil.path):
                os.remove(fil.path)


@receiver(pre_save, sender=UserProfile)
def deleteFileOnReplace(sender, instance, **kwargs):
    'Slette det gamle bildet når et nytt lastes opp, så vi ikke får random characters på slutten av filnavnet'
    if not instance.pk:
        return

    gammel = sender.objects.filter(pk=instance.pk).first()
    if not gammel:
        return

    for fieldName in fileFields:
        gammelFil = getattr(gammel, fieldName)
        if gammelFil and gammelFil != getattr(instance, fieldName):
            if os.path.isfile(gammelFil.path):
                os.remove(gammelFil.path)
