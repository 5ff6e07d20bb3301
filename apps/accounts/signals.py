"""
Post-persist hooks: re-evaluate member/prospect status whenever a user's
password or identities change.
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver

from .models import User, Identity
from .status import reevaluate_status


@receiver(post_save, sender=User)
def user_saved(sender, instance: User, raw=False, **kwargs):
    if raw:
        return  # fixture loading
    reevaluate_status(instance)


@receiver(post_save, sender=Identity)
@receiver(post_delete, sender=Identity)
def identity_changed(sender, instance: Identity, raw=False, **kwargs):
    if raw:
        return
    user = User.objects.filter(pk=instance.user_id).first()
    reevaluate_status(user)
