from django.db.models.signals import post_save
from django.dispatch import receiver

from core.constants import ACTIVITY_MESSAGE_POSTED
from core.services import ActivityService
from .models import Message


@receiver(post_save, sender=Message)
def log_message_posted(sender, instance, created, **kwargs):
    if not created:
        return
    ActivityService.safe_log_activity(
        actor=instance.user,
        verb=ACTIVITY_MESSAGE_POSTED,
        target=instance,
        team=instance.team,
        metadata={'message_type': instance.message_type, 'preview': instance.content[:80]}
    )
