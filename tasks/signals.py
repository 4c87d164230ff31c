from django.db.models.signals import post_save, pre_save
from django.dispatch import receiver

from core.constants import ACTIVITY_TASK_COMPLETED, ACTIVITY_TASK_CREATED, ACTIVITY_TASK_REOPENED
from core.services import ActivityService
from .models import Task


@receiver(pre_save, sender=Task)
def cache_task_status(sender, instance, **kwargs):
    """Remember the stored status to detect completion transitions."""
    instance._previous_status = None
    if instance.pk:
        instance._previous_status = (
            Task.objects.filter(pk=instance.pk).values_list("status", flat=True).first()
        )


@receiver(post_save, sender=Task)
def log_task_activity(sender, instance, created, **kwargs):
    if created:
        verb = ACTIVITY_TASK_CREATED
    else:
        previous = getattr(instance, "_previous_status", None)
        if previous == instance.status:
            return
        if instance.status == Task.STATUS_DONE:
            verb = ACTIVITY_TASK_COMPLETED
        elif previous == Task.STATUS_DONE:
            verb = ACTIVITY_TASK_REOPENED
        else:
            return

    ActivityService.safe_log_activity(
        actor=instance.created_by if created else instance.assigned_to or instance.created_by,
        verb=verb,
        target=instance,
        team=instance.team,
        metadata={'task_title': instance.title, 'status': instance.status}
    )
