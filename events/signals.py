from django.db.models.signals import post_save
from django.dispatch import receiver
import logging

from core.constants import (
    ACTIVITY_ATTENDANCE_MARKED,
    ACTIVITY_EVENT_SCHEDULED,
    ACTIVITY_EVENT_UPDATED,
    ACTIVITY_RSVP_UPDATED,
)
from core.services import ActivityService
from .models import Event, EventRSVP, Attendance

logger = logging.getLogger('pitcrew.events')


@receiver(post_save, sender=Event)
def log_event_activity(sender, instance, created, **kwargs):
    """Log event lifecycle activities."""
    ActivityService.safe_log_activity(
        actor=instance.created_by,
        verb=ACTIVITY_EVENT_SCHEDULED if created else ACTIVITY_EVENT_UPDATED,
        target=instance,
        team=instance.team,
        metadata={
            'event_title': instance.title,
            'event_type': instance.event_type,
            'start_time': instance.start_time.isoformat() if instance.start_time else None,
        }
    )


@receiver(post_save, sender=EventRSVP)
def log_rsvp_activity(sender, instance, created, **kwargs):
    event = instance.event
    ActivityService.safe_log_activity(
        actor=instance.user,
        verb=ACTIVITY_RSVP_UPDATED,
        target=event,
        team=event.team,
        metadata={'event_title': event.title, 'status': instance.status}
    )


@receiver(post_save, sender=Attendance)
def log_attendance(sender, instance, created, **kwargs):
    """Log the first check-in only."""
    if not created:
        return
    event = instance.event
    ActivityService.safe_log_activity(
        actor=instance.user,
        verb=ACTIVITY_ATTENDANCE_MARKED,
        target=instance,
        team=event.team,
        metadata={'event_title': event.title}
    )
    logger.info(f"Activity logged: attendance.marked for attendance {instance.id}")
