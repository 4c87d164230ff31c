from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from core.constants import ACTIVITY_CARPOOL_JOINED, ACTIVITY_CARPOOL_LEFT, ACTIVITY_CARPOOL_OFFERED
from core.services import ActivityService
from .models import Carpool, CarpoolRider


def _ride_metadata(carpool):
    return {
        'departure_location': carpool.departure_location,
        'departure_time': carpool.departure_time.isoformat() if carpool.departure_time else None,
        'event_title': carpool.event.title if carpool.event_id else None,
    }


@receiver(post_save, sender=Carpool)
def log_carpool_offered(sender, instance, created, **kwargs):
    if created:
        ActivityService.safe_log_activity(
            actor=instance.driver,
            verb=ACTIVITY_CARPOOL_OFFERED,
            target=instance,
            team=instance.team,
            metadata={**_ride_metadata(instance), 'seats': instance.available_seats},
        )


@receiver(post_save, sender=CarpoolRider)
def log_carpool_joined(sender, instance, created, **kwargs):
    if created:
        carpool = instance.carpool
        ActivityService.safe_log_activity(
            actor=instance.rider,
            verb=ACTIVITY_CARPOOL_JOINED,
            target=carpool,
            team=carpool.team,
            metadata=_ride_metadata(carpool),
        )


@receiver(post_delete, sender=CarpoolRider)
def log_carpool_left(sender, instance, origin=None, **kwargs):
    # Only a rider leaving, not the ride or the account being deleted
    if not isinstance(origin, CarpoolRider):
        return
    carpool = Carpool.objects.filter(pk=instance.carpool_id).select_related("team", "event").first()
    if carpool is None:
        return
    ActivityService.safe_log_activity(
        actor=instance.rider,
        verb=ACTIVITY_CARPOOL_LEFT,
        target=carpool,
        team=carpool.team,
        metadata=_ride_metadata(carpool),
    )
