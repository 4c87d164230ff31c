# pitcrew-backend/transport/models.py
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models


class Carpool(models.Model):
    """
    A ride offered by a team member. available_seats counts rider seats;
    the driver does not take one.
    """
    team = models.ForeignKey(
        "core.Team",
        on_delete=models.CASCADE,
        related_name="carpools",
    )
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="driven_carpools",
    )
    event = models.ForeignKey(
        "events.Event",
        on_delete=models.SET_NULL,
        related_name="carpools",
        null=True,
        blank=True,
    )
    departure_location = models.CharField(max_length=255)
    departure_time = models.DateTimeField()
    return_time = models.DateTimeField(blank=True, null=True)
    available_seats = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    notes = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["departure_time", "id"]
        indexes = [
            models.Index(fields=["team", "departure_time"], name="carpool_team_depart_idx"),
        ]

    def __str__(self):
        return f"{self.driver} from {self.departure_location} @ {self.departure_time}"


class CarpoolRider(models.Model):
    carpool = models.ForeignKey(Carpool, on_delete=models.CASCADE, related_name="riders")
    rider = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="carpool_seats",
    )
    pickup_location = models.CharField(max_length=255, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["joined_at", "id"]
        constraints = [
            models.UniqueConstraint(fields=["carpool", "rider"], name="unique_carpool_rider"),
        ]

    def __str__(self):
        return f"{self.rider} in carpool {self.carpool_id}"
