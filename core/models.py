#  pitcrew-backend/core/models.py
import secrets

from django.conf import settings
from django.contrib.contenttypes.fields import GenericForeignKey
from django.contrib.contenttypes.models import ContentType
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


INVITE_CODE_LENGTH = 8


def generate_invite_code() -> str:
    """
    Short, shareable code used to join a team.
    """
    return secrets.token_urlsafe(INVITE_CODE_LENGTH)[:INVITE_CODE_LENGTH]


class Team(models.Model):
    """
    A FIRST robotics team. Every piece of team data is scoped to exactly one Team.
    """
    PROGRAM_FRC = "frc"
    PROGRAM_FTC = "ftc"

    PROGRAM_CHOICES = [
        (PROGRAM_FRC, "FIRST Robotics Competition"),
        (PROGRAM_FTC, "FIRST Tech Challenge"),
    ]

    name = models.CharField(max_length=255)
    team_number = models.PositiveIntegerField(
        unique=True,
        validators=[MinValueValidator(1), MaxValueValidator(9999)],
    )
    program = models.CharField(max_length=8, choices=PROGRAM_CHOICES, default=PROGRAM_FRC)
    first_region = models.CharField(max_length=64, blank=True, null=True)
    description = models.TextField(blank=True, null=True)

    invite_code = models.CharField(
        max_length=16,
        unique=True,
        default=generate_invite_code,
        help_text="Code teammates enter to join this team.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["team_number"]
        indexes = [
            models.Index(fields=["invite_code"], name="team_invite_code_idx"),
        ]

    def __str__(self):
        return f"{self.team_number} - {self.name}"

    def regenerate_invite_code(self, save: bool = True) -> str:
        code = generate_invite_code()
        while Team.objects.filter(invite_code=code).exclude(pk=self.pk).exists():
            code = generate_invite_code()
        self.invite_code = code
        if save:
            self.save(update_fields=["invite_code", "updated_at"])
        return code


class DomainActivity(models.Model):
    """
    Immutable ledger of all business-significant actions inside a team.
    Source of truth for: recent activity, change polling.
    """
    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name="activities",
    )

    # Who did it?
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="activities",
        null=True,
        blank=True,
    )

    # What happened? (e.g., 'task.completed')
    verb = models.CharField(max_length=64, db_index=True)

    # To what? (Generic Foreign Key)
    content_type = models.ForeignKey(ContentType, on_delete=models.CASCADE)
    object_id = models.PositiveIntegerField()
    content_object = GenericForeignKey("content_type", "object_id")

    # Snapshot data, e.g. the task title at time of logging
    metadata = models.JSONField(default=dict, blank=True)

    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name_plural = "Domain Activities"
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["team", "-timestamp"], name="activity_team_ts_idx"),
        ]

    def __str__(self):
        return f"{self.actor} - {self.verb} - {self.timestamp}"
