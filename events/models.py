# pitcrew-backend/events/models.py
from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models


class Event(models.Model):
    TYPE_MEETING = "meeting"
    TYPE_PRACTICE = "practice"
    TYPE_OUTREACH = "outreach"
    TYPE_COMPETITION = "competition"
    TYPE_OTHER = "other"

    TYPE_CHOICES = [
        (TYPE_MEETING, "Meeting"),
        (TYPE_PRACTICE, "Practice"),
        (TYPE_OUTREACH, "Outreach"),
        (TYPE_COMPETITION, "Competition"),
        (TYPE_OTHER, "Other"),
    ]

    team = models.ForeignKey(
        "core.Team",
        on_delete=models.CASCADE,
        related_name="events",
    )
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        related_name="created_events",
        null=True,
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    event_type = models.CharField(max_length=32, choices=TYPE_CHOICES, default=TYPE_MEETING)
    location = models.CharField(max_length=255, blank=True, null=True)

    # Stored for display; occurrences are not expanded server-side
    is_recurring = models.BooleanField(default=False)
    recurrence_pattern = models.JSONField(blank=True, null=True)
    max_attendees = models.PositiveIntegerField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time", "id"]
        indexes = [
            models.Index(
                fields=['team', 'start_time'],
                name='event_team_start_idx',
            ),
        ]

    def __str__(self):
        return self.title

    def clean(self):
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValidationError({"end_time": "End time must be after the start time."})


class EventRSVP(models.Model):
    STATUS_YES = "yes"
    STATUS_NO = "no"
    STATUS_MAYBE = "maybe"

    STATUS_CHOICES = [
        (STATUS_YES, "Going"),
        (STATUS_NO, "Not going"),
        (STATUS_MAYBE, "Maybe"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="rsvps")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="event_rsvps",
    )
    status = models.CharField(max_length=8, choices=STATUS_CHOICES)
    comment = models.TextField(blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="unique_event_rsvp"),
        ]

    def __str__(self):
        return f"{self.user} -> {self.event} ({self.status})"


class Attendance(models.Model):
    """
    Check-in record. Independent of the RSVP: a member can show up
    without having answered, and a "yes" does not imply attendance.
    """
    STATUS_PRESENT = "present"
    STATUS_LATE = "late"
    STATUS_EXCUSED = "excused"

    STATUS_CHOICES = [
        (STATUS_PRESENT, "Present"),
        (STATUS_LATE, "Late"),
        (STATUS_EXCUSED, "Excused"),
    ]

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="attendance")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="attendance_records",
    )
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PRESENT)
    checked_in_at = models.DateTimeField()
    notes = models.TextField(blank=True, null=True)

    class Meta:
        ordering = ["checked_in_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user"], name="unique_event_attendance"),
        ]

    def __str__(self):
        return f"{self.user} @ {self.event}"
