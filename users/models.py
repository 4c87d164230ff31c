# users/models.py
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    ROLE_ADMIN = "admin"
    ROLE_CODE_LEAD = "code_lead"
    ROLE_MECHANICAL_LEAD = "mechanical_lead"
    ROLE_ELECTRICAL_LEAD = "electrical_lead"
    ROLE_DRIVE_COACH = "drive_coach"
    ROLE_STUDENT_MENTOR = "student_mentor"
    ROLE_STUDENT = "student"
    ROLE_MENTOR = "mentor"

    ROLE_CHOICES = (
        (ROLE_ADMIN, 'Admin'),
        (ROLE_CODE_LEAD, 'Code Lead'),
        (ROLE_MECHANICAL_LEAD, 'Mechanical Lead'),
        (ROLE_ELECTRICAL_LEAD, 'Electrical Lead'),
        (ROLE_DRIVE_COACH, 'Drive Coach'),
        (ROLE_STUDENT_MENTOR, 'Student Mentor'),
        (ROLE_STUDENT, 'Student'),
        (ROLE_MENTOR, 'Mentor'),
    )

    EXPERTISE_CHOICES = (
        ('outreach', 'Outreach'),
        ('mechanical', 'Mechanical'),
        ('electrical', 'Electrical'),
        ('programming', 'Programming'),
        ('business', 'Business'),
        ('media', 'Media'),
        ('strategy', 'Strategy'),
    )

    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_STUDENT,
    )

    # A user belongs to at most one team
    team = models.ForeignKey(
        "core.Team",
        on_delete=models.SET_NULL,
        related_name="members",
        null=True,
        blank=True,
    )

    phone = models.CharField(max_length=20, blank=True, null=True)
    avatar_url = models.CharField(max_length=1024, blank=True, null=True)
    dietary_restrictions = models.CharField(max_length=255, blank=True, null=True)
    emergency_contact = models.CharField(max_length=255, blank=True, null=True)
    expertise = models.JSONField(default=list, blank=True, help_text="List of expertise areas")

    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.username

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.username

    @property
    def is_team_admin(self):
        return self.team_id is not None and self.role == self.ROLE_ADMIN
