# pitcrew-backend/messaging/models.py
from django.conf import settings
from django.db import models


class Message(models.Model):
    TYPE_CHAT = "chat"
    TYPE_TASK = "task"
    TYPE_CARPOOL = "carpool"
    TYPE_RESOURCE = "resource"

    TYPE_CHOICES = [
        (TYPE_CHAT, "Chat"),
        (TYPE_TASK, "Task"),
        (TYPE_CARPOOL, "Carpool"),
        (TYPE_RESOURCE, "Resource"),
    ]

    RESOURCE_CAD = "cad"
    RESOURCE_CODE = "code"
    RESOURCE_MECHANICAL = "mechanical"
    RESOURCE_ELECTRICAL = "electrical"
    RESOURCE_GENERAL = "general"

    RESOURCE_CHOICES = [
        (RESOURCE_CAD, "CAD"),
        (RESOURCE_CODE, "Code"),
        (RESOURCE_MECHANICAL, "Mechanical"),
        (RESOURCE_ELECTRICAL, "Electrical"),
        (RESOURCE_GENERAL, "General"),
    ]

    team = models.ForeignKey(
        "core.Team",
        on_delete=models.CASCADE,
        related_name="messages",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="messages",
    )
    content = models.TextField()
    message_type = models.CharField(max_length=16, choices=TYPE_CHOICES, default=TYPE_CHAT)
    resource_category = models.CharField(max_length=16, choices=RESOURCE_CHOICES, blank=True, null=True)

    # Optional links for task / carpool threads
    task = models.ForeignKey(
        "tasks.Task",
        on_delete=models.SET_NULL,
        related_name="messages",
        null=True,
        blank=True,
    )
    carpool = models.ForeignKey(
        "transport.Carpool",
        on_delete=models.SET_NULL,
        related_name="messages",
        null=True,
        blank=True,
    )

    is_pinned = models.BooleanField(default=False)
    file_name = models.CharField(max_length=255, blank=True, null=True)
    file_url = models.CharField(max_length=1024, blank=True, null=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["team", "-created_at"], name="message_team_created_idx"),
        ]

    def __str__(self):
        return f"{self.user} ({self.message_type}): {self.content[:40]}"


class Mention(models.Model):
    """
    Either a teammate (@username) or an expertise group (@programming).
    """
    message = models.ForeignKey(Message, on_delete=models.CASCADE, related_name="mentions")
    mentioned_user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="mentions",
        null=True,
        blank=True,
    )
    mentioned_category = models.CharField(max_length=32, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["id"]

    def __str__(self):
        target = self.mentioned_user or f"@{self.mentioned_category}"
        return f"{target} in message {self.message_id}"
