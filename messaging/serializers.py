from rest_framework import serializers

from core.sanitizers import sanitize_html, sanitize_text
from users.serializers import MemberSummarySerializer
from .models import Mention, Message


class MentionSerializer(serializers.ModelSerializer):
    mentioned_user = MemberSummarySerializer(read_only=True)

    class Meta:
        model = Mention
        fields = ["id", "mentioned_user", "mentioned_category"]


class MessageSerializer(serializers.ModelSerializer):
    author = MemberSummarySerializer(source="user", read_only=True)
    mentions = MentionSerializer(many=True, read_only=True)
    task_title = serializers.CharField(source="task.title", read_only=True)

    class Meta:
        model = Message
        fields = [
            "id",
            "author",
            "content",
            "message_type",
            "resource_category",
            "task",
            "task_title",
            "carpool",
            "is_pinned",
            "file_name",
            "file_url",
            "mentions",
            "created_at",
        ]
        read_only_fields = ["id", "author", "task_title", "is_pinned", "mentions", "created_at"]

    def validate_content(self, value):
        value = sanitize_html(value, max_length=5000)
        if not value.strip():
            raise serializers.ValidationError("Message cannot be empty.")
        return value

    def validate_file_name(self, value):
        return sanitize_text(value, max_length=255) or None

    def validate_task(self, value):
        team = self.context.get("team")
        if value is not None and team is not None and value.team_id != team.id:
            raise serializers.ValidationError("Task not found.")
        return value

    def validate_carpool(self, value):
        team = self.context.get("team")
        if value is not None and team is not None and value.team_id != team.id:
            raise serializers.ValidationError("Ride not found.")
        return value

    def validate(self, attrs):
        message_type = attrs.get("message_type", Message.TYPE_CHAT)
        if message_type == Message.TYPE_RESOURCE:
            attrs.setdefault("resource_category", None)
            if not attrs["resource_category"]:
                attrs["resource_category"] = Message.RESOURCE_GENERAL
        else:
            # Categories only apply to shared resources
            attrs["resource_category"] = None
        return attrs
