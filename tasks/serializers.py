from rest_framework import serializers

from core.sanitizers import sanitize_title, sanitize_description, sanitize_text
from users.serializers import MemberSummarySerializer
from .models import Task


class TagListField(serializers.Field):
    """
    Accepts a list of strings or a comma-separated string ("cad, drivetrain").
    Always stored and returned as a list without blanks.
    """

    def to_internal_value(self, data):
        if data in (None, ""):
            return []
        if isinstance(data, str):
            items = data.split(",")
        elif isinstance(data, (list, tuple)):
            items = data
        else:
            raise serializers.ValidationError("Tags must be a list or a comma-separated string.")

        tags = []
        for item in items:
            if not isinstance(item, str):
                raise serializers.ValidationError("Each tag must be a string.")
            tag = sanitize_text(item, max_length=32)
            if tag and tag not in tags:
                tags.append(tag)
        return tags

    def to_representation(self, value):
        return list(value or [])


class TaskSerializer(serializers.ModelSerializer):
    tags = TagListField(required=False)
    assigned_to_detail = MemberSummarySerializer(source="assigned_to", read_only=True)
    created_by_name = serializers.CharField(source="created_by.display_name", read_only=True)

    class Meta:
        model = Task
        fields = [
            "id",
            "title",
            "description",
            "status",
            "priority",
            "due_date",
            "assigned_to",
            "assigned_to_detail",
            "created_by",
            "created_by_name",
            "tags",
            "estimated_hours",
            "actual_hours",
            "created_at",
            "updated_at",
        ]
        read_only_fields = ["id", "created_by", "created_by_name", "created_at", "updated_at"]
        extra_kwargs = {
            "estimated_hours": {"min_value": 0},
            "actual_hours": {"min_value": 0},
        }

    def validate_title(self, value):
        value = sanitize_title(value)
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def validate_description(self, value):
        return sanitize_description(value) or None

    def validate_assigned_to(self, value):
        team = self.context.get("team")
        if value is not None and team is not None and value.team_id != team.id:
            raise serializers.ValidationError("Tasks can only be assigned to teammates.")
        return value
