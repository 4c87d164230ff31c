from rest_framework import serializers

from users.models import User
from users.serializers import MemberSummarySerializer
from .constants import ACTIVITY_TYPE_BY_PREFIX
from .models import Team, DomainActivity
from .sanitizers import sanitize_title, sanitize_text


class TeamSerializer(serializers.ModelSerializer):
    member_count = serializers.IntegerField(source="members.count", read_only=True)

    class Meta:
        model = Team
        fields = [
            "id",
            "name",
            "team_number",
            "program",
            "first_region",
            "description",
            "member_count",
            "created_at",
        ]
        read_only_fields = ["id", "member_count", "created_at"]
        # Range and uniqueness are checked in validate_team_number
        extra_kwargs = {"team_number": {"validators": []}}

    def validate_name(self, value):
        value = sanitize_title(value)
        if not value:
            raise serializers.ValidationError("Team name is required.")
        return value

    def validate_description(self, value):
        return sanitize_text(value, max_length=2000) or None

    def validate_team_number(self, value):
        if value < 1 or value > 9999:
            raise serializers.ValidationError("Team number must be between 1 and 9999.")
        if Team.objects.filter(team_number=value).exclude(pk=getattr(self.instance, "pk", None)).exists():
            raise serializers.ValidationError(f"Team {value} is already registered in the app.")
        return value


class TeamJoinSerializer(serializers.Serializer):
    invite_code = serializers.CharField(max_length=16)
    expertise = serializers.ListField(
        child=serializers.ChoiceField(choices=User.EXPERTISE_CHOICES),
        required=False,
    )

    def validate_invite_code(self, value):
        try:
            return Team.objects.get(invite_code=value.strip())
        except Team.DoesNotExist:
            raise serializers.ValidationError("The invite code you entered is not valid.")


class MemberRoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=User.ROLE_CHOICES)


class DomainActivitySerializer(serializers.ModelSerializer):
    actor = MemberSummarySerializer(read_only=True)
    type = serializers.SerializerMethodField()

    class Meta:
        model = DomainActivity
        fields = [
            'id',
            'actor',
            'verb',
            'type',
            'object_id',
            'metadata',
            'timestamp',
        ]

    def get_type(self, obj):
        prefix = obj.verb.split(".", 1)[0]
        return ACTIVITY_TYPE_BY_PREFIX.get(prefix, "other")
