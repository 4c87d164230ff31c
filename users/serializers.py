from rest_framework import serializers
from .models import User


class UserSerializer(serializers.ModelSerializer):
    team_name = serializers.CharField(source='team.name', read_only=True)
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'username',
            'email',
            'first_name',
            'last_name',
            'display_name',
            'role',
            'team',
            'team_name',
            'phone',
            'avatar_url',
            'dietary_restrictions',
            'emergency_contact',
            'expertise',
            'date_joined',
        ]
        read_only_fields = ['id', 'username', 'email', 'role', 'team', 'date_joined']


class UpdateProfileSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False)

    class Meta:
        model = User
        fields = [
            'first_name',
            'last_name',
            'phone',
            'avatar_url',
            'dietary_restrictions',
            'emergency_contact',
            'expertise',
            'password',
        ]

    def validate_expertise(self, value):
        allowed = dict(User.EXPERTISE_CHOICES)
        if not isinstance(value, list):
            raise serializers.ValidationError("Expertise must be a list.")
        unknown = [item for item in value if item not in allowed]
        if unknown:
            raise serializers.ValidationError(f"Unknown expertise: {', '.join(map(str, unknown))}")
        # keep order, drop duplicates
        return list(dict.fromkeys(value))

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        for attr, value in validated_data.items():
            setattr(instance, attr, value)
        if password:
            instance.set_password(password)
        instance.save()
        return instance


class MemberSummarySerializer(serializers.ModelSerializer):
    """Compact user shape embedded in team-scoped payloads."""
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'first_name', 'last_name', 'display_name', 'email', 'avatar_url', 'role']
