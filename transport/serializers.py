from rest_framework import serializers

from core.sanitizers import sanitize_text
from users.serializers import MemberSummarySerializer
from . import occupancy
from .models import Carpool, CarpoolRider


class CarpoolRiderSerializer(serializers.ModelSerializer):
    rider = MemberSummarySerializer(read_only=True)

    class Meta:
        model = CarpoolRider
        fields = ["id", "rider", "pickup_location", "notes", "joined_at"]
        read_only_fields = fields


class CarpoolJoinSerializer(serializers.Serializer):
    pickup_location = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=255)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)

    def validate_pickup_location(self, value):
        return sanitize_text(value, max_length=255) or None

    def validate_notes(self, value):
        return sanitize_text(value, max_length=1000) or None


class CarpoolSerializer(serializers.ModelSerializer):
    driver = MemberSummarySerializer(read_only=True)
    riders = CarpoolRiderSerializer(many=True, read_only=True)
    event_title = serializers.CharField(source="event.title", read_only=True)
    seats_used = serializers.SerializerMethodField()
    seats_remaining = serializers.SerializerMethodField()
    vehicle_type = serializers.SerializerMethodField()
    eligibility = serializers.SerializerMethodField()
    eligibility_label = serializers.SerializerMethodField()

    class Meta:
        model = Carpool
        fields = [
            "id",
            "driver",
            "event",
            "event_title",
            "departure_location",
            "departure_time",
            "return_time",
            "available_seats",
            "notes",
            "riders",
            "seats_used",
            "seats_remaining",
            "vehicle_type",
            "eligibility",
            "eligibility_label",
            "created_at",
        ]
        read_only_fields = ["id", "driver", "riders", "created_at"]

    def get_seats_used(self, obj):
        return occupancy.seats_used(obj)

    def get_seats_remaining(self, obj):
        return occupancy.seats_remaining(obj)

    def get_vehicle_type(self, obj):
        return occupancy.vehicle_type(obj)

    def get_eligibility(self, obj):
        user = self.context.get("user")
        if user is None:
            return None
        return occupancy.eligibility(obj, user)

    def get_eligibility_label(self, obj):
        state = self.get_eligibility(obj)
        return occupancy.ELIGIBILITY_LABELS.get(state) if state else None

    def validate_departure_location(self, value):
        value = sanitize_text(value, max_length=255)
        if not value:
            raise serializers.ValidationError("Departure location is required.")
        return value

    def validate_notes(self, value):
        return sanitize_text(value, max_length=2000) or None

    def validate_available_seats(self, value):
        if value < 1:
            raise serializers.ValidationError("A ride needs at least one open seat.")
        if self.instance is not None:
            used = self.instance.riders.count()
            if value < used:
                raise serializers.ValidationError(
                    f"{used} riders have already joined; seats cannot drop below that."
                )
        return value

    def validate_event(self, value):
        team = self.context.get("team")
        if value is not None and team is not None and value.team_id != team.id:
            raise serializers.ValidationError("Event not found.")
        return value

    def validate(self, attrs):
        departure = attrs.get("departure_time", getattr(self.instance, "departure_time", None))
        return_time = attrs.get("return_time", getattr(self.instance, "return_time", None))
        if departure and return_time and return_time < departure:
            raise serializers.ValidationError({"return_time": "Return time must be after departure."})
        return attrs
