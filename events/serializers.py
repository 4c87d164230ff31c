from rest_framework import serializers

from core.sanitizers import sanitize_title, sanitize_description, sanitize_text
from users.serializers import MemberSummarySerializer
from .datetime_utils import event_duration_hours
from .models import Event, EventRSVP, Attendance


# -----------------------------------------
# EVENT SERIALIZER
# -----------------------------------------
class EventSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(
        source="created_by.display_name", read_only=True
    )
    # Work hours logged to finances on create
    hours = serializers.DecimalField(
        max_digits=6, decimal_places=2, min_value=0, write_only=True, required=False, allow_null=True
    )
    duration_hours = serializers.SerializerMethodField()
    rsvp_counts = serializers.SerializerMethodField()
    my_rsvp = serializers.SerializerMethodField()

    class Meta:
        model = Event
        fields = [
            "id",
            "team",
            "title",
            "description",
            "start_time",
            "end_time",
            "event_type",
            "location",
            "is_recurring",
            "recurrence_pattern",
            "max_attendees",
            "created_by",
            "created_by_name",
            "duration_hours",
            "rsvp_counts",
            "my_rsvp",
            "hours",
            "created_at",
            "updated_at",
        ]
        read_only_fields = [
            "id",
            "team",
            "created_by",
            "created_by_name",
            "created_at",
            "updated_at",
        ]

    def get_duration_hours(self, obj):
        hours = event_duration_hours(obj)
        return round(hours, 2) if hours is not None else None

    def get_rsvp_counts(self, obj) -> dict:
        counts = {choice: 0 for choice, _ in EventRSVP.STATUS_CHOICES}
        for rsvp in obj.rsvps.all():
            counts[rsvp.status] += 1
        return counts

    def get_my_rsvp(self, obj):
        request = self.context.get("request")
        if not request or not request.user.is_authenticated:
            return None
        for rsvp in obj.rsvps.all():
            if rsvp.user_id == request.user.id:
                return rsvp.status
        return None

    def validate_title(self, value):
        value = sanitize_title(value)
        if not value:
            raise serializers.ValidationError("Title is required.")
        return value

    def validate_description(self, value):
        return sanitize_description(value) or None

    def validate_location(self, value):
        return sanitize_text(value, max_length=255) or None

    def validate_recurrence_pattern(self, value):
        if value is not None and not isinstance(value, dict):
            raise serializers.ValidationError("recurrence_pattern must be an object.")
        return value

    def validate(self, attrs):
        """
        end_time may equal start_time (zero-length reminders) but never
        precede it.
        """
        start = attrs.get("start_time")
        end = attrs.get("end_time")

        # When updating, fall back to existing values if one is missing
        if self.instance is not None:
            if start is None:
                start = self.instance.start_time
            if end is None:
                end = self.instance.end_time

        if start and end and end < start:
            raise serializers.ValidationError(
                {"end_time": "end_time must not be before start_time."}
            )

        if self.instance is not None and "hours" in attrs:
            raise serializers.ValidationError(
                {"hours": "Work hours can only be logged when the event is created."}
            )

        return attrs

    def create(self, validated_data):
        validated_data.pop("hours", None)
        return super().create(validated_data)


# -----------------------------------------
# RSVP SERIALIZERS
# -----------------------------------------
class RSVPWriteSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=EventRSVP.STATUS_CHOICES)
    comment = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)

    def validate_comment(self, value):
        return sanitize_text(value, max_length=1000) or None


class EventRSVPSerializer(serializers.ModelSerializer):
    user = MemberSummarySerializer(read_only=True)

    class Meta:
        model = EventRSVP
        fields = ["id", "event", "user", "status", "comment", "created_at", "updated_at"]
        read_only_fields = fields


# -----------------------------------------
# ATTENDANCE SERIALIZER
# -----------------------------------------
class AttendanceSerializer(serializers.ModelSerializer):
    user = MemberSummarySerializer(read_only=True)

    class Meta:
        model = Attendance
        fields = ["id", "event", "user", "status", "checked_in_at", "notes"]
        read_only_fields = fields


class CheckInSerializer(serializers.Serializer):
    """Self check-in: a member can only say they are here, on time or late."""
    status = serializers.ChoiceField(
        choices=[Attendance.STATUS_PRESENT, Attendance.STATUS_LATE],
        default=Attendance.STATUS_PRESENT,
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True, max_length=1000)

    def validate_notes(self, value):
        return sanitize_text(value, max_length=1000) or None


class AttendanceMarkSerializer(CheckInSerializer):
    """Organizer-side marking; the only way to record an excused absence."""
    status = serializers.ChoiceField(choices=Attendance.STATUS_CHOICES)
