from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, get_teammate, user_can_edit_event
from events.models import Event
from events.rsvp import (
    CheckInNotAllowed,
    attendance_for_event,
    check_in,
    clear_rsvp,
    mark_attendance,
    rsvp_summary,
    upsert_rsvp,
)
from events.serializers import (
    AttendanceMarkSerializer,
    AttendanceSerializer,
    CheckInSerializer,
    EventRSVPSerializer,
    RSVPWriteSerializer,
)


def _get_team_event(ctx, event_id):
    try:
        return Event.objects.prefetch_related("rsvps").get(pk=event_id, team=ctx.team)
    except Event.DoesNotExist:
        return None


class EventRSVPView(APIView):
    """
    GET    /api/events/<event_id>/rsvp/   -> counts + my status
    POST   /api/events/<event_id>/rsvp/   {status: yes|no|maybe, comment?}
    DELETE /api/events/<event_id>/rsvp/   -> back to no response
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        return Response(rsvp_summary(event, user=ctx.user))

    def post(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        serializer = RSVPWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        rsvp, created = upsert_rsvp(
            ctx,
            event,
            serializer.validated_data["status"],
            comment=serializer.validated_data.get("comment"),
        )
        return Response(
            EventRSVPSerializer(rsvp).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    put = post

    def delete(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not clear_rsvp(ctx, event):
            return api_error("You have not responded to this event.", status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class EventRSVPListView(APIView):
    """
    GET /api/events/<event_id>/rsvps/?status=yes
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        qs = event.rsvps.select_related("user").order_by("created_at")
        status_param = request.query_params.get("status")
        if status_param:
            qs = qs.filter(status=status_param)

        return Response(EventRSVPSerializer(qs, many=True).data)


class EventAttendanceView(APIView):
    """
    GET  /api/events/<event_id>/attendance/   (creator or team admin)
    POST /api/events/<event_id>/attendance/   check in, practice events only
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not user_can_edit_event(ctx, event):
            return api_error("Only the organizer can view attendance.", status.HTTP_403_FORBIDDEN)

        records = attendance_for_event(event)
        return Response({
            "count": len(records),
            "results": AttendanceSerializer(records, many=True).data,
        })

    def post(self, request, event_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        serializer = CheckInSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record, created = check_in(ctx, event, **serializer.validated_data)
        except CheckInNotAllowed as e:
            return api_error(str(e), status.HTTP_400_BAD_REQUEST)

        return Response(
            AttendanceSerializer(record).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )


class EventAttendanceMarkView(APIView):
    """
    PUT /api/events/<event_id>/attendance/<user_id>/   {status, notes}
    Organizer records present / late / excused for a teammate.
    """
    permission_classes = [IsAuthenticated]

    def put(self, request, event_id, user_id):
        ctx = get_team_context(request)
        event = _get_team_event(ctx, event_id)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not user_can_edit_event(ctx, event):
            return api_error("Only the organizer can mark attendance.", status.HTTP_403_FORBIDDEN)

        member = get_teammate(ctx, user_id)
        if member is None:
            return api_error("Member not found", status.HTTP_404_NOT_FOUND)

        serializer = AttendanceMarkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            record, created = mark_attendance(event, member, **serializer.validated_data)
        except CheckInNotAllowed as e:
            return api_error(str(e), status.HTTP_400_BAD_REQUEST)

        return Response(
            AttendanceSerializer(record).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )
