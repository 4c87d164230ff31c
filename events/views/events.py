import logging

from django.db import transaction
from django.db.models import Q
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, parse_bool, user_can_edit_event
from events.datetime_utils import now, parse_iso
from events.models import Event
from events.serializers import EventSerializer
from finances.models import FinanceRecord, WORK_HOURS_CATEGORY

logger = logging.getLogger("pitcrew.events")


class EventListCreateView(APIView):
    """
    GET  /api/events/?type=&start=&end=&upcoming=&search=&mine=
    POST /api/events/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        qs = Event.objects.filter(team=ctx.team)

        event_type = request.query_params.get("type")
        if event_type:
            if event_type not in dict(Event.TYPE_CHOICES):
                return api_error(f"Unknown event type '{event_type}'.")
            qs = qs.filter(event_type=event_type)

        # Overlap with [start, end)
        start_raw = request.query_params.get("start")
        end_raw = request.query_params.get("end")
        if start_raw:
            start = parse_iso(start_raw)
            if start is None:
                return api_error("Invalid 'start' value. Use an ISO 8601 datetime.")
            qs = qs.filter(end_time__gte=start)
        if end_raw:
            end = parse_iso(end_raw)
            if end is None:
                return api_error("Invalid 'end' value. Use an ISO 8601 datetime.")
            qs = qs.filter(start_time__lt=end)

        if parse_bool(request.query_params.get("upcoming")):
            qs = qs.filter(start_time__gte=now())

        if parse_bool(request.query_params.get("mine")):
            qs = qs.filter(
                Q(created_by=ctx.user) |
                Q(rsvps__user=ctx.user, rsvps__status__in=["yes", "maybe"])
            ).distinct()

        search = request.query_params.get("search")
        if search:
            qs = qs.filter(
                Q(title__icontains=search) |
                Q(description__icontains=search) |
                Q(location__icontains=search)
            )

        qs = qs.select_related("created_by").prefetch_related("rsvps").order_by("start_time", "id")

        serializer = EventSerializer(qs, many=True, context={"request": request})
        return Response(serializer.data)

    def post(self, request):
        ctx = get_team_context(request)
        serializer = EventSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)

        hours = serializer.validated_data.get("hours")

        with transaction.atomic():
            event = serializer.save(team=ctx.team, created_by=ctx.user)

            # Log work hours if specified
            if hours and hours > 0:
                FinanceRecord.objects.create(
                    team=ctx.team,
                    type=FinanceRecord.TYPE_INCOME,
                    amount=hours,
                    description=f"Work hours: {event.title}",
                    category=WORK_HOURS_CATEGORY,
                    date=event.start_time.date(),
                    created_by=ctx.user,
                )
                logger.info(f"Logged {hours} work hours for event {event.id}")

        return Response(
            EventSerializer(event, context={"request": request}).data,
            status=status.HTTP_201_CREATED,
        )


class EventDetailView(APIView):
    """
    GET   /api/events/<pk>/
    PATCH /api/events/<pk>/   (creator or team admin)

    Events are not deleted through the API.
    """
    permission_classes = [IsAuthenticated]

    def get_object(self, ctx, pk):
        try:
            return (
                Event.objects.select_related("created_by")
                .prefetch_related("rsvps")
                .get(pk=pk, team=ctx.team)
            )
        except Event.DoesNotExist:
            return None

    def get(self, request, pk):
        ctx = get_team_context(request)
        event = self.get_object(ctx, pk)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        return Response(EventSerializer(event, context={"request": request}).data)

    def patch(self, request, pk):
        ctx = get_team_context(request)
        event = self.get_object(ctx, pk)
        if event is None:
            return api_error("Event not found", status.HTTP_404_NOT_FOUND)

        if not user_can_edit_event(ctx, event):
            return api_error("You do not have permission to edit this event.", status.HTTP_403_FORBIDDEN)

        serializer = EventSerializer(event, data=request.data, partial=True, context={"request": request})
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)

        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    put = patch
