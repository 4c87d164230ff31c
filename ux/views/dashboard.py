# ux/views/dashboard.py

from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error
from events.datetime_utils import as_aware, parse_iso
from ux.services.dashboard import DEFAULT_UPCOMING_LIMIT, get_dashboard, get_upcoming_events

MAX_UPCOMING_LIMIT = 50


class UXDashboardView(APIView):
    """
    GET /api/ux/dashboard/?since=<iso>

    `since` narrows recent activity to entries after that instant so the
    client can poll for changes.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)

        since = None
        since_raw = request.query_params.get("since")
        if since_raw:
            since = as_aware(parse_iso(since_raw))
            if since is None:
                return api_error("Invalid 'since' value. Use an ISO 8601 datetime.")

        return Response({
            "meta": {"success": True},
            "data": get_dashboard(ctx, since=since),
        })


class UXUpcomingEventsView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)

        try:
            limit = int(request.query_params.get("limit", DEFAULT_UPCOMING_LIMIT))
        except (TypeError, ValueError):
            return api_error("limit must be an integer.")
        limit = max(1, min(limit, MAX_UPCOMING_LIMIT))

        events = get_upcoming_events(ctx, limit=limit)
        return Response({
            "meta": {"success": True},
            "data": {
                "events": events,
                "count": len(events),
            },
        })
