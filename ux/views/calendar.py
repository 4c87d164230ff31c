# ux/views/calendar.py

from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, get_teammate, parse_bool
from events.datetime_utils import CALENDAR_VIEWS, parse_iso_date
from ux.services.calendar import TYPE_ALL, TYPE_FILTERS, CalendarQuery, build_calendar


class UXCalendarView(APIView):
    """
    GET /api/ux/calendar/?type=&member=&view=&date=&ordered=&include_external=

    Team events, due-dated tasks and the season's official competitions
    in one list. External schedule failures show up in `warnings`.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        params = request.query_params

        type_filter = params.get("type") or TYPE_ALL
        if type_filter not in TYPE_FILTERS:
            return api_error(f"Unknown calendar type '{type_filter}'.")

        member_id = None
        member = params.get("member")
        if member and member != "all":
            teammate = ctx.user if member == "me" else get_teammate(ctx, member)
            if teammate is None:
                return api_error("Member not found on your team.", status.HTTP_404_NOT_FOUND)
            member_id = teammate.pk

        view = params.get("view") or None
        if view is not None and view not in CALENDAR_VIEWS:
            return api_error(f"Unknown calendar view '{view}'.")

        anchor = None
        date_raw = params.get("date")
        if date_raw:
            anchor = parse_iso_date(date_raw)
            if anchor is None:
                return api_error("Invalid 'date' value. Use an ISO 8601 date.")

        query = CalendarQuery(
            type_filter=type_filter,
            member_id=member_id,
            view=view,
            anchor=anchor,
            ordered=parse_bool(params.get("ordered"), default=True),
            include_external=parse_bool(params.get("include_external"), default=True),
        )

        return Response({
            "meta": {"success": True},
            "data": build_calendar(ctx, query),
        })
