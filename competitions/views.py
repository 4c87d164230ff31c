import logging

from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from core.generics import api_error
from events.datetime_utils import today
from .clients import PROGRAM_FRC, PROGRAM_FTC, CompetitionAPIError, fetch_season_events
from .filters import filter_frc_events, filter_ftc_events

logger = logging.getLogger("pitcrew.competitions")


class CompetitionEventsView(APIView):
    """
    Public pass-through to a FIRST schedule API.
    Body (all optional): season, search, eventType, startDate, endDate
    plus the program-specific keys handled by subclasses.
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint
    throttle_scope = "competition-fetch"

    program = None
    error_message = None

    def read_body(self, request) -> dict:
        # Missing or malformed JSON means "no filters"
        try:
            body = request.data
        except ParseError:
            logger.info("No JSON body provided, using default values")
            return {}
        return body if isinstance(body, dict) else {}

    def filter_events(self, events, body):
        raise NotImplementedError

    def fetch(self, season, body):
        return fetch_season_events(self.program, season)

    def post(self, request):
        body = self.read_body(request)

        season = body.get("season") or today().year
        try:
            season = int(season)
        except (TypeError, ValueError):
            return api_error("season must be a year, e.g. 2025")

        try:
            events = self.fetch(season, body)
        except CompetitionAPIError as e:
            logger.error(f"{self.error_message}: {e}")
            return Response(
                {"error": self.error_message, "details": str(e)},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )

        events = self.filter_events(events, body)
        logger.info(f"Returning {len(events)} filtered {self.program.upper()} events")
        return Response({"events": events})


class FRCEventsView(CompetitionEventsView):
    """
    POST /api/competitions/frc/   {season, search, eventType, district, startDate, endDate}
    """
    program = PROGRAM_FRC
    error_message = "Failed to fetch FRC events"

    def filter_events(self, events, body):
        return filter_frc_events(
            events,
            search=body.get("search"),
            event_type=body.get("eventType"),
            district=body.get("district"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
        )


class FTCEventsView(CompetitionEventsView):
    """
    POST /api/competitions/ftc/   {season, search, eventType, region, startDate, endDate, teamNumber}
    """
    program = PROGRAM_FTC
    error_message = "Failed to fetch FTC events"

    def fetch(self, season, body):
        return fetch_season_events(self.program, season, team_number=body.get("teamNumber"))

    def filter_events(self, events, body):
        return filter_ftc_events(
            events,
            search=body.get("search"),
            event_type=body.get("eventType"),
            region=body.get("region"),
            start_date=body.get("startDate"),
            end_date=body.get("endDate"),
        )
