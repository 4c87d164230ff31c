# pitcrew-backend/competitions/clients.py
"""
HTTP clients for the FIRST season schedule APIs (FRC and FTC).

Both APIs take HTTP Basic credentials and return the season's events under
a top-level key; credentials and base URLs come from settings.
"""
import logging

import requests
from django.conf import settings

logger = logging.getLogger("pitcrew.competitions")

PROGRAM_FRC = "frc"
PROGRAM_FTC = "ftc"


class CompetitionAPIError(Exception):
    """Upstream schedule API could not be reached or returned garbage."""


class ScheduleClient:
    def __init__(self, program, base_url, username, token, payload_key, timeout):
        self.program = program
        self.base_url = base_url.rstrip("/")
        self.username = username
        self.token = token
        self.payload_key = payload_key
        self.timeout = timeout

    def events_url(self, season) -> str:
        return f"{self.base_url}/{season}/events"

    def fetch_events(self, season, team_number=None) -> list:
        """
        GET {base}/{season}/events and return the raw event dicts.
        Raises CompetitionAPIError on any transport, status or payload problem.
        """
        if not self.username or not self.token:
            raise CompetitionAPIError(f"{self.program.upper()} API credentials are not configured")

        params = {}
        if team_number:
            params["teamNumber"] = team_number

        url = self.events_url(season)
        logger.info(f"Fetching {self.program.upper()} events from: {url}")

        try:
            resp = requests.get(
                url,
                params=params or None,
                auth=(self.username, self.token),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{self.program.upper()} API request failed: {e}")
            raise CompetitionAPIError(str(e)) from e

        if not resp.ok:
            logger.error(f"{self.program.upper()} API Error: {resp.status_code} - {resp.text[:500]}")
            raise CompetitionAPIError(
                f"{self.program.upper()} API request failed: {resp.status_code} {resp.reason}"
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise CompetitionAPIError(f"{self.program.upper()} API returned invalid JSON") from e

        if not isinstance(data, dict):
            raise CompetitionAPIError(f"{self.program.upper()} API returned an unexpected payload")

        events = data.get(self.payload_key) or []
        if not isinstance(events, list) or not all(isinstance(e, dict) for e in events):
            raise CompetitionAPIError(f"{self.program.upper()} API returned malformed '{self.payload_key}'")

        logger.info(f"Received {len(events)} {self.program.upper()} events from API")
        return events


def get_client(program) -> ScheduleClient:
    timeout = settings.COMPETITION_API_TIMEOUT
    if program == PROGRAM_FRC:
        return ScheduleClient(
            PROGRAM_FRC,
            settings.FRC_API_BASE_URL,
            settings.FRC_API_USERNAME,
            settings.FRC_API_TOKEN,
            payload_key="Events",
            timeout=timeout,
        )
    if program == PROGRAM_FTC:
        return ScheduleClient(
            PROGRAM_FTC,
            settings.FTC_API_BASE_URL,
            settings.FTC_API_USERNAME,
            settings.FTC_API_TOKEN,
            payload_key="events",
            timeout=timeout,
        )
    raise ValueError(f"Unknown program '{program}'")


def fetch_season_events(program, season, team_number=None) -> list:
    return get_client(program).fetch_events(season, team_number=team_number)
