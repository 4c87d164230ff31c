from unittest import mock

import requests
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from competitions.clients import CompetitionAPIError, fetch_season_events
from competitions.filters import filter_frc_events, filter_ftc_events

FRC_EVENTS = [
    {"code": "CASJ", "name": "Silicon Valley Regional", "type": "Regional", "districtCode": None,
     "address": "San Jose", "dateStart": "2025-04-02T00:00:00", "dateEnd": "2025-04-05T23:59:59"},
    {"code": "WAAHS", "name": "PNW District Auburn", "type": "DistrictEvent", "districtCode": "PNW",
     "address": "Auburn", "dateStart": "2025-03-01T00:00:00", "dateEnd": "2025-03-02T23:59:59"},
    {"code": "TBD", "name": "Offseason", "type": "OffSeason", "dateStart": None, "dateEnd": None},
]

FTC_EVENTS = [
    {"code": "USCAFFL", "name": "Bay Area League Meet", "typeName": "League Meet", "regionCode": "USCANO",
     "city": "Fremont", "dateStart": "2024-12-07T00:00:00", "dateEnd": "2024-12-07T00:00:00"},
    {"code": "USCACMP", "name": "California Championship", "typeName": "Championship", "regionCode": "USCANO",
     "city": "Sacramento", "dateStart": "2025-03-01T00:00:00", "dateEnd": "2025-03-02T00:00:00"},
]


def fake_response(payload=None, status_code=200, reason="OK"):
    resp = mock.Mock()
    resp.ok = 200 <= status_code < 300
    resp.status_code = status_code
    resp.reason = reason
    resp.text = "" if payload is None else str(payload)
    resp.json.return_value = payload
    return resp


class CompetitionFilterTestCase(TestCase):
    def test_frc_date_window_drops_undated_events(self):
        events = filter_frc_events(FRC_EVENTS, start_date="2025-03-01", end_date="2025-03-31")
        self.assertEqual([e["code"] for e in events], ["WAAHS"])

    def test_frc_sorted_by_start(self):
        events = filter_frc_events(FRC_EVENTS[:2])
        self.assertEqual([e["code"] for e in events], ["WAAHS", "CASJ"])

    def test_frc_search_and_district(self):
        self.assertEqual([e["code"] for e in filter_frc_events(FRC_EVENTS, search="silicon")], ["CASJ"])
        self.assertEqual([e["code"] for e in filter_frc_events(FRC_EVENTS, district="PNW")], ["WAAHS"])

    def test_ftc_type_matches_type_name(self):
        events = filter_ftc_events(FTC_EVENTS, event_type="Championship")
        self.assertEqual([e["code"] for e in events], ["USCACMP"])


@override_settings(
    FRC_API_USERNAME="robot", FRC_API_TOKEN="secret",
    FTC_API_USERNAME="robot", FTC_API_TOKEN="secret",
)
class ScheduleClientTestCase(TestCase):
    @mock.patch("competitions.clients.requests.get")
    def test_fetch_uses_basic_auth_and_payload_key(self, get):
        get.return_value = fake_response({"Events": FRC_EVENTS})
        events = fetch_season_events("frc", 2025)

        self.assertEqual(len(events), 3)
        args, kwargs = get.call_args
        self.assertTrue(args[0].endswith("/2025/events"))
        self.assertEqual(kwargs["auth"], ("robot", "secret"))

    @mock.patch("competitions.clients.requests.get")
    def test_ftc_passes_team_number(self, get):
        get.return_value = fake_response({"events": FTC_EVENTS})
        fetch_season_events("ftc", 2024, team_number=16072)
        self.assertEqual(get.call_args.kwargs["params"], {"teamNumber": 16072})

    @mock.patch("competitions.clients.requests.get")
    def test_upstream_errors_raise(self, get):
        get.return_value = fake_response({"message": "nope"}, status_code=401, reason="Unauthorized")
        with self.assertRaises(CompetitionAPIError):
            fetch_season_events("frc", 2025)

        get.side_effect = requests.ConnectionError("down")
        with self.assertRaises(CompetitionAPIError):
            fetch_season_events("frc", 2025)

    @mock.patch("competitions.clients.requests.get")
    def test_malformed_payload_raises(self, get):
        for payload in ([{"oops": 1}], {"Events": ["CASJ"]}, {"Events": {"code": "CASJ"}}):
            get.return_value = fake_response(payload)
            with self.assertRaises(CompetitionAPIError):
                fetch_season_events("frc", 2025)

    @override_settings(FRC_API_TOKEN="")
    def test_missing_credentials_raise(self):
        with self.assertRaises(CompetitionAPIError):
            fetch_season_events("frc", 2025)


class CompetitionProxyApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    @mock.patch("competitions.views.fetch_season_events", return_value=FRC_EVENTS)
    def test_frc_proxy_filters(self, fetch):
        resp = self.client.post("/api/competitions/frc/", {"season": 2025, "eventType": "Regional"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual([e["code"] for e in resp.json()["events"]], ["CASJ"])
        fetch.assert_called_once_with("frc", 2025)

    @mock.patch("competitions.views.fetch_season_events", return_value=FTC_EVENTS)
    def test_ftc_proxy_without_body(self, fetch):
        resp = self.client.post("/api/competitions/ftc/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(len(resp.json()["events"]), 2)

    @mock.patch("competitions.views.fetch_season_events", side_effect=CompetitionAPIError("401 Unauthorized"))
    def test_upstream_failure_returns_500(self, fetch):
        resp = self.client.post("/api/competitions/frc/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json(), {"error": "Failed to fetch FRC events", "details": "401 Unauthorized"})

    @override_settings(FRC_API_USERNAME="robot", FRC_API_TOKEN="secret")
    @mock.patch("competitions.clients.requests.get")
    def test_malformed_upstream_returns_500(self, get):
        get.return_value = fake_response([{"oops": 1}])
        resp = self.client.post("/api/competitions/frc/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(resp.json()["error"], "Failed to fetch FRC events")
        self.assertIn("unexpected payload", resp.json()["details"])

    @override_settings(CORS_ALLOW_ALL_ORIGINS=True)
    def test_preflight_allows_any_origin(self):
        resp = self.client.options(
            "/api/competitions/frc/",
            HTTP_ORIGIN="https://pitcrew.example.com",
            HTTP_ACCESS_CONTROL_REQUEST_METHOD="POST",
            HTTP_ACCESS_CONTROL_REQUEST_HEADERS="authorization, content-type",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp["Access-Control-Allow-Origin"], "*")
        allowed = resp["Access-Control-Allow-Headers"]
        for header in ("authorization", "x-client-info", "apikey", "content-type"):
            self.assertIn(header, allowed)

    def test_bad_season_rejected(self):
        resp = self.client.post("/api/competitions/frc/", {"season": "next year"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
