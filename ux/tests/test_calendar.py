from datetime import date, datetime, timedelta
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.db import DatabaseError
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from competitions.clients import CompetitionAPIError
from core.context import TeamContext
from core.models import Team
from events.models import Event, EventRSVP
from tasks.models import Task
from ux.services.calendar import (
    CalendarItem,
    CalendarQuery,
    build_calendar,
    in_window,
    matches_type,
)

User = get_user_model()

SEASON_EVENTS = [
    {"code": "CASJ", "name": "Silicon Valley Regional", "typeName": "Regional",
     "dateStart": "2025-03-20T00:00:00", "dateEnd": "2025-03-22T23:59:59"},
    {"code": "CAMP", "name": "Championship", "typeName": "Championship",
     "dateStart": "2025-04-16T00:00:00", "dateEnd": "2025-04-19T23:59:59"},
    {"code": "NODATE", "name": "Undated scrimmage", "dateStart": None},
]


def aware(*args):
    return timezone.make_aware(datetime(*args))


class CalendarServiceTestCase(TestCase):
    def setUp(self):
        self.team = Team.objects.create(name="Citrus Circuits", team_number=1678)
        self.lead = User.objects.create_user(username="lead", password="pass", role="admin", team=self.team)
        self.member = User.objects.create_user(username="member", password="pass", team=self.team)
        self.ctx = TeamContext(user=self.lead, team=self.team)

        self.meeting = Event.objects.create(
            team=self.team, created_by=self.lead, title="Build meeting",
            start_time=aware(2025, 3, 10, 18), end_time=aware(2025, 3, 10, 20),
        )
        self.scrimmage = Event.objects.create(
            team=self.team, created_by=self.lead, title="Local scrimmage",
            start_time=aware(2025, 3, 15, 9), end_time=aware(2025, 3, 15, 17),
            event_type=Event.TYPE_COMPETITION,
        )
        self.due_task = Task.objects.create(
            team=self.team, title="Finish bumpers", created_by=self.lead,
            assigned_to=self.member, due_date=aware(2025, 3, 12, 12),
        )
        self.undated_task = Task.objects.create(team=self.team, title="Someday", created_by=self.lead)

    def fetcher(self, events=SEASON_EVENTS):
        return mock.Mock(return_value=list(events))

    def ids(self, result):
        return [item["id"] for item in result["items"]]

    def test_tasks_without_due_date_never_appear(self):
        result = build_calendar(self.ctx, CalendarQuery(), fetcher=self.fetcher())
        ids = self.ids(result)

        self.assertNotIn(f"task-{self.undated_task.id}", ids)
        self.assertEqual(ids.count(f"task-{self.due_task.id}"), 1)

        task_item = next(i for i in result["items"] if i["id"] == f"task-{self.due_task.id}")
        self.assertEqual(task_item["start"], task_item["end"])
        self.assertEqual(task_item["title"], "📋 Finish bumpers")

    def test_competition_type_includes_external_and_competition_events(self):
        query = CalendarQuery(type_filter="competition")
        result = build_calendar(self.ctx, query, fetcher=self.fetcher())

        self.assertEqual(
            self.ids(result),
            [f"event-{self.scrimmage.id}", "competition-frc-CASJ", "competition-frc-CAMP"],
        )

    def test_event_type_skips_external_fetch(self):
        fetcher = self.fetcher()
        result = build_calendar(self.ctx, CalendarQuery(type_filter="event"), fetcher=fetcher)

        fetcher.assert_not_called()
        self.assertEqual(self.ids(result), [f"event-{self.meeting.id}", f"event-{self.scrimmage.id}"])

    def test_external_failure_becomes_warning(self):
        fetcher = mock.Mock(side_effect=CompetitionAPIError("timeout"))
        result = build_calendar(self.ctx, CalendarQuery(), fetcher=fetcher)

        self.assertEqual(len(result["warnings"]), 1)
        self.assertEqual(result["warnings"][0]["section"], "competitions")
        self.assertEqual(result["count"], 3)

    def test_unprojectable_competition_becomes_warning(self):
        fetcher = mock.Mock(return_value=["CASJ"])
        result = build_calendar(self.ctx, CalendarQuery(), fetcher=fetcher)

        self.assertEqual([w["section"] for w in result["warnings"]], ["competitions"])
        self.assertEqual(result["count"], 3)

    def test_event_store_failure_keeps_tasks(self):
        with mock.patch("ux.services.calendar.team_events", side_effect=DatabaseError("gone")):
            result = build_calendar(self.ctx, CalendarQuery(include_external=False))

        self.assertEqual(result["warnings"], [{"section": "events", "message": "Failed to load events"}])
        self.assertEqual(self.ids(result), [f"task-{self.due_task.id}"])

    def test_task_store_failure_keeps_events(self):
        with mock.patch("ux.services.calendar.team_due_tasks", side_effect=DatabaseError("gone")):
            result = build_calendar(self.ctx, CalendarQuery(include_external=False))

        self.assertEqual(result["warnings"], [{"section": "tasks", "message": "Failed to load tasks"}])
        self.assertEqual(self.ids(result), [f"event-{self.meeting.id}", f"event-{self.scrimmage.id}"])

    def test_member_filter(self):
        EventRSVP.objects.create(event=self.meeting, user=self.member, status=EventRSVP.STATUS_MAYBE)
        EventRSVP.objects.create(event=self.scrimmage, user=self.member, status=EventRSVP.STATUS_NO)

        fetcher = self.fetcher()
        result = build_calendar(self.ctx, CalendarQuery(member_id=self.member.id), fetcher=fetcher)

        fetcher.assert_not_called()
        self.assertEqual(self.ids(result), [f"event-{self.meeting.id}", f"task-{self.due_task.id}"])

    def test_week_window(self):
        # Sunday 2025-03-09 .. Saturday 2025-03-15
        query = CalendarQuery(view="week", anchor=date(2025, 3, 12), include_external=False)
        result = build_calendar(self.ctx, query)

        self.assertEqual(
            self.ids(result),
            [f"event-{self.meeting.id}", f"task-{self.due_task.id}", f"event-{self.scrimmage.id}"],
        )
        self.assertEqual(result["window"]["start"], aware(2025, 3, 9).isoformat())

    def test_day_window_excludes_other_days(self):
        query = CalendarQuery(view="day", anchor=date(2025, 3, 10), include_external=False)
        result = build_calendar(self.ctx, query)
        self.assertEqual(self.ids(result), [f"event-{self.meeting.id}"])

    def test_unordered_keeps_arrival_order(self):
        query = CalendarQuery(ordered=False, anchor=date(2025, 3, 1))
        result = build_calendar(self.ctx, query, fetcher=self.fetcher())
        kinds = [item["kind"] for item in result["items"]]
        self.assertEqual(kinds, ["event", "event", "task", "competition", "competition"])

    def test_season_follows_anchor_year(self):
        fetcher = self.fetcher()
        build_calendar(self.ctx, CalendarQuery(anchor=date(2024, 11, 2)), fetcher=fetcher)
        fetcher.assert_called_once_with("frc", 2024)


class CalendarHelpersTestCase(TestCase):
    def item(self, start, end, kind="event", category="meeting"):
        return CalendarItem(id="x", title="x", start=start, end=end, kind=kind, source_category=category)

    def test_window_is_half_open(self):
        window = (aware(2025, 3, 1), aware(2025, 4, 1))
        self.assertTrue(in_window(self.item(aware(2025, 2, 28, 20), aware(2025, 3, 1, 2)), *window))
        self.assertFalse(in_window(self.item(aware(2025, 4, 1), aware(2025, 4, 1, 2)), *window))
        self.assertFalse(in_window(self.item(aware(2025, 2, 28), aware(2025, 3, 1)), *window))
        # Point items count on their start
        self.assertTrue(in_window(self.item(aware(2025, 3, 1), aware(2025, 3, 1)), *window))

    def test_matches_type(self):
        start = aware(2025, 3, 1)
        competition_event = self.item(start, start, category="competition")
        self.assertTrue(matches_type(competition_event, "competition"))
        self.assertTrue(matches_type(competition_event, "event"))
        self.assertFalse(matches_type(self.item(start, start), "competition"))
        self.assertFalse(matches_type(self.item(start, start, kind="task", category="task"), "event"))


class CalendarApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Citrus Circuits", team_number=1678)
        self.lead = User.objects.create_user(username="lead", password="pass", team=self.team)
        self.client.force_authenticate(user=self.lead)
        Event.objects.create(
            team=self.team, created_by=self.lead, title="Kickoff",
            start_time=aware(2025, 1, 4, 10), end_time=aware(2025, 1, 4, 14),
        )

    @mock.patch("ux.services.calendar.fetch_season_events", return_value=SEASON_EVENTS)
    def test_calendar_endpoint(self, fetch):
        resp = self.client.get("/api/ux/calendar/?view=month&date=2025-03-05")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        body = resp.json()
        self.assertTrue(body["meta"]["success"])
        self.assertEqual([i["id"] for i in body["data"]["items"]], ["competition-frc-CASJ"])
        self.assertEqual(body["data"]["stats"]["total_events"], 1)

    @mock.patch("ux.services.calendar.fetch_season_events", side_effect=CompetitionAPIError("down"))
    def test_calendar_survives_upstream_failure(self, fetch):
        resp = self.client.get("/api/ux/calendar/?date=2025-01-01")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]
        self.assertEqual(data["count"], 1)
        self.assertEqual(data["warnings"][0]["message"], "Failed to fetch FRC competitions")

    @override_settings(FRC_API_USERNAME="robot", FRC_API_TOKEN="secret")
    @mock.patch("competitions.clients.requests.get")
    def test_calendar_survives_malformed_upstream(self, get):
        for payload in ([{"oops": 1}], {"Events": ["x"]}):
            get.return_value = mock.Mock(ok=True, status_code=200, **{"json.return_value": payload})
            resp = self.client.get("/api/ux/calendar/?date=2025-01-01")
            self.assertEqual(resp.status_code, status.HTTP_200_OK)
            data = resp.json()["data"]
            self.assertEqual([i["title"] for i in data["items"]], ["Kickoff"])
            self.assertEqual(data["warnings"][0]["section"], "competitions")

    def test_bad_params_rejected(self):
        self.assertEqual(self.client.get("/api/ux/calendar/?type=party").status_code, 400)
        self.assertEqual(self.client.get("/api/ux/calendar/?view=year").status_code, 400)
        self.assertEqual(self.client.get("/api/ux/calendar/?date=soon").status_code, 400)
        self.assertEqual(self.client.get("/api/ux/calendar/?member=99999").status_code, 404)


class DashboardApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Citrus Circuits", team_number=1678)
        self.lead = User.objects.create_user(username="lead", password="pass", role="admin", team=self.team)
        self.member = User.objects.create_user(username="member", password="pass", team=self.team)
        self.client.force_authenticate(user=self.lead)

        soon = timezone.now() + timedelta(days=2)
        self.event = Event.objects.create(
            team=self.team, created_by=self.lead, title="Practice",
            start_time=soon, end_time=soon + timedelta(hours=2),
        )
        Event.objects.create(
            team=self.team, created_by=self.lead, title="Far away",
            start_time=soon + timedelta(days=30), end_time=soon + timedelta(days=30, hours=1),
        )
        EventRSVP.objects.create(event=self.event, user=self.member, status="yes")
        EventRSVP.objects.create(event=self.event, user=self.lead, status="maybe")
        Task.objects.create(team=self.team, title="A", created_by=self.lead, status="done")
        Task.objects.create(team=self.team, title="B", created_by=self.lead)

    def test_dashboard(self):
        resp = self.client.get("/api/ux/dashboard/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()["data"]

        stats = data["stats"]
        self.assertEqual(stats["member_count"], 2)
        self.assertEqual(stats["events_this_week"], 1)
        self.assertEqual(stats["task_completion"], 50)

        first = data["upcoming_events"][0]
        self.assertEqual(first["title"], "Practice")
        self.assertEqual(first["rsvp_yes_count"], 1)
        self.assertEqual(first["my_status"], "maybe")

        self.assertTrue(len(data["recent_activity"]) > 0)

    def test_dashboard_since_cursor(self):
        later = (timezone.now() + timedelta(minutes=5)).isoformat()
        resp = self.client.get("/api/ux/dashboard/", {"since": later})
        self.assertEqual(resp.json()["data"]["recent_activity"], [])

    def test_upcoming_events_limit(self):
        resp = self.client.get("/api/ux/upcoming-events/?limit=1")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["data"]["count"], 1)
