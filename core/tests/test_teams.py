from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.constants import ACTIVITY_MEMBER_JOINED, ACTIVITY_TEAM_CREATED
from core.models import DomainActivity, Team
from events.models import Event, EventRSVP
from tasks.models import Task
from transport.models import Carpool, CarpoolRider

User = get_user_model()


class TeamApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.founder = User.objects.create_user(username="founder", password="pass")
        self.recruit = User.objects.create_user(username="recruit", password="pass")

    def auth(self, user):
        self.client.force_authenticate(user=user)

    def create_team(self, number=971):
        self.auth(self.founder)
        return self.client.post("/api/core/teams/", {
            "name": "Spartan Robotics",
            "team_number": number,
            "program": "frc",
        }, format="json")

    def test_create_team_makes_founder_admin(self):
        resp = self.create_team()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertIn("invite_code", resp.json())

        self.founder.refresh_from_db()
        self.assertEqual(self.founder.role, User.ROLE_ADMIN)
        self.assertEqual(self.founder.team.team_number, 971)
        self.assertTrue(DomainActivity.objects.filter(verb=ACTIVITY_TEAM_CREATED).exists())

    def test_team_number_must_be_unique_and_in_range(self):
        Team.objects.create(name="Taken", team_number=971)
        resp = self.create_team(971)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("Team 971 is already registered in the app.", str(resp.json()))

        resp = self.create_team(10000)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cannot_create_second_team(self):
        self.create_team()
        resp = self.create_team(972)
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_join_with_invite_code(self):
        invite = self.create_team().json()["invite_code"]

        self.auth(self.recruit)
        resp = self.client.post("/api/core/teams/join/", {
            "invite_code": invite,
            "expertise": ["programming", "strategy"],
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.json()["member_count"], 2)

        self.recruit.refresh_from_db()
        self.assertEqual(self.recruit.role, User.ROLE_STUDENT)
        self.assertEqual(self.recruit.expertise, ["programming", "strategy"])
        self.assertTrue(DomainActivity.objects.filter(verb=ACTIVITY_MEMBER_JOINED, actor=self.recruit).exists())

        # Joining again is a no-op
        resp = self.client.post("/api/core/teams/join/", {"invite_code": invite}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

    def test_join_with_bad_code(self):
        self.auth(self.recruit)
        resp = self.client.post("/api/core/teams/join/", {"invite_code": "nope"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("The invite code you entered is not valid.", str(resp.json()))

    def test_invite_code_visible_to_admin_only(self):
        invite = self.create_team().json()["invite_code"]
        self.auth(self.recruit)
        self.client.post("/api/core/teams/join/", {"invite_code": invite}, format="json")

        resp = self.client.get("/api/core/teams/current/")
        self.assertNotIn("invite_code", resp.json())
        resp = self.client.post("/api/core/teams/current/invite-code/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.founder)
        resp = self.client.post("/api/core/teams/current/invite-code/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertNotEqual(resp.json()["invite_code"], invite)

    def test_sole_admin_cannot_leave_or_demote_self(self):
        invite = self.create_team().json()["invite_code"]
        self.auth(self.recruit)
        self.client.post("/api/core/teams/join/", {"invite_code": invite}, format="json")

        self.auth(self.founder)
        resp = self.client.post("/api/core/teams/current/leave/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.patch(
            f"/api/core/teams/current/members/{self.founder.id}/", {"role": "mentor"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        resp = self.client.patch(
            f"/api/core/teams/current/members/{self.recruit.id}/", {"role": "admin"}, format="json"
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        resp = self.client.post("/api/core/teams/current/leave/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.founder.refresh_from_db()
        self.assertIsNone(self.founder.team_id)

    def test_admin_removes_member(self):
        invite = self.create_team().json()["invite_code"]
        self.auth(self.recruit)
        self.client.post("/api/core/teams/join/", {"invite_code": invite}, format="json")

        resp = self.client.delete(f"/api/core/teams/current/members/{self.founder.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.auth(self.founder)
        resp = self.client.delete(f"/api/core/teams/current/members/{self.recruit.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.recruit.refresh_from_db()
        self.assertIsNone(self.recruit.team_id)

    def test_team_scoped_endpoints_require_team(self):
        self.auth(self.recruit)
        resp = self.client.get("/api/core/teams/current/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)


class ActivityApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Highrollers", team_number=987)
        self.user = User.objects.create_user(username="roller", password="pass", team=self.team)
        self.client.force_authenticate(user=self.user)

    def test_activity_feed_and_since_cursor(self):
        self.client.post("/api/tasks/", {"title": "Order bearings"}, format="json")

        resp = self.client.get("/api/core/activity/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data["results"][0]["verb"], "task.created")
        self.assertEqual(data["results"][0]["type"], "task")

        resp = self.client.get("/api/core/activity/", {"since": data["latest"]})
        self.assertEqual(resp.json()["results"], [])

        future = (timezone.now() + timedelta(hours=1)).isoformat()
        resp = self.client.get("/api/core/activity/", {"since": future})
        self.assertEqual(resp.json()["latest"], future)

    def test_bad_since_rejected(self):
        resp = self.client.get("/api/core/activity/?since=yesterday")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_other_teams_activity_hidden(self):
        other = Team.objects.create(name="Other", team_number=988)
        stranger = User.objects.create_user(username="stranger", password="pass", team=other)
        self.client.force_authenticate(user=stranger)
        self.client.post("/api/tasks/", {"title": "Secret"}, format="json")

        self.client.force_authenticate(user=self.user)
        resp = self.client.get("/api/core/activity/")
        self.assertEqual(resp.json()["results"], [])


class TeamDepartureTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Spartan Robotics", team_number=971)
        self.admin = User.objects.create_user(username="coach", password="pass", role="admin", team=self.team)
        self.driver = User.objects.create_user(username="driver", password="pass", team=self.team)
        self.leaver = User.objects.create_user(username="leaver", password="pass", team=self.team)

        soon = timezone.now() + timedelta(days=2)
        self.ride = Carpool.objects.create(
            team=self.team, driver=self.driver, departure_location="School",
            departure_time=soon, available_seats=1,
        )
        CarpoolRider.objects.create(carpool=self.ride, rider=self.leaver)
        self.own_ride = Carpool.objects.create(
            team=self.team, driver=self.leaver, departure_location="Library",
            departure_time=soon, available_seats=3,
        )
        self.past_ride = Carpool.objects.create(
            team=self.team, driver=self.leaver, departure_location="Library",
            departure_time=timezone.now() - timedelta(days=30), available_seats=3,
        )

        self.next_meeting = Event.objects.create(
            team=self.team, created_by=self.admin, title="Build night",
            start_time=soon, end_time=soon + timedelta(hours=3),
        )
        self.last_meeting = Event.objects.create(
            team=self.team, created_by=self.admin, title="Kickoff",
            start_time=timezone.now() - timedelta(days=7), end_time=timezone.now() - timedelta(days=7, hours=-3),
        )
        EventRSVP.objects.create(event=self.next_meeting, user=self.leaver, status="yes")
        EventRSVP.objects.create(event=self.last_meeting, user=self.leaver, status="yes")

        self.open_task = Task.objects.create(team=self.team, title="Wire PDH", created_by=self.admin, assigned_to=self.leaver)
        self.done_task = Task.objects.create(
            team=self.team, title="Order bolts", created_by=self.admin, assigned_to=self.leaver, status="done",
        )

    def assert_released(self):
        self.assertFalse(CarpoolRider.objects.filter(rider=self.leaver).exists())
        self.assertFalse(Carpool.objects.filter(pk=self.own_ride.pk).exists())
        self.assertTrue(Carpool.objects.filter(pk=self.past_ride.pk).exists())
        self.assertEqual(
            list(EventRSVP.objects.filter(user=self.leaver).values_list("event_id", flat=True)),
            [self.last_meeting.id],
        )
        self.open_task.refresh_from_db()
        self.done_task.refresh_from_db()
        self.assertIsNone(self.open_task.assigned_to_id)
        self.assertEqual(self.done_task.assigned_to_id, self.leaver.id)

    def test_leaving_frees_carpool_seat(self):
        self.client.force_authenticate(user=self.leaver)
        resp = self.client.post("/api/core/teams/current/leave/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assert_released()

        self.client.force_authenticate(user=self.driver)
        data = self.client.get(f"/api/transport/carpools/{self.ride.id}/").json()
        self.assertEqual(data["seats_remaining"], 1)
        self.assertEqual(data["riders"], [])

    def test_removed_member_releases_commitments(self):
        self.client.force_authenticate(user=self.admin)
        resp = self.client.delete(f"/api/core/teams/current/members/{self.leaver.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
        self.assert_released()
