from datetime import timedelta

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient

from core.constants import ACTIVITY_TASK_COMPLETED, ACTIVITY_TASK_REOPENED
from core.models import DomainActivity, Team
from tasks.models import Task

User = get_user_model()


class TaskApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Cyber Knights", team_number=3946)
        self.admin = User.objects.create_user(username="lead", password="pass", role="admin", team=self.team)
        self.student = User.objects.create_user(username="pat", password="pass", team=self.team)
        other_team = Team.objects.create(name="Other", team_number=3947)
        self.outsider = User.objects.create_user(username="far", password="pass", team=other_team)

        self.client.force_authenticate(user=self.student)

    def test_create_task_always_starts_todo(self):
        resp = self.client.post("/api/tasks/", {
            "title": "Wire the PDH",
            "status": "done",
            "priority": "high",
            "tags": "electrical, wiring, electrical",
            "due_date": (timezone.now() + timedelta(days=3)).isoformat(),
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        data = resp.json()
        self.assertEqual(data["status"], Task.STATUS_TODO)
        self.assertEqual(data["tags"], ["electrical", "wiring"])
        self.assertEqual(data["created_by"], self.student.id)

    def test_cannot_assign_outside_team(self):
        resp = self.client.post("/api/tasks/", {
            "title": "Sneaky",
            "assigned_to": self.outsider.id,
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filters(self):
        Task.objects.create(team=self.team, title="Bumpers", created_by=self.admin, assigned_to=self.student)
        Task.objects.create(team=self.team, title="Autonomous paths", created_by=self.admin,
                            priority=Task.PRIORITY_URGENT)
        Task.objects.create(team=self.team, title="Sponsor letters", created_by=self.admin,
                            status=Task.STATUS_DONE)

        resp = self.client.get("/api/tasks/?assignee=me")
        self.assertEqual([t["title"] for t in resp.json()], ["Bumpers"])

        resp = self.client.get("/api/tasks/?assignee=unassigned&priority=urgent")
        self.assertEqual([t["title"] for t in resp.json()], ["Autonomous paths"])

        resp = self.client.get("/api/tasks/?status=done")
        self.assertEqual([t["title"] for t in resp.json()], ["Sponsor letters"])

        resp = self.client.get("/api/tasks/?search=sponsor")
        self.assertEqual(len(resp.json()), 1)

        resp = self.client.get("/api/tasks/?assignee=nobody")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_toggle_logs_completion_and_reopen(self):
        task = Task.objects.create(team=self.team, title="Bumpers", created_by=self.student)

        resp = self.client.post(f"/api/tasks/{task.id}/toggle/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["status"], Task.STATUS_DONE)
        self.assertTrue(DomainActivity.objects.filter(verb=ACTIVITY_TASK_COMPLETED, object_id=task.id).exists())

        resp = self.client.post(f"/api/tasks/{task.id}/toggle/")
        self.assertEqual(resp.json()["status"], Task.STATUS_TODO)
        self.assertTrue(DomainActivity.objects.filter(verb=ACTIVITY_TASK_REOPENED, object_id=task.id).exists())

    def test_edit_and_delete_permissions(self):
        task = Task.objects.create(team=self.team, title="Admin task", created_by=self.admin)

        resp = self.client.patch(f"/api/tasks/{task.id}/", {"title": "Mine now"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        resp = self.client.delete(f"/api/tasks/{task.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        resp = self.client.delete(f"/api/tasks/{task.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)

    def test_other_team_task_not_found(self):
        task = Task.objects.create(team=self.team, title="Private", created_by=self.admin)
        self.client.force_authenticate(user=self.outsider)
        resp = self.client.get(f"/api/tasks/{task.id}/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_stats(self):
        Task.objects.create(team=self.team, title="A", created_by=self.admin, status=Task.STATUS_DONE)
        Task.objects.create(team=self.team, title="B", created_by=self.admin, status=Task.STATUS_REVIEW)
        Task.objects.create(team=self.team, title="C", created_by=self.admin)

        resp = self.client.get("/api/tasks/stats/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual(data["completed"], 1)
        self.assertEqual(data["total"], 3)
        self.assertEqual(data["progress_percentage"], 33)
        self.assertEqual(data["by_status"]["review"], 1)

    def test_stats_with_no_tasks(self):
        resp = self.client.get("/api/tasks/stats/")
        self.assertEqual(resp.json()["progress_percentage"], 0)
