from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.models import Team

User = get_user_model()


class AuthFlowTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def signup(self, **overrides):
        payload = {
            "username": "newbie",
            "email": "Newbie@Example.com",
            "password": "gearbox123",
            "first_name": "New",
            "last_name": "Member",
        }
        payload.update(overrides)
        return self.client.post("/api/auth/signup/", payload, format="json")

    def test_signup_login_me(self):
        resp = self.signup()
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        user = User.objects.get(username="newbie")
        self.assertEqual(user.email, "newbie@example.com")
        self.assertEqual(user.role, User.ROLE_STUDENT)
        self.assertIsNone(user.team_id)

        resp = self.client.post("/api/auth/login/", {
            "email": "NEWBIE@example.com",
            "password": "gearbox123",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        access = resp.json()["access"]

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.json()["username"], "newbie")
        self.assertIsNone(resp.json()["team"])
        self.assertTrue(resp.json()["needs_team"])

    def test_signup_cannot_choose_role(self):
        self.signup(role="admin")
        self.assertEqual(User.objects.get(username="newbie").role, User.ROLE_STUDENT)

    def test_duplicate_email_rejected(self):
        self.signup()
        resp = self.signup(username="other", email="newbie@example.com")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_short_password_rejected(self):
        resp = self.signup(password="short")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_wrong_password(self):
        self.signup()
        resp = self.client.post("/api/auth/login/", {
            "email": "newbie@example.com",
            "password": "wrong-password",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_reports_team(self):
        self.signup()
        user = User.objects.get(username="newbie")
        user.team = Team.objects.create(name="Ninjas", team_number=4146, program="ftc")
        user.save()

        resp = self.client.post("/api/auth/login/", {
            "email": "newbie@example.com",
            "password": "gearbox123",
        }, format="json")
        data = resp.json()
        self.assertIn("refresh", data)
        self.assertFalse(data["user"]["needs_team"])
        self.assertEqual(data["user"]["team"]["team_number"], 4146)
        self.assertEqual(data["user"]["team"]["program"], "ftc")
