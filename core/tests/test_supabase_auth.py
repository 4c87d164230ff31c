import time

import jwt
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

User = get_user_model()

SECRET = "test-supabase-jwt-secret-0123456789abcdef"


def supabase_token(email, secret=SECRET, expires_in=3600, **claims):
    payload = {
        "sub": "0b7c7a4e-6c1f-4f0e-9d1e-2f4b3f3e9a11",
        "email": email,
        "aud": "authenticated",
        "exp": int(time.time()) + expires_in,
        "user_metadata": {"first_name": "Riley", "last_name": "Chen"},
    }
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@override_settings(SUPABASE_JWT_SECRET=SECRET)
class SupabaseJWTAuthenticationTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()

    def test_first_login_creates_local_user(self):
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {supabase_token('riley@example.com')}")
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)

        user = User.objects.get(email="riley@example.com")
        self.assertEqual(user.username, "riley")
        self.assertEqual(user.first_name, "Riley")
        self.assertFalse(user.has_usable_password())

    def test_existing_user_matched_by_email(self):
        User.objects.create_user(username="riley", email="Riley@Example.com", password="pass")
        User.objects.create_user(username="riley_1", password="pass")

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {supabase_token('riley@example.com')}")
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.json()["username"], "riley")
        self.assertEqual(User.objects.count(), 2)

    def test_expired_token_rejected(self):
        token = supabase_token("riley@example.com", expires_in=-60)
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        resp = self.client.get("/api/auth/me/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_foreign_token_falls_through(self):
        token = supabase_token("riley@example.com", secret="someone-elses-supabase-secret-0123456789")
        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {token}")
        resp = self.client.get("/api/auth/me/")
        self.assertIn(resp.status_code, (status.HTTP_401_UNAUTHORIZED, status.HTTP_403_FORBIDDEN))
        self.assertFalse(User.objects.filter(email="riley@example.com").exists())
