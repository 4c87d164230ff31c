from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from core.models import Team
from messaging.mentions import extract_handles
from messaging.models import Mention, Message

User = get_user_model()


class MentionParsingTestCase(TestCase):
    def test_extract_handles(self):
        self.assertEqual(
            extract_handles("@sam can you check @mechanical? thanks @sam."),
            ["sam", "mechanical"],
        )

    def test_handles_dedupe_ignoring_case(self):
        self.assertEqual(extract_handles("@Sam then @sam again"), ["Sam"])

    def test_email_addresses_are_not_mentions(self):
        self.assertEqual(extract_handles("mail coach@example.com"), [])


class MessageApiTestCase(TestCase):
    def setUp(self):
        cache.clear()
        self.client = APIClient()
        self.team = Team.objects.create(name="Bit Buckets", team_number=4183)
        self.admin = User.objects.create_user(username="mentor", password="pass", role="admin", team=self.team)
        self.sam = User.objects.create_user(
            username="sam", password="pass", first_name="Sam", last_name="Lee",
            team=self.team, expertise=["programming"],
        )
        other_team = Team.objects.create(name="Far Away", team_number=4184)
        self.outsider = User.objects.create_user(username="alex", password="pass", team=other_team)
        self.client.force_authenticate(user=self.admin)

    def test_post_records_user_and_category_mentions(self):
        resp = self.client.post("/api/messaging/messages/", {
            "content": "@sam and @programming please review, cc @alex @nobody",
        }, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        message = Message.objects.get(pk=resp.json()["id"])
        mentions = Mention.objects.filter(message=message)
        self.assertEqual(mentions.filter(mentioned_user=self.sam).count(), 1)
        self.assertEqual(mentions.filter(mentioned_category="programming").count(), 1)
        # Users on other teams are not mentionable
        self.assertEqual(mentions.count(), 2)

    def test_mentions_match_username_in_any_case(self):
        resp = self.client.post("/api/messaging/messages/", {"content": "@SAM and @Programming"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)

        mentions = Mention.objects.filter(message_id=resp.json()["id"])
        self.assertEqual(mentions.filter(mentioned_user=self.sam).count(), 1)
        self.assertEqual(mentions.filter(mentioned_category="programming").count(), 1)

    def test_resource_category_only_for_resources(self):
        resp = self.client.post("/api/messaging/messages/", {
            "content": "Drivetrain CAD",
            "message_type": "resource",
        }, format="json")
        self.assertEqual(resp.json()["resource_category"], Message.RESOURCE_GENERAL)

        resp = self.client.post("/api/messaging/messages/", {
            "content": "hello",
            "message_type": "chat",
            "resource_category": "cad",
        }, format="json")
        self.assertIsNone(resp.json()["resource_category"])

    def test_empty_message_rejected(self):
        resp = self.client.post("/api/messaging/messages/", {"content": "   "}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_splits_pinned_and_counts_types(self):
        pinned = Message.objects.create(team=self.team, user=self.admin, content="Read the rules", is_pinned=True)
        Message.objects.create(team=self.team, user=self.sam, content="Robot code pushed")
        Message.objects.create(team=self.team, user=self.sam, content="Slides", message_type="resource",
                               resource_category="general")

        resp = self.client.get("/api/messaging/messages/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        data = resp.json()
        self.assertEqual([m["id"] for m in data["pinned"]], [pinned.id])
        self.assertEqual(len(data["messages"]), 2)
        self.assertEqual(data["counts"]["chat"], 2)
        self.assertEqual(data["counts"]["resource"], 1)

        resp = self.client.get("/api/messaging/messages/?search=lee")
        data = resp.json()
        self.assertEqual(len(data["messages"]) + len(data["pinned"]), 2)

        resp = self.client.get("/api/messaging/messages/?type=resource")
        self.assertEqual([m["content"] for m in resp.json()["messages"]], ["Slides"])

    def test_mentions_me_filter(self):
        self.client.post("/api/messaging/messages/", {"content": "@programming standup"}, format="json")
        self.client.post("/api/messaging/messages/", {"content": "general note"}, format="json")

        self.client.force_authenticate(user=self.sam)
        resp = self.client.get("/api/messaging/messages/?mentions=me")
        contents = [m["content"] for m in resp.json()["messages"]]
        self.assertEqual(contents, ["@programming standup"])

    def test_pin_toggles(self):
        message = Message.objects.create(team=self.team, user=self.admin, content="Pin me")
        self.client.force_authenticate(user=self.sam)

        resp = self.client.post(f"/api/messaging/messages/{message.id}/pin/")
        self.assertTrue(resp.json()["is_pinned"])
        resp = self.client.post(f"/api/messaging/messages/{message.id}/pin/")
        self.assertFalse(resp.json()["is_pinned"])

    def test_messages_are_team_scoped(self):
        message = Message.objects.create(team=self.team, user=self.admin, content="Team only")
        self.client.force_authenticate(user=self.outsider)

        resp = self.client.get("/api/messaging/messages/")
        self.assertEqual(resp.json()["messages"], [])
        resp = self.client.post(f"/api/messaging/messages/{message.id}/pin/")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_own_or_admin(self):
        message = Message.objects.create(team=self.team, user=self.admin, content="Mine")
        self.client.force_authenticate(user=self.sam)
        resp = self.client.delete(f"/api/messaging/messages/{message.id}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin)
        resp = self.client.delete(f"/api/messaging/messages/{message.id}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)
