from types import SimpleNamespace

from django.contrib.auth.models import AnonymousUser
from django.test import TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.models import User
from common.exceptions import NotAuthorized
from common.policies import (
    AuthorshipPolicy,
    Decision,
    authorize,
    decide,
    policy_for,
    policy_scope,
)

from .models import Message
from .policies import MessagePolicy


class MessagePolicyTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        self.member_a = User.objects.create_user(email="a@example.com", is_member=True)
        self.plain_b = User.objects.create_user(email="b@example.com")
        self.message = Message.objects.create(author=self.member_a, body="hello")

    def test_registered_policy(self):
        self.assertIs(policy_for(self.message), MessagePolicy)
        self.assertIs(policy_for(Message), MessagePolicy)

    def test_admin_can_destroy_any_message(self):
        self.assertIs(decide(self.admin, "destroy", self.message), Decision.ALLOW)
        self.assertIs(decide(self.admin, "update", self.message), Decision.ALLOW)

    def test_author_can_update_and_destroy(self):
        self.assertTrue(decide(self.member_a, "update", self.message))
        self.assertTrue(decide(self.member_a, "destroy", self.message))

    def test_non_author_non_admin_is_denied(self):
        self.assertIs(decide(self.plain_b, "destroy", self.message), Decision.DENY)
        self.assertIs(decide(self.plain_b, "update", self.message), Decision.DENY)

    def test_member_may_create_own_message(self):
        draft = Message(author=self.member_a, body="draft")
        self.assertIs(decide(self.member_a, "create", draft), Decision.ALLOW)

    def test_create_requires_actor_to_be_author(self):
        draft = Message(author=self.member_a, body="draft")
        self.assertIs(decide(self.plain_b, "create", draft), Decision.DENY)
        self.assertIs(decide(self.admin, "create", draft), Decision.DENY)

    def test_create_requires_member_or_admin(self):
        draft = Message(author=self.plain_b, body="draft")
        self.assertIs(decide(self.plain_b, "create", draft), Decision.DENY)
        own = Message(author=self.admin, body="draft")
        self.assertIs(decide(self.admin, "create", own), Decision.ALLOW)

    def test_anonymous_actor_is_denied(self):
        self.assertIs(decide(AnonymousUser(), "update", self.message), Decision.DENY)
        self.assertIs(decide(None, "destroy", self.message), Decision.DENY)

    def test_unknown_action_is_denied(self):
        self.assertIs(decide(self.admin, "publish", self.message), Decision.DENY)

    def test_decisions_are_stable(self):
        first = decide(self.plain_b, "destroy", self.message)
        second = decide(self.plain_b, "destroy", self.message)
        self.assertIs(first, second)
        self.assertTrue(Message.objects.filter(pk=self.message.pk).exists())

    def test_authorize_raises_on_deny(self):
        with self.assertRaises(NotAuthorized):
            authorize(self.plain_b, "destroy", self.message)
        authorize(self.admin, "destroy", self.message)

    def test_default_policy_for_plain_records(self):
        record = SimpleNamespace(author=self.member_a)
        self.assertIs(policy_for(record), AuthorshipPolicy)
        self.assertTrue(decide(self.member_a, "update", record))
        self.assertFalse(decide(self.plain_b, "update", record))


class MessageScopeTests(TestCase):
    def setUp(self):
        self.admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        self.alice = User.objects.create_user(email="alice@example.com", is_member=True)
        self.bob = User.objects.create_user(email="bob@example.com", is_member=True)
        self.carol = User.objects.create_user(email="carol@example.com")
        self.to_bob = Message.objects.create(author=self.alice, recipient=self.bob, body="hi bob")
        self.to_carol = Message.objects.create(author=self.bob, recipient=self.carol, body="hi carol")

    def test_admin_scope_is_everything(self):
        self.assertEqual(set(policy_scope(self.admin, Message.objects.all())), {self.to_bob, self.to_carol})

    def test_non_admin_scope_is_own_correspondence(self):
        self.assertEqual(set(policy_scope(self.alice, Message.objects.all())), {self.to_bob})
        self.assertEqual(set(policy_scope(self.bob, Message.objects.all())), {self.to_bob, self.to_carol})
        self.assertEqual(set(policy_scope(self.carol, Message.objects.all())), {self.to_carol})

    def test_anonymous_scope_is_empty(self):
        self.assertEqual(list(policy_scope(AnonymousUser(), Message.objects.all())), [])


class MessageApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        self.member = User.objects.create_user(email="member@example.com", is_member=True)
        self.outsider = User.objects.create_user(email="outsider@example.com")

    def test_member_can_write_message(self):
        self.client.force_authenticate(self.member)
        resp = self.client.post("/api/v1/messages/", {"subject": "Hi", "body": "Hello"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["author"], self.member.pk)

    def test_roleless_user_cannot_write_message(self):
        self.client.force_authenticate(self.outsider)
        resp = self.client.post("/api/v1/messages/", {"body": "Hello"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["status_code"], 403)
        self.assertFalse(Message.objects.exists())

    def test_non_author_cannot_delete(self):
        message = Message.objects.create(author=self.member, recipient=self.outsider, body="x")
        self.client.force_authenticate(self.outsider)
        resp = self.client.delete(f"/api/v1/messages/{message.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Message.objects.filter(pk=message.pk).exists())

    def test_admin_can_delete(self):
        message = Message.objects.create(author=self.member, body="x")
        self.client.force_authenticate(self.admin)
        resp = self.client.delete(f"/api/v1/messages/{message.pk}/")
        self.assertEqual(resp.status_code, status.HTTP_204_NO_CONTENT)

    def test_listing_is_scoped(self):
        Message.objects.create(author=self.member, body="private")
        self.client.force_authenticate(self.outsider)
        resp = self.client.get("/api/v1/messages/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["meta"]["count"], 0)

        self.client.force_authenticate(self.admin)
        resp = self.client.get("/api/v1/messages/")
        self.assertEqual(resp.data["meta"]["count"], 1)
