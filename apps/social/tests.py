import json
from unittest import mock

import requests
import tweepy
from django.test import SimpleTestCase, TestCase
from rest_framework import status
from rest_framework.test import APIClient

from apps.accounts.models import Identity, User
from apps.projects.models import Project
from common.exceptions import NoLinkedIdentity, ProviderCallFailed, ValidationFailed

from . import services
from .adapters.box_adapter import BOX_VIEW_API_URL
from .adapters.http import TimeoutSession
from .adapters.linkedin_adapter import LINKEDIN_MAILBOX_URL, mailbox_payload
from .config import ProviderCredentials

CREDENTIALS = ProviderCredentials(
    twitter_consumer_key="consumer-key",
    twitter_consumer_secret="consumer-secret",
    box_view_api_token="box-token",
    http_timeout=5.0,
)


def fake_response(status_code, payload=None, text=None):
    resp = mock.Mock(spec=requests.Response)
    resp.status_code = status_code
    if text is not None:
        resp.content = text.encode()
        resp.text = text
        resp.json.side_effect = ValueError("not json")
    elif payload is None:
        resp.content = b""
        resp.text = ""
    else:
        resp.text = json.dumps(payload)
        resp.content = resp.text.encode()
        resp.json.return_value = payload
    return resp


class ProviderCredentialsTests(SimpleTestCase):
    def test_repr_hides_secrets(self):
        text = repr(CREDENTIALS)
        self.assertNotIn("consumer-secret", text)
        self.assertNotIn("box-token", text)
        self.assertIn("twitter_configured=True", text)

    def test_unconfigured_by_default(self):
        empty = ProviderCredentials()
        self.assertFalse(empty.twitter_configured)
        self.assertFalse(empty.box_configured)


class TimeoutSessionTests(SimpleTestCase):
    @mock.patch.object(requests.Session, "request")
    def test_default_timeout_is_applied(self, request):
        TimeoutSession(7.5).request("GET", "https://api.twitter.com/2/users/me", params={"a": "b"})
        request.assert_called_once_with("GET", "https://api.twitter.com/2/users/me", params={"a": "b"}, timeout=7.5)

    @mock.patch.object(requests.Session, "request")
    def test_explicit_timeout_wins(self, request):
        TimeoutSession(7.5).request("POST", "https://api.twitter.com/2/tweets", timeout=1)
        self.assertEqual(request.call_args.kwargs["timeout"], 1)


class TwitterDispatchTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="tweeter@example.com", is_member=True)

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_tweet_without_identity_makes_no_call(self, client_cls):
        with self.assertRaises(NoLinkedIdentity) as ctx:
            services.post_tweet(self.user, "hello", CREDENTIALS)
        self.assertEqual(ctx.exception.provider, "twitter")
        client_cls.assert_not_called()

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_tweet_uses_linked_identity(self, client_cls):
        Identity.objects.create(user=self.user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        client_cls.return_value.create_tweet.return_value = tweepy.Response(
            data={"id": "1", "text": "hello"}, includes={}, errors=[], meta={}
        )

        result = services.post_tweet(self.user, "hello", CREDENTIALS)

        client_cls.assert_called_once_with(
            consumer_key="consumer-key",
            consumer_secret="consumer-secret",
            access_token="tok",
            access_token_secret="sec",
        )
        client_cls.return_value.create_tweet.assert_called_once_with(text="hello", user_auth=True)
        self.assertTrue(result.ok)
        self.assertEqual(result.payload, {"id": "1", "text": "hello"})

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_direct_message_resolves_screen_name(self, client_cls):
        Identity.objects.create(user=self.user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        client = client_cls.return_value
        client.get_user.return_value = tweepy.Response(
            data=mock.Mock(id=42), includes={}, errors=[], meta={}
        )
        client.create_direct_message.return_value = tweepy.Response(
            data={"dm_event_id": "9"}, includes={}, errors=[], meta={}
        )

        result = services.send_twitter_direct_message(self.user, "@friend", "psst", CREDENTIALS)

        client.get_user.assert_called_once_with(username="friend", user_auth=True)
        client.create_direct_message.assert_called_once_with(participant_id=42, text="psst", user_auth=True)
        self.assertEqual(result.action, "dm")

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_failed_tweet_raises_provider_error(self, client_cls):
        Identity.objects.create(user=self.user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        client_cls.return_value.create_tweet.side_effect = tweepy.TweepyException("rate limited")

        with self.assertRaises(ProviderCallFailed) as ctx:
            services.post_tweet(self.user, "hello", CREDENTIALS)
        self.assertEqual(ctx.exception.provider, "twitter")
        self.assertEqual(ctx.exception.payload, {"messages": ["rate limited"]})

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_client_session_carries_timeout(self, client_cls):
        Identity.objects.create(user=self.user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        client_cls.return_value.create_tweet.return_value = tweepy.Response(
            data={"id": "1"}, includes={}, errors=[], meta={}
        )

        services.post_tweet(self.user, "hello", CREDENTIALS)

        session = client_cls.return_value.session
        self.assertIsInstance(session, TimeoutSession)
        self.assertEqual(session.timeout, 5.0)

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_missing_app_credentials(self, client_cls):
        Identity.objects.create(user=self.user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        with self.assertRaises(ProviderCallFailed):
            services.post_tweet(self.user, "hello", ProviderCredentials())
        client_cls.assert_not_called()


class LinkedInDispatchTests(TestCase):
    def setUp(self):
        self.user = User.objects.create_user(email="linked@example.com", is_member=True)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_message_without_identity_makes_no_call(self, post):
        with self.assertRaises(NoLinkedIdentity):
            services.send_linkedin_message(self.user, "abc", "Hi", "Body", CREDENTIALS)
        post.assert_not_called()

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_message_posts_mailbox_payload(self, post):
        Identity.objects.create(user=self.user, provider="linkedin", oauth_token="li-token")
        post.return_value = fake_response(201)

        result = services.send_linkedin_message(self.user, "abc", "Hi", "Body", CREDENTIALS)

        args, kwargs = post.call_args
        self.assertEqual(args[0], LINKEDIN_MAILBOX_URL)
        self.assertEqual(kwargs["params"], {"oauth2_access_token": "li-token"})
        self.assertEqual(json.loads(kwargs["data"]), mailbox_payload("abc", "Hi", "Body"))
        self.assertEqual(kwargs["headers"]["Content-Type"], "application/json")
        self.assertEqual(kwargs["timeout"], 5.0)
        self.assertEqual(result.status_code, 201)
        self.assertIsNone(result.payload)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_rejected_message_carries_provider_payload(self, post):
        Identity.objects.create(user=self.user, provider="linkedin", oauth_token="li-token")
        post.return_value = fake_response(401, {"message": "expired token"})

        with self.assertRaises(ProviderCallFailed) as ctx:
            services.send_linkedin_message(self.user, "abc", "Hi", "Body", CREDENTIALS)
        self.assertEqual(ctx.exception.provider_status, 401)
        self.assertEqual(ctx.exception.payload, {"message": "expired token"})

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_transport_error(self, post):
        Identity.objects.create(user=self.user, provider="linkedin", oauth_token="li-token")
        post.side_effect = requests.ConnectionError("boom")
        with self.assertRaises(ProviderCallFailed):
            services.send_linkedin_message(self.user, "abc", "Hi", "Body", CREDENTIALS)

    def test_mailbox_payload_shape(self):
        self.assertEqual(mailbox_payload("xyz", "S", "B"), {
            "recipients": {"values": [{"person": {"_path": "/people/xyz"}}]},
            "subject": "S",
            "body": "B",
        })


class BoxDispatchTests(TestCase):
    def setUp(self):
        self.project = Project.objects.create(title="Deck", pitchdeck_url="https://files.example.com/deck.pdf")

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_accepted_document_id_is_stored(self, post):
        post.return_value = fake_response(202, {"id": "doc-123", "status": "queued"})

        result = services.create_box_document(self.project, CREDENTIALS)

        args, kwargs = post.call_args
        self.assertEqual(args[0], f"{BOX_VIEW_API_URL}/documents")
        self.assertEqual(kwargs["headers"]["Authorization"], "Token box-token")
        self.assertEqual(json.loads(kwargs["data"]), {"url": "https://files.example.com/deck.pdf"})
        self.assertEqual(result.status_code, 202)
        self.project.refresh_from_db()
        self.assertEqual(self.project.box_api_doc_id, "doc-123")

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_other_success_status_does_not_store_id(self, post):
        post.return_value = fake_response(201, {"id": "doc-123"})
        services.create_box_document(self.project, CREDENTIALS)
        self.project.refresh_from_db()
        self.assertIsNone(self.project.box_api_doc_id)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_rejected_document_leaves_project_untouched(self, post):
        post.return_value = fake_response(400, {"message": "bad url"})
        with self.assertRaises(ProviderCallFailed) as ctx:
            services.create_box_document(self.project, CREDENTIALS)
        self.assertEqual(ctx.exception.payload, {"message": "bad url"})
        self.project.refresh_from_db()
        self.assertIsNone(self.project.box_api_doc_id)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_malformed_response(self, post):
        post.return_value = fake_response(202, text="<html>oops</html>")
        with self.assertRaises(ProviderCallFailed) as ctx:
            services.create_box_document(self.project, CREDENTIALS)
        self.assertEqual(ctx.exception.payload, "<html>oops</html>")
        self.project.refresh_from_db()
        self.assertIsNone(self.project.box_api_doc_id)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_project_without_deck(self, post):
        project = Project.objects.create(title="No deck")
        with self.assertRaises(ValidationFailed):
            services.create_box_document(project, CREDENTIALS)
        post.assert_not_called()

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_session_for_document(self, post):
        post.return_value = fake_response(201, {"id": "sess-1", "urls": {"view": "https://view"}})

        result = services.create_box_session("doc-123", CREDENTIALS)

        args, kwargs = post.call_args
        self.assertEqual(args[0], f"{BOX_VIEW_API_URL}/sessions")
        self.assertEqual(json.loads(kwargs["data"]), {"document_id": "doc-123", "duration": 60})
        self.assertEqual(result.payload["id"], "sess-1")


class DispatchTableTests(TestCase):
    def test_unsupported_action(self):
        user = User.objects.create_user(email="x@example.com")
        with self.assertRaises(ValidationFailed):
            services.dispatch(user, "box", "tweet", {}, CREDENTIALS)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_routes_linkedin_message(self, post):
        user = User.objects.create_user(email="x@example.com")
        Identity.objects.create(user=user, provider="linkedin", oauth_token="li-token")
        post.return_value = fake_response(201)
        result = services.dispatch(user, "linkedin", "message",
                                   {"recipient": "abc", "subject": "Hi", "body": "Body"}, CREDENTIALS)
        self.assertEqual(result.provider, "linkedin")

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_missing_payload_keys_fail_before_any_call(self, client_cls):
        user = User.objects.create_user(email="x@example.com")
        Identity.objects.create(user=user, provider="twitter", oauth_token="tok", oauth_secret="sec")

        with self.assertRaises(ValidationFailed) as ctx:
            services.dispatch(user, "twitter", "tweet", {}, CREDENTIALS)
        self.assertIn("payload", ctx.exception.detail)

        with self.assertRaises(ValidationFailed) as ctx:
            services.dispatch(user, "twitter", "dm", {"body": "psst"}, CREDENTIALS)
        self.assertIn("recipient", str(ctx.exception.detail["payload"][0]))

        with self.assertRaises(ValidationFailed):
            services.dispatch(user, "linkedin", "message", None, CREDENTIALS)
        client_cls.assert_not_called()

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_routes_tweet(self, client_cls):
        user = User.objects.create_user(email="x@example.com")
        Identity.objects.create(user=user, provider="twitter", oauth_token="tok", oauth_secret="sec")
        client_cls.return_value.create_tweet.return_value = tweepy.Response(
            data={"id": "7"}, includes={}, errors=[], meta={}
        )
        result = services.dispatch(user, "twitter", "tweet", {"body": "hello"}, CREDENTIALS)
        self.assertEqual((result.provider, result.action), ("twitter", "tweet"))


@mock.patch("apps.social.views.get_provider_credentials", return_value=CREDENTIALS)
class ProviderApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()
        self.user = User.objects.create_user(email="api@example.com", is_member=True)
        self.client.force_authenticate(self.user)

    @mock.patch("apps.social.adapters.twitter_adapter.tweepy.Client")
    def test_tweet_without_identity_is_422(self, client_cls, _creds):
        resp = self.client.post("/api/v1/providers/twitter/messages/",
                                {"method": "tweet", "tweet_body": "hello"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(resp.data["provider"], "twitter")
        client_cls.assert_not_called()

    def test_dm_requires_screen_name(self, _creds):
        resp = self.client.post("/api/v1/providers/twitter/messages/",
                                {"method": "dm", "tweet_body": "hello"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("screen_name", resp.data)

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_linkedin_failure_is_502_with_provider_response(self, post, _creds):
        Identity.objects.create(user=self.user, provider="linkedin", oauth_token="li-token")
        post.return_value = fake_response(403, {"message": "throttled"})
        resp = self.client.post("/api/v1/providers/linkedin/messages/",
                                {"linkedin_id": "abc", "subject": "Hi", "body": "Body"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(resp.data["provider"], "linkedin")
        self.assertEqual(resp.data["provider_status"], 403)
        self.assertEqual(resp.data["provider_response"], {"message": "throttled"})

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_linkedin_success(self, post, _creds):
        Identity.objects.create(user=self.user, provider="linkedin", oauth_token="li-token")
        post.return_value = fake_response(201)
        resp = self.client.post("/api/v1/providers/linkedin/messages/",
                                {"linkedin_id": "abc", "body": "Body"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertTrue(resp.data["ok"])

    @mock.patch("apps.social.adapters.http.requests.post")
    def test_box_document_endpoint(self, post, _creds):
        project = Project.objects.create(title="Deck", pitchdeck_url="https://files.example.com/deck.pdf")
        post.return_value = fake_response(202, {"id": "doc-9"})
        resp = self.client.post("/api/v1/providers/box/documents/", {"project_id": project.pk}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["payload"], {"id": "doc-9"})
        project.refresh_from_db()
        self.assertEqual(project.box_api_doc_id, "doc-9")

    def test_requires_authentication(self, _creds):
        self.client.force_authenticate(None)
        resp = self.client.post("/api/v1/providers/box/sessions/", {"doc_id": "doc-9"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
