from django.core import checks
from django.core.exceptions import ValidationError
from django.test import SimpleTestCase, TestCase, override_settings
from rest_framework import status
from rest_framework.test import APIClient

from .models import User, Identity, OauthContact, validate_email_format
from .status import apply_status

SAVE_CALLS = []


def promote_linked_prospects(user):
    """Test status rule: a prospect with a linked identity becomes a member."""
    if user.is_prospect and user.identities.exists():
        apply_status(user, is_member=True, is_prospect=False)


def save_again(user):
    SAVE_CALLS.append(user.pk)
    user.save()


class EmailFormatTests(SimpleTestCase):
    def test_accepts_common_addresses(self):
        for email in ("user@example.com", "first.last+tag@sub.example.org", "A_B-c@Mail-Host.IO"):
            validate_email_format(email)

    def test_rejects_malformed_addresses(self):
        for email in ("user@", "user@example", "@example.com", "user name@example.com",
                      "user@exa_mple.com", "user@example.c0m", "user@example.com\n"):
            with self.assertRaises(ValidationError, msg=email):
                validate_email_format(email)


class UserCredentialTests(TestCase):
    def test_password_round_trip(self):
        user = User.objects.create_user(email="alice@example.com", password="secret1")
        user.refresh_from_db()
        self.assertTrue(user.password.startswith("bcrypt_sha256$"))
        self.assertTrue(user.check_password("secret1"))
        self.assertFalse(user.check_password("secret2"))

    def test_password_of_five_characters_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            User.objects.create_user(email="short@example.com", password="12345")
        self.assertIn("password", ctx.exception.message_dict)
        self.assertFalse(User.objects.filter(email="short@example.com").exists())

    def test_password_of_six_characters_is_accepted(self):
        user = User.objects.create_user(email="six@example.com", password="123456")
        self.assertTrue(user.check_password("123456"))

    def test_passwordless_account(self):
        user = User.objects.create_user(email="oauth@example.com")
        self.assertFalse(user.has_usable_password())
        self.assertFalse(user.check_password(""))

    def test_invalid_email_is_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            User.objects.create_user(email="not-an-email", password="secret1")
        self.assertIn("email", ctx.exception.message_dict)

    def test_email_is_unique_case_insensitively(self):
        User.objects.create_user(email="Alice@Example.com", password="secret1")
        with self.assertRaises(ValidationError) as ctx:
            User.objects.create_user(email="alice@example.COM", password="secret1")
        self.assertIn("email", ctx.exception.message_dict)
        self.assertEqual(User.objects.count(), 1)

    def test_github_login_is_unique(self):
        User.objects.create_user(email="first@example.com", github_login="octo")
        with self.assertRaises(ValidationError) as ctx:
            User.objects.create_user(email="second@example.com", github_login="octo")
        self.assertIn("github_login", ctx.exception.message_dict)
        self.assertFalse(User.objects.filter(email="second@example.com").exists())

    def test_blank_github_login_does_not_collide(self):
        User.objects.create_user(email="a@example.com", github_login="")
        User.objects.create_user(email="b@example.com", github_login="")
        self.assertEqual(User.objects.filter(github_login__isnull=True).count(), 2)


class SessionTokenTests(TestCase):
    def test_tokens_are_unique_and_long_enough(self):
        first = User.objects.create_user(email="one@example.com")
        second = User.objects.create_user(email="two@example.com")
        self.assertNotEqual(first.session_token, second.session_token)
        # 16 random bytes, base64url encoded
        self.assertGreaterEqual(len(first.session_token), 22)

    def test_token_survives_later_saves(self):
        user = User.objects.create_user(email="keep@example.com", password="secret1")
        token = user.session_token

        user.display_name = "Keeper"
        user.save()
        user.session_token = "forged"
        user.save()

        reloaded = User.objects.get(pk=user.pk)
        self.assertEqual(reloaded.session_token, token)
        reloaded.set_password("another1")
        reloaded.save()
        self.assertEqual(User.objects.get(pk=user.pk).session_token, token)


    def test_token_survives_save_of_rebuilt_instance(self):
        user = User.objects.create_user(email="rebuilt@example.com")
        token = user.session_token

        User(pk=user.pk, email=user.email, session_token="forged", created_at=user.created_at).save()
        self.assertEqual(User.objects.get(pk=user.pk).session_token, token)

        User(pk=user.pk, email=user.email, created_at=user.created_at).save()
        self.assertEqual(User.objects.get(pk=user.pk).session_token, token)


class SystemCheckTests(SimpleTestCase):
    def test_email_uniqueness_warning_is_silenced(self):
        reported = [message.id for message in checks.run_checks() if not message.is_silenced()]
        self.assertNotIn("auth.W004", reported)


class UserRelationTests(TestCase):
    def test_role_scopes(self):
        admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        member = User.objects.create_user(email="member@example.com", is_member=True)
        prospect = User.objects.create_user(email="prospect@example.com", is_prospect=True)
        self.assertEqual(list(User.objects.admins()), [admin])
        self.assertEqual(list(User.objects.members()), [member])
        self.assertEqual(list(User.objects.prospects()), [prospect])

    def test_return_emails(self):
        User.objects.create_user(email="a@example.com")
        User.objects.create_user(email="b@example.com")
        self.assertEqual(User.objects.return_emails(), ["a@example.com", "b@example.com"])

    def test_identity_for_returns_first_linked(self):
        user = User.objects.create_user(email="linked@example.com")
        first = Identity.objects.create(user=user, provider="twitter", oauth_token="t1", oauth_secret="s1")
        Identity.objects.create(user=user, provider="twitter", oauth_token="t2", oauth_secret="s2")
        self.assertEqual(user.identity_for("twitter"), first)
        self.assertIsNone(user.identity_for("linkedin"))

    def test_register_creates_nested_identities(self):
        user = User.register(
            "nested@example.com", "secret1",
            identities=[{"provider": "linkedin", "uid": "abc", "oauth_token": "tok"}],
        )
        self.assertEqual(user.identities.get().provider, "linkedin")

    def test_destroy_removes_owned_records(self):
        user = User.objects.create_user(email="gone@example.com")
        Identity.objects.create(user=user, provider="twitter", oauth_token="t")
        OauthContact.objects.create(user=user, provider="twitter", uid="42", handle="@friend")
        user.destroy()
        self.assertFalse(User.objects.filter(email="gone@example.com").exists())
        self.assertEqual(Identity.objects.count(), 0)
        self.assertEqual(OauthContact.objects.count(), 0)


class StatusPolicyTests(TestCase):
    def test_default_policy_leaves_flags_alone(self):
        user = User.objects.create_user(email="p@example.com", is_prospect=True)
        Identity.objects.create(user=user, provider="linkedin", oauth_token="tok")
        user.refresh_from_db()
        self.assertTrue(user.is_prospect)
        self.assertFalse(user.is_member)

    @override_settings(USER_STATUS_POLICY="apps.accounts.tests.promote_linked_prospects")
    def test_identity_change_reevaluates_status(self):
        user = User.objects.create_user(email="p@example.com", is_prospect=True)
        self.assertFalse(User.objects.get(pk=user.pk).is_member)

        Identity.objects.create(user=user, provider="linkedin", oauth_token="tok")

        user.refresh_from_db()
        self.assertTrue(user.is_member)
        self.assertFalse(user.is_prospect)

    @override_settings(USER_STATUS_POLICY="apps.accounts.tests.save_again")
    def test_policy_that_saves_does_not_recurse(self):
        del SAVE_CALLS[:]
        user = User.objects.create_user(email="loop@example.com")
        self.assertEqual(SAVE_CALLS, [user.pk])


class AccountsApiTests(TestCase):
    def setUp(self):
        self.client = APIClient()

    def test_register_returns_session_token(self):
        resp = self.client.post(
            "/api/v1/auth/register/",
            {"email": "new@example.com", "password": "secret1", "password_confirmation": "secret1"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        user = User.objects.get(email="new@example.com")
        self.assertEqual(resp.data["session_token"], user.session_token)
        self.assertIn("access", resp.data)

    def test_register_rejects_short_password(self):
        resp = self.client.post("/api/v1/auth/register/",
                                {"email": "new@example.com", "password": "12345"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("password", resp.data)
        self.assertFalse(User.objects.exists())

    def test_register_rejects_duplicate_github_login(self):
        User.objects.create_user(email="octo@example.com", github_login="octo")
        resp = self.client.post(
            "/api/v1/auth/register/",
            {"email": "other@example.com", "github_login": "octo", "password": "secret1"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("github_login", resp.data)
        self.assertEqual(User.objects.count(), 1)

    def test_register_rejects_duplicate_email(self):
        User.objects.create_user(email="Taken@Example.com")
        resp = self.client.post("/api/v1/auth/register/",
                                {"email": "taken@example.com", "password": "secret1"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("email", resp.data)

    def test_login_is_case_insensitive_on_email(self):
        User.objects.create_user(email="alice@example.com", password="secret1")
        resp = self.client.post("/api/v1/auth/login/",
                                {"email": "ALICE@example.com", "password": "secret1"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["user"]["email"], "alice@example.com")

    def test_login_with_wrong_password(self):
        User.objects.create_user(email="alice@example.com", password="secret1")
        resp = self.client.post("/api/v1/auth/login/",
                                {"email": "alice@example.com", "password": "secret2"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

    def test_session_token_authenticates(self):
        user = User.objects.create_user(email="tok@example.com")
        self.client.credentials(HTTP_AUTHORIZATION=f"Token {user.session_token}")
        resp = self.client.get("/api/v1/users/me/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["id"], user.pk)
        self.assertNotIn("session_token", resp.data)

    def test_unknown_session_token_is_rejected(self):
        self.client.credentials(HTTP_AUTHORIZATION="Token nope")
        resp = self.client.get("/api/v1/users/me/")
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_update_writes_nested_identities(self):
        user = User.objects.create_user(email="me@example.com")
        old = Identity.objects.create(user=user, provider="twitter", oauth_token="t")
        self.client.force_authenticate(user)
        resp = self.client.patch(
            f"/api/v1/users/{user.pk}/",
            {"display_name": "Me", "identities": [
                {"id": old.pk, "_destroy": True},
                {"provider": "linkedin", "uid": "in-1", "oauth_token": "tok"},
            ]},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(list(user.identities.values_list("provider", flat=True)), ["linkedin"])

    def test_cannot_edit_another_user(self):
        me = User.objects.create_user(email="me@example.com")
        other = User.objects.create_user(email="other@example.com")
        self.client.force_authenticate(me)
        resp = self.client.patch(f"/api/v1/users/{other.pk}/", {"display_name": "x"}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_emails_listing_is_admin_only(self):
        user = User.objects.create_user(email="me@example.com")
        self.client.force_authenticate(user)
        self.assertEqual(self.client.get("/api/v1/users/emails/").status_code, status.HTTP_403_FORBIDDEN)

        admin = User.objects.create_user(email="admin@example.com", is_admin=True)
        self.client.force_authenticate(admin)
        resp = self.client.get("/api/v1/users/emails/")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(sorted(resp.data["emails"]), ["admin@example.com", "me@example.com"])
