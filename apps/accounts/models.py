"""
Accounts models: users, their linked provider identities and imported contacts.

 - Password hashing through Django's hashers (bcrypt first, see PASSWORD_HASHERS)
 - Minimum password length checked in the validation pass, before anything is saved
 - Opaque session token assigned once, on first insert
 - Case-insensitive email uniqueness (validation + functional unique index)
 - Role flags (admin / member / prospect) are independent booleans
"""
import re
import secrets
from typing import List, Optional

from django.conf import settings
from django.contrib.auth import password_validation
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin
from django.core.exceptions import ValidationError
from django.core.validators import RegexValidator
from django.db import models, transaction, IntegrityError
from django.db.models.functions import Lower
from django.utils import timezone

SESSION_TOKEN_BYTES = getattr(settings, "SESSION_TOKEN_BYTES", 16)

VALID_EMAIL_REGEX = re.compile(r"\A[\w+\-.]+@[a-z\d\-.]+\.[a-z]+\Z", re.IGNORECASE | re.ASCII)

validate_email_format = RegexValidator(
    regex=VALID_EMAIL_REGEX,
    message="Enter a valid email address.",
    code="invalid_email",
)


def generate_session_token() -> str:
    """URL-safe random token; 16 bytes gives 128 bits of entropy."""
    return secrets.token_urlsafe(SESSION_TOKEN_BYTES)


# ---------------------------------------------------------------------
# User manager
# ---------------------------------------------------------------------
class UserQuerySet(models.QuerySet):
    def admins(self):
        return self.filter(is_admin=True)

    def members(self):
        return self.filter(is_member=True)

    def prospects(self):
        return self.filter(is_prospect=True)

    def with_email(self, email: str):
        return self.filter(email__iexact=(email or "").strip())


class UserManager(BaseUserManager.from_queryset(UserQuerySet)):
    use_in_migrations = True

    def _create_user(self, *, email: str, password: Optional[str], **extra):
        """
        Creates and saves a User. The validation pipeline (format, uniqueness,
        password length) runs before the INSERT; nothing is written on failure.
        """
        if not email:
            raise ValidationError({"email": ["Email is required."]})
        email = email.strip()
        github_login = extra.pop("github_login", None) or None

        user = self.model(email=email, github_login=github_login, **extra)
        user.set_password(password)

        try:
            with transaction.atomic():
                user.full_clean(exclude=["password", "session_token"])
                user.save(using=self._db)
        except IntegrityError as e:
            raise ValidationError({"email": ["Duplicate or invalid data."]}) from e
        return user

    def create_user(self, email: str, password: Optional[str] = None, **extra):
        extra.setdefault("is_admin", False)
        extra.setdefault("is_staff", False)
        extra.setdefault("is_superuser", False)
        return self._create_user(email=email, password=password, **extra)

    def create_superuser(self, email: str, password: str, **extra):
        if not password:
            raise ValueError("Superuser must have a password")
        extra.setdefault("is_admin", True)
        extra.setdefault("is_staff", True)
        extra.setdefault("is_superuser", True)
        if extra.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")
        return self._create_user(email=email, password=password, **extra)

    def get_by_natural_key(self, key: str):
        return self.get(email__iexact=key)

    def return_emails(self) -> List[str]:
        emails = []
        for email in self.order_by("id").values_list("email", flat=True):
            if email not in emails:
                emails.append(email)
        return emails


# ---------------------------------------------------------------------
# User model
# ---------------------------------------------------------------------
class User(AbstractBaseUser, PermissionsMixin):
    email = models.CharField(max_length=254, validators=[validate_email_format], db_index=True)
    github_login = models.CharField(max_length=100, unique=True, blank=True, null=True)
    display_name = models.CharField(max_length=200, blank=True, null=True)

    # role flags, not mutually exclusive
    is_admin = models.BooleanField(default=False, db_index=True)
    is_member = models.BooleanField(default=False, db_index=True)
    is_prospect = models.BooleanField(default=False, db_index=True)

    session_token = models.CharField(max_length=64, unique=True, editable=False)

    # Django
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(default=timezone.now, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = "email"
    EMAIL_FIELD = "email"
    REQUIRED_FIELDS = []

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(
                Lower("email"),
                name="accounts_user_email_ci_unique",
                violation_error_message="A user with this email already exists.",
            ),
        ]
        verbose_name = "User"
        verbose_name_plural = "Users"

    def __str__(self) -> str:
        return self.email or self.github_login or f"User {self.pk}"

    # ---------- credentials ----------
    def set_password(self, raw_password: Optional[str]) -> None:
        """
        Hash and store the password. None makes the account passwordless.
        The plaintext stays on the instance until clean()/save() validates it.
        """
        if raw_password is None:
            self.set_unusable_password()
            self._password = None
            return
        super().set_password(raw_password)

    def clean(self):
        super().clean()
        errors = {}
        if self.email:
            self.email = self.email.strip()
            taken = User.objects.with_email(self.email).exclude(pk=self.pk).exists()
            if taken:
                errors["email"] = ["A user with this email already exists."]
        if not self.github_login:
            self.github_login = None
        if self._password is not None:
            try:
                password_validation.validate_password(self._password, self)
            except ValidationError as exc:
                errors["password"] = list(exc.messages)
        if errors:
            raise ValidationError(errors)

    @classmethod
    def from_db(cls, db, field_names, values):
        instance = super().from_db(db, field_names, values)
        instance._stored_session_token = instance.__dict__.get("session_token")
        return instance

    def _persisted_session_token(self) -> Optional[str]:
        stored = getattr(self, "_stored_session_token", None)
        if stored is None and self.pk is not None:
            # instance built by hand around an existing row
            stored = type(self)._default_manager.filter(pk=self.pk).values_list(
                "session_token", flat=True
            ).first()
        return stored

    def save(self, *args, **kwargs):
        stored = self._persisted_session_token()
        if stored:
            # issued once; later saves never change it
            self.session_token = stored
        elif not self.session_token:
            self.session_token = generate_session_token()
        super().save(*args, **kwargs)
        self._stored_session_token = self.session_token

    @classmethod
    def register(cls, email: str, password: Optional[str] = None, **extra) -> "User":
        """Create a user with optional nested identities. Use from registration endpoints."""
        identities = extra.pop("identities", None) or []
        with transaction.atomic():
            user = cls.objects.create_user(email=email, password=password, **extra)
            for identity in identities:
                Identity.objects.create(user=user, **identity)
            return user

    def destroy(self) -> None:
        """Delete the user and everything it owns in one transaction."""
        with transaction.atomic():
            self.identities.all().delete()
            self.oauth_contacts.all().delete()
            self.connections.all().delete()
            self.user_projects.all().delete()
            self.payment_approvals.all().delete()
            self.delete()

    # ---------- project relations ----------
    def administered_project_ids(self) -> List[int]:
        return list(self.created_projects.values_list("id", flat=True))

    def user_project(self, project):
        return self.user_projects.filter(project=project).first()

    def followed_projects(self):
        return self._connected_projects("follower")

    def precommitted_projects(self):
        return self._connected_projects("precommitted")

    def _connected_projects(self, type_of: str):
        return [c.project for c in self.connections.filter(type_of=type_of).select_related("project")]

    def projects_invested_in(self):
        from apps.projects.models import Project
        return Project.objects.filter(payment_approvals__backer=self).distinct()

    # ---------- identities ----------
    def identity_for(self, provider: str) -> Optional["Identity"]:
        return self.identities.filter(provider=provider).order_by("id").first()


# ---------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------
class Identity(models.Model):
    class Provider(models.TextChoices):
        TWITTER = "twitter", "Twitter"
        LINKEDIN = "linkedin", "LinkedIn"
        GITHUB = "github", "GitHub"
        BOX = "box", "Box"

    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="identities")
    provider = models.CharField(max_length=32, choices=Provider.choices, db_index=True)
    uid = models.CharField(max_length=255, blank=True, null=True)
    nickname = models.CharField(max_length=255, blank=True, null=True)
    oauth_token = models.TextField()
    oauth_secret = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        # one per provider is expected, not enforced
        indexes = [models.Index(fields=["user", "provider"], name="acc_identity_user_prov_idx")]
        verbose_name_plural = "Identities"

    def __str__(self):
        return f"Identity({self.provider}, {self.user_id})"


class OauthContact(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="oauth_contacts")
    provider = models.CharField(max_length=32, choices=Identity.Provider.choices)
    uid = models.CharField(max_length=255)
    name = models.CharField(max_length=255, blank=True)
    handle = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        indexes = [models.Index(fields=["user", "provider"], name="acc_contact_user_prov_idx")]

    def __str__(self):
        return self.handle or self.name or self.uid
