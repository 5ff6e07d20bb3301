"""
Serializers for accounts app. Registration/login validation, nested identities,
and read-only protection for role flags and the session token.
"""
from django.contrib.auth import authenticate
from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from rest_framework import serializers

from .models import User, Identity, OauthContact


def _as_drf_error(exc: DjangoValidationError) -> serializers.ValidationError:
    return serializers.ValidationError(exc.message_dict if hasattr(exc, "error_dict") else exc.messages)


# -------------------------------------------------------------------
# Identity serializers
# -------------------------------------------------------------------
class IdentitySerializer(serializers.ModelSerializer):
    oauth_token = serializers.CharField(write_only=True)
    oauth_secret = serializers.CharField(write_only=True, required=False, allow_null=True, allow_blank=True)

    class Meta:
        model = Identity
        fields = ["id", "provider", "uid", "nickname", "oauth_token", "oauth_secret", "created_at"]
        read_only_fields = ("id", "created_at")


class NestedIdentitySerializer(IdentitySerializer):
    """Identity entry inside a user payload; `_destroy: true` removes it."""
    id = serializers.IntegerField(required=False)
    oauth_token = serializers.CharField(write_only=True, required=False)
    _destroy = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta(IdentitySerializer.Meta):
        fields = IdentitySerializer.Meta.fields + ["_destroy"]


class OauthContactSerializer(serializers.ModelSerializer):
    class Meta:
        model = OauthContact
        fields = ["id", "provider", "uid", "name", "handle", "created_at"]
        read_only_fields = fields


# -------------------------------------------------------------------
# User serializers
# -------------------------------------------------------------------
class UserSerializer(serializers.ModelSerializer):
    identities = NestedIdentitySerializer(many=True, required=False)

    class Meta:
        model = User
        fields = [
            "id", "email", "github_login", "display_name",
            "is_admin", "is_member", "is_prospect",
            "identities", "created_at", "updated_at",
        ]
        read_only_fields = ("id", "is_admin", "is_member", "is_prospect", "created_at", "updated_at")

    def validate_email(self, value):
        value = value.strip()
        taken = User.objects.with_email(value)
        if self.instance is not None:
            taken = taken.exclude(pk=self.instance.pk)
        if taken.exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value

    def update(self, instance, validated_data):
        identities = validated_data.pop("identities", None)
        with transaction.atomic():
            for attr, value in validated_data.items():
                setattr(instance, attr, value)
            try:
                instance.full_clean(exclude=["password", "session_token"])
            except DjangoValidationError as exc:
                raise _as_drf_error(exc)
            instance.save()
            if identities is not None:
                self._write_identities(instance, identities)
        return instance

    def _write_identities(self, user, entries):
        for entry in entries:
            entry = dict(entry)
            identity_id = entry.pop("id", None)
            destroy = entry.pop("_destroy", False)
            if identity_id is None:
                if destroy:
                    continue
                if not entry.get("oauth_token"):
                    raise serializers.ValidationError({"identities": [_("oauth_token is required.")]})
                Identity.objects.create(user=user, **entry)
                continue
            identity = user.identities.filter(pk=identity_id).first()
            if identity is None:
                raise serializers.ValidationError({"identities": [_("Unknown identity %s.") % identity_id]})
            if destroy:
                identity.delete()
                continue
            for attr, value in entry.items():
                setattr(identity, attr, value)
            identity.save()


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, required=False, allow_null=True, trim_whitespace=False)
    password_confirmation = serializers.CharField(write_only=True, required=False, allow_null=True,
                                                  trim_whitespace=False)
    identities = IdentitySerializer(many=True, required=False)

    class Meta:
        model = User
        fields = ("email", "github_login", "display_name", "password", "password_confirmation", "identities")

    def validate(self, attrs):
        password = attrs.get("password")
        confirmation = attrs.pop("password_confirmation", None)
        if password is not None and confirmation is not None and password != confirmation:
            raise serializers.ValidationError({"password": "Password fields didn't match."})
        return attrs

    def create(self, validated_data):
        raw_password = validated_data.pop("password", None)
        try:
            return User.register(password=raw_password, **validated_data)
        except DjangoValidationError as exc:
            raise _as_drf_error(exc)


class LoginSerializer(serializers.Serializer):
    email = serializers.CharField(write_only=True)
    password = serializers.CharField(write_only=True, trim_whitespace=False)

    def validate(self, attrs):
        req = self.context.get("request")
        if hasattr(req, "_request"):
            req = req._request

        user = authenticate(request=req, username=attrs.get("email"), password=attrs.get("password"))
        if user is None:
            raise serializers.ValidationError({"detail": _("Invalid credentials.")})
        if not user.is_active:
            raise serializers.ValidationError({"detail": _("User account is disabled.")})
        attrs["user"] = user
        return attrs
