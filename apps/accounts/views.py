"""
Accounts views.

- Register & Login return the user's session token plus a SimpleJWT pair.
- Logout blacklists the refresh token when the blacklist app is installed.
- Users may read the directory; only admins or the user themselves may change a user.
"""
import logging

from django.contrib.auth import login as django_login, logout as django_logout
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema, extend_schema_view, OpenApiResponse
from rest_framework import filters, mixins, permissions, serializers, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .models import User, Identity, OauthContact
from .serializers import (
    IdentitySerializer,
    LoginSerializer,
    OauthContactSerializer,
    UserCreateSerializer,
    UserSerializer,
)

logger = logging.getLogger(__name__)


# -----------------------------
# Permissions
# -----------------------------
class IsSelfOrAdmin(permissions.BasePermission):
    """Read for any authenticated user; writes only by the user themselves or an admin."""
    def has_object_permission(self, request, view, obj):
        if request.method in permissions.SAFE_METHODS:
            return True
        return obj == request.user or getattr(request.user, "is_admin", False)


# -----------------------------
# Token helpers
# -----------------------------
class AuthTokensSerializer(serializers.Serializer):
    session_token = serializers.CharField(read_only=True)
    access = serializers.CharField(read_only=True)
    refresh = serializers.CharField(read_only=True)
    token_type = serializers.CharField(default="Bearer", read_only=True)


def issue_tokens_for_user(user: User) -> dict:
    refresh = RefreshToken.for_user(user)
    return {
        "session_token": user.session_token,
        "access": str(refresh.access_token),
        "refresh": str(refresh),
        "token_type": "Bearer",
    }


# -----------------------------
# Auth endpoints: Register/Login/Logout
# -----------------------------
@extend_schema_view(
    create=extend_schema(
        summary="Register a new account",
        description="Create a user (password optional) and return session token, JWT pair and user payload.",
        request=UserCreateSerializer,
        responses={201: OpenApiResponse(response=UserSerializer)},
        tags=["Auth", "Users"],
    )
)
class RegisterView(mixins.CreateModelMixin, viewsets.GenericViewSet):
    queryset = User.objects.all()
    serializer_class = UserCreateSerializer
    permission_classes = [AllowAny]
    authentication_classes = []

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        logger.info("user %s registered", user.pk)

        user_payload = UserSerializer(user, context={"request": request}).data
        return Response({**user_payload, **issue_tokens_for_user(user)}, status=status.HTTP_201_CREATED)


@extend_schema(
    summary="Login (email or GitHub login + password)",
    request=LoginSerializer,
    responses={200: AuthTokensSerializer},
    tags=["Auth"],
)
class LoginView(APIView):
    permission_classes = [AllowAny]
    authentication_classes = []

    def post(self, request):
        serializer = LoginSerializer(data=request.data, context={"request": request})
        serializer.is_valid(raise_exception=True)
        user = serializer.validated_data["user"]
        django_login(request._request, user, backend="apps.accounts.auth_backends.EmailOrLoginBackend")
        logger.info("user %s logged in", user.pk)

        return Response(
            {
                **issue_tokens_for_user(user),
                "user": UserSerializer(user, context={"request": request}).data,
            },
            status=status.HTTP_200_OK,
        )


class LogoutSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False)


@extend_schema(
    summary="Logout",
    description="Ends the Django session and, if a refresh token is passed, blacklists it when supported.",
    request=LogoutSerializer,
    tags=["Auth"],
)
class LogoutView(APIView):
    permission_classes = (IsAuthenticated,)

    def post(self, request):
        data = LogoutSerializer(data=request.data or {})
        data.is_valid(raise_exception=True)
        refresh = data.validated_data.get("refresh")
        if refresh:
            try:
                RefreshToken(refresh).blacklist()
            except (TokenError, AttributeError):
                # invalid token, or token_blacklist app not installed
                logger.debug("refresh token not blacklisted for user %s", request.user.pk)
        django_logout(request._request)
        return Response(status=status.HTTP_204_NO_CONTENT)


# -----------------------------
# Users
# -----------------------------
@extend_schema_view(
    list=extend_schema(summary="List users"),
    retrieve=extend_schema(summary="Retrieve user"),
    me=extend_schema(summary="Get current authenticated user"),
)
class UserViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.UpdateModelMixin,
                  mixins.DestroyModelMixin,
                  viewsets.GenericViewSet):
    queryset = User.objects.prefetch_related("identities").all()
    serializer_class = UserSerializer
    permission_classes = (IsAuthenticated, IsSelfOrAdmin)
    filter_backends = [DjangoFilterBackend, filters.SearchFilter, filters.OrderingFilter]
    filterset_fields = ["is_admin", "is_member", "is_prospect"]
    search_fields = ["email", "display_name", "github_login"]
    ordering_fields = ["created_at", "email"]

    def perform_destroy(self, instance):
        instance.destroy()

    @action(detail=False, methods=["get"])
    def me(self, request):
        return Response(self.get_serializer(request.user).data)

    @action(detail=False, methods=["get"], url_path="emails")
    def emails(self, request):
        if not request.user.is_admin:
            return Response({"detail": "Admins only."}, status=status.HTTP_403_FORBIDDEN)
        return Response({"emails": User.objects.return_emails()})


# -----------------------------
# Identities / contacts of the current user
# -----------------------------
@extend_schema_view(
    list=extend_schema(summary="List my linked identities"),
    create=extend_schema(summary="Link a provider identity"),
    destroy=extend_schema(summary="Unlink a provider identity"),
)
class IdentityViewSet(mixins.ListModelMixin,
                      mixins.CreateModelMixin,
                      mixins.DestroyModelMixin,
                      viewsets.GenericViewSet):
    serializer_class = IdentitySerializer
    permission_classes = (IsAuthenticated,)
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["provider"]

    def get_queryset(self):
        return Identity.objects.filter(user=self.request.user).order_by("id")

    def perform_create(self, serializer):
        identity = serializer.save(user=self.request.user)
        logger.info("user %s linked %s", self.request.user.pk, identity.provider)


@extend_schema_view(list=extend_schema(summary="List my imported contacts"))
class OauthContactViewSet(mixins.ListModelMixin, viewsets.GenericViewSet):
    serializer_class = OauthContactSerializer
    permission_classes = (IsAuthenticated,)
    filter_backends = [DjangoFilterBackend, filters.SearchFilter]
    filterset_fields = ["provider"]
    search_fields = ["name", "handle"]

    def get_queryset(self):
        return OauthContact.objects.filter(user=self.request.user).order_by("name")
