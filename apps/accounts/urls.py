from django.urls import path, include
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenRefreshView, TokenVerifyView

from .views import (
    IdentityViewSet,
    LoginView,
    LogoutView,
    OauthContactViewSet,
    RegisterView,
    UserViewSet,
)

router = DefaultRouter()
router.register(r"auth/register", RegisterView, basename="auth-register")
router.register(r"users", UserViewSet, basename="users")
router.register(r"identities", IdentityViewSet, basename="identities")
router.register(r"contacts", OauthContactViewSet, basename="contacts")

urlpatterns = [
    path("auth/login/", LoginView.as_view(), name="auth-login"),
    path("auth/logout/", LogoutView.as_view(), name="auth-logout"),
    path("auth/jwt/refresh/", TokenRefreshView.as_view(), name="jwt-refresh"),
    path("auth/jwt/verify/", TokenVerifyView.as_view(), name="jwt-verify"),

    path("", include(router.urls)),
]
