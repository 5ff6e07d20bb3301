# apps/accounts/authentication.py
from rest_framework import authentication, exceptions

from .models import User


class SessionTokenAuthentication(authentication.BaseAuthentication):
    """
    Authenticate requests using Authorization: Token <session_token>.
    Returns (user, session_token) on success.
    """
    keyword = "Token"

    def authenticate(self, request):
        auth_header = authentication.get_authorization_header(request).decode("utf-8")
        if not auth_header:
            return None
        parts = auth_header.split()
        if len(parts) != 2 or parts[0] != self.keyword:
            return None
        token = parts[1]

        user = User.objects.filter(session_token=token).first()
        if user is None:
            raise exceptions.AuthenticationFailed("Invalid session token.")
        if not user.is_active:
            raise exceptions.AuthenticationFailed("User account is disabled.")
        return (user, token)

    def authenticate_header(self, request):
        return f'{self.keyword} realm="api"'
