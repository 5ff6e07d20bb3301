# accounts/auth_backends.py
from typing import Optional

from django.contrib.auth.backends import ModelBackend
from django.db.models import Q

from .models import User


class EmailOrLoginBackend(ModelBackend):
    """
    Auth with email (case-insensitive) or GitHub login.
    Passwordless accounts never authenticate here; they sign in through a provider.
    """

    def authenticate(self, request, username: Optional[str] = None, password: Optional[str] = None, **kwargs):
        ident = kwargs.get("email") or username
        if not ident or not password:
            return None
        ident = str(ident).strip()

        user = User.objects.filter(Q(email__iexact=ident) | Q(github_login=ident)).first()
        if user is None:
            # run the hasher anyway so timing doesn't reveal unknown accounts
            User().set_password(password)
            return None

        if not user.check_password(password) or not self.user_can_authenticate(user):
            return None
        return user
