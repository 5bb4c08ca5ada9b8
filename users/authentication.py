"""Bearer token authentication resolving the identity subject to a local user.

Outcomes:
- no `Authorization` header: anonymous (permissions decide, usually 401).
- expired token: 401 "Token expired".
- malformed, tampered or claim-less token: 401 "Invalid token".
- valid token for an email absent from the user directory: 403 "User not registered".
"""

from datetime import datetime, timezone

from common.choices import UserRole
from django.contrib.auth import get_user_model
from rest_framework.exceptions import AuthenticationFailed, PermissionDenied
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken

from .tokens import EMAIL_CLAIM, ROLE_CLAIM


class EmailIdentityAuthentication(JWTAuthentication):
    """Verify an access token and map its `email` claim to a `User`."""

    def get_validated_token(self, raw_token):
        try:
            return AccessToken(raw_token)
        except TokenError:
            if _is_expired(raw_token):
                raise AuthenticationFailed("Token expired", code="token_expired")
            raise AuthenticationFailed("Invalid token", code="token_not_valid")

    def get_user(self, validated_token):
        email = validated_token.get(EMAIL_CLAIM)
        role = validated_token.get(ROLE_CLAIM)
        if not email or role not in UserRole.values:
            raise AuthenticationFailed("Invalid token", code="token_not_valid")

        User = get_user_model()
        try:
            user = User.objects.get(email=str(email).strip().lower())
        except User.DoesNotExist:
            raise PermissionDenied("User not registered")

        if not user.is_active:
            raise AuthenticationFailed("User is inactive", code="user_inactive")
        # Role is fixed when the session is issued; a changed role needs a new sign-in.
        if user.role != role:
            raise AuthenticationFailed("Invalid token", code="token_not_valid")
        return user


def _is_expired(raw_token) -> bool:
    try:
        unverified = AccessToken(raw_token, verify=False)
    except TokenError:
        return False
    exp = unverified.payload.get("exp")
    if not isinstance(exp, (int, float)):
        return False
    return datetime.fromtimestamp(exp, tz=timezone.utc) <= datetime.now(tz=timezone.utc)
