"""Access token issuance.

Tokens carry the identity subject (`email`) and the caller's `role`, fixed
at sign-in time. Authentication rejects tokens missing either claim.
"""

from rest_framework_simplejwt.tokens import RefreshToken

EMAIL_CLAIM = "email"
ROLE_CLAIM = "role"


def refresh_token_for(user) -> RefreshToken:
    """Return a refresh token whose derived access tokens embed email and role."""
    refresh = RefreshToken.for_user(user)
    refresh[EMAIL_CLAIM] = user.email
    refresh[ROLE_CLAIM] = str(user.role)
    return refresh


def issue_token_pair(user) -> dict:
    refresh = refresh_token_for(user)
    return {"access": str(refresh.access_token), "refresh": str(refresh)}
