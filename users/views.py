"""Users app API views.

Endpoints include:
- signin: exchanges email + password for an access/refresh token pair.
- refresh: issues a new access token from a refresh token.
- me: returns the current authenticated user's profile.
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.throttling import ScopedRateThrottle
from rest_framework.views import APIView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .logging import log_auth_event
from .serializers import EmailTokenObtainPairSerializer, UserMeSerializer


class CurrentUserView(APIView):
    """Return the authenticated user's basic profile fields."""

    permission_classes = [IsAuthenticated]
    throttle_scope = "profile"

    @extend_schema(
        operation_id="users_current_user",
        summary="Get current user profile",
        description=(
            "Returns the current authenticated user's profile.\n\n"
            "Auth: Requires an access token (Authorization: Bearer <token>).\n\n"
            "Errors: 401 if the token is missing, invalid or expired; 403 if the email is not registered."
        ),
        tags=["User Endpoints"],
        responses={
            200: OpenApiResponse(description="User profile", response=UserMeSerializer),
            401: OpenApiResponse(description="Unauthorized"),
        },
    )
    def get(self, request):
        log_auth_event("profile", request, user=request.user)
        return Response({"message": "Profile fetched", "user": UserMeSerializer(request.user).data})


class SignInView(TokenObtainPairView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "signin"
    serializer_class = EmailTokenObtainPairSerializer

    @extend_schema(tags=["User Endpoints"], summary="Sign in with email and password")
    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except Exception:
            log_auth_event("signin", request, status="failed", extra={"email": request.data.get("email")})
            raise
        log_auth_event("signin", request, status="success", extra={"email": request.data.get("email")})
        return resp


class RefreshView(TokenRefreshView):
    throttle_classes = [ScopedRateThrottle]
    throttle_scope = "token_refresh"

    @extend_schema(tags=["User Endpoints"], summary="Refresh access token")
    def post(self, request, *args, **kwargs):
        try:
            resp = super().post(request, *args, **kwargs)
        except Exception:
            log_auth_event("token_refresh", request, status="failed")
            raise
        log_auth_event("token_refresh", request, status="success")
        return resp
