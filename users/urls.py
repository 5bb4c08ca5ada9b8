"""Authentication routes grouped under /api/v1/auth/.

Includes JWT obtain (sign-in), refresh, and the current profile.
"""

from django.urls import path

from .views import CurrentUserView, RefreshView, SignInView

urlpatterns = [
    path("auth/signin/", SignInView.as_view(), name="signin"),
    path("auth/refresh/", RefreshView.as_view(), name="token_refresh"),
    path("auth/me/", CurrentUserView.as_view(), name="current-user"),
]
