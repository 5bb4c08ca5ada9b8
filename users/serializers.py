"""Serializers for sign-in and profile data.

- UserMeSerializer: read-only profile data for the authenticated user.
- EmailTokenObtainPairSerializer: obtain JWTs with email and password; the
  access token carries the `email` and `role` claims.
"""

from rest_framework import serializers

from .models import User
from .tokens import issue_token_pair


class UserMeSerializer(serializers.ModelSerializer):
    """Serializer returning basic profile fields for the current user."""

    class Meta:
        model = User
        fields = ["id", "username", "email", "first_name", "last_name", "role"]


class EmailTokenObtainPairSerializer(serializers.Serializer):
    """Obtain an access/refresh token pair by email and password."""

    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs):
        email = attrs["email"].strip().lower()
        try:
            user = User.objects.get(email=email)
        except User.DoesNotExist:
            user = None

        if not user or not user.check_password(attrs["password"]) or not user.is_active:
            raise serializers.ValidationError({"detail": "Invalid credentials"})

        self.user = user
        return issue_token_pair(user)
