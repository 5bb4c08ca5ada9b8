"""User models for authentication and order ownership.

The custom `User` extends Django's `AbstractUser` with a unique, normalized
email (the identity subject carried in access tokens) and an explicit role.
"""

from common.choices import UserRole
from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Custom user with unique email and a closed role enumeration.

    Fields:
    - email: the identity subject, unique at the database level (normalized).
    - role: `user` or `admin`; decides access to administrative order endpoints.
    """

    ROLE_USER = UserRole.USER
    ROLE_ADMIN = UserRole.ADMIN
    ROLE_CHOICES = UserRole.choices

    email = models.EmailField(unique=True)
    role = models.CharField(max_length=16, choices=ROLE_CHOICES, default=ROLE_USER, db_index=True)

    class Meta:
        constraints = [
            models.CheckConstraint(name="user_role_valid", condition=models.Q(role__in=UserRole.values)),
        ]

    def save(self, *args, **kwargs):
        """Normalize email so uniqueness checks and identity lookups agree."""
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    @property
    def display_name(self) -> str:
        return self.get_full_name() or self.username
