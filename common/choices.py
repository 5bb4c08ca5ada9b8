"""Shared enumerations and choices used across apps."""

from django.db import models


class UserRole(models.TextChoices):
    """Closed set of roles an authenticated identity can hold."""

    USER = "user", "User"
    ADMIN = "admin", "Admin"


class OrderStatus(models.TextChoices):
    """Lifecycle statuses for orders.

    One enumeration serves both order creation (always `pending`) and
    administrative status updates.
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    SHIPPED = "shipped", "Shipped"
    DELIVERED = "delivered", "Delivered"
    CANCELLED = "cancelled", "Cancelled"
