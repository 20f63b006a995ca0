# backend/accounts/models.py

from django.contrib.auth.models import AbstractUser
from django.db import models


class UserRole(models.TextChoices):
    ADMIN = "ADMIN", "Administrator"
    OPERATIONS_MANAGER = "OPERATIONS_MANAGER", "Operations manager"
    FINANCE_MANAGER = "FINANCE_MANAGER", "Finance manager"
    CLIENT = "CLIENT", "Client"
    VIEWER = "VIEWER", "Viewer"


STAFF_ROLES = frozenset({UserRole.ADMIN, UserRole.OPERATIONS_MANAGER, UserRole.FINANCE_MANAGER})
OPERATIONS_ROLES = frozenset({UserRole.ADMIN, UserRole.OPERATIONS_MANAGER})


def parse_role(value) -> UserRole:
    """Map a stored or submitted role value onto UserRole, rejecting anything unknown."""
    from core.exceptions import InvalidRequest

    if isinstance(value, UserRole):
        return value
    normalized = str(value or "").strip().upper()
    try:
        return UserRole(normalized)
    except ValueError:
        raise InvalidRequest({"role": f"Unknown role '{value}'."})


class CustomUser(AbstractUser):
    role = models.CharField(max_length=32, choices=UserRole.choices, default=UserRole.CLIENT)
    company = models.ForeignKey(
        "core.Company", null=True, blank=True, on_delete=models.SET_NULL, related_name="users"
    )
    phone = models.CharField(max_length=50, blank=True)

    @property
    def user_role(self) -> UserRole:
        return parse_role(self.role)

    @property
    def is_staff_role(self) -> bool:
        return self.user_role in STAFF_ROLES

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
