from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Tuple

from django.db.models import Q
from rest_framework import permissions

from core.exceptions import InvalidRequest, TransitionDenied

from .models import OPERATIONS_ROLES, STAFF_ROLES, UserRole, parse_role

logger = logging.getLogger(__name__)


def _role_of(user) -> Optional[UserRole]:
    if user is None or not getattr(user, "is_authenticated", False):
        return None
    try:
        return parse_role(getattr(user, "role", None))
    except InvalidRequest:
        logger.warning(f"User {user.pk} carries unknown role {getattr(user, 'role', None)!r}")
        return None


def _has_role(request, roles) -> bool:
    return _role_of(request.user) in roles


class IsStaffRole(permissions.BasePermission):
    """
    Allows access to internal staff: admins, operations and finance managers.
    """
    def has_permission(self, request, view):
        return _has_role(request, STAFF_ROLES)


class IsOperations(permissions.BasePermission):
    """
    Allows access to admins and operations managers.
    """
    def has_permission(self, request, view):
        return _has_role(request, OPERATIONS_ROLES)


class IsAdmin(permissions.BasePermission):
    def has_permission(self, request, view):
        return _has_role(request, {UserRole.ADMIN})


class CanManagePricing(permissions.BasePermission):
    """
    Staff may read pricing configuration and transport rates; only admins may change them.
    """
    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return _has_role(request, STAFF_ROLES)
        return _has_role(request, {UserRole.ADMIN})


# ---- Transition guard ----

@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: str = ""

    def __bool__(self) -> bool:
        return self.allowed


ALLOW = Decision(True)

Rule = Callable[[Optional[object], Optional[object]], Decision]


def is_owner(actor, obj) -> bool:
    """A client owns an entity they created or one billed to their company."""
    if _role_of(actor) != UserRole.CLIENT or obj is None:
        return False
    if getattr(obj, "created_by_id", None) == actor.pk:
        return True
    company_id = getattr(actor, "company_id", None)
    return company_id is not None and getattr(obj, "client_id", None) == company_id


def roles(*allowed: UserRole) -> Rule:
    def rule(actor, obj) -> Decision:
        role = _role_of(actor)
        if role is None:
            return Decision(False, "An authenticated user with a known role is required.")
        if role in allowed:
            return ALLOW
        return Decision(False, f"Role {role.value} is not permitted.")
    return rule


def owner() -> Rule:
    def rule(actor, obj) -> Decision:
        if is_owner(actor, obj):
            return ALLOW
        return Decision(False, "Only the owning client may do this.")
    return rule


def owner_or(*allowed: UserRole) -> Rule:
    by_role = roles(*allowed)

    def rule(actor, obj) -> Decision:
        if is_owner(actor, obj):
            return ALLOW
        decision = by_role(actor, obj)
        if decision:
            return decision
        return Decision(False, "Only the owning client or an administrator may do this.")
    return rule


def system_or(*allowed: UserRole) -> Rule:
    by_role = roles(*allowed)

    def rule(actor, obj) -> Decision:
        if actor is None:
            return ALLOW
        return by_role(actor, obj)
    return rule


_OPS = (UserRole.ADMIN, UserRole.OPERATIONS_MANAGER)

TRANSITION_POLICY: Dict[Tuple[str, str], Rule] = {
    ("quote", "create"): roles(*_OPS, UserRole.CLIENT),
    ("quote", "send"): roles(*_OPS),
    ("quote", "accept"): owner(),
    ("quote", "reject"): owner(),
    ("quote", "start_treatment"): roles(*_OPS),
    ("quote", "validate"): roles(*_OPS),
    ("quote", "cancel"): roles(*_OPS),
    ("quote", "expire"): system_or(UserRole.ADMIN),
    ("quote", "set_payment_method"): owner_or(UserRole.ADMIN),
    ("quote", "mark_payment_received"): roles(*_OPS, UserRole.FINANCE_MANAGER),
    ("pickup", "schedule"): roles(*_OPS),
    ("pickup", "start"): roles(*_OPS),
    ("pickup", "complete"): roles(*_OPS),
    ("pickup", "cancel"): roles(*_OPS),
    ("purchase", "start_treatment"): roles(*_OPS),
    ("purchase", "deliver"): roles(*_OPS),
    ("purchase", "cancel"): roles(*_OPS),
    ("purchase", "update_costs"): roles(*_OPS),
    ("shipment", "record_event"): roles(*_OPS),
    ("pricing_config", "update"): roles(UserRole.ADMIN),
}


def check_transition(entity: str, action: str, actor, obj=None) -> Decision:
    """
    Decide whether `actor` may perform `action` on an entity of type `entity`.

    `actor` is None for system-initiated actions. Pairs missing from the
    policy table are denied.
    """
    rule = TRANSITION_POLICY.get((entity, action))
    if rule is None:
        return Decision(False, f"No policy allows {entity}.{action}.")
    return rule(actor, obj)


def require_transition(entity: str, action: str, actor, obj=None) -> None:
    decision = check_transition(entity, action, actor, obj)
    if not decision.allowed:
        actor_label = getattr(actor, "username", "system")
        logger.warning(f"Denied {entity}.{action} for {actor_label} on {getattr(obj, 'pk', None)}: {decision.reason}")
        raise TransitionDenied(decision.reason)


def visible_to(queryset, user):
    """Staff see everything; other users see what they created or what is billed to their company."""
    if _role_of(user) in STAFF_ROLES:
        return queryset
    owned = Q(created_by=user)
    if getattr(user, "company_id", None):
        owned |= Q(client_id=user.company_id)
    return queryset.filter(owned)
