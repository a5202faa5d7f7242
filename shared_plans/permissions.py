"""Role-based access to shared plans.

A user's role is derived on every request from the plan row and its
memberships; nothing here is cached or persisted.
"""
import logging
from typing import Optional

from rest_framework.exceptions import PermissionDenied

from .models import ROLE_EDITOR, ROLE_OWNER, ROLE_VIEWER, PlanMembership, SharedPlan


logger = logging.getLogger(__name__)

VIEW = 'view'
POST_MESSAGE = 'post_message'
MANAGE = 'manage'
EDIT_TASKS = 'edit_tasks'
CHANGE_ROLES = 'change_roles'
REMOVE_MEMBERS = 'remove_members'
DELETE = 'delete'

ROLE_ACTIONS = {
    ROLE_OWNER: frozenset({VIEW, POST_MESSAGE, MANAGE, EDIT_TASKS, CHANGE_ROLES, REMOVE_MEMBERS, DELETE}),
    ROLE_EDITOR: frozenset({VIEW, POST_MESSAGE, MANAGE, EDIT_TASKS}),
    ROLE_VIEWER: frozenset({VIEW, POST_MESSAGE}),
}


def effective_role(plan: SharedPlan, user_id) -> Optional[str]:
    """Return ``owner``, the stored member role, or ``None`` for non-members."""
    if user_id is None:
        return None
    if plan.owner_id == user_id:
        return ROLE_OWNER
    role = (
        PlanMembership.objects.filter(plan=plan, user_id=user_id)
        .values_list('role', flat=True)
        .first()
    )
    # Owner rows never exist in memberships, so only editor/viewer count
    if role in (ROLE_EDITOR, ROLE_VIEWER):
        return role
    return None


def role_allows(role: Optional[str], action: str) -> bool:
    return action in ROLE_ACTIONS.get(role, frozenset())


def has_permission(plan: SharedPlan, user_id, action: str) -> bool:
    return role_allows(effective_role(plan, user_id), action)


def require_permission(plan: SharedPlan, user, action: str, message: str = 'Not authorized') -> str:
    """Return the caller's role or raise 403 without touching the plan."""
    role = effective_role(plan, user.pk)
    if not role_allows(role, action):
        logger.warning("User %s (role=%s) denied %s on plan %s", user.pk, role, action, plan.pk)
        raise PermissionDenied(message)
    return role
