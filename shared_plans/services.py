import logging
from datetime import timezone as dt_timezone
from typing import Any, Dict, List, Optional, Tuple

from django.conf import settings
from django.contrib.auth.models import User
from django.db import IntegrityError, transaction
from django.db.models import Q
from django.utils import timezone
from django.utils.dateparse import parse_datetime
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError

from accounts.utils import user_summary
from notifications.services import notify
from .models import (
    ROLE_EDITOR, PlanInvitation, PlanMembership, PlanMessage, PlanTask, SharedPlan,
)
from . import permissions


logger = logging.getLogger(__name__)

PLAN_NAME_MAX = 100
PLAN_DESCRIPTION_MAX = 500
TASK_TITLE_MAX = 200
TASK_DESCRIPTION_MAX = 1000
MESSAGE_MAX = 2000

MEMBER_ROLES = {choice for choice, _ in PlanMembership.ROLE_CHOICES}
TASK_STATUSES = {choice for choice, _ in PlanTask.STATUS_CHOICES}
INVITATION_ACTIONS = {'accept', 'decline'}


def _parse_id(value, label):
    if value is None or value == '':
        return None
    if isinstance(value, bool):
        raise ValidationError(f'Invalid {label}')
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Invalid {label}')


def _clean_text(value, label, max_length, required=False):
    if value is None:
        value = ''
    if not isinstance(value, str):
        raise ValidationError(f'{label} must be a string')
    value = value.strip()
    if required and not value:
        raise ValidationError(f'{label} is required')
    if len(value) > max_length:
        raise ValidationError(f'{label} is too long (max {max_length} characters)')
    return value


class SharedPlanService:
    """Operations on shared plans performed on behalf of ``actor``.

    Every method re-derives the actor's role from the database and raises a
    DRF exception (400/403/404) before mutating anything.
    """

    def __init__(self, actor: User):
        self.actor = actor

    # Plans

    def get_plan(self, plan_id) -> SharedPlan:
        plan = SharedPlan.objects.select_related('owner__profile').filter(pk=plan_id).first()
        if plan is None:
            raise NotFound('Plan not found')
        return plan

    def list_plans(self) -> List[Tuple[SharedPlan, str]]:
        plans = (
            SharedPlan.objects.filter(Q(owner=self.actor) | Q(memberships__user=self.actor))
            .select_related('owner__profile')
            .distinct()
            .order_by('-updated_at')
        )
        return [(plan, permissions.effective_role(plan, self.actor.pk)) for plan in plans]

    def create_plan(self, name, description=None) -> SharedPlan:
        name = _clean_text(name, 'Plan name', PLAN_NAME_MAX, required=True)
        description = _clean_text(description, 'Description', PLAN_DESCRIPTION_MAX)
        plan = SharedPlan.objects.create(name=name, description=description, owner=self.actor)
        logger.info("User %s created shared plan %s", self.actor.pk, plan.pk)
        return plan

    def view_plan(self, plan_id) -> Tuple[SharedPlan, str]:
        plan = self.get_plan(plan_id)
        role = permissions.require_permission(plan, self.actor, permissions.VIEW)
        return plan, role

    def update_plan(self, plan_id, changes: Dict[str, Any]) -> SharedPlan:
        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.MANAGE, 'Not authorized to edit this plan')

        if 'name' in changes:
            if not isinstance(changes['name'], str) or not changes['name'].strip():
                raise ValidationError('Plan name cannot be empty')
            plan.name = _clean_text(changes['name'], 'Plan name', PLAN_NAME_MAX, required=True)
        if 'description' in changes:
            plan.description = _clean_text(changes['description'], 'Description', PLAN_DESCRIPTION_MAX)
        plan.save()
        logger.info("User %s updated shared plan %s", self.actor.pk, plan.pk)
        return plan

    def delete_plan(self, plan_id) -> None:
        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.DELETE, 'Only the owner can delete this plan')
        # Members, tasks, invitations and messages go with the plan or not at all
        with transaction.atomic():
            deleted, per_model = plan.delete()
        logger.info("User %s deleted shared plan %s (%s rows: %s)", self.actor.pk, plan_id, deleted, per_model)

    # Invitations

    def list_plan_invitations(self, plan_id) -> List[PlanInvitation]:
        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.MANAGE)
        return list(
            plan.invitations.filter(status=PlanInvitation.STATUS_PENDING)
            .select_related('invited_user__profile', 'invited_by__profile')
        )

    def invite(self, plan_id, user_id, role=ROLE_EDITOR) -> PlanInvitation:
        user_id = _parse_id(user_id, 'user ID')
        if user_id is None:
            raise ValidationError('User ID is required')
        if not isinstance(role, str) or role not in MEMBER_ROLES:
            raise ValidationError('Invalid role')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.MANAGE, 'Not authorized to invite')

        invited_user = User.objects.filter(pk=user_id, is_active=True).first()
        if invited_user is None:
            raise NotFound('User not found')
        if plan.owner_id == user_id or plan.memberships.filter(user_id=user_id).exists():
            raise ValidationError('User is already a member')
        if plan.invitations.filter(invited_user_id=user_id, status=PlanInvitation.STATUS_PENDING).exists():
            raise ValidationError('Invitation already sent')

        try:
            with transaction.atomic():
                invitation = PlanInvitation.objects.create(
                    plan=plan,
                    invited_by=self.actor,
                    invited_user=invited_user,
                    role=role,
                )
        except IntegrityError:
            # Lost a race with a concurrent invite for the same user
            raise ValidationError('Invitation already sent')

        logger.info("User %s invited user %s to plan %s as %s", self.actor.pk, user_id, plan.pk, role)
        notify(
            invited_user.pk,
            'Plan Invitation',
            f'{_display_name(self.actor)} invited you to join "{plan.name}"',
            kind='system',
            related_id=invitation.pk,
        )
        return invitation

    def cancel_invitation(self, plan_id, invitation_id) -> None:
        invitation_id = _parse_id(invitation_id, 'invitation ID')
        if invitation_id is None:
            raise ValidationError('Invitation ID is required')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.MANAGE)

        invitation = plan.invitations.filter(pk=invitation_id).first()
        if invitation is None:
            raise NotFound('Invitation not found')
        if not invitation.is_pending:
            raise ValidationError('Only pending invitations can be cancelled')
        # Cancelling removes the row; declining only marks it
        invitation.delete()
        logger.info("User %s cancelled invitation %s on plan %s", self.actor.pk, invitation_id, plan.pk)

    def received_invitations(self) -> List[PlanInvitation]:
        return list(
            PlanInvitation.objects.filter(invited_user=self.actor, status=PlanInvitation.STATUS_PENDING)
            .select_related('plan', 'invited_by__profile')
        )

    def respond_to_invitation(self, invitation_id, action) -> PlanInvitation:
        invitation_id = _parse_id(invitation_id, 'invitation ID')
        if invitation_id is None or not action:
            raise ValidationError('Invitation ID and action required')
        if not isinstance(action, str) or action not in INVITATION_ACTIONS:
            raise ValidationError('Invalid action')

        invitation = PlanInvitation.objects.select_related('plan').filter(pk=invitation_id).first()
        if invitation is None:
            raise NotFound('Invitation not found')
        if invitation.invited_user_id != self.actor.pk:
            logger.warning("User %s tried to answer invitation %s addressed to %s",
                           self.actor.pk, invitation.pk, invitation.invited_user_id)
            raise PermissionDenied('Not authorized')
        if not invitation.is_pending:
            raise ValidationError('Invitation is no longer pending')

        plan = invitation.plan
        if action == 'decline':
            invitation.status = PlanInvitation.STATUS_DECLINED
            invitation.save(update_fields=['status', 'updated_at'])
            logger.info("User %s declined invitation %s", self.actor.pk, invitation.pk)
            return invitation

        with transaction.atomic():
            PlanMembership.objects.get_or_create(
                plan=plan,
                user=self.actor,
                defaults={'role': invitation.role, 'invited_by_id': invitation.invited_by_id},
            )
            plan.touch()
            invitation.status = PlanInvitation.STATUS_ACCEPTED
            invitation.save(update_fields=['status', 'updated_at'])

        logger.info("User %s joined plan %s as %s", self.actor.pk, plan.pk, invitation.role)
        notify(
            invitation.invited_by_id,
            'Invitation Accepted',
            f'{_display_name(self.actor)} joined "{plan.name}"',
            kind='system',
            related_id=plan.pk,
        )
        return invitation

    # Members

    def change_member_role(self, plan_id, user_id, role) -> PlanMembership:
        user_id = _parse_id(user_id, 'user ID')
        if user_id is None or not role:
            raise ValidationError('User ID and role required')
        if not isinstance(role, str) or role not in MEMBER_ROLES:
            raise ValidationError('Invalid role')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.CHANGE_ROLES, 'Only owner can change roles')
        if user_id == plan.owner_id:
            raise ValidationError('Cannot change owner role')

        membership = plan.memberships.filter(user_id=user_id).first()
        if membership is None:
            raise NotFound('Member not found')
        membership.role = role
        membership.save(update_fields=['role'])
        plan.touch()
        logger.info("User %s set role of user %s on plan %s to %s", self.actor.pk, user_id, plan.pk, role)
        return membership

    def remove_member(self, plan_id, user_id) -> bool:
        """Remove a member (owner) or leave the plan (self). Returns True when leaving."""
        user_id = _parse_id(user_id, 'user ID')
        if user_id is None:
            raise ValidationError('User ID required')

        plan = self.get_plan(plan_id)
        is_owner = plan.owner_id == self.actor.pk
        is_self = user_id == self.actor.pk

        if is_self and is_owner:
            raise ValidationError('Owner cannot leave. Delete the plan instead.')
        if not is_self:
            permissions.require_permission(plan, self.actor, permissions.REMOVE_MEMBERS)

        membership = plan.memberships.filter(user_id=user_id).first()
        if membership is None:
            raise NotFound('Member not found')

        with transaction.atomic():
            membership.delete()
            plan.tasks.filter(assigned_to_id=user_id).update(assigned_to=None)
            plan.touch()
        logger.info("User %s removed user %s from plan %s", self.actor.pk, user_id, plan.pk)
        return is_self

    # Tasks

    def add_task(self, plan_id, title, description=None, assigned_to=None) -> PlanTask:
        title = _clean_text(title, 'Task title', TASK_TITLE_MAX, required=True)
        description = _clean_text(description, 'Task description', TASK_DESCRIPTION_MAX)

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.EDIT_TASKS, 'Not authorized to add tasks')
        assignee_id = self._resolve_assignee(plan, assigned_to)

        task = PlanTask.objects.create(
            plan=plan,
            title=title,
            description=description,
            assigned_to_id=assignee_id,
            created_by=self.actor,
        )
        plan.touch()
        logger.info("User %s added task %s to plan %s", self.actor.pk, task.pk, plan.pk)
        return task

    def update_task(self, plan_id, task_id, changes: Dict[str, Any]) -> PlanTask:
        task_id = _parse_id(task_id, 'task ID')
        if task_id is None:
            raise ValidationError('Task ID is required')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.EDIT_TASKS, 'Not authorized to edit tasks')

        task = plan.tasks.filter(pk=task_id).first()
        if task is None:
            raise NotFound('Task not found')

        if 'title' in changes:
            task.title = _clean_text(changes['title'], 'Task title', TASK_TITLE_MAX, required=True)
        if 'description' in changes:
            task.description = _clean_text(changes['description'], 'Task description', TASK_DESCRIPTION_MAX)
        if 'status' in changes:
            if not isinstance(changes['status'], str) or changes['status'] not in TASK_STATUSES:
                raise ValidationError('Invalid status')
            task.set_status(changes['status'])
        if 'assignedTo' in changes:
            task.assigned_to_id = self._resolve_assignee(plan, changes['assignedTo'])

        task.save()
        plan.touch()
        logger.info("User %s updated task %s on plan %s", self.actor.pk, task.pk, plan.pk)
        return task

    def delete_task(self, plan_id, task_id) -> None:
        task_id = _parse_id(task_id, 'task ID')
        if task_id is None:
            raise ValidationError('Task ID is required')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.EDIT_TASKS, 'Not authorized to delete tasks')

        deleted, _ = plan.tasks.filter(pk=task_id).delete()
        if not deleted:
            raise NotFound('Task not found')
        plan.touch()
        logger.info("User %s deleted task %s from plan %s", self.actor.pk, task_id, plan.pk)

    def _resolve_assignee(self, plan, assigned_to) -> Optional[int]:
        assignee_id = _parse_id(assigned_to, 'assignee')
        if assignee_id is None:
            return None
        if assignee_id != plan.owner_id and not plan.memberships.filter(user_id=assignee_id).exists():
            raise ValidationError('Assignee must be a member of the plan')
        return assignee_id

    # Discussion

    def list_messages(self, plan_id, limit=None, before=None, before_id=None) -> Tuple[List[PlanMessage], bool]:
        """Newest ``limit`` messages, oldest first.

        ``before`` (and optionally ``before_id``) page backwards from the oldest
        message of the previous page; the id breaks ties between messages that
        share a timestamp.
        """
        limit = self._message_limit(limit)
        before_dt = self._parse_before(before)
        before_id = _parse_id(before_id, 'message ID')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.VIEW)

        qs = plan.messages.select_related('sender__profile')
        if before_dt is not None and before_id is not None:
            qs = qs.filter(Q(created_at__lt=before_dt) | Q(created_at=before_dt, id__lt=before_id))
        elif before_dt is not None:
            qs = qs.filter(created_at__lt=before_dt)
        newest_first = list(qs.order_by('-created_at', '-id')[:limit])
        newest_first.reverse()
        return newest_first, len(newest_first) == limit

    def post_message(self, plan_id, content) -> PlanMessage:
        if not isinstance(content, str) or not content.strip():
            raise ValidationError('Message content is required')
        if len(content) > MESSAGE_MAX:
            raise ValidationError('Message is too long')

        plan = self.get_plan(plan_id)
        permissions.require_permission(plan, self.actor, permissions.POST_MESSAGE)
        message = PlanMessage.objects.create(plan=plan, sender=self.actor, content=content.strip())
        logger.debug("User %s posted message %s on plan %s", self.actor.pk, message.pk, plan.pk)
        return message

    @staticmethod
    def _message_limit(limit) -> int:
        default = getattr(settings, 'SHARED_PLAN_MESSAGE_PAGE_SIZE', 50)
        ceiling = getattr(settings, 'SHARED_PLAN_MESSAGE_MAX_PAGE_SIZE', 100)
        if limit in (None, ''):
            return default
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            raise ValidationError('Invalid limit')
        if limit < 1:
            raise ValidationError('Invalid limit')
        return min(limit, ceiling)

    @staticmethod
    def _parse_before(before):
        if not before:
            return None
        try:
            parsed = parse_datetime(before)
        except ValueError:
            parsed = None
        if parsed is None:
            raise ValidationError('Invalid before timestamp')
        if timezone.is_naive(parsed):
            parsed = timezone.make_aware(parsed, dt_timezone.utc)
        return parsed


def _display_name(user):
    return user_summary(user)['displayName']
