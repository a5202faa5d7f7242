"""JSON shapes returned by the shared plan endpoints."""
from django.conf import settings

from accounts.utils import user_summary


def member_payload(membership):
    data = user_summary(membership.user, include_email=True)
    data.update({'role': membership.role, 'joinedAt': membership.joined_at})
    return data


def task_payload(task):
    return {
        'id': task.id,
        'title': task.title,
        'description': task.description,
        'status': task.status,
        'assignedTo': user_summary(task.assigned_to),
        'createdBy': user_summary(task.created_by),
        'createdAt': task.created_at,
        'completedAt': task.completed_at,
    }


def plan_summary_payload(plan, role):
    memberships = plan.memberships.select_related('user__profile')
    return {
        'id': plan.id,
        'name': plan.name,
        'description': plan.description,
        'owner': user_summary(plan.owner),
        'members': [member_payload(m) for m in memberships],
        'taskCount': plan.task_count,
        'completedTaskCount': plan.completed_task_count,
        'userRole': role,
        'createdAt': plan.created_at,
        'updatedAt': plan.updated_at,
    }


def plan_detail_payload(plan, role):
    memberships = plan.memberships.select_related('user__profile')
    tasks = plan.tasks.select_related('assigned_to__profile', 'created_by__profile')
    return {
        'id': plan.id,
        'name': plan.name,
        'description': plan.description,
        'owner': user_summary(plan.owner, include_email=True),
        'members': [member_payload(m) for m in memberships],
        'tasks': [task_payload(t) for t in tasks],
        'userRole': role,
        'pollInterval': getattr(settings, 'SHARED_PLAN_POLL_INTERVAL', 5),
        'createdAt': plan.created_at,
        'updatedAt': plan.updated_at,
    }


def plan_invitation_payload(invitation):
    """Invitation as seen by the plan's managers."""
    return {
        'id': invitation.id,
        'invitedUser': user_summary(invitation.invited_user, include_email=True),
        'invitedBy': user_summary(invitation.invited_by),
        'role': invitation.role,
        'status': invitation.status,
        'createdAt': invitation.created_at,
    }


def received_invitation_payload(invitation):
    """Invitation as seen by the invitee."""
    plan = invitation.plan
    return {
        'id': invitation.id,
        'plan': {'id': plan.id, 'name': plan.name, 'description': plan.description},
        'invitedBy': user_summary(invitation.invited_by),
        'role': invitation.role,
        'createdAt': invitation.created_at,
    }


def message_payload(message):
    return {
        'id': message.id,
        'content': message.content,
        'sender': user_summary(message.sender),
        'createdAt': message.created_at,
    }
