from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.response import Response
from rest_framework.throttling import UserRateThrottle

from companion.utils import request_body

from .payloads import (
    message_payload, plan_detail_payload, plan_invitation_payload, plan_summary_payload,
    received_invitation_payload, task_payload,
)
from .services import SharedPlanService


class APIDefaultThrottle(UserRateThrottle):
    scope = 'user'


PLAN_FIELDS = ('name', 'description')
TASK_FIELDS = ('title', 'description', 'status', 'assignedTo')


def _param(request, name):
    """Read an id from the query string first, then from the JSON body."""
    value = request.query_params.get(name)
    if value in (None, ''):
        value = request_body(request).get(name)
    return value


def _changes(request, fields):
    data = request_body(request)
    return {field: data[field] for field in fields if field in data}


@api_view(['GET', 'POST'])
@throttle_classes([APIDefaultThrottle])
def plan_collection(request):
    service = SharedPlanService(request.user)
    if request.method == 'GET':
        return Response({'plans': [plan_summary_payload(plan, role) for plan, role in service.list_plans()]})

    data = request_body(request)
    plan = service.create_plan(data.get('name'), data.get('description'))
    return Response({'plan': plan_detail_payload(plan, 'owner')}, status=status.HTTP_201_CREATED)


@api_view(['GET', 'PATCH', 'DELETE'])
@throttle_classes([APIDefaultThrottle])
def plan_detail(request, pk):
    service = SharedPlanService(request.user)
    if request.method == 'GET':
        plan, role = service.view_plan(pk)
        return Response({'plan': plan_detail_payload(plan, role)})

    if request.method == 'PATCH':
        plan = service.update_plan(pk, _changes(request, PLAN_FIELDS))
        return Response({
            'message': 'Plan updated',
            'plan': {'id': plan.id, 'name': plan.name, 'description': plan.description},
        })

    service.delete_plan(pk)
    return Response({'message': 'Plan deleted'})


@api_view(['GET', 'POST', 'DELETE'])
@throttle_classes([APIDefaultThrottle])
def plan_invitations(request, pk):
    service = SharedPlanService(request.user)
    if request.method == 'GET':
        invitations = service.list_plan_invitations(pk)
        return Response({'invitations': [plan_invitation_payload(inv) for inv in invitations]})

    if request.method == 'POST':
        data = request_body(request)
        invitation = service.invite(pk, data.get('userId'), data.get('role') or 'editor')
        return Response(
            {'message': 'Invitation sent', 'invitationId': invitation.id},
            status=status.HTTP_201_CREATED,
        )

    service.cancel_invitation(pk, _param(request, 'id') or _param(request, 'invitationId'))
    return Response({'message': 'Invitation cancelled'})


@api_view(['GET', 'PATCH'])
@throttle_classes([APIDefaultThrottle])
def received_invitations(request):
    service = SharedPlanService(request.user)
    if request.method == 'GET':
        invitations = service.received_invitations()
        return Response({'invitations': [received_invitation_payload(inv) for inv in invitations]})

    data = request_body(request)
    action = data.get('action')
    invitation = service.respond_to_invitation(data.get('invitationId'), action)
    return Response({
        'message': 'Joined plan' if action == 'accept' else 'Invitation declined',
        'planId': invitation.plan_id,
        'status': invitation.status,
    })


@api_view(['PATCH', 'DELETE'])
@throttle_classes([APIDefaultThrottle])
def plan_members(request, pk):
    service = SharedPlanService(request.user)
    if request.method == 'PATCH':
        data = request_body(request)
        service.change_member_role(pk, data.get('userId'), data.get('role'))
        return Response({'message': 'Role updated'})

    left = service.remove_member(pk, _param(request, 'userId'))
    return Response({'message': 'Left plan' if left else 'Member removed'})


@api_view(['POST', 'PATCH', 'DELETE'])
@throttle_classes([APIDefaultThrottle])
def plan_tasks(request, pk):
    service = SharedPlanService(request.user)
    if request.method == 'POST':
        data = request_body(request)
        task = service.add_task(pk, data.get('title'), data.get('description'), data.get('assignedTo'))
        return Response({'task': task_payload(task)}, status=status.HTTP_201_CREATED)

    if request.method == 'PATCH':
        task = service.update_task(pk, request_body(request).get('taskId'), _changes(request, TASK_FIELDS))
        return Response({'task': task_payload(task)})

    service.delete_task(pk, _param(request, 'taskId'))
    return Response({'message': 'Task deleted'})


@api_view(['GET', 'POST'])
@throttle_classes([APIDefaultThrottle])
def plan_messages(request, pk):
    service = SharedPlanService(request.user)
    if request.method == 'GET':
        messages, has_more = service.list_messages(
            pk,
            limit=request.query_params.get('limit'),
            before=request.query_params.get('before'),
            before_id=request.query_params.get('beforeId'),
        )
        return Response({'messages': [message_payload(m) for m in messages], 'hasMore': has_more})

    message = service.post_message(pk, request_body(request).get('content'))
    return Response({'message': message_payload(message)}, status=status.HTTP_201_CREATED)
