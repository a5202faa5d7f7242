import pytest

from shared_plans.models import PlanInvitation, PlanMessage, PlanTask, SharedPlan


pytestmark = pytest.mark.django_db


def test_trip_plan_from_creation_to_deletion(client_for, alice, bob):
    owner, editor = client_for(alice), client_for(bob)

    created = owner.post('/api/shared-plans/', {'name': 'Trip'}, format='json')
    assert created.status_code == 201
    plan_id = created.json()['plan']['id']
    base = f'/api/shared-plans/{plan_id}/'

    invitation_id = owner.post(
        f'{base}invitations/', {'userId': bob.pk, 'role': 'editor'}, format='json'
    ).json()['invitationId']
    accepted = editor.patch(
        '/api/shared-plans/invitations/', {'invitationId': invitation_id, 'action': 'accept'}, format='json'
    )
    assert accepted.status_code == 200

    detail = owner.get(base).json()['plan']
    assert [(m['id'], m['role']) for m in detail['members']] == [(bob.pk, 'editor')]
    assert editor.get(base).json()['plan']['userRole'] == 'editor'

    task = editor.post(f'{base}tasks/', {'title': 'Book flights'}, format='json').json()['task']
    assert task['assignedTo'] is None

    assigned = owner.patch(f'{base}tasks/', {'taskId': task['id'], 'assignedTo': bob.pk}, format='json')
    assert assigned.json()['task']['assignedTo']['id'] == bob.pk

    done = editor.patch(f'{base}tasks/', {'taskId': task['id'], 'status': 'completed'}, format='json').json()['task']
    assert done['status'] == 'completed'
    assert done['completedAt'] is not None

    editor.post(f'{base}messages/', {'content': 'Flights booked'}, format='json')

    assert owner.delete(base).status_code == 200

    assert owner.get(base).status_code == 404
    assert owner.get(f'{base}invitations/').status_code == 404
    assert editor.get(f'{base}messages/').status_code == 404
    assert editor.get('/api/shared-plans/').json()['plans'] == []
    assert not SharedPlan.objects.exists()
    assert not PlanTask.objects.exists()
    assert not PlanInvitation.objects.exists()
    assert not PlanMessage.objects.exists()
