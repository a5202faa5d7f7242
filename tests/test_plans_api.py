import pytest

from shared_plans.models import PlanInvitation, PlanMembership, PlanMessage, PlanTask, SharedPlan


pytestmark = pytest.mark.django_db


def test_requires_authentication(api_client):
    response = api_client.get('/api/shared-plans/')
    assert response.status_code == 401
    assert 'error' in response.json()


def test_create_plan_makes_creator_owner(client_for, alice):
    response = client_for(alice).post('/api/shared-plans/', {'name': '  Trip  ', 'description': ' Summer '}, format='json')

    assert response.status_code == 201
    body = response.json()['plan']
    assert body['name'] == 'Trip'
    assert body['description'] == 'Summer'
    assert body['userRole'] == 'owner'
    assert body['members'] == []
    assert body['owner']['id'] == alice.pk
    plan = SharedPlan.objects.get(pk=body['id'])
    assert plan.owner == alice
    assert not PlanMembership.objects.filter(plan=plan).exists()


@pytest.mark.parametrize('name', ['', '   ', None, 'x' * 101])
def test_create_plan_rejects_bad_names(client_for, alice, name):
    response = client_for(alice).post('/api/shared-plans/', {'name': name}, format='json')
    assert response.status_code == 400
    assert response.json()['error']
    assert not SharedPlan.objects.exists()


def test_list_plans_includes_owned_and_joined(client_for, plan, alice, bob, dave):
    SharedPlan.objects.create(name='Bob solo', owner=bob)
    PlanTask.objects.create(plan=plan, title='Milk', created_by=alice, status='completed')
    PlanTask.objects.create(plan=plan, title='Eggs', created_by=alice)

    plans = client_for(bob).get('/api/shared-plans/').json()['plans']
    by_name = {p['name']: p for p in plans}
    assert set(by_name) == {'Groceries', 'Bob solo'}
    assert by_name['Groceries']['userRole'] == 'editor'
    assert by_name['Groceries']['taskCount'] == 2
    assert by_name['Groceries']['completedTaskCount'] == 1
    assert by_name['Bob solo']['userRole'] == 'owner'

    assert client_for(dave).get('/api/shared-plans/').json()['plans'] == []


def test_detail_for_member(client_for, plan, plan_url, carol):
    response = client_for(carol).get(plan_url(plan.pk))

    assert response.status_code == 200
    body = response.json()['plan']
    assert body['userRole'] == 'viewer'
    assert body['pollInterval'] == 5
    assert [m['role'] for m in body['members']] == ['editor', 'viewer']


def test_detail_forbidden_for_non_member(client_for, plan, plan_url, dave):
    response = client_for(dave).get(plan_url(plan.pk))
    assert response.status_code == 403
    assert response.json() == {'error': 'Not authorized'}


def test_detail_not_found(client_for, alice, plan_url):
    response = client_for(alice).get(plan_url(9999))
    assert response.status_code == 404
    assert response.json() == {'error': 'Plan not found'}


def test_editor_can_update_metadata(client_for, plan, plan_url, bob):
    response = client_for(bob).patch(plan_url(plan.pk), {'name': 'Big shop'}, format='json')

    assert response.status_code == 200
    plan.refresh_from_db()
    assert plan.name == 'Big shop'
    assert plan.description == 'Weekly shop'


def test_update_rejects_empty_name(client_for, plan, plan_url, alice):
    response = client_for(alice).patch(plan_url(plan.pk), {'name': '  '}, format='json')
    assert response.status_code == 400
    assert response.json() == {'error': 'Plan name cannot be empty'}


def test_viewer_cannot_update_metadata(client_for, plan, plan_url, carol):
    response = client_for(carol).patch(plan_url(plan.pk), {'name': 'Hijack'}, format='json')
    assert response.status_code == 403
    plan.refresh_from_db()
    assert plan.name == 'Groceries'


def test_only_owner_deletes(client_for, plan, plan_url, bob):
    response = client_for(bob).delete(plan_url(plan.pk))
    assert response.status_code == 403
    assert response.json() == {'error': 'Only the owner can delete this plan'}
    assert SharedPlan.objects.filter(pk=plan.pk).exists()


def test_delete_cascades_to_dependents(client_for, plan, plan_url, alice, bob, dave):
    for i in range(3):
        PlanMessage.objects.create(plan=plan, sender=bob, content=f'hi {i}')
    PlanInvitation.objects.create(plan=plan, invited_by=alice, invited_user=dave)
    PlanInvitation.objects.create(plan=plan, invited_by=alice, invited_user=dave, status='declined')
    PlanTask.objects.create(plan=plan, title='Milk', created_by=alice)

    response = client_for(alice).delete(plan_url(plan.pk))

    assert response.status_code == 200
    assert not SharedPlan.objects.filter(pk=plan.pk).exists()
    assert not PlanInvitation.objects.filter(plan_id=plan.pk).exists()
    assert not PlanMessage.objects.filter(plan_id=plan.pk).exists()
    assert not PlanTask.objects.filter(plan_id=plan.pk).exists()
    assert not PlanMembership.objects.filter(plan_id=plan.pk).exists()


def test_unknown_method_renders_error_shape(client_for, plan, plan_url, alice):
    response = client_for(alice).put(plan_url(plan.pk), {}, format='json')
    assert response.status_code == 405
    assert 'error' in response.json()


@pytest.mark.parametrize('method', ['post', 'patch'])
def test_non_object_body_is_rejected(client_for, plan, plan_url, alice, method):
    url = '/api/shared-plans/' if method == 'post' else plan_url(plan.pk)

    response = getattr(client_for(alice), method)(url, ['x'], format='json')

    assert response.status_code == 400
    assert response.json() == {'error': 'Invalid request body'}
    assert SharedPlan.objects.count() == 1
