import pytest

from shared_plans.models import PlanTask


pytestmark = pytest.mark.django_db


def _snapshot(plan):
    return list(PlanTask.objects.filter(plan=plan).order_by('id').values())


@pytest.fixture
def task(plan, alice):
    return PlanTask.objects.create(plan=plan, title='Buy milk', created_by=alice)


def test_editor_adds_task(client_for, plan, plan_url, bob):
    response = client_for(bob).post(plan_url(plan.pk, 'tasks'), {'title': '  Bread ', 'description': 'rye'}, format='json')

    assert response.status_code == 201
    body = response.json()['task']
    assert body['title'] == 'Bread'
    assert body['status'] == 'pending'
    assert body['assignedTo'] is None
    assert body['createdBy']['id'] == bob.pk
    assert body['completedAt'] is None


def test_add_requires_title(client_for, plan, plan_url, alice):
    response = client_for(alice).post(plan_url(plan.pk, 'tasks'), {'title': '   '}, format='json')
    assert response.status_code == 400
    assert response.json() == {'error': 'Task title is required'}
    assert not PlanTask.objects.exists()


def test_add_with_assignee_must_be_participant(client_for, plan, plan_url, alice, carol, dave):
    client = client_for(alice)
    ok = client.post(plan_url(plan.pk, 'tasks'), {'title': 'Cheese', 'assignedTo': carol.pk}, format='json')
    assert ok.status_code == 201
    assert ok.json()['task']['assignedTo']['id'] == carol.pk

    bad = client.post(plan_url(plan.pk, 'tasks'), {'title': 'Wine', 'assignedTo': dave.pk}, format='json')
    assert bad.status_code == 400


def test_completed_at_follows_status(client_for, plan, plan_url, task, bob):
    client = client_for(bob)
    url = plan_url(plan.pk, 'tasks')

    done = client.patch(url, {'taskId': task.pk, 'status': 'completed'}, format='json').json()['task']
    assert done['status'] == 'completed'
    assert done['completedAt'] is not None

    task.refresh_from_db()
    stamp = task.completed_at
    again = client.patch(url, {'taskId': task.pk, 'status': 'completed'}, format='json')
    assert again.status_code == 200
    task.refresh_from_db()
    assert task.completed_at == stamp

    reopened = client.patch(url, {'taskId': task.pk, 'status': 'in_progress'}, format='json').json()['task']
    assert reopened['completedAt'] is None

    client.patch(url, {'taskId': task.pk, 'status': 'completed'}, format='json')
    client.patch(url, {'taskId': task.pk, 'status': 'pending'}, format='json')
    for t in PlanTask.objects.all():
        assert (t.completed_at is not None) == (t.status == 'completed')


def test_update_other_fields_keeps_status(client_for, plan, plan_url, task, alice, bob):
    response = client_for(alice).patch(
        plan_url(plan.pk, 'tasks'),
        {'taskId': task.pk, 'title': 'Buy oat milk', 'assignedTo': bob.pk},
        format='json',
    )

    assert response.status_code == 200
    task.refresh_from_db()
    assert task.title == 'Buy oat milk'
    assert task.assigned_to == bob
    assert task.status == 'pending'
    assert task.completed_at is None
    assert task.created_by == alice


def test_unassign_with_null(client_for, plan, plan_url, task, alice, bob):
    task.assigned_to = bob
    task.save()
    client_for(alice).patch(plan_url(plan.pk, 'tasks'), {'taskId': task.pk, 'assignedTo': None}, format='json')
    task.refresh_from_db()
    assert task.assigned_to is None


def test_update_rejects_unknown_status(client_for, plan, plan_url, task, alice):
    response = client_for(alice).patch(plan_url(plan.pk, 'tasks'), {'taskId': task.pk, 'status': 'done'}, format='json')
    assert response.status_code == 400
    task.refresh_from_db()
    assert task.status == 'pending'


def test_update_unknown_task(client_for, plan, plan_url, alice):
    client = client_for(alice)
    missing = client.patch(plan_url(plan.pk, 'tasks'), {'taskId': 9999, 'title': 'x'}, format='json')
    assert missing.status_code == 404
    assert missing.json() == {'error': 'Task not found'}
    no_id = client.patch(plan_url(plan.pk, 'tasks'), {'title': 'x'}, format='json')
    assert no_id.status_code == 400


def test_task_from_other_plan_is_not_found(client_for, plan, plan_url, alice, bob):
    from shared_plans.models import SharedPlan
    other = SharedPlan.objects.create(name='Other', owner=bob)
    foreign = PlanTask.objects.create(plan=other, title='Secret', created_by=bob)

    response = client_for(alice).patch(plan_url(plan.pk, 'tasks'), {'taskId': foreign.pk, 'title': 'x'}, format='json')

    assert response.status_code == 404
    foreign.refresh_from_db()
    assert foreign.title == 'Secret'


def test_delete_task(client_for, plan, plan_url, task, bob):
    client = client_for(bob)
    response = client.delete(f"{plan_url(plan.pk, 'tasks')}?taskId={task.pk}")
    assert response.status_code == 200
    assert not PlanTask.objects.filter(pk=task.pk).exists()

    again = client.delete(plan_url(plan.pk, 'tasks'), {'taskId': task.pk}, format='json')
    assert again.status_code == 404


@pytest.mark.parametrize('method,payload', [
    ('post', {'title': 'Sneaky'}),
    ('patch', {'status': 'completed'}),
    ('delete', {}),
])
def test_viewer_cannot_touch_tasks(client_for, plan, plan_url, task, carol, method, payload):
    before = _snapshot(plan)
    if method != 'post':
        payload = dict(payload, taskId=task.pk)

    response = getattr(client_for(carol), method)(plan_url(plan.pk, 'tasks'), payload, format='json')

    assert response.status_code == 403
    assert _snapshot(plan) == before


def test_non_member_cannot_add_task(client_for, plan, plan_url, dave):
    response = client_for(dave).post(plan_url(plan.pk, 'tasks'), {'title': 'Nope'}, format='json')
    assert response.status_code == 403
    assert not PlanTask.objects.exists()


def test_task_mutation_bumps_plan_updated_at(client_for, plan, plan_url, alice):
    before = plan.updated_at
    client_for(alice).post(plan_url(plan.pk, 'tasks'), {'title': 'Apples'}, format='json')
    plan.refresh_from_db()
    assert plan.updated_at > before


def test_update_rejects_non_string_status(client_for, plan, plan_url, task, alice):
    response = client_for(alice).patch(
        plan_url(plan.pk, 'tasks'), {'taskId': task.pk, 'status': {'a': 1}}, format='json'
    )
    assert response.status_code == 400
    assert response.json() == {'error': 'Invalid status'}
    task.refresh_from_db()
    assert task.status == 'pending'


def test_delete_with_array_body(client_for, plan, plan_url, task, alice):
    response = client_for(alice).delete(plan_url(plan.pk, 'tasks'), [task.pk], format='json')
    assert response.status_code == 400
    assert PlanTask.objects.filter(pk=task.pk).exists()
