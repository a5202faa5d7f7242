import pytest
from django.contrib.auth.models import User
from django.core.cache import cache
from rest_framework.test import APIClient

from accounts.models import UserProfile
from shared_plans.models import PlanMembership, SharedPlan


PASSWORD = 'correct-horse-battery'


@pytest.fixture(autouse=True)
def _clear_throttle_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def make_user(db):
    def _make(username, display_name=None):
        user = User.objects.create_user(username=username, email=f'{username}@example.com', password=PASSWORD)
        UserProfile.objects.create(user=user, display_name=display_name or username.capitalize())
        return user
    return _make


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def client_for():
    def _client(user):
        client = APIClient()
        client.force_authenticate(user=user)
        return client
    return _client


@pytest.fixture
def alice(make_user):
    return make_user('alice')


@pytest.fixture
def bob(make_user):
    return make_user('bob')


@pytest.fixture
def carol(make_user):
    return make_user('carol')


@pytest.fixture
def dave(make_user):
    return make_user('dave')


@pytest.fixture
def plan(alice, bob, carol):
    """Plan owned by alice with bob as editor and carol as viewer."""
    plan = SharedPlan.objects.create(name='Groceries', description='Weekly shop', owner=alice)
    PlanMembership.objects.create(plan=plan, user=bob, role='editor', invited_by=alice)
    PlanMembership.objects.create(plan=plan, user=carol, role='viewer', invited_by=alice)
    return plan


@pytest.fixture
def plan_url():
    def _url(plan_id, suffix=''):
        base = f'/api/shared-plans/{plan_id}/'
        return f'{base}{suffix}/' if suffix else base
    return _url
