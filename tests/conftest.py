import itertools
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient

from jobs.models import Job
from staff.models import Staff

_uuids = itertools.count(1)


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def user(db):
    return get_user_model().objects.create_user(username='dispatcher', password='secret')


@pytest.fixture
def admin_user(db):
    return get_user_model().objects.create_user(username='boss', password='secret', is_staff=True)


@pytest.fixture
def auth_client(api_client, user):
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def admin_client(api_client, admin_user):
    api_client.force_authenticate(user=admin_user)
    return api_client


@pytest.fixture
def make_job(db):
    """Factory for persisted jobs with sensible defaults."""
    def _make(**overrides):
        n = next(_uuids)
        fields = {
            'service_m8_uuid': f'uuid-{n}',
            'job_id': f'#{1000 + n}',
            'customer_name': f'Customer {n}',
            'address': f'{n} Fence Street',
            'quote_value': Decimal('5000.00'),
            'status': 'quote_sent',
            'lifecycle_phase': Job.PHASE_QUOTE,
            'scheduler_stage': 'new_jobs_won',
            'assigned_staff': 'wayne',
            'post_install_duration': 6,
            'panel_install_duration': 8,
        }
        fields.update(overrides)
        return Job.objects.create(**fields)
    return _make


@pytest.fixture
def installers(db):
    return [
        Staff.objects.create(id='mike', name='Mike (Team A)', role='install', daily_capacity_hours=8, skills=['posts', 'panels']),
        Staff.objects.create(id='josh', name='Josh (Team B)', role='install', daily_capacity_hours=8, skills=['posts', 'panels']),
    ]
