from datetime import datetime, timedelta
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest
from django.utils import timezone

from jobs.models import Job
from servicem8.models import SyncLog
from servicem8.sync_engine import (
    UNKNOWN_CUSTOMER,
    map_servicem8_job,
    resolve_customer_name,
    run_servicem8_sync,
)


def _stamp(moment):
    return timezone.localtime(moment).strftime('%Y-%m-%d %H:%M:%S')


def sm8_job(uuid, **fields):
    job = {
        'uuid': uuid,
        'generated_job_id': '1042',
        'status': 'Quote',
        'job_address': '12 Oak Ave',
        'job_description': 'Colorbond fence',
        'total_invoice_amount': '4500.00',
        'quote_sent': '0',
        'quote_sent_stamp': '0000-00-00 00:00:00',
        'company_uuid': None,
    }
    job.update(fields)
    return job


@pytest.fixture
def fake_client():
    client = Mock()
    client.fetch_jobs.return_value = [sm8_job('j1'), sm8_job('j2', generated_job_id='1043', status='Work Order')]
    client.fetch_all_job_contacts.return_value = {'j1': {'first': 'Ann', 'last': 'Lee'}}
    client.fetch_all_companies.return_value = {}
    client.fetch_all_job_custom_fields.return_value = {}
    client.fetch_last_communications.return_value = {}
    return client


class TestMapping:

    def test_customer_name_resolution(self):
        contacts = {'j1': {'first': 'Ann', 'last': ''}}
        companies = {'c1': 'Acme'}
        assert resolve_customer_name({'uuid': 'j1'}, contacts, companies) == 'Ann'
        assert resolve_customer_name({'uuid': 'j2', 'company_uuid': 'c1'}, contacts, companies) == 'Acme'
        assert resolve_customer_name({'uuid': 'j3'}, contacts, companies) == UNKNOWN_CUSTOMER

    def test_unsent_quote_is_new_lead(self):
        fields = map_servicem8_job(sm8_job('j1'), customer_name='Ann Lee')
        assert fields['job_id'] == '#1042'
        assert fields['status'] == 'new_lead'
        assert fields['sales_stage'] == 'new_lead'
        assert fields['lifecycle_phase'] == 'quote'
        assert fields['quote_value'] == Decimal('4500.00')
        assert fields['assigned_staff'] == 'Unassigned'

    def test_sent_quote_stages(self):
        now = timezone.now()
        fresh = map_servicem8_job(sm8_job('j1', quote_sent='1', quote_sent_stamp=_stamp(now - timedelta(days=2))), now=now)
        assert (fresh['status'], fresh['scheduler_stage'], fresh['sales_stage']) == ('quote_sent', 'quotes_sent', 'fresh')
        assert fresh['days_since_quote_sent'] == 2

        stale = map_servicem8_job(sm8_job('j1', quote_sent='1', quote_sent_stamp=_stamp(now - timedelta(days=12))), now=now)
        assert stale['sales_stage'] == 'awaiting_reply'
        assert stale['urgency'] == 'high'

    def test_work_order_has_no_sales_stage(self):
        fields = map_servicem8_job(sm8_job('j1', status='Work Order', quote_sent='1'))
        assert fields['lifecycle_phase'] == 'work_order'
        assert fields['sales_stage'] is None

    def test_missing_values_get_defaults(self):
        fields = map_servicem8_job(sm8_job('j1', generated_job_id='', job_address='', job_description=None,
                                           total_invoice_amount=None))
        assert fields['job_id'] == '#N/A'
        assert fields['address'] == 'No Address'
        assert fields['description'] == 'PVC Fencing Installation'
        assert fields['quote_value'] == Decimal('0')

    def test_communication_drives_contact_age(self):
        now = timezone.now()
        comm = {'date': now - timedelta(days=9), 'type': 'sms', 'note': 'reminder'}
        fields = map_servicem8_job(sm8_job('j1'), communication=comm, now=now)
        assert fields['days_since_last_contact'] == 9
        assert fields['last_communication_type'] == 'sms'
        assert fields['urgency'] == 'high'


@pytest.mark.django_db
class TestSyncRun:

    def test_creates_jobs_and_logs_success(self, fake_client):
        stats = run_servicem8_sync(client=fake_client)

        assert stats['status'] == SyncLog.STATUS_SUCCESS
        assert stats['created'] == 2
        assert Job.objects.get(service_m8_uuid='j1').customer_name == 'Ann Lee'
        assert Job.objects.get(service_m8_uuid='j2').lifecycle_phase == 'work_order'

        log = SyncLog.objects.get()
        assert log.status == SyncLog.STATUS_SUCCESS
        assert log.jobs_processed == 2
        assert log.metadata['trigger'] == SyncLog.TRIGGER_MANUAL
        assert log.completed_at is not None

    def test_new_jobs_get_local_defaults(self, fake_client):
        run_servicem8_sync(client=fake_client)
        job = Job.objects.get(service_m8_uuid='j1')
        assert job.install_stage == 'pending_posts'
        assert job.production_tasks == []
        assert job.post_install_duration == 6
        assert job.panel_install_duration == 8

    def test_resync_preserves_local_scheduling(self, fake_client):
        run_servicem8_sync(client=fake_client)
        when = timezone.now() + timedelta(days=3)
        Job.objects.filter(service_m8_uuid='j1').update(
            install_stage='posts_scheduled',
            post_install_date=when,
            production_tasks=[{'id': 't1', 'name': 'Cut posts', 'completed': True}],
            purchase_order_status='ordered',
        )
        fake_client.fetch_jobs.return_value = [sm8_job('j1', job_description='Updated description')]

        stats = run_servicem8_sync(client=fake_client)

        job = Job.objects.get(service_m8_uuid='j1')
        assert stats['updated'] == 1
        assert job.description == 'Updated description'
        assert job.install_stage == 'posts_scheduled'
        assert job.post_install_date == when
        assert job.production_tasks[0]['name'] == 'Cut posts'
        assert job.purchase_order_status == 'ordered'

    def test_failed_job_marks_run_partial(self, fake_client):
        fake_client.fetch_jobs.return_value = [sm8_job('j1'), {'generated_job_id': 'no-uuid'}]
        stats = run_servicem8_sync(client=fake_client)
        assert stats['status'] == SyncLog.STATUS_PARTIAL
        assert stats['failed'] == 1
        log = SyncLog.objects.get()
        assert log.status == SyncLog.STATUS_PARTIAL
        assert log.error_message == '1 job(s) failed to sync'

    def test_upsert_error_is_isolated(self, fake_client):
        original = Job.objects.update_or_create

        def flaky(*args, **kwargs):
            if kwargs.get('service_m8_uuid') == 'j2':
                raise ValueError('bad row')
            return original(*args, **kwargs)

        with patch.object(Job.objects, 'update_or_create', side_effect=flaky):
            stats = run_servicem8_sync(client=fake_client)

        assert stats['jobs_processed'] == 1
        assert stats['status'] == SyncLog.STATUS_PARTIAL
        assert Job.objects.filter(service_m8_uuid='j1').exists()
        assert SyncLog.objects.get().metadata['failures'] == [{'uuid': 'j2', 'error': 'bad row'}]

    def test_fetch_failure_logs_error_and_raises(self, fake_client):
        fake_client.fetch_jobs.side_effect = RuntimeError('ServiceM8 down')
        with pytest.raises(RuntimeError):
            run_servicem8_sync(client=fake_client)
        log = SyncLog.objects.get()
        assert log.status == SyncLog.STATUS_ERROR
        assert log.error_message == 'ServiceM8 down'

    def test_optional_lookups_can_be_disabled(self, fake_client, settings):
        settings.SERVICEM8_SYNC_COMMUNICATIONS = False
        settings.SERVICEM8_SYNC_CUSTOM_FIELDS = False
        run_servicem8_sync(client=fake_client)
        fake_client.fetch_last_communications.assert_not_called()
        fake_client.fetch_all_job_custom_fields.assert_not_called()
