from datetime import timedelta

import pytest
from django.utils import timezone

from jobs.models import Job


def _iso(moment):
    return moment.isoformat()


@pytest.mark.django_db
class TestJobList:

    def test_requires_authentication(self, api_client):
        response = api_client.get('/api/jobs/')
        assert response.status_code == 401

    def test_list_is_paginated_with_card_fields(self, auth_client, make_job):
        make_job(status='complete', lifecycle_phase='work_order')
        response = auth_client.get('/api/jobs/')
        assert response.status_code == 200
        assert response.data['count'] == 1
        job = response.data['results'][0]
        assert job['card_color'] == 'border-l-green-500 bg-green-50/50'
        assert job['servicem8_url'].endswith(f"/job/{job['service_m8_uuid']}")
        assert job['urgency_indicator']['label'] == 'Low priority'

    def test_staff_and_search_filters(self, auth_client, make_job):
        make_job(job_id='#1042', assigned_staff='wayne')
        make_job(job_id='#1043', assigned_staff='dave')
        make_job(job_id='#2000', customer_name='Client 1042', assigned_staff='dave')

        response = auth_client.get('/api/jobs/', {'staff': 'all', 'search': '1042'})
        assert response.data['count'] == 2

        response = auth_client.get('/api/jobs/', {'staff': 'wayne', 'search': '1042'})
        assert [j['job_id'] for j in response.data['results']] == ['#1042']

    def test_patch_production_tasks(self, auth_client, make_job):
        job = make_job()
        tasks = [{'id': 't1', 'name': 'Cut posts', 'completed': False}]
        response = auth_client.patch(f'/api/jobs/{job.id}/', {'production_tasks': tasks}, format='json')
        assert response.status_code == 200
        job.refresh_from_db()
        assert job.production_tasks == [{'id': 't1', 'name': 'Cut posts', 'completed': False}]

    def test_patch_rejects_malformed_tasks(self, auth_client, make_job):
        job = make_job()
        response = auth_client.patch(f'/api/jobs/{job.id}/', {'production_tasks': [{'id': 't1'}]}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestJobActions:

    def test_move_changes_only_status(self, auth_client, make_job):
        job = make_job(status='new_lead')
        other = make_job(status='new_lead')
        response = auth_client.post(f'/api/jobs/{job.id}/move/', {'status': 'deposit_paid'}, format='json')
        assert response.status_code == 200
        assert response.data['status'] == 'deposit_paid'
        other.refresh_from_db()
        assert other.status == 'new_lead'

    def test_move_unknown_job_404(self, auth_client):
        response = auth_client.post('/api/jobs/9999/move/', {'status': 'x'}, format='json')
        assert response.status_code == 404

    def test_schedule_posts(self, auth_client, make_job, installers):
        panel_date = timezone.now() + timedelta(days=20)
        job = make_job(panel_install_date=panel_date)
        when = timezone.now() + timedelta(days=2)
        response = auth_client.post(f'/api/jobs/{job.id}/schedule/', {'type': 'posts', 'date': _iso(when)}, format='json')

        assert response.status_code == 200
        assert response.data['over_capacity'] is False
        job.refresh_from_db()
        assert job.install_stage == 'posts_scheduled'
        assert job.post_install_date is not None
        assert job.panel_install_date == panel_date

    def test_schedule_outside_window_rejected(self, auth_client, make_job):
        job = make_job()
        when = timezone.now() + timedelta(days=30)
        response = auth_client.post(f'/api/jobs/{job.id}/schedule/', {'type': 'posts', 'date': _iso(when)}, format='json')
        assert response.status_code == 400
        assert 'error' in response.data

    def test_tentative_booking_ignores_window(self, auth_client, make_job):
        job = make_job()
        when = timezone.now() + timedelta(days=30)
        response = auth_client.post(
            f'/api/jobs/{job.id}/schedule/',
            {'type': 'panels', 'date': _iso(when), 'tentative': True, 'notes': 'pencilled in'},
            format='json',
        )
        assert response.status_code == 200
        job.refresh_from_db()
        assert job.install_stage == 'tentative_panels'
        assert job.tentative_notes == 'pencilled in'
        assert job.panel_install_date is None

    def test_schedule_flags_over_capacity(self, auth_client, make_job, installers):
        when = timezone.now() + timedelta(days=1)
        make_job(panel_install_date=when, panel_install_duration=12)
        job = make_job(post_install_duration=6)
        response = auth_client.post(f'/api/jobs/{job.id}/schedule/', {'type': 'posts', 'date': _iso(when)}, format='json')
        assert response.status_code == 200
        assert response.data['over_capacity'] is True

    def test_unknown_work_type_400(self, auth_client, make_job):
        job = make_job()
        response = auth_client.post(
            f'/api/jobs/{job.id}/schedule/', {'type': 'gates', 'date': _iso(timezone.now())}, format='json'
        )
        assert response.status_code == 400

    def test_unschedule(self, auth_client, make_job):
        job = make_job(post_install_date=timezone.now(), install_stage='posts_scheduled')
        response = auth_client.post(f'/api/jobs/{job.id}/unschedule/', {'type': 'posts'}, format='json')
        assert response.status_code == 200
        job.refresh_from_db()
        assert job.post_install_date is None
        assert job.install_stage == 'pending_posts'

    def test_confirm_tentative(self, auth_client, make_job):
        when = timezone.now() + timedelta(days=3)
        job = make_job(tentative_post_date=when, install_stage='tentative_posts')
        response = auth_client.post(f'/api/jobs/{job.id}/confirm-tentative/', {'type': 'posts'}, format='json')
        assert response.status_code == 200
        job.refresh_from_db()
        assert job.post_install_date == when
        assert job.tentative_post_date is None
        assert job.install_stage == 'posts_scheduled'

    def test_confirm_without_tentative_400(self, auth_client, make_job):
        job = make_job()
        response = auth_client.post(f'/api/jobs/{job.id}/confirm-tentative/', {'type': 'panels'}, format='json')
        assert response.status_code == 400

    def test_confirm_far_tentative_400(self, auth_client, make_job):
        job = make_job(tentative_panel_date=timezone.now() + timedelta(days=40), install_stage='tentative_panels')
        response = auth_client.post(f'/api/jobs/{job.id}/confirm-tentative/', {'type': 'panels'}, format='json')
        assert response.status_code == 400
        job.refresh_from_db()
        assert job.panel_install_date is None

    def test_scheduler_stage(self, auth_client, make_job):
        job = make_job()
        response = auth_client.post(f'/api/jobs/{job.id}/scheduler-stage/', {'scheduler_stage': 'waiting_client'}, format='json')
        assert response.status_code == 200
        assert Job.objects.get(pk=job.pk).scheduler_stage == 'waiting_client'

        response = auth_client.post(f'/api/jobs/{job.id}/scheduler-stage/', {'scheduler_stage': 'nowhere'}, format='json')
        assert response.status_code == 400


@pytest.mark.django_db
class TestBoardEndpoints:

    def test_board_snapshot(self, auth_client, make_job, installers):
        make_job(job_id='#1042', assigned_staff='wayne')
        make_job(job_id='#1043', assigned_staff='dave')
        response = auth_client.get('/api/jobs/board/', {'staff': 'wayne'})
        assert response.status_code == 200
        assert response.data['total_jobs'] == 2
        assert [j['job_id'] for j in response.data['jobs']] == ['#1042']
        assert response.data['daily_install_capacity'] == 16
        assert len(response.data['capacity']) == 14

    def test_pipelines(self, auth_client):
        response = auth_client.get('/api/jobs/pipelines/')
        assert response.status_code == 200
        assert set(response.data['pipelines']) == {'leads', 'quotes', 'production'}
        assert response.data['scheduler_columns'][0]['id'] == 'new_jobs_won'

    def test_capacity(self, auth_client, installers):
        response = auth_client.get('/api/jobs/capacity/', {'start': '2024-05-06', 'days': 3})
        assert response.status_code == 200
        assert [d['date'] for d in response.data['days']] == ['2024-05-06', '2024-05-07', '2024-05-08']

    def test_capacity_bad_params(self, auth_client):
        assert auth_client.get('/api/jobs/capacity/', {'start': 'soon'}).status_code == 400
        assert auth_client.get('/api/jobs/capacity/', {'days': 'many'}).status_code == 400


@pytest.mark.django_db
class TestExport:

    def test_export_is_filtered_workbook(self, auth_client, make_job):
        from io import BytesIO
        from openpyxl import load_workbook

        make_job(job_id='#1042', assigned_staff='wayne', post_install_date=timezone.now())
        make_job(job_id='#1043', assigned_staff='dave')
        response = auth_client.get('/api/jobs/export/', {'staff': 'wayne'})

        assert response.status_code == 200
        assert response['Content-Type'].startswith('application/vnd.openxmlformats')
        ws = load_workbook(BytesIO(response.content)).active
        assert ws.cell(row=3, column=1).value == 'Job ID'
        assert ws.cell(row=4, column=1).value == '#1042'
        assert ws.cell(row=5, column=1).value is None
