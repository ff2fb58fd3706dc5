from datetime import date, datetime

import pytest

from jobs.board import CommandCenter
from tests.factories import job_record, staff_record


@pytest.fixture
def center():
    jobs = [
        job_record(1, job_id='#1042', customer_name='Smith', assigned_staff='wayne'),
        job_record(2, job_id='#1043', customer_name='Jones', assigned_staff='dave'),
        job_record(3, job_id='#1044', customer_name='Brown', assigned_staff='wayne'),
    ]
    staff = [
        staff_record('all', role='sales'),
        staff_record('wayne', role='sales'),
        staff_record('mike'),
        staff_record('josh'),
    ]
    return CommandCenter(jobs, staff)


class TestMoveJob:

    def test_move_changes_only_target_status(self, center):
        before = center.jobs
        center.move_job(2, 'quote_sent')

        assert center.jobs[1]['status'] == 'quote_sent'
        assert {k: v for k, v in center.jobs[1].items() if k != 'status'} == \
            {k: v for k, v in before[1].items() if k != 'status'}
        assert center.jobs[0] is before[0]
        assert center.jobs[2] is before[2]

    def test_move_does_not_mutate_previous_record(self, center):
        original = center.jobs[0]
        center.move_job(1, 'deposit_paid')
        assert original['status'] == 'new_lead'
        assert center.jobs[0] is not original

    def test_unknown_id_is_noop(self, center):
        before = center.jobs
        center.move_job(999, 'quote_sent')
        assert all(a is b for a, b in zip(center.jobs, before))

    def test_any_status_is_accepted(self, center):
        center.move_job(1, 'totally_custom_column')
        assert center.get_job(1)['status'] == 'totally_custom_column'


class TestScheduling:

    def test_schedule_posts_leaves_panel_fields(self, center):
        when = datetime(2024, 5, 6, 7, 0)
        center.jobs = tuple(
            {**job, 'panel_install_date': datetime(2024, 6, 1)} if job['id'] == 1 else job
            for job in center.jobs
        )
        center.schedule_job(1, 'posts', when)
        job = center.get_job(1)
        assert job['post_install_date'] == when
        assert job['install_stage'] == 'posts_scheduled'
        assert job['panel_install_date'] == datetime(2024, 6, 1)

    def test_unschedule_panels(self, center):
        center.schedule_job(3, 'panels', datetime(2024, 5, 6))
        center.unschedule_job(3, 'panels')
        job = center.get_job(3)
        assert job['panel_install_date'] is None
        assert job['install_stage'] == 'pending_panels'

    def test_unknown_work_type_raises(self, center):
        with pytest.raises(ValueError):
            center.schedule_job(1, 'gates', datetime(2024, 5, 6))

    def test_tentative_then_confirm(self, center):
        when = datetime(2024, 7, 1)
        center.schedule_tentative(1, 'posts', when, 'waiting on council')
        job = center.get_job(1)
        assert job['tentative_post_date'] == when
        assert job['install_stage'] == 'tentative_posts'
        assert job['tentative_notes'] == 'waiting on council'

        center.confirm_tentative(1, 'posts')
        job = center.get_job(1)
        assert job['post_install_date'] == when
        assert job['tentative_post_date'] is None
        assert job['install_stage'] == 'posts_scheduled'

    def test_confirm_without_tentative_date_is_noop(self, center):
        before = center.jobs
        center.confirm_tentative(2, 'panels')
        assert center.jobs is before

    def test_unschedule_tentative(self, center):
        center.schedule_tentative(2, 'panels', datetime(2024, 7, 1))
        center.unschedule_tentative(2, 'panels')
        job = center.get_job(2)
        assert job['tentative_panel_date'] is None
        assert job['install_stage'] == 'pending_panels'

    def test_change_scheduler_stage(self, center):
        center.change_scheduler_stage(1, 'waiting_client')
        assert center.get_job(1)['scheduler_stage'] == 'waiting_client'


class TestFiltersAndStaff:

    def test_filtered_jobs_follow_selection(self, center):
        center.set_filters(staff_id='wayne')
        assert [j['id'] for j in center.filtered_jobs] == [1, 3]
        center.set_filters(search='1044')
        assert [j['id'] for j in center.filtered_jobs] == [3]
        center.set_filters(staff_id='all', search='')
        assert len(center.filtered_jobs) == 3

    def test_filtered_view_reflects_moves(self, center):
        center.set_filters(search='smith')
        center.move_job(1, 'quote_sent')
        assert center.filtered_jobs[0]['status'] == 'quote_sent'

    def test_staff_editor_round_trip(self, center):
        editor = center.staff_editor()
        assert 'all' not in [m['id'] for m in editor.members]

        editor.update_new(name='Mike', role='install')
        member = editor.add_new()
        assert member['id'] == 'mike_2'
        assert center.staff[-1]['id'] == 'mike_2'

        editor.start_edit(center.staff[-1])
        editor.update_draft(daily_capacity_hours=6)
        assert editor.save_edit()
        assert center.staff[-1]['daily_capacity_hours'] == 6

        editor.delete('mike_2')
        assert 'mike_2' not in [m['id'] for m in center.staff]

    def test_snapshot(self, center):
        center.schedule_job(1, 'posts', datetime(2024, 5, 6, 7))
        snap = center.snapshot(today=date(2024, 5, 6), calendar_days=3)
        assert snap['total_jobs'] == 3
        assert snap['daily_install_capacity'] == 16
        assert [day['date'] for day in snap['capacity']] == ['2024-05-06', '2024-05-07', '2024-05-08']
        assert snap['capacity'][0]['booked_hours'] == 6
        assert 'leads' in snap['pipelines']
