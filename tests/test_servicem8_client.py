from unittest.mock import Mock

import pytest
import requests

from servicem8.services import (
    ServiceM8AuthError,
    ServiceM8Client,
    ServiceM8Error,
    ServiceM8NotConfigured,
    create_servicem8_client,
    odata_query,
)


def _response(status_code=200, body=None, reason='OK'):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    response.text = ''
    response.json.return_value = body
    return response


@pytest.fixture
def client():
    client = ServiceM8Client(api_key='key-123', base_url='https://api.example.com/api_1.0/')
    client._session = Mock()
    return client


class TestConfiguration:

    def test_api_key_header(self):
        client = ServiceM8Client(api_key='key-123', access_token='')
        assert client._session.headers['X-API-Key'] == 'key-123'
        assert 'Authorization' not in client._session.headers

    def test_bearer_token_preferred(self):
        client = ServiceM8Client(api_key='key-123', access_token='tok')
        assert client._session.headers['Authorization'] == 'Bearer tok'

    def test_unconfigured_client_refuses_calls(self):
        client = ServiceM8Client(api_key='', access_token='')
        assert not client.is_configured
        with pytest.raises(ServiceM8NotConfigured):
            client.fetch_jobs()

    def test_factory_returns_none_without_credentials(self, settings):
        settings.SERVICEM8_API_KEY = ''
        settings.SERVICEM8_ACCESS_TOKEN = ''
        assert create_servicem8_client() is None

    def test_odata_query_keeps_quotes(self):
        query = odata_query({'$filter': "job_uuid eq 'abc'", '$top': 10, 'skip': None})
        assert query == "%24filter=job_uuid%20eq%20'abc'&%24top=10"


class TestRequests:

    def test_fetch_jobs_filters_active(self, client):
        client._session.get.return_value = _response(body=[{'uuid': 'a'}])
        assert client.fetch_jobs(limit=5) == [{'uuid': 'a'}]
        url = client._session.get.call_args[0][0]
        assert url.startswith('https://api.example.com/api_1.0/job.json?')
        assert 'active%20eq%201' in url
        assert '%24top=5' in url

    def test_401_raises_auth_error(self, client):
        client._session.get.return_value = _response(401, reason='Unauthorized')
        with pytest.raises(ServiceM8AuthError) as exc:
            client.fetch_job_notes('job-1')
        assert exc.value.status_code == 401
        assert 'token expired' in str(exc.value)

    def test_other_failures_raise(self, client):
        client._session.get.return_value = _response(503, reason='Service Unavailable')
        with pytest.raises(ServiceM8Error, match='503'):
            client.fetch_job_activities('job-1')

    def test_transport_errors_are_wrapped(self, client):
        client._session.get.side_effect = requests.Timeout('slow')
        with pytest.raises(ServiceM8Error, match='slow'):
            client.fetch_jobs()

    def test_job_notes_filter(self, client):
        client._session.get.return_value = _response(body=[])
        client.fetch_job_notes('job-1')
        url = client._session.get.call_args[0][0]
        assert "related_object_uuid%20eq%20'job-1'" in url

    def test_job_uuid_quotes_stay_inside_the_literal(self, client):
        client._session.get.return_value = _response(body=[])
        client.fetch_job_activities("x' or job_uuid ne '")
        url = client._session.get.call_args[0][0]
        assert "job_uuid%20eq%20'x''%20or%20job_uuid%20ne%20'''" in url


class TestLookups:

    def test_bulk_lookup_failure_returns_empty(self, client):
        client._session.get.return_value = _response(500, reason='Server Error')
        assert client.fetch_all_job_contacts() == {}
        assert client.fetch_all_companies() == {}

    def test_contacts_and_companies(self, client):
        client._session.get.side_effect = [
            _response(body=[
                {'job_uuid': 'j1', 'first': ' Ann ', 'last': 'Lee'},
                {'job_uuid': 'j2', 'first': '', 'last': ''},
            ]),
            _response(body=[{'uuid': 'c1', 'name': 'Acme Fencing'}]),
        ]
        assert client.fetch_all_job_contacts() == {'j1': {'first': 'Ann', 'last': 'Lee'}}
        assert client.fetch_all_companies() == {'c1': 'Acme Fencing'}

    def test_custom_fields_and_staff_assignment(self, client):
        client._session.get.return_value = _response(body=[
            {'uuid': 'j1', 'customfield_values': [{'field_name': 'Staff Assigned', 'value': 'mike'}]},
            {'uuid': 'j2', 'customfield_values': []},
        ])
        fields = client.fetch_all_job_custom_fields()
        assert ServiceM8Client.staff_assigned('j1', fields) == 'mike'
        assert ServiceM8Client.staff_assigned('j2', fields) == 'Unassigned'

    def test_last_communications_keeps_latest(self, client):
        client._session.get.return_value = _response(body=[
            {'related_object': 'job', 'related_object_uuid': 'j1', 'type': 'SMS', 'timestamp': '2024-01-01 09:00:00'},
            {'related_object': 'job', 'related_object_uuid': 'j1', 'type': 'Email', 'timestamp': '2024-01-05 09:00:00'},
            {'related_object': 'job', 'related_object_uuid': 'j2', 'type': 'Checkin', 'timestamp': '2024-01-05 09:00:00'},
            {'related_object': 'job', 'related_object_uuid': 'j3', 'type': 'SMS', 'timestamp': ''},
        ])
        latest = client.fetch_last_communications()
        assert set(latest) == {'j1'}
        assert latest['j1']['type'] == 'email'

    def test_last_communications_falls_back_to_notes(self, client):
        client._session.get.side_effect = [
            _response(404, reason='Not Found'),
            _response(body=[
                {'related_object': 'job', 'related_object_uuid': 'j1', 'note': 'Quote email sent', 'timestamp': '2024-01-02 09:00:00'},
                {'related_object': 'job', 'related_object_uuid': 'j2', 'note': 'Site visit', 'timestamp': '2024-01-02 09:00:00'},
            ]),
        ]
        latest = client.fetch_last_communications()
        assert set(latest) == {'j1'}
        assert latest['j1']['type'] == 'email'


class TestJobHistory:

    def test_history_combines_both_halves(self, client):
        client.fetch_job_activities = Mock(return_value=[{'uuid': 'a'}])
        client.fetch_job_notes = Mock(return_value=[{'uuid': 'n1'}, {'uuid': 'n2'}])
        assert client.fetch_job_history('j1') == {
            'activities': [{'uuid': 'a'}],
            'notes': [{'uuid': 'n1'}, {'uuid': 'n2'}],
            'totalItems': 3,
        }

    def test_failed_half_becomes_empty(self, client):
        client.fetch_job_activities = Mock(side_effect=ServiceM8Error('boom', 500))
        client.fetch_job_notes = Mock(return_value=[{'uuid': 'n1'}])
        assert client.fetch_job_history('j1')['activities'] == []

    def test_auth_error_propagates(self, client):
        client.fetch_job_activities = Mock(return_value=[])
        client.fetch_job_notes = Mock(side_effect=ServiceM8AuthError('ServiceM8 token expired. Please reconnect.', 401))
        with pytest.raises(ServiceM8AuthError):
            client.fetch_job_history('j1')
