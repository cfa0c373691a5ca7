"""
================================================================================
TEST: Web UI and JSON API
================================================================================

End-to-end tests through the Flask test client.

Test Coverage:
    - Registration (first account becomes Administrator), login, logout
    - Failed login handling and safe redirects
    - Security headers
    - camelCase JSON snapshots with enum names
    - CSRF-protected password change, with tokens issued after a real sign-in
    - Administrator-only shutdown
    - Malformed JSON bodies rejected with 400
    - Rate limits apply to sign-in, not to read-only endpoints

================================================================================
"""

from unittest.mock import Mock, patch

import pytest

import hostinfo
import web_server as ws
from hostinfo.core.models import Architecture
from hostinfo.core.system_service import SystemService

TEST_CSRF = 'test_csrf_token'


@pytest.fixture
def client(identity_store):
    ws.app.config['TESTING'] = True
    with patch.object(ws, 'identity_store', identity_store):
        with ws.app.test_client() as test_client:
            yield test_client


@pytest.fixture
def stopper():
    return Mock()


@pytest.fixture
def service(stopper):
    service = SystemService(stop_application=stopper)
    with patch.object(ws, 'system_service', service):
        yield service


def sign_in(client, username):
    with client.session_transaction() as sess:
        sess['username'] = username
        sess['csrf_token'] = TEST_CSRF


class TestRegistration:

    def test_login_redirects_to_register_without_users(self, client):
        response = client.get('/login')
        assert response.status_code == 302
        assert '/register' in response.headers['Location']

    def test_first_user_becomes_administrator(self, client, identity_store):
        response = client.post('/register', json={
            'username': 'admin',
            'password': 'Secret123!',
            'confirmPassword': 'Secret123!',
        })
        assert response.status_code == 200
        assert response.get_json()['success'] is True
        assert identity_store.find_user('admin').is_in_role('Administrator')

        with client.session_transaction() as sess:
            assert sess['username'] == 'admin'

    def test_later_users_have_no_roles(self, client, identity_store):
        identity_store.create_user('admin', 'Secret123!', roles=('Administrator',))
        response = client.post('/register', data={
            'username': 'bob',
            'password': 'Secret123!',
            'confirm_password': 'Secret123!',
        })
        assert response.status_code == 302
        assert identity_store.find_user('bob').roles == ()

    def test_registration_validation_errors(self, client):
        response = client.post('/register', json={
            'username': 'ab',
            'password': 'short',
            'confirmPassword': 'different',
        })
        assert response.status_code == 400
        errors = response.get_json()['errors']
        assert len(errors) == 3

    def test_duplicate_registration(self, client, identity_store):
        identity_store.create_user('admin', 'Secret123!')
        response = client.post('/register', json={
            'username': 'ADMIN',
            'password': 'Secret123!',
            'confirmPassword': 'Secret123!',
        })
        assert response.status_code == 400
        assert 'Username is already taken' in response.get_json()['errors']

    def test_registration_closed(self, client, identity_store):
        identity_store.create_user('admin', 'Secret123!')
        with patch.dict(ws.WEB_CONFIG, {'allow_registration': False}):
            response = client.get('/register')
        assert response.status_code == 302
        assert '/login' in response.headers['Location']


class TestLogin:

    @pytest.fixture(autouse=True)
    def existing_user(self, identity_store):
        identity_store.create_user('alice', 'Secret123!')

    def test_login_page_renders(self, client):
        response = client.get('/login')
        assert response.status_code == 200
        assert b'Log in' in response.data

    def test_json_login_success(self, client):
        response = client.post('/login', json={'username': 'alice', 'password': 'Secret123!'})
        assert response.status_code == 200
        assert response.get_json()['success'] is True
        with client.session_transaction() as sess:
            assert sess['username'] == 'alice'
            assert sess['csrf_token']

    def test_json_login_failure(self, client):
        response = client.post('/login', json={'username': 'alice', 'password': 'nope-nope'})
        assert response.status_code == 401
        assert response.get_json()['success'] is False

    def test_form_login_failure_rerenders(self, client):
        response = client.post('/login', data={'username': 'ghost', 'password': 'nope-nope'})
        assert response.status_code == 401
        assert b'Invalid credentials' in response.data

    def test_form_login_follows_local_next(self, client):
        response = client.post('/login?next=/System/Information',
                               data={'username': 'alice', 'password': 'Secret123!'})
        assert response.status_code == 302
        assert response.headers['Location'].endswith('/System/Information')

    def test_form_login_ignores_external_next(self, client):
        response = client.post('/login?next=//evil.example.com/',
                               data={'username': 'alice', 'password': 'Secret123!'})
        assert response.status_code == 302
        assert 'evil.example.com' not in response.headers['Location']

    def test_logout_clears_session(self, client):
        sign_in(client, 'alice')
        response = client.get('/logout')
        assert response.status_code == 302
        with client.session_transaction() as sess:
            assert 'username' not in sess

    def test_security_headers(self, client):
        response = client.get('/login')
        assert response.headers['X-Frame-Options'] == 'DENY'
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert "frame-ancestors 'none'" in response.headers['Content-Security-Policy']


class TestSystemApi:

    @pytest.fixture(autouse=True)
    def signed_in(self, client, identity_store):
        identity_store.create_user('alice', 'Secret123!')
        sign_in(client, 'alice')

    @pytest.mark.parametrize("path", [
        '/api/v1/system/environment',
        '/api/v1/system/os',
        '/api/v1/system/process',
        '/api/v1/system/version',
        '/api/csrf-token',
    ])
    def test_requires_authentication(self, client, path):
        with client.session_transaction() as sess:
            sess.clear()
        response = client.get(path)
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Authentication required'

    def test_os_information_uses_camel_case_and_enum_names(self, client, service):
        data = client.get('/api/v1/system/os').get_json()
        assert set(data) == {'frameworkDescription', 'osArchitecture', 'osDescription',
                             'processArchitecture', 'runtimeIdentifier'}
        assert data['osArchitecture'] in Architecture.__members__
        assert data['processArchitecture'] in Architecture.__members__

    def test_process_information(self, client, service):
        data = client.get('/api/v1/system/process').get_json()
        assert data['processId'] == service.get_process_information().process_id
        assert isinstance(data['startTime'], str)
        assert isinstance(data['totalProcessorTime'], (int, float))
        assert isinstance(data['processorAffinity'], list)

    def test_environment(self, client, service):
        data = client.get('/api/v1/system/environment').get_json()
        assert data['machineName'] == service.get_environment().machine_name
        assert 'is64bitOperatingSystem' in data
        assert 'systemPageSize' in data
        assert isinstance(data['variables'], dict)

    def test_version(self, client, service):
        response = client.get('/api/v1/system/version')
        assert response.status_code == 200
        assert response.get_json() == hostinfo.__version__

    def test_csrf_token_endpoint(self, client):
        data = client.get('/api/csrf-token').get_json()
        assert data == {'csrfToken': TEST_CSRF}


class TestChangePassword:

    @pytest.fixture(autouse=True)
    def signed_in(self, client, identity_store):
        identity_store.create_user('alice', 'Secret123!')
        sign_in(client, 'alice')

    def test_requires_csrf_token(self, client):
        response = client.post('/api/auth/change-password', json={
            'currentPassword': 'Secret123!', 'newPassword': 'NewSecret456!'})
        assert response.status_code == 403

    def test_rejects_cross_origin(self, client):
        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'Secret123!', 'newPassword': 'NewSecret456!'},
                               headers={'X-CSRF-Token': TEST_CSRF, 'Origin': 'https://evil.example.com'})
        assert response.status_code == 403

    def test_change_password(self, client, identity_store):
        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'Secret123!', 'newPassword': 'NewSecret456!'},
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 200
        assert identity_store.validate_credentials('alice', 'NewSecret456!')

    def test_wrong_current_password(self, client):
        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'wrong-one', 'newPassword': 'NewSecret456!'},
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 401

    def test_short_new_password(self, client):
        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'Secret123!', 'newPassword': 'short'},
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 400

    def test_missing_fields(self, client):
        response = client.post('/api/auth/change-password', json={},
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 400


class TestShutdown:

    def test_administrator_can_shut_down(self, client, identity_store, service, stopper):
        identity_store.create_user('admin', 'Secret123!', roles=('Administrator',))
        sign_in(client, 'admin')
        response = client.post('/api/v1/system/shutdown', headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 202
        stopper.assert_called_once_with()

    def test_non_administrator_forbidden(self, client, identity_store, service, stopper):
        identity_store.create_user('bob', 'Secret123!')
        sign_in(client, 'bob')
        response = client.post('/api/v1/system/shutdown', headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 403
        stopper.assert_not_called()

    def test_requires_csrf_token(self, client, identity_store, service, stopper):
        identity_store.create_user('admin', 'Secret123!', roles=('Administrator',))
        sign_in(client, 'admin')
        response = client.post('/api/v1/system/shutdown')
        assert response.status_code == 403
        stopper.assert_not_called()

    def test_requires_post(self, client, identity_store, service):
        identity_store.create_user('admin', 'Secret123!', roles=('Administrator',))
        sign_in(client, 'admin')
        response = client.get('/api/v1/system/shutdown')
        assert response.status_code == 405


class TestCsrfThroughSignIn:
    """Token issued after a real sign-in is accepted on protected endpoints"""

    def test_token_from_endpoint_changes_password(self, client, identity_store):
        identity_store.create_user('alice', 'Secret123!')
        response = client.post('/login', json={'username': 'alice', 'password': 'Secret123!'})
        assert response.status_code == 200

        token = client.get('/api/csrf-token').get_json()['csrfToken']
        assert client.get('/api/csrf-token').get_json()['csrfToken'] == token

        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'Secret123!', 'newPassword': 'NewSecret456!'},
                               headers={'X-CSRF-Token': token})
        assert response.status_code == 200
        assert identity_store.validate_credentials('alice', 'NewSecret456!')

    def test_session_keeps_csrf_keys(self, client, identity_store):
        identity_store.create_user('alice', 'Secret123!')
        client.post('/login', json={'username': 'alice', 'password': 'Secret123!'})
        with client.session_transaction() as sess:
            assert sess['username'] == 'alice'
            assert sess.get('csrf_token')
            assert isinstance(sess.get('csrf_created_at'), float)

    def test_registered_administrator_can_shut_down(self, client, service, stopper):
        response = client.post('/register', json={
            'username': 'admin',
            'password': 'Secret123!',
            'confirmPassword': 'Secret123!',
        })
        assert response.status_code == 200

        token = client.get('/api/csrf-token').get_json()['csrfToken']
        response = client.post('/api/v1/system/shutdown', headers={'X-CSRF-Token': token})
        assert response.status_code == 202
        stopper.assert_called_once_with()


class TestMalformedBodies:

    @pytest.fixture(autouse=True)
    def existing_user(self, identity_store):
        identity_store.create_user('alice', 'Secret123!')

    def test_login_non_string_password(self, client):
        response = client.post('/login', json={'username': 'alice', 'password': 12345678})
        assert response.status_code == 400
        with client.session_transaction() as sess:
            assert 'username' not in sess

    def test_login_list_body(self, client):
        response = client.post('/login', json=['alice'])
        assert response.status_code == 400

    def test_register_non_string_username(self, client, identity_store):
        response = client.post('/register', json={
            'username': 1234,
            'password': 'Secret123!',
            'confirmPassword': 'Secret123!',
        })
        assert response.status_code == 400
        assert identity_store.user_count() == 1

    def test_change_password_non_string_new_password(self, client):
        sign_in(client, 'alice')
        response = client.post('/api/auth/change-password',
                               json={'currentPassword': 'Secret123!', 'newPassword': 12345678},
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 400

    def test_change_password_list_body(self, client):
        sign_in(client, 'alice')
        response = client.post('/api/auth/change-password', json=[1, 2],
                               headers={'X-CSRF-Token': TEST_CSRF})
        assert response.status_code == 400


class TestRateLimits:

    @pytest.fixture
    def limits_enabled(self):
        ws.limiter.reset()
        with patch.object(ws.limiter, 'enabled', True):
            yield
        ws.limiter.reset()

    def test_snapshot_endpoints_are_not_limited(self, client, identity_store, service, limits_enabled):
        identity_store.create_user('alice', 'Secret123!')
        sign_in(client, 'alice')
        statuses = {client.get('/api/v1/system/version').status_code for _ in range(110)}
        assert statuses == {200}

    def test_login_is_limited(self, client, identity_store, limits_enabled):
        identity_store.create_user('alice', 'Secret123!')
        for _ in range(5):
            response = client.post('/login', json={'username': 'alice', 'password': 'wrong-one'})
            assert response.status_code == 401
        response = client.post('/login', json={'username': 'alice', 'password': 'wrong-one'})
        assert response.status_code == 429
