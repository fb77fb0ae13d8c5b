"""Tests for identity providers and the session store."""

import pytest
import os
import time
from unittest.mock import Mock, patch

from challenge import config
from challenge.auth import SessionStore, get_identity_provider, reset_identity_provider
from challenge.auth.local import LocalIdentityProvider, hash_password
from challenge.auth.supabase_auth import SupabaseIdentityProvider, map_auth_error
from challenge.errors import AuthenticationError
from challenge.storage.exceptions import ConfigurationError


class TestSessionStore:
    """Tests for SessionStore."""

    def test_put_and_get(self):
        store = SessionStore()
        store.put('tok', 'u1')
        assert store.get('tok') == 'u1'

    def test_persistent_sessions(self):
        store = SessionStore()
        store.put('tok', 'u1', persistent=True)
        assert store.get('tok') == 'u1'

    def test_lifetimes_differ(self):
        store = SessionStore(session_ttl=60, persistent_ttl=3600)
        assert store.ttl_for(False) == 60
        assert store.ttl_for(True) == 3600

    def test_session_expires(self):
        store = SessionStore(session_ttl=1)
        store.put('tok', 'u1')
        time.sleep(1.1)
        assert store.get('tok') is None

    def test_delete(self):
        store = SessionStore()
        store.put('tok', 'u1')
        assert store.delete('tok') is True
        assert store.delete('tok') is False
        assert store.get('tok') is None

    def test_delete_user(self):
        store = SessionStore()
        store.put('a', 'u1')
        store.put('b', 'u1', persistent=True)
        store.put('c', 'u2')

        assert store.delete_user('u1') == 2
        assert store.get('c') == 'u2'

    def test_failure_counter(self):
        store = SessionStore()
        assert store.record_failure('a@x.com') == 1
        assert store.record_failure('a@x.com') == 2
        store.clear_failures('a@x.com')
        assert store.failures('a@x.com') == 0

    def test_stats(self):
        store = SessionStore()
        store.put('tok', 'u1')
        stats = store.stats()
        assert stats['session']['size'] == 1
        assert stats['persistent']['size'] == 0


class TestLocalIdentityProvider:
    """Tests for the in-memory identity provider."""

    def test_sign_up_returns_token(self, identity):
        result = identity.sign_up('Alice@Example.com', 'secret123', 'Alice')

        assert result.email == 'alice@example.com'
        assert result.token
        assert result.persistent is False
        assert identity.verify_token(result.token) == result.uid

    def test_duplicate_email(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_up('ALICE@example.com', 'other-pass', 'Alice 2')
        assert exc_info.value.code == 'email-already-in-use'
        assert exc_info.value.status_code == 409

    def test_weak_password(self, identity):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_up('alice@example.com', '123', 'Alice')
        assert exc_info.value.code == 'weak-password'

    def test_weak_password_message_follows_minimum(self, identity):
        with patch.object(config, 'MIN_PASSWORD_LENGTH', 8):
            with pytest.raises(AuthenticationError) as exc_info:
                identity.sign_up('alice@example.com', 'secret1', 'Alice')
        assert 'at least 8 characters' in str(exc_info.value)

    def test_invalid_email(self, identity):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_up('not-an-email', 'secret123', 'Alice')
        assert exc_info.value.code == 'invalid-email'

    def test_sign_in(self, identity):
        created = identity.sign_up('alice@example.com', 'secret123', 'Alice')

        result = identity.sign_in('alice@example.com', 'secret123')

        assert result.uid == created.uid
        assert result.token != created.token
        assert result.display_name == 'Alice'

    def test_remember_me_gives_persistent_session(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        result = identity.sign_in('alice@example.com', 'secret123', remember_me=True)

        assert result.persistent is True
        assert result.expires_in == config.REMEMBER_ME_TTL_DAYS * 24 * 3600

    def test_unknown_user(self, identity):
        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_in('ghost@example.com', 'secret123')
        assert exc_info.value.code == 'user-not-found'

    def test_wrong_password(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_in('alice@example.com', 'wrong-pass')
        assert exc_info.value.code == 'wrong-password'
        assert exc_info.value.status_code == 401

    def test_too_many_failures_locks_out(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        with patch.object(config, 'MAX_FAILED_LOGINS', 2):
            for _ in range(2):
                with pytest.raises(AuthenticationError):
                    identity.sign_in('alice@example.com', 'wrong-pass')

            # Even the right password is refused during the lockout
            with pytest.raises(AuthenticationError) as exc_info:
                identity.sign_in('alice@example.com', 'secret123')
        assert exc_info.value.code == 'too-many-requests'
        assert exc_info.value.status_code == 429

    def test_success_clears_failures(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        with pytest.raises(AuthenticationError):
            identity.sign_in('alice@example.com', 'wrong-pass')
        identity.sign_in('alice@example.com', 'secret123')

        assert identity.store.failures('alice@example.com') == 0

    def test_sign_out_invalidates_token(self, identity):
        result = identity.sign_up('alice@example.com', 'secret123', 'Alice')

        identity.sign_out(result.token)

        with pytest.raises(AuthenticationError) as exc_info:
            identity.verify_token(result.token)
        assert exc_info.value.code == 'invalid-session'

    def test_update_display_name(self, identity):
        created = identity.sign_up('alice@example.com', 'secret123', 'Alice')

        identity.update_display_name(created.uid, 'Alice B.')

        assert identity.sign_in('alice@example.com', 'secret123').display_name == 'Alice B.'

    def test_delete_account(self, identity):
        created = identity.sign_up('alice@example.com', 'secret123', 'Alice')

        assert identity.delete_account(created.uid) is True
        with pytest.raises(AuthenticationError):
            identity.verify_token(created.token)

    def test_stats_counts_accounts_and_sessions(self, identity):
        identity.sign_up('alice@example.com', 'secret123', 'Alice')

        stats = identity.stats()

        assert stats['accounts'] == 1
        assert stats['sessions']['session']['size'] == 1

    def test_password_hash_is_salted(self):
        assert hash_password('secret', '00' * 16, 1000) != hash_password('secret', '11' * 16, 1000)


class TestSupabaseIdentityProvider:
    """Tests for the Supabase provider with a mocked client."""

    @pytest.fixture
    def provider(self):
        with patch.dict(os.environ, {'SUPABASE_URL': 'https://example.supabase.co', 'SUPABASE_KEY': 'key'}):
            yield SupabaseIdentityProvider()

    def _auth_response(self, token='jwt-token'):
        user = Mock(id='sb-user', email='alice@example.com', user_metadata={'display_name': 'Alice'})
        session = Mock(access_token=token, expires_in=3600)
        return Mock(user=user, session=session)

    def test_requires_credentials(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop('SUPABASE_URL', None)
            with pytest.raises(ConfigurationError):
                SupabaseIdentityProvider()

    def test_sign_in(self, provider):
        client = Mock()
        client.auth.sign_in_with_password.return_value = self._auth_response()

        with patch.object(provider, '_new_client', return_value=client):
            result = provider.sign_in('alice@example.com', 'secret123', remember_me=True)

        assert result.uid == 'sb-user'
        assert result.token == 'jwt-token'
        assert result.display_name == 'Alice'
        assert result.persistent is True
        assert result.expires_in == 3600

    def test_sign_in_error_is_mapped(self, provider):
        error = Exception("Invalid login credentials")
        error.code = 'invalid_credentials'
        client = Mock()
        client.auth.sign_in_with_password.side_effect = error

        with patch.object(provider, '_new_client', return_value=client):
            with pytest.raises(AuthenticationError) as exc_info:
                provider.sign_in('alice@example.com', 'nope')
        assert exc_info.value.code == 'wrong-password'

    def test_sign_up_passes_display_name(self, provider):
        client = Mock()
        client.auth.sign_up.return_value = self._auth_response()

        with patch.object(provider, '_new_client', return_value=client):
            provider.sign_up('alice@example.com', 'secret123', 'Alice')

        credentials = client.auth.sign_up.call_args[0][0]
        assert credentials['options']['data']['display_name'] == 'Alice'

    def test_verify_token(self, provider):
        client = Mock()
        client.auth.get_user.return_value = Mock(user=Mock(id='sb-user'))

        with patch.object(provider, '_get_client', return_value=client):
            assert provider.verify_token('jwt-token') == 'sb-user'

    def test_verify_token_without_user(self, provider):
        client = Mock()
        client.auth.get_user.return_value = None

        with patch.object(provider, '_get_client', return_value=client):
            with pytest.raises(AuthenticationError):
                provider.verify_token('jwt-token')

    def test_update_display_name(self, provider):
        client = Mock()

        with patch.object(provider, '_get_client', return_value=client):
            provider.update_display_name('sb-user', 'Alice B.')

        client.auth.admin.update_user_by_id.assert_called_once_with(
            'sb-user', {'user_metadata': {'display_name': 'Alice B.'}}
        )

    def test_delete_account(self, provider):
        client = Mock()

        with patch.object(provider, '_get_client', return_value=client):
            assert provider.delete_account('sb-user') is True

        client.auth.admin.delete_user.assert_called_once_with('sb-user')

    def test_delete_missing_account(self, provider):
        error = Exception("User not found")
        error.code = 'user_not_found'
        client = Mock()
        client.auth.admin.delete_user.side_effect = error

        with patch.object(provider, '_get_client', return_value=client):
            assert provider.delete_account('sb-user') is False

    @pytest.mark.parametrize("code,expected", [
        ('user_already_exists', 'email-already-in-use'),
        ('weak_password', 'weak-password'),
        ('email_address_invalid', 'invalid-email'),
        ('over_request_rate_limit', 'too-many-requests'),
        ('session_not_found', 'invalid-session'),
    ])
    def test_error_codes(self, code, expected):
        error = Exception("boom")
        error.code = code
        assert map_auth_error(error, 'wrong-password').code == expected

    def test_rate_limit_status(self):
        error = Exception("slow down")
        error.status = 429
        assert map_auth_error(error, 'wrong-password').code == 'too-many-requests'

    def test_unknown_error_uses_default(self):
        assert map_auth_error(Exception("?"), 'wrong-password').code == 'wrong-password'


class TestFactory:
    """Tests for the identity provider factory."""

    def setup_method(self):
        reset_identity_provider()

    def teardown_method(self):
        reset_identity_provider()

    def test_default_is_local(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop('AUTH_PROVIDER', None)
            assert isinstance(get_identity_provider(), LocalIdentityProvider)

    def test_singleton(self):
        with patch.dict(os.environ, {'AUTH_PROVIDER': 'local'}):
            assert get_identity_provider() is get_identity_provider()

    def test_unknown_provider(self):
        with patch.dict(os.environ, {'AUTH_PROVIDER': 'ldap'}):
            with pytest.raises(ConfigurationError):
                get_identity_provider()
