"""Tests for UserService."""

import pytest
from unittest.mock import patch

from challenge import config
from challenge.errors import AuthenticationError, InvalidInputError, NotFoundError, PermissionDeniedError
from challenge.models import Session, UserRole
from challenge.services import UserService
from challenge.storage.exceptions import QueryError


@pytest.fixture
def users(db_fixture, identity):
    return UserService(db_fixture, identity)


class TestRegistration:
    """Tests for register and sign-in."""

    def test_register_creates_regular_user(self, users, db_fixture):
        result, user = users.register('alice@example.com', 'secret123', '  Alice  ')

        assert user.role == UserRole.REGULAR
        assert user.display_name == 'Alice'
        assert result.token
        assert db_fixture.get_user(user.uid)['displayName'] == 'Alice'

    def test_register_admin_email(self, users):
        with patch.object(config, 'ADMIN_EMAILS', ['boss@example.com']):
            _, user = users.register('Boss@Example.com', 'secret123', 'Boss')
        assert user.role == UserRole.ADMIN

    def test_register_requires_display_name(self, users):
        with pytest.raises(InvalidInputError):
            users.register('alice@example.com', 'secret123', '   ')

    def test_register_duplicate_email(self, users):
        users.register('alice@example.com', 'secret123', 'Alice')

        with pytest.raises(AuthenticationError) as exc_info:
            users.register('alice@example.com', 'secret123', 'Alice')
        assert exc_info.value.code == 'email-already-in-use'

    def test_register_failed_document_removes_account(self, users, identity, db_fixture):
        with patch.object(db_fixture, 'save_user', side_effect=QueryError("disk full")):
            with pytest.raises(QueryError):
                users.register('alice@example.com', 'secret123', 'Alice')

        with pytest.raises(AuthenticationError) as exc_info:
            identity.sign_in('alice@example.com', 'secret123')
        assert exc_info.value.code == 'user-not-found'

        _, user = users.register('alice@example.com', 'secret123', 'Alice')
        assert db_fixture.get_user(user.uid) is not None

    def test_sign_in_updates_last_login(self, users, db_fixture):
        _, created = users.register('alice@example.com', 'secret123', 'Alice')

        _, user = users.sign_in('alice@example.com', 'secret123')

        assert user.last_login_at >= created.last_login_at
        assert db_fixture.get_user(created.uid)['lastLoginAt'] is not None

    def test_first_sign_in_creates_missing_document(self, users, identity, db_fixture):
        created = identity.sign_up('carol@example.com', 'secret123', 'Carol')

        _, user = users.sign_in('carol@example.com', 'secret123')

        assert user.uid == created.uid
        assert user.display_name == 'Carol'
        assert db_fixture.get_user(created.uid) is not None


class TestSessions:
    """Tests for resolving bearer tokens."""

    def test_resolve_session(self, users):
        result, user = users.register('alice@example.com', 'secret123', 'Alice')

        session = users.resolve_session(result.token)

        assert session.uid == user.uid
        assert session.display_name == 'Alice'
        assert session.is_admin is False
        assert session.token == result.token

    def test_role_change_applies_to_next_request(self, users, db_fixture):
        result, user = users.register('alice@example.com', 'secret123', 'Alice')
        db_fixture.update_user(user.uid, {'role': 'admin'})

        assert users.resolve_session(result.token).is_admin is True

    def test_invalid_token(self, users):
        with pytest.raises(AuthenticationError) as exc_info:
            users.resolve_session('garbage')
        assert exc_info.value.code == 'invalid-session'

    def test_token_of_deleted_user_document(self, users, db_fixture):
        result, user = users.register('alice@example.com', 'secret123', 'Alice')
        db_fixture.clear_all()

        with pytest.raises(AuthenticationError):
            users.resolve_session(result.token)

    def test_sign_out(self, users):
        result, _ = users.register('alice@example.com', 'secret123', 'Alice')

        users.sign_out(result.token)

        with pytest.raises(AuthenticationError):
            users.resolve_session(result.token)


class TestProfile:
    """Tests for profile updates."""

    def test_update_display_name(self, users, identity):
        result, user = users.register('alice@example.com', 'secret123', 'Alice')
        session = users.resolve_session(result.token)

        updated = users.update_display_name(session, 'Alice B.')

        assert updated.display_name == 'Alice B.'
        assert identity.sign_in('alice@example.com', 'secret123').display_name == 'Alice B.'

    def test_get_profile(self, users):
        result, user = users.register('alice@example.com', 'secret123', 'Alice')
        assert users.get_profile(users.resolve_session(result.token)).email == 'alice@example.com'


class TestAdministration:
    """Tests for admin-only user operations."""

    def test_list_users(self, users, seeded_users, admin_session):
        names = [u.display_name for u in users.list_users(admin_session)]
        assert names == ['Admin', 'Alice', 'Bob']

    def test_list_users_requires_admin(self, users, seeded_users, alice_session):
        with pytest.raises(PermissionDeniedError):
            users.list_users(alice_session)

    def test_set_role(self, users, seeded_users, admin_session, bob_session):
        user = users.set_role(admin_session, bob_session.uid, UserRole.ADMIN)
        assert user.role == UserRole.ADMIN

    def test_set_role_requires_admin(self, users, seeded_users, alice_session, bob_session):
        with pytest.raises(PermissionDeniedError):
            users.set_role(alice_session, bob_session.uid, UserRole.ADMIN)

    def test_set_role_unknown_user(self, users, seeded_users, admin_session):
        with pytest.raises(NotFoundError):
            users.set_role(admin_session, 'nobody', UserRole.ADMIN)
