from unittest.mock import MagicMock, patch

import pytest
import requests

from infrastructure.api.http_client import ApiClient, TransportUnauthorized
from infrastructure.repositories.sqlite_audit_repository import AuditAction
from infrastructure.storage.token_store import MemoryTokenStore
from use_cases.errors import AuthenticationFailed, ProfileUpdateFailed
from use_cases.session_service import SessionManager

USER = {"id": "u1", "name": "Aline", "email": "aline@example.com", "phone": "+250700000000", "role": "user"}


@pytest.fixture
def client():
    return ApiClient("http://api.test/api")


@pytest.fixture
def store():
    return MemoryTokenStore()


@pytest.fixture
def audit():
    return MagicMock()


@pytest.fixture
def manager(client, store, audit):
    return SessionManager(client, store, audit_repo=audit)


def test_starts_initializing_without_identity(manager):
    assert manager.phase == "initializing"
    assert manager.identity is None
    assert manager.get_token() is None


@patch("requests.request")
def test_initialize_without_stored_token_makes_no_call(mock_request, manager):
    snapshot = manager.initialize()

    assert snapshot.phase == "ready"
    assert snapshot.identity is None
    mock_request.assert_not_called()


@patch("requests.request")
def test_initialize_restores_identity_from_stored_token(mock_request, client, audit, make_response):
    mock_request.return_value = make_response(200, {"user": USER})
    manager = SessionManager(client, MemoryTokenStore("stored-token"), audit_repo=audit)

    snapshot = manager.initialize()

    assert snapshot.phase == "ready"
    assert snapshot.identity.id == "u1"
    assert manager.get_token() == "stored-token"
    _, kwargs = mock_request.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer stored-token"


@patch("requests.request")
def test_initialize_discards_expired_token_without_redirect(mock_request, client, make_response):
    mock_request.return_value = make_response(401, {"error": "Token expired"})
    store = MemoryTokenStore("expired")
    manager = SessionManager(client, store)

    snapshot = manager.initialize()

    assert snapshot.phase == "ready"
    assert snapshot.identity is None
    assert manager.get_token() is None
    assert store.load() is None
    assert manager.consume_login_redirect() is False


@patch("requests.request")
def test_initialize_absorbs_network_failure(mock_request, client):
    mock_request.side_effect = requests.ConnectionError("down")
    store = MemoryTokenStore("token")
    manager = SessionManager(client, store)

    snapshot = manager.initialize()

    assert snapshot.phase == "ready"
    assert snapshot.identity is None
    assert store.load() is None


@patch("requests.request")
def test_initialize_runs_once(mock_request, client, make_response):
    mock_request.return_value = make_response(200, {"user": USER})
    manager = SessionManager(client, MemoryTokenStore("t"))

    manager.initialize()
    manager.initialize()

    assert mock_request.call_count == 1


@patch("requests.request")
def test_login_stores_token_and_identity_together(mock_request, manager, store, audit, make_response):
    mock_request.return_value = make_response(200, {"token": "new-token", "user": USER})
    listener = MagicMock()
    manager.subscribe(listener)

    identity = manager.login(" aline@example.com ", "secret123")

    assert identity.email == "aline@example.com"
    assert manager.get_token() == "new-token"
    assert store.load() == "new-token"
    assert manager.snapshot().identity == identity
    listener.assert_called_once()
    assert audit.log_action.call_args[0][0] == AuditAction.LOGIN_SUCCESS
    _, kwargs = mock_request.call_args
    assert kwargs["json"]["email"] == "aline@example.com"


@patch("requests.request")
def test_login_failure_does_not_mutate_session(mock_request, manager, store, make_response):
    mock_request.return_value = make_response(401, {"error": "Invalid credentials"})
    manager.initialize()

    with pytest.raises(AuthenticationFailed) as excinfo:
        manager.login("aline@example.com", "wrong")

    assert excinfo.value.message == "Invalid credentials"
    assert manager.identity is None
    assert manager.get_token() is None
    assert store.load() is None


@patch("requests.request")
def test_login_with_malformed_response_fails(mock_request, manager, make_response):
    mock_request.return_value = make_response(200, {"message": "ok"})

    with pytest.raises(AuthenticationFailed):
        manager.login("aline@example.com", "secret123")

    assert manager.identity is None


@patch("requests.request")
def test_register_rejects_admin_role_without_network(mock_request, manager):
    with pytest.raises(AuthenticationFailed):
        manager.register("Root", "root@example.com", "+250700000001", "secret123", role="admin")

    mock_request.assert_not_called()


@patch("requests.request")
def test_register_organizer_establishes_session(mock_request, manager, make_response):
    organizer = dict(USER, id="o1", role="organizer")
    mock_request.return_value = make_response(201, {"token": "org-token", "user": organizer})

    identity = manager.register("Org", "org@example.com", "+250700000002", "secret123", role="organizer")

    assert identity.role == "organizer"
    assert manager.get_token() == "org-token"
    _, kwargs = mock_request.call_args
    assert kwargs["json"]["role"] == "organizer"


@patch("requests.request")
def test_logout_then_initialize_without_token_yields_ready_anonymous(mock_request, manager, make_response):
    mock_request.return_value = make_response(200, {"token": "t", "user": USER})
    manager.login("aline@example.com", "secret123")

    manager.logout()
    snapshot = manager.initialize()

    assert snapshot.identity is None
    assert snapshot.phase == "ready"
    assert manager.get_token() is None


def test_logout_when_anonymous_never_fails(manager, audit):
    manager.logout()
    manager.logout()

    assert manager.identity is None
    audit.log_action.assert_not_called()


@patch("requests.request")
def test_update_profile_replaces_identity(mock_request, manager, make_response):
    mock_request.side_effect = [
        make_response(200, {"token": "t", "user": USER}),
        make_response(200, {"user": dict(USER, name="Aline M.", phone="+250788000000")}),
    ]
    manager.login("aline@example.com", "secret123")

    identity = manager.update_profile(name="Aline M.", phone="+250788000000")

    assert identity.name == "Aline M."
    assert manager.identity.phone == "+250788000000"
    _, kwargs = mock_request.call_args
    assert kwargs["json"] == {"name": "Aline M.", "phone": "+250788000000"}


@patch("requests.request")
def test_update_profile_failure_leaves_session_unchanged(mock_request, manager, make_response):
    mock_request.side_effect = [
        make_response(200, {"token": "t", "user": USER}),
        make_response(500, {"error": "Failed to update user"}),
    ]
    manager.login("aline@example.com", "secret123")
    before = manager.identity

    with pytest.raises(ProfileUpdateFailed) as excinfo:
        manager.update_profile(name="Someone else")

    assert excinfo.value.message == "Failed to update user"
    assert manager.identity is before
    assert manager.get_token() == "t"


def test_update_profile_requires_identity(manager):
    with pytest.raises(ProfileUpdateFailed):
        manager.update_profile(name="x")


@patch("requests.request")
def test_unauthorized_response_anywhere_forces_logout_and_redirect(mock_request, client, manager, store, make_response):
    mock_request.side_effect = [
        make_response(200, {"token": "t", "user": USER}),
        make_response(401, {"error": "Token expired"}),
    ]
    manager.initialize()
    manager.login("aline@example.com", "secret123")

    with pytest.raises(TransportUnauthorized):
        client.get("/user/tickets")

    assert manager.identity is None
    assert manager.get_token() is None
    assert store.load() is None
    assert manager.consume_login_redirect() is True
    assert manager.consume_login_redirect() is False


def test_unsubscribe_stops_notifications(manager):
    listener = MagicMock()
    unsubscribe = manager.subscribe(listener)
    unsubscribe()

    manager.initialize()

    listener.assert_not_called()
