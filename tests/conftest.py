from unittest.mock import MagicMock

import pytest

from use_cases.session_models import SessionSnapshot, UserIdentity


@pytest.fixture
def make_response():
    def _make(status_code=200, body=None):
        resp = MagicMock()
        resp.status_code = status_code
        if body is None:
            resp.json.side_effect = ValueError("No JSON")
        else:
            resp.json.return_value = body
        return resp
    return _make


@pytest.fixture
def identity():
    return UserIdentity(id="u1", name="Aline", email="aline@example.com", phone="+250700000000", role="user")


@pytest.fixture
def ready_session(identity):
    session = MagicMock()
    session.snapshot.return_value = SessionSnapshot(phase="ready", identity=identity)
    return session


@pytest.fixture
def anonymous_session():
    session = MagicMock()
    session.snapshot.return_value = SessionSnapshot(phase="ready", identity=None)
    return session
