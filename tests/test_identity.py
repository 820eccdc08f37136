"""Tests for identity providers."""
from __future__ import annotations

import json
from unittest.mock import MagicMock

import pytest
import requests

from taskflow.identity import (
    IDENTITY_TOOLKIT_URL,
    AuthenticationError,
    FirebaseAuthClient,
    StaticIdentity,
)


def _response(ok: bool, body: dict, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.ok = ok
    resp.status_code = status_code
    resp.json.return_value = body
    return resp


@pytest.fixture
def http():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def session_path(tmp_path):
    return tmp_path / "session" / "session.json"


class TestStaticIdentity:
    def test_current_and_sign_out(self):
        identity = StaticIdentity("a@x.com")
        assert identity.current_identity() == "a@x.com"
        identity.sign_out()
        assert identity.current_identity() is None

    def test_empty_email_is_signed_out(self):
        assert StaticIdentity("").current_identity() is None


class TestFirebaseAuthClient:
    def test_sign_in_persists_session(self, http, session_path):
        http.post.return_value = _response(
            True,
            {"email": "a@x.com", "idToken": "tok", "refreshToken": "ref", "localId": "uid"},
        )
        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        session = client.sign_in("a@x.com", "secret")

        assert session.email == "a@x.com"
        assert client.session == session
        assert client.current_identity() == "a@x.com"
        args, kwargs = http.post.call_args
        assert args[0] == f"{IDENTITY_TOOLKIT_URL}/accounts:signInWithPassword"
        assert kwargs["params"] == {"key": "key"}
        assert kwargs["json"] == {"email": "a@x.com", "password": "secret", "returnSecureToken": True}
        stored = json.loads(session_path.read_text(encoding="utf-8"))
        assert stored["id_token"] == "tok"

    def test_session_survives_restart(self, http, session_path):
        http.post.return_value = _response(True, {"email": "a@x.com", "idToken": "tok"})
        FirebaseAuthClient("key", session_path=session_path, http=http).sign_in("a@x.com", "pw")

        restarted = FirebaseAuthClient("key", session_path=session_path, http=http)

        assert restarted.current_identity() == "a@x.com"

    def test_sign_up_uses_signup_endpoint(self, http, session_path):
        http.post.return_value = _response(True, {"email": "new@x.com", "idToken": "tok"})
        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        client.sign_up("new@x.com", "pw123456")

        assert http.post.call_args.args[0].endswith("accounts:signUp")
        assert client.current_identity() == "new@x.com"

    def test_provider_error_message_passed_through(self, http, session_path):
        http.post.return_value = _response(
            False, {"error": {"code": 400, "message": "INVALID_PASSWORD"}}, status_code=400
        )
        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        with pytest.raises(AuthenticationError, match="INVALID_PASSWORD"):
            client.sign_in("a@x.com", "wrong")

        assert client.current_identity() is None
        assert not session_path.exists()

    def test_network_error(self, http, session_path):
        http.post.side_effect = requests.ConnectionError("dns failure")
        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        with pytest.raises(AuthenticationError, match="Network error"):
            client.sign_in("a@x.com", "pw")

    def test_missing_credentials_make_no_request(self, http, session_path):
        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        with pytest.raises(AuthenticationError):
            client.sign_in("", "pw")
        http.post.assert_not_called()

    def test_sign_out_removes_session(self, http, session_path):
        http.post.return_value = _response(True, {"email": "a@x.com", "idToken": "tok"})
        client = FirebaseAuthClient("key", session_path=session_path, http=http)
        client.sign_in("a@x.com", "pw")

        client.sign_out()

        assert client.current_identity() is None
        assert not session_path.exists()

    def test_corrupt_session_file_ignored(self, http, session_path):
        session_path.parent.mkdir(parents=True)
        session_path.write_text("{not json", encoding="utf-8")

        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        assert client.current_identity() is None

    def test_undecodable_session_file_ignored(self, http, session_path):
        session_path.parent.mkdir(parents=True)
        session_path.write_bytes(b"\xff\xfe\x00garbage")

        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        assert client.current_identity() is None
        assert client.session is None

    def test_unreadable_session_path_ignored(self, http, session_path):
        session_path.mkdir(parents=True)

        client = FirebaseAuthClient("key", session_path=session_path, http=http)

        assert client.current_identity() is None
