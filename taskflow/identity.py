"""Identity providers: who is signed in.

The task store only needs ``current_identity()`` (the signed-in user's
email, or None) and ``sign_out()``. ``FirebaseAuthClient`` implements
email/password sign-in and sign-up against the Firebase Auth REST API and
keeps the session on disk, so a later run starts out signed in.
"""
from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

IDENTITY_TOOLKIT_URL = "https://identitytoolkit.googleapis.com/v1"


class IdentityProvider(Protocol):
    def current_identity(self) -> Optional[str]: ...

    def sign_out(self) -> None: ...


class AuthenticationError(RuntimeError):
    """Raised when the auth provider rejects a sign-in or sign-up."""


@dataclass(slots=True)
class AuthSession:
    """Tokens returned by a successful sign-in."""

    email: str
    id_token: str
    refresh_token: str = ""
    local_id: str = ""


class StaticIdentity:
    """A fixed identity, for development and tests."""

    def __init__(self, email: Optional[str]) -> None:
        self._email = email or None

    def current_identity(self) -> Optional[str]:
        return self._email

    def sign_out(self) -> None:
        self._email = None


class FirebaseAuthClient:
    """Email/password authentication via the Firebase Auth REST API."""

    def __init__(
        self,
        api_key: str,
        *,
        session_path: Optional[Path] = None,
        http: Optional[requests.Session] = None,
        timeout_seconds: float = 10.0,
    ) -> None:
        self.api_key = api_key
        self.session_path = Path(session_path) if session_path else None
        self.timeout_seconds = timeout_seconds
        self._http = http or requests.Session()
        self._session: Optional[AuthSession] = self._load_session()

    @property
    def session(self) -> Optional[AuthSession]:
        return self._session

    def current_identity(self) -> Optional[str]:
        return self._session.email if self._session else None

    def sign_in(self, email: str, password: str) -> AuthSession:
        """Sign in an existing account and remember the session."""
        data = self._post("accounts:signInWithPassword", email, password)
        return self._start_session(data, email)

    def sign_up(self, email: str, password: str) -> AuthSession:
        """Create an account; the new user is signed in."""
        data = self._post("accounts:signUp", email, password)
        return self._start_session(data, email)

    def sign_out(self) -> None:
        self._session = None
        if self.session_path and self.session_path.exists():
            self.session_path.unlink()
        logger.debug("Signed out")

    # ---- internals ----

    def _post(self, endpoint: str, email: str, password: str) -> Dict[str, Any]:
        if not email or not password:
            raise AuthenticationError("Email and password are required.")

        url = f"{IDENTITY_TOOLKIT_URL}/{endpoint}"
        payload = {"email": email, "password": password, "returnSecureToken": True}
        try:
            resp = self._http.post(
                url,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            raise AuthenticationError(f"Network error calling Firebase Auth: {exc}") from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}

        if not resp.ok:
            message = (body.get("error") or {}).get("message") or f"HTTP {resp.status_code}"
            raise AuthenticationError(message)
        return body

    def _start_session(self, data: Dict[str, Any], email: str) -> AuthSession:
        session = AuthSession(
            email=data.get("email") or email,
            id_token=data.get("idToken", ""),
            refresh_token=data.get("refreshToken", ""),
            local_id=data.get("localId", ""),
        )
        self._session = session
        self._save_session(session)
        logger.debug("Signed in as %s", session.email)
        return session

    def _load_session(self) -> Optional[AuthSession]:
        if not self.session_path or not self.session_path.exists():
            return None
        try:
            data = json.loads(self.session_path.read_text(encoding="utf-8"))
            return AuthSession(**data)
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.session_path, exc)
            return None

    def _save_session(self, session: AuthSession) -> None:
        if not self.session_path:
            return
        self.session_path.parent.mkdir(parents=True, exist_ok=True)
        self.session_path.write_text(json.dumps(asdict(session)), encoding="utf-8")
