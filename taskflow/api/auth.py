"""Firebase ID token verification for the HTTP API."""
from __future__ import annotations

import os

from fastapi import Header, HTTPException, status

DEV_BYPASS_ENV = "TASKFLOW_DEV_AUTH_BYPASS"


class AuthError(HTTPException):
    def __init__(self, detail: str, code: int = status.HTTP_401_UNAUTHORIZED) -> None:
        super().__init__(status_code=code, detail=detail)


def _verify_id_token(token: str) -> dict:
    from firebase_admin import auth as firebase_auth

    from ..firestore import get_firebase_app

    return firebase_auth.verify_id_token(token, app=get_firebase_app())


def get_current_user(
    authorization: str | None = Header(default=None, alias="Authorization"),
    dev_user: str | None = Header(default=None, alias="X-User-Email"),
) -> str:
    """Return the authenticated user's email.

    During development/testing set TASKFLOW_DEV_AUTH_BYPASS=1 and supply X-User-Email.
    """

    if os.getenv(DEV_BYPASS_ENV) == "1":
        if dev_user:
            return dev_user
        raise AuthError(
            "Auth bypass enabled but X-User-Email header missing (dev only)."
        )

    if not authorization or not authorization.startswith("Bearer "):
        raise AuthError("Missing Bearer token.")

    token = authorization.split(" ", 1)[1].strip()
    try:
        claims = _verify_id_token(token)
    except Exception as exc:
        raise AuthError(f"Invalid token: {exc}") from exc

    email = claims.get("email")
    if not email:
        raise AuthError("Token missing email claim.")
    return email
