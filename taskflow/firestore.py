"""Shared Firebase app and Firestore client helpers."""
from __future__ import annotations

import os

_firestore_client = None


def get_firebase_app():
    """Return the default Firebase app, initializing it on first use.

    Credentials come from GOOGLE_APPLICATION_CREDENTIALS (or the ambient
    service account); TASKFLOW_FIREBASE_PROJECT overrides the project id.
    """

    try:
        import firebase_admin
    except ModuleNotFoundError as exc:  # pragma: no cover
        raise RuntimeError(
            "firebase-admin is required for Firestore storage and token checks. "
            "Install dependencies or set TASKFLOW_STORE_FORCE_FILE=1."
        ) from exc

    if not firebase_admin._apps:
        project_id = os.getenv("TASKFLOW_FIREBASE_PROJECT", "").strip()
        options = {"projectId": project_id} if project_id else None
        return firebase_admin.initialize_app(options=options)
    return firebase_admin.get_app()


def get_firestore_client():
    """Return a cached Firestore client instance."""

    global _firestore_client
    if _firestore_client is not None:
        return _firestore_client

    from firebase_admin import firestore

    _firestore_client = firestore.client(get_firebase_app())
    return _firestore_client
