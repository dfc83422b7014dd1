"""Firebase Admin initialisation shared by the Firestore and Storage backends."""
from __future__ import annotations

import base64
import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore, storage

from studyhub.config import Settings
from studyhub.errors import StorageError

LOGGER = logging.getLogger(__name__)


def initialize_firebase(settings: Settings) -> firebase_admin.App:
    """Return the default Firebase app, initialising it on first use.

    Credentials come from ``FIREBASE_KEY_B64`` (base64 encoded service account
    JSON) or ``FIREBASE_KEY_PATH``; without either, application default
    credentials are used.
    """

    if firebase_admin._apps:
        return firebase_admin.get_app()

    if settings.firebase_key_b64:
        key_json = base64.b64decode(settings.firebase_key_b64).decode("utf-8")
        cred: Any = credentials.Certificate(json.loads(key_json))
    elif settings.firebase_key_path:
        cred = credentials.Certificate(settings.firebase_key_path)
    else:
        cred = credentials.ApplicationDefault()

    options = {"storageBucket": settings.firebase_bucket} if settings.firebase_bucket else None
    app = firebase_admin.initialize_app(cred, options)
    LOGGER.info("Firebase initialised (bucket=%s)", settings.firebase_bucket)
    return app


def firestore_client(settings: Settings) -> Any:
    app = initialize_firebase(settings)
    return firestore.client(app)


def storage_bucket(settings: Settings) -> Any:
    if not settings.firebase_bucket:
        raise StorageError("FIREBASE_BUCKET_NAME must be set for the firebase storage backend")
    app = initialize_firebase(settings)
    return storage.bucket(settings.firebase_bucket, app=app)
