"""
Firebase Configuration

Lazily initializes the firebase_admin application and hands out the
Firestore client used by firebase_store.

Credentials come from settings.firebase.credentials_path (a service-account
JSON file); when unset, application default credentials are used.
"""

import logging

import firebase_admin
from firebase_admin import credentials, firestore

from config.settings import get_settings

logger = logging.getLogger(__name__)

_db = None


def get_db():
    """
    Get the Firestore client, initializing Firebase on first use.

    Returns:
        google.cloud.firestore.Client | None: The client, or None when
        Firebase cannot be initialized.
    """
    global _db
    if _db is not None:
        return _db

    settings = get_settings()
    options = {"projectId": settings.firebase.project_id} if settings.firebase.project_id else None

    try:
        try:
            app = firebase_admin.get_app()
        except ValueError:
            if settings.firebase.credentials_path:
                cred = credentials.Certificate(str(settings.firebase.credentials_path))
            else:
                cred = credentials.ApplicationDefault()
            app = firebase_admin.initialize_app(cred, options)
        _db = firestore.client(app)
    except Exception as exc:
        logger.error("Firestore initialization failed: %s", exc)
        return None

    logger.info("Firestore client ready (collection '%s')", settings.firebase.collection)
    return _db
