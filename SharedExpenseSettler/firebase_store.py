"""
Firebase Store Module

This module handles loading and saving session snapshots in Firebase
Firestore for the shared expense settler.

Features:
    - Join-or-create a shared session
    - Load the participant/expense snapshot of a session
    - Save a snapshot back (merge write, last write wins)
    - Encode/decode snapshots for JSON import and export

Firestore Structure:
    {collection}/{session_id}
        - participants: list of {id, name}
        - expenses: list of expense dicts (see expenses.py)
        - created_at: timestamp
        - updated_at: timestamp

    Balances and settlements are never stored; they are recomputed from
    the snapshot on every request.

Functions:
    create_session: Join an existing session or create an empty one.
    load_session: Load a session snapshot.
    save_session: Save a session snapshot.
    delete_session: Delete a session document.
    snapshot_to_dict: Encode a snapshot as plain data.
    snapshot_from_dict: Decode a snapshot from plain data.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from config.firebase_config import get_db
from config.settings import get_settings
from expenses import Expense, expense_from_dict
from participants import Participant

logger = logging.getLogger(__name__)


def _get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        str: ISO formatted timestamp.
    """
    return datetime.now(timezone.utc).isoformat()


def _validate_session_id(session_id: str) -> None:
    """
    Validate that session_id is a non-empty string.

    Raises:
        ValueError: If session_id is invalid.
    """
    if not isinstance(session_id, str) or not session_id.strip():
        raise ValueError("session_id must be a non-empty string")


def _generate_session_id() -> str:
    """
    Generate a unique session ID.

    Format: session_{short_uuid}
    """
    return f"session_{uuid.uuid4().hex[:8]}"


def _session_ref(session_id: str):
    """
    Get the Firestore document reference for a session.

    Raises:
        RuntimeError: If Firestore is not available.
    """
    db = get_db()
    if db is None:
        raise RuntimeError("Firestore is not available")

    collection = get_settings().firebase.collection
    return db.collection(collection).document(session_id)


def snapshot_to_dict(participants: list[Participant], expenses: list[Expense]) -> dict:
    """
    Encode a snapshot as plain data.

    Args:
        participants: List of Participant objects.
        expenses: List of Expense objects.

    Returns:
        dict: {"participants": [...], "expenses": [...]}
    """
    return {
        "participants": [p.to_dict() for p in participants],
        "expenses": [e.to_dict() for e in expenses]
    }


def snapshot_from_dict(data: dict) -> tuple[list[Participant], list[Expense]]:
    """
    Decode a snapshot from plain data.

    Entries that are not dicts or have no id are skipped with a warning.
    Dangling references inside expenses are kept as they are.

    Args:
        data: Dict with optional participants and expenses lists.

    Returns:
        tuple: (participants, expenses)
    """
    participants = []
    for item in data.get("participants") or []:
        if not isinstance(item, dict) or not item.get("id"):
            logger.warning("Skipping malformed participant entry: %r", item)
            continue
        participants.append(Participant.from_dict(item))

    expenses = []
    for item in data.get("expenses") or []:
        if not isinstance(item, dict) or not item.get("id"):
            logger.warning("Skipping malformed expense entry: %r", item)
            continue
        expenses.append(expense_from_dict(item))

    return participants, expenses


def create_session(session_id: Optional[str] = None) -> str:
    """
    Join an existing session or create an empty one.

    An existing document is left untouched.

    Args:
        session_id: Session to join; a new id is generated when omitted.

    Returns:
        str: The session id.

    Raises:
        ValueError: If session_id is given but empty.
        RuntimeError: If Firestore is not available.
    """
    if session_id is None:
        session_id = _generate_session_id()
    _validate_session_id(session_id)
    session_id = session_id.strip()

    doc_ref = _session_ref(session_id)
    if doc_ref.get().exists:
        logger.info("Joined existing session %s", session_id)
        return session_id

    timestamp = _get_timestamp()
    doc_ref.set({
        "participants": [],
        "expenses": [],
        "created_at": timestamp,
        "updated_at": timestamp
    })
    logger.info("Created new session %s", session_id)
    return session_id


def load_session(session_id: str) -> tuple[list[Participant], list[Expense]]:
    """
    Load the participant/expense snapshot of a session.

    Raises:
        ValueError: If session_id is invalid.
        LookupError: If the session does not exist.
        RuntimeError: If Firestore is not available.
    """
    _validate_session_id(session_id)

    doc = _session_ref(session_id).get()
    if not doc.exists:
        raise LookupError(f"Session {session_id} not found")

    return snapshot_from_dict(doc.to_dict() or {})


def save_session(
    session_id: str,
    participants: list[Participant],
    expenses: list[Expense]
) -> dict:
    """
    Save a snapshot to its session document.

    Args:
        session_id: The ID of the session.
        participants: Full participant list.
        expenses: Full expense list.

    Returns:
        dict: Summary with counts and timestamp.

    Raises:
        ValueError: If session_id is invalid.
        RuntimeError: If Firestore is not available.

    Notes:
        - Overwrites participants and expenses (idempotent)
        - Keeps created_at, refreshes updated_at
    """
    _validate_session_id(session_id)

    timestamp = _get_timestamp()
    doc_data = snapshot_to_dict(participants, expenses)
    doc_data["updated_at"] = timestamp

    _session_ref(session_id).set(doc_data, merge=True)
    logger.debug(
        "Saved session %s (%d participants, %d expenses)",
        session_id, len(participants), len(expenses)
    )

    return {
        "participant_count": len(participants),
        "expense_count": len(expenses),
        "updated_at": timestamp
    }


def delete_session(session_id: str) -> None:
    """
    Delete a session document.

    Raises:
        ValueError: If session_id is invalid.
        LookupError: If the session does not exist.
        RuntimeError: If Firestore is not available.
    """
    _validate_session_id(session_id)

    doc_ref = _session_ref(session_id)
    if not doc_ref.get().exists:
        raise LookupError(f"Session {session_id} not found")

    doc_ref.delete()
    logger.info("Deleted session %s", session_id)
