"""
Participants Module

This module handles all participant-related operations for the shared
expense settler.

Features:
    - Add participants to a session
    - Rename participants
    - Remove participants with a cascade over every expense
    - Look up participant details

Data Model:
    Participant stored inside the session document as:
        - id: string (P001, P002, ... format)
        - name: string

All operations work on caller-owned lists and return new lists; the inputs
are never modified.

Functions:
    add_participant: Add a new participant.
    rename_participant: Change a participant's display name.
    remove_participant: Remove a participant and scrub their references.
    get_participant: Find a participant by id.
"""

from typing import Optional

from utils import next_sequential_id


class Participant:
    """
    Represents a participant in a shared session.

    Attributes:
        participant_id (str): Unique, immutable identifier.
        name (str): Display name.
    """

    def __init__(self, participant_id: str, name: str):
        self.participant_id = participant_id
        self.name = name

    def to_dict(self) -> dict:
        """Convert participant to dictionary for Firestore storage."""
        return {
            "id": self.participant_id,
            "name": self.name
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Participant":
        """Create a Participant instance from a dictionary."""
        return cls(
            participant_id=str(data.get("id")),
            name=str(data.get("name") or "")
        )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Participant):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        """Return string representation of participant."""
        return f"Participant(id='{self.participant_id}', name='{self.name}')"


def _validate_name(name: str) -> str:
    """
    Validate and normalize a participant name.

    Args:
        name: Raw name input.

    Returns:
        str: Stripped name.

    Raises:
        ValueError: If name is empty or not a string.
    """
    if not isinstance(name, str) or not name.strip():
        raise ValueError("name must be a non-empty string")
    return name.strip()


def get_participant(participants: list[Participant], participant_id: str) -> Optional[Participant]:
    """Return the participant with the given id, or None."""
    for participant in participants:
        if participant.participant_id == participant_id:
            return participant
    return None


def add_participant(
    participants: list[Participant],
    name: str
) -> tuple[list[Participant], Participant]:
    """
    Add a new participant.

    Args:
        participants: Current participant list.
        name: Name of the participant.

    Returns:
        tuple: (new participant list, created participant).

    Raises:
        ValueError: If the name is empty.
    """
    clean_name = _validate_name(name)

    # Generate sequential participant ID (P001, P002, ...)
    participant_id = next_sequential_id("P", [p.participant_id for p in participants])
    participant = Participant(participant_id=participant_id, name=clean_name)

    return [*participants, participant], participant


def rename_participant(
    participants: list[Participant],
    participant_id: str,
    name: str
) -> list[Participant]:
    """
    Rename a participant. The id is never changed.

    Raises:
        ValueError: If the new name is empty.
        LookupError: If the participant does not exist.
    """
    clean_name = _validate_name(name)

    if get_participant(participants, participant_id) is None:
        raise LookupError(f"Participant {participant_id} not found")

    return [
        Participant(p.participant_id, clean_name) if p.participant_id == participant_id else p
        for p in participants
    ]


def remove_participant(
    participants: list[Participant],
    expenses: list,
    participant_id: str
) -> tuple[list[Participant], list]:
    """
    Remove a participant and cascade the removal over every expense.

    Cascade rules:
        - The id is removed from every expense's beneficiaries
        - Any shares entry for the id is dropped
        - Expenses paid by the participant are reassigned to the first
          remaining participant, or to None when nobody is left

    Args:
        participants: Current participant list.
        expenses: Current expense list.
        participant_id: The participant to remove.

    Returns:
        tuple: (new participant list, new expense list).

    Raises:
        LookupError: If the participant does not exist.
    """
    if get_participant(participants, participant_id) is None:
        raise LookupError(f"Participant {participant_id} not found")

    remaining = [p for p in participants if p.participant_id != participant_id]
    fallback_payer = remaining[0].participant_id if remaining else None

    cascaded = [
        expense.without_participant(participant_id, fallback_payer)
        for expense in expenses
    ]

    return remaining, cascaded
