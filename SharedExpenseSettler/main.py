"""
SharedExpenseSettler - FastAPI Web Backend

This module serves as the main entry point for the web-based shared expense
settler using FastAPI.

Features:
    - RESTful API for managing sessions, participants, and expenses
    - Integration with Firebase Firestore backend
    - Balance and settlement calculation on every request
    - JSON import/export of a session snapshot

Endpoints:
    POST   /sessions                                  - Join or create a session
    GET    /sessions/{session_id}                     - Get the session snapshot
    DELETE /sessions/{session_id}                     - Delete a session
    POST   /sessions/{session_id}/participants        - Add participant
    PATCH  /sessions/{session_id}/participants/{pid}  - Rename participant
    DELETE /sessions/{session_id}/participants/{pid}  - Remove participant (cascade)
    POST   /sessions/{session_id}/expenses            - Add expense
    PUT    /sessions/{session_id}/expenses/{eid}      - Edit expense
    DELETE /sessions/{session_id}/expenses/{eid}      - Delete expense
    GET    /sessions/{session_id}/settlement          - Balances and settlements
    GET    /sessions/{session_id}/export              - Export snapshot JSON
    POST   /sessions/{session_id}/import              - Replace snapshot from JSON

Usage:
    uvicorn main:app --reload
"""

import logging
from contextlib import contextmanager
from typing import Annotated, Literal, Optional, Union

from fastapi import Body, FastAPI, HTTPException, Response
from pydantic import BaseModel, ConfigDict, Field

from config.settings import configure_logging, get_settings
from expenses import Expense, add_expense, delete_expense, edit_expense
from firebase_store import (
    create_session,
    delete_session,
    load_session,
    save_session,
    snapshot_from_dict,
    snapshot_to_dict
)
from ledger import compute, describe_settlements
from participants import Participant, add_participant, remove_participant, rename_participant
from utils import per_head

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response Validation
# =============================================================================

class SessionCreate(BaseModel):
    """Request model for joining or creating a session."""
    session_id: Optional[str] = Field(None, min_length=1, description="Existing session to join")


class SessionResponse(BaseModel):
    """Response model for session creation."""
    session_id: str
    message: str


class ParticipantCreate(BaseModel):
    """Request model for adding or renaming a participant."""
    name: str = Field(..., min_length=1, description="Participant name")


class ParticipantResponse(BaseModel):
    """Response model for participant data."""
    participant_id: str
    name: str


class _ExpenseFields(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(..., min_length=1, description="Expense label")
    amount: float = Field(..., gt=0, description="Amount in the entered currency")
    payer_id: str = Field(..., min_length=1, description="Participant ID of payer")
    beneficiaries: list[str] = Field(..., min_length=1, description="Participant IDs sharing the cost")
    currency: Optional[str] = Field(None, description="Entered currency (defaults to the base currency)")
    exchange_rate: float = Field(1, gt=0, description="Base-currency units per entered unit")


class EqualExpenseCreate(_ExpenseFields):
    """Request model for an equally split expense."""
    split_mode: Literal["equal"]


class CustomExpenseCreate(_ExpenseFields):
    """Request model for a custom split expense."""
    split_mode: Literal["custom"]
    shares: dict[str, int] = Field(..., description="Base-currency amount per beneficiary")


ExpenseCreate = Annotated[
    Union[EqualExpenseCreate, CustomExpenseCreate],
    Body(discriminator="split_mode")
]


class ExpenseResponse(BaseModel):
    """Response model for expense data."""
    expense_id: str
    title: str
    amount: Union[int, float]
    payer_id: Optional[str]
    beneficiaries: list[str]
    split_mode: str
    shares: Optional[dict[str, Union[int, float]]] = None
    per_head: Optional[int] = None
    original_amount: Optional[int] = None
    currency: Optional[str] = None
    exchange_rate: Optional[float] = None


class SnapshotResponse(BaseModel):
    """Response model for a session snapshot."""
    session_id: str
    participants: list[ParticipantResponse]
    expenses: list[ExpenseResponse]


class SnapshotImport(BaseModel):
    """Request model for importing a snapshot (same shape as the export)."""
    participants: list = Field(default_factory=list)
    expenses: list = Field(default_factory=list)


class SettlementResponse(BaseModel):
    """Response model for calculation results."""
    balances: dict
    settlements: list
    summary: list[str]


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title=settings.project_name,
    description="Shared expense balances and settlement suggestions",
    version="1.0.0"
)


# =============================================================================
# Helper Functions
# =============================================================================

@contextmanager
def _http_errors():
    """
    Translate domain exceptions into HTTP errors.

        ValueError   -> 400
        LookupError  -> 404
        RuntimeError -> 503
        other        -> 500
    """
    try:
        yield
    except HTTPException:
        raise
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Unhandled error")
        raise HTTPException(status_code=500, detail=str(e))


def _participant_response(p: Participant) -> ParticipantResponse:
    """Convert Participant object to its response model."""
    return ParticipantResponse(participant_id=p.participant_id, name=p.name)


def _expense_response(e: Expense) -> ExpenseResponse:
    """Convert an expense object to its response model."""
    return ExpenseResponse(
        expense_id=e.expense_id,
        title=e.title,
        amount=e.amount,
        payer_id=e.payer_id,
        beneficiaries=e.beneficiaries,
        split_mode=e.split_mode,
        shares=getattr(e, "shares", None),
        per_head=per_head(e),
        original_amount=e.original_amount,
        currency=e.currency,
        exchange_rate=e.exchange_rate
    )


def _snapshot_response(session_id: str, participants: list, expenses: list) -> SnapshotResponse:
    return SnapshotResponse(
        session_id=session_id,
        participants=[_participant_response(p) for p in participants],
        expenses=[_expense_response(e) for e in expenses]
    )


def _expense_fields(expense_data: Union[EqualExpenseCreate, CustomExpenseCreate]) -> dict:
    """Keyword arguments for add_expense / edit_expense."""
    return {
        "title": expense_data.title,
        "amount": expense_data.amount,
        "payer_id": expense_data.payer_id,
        "beneficiaries": expense_data.beneficiaries,
        "split_mode": expense_data.split_mode,
        "shares": getattr(expense_data, "shares", None),
        "currency": expense_data.currency,
        "exchange_rate": expense_data.exchange_rate,
        "base_currency": settings.base_currency
    }


# =============================================================================
# API Endpoints
# =============================================================================

@app.post("/sessions", response_model=SessionResponse, status_code=201)
async def join_or_create_session(session_data: Optional[SessionCreate] = None):
    """
    Join an existing session or create a new one.

    Request flow:
        1. Use the given session_id or generate one
        2. Create an empty session document if it does not exist
        3. Return session_id to client
    """
    with _http_errors():
        session_id = create_session(session_data.session_id if session_data else None)
        return SessionResponse(session_id=session_id, message="Session ready")


@app.get("/sessions/{session_id}", response_model=SnapshotResponse)
async def get_session(session_id: str):
    """Return the participant/expense snapshot of a session."""
    with _http_errors():
        participants, expenses = load_session(session_id)
        return _snapshot_response(session_id, participants, expenses)


@app.delete("/sessions/{session_id}", status_code=204)
async def remove_session(session_id: str):
    """Delete a session document."""
    with _http_errors():
        delete_session(session_id)
        return Response(status_code=204)


@app.post("/sessions/{session_id}/participants", response_model=ParticipantResponse, status_code=201)
async def add_session_participant(session_id: str, participant_data: ParticipantCreate):
    """
    Add a participant to a session.

    Request flow:
        1. Load the snapshot
        2. Call add_participant() from participants.py
        3. Save the snapshot and return the created participant
    """
    with _http_errors():
        participants, expenses = load_session(session_id)
        participants, participant = add_participant(participants, participant_data.name)
        save_session(session_id, participants, expenses)
        return _participant_response(participant)


@app.patch("/sessions/{session_id}/participants/{participant_id}", response_model=ParticipantResponse)
async def rename_session_participant(session_id: str, participant_id: str, participant_data: ParticipantCreate):
    """Rename a participant; the id never changes."""
    with _http_errors():
        participants, expenses = load_session(session_id)
        participants = rename_participant(participants, participant_id, participant_data.name)
        save_session(session_id, participants, expenses)
        renamed = next(p for p in participants if p.participant_id == participant_id)
        return _participant_response(renamed)


@app.delete("/sessions/{session_id}/participants/{participant_id}", response_model=SnapshotResponse)
async def remove_session_participant(session_id: str, participant_id: str):
    """
    Remove a participant.

    The participant is also removed from every expense's beneficiaries and
    shares, and expenses they paid move to the first remaining participant.
    """
    with _http_errors():
        participants, expenses = load_session(session_id)
        participants, expenses = remove_participant(participants, expenses, participant_id)
        save_session(session_id, participants, expenses)
        return _snapshot_response(session_id, participants, expenses)


@app.post("/sessions/{session_id}/expenses", response_model=ExpenseResponse, status_code=201)
async def add_session_expense(session_id: str, expense_data: ExpenseCreate):
    """
    Add an expense to a session.

    Request flow:
        1. Validate input using the Pydantic models
        2. Call add_expense() from expenses.py (custom shares must add up)
        3. Save the snapshot and return the created expense
    """
    with _http_errors():
        participants, expenses = load_session(session_id)
        expenses, expense = add_expense(participants, expenses, **_expense_fields(expense_data))
        save_session(session_id, participants, expenses)
        return _expense_response(expense)


@app.put("/sessions/{session_id}/expenses/{expense_id}", response_model=ExpenseResponse)
async def edit_session_expense(session_id: str, expense_id: str, expense_data: ExpenseCreate):
    """Replace an expense with new values, keeping its id."""
    with _http_errors():
        participants, expenses = load_session(session_id)
        expenses, expense = edit_expense(participants, expenses, expense_id, **_expense_fields(expense_data))
        save_session(session_id, participants, expenses)
        return _expense_response(expense)


@app.delete("/sessions/{session_id}/expenses/{expense_id}", status_code=204)
async def delete_session_expense(session_id: str, expense_id: str):
    """Delete an expense."""
    with _http_errors():
        participants, expenses = load_session(session_id)
        expenses = delete_expense(expenses, expense_id)
        save_session(session_id, participants, expenses)
        return Response(status_code=204)


@app.get("/sessions/{session_id}/settlement", response_model=SettlementResponse)
async def get_session_settlement(session_id: str):
    """
    Calculate balances and settlements for a session.

    Request flow:
        1. Load the snapshot from Firestore
        2. Compute balances and settlements (ledger.py)
        3. Return results (nothing is persisted)
    """
    with _http_errors():
        participants, expenses = load_session(session_id)
        result = compute(participants, expenses)
        return SettlementResponse(
            balances=result["balances"],
            settlements=result["settlements"],
            summary=describe_settlements(result["settlements"], participants, settings.currency_symbol)
        )


@app.get("/sessions/{session_id}/export")
async def export_session(session_id: str):
    """Export the snapshot in its stored JSON form."""
    with _http_errors():
        participants, expenses = load_session(session_id)
        return snapshot_to_dict(participants, expenses)


@app.post("/sessions/{session_id}/import", response_model=SnapshotResponse)
async def import_session(session_id: str, snapshot: SnapshotImport):
    """
    Replace a session's snapshot with an imported one.

    The session is created when it does not exist yet. Malformed entries are
    skipped; dangling references are kept as they are. Nothing is written
    unless the decoded snapshot can be returned.
    """
    with _http_errors():
        participants, expenses = snapshot_from_dict(snapshot.model_dump())
        response = _snapshot_response(session_id, participants, expenses)
        create_session(session_id)
        save_session(session_id, participants, expenses)
        logger.info(
            "Imported %d participants and %d expenses into %s",
            len(participants), len(expenses), session_id
        )
        return response


# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"status": "healthy", "service": settings.project_name}


# =============================================================================
# Run with: python main.py
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=settings.server.host, port=settings.server.port, reload=settings.server.reload)
