"""
Chat API Routes

Feedback chat sessions that turn a conversation into a ticket.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from backend.dependencies import get_session_store, get_ticket_flow
from backend.models.schemas import ErrorResponse
from backend.services.errors import EmptyMessageError, SessionBusyError, SessionNotFoundError
from backend.services.ticket_flow import SessionStore, SessionView, TicketFlow, TurnOutcome
from backend.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(
    prefix="/api/v1/chat",
    tags=["chat"],
    responses={404: {"model": ErrorResponse, "description": "Chat session not found"}}
)


class MessageRequest(BaseModel):
    """User chat message"""
    content: str = Field(..., max_length=10000)


def _get_session(store: SessionStore, session_id: str):
    try:
        return store.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def create_session(
    user_id: Optional[str] = Header(None, alias="X-User-ID"),
    store: SessionStore = Depends(get_session_store)
):
    """
    Start a feedback chat with the welcome message
    """
    session = store.create(reporter_id=user_id)
    return SessionView.from_session(session)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """
    Current transcript and flow state
    """
    return SessionView.from_session(_get_session(store, session_id))


@router.post(
    "/sessions/{session_id}/messages",
    response_model=TurnOutcome,
    responses={
        409: {"model": ErrorResponse, "description": "Previous message still processing"},
        422: {"model": ErrorResponse, "description": "Empty message"},
    }
)
async def send_message(
    session_id: str,
    request: MessageRequest,
    store: SessionStore = Depends(get_session_store),
    flow: TicketFlow = Depends(get_ticket_flow)
):
    """
    Submit a user message

    Returns the turns appended by this submission. A ticket is created once
    the assistant has gathered enough detail.

    Errors:
        404 unknown session, 409 previous message still processing,
        422 empty message
    """
    session = _get_session(store, session_id)

    try:
        outcome = await flow.submit(session, request.content)
    except EmptyMessageError as e:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    if outcome.ticket_created:
        logger.info(f"Session {session_id} created ticket {outcome.ticket_created.ticket_number}")

    return outcome


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store)
):
    """
    Drop a chat session and its transcript
    """
    try:
        store.discard(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
