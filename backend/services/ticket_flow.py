"""
Conversational Ticket Flow

Drives one chat session between a studio member and the LLM:

    idle -> awaiting_reply -> idle                      (clarifying question)
    idle -> awaiting_reply -> materializing -> idle     (ticket created / failed)

Each session owns an append-only transcript and an asyncio.Lock. Only one
gateway or materializer call is in flight per session; a submission that
arrives while the lock is held is rejected, not queued.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Dict, Iterator, List, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, Field

from backend.config import get_settings
from backend.models.schemas import (
    AnalysisMode,
    ChatMessage,
    ConversationTurn,
    FlowState,
    MessageRole,
    TicketCreated,
)
from backend.services.errors import EmptyMessageError, SessionBusyError, SessionNotFoundError
from backend.services.reply_parser import NeedsMoreInfo, Ready, parse_reply
from backend.services.sentiment_gateway import TAG_PENDING_ANALYSIS, SentimentGateway
from backend.services.ticket_materializer import TicketMaterializer
from backend.utils.logger import get_logger
from backend.utils.validators import sanitize_input

settings = get_settings()
logger = get_logger(__name__)

WELCOME_MESSAGE_ID = "welcome"

WELCOME_MESSAGE = (
    "Hi! I'm here to help you submit trainer feedback. Just tell me about your experience - "
    "which trainer, what class, and what happened. I'll help categorize it and create a ticket for you."
)
FOLLOW_UP_QUESTION = "I understand. Could you tell me more about the trainer and what happened?"
CHAT_ERROR_MESSAGE = (
    "I'm sorry, I encountered an error. Please try again or describe your feedback differently."
)
TICKET_ERROR_MESSAGE = (
    "I apologize, but I couldn't create the ticket. Please try again or submit feedback manually."
)

FEEDBACK_CHAT_PROMPT = """You are a helpful assistant for collecting trainer feedback at a fitness studio.

When a user describes their experience with a trainer:
1. Extract key details: trainer name, class type, date, rating, specific feedback
2. Categorize the feedback: positive, constructive, or complaint
3. Identify relevant tags: technique, communication, punctuality, motivation, professionalism, safety
4. Suggest a priority: low (positive feedback), medium (constructive), high (complaints), critical (safety issues)
5. Generate a structured ticket title and description

Always be empathetic and professional. Ask clarifying questions if details are missing.

When you have enough information, respond with a JSON block in this format:
```json
{
  "ready": true,
  "ticketData": {
    "title": "Trainer Feedback - [Trainer Name] - [Date]",
    "description": "Detailed description with all feedback points...",
    "category": "Customer Service",
    "subcategory": "Staff Professionalism",
    "priority": "medium",
    "trainerName": "Name",
    "sentiment": "positive|neutral|negative",
    "tags": ["tag1", "tag2"]
  }
}
```

If you need more information, respond normally with questions."""


def _new_message(
    role: MessageRole,
    content: str,
    ticket_created: Optional[TicketCreated] = None,
    message_id: Optional[str] = None
) -> ChatMessage:
    return ChatMessage(
        id=message_id or uuid4().hex,
        role=role,
        content=content,
        timestamp=datetime.now(),
        ticket_created=ticket_created,
    )


class Transcript:
    """Ordered, append-only message log for one session"""

    def __init__(self):
        self._messages: List[ChatMessage] = []

    def append(self, message: ChatMessage) -> ChatMessage:
        self._messages.append(message)
        return message

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[ChatMessage]:
        return iter(tuple(self._messages))

    @property
    def messages(self) -> Tuple[ChatMessage, ...]:
        return tuple(self._messages)

    def since(self, index: int) -> List[ChatMessage]:
        """Messages appended at or after position `index`"""
        return list(self._messages[index:])

    def history_for_model(self) -> List[ConversationTurn]:
        """Role/content turns for the LLM, without the greeting"""
        return [
            ConversationTurn(role=message.role, content=message.content)
            for message in self._messages
            if message.id != WELCOME_MESSAGE_ID
        ]


class ChatSession:
    """
    One chat session: transcript, flow state and the in-flight guard
    """

    def __init__(self, session_id: Optional[str] = None, reporter_id: Optional[str] = None):
        self.session_id = session_id or uuid4().hex
        self.reporter_id = reporter_id
        self.transcript = Transcript()
        self.state = FlowState.IDLE
        self.created_at = datetime.now()
        self.last_activity = self.created_at
        self._lock = asyncio.Lock()

        self.transcript.append(
            _new_message(MessageRole.ASSISTANT, WELCOME_MESSAGE, message_id=WELCOME_MESSAGE_ID)
        )

    @property
    def lock(self) -> asyncio.Lock:
        return self._lock

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def touch(self) -> None:
        self.last_activity = datetime.now()

    def expired(self, ttl: timedelta, now: Optional[datetime] = None) -> bool:
        """Idle for longer than ttl and not processing a message"""
        now = now or datetime.now()
        return not self.busy and now - self.last_activity > ttl


class SessionView(BaseModel):
    """Serializable view of a session"""
    session_id: str
    reporter_id: Optional[str] = None
    state: FlowState
    busy: bool
    messages: List[ChatMessage]

    @classmethod
    def from_session(cls, session: ChatSession) -> "SessionView":
        return cls(
            session_id=session.session_id,
            reporter_id=session.reporter_id,
            state=session.state,
            busy=session.busy,
            messages=list(session.transcript.messages),
        )


class TurnOutcome(BaseModel):
    """What one submission added to the session"""
    session_id: str
    state: FlowState = FlowState.IDLE
    messages: List[ChatMessage] = Field(default_factory=list)
    ticket_created: Optional[TicketCreated] = None
    notification: Optional[str] = None


class SessionStore:
    """
    In-memory chat sessions, lost on restart

    Sessions idle for longer than the TTL are dropped whenever a new one is
    created.
    """

    def __init__(self, ttl_seconds: Optional[int] = None):
        self._sessions: Dict[str, ChatSession] = {}
        ttl_seconds = settings.chat_session_ttl_seconds if ttl_seconds is None else ttl_seconds
        self.ttl = timedelta(seconds=ttl_seconds)

    def prune(self, now: Optional[datetime] = None) -> int:
        """Drop expired sessions, returning how many were removed"""
        expired = [
            session_id for session_id, session in self._sessions.items()
            if session.expired(self.ttl, now)
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Pruned {len(expired)} idle chat sessions")
        return len(expired)

    def create(self, reporter_id: Optional[str] = None) -> ChatSession:
        self.prune()
        session = ChatSession(reporter_id=reporter_id)
        self._sessions[session.session_id] = session
        logger.info(f"Created chat session {session.session_id}")
        return session

    def get(self, session_id: str) -> ChatSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def discard(self, session_id: str) -> None:
        if self._sessions.pop(session_id, None) is None:
            raise SessionNotFoundError(session_id)
        logger.info(f"Discarded chat session {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)


def format_ticket_summary(ready: Ready) -> str:
    """Assistant turn shown before the ticket is written"""
    payload = ready.payload
    priority = payload.priority.value if payload.priority else "Not specified"
    return (
        "Great! I've gathered all the information. Here's what I'll create:\n\n"
        f"**Title:** {payload.title}\n"
        f"**Category:** {payload.category or 'Not specified'}\n"
        f"**Priority:** {priority}\n"
        f"**Trainer:** {payload.trainer_name or 'Not specified'}\n\n"
        "Would you like me to create this ticket?"
    )


def format_ticket_confirmation(created: TicketCreated) -> str:
    return (
        "✅ Ticket created successfully!\n\n"
        f"**Ticket Number:** {created.ticket_number}\n\n"
        "Your feedback has been recorded and will be reviewed by the team. "
        "Thank you for helping us improve!"
    )


class TicketFlow:
    """
    Orchestrates user turns, the gateway and the materializer
    """

    def __init__(
        self,
        gateway: Optional[SentimentGateway] = None,
        materializer: Optional[TicketMaterializer] = None,
        system_prompt: str = FEEDBACK_CHAT_PROMPT
    ):
        self.gateway = gateway or SentimentGateway()
        self.materializer = materializer or TicketMaterializer()
        self.system_prompt = system_prompt

    async def submit(self, session: ChatSession, text: str) -> TurnOutcome:
        """
        Process one user message

        Args:
            session: Chat session to advance
            text: User input

        Returns:
            TurnOutcome with the turns appended during this submission

        Raises:
            EmptyMessageError: If the input is blank
            SessionBusyError: If a previous submission is still in flight
        """
        content = sanitize_input(text or "")
        if not content:
            raise EmptyMessageError("Message must not be empty")

        if session.busy:
            logger.warning(f"Rejected input for busy session {session.session_id}")
            raise SessionBusyError(session.session_id)

        async with session.lock:
            start = len(session.transcript)
            outcome = TurnOutcome(session_id=session.session_id)

            try:
                session.transcript.append(_new_message(MessageRole.USER, content))
                session.state = FlowState.AWAITING_REPLY
                await self._advance(session, content, outcome)
            finally:
                session.state = FlowState.IDLE
                session.touch()

            outcome.state = session.state
            outcome.messages = session.transcript.since(start)
            return outcome

    async def _advance(self, session: ChatSession, content: str, outcome: TurnOutcome) -> None:
        transcript = session.transcript

        try:
            result = await self.gateway.analyze(
                content,
                mode=AnalysisMode.CONVERSATIONAL,
                history=transcript.history_for_model(),
                instruction_prompt=self.system_prompt,
            )
        except Exception as e:
            logger.error(f"Chat error in session {session.session_id}: {e}", exc_info=True)
            transcript.append(_new_message(MessageRole.ASSISTANT, CHAT_ERROR_MESSAGE))
            return

        if result.degraded:
            logger.warning(f"Gateway degraded for session {session.session_id}: {result.error}")
            # Unconfigured gateway: show its notice instead of the retry prompt
            notice = result.insights if TAG_PENDING_ANALYSIS in (result.tags or []) else None
            transcript.append(_new_message(MessageRole.ASSISTANT, notice or CHAT_ERROR_MESSAGE))
            return

        insights = result.insights if isinstance(result.insights, str) else None
        reply = result.chat_response or insights or FOLLOW_UP_QUESTION
        parsed = parse_reply(reply)

        if isinstance(parsed, NeedsMoreInfo):
            transcript.append(_new_message(MessageRole.ASSISTANT, parsed.text or FOLLOW_UP_QUESTION))
            return

        transcript.append(_new_message(MessageRole.ASSISTANT, format_ticket_summary(parsed)))
        session.state = FlowState.MATERIALIZING

        try:
            created = await asyncio.to_thread(
                self.materializer.create_ticket,
                parsed.payload,
                session.reporter_id,
            )
        except Exception as e:
            logger.error(f"Error creating ticket for session {session.session_id}: {e}")
            transcript.append(_new_message(MessageRole.ASSISTANT, TICKET_ERROR_MESSAGE))
            return

        transcript.append(
            _new_message(
                MessageRole.ASSISTANT,
                format_ticket_confirmation(created),
                ticket_created=created,
            )
        )
        outcome.ticket_created = created
        outcome.notification = f"Feedback ticket {created.ticket_number} has been created"
