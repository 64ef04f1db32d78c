"""
Domain exceptions raised by the chat flow and session store
"""


class FeedbackDeskError(Exception):
    """Base class for feedback desk errors"""


class EmptyMessageError(FeedbackDeskError, ValueError):
    """User submitted an empty or whitespace-only message"""


class SessionBusyError(FeedbackDeskError):
    """A gateway or materializer call is already in flight for this session"""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} is busy")
        self.session_id = session_id


class SessionNotFoundError(FeedbackDeskError, KeyError):
    """No chat session with the given id"""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Chat session {self.session_id} not found"
