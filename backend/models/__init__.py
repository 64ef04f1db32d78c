"""
Pydantic models for Studio Feedback Desk
"""

from backend.models.schemas import (
    # Enums
    Priority,
    TicketStatus,
    MessageRole,
    AnalysisMode,
    FlowState,
    PRIORITY_TIERS,

    # Ticket Models
    ExtractionResult,
    DynamicFieldData,
    TicketCreate,
    TicketCreated,

    # Chat Models
    ConversationTurn,
    ChatMessage,

    # Gateway / Analytics Models
    AnalysisResult,
    AnalyticsAggregate,

    # Utility Models
    ErrorResponse,
)

__all__ = [
    # Enums
    "Priority",
    "TicketStatus",
    "MessageRole",
    "AnalysisMode",
    "FlowState",
    "PRIORITY_TIERS",

    # Ticket Models
    "ExtractionResult",
    "DynamicFieldData",
    "TicketCreate",
    "TicketCreated",

    # Chat Models
    "ConversationTurn",
    "ChatMessage",

    # Gateway / Analytics Models
    "AnalysisResult",
    "AnalyticsAggregate",

    # Utility Models
    "ErrorResponse",
]
