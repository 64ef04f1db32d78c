"""
Pydantic models for Studio Feedback Desk

This module contains the schemas exchanged between the chat flow, the LLM
gateway, the ticket materializer and the analytics aggregate, plus the row
shape written to the Supabase `tickets` table.

Supabase columns are camelCase; Python attributes are snake_case with the
column name as alias.
"""
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Literal

from pydantic import BaseModel, Field, field_validator, ConfigDict


# ============================================================================
# Enums
# ============================================================================

class Priority(str, Enum):
    """Valid ticket priorities"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TicketStatus(str, Enum):
    """Valid ticket statuses"""
    NEW = "new"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    PENDING_CUSTOMER = "pending_customer"
    RESOLVED = "resolved"
    CLOSED = "closed"
    REOPENED = "reopened"


class MessageRole(str, Enum):
    """Chat message author"""
    USER = "user"
    ASSISTANT = "assistant"


class AnalysisMode(str, Enum):
    """Gateway invocation mode"""
    SINGLE = "single"
    CONVERSATIONAL = "conversational"


class FlowState(str, Enum):
    """Conversational ticket flow states"""
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    MATERIALIZING = "materializing"


TimeRange = Literal["7d", "30d", "90d", "12m"]

# Order used by the analytics resolution-time series
PRIORITY_TIERS: List[Priority] = [
    Priority.LOW,
    Priority.MEDIUM,
    Priority.HIGH,
    Priority.CRITICAL,
]


# ============================================================================
# Extraction / Ticket Models
# ============================================================================

class ExtractionResult(BaseModel):
    """
    Ticket-worthy data parsed out of an assistant reply.

    Only presence of title and description is checked; everything else is
    taken as the model produced it. An unrecognised priority is dropped so
    the materializer can apply its default.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    title: str = Field(..., min_length=1, description="Ticket title")
    description: str = Field(..., min_length=1, description="Ticket description")
    category: Optional[str] = Field(None, description="Category display name")
    subcategory: Optional[str] = Field(None, description="Subcategory label")
    priority: Optional[Priority] = Field(None, description="Suggested priority")
    trainer_name: Optional[str] = Field(None, alias="trainerName", description="Trainer the feedback is about")
    sentiment: Optional[str] = Field(None, description="positive | neutral | negative")
    tags: List[str] = Field(default_factory=list, description="Free-form tags")

    @field_validator('priority', mode='before')
    @classmethod
    def normalize_priority(cls, v: Any) -> Optional[str]:
        """Lower-case known priorities, drop anything else"""
        if v is None:
            return None
        if isinstance(v, Priority):
            return v.value
        value = str(v).strip().lower()
        return value if value in {p.value for p in Priority} else None

    @field_validator('tags', mode='before')
    @classmethod
    def normalize_tags(cls, v: Any) -> List[str]:
        """Accept a missing or null tag list"""
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [str(tag) for tag in v]


class DynamicFieldData(BaseModel):
    """Feedback-specific attributes stored in tickets.dynamicFieldData"""
    model_config = ConfigDict(populate_by_name=True)

    trainer_name: Optional[str] = Field(None, alias="trainerName")
    sentiment: Optional[str] = None
    feedback_type: str = Field("trainer-feedback", alias="feedbackType")
    ai_generated: bool = Field(True, alias="aiGenerated")


class TicketCreate(BaseModel):
    """Row inserted into the `tickets` table"""
    model_config = ConfigDict(populate_by_name=True)

    ticket_number: str = Field(..., alias="ticketNumber", pattern=r"^TKT-\d{6}-\d{4}$")
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category_id: Optional[str] = Field(None, alias="categoryId")
    studio_id: Optional[str] = Field(None, alias="studioId")
    priority: Priority = Priority.MEDIUM
    status: TicketStatus = TicketStatus.NEW
    source: str = "ai-chatbot"
    tags: List[str] = Field(default_factory=list)
    reported_by_user_id: Optional[str] = Field(None, alias="reportedByUserId")
    dynamic_field_data: DynamicFieldData = Field(
        default_factory=DynamicFieldData,
        alias="dynamicFieldData"
    )

    def to_row(self) -> Dict[str, Any]:
        """Serialize with Supabase column names"""
        return self.model_dump(mode="json", by_alias=True)


class TicketCreated(BaseModel):
    """Summary of a freshly materialized ticket, shown on the confirmation card"""
    ticket_number: str
    title: str
    category: Optional[str] = None
    priority: Optional[str] = None


# ============================================================================
# Chat Models
# ============================================================================

class ConversationTurn(BaseModel):
    """Role/content pair forwarded to the LLM"""
    role: MessageRole
    content: str


class ChatMessage(BaseModel):
    """One entry of a chat transcript"""
    id: str
    role: MessageRole
    content: str
    timestamp: datetime = Field(default_factory=datetime.now)
    ticket_created: Optional[TicketCreated] = None


# ============================================================================
# Gateway Models
# ============================================================================

class AnalysisResult(BaseModel):
    """
    Gateway output.

    The shape is dictated by the instruction prompt and taken as the model
    returned it: prompt-shaped keys are untyped and unknown keys are kept as
    extras. `error` is only set on a degraded result.
    """
    model_config = ConfigDict(extra="allow")

    sentiment: Any = "neutral"
    score: Optional[Any] = None
    tags: Any = Field(default_factory=list)
    insights: Optional[Any] = None
    summary: Optional[Any] = None
    priority: Optional[Any] = None
    department: Optional[Any] = None
    strengths: Optional[Any] = None
    improvements: Optional[Any] = None
    chat_response: Optional[str] = None
    error: Optional[str] = None

    @property
    def degraded(self) -> bool:
        """True when the upstream call could not be completed"""
        return self.error is not None


# ============================================================================
# Analytics Models
# ============================================================================

class CategoryCount(BaseModel):
    category: str
    label: str
    count: int


class StudioCount(BaseModel):
    studio: str
    label: str
    count: int


class TeamCount(BaseModel):
    team: str
    count: int


class TrendPoint(BaseModel):
    date: str = Field(..., description="Local calendar day, YYYY-MM-DD")
    count: int


class ResolutionTime(BaseModel):
    priority: Priority
    avg_hours: float


class AnalyticsAggregate(BaseModel):
    """Projection of the ticket table, recomputed on each query"""
    time_range: str = "30d"
    studio: str = "all"
    tickets_by_category: List[CategoryCount] = Field(default_factory=list)
    tickets_by_studio: List[StudioCount] = Field(default_factory=list)
    tickets_by_team: List[TeamCount] = Field(default_factory=list)
    ticket_trend: List[TrendPoint] = Field(default_factory=list)
    resolution_time_by_priority: List[ResolutionTime] = Field(default_factory=list)
    top_categories: List[CategoryCount] = Field(default_factory=list)
    total_tickets: int = 0
    avg_resolution_hours: float = 0.0

    @classmethod
    def empty(cls, time_range: str = "30d", studio: str = "all") -> "AnalyticsAggregate":
        """All-empty aggregate returned when the ticket table cannot be read"""
        return cls(time_range=time_range, studio=studio)


# ============================================================================
# Utility Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response"""
    detail: str
    code: Optional[str] = None
