"""
Sentiment analysis API route

Single-shot analysis of a ticket or trainer feedback, or one conversational
turn when chat_mode is set. Always answers 200; upstream failures come back
as the degraded neutral result.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from backend.dependencies import get_sentiment_gateway
from backend.models.schemas import AnalysisMode, AnalysisResult, ConversationTurn
from backend.services.sentiment_gateway import SentimentGateway, degraded_result

router = APIRouter(prefix="/api/v1/sentiment", tags=["sentiment"])


class AnalysisRequest(BaseModel):
    """Request model for sentiment analysis"""
    title: str = ""
    description: str = ""
    feedback: Optional[str] = None
    trainer_name: Optional[str] = Field(None, alias="trainerName")
    chat_mode: bool = Field(False, alias="chatMode")
    conversation_history: List[ConversationTurn] = Field(default_factory=list, alias="conversationHistory")
    system_prompt: Optional[str] = Field(None, alias="systemPrompt")

    model_config = ConfigDict(populate_by_name=True)

    def content(self) -> str:
        return self.feedback or f"{self.title}\n\n{self.description}".strip()


@router.post("/analyze", response_model=AnalysisResult, response_model_exclude_none=True)
async def analyze_sentiment(
    request: AnalysisRequest,
    gateway: SentimentGateway = Depends(get_sentiment_gateway)
):
    """
    Analyze feedback sentiment

    Keys follow the instruction prompt: sentiment, score, tags plus
    insights/strengths/improvements for trainer feedback or
    summary/priority/department for tickets.
    """
    content = request.content() or " ".join(turn.content for turn in request.conversation_history[-1:])
    mode = AnalysisMode.CONVERSATIONAL if request.chat_mode else AnalysisMode.SINGLE

    if not content.strip():
        # Nothing to send upstream; same contract as any other failure
        return degraded_result(
            error="No content to analyze",
            insights="Please provide feedback text to analyze.",
        )

    return await gateway.analyze(
        content,
        mode=mode,
        history=request.conversation_history or None,
        instruction_prompt=request.system_prompt,
        subject_name=request.trainer_name,
    )
