"""
Sentiment/Extraction Gateway

Stateless boundary in front of OpenAI chat completions:
- single mode: one feedback text in, a JSON analysis object out
- conversational mode: a transcript in, the assistant's reply text out

Upstream problems (missing key, HTTP error, network failure, malformed body)
never escape; they become a degraded neutral result because the output is
shown directly to an end user.
"""
from typing import List, Optional, Sequence, Dict, Any
import json

from openai import AsyncOpenAI, APIConnectionError, APIStatusError

from backend.config import get_settings
from backend.models.schemas import AnalysisMode, AnalysisResult, ConversationTurn
from backend.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

DEGRADED_SENTIMENT = "neutral"
DEGRADED_SCORE = 50
TAG_PENDING_ANALYSIS = "pending-analysis"
TAG_ERROR = "error"


def trainer_sentiment_prompt(trainer_name: str) -> str:
    """Instruction for analyzing feedback about one trainer"""
    return f"""You are an expert sentiment analyzer for fitness trainer feedback. Analyze the feedback about trainer "{trainer_name}" and provide:
1. Overall sentiment (positive, negative, neutral, mixed)
2. A score from 0-100 (0 being extremely negative, 100 being extremely positive)
3. 3-5 relevant tags (e.g., "professionalism", "technique", "motivation", "punctuality", "communication")
4. Key insights and recommendations
5. Areas of strength
6. Areas for improvement

Return as JSON with keys: sentiment, score, tags, insights, strengths, improvements"""


TICKET_SENTIMENT_PROMPT = """You are an expert sentiment analyzer for customer support tickets. Analyze the ticket and provide:
1. Overall sentiment (positive, negative, neutral, mixed)
2. A score from 0-100 (0 being extremely negative, 100 being extremely positive)
3. 3-5 relevant tags for categorization
4. A brief summary of the issue
5. Recommended priority (critical, high, medium, low)
6. Suggested department routing

Return as JSON with keys: sentiment, score, tags, summary, priority, department"""


def degraded_result(error: str, insights: str, tag: str = TAG_ERROR) -> AnalysisResult:
    """Fixed neutral result returned when the upstream call cannot be completed"""
    return AnalysisResult(
        sentiment=DEGRADED_SENTIMENT,
        score=DEGRADED_SCORE,
        tags=[tag],
        insights=insights,
        error=error,
    )


class SentimentGateway:
    """
    Forward feedback text to OpenAI and return an AnalysisResult
    """

    def __init__(self, client: Optional[AsyncOpenAI] = None, api_key: Optional[str] = None):
        """
        Initialize gateway

        Args:
            client: Pre-built OpenAI client (tests); built from settings when None
            api_key: Overrides settings.openai_api_key
        """
        self.api_key = settings.openai_api_key if api_key is None else api_key
        self.model = settings.openai_model
        self.temperature = settings.openai_temperature
        self._client = client

        logger.info(f"Initialized SentimentGateway ({self.model})")

    @property
    def configured(self) -> bool:
        return bool(self.api_key) or self._client is not None

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            kwargs: Dict[str, Any] = {"api_key": self.api_key}
            if settings.openai_timeout_seconds is not None:
                kwargs["timeout"] = settings.openai_timeout_seconds
            # Retries are off; one outbound call per analysis
            self._client = AsyncOpenAI(max_retries=0, **kwargs)
        return self._client

    def _build_messages(
        self,
        content: str,
        mode: AnalysisMode,
        history: Optional[Sequence[ConversationTurn]],
        instruction_prompt: str
    ) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": instruction_prompt}]

        if mode == AnalysisMode.CONVERSATIONAL and history:
            messages.extend(
                {"role": turn.role.value, "content": turn.content}
                for turn in history
            )
        else:
            messages.append({"role": "user", "content": content})

        return messages

    async def analyze(
        self,
        content: str,
        mode: AnalysisMode = AnalysisMode.SINGLE,
        history: Optional[Sequence[ConversationTurn]] = None,
        instruction_prompt: Optional[str] = None,
        subject_name: Optional[str] = None
    ) -> AnalysisResult:
        """
        Analyze feedback text

        Args:
            content: Feedback text (non-empty)
            mode: Single analysis or conversational turn
            history: Transcript excluding the greeting, ending with the latest
                user turn (conversational mode)
            instruction_prompt: System instruction; defaults to the trainer or
                ticket sentiment prompt depending on subject_name
            subject_name: Trainer the feedback is about

        Returns:
            AnalysisResult, degraded when the upstream call fails

        Raises:
            ValueError: If content is empty
        """
        if not content or not content.strip():
            raise ValueError("content must be a non-empty string")

        if not self.configured:
            logger.error("OPENAI_API_KEY not configured")
            return degraded_result(
                error="OpenAI API key not configured",
                insights="AI analysis is not available. Please configure the OpenAI API key.",
                tag=TAG_PENDING_ANALYSIS,
            )

        if instruction_prompt is None:
            instruction_prompt = (
                trainer_sentiment_prompt(subject_name) if subject_name else TICKET_SENTIMENT_PROMPT
            )

        messages = self._build_messages(content, mode, history, instruction_prompt)
        logger.info(f"Analyzing content ({mode.value}): {content[:100]}")

        request: Dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if mode == AnalysisMode.SINGLE:
            request["max_tokens"] = settings.openai_max_tokens
            request["response_format"] = {"type": "json_object"}
        else:
            request["max_tokens"] = settings.openai_chat_max_tokens

        try:
            response = await self.client.chat.completions.create(**request)
            reply = response.choices[0].message.content
            if not reply:
                raise ValueError("Empty completion content")

            if mode == AnalysisMode.CONVERSATIONAL:
                return AnalysisResult(chat_response=reply)

            parsed = json.loads(reply)
            if not isinstance(parsed, dict):
                raise ValueError(f"Expected JSON object, got {type(parsed).__name__}")

            result = AnalysisResult(**parsed)
            logger.info(f"Analysis complete: sentiment={result.sentiment}, score={result.score}")
            return result

        except APIStatusError as e:
            logger.error(f"OpenAI API error: {e.status_code} {e.message}")
            return degraded_result(
                error="AI analysis failed",
                insights="Failed to analyze content. Please try again.",
            )
        except APIConnectionError as e:
            logger.error(f"OpenAI API unreachable: {e}")
            return degraded_result(
                error="AI analysis failed",
                insights="Failed to analyze content. Please try again.",
            )
        except (ValueError, IndexError, AttributeError, TypeError) as e:
            # json.JSONDecodeError and pydantic.ValidationError are ValueErrors
            logger.error(f"Malformed OpenAI response: {e}")
            return degraded_result(
                error=str(e) or "Malformed response",
                insights="An error occurred during analysis.",
            )
