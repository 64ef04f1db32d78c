"""
Health endpoints

- GET /api/v1/health: liveness, no outbound calls
- GET /api/v1/health/dependencies: Supabase read and OpenAI model listing,
  cached for 30 seconds. Supabase is critical; without OpenAI the chat still
  answers with a notice turn, so it only degrades the report.
"""
import asyncio
import time
from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from backend.dependencies import get_sentiment_gateway, get_ticket_repository
from backend.repositories.ticket_repository import TicketRepository
from backend.services.sentiment_gateway import SentimentGateway
from backend.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/v1/health", tags=["health"])

APP_VERSION = "1.0.0"
APP_START_TIME = time.time()

CHECK_TIMEOUT_SECONDS = 5.0
CACHE_TTL_SECONDS = 30.0
CRITICAL_SERVICES = ("supabase",)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime = Field(default_factory=_utcnow)
    version: str = APP_VERSION
    uptime_seconds: float


class DependencyStatus(BaseModel):
    name: str
    status: str = Field(..., description="healthy | degraded | unhealthy")
    latency_ms: Optional[float] = None
    error_message: Optional[str] = None


class DependencyHealth(BaseModel):
    overall_status: str
    dependencies: Dict[str, DependencyStatus]
    checked_at: datetime = Field(default_factory=_utcnow)


class ReportCache:
    """Holds the last dependency report for `ttl` seconds"""

    def __init__(self, ttl: float):
        self.ttl = ttl
        self._report: Optional[DependencyHealth] = None
        self._stored_at = 0.0

    def get(self) -> Optional[DependencyHealth]:
        if self._report and time.monotonic() - self._stored_at < self.ttl:
            return self._report
        return None

    def put(self, report: DependencyHealth) -> None:
        self._report = report
        self._stored_at = time.monotonic()

    def clear(self) -> None:
        self._report = None


report_cache = ReportCache(CACHE_TTL_SECONDS)


async def timed_check(name: str, call: Callable[[], Awaitable]) -> DependencyStatus:
    """Run one check under the timeout; failures become an unhealthy status"""
    start = time.monotonic()
    try:
        await asyncio.wait_for(call(), timeout=CHECK_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"{name} health check timed out")
        return DependencyStatus(
            name=name,
            status="unhealthy",
            error_message=f"Request timed out after {CHECK_TIMEOUT_SECONDS:g} seconds",
        )
    except Exception as e:
        logger.error(f"{name} health check failed: {e}")
        return DependencyStatus(name=name, status="unhealthy", error_message=str(e))

    return DependencyStatus(
        name=name,
        status="healthy",
        latency_ms=round((time.monotonic() - start) * 1000, 2),
    )


async def check_supabase(repo: TicketRepository) -> DependencyStatus:
    return await timed_check("supabase", lambda: asyncio.to_thread(repo.ping))


async def check_openai_api(gateway: SentimentGateway) -> DependencyStatus:
    if not gateway.configured:
        return DependencyStatus(
            name="openai_api",
            status="degraded",
            error_message="API key not configured",
        )
    return await timed_check("openai_api", lambda: gateway.client.models.list())


def determine_overall_status(dependencies: Dict[str, DependencyStatus]) -> str:
    if any(
        dependencies[name].status == "unhealthy"
        for name in CRITICAL_SERVICES
        if name in dependencies
    ):
        return "unhealthy"
    if any(dep.status != "healthy" for dep in dependencies.values()):
        return "degraded"
    return "healthy"


@router.get("", response_model=HealthResponse)
async def basic_health_check():
    """Liveness only; always 200"""
    return HealthResponse(
        status="healthy",
        uptime_seconds=round(time.time() - APP_START_TIME, 2),
    )


@router.get("/dependencies", response_model=DependencyHealth)
async def dependency_health_check(
    repo: TicketRepository = Depends(get_ticket_repository),
    gateway: SentimentGateway = Depends(get_sentiment_gateway)
):
    """Supabase and OpenAI status; always 200, cached for 30 seconds"""
    cached = report_cache.get()
    if cached:
        return cached

    supabase, openai_api = await asyncio.gather(
        check_supabase(repo),
        check_openai_api(gateway),
    )
    dependencies = {supabase.name: supabase, openai_api.name: openai_api}
    report = DependencyHealth(
        overall_status=determine_overall_status(dependencies),
        dependencies=dependencies,
    )
    report_cache.put(report)

    if report.overall_status != "healthy":
        logger.warning(f"Dependency health {report.overall_status}: {dependencies}")
    return report
