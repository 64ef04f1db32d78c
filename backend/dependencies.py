"""
FastAPI dependency providers

Services are built lazily on first use so the app imports without
credentials; tests replace them through app.dependency_overrides.
"""
from functools import lru_cache

from backend.repositories.ticket_repository import TicketRepository
from backend.services.analytics import AnalyticsService
from backend.services.sentiment_gateway import SentimentGateway
from backend.services.ticket_flow import SessionStore, TicketFlow
from backend.services.ticket_materializer import TicketMaterializer


@lru_cache()
def get_ticket_repository() -> TicketRepository:
    return TicketRepository()


@lru_cache()
def get_sentiment_gateway() -> SentimentGateway:
    return SentimentGateway()


@lru_cache()
def get_session_store() -> SessionStore:
    return SessionStore()


@lru_cache()
def get_ticket_flow() -> TicketFlow:
    """Ticket flow wired to the shared gateway and ticket repository"""
    return TicketFlow(
        gateway=get_sentiment_gateway(),
        materializer=TicketMaterializer(ticket_repo=get_ticket_repository()),
    )


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(ticket_repo=get_ticket_repository())
