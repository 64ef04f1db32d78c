"""
Business Logic Services
"""
from .sentiment_gateway import SentimentGateway
from .ticket_materializer import TicketMaterializer
from .ticket_flow import TicketFlow, SessionStore
from .analytics import AnalyticsService

__all__ = [
    "SentimentGateway",
    "TicketMaterializer",
    "TicketFlow",
    "SessionStore",
    "AnalyticsService",
]
