"""
Repositories package for database operations

Provides repository classes for:
- tickets table (TicketRepository)
- categories / studios reference tables (ReferenceRepository)
"""
from backend.repositories.ticket_repository import TicketRepository
from backend.repositories.reference_repository import ReferenceRepository

__all__ = [
    "TicketRepository",
    "ReferenceRepository",
]
