"""
Ticket Repository for the `tickets` table

Only two statements are issued against this table: insert-one when a chat
extraction is materialized, and an unfiltered select-all for analytics.
"""
from typing import List, Dict, Any

from backend.models.schemas import TicketCreate
from backend.repositories.base_repository import BaseRepository
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class TicketRepository(BaseRepository):
    """Repository for tickets table operations"""

    table_name = "tickets"

    def insert(self, ticket: TicketCreate) -> Dict[str, Any]:
        """
        Insert a single ticket

        Args:
            ticket: Ticket row to insert

        Returns:
            Inserted row as returned by Supabase

        Raises:
            postgrest.exceptions.APIError: On constraint violation or other storage error
            ValueError: If Supabase returns no row
        """
        try:
            response = self.client.table(self.table_name)\
                .insert([ticket.to_row()])\
                .execute()

            if not response.data:
                raise ValueError(f"Failed to create ticket {ticket.ticket_number}")

            logger.info(f"Created ticket: {ticket.ticket_number}")
            return response.data[0]

        except Exception as e:
            self._handle_error(f"insert of {ticket.ticket_number}", e)

    def list_all(self) -> List[Dict[str, Any]]:
        """
        Fetch every ticket row, unfiltered and unpaginated

        Returns:
            List of raw ticket rows
        """
        try:
            response = self.client.table(self.table_name).select("*").execute()
            rows = response.data or []
            logger.debug(f"Fetched {len(rows)} tickets")
            return rows

        except Exception as e:
            self._handle_error("select all", e)
