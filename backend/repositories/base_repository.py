"""
Base Repository

Provides the Supabase client shared by the table repositories and the
log-then-raise error policy they follow.
"""

from supabase import create_client, Client
from postgrest.exceptions import APIError
from backend.config import get_settings
from backend.utils.logger import get_logger
from typing import Optional

logger = get_logger(__name__)
settings = get_settings()

UNIQUE_VIOLATION = "23505"


class BaseRepository:
    """
    Base repository class.

    Subclasses set `table_name` and issue queries through `self.client`.
    A client can be injected (tests, scripts); otherwise one is built from
    settings on first use, so a misconfigured project fails inside the
    repository call rather than at construction.
    """

    table_name: str = ""

    def __init__(self, supabase_client: Optional[Client] = None):
        """
        Initialize repository

        Args:
            supabase_client: Supabase client instance (built lazily if None)
        """
        self._client = supabase_client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_api_key
            )
        return self._client

    def ping(self) -> None:
        """
        One-row read of `table_name`

        Raises:
            Any client or PostgREST error, after logging
        """
        try:
            self.client.table(self.table_name).select("id").limit(1).execute()
        except Exception as e:
            self._handle_error("ping", e)

    def _handle_error(self, operation: str, error: Exception, table: Optional[str] = None):
        """
        Centralized error handling for repository operations.

        Args:
            operation: Description of failed operation
            error: Exception that occurred
            table: Table the operation ran on (defaults to table_name)

        Raises:
            Re-raises the exception after logging
        """
        logger.error(f"Repository error during {operation} on {table or self.table_name}: {error}")
        raise error


def is_unique_violation(error: Exception) -> bool:
    """True when PostgREST reports a unique constraint violation"""
    return isinstance(error, APIError) and getattr(error, "code", None) == UNIQUE_VIOLATION
