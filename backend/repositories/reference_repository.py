"""
Reference Repository for the read-only `categories` and `studios` tables
"""
from typing import Optional

from backend.repositories.base_repository import BaseRepository
from backend.utils.logger import get_logger

logger = get_logger(__name__)


class ReferenceRepository(BaseRepository):
    """Lookups against the reference tables used when materializing a ticket"""

    table_name = "categories"
    categories_table = "categories"
    studios_table = "studios"

    def find_category_id_by_name(self, name: Optional[str]) -> Optional[str]:
        """
        Look up a category id by exact display name

        Args:
            name: Category name from the extraction

        Returns:
            Category id, or None when no row matches
        """
        if not name:
            return None

        try:
            response = self.client.table(self.categories_table)\
                .select("id")\
                .eq("name", name)\
                .limit(1)\
                .execute()

            if not response.data:
                logger.info(f"No category named '{name}'")
                return None

            return response.data[0]["id"]

        except Exception as e:
            self._handle_error(f"lookup of category '{name}'", e, table=self.categories_table)

    def first_studio_id(self) -> Optional[str]:
        """
        Return the id of the first studio in an unfiltered listing

        Returns:
            Studio id, or None when the table is empty
        """
        try:
            response = self.client.table(self.studios_table)\
                .select("id")\
                .limit(1)\
                .execute()

            if not response.data:
                return None

            return response.data[0]["id"]

        except Exception as e:
            self._handle_error("first studio lookup", e, table=self.studios_table)
