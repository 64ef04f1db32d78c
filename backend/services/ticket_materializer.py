"""
Ticket Materializer

Turns an ExtractionResult into a row in the `tickets` table:
- synthesizes a TKT-YYMMDD-NNNN ticket number
- resolves the category by exact name (absent when unknown)
- attaches the first listed studio (the extraction carries no studio signal)

Not idempotent: every call inserts a new ticket.
"""
import random
from datetime import datetime
from typing import Optional

from backend.config import get_settings
from backend.models.schemas import (
    DynamicFieldData,
    ExtractionResult,
    Priority,
    TicketCreate,
    TicketCreated,
    TicketStatus,
)
from backend.models.taxonomy import is_known_trainer
from backend.repositories.base_repository import is_unique_violation
from backend.repositories.reference_repository import ReferenceRepository
from backend.repositories.ticket_repository import TicketRepository
from backend.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

FEEDBACK_TYPE = "trainer-feedback"


def generate_ticket_number(now: Optional[datetime] = None) -> str:
    """
    Build a ticket number for the given day

    Args:
        now: Creation time (defaults to local now)

    Returns:
        TKT-YYMMDD-NNNN with a random zero-padded suffix
    """
    now = now or datetime.now()
    suffix = random.randint(0, 9999)
    return f"TKT-{now.strftime('%y%m%d')}-{suffix:04d}"


class TicketMaterializer:
    """
    Persist chat extractions as tickets
    """

    def __init__(
        self,
        ticket_repo: Optional[TicketRepository] = None,
        reference_repo: Optional[ReferenceRepository] = None
    ):
        self.ticket_repo = ticket_repo or TicketRepository()
        self.reference_repo = reference_repo or ReferenceRepository()
        self.source = settings.chat_source_tag
        self.max_attempts = max(1, settings.ticket_number_max_attempts)

    def _build_ticket(
        self,
        extraction: ExtractionResult,
        reporter_id: Optional[str],
        category_id: Optional[str],
        studio_id: Optional[str]
    ) -> TicketCreate:
        return TicketCreate(
            ticket_number=generate_ticket_number(),
            title=extraction.title,
            description=extraction.description,
            category_id=category_id,
            studio_id=studio_id,
            priority=extraction.priority or Priority.MEDIUM,
            status=TicketStatus.NEW,
            source=self.source,
            tags=list(extraction.tags),
            reported_by_user_id=reporter_id,
            dynamic_field_data=DynamicFieldData(
                trainer_name=extraction.trainer_name,
                sentiment=extraction.sentiment,
                feedback_type=FEEDBACK_TYPE,
                ai_generated=True,
            ),
        )

    def create_ticket(
        self,
        extraction: ExtractionResult,
        reporter_id: Optional[str] = None
    ) -> TicketCreated:
        """
        Create a ticket from an extraction

        Args:
            extraction: Validated extraction from the assistant reply
            reporter_id: Id of the user who gave the feedback

        Returns:
            TicketCreated summary for the confirmation card

        Raises:
            Exception: Storage errors propagate; a ticket number collision is
                retried with a fresh number up to max_attempts
        """
        if extraction.trainer_name and not is_known_trainer(extraction.trainer_name):
            logger.info(f"Trainer '{extraction.trainer_name}' is not on the roster")

        category_id = self.reference_repo.find_category_id_by_name(extraction.category)
        studio_id = self.reference_repo.first_studio_id()

        for attempt in range(1, self.max_attempts + 1):
            ticket = self._build_ticket(extraction, reporter_id, category_id, studio_id)
            try:
                self.ticket_repo.insert(ticket)
                break
            except Exception as e:
                if is_unique_violation(e) and attempt < self.max_attempts:
                    logger.warning(
                        f"Ticket number {ticket.ticket_number} taken, "
                        f"retrying ({attempt}/{self.max_attempts})"
                    )
                    continue
                raise

        logger.info(
            f"Materialized {ticket.ticket_number} "
            f"(category={extraction.category}, categoryId={category_id}, priority={ticket.priority.value})"
        )

        return TicketCreated(
            ticket_number=ticket.ticket_number,
            title=extraction.title,
            category=extraction.category,
            priority=extraction.priority.value if extraction.priority else None,
        )
