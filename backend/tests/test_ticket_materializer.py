"""
Unit tests for TicketMaterializer

Tests:
- Ticket number format
- Row construction (defaults, category resolution, dynamic fields)
- Ticket number collision retry
"""
import re
import pytest
from datetime import datetime
from unittest.mock import MagicMock, patch

from postgrest.exceptions import APIError

from backend.models.schemas import ExtractionResult, Priority, TicketStatus
from backend.repositories.reference_repository import ReferenceRepository
from backend.repositories.ticket_repository import TicketRepository
from backend.services.ticket_materializer import (
    TicketMaterializer,
    generate_ticket_number,
)

TICKET_NUMBER = re.compile(r"^TKT-\d{6}-\d{4}$")


@pytest.fixture
def ticket_repo():
    repo = MagicMock(spec=TicketRepository)
    repo.insert.return_value = {"id": "row-1"}
    return repo


@pytest.fixture
def reference_repo():
    repo = MagicMock(spec=ReferenceRepository)
    repo.find_category_id_by_name.return_value = "cat-customer-service"
    repo.first_studio_id.return_value = "studio-1"
    return repo


@pytest.fixture
def materializer(ticket_repo, reference_repo):
    return TicketMaterializer(ticket_repo=ticket_repo, reference_repo=reference_repo)


@pytest.fixture
def extraction(ready_ticket_data):
    return ExtractionResult.model_validate(ready_ticket_data)


def _inserted(ticket_repo, call=-1):
    return ticket_repo.insert.call_args_list[call].args[0]


class TestTicketNumber:
    """TKT-YYMMDD-NNNN"""

    def test_format_and_date(self):
        number = generate_ticket_number(datetime(2026, 3, 7, 15, 30))

        assert TICKET_NUMBER.match(number)
        assert number.startswith("TKT-260307-")

    def test_suffix_zero_padded(self):
        with patch("backend.services.ticket_materializer.random.randint", return_value=42):
            assert generate_ticket_number(datetime(2026, 1, 2)) == "TKT-260102-0042"


class TestCreateTicket:
    """Row construction and insert"""

    def test_creates_ticket(self, materializer, ticket_repo, reference_repo, extraction):
        created = materializer.create_ticket(extraction, reporter_id="user-7")

        ticket_repo.insert.assert_called_once()
        ticket = _inserted(ticket_repo)
        reference_repo.find_category_id_by_name.assert_called_once_with("Customer Service")

        assert TICKET_NUMBER.match(ticket.ticket_number)
        assert ticket.category_id == "cat-customer-service"
        assert ticket.studio_id == "studio-1"
        assert ticket.priority == Priority.HIGH
        assert ticket.status == TicketStatus.NEW
        assert ticket.source == "ai-chatbot"
        assert ticket.reported_by_user_id == "user-7"
        assert ticket.tags == ["punctuality", "professionalism"]

        assert created.ticket_number == ticket.ticket_number
        assert created.category == "Customer Service"
        assert created.priority == "high"

    def test_row_uses_column_names(self, materializer, ticket_repo, extraction):
        materializer.create_ticket(extraction)

        row = _inserted(ticket_repo).to_row()

        assert row["categoryId"] == "cat-customer-service"
        assert row["status"] == "new"
        assert row["dynamicFieldData"] == {
            "trainerName": "Anisha Shah",
            "sentiment": "negative",
            "feedbackType": "trainer-feedback",
            "aiGenerated": True,
        }

    def test_priority_defaults_to_medium(self, materializer, ticket_repo, ready_ticket_data):
        del ready_ticket_data["priority"]
        extraction = ExtractionResult.model_validate(ready_ticket_data)

        created = materializer.create_ticket(extraction)

        assert _inserted(ticket_repo).priority == Priority.MEDIUM
        assert created.priority is None

    def test_unknown_category_leaves_id_empty(
        self, materializer, ticket_repo, reference_repo, ready_ticket_data
    ):
        ready_ticket_data["category"] = "Parking"
        reference_repo.find_category_id_by_name.return_value = None

        created = materializer.create_ticket(ExtractionResult.model_validate(ready_ticket_data))

        assert _inserted(ticket_repo).category_id is None
        assert created.category == "Parking"

    def test_no_studios(self, materializer, ticket_repo, reference_repo, extraction):
        reference_repo.first_studio_id.return_value = None

        materializer.create_ticket(extraction)

        assert _inserted(ticket_repo).studio_id is None

    def test_not_idempotent(self, materializer, ticket_repo, extraction):
        """Each call inserts a fresh ticket"""
        with patch(
            "backend.services.ticket_materializer.random.randint",
            side_effect=[1, 2],
        ):
            first = materializer.create_ticket(extraction)
            second = materializer.create_ticket(extraction)

        assert ticket_repo.insert.call_count == 2
        assert first.ticket_number != second.ticket_number


class TestTicketNumberCollision:
    """Unique violations on ticketNumber"""

    def test_retries_with_new_number(self, materializer, ticket_repo, extraction):
        ticket_repo.insert.side_effect = [
            APIError({"code": "23505", "message": "duplicate key", "details": None, "hint": None}),
            {"id": "row-2"},
        ]

        with patch(
            "backend.services.ticket_materializer.random.randint",
            side_effect=[1111, 2222],
        ):
            created = materializer.create_ticket(extraction)

        assert ticket_repo.insert.call_count == 2
        assert created.ticket_number.endswith("-2222")
        assert _inserted(ticket_repo, 0).ticket_number.endswith("-1111")

    def test_gives_up_after_max_attempts(self, materializer, ticket_repo, extraction):
        ticket_repo.insert.side_effect = APIError(
            {"code": "23505", "message": "duplicate key", "details": None, "hint": None}
        )

        with pytest.raises(APIError):
            materializer.create_ticket(extraction)

        assert ticket_repo.insert.call_count == materializer.max_attempts

    def test_other_errors_propagate(self, materializer, ticket_repo, extraction):
        ticket_repo.insert.side_effect = APIError(
            {"code": "42501", "message": "permission denied", "details": None, "hint": None}
        )

        with pytest.raises(APIError):
            materializer.create_ticket(extraction)

        assert ticket_repo.insert.call_count == 1

    def test_lookup_errors_propagate(self, materializer, ticket_repo, reference_repo, extraction):
        reference_repo.find_category_id_by_name.side_effect = RuntimeError("connection reset")

        with pytest.raises(RuntimeError):
            materializer.create_ticket(extraction)

        ticket_repo.insert.assert_not_called()


class TestDefaultRepositories:
    """Repositories built from settings"""

    def test_construction_does_not_connect(self, extraction):
        with patch(
            "backend.repositories.base_repository.create_client",
            side_effect=Exception("supabase_url is required"),
        ) as create:
            materializer = TicketMaterializer()
            create.assert_not_called()

            with pytest.raises(Exception, match="supabase_url is required"):
                materializer.create_ticket(extraction)
