"""
Tests for Pydantic schemas to verify validation logic
"""
import pytest
from pydantic import ValidationError

from backend.models.schemas import (
    AnalysisResult,
    AnalyticsAggregate,
    DynamicFieldData,
    ExtractionResult,
    Priority,
    TicketCreate,
    TicketStatus,
)


class TestExtractionResultValidation:
    """Test ExtractionResult model validation"""

    def test_valid_extraction(self, sample_ticket_data):
        extraction = ExtractionResult.model_validate(sample_ticket_data)

        assert extraction.trainer_name == "Kabir Varma"
        assert extraction.priority == Priority.LOW
        assert extraction.tags == ["motivation", "communication"]

    def test_title_required(self, sample_ticket_data):
        sample_ticket_data["title"] = ""

        with pytest.raises(ValidationError):
            ExtractionResult.model_validate(sample_ticket_data)

    def test_description_required(self, sample_ticket_data):
        del sample_ticket_data["description"]

        with pytest.raises(ValidationError):
            ExtractionResult.model_validate(sample_ticket_data)

    @pytest.mark.parametrize("value,expected", [
        ("HIGH", Priority.HIGH),
        (" medium ", Priority.MEDIUM),
        ("urgent", None),
        (None, None),
    ])
    def test_priority_normalization(self, sample_ticket_data, value, expected):
        sample_ticket_data["priority"] = value

        assert ExtractionResult.model_validate(sample_ticket_data).priority == expected

    def test_null_tags(self, sample_ticket_data):
        sample_ticket_data["tags"] = None

        assert ExtractionResult.model_validate(sample_ticket_data).tags == []

    def test_unknown_keys_ignored(self, sample_ticket_data):
        sample_ticket_data["className"] = "Studio PowerCycle"

        extraction = ExtractionResult.model_validate(sample_ticket_data)

        assert not hasattr(extraction, "className")


class TestTicketCreateValidation:
    """Test TicketCreate model validation"""

    def test_defaults(self):
        ticket = TicketCreate(ticket_number="TKT-261019-0001", title="t", description="d")

        assert ticket.priority == Priority.MEDIUM
        assert ticket.status == TicketStatus.NEW
        assert ticket.source == "ai-chatbot"
        assert ticket.dynamic_field_data.ai_generated is True

    @pytest.mark.parametrize("number", ["TKT-2610-0001", "TKT-261019-01", "tkt-261019-0001", "261019-0001"])
    def test_invalid_ticket_number(self, number):
        with pytest.raises(ValidationError):
            TicketCreate(ticket_number=number, title="t", description="d")

    def test_row_uses_camel_case(self):
        ticket = TicketCreate(
            ticket_number="TKT-261019-0001",
            title="t",
            description="d",
            reported_by_user_id="user-1",
            dynamic_field_data=DynamicFieldData(trainer_name="Kabir Varma", sentiment="positive"),
        )

        row = ticket.to_row()

        assert row["ticketNumber"] == "TKT-261019-0001"
        assert row["reportedByUserId"] == "user-1"
        assert row["priority"] == "medium"
        assert row["dynamicFieldData"]["trainerName"] == "Kabir Varma"
        assert "ticket_number" not in row


class TestAnalysisResult:
    """Test AnalysisResult extras and degraded flag"""

    def test_extra_keys_kept(self):
        result = AnalysisResult(sentiment="positive", score=80, mood="happy")

        assert result.model_dump()["mood"] == "happy"
        assert not result.degraded

    def test_degraded(self):
        assert AnalysisResult(error="AI analysis failed").degraded


def test_empty_aggregate_echoes_selectors():
    aggregate = AnalyticsAggregate.empty("12m", "popup")

    assert aggregate.time_range == "12m"
    assert aggregate.studio == "popup"
    assert aggregate.total_tickets == 0
    assert aggregate.ticket_trend == []
