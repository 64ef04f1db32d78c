"""
Pytest configuration and fixtures
"""
import pytest
from typing import Dict, Any


@pytest.fixture
def sample_ticket_data() -> Dict[str, Any]:
    """ticketData block as emitted by the feedback assistant"""
    return {
        "title": "Trainer Feedback - Kabir Varma - 2026-10-17",
        "description": "Great energy in PowerCycle, clear cues throughout the class.",
        "category": "Community & Culture",
        "subcategory": "Trainer Recognition",
        "priority": "low",
        "trainerName": "Kabir Varma",
        "sentiment": "positive",
        "tags": ["motivation", "communication"],
    }


@pytest.fixture
def sample_ticket_rows() -> list:
    """Raw rows as returned by a select-all on the tickets table"""
    return [
        {
            "id": "row-1",
            "ticketNumber": "TKT-261001-0001",
            "categoryId": "92c1ab90-cefb-452c-b555-7bb4e86afb8e",
            "studioId": "kenkre-house",
            "priority": "high",
            "status": "resolved",
            "createdAt": "2026-10-01T09:00:00",
            "resolvedAt": "2026-10-01T17:00:00",
        },
        {
            "id": "row-2",
            "ticketNumber": "TKT-261002-0002",
            "categoryId": "92c1ab90-cefb-452c-b555-7bb4e86afb8e",
            "studioId": None,
            "priority": "medium",
            "status": "new",
            "createdAt": "2026-10-02T10:00:00",
            "resolvedAt": None,
        },
    ]
