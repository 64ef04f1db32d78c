"""
Analytics Aggregator

Pulls the whole `tickets` table and projects it into dashboard series:
- counts by category / studio / assignee, largest first
- a 30-day trailing trend of daily ticket counts (local calendar days)
- average resolution hours per priority tier

Nothing is cached or filtered in the database; every call recomputes.
"""
import math
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from dateutil import parser as date_parser

from backend.models.schemas import (
    PRIORITY_TIERS,
    AnalyticsAggregate,
    CategoryCount,
    ResolutionTime,
    StudioCount,
    TeamCount,
    TrendPoint,
)
from backend.models.taxonomy import get_category_by_id, get_studio_by_id
from backend.repositories.ticket_repository import TicketRepository
from backend.utils.logger import get_logger

logger = get_logger(__name__)

TREND_DAYS = 30
TOP_CATEGORY_COUNT = 5
TIME_RANGES = ("7d", "30d", "90d", "12m")


def round_half_up(value: float, digits: int = 1) -> float:
    """Round like Math.round: halves go up, not to even"""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a Supabase timestamp into naive local time

    Args:
        value: ISO string, datetime or None

    Returns:
        Naive local datetime, or None when missing/unparsable
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = date_parser.isoparse(str(value))
        except (ValueError, OverflowError):
            logger.warning(f"Unparsable timestamp: {value!r}")
            return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def _count_by(rows: Iterable[Dict[str, Any]], field: str) -> List[tuple]:
    # most_common keeps first-seen order among equal counts
    counter = Counter(row[field] for row in rows if row.get(field))
    return counter.most_common()


def tickets_by_category(rows: List[Dict[str, Any]]) -> List[CategoryCount]:
    result = []
    for category_id, count in _count_by(rows, "categoryId"):
        category = get_category_by_id(category_id)
        result.append(CategoryCount(
            category=category_id,
            label=category.name if category else category_id,
            count=count,
        ))
    return result


def tickets_by_studio(rows: List[Dict[str, Any]]) -> List[StudioCount]:
    result = []
    for studio_id, count in _count_by(rows, "studioId"):
        studio = get_studio_by_id(studio_id)
        result.append(StudioCount(
            studio=studio_id,
            label=studio.name if studio else studio_id,
            count=count,
        ))
    return result


def tickets_by_team(rows: List[Dict[str, Any]]) -> List[TeamCount]:
    return [TeamCount(team=team, count=count) for team, count in _count_by(rows, "assignedTo")]


def ticket_trend(rows: List[Dict[str, Any]], today: date, days: int = TREND_DAYS) -> List[TrendPoint]:
    """
    Daily ticket counts for the trailing window ending today

    Args:
        rows: Ticket rows
        today: Last day of the window (local)
        days: Window length

    Returns:
        Exactly `days` points, oldest first
    """
    created_days = Counter()
    for row in rows:
        created = parse_timestamp(row.get("createdAt"))
        if created is not None:
            created_days[created.date()] += 1

    points = []
    for offset in range(days - 1, -1, -1):
        day = today - timedelta(days=offset)
        points.append(TrendPoint(date=day.isoformat(), count=created_days.get(day, 0)))
    return points


def resolution_time_by_priority(rows: List[Dict[str, Any]]) -> List[ResolutionTime]:
    """
    Average hours from creation to resolution per priority tier

    Tiers without resolved tickets report 0.
    """
    durations: Dict[str, List[float]] = {tier.value: [] for tier in PRIORITY_TIERS}

    for row in rows:
        priority = row.get("priority")
        if priority not in durations:
            continue
        created = parse_timestamp(row.get("createdAt"))
        resolved = parse_timestamp(row.get("resolvedAt"))
        if created is None or resolved is None:
            continue
        durations[priority].append((resolved - created).total_seconds() / 3600)

    result = []
    for tier in PRIORITY_TIERS:
        hours = durations[tier.value]
        avg_hours = sum(hours) / len(hours) if hours else 0
        result.append(ResolutionTime(priority=tier, avg_hours=round_half_up(avg_hours)))
    return result


class AnalyticsService:
    """
    Compute the dashboard aggregate from the ticket table
    """

    def __init__(self, ticket_repo: Optional[TicketRepository] = None):
        self.ticket_repo = ticket_repo or TicketRepository()

    def compute_analytics(
        self,
        time_range: str = "30d",
        studio: str = "all",
        now: Optional[datetime] = None
    ) -> AnalyticsAggregate:
        """
        Build the analytics aggregate

        Args:
            time_range: Dashboard selector value, echoed back only
            studio: Dashboard studio filter, echoed back only
            now: Reference time (defaults to local now)

        Returns:
            AnalyticsAggregate; all-empty when the tickets cannot be read
        """
        now = now or datetime.now()

        try:
            rows = self.ticket_repo.list_all()

            by_category = tickets_by_category(rows)
            resolution = resolution_time_by_priority(rows)

            aggregate = AnalyticsAggregate(
                time_range=time_range,
                studio=studio,
                tickets_by_category=by_category,
                tickets_by_studio=tickets_by_studio(rows),
                tickets_by_team=tickets_by_team(rows),
                ticket_trend=ticket_trend(rows, now.date()),
                resolution_time_by_priority=resolution,
                top_categories=by_category[:TOP_CATEGORY_COUNT],
                total_tickets=sum(item.count for item in by_category),
                avg_resolution_hours=round_half_up(
                    sum(item.avg_hours for item in resolution) / len(resolution)
                ),
            )

            logger.info(
                f"Computed analytics over {len(rows)} tickets "
                f"({len(by_category)} categories)"
            )
            return aggregate

        except Exception as e:
            logger.error(f"Error fetching analytics: {e}", exc_info=True)
            return AnalyticsAggregate.empty(time_range=time_range, studio=studio)
