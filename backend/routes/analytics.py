"""
Analytics and taxonomy API routes
"""
from fastapi import APIRouter, Depends, Query

from backend.dependencies import get_analytics_service
from backend.models.schemas import AnalyticsAggregate, TimeRange
from backend.models.taxonomy import TaxonomySnapshot, get_taxonomy
from backend.services.analytics import AnalyticsService

router = APIRouter(prefix="/api/v1", tags=["analytics"])


@router.get("/analytics", response_model=AnalyticsAggregate)
async def get_analytics(
    time_range: TimeRange = Query("30d"),
    studio: str = Query("all"),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Ticket analytics for the dashboard

    Metrics:
    - Tickets by category, studio and assigned team
    - Daily ticket trend (last 30 days)
    - Average resolution time per priority

    time_range and studio are accepted and echoed back; the trend window is
    always 30 days and no studio filter is applied.
    """
    return service.compute_analytics(time_range=time_range, studio=studio)


@router.get("/taxonomy", response_model=TaxonomySnapshot)
async def taxonomy():
    """
    Studios, trainers, classes, categories and display metadata
    """
    return get_taxonomy()
