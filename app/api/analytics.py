"""Analytics routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from ..resources import AnalyticsResource
from ..schemas import AnalyticsReport, AnalyticsSummary
from .deps import DATA_SOURCE_HEADER, get_analytics_resource

router = APIRouter(prefix="/analytics", tags=["analytics"])


@router.get("", response_model=AnalyticsReport, response_model_by_alias=True)
async def analytics_report(
    response: Response,
    analytics: AnalyticsResource = Depends(get_analytics_resource),
) -> AnalyticsReport:
    report, source = await analytics.report()
    response.headers[DATA_SOURCE_HEADER] = source
    return report


@router.get("/summary", response_model=AnalyticsSummary, response_model_by_alias=True)
async def analytics_summary(
    response: Response,
    analytics: AnalyticsResource = Depends(get_analytics_resource),
) -> AnalyticsSummary:
    summary, source = await analytics.summary()
    response.headers[DATA_SOURCE_HEADER] = source
    return summary


__all__ = ["router"]
