"""
Owner dashboard statistics.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from servelink.database import get_db
from servelink.dependencies import get_owned_restaurant
from servelink.models import Restaurant
from servelink.schemas import AnalyticsResponse
from servelink.services.analytics import fetch_dashboard

router = APIRouter(prefix="/api/analytics", tags=["Analytics"])


@router.get("", response_model=AnalyticsResponse)
async def dashboard_stats(
    restaurant: Restaurant = Depends(get_owned_restaurant),
    db: AsyncSession = Depends(get_db),
) -> AnalyticsResponse:
    """Totals, revenue by day and best sellers for the owner's restaurant."""
    return await fetch_dashboard(db, restaurant.id)
