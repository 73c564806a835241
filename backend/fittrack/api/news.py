"""
Health news API endpoint - thin GNews proxy.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from .deps import get_news_client, to_http_exception
from ..core.errors import FitTrackError
from ..models import NewsArticle
from ..tools import HealthNewsClient
from ..utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/news", tags=["news"])


@router.get("/health", response_model=List[NewsArticle])
async def health_news(
    user_id: str = Depends(get_current_user_id),
    news: Optional[HealthNewsClient] = Depends(get_news_client),
):
    """Latest medical and health headlines."""
    if news is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="News API key not configured"
        )

    try:
        return await news.search()
    except FitTrackError as e:
        logger.error(f"Error fetching health news: {e}")
        raise to_http_exception(e) from e
