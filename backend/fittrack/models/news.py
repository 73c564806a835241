"""
News Models - Health news articles proxied from GNews.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class NewsArticle(BaseModel):
    """One article, trimmed to the fields the client shows."""
    model_config = ConfigDict(populate_by_name=True)

    title: str = ""
    description: Optional[str] = None
    url: str = ""
    image: Optional[str] = None
    published_at: Optional[str] = Field(None, alias="publishedAt")
    source: Optional[str] = None
