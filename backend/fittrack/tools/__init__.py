"""Tools module - external lookups used by the API."""

from .news_search import HealthNewsClient, HEALTH_NEWS_QUERY

__all__ = ['HealthNewsClient', 'HEALTH_NEWS_QUERY']
