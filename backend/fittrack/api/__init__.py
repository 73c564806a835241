"""API module."""

from .auth import router as auth_router
from .user import router as user_router
from .tracking import router as tracking_router
from .nutrition import router as nutrition_router
from .medical import router as medical_router
from .assistant import router as assistant_router
from .dashboard import router as dashboard_router
from .news import router as news_router

__all__ = [
    'auth_router', 'user_router', 'tracking_router', 'nutrition_router',
    'medical_router', 'assistant_router', 'dashboard_router', 'news_router',
]
