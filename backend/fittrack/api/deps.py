"""
FastAPI dependencies - hand out the clients constructed in create_app().

Every client lives on app.state; tests replace them with
app.dependency_overrides or by passing their own instances to create_app().
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from ..config import Settings
from ..core.errors import (
    FitTrackError, InvalidArgument, NotFound, StorageError, UpstreamError,
    UpstreamFormatError, UpstreamTimeoutError, ValidationError,
)
from ..core.aggregator import DailySummaryService
from ..core.assistant import AssistantService
from ..core.dashboard import DashboardService
from ..core.nutrition import NutritionAnalyzer
from ..llm.base import LLMProvider
from ..storage import RecordStore, UserStorage
from ..tools import HealthNewsClient


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_record_store(request: Request) -> RecordStore:
    return request.app.state.record_store


def get_user_storage(request: Request) -> UserStorage:
    return request.app.state.user_storage


def get_llm_provider(request: Request) -> Optional[LLMProvider]:
    return request.app.state.llm_provider


def get_news_client(request: Request) -> Optional[HealthNewsClient]:
    return request.app.state.news_client


def get_summary_service(store: RecordStore = Depends(get_record_store)) -> DailySummaryService:
    return DailySummaryService(store)


def get_dashboard_service(store: RecordStore = Depends(get_record_store)) -> DashboardService:
    return DashboardService(store)


def get_nutrition_analyzer(
    llm_provider: Optional[LLMProvider] = Depends(get_llm_provider),
) -> NutritionAnalyzer:
    return NutritionAnalyzer(llm_provider)


def get_assistant_service(
    store: RecordStore = Depends(get_record_store),
    users: UserStorage = Depends(get_user_storage),
    llm_provider: Optional[LLMProvider] = Depends(get_llm_provider),
    settings: Settings = Depends(get_settings),
) -> AssistantService:
    return AssistantService(
        store,
        users,
        llm_provider,
        log_rows=settings.assistant_log_rows,
        history_messages=settings.assistant_history_messages,
        max_prompt_chars=settings.assistant_max_prompt_chars,
    )


# Domain error -> HTTP status. Subclasses come before their bases.
ERROR_STATUS = (
    (UpstreamTimeoutError, status.HTTP_504_GATEWAY_TIMEOUT),
    (UpstreamFormatError, status.HTTP_502_BAD_GATEWAY),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY),
    (NotFound, status.HTTP_404_NOT_FOUND),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (InvalidArgument, status.HTTP_400_BAD_REQUEST),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def to_http_exception(error: FitTrackError) -> HTTPException:
    """Translate a domain error into the HTTPException a router raises."""
    for error_class, status_code in ERROR_STATUS:
        if isinstance(error, error_class):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
