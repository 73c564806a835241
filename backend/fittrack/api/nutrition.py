"""
Nutrition API endpoints - LLM food analysis and nutrition logs.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from .deps import get_nutrition_analyzer, get_record_store, to_http_exception
from .tracking import parse_range
from ..core.errors import FitTrackError
from ..core.nutrition import NutritionAnalyzer
from ..models import (
    NutritionAnalysisRequest, NutritionAnalysisResponse, NutritionLog, NutritionLogCreate,
)
from ..storage import RecordStore
from ..utils.auth import get_current_user_id

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/nutrition", tags=["nutrition"])

# Log field -> NutritionAnalysis field
MACRO_FIELDS = {
    "calories": "calories",
    "protein": "protein",
    "carbs": "carbohydrates",
    "fat": "fats",
    "fiber": "fiber",
}


@router.post("/analyze-text", response_model=NutritionAnalysisResponse)
async def analyze_text(
    request: NutritionAnalysisRequest,
    user_id: str = Depends(get_current_user_id),
    analyzer: NutritionAnalyzer = Depends(get_nutrition_analyzer),
):
    """
    Analyze a free-text food description with the LLM.

    A reply without usable JSON is a 502; no partial analysis is returned.
    """
    try:
        analysis = await analyzer.analyze_text(request.food_text)
    except FitTrackError as e:
        logger.error(
            f"Nutrition analysis failed: {e}",
            extra={"extra_fields": {"user_id": user_id, "error_type": type(e).__name__}}
        )
        raise to_http_exception(e) from e

    return NutritionAnalysisResponse(success=True, analysis=analysis)


@router.post("/logs", response_model=NutritionLog, status_code=status.HTTP_201_CREATED)
async def add_log(
    entry: NutritionLogCreate,
    estimate: bool = Query(False, description="Fill missing macros with an LLM estimate"),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
    analyzer: NutritionAnalyzer = Depends(get_nutrition_analyzer),
):
    """
    Store a nutrition log.

    With estimate=true, macros left empty by the client are filled from an
    LLM analysis of the food items; values the client sent are kept.
    """
    data = entry.model_dump()
    estimated = False

    try:
        missing = [field for field in MACRO_FIELDS if data.get(field) is None]
        if estimate and missing:
            analysis = await analyzer.analyze_text(", ".join(entry.food_items))
            for field in missing:
                data[field] = getattr(analysis, MACRO_FIELDS[field])
            estimated = True

        for field in MACRO_FIELDS:
            if data.get(field) is None:
                data[field] = 0
        data["estimated"] = estimated

        return await store.insert("nutrition", user_id, data)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.get("/logs", response_model=List[NutritionLog])
async def list_logs(
    start: Optional[str] = Query(None),
    end: Optional[str] = Query(None),
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        start_date, end_date = parse_range(start, end)
        return await store.list("nutrition", user_id, start_date, end_date)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.delete("/logs/{log_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_log(
    log_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        await store.delete("nutrition", user_id, log_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
