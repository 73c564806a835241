"""
Medical history API endpoints.

Rows owned by another user answer exactly like missing rows (404).
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status

from .deps import get_record_store, to_http_exception
from ..core.errors import FitTrackError
from ..models import MedicalCondition, MedicalConditionCreate
from ..storage import RecordStore
from ..utils.auth import get_current_user_id

router = APIRouter(prefix="/medical", tags=["medical"])


@router.get("/history", response_model=List[MedicalCondition])
async def list_history(
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        conditions = await store.list("medical", user_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e
    return sorted(conditions, key=lambda c: c.diagnosis_date, reverse=True)


@router.post("/history", response_model=MedicalCondition, status_code=status.HTTP_201_CREATED)
async def add_condition(
    condition: MedicalConditionCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        return await store.insert("medical", user_id, condition)
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.put("/history/{condition_id}", response_model=MedicalCondition)
async def update_condition(
    condition_id: str,
    condition: MedicalConditionCreate,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    """Replace the fields of one condition."""
    try:
        return await store.update("medical", user_id, condition_id, condition.model_dump())
    except FitTrackError as e:
        raise to_http_exception(e) from e


@router.delete("/history/{condition_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_condition(
    condition_id: str,
    user_id: str = Depends(get_current_user_id),
    store: RecordStore = Depends(get_record_store),
):
    try:
        await store.delete("medical", user_id, condition_id)
    except FitTrackError as e:
        raise to_http_exception(e) from e
    return Response(status_code=status.HTTP_204_NO_CONTENT)
