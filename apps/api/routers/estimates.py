"""
Estimate API Endpoints

Free-text helpers for the log forms: food text -> calorie range and macros,
movement text -> duration and burn range, craving text -> alternatives.

Nothing is stored here; the client shows the estimate, the user adjusts it
and then posts the event. Manual entry remains the fallback when the
estimator is unavailable (503).
"""
import logging

from fastapi import APIRouter, Depends

from core.auth import get_current_user_id
from core.dependencies import get_text_estimator
from core.exceptions import ServiceUnavailableError, ValidationError
from schemas import (
    CravingSuggestionRequest,
    CravingSuggestionResponse,
    FoodEstimateRequest,
    FoodEstimateResponse,
    MovementEstimateRequest,
    MovementEstimateResponse,
)
from services.text_estimator import EstimationError, TextEstimator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1/estimate", tags=["estimates"])


def _require_text(text: str) -> str:
    text = (text or "").strip()
    if not text:
        raise ValidationError("text is required", field="text")
    return text


@router.post("/food", response_model=FoodEstimateResponse)
def estimate_food(
    payload: FoodEstimateRequest,
    user_id: str = Depends(get_current_user_id),
    estimator: TextEstimator = Depends(get_text_estimator),
):
    text = _require_text(payload.text)
    try:
        estimate = estimator.estimate_food(
            text,
            meal_tag=payload.meal_tag.value if payload.meal_tag else None,
            is_restaurant=payload.is_restaurant,
            unsure_portions=payload.unsure_portions,
        )
    except EstimationError as e:
        logger.warning(f"Food estimate failed for {user_id}: {e}")
        raise ServiceUnavailableError(f"Food estimation unavailable: {e}")
    return estimate.to_dict()


@router.post("/movement", response_model=MovementEstimateResponse)
def estimate_movement(
    payload: MovementEstimateRequest,
    user_id: str = Depends(get_current_user_id),
    estimator: TextEstimator = Depends(get_text_estimator),
):
    text = _require_text(payload.text)
    try:
        estimate = estimator.estimate_movement(
            text, intensity=payload.intensity.value if payload.intensity else None,
        )
    except EstimationError as e:
        logger.warning(f"Movement estimate failed for {user_id}: {e}")
        raise ServiceUnavailableError(f"Movement estimation unavailable: {e}")
    return estimate.to_dict()


@router.post("/craving", response_model=CravingSuggestionResponse)
def suggest_for_craving(
    payload: CravingSuggestionRequest,
    user_id: str = Depends(get_current_user_id),
    estimator: TextEstimator = Depends(get_text_estimator),
):
    text = _require_text(payload.text)
    try:
        suggestion = estimator.suggest_for_craving(
            text, intensity=payload.intensity, category=payload.category,
        )
    except EstimationError as e:
        logger.warning(f"Craving suggestion failed for {user_id}: {e}")
        raise ServiceUnavailableError(f"Craving suggestions unavailable: {e}")
    return suggestion.to_dict()
