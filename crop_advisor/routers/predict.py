import logging
from typing import Any, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request

from crop_advisor.config import (
    HISTORY_MAX_PAGE_SIZE,
    HISTORY_PAGE_SIZE,
    IMAGE_RATE_LIMIT,
    PREDICT_RATE_LIMIT,
    WEATHER_RATE_LIMIT,
)
from crop_advisor.dependencies import (
    get_current_user_id,
    get_image_analyzer,
    get_prediction_service,
    get_weather_provider,
)
from crop_advisor.errors import ValidationError
from crop_advisor.utils.rate_limiter import limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


async def read_json(request: Request, message: Optional[str] = None) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise ValidationError(message, details="Request body is not valid JSON") from e


@router.post("/predict-crop")
@limiter.limit(PREDICT_RATE_LIMIT)
async def predict_crop(request: Request, service=Depends(get_prediction_service)):
    """Score all seven inputs supplied by the caller"""
    payload = await read_json(request)
    result = await service.predict_crop(payload)
    return result.to_response()


@router.post("/recommend")
@limiter.limit(PREDICT_RATE_LIMIT)
async def recommend(
    request: Request,
    service=Depends(get_prediction_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    """
    Soil data + location (or weather) -> crop, fertilizer advice, weather used.
    Signed-in users get the prediction saved to their history.
    """
    payload = await read_json(request)
    recommendation = await service.recommend(payload, user_id=user_id)
    return recommendation.to_response()


@router.post("/weather")
@limiter.limit(WEATHER_RATE_LIMIT)
async def weather(request: Request, provider=Depends(get_weather_provider)):
    payload = await read_json(request)
    if not isinstance(payload, dict):
        raise ValidationError()
    report = await provider.get_weather(payload.get("lat"), payload.get("lon"))
    return report.model_dump()


@router.post("/analyze-crop-image")
@limiter.limit(IMAGE_RATE_LIMIT)
async def analyze_crop_image(request: Request, analyzer=Depends(get_image_analyzer)):
    payload = await read_json(request, message="Invalid image data")
    analysis = await analyzer.analyze(payload)
    return {"analysis": analysis}


@router.get("/history")
async def history(
    request: Request,
    limit: int = Query(HISTORY_PAGE_SIZE, ge=1, le=HISTORY_MAX_PAGE_SIZE),
    service=Depends(get_prediction_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    if not user_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    records = await service.history(user_id, limit)
    return [record.model_dump(mode="json") for record in records]
