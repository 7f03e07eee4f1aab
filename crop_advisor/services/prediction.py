"""
Prediction Service
Validates farmer input, obtains weather, runs the crop scorer and fertilizer
advisor, and records the outcome in the user's history.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional

from crop_advisor.errors import PersistenceError, UpstreamError, ValidationError
from crop_advisor.models import (
    HistoryRecord,
    Location,
    PredictionInput,
    PredictionResult,
    Recommendation,
    SoilSample,
    WeatherReading,
    WeatherReport,
)
from crop_advisor.services.base import HistoryStore, WeatherProvider
from crop_advisor.services.cache import get_last_prediction, save_last_prediction
from crop_advisor.services.crop_scorer import score_crops
from crop_advisor.services.fertilizer_advisor import advise_fertilizer
from crop_advisor.validation import parse_model

logger = logging.getLogger(__name__)

WEATHER_FIELDS = ("temperature", "humidity")


class PredictionService:
    def __init__(self, weather_provider: WeatherProvider, history_store: Optional[HistoryStore] = None):
        self.weather_provider = weather_provider
        self.history_store = history_store

    def evaluate(self, soil: SoilSample, weather: WeatherReading) -> PredictionResult:
        """Pure composition of the crop scorer and the fertilizer advisor"""
        data = PredictionInput(
            nitrogen=soil.nitrogen,
            phosphorus=soil.phosphorus,
            potassium=soil.potassium,
            ph=soil.ph,
            rainfall=soil.rainfall,
            temperature=weather.temperature,
            humidity=weather.humidity,
        )
        crop, confidence, alternatives = score_crops(data)
        return PredictionResult(
            crop=crop,
            confidence=confidence,
            alternative_crops=alternatives,
            fertilizer=advise_fertilizer(data),
        )

    async def predict_crop(self, payload: Any) -> PredictionResult:
        """Score a request that already carries all seven inputs"""
        data = parse_model(PredictionInput, payload)
        logger.info(f"Received prediction request: {data.model_dump()}")
        return self.evaluate(data.soil, data.weather)

    async def recommend(self, payload: Any, user_id: Optional[str] = None) -> Recommendation:
        """
        Full form-submit flow

        The payload carries the soil fields plus either an inline weather
        reading (temperature, humidity) or a location {lat, lon} to look
        weather up for. Everything is validated before any network call.
        """
        if not isinstance(payload, dict):
            raise ValidationError(details="Request body must be a JSON object")

        soil = parse_model(SoilSample, payload)

        if any(field in payload for field in WEATHER_FIELDS):
            weather = parse_model(
                WeatherReport,
                {field: payload[field] for field in WEATHER_FIELDS if field in payload},
            )
        elif "location" in payload:
            location = parse_model(Location, payload["location"])
            try:
                weather = await self.weather_provider.get_weather(location.lat, location.lon)
            except UpstreamError as e:
                return await self._fallback(user_id, e)
        else:
            raise ValidationError(details="Either a weather reading or a location is required")

        result = self.evaluate(soil, weather)
        saved = await self._save_history(user_id, soil, weather, result)

        recommendation = Recommendation(
            **result.model_dump(),
            weather=weather,
            soil=soil,
            timestamp=datetime.now(timezone.utc),
            saved=saved,
        )

        if user_id:
            await save_last_prediction(user_id, recommendation.to_response())
        return recommendation

    async def history(self, user_id: str, limit: int) -> List[HistoryRecord]:
        if not self.history_store:
            raise PersistenceError()
        return await self.history_store.list(user_id, limit)

    async def _save_history(
        self,
        user_id: Optional[str],
        soil: SoilSample,
        weather: WeatherReport,
        result: PredictionResult,
    ) -> bool:
        if not user_id or not self.history_store:
            return False
        try:
            await self.history_store.append(user_id, soil, weather, result, location=weather.location or None)
            return True
        except PersistenceError as e:
            # Never blocks delivery of the result
            logger.error(f"Error saving prediction: {e.message}")
            return False

    async def _fallback(self, user_id: Optional[str], error: UpstreamError) -> Recommendation:
        cached = await get_last_prediction(user_id) if user_id else None
        if not cached:
            raise error

        logger.warning(f"Weather unavailable ({error.message}), using last prediction for user {user_id[:8]}...")
        recommendation = Recommendation.model_validate_json(json.dumps(cached))
        return recommendation.model_copy(update={"cached": True})
