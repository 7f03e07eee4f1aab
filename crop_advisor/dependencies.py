import logging
from typing import Optional
from fastapi import Header

from crop_advisor.services.auth import resolve_user_id
from crop_advisor.services.history import InMemoryHistoryStore, SupabaseHistoryStore
from crop_advisor.services.image_analysis import CropImageAnalyzer
from crop_advisor.services.prediction import PredictionService
from crop_advisor.services.services import supabase_client, vision_client
from crop_advisor.services.weather import OpenWeatherProvider

logger = logging.getLogger(__name__)

weather_provider = OpenWeatherProvider()

if supabase_client:
    history_store = SupabaseHistoryStore(supabase_client)
else:
    logger.warning("Supabase not configured - prediction history kept in memory")
    history_store = InMemoryHistoryStore()

prediction_service = PredictionService(weather_provider, history_store)
image_analyzer = CropImageAnalyzer(vision_client)


def get_prediction_service() -> PredictionService:
    return prediction_service


def get_weather_provider() -> OpenWeatherProvider:
    return weather_provider


def get_image_analyzer() -> CropImageAnalyzer:
    return image_analyzer


async def get_current_user_id(authorization: Optional[str] = Header(None)) -> Optional[str]:
    return await resolve_user_id(supabase_client, authorization)
