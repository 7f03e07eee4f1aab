import logging
from fastapi import APIRouter

from crop_advisor.config import OPENWEATHER_API_KEY
from crop_advisor.services.cache import get_cache_stats
from crop_advisor.services.crop_scorer import CANDIDATE_CROPS
from crop_advisor.services.services import supabase_client, vision_client

logger = logging.getLogger(__name__)

router = APIRouter()

VERSION = "1.0.0"


@router.get("/")
async def root():
    return {
        "status": "online",
        "service": "Crop Advisor API",
        "version": VERSION,
        "features": [
            "Rule-based Crop Recommendation",
            "Fertilizer Advice",
            "Live Weather Lookup",
            "Crop Image Analysis",
            "Prediction History"
        ],
        "crops": list(CANDIDATE_CROPS)
    }


@router.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "version": VERSION,
        "cache_stats": await get_cache_stats(),
        "services": {
            "supabase": bool(supabase_client),
            "openweather": bool(OPENWEATHER_API_KEY),
            "image_analysis": bool(vision_client)
        }
    }
