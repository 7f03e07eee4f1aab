import logging
import httpx
from openai import AsyncOpenAI
from supabase import create_client, Client

from crop_advisor.config import (
    SUPABASE_URL,
    SUPABASE_KEY,
    OPENROUTER_API_KEY,
    OPENROUTER_BASE_URL,
    IMAGE_ANALYSIS_TIMEOUT,
    IMAGE_ANALYSIS_CONNECT_TIMEOUT,
)

logger = logging.getLogger(__name__)

# Initialize Supabase (auth, prediction history, cache table)
supabase_client: Client = None
if SUPABASE_URL and SUPABASE_KEY:
    try:
        supabase_client = create_client(SUPABASE_URL, SUPABASE_KEY)
        logger.info("Supabase initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize Supabase: {e}")

# Initialize OpenRouter client (vision model for crop photos)
vision_client = None
if OPENROUTER_API_KEY:
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(
            connect=IMAGE_ANALYSIS_CONNECT_TIMEOUT,
            read=IMAGE_ANALYSIS_TIMEOUT,
            write=IMAGE_ANALYSIS_TIMEOUT,
            pool=IMAGE_ANALYSIS_TIMEOUT
        )
    )
    vision_client = AsyncOpenAI(
        base_url=OPENROUTER_BASE_URL,
        api_key=OPENROUTER_API_KEY,
        http_client=http_client,
    )
    logger.info(f"OpenRouter initialized with {IMAGE_ANALYSIS_TIMEOUT}s timeout")
