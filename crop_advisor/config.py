import os
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# ============================================================================#
# ENVIRONMENT / SERVICES
# ============================================================================#
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_KEY = os.getenv("SUPABASE_KEY")
OPENWEATHER_API_KEY = os.getenv("OPENWEATHER_API_KEY")
OPENROUTER_API_KEY = os.getenv("OPENROUTER_API_KEY")  # Vision model for crop photos

OPENWEATHER_API_URL = os.getenv("OPENWEATHER_API_URL", "https://api.openweathermap.org/data/2.5/weather")
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
IMAGE_ANALYSIS_MODEL = os.getenv("IMAGE_ANALYSIS_MODEL", "google/gemini-2.5-flash")

# Supabase tables
PREDICTIONS_TABLE = "crop_predictions"
CACHE_TABLE = "cache"

# Cache configuration
CACHE_TTL = 3600  # 1 hour
WEATHER_CACHE_TTL = 600  # 10 minutes
LAST_PREDICTION_TTL = 7 * 24 * 3600  # 7 days
MAX_CACHE_SIZE = 1000  # Maximum in-memory cache entries

# History
HISTORY_PAGE_SIZE = 50
HISTORY_MAX_PAGE_SIZE = 100

# Image analysis
MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB in bytes
BASE64_OVERHEAD = 1.37

# Outbound timeouts (seconds)
WEATHER_TIMEOUT = 15.0
WEATHER_CONNECT_TIMEOUT = 5.0
IMAGE_ANALYSIS_TIMEOUT = 60.0
IMAGE_ANALYSIS_CONNECT_TIMEOUT = 15.0

# Rate limiting per client (slowapi syntax)
PREDICT_RATE_LIMIT = os.getenv("PREDICT_RATE_LIMIT", "60/minute")
WEATHER_RATE_LIMIT = os.getenv("WEATHER_RATE_LIMIT", "30/minute")
IMAGE_RATE_LIMIT = os.getenv("IMAGE_RATE_LIMIT", "10/minute")
