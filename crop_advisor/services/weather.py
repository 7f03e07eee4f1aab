"""
Weather Service
Current conditions from OpenWeather by GPS coordinates
"""

import logging
from typing import Any, Dict, Optional

import httpx

from crop_advisor.config import (
    OPENWEATHER_API_KEY,
    OPENWEATHER_API_URL,
    WEATHER_CACHE_TTL,
    WEATHER_CONNECT_TIMEOUT,
    WEATHER_TIMEOUT,
)
from crop_advisor.errors import UpstreamError
from crop_advisor.models import Location, WeatherReport
from crop_advisor.services.base import WeatherProvider
from crop_advisor.services.cache import get_from_cache, set_to_cache
from crop_advisor.validation import parse_model

logger = logging.getLogger(__name__)

# Timeout configuration
TIMEOUT = httpx.Timeout(WEATHER_TIMEOUT, connect=WEATHER_CONNECT_TIMEOUT)


def parse_weather_payload(data: Dict[str, Any]) -> WeatherReport:
    """Map an OpenWeather response body onto WeatherReport"""
    try:
        return WeatherReport(
            temperature=round(float(data["main"]["temp"]), 1),
            humidity=float(data["main"]["humidity"]),
            description=data["weather"][0]["description"],
            location=data.get("name") or "",
        )
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"Malformed weather payload: {e}")
        raise UpstreamError("Malformed weather response") from e


class OpenWeatherProvider(WeatherProvider):
    def __init__(
        self,
        api_key: Optional[str] = OPENWEATHER_API_KEY,
        base_url: str = OPENWEATHER_API_URL,
        cache_ttl: int = WEATHER_CACHE_TTL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url
        self.cache_ttl = cache_ttl
        self.transport = transport

    async def get_weather(self, lat: float, lon: float) -> WeatherReport:
        location = parse_model(Location, {"lat": lat, "lon": lon})

        if not self.api_key:
            logger.error("OpenWeather API key not configured")
            raise UpstreamError("Weather service not configured")

        cache_key = f"{location.lat:.2f},{location.lon:.2f}"
        if self.cache_ttl:
            cached = await get_from_cache("weather", cache_key)
            if cached:
                logger.info(f"✓ Using cached weather for ({cache_key})")
                return WeatherReport.model_validate(cached)

        params = {
            "lat": location.lat,
            "lon": location.lon,
            "appid": self.api_key,
            "units": "metric",
        }

        logger.info(f"Fetching weather for coordinates: {location.lat}, {location.lon}")

        try:
            async with httpx.AsyncClient(timeout=TIMEOUT, transport=self.transport) as client:
                response = await client.get(self.base_url, params=params)
        except httpx.TimeoutException as e:
            logger.error(f"Weather API timeout for ({location.lat}, {location.lon})")
            raise UpstreamError("Weather service timed out") from e
        except httpx.HTTPError as e:
            logger.error(f"Weather API transport error: {e}")
            raise UpstreamError("Weather service unreachable") from e

        if response.status_code != 200:
            logger.error(f"Weather API error: {response.status_code} - {response.text}")
            raise UpstreamError(f"Weather API error: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError("Malformed weather response") from e

        report = parse_weather_payload(data)
        logger.info(f"Weather data fetched successfully: {report.model_dump()}")

        if self.cache_ttl:
            await set_to_cache("weather", cache_key, report.model_dump(), ttl=self.cache_ttl)
        return report
