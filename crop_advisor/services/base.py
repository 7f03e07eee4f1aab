"""
Interfaces for the external collaborators the prediction service depends on
"""
from abc import ABC, abstractmethod
from typing import List, Optional

from crop_advisor.models import (
    HistoryRecord,
    PredictionResult,
    SoilSample,
    WeatherReading,
    WeatherReport,
)


class WeatherProvider(ABC):
    @abstractmethod
    async def get_weather(self, lat: float, lon: float) -> WeatherReport:
        """
        Current weather at the given coordinates.
        Raises UpstreamError when the service is unreachable or the payload is malformed.
        """
        pass


class HistoryStore(ABC):
    @abstractmethod
    async def append(
        self,
        user_id: str,
        soil: SoilSample,
        weather: WeatherReading,
        result: PredictionResult,
        location: Optional[str] = None,
    ) -> HistoryRecord:
        """Append one prediction to the user's history. Raises PersistenceError."""
        pass

    @abstractmethod
    async def list(self, user_id: str, limit: int) -> List[HistoryRecord]:
        """Newest first. Raises PersistenceError."""
        pass
