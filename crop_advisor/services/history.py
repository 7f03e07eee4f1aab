"""
Prediction History
Append-only per-user log of predictions, stored in Supabase (crop_predictions)
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from crop_advisor.config import PREDICTIONS_TABLE
from crop_advisor.errors import PersistenceError
from crop_advisor.models import HistoryRecord, PredictionResult, SoilSample, WeatherReading
from crop_advisor.services.base import HistoryStore

logger = logging.getLogger(__name__)


def build_history_row(
    user_id: str,
    soil: SoilSample,
    weather: WeatherReading,
    result: PredictionResult,
    location: Optional[str] = None,
) -> Dict[str, Any]:
    return {
        "user_id": user_id,
        "nitrogen": soil.nitrogen,
        "phosphorus": soil.phosphorus,
        "potassium": soil.potassium,
        "ph_value": soil.ph,
        "rainfall": soil.rainfall,
        "temperature": weather.temperature,
        "humidity": weather.humidity,
        "predicted_crop": result.crop,
        "confidence": result.confidence,
        "alternative_crops": result.alternative_crops,
        "fertilizer": [advice.model_dump(mode="json", by_alias=True) for advice in result.fertilizer],
        "location": location,
    }


class SupabaseHistoryStore(HistoryStore):
    def __init__(self, client):
        self.client = client

    async def append(self, user_id, soil, weather, result, location=None) -> HistoryRecord:
        if not self.client:
            raise PersistenceError("Database service not available")

        row = build_history_row(user_id, soil, weather, result, location)
        try:
            response = self.client.table(PREDICTIONS_TABLE).insert(row).execute()
        except Exception as e:
            logger.error(f"Error saving prediction for user {user_id[:8]}...: {e}")
            raise PersistenceError(f"Failed to save prediction: {e}") from e

        logger.info(f"✓ Saved prediction {result.crop} for user {user_id[:8]}...")
        if response.data:
            return HistoryRecord.model_validate(response.data[0])
        return HistoryRecord.model_validate(row)

    async def list(self, user_id: str, limit: int) -> List[HistoryRecord]:
        if not self.client:
            raise PersistenceError("Database service not available")

        try:
            response = self.client.table(PREDICTIONS_TABLE)\
                .select('*')\
                .eq('user_id', user_id)\
                .order('created_at', desc=True)\
                .limit(limit)\
                .execute()
        except Exception as e:
            logger.error(f"Error loading history for user {user_id[:8]}...: {e}")
            raise PersistenceError(f"Failed to load history: {e}") from e

        return [HistoryRecord.model_validate(row) for row in response.data or []]


class InMemoryHistoryStore(HistoryStore):
    """Used when Supabase is not configured (local development, tests)"""

    def __init__(self):
        self._records: Dict[str, List[HistoryRecord]] = {}
        self._next_id = 1

    async def append(self, user_id, soil, weather, result, location=None) -> HistoryRecord:
        row = build_history_row(user_id, soil, weather, result, location)
        record = HistoryRecord(id=self._next_id, created_at=datetime.now(timezone.utc), **row)
        self._next_id += 1
        self._records.setdefault(user_id, []).append(record)
        return record

    async def list(self, user_id: str, limit: int) -> List[HistoryRecord]:
        records = self._records.get(user_id, [])
        # Same-timestamp rows keep newest-first by id
        ordered = sorted(records, key=lambda r: (r.created_at, r.id), reverse=True)
        return ordered[:limit]
