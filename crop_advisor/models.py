from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

Severity = Literal["red", "yellow", "green"]

# Request-side models reject strings, booleans, NaN and infinity for numbers
STRICT_INPUT = ConfigDict(strict=True, frozen=True, allow_inf_nan=False)


class SoilSample(BaseModel):
    """Soil measurements entered by the farmer"""
    model_config = STRICT_INPUT

    nitrogen: float = Field(..., ge=0, le=1000, description="Nitrogen (N)")
    phosphorus: float = Field(..., ge=0, le=1000, description="Phosphorus (P)")
    potassium: float = Field(..., ge=0, le=1000, description="Potassium (K)")
    ph: float = Field(..., ge=0, le=14, description="Soil pH")
    rainfall: float = Field(..., ge=0, le=1000, description="Rainfall in mm")


class WeatherReading(BaseModel):
    model_config = STRICT_INPUT

    temperature: float = Field(..., ge=-50, le=60, description="Air temperature in °C")
    humidity: float = Field(..., ge=0, le=100, description="Relative humidity in %")


class WeatherReport(WeatherReading):
    """Weather lookup result, as returned to clients"""
    description: str = ""
    location: str = ""


class Location(BaseModel):
    model_config = STRICT_INPUT

    lat: float = Field(..., ge=-90, le=90)
    lon: float = Field(..., ge=-180, le=180)


class PredictionInput(SoilSample, WeatherReading):
    """All seven scorer inputs in one flat object"""

    @property
    def soil(self) -> SoilSample:
        return SoilSample(
            nitrogen=self.nitrogen,
            phosphorus=self.phosphorus,
            potassium=self.potassium,
            ph=self.ph,
            rainfall=self.rainfall,
        )

    @property
    def weather(self) -> WeatherReading:
        return WeatherReading(temperature=self.temperature, humidity=self.humidity)


class CropCandidate(BaseModel):
    name: str
    score: int = Field(..., ge=0, le=7)


class NutrientAdvice(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nutrient: str
    status: str
    recommendation: str
    severity: Severity = Field(..., alias="color")


class PredictionResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    crop: str
    confidence: float = Field(..., ge=0.0, le=1.0)
    alternative_crops: List[str] = Field(..., alias="alternativeCrops", min_length=2, max_length=2)
    fertilizer: List[NutrientAdvice] = Field(default_factory=list)

    def to_response(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Recommendation(PredictionResult):
    """Prediction plus the inputs it was computed from"""
    weather: WeatherReport
    soil: SoilSample
    timestamp: datetime
    saved: bool = False
    cached: bool = False


class HistoryRecord(BaseModel):
    """Row of the crop_predictions table"""
    id: Optional[Any] = None
    user_id: str
    nitrogen: float
    phosphorus: float
    potassium: float
    ph_value: float
    rainfall: float
    temperature: float
    humidity: float
    predicted_crop: str
    confidence: Optional[float] = None
    alternative_crops: List[str] = Field(default_factory=list)
    fertilizer: List[Dict[str, Any]] = Field(default_factory=list)
    location: Optional[str] = None
    created_at: Optional[datetime] = None


class ImageAnalysisRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_base64: str = Field(..., alias="imageBase64")
