from pydantic import BaseModel, Field
from typing import List, Optional

from travel_advisor.models.place_models import PlaceItem


class CurrentWeather(BaseModel):
    city: str
    adcode: Optional[str] = None
    weather: str  # condition, e.g. 晴
    temperature: str  # °C
    winddirection: Optional[str] = None
    windpower: Optional[str] = None
    humidity: Optional[str] = None  # percent
    reporttime: Optional[str] = None


class ForecastDay(BaseModel):
    date: str
    week: Optional[str] = None
    dayweather: str
    nightweather: str
    daytemp: str
    nighttemp: str
    daywind: Optional[str] = None
    nightwind: Optional[str] = None
    daypower: Optional[str] = None
    nightpower: Optional[str] = None


class RecommendationResult(BaseModel):
    summary: str
    items: List[PlaceItem] = Field(default_factory=list)
    is_mock: bool = False
    weather: Optional[CurrentWeather] = None
    forecast: Optional[List[ForecastDay]] = None


class ValidationResponse(BaseModel):
    valid: bool
    errors: List[str] = Field(default_factory=list)


class ConfigStatusResponse(BaseModel):
    mode: str
    config_source: str = "environment"
    missing_key: Optional[str] = None
