from pydantic import BaseModel, Field
from typing import Optional


class RecommendationRequest(BaseModel):
    query: str = Field(..., description="Free-text travel question, e.g. 我想去上海玩,从北京出发")
    destination: Optional[str] = Field(None, description="Explicit destination; always wins over inference")
    city: Optional[str] = Field(None, description="Fallback city hint when no destination is given")
    departure: Optional[str] = None
    travel_date: Optional[str] = Field(None, description="YYYY-MM-DD")
    location: Optional[str] = Field(None, description="Caller's current location")

    model_config = {"frozen": True}
