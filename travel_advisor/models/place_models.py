from pydantic import BaseModel
from typing import Optional, Union


class ParsedIntent(BaseModel):
    keywords: str
    city: str


class PlaceItem(BaseModel):
    name: str
    address: Optional[str] = None
    location: Optional[str] = None  # "lng,lat" as returned by AMap
    city: Optional[str] = None
    distance: Optional[Union[int, float]] = None  # metres
    tel: Optional[str] = None
    image: Optional[str] = None


class GeocodeResult(BaseModel):
    location: str  # "lng,lat"
    formatted_address: Optional[str] = None
