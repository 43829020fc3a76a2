import logging
from typing import Any, Dict, List, Optional, Sequence

from travel_advisor.models.place_models import GeocodeResult, PlaceItem
from travel_advisor.services.amap_client import AmapClient, is_success, text_field
from travel_advisor.services.query_parser import GENERIC_KEYWORDS
from travel_advisor.utils.config import FALLBACK_CITY
from travel_advisor.utils.errors import RemoteError, TransportError

SCENIC_KEYWORDS = "景点|旅游景点|名胜古迹|景区|公园|博物馆|纪念馆"
BROADENING_SUFFIX = "|景点|旅游景点"
FALLBACK_KEYWORD = "景点"

MIN_PRIMARY_RESULTS = 5
MAX_PLACES = 50
PAGE_SIZE = 50


def augment_keywords(keywords: Optional[str]) -> str:
    """Broaden recall towards tourist spots without dropping the specific intent"""
    if not keywords or keywords == GENERIC_KEYWORDS:
        return SCENIC_KEYWORDS
    if "景点" not in keywords and "旅游" not in keywords:
        return f"{keywords}{BROADENING_SUFFIX}"
    return keywords


def merge_places(primary: Sequence[PlaceItem], fallback: Sequence[PlaceItem],
                 limit: int = MAX_PLACES) -> List[PlaceItem]:
    """Primary results first, then unseen fallback results; unique by name, capped"""
    seen_names = set()
    merged: List[PlaceItem] = []
    for place in list(primary) + list(fallback):
        if place.name in seen_names:
            continue
        seen_names.add(place.name)
        merged.append(place)
    return merged[:limit]


class AmapPlacesService:
    def __init__(self, client: AmapClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    async def search(self, keywords: str, city: Optional[str] = None) -> List[PlaceItem]:
        """Augmented search with a broad second pass when the first is thin.

        Errors from either pass propagate; the caller owns the fallback policy.
        """
        search_keywords = augment_keywords(keywords)
        places = await self.search_poi(search_keywords, city)

        if len(places) < MIN_PRIMARY_RESULTS:
            self.logger.info(
                f"Only {len(places)} places for '{search_keywords}', retrying with '{FALLBACK_KEYWORD}'"
            )
            fallback = await self.search_poi(FALLBACK_KEYWORD, city)
            return merge_places(places, fallback)

        return merge_places(places, [])

    async def search_poi(self, keywords: str, city: Optional[str] = None) -> List[PlaceItem]:
        """Single AMap place/text call mapped to PlaceItem"""
        search_city = city or self.client.settings.DEFAULT_CITY or FALLBACK_CITY
        self.logger.info(f"Searching AMap POIs, keywords: {keywords}, city: {search_city}")

        try:
            data = await self.client.get("place/text", {
                "keywords": keywords,
                "city": search_city,
                "offset": PAGE_SIZE,
                "page": 1,
                "extensions": "all",
            })
        except TransportError as e:
            self.logger.error(f"AMap POI search failed: {e.message}, code: {e.code}")
            raise RemoteError(f"POI搜索失败: {e.message}", is_timeout=e.is_timeout) from e

        if not is_success(data):
            self.logger.error(
                "AMap POI search returned an error",
                extra={"status": data.get("status"), "info": data.get("info"), "infocode": data.get("infocode")}
            )
            raise RemoteError(f"高德API错误: {data.get('info') or '未知错误'}")

        raw_pois = data.get("pois") or []
        places = []
        for poi in raw_pois:
            place = self._transform_poi(poi, search_city)
            if place:
                places.append(place)

        self.logger.info(f"AMap returned {len(places)} POIs")
        return places

    async def geocode(self, address: str, city: Optional[str] = None) -> Optional[GeocodeResult]:
        """Resolve a free-text address to coordinates, scoped to a city.

        Raises ConfigError without a key; any other failure returns None.
        """
        search_city = city or self.client.settings.DEFAULT_CITY or FALLBACK_CITY
        try:
            data = await self.client.get("geocode/geo", {"address": address, "city": search_city})
        except TransportError as e:
            self.logger.warning(f"Geocoding failed for {address}: {e.message}, code: {e.code}")
            return None

        geocodes = data.get("geocodes") or []
        first = geocodes[0] if is_success(data) and geocodes and isinstance(geocodes[0], dict) else {}
        location = text_field(first.get("location"))
        if not location:
            self.logger.warning(f"No geocoding result for {address} in {search_city}")
            return None

        result = GeocodeResult(location=location, formatted_address=text_field(first.get("formatted_address")))
        self.logger.info(f"Geocoded {address}: {result.location}")
        return result

    def _transform_poi(self, poi: Dict[str, Any], city: str) -> Optional[PlaceItem]:
        """Transform an AMap POI record into a PlaceItem"""
        name = text_field(poi.get("name"))
        if not name:
            return None

        image = None
        photos = poi.get("photos") or []
        if photos and isinstance(photos[0], dict):
            image = text_field(photos[0].get("url"))

        return PlaceItem(
            name=name,
            address=text_field(poi.get("address")) or text_field(poi.get("business_area")),
            location=text_field(poi.get("location")),
            city=city,
            distance=self._parse_distance(poi.get("distance")),
            tel=text_field(poi.get("tel")),
            image=image,
        )

    @staticmethod
    def _parse_distance(value: Any):
        if value is None or value == "" or value == []:
            return None
        try:
            distance = float(value)
        except (TypeError, ValueError):
            return None
        return int(distance) if distance.is_integer() else distance
