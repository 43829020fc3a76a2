"""
Heuristic intent extraction for Chinese travel queries.

Destination candidates come from an ordered list of (pattern, validator)
pairs; the first accepted candidate wins and later patterns are never
consulted.
"""
import logging
import re
from typing import Callable, List, Optional, Pattern, Tuple

from travel_advisor.models.place_models import ParsedIntent
from travel_advisor.utils.config import FALLBACK_CITY

GENERIC_KEYWORDS = "景点 旅游"
FOOD_KEYWORDS = "餐厅 美食"
COFFEE_KEYWORDS = "咖啡店"

MAX_CITY_LENGTH = 4

DEPARTURE_PATTERN = re.compile(r"从([^，,]+)出发")
TRIP_SUFFIXES = "玩|旅游|一日游|两日游|三日游"

# (markers, normalised keywords); first group containing a marker wins
KEYWORD_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("吃什么", "餐厅", "美食"), FOOD_KEYWORDS),
    (("玩什么", "景点", "旅游"), GENERIC_KEYWORDS),
    (("咖啡", "咖啡店"), COFFEE_KEYWORDS),
]

CityValidator = Callable[[str, str], bool]


def is_plausible_city(candidate: str, departure_city: str) -> bool:
    return (
        0 < len(candidate) <= MAX_CITY_LENGTH
        and candidate != departure_city
        and "出发" not in candidate
        and "从" not in candidate
    )


CITY_PATTERNS: List[Tuple[Pattern, CityValidator]] = [
    # 我想去上海玩 / 去杭州旅游 / 到成都出发
    (re.compile(r"(?:我想去|去|在|到|玩)([^玩天日出发，,]+?)(?:玩|旅游|一日游|两日游|三日游|出发)"), is_plausible_city),
    # 苏州一日游
    (re.compile(r"([^今明后出发，,]+?)(?:一日游|两日游|三日游)"), is_plausible_city),
]


class QueryParser:
    def __init__(self, default_city: str = FALLBACK_CITY):
        self.default_city = default_city
        self.logger = logging.getLogger(__name__)

    def parse(self, text: str, destination_override: Optional[str] = None,
              default_city: Optional[str] = None) -> ParsedIntent:
        """Extract (keywords, city) from a raw query. Never raises."""
        text = (text or "").strip()
        city = default_city or self.default_city or FALLBACK_CITY
        keywords = text

        if destination_override:
            city = destination_override
        else:
            # Patterns run on the raw text; the departure capture only vetoes candidates
            departure_city = self.extract_departure(text)
            extracted = self.extract_city(text, departure_city)
            if extracted:
                city = extracted
                keywords = self._remove_city_phrase(text, extracted)

        keywords = self.normalize_keywords(keywords)
        self.logger.debug(f"Parsed query '{text}' -> city={city}, keywords={keywords}")
        return ParsedIntent(keywords=keywords, city=city)

    @staticmethod
    def extract_departure(text: str) -> str:
        match = DEPARTURE_PATTERN.search(text)
        return match.group(1).strip() if match else ""

    @staticmethod
    def extract_city(text: str, departure_city: str = "") -> Optional[str]:
        for pattern, validator in CITY_PATTERNS:
            match = pattern.search(text)
            if not match or not match.group(1):
                continue
            candidate = match.group(1).strip()
            if validator(candidate, departure_city):
                return candidate
        return None

    @staticmethod
    def normalize_keywords(keywords: str) -> str:
        keywords = DEPARTURE_PATTERN.sub("", keywords).strip()
        keywords = keywords.replace("我想去", "").strip()

        if len(keywords) < 2:
            keywords = GENERIC_KEYWORDS

        for markers, normalized in KEYWORD_RULES:
            if any(marker in keywords for marker in markers):
                return normalized
        return keywords

    @staticmethod
    def _remove_city_phrase(text: str, city: str) -> str:
        phrase = re.compile(f"(?:我想去|去|在|到|玩)?{re.escape(city)}(?:{TRIP_SUFFIXES})?")
        return phrase.sub("", text, count=1).strip()
