"""
Recommendation use case: query parsing, POI search, weather and the LLM
write-up, sequenced with per-stage graceful degradation.

Every stage runs at most once per request. Stage failures are absorbed by
attempt_or_default; the only user-visible hard failure is an empty POI list
in live mode. get_recommendations itself never raises.
"""
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Tuple, TypeVar

from travel_advisor.models.place_models import PlaceItem
from travel_advisor.models.request_models import RecommendationRequest
from travel_advisor.models.response_models import CurrentWeather, ForecastDay, RecommendationResult
from travel_advisor.prompts.system_prompts import NO_RESULTS_SUMMARY, TIMEOUT_NOTE, get_failure_summary
from travel_advisor.services.amap_client import AmapClient
from travel_advisor.services.amap_places_service import AmapPlacesService, merge_places
from travel_advisor.services.narrative_service import NarrativeService, build_context, default_summary
from travel_advisor.services.query_parser import QueryParser
from travel_advisor.services.weather_service import WeatherService
from travel_advisor.utils.config import FALLBACK_CITY, Settings
from travel_advisor.utils.errors import is_timeout_error
from travel_advisor.utils.http_client import HttpTransport

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceMode(str, Enum):
    LIVE = "live"
    MOCK = "mock"

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceMode":
        return cls.MOCK if settings.MOCK_MODE else cls.LIVE


async def attempt_or_default(stage: str, operation: Callable[[], Awaitable[T]],
                             fallback: Callable[[Exception], T]) -> T:
    """Run one stage; on any failure log it and return fallback(error)"""
    try:
        return await operation()
    except Exception as e:
        logger.warning(f"{stage} stage failed, degrading: {str(e)}")
        return fallback(e)


class RecommendationOrchestrator:
    def __init__(self, settings: Settings, mode: ServiceMode,
                 places_service: AmapPlacesService,
                 weather_service: WeatherService,
                 narrative_service: NarrativeService,
                 query_parser: Optional[QueryParser] = None):
        self.settings = settings
        self.mode = mode
        self.places_service = places_service
        self.weather_service = weather_service
        self.narrative_service = narrative_service
        self.query_parser = query_parser or QueryParser(default_city=settings.DEFAULT_CITY)
        self.logger = logging.getLogger(__name__)

    @property
    def is_mock(self) -> bool:
        return self.mode is ServiceMode.MOCK

    @property
    def can_search(self) -> bool:
        return not self.is_mock and bool(self.settings.AMAP_API_KEY)

    @property
    def can_narrate(self) -> bool:
        return not self.is_mock and bool(self.settings.LLM_API_KEY)

    async def get_recommendations(self, request: RecommendationRequest) -> RecommendationResult:
        try:
            return await self._recommend(request)
        except Exception as e:
            self.logger.exception("Unexpected error while building recommendations")
            return RecommendationResult(summary=get_failure_summary(str(e)), items=[], is_mock=False)

    async def _recommend(self, request: RecommendationRequest) -> RecommendationResult:
        target_city = request.destination or request.city or self.settings.DEFAULT_CITY or FALLBACK_CITY

        # An explicit destination overrides inference; a plain city hint is only a default
        intent = self.query_parser.parse(
            request.query,
            destination_override=request.destination,
            default_city=target_city
        )
        search_city = request.destination or intent.city or target_city
        self.logger.info(
            f"Recommendation request: city={search_city}, keywords={intent.keywords}",
            extra={"mode": self.mode.value}
        )

        items: List[PlaceItem] = []
        if self.can_search:
            items = await attempt_or_default(
                "places",
                lambda: self.places_service.search(intent.keywords, search_city),
                lambda _: []
            )
        items = merge_places(items, [])

        if not items and not self.is_mock:
            return RecommendationResult(summary=NO_RESULTS_SUMMARY, items=[], is_mock=False)

        weather: Optional[CurrentWeather] = None
        forecast: Optional[List[ForecastDay]] = None
        if self.can_search and search_city:
            weather, forecast = await attempt_or_default(
                "weather",
                lambda: self._fetch_weather(search_city),
                lambda _: (None, None)
            )

        if self.can_narrate:
            context = build_context(request, weather, forecast)
            summary = await attempt_or_default(
                "narrative",
                lambda: self.narrative_service.generate_summary(request.query, items, context),
                lambda e: self._fallback_summary(items, request.query, e)
            )
        else:
            summary = default_summary(items, request.query)

        return RecommendationResult(
            summary=summary,
            items=items,
            is_mock=self.is_mock,
            weather=weather,
            forecast=forecast
        )

    async def _fetch_weather(self, city: str) -> Tuple[Optional[CurrentWeather], Optional[List[ForecastDay]]]:
        # One area code lookup shared by both weather calls
        adcode = await self.weather_service.get_area_code(city)
        current = await self.weather_service.get_current(city, adcode, resolve_area_code=False)
        forecast = await self.weather_service.get_forecast(city, adcode, resolve_area_code=False)
        return current, forecast

    @staticmethod
    def _fallback_summary(items: List[PlaceItem], query: str, error: Exception) -> str:
        summary = default_summary(items, query)
        if is_timeout_error(error):
            summary += f"\n\n{TIMEOUT_NOTE}"
        return summary


def build_orchestrator(settings: Settings, transport: HttpTransport,
                       mode: Optional[ServiceMode] = None) -> RecommendationOrchestrator:
    """Wire the AMap and LLM adapters onto one shared transport"""
    amap_client = AmapClient(settings, transport)
    return RecommendationOrchestrator(
        settings=settings,
        mode=mode or ServiceMode.from_settings(settings),
        places_service=AmapPlacesService(amap_client),
        weather_service=WeatherService(amap_client),
        narrative_service=NarrativeService(settings, transport),
        query_parser=QueryParser(default_city=settings.DEFAULT_CITY)
    )
