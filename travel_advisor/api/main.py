from fastapi import FastAPI, HTTPException, Depends
from fastapi.middleware.cors import CORSMiddleware
import logging
from datetime import datetime
from typing import Optional

from travel_advisor.models.place_models import GeocodeResult
from travel_advisor.models.request_models import RecommendationRequest
from travel_advisor.models.response_models import RecommendationResult, ValidationResponse, ConfigStatusResponse
from travel_advisor.services.amap_client import AmapClient
from travel_advisor.services.amap_places_service import AmapPlacesService
from travel_advisor.services.recommendation_orchestrator import (
    RecommendationOrchestrator, ServiceMode, build_orchestrator
)
from travel_advisor.utils.config import Settings, get_settings, load_config_file, missing_critical_keys, validate_settings
from travel_advisor.utils.errors import RemoteError
from travel_advisor.utils.http_client import HttpTransport
from travel_advisor.utils.validators import RecommendationRequestValidator

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="AI Travel Advisor API",
    description="Turn free-text travel questions into POI recommendations using AMap search, AMap weather and an LLM",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global services (initialized on startup)
active_settings: Optional[Settings] = None
config_source: str = "environment"
http_transport: Optional[HttpTransport] = None
orchestrator: Optional[RecommendationOrchestrator] = None
places_service: Optional[AmapPlacesService] = None


@app.on_event("startup")
async def startup_event():
    """Initialize services on startup"""
    global active_settings, config_source, http_transport, orchestrator, places_service

    settings = get_settings()
    if settings.CONFIG_FILE:
        result = load_config_file(settings.CONFIG_FILE)
        settings = result.settings
        config_source = result.source
        if result.message:
            logger.warning(f"Config file unusable, running in mock mode: {result.message}")

    if not validate_settings(settings):
        logger.warning("Live mode without full credentials; affected stages will be skipped")

    logger.info("Initializing services...")
    http_transport = HttpTransport(
        default_timeout_ms=settings.NETWORK_TIMEOUT_MS,
        max_connections=settings.HTTP_MAX_CONNECTIONS,
        max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS
    )
    orchestrator = build_orchestrator(settings, http_transport)
    places_service = AmapPlacesService(AmapClient(settings, http_transport))
    active_settings = settings
    logger.info(f"Services initialized in {orchestrator.mode.value} mode")


@app.on_event("shutdown")
async def shutdown_event():
    """Clean up resources on shutdown"""
    if http_transport is not None:
        await http_transport.aclose()


# Dependencies to get services
def get_active_settings() -> Settings:
    return active_settings or get_settings()


def get_orchestrator() -> RecommendationOrchestrator:
    if orchestrator is None:
        raise HTTPException(status_code=503, detail="Recommendation service not initialized")
    return orchestrator


def get_places_service() -> AmapPlacesService:
    if places_service is None:
        raise HTTPException(status_code=503, detail="Places service not initialized")
    return places_service


@app.post("/api/v1/recommendations", response_model=RecommendationResult)
async def get_recommendations(
    request: RecommendationRequest,
    service: RecommendationOrchestrator = Depends(get_orchestrator),
    settings: Settings = Depends(get_active_settings)
):
    """Generate POI recommendations and a summary for a free-text travel query"""
    try:
        validation = RecommendationRequestValidator.validate_recommendation_request(
            request, max_query_length=settings.MAX_QUERY_LENGTH
        )
        if not validation['valid']:
            raise HTTPException(status_code=400, detail={
                "message": "Invalid recommendation request",
                "errors": validation['errors']
            })

        logger.info(f"Recommendation request: {request.query}")
        return await service.get_recommendations(request)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error generating recommendations: {str(e)}")
        raise HTTPException(status_code=500, detail=f"Error generating recommendations: {str(e)}")


@app.post("/api/v1/validate-request", response_model=ValidationResponse)
async def validate_recommendation_request(
    request: RecommendationRequest,
    settings: Settings = Depends(get_active_settings)
):
    """Validate a recommendation request without running it"""
    validation = RecommendationRequestValidator.validate_recommendation_request(
        request, max_query_length=settings.MAX_QUERY_LENGTH
    )
    return ValidationResponse(valid=validation['valid'], errors=validation['errors'])


@app.get("/api/v1/config/status", response_model=ConfigStatusResponse)
async def config_status(settings: Settings = Depends(get_active_settings)):
    """Report the service mode and the first missing credential, if any"""
    return ConfigStatusResponse(
        mode=ServiceMode.from_settings(settings).value,
        config_source=config_source,
        missing_key=missing_critical_keys(settings)
    )


@app.get("/api/v1/places/search")
async def search_places(
    keywords: str,
    city: Optional[str] = None,
    service: AmapPlacesService = Depends(get_places_service)
):
    """Search POIs with keyword broadening and the fallback pass"""
    try:
        if not service.client.has_key:
            raise HTTPException(status_code=503, detail="AMAP_API_KEY is not configured")

        logger.info(f"Searching places: {keywords} in {city}")
        places = await service.search(keywords, city)
        return {
            "keywords": keywords,
            "city": city,
            "places": [place.model_dump(exclude_none=True) for place in places],
            "total_results": len(places)
        }

    except HTTPException:
        raise
    except RemoteError as e:
        logger.error(f"Places search failed: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)
    except Exception as e:
        logger.error(f"Error searching places: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/v1/places/geocode", response_model=GeocodeResult)
async def geocode_address(
    address: str,
    city: Optional[str] = None,
    service: AmapPlacesService = Depends(get_places_service)
):
    """Resolve an address (e.g. the caller's current location) to coordinates"""
    if not service.client.has_key:
        raise HTTPException(status_code=503, detail="AMAP_API_KEY is not configured")

    result = await service.geocode(address, city)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No geocoding result for {address}")
    return result


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    services = {
        "orchestrator": orchestrator is not None,
        "amap_places": places_service is not None,
        "http_transport": http_transport is not None
    }
    return {
        "status": "healthy" if all(services.values()) else "degraded",
        "timestamp": datetime.utcnow().isoformat(),
        "mode": orchestrator.mode.value if orchestrator is not None else None,
        "services": services,
        "version": get_settings().API_VERSION
    }


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "message": "AI Travel Advisor API",
        "version": get_settings().API_VERSION,
        "description": "POI recommendations with weather-aware AI summaries",
        "docs": "/docs",
        "health": "/health"
    }
