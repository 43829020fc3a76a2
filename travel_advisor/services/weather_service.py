import logging
from typing import List, Optional

from travel_advisor.models.response_models import CurrentWeather, ForecastDay
from travel_advisor.services.amap_client import AmapClient, is_success, text_field
from travel_advisor.utils.errors import TravelAdvisorError


class WeatherService:
    """AMap weather lookups. Weather is always optional, so every method returns None on failure."""

    def __init__(self, client: AmapClient):
        self.client = client
        self.logger = logging.getLogger(__name__)

    async def get_area_code(self, city_name: str) -> Optional[str]:
        """Resolve a city name to its AMap adcode via geocoding"""
        if not self.client.has_key or not city_name:
            return None

        try:
            # No city scoping parameter: the bare name geocodes more reliably
            data = await self.client.get("geocode/geo", {"address": city_name})
        except TravelAdvisorError as e:
            self.logger.warning(f"Area code lookup failed for {city_name}: {str(e)}")
            return None

        geocodes = data.get("geocodes") or []
        if is_success(data) and geocodes and isinstance(geocodes[0], dict):
            adcode = text_field(geocodes[0].get("adcode"))
            if adcode:
                self.logger.info(f"Resolved area code for {city_name}: {adcode}")
                return adcode

        self.logger.warning(f"No area code for {city_name}; weather will be queried by city name")
        return None

    async def get_current(self, city: str, adcode: Optional[str] = None,
                          resolve_area_code: bool = True) -> Optional[CurrentWeather]:
        """Live conditions for a city.

        Pass a pre-resolved adcode to skip the geocoding round trip. With
        resolve_area_code=False a missing adcode is not looked up again and the
        city name is used as-is.
        """
        data = await self._fetch(city, adcode, "base", resolve_area_code)
        lives = data.get("lives") if data else None
        if not lives:
            self.logger.warning(f"No live weather for {city}: {(data or {}).get('info')}")
            return None

        try:
            live = lives[0]
            weather = CurrentWeather(
                city=text_field(live.get("city")) or city,
                adcode=text_field(live.get("adcode")),
                weather=text_field(live.get("weather")) or "",
                temperature=text_field(live.get("temperature")) or "",
                winddirection=text_field(live.get("winddirection")),
                windpower=text_field(live.get("windpower")),
                humidity=text_field(live.get("humidity")),
                reporttime=text_field(live.get("reporttime")),
            )
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            self.logger.error(f"Malformed live weather record for {city}: {str(e)}")
            return None

        self.logger.info(f"Live weather for {weather.city}: {weather.weather}, {weather.temperature}°C")
        return weather

    async def get_forecast(self, city: str, adcode: Optional[str] = None,
                           resolve_area_code: bool = True) -> Optional[List[ForecastDay]]:
        """Multi-day forecast (AMap returns today plus the next three days)"""
        data = await self._fetch(city, adcode, "all", resolve_area_code)
        forecasts = data.get("forecasts") if data else None
        if not forecasts:
            self.logger.warning(f"No weather forecast for {city}: {(data or {}).get('info')}")
            return None

        try:
            days = [
                ForecastDay(
                    date=cast.get("date") or "",
                    week=text_field(cast.get("week")),
                    dayweather=cast.get("dayweather") or "",
                    nightweather=cast.get("nightweather") or "",
                    daytemp=cast.get("daytemp") or "",
                    nighttemp=cast.get("nighttemp") or "",
                    daywind=text_field(cast.get("daywind")),
                    nightwind=text_field(cast.get("nightwind")),
                    daypower=text_field(cast.get("daypower")),
                    nightpower=text_field(cast.get("nightpower")),
                )
                for cast in forecasts[0].get("casts") or []
            ]
        except (TypeError, ValueError, AttributeError, KeyError) as e:
            self.logger.error(f"Malformed weather forecast for {city}: {str(e)}")
            return None

        if not days:
            return None
        self.logger.info(f"Forecast for {city}: {len(days)} days")
        return days

    async def _fetch(self, city: str, adcode: Optional[str], extensions: str,
                     resolve_area_code: bool) -> Optional[dict]:
        if not self.client.has_key:
            self.logger.error("AMap API key is not configured")
            return None

        if not adcode and resolve_area_code:
            adcode = await self.get_area_code(city)

        try:
            data = await self.client.get("weather/weatherInfo", {
                "city": adcode or city,
                "extensions": extensions,
            })
        except TravelAdvisorError as e:
            self.logger.error(f"AMap weather query failed for {city}: {str(e)}")
            return None

        if not is_success(data):
            self.logger.warning(
                "AMap weather returned an error",
                extra={"status": data.get("status"), "info": data.get("info")}
            )
            return None
        return data
