from typing import List, Optional, Sequence, Union

from travel_advisor.models.place_models import PlaceItem
from travel_advisor.models.response_models import CurrentWeather, ForecastDay


class RecommendationFormatter:
    """Text rendering shared by the LLM prompt, the context string and the fallback summary"""

    @staticmethod
    def format_distance(distance: Union[int, float]) -> str:
        """Render metres without a trailing .0"""
        if float(distance).is_integer():
            return str(int(distance))
        return str(distance)

    @staticmethod
    def format_place_line(index: int, place: PlaceItem) -> str:
        """e.g. 1. 故宫博物院（景山前街4号） - 距离850米"""
        text = f"{index}. {place.name}"
        if place.address:
            text += f"（{place.address}）"
        if place.distance is not None:
            text += f" - 距离{RecommendationFormatter.format_distance(place.distance)}米"
        return text

    @staticmethod
    def format_place_list(places: Sequence[PlaceItem], limit: Optional[int] = None) -> str:
        shown = places if limit is None else places[:limit]
        return "\n".join(
            RecommendationFormatter.format_place_line(i, place) for i, place in enumerate(shown, start=1)
        )

    @staticmethod
    def format_current_weather(weather: CurrentWeather) -> str:
        text = f"当前天气: {weather.weather}, 温度: {weather.temperature}°C"
        if weather.winddirection and weather.windpower:
            text += f", 风向: {weather.winddirection}, 风力: {weather.windpower}"
        if weather.humidity:
            text += f", 湿度: {weather.humidity}%"
        return text

    @staticmethod
    def format_forecast_day(day: ForecastDay) -> str:
        return f"{day.date}: 白天{day.dayweather} {day.daytemp}°C, 夜间{day.nightweather} {day.nighttemp}°C"

    @staticmethod
    def format_forecast(forecast: List[ForecastDay]) -> str:
        return "未来天气: " + "; ".join(RecommendationFormatter.format_forecast_day(day) for day in forecast)
