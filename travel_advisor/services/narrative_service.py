import logging
import time
from typing import Any, Dict, List, Optional, Sequence

from travel_advisor.models.place_models import PlaceItem
from travel_advisor.models.request_models import RecommendationRequest
from travel_advisor.models.response_models import CurrentWeather, ForecastDay
from travel_advisor.prompts.system_prompts import (
    build_recommendation_user_prompt,
    get_empty_results_summary,
    get_recommendation_system_prompt,
)
from travel_advisor.utils.config import Settings
from travel_advisor.utils.errors import ConfigError, RemoteError, TransportError
from travel_advisor.utils.formatters import RecommendationFormatter
from travel_advisor.utils.http_client import HttpTransport

FALLBACK_LIST_SIZE = 5


def build_context(request: RecommendationRequest,
                  weather: Optional[CurrentWeather] = None,
                  forecast: Optional[List[ForecastDay]] = None) -> Optional[str]:
    """Comma-joined trip context for the model; None when there is nothing to say"""
    segments = []
    if request.destination:
        segments.append(f"目的地: {request.destination}")
    if request.departure:
        segments.append(f"出发地: {request.departure}")
    if request.travel_date:
        segments.append(f"出行日期: {request.travel_date}")
    if request.location:
        segments.append(f"当前位置: {request.location}")
    if weather:
        segments.append(RecommendationFormatter.format_current_weather(weather))
    if forecast:
        segments.append(RecommendationFormatter.format_forecast(forecast))
    return ", ".join(segments) or None


def default_summary(items: Sequence[PlaceItem], query: str) -> str:
    """Deterministic summary used when the model is unavailable"""
    if not items:
        return get_empty_results_summary(query)

    listing = RecommendationFormatter.format_place_list(items, limit=FALLBACK_LIST_SIZE)
    remaining = len(items) - FALLBACK_LIST_SIZE
    footer = f"还有{remaining}个结果未显示。" if remaining > 0 else ""
    return f"为您找到以下推荐：\n\n{listing}\n\n{footer}"


class NarrativeService:
    """Recommendation write-up via an OpenAI-compatible chat completions endpoint"""

    def __init__(self, settings: Settings, transport: HttpTransport):
        self.settings = settings
        self.transport = transport
        self.logger = logging.getLogger(__name__)

    @property
    def has_key(self) -> bool:
        return bool(self.settings.LLM_API_KEY)

    def build_messages(self, user_query: str, items: Sequence[PlaceItem],
                       context: Optional[str] = None) -> List[Dict[str, str]]:
        system_prompt = self.settings.LLM_SYSTEM_PROMPT or get_recommendation_system_prompt()
        # The model sees every item; only the fallback summary is truncated
        place_list = RecommendationFormatter.format_place_list(items)
        user_prompt = build_recommendation_user_prompt(user_query, place_list, context)
        return [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

    async def generate_summary(self, user_query: str, items: Sequence[PlaceItem],
                               context: Optional[str] = None) -> str:
        """Ask the model to pick, justify and order recommendations.

        Raises RemoteError when the endpoint is unreachable, answers with an
        error, or returns an empty message. Timeouts keep is_timeout=True.
        """
        if not self.has_key:
            self.logger.error("LLM API key is not configured")
            raise ConfigError("大模型密钥未配置")

        base_url = (self.settings.LLM_BASE_URL or "").rstrip("/")
        url = f"{base_url}/chat/completions"
        messages = self.build_messages(user_query, items, context)
        body = {
            "model": self.settings.LLM_MODEL,
            "messages": messages,
            "temperature": self.settings.LLM_TEMPERATURE,
            "max_tokens": self.settings.LLM_MAX_TOKENS,
            "enable_search": self.settings.LLM_ENABLE_SEARCH,
        }
        self.logger.info(
            f"Calling LLM model {self.settings.LLM_MODEL} with {len(items)} places",
            extra={
                "system_len": len(messages[0]["content"]),
                "user_len": len(messages[1]["content"]),
                "enable_search": self.settings.LLM_ENABLE_SEARCH,
                "timeout_ms": self.settings.LLM_TIMEOUT_MS,
            }
        )

        started = time.monotonic()
        try:
            response = await self.transport.post(
                url,
                body=body,
                headers={
                    "Authorization": f"Bearer {self.settings.LLM_API_KEY}",
                    "Content-Type": "application/json",
                },
                timeout_ms=self.settings.LLM_TIMEOUT_MS
            )
        except TransportError as e:
            self.logger.error(f"LLM call failed: {e.message}, code: {e.code}")
            raise RemoteError(f"大模型调用失败: {e.message}", is_timeout=e.is_timeout) from e

        duration_ms = int((time.monotonic() - started) * 1000)
        self.logger.info(f"LLM responded in {duration_ms}ms, status: {response.status_code}")

        content = self._extract_content(response.data, response.status_code)
        self.logger.debug(f"LLM content preview: {content[:100]}")
        return content

    def _extract_content(self, data: Any, status_code: int) -> str:
        data = data if isinstance(data, dict) else {}

        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            self.logger.error(f"LLM API returned an error: {message}")
            raise RemoteError(f"大模型API错误: {message}", status_code=status_code)

        if not 200 <= status_code < 300:
            raise RemoteError(f"大模型API错误: HTTP {status_code}", status_code=status_code)

        choices = data.get("choices")
        choices = choices if isinstance(choices, list) else []
        first = choices[0] if choices and isinstance(choices[0], dict) else {}
        message = first.get("message") if isinstance(first.get("message"), dict) else {}
        content = message.get("content")
        if not content or not str(content).strip():
            self.logger.error("LLM returned an empty message")
            raise RemoteError("大模型返回内容为空", status_code=status_code)

        return str(content)
