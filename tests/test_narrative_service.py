import httpx
import pytest

from travel_advisor.models.place_models import PlaceItem
from travel_advisor.models.request_models import RecommendationRequest
from travel_advisor.models.response_models import CurrentWeather, ForecastDay
from travel_advisor.services.narrative_service import NarrativeService, build_context, default_summary
from travel_advisor.utils.errors import RemoteError


def chat_response(content):
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "model": "qwen-plus",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}, "finish_reason": "stop"}],
    }


@pytest.fixture
def items():
    return [
        PlaceItem(name="西湖", address="西湖区龙井路1号", distance=850),
        PlaceItem(name="灵隐寺"),
        PlaceItem(name="河坊街", address="上城区"),
    ]


# --- default summary ---

def test_default_summary_without_items():
    assert default_summary([], "q") == "根据您的查询\"q\"，暂未找到相关推荐。"


def test_default_summary_lists_first_five(items):
    seven = [PlaceItem(name=f"景点{i}") for i in range(1, 8)]

    summary = default_summary(seven, "q")

    for i in range(1, 6):
        assert f"{i}. 景点{i}" in summary
    assert "景点6" not in summary
    assert "景点7" not in summary
    assert "还有2个结果未显示。" in summary


def test_default_summary_renders_address_and_distance(items):
    summary = default_summary(items, "杭州")

    assert summary.startswith("为您找到以下推荐：")
    assert "1. 西湖（西湖区龙井路1号） - 距离850米" in summary
    assert "2. 灵隐寺\n" in summary
    assert "未显示" not in summary


# --- context builder ---

def test_context_without_weather():
    request = RecommendationRequest(query="玩什么", destination="杭州", departure="上海", travel_date="2024-05-01")

    context = build_context(request)

    assert context == "目的地: 杭州, 出发地: 上海, 出行日期: 2024-05-01"
    assert "天气" not in context


def test_context_is_none_when_empty():
    assert build_context(RecommendationRequest(query="玩什么")) is None


def test_context_weather_humidity_only_when_present():
    request = RecommendationRequest(query="玩什么", destination="杭州")
    dry = CurrentWeather(city="杭州市", weather="晴", temperature="26")
    humid = CurrentWeather(city="杭州市", weather="晴", temperature="26", humidity="60",
                           winddirection="东南", windpower="≤3")

    assert build_context(request, dry) == "目的地: 杭州, 当前天气: 晴, 温度: 26°C"
    assert "湿度" not in build_context(request, dry)
    assert build_context(request, humid) == "目的地: 杭州, 当前天气: 晴, 温度: 26°C, 风向: 东南, 风力: ≤3, 湿度: 60%"


def test_context_wind_needs_direction_and_power():
    request = RecommendationRequest(query="玩什么")
    weather = CurrentWeather(city="杭州市", weather="阴", temperature="20", winddirection="北")

    assert "风向" not in build_context(request, weather)


def test_context_forecast_segment():
    request = RecommendationRequest(query="玩什么", location="杭州东站")
    forecast = [
        ForecastDay(date="2024-05-01", dayweather="晴", nightweather="多云", daytemp="28", nighttemp="18"),
        ForecastDay(date="2024-05-02", dayweather="小雨", nightweather="阴", daytemp="24", nighttemp="17"),
    ]

    assert build_context(request, None, forecast) == (
        "当前位置: 杭州东站, 未来天气: 2024-05-01: 白天晴 28°C, 夜间多云 18°C; "
        "2024-05-02: 白天小雨 24°C, 夜间阴 17°C"
    )


# --- LLM call ---

@pytest.mark.asyncio
async def test_generate_summary_builds_chat_request(live_settings, transport, handler, items):
    handler.on("/chat/completions", lambda request: chat_response("推荐先去西湖，再去灵隐寺。"))
    service = NarrativeService(live_settings, transport)

    summary = await service.generate_summary("杭州一日游", items, "目的地: 杭州")

    assert summary == "推荐先去西湖，再去灵隐寺。"
    request = handler.requests[0]
    assert request.headers["Authorization"] == "Bearer test-llm-key"
    body = handler.body(request)
    assert body["model"] == "qwen-plus"
    assert body["enable_search"] is True
    assert body["max_tokens"] == 1500
    system, user = body["messages"]
    assert system["role"] == "system"
    assert "旅行路线推荐助手" in system["content"]
    assert "用户问题：杭州一日游" in user["content"]
    assert "上下文：目的地: 杭州" in user["content"]
    # Every item goes to the model, not just the first five
    assert "3. 河坊街（上城区）" in user["content"]


@pytest.mark.asyncio
async def test_generate_summary_error_payload(live_settings, transport, handler, items):
    handler.on("/chat/completions", lambda request: httpx.Response(
        400, json={"error": {"message": "Invalid API-key provided.", "type": "invalid_request_error"}}
    ))
    service = NarrativeService(live_settings, transport)

    with pytest.raises(RemoteError) as exc_info:
        await service.generate_summary("q", items)
    assert "Invalid API-key" in exc_info.value.message


@pytest.mark.asyncio
async def test_generate_summary_empty_content(live_settings, transport, handler, items):
    handler.on("/chat/completions", lambda request: chat_response(""))
    service = NarrativeService(live_settings, transport)

    with pytest.raises(RemoteError):
        await service.generate_summary("q", items)


@pytest.mark.asyncio
async def test_generate_summary_timeout_is_flagged(live_settings, transport, handler, items):
    def slow(request):
        raise httpx.ReadTimeout("timed out", request=request)

    handler.on("/chat/completions", slow)
    service = NarrativeService(live_settings, transport)

    with pytest.raises(RemoteError) as exc_info:
        await service.generate_summary("q", items)
    assert exc_info.value.is_timeout
