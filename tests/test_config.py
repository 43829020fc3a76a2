import json

from travel_advisor.utils.config import (
    Settings, load_config_file, missing_critical_keys, validate_settings
)


def test_load_config_file_maps_client_keys(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "amapKey": "amap-from-file",
        "llmApiKey": "llm-from-file",
        "llmModel": "qwen-max",
        "defaultCity": "杭州",
        "networkTimeout": 5000,
        "mockMode": True,
    }, ensure_ascii=False), encoding="utf-8")

    result = load_config_file(path)

    assert result.source == "file"
    assert result.message is None
    assert result.settings.AMAP_API_KEY == "amap-from-file"
    assert result.settings.LLM_API_KEY == "llm-from-file"
    assert result.settings.LLM_MODEL == "qwen-max"
    assert result.settings.DEFAULT_CITY == "杭州"
    assert result.settings.NETWORK_TIMEOUT_MS == 5000
    # A readable file always means live mode
    assert result.settings.MOCK_MODE is False


def test_load_config_file_accepts_setting_names(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"AMAP_API_KEY": "a", "LLM_API_KEY": "b"}), encoding="utf-8")

    result = load_config_file(path)

    assert result.settings.AMAP_API_KEY == "a"
    assert result.settings.LLM_API_KEY == "b"


def test_missing_file_falls_back_to_mock(tmp_path):
    result = load_config_file(tmp_path / "absent.json")

    assert result.source == "fallback"
    assert result.settings.MOCK_MODE is True
    assert result.message


def test_invalid_json_falls_back_to_mock(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    result = load_config_file(path)

    assert result.source == "fallback"
    assert result.settings.MOCK_MODE is True


def test_non_object_json_falls_back_to_mock(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")

    result = load_config_file(path)

    assert result.source == "fallback"
    assert "JSON object" in result.message


def test_missing_critical_keys_reports_amap_first():
    assert missing_critical_keys(Settings(_env_file=None, AMAP_API_KEY=None)) == "缺少高德地图密钥（AMAP_API_KEY）"
    assert missing_critical_keys(Settings(_env_file=None, AMAP_API_KEY="a", LLM_API_KEY=None)) == "缺少大模型密钥（LLM_API_KEY）"
    assert missing_critical_keys(Settings(_env_file=None, AMAP_API_KEY="a", LLM_API_KEY="b")) is None


def test_validate_settings(live_settings):
    assert validate_settings(live_settings) is True
    assert validate_settings(Settings(_env_file=None, AMAP_API_KEY=None, LLM_API_KEY=None)) is False
    # Mock mode needs no credentials
    assert validate_settings(Settings(_env_file=None, AMAP_API_KEY=None, MOCK_MODE=True)) is True


def test_defaults():
    config = Settings(_env_file=None)

    assert config.DEFAULT_CITY == "北京"
    assert config.NETWORK_TIMEOUT_MS == 12000
    assert config.AMAP_BASE_URL == "https://restapi.amap.com/v3"
    assert config.LLM_ENABLE_SEARCH is True
