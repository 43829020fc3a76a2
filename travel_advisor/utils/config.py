import json
import logging
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel
from pydantic_settings import BaseSettings

from travel_advisor.prompts.system_prompts import get_recommendation_system_prompt

logger = logging.getLogger(__name__)

FALLBACK_CITY = "北京"


class Settings(BaseSettings):
    # AMap Configuration (POI search, geocoding, weather)
    AMAP_API_KEY: Optional[str] = None
    AMAP_BASE_URL: str = "https://restapi.amap.com/v3"

    # LLM Configuration (OpenAI-compatible chat completions)
    LLM_API_KEY: Optional[str] = None
    LLM_BASE_URL: str = "https://dashscope.aliyuncs.com/compatible-mode/v1"
    LLM_MODEL: str = "qwen-plus"
    LLM_SYSTEM_PROMPT: str = get_recommendation_system_prompt()
    LLM_ENABLE_SEARCH: bool = True
    LLM_TEMPERATURE: float = 0.7
    LLM_MAX_TOKENS: int = 1500

    # Optional JSON config file (mobile client format); overrides the values above
    CONFIG_FILE: Optional[str] = None

    # Recommendation behaviour
    DEFAULT_CITY: str = FALLBACK_CITY
    MOCK_MODE: bool = False
    MAX_QUERY_LENGTH: int = 200

    # Timeouts (milliseconds); the LLM gets a much longer budget
    NETWORK_TIMEOUT_MS: int = 12000
    LLM_TIMEOUT_MS: int = 60000

    # HTTP connection pool
    HTTP_MAX_CONNECTIONS: int = 50
    HTTP_MAX_KEEPALIVE_CONNECTIONS: int = 20

    # API Configuration
    API_VERSION: str = "1.0.0"
    DEBUG_MODE: bool = False
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    model_config = {"env_file": ".env", "case_sensitive": True, "extra": "ignore"}


class ConfigResult(BaseModel):
    settings: Settings
    source: Literal["file", "fallback"]
    message: Optional[str] = None


# camelCase keys used by the mobile client's config.json
LEGACY_CONFIG_KEYS = {
    "amapKey": "AMAP_API_KEY",
    "amapBaseUrl": "AMAP_BASE_URL",
    "llmApiKey": "LLM_API_KEY",
    "llmBaseUrl": "LLM_BASE_URL",
    "llmModel": "LLM_MODEL",
    "llmSystemPrompt": "LLM_SYSTEM_PROMPT",
    "llmEnableSearch": "LLM_ENABLE_SEARCH",
    "defaultCity": "DEFAULT_CITY",
    "networkTimeout": "NETWORK_TIMEOUT_MS",
    "mockMode": "MOCK_MODE",
}

# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get the global settings instance"""
    return settings


def load_config_file(path: Union[str, Path]) -> ConfigResult:
    """Load settings from a JSON file layered over the defaults.

    A readable file always switches the service to live mode. Any failure
    (missing file, bad JSON, invalid values) falls back to the defaults in
    mock mode and reports why.
    """
    try:
        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("config file must contain a JSON object")

        values = {LEGACY_CONFIG_KEYS.get(key, key): value for key, value in raw.items()}
        values["MOCK_MODE"] = False
        loaded = Settings(_env_file=None, **values)
        logger.info(f"Loaded configuration from {path}")
        return ConfigResult(settings=loaded, source="file")
    except (OSError, ValueError) as e:
        logger.warning(f"Could not load configuration from {path}, falling back to mock mode: {str(e)}")
        return ConfigResult(
            settings=Settings(_env_file=None, MOCK_MODE=True),
            source="fallback",
            message=str(e)
        )


def missing_critical_keys(config: Settings) -> Optional[str]:
    """Describe the first missing credential, or None when both are set"""
    if not config.AMAP_API_KEY:
        return "缺少高德地图密钥（AMAP_API_KEY）"
    if not config.LLM_API_KEY:
        return "缺少大模型密钥（LLM_API_KEY）"
    return None


def validate_settings(config: Optional[Settings] = None) -> bool:
    """Validate that live mode has the credentials it needs"""
    config = config or settings
    if config.MOCK_MODE:
        return True

    missing = missing_critical_keys(config)
    if missing:
        logger.warning(f"Missing or invalid settings: {missing}")
        logger.warning("Please configure these settings in your .env file or environment variables")
        return False

    return True
