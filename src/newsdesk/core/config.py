"""
Application configuration with layered loading.

Configuration precedence (highest to lowest):
1. Environment variables
2. config.yml values
3. Default values defined here

Values are resolved when a section is instantiated, so ``reload_config()``
picks up changes to the environment and to config.yml.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load .env file first (lowest priority, will be overridden by config.yml and env vars)
load_dotenv()

# Setup basic logging for config loading
logger = logging.getLogger(__name__)


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "config.example.yml").exists() or (parent / "pyproject.toml").exists():
            return parent
    return Path(os.getenv("NEWSDESK_ROOT", os.getcwd()))


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file if it exists."""
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}")
        return {}

    try:
        import yaml
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except Exception as e:
        logger.error(f"Error loading config file {config_path}: {e}")
        return {}


def _get_nested(d: Dict, *keys, default=None):
    """Safely get a nested dictionary value."""
    for key in keys:
        if isinstance(d, dict):
            d = d.get(key, default)
        else:
            return default
    return d if d is not None else default


def _env_or_yaml(env_key: str, yaml_config: Dict, *yaml_keys, default=None):
    """Get value from environment variable, falling back to YAML config, then default."""
    env_value = os.getenv(env_key)
    if env_value is not None:
        return env_value

    yaml_value = _get_nested(yaml_config, *yaml_keys)
    if yaml_value is not None:
        return yaml_value

    return default


def _as_bool(value: Any) -> bool:
    """Interpret env/yaml flag values ("true", "1", "yes", True)."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "on")


def _resolve(env_key: str, *yaml_keys, default=None):
    """Resolve against the currently loaded YAML config."""
    return _env_or_yaml(env_key, YAML_CONFIG, *yaml_keys, default=default)


# Find project root and load YAML config
PROJECT_ROOT = _find_project_root()
YAML_CONFIG = _load_yaml_config(PROJECT_ROOT / "config.yml")


class PathsConfig(BaseModel):
    """Path configuration."""
    root: Path = Field(default_factory=lambda: Path(_resolve("NEWSDESK_ROOT", "paths", "root", default=str(PROJECT_ROOT))))
    logs: Optional[Path] = Field(default_factory=lambda: (
        Path(_resolve("NEWSDESK_LOGS_PATH", "paths", "logs"))
        if _resolve("NEWSDESK_LOGS_PATH", "paths", "logs") else None
    ))


class NewsConfig(BaseModel):
    """NewsAPI.org configuration."""
    api_key: str = Field(default_factory=lambda: _resolve("NEWS_API_KEY", "news", "api_key", default=""))
    base_url: str = Field(default_factory=lambda: _resolve("NEWS_API_BASE_URL", "news", "base_url", default="https://newsapi.org/v2"))
    country: str = Field(default_factory=lambda: _resolve("NEWS_API_COUNTRY", "news", "country", default="us"))
    language: str = Field(default_factory=lambda: _get_nested(YAML_CONFIG, "news", "language", default="en"))
    page_size: int = Field(default_factory=lambda: int(_get_nested(YAML_CONFIG, "news", "page_size", default=20)))
    timeout: float = Field(default_factory=lambda: float(_resolve("NEWS_API_TIMEOUT", "news", "timeout", default=15.0)))


class KnowledgeConfig(BaseModel):
    """Knowledge source (Gemini) configuration."""
    api_key: str = Field(default_factory=lambda: _resolve("GEMINI_API_KEY", "knowledge", "api_key", default=""))
    base_url: str = Field(default_factory=lambda: _resolve(
        "GEMINI_BASE_URL", "knowledge", "base_url", default="https://generativelanguage.googleapis.com/v1beta"
    ))
    model: str = Field(default_factory=lambda: _resolve("GEMINI_MODEL", "knowledge", "model", default="gemini-pro"))
    temperature: float = Field(default_factory=lambda: float(_get_nested(YAML_CONFIG, "knowledge", "temperature", default=0.7)))
    top_k: int = Field(default_factory=lambda: int(_get_nested(YAML_CONFIG, "knowledge", "top_k", default=32)))
    top_p: float = Field(default_factory=lambda: float(_get_nested(YAML_CONFIG, "knowledge", "top_p", default=1.0)))
    max_output_tokens: int = Field(default_factory=lambda: int(_get_nested(YAML_CONFIG, "knowledge", "max_output_tokens", default=2048)))
    timeout: float = Field(default_factory=lambda: float(_resolve("GEMINI_TIMEOUT", "knowledge", "timeout", default=30.0)))
    placeholder_keys: List[str] = Field(default_factory=lambda: list(_get_nested(
        YAML_CONFIG, "knowledge", "placeholder_keys",
        default=["your-api-key", "your_api_key", "changeme", "replace-me", "<gemini-api-key>"],
    )))


class AssistantConfig(BaseModel):
    """Conversation behaviour."""
    min_delay_seconds: float = Field(default_factory=lambda: float(_resolve(
        "NEWSDESK_MIN_DELAY", "assistant", "min_delay_seconds", default=1.0
    )))
    max_delay_seconds: float = Field(default_factory=lambda: float(_resolve(
        "NEWSDESK_MAX_DELAY", "assistant", "max_delay_seconds", default=2.5
    )))
    max_results: int = Field(default_factory=lambda: int(_get_nested(YAML_CONFIG, "assistant", "max_results", default=5)))
    voice_enabled: bool = Field(default_factory=lambda: _as_bool(_resolve(
        "NEWSDESK_VOICE", "assistant", "voice_enabled", default=False
    )))
    voice_command: str = Field(default_factory=lambda: _resolve(
        "NEWSDESK_VOICE_COMMAND", "assistant", "voice_command", default="espeak"
    ))


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default_factory=lambda: _resolve("NEWSDESK_LOG_LEVEL", "logging", "level", default="INFO"))
    format: str = Field(default_factory=lambda: _get_nested(
        YAML_CONFIG, "logging", "format", default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    ))


class Settings(BaseModel):
    """
    Application settings with layered configuration.

    Configuration is loaded from (in order of precedence):
    1. Environment variables
    2. config.yml
    3. Default values
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    news: NewsConfig = Field(default_factory=NewsConfig)
    knowledge: KnowledgeConfig = Field(default_factory=KnowledgeConfig)
    assistant: AssistantConfig = Field(default_factory=AssistantConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def max_results(self) -> int:
        """Cap on attached results per message."""
        return self.assistant.max_results

    @property
    def delay_range(self) -> tuple:
        """(min, max) processing delay in seconds."""
        low = max(0.0, self.assistant.min_delay_seconds)
        high = max(low, self.assistant.max_delay_seconds)
        return low, high


# Create singleton instance
settings = Settings()


def get_config_source(key: str, env_key: Optional[str] = None) -> str:
    """
    Get the source of a configuration value.

    ``env_key`` defaults to the dotted key upper-cased with underscores.
    Returns 'env', 'yaml', or 'default'.
    """
    env_key = env_key or key.upper().replace(".", "_")
    if os.getenv(env_key) is not None:
        return "env"

    keys = key.split(".")
    yaml_value = _get_nested(YAML_CONFIG, *keys)
    if yaml_value is not None:
        return "yaml"

    return "default"


def reload_config():
    """Reload configuration from files."""
    global YAML_CONFIG, settings
    YAML_CONFIG = _load_yaml_config(PROJECT_ROOT / "config.yml")
    settings = Settings()
    logger.info("Configuration reloaded")
    return settings
