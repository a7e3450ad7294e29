from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from dike.analysis.types import FallbackSource


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # OpenRouter (chat completions, OpenAI-compatible)
    openrouter_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("OPENROUTER_API_KEY", "VITE_OPENROUTER_API_KEY"),
    )
    openrouter_base_url: str = "https://openrouter.ai/api/v1/chat/completions"
    openrouter_referer: str = "https://dike-ai.vercel.app"
    openrouter_title: str = "DIKE AI Educational Equity Analyzer"
    openrouter_timeout: float = 60.0

    # Models
    analysis_model: str = "anthropic/claude-3-haiku"
    analysis_temperature: float = 0.7
    analysis_max_tokens: int = 1000
    chat_model: str = "meta-llama/llama-3.3-70b-instruct:free"

    # Analysis
    fallback_summary_source: FallbackSource = FallbackSource.COMPLETION
    min_assignment_chars: int = 10
    analyze_rate_limit: str = "10/minute"

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 3001

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://app.example.com,https://admin.example.com"

    # Built frontend (served with SPA fallback when the directory exists)
    static_dir: str = "dist"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()


def validate_settings_for_production() -> None:
    """Validate critical settings. Called on startup in non-test environments."""
    errors: list[str] = []

    if settings.app_env == "production":
        if not settings.openrouter_api_key:
            errors.append("OPENROUTER_API_KEY must be set")
        if settings.allowed_origins == "*":
            errors.append("ALLOWED_ORIGINS must not be '*' in production")
        if settings.app_debug:
            errors.append("APP_DEBUG must be false in production")

    if settings.min_assignment_chars < 1:
        errors.append("MIN_ASSIGNMENT_CHARS must be at least 1")

    if errors:
        raise SystemExit("Configuration errors:\n  - " + "\n  - ".join(errors))
