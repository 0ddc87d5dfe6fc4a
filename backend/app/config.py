"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env.backend file."""

    DATABASE_URL: str = "sqlite+aiosqlite:///./prompts.db"
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 3001
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"

    # Seeding and retention
    SEED_ON_STARTUP: bool = False
    METRICS_RETENTION_DAYS: int = 0  # 0 keeps every record

    # Dashboard queries
    STATS_WINDOW_DAYS: int = 30
    METRICS_DEFAULT_LIMIT: int = 100
    METRICS_MAX_LIMIT: int = 1000

    # Document analysis
    DOCUMENT_ANALYZER: str = "demo"  # "demo" or "openai"
    OPENAI_API_KEY: str = ""
    OPENAI_MODEL: str = "gpt-4o-mini"
    ANALYSIS_TEMPERATURE: float = 0.1
    ANALYSIS_CACHE_TTL_SECONDS: float = 300.0
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # Per-client limiter for the document endpoint
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_WINDOW_SECONDS: float = 60.0
    # Key clients on X-Forwarded-For; enable only behind a trusted proxy
    TRUST_PROXY_HEADERS: bool = False

    class Config:
        env_file = ".env.backend"
        env_file_encoding = "utf-8"


settings = Settings()
