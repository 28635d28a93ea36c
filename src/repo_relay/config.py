import os
from dataclasses import dataclass
from functools import lru_cache

import redis.asyncio as aioredis
from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    """Application settings loaded from environment variables."""

    # Redis
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379")
    redis_password: str | None = os.getenv("REDIS_PASSWORD")

    # Cache
    cache_ttl: int = int(os.getenv("CACHE_TTL", "3600"))  # 1 hour
    cache_key_prefix: str = os.getenv("CACHE_KEY_PREFIX", "")

    # Relational metadata store
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./repo_relay.db")

    # GitHub
    github_api_url: str = os.getenv("GITHUB_API_URL", "https://api.github.com")
    github_timeout: float = float(os.getenv("GITHUB_TIMEOUT", "30"))

    # Completions (OpenAI-compatible, e.g. LM Studio)
    completions_api_url: str = os.getenv("COMPLETIONS_API_URL", "http://localhost:1234/v1")
    completions_api_key: str | None = os.getenv("COMPLETIONS_API_KEY")
    completions_temperature: float = float(os.getenv("COMPLETIONS_TEMPERATURE", "0.3"))
    completions_max_tokens: int = int(os.getenv("COMPLETIONS_MAX_TOKENS", "2000"))
    default_model: str = os.getenv("DEFAULT_MODEL", "deepseek-coder-6.7b-instruct")

    # Security
    secret_key: str = os.getenv("SECRET_KEY", "change-me-in-production")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "1440"))

    # API
    frontend_origin: str = os.getenv("FRONTEND_ORIGIN", "http://localhost:4200")
    api_host: str = os.getenv("API_HOST", "0.0.0.0")
    api_port: int = int(os.getenv("API_PORT", "8000"))
    api_reload: bool = os.getenv("API_RELOAD", "true").lower() == "true"

    # Logging
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "text").lower()

    def __post_init__(self) -> None:
        """Validate settings after initialization."""
        if self.cache_ttl <= 0:
            raise ValueError("CACHE_TTL must be a positive number of seconds")

        if not 0 <= self.completions_temperature <= 2:
            raise ValueError("COMPLETIONS_TEMPERATURE must be between 0 and 2")

        if self.completions_max_tokens <= 0:
            raise ValueError("COMPLETIONS_MAX_TOKENS must be positive")

        if self.log_format not in ("text", "json"):
            raise ValueError(f"LOG_FORMAT must be 'text' or 'json', got {self.log_format!r}")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


def get_redis_client() -> aioredis.Redis:
    """Create an asyncio Redis client instance."""
    return aioredis.from_url(
        settings.redis_url,
        password=settings.redis_password,
        decode_responses=True,
    )
