"""Configuration settings for the CRM assistant gateway."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Service identification
    service_name: str = "crm-assistant-gateway"
    debug: bool = False

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8002

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_request_headers: bool = False
    log_request_body: bool = False

    # Gemini provider
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash-exp"
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 1500
    generation_chunk_timeout: float = 60.0  # seconds between two chunks

    # Business data APIs
    business_api_url: str = "http://localhost:5000"
    leads_path: str = "/api/leads"
    orders_path: str = "/api/sankhya/pedidos/listar"
    caller_query_param: str = "userId"
    source_timeout: float = 15.0

    # Cache (Redis) with pre-computed listings
    redis_url: str = "redis://localhost:6379/0"
    cache_timeout: float = 2.0
    partners_cache_key: str = "parceiros:list:1:50:::"
    products_cache_key: str = "produtos:list:all"

    # Display caps for the composed context
    leads_cap: int = 15
    partners_cap: int = 15
    products_cap: int = 20
    orders_cap: int = 10

    # Session
    session_cookie_name: str = "user"

    # CORS configuration
    cors_origins: list[str] = ["*"]

    model_config = SettingsConfigDict(
        env_prefix="CRM_ASSISTANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
