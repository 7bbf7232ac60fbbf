"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CACHE_MAX_AGE = 180 * 24 * 60 * 60  # 180 days


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file="../.env",  # Root .env file (one level up from backend/)
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application
    app_name: str = "image-gateway"
    host: str = "0.0.0.0"
    port: int = 8080
    debug: bool = False
    log_level: str = "INFO"
    enable_structured_logging: bool = False

    # Source images
    allowed_source_hosts: str = ""

    # Browser / edge cache lifetime
    cache_max_age_seconds: int = DEFAULT_CACHE_MAX_AGE

    # Edge tier (in-process)
    edge_cache_enabled: bool = True
    edge_cache_max_entries: int = 1024

    # Durable tier (Redis)
    redis_url: str = "redis://localhost:6379/0"
    redis_max_connections: int = 20
    redis_socket_timeout: float = 5.0
    durable_key_prefix: str = "imgcache"

    # Transformation service
    transform_base_url: str = "http://localhost:8081"
    transform_path: str = "/transform"
    transform_timeout: float = 30.0
    coalesce_transforms: bool = False

    @property
    def allowed_source_hosts_list(self) -> list[str]:
        """Parse allowed source hosts from comma-separated string."""
        return [
            host.strip().lower()
            for host in self.allowed_source_hosts.split(",")
            if host.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
