#app_registry\core\config.py

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistrySettings(BaseSettings):
    """Registry policy and cache configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="APP_REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Cache
    cache_prefix: str = "app_"
    cache_ttl: int = Field(default=5 * 60, gt=0)
    cache_enabled: bool = True

    # URL policy
    use_custom_domains: bool = True
    force_global_https: bool = False
    ssl_enabled: bool = False
    virtual_host: str = "apphost.com"

    # Batch lookups
    batch_concurrency: int = Field(default=8, gt=0)
