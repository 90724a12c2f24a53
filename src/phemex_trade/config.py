"""Configuration system using pydantic-settings with environment variable loading."""

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class PhemexSettings(BaseSettings):
    """Phemex API connection settings."""

    model_config = SettingsConfigDict(env_prefix="PHEMEX_")

    api_key: SecretStr = SecretStr("")
    api_secret: SecretStr = SecretStr("")
    api_url: str = "https://testnet-api.phemex.com"
    request_expiry_seconds: int = 60  # x-phemex-request-expiry window
    enable_rate_limit: bool = True

    @property
    def has_credentials(self) -> bool:
        return bool(
            self.api_key.get_secret_value() and self.api_secret.get_secret_value()
        )


class AppSettings(BaseSettings):
    """Root application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    log_level: str = "INFO"
    log_format: str = "console"  # "json" or "console"
    phemex: PhemexSettings = Field(default_factory=PhemexSettings)
