"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key for signing JWT tokens", min_length=1
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Number of minutes before access tokens expire",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Hong_Kong",
        description="IANA timezone (or UTC offset) used for every stored timestamp",
    )
    azure_storage_connection_string: str | None = Field(
        default=None,
        description="Connection string for the blob storage account holding logos and invoices",
    )
    azure_storage_container_name: str | None = Field(
        default=None,
        description="Blob container used for uploaded files",
    )
    notification_dedup_window_seconds: float = Field(
        default=3.0,
        description="Trailing window in which identical notifications are discarded",
        ge=0,
    )
    notification_page_size: int = Field(
        default=50,
        description="Maximum number of notifications returned by a listing",
        gt=0,
    )
    desktop_notifications_enabled: bool = Field(
        default=True,
        description="Whether newly added notifications are mirrored as desktop notifications",
    )
    price_drop_threshold: float = Field(
        default=0.05,
        description="Minimum relative price drop that triggers watchlist notifications",
        gt=0,
        lt=1,
    )
    delivery_reminder_interval_minutes: float = Field(
        default=60,
        description="Minutes between two reminders asking a buyer to confirm delivery",
        gt=0,
    )
    delivery_escalation_hours: float = Field(
        default=6,
        description="Hours after shipping before administrators hear about an unconfirmed delivery",
        gt=0,
    )
    delivery_reminder_check_seconds: float = Field(
        default=300,
        description="Seconds between two delivery reminder sweeps of an open session",
        gt=0,
    )
    platform_fee_rate: float = Field(
        default=0.03,
        description="Share of the subtotal charged to the buyer as platform fee",
        ge=0,
        lt=1,
    )
    admin_feed_limit: int = Field(
        default=20,
        description="Maximum number of entries per list of the admin notification feed",
        gt=0,
    )
    enrichment_batch_size: int = Field(
        default=2,
        description="Number of purchases enriched concurrently",
        gt=0,
    )
    enrichment_batch_delay_seconds: float = Field(
        default=0.2,
        description="Pause between two enrichment batches",
        ge=0,
    )
    enrichment_field_timeout_seconds: float = Field(
        default=3.0,
        description="Timeout for a single offer/buyer/seller lookup",
        gt=0,
    )
    purchase_load_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout for the admin purchase listing",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_storage_pair(self) -> "Settings":
        if bool(self.azure_storage_connection_string) ^ bool(
            self.azure_storage_container_name
        ):
            raise ValueError(
                "AZURE_STORAGE_CONNECTION_STRING and AZURE_STORAGE_CONTAINER_NAME "
                "must both be provided to enable blob storage"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
