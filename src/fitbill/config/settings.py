"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Every section reads the same .env; sub-settings are built on their own
_ENV_FILE: dict[str, Any] = {
    "env_file": ".env",
    "env_file_encoding": "utf-8",
    "extra": "ignore",
}


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_", **_ENV_FILE)

    data_dir: Path = Path("data")
    db_name: str = "fitbill.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms
    acquire_timeout: float = 10.0  # seconds waiting for a free connection

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_", **_ENV_FILE)

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class EmailSettings(BaseSettings):
    """
    Email provider configuration.

    Provider priority is fixed: SMTP credentials pair first, then the
    transactional API key. With neither set, dispatch is simulated.
    The unprefixed names used by older deployments are accepted too.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMAIL_", populate_by_name=True, **_ENV_FILE
    )

    # Primary: SMTP (Gmail app password)
    gmail_user: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_GMAIL_USER", "GMAIL_USER"),
    )
    gmail_app_password: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_GMAIL_APP_PASSWORD", "GMAIL_APP_PASSWORD"),
    )
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_timeout: float = 15.0

    # Secondary: Resend HTTP API
    resend_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_RESEND_API_KEY", "RESEND_API_KEY"),
    )
    resend_api_url: str = "https://api.resend.com/emails"
    resend_from_email: str = Field(
        default="",
        validation_alias=AliasChoices("EMAIL_RESEND_FROM_EMAIL", "RESEND_FROM_EMAIL"),
    )
    http_timeout: float = 20.0

    # Sender override applies to every provider
    from_address: str = ""
    sender_name: str = "WTF Fitness"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.gmail_user and self.gmail_app_password)

    @property
    def resend_configured(self) -> bool:
        return bool(self.resend_api_key)


class PdfSettings(BaseSettings):
    """Invoice PDF branding and rendering limits."""

    model_config = SettingsConfigDict(env_prefix="PDF_", **_ENV_FILE)

    company_name: str = "Witness The Fitness"
    tagline: str = "Your Fitness Partner"
    address_lines: list[str] = [
        "No 45, Omkar Orchid",
        "Nanjundaiah Layout, Begur",
        "Bengaluru, Karnataka 560114",
        "India",
    ]
    support_email: str = "witnessthefitnessblr@gmail.com"
    footer_text: str = "Thank You For Your Business!"
    logo_path: str = ""
    # TTF with the rupee glyph; "auto" searches system fonts, "" forces "Rs."
    unicode_font_path: str = "auto"
    render_timeout: float = 30.0  # seconds


class InvoiceSettings(BaseSettings):
    """Invoice lifecycle configuration."""

    model_config = SettingsConfigDict(
        env_prefix="INVOICE_", populate_by_name=True, **_ENV_FILE
    )

    number_max_attempts: int = 10
    create_max_attempts: int = 3
    create_retry_wait: float = 0.05  # seconds, doubled per attempt
    base_url: str = Field(
        default="",
        validation_alias=AliasChoices(
            "INVOICE_BASE_URL", "BASE_URL", "NEXT_PUBLIC_BASE_URL"
        ),
    )

    # Listing
    default_page_size: int = 50
    max_page_size: int = 200


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(**_ENV_FILE)

    app_name: str = "FitBill Invoice Service"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    invoice: InvoiceSettings = Field(default_factory=InvoiceSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
