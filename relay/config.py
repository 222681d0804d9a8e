"""Application configuration via pydantic-settings."""

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from relay.errors import StartupFailed


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore", populate_by_name=True
    )

    # App
    debug: bool = False
    port: int = 3000
    log_level: str = "INFO"
    allowed_origins: list[str] = ["http://localhost:3000", "http://localhost:3001"]
    # Externally reachable base URL, used by /setup-webhook
    public_url: str = ""

    # Stripe
    stripe_secret_key: str = Field(
        "", validation_alias=AliasChoices("STRIPE_SECRET_KEY", "DEV_STRIPE_SECRET_KEY")
    )
    stripe_webhook_secret: str = ""
    # Without a webhook secret, events are only accepted when this is explicitly set
    allow_unverified_webhooks: bool = False

    # Airtable
    airtable_api_key: str = Field(
        "", validation_alias=AliasChoices("AIRTABLE_API_KEY", "DEV_AIRTABLE_PAT")
    )
    airtable_base_id: str = ""
    airtable_table_name: str = "Failed Payments"

    # Google OAuth (Gmail send)
    google_client_id: str = ""
    google_client_secret: str = ""
    google_refresh_token: str = ""
    gmail_sender: str = ""
    alert_email: str = ""  # defaults to gmail_sender

    # Diagnostics
    log_buffer_capacity: int = 100
    downstream_timeout_seconds: float = 10.0
    test_rate_limit: str = ""  # e.g. "10/minute"; empty leaves /test unlimited

    @property
    def alert_recipient(self) -> str:
        return self.alert_email or self.gmail_sender

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key)

    @property
    def airtable_configured(self) -> bool:
        return bool(self.airtable_api_key and self.airtable_base_id)

    @property
    def gmail_configured(self) -> bool:
        return bool(
            self.google_client_id
            and self.google_client_secret
            and self.google_refresh_token
            and self.gmail_sender
        )


def validate_settings(s: Settings) -> None:
    """Refuse to start on configuration that cannot work at all."""
    problems = []
    if s.log_buffer_capacity < 1:
        problems.append("LOG_BUFFER_CAPACITY must be at least 1")
    if s.downstream_timeout_seconds <= 0:
        problems.append("DOWNSTREAM_TIMEOUT_SECONDS must be positive")
    if not 1 <= s.port <= 65535:
        problems.append(f"PORT out of range: {s.port}")
    if bool(s.airtable_api_key) != bool(s.airtable_base_id):
        problems.append("AIRTABLE_API_KEY and AIRTABLE_BASE_ID must be set together")

    if problems:
        raise StartupFailed("; ".join(problems))


settings = Settings()
