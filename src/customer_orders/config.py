"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    jwt_secret: str | None = None
    supabase_url: str
    supabase_service_key: str
    africastalking_username: str
    africastalking_api_key: str
    africastalking_sender_id: str | None = None
    sms_base_url: str = "https://api.sandbox.africastalking.com/version1/messaging"
    oidc_provider_url: str | None = None
    oidc_client_id: str | None = None
    oidc_client_secret: str | None = None
    oidc_redirect_uri: str | None = None
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def oidc_configured(self) -> bool:
        """Return true when every OpenID Connect setting is present."""
        return all(
            (
                self.oidc_provider_url,
                self.oidc_client_id,
                self.oidc_client_secret,
                self.oidc_redirect_uri,
            )
        )
