from __future__ import annotations

"""
Cloudflare Settings Configuration
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, Dict


class ResilienceSettings(BaseModel):
    """
    Throttling, retry and circuit breaker knobs

    Environment variables use the nested delimiter, e.g.
    ``CLOUDFLARE_RESILIENCE__MAX_RETRIES=5``
    """

    # Retry
    max_retries: int = Field(3, ge = 0)
    retry_rate_limited: bool = True
    idempotent_only: bool = False
    backoff_base: float = Field(1.0, ge = 0)
    backoff_max: float = Field(60.0, gt = 0)
    jitter: float = Field(1.0, ge = 0)

    # Proactive rate limiting
    permit_limit: int = Field(1200, ge = 1)
    permit_window: float = Field(300.0, gt = 0)
    queue_limit: int = Field(100, ge = 0)

    # Per-request timeout
    timeout: float = Field(30.0, gt = 0)

    # Circuit breaker; a threshold of 0 disables it
    circuit_failure_threshold: int = Field(5, ge = 0)
    circuit_cooldown: float = Field(30.0, ge = 0)

    model_config = {"extra": "forbid"}


class CloudflareSettings(BaseSettings):
    """
    Cloudflare API Settings

    Environment variables:
        CLOUDFLARE_API_TOKEN: Bearer token for API authentication (preferred)
        CLOUDFLARE_API_KEY: Legacy Global API Key
        CLOUDFLARE_EMAIL: Email associated with API key (required for API key auth)
        CLOUDFLARE_ACCOUNT_ID: Default account ID
        CLOUDFLARE_ZONE_ID: Default zone ID (optional)
        CLOUDFLARE_BASE_URL: API base URL
        CLOUDFLARE_RESILIENCE__*: see `ResilienceSettings`
    """

    api_token: Optional[str] = None
    api_key: Optional[str] = None
    email: Optional[str] = None
    account_id: Optional[str] = None
    zone_id: Optional[str] = None
    base_url: str = "https://api.cloudflare.com/client/v4"
    resilience: ResilienceSettings = Field(default_factory = ResilienceSettings)

    model_config = SettingsConfigDict(
        env_prefix = "CLOUDFLARE_",
        env_nested_delimiter = "__",
        case_sensitive = False,
        extra = "allow",
    )

    @property
    def has_auth(self) -> bool:
        """Check if valid authentication is configured"""
        return bool(self.api_token or (self.api_key and self.email))

    @property
    def auth_headers(self) -> Dict[str, str]:
        """
        Returns the appropriate authentication headers

        Prefers Bearer token over API key
        """
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        elif self.api_key and self.email:
            return {
                "X-Auth-Key": self.api_key,
                "X-Auth-Email": self.email,
            }
        return {}
