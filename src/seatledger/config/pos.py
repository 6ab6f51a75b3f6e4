"""TicketVault POS configuration values."""

from __future__ import annotations

import os
from dataclasses import dataclass, field

from .env import optional_env_int, require_env_vars
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_TICKETVAULT_BASE_URL = "https://app.ticketvaultpos.com"
DEFAULT_TICKETVAULT_COMPANY_ID = 337
DEFAULT_UI_TIMEZONE = "America/New_York"
TICKETVAULT_TIMEOUT_SECONDS = 30.0

_DEFAULT_HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json, text/plain, */*",
    "device-type": "4",
}


def _default_resilience(base_url: str = DEFAULT_TICKETVAULT_BASE_URL) -> ResilienceConfig:
    return ResilienceConfig(
        name="ticketvault",
        base_url=base_url,
        timeout_seconds=TICKETVAULT_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=5, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        default_headers=_DEFAULT_HEADERS,
    )


@dataclass(frozen=True)
class PosConfig:
    """Holds TicketVault POS credentials and request settings."""

    username: str
    password: str
    company_id: int = DEFAULT_TICKETVAULT_COMPANY_ID
    ui_timezone: str = DEFAULT_UI_TIMEZONE
    resilience: ResilienceConfig = field(default_factory=_default_resilience)


def get_pos_config(*, resilience: ResilienceConfig | None = None) -> PosConfig:
    values = require_env_vars(("TICKETVAULT_USERNAME", "TICKETVAULT_PASSWORD"))
    base_url = os.getenv("TICKETVAULT_BASE_URL") or DEFAULT_TICKETVAULT_BASE_URL
    return PosConfig(
        username=values["TICKETVAULT_USERNAME"],
        password=values["TICKETVAULT_PASSWORD"],
        company_id=optional_env_int("TICKETVAULT_COMPANY_ID", DEFAULT_TICKETVAULT_COMPANY_ID),
        ui_timezone=os.getenv("TICKETVAULT_UI_TIMEZONE") or DEFAULT_UI_TIMEZONE,
        resilience=resilience or _default_resilience(base_url),
    )
