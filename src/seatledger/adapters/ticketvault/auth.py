"""Login and bearer-token bookkeeping for the TicketVault API."""

from __future__ import annotations

import base64
import binascii
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from .schema import LoginResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from seatledger.adapters.http_resilience import ResilientClient

log = getLogger(__name__)

LOGIN_PATH = "/api/Login"
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=50)
REFRESH_MARGIN = timedelta(seconds=60)


class TicketVaultAuthError(RuntimeError):
    """Raised when TicketVault refuses the configured credentials."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


def _utcnow() -> datetime:
    return datetime.now(UTC)


def token_expiry(token: str, *, now: datetime) -> datetime:
    """Expiry from the JWT ``exp`` claim, or a conservative default."""

    try:
        segment = token.split(".")[1]
        padded = segment + "=" * (-len(segment) % 4)
        claims = json.loads(base64.urlsafe_b64decode(padded))
        return datetime.fromtimestamp(float(claims["exp"]), tz=UTC)
    except (IndexError, KeyError, TypeError, ValueError, binascii.Error):
        return now + DEFAULT_TOKEN_LIFETIME


@dataclass(slots=True)
class TicketVaultCredentials:
    username: str
    password: str
    ui_timezone: str
    clock: Callable[[], datetime] = field(default=_utcnow)
    _token: str | None = field(default=None, init=False, repr=False)
    _expires_at: datetime | None = field(default=None, init=False, repr=False)

    @property
    def token(self) -> str | None:
        return self._token

    def needs_login(self) -> bool:
        if self._token is None or self._expires_at is None:
            return True
        return self.clock() >= self._expires_at - REFRESH_MARGIN

    async def authorization_header(self, client: ResilientClient) -> dict[str, str]:
        if self.needs_login():
            await self.login(client)
        return {"Authorization": f"Bearer {self._token}"}

    async def login(self, client: ResilientClient) -> LoginResponse:
        response = await client.post(
            LOGIN_PATH,
            json={
                "userName": self.username,
                "password": self.password,
                "UiTimeZone": self.ui_timezone,
            },
        )
        if response.status_code >= httpx.codes.BAD_REQUEST:
            log.error(f"TicketVault login failed with status {response.status_code}")
            raise TicketVaultAuthError(
                f"TicketVault login failed: {response.status_code}",
                status_code=response.status_code,
            )
        login = LoginResponse.model_validate(response.json())
        self._token = login.token
        self._expires_at = token_expiry(login.token, now=self.clock())
        log.info(f"Logged in to TicketVault as {login.user_name or self.username}")
        return login

    def invalidate(self) -> None:
        self._token = None
        self._expires_at = None


__all__ = ["TicketVaultAuthError", "TicketVaultCredentials", "token_expiry"]
