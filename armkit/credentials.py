"""Bearer token credentials consumed by the request pipeline.

Acquiring tokens (service principals, managed identity, device code) is left
to the caller. The pipeline only needs something that satisfies
:class:`TokenCredential`; two small implementations are provided.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Protocol, runtime_checkable

from armkit.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class AccessToken:
    """A bearer token with optional expiry."""

    token: str
    expires_at: datetime | None = None
    token_type: str = "Bearer"
    buffer_seconds: int = 60

    def __post_init__(self) -> None:
        if not self.token:
            raise ValidationError("Token cannot be empty", field="token")

    def is_expired(self) -> bool:
        """True if the token expires within the buffer period."""
        if self.expires_at is None:
            return False
        buffer = timedelta(seconds=self.buffer_seconds)
        return datetime.now() >= (self.expires_at - buffer)

    @property
    def authorization_header(self) -> str:
        return f"{self.token_type} {self.token}"


@runtime_checkable
class TokenCredential(Protocol):
    """Yields the access token attached to each request."""

    def get_token(self) -> AccessToken: ...


class StaticTokenCredential:
    """Always returns the same token."""

    def __init__(self, token: str, token_type: str = "Bearer") -> None:
        self._token = AccessToken(token=token, token_type=token_type)

    def get_token(self) -> AccessToken:
        return self._token


class CallbackTokenCredential:
    """Caches a token and calls ``fetch`` again once it is about to expire."""

    def __init__(self, fetch: Callable[[], AccessToken]) -> None:
        self._fetch = fetch
        self._token: AccessToken | None = None

    def get_token(self) -> AccessToken:
        if self._token is None or self._token.is_expired():
            self._token = self._fetch()
            logger.debug("Access token refreshed")
        return self._token
