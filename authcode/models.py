from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authcode.spotify_oauth2 import ExchangeResult


@dataclass
class PendingAuthorization:
    user_identifier: str
    state: str | None = None
    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    scope: str | None = None
    expires_at: float | None = None
    auth_url: str | None = None
    created_at: float = field(default_factory=time.time)
    updated_at: float | None = None

    @property
    def is_pending(self) -> bool:
        return self.state is not None

    @property
    def is_authorized(self) -> bool:
        return bool(self.access_token)

    def is_expired(self, leeway: float = 0) -> bool:
        if self.expires_at is None:
            return True
        return time.time() + leeway >= self.expires_at

    def invalidate_state(self) -> None:
        self.state = None
        self.updated_at = time.time()

    def apply_tokens(self, result: "ExchangeResult") -> None:
        self.access_token = result.access_token
        # refresh responses may omit the refresh token; the old one stays valid
        if result.refresh_token:
            self.refresh_token = result.refresh_token
        self.token_type = result.token_type
        self.scope = result.scope
        self.expires_at = result.expires_at
        self.updated_at = time.time()


@dataclass
class BearerAccessToken:
    access_token: str
    token_type: str
    scope: str
    expires_at: float

    def is_expired(self) -> bool:
        return time.time() >= self.expires_at

    @classmethod
    def from_record(cls, record: PendingAuthorization) -> "BearerAccessToken":
        return cls(
            access_token=record.access_token or "",
            token_type=record.token_type or "Bearer",
            scope=record.scope or "",
            expires_at=record.expires_at or 0.0,
        )
