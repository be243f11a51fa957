from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import AnyHttpUrl, ValidationError

from authcode.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    SPOTIFY_AUTHORIZE_URL,
    SPOTIFY_TOKEN_URL,
)
from authcode.errors import ConfigurationError
from authcode.urls import is_allowed_redirect_uri


@dataclass
class AuthorizationCodeConfig:
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: list[str] = field(default_factory=list)
    authorize_url: str = SPOTIFY_AUTHORIZE_URL
    token_url: str = SPOTIFY_TOKEN_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    def validate(self) -> None:
        required = {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        missing = [name for name, value in required.items() if not (value or "").strip()]
        if missing:
            raise ConfigurationError(
                f"Missing required authorization settings: {', '.join(missing)}"
            )

        for name in ("authorize_url", "token_url", "redirect_uri"):
            value = getattr(self, name)
            try:
                AnyHttpUrl(value)
            except ValidationError as error:
                raise ConfigurationError(f"{name} must be a valid http(s) URL: {value!r}") from error

        if not is_allowed_redirect_uri(self.redirect_uri):
            raise ConfigurationError(
                "redirect_uri must use HTTPS unless it points at a loopback address "
                "(for example: http://localhost:3978/authorize/spotify)."
            )

        if self.timeout <= 0:
            raise ConfigurationError("timeout must be a positive number of seconds.")
