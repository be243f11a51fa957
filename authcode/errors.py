"""
Errors raised by the authorization-code flow.

Two categories matter to callers:

- ``AuthorizationRejectedError``: the request itself is invalid (bad state,
  unknown user, replayed callback). Retrying the same input will fail again.
- ``ProviderFaultError``: the identity provider misbehaved or is unavailable.
  ``ProviderError.is_transient`` tells whether a retry may help.
"""

from __future__ import annotations


class AuthCodeError(RuntimeError):
    """Base class for every error raised by this package."""


class ConfigurationError(AuthCodeError):
    """Client credentials or endpoints are missing or invalid."""


class AuthorizationRejectedError(AuthCodeError):
    pass


class MalformedStateError(AuthorizationRejectedError):
    def __init__(self, message: str = "State cannot be split into user identifier and nonce.") -> None:
        super().__init__(message)


class StateMismatchError(AuthorizationRejectedError):
    def __init__(self, stored_state: str | None) -> None:
        super().__init__(
            f"Stored state does not match the expected nonce (stored state: {stored_state!r})."
        )
        self.stored_state = stored_state


class NotFoundError(AuthorizationRejectedError):
    def __init__(self, user_identifier: str) -> None:
        super().__init__(f"No authorization record for user identifier {user_identifier!r}.")
        self.user_identifier = user_identifier


class MissingRefreshTokenError(AuthorizationRejectedError):
    def __init__(self, user_identifier: str) -> None:
        super().__init__(
            f"Authorization record for {user_identifier!r} has no refresh token; re-auth required."
        )
        self.user_identifier = user_identifier


class ProviderFaultError(AuthCodeError):
    pass


class ProviderError(ProviderFaultError):
    """The token endpoint answered with a non-success status."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(f"Token request failed with status {status_code}: {body}")
        self.status_code = status_code
        self.body = body

    @property
    def is_transient(self) -> bool:
        return self.status_code == 429 or 500 <= self.status_code < 600


class TokenResponseError(ProviderFaultError):
    """The token endpoint answered 2xx with a payload that cannot be used."""
