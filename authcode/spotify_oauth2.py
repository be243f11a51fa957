from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass

import httpx

from authcode.config import AuthorizationCodeConfig
from authcode.constants import LOGGER, SPOTIFY_AUTHORIZE_URL
from authcode.errors import ProviderError, TokenResponseError
from authcode.urls import append_query_params


@dataclass
class ExchangeResult:
    access_token: str
    token_type: str
    scope: str
    expires_in: int
    expires_at: float
    refresh_token: str | None = None
    auth_url: str = ""

    def is_expired(self) -> bool:
        return time.time() >= self.expires_at

    @classmethod
    def from_payload(cls, payload: object) -> "ExchangeResult":
        if not isinstance(payload, dict):
            raise TokenResponseError("Token response must be a JSON object.")

        access_token = payload.get("access_token")
        token_type = payload.get("token_type", "Bearer")
        scope = payload.get("scope", "")
        expires_in = payload.get("expires_in")
        refresh_token = payload.get("refresh_token")

        if not isinstance(access_token, str) or not access_token:
            raise TokenResponseError("Token response missing access_token.")
        if not isinstance(expires_in, int) or isinstance(expires_in, bool):
            raise TokenResponseError("Token response missing expires_in.")
        if not isinstance(token_type, str) or not token_type:
            raise TokenResponseError("Token response token_type must be a string.")
        if not isinstance(scope, str):
            raise TokenResponseError("Token response scope must be a string.")
        if refresh_token is not None and not isinstance(refresh_token, str):
            raise TokenResponseError("Token response refresh_token must be a string.")

        return cls(
            access_token=access_token,
            token_type=token_type,
            scope=scope,
            expires_in=expires_in,
            expires_at=time.time() + expires_in,
            refresh_token=refresh_token or None,
        )


def build_authorization_url(
    client_id: str,
    redirect_uri: str,
    scopes: list[str],
    state: str,
    *,
    authorize_url: str = SPOTIFY_AUTHORIZE_URL,
) -> str:
    query = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
    }
    if scopes:
        query["scope"] = " ".join(scopes)
    query["state"] = state
    return append_query_params(authorize_url, query)


class TokenExchanger(ABC):
    @abstractmethod
    async def exchange(self, code: str) -> ExchangeResult:
        """Trade an authorization code for access and refresh tokens."""
        raise NotImplementedError

    @abstractmethod
    async def refresh(self, refresh_token: str) -> ExchangeResult:
        raise NotImplementedError


class HttpTokenExchanger(TokenExchanger):
    """Talks to the provider's token endpoint as a confidential client.

    The client id and secret travel in an HTTP Basic ``Authorization`` header.
    When no ``client`` is given a short-lived ``httpx.AsyncClient`` is opened per
    request. Failures are never retried here.
    """

    def __init__(
        self,
        config: AuthorizationCodeConfig,
        *,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._client = client

    async def exchange(self, code: str) -> ExchangeResult:
        return await self._token_request(
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self._config.redirect_uri,
            }
        )

    async def refresh(self, refresh_token: str) -> ExchangeResult:
        return await self._token_request(
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            }
        )

    async def _token_request(self, payload: dict[str, str]) -> ExchangeResult:
        own_client = self._client is None
        http_client = self._client or httpx.AsyncClient(timeout=self._config.timeout)

        try:
            response = await http_client.post(
                self._config.token_url,
                data=payload,
                auth=(self._config.client_id, self._config.client_secret),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as error:
            LOGGER.warning(
                "Token request grant_type=%s failed with status %s",
                payload["grant_type"],
                error.response.status_code,
            )
            raise ProviderError(error.response.status_code, error.response.text) from error
        finally:
            if own_client:
                await http_client.aclose()

        try:
            body = response.json()
        except ValueError as error:
            raise TokenResponseError("Token response is not valid JSON.") from error

        return ExchangeResult.from_payload(body)
