"""
Authorization Code grant orchestration.

``request_authorization_url`` starts a flow for a user identifier and
``request_tokens`` completes it from the provider's callback. The stored
``state`` acts as an optimistic-concurrency token: a newer flow for the same
identifier replaces the nonce, so the callback of the older flow is rejected
(last writer wins).
"""

from __future__ import annotations

import dataclasses
import hmac
from collections.abc import Callable

from authcode.config import AuthorizationCodeConfig
from authcode.constants import LOGGER
from authcode.errors import MissingRefreshTokenError, NotFoundError, StateMismatchError
from authcode.models import BearerAccessToken, PendingAuthorization
from authcode.pending_store import PendingAuthorizationStore
from authcode.spotify_oauth2 import (
    ExchangeResult,
    HttpTokenExchanger,
    TokenExchanger,
    build_authorization_url,
)
from authcode.state import decode_state, encode_state, generate_nonce
from authcode.token_store import BearerTokenStore


def _state_matches(stored_state: str | None, nonce: str) -> bool:
    if stored_state is None:
        return False
    return hmac.compare_digest(stored_state.encode(), nonce.encode())


class AuthorizationCodeService:
    def __init__(
        self,
        *,
        config: AuthorizationCodeConfig,
        store: PendingAuthorizationStore,
        exchanger: TokenExchanger | None = None,
        bearer_store: BearerTokenStore | None = None,
        scopes: list[str] | None = None,
        nonce_fn: Callable[[], str] = generate_nonce,
    ) -> None:
        config.validate()
        self.config = config
        self.store = store
        self.exchanger = exchanger or HttpTokenExchanger(config)
        self.bearer_store = bearer_store
        self.scopes = list(scopes) if scopes is not None else list(config.scopes)
        self._nonce_fn = nonce_fn

    # -- authorization request -------------------------------------------------

    async def request_authorization_url(
        self,
        user_identifier: str,
        scopes: list[str] | None = None,
    ) -> str:
        nonce = self._nonce_fn()
        # Rejects unusable identifiers before anything is written.
        state = encode_state(user_identifier, nonce)
        record = await self.store.create(user_identifier, nonce)

        if record.state != nonce:
            LOGGER.warning(
                "Pending authorization for user=%s was created with an unexpected state",
                user_identifier,
            )
            raise StateMismatchError(record.state)

        url = build_authorization_url(
            client_id=self.config.client_id,
            redirect_uri=self.config.redirect_uri,
            scopes=list(scopes) if scopes is not None else self.scopes,
            state=state,
            authorize_url=self.config.authorize_url,
        )
        record.auth_url = url
        await self.store.insert_or_replace(record)

        LOGGER.info("Issued authorization URL for user=%s", user_identifier)
        return url

    # -- callback --------------------------------------------------------------

    async def request_tokens(self, state: str, code: str) -> ExchangeResult:
        user_identifier, nonce = decode_state(state)
        return await self.request_tokens_for_user(user_identifier, nonce, code)

    async def request_tokens_for_user(
        self,
        user_identifier: str,
        nonce: str,
        code: str,
    ) -> ExchangeResult:
        """Complete a flow whose callback state has already been split."""
        record = await self._get_record(user_identifier)

        if not _state_matches(record.state, nonce):
            LOGGER.warning("Rejected callback for user=%s: state mismatch", user_identifier)
            raise StateMismatchError(record.state)

        result = await self.exchanger.exchange(code)

        # Two writes on the same object: the nonce is spent first, then tokens land.
        record.invalidate_state()
        await self.store.update(record)
        record.apply_tokens(result)
        await self.store.update(record)

        await self._publish_bearer_token(record)
        LOGGER.info(
            "Authorization completed for user=%s scope=%s",
            user_identifier,
            record.scope,
        )
        return dataclasses.replace(result, auth_url=record.auth_url or "")

    # -- tokens ----------------------------------------------------------------

    async def refresh_tokens(self, user_identifier: str) -> ExchangeResult:
        record = await self._get_record(user_identifier)
        if not record.refresh_token:
            raise MissingRefreshTokenError(user_identifier)

        result = await self.exchanger.refresh(record.refresh_token)
        record.apply_tokens(result)
        await self.store.update(record)

        await self._publish_bearer_token(record)
        LOGGER.info("Refreshed access token for user=%s", user_identifier)
        return dataclasses.replace(
            result,
            refresh_token=record.refresh_token,
            auth_url=record.auth_url or "",
        )

    async def get_access_token(self, user_identifier: str, *, leeway: float = 60) -> str:
        record = await self._get_record(user_identifier)
        if not record.is_authorized:
            raise NotFoundError(user_identifier)

        if record.is_expired(leeway):
            refreshed = await self.refresh_tokens(user_identifier)
            return refreshed.access_token
        return record.access_token

    # -- helpers ---------------------------------------------------------------

    async def _get_record(self, user_identifier: str) -> PendingAuthorization:
        record = await self.store.get(user_identifier)
        if record is None:
            raise NotFoundError(user_identifier)
        return record

    async def _publish_bearer_token(self, record: PendingAuthorization) -> None:
        if self.bearer_store is None:
            return
        await self.bearer_store.insert_or_replace(
            record.user_identifier,
            BearerAccessToken.from_record(record),
        )
