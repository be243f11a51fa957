import urllib.parse

import pytest

from authcode.constants import SPOTIFY_AUTHORIZE_URL
from authcode.errors import MalformedStateError, StateMismatchError
from authcode.state import decode_state
from tests.authcode_helpers import (
    NONCE,
    REDIRECT_URI,
    USER_HASH,
    WrongStateStore,
    _build_config,
    _build_service,
)


def _query(url: str) -> dict[str, list[str]]:
    return urllib.parse.parse_qs(urllib.parse.urlparse(url).query)


@pytest.mark.asyncio
async def test_url_contains_user_hash() -> None:
    service, _, _, _ = _build_service()

    url = await service.request_authorization_url(USER_HASH)

    assert url.startswith(SPOTIFY_AUTHORIZE_URL)
    assert USER_HASH in url


@pytest.mark.asyncio
async def test_url_contains_required_params() -> None:
    service, _, _, _ = _build_service()

    query = _query(await service.request_authorization_url(USER_HASH))

    assert query["client_id"] == ["client-123"]
    assert query["response_type"] == ["code"]
    assert query["redirect_uri"] == [REDIRECT_URI]
    assert "scope" not in query


@pytest.mark.asyncio
async def test_state_decodes_to_user_and_created_nonce() -> None:
    service, store, _, _ = _build_service(nonce_fn=None)

    url = await service.request_authorization_url(USER_HASH)

    assert decode_state(_query(url)["state"][0]) == (USER_HASH, NONCE)
    assert store.created == [(USER_HASH, NONCE)]


@pytest.mark.asyncio
async def test_state_is_percent_encoded() -> None:
    service, _, _, _ = _build_service(nonce_fn=lambda: "N1")

    url = await service.request_authorization_url("U1")

    assert "state=U1%7CN1" in url


@pytest.mark.asyncio
async def test_scopes_are_space_delimited_in_order() -> None:
    scopes = [
        "user-modify-playback-state",
        "user-read-playback-state",
        "playlist-read-collaborative",
        "playlist-modify-public",
        "playlist-modify-private",
        "playlist-read-private",
    ]
    service, _, _, _ = _build_service(scopes=scopes)

    query = _query(await service.request_authorization_url(USER_HASH))

    assert query["scope"] == [" ".join(scopes)]


@pytest.mark.asyncio
async def test_per_call_scopes_override_service_scopes() -> None:
    service, _, _, _ = _build_service(scopes=["user-read-email"])

    url = await service.request_authorization_url(USER_HASH, ["a", "b", "c"])

    assert _query(url)["scope"] == ["a b c"]
    assert "scope=a%20b%20c" in url


@pytest.mark.asyncio
async def test_config_scopes_are_the_default() -> None:
    config = _build_config(scopes=["user-read-private"])
    service, _, _, _ = _build_service(config=config)

    url = await service.request_authorization_url(USER_HASH)

    assert _query(url)["scope"] == ["user-read-private"]


@pytest.mark.asyncio
async def test_valid_record_is_committed_once() -> None:
    service, store, _, _ = _build_service()

    url = await service.request_authorization_url(USER_HASH)

    assert len(store.replaced) == 1
    committed = store.replaced[0]
    assert committed is await store.get(USER_HASH)
    assert committed.state == NONCE
    assert committed.auth_url == url


@pytest.mark.asyncio
async def test_created_state_mismatch_raises_with_stored_value() -> None:
    store = WrongStateStore()
    service, _, _, _ = _build_service(store=store)

    with pytest.raises(StateMismatchError) as excinfo:
        await service.request_authorization_url(USER_HASH)

    assert excinfo.value.stored_state == "Not a valid state value"
    assert "Not a valid state value" in str(excinfo.value)


@pytest.mark.asyncio
async def test_created_state_mismatch_never_commits() -> None:
    store = WrongStateStore(stored_state=None)
    service, _, _, _ = _build_service(store=store)

    with pytest.raises(StateMismatchError):
        await service.request_authorization_url(USER_HASH)

    assert store.replaced == []


@pytest.mark.asyncio
async def test_second_request_replaces_nonce() -> None:
    nonces = iter(["nonce-1", "nonce-2"])
    service, store, _, _ = _build_service(nonce_fn=lambda: next(nonces))

    await service.request_authorization_url(USER_HASH)
    await service.request_authorization_url(USER_HASH)

    assert (await store.get(USER_HASH)).state == "nonce-2"


@pytest.mark.asyncio
async def test_custom_authorize_url_keeps_existing_query() -> None:
    config = _build_config(authorize_url="https://accounts.example.com/authorize?show_dialog=true")
    service, _, _, _ = _build_service(config=config)

    url = await service.request_authorization_url(USER_HASH)

    assert url.startswith("https://accounts.example.com/authorize?")
    assert _query(url)["show_dialog"] == ["true"]


@pytest.mark.asyncio
@pytest.mark.parametrize("user_identifier", ["", "U|1", "a%41b"])
async def test_unusable_identifier_is_rejected_before_create(user_identifier: str) -> None:
    service, store, _, _ = _build_service()

    with pytest.raises(MalformedStateError):
        await service.request_authorization_url(user_identifier)

    assert store.created == []
    assert store.replaced == []
    assert await store.get(user_identifier) is None


@pytest.mark.asyncio
async def test_empty_per_call_scopes_omit_scope() -> None:
    service, _, _, _ = _build_service(scopes=["user-read-email"])

    url = await service.request_authorization_url(USER_HASH, [])

    assert "scope" not in _query(url)
