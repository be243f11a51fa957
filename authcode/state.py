"""Encoding of the opaque ``state`` value echoed back by the identity provider."""

from __future__ import annotations

import hashlib
import secrets
import urllib.parse

from authcode.constants import STATE_DELIMITER
from authcode.errors import MalformedStateError


def generate_nonce() -> str:
    return secrets.token_hex(16)


def hash_user_id(user_id: str) -> str:
    """Derive the fixed-format user identifier used to key authorization records."""
    return hashlib.sha256(user_id.encode("utf-8")).hexdigest().upper()


# Components are hashes and hex nonces; anything that needs escaping is refused
# so a decoded token always equals what was encoded.
RESERVED_CHARACTERS = (STATE_DELIMITER, "%")


def _check_component(part: str) -> None:
    if not part:
        raise MalformedStateError("State components must not be empty.")
    for char in RESERVED_CHARACTERS:
        if char in part:
            raise MalformedStateError(f"State components must not contain {char!r}.")


def encode_state(user_identifier: str, nonce: str) -> str:
    _check_component(user_identifier)
    _check_component(nonce)
    return f"{user_identifier}{STATE_DELIMITER}{nonce}"


def decode_state(token: str) -> tuple[str, str]:
    # Accept both the raw query value and one that is still percent-encoded.
    decoded = urllib.parse.unquote(token or "")
    parts = decoded.split(STATE_DELIMITER, 1)
    if len(parts) != 2:
        raise MalformedStateError()
    user_identifier, nonce = parts
    _check_component(user_identifier)
    _check_component(nonce)
    return user_identifier, nonce
