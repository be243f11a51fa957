from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from authcode.config import AuthorizationCodeConfig
from authcode.constants import (
    DEFAULT_TIMEOUT_SECONDS,
    LOGGER,
    SPOTIFY_AUTHORIZE_URL,
    SPOTIFY_TOKEN_URL,
)
from authcode.errors import ConfigurationError

REQUIRED_ENV_VARS = (
    "SPOTIFY_CLIENT_ID",
    "SPOTIFY_CLIENT_SECRET",
    "SPOTIFY_REDIRECT_URI",
)


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_scopes_env(key: str) -> list[str]:
    raw = os.getenv(key, "")
    scopes: list[str] = []
    for item in raw.replace(",", " ").split():
        if item not in scopes:
            scopes.append(item)
    return scopes


def get_env_float(key: str, default: float) -> float:
    raw = os.getenv(key, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number.")


def load_env() -> None:
    env_path = Path(__file__).resolve().parent.parent / ".env"
    if not env_path.exists():
        return
    load_dotenv(env_path, override=False)


def validate_env() -> None:
    missing = [key for key in REQUIRED_ENV_VARS if not os.getenv(key, "").strip()]
    if missing:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing)}"
        )


def load_config() -> AuthorizationCodeConfig:
    config = AuthorizationCodeConfig(
        client_id=os.getenv("SPOTIFY_CLIENT_ID", "").strip(),
        client_secret=os.getenv("SPOTIFY_CLIENT_SECRET", "").strip(),
        redirect_uri=os.getenv("SPOTIFY_REDIRECT_URI", "").strip(),
        scopes=parse_scopes_env("SPOTIFY_SCOPES"),
        authorize_url=os.getenv("SPOTIFY_AUTHORIZE_URL", SPOTIFY_AUTHORIZE_URL).strip(),
        token_url=os.getenv("SPOTIFY_TOKEN_URL", SPOTIFY_TOKEN_URL).strip(),
        timeout=get_env_float("SPOTIFY_HTTP_TIMEOUT", DEFAULT_TIMEOUT_SECONDS),
    )
    if not config.scopes:
        LOGGER.warning("SPOTIFY_SCOPES is empty; authorization URLs will request no scopes.")
    return config


def setup_logging() -> bool:
    debug_enabled = is_truthy(os.getenv("AUTHCODE_DEBUG", "1"))
    if debug_enabled:
        logging.basicConfig(level=logging.INFO)
        LOGGER.setLevel(logging.INFO)
    return debug_enabled
