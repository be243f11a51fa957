from __future__ import annotations

import logging

LOGGER = logging.getLogger("authcode")
APP_VERSION = "0.1.0"

SPOTIFY_AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
SPOTIFY_TOKEN_URL = "https://accounts.spotify.com/api/token"

STATE_DELIMITER = "|"
DEFAULT_TIMEOUT_SECONDS = 30.0
DEFAULT_PENDING_STORE_PATH = ".authcode/pending.json"
DEFAULT_TOKEN_STORE_PATH = ".authcode/tokens.json"
