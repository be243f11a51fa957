from __future__ import annotations

import argparse
import asyncio
import os
import sys
import time
import urllib.parse

import httpx

from authcode.config import AuthorizationCodeConfig
from authcode.constants import DEFAULT_PENDING_STORE_PATH, DEFAULT_TOKEN_STORE_PATH, LOGGER
from authcode.env import load_config, load_env, setup_logging, validate_env
from authcode.errors import AuthCodeError, AuthorizationRejectedError
from authcode.http import build_http_client
from authcode.pending_store import FilePendingAuthorizationStore
from authcode.service import AuthorizationCodeService
from authcode.spotify_oauth2 import HttpTokenExchanger
from authcode.state import hash_user_id
from authcode.token_store import FileBearerTokenStore


def create_service(
    config: AuthorizationCodeConfig,
    client: httpx.AsyncClient,
) -> AuthorizationCodeService:
    store = FilePendingAuthorizationStore(
        os.getenv("AUTHCODE_PENDING_STORE_PATH", DEFAULT_PENDING_STORE_PATH)
    )
    bearer_store = FileBearerTokenStore(
        os.getenv("AUTHCODE_TOKEN_STORE_PATH", DEFAULT_TOKEN_STORE_PATH)
    )
    return AuthorizationCodeService(
        config=config,
        store=store,
        exchanger=HttpTokenExchanger(config, client=client),
        bearer_store=bearer_store,
    )


def parse_callback_url(url: str) -> tuple[str, str]:
    query = urllib.parse.parse_qs(urllib.parse.urlparse(url).query)
    if "error" in query:
        raise AuthorizationRejectedError(
            f"Provider returned an authorization error: {query['error'][0]}"
        )
    state = query.get("state", [""])[0]
    code = query.get("code", [""])[0]
    if not state or not code:
        raise AuthorizationRejectedError("Callback URL is missing code or state.")
    return state, code


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="spotify-authcode",
        description="Run the OAuth2 authorization code flow against Spotify accounts.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    authorize = commands.add_parser("authorize", help="Print an authorization URL for a user.")
    authorize.add_argument("user", help="User id; hashed before it is stored.")
    authorize.add_argument(
        "--scope",
        action="append",
        default=[],
        help="Scope to request (repeatable). Defaults to SPOTIFY_SCOPES.",
    )

    callback = commands.add_parser("callback", help="Exchange a callback's state and code.")
    callback.add_argument("state")
    callback.add_argument("code")

    callback_url = commands.add_parser(
        "callback-url", help="Exchange the code from a full redirect URL."
    )
    callback_url.add_argument("url")

    refresh = commands.add_parser("refresh", help="Refresh a user's access token.")
    refresh.add_argument("user")

    token = commands.add_parser("token", help="Print a valid access token for a user.")
    token.add_argument("user")
    return parser


async def run(args: argparse.Namespace, *, debug: bool = False) -> int:
    validate_env()
    config = load_config()

    async with build_http_client(timeout=config.timeout, debug=debug) as client:
        service = create_service(config, client)

        if args.command == "authorize":
            url = await service.request_authorization_url(
                hash_user_id(args.user),
                args.scope or None,
            )
            print(url)
            return 0

        if args.command in {"callback", "callback-url"}:
            if args.command == "callback-url":
                state, code = parse_callback_url(args.url)
            else:
                state, code = args.state, args.code
            tokens = await service.request_tokens(state, code)
            print(
                f"Authorized. scope={tokens.scope!r} "
                f"expires_in={int(tokens.expires_at - time.time())}s"
            )
            return 0

        if args.command == "refresh":
            tokens = await service.refresh_tokens(hash_user_id(args.user))
            print(f"Refreshed. expires_in={int(tokens.expires_at - time.time())}s")
            return 0

        print(await service.get_access_token(hash_user_id(args.user)))
        return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_env()
    debug_enabled = setup_logging()

    try:
        return asyncio.run(run(args, debug=debug_enabled))
    except AuthCodeError as error:
        LOGGER.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {error}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
