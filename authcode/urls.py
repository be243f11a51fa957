from __future__ import annotations

import urllib.parse

LOOPBACK_HOSTS = {"localhost", "127.0.0.1", "::1"}


def is_allowed_redirect_uri(uri: str) -> bool:
    parsed = urllib.parse.urlparse(uri)
    if not parsed.netloc:
        return False
    if parsed.scheme == "https":
        return True
    return parsed.scheme == "http" and parsed.hostname in LOOPBACK_HOSTS


def append_query_params(url: str, params: dict[str, str]) -> str:
    parsed = urllib.parse.urlparse(url)
    existing = urllib.parse.parse_qs(parsed.query, keep_blank_values=True)
    for key, value in params.items():
        existing[key] = [value]

    # quote() keeps spaces as %20 so space-delimited values survive any decoder
    new_query = urllib.parse.urlencode(existing, doseq=True, quote_via=urllib.parse.quote)
    return urllib.parse.urlunparse(parsed._replace(query=new_query))
