"""URL validation for scrape targets.

Accepts a raw string and returns the canonical absolute href, or raises a
classified validation error. Never touches the network.
"""

from urllib.parse import quote, urlsplit, urlunsplit

from pagescope.services.scrape_errors import InvalidSchemeError, InvalidUrlError

ALLOWED_SCHEMES = frozenset(("http", "https"))

_DEFAULT_PORTS = {"http": 80, "https": 443}

# Characters left untouched when re-quoting path/query/fragment
_SAFE_PATH_CHARS = "/%:@!$&'()*+,;=-._~"
_SAFE_QUERY_CHARS = _SAFE_PATH_CHARS + "?"


def validate_scrape_url(raw_url: str) -> str:
    """Validate and normalize a URL to scrape.

    Args:
        raw_url: User supplied URL string

    Returns:
        Canonical href (lower-cased scheme and host, default port dropped,
        ``/`` path for bare hosts)

    Raises:
        InvalidUrlError: If the value is not an absolute URL
        InvalidSchemeError: If the scheme is anything but http or https
    """
    candidate = (raw_url or "").strip()
    if not candidate:
        raise InvalidUrlError()

    try:
        parts = urlsplit(candidate)
    except ValueError as e:
        raise InvalidUrlError(str(e)) from e

    if not parts.scheme:
        raise InvalidUrlError()

    scheme = parts.scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise InvalidSchemeError()

    hostname = parts.hostname
    if not hostname or any(ch.isspace() for ch in parts.netloc):
        raise InvalidUrlError()

    try:
        port = parts.port
    except ValueError as e:
        raise InvalidUrlError(str(e)) from e

    netloc = hostname if ":" not in hostname else f"[{hostname}]"
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        netloc = f"{netloc}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    try:
        path = quote(parts.path or "/", safe=_SAFE_PATH_CHARS)
        query = quote(parts.query, safe=_SAFE_QUERY_CHARS)
        fragment = quote(parts.fragment, safe=_SAFE_QUERY_CHARS)
    except UnicodeEncodeError as e:
        # Lone surrogates have no UTF-8 form to percent-encode
        raise InvalidUrlError(str(e)) from e

    return urlunsplit((scheme, netloc, path, query, fragment))
