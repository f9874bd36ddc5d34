"""Client-side URL validation.

Purely syntactic: no DNS lookup and no reachability check is performed.
Parsing is delegated to pydantic's ``HttpUrl``, whose WHATWG URL parser is the
same one browsers use, so "parses as an absolute URL" means what it means in
a browser's address bar.
"""

from __future__ import annotations

from pydantic import HttpUrl, TypeAdapter, ValidationError

INVALID_URL_MESSAGE = "Please enter a valid webpage URL."

_ALLOWED_SCHEMES = frozenset({"http", "https"})

_http_url = TypeAdapter(HttpUrl)


def is_analyzable_url(candidate: str) -> bool:
    """Return ``True`` if *candidate* is an absolute ``http``/``https`` URL.

    Relative references, bare hostnames (``example.com``), other schemes
    (``ftp:``, ``javascript:``) and anything that fails to parse are rejected.
    """
    if not candidate:
        return False
    try:
        parsed = _http_url.validate_python(candidate)
    except ValidationError:
        return False
    return parsed.scheme in _ALLOWED_SCHEMES and bool(parsed.host)
