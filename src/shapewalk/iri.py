from __future__ import annotations

from typing import Mapping
from urllib.parse import urlparse


def is_http_url(value: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    if not value or not isinstance(value, str):
        return False
    try:
        parsed = urlparse(value.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def to_url(value: str, prefixes: Mapping[str, str]) -> str | None:
    """
    Resolve an owl:imports object to a fetchable document URL.

    Absolute http(s) URLs are returned as-is. Otherwise the value is treated
    as a prefixed name (``ex:ontology``) and expanded with the known prefixes.
    Anything that does not end up as an http(s) URL yields None.
    """
    if is_http_url(value):
        return value

    parts = (value or "").split(":")
    if len(parts) != 2:
        return None

    namespace = prefixes.get(parts[0])
    if not namespace:
        return None

    expanded = namespace + parts[1]
    return expanded if is_http_url(expanded) else None
