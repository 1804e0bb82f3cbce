"""
utils/query.py
--------------

Query-string assembly for list and lookup endpoints.

Only whitelisted options are forwarded, in the order of the whitelist,
so unrelated keyword arguments (``idempotency_key``, ``fingerprint``)
never leak into URLs.  ``page`` and ``per_page`` are validated before
any request is sent.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Tuple
from urllib.parse import quote

PLATFORM_QUERY_PARAMS: Tuple[str, ...] = (
    "filter", "query", "page", "per_page", "full_dehydrate", "radius", "zip",
    "lat", "lon", "limit", "currency", "ticker_symbol",
)

USER_QUERY_PARAMS: Tuple[str, ...] = (
    "query", "page", "per_page", "type", "full_dehydrate", "ship", "force_refresh",
    "is_credit", "subnetid", "foreign_transaction", "amount",
)

YES_NO_PARAMS = ("full_dehydrate", "force_refresh")


def validate_pagination(options: Dict[str, Any]) -> None:
    """Raise ``ValueError`` unless ``page``/``per_page`` are None or ints >= 1."""
    for name in ("page", "per_page"):
        value = options.get(name)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValueError(f"{name} must be None or an integer >= 1, got {value!r}")


def yes_no(options: Dict[str, Any]) -> Dict[str, Any]:
    """Render boolean ``full_dehydrate``/``force_refresh`` as ``yes``/``no``."""
    out = dict(options)
    for name in YES_NO_PARAMS:
        if out.get(name) is True:
            out[name] = "yes"
        elif out.get(name) is False:
            out[name] = "no"
    return out


def build_query(path: str, allowed: Iterable[str], **options: Any) -> str:
    """Append the allowed, truthy options to ``path`` as a query string."""
    validate_pagination(options)
    options = yes_no(options)
    params = [
        f"{name}={quote(str(options[name]), safe=',|:')}"
        for name in allowed
        if options.get(name)
    ]
    if not params:
        return path
    separator = "&" if "?" in path else "?"
    return path + separator + "&".join(params)
