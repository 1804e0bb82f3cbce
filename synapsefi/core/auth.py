"""
core/auth.py
-------------

Helpers for building authenticated requests to SynapseFI.

These helpers centralise the base URL selection and the ``X-SP-*``
headers every request carries.  The identity header pairs the current
OAuth key with the user fingerprint, the gateway header pairs the
client id with the client secret.  Both are rebuilt from the session
on every call, so a refreshed OAuth key is picked up immediately.
"""

from __future__ import annotations

from typing import Dict, Mapping, Optional

from synapsefi.core.config import get_settings
from synapsefi.core.context import SessionConfig


def get_base_url(development_mode: bool = True) -> str:
    """Return the API base URL (sandbox or production), without trailing slash."""
    return get_settings().base_url_for(development_mode).rstrip("/")


def oauth_path(user_id: str) -> str:
    return f"/oauth/{user_id}"


def build_headers(
    session: SessionConfig,
    *,
    idempotency_key: Optional[str] = None,
    stream: bool = False,
    headers: Optional[Mapping[str, str]] = None,
) -> Dict[str, str]:
    """Create the header mapping for one request.

    :param session: current session state; it is only read
    :param idempotency_key: per-call key, takes precedence over the session key
    :param stream: announce a chunked body instead of a fixed length
    :param headers: extra headers merged last
    :return: a dictionary of headers suitable for use with httpx
    """
    built: Dict[str, str] = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "X-SP-USER": f"{session.oauth_key or ''}|{session.fingerprint or ''}",
        "X-SP-GATEWAY": f"{session.client_id}|{session.client_secret}",
        "X-SP-USER-IP": session.ip_address or "",
    }
    if headers:
        built.update(headers)

    key = idempotency_key or session.idempotency_key
    if key:
        built["X-SP-IDEMPOTENCY-KEY"] = key
    if stream:
        built["Transfer-Encoding"] = "chunked"
    return built
