"""
core/context.py
----------------

Session state shared by every request issued through one client.

``SessionConfig`` holds the gateway credentials, the user fingerprint
and IP address and the current OAuth key.  It is owned by a single
:class:`~synapsefi.clients.http_client.HTTPClient` and mutated in place
when headers are updated or a user authenticates, so every later
request picks up the new values.  There is no locking: callers that
share one client between threads must serialise access themselves or
create one client per thread.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SessionConfig(BaseModel):
    client_id: str
    client_secret: str
    fingerprint: Optional[str] = None
    ip_address: Optional[str] = None
    oauth_key: str = ""
    expires_in: Optional[int] = None
    idempotency_key: Optional[str] = None

    def update(
        self,
        *,
        oauth_key: Optional[str] = None,
        fingerprint: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        ip_address: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> None:
        """Overwrite the given fields; ``None`` leaves a field untouched."""
        if oauth_key is not None:
            self.oauth_key = oauth_key
        if fingerprint is not None:
            self.fingerprint = fingerprint
        if client_id is not None:
            self.client_id = client_id
        if client_secret is not None:
            self.client_secret = client_secret
        if ip_address is not None:
            self.ip_address = ip_address
        if idempotency_key is not None:
            self.idempotency_key = idempotency_key

    def replace_token(self, oauth_key: str, expires_in: Optional[int] = None) -> None:
        """Install a freshly issued OAuth key and its lifetime."""
        self.oauth_key = oauth_key or ""
        self.expires_in = expires_in


class RequestDescriptor(BaseModel):
    """One outbound call, built per request and discarded afterwards."""

    method: str
    path: str
    body: Any = None
    headers: Dict[str, str] = Field(default_factory=dict)
    stream: bool = False
    idempotency_key: Optional[str] = None
    params: Dict[str, Any] = Field(default_factory=dict)
