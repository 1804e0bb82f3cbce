"""
schemas/auth.py
----------------

Models for OAuth responses and for the ambiguous node creation result.

Creating a node through bank logins either returns the created nodes
or, when the bank asks a security question, a bare access token to be
sent back through ``ach_mfa``.  :func:`parse_node_creation` turns such
a response into the matching variant instead of guessing.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field

from synapsefi.schemas.nodes import Nodes


class OAuthToken(BaseModel):
    oauth_key: str = ""
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "OAuthToken":
        return cls(
            oauth_key=response.get("oauth_key") or "",
            expires_in=response.get("expires_in"),
            refresh_token=response.get("refresh_token"),
            payload=response,
        )


class AccessToken(BaseModel):
    access_token: Optional[str] = None
    mfa: Optional[Dict[str, Any]] = None
    payload: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_response(cls, response: Dict[str, Any]) -> "AccessToken":
        mfa = response.get("mfa") if isinstance(response.get("mfa"), dict) else None
        token = response.get("access_token") or (mfa or {}).get("access_token")
        return cls(access_token=token, mfa=mfa, payload=response)


NodeCreation = Union[Nodes, AccessToken]


def parse_node_creation(response: Dict[str, Any], **options: Any) -> NodeCreation:
    if "nodes" in response:
        return Nodes.from_response(response, **options)
    return AccessToken.from_response(response)
