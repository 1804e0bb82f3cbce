"""
client.py
----------

Platform level entry point of the SynapseFI client.

``Client`` selects the sandbox or production base URL, owns the
:class:`~synapsefi.clients.http_client.HTTPClient` and exposes the
platform endpoints (users, subscriptions, institutions, market data,
verification helpers).  User scoped operations live on the
:class:`~synapsefi.services.user_service.User` objects it returns.

Usage example::

    from synapsefi import Client

    client = Client(client_id="...", client_secret="...",
                    ip_address="127.0.0.1", fingerprint="...")
    user = client.get_user(user_id="5bd9e7b3389f2400adb012ae")
    user.authenticate()
    nodes = user.get_all_user_nodes(page=1, per_page=20)
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from synapsefi.clients.http_client import HTTPClient
from synapsefi.core.auth import get_base_url
from synapsefi.core.config import get_settings
from synapsefi.logging_config import configure_logging, log_call, release_logging
from synapsefi.schemas.nodes import Nodes
from synapsefi.schemas.subscriptions import Subscription, Subscriptions
from synapsefi.schemas.transactions import Transactions
from synapsefi.services.user_service import User, Users
from synapsefi.utils.query import PLATFORM_QUERY_PARAMS, USER_QUERY_PARAMS, build_query


class Client:
    """Client bound to one set of platform credentials.

    :param client_id: platform client id
    :param client_secret: platform client secret
    :param ip_address: IP address of the end user
    :param fingerprint: hashed device fingerprint, unique per user or static
    :param development_mode: use the sandbox API (default ``True``)
    :param raise_for_202: treat ``202`` envelopes as failures
    :param logging: log requests to stdout, or to ``log_to`` when given
    :param log_to: file path for logs (only used when ``logging`` is true)
    :param transport: optional ``httpx`` transport, mostly for tests
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        ip_address: str,
        fingerprint: Optional[str] = None,
        development_mode: bool = True,
        raise_for_202: Optional[bool] = None,
        logging: bool = False,
        log_to: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        settings = get_settings()
        self._log_handler = configure_logging(log_to, settings.log_level.upper()) if logging else None
        self.client_id = client_id
        self.development_mode = development_mode
        self.http_client = HTTPClient(
            base_url=get_base_url(development_mode),
            client_id=client_id,
            client_secret=client_secret,
            fingerprint=fingerprint,
            ip_address=ip_address,
            raise_for_202=settings.raise_for_202 if raise_for_202 is None else raise_for_202,
            transport=transport,
        )

    @classmethod
    def from_env(cls, **overrides: Any) -> "Client":
        """Build a client from ``SYNAPSE_*`` environment variables."""
        settings = get_settings()
        kwargs: Dict[str, Any] = {
            "client_id": settings.client_id,
            "client_secret": settings.client_secret,
            "ip_address": settings.ip_address,
            "fingerprint": settings.fingerprint,
            "development_mode": settings.development_mode,
            "raise_for_202": settings.raise_for_202,
        }
        kwargs.update(overrides)
        missing = [name for name in ("client_id", "client_secret", "ip_address") if not kwargs.get(name)]
        if missing:
            raise ValueError(f"missing configuration: {', '.join('SYNAPSE_' + m.upper() for m in missing)}")
        return cls(**kwargs)

    @property
    def client(self) -> HTTPClient:
        return self.http_client

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.http_client.close()
        if self._log_handler is not None:
            release_logging(self._log_handler)
            self._log_handler = None

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    @log_call
    def create_user(
        self,
        payload: Dict[str, Any],
        ip_address: str,
        fingerprint: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> User:
        self.http_client.update_headers(ip_address=ip_address, fingerprint=fingerprint)
        response = self.http_client.post("/users", payload, idempotency_key=idempotency_key)
        return User.from_response(response, client=self.http_client)

    @log_call
    def get_user(
        self,
        user_id: str,
        ip_address: Optional[str] = None,
        fingerprint: Optional[str] = None,
        full_dehydrate: Optional[bool] = None,
    ) -> User:
        """Fetch a user; ``full_dehydrate`` returns all of its KYC data."""
        if not isinstance(user_id, str):
            raise TypeError("user_id must be a str")
        self.http_client.update_headers(ip_address=ip_address, fingerprint=fingerprint)
        path = build_query(f"/users/{user_id}", USER_QUERY_PARAMS, full_dehydrate=full_dehydrate)
        response = self.http_client.get(path)
        return User.from_response(response, client=self.http_client, full_dehydrate=full_dehydrate)

    def get_users(self, **options: Any) -> Users:
        """List platform users, optionally filtered by ``query`` (name or email)."""
        return Users.from_response(self._get("/users", **options), client=self.http_client, **options)

    # ------------------------------------------------------------------
    # Platform wide listings
    # ------------------------------------------------------------------

    def get_all_transaction(self, **options: Any) -> Transactions:
        return Transactions.from_response(self._get("/trans", **options))

    def get_all_nodes(self, **options: Any) -> Nodes:
        return Nodes.from_response(self._get("/nodes", **options))

    def get_all_institutions(self, **options: Any) -> Dict[str, Any]:
        return self._get("/institutions", **options)

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------

    def create_subscriptions(self, scope: Dict[str, Any], idempotency_key: Optional[str] = None) -> Subscription:
        response = self.http_client.post("/subscriptions", scope, idempotency_key=idempotency_key)
        return Subscription.from_response(response)

    def get_all_subscriptions(self, **options: Any) -> Subscriptions:
        return Subscriptions.from_response(self._get("/subscriptions", **options))

    def get_subscription(self, subscription_id: str) -> Subscription:
        return Subscription.from_response(self.http_client.get(f"/subscriptions/{subscription_id}"))

    def update_subscriptions(self, subscription_id: str, body: Dict[str, Any]) -> Subscription:
        return Subscription.from_response(self.http_client.patch(f"/subscriptions/{subscription_id}", body))

    def webhook_logs(self, **options: Any) -> Dict[str, Any]:
        return self._get("/subscriptions/logs", **options)

    # ------------------------------------------------------------------
    # Misc
    # ------------------------------------------------------------------

    def issue_public_key(self, scope: str, user_id: Optional[str] = None) -> Dict[str, Any]:
        """Issue a public key for the given comma separated ``scope``."""
        params = {"issue_public_key": "YES", "scope": scope}
        if user_id:
            params["user_id"] = user_id
        return self.http_client.get("/client", params=params).get("public_key_obj")

    def locate_atm(self, **options: Any) -> Dict[str, Any]:
        return self._get("/nodes/atms", **options)

    def get_crypto_quotes(self) -> Dict[str, Any]:
        return self._get("/nodes/crypto-quotes")

    def get_crypto_market_data(self, **options: Any) -> Dict[str, Any]:
        return self._get("/nodes/crypto-market-watch", **options)

    def get_trade_market_data(self, **options: Any) -> Dict[str, Any]:
        return self._get("/nodes/trade-market-watch", **options)

    def routing_number_verification(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.http_client.post("/routing-number-verification", payload)

    def address_verification(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.http_client.post("/address-verification", payload)

    def _get(self, path: str, **options: Any) -> Dict[str, Any]:
        return self.http_client.get(build_query(path, PLATFORM_QUERY_PARAMS, **options))
