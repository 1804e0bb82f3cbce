"""
services/user_service.py
------------------------

User scoped operations.

A :class:`User` wraps one ``/users/{user_id}`` resource and the shared
:class:`~synapsefi.clients.http_client.HTTPClient`.  Every request made
through it goes through :class:`~synapsefi.core.retry.AuthRetry`: when
the OAuth key has expired the user is re-authenticated with its refresh
token and the request is sent once more.  The OAuth requests themselves
(``authenticate``, ``select_2fa_device``, ``confirm_2fa_pin``) are sent
directly to avoid recursion.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

from synapsefi.clients.http_client import HTTPClient
from synapsefi.core.auth import oauth_path
from synapsefi.core.retry import AuthRetry
from synapsefi.logging_config import log_call
from synapsefi.schemas.auth import NodeCreation, OAuthToken, parse_node_creation
from synapsefi.schemas.nodes import Node, Nodes
from synapsefi.schemas.subnets import Subnet, Subnets
from synapsefi.schemas.transactions import Transaction, Transactions
from synapsefi.utils.query import USER_QUERY_PARAMS, build_query, yes_no


class User:
    """A platform user and the requests that act on its behalf."""

    def __init__(
        self,
        user_id: str,
        refresh_token: Optional[str],
        client: HTTPClient,
        payload: Optional[Dict[str, Any]] = None,
        full_dehydrate: bool = False,
    ) -> None:
        self.user_id = user_id
        self.refresh_token = refresh_token
        self.client = client
        self.payload = payload or {}
        self.full_dehydrate = full_dehydrate
        self.oauth_key: Optional[str] = None
        self.expires_in: Optional[int] = None
        self._base_path = f"/users/{user_id}"
        self._retry = AuthRetry(self.authenticate)

    @classmethod
    def from_response(cls, response: Dict[str, Any], client: HTTPClient, **options: Any) -> "User":
        return cls(
            user_id=response.get("_id"),
            refresh_token=response.get("refresh_token"),
            client=client,
            payload=response,
            full_dehydrate=options.get("full_dehydrate") in (True, "yes"),
        )

    def __repr__(self) -> str:
        return f"User(user_id={self.user_id!r})"

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    @property
    def oauth_path(self) -> str:
        return oauth_path(self.user_id)

    def _oauth_payload(self, scope: Optional[List[str]] = None, **fields: Any) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"refresh_token": self.refresh_token, **fields}
        if scope:
            payload["scope"] = scope
        return payload

    def _store_token(self, response: Dict[str, Any]) -> None:
        token = OAuthToken.from_response(response)
        self.oauth_key = token.oauth_key
        self.expires_in = token.expires_in
        if token.refresh_token:
            self.refresh_token = token.refresh_token

    def authenticate(self, scope: Optional[List[str]] = None, idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        """Exchange the refresh token for a new OAuth key.

        The key and its lifetime replace the ones in the client session.
        """
        response = self.client.authenticate(
            self._oauth_payload(scope),
            self.oauth_path,
            idempotency_key=idempotency_key,
        )
        self._store_token(response)
        return response

    def select_2fa_device(self, device: str, idempotency_key: Optional[str] = None) -> Dict[str, Any]:
        """Ask for a validation pin to be sent to ``device``.

        Used when registering a new fingerprint.  The OAuth key is not
        changed by this step.
        """
        return self.client.post(
            self.oauth_path,
            self._oauth_payload(phone_number=device),
            idempotency_key=idempotency_key,
        )

    def confirm_2fa_pin(
        self,
        pin: str,
        scope: Optional[List[str]] = None,
        idempotency_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Confirm the validation pin; on success the new OAuth key is installed."""
        response = self.client.authenticate(
            self._oauth_payload(scope, validation_pin=pin),
            self.oauth_path,
            idempotency_key=idempotency_key,
        )
        self._store_token(response)
        return response

    # ------------------------------------------------------------------
    # User
    # ------------------------------------------------------------------

    @log_call
    def user_update(self, payload: Dict[str, Any], **options: Any) -> "User":
        response = self._patch("", payload, **options)
        return User.from_response(response, client=self.client)

    def create_ubo(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Upload an Ultimate Beneficial Ownership document."""
        return self._patch("/ubo", payload)

    def get_user_statement(self, **options: Any) -> Dict[str, Any]:
        return self._get("/statements", **options)

    def get_user_transactions(self, **options: Any) -> Transactions:
        return Transactions.from_response(self._get("/trans", **options))

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def get_user_node(self, node_id: str, **options: Any) -> Node:
        options = yes_no(options)
        response = self._get(f"/nodes/{node_id}", **options)
        return Node.from_response(response, **options)

    def get_all_user_nodes(self, **options: Any) -> Nodes:
        response = self._get("/nodes", **options)
        return Nodes.from_response(response, **yes_no(options))

    @log_call
    def create_node(self, payload: Dict[str, Any], **options: Any) -> NodeCreation:
        """Create a node.

        Returns :class:`Nodes` when the API created the nodes, or an
        :class:`AccessToken` when a bank login needs an MFA answer.
        """
        response = self._post("/nodes", payload, **options)
        return parse_node_creation(response)

    @log_call
    def ach_mfa(self, payload: Dict[str, Any], **options: Any) -> NodeCreation:
        """Answer a bank login MFA question; call again if another question comes back."""
        response = self._post("/nodes", payload, **options)
        return parse_node_creation(response)

    def update_node(self, node_id: str, payload: Dict[str, Any]) -> Node:
        return Node.from_response(self._patch(f"/nodes/{node_id}", payload))

    def delete_node(self, node_id: str) -> Dict[str, Any]:
        return self._delete(f"/nodes/{node_id}")

    def verify_micro_deposit(self, node_id: str, payload: Dict[str, Any]) -> Node:
        return Node.from_response(self._patch(f"/nodes/{node_id}", payload))

    def reinitiate_micro_deposit(self, node_id: str) -> Node:
        return Node.from_response(self._patch(f"/nodes/{node_id}?resend_micro=YES", {}))

    def ship_card_node(self, node_id: str, payload: Dict[str, Any]) -> Node:
        """Deprecated: ship a CARD-US node."""
        return Node.from_response(self._patch(f"/nodes/{node_id}?ship=YES", payload))

    def reset_card_node(self, node_id: str) -> Node:
        """Deprecated: reset card number, cvv and expiration date of a node."""
        return Node.from_response(self._patch(f"/nodes/{node_id}?reset=YES", {}))

    def ship_card(self, node_id: str, payload: Dict[str, Any], subnet_id: str) -> Subnet:
        return Subnet.from_response(self._patch(f"/nodes/{node_id}/subnets/{subnet_id}/ship", payload))

    def dummy_transactions(self, node_id: str, **options: Any) -> Dict[str, Any]:
        """Trigger dummy transactions on a sandbox node."""
        return self._get(f"/nodes/{node_id}/dummy-tran", **options)

    def get_node_statements(self, node_id: str, **options: Any) -> Dict[str, Any]:
        return self._get(f"/nodes/{node_id}/statements", **options)

    def generate_node_statements(self, node_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._post(f"/nodes/{node_id}/statements", payload)

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @log_call
    def create_transaction(self, node_id: str, payload: Dict[str, Any], **options: Any) -> Transaction:
        response = self._post(f"/nodes/{node_id}/trans", payload, **options)
        return Transaction.from_response(response, node_id=node_id)

    def get_node_transaction(self, node_id: str, trans_id: str) -> Transaction:
        response = self._get(f"/nodes/{node_id}/trans/{trans_id}")
        return Transaction.from_response(response, node_id=node_id)

    def get_all_node_transaction(self, node_id: str, **options: Any) -> Transactions:
        response = self._get(f"/nodes/{node_id}/trans", **options)
        return Transactions.from_response(response, node_id=node_id)

    def comment_transaction(self, node_id: str, trans_id: str, payload: Dict[str, Any]) -> Transaction:
        response = self._patch(f"/nodes/{node_id}/trans/{trans_id}", payload)
        return Transaction.from_response(response, node_id=node_id)

    def cancel_transaction(self, node_id: str, trans_id: str) -> Dict[str, Any]:
        """Cancel a transaction that has not settled yet."""
        return self._delete(f"/nodes/{node_id}/trans/{trans_id}")

    def dispute_card_transactions(self, node_id: str, trans_id: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._patch(f"/nodes/{node_id}/trans/{trans_id}/dispute", payload)

    # ------------------------------------------------------------------
    # Subnets
    # ------------------------------------------------------------------

    def create_subnet(self, node_id: str, payload: Dict[str, Any], **options: Any) -> Subnet:
        return Subnet.from_response(self._post(f"/nodes/{node_id}/subnets", payload, **options))

    def update_subnet(self, node_id: str, payload: Dict[str, Any], subnet_id: str) -> Subnet:
        return Subnet.from_response(self._patch(f"/nodes/{node_id}/subnets/{subnet_id}", payload))

    def get_all_subnets(self, node_id: str, **options: Any) -> Subnets:
        return Subnets.from_response(self._get(f"/nodes/{node_id}/subnets", **options))

    def get_subnet(self, node_id: str, subnet_id: str, **options: Any) -> Subnet:
        return Subnet.from_response(self._get(f"/nodes/{node_id}/subnets/{subnet_id}", **options))

    def push_subnet_to_wallet(self, node_id: str, subnet_id: str, payload: Dict[str, Any], **options: Any) -> Dict[str, Any]:
        """Generate a token to push a card to a digital wallet."""
        return self._post(f"/nodes/{node_id}/subnets/{subnet_id}/push", payload, **options)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _get(self, path: str, **options: Any) -> Dict[str, Any]:
        url = build_query(self._base_path + path, USER_QUERY_PARAMS, **options)
        return self._retry.call(lambda: self.client.get(url))

    def _post(self, path: str, payload: Any, **options: Any) -> Dict[str, Any]:
        return self._send(self.client.post, path, payload, **options)

    def _patch(self, path: str, payload: Any, **options: Any) -> Dict[str, Any]:
        return self._send(self.client.patch, path, payload, **options)

    def _send(self, verb: Callable[..., Dict[str, Any]], path: str, payload: Any, **options: Any) -> Dict[str, Any]:
        url = self._base_path + path
        if not hasattr(payload, "read"):
            return self._retry.call(lambda: verb(url, payload, **options))
        seekable = getattr(payload, "seekable", None)
        if not (callable(seekable) and seekable()):
            # a consumed stream cannot be sent twice
            return verb(url, payload, **options)
        start = payload.tell()

        def operation() -> Dict[str, Any]:
            payload.seek(start)
            return verb(url, payload, **options)

        return self._retry.call(operation)

    def _delete(self, path: str) -> Dict[str, Any]:
        return self._retry.call(lambda: self.client.delete(self._base_path + path))


class Users:
    """One page of platform users."""

    def __init__(
        self,
        page: Optional[int],
        page_count: Optional[int],
        limit: Optional[int],
        user_count: Optional[int],
        payload: List[User],
        http_client: HTTPClient,
    ) -> None:
        self.page = page
        self.page_count = page_count
        self.limit = limit
        self.user_count = user_count
        self.payload = payload
        self.http_client = http_client

    @classmethod
    def from_response(cls, response: Dict[str, Any], client: HTTPClient, **options: Any) -> "Users":
        return cls(
            page=response.get("page"),
            page_count=response.get("page_count"),
            limit=response.get("limit"),
            user_count=response.get("users_count"),
            payload=[User.from_response(data, client=client, **options) for data in response.get("users") or []],
            http_client=client,
        )

    def __len__(self) -> int:
        return len(self.payload)

    def __iter__(self):
        return iter(self.payload)
