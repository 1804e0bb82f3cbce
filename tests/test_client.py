from __future__ import annotations

import logging

import pytest

from synapsefi import Client, User
from synapsefi.core.config import get_settings
from synapsefi.schemas.subscriptions import Subscription, Subscriptions
from synapsefi.services.user_service import Users


@pytest.fixture()
def client(api) -> Client:
    return Client(
        client_id="A",
        client_secret="B",
        ip_address="1.2.3.4",
        fingerprint="F",
        transport=api.transport(),
    )


def test_development_mode_selects_base_url(api) -> None:
    sandbox = Client(client_id="A", client_secret="B", ip_address="1.2.3.4", transport=api.transport())
    production = Client(client_id="A", client_secret="B", ip_address="1.2.3.4",
                        development_mode=False, transport=api.transport())
    assert sandbox.http_client.base_url == "https://uat-api.synapsefi.com/v3.1"
    assert production.http_client.base_url == "https://api.synapsefi.com/v3.1"


def test_create_user_updates_headers(api, client) -> None:
    api.add("POST", "/users", {"_id": "u1", "refresh_token": "refresh-1"})
    user = client.create_user(payload={"logins": [{"email": "a@b.c"}]}, ip_address="5.6.7.8",
                              fingerprint="F2", idempotency_key="idem")
    assert isinstance(user, User)
    assert user.user_id == "u1"
    assert user.refresh_token == "refresh-1"
    sent = api.requests[-1]
    assert sent.headers["X-SP-USER-IP"] == "5.6.7.8"
    assert sent.headers["X-SP-USER"] == "|F2"
    assert sent.headers["X-SP-IDEMPOTENCY-KEY"] == "idem"


def test_get_user(api, client) -> None:
    api.add("GET", "/users/u1", {"_id": "u1", "refresh_token": "refresh-1"})
    user = client.get_user(user_id="u1", full_dehydrate=True)
    assert user.full_dehydrate is True
    assert api.requests[-1].url.query == b"full_dehydrate=yes"
    assert user.client is client.http_client


def test_get_user_requires_string_id(client) -> None:
    with pytest.raises(TypeError):
        client.get_user(user_id=123)


def test_get_users_paginates(api, client) -> None:
    api.add("GET", "/users", {
        "users": [{"_id": "u1", "refresh_token": "r1"}, {"_id": "u2", "refresh_token": "r2"}],
        "users_count": 2, "page": 2, "page_count": 2, "limit": 2,
    })
    users = client.get_users(query="jo", page=2, per_page=2)
    assert isinstance(users, Users)
    assert [u.user_id for u in users] == ["u1", "u2"]
    assert users.user_count == 2
    assert api.requests[-1].url.query == b"query=jo&page=2&per_page=2"


def test_empty_user_listing(api, client) -> None:
    api.add("GET", "/users", {"users": [], "users_count": 0})
    assert len(client.get_users()) == 0


def test_subscriptions(api, client) -> None:
    api.add("POST", "/subscriptions", {"_id": "sub1", "url": "https://hooks.example.com"})
    api.add("GET", "/subscriptions", {"subscriptions": [{"_id": "sub1"}], "subscriptions_count": 1})
    api.add("PATCH", "/subscriptions/sub1", {"_id": "sub1", "is_active": False})
    created = client.create_subscriptions(scope={"url": "https://hooks.example.com", "scope": ["USERS|POST"]})
    assert isinstance(created, Subscription)
    assert created.url == "https://hooks.example.com"
    listed = client.get_all_subscriptions()
    assert isinstance(listed, Subscriptions)
    assert listed.payload[0].subscription_id == "sub1"
    updated = client.update_subscriptions(subscription_id="sub1", body={"is_active": False})
    assert updated.payload["is_active"] is False


def test_issue_public_key(api, client) -> None:
    api.add("GET", "/client", {"public_key_obj": {"public_key": "pk_1"}})
    assert client.issue_public_key(scope="CLIENT|CONTROLS", user_id="u1") == {"public_key": "pk_1"}
    query = api.requests[-1].url.params
    assert query["issue_public_key"] == "YES"
    assert query["scope"] == "CLIENT|CONTROLS"
    assert query["user_id"] == "u1"


def test_issue_public_key_encodes_values(api, client) -> None:
    api.add("GET", "/client", {"public_key_obj": {"public_key": "pk_1"}})
    client.issue_public_key(scope="OAUTH|POST,USERS|POST", user_id="u 1&x=2")
    query = api.requests[-1].url.params
    assert query["scope"] == "OAUTH|POST,USERS|POST"
    assert query["user_id"] == "u 1&x=2"
    assert "x" not in query


def test_platform_calls_are_not_retried(api, client) -> None:
    from .conftest import unauthorized
    from synapsefi.core.errors import Unauthorized

    api.add("GET", "/nodes", unauthorized())
    with pytest.raises(Unauthorized):
        client.get_all_nodes()
    assert len(api.requests) == 1


def test_market_data_query(api, client) -> None:
    api.add("GET", "/nodes/crypto-market-watch", {"data": []})
    client.get_crypto_market_data(limit=5, currency="USD")
    assert api.requests[-1].url.query == b"limit=5&currency=USD"


def test_from_env(monkeypatch, api) -> None:
    monkeypatch.setenv("SYNAPSE_CLIENT_ID", "env-id")
    monkeypatch.setenv("SYNAPSE_CLIENT_SECRET", "env-secret")
    monkeypatch.setenv("SYNAPSE_IP_ADDRESS", "9.9.9.9")
    monkeypatch.setenv("SYNAPSE_DEVELOPMENT_MODE", "false")
    monkeypatch.setenv("SYNAPSE_RAISE_FOR_202", "true")
    get_settings.cache_clear()
    client = Client.from_env(transport=api.transport())
    assert client.http_client.session.client_id == "env-id"
    assert client.http_client.base_url == "https://api.synapsefi.com/v3.1"
    assert client.http_client.raise_for_202 is True


def test_from_env_requires_credentials() -> None:
    with pytest.raises(ValueError):
        Client.from_env()


def test_logging_to_file(tmp_path, api) -> None:
    log_file = tmp_path / "synapse.log"
    api.add("GET", "/nodes/atms", {"atms": []})
    with Client(client_id="A", client_secret="B", ip_address="1.2.3.4",
                logging=True, log_to=str(log_file), transport=api.transport()) as client:
        client.locate_atm(zip="94114", radius=5)
    text = log_file.read_text()
    assert "/nodes/atms" in text
    assert "A|B" not in text


def test_closed_clients_leave_no_log_handlers(tmp_path, api) -> None:
    logger = logging.getLogger("synapsefi")
    before = list(logger.handlers)
    log_file = str(tmp_path / "synapse.log")
    clients = [
        Client(client_id="A", client_secret="B", ip_address="1.2.3.4",
               logging=True, log_to=log_file, transport=api.transport())
        for _ in range(3)
    ]
    assert len(logger.handlers) == len(before) + 1
    for client in clients:
        client.close()
    assert logger.handlers == before
    assert logger.level == logging.NOTSET
