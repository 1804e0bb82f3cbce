"""
clients/http_client.py
----------------------

HTTP transport for the SynapseFI API.

``HTTPClient`` owns the :class:`~synapsefi.core.context.SessionConfig`
and an ``httpx.Client``.  It executes exactly one HTTP request per
call, builds the ``X-SP-*`` headers from the session, and turns every
non-success outcome into a typed :class:`~synapsefi.core.errors.SynapseError`:

* a client-side timeout becomes a synthesised 504 ``Request Timeout``;
* a non-2xx response is parsed as an error envelope when it is JSON,
  otherwise its raw body becomes the message;
* a 2xx response whose envelope carries a non-empty ``error`` (or a
  ``202`` http code when ``raise_for_202`` is set) is a failure too.

Successful envelopes are returned as plain dictionaries.  No retries
happen here; the only retry in the client is the single
re-authentication in :mod:`synapsefi.core.retry`.
"""

from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional

import httpx

from synapsefi.core.auth import build_headers, oauth_path
from synapsefi.core.config import get_settings
from synapsefi.core.context import RequestDescriptor, SessionConfig
from synapsefi.core.errors import (
    SynapseError,
    classify,
    normalize_envelope,
    timeout_envelope,
    transport_error_envelope,
)
from synapsefi.logging_config import log_http_request, logger


def _is_streamable(body: Any) -> bool:
    return hasattr(body, "read") or isinstance(body, (bytes, bytearray))


def _iter_stream(body: Any, chunk_size: int = 64 * 1024):
    if isinstance(body, (bytes, bytearray)):
        yield bytes(body)
        return
    while True:
        chunk = body.read(chunk_size)
        if not chunk:
            break
        yield chunk.encode("utf-8") if isinstance(chunk, str) else chunk


def _read_all(body: Any) -> bytes:
    return b"".join(_iter_stream(body))


def _is_json(response: httpx.Response) -> bool:
    return response.headers.get("content-type", "").split(";")[0].strip() == "application/json"


class HTTPClient:
    """Synchronous transport bound to one session.

    :param base_url: API base URL (sandbox or production)
    :param client_id: gateway client id
    :param client_secret: gateway client secret
    :param fingerprint: user fingerprint forwarded in ``X-SP-USER``
    :param ip_address: user IP forwarded in ``X-SP-USER-IP``
    :param raise_for_202: treat ``http_code == "202"`` envelopes as failures
    :param transport: optional ``httpx`` transport, mostly for tests
    """

    def __init__(
        self,
        base_url: str,
        client_id: str,
        client_secret: str,
        fingerprint: Optional[str] = None,
        ip_address: Optional[str] = None,
        raise_for_202: bool = False,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.raise_for_202 = bool(raise_for_202)
        self.timeout = timeout if timeout is not None else get_settings().http_timeout
        self.session = SessionConfig(
            client_id=client_id,
            client_secret=client_secret,
            fingerprint=fingerprint,
            ip_address=ip_address,
        )
        self._client = httpx.Client(timeout=self.timeout, transport=transport)

    def __enter__(self) -> "HTTPClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTPX client and release resources."""
        self._client.close()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    @property
    def config(self) -> SessionConfig:
        return self.session

    def build_headers(self, **options: Any) -> Dict[str, str]:
        return build_headers(
            self.session,
            idempotency_key=options.get("idempotency_key"),
            stream=bool(options.get("stream")),
            headers=options.get("headers"),
        )

    def update_headers(
        self,
        oauth_key: Optional[str] = None,
        fingerprint: Optional[str] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
        ip_address: Optional[str] = None,
        idempotency_key: Optional[str] = None,
    ) -> None:
        """Update the session values sent with every later request."""
        self.session.update(
            oauth_key=oauth_key,
            fingerprint=fingerprint,
            client_id=client_id,
            client_secret=client_secret,
            ip_address=ip_address,
            idempotency_key=idempotency_key,
        )

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    def get(self, path: str, **options: Any) -> Dict[str, Any]:
        return self.execute("GET", path, **options)

    def post(self, path: str, payload: Any = None, **options: Any) -> Dict[str, Any]:
        return self.execute("POST", path, payload, **options)

    def patch(self, path: str, payload: Any = None, **options: Any) -> Dict[str, Any]:
        return self.execute("PATCH", path, payload, **options)

    def delete(self, path: str, **options: Any) -> Dict[str, Any]:
        return self.execute("DELETE", path, **options)

    def execute(self, method: str, path: str, body: Any = None, **options: Any) -> Dict[str, Any]:
        """Run one request and return the parsed success envelope.

        :param method: HTTP method
        :param path: path relative to the base URL
        :param body: mapping (sent as JSON) or bytes/file-like (streamed)
        :param options: ``idempotency_key``, ``stream``, ``headers`` and ``params``
        :raises SynapseError: subclass chosen by :func:`classify`
        """
        descriptor = RequestDescriptor(
            method=method.upper(),
            path=path,
            body=body,
            headers=dict(options.get("headers") or {}),
            stream=bool(options.get("stream")),
            idempotency_key=options.get("idempotency_key"),
            params=dict(options.get("params") or {}),
        )
        if _is_streamable(body) and options.get("stream") is not False:
            descriptor.stream = True
        return self._run(descriptor)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def oauthenticate(self, user_id: str) -> Dict[str, Any]:
        """Refresh the OAuth key of ``user_id`` from its stored refresh token."""
        user = self.get(f"/users/{user_id}")
        return self.authenticate({"refresh_token": user.get("refresh_token")}, oauth_path(user_id))

    def authenticate(self, payload: Dict[str, Any], path: str, **options: Any) -> Dict[str, Any]:
        """POST an OAuth payload and install the returned key in the session."""
        response = self.post(path, payload, **options)
        self.session.replace_token(response.get("oauth_key"), response.get("expires_in"))
        logger.info(json.dumps({
            "event": "oauth_key_refreshed",
            "path": path,
            "expires_in": response.get("expires_in"),
        }))
        return response

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def full_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _run(self, request: RequestDescriptor) -> Dict[str, Any]:
        url = self.full_url(request.path)
        headers = self.build_headers(
            idempotency_key=request.idempotency_key,
            stream=request.stream,
            headers=request.headers,
        )
        kwargs: Dict[str, Any] = {"headers": headers}
        if request.params:
            kwargs["params"] = request.params
        if request.stream:
            kwargs["content"] = _iter_stream(request.body)
        elif _is_streamable(request.body):
            kwargs["content"] = _read_all(request.body)
        elif request.body is not None:
            kwargs["content"] = json.dumps(request.body)

        log_http_request(request.method, url, headers=headers, json_body=request.body)
        start_time = time.time()
        try:
            response = self._client.request(request.method, url, **kwargs)
        except httpx.TimeoutException:
            logger.warning(json.dumps({
                "event": "http_timeout",
                "method": request.method,
                "url": url,
                "timeout": self.timeout,
            }))
            raise classify(timeout_envelope()) from None
        except httpx.TransportError as exc:
            logger.error(json.dumps({
                "event": "http_error",
                "method": request.method,
                "url": url,
                "detail": str(exc),
            }))
            raise classify(transport_error_envelope(exc)) from exc
        duration_ms = (time.time() - start_time) * 1000
        log_http_request(request.method, url, status=response.status_code, duration_ms=duration_ms)

        if not response.is_success:
            raise self._error_from_response(response)

        envelope = self._parse(response)
        if self._is_failure(envelope):
            raise self._logged(classify(normalize_envelope(envelope, response.status_code)), url)
        return envelope

    def _parse(self, response: httpx.Response) -> Dict[str, Any]:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            raise self._logged(
                classify(normalize_envelope(response.text, response.status_code)),
                str(response.request.url),
            ) from None

    def _is_failure(self, envelope: Any) -> bool:
        if not isinstance(envelope, dict):
            return False
        if envelope.get("error"):
            return True
        return self.raise_for_202 and str(envelope.get("http_code")) == "202"

    def _error_from_response(self, response: httpx.Response) -> SynapseError:
        body: Any = response.text
        if _is_json(response):
            try:
                body = response.json()
            except ValueError:
                body = response.text
        return self._logged(
            classify(normalize_envelope(body, response.status_code)),
            str(response.request.url),
        )

    @staticmethod
    def _logged(error: SynapseError, url: str) -> SynapseError:
        logger.warning(json.dumps({
            "event": "api_error",
            "url": url,
            "error": type(error).__name__,
            "http_code": error.http_code,
            "error_code": error.error_code,
            "detail": error.message,
        }))
        return error
