"""
core/errors.py
---------------

Typed errors raised by the SynapseFI client and the classifier that
builds them.

Every failure coming back from the API, whatever its shape, is first
normalised into one canonical envelope by :func:`normalize_envelope`
and then turned into a :class:`SynapseError` subclass by
:func:`classify`.  Catch ``SynapseError`` to handle all API failures
in one place or a subclass for finer control::

    try:
        user.get_user_node(node_id="...")
    except Unauthorized:
        ...
    except SynapseError as exc:
        print(exc.http_code, exc.message)
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional, Type


class SynapseError(Exception):
    """Base class of every API failure.

    Carries the HTTP code and error code reported by the API, the
    human readable message and the normalised response envelope.
    """

    def __init__(
        self,
        message: str,
        *,
        http_code: Optional[str] = None,
        error_code: Optional[str] = None,
        response: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_code = http_code
        self.error_code = error_code
        self.response = response or {}

    @property
    def status(self) -> Optional[int]:
        """The HTTP code as an int, when it is numeric."""
        try:
            return int(self.http_code) if self.http_code is not None else None
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.message} (http_code={self.http_code}, error_code={self.error_code})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, http_code={self.http_code!r}, error_code={self.error_code!r})"


class Unauthorized(SynapseError):
    """The OAuth key is missing, expired or lacks the required scope (401)."""


class RateLimited(SynapseError):
    """Too many requests (429)."""


class NotFound(SynapseError):
    """The requested object does not exist (404)."""


class ValidationFailed(SynapseError):
    """The payload or query was rejected (400, 422)."""


class ServerError(SynapseError):
    """The API failed to process the request (5xx)."""


class Timeout(SynapseError):
    """The request timed out (504, also synthesised on client timeouts)."""


class UnknownError(SynapseError):
    """Any failure the classifier does not recognise."""


TIMEOUT_MESSAGE = "Request Timeout"

HTTP_CODE_ERRORS: Dict[str, Type[SynapseError]] = {
    "400": ValidationFailed,
    "401": Unauthorized,
    "404": NotFound,
    "422": ValidationFailed,
    "429": RateLimited,
    "504": Timeout,
}

# Fallback used when the http code is missing or ambiguous.
ERROR_CODE_ERRORS: Dict[str, Type[SynapseError]] = {
    "100": Unauthorized,
    "110": Unauthorized,
    "120": Unauthorized,
    "200": ValidationFailed,
    "400": ValidationFailed,
    "404": NotFound,
    "429": RateLimited,
    "500": ServerError,
    "503": ServerError,
    "504": Timeout,
}


def _code(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _message(error: Any) -> str:
    if isinstance(error, Mapping):
        for key in ("en", "message", "detail"):
            if error.get(key):
                return str(error[key])
        return ""
    return "" if error is None else str(error)


def normalize_envelope(body: Any, status: Optional[int] = None) -> Dict[str, Any]:
    """Bring any failure body into the canonical envelope shape.

    The result always has ``error`` (a mapping with an ``en`` message),
    ``error_code`` and ``http_code`` (strings or ``None``).  ``status``
    fills ``http_code`` when the body does not carry one.  Other keys of
    a mapping body are kept.
    """
    if isinstance(body, Mapping):
        envelope = dict(body)
        error = envelope.get("error")
    else:
        envelope = {}
        error = body
    if isinstance(error, Mapping):
        error = dict(error)
        if not error.get("en"):
            error["en"] = _message(error)
    else:
        error = {"en": _message(error)}
    envelope["error"] = error
    envelope["error_code"] = _code(envelope.get("error_code"))
    envelope["http_code"] = _code(envelope.get("http_code")) or _code(status)
    return envelope


def _error_class(http_code: Optional[str], error_code: Optional[str]) -> Type[SynapseError]:
    if http_code in HTTP_CODE_ERRORS:
        return HTTP_CODE_ERRORS[http_code]
    if http_code and http_code.isdigit() and 500 <= int(http_code) < 600:
        return ServerError
    if error_code in ERROR_CODE_ERRORS:
        return ERROR_CODE_ERRORS[error_code]
    return UnknownError


def classify(envelope: Any) -> SynapseError:
    """Return the typed error for a failure envelope.

    Pure function: nothing is raised or logged here.
    """
    normalized = normalize_envelope(envelope)
    http_code = normalized["http_code"]
    error_code = normalized["error_code"]
    klass = _error_class(http_code, error_code)
    return klass(
        normalized["error"]["en"],
        http_code=http_code,
        error_code=error_code,
        response=normalized,
    )


def timeout_envelope() -> Dict[str, Any]:
    return {"error": {"en": TIMEOUT_MESSAGE}, "http_code": 504}


def transport_error_envelope(exc: Exception) -> Dict[str, Any]:
    """Envelope for a request that never got a response (refused, reset, ...)."""
    return {"error": {"en": str(exc) or type(exc).__name__}, "http_code": None}
