"""
logging_config.py
------------------

Shared logging utilities for the SynapseFI client.  Messages are
serialised as JSON so they can be parsed downstream by log collectors.

Unlike an application, a client library must not configure the root
logger on import.  Call :func:`configure_logging` (or pass
``logging=True`` to :class:`synapsefi.Client`) to attach a handler that
writes to stdout or to a file.  The ``log_call`` decorator and
``log_http_request`` helper strip credentials such as OAuth keys,
client secrets and validation pins before anything is written.
"""

from __future__ import annotations

import json
import logging
import sys
from functools import wraps
from typing import Any, Callable, Dict, List, Optional

# Module level logger shared by the whole package.
logger = logging.getLogger("synapsefi")
logger.addHandler(logging.NullHandler())

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"

# Header names that carry credentials and must never be logged.
SENSITIVE_HEADERS = {"x-sp-user", "x-sp-gateway", "x-sp-idempotency-key", "authorization"}

SENSITIVE_KEYWORDS = ("token", "password", "secret", "pin", "oauth_key")


# Handlers installed by configure_logging, keyed by target, with the
# number of clients currently using each one.
_installed: Dict[str, List[Any]] = {}


def configure_logging(log_to: Optional[str] = None, level: int | str = logging.DEBUG) -> logging.Handler:
    """Attach a handler to the ``synapsefi`` logger.

    Calling it again for the same target reuses the existing handler, so
    several clients logging to one file write each record once.  Every
    call must be paired with :func:`release_logging`.

    :param log_to: file path to append to; ``None`` or ``"stdout"`` logs to stdout
    :param level: logging level for the package logger
    :return: the handler in use for that target
    """
    target = log_to if log_to and log_to != "stdout" else "stdout"
    entry = _installed.get(target)
    if entry is None:
        if target == "stdout":
            handler: logging.Handler = logging.StreamHandler(sys.stdout)
        else:
            handler = logging.FileHandler(target, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        entry = _installed[target] = [handler, 0]
    entry[1] += 1
    logger.setLevel(level)
    return entry[0]


def release_logging(handler: logging.Handler) -> None:
    """Drop one use of ``handler``; the last user detaches and closes it."""
    for target, entry in list(_installed.items()):
        if entry[0] is not handler:
            continue
        entry[1] -= 1
        if entry[1] <= 0:
            del _installed[target]
            logger.removeHandler(handler)
            handler.close()
        break
    if not _installed:
        logger.setLevel(logging.NOTSET)


def _sanitize(obj: Any) -> Any:
    """Recursively sanitise objects for logging.

    Dictionaries lose keys that look like credentials, byte strings and
    file-like bodies are summarised, lists and tuples are processed
    element-wise.  Anything that cannot be JSON encoded is turned into
    its ``str``.
    """
    if isinstance(obj, (bytes, bytearray)):
        return f"<binary {len(obj)} bytes>"
    if hasattr(obj, "read"):
        return "<stream>"
    if isinstance(obj, dict):
        clean: Dict[str, Any] = {}
        for k, v in obj.items():
            if any(keyword in str(k).lower() for keyword in SENSITIVE_KEYWORDS):
                continue
            clean[k] = _sanitize(v)
        return clean
    if isinstance(obj, (list, tuple)):
        return [_sanitize(i) for i in obj]
    if hasattr(obj, "model_dump"):
        try:
            return _sanitize(obj.model_dump())
        except (TypeError, ValueError):
            return str(obj)
    try:
        return json.loads(json.dumps(obj))
    except (TypeError, ValueError):
        return str(obj)


def log_call(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to log entry and exit of functions at DEBUG level.

    Arguments and the return value are passed through ``_sanitize`` so
    credentials never reach the logs.  Exceptions raised by the wrapped
    function propagate unchanged.

    Examples
    --------

    >>> @log_call
    ... def add(a, b):
    ...     return a + b
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(json.dumps({
                "event": "call_start",
                "function": func.__qualname__,
                # skip ``self`` for bound methods
                "args": _sanitize(args[1:] if args and hasattr(args[0], func.__name__) else args),
                "kwargs": _sanitize(kwargs),
            }))
        result = func(*args, **kwargs)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(json.dumps({
                "event": "call_end",
                "function": func.__qualname__,
                "result": _sanitize(result),
            }))
        return result

    return wrapper


def log_http_request(method: str, url: str, *, headers: Dict[str, Any] | None = None,
                     json_body: Any = None, status: int | None = None,
                     duration_ms: float | None = None) -> None:
    """Log an outbound HTTP request at DEBUG level.

    Parameters
    ----------
    method : str
        The HTTP method (GET, POST, etc.)
    url : str
        The URL being requested.
    headers : dict, optional
        Request headers.  Credential headers are removed.
    json_body : Any, optional
        Request payload.  Sensitive keys are removed.
    status : int, optional
        Response status code (log end only).
    duration_ms : float, optional
        Time taken in milliseconds (log end only).
    """
    if not logger.isEnabledFor(logging.DEBUG):
        return
    data: Dict[str, Any] = {
        "event": "http_request",
        "method": method,
        "url": url,
    }
    if headers is not None:
        data["headers"] = {k: v for k, v in headers.items() if k.lower() not in SENSITIVE_HEADERS}
    if json_body:
        data["json"] = _sanitize(json_body)
    if status is not None:
        data["status"] = status
    if duration_ms is not None:
        data["duration_ms"] = round(duration_ms, 2)
    logger.debug(json.dumps(data))
