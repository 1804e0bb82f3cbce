"""
core/retry.py
--------------

Single re-authentication retry for user scoped calls.

A call starts in the ``AUTHENTICATED_ATTEMPT`` state and runs the
wrapped operation.  When that attempt fails with
:class:`~synapsefi.core.errors.Unauthorized` the wrapper moves to
``REAUTHENTICATING``: it runs the re-authentication callable once and
then the operation once more.  Whatever the second attempt produces is
final.  Every other failure ends the call immediately.

The outcome is returned as a :class:`CallOutcome` value; facades call
:meth:`AuthRetry.call`, which unwraps it and raises the error.  The
authentication requests themselves must never go through this wrapper.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

from synapsefi.core.errors import SynapseError, Unauthorized
from synapsefi.logging_config import logger

T = TypeVar("T")


class RetryState(str, enum.Enum):
    AUTHENTICATED_ATTEMPT = "authenticated_attempt"
    REAUTHENTICATING = "reauthenticating"


@dataclass(frozen=True)
class CallOutcome(Generic[T]):
    """Result of one wrapped call: either ``value`` or ``error``."""

    value: Optional[T] = None
    error: Optional[SynapseError] = None
    attempts: int = 1
    state: RetryState = RetryState.AUTHENTICATED_ATTEMPT

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


class AuthRetry:
    """Run operations with at most one re-authentication.

    :param reauthenticate: callable performing the refresh round trip; it
        must update the session so the next attempt carries the new key
    """

    def __init__(self, reauthenticate: Callable[[], Any]) -> None:
        self._reauthenticate = reauthenticate

    def run(self, operation: Callable[[], T]) -> CallOutcome[T]:
        state = RetryState.AUTHENTICATED_ATTEMPT
        attempts = 0
        while True:
            attempts += 1
            try:
                return CallOutcome(value=operation(), attempts=attempts, state=state)
            except Unauthorized as exc:
                if state is RetryState.REAUTHENTICATING:
                    return CallOutcome(error=exc, attempts=attempts, state=state)
                logger.info(json.dumps({
                    "event": "reauthenticate",
                    "http_code": exc.http_code,
                    "error_code": exc.error_code,
                }))
            except SynapseError as exc:
                return CallOutcome(error=exc, attempts=attempts, state=state)

            state = RetryState.REAUTHENTICATING
            try:
                self._reauthenticate()
            except SynapseError as exc:
                return CallOutcome(error=exc, attempts=attempts, state=state)

    def call(self, operation: Callable[[], T]) -> T:
        return self.run(operation).unwrap()
