"""
synapsefi package
-----------------

Python client for the SynapseFI v3.1 API.  Importing ``synapsefi``
exposes the platform :class:`Client`, the :class:`User` facade and the
typed errors raised on failures.
"""

from synapsefi.client import Client
from synapsefi.clients.http_client import HTTPClient
from synapsefi.core.errors import (
    NotFound,
    RateLimited,
    ServerError,
    SynapseError,
    Timeout,
    Unauthorized,
    UnknownError,
    ValidationFailed,
)
from synapsefi.services.user_service import User, Users

__version__ = "0.1.0"

__all__ = [
    "Client",
    "HTTPClient",
    "User",
    "Users",
    "SynapseError",
    "Unauthorized",
    "RateLimited",
    "NotFound",
    "ValidationFailed",
    "ServerError",
    "Timeout",
    "UnknownError",
]
