"""
core/config.py
----------------

Client configuration module.

Defines strongly-typed settings loaded from the environment using
``pydantic-settings``.  These settings control the request timeout,
the sandbox and production base URLs and the strict handling of
``202 Accepted`` envelopes.  Credentials may also be supplied through
the environment so :meth:`synapsefi.Client.from_env` can build a client
without touching code.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

SANDBOX_BASE_URL = "https://uat-api.synapsefi.com/v3.1"
PRODUCTION_BASE_URL = "https://api.synapsefi.com/v3.1"


class Settings(BaseSettings):
    """Client settings loaded from environment variables.

    Variables are prefixed with ``SYNAPSE_``.  For example, to talk to
    production set ``SYNAPSE_DEVELOPMENT_MODE=false``.
    """

    # HTTP settings
    http_timeout: float = Field(300.0, gt=0, description="Per-request timeout in seconds.")
    sandbox_base_url: str = Field(SANDBOX_BASE_URL, description="Base URL used in development mode.")
    production_base_url: str = Field(PRODUCTION_BASE_URL, description="Base URL used outside development mode.")

    # Behaviour
    development_mode: bool = Field(True, description="Select the sandbox environment.")
    raise_for_202: bool = Field(False, description="Treat envelopes with http_code 202 as failures.")
    log_level: str = Field("DEBUG", description="Level used when logging is enabled.")

    # Credentials (optional, used by Client.from_env)
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    ip_address: Optional[str] = None
    fingerprint: Optional[str] = None

    model_config = SettingsConfigDict(env_prefix="SYNAPSE_", env_file=None, case_sensitive=False)

    def base_url_for(self, development_mode: bool) -> str:
        return self.sandbox_base_url if development_mode else self.production_base_url


@lru_cache()
def get_settings() -> Settings:
    """Return a cached instance of the client settings.

    Tests that change the environment must call ``get_settings.cache_clear()``.
    """
    return Settings()
