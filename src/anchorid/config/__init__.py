"""Application configuration helpers."""

from __future__ import annotations

from .doh import DnsCachePolicy, DohConfig, get_doh_config
from .env import env_or_default
from .errors import ConfigurationError
from .http_resilience import NO_RETRY, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .proof_fetch import ProofFetchConfig, get_proof_fetch_config
from .site import get_site_config
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "NO_RETRY",
    "ConfigurationError",
    "DatabaseConfig",
    "DnsCachePolicy",
    "DohConfig",
    "ProofFetchConfig",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "env_or_default",
    "get_database_config",
    "get_doh_config",
    "get_proof_fetch_config",
    "get_site_config",
    "get_storage_config",
]
