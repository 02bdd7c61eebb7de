"""Anchoring site configuration values."""

from __future__ import annotations

from urllib.parse import urlsplit

from anchorid.domain.model import AnchorSite
from anchorid.domain.model.site import (
    DEFAULT_CODE_HOST_README_TEMPLATE,
    DEFAULT_PROOF_FILENAME,
    DEFAULT_SITE_URL,
)

from .env import env_or_default
from .errors import ConfigurationError


def get_site_config() -> AnchorSite:
    site_url = env_or_default("ANCHORID_SITE_URL", DEFAULT_SITE_URL).rstrip("/")
    parts = urlsplit(site_url)
    if parts.scheme != "https" or not parts.hostname:
        raise ConfigurationError(f"ANCHORID_SITE_URL must be an https URL, got {site_url!r}")

    proof_filename = env_or_default("ANCHORID_PROOF_FILENAME", DEFAULT_PROOF_FILENAME)
    if "/" in proof_filename:
        raise ConfigurationError("ANCHORID_PROOF_FILENAME must be a bare file name")

    template = env_or_default("ANCHORID_CODE_HOST_README_URL", DEFAULT_CODE_HOST_README_TEMPLATE)
    if "{user}" not in template:
        raise ConfigurationError("ANCHORID_CODE_HOST_README_URL must contain a {user} placeholder")

    return AnchorSite(
        site_url=site_url,
        proof_filename=proof_filename,
        code_host_readme_template=template,
    )
