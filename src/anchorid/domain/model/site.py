"""The public site that anchors identities and hosts their resolver pages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final
from urllib.parse import urlsplit

DEFAULT_SITE_URL: Final[str] = "https://anchorid.net"
DEFAULT_PROOF_FILENAME: Final[str] = "anchor.txt"
DEFAULT_CODE_HOST_README_TEMPLATE: Final[str] = (
    "https://raw.githubusercontent.com/{user}/{user}/main/README.md"
)
SITE_NAME: Final[str] = "AnchorID"


@dataclass(frozen=True, slots=True)
class AnchorSite:
    site_url: str = DEFAULT_SITE_URL
    proof_filename: str = DEFAULT_PROOF_FILENAME
    code_host_readme_template: str = DEFAULT_CODE_HOST_README_TEMPLATE
    name: str = SITE_NAME

    @property
    def base_url(self) -> str:
        return self.site_url.rstrip("/")

    @property
    def hostname(self) -> str:
        return (urlsplit(self.base_url).hostname or "").lower()

    @property
    def resolve_prefix(self) -> str:
        return f"{self.base_url}/resolve/"

    def resolve_url(self, subject_id: str) -> str:
        return f"{self.resolve_prefix}{subject_id}"

    def claims_url(self, subject_id: str) -> str:
        return f"{self.base_url}/claims/{subject_id}"

    def well_known_url(self, host: str) -> str:
        return f"https://{host}/.well-known/{self.proof_filename}"

    def code_host_readme_url(self, user: str) -> str:
        return self.code_host_readme_template.format(user=user)
