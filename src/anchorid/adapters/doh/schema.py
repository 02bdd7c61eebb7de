"""DoH JSON response and DNS cache entry schemas."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict, Field

TXT_RECORD_TYPE: Final[int] = 16


class DohAnswer(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str | None = None
    type: int | None = None
    ttl: int | None = Field(default=None, alias="TTL")
    data: str = ""


class DohResponse(BaseModel):
    """Subset of the ``application/dns-json`` format we rely on."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status: int = Field(alias="Status")
    answer: list[DohAnswer] = Field(default_factory=list, alias="Answer")

    def txt_answers(self) -> list[DohAnswer]:
        return [answer for answer in self.answer if answer.type == TXT_RECORD_TYPE]


class DnsCacheEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    qname: str
    ok: bool
    txt_values: list[str] = Field(default_factory=list, alias="txtValues")
    error: str | None = None
    ttl: int | None = None
    cached_at: int = Field(alias="cachedAt")
    expires_at: int = Field(alias="expiresAt")
