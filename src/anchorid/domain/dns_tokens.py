"""Textual forms of a subject UUID published in DNS TXT records.

The normalization here is a compatibility contract with records already
published by users; keep it byte-for-byte stable.

Accepted forms for a UUID ``U``::

    anchor=urn:uuid:U
    anchor=U
    urn:uuid:U
    <site>/resolve/U
"""

from __future__ import annotations

import re

from .proof_builder import DNS_TOKEN_PREFIX

_UUID_SHAPE = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
_WHITESPACE = re.compile(r"\s+")
_URN_PREFIX = "urn:uuid:"


def normalize_txt_value(raw: str) -> str:
    value = raw.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):  # noqa: PLR2004
        value = value[1:-1]
    value = _WHITESPACE.sub(" ", value)
    if value.lower().startswith(DNS_TOKEN_PREFIX):
        value = DNS_TOKEN_PREFIX + value[len(DNS_TOKEN_PREFIX) :]
    return value


def extract_uuid(normalized: str, resolve_prefix: str) -> str | None:
    """Return the lowercased UUID carried by a normalized TXT value, if any."""

    prefixes = (
        f"{DNS_TOKEN_PREFIX}{_URN_PREFIX}",
        DNS_TOKEN_PREFIX,
        _URN_PREFIX,
        resolve_prefix,
    )
    for prefix in prefixes:
        if normalized.startswith(prefix):
            candidate = normalized[len(prefix) :].strip()
            break
    else:
        return None

    if _UUID_SHAPE.match(candidate):
        return candidate.lower()
    return None


def accepted_tokens(subject_uuid: str, resolve_prefix: str) -> frozenset[str]:
    uuid = subject_uuid.lower()
    return frozenset(
        {
            f"{DNS_TOKEN_PREFIX}{_URN_PREFIX}{uuid}",
            f"{DNS_TOKEN_PREFIX}{uuid}",
            f"{_URN_PREFIX}{uuid}",
            f"{resolve_prefix}{uuid}",
        }
    )


def txt_values_match(
    txt_values: list[str], expected_uuid: str, resolve_prefix: str
) -> bool:
    """Check candidate TXT strings independently; split records are not joined."""

    tokens = accepted_tokens(expected_uuid, resolve_prefix)
    for raw in txt_values:
        normalized = normalize_txt_value(raw)
        found = extract_uuid(normalized, resolve_prefix)
        if found is not None and found == expected_uuid.lower():
            return True
        if normalized in tokens:
            return True
    return False
