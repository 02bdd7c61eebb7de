"""Canonical identity records (schema.org Person / Organization JSON-LD).

``build_profile`` derives the storable record from what is stored, an optional
edit and the subject's verified claim URLs. Builds are deterministic: the same
inputs always yield the same record, and a write that changes nothing reports
``changed=False`` and keeps the stored ``dateModified``.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any, Final
from urllib.parse import urlsplit

from .claims import require_subject_id
from .model import AnchorSite, EntityType, format_timestamp, utc_now
from .urls import (
    dedupe_and_sort,
    is_uuid,
    normalize_url,
    normalize_url_list,
    split_delimited,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable
    from datetime import datetime

    from .ports import KeyValueStore

log = getLogger(__name__)

type ProfileRecord = dict[str, Any]
type ProfileEdit = Mapping[str, object]

PROFILE_KEY_PREFIX: Final[str] = "profile:"
SCHEMA_CONTEXT: Final[str] = "https://schema.org"

_FOUNDING_DATE_RE = re.compile(r"^(\d{4}-\d{2}-\d{2})")


@dataclass(frozen=True, slots=True)
class BuildProfileOptions:
    persist_merged_same_as: bool = False
    """Store the effective (manual and verified) ``sameAs`` instead of the manual set."""
    bump_on_noop: bool = False
    """Advance ``dateModified`` on a write even when nothing structural changed."""
    preserve_stored_timestamps_on_read: bool = True
    """Keep stored timestamps verbatim on read builds."""


@dataclass(frozen=True, slots=True)
class ProfileBuild:
    record: ProfileRecord
    changed: bool
    effective_same_as: list[str] = field(default_factory=list)


# ----------------------------------------------------------------------
# field canonicalization
# ----------------------------------------------------------------------


def canonical_string(value: object) -> str | None:
    if not isinstance(value, str) or not value.strip():
        return None
    return value.strip()


def canonical_string_list(value: object) -> list[str] | None:
    """Trim, drop empties and dedupe while keeping first-seen order."""

    if isinstance(value, list | tuple):
        items = [item.strip() for item in value if isinstance(item, str)]
    elif isinstance(value, str):
        items = split_delimited(value)
    else:
        items = []

    ordered = list(dict.fromkeys(item for item in items if item))
    return ordered or None


def canonical_founding_date(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    match = _FOUNDING_DATE_RE.match(value.strip())
    return match.group(1) if match else None


def canonical_entity_refs(value: object, site: AnchorSite) -> list[dict[str, str]] | None:
    """Accept ``{"@id": ...}`` refs, bare UUIDs or resolver URLs; dedupe by id."""

    if isinstance(value, list | tuple):
        items: Iterable[object] = value
    elif isinstance(value, str):
        items = split_delimited(value)
    else:
        return None

    refs: list[dict[str, str]] = []
    seen: set[str] = set()
    for item in items:
        ref_id: str | None = None
        if isinstance(item, Mapping) and "@id" in item:
            ref_id = str(item["@id"]).strip() or None
        elif isinstance(item, str):
            candidate = item.strip()
            if candidate.startswith(site.resolve_prefix):
                ref_id = candidate
            elif is_uuid(candidate):
                ref_id = site.resolve_url(candidate.lower())
        if ref_id and ref_id not in seen:
            seen.add(ref_id)
            refs.append({"@id": ref_id})
    return refs or None


def merge_same_as(manual: object, verified_urls: object) -> list[str]:
    """Set union of both lists after normalization, sorted."""

    return dedupe_and_sort([*normalize_url_list(manual), *normalize_url_list(verified_urls)])


def sanitize_same_as_for_storage(urls: Iterable[str], site: AnchorSite) -> list[str]:
    """Drop links back to the anchoring site itself."""

    kept: list[str] = []
    for url in urls:
        try:
            host = urlsplit(url).hostname
        except ValueError:
            continue
        if host and host != site.hostname:
            kept.append(url)
    return dedupe_and_sort(kept)


# ----------------------------------------------------------------------
# structural comparison
# ----------------------------------------------------------------------


def stable_serialize(value: object) -> str:
    """JSON with object keys sorted at every level; arrays keep their order."""

    return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def strip_empty_lists(record: Mapping[str, Any]) -> ProfileRecord:
    return {
        key: value
        for key, value in record.items()
        if not (isinstance(value, list) and not value)
    }


def structurally_equal(left: Mapping[str, Any], right: Mapping[str, Any]) -> bool:
    return stable_serialize(strip_empty_lists(left)) == stable_serialize(strip_empty_lists(right))


# ----------------------------------------------------------------------
# record assembly
# ----------------------------------------------------------------------


def _fixed_fields(subject_id: str, site: AnchorSite) -> ProfileRecord:
    resolve_url = site.resolve_url(subject_id)
    claims_url = site.claims_url(subject_id)
    return {
        "@context": SCHEMA_CONTEXT,
        "@id": resolve_url,
        "identifier": {
            "@type": "PropertyValue",
            "propertyID": "canonical-uuid",
            "value": f"urn:uuid:{subject_id}",
        },
        "mainEntityOfPage": {"@type": "WebPage", "@id": resolve_url, "url": resolve_url},
        "subjectOf": {
            "@type": "WebPage",
            "@id": claims_url,
            "url": claims_url,
            "name": f"{site.name} Claims",
        },
        "isPartOf": {
            "@type": "WebSite",
            "@id": f"{site.base_url}/#website",
            "url": site.base_url,
            "name": site.name,
        },
    }


def _entity_type(stored: Mapping[str, Any] | None, edit: ProfileEdit | None) -> EntityType:
    if stored is not None:
        try:
            return EntityType(stored.get("@type"))
        except ValueError:
            log.warning("Stored profile has unknown @type %r", stored.get("@type"))
    if edit is not None and edit.get("@type") == EntityType.ORGANIZATION:
        return EntityType.ORGANIZATION
    return EntityType.PERSON


def _canonical_url(stored: Mapping[str, Any] | None, edit: ProfileEdit | None) -> str | None:
    if edit is not None:
        edited = normalize_url(edit.get("url"))
        if edited is not None:
            return edited
    return normalize_url(stored.get("url")) if stored is not None else None


def _edited_or_stored[T](
    key: str,
    stored: Mapping[str, Any] | None,
    edit: ProfileEdit | None,
    canonicalize: Callable[[object], T | None],
) -> T | None:
    """Explicit presence in the edit replaces the stored value, even with nothing."""

    if edit is not None and key in edit:
        return canonicalize(edit[key])
    return stored.get(key) if stored is not None else None


def build_profile(
    subject_id: str,
    stored: Mapping[str, Any] | None = None,
    edit: ProfileEdit | None = None,
    verified_urls: Iterable[str] = (),
    *,
    site: AnchorSite | None = None,
    options: BuildProfileOptions | None = None,
    now: datetime | None = None,
) -> ProfileBuild:
    """Build the canonical record for ``subject_id``.

    A build with ``edit=None`` is a read build (public rendering); with an edit it
    is a write build whose ``changed`` flag says whether storing the record would
    alter persisted state.
    """

    subject_id = require_subject_id(subject_id)
    site = site or AnchorSite()
    options = options or BuildProfileOptions()
    now_iso = format_timestamp(now or utc_now())
    is_read_build = edit is None
    preserve_on_read = options.preserve_stored_timestamps_on_read and is_read_build

    entity_type = _entity_type(stored, edit)
    edit_view: ProfileEdit = edit or {}
    stored_view: Mapping[str, Any] = stored or {}

    name = canonical_string(edit_view.get("name")) or stored_view.get("name")
    alternate_name = canonical_string_list(edit_view.get("alternateName")) or stored_view.get(
        "alternateName"
    )
    description = canonical_string(edit_view.get("description")) or stored_view.get(
        "description"
    )
    url = _canonical_url(stored, edit)

    if "sameAs" in edit_view:
        manual_same_as = normalize_url_list(edit_view["sameAs"])
    else:
        manual_same_as = normalize_url_list(stored_view.get("sameAs", []))
    effective_same_as = merge_same_as(manual_same_as, list(verified_urls))
    same_as = sanitize_same_as_for_storage(
        effective_same_as if options.persist_merged_same_as else manual_same_as,
        site,
    )

    record: ProfileRecord = _fixed_fields(subject_id, site)
    record["@type"] = str(entity_type)
    record["dateCreated"] = stored_view.get("dateCreated") or now_iso
    record["dateModified"] = stored_view.get("dateModified") or now_iso
    optional: dict[str, Any] = {
        "name": name,
        "alternateName": alternate_name,
        "description": description,
        "url": url,
        "sameAs": same_as,
    }

    match entity_type:
        case EntityType.ORGANIZATION:
            optional["founder"] = _edited_or_stored(
                "founder", stored, edit, lambda value: canonical_entity_refs(value, site)
            )
            optional["foundingDate"] = _edited_or_stored(
                "foundingDate", stored, edit, canonical_founding_date
            )
        case EntityType.PERSON:
            optional["affiliation"] = _edited_or_stored(
                "affiliation", stored, edit, lambda value: canonical_entity_refs(value, site)
            )

    record.update({key: value for key, value in optional.items() if value})
    record = strip_empty_lists(record)

    if stored is None:
        structurally_changed = True
    else:
        aligned = {**stored, "dateModified": record["dateModified"]}
        structurally_changed = not structurally_equal(record, aligned)

    if stored is not None and stored.get("dateCreated"):
        record["dateCreated"] = stored["dateCreated"]
    if preserve_on_read:
        if stored is not None and stored.get("dateModified"):
            record["dateModified"] = stored["dateModified"]
        changed = False
    else:
        if structurally_changed or options.bump_on_noop:
            record["dateModified"] = now_iso
        changed = structurally_changed or (stored is not None and options.bump_on_noop)

    return ProfileBuild(record=record, changed=changed, effective_same_as=effective_same_as)


def public_record(build: ProfileBuild) -> ProfileRecord:
    """The record as rendered publicly: stored fields with the effective ``sameAs``."""

    record = dict(build.record)
    if build.effective_same_as:
        record["sameAs"] = list(build.effective_same_as)
    else:
        record.pop("sameAs", None)
    return record


class ProfileRepository:
    def __init__(self, store: KeyValueStore) -> None:
        self._store = store

    @staticmethod
    def key(subject_id: str) -> str:
        return f"{PROFILE_KEY_PREFIX}{require_subject_id(subject_id)}"

    def get(self, subject_id: str) -> ProfileRecord | None:
        raw = self._store.get(self.key(subject_id))
        if not raw:
            return None
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            log.warning("Ignoring non-object profile payload for %s", subject_id)
            return None
        return payload

    def put(self, subject_id: str, record: Mapping[str, Any]) -> None:
        self._store.put(self.key(subject_id), stable_serialize(record))
