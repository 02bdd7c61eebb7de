"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING, Any

from anchorid.adapters.doh import CachedTxtLookup, DohClient
from anchorid.adapters.http_resilience import ResilientClient
from anchorid.adapters.proof_fetch import HttpProofFetcher
from anchorid.adapters.sqlalchemy import SqlAlchemyKeyValueStore
from anchorid.config import (
    get_database_config,
    get_doh_config,
    get_proof_fetch_config,
    get_site_config,
)
from anchorid.domain.claims import ClaimRepository
from anchorid.domain.profile import BuildProfileOptions, ProfileRepository, build_profile
from anchorid.domain.proof_builder import build_claim
from anchorid.domain.verification import ClaimVerifier, record_outcome

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

    from anchorid.config import DnsCachePolicy, DohConfig, ProofFetchConfig, ResilienceConfig
    from anchorid.domain.model import AnchorSite, Claim, ClaimType
    from anchorid.domain.ports import KeyValueStore
    from anchorid.domain.profile import ProfileBuild

ClientFactory = Callable[["ResilienceConfig"], ResilientClient]

log = getLogger(__name__)


def open_store(*, database_uri: str | None = None) -> SqlAlchemyKeyValueStore:
    """Open the configured SQLAlchemy store, creating its table when missing.

    Rows whose TTL has lapsed since the last run are purged on open.
    """

    uri = database_uri or get_database_config().uri
    store = SqlAlchemyKeyValueStore.from_uri(uri)
    purged = store.purge_expired()
    if purged:
        log.debug("Purged %d expired store entries", purged)
    return store


def build_verifier(
    *,
    store: KeyValueStore | None,
    site: AnchorSite | None = None,
    doh_config: DohConfig | None = None,
    proof_fetch_config: ProofFetchConfig | None = None,
    cache_policy: DnsCachePolicy | None = None,
    client_factory: ClientFactory | None = None,
) -> ClaimVerifier:
    """Wire the HTTP fetcher and the cached DoH lookup into a verifier.

    Without a store there is nowhere to cache DNS answers, so DNS claims fail
    with ``kv_not_available`` while HTTP-style claims still verify.
    """

    fetcher = HttpProofFetcher(
        config=proof_fetch_config or get_proof_fetch_config(),
        client_factory=client_factory,
    )
    txt_lookup = None
    if store is not None:
        resolver = DohClient(config=doh_config or get_doh_config(), client_factory=client_factory)
        txt_lookup = CachedTxtLookup(resolver=resolver, store=store, policy=cache_policy)
    return ClaimVerifier(fetcher=fetcher, txt_lookup=txt_lookup, site=site or get_site_config())


def submit_claim(
    subject_id: str,
    claim_type: ClaimType | str,
    target: str,
    *,
    store: KeyValueStore,
    site: AnchorSite | None = None,
    now: datetime | None = None,
) -> Claim:
    """Build a claim for ``target`` and upsert it into the subject's list."""

    claim = build_claim(subject_id, claim_type, target, site=site or get_site_config(), now=now)
    stored = ClaimRepository(store).upsert(subject_id, claim)
    log.info("Submitted claim %s for %s", stored.id, subject_id)
    return stored


def list_claims(subject_id: str, *, store: KeyValueStore) -> list[Claim]:
    return ClaimRepository(store).load(subject_id)


def remove_claim(subject_id: str, claim_id: str, *, store: KeyValueStore) -> bool:
    removed = ClaimRepository(store).remove(subject_id, claim_id)
    if removed:
        log.info("Removed claim %s for %s", claim_id, subject_id)
    return removed


def verified_urls(subject_id: str, *, store: KeyValueStore) -> list[str]:
    return ClaimRepository(store).verified_urls(subject_id)


async def verify_claim_async(
    subject_id: str,
    claim_id: str,
    *,
    store: KeyValueStore,
    verifier: ClaimVerifier | None = None,
    bypass_cache: bool = False,
    now: datetime | None = None,
) -> Claim:
    """Verify one stored claim and persist the updated state.

    Raises ``InvalidSubjectIdError``/``InvalidClaimIdError`` for malformed ids and
    ``ClaimNotFoundError`` when the claim does not exist; verification failures
    are recorded on the returned claim.
    """

    repository = ClaimRepository(store)
    claim = repository.get(subject_id, claim_id)
    active_verifier = verifier or build_verifier(store=store)
    outcome = await active_verifier.verify(claim, bypass_cache=bypass_cache)
    updated = record_outcome(claim, outcome, now=now)
    return repository.replace(subject_id, updated)


def verify_claim(
    subject_id: str,
    claim_id: str,
    *,
    store: KeyValueStore,
    verifier: ClaimVerifier | None = None,
    bypass_cache: bool = False,
    now: datetime | None = None,
) -> Claim:
    return asyncio.run(
        verify_claim_async(
            subject_id,
            claim_id,
            store=store,
            verifier=verifier,
            bypass_cache=bypass_cache,
            now=now,
        )
    )


def render_profile(
    subject_id: str,
    *,
    store: KeyValueStore,
    site: AnchorSite | None = None,
    options: BuildProfileOptions | None = None,
    now: datetime | None = None,
) -> ProfileBuild:
    """Read build of the subject's record; nothing is persisted."""

    stored = ProfileRepository(store).get(subject_id)
    return build_profile(
        subject_id,
        stored,
        None,
        verified_urls(subject_id, store=store),
        site=site or get_site_config(),
        options=options,
        now=now,
    )


def update_profile(
    subject_id: str,
    edit: Mapping[str, Any],
    *,
    store: KeyValueStore,
    site: AnchorSite | None = None,
    options: BuildProfileOptions | None = None,
    now: datetime | None = None,
) -> ProfileBuild:
    """Write build of the subject's record, persisted only when it changed."""

    profiles = ProfileRepository(store)
    result = build_profile(
        subject_id,
        profiles.get(subject_id),
        edit,
        verified_urls(subject_id, store=store),
        site=site or get_site_config(),
        options=options,
        now=now,
    )
    if result.changed:
        profiles.put(subject_id, result.record)
        log.info("Updated profile for %s", subject_id)
    else:
        log.debug("Profile for %s unchanged", subject_id)
    return result
