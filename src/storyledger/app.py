"""Application entry points wiring the configured store into domain services."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from storyledger.config import (
    StoreBackend,
    get_postgrest_config,
    get_reconciliation_config,
    get_store_backend,
)
from storyledger.domain.errors import StorytellerNotFoundError
from storyledger.domain.linking import StorytellerIndex, resolve_links
from storyledger.domain.ports import LedgerUnitOfWork
from storyledger.domain.privacy import ALL_PROFILE_FIELDS
from storyledger.domain.privacy import audit_visibility as audit_profiles
from storyledger.domain.privacy import visible_profile as redact_profile
from storyledger.domain.reconciliation import RunMode
from storyledger.domain.reconciliation import run_reconciliation as reconcile_corpus

if TYPE_CHECKING:
    from collections.abc import Iterable
    from uuid import UUID

    from storyledger.domain.linking import LinkResolution
    from storyledger.domain.model import ContentItem, LinkEdge, StoredLink, Storyteller
    from storyledger.domain.privacy import ProfileField, RedactedProfile, VisibilityAudit
    from storyledger.domain.reconciliation import PageRetryPolicy, ReconciliationResult

UnitOfWorkFactory = Callable[[], LedgerUnitOfWork]

log = getLogger(__name__)


def default_unit_of_work_factory() -> UnitOfWorkFactory:
    """Return a unit-of-work factory for the store selected by ``STORYLEDGER_STORE``."""

    backend = get_store_backend()
    if backend is StoreBackend.POSTGREST:
        from storyledger.adapters.postgrest import (  # noqa: PLC0415
            PostgrestClient,
            PostgrestLedgerUnitOfWork,
        )

        config = get_postgrest_config()
        return lambda: PostgrestLedgerUnitOfWork(lambda: PostgrestClient(config=config))

    from storyledger.adapters.sqlalchemy.unit_of_work import (  # noqa: PLC0415
        SqlAlchemyLedgerUnitOfWork,
        is_started,
        startup,
    )

    if not is_started():
        startup()
    return SqlAlchemyLedgerUnitOfWork


def run_reconciliation(
    *,
    page_size: int | None = None,
    mode: RunMode = RunMode.DRY_RUN,
    sample_limit: int | None = None,
    retry: PageRetryPolicy | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ReconciliationResult:
    """Reconcile stored links for the whole corpus (dry run unless ``mode`` is apply)."""

    config = get_reconciliation_config()
    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    result = reconcile_corpus(
        unit_of_work_factory=effective_uow,
        page_size=page_size if page_size is not None else config.page_size,
        mode=mode,
        retry=retry or config.retry,
        sample_limit=sample_limit if sample_limit is not None else config.sample_limit,
    )
    log.info(
        f"Reconciliation ({mode}) finished: pages={result.pages_processed}, "
        f"corrected={result.corrected}, ambiguous={result.ambiguous_flagged}, "
        f"orphaned={result.orphaned}, errors={result.errors}"
    )
    return result


def resolve_owners(
    content_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[LinkEdge]:
    """Ranked candidate owners of one content item; empty for an unknown id."""

    resolution = _resolve_one(content_id, unit_of_work_factory or default_unit_of_work_factory())
    return list(resolution.edges) if resolution is not None else []


def stored_links(
    content_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[StoredLink]:
    """Link rows currently persisted for ``content_id``."""

    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        return list(uow.repositories.links.links_for(content_id))


def attributed_storytellers(
    content_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[UUID]:
    """Storytellers a page may credit for ``content_id``.

    Withholds attribution (empty list) whenever the resolution is ambiguous,
    low confidence or needs review.
    """

    resolution = _resolve_one(content_id, unit_of_work_factory or default_unit_of_work_factory())
    if resolution is None or not resolution.is_confident:
        return []
    return [edge.storyteller_id for edge in resolution.top_edges]


def visible_profile(
    storyteller_id: UUID,
    requested_fields: Iterable[ProfileField] = ALL_PROFILE_FIELDS,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> RedactedProfile:
    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        storyteller = uow.repositories.storytellers.get(storyteller_id)
    return redact_profile(storyteller, requested_fields)


def content_for_storyteller(
    storyteller_id: UUID,
    *,
    confident_only: bool = True,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> list[ContentItem]:
    """Content the resolver attributes to ``storyteller_id``.

    Candidates come from the store's reference, array-overlap and substring
    queries; each candidate is then resolved against the full storyteller
    index and kept only if its top edges name the storyteller. Direct
    references match regardless of case and padding. Membership entries are
    matched in lowercase or uppercase form only, and attribution text must
    contain the display name or email verbatim (ignoring case).
    """

    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        repositories = uow.repositories
        storyteller = repositories.storytellers.get(storyteller_id)
        if storyteller is None:
            return []
        index = StorytellerIndex(repositories.storytellers.list_all())
        candidates = _candidate_content(uow, storyteller)

    matches: list[ContentItem] = []
    for item in candidates:
        resolution = resolve_links(item, index)
        if confident_only and not resolution.is_confident:
            continue
        if storyteller_id in resolution.recommended_owner_ids:
            matches.append(item)
    log.debug(f"{len(matches)} of {len(candidates)} candidates confirmed for {storyteller_id}")
    return matches


def update_privacy(
    storyteller_id: UUID,
    *,
    consent_given: bool | None = None,
    public_display: bool | None = None,
    show_photo: bool | None = None,
    show_location: bool | None = None,
    show_organisation: bool | None = None,
    now: datetime | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Storyteller:
    """Change consent/privacy flags; ``None`` leaves a flag as it is."""

    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        storytellers = uow.repositories.storytellers
        storyteller = storytellers.get(storyteller_id)
        if storyteller is None:
            raise StorytellerNotFoundError(storyteller_id)
        before = storyteller.privacy
        after = storyteller.update_privacy(
            now=now or datetime.now(UTC),
            consent_given=consent_given,
            public_display=public_display,
            show_photo=show_photo,
            show_location=show_location,
            show_organisation=show_organisation,
        )
        storytellers.save(storyteller)
        uow.commit()
    log.info(f"Privacy updated for storyteller {storyteller_id}: {before} -> {after}")
    return storyteller


def delete_storyteller(
    storyteller_id: UUID,
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> int:
    """Remove a storyteller and its stored links; returns the number of links removed.

    Raw link fields on content items are left as imported, so later
    reconciliation runs report those items instead of re-linking them.
    """

    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        repositories = uow.repositories
        storyteller = repositories.storytellers.get(storyteller_id)
        if storyteller is None:
            raise StorytellerNotFoundError(storyteller_id)
        removed = repositories.links.remove_storyteller(storyteller_id)
        repositories.storytellers.remove(storyteller)
        uow.commit()
    log.info(f"Deleted storyteller {storyteller_id} and {removed} stored link(s)")
    return removed


def audit_visibility(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> VisibilityAudit:
    effective_uow = unit_of_work_factory or default_unit_of_work_factory()
    with effective_uow() as uow:
        storytellers = uow.repositories.storytellers.list_all()
    return audit_profiles(storytellers)


def _resolve_one(
    content_id: UUID,
    unit_of_work_factory: UnitOfWorkFactory,
) -> LinkResolution | None:
    with unit_of_work_factory() as uow:
        repositories = uow.repositories
        item = repositories.content.get(content_id)
        if item is None:
            return None
        index = StorytellerIndex(repositories.storytellers.list_all())
    return resolve_links(item, index)


def _candidate_content(uow: LedgerUnitOfWork, storyteller: Storyteller) -> list[ContentItem]:
    content = uow.repositories.content
    ref = str(storyteller.id)
    found: dict[UUID, ContentItem] = {}
    batches = [
        content.find_by_owner_ref(ref),
        content.find_by_member_refs([ref, ref.upper()]),
        content.search_attribution(storyteller.display_name),
    ]
    if storyteller.email:
        batches.append(content.search_attribution(storyteller.email))
    for batch in batches:
        for item in batch:
            found.setdefault(item.id, item)
    return list(found.values())
