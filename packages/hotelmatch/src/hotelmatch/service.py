"""Mapping service: ingestion, automatic matching and reviewer adjudication.

This is the Python API over the engine. The HTTP server and the CLI are thin
wrappers around a ``MappingService``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any

import structlog

from hotelmatch import workflow
from hotelmatch.candidates import CandidateGenerator
from hotelmatch.config import MatchConfig, ServiceConfig
from hotelmatch.errors import HotelMatchError, NotFoundError, ValidationError
from hotelmatch.io import master_from_mapping, supplier_from_mapping, validate_master, validate_supplier
from hotelmatch.matcher import Matcher
from hotelmatch.store import MappingStore, SqliteMappingStore
from hotelmatch.types import (
    BatchImportResult,
    ImportOutcome,
    MappingHistoryEntry,
    MappingStatus,
    MasterHotelRecord,
    MasterImportResult,
    MasterStatus,
    MatchResult,
    PendingReview,
    PotentialMatch,
    PotentialMatchStatus,
    RankedCandidate,
    RecommendedAction,
    RecordError,
    SupplierHotelRecord,
)

log = structlog.get_logger()

MasterInput = MasterHotelRecord | Mapping[str, Any]
SupplierInput = SupplierHotelRecord | Mapping[str, Any]

METHOD_MANUAL = "manual"
METHOD_MANUAL_NEW_MASTER = "manual_new_master"
SYSTEM_ACTOR = "system"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def parse_mapping_status(value: MappingStatus | str | None) -> MappingStatus | None:
    if value is None or isinstance(value, MappingStatus):
        return value
    try:
        return MappingStatus(value)
    except ValueError:
        raise ValidationError(f"unknown mapping status: {value!r}", field="status") from None


class MappingService:
    """Supplier-to-master mapping operations over a transactional store."""

    def __init__(self, store: MappingStore, config: MatchConfig | None = None) -> None:
        self.store = store
        self.config = config or MatchConfig()
        self.matcher = Matcher(self.config)
        self.candidates = CandidateGenerator(store, self.config.candidates)

    @classmethod
    def from_config(cls, config: ServiceConfig) -> MappingService:
        store = SqliteMappingStore(config.db_path)
        store.init_schema()
        return cls(store, config.match)

    # ------------------------------------------------------------------
    # master registry

    def import_master_record(self, data: MasterInput) -> MasterHotelRecord:
        if isinstance(data, MasterHotelRecord):
            record = validate_master(data)
        else:
            record = master_from_mapping(data)
        master = self.store.insert_master(record)
        log.info("master_imported", master_hotel_id=master.id, hotel_name=master.hotel_name)
        return master

    def import_master_records(self, rows: Iterable[MasterInput]) -> MasterImportResult:
        result = MasterImportResult()
        for index, row in enumerate(rows):
            try:
                result.masters.append(self.import_master_record(row))
            except HotelMatchError as e:
                result.errors.append(RecordError(index=index, supplier_hotel_id=None, error=str(e)))
        log.info("masters_imported", imported=len(result.masters), failed=len(result.errors))
        return result

    def deactivate_master(self, master_hotel_id: int) -> MasterHotelRecord:
        if not self.store.set_master_status(master_hotel_id, MasterStatus.INACTIVE):
            raise NotFoundError(f"master hotel {master_hotel_id} not found")
        log.info("master_deactivated", master_hotel_id=master_hotel_id)
        return self.store.get_master(master_hotel_id)

    def list_masters(self) -> list[MasterHotelRecord]:
        return self.store.list_masters(active_only=True)

    # ------------------------------------------------------------------
    # supplier ingestion and automatic matching

    def import_supplier_record(
        self, data: SupplierInput, supplier_code: str | None = None
    ) -> ImportOutcome:
        """Upsert one supplier hotel and, if still unmapped, match it.

        Raises ValidationError before anything is stored when identity
        fields are missing.
        """
        if isinstance(data, SupplierHotelRecord):
            if supplier_code is not None:
                data.supplier_code = supplier_code
            record = validate_supplier(data)
        else:
            record = supplier_from_mapping(data, supplier_code)
        return self._import_validated(record)

    def import_supplier_batch(
        self, rows: Iterable[SupplierInput], supplier_code: str | None = None
    ) -> BatchImportResult:
        """Import many supplier hotels, matching them on a worker pool.

        Failures are recorded per row; one bad row never aborts the batch.
        """
        result = BatchImportResult()
        validated: list[tuple[int, SupplierHotelRecord]] = []
        seen: set[tuple[str, str]] = set()

        for index, row in enumerate(rows):
            try:
                if isinstance(row, SupplierHotelRecord):
                    if supplier_code is not None:
                        row.supplier_code = supplier_code
                    record = validate_supplier(row)
                else:
                    record = supplier_from_mapping(row, supplier_code)
            except ValidationError as e:
                raw_id = row.get("supplier_hotel_id") if isinstance(row, Mapping) else None
                result.errors.append(RecordError(index=index, supplier_hotel_id=raw_id, error=str(e)))
                continue

            key = (record.supplier_code, record.supplier_hotel_id)
            if key in seen:
                result.errors.append(RecordError(
                    index=index,
                    supplier_hotel_id=record.supplier_hotel_id,
                    error="duplicate supplier hotel id in batch",
                ))
                continue
            seen.add(key)
            validated.append((index, record))

        log.info("supplier_batch_start", rows=len(validated), rejected=len(result.errors))

        with ThreadPoolExecutor(max_workers=self.config.batch.max_workers) as pool:
            futures = [
                (index, record, pool.submit(self._import_validated, record))
                for index, record in validated
            ]
            for index, record, future in futures:
                try:
                    result.outcomes.append(future.result())
                except Exception as e:
                    log.warning(
                        "supplier_import_failed",
                        supplier_hotel_id=record.supplier_hotel_id,
                        error=str(e),
                    )
                    result.errors.append(RecordError(
                        index=index, supplier_hotel_id=record.supplier_hotel_id, error=str(e)
                    ))

        result.errors.sort(key=lambda e: e.index)
        log.info(
            "supplier_batch_done",
            imported=result.imported,
            failed=result.failed,
            actions=result.count_by_action(),
        )
        return result

    def _import_validated(self, record: SupplierHotelRecord) -> ImportOutcome:
        stored, created = self.store.upsert_supplier(record)

        if stored.mapping_status is not MappingStatus.UNMAPPED:
            log.debug(
                "supplier_refreshed",
                supplier_hotel_id=stored.id,
                mapping_status=stored.mapping_status.value,
            )
            return ImportOutcome(
                supplier_hotel_id=stored.id,
                recommended_action=None,
                mapping_status=stored.mapping_status,
                created=created,
            )

        try:
            masters = self.candidates.candidates_for(stored)
            matches = self.matcher.match_supplier_hotel(stored, masters)
            recommendation = self.matcher.recommend(matches)
        except Exception as e:
            log.warning(
                "supplier_matching_failed",
                supplier_hotel_id=stored.id,
                supplier_code=stored.supplier_code,
                error=str(e),
            )
            return ImportOutcome(
                supplier_hotel_id=stored.id,
                recommended_action=None,
                mapping_status=MappingStatus.UNMAPPED,
                created=created,
                error=str(e),
            )

        status = self._apply_recommendation(stored, recommendation.action, matches)
        log.info(
            "supplier_imported",
            supplier_hotel_id=stored.id,
            supplier_code=stored.supplier_code,
            action=recommendation.action.value,
            best_score=(
                round(recommendation.best_match.confidence_score, 4)
                if recommendation.best_match else None
            ),
        )
        return ImportOutcome(
            supplier_hotel_id=stored.id,
            recommended_action=recommendation.action,
            mapping_status=status,
            created=created,
        )

    def _apply_recommendation(
        self,
        supplier: SupplierHotelRecord,
        action: RecommendedAction,
        matches: list[MatchResult],
    ) -> MappingStatus:
        if action is RecommendedAction.CREATE_NEW:
            return supplier.mapping_status

        with self.store.transaction():
            current = self._require_supplier(supplier.id)

            if action is RecommendedAction.AUTO_MAP:
                best = matches[0]
                t = workflow.auto_map(current.mapping_status)
                if not t.ok:
                    raise t.error
                self.store.update_supplier_mapping(
                    current.id,
                    current.version,
                    t.status,
                    best.master_hotel_id,
                    best.confidence_score,
                    best.match_method,
                    _now(),
                )
                self.store.append_history(MappingHistoryEntry(
                    supplier_hotel_id=current.id,
                    supplier_code=current.supplier_code,
                    action=t.history_action,
                    old_master_hotel_id=current.master_hotel_id,
                    new_master_hotel_id=best.master_hotel_id,
                    confidence_score=best.confidence_score,
                    mapping_method=best.match_method,
                    performed_by=SYSTEM_ACTOR,
                ))
                return t.status

            t = workflow.queue_for_review(current.mapping_status)
            if not t.ok:
                raise t.error
            self.store.update_supplier_mapping(
                current.id, current.version, t.status, None, None, None, None
            )
            self.store.insert_potential_matches([
                PotentialMatch(
                    supplier_hotel_id=current.id,
                    supplier_code=current.supplier_code,
                    master_hotel_id=m.master_hotel_id,
                    match_score=m.confidence_score,
                    criteria=m.criteria,
                )
                for m in matches[: self.config.review.top_n]
            ])
            return t.status

    # ------------------------------------------------------------------
    # review queue

    def list_pending_reviews(
        self,
        supplier_code: str | None = None,
        country_code: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[PendingReview]:
        if limit < 1:
            raise ValidationError("limit must be positive", field="limit")
        if offset < 0:
            raise ValidationError("offset must not be negative", field="offset")
        rows = self.store.list_pending_reviews(
            supplier_code=supplier_code,
            country_code=country_code.upper() if country_code else None,
            limit=limit,
            offset=offset,
        )
        return [PendingReview(supplier=s, candidate_count=n) for s, n in rows]

    def get_supplier(self, supplier_hotel_id: int) -> SupplierHotelRecord:
        return self._require_supplier(supplier_hotel_id)

    def get_potential_matches(
        self, supplier_hotel_id: int, include_resolved: bool = False
    ) -> list[RankedCandidate]:
        """Persisted candidates for a supplier hotel, best first, with their masters."""
        self._require_supplier(supplier_hotel_id)
        status = None if include_resolved else PotentialMatchStatus.PENDING
        ranked: list[RankedCandidate] = []
        for pm in self.store.list_potential_matches(supplier_hotel_id, status):
            master = self.store.get_master(pm.master_hotel_id)
            if master is not None:
                ranked.append(RankedCandidate(potential_match=pm, master=master))
        return ranked

    # ------------------------------------------------------------------
    # reviewer actions

    def confirm_match(
        self,
        supplier_hotel_id: int,
        master_hotel_id: int,
        actor: str,
        expected_version: int | None = None,
    ) -> SupplierHotelRecord:
        with self.store.transaction():
            supplier = self._require_supplier(supplier_hotel_id)
            self._require_active_master(master_hotel_id)
            updated = self._confirm(
                supplier, master_hotel_id, actor, expected_version, METHOD_MANUAL
            )
        log.info(
            "match_confirmed",
            supplier_hotel_id=supplier_hotel_id,
            master_hotel_id=master_hotel_id,
            actor=actor,
        )
        return updated

    def reject_match(
        self,
        supplier_hotel_id: int,
        master_hotel_id: int,
        actor: str,
        expected_version: int | None = None,
    ) -> SupplierHotelRecord:
        """Drop one candidate; the supplier's status is left as it was."""
        with self.store.transaction():
            supplier = self._require_supplier(supplier_hotel_id)
            t = workflow.reject(supplier.mapping_status)
            if not t.ok:
                raise t.error
            if not self.store.reject_potential_match(supplier_hotel_id, master_hotel_id):
                raise NotFoundError(
                    f"no pending candidate {master_hotel_id} for supplier hotel {supplier_hotel_id}"
                )
            version = supplier.version if expected_version is None else expected_version
            self.store.bump_supplier_version(supplier_hotel_id, version)
            updated = self._require_supplier(supplier_hotel_id)
        log.info(
            "match_rejected",
            supplier_hotel_id=supplier_hotel_id,
            master_hotel_id=master_hotel_id,
            actor=actor,
        )
        return updated

    def mark_no_match(
        self,
        supplier_hotel_id: int,
        actor: str,
        expected_version: int | None = None,
    ) -> SupplierHotelRecord:
        with self.store.transaction():
            supplier = self._require_supplier(supplier_hotel_id)
            t = workflow.mark_no_match(
                supplier.mapping_status, version_checked=expected_version is not None
            )
            if not t.ok:
                raise t.error
            version = supplier.version if expected_version is None else expected_version
            updated = self.store.update_supplier_mapping(
                supplier_hotel_id, version, t.status, None, None, None, _now()
            )
            self.store.resolve_potential_matches(supplier_hotel_id, None)
            self.store.append_history(MappingHistoryEntry(
                supplier_hotel_id=supplier_hotel_id,
                supplier_code=supplier.supplier_code,
                action=t.history_action,
                old_master_hotel_id=supplier.master_hotel_id,
                new_master_hotel_id=None,
                performed_by=actor,
            ))
        log.info("marked_no_match", supplier_hotel_id=supplier_hotel_id, actor=actor)
        return updated

    def create_master_and_map(
        self,
        supplier_hotel_id: int,
        master_data: MasterInput,
        actor: str,
        expected_version: int | None = None,
    ) -> tuple[SupplierHotelRecord, MasterHotelRecord]:
        """Promote new master data and confirm the supplier hotel against it.

        Both writes share one transaction: if the confirmation fails the new
        master is rolled back too.
        """
        if isinstance(master_data, MasterHotelRecord):
            record = validate_master(master_data)
        else:
            record = master_from_mapping(master_data)

        with self.store.transaction():
            supplier = self._require_supplier(supplier_hotel_id)
            master = self.store.insert_master(record)
            updated = self._confirm(
                supplier, master.id, actor, expected_version, METHOD_MANUAL_NEW_MASTER
            )
        log.info(
            "master_created_and_mapped",
            supplier_hotel_id=supplier_hotel_id,
            master_hotel_id=master.id,
            actor=actor,
        )
        return updated, master

    def _confirm(
        self,
        supplier: SupplierHotelRecord,
        master_hotel_id: int,
        actor: str,
        expected_version: int | None,
        method: str,
    ) -> SupplierHotelRecord:
        t = workflow.confirm(
            supplier.mapping_status,
            has_master=supplier.master_hotel_id is not None,
            version_checked=expected_version is not None,
        )
        if not t.ok:
            raise t.error
        version = supplier.version if expected_version is None else expected_version
        updated = self.store.update_supplier_mapping(
            supplier.id, version, t.status, master_hotel_id, 1.0, method, _now()
        )
        self.store.resolve_potential_matches(supplier.id, master_hotel_id)
        self.store.append_history(MappingHistoryEntry(
            supplier_hotel_id=supplier.id,
            supplier_code=supplier.supplier_code,
            action=t.history_action,
            old_master_hotel_id=supplier.master_hotel_id,
            new_master_hotel_id=master_hotel_id,
            confidence_score=1.0,
            mapping_method=method,
            performed_by=actor,
        ))
        return updated

    # ------------------------------------------------------------------
    # reporting

    def get_mapping_statistics(self) -> dict[str, Any]:
        return self.store.mapping_statistics()

    def export_mappings(
        self,
        supplier_code: str | None = None,
        status: MappingStatus | str | None = None,
    ) -> list[dict[str, Any]]:
        return list(self.store.iter_mappings(supplier_code, parse_mapping_status(status)))

    def get_mapping_history(self, supplier_hotel_id: int) -> list[MappingHistoryEntry]:
        self._require_supplier(supplier_hotel_id)
        return self.store.list_history(supplier_hotel_id)

    # ------------------------------------------------------------------

    def _require_supplier(self, supplier_hotel_id: int) -> SupplierHotelRecord:
        supplier = self.store.get_supplier(supplier_hotel_id)
        if supplier is None:
            raise NotFoundError(f"supplier hotel {supplier_hotel_id} not found")
        return supplier

    def _require_active_master(self, master_hotel_id: int) -> MasterHotelRecord:
        master = self.store.get_master(master_hotel_id)
        if master is None:
            raise NotFoundError(f"master hotel {master_hotel_id} not found")
        if master.status is not MasterStatus.ACTIVE:
            raise ValidationError(f"master hotel {master_hotel_id} is inactive", field="master_hotel_id")
        return master
