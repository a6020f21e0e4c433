"""Transactional persistence for master hotels, supplier hotels, review
candidates and the mapping audit trail.

The engine talks to the ``MappingStore`` protocol; ``SqliteMappingStore`` is
the bundled implementation. Every mutation of a supplier hotel's mapping goes
through ``update_supplier_mapping``, which compare-and-sets on the row's
``version`` so that a stale writer fails with ``ConflictError`` instead of
overwriting a newer mapping.
"""

from __future__ import annotations

import json
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Protocol

import structlog

from hotelmatch.errors import ConflictError, PersistenceError
from hotelmatch.types import (
    HistoryAction,
    MappingHistoryEntry,
    MappingStatus,
    MasterHotelRecord,
    MasterStatus,
    MatchCriteria,
    PotentialMatch,
    PotentialMatchStatus,
    SupplierHotelRecord,
)

log = structlog.get_logger()

_DESCRIPTIVE_FIELDS = (
    "hotel_name", "hotel_name_normalized", "address_line1", "city",
    "country_code", "postal_code", "latitude", "longitude",
    "phone_number", "chain_code",
)

SCHEMA = """
CREATE TABLE IF NOT EXISTS master_hotels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    hotel_name TEXT NOT NULL,
    hotel_name_normalized TEXT,
    address_line1 TEXT,
    city TEXT,
    country_code TEXT,
    postal_code TEXT,
    latitude REAL,
    longitude REAL,
    phone_number TEXT,
    chain_code TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS supplier_hotels (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    supplier_code TEXT NOT NULL,
    supplier_hotel_id TEXT NOT NULL,
    master_hotel_id INTEGER REFERENCES master_hotels(id),
    hotel_name TEXT NOT NULL,
    hotel_name_normalized TEXT,
    address_line1 TEXT,
    city TEXT,
    country_code TEXT,
    postal_code TEXT,
    latitude REAL,
    longitude REAL,
    phone_number TEXT,
    chain_code TEXT,
    mapping_status TEXT NOT NULL DEFAULT 'unmapped',
    mapping_confidence_score REAL,
    mapping_method TEXT,
    mapped_at TEXT,
    version INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    UNIQUE(supplier_code, supplier_hotel_id)
);

CREATE TABLE IF NOT EXISTS potential_hotel_matches (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    supplier_hotel_id INTEGER NOT NULL REFERENCES supplier_hotels(id) ON DELETE CASCADE,
    supplier_code TEXT NOT NULL,
    master_hotel_id INTEGER NOT NULL REFERENCES master_hotels(id),
    match_score REAL NOT NULL,
    match_criteria TEXT,
    status TEXT NOT NULL DEFAULT 'pending',
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS hotel_mapping_history (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    supplier_hotel_id INTEGER NOT NULL,
    supplier_code TEXT NOT NULL,
    old_master_hotel_id INTEGER,
    new_master_hotel_id INTEGER,
    action TEXT NOT NULL,
    confidence_score REAL,
    mapping_method TEXT,
    performed_by TEXT NOT NULL,
    performed_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_master_country ON master_hotels(country_code, status);
CREATE INDEX IF NOT EXISTS idx_supplier_status ON supplier_hotels(mapping_status);
CREATE INDEX IF NOT EXISTS idx_supplier_master ON supplier_hotels(master_hotel_id);
CREATE INDEX IF NOT EXISTS idx_matches_supplier ON potential_hotel_matches(supplier_hotel_id, status);
CREATE INDEX IF NOT EXISTS idx_history_supplier ON hotel_mapping_history(supplier_hotel_id);
"""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_dt(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


class MappingStore(Protocol):
    """Abstract transactional store the engine is written against."""

    def transaction(self) -> Any: ...

    def insert_master(self, record: MasterHotelRecord) -> MasterHotelRecord: ...

    def get_master(self, master_id: int) -> MasterHotelRecord | None: ...

    def list_masters(self, active_only: bool = True) -> list[MasterHotelRecord]: ...

    def set_master_status(self, master_id: int, status: MasterStatus) -> bool: ...

    def find_master_candidates(
        self,
        country_code: str | None,
        bbox: tuple[float, float, float, float] | None,
        limit: int | None,
    ) -> list[MasterHotelRecord]: ...

    def upsert_supplier(self, record: SupplierHotelRecord) -> tuple[SupplierHotelRecord, bool]: ...

    def get_supplier(self, supplier_hotel_id: int) -> SupplierHotelRecord | None: ...

    def update_supplier_mapping(
        self,
        supplier_hotel_id: int,
        expected_version: int,
        status: MappingStatus,
        master_hotel_id: int | None,
        confidence_score: float | None,
        mapping_method: str | None,
        mapped_at: datetime | None,
    ) -> SupplierHotelRecord: ...

    def bump_supplier_version(self, supplier_hotel_id: int, expected_version: int) -> int: ...

    def insert_potential_matches(self, matches: list[PotentialMatch]) -> None: ...

    def list_potential_matches(
        self, supplier_hotel_id: int, status: PotentialMatchStatus | None = None
    ) -> list[PotentialMatch]: ...

    def resolve_potential_matches(self, supplier_hotel_id: int, accepted_master_id: int | None) -> int: ...

    def reject_potential_match(self, supplier_hotel_id: int, master_hotel_id: int) -> bool: ...

    def append_history(self, entry: MappingHistoryEntry) -> MappingHistoryEntry: ...

    def list_history(self, supplier_hotel_id: int) -> list[MappingHistoryEntry]: ...

    def list_pending_reviews(
        self,
        supplier_code: str | None = None,
        country_code: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[tuple[SupplierHotelRecord, int]]: ...

    def mapping_statistics(self) -> dict[str, Any]: ...

    def iter_mappings(
        self, supplier_code: str | None = None, status: MappingStatus | None = None
    ) -> Iterator[dict[str, Any]]: ...


class SqliteMappingStore:
    """SQLite implementation of ``MappingStore``.

    One connection is shared by all threads; a re-entrant lock serializes
    transactions so each one sees and writes a consistent snapshot.
    """

    def __init__(self, db_path: str | Path = ":memory:") -> None:
        self.db_path = str(db_path)
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(
                self.db_path, isolation_level=None, check_same_thread=False
            )
        except sqlite3.Error as e:
            raise PersistenceError(f"cannot open database {self.db_path}: {e}") from e
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON")
        self._lock = threading.RLock()
        self._depth = 0

    def init_schema(self) -> None:
        with self._lock:
            try:
                self._conn.executescript(SCHEMA)
            except sqlite3.Error as e:
                raise PersistenceError(f"schema initialization failed: {e}") from e
        log.info("store_schema_initialized", db_path=self.db_path)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    # ------------------------------------------------------------------
    # transactions

    @contextmanager
    def transaction(self) -> Iterator[SqliteMappingStore]:
        """Run the enclosed calls atomically.

        Nested calls join the outermost transaction. Any exception rolls the
        whole transaction back; sqlite errors surface as ``PersistenceError``.
        """
        with self._lock:
            if self._depth > 0:
                self._depth += 1
                try:
                    yield self
                finally:
                    self._depth -= 1
                return

            self._depth = 1
            try:
                self._conn.execute("BEGIN IMMEDIATE")
                yield self
            except sqlite3.Error as e:
                self._rollback()
                raise PersistenceError(f"transaction failed: {e}") from e
            except BaseException:
                self._rollback()
                raise
            else:
                try:
                    self._conn.execute("COMMIT")
                except sqlite3.Error as e:
                    self._rollback()
                    raise PersistenceError(f"commit failed: {e}") from e
            finally:
                self._depth = 0

    def _rollback(self) -> None:
        if self._conn.in_transaction:
            self._conn.execute("ROLLBACK")

    @contextmanager
    def _reading(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
            except sqlite3.Error as e:
                raise PersistenceError(f"query failed: {e}") from e

    # ------------------------------------------------------------------
    # master hotels

    def insert_master(self, record: MasterHotelRecord) -> MasterHotelRecord:
        now = _utc_now()
        with self.transaction():
            cursor = self._conn.execute(
                """
                INSERT INTO master_hotels (
                    hotel_name, hotel_name_normalized, address_line1, city,
                    country_code, postal_code, latitude, longitude,
                    phone_number, chain_code, status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    record.hotel_name,
                    record.hotel_name_normalized,
                    record.address_line1,
                    record.city,
                    record.country_code,
                    record.postal_code,
                    record.latitude,
                    record.longitude,
                    record.phone_number,
                    record.chain_code,
                    record.status.value,
                    now.isoformat(),
                    now.isoformat(),
                ),
            )
        record.id = cursor.lastrowid
        record.created_at = now
        record.updated_at = now
        return record

    def get_master(self, master_id: int) -> MasterHotelRecord | None:
        with self._reading() as conn:
            row = conn.execute("SELECT * FROM master_hotels WHERE id = ?", (master_id,)).fetchone()
        return _row_to_master(row) if row else None

    def list_masters(self, active_only: bool = True) -> list[MasterHotelRecord]:
        query = "SELECT * FROM master_hotels"
        if active_only:
            query += " WHERE status = 'active'"
        query += " ORDER BY hotel_name, id"
        with self._reading() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_master(r) for r in rows]

    def set_master_status(self, master_id: int, status: MasterStatus) -> bool:
        with self.transaction():
            cursor = self._conn.execute(
                "UPDATE master_hotels SET status = ?, updated_at = ? WHERE id = ?",
                (status.value, _utc_now().isoformat(), master_id),
            )
        return cursor.rowcount > 0

    def find_master_candidates(
        self,
        country_code: str | None,
        bbox: tuple[float, float, float, float] | None,
        limit: int | None = None,
    ) -> list[MasterHotelRecord]:
        """Active masters in a country, optionally inside a bounding box.

        Masters without coordinates are always kept since they cannot be
        placed inside or outside the box.
        """
        clauses = ["status = 'active'"]
        params: list[Any] = []
        if country_code:
            clauses.append("country_code = ?")
            params.append(country_code)
        if bbox is not None:
            min_lat, max_lat, min_lon, max_lon = bbox
            clauses.append(
                "(latitude IS NULL OR longitude IS NULL OR "
                "(latitude BETWEEN ? AND ? AND longitude BETWEEN ? AND ?))"
            )
            params.extend([min_lat, max_lat, min_lon, max_lon])
        query = f"SELECT * FROM master_hotels WHERE {' AND '.join(clauses)} ORDER BY id"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)
        with self._reading() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_master(r) for r in rows]

    # ------------------------------------------------------------------
    # supplier hotels

    def upsert_supplier(self, record: SupplierHotelRecord) -> tuple[SupplierHotelRecord, bool]:
        """Insert a supplier hotel or refresh its descriptive fields.

        Mapping state of an existing row is never touched here.
        Returns the stored record and whether it was newly created.
        """
        now = _utc_now().isoformat()
        values = [getattr(record, f) for f in _DESCRIPTIVE_FIELDS]
        with self.transaction():
            existing = self._conn.execute(
                "SELECT id FROM supplier_hotels WHERE supplier_code = ? AND supplier_hotel_id = ?",
                (record.supplier_code, record.supplier_hotel_id),
            ).fetchone()
            if existing is None:
                cursor = self._conn.execute(
                    f"""
                    INSERT INTO supplier_hotels (
                        supplier_code, supplier_hotel_id, {', '.join(_DESCRIPTIVE_FIELDS)},
                        mapping_status, version, created_at, updated_at
                    ) VALUES (?, ?, {', '.join('?' for _ in _DESCRIPTIVE_FIELDS)}, 'unmapped', 0, ?, ?)
                    """,
                    [record.supplier_code, record.supplier_hotel_id, *values, now, now],
                )
                row_id, created = cursor.lastrowid, True
            else:
                assignments = ", ".join(f"{f} = ?" for f in _DESCRIPTIVE_FIELDS)
                self._conn.execute(
                    f"UPDATE supplier_hotels SET {assignments}, updated_at = ? WHERE id = ?",
                    [*values, now, existing["id"]],
                )
                row_id, created = existing["id"], False
            stored = self.get_supplier(row_id)
        return stored, created

    def get_supplier(self, supplier_hotel_id: int) -> SupplierHotelRecord | None:
        with self._reading() as conn:
            row = conn.execute(
                "SELECT * FROM supplier_hotels WHERE id = ?", (supplier_hotel_id,)
            ).fetchone()
        return _row_to_supplier(row) if row else None

    def get_supplier_by_key(self, supplier_code: str, supplier_hotel_id: str) -> SupplierHotelRecord | None:
        with self._reading() as conn:
            row = conn.execute(
                "SELECT * FROM supplier_hotels WHERE supplier_code = ? AND supplier_hotel_id = ?",
                (supplier_code, supplier_hotel_id),
            ).fetchone()
        return _row_to_supplier(row) if row else None

    def update_supplier_mapping(
        self,
        supplier_hotel_id: int,
        expected_version: int,
        status: MappingStatus,
        master_hotel_id: int | None,
        confidence_score: float | None,
        mapping_method: str | None,
        mapped_at: datetime | None,
    ) -> SupplierHotelRecord:
        with self.transaction():
            cursor = self._conn.execute(
                """
                UPDATE supplier_hotels
                SET mapping_status = ?,
                    master_hotel_id = ?,
                    mapping_confidence_score = ?,
                    mapping_method = ?,
                    mapped_at = ?,
                    version = version + 1,
                    updated_at = ?
                WHERE id = ? AND version = ?
                """,
                (
                    status.value,
                    master_hotel_id,
                    confidence_score,
                    mapping_method,
                    _iso(mapped_at),
                    _utc_now().isoformat(),
                    supplier_hotel_id,
                    expected_version,
                ),
            )
            if cursor.rowcount == 0:
                raise ConflictError(
                    f"supplier hotel {supplier_hotel_id} changed since version {expected_version}"
                )
            updated = self.get_supplier(supplier_hotel_id)
        return updated

    def bump_supplier_version(self, supplier_hotel_id: int, expected_version: int) -> int:
        """Claim the row for a mutation that leaves its mapping unchanged."""
        with self.transaction():
            cursor = self._conn.execute(
                "UPDATE supplier_hotels SET version = version + 1, updated_at = ? "
                "WHERE id = ? AND version = ?",
                (_utc_now().isoformat(), supplier_hotel_id, expected_version),
            )
            if cursor.rowcount == 0:
                raise ConflictError(
                    f"supplier hotel {supplier_hotel_id} changed since version {expected_version}"
                )
        return expected_version + 1

    # ------------------------------------------------------------------
    # potential matches

    def insert_potential_matches(self, matches: list[PotentialMatch]) -> None:
        now = _utc_now()
        with self.transaction():
            for m in matches:
                cursor = self._conn.execute(
                    """
                    INSERT INTO potential_hotel_matches (
                        supplier_hotel_id, supplier_code, master_hotel_id,
                        match_score, match_criteria, status, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        m.supplier_hotel_id,
                        m.supplier_code,
                        m.master_hotel_id,
                        m.match_score,
                        json.dumps(m.criteria.to_dict()),
                        m.status.value,
                        now.isoformat(),
                    ),
                )
                m.id = cursor.lastrowid
                m.created_at = now

    def list_potential_matches(
        self, supplier_hotel_id: int, status: PotentialMatchStatus | None = None
    ) -> list[PotentialMatch]:
        query = "SELECT * FROM potential_hotel_matches WHERE supplier_hotel_id = ?"
        params: list[Any] = [supplier_hotel_id]
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        query += " ORDER BY match_score DESC, master_hotel_id"
        with self._reading() as conn:
            rows = conn.execute(query, params).fetchall()
        return [_row_to_potential_match(r) for r in rows]

    def resolve_potential_matches(self, supplier_hotel_id: int, accepted_master_id: int | None) -> int:
        """Accept the chosen pending candidate and reject its siblings.

        With ``accepted_master_id=None`` every pending candidate is rejected.
        Returns the number of rows touched.
        """
        with self.transaction():
            cursor = self._conn.execute(
                """
                UPDATE potential_hotel_matches
                SET status = CASE WHEN master_hotel_id = ? THEN 'accepted' ELSE 'rejected' END
                WHERE supplier_hotel_id = ? AND status = 'pending'
                """,
                (accepted_master_id, supplier_hotel_id),
            )
        return cursor.rowcount

    def reject_potential_match(self, supplier_hotel_id: int, master_hotel_id: int) -> bool:
        with self.transaction():
            cursor = self._conn.execute(
                """
                UPDATE potential_hotel_matches SET status = 'rejected'
                WHERE supplier_hotel_id = ? AND master_hotel_id = ? AND status = 'pending'
                """,
                (supplier_hotel_id, master_hotel_id),
            )
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # mapping history (append-only)

    def append_history(self, entry: MappingHistoryEntry) -> MappingHistoryEntry:
        performed_at = entry.performed_at or _utc_now()
        with self.transaction():
            cursor = self._conn.execute(
                """
                INSERT INTO hotel_mapping_history (
                    supplier_hotel_id, supplier_code, old_master_hotel_id,
                    new_master_hotel_id, action, confidence_score,
                    mapping_method, performed_by, performed_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.supplier_hotel_id,
                    entry.supplier_code,
                    entry.old_master_hotel_id,
                    entry.new_master_hotel_id,
                    entry.action.value,
                    entry.confidence_score,
                    entry.mapping_method,
                    entry.performed_by,
                    performed_at.isoformat(),
                ),
            )
        entry.id = cursor.lastrowid
        entry.performed_at = performed_at
        return entry

    def list_history(self, supplier_hotel_id: int) -> list[MappingHistoryEntry]:
        with self._reading() as conn:
            rows = conn.execute(
                "SELECT * FROM hotel_mapping_history WHERE supplier_hotel_id = ? ORDER BY id",
                (supplier_hotel_id,),
            ).fetchall()
        return [_row_to_history(r) for r in rows]

    # ------------------------------------------------------------------
    # reporting

    def list_pending_reviews(
        self,
        supplier_code: str | None = None,
        country_code: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[tuple[SupplierHotelRecord, int]]:
        clauses = ["sh.mapping_status = 'pending_review'"]
        params: list[Any] = []
        if supplier_code:
            clauses.append("sh.supplier_code = ?")
            params.append(supplier_code)
        if country_code:
            clauses.append("sh.country_code = ?")
            params.append(country_code)
        params.extend([limit, offset])
        query = f"""
            SELECT sh.*, COUNT(pm.id) AS candidate_count
            FROM supplier_hotels sh
            LEFT JOIN potential_hotel_matches pm
                ON pm.supplier_hotel_id = sh.id AND pm.status = 'pending'
            WHERE {' AND '.join(clauses)}
            GROUP BY sh.id
            ORDER BY candidate_count DESC, sh.id
            LIMIT ? OFFSET ?
        """
        with self._reading() as conn:
            rows = conn.execute(query, params).fetchall()
        return [(_row_to_supplier(r), r["candidate_count"]) for r in rows]

    def mapping_statistics(self) -> dict[str, Any]:
        with self._reading() as conn:
            total_suppliers = conn.execute(
                "SELECT COUNT(DISTINCT supplier_code) FROM supplier_hotels"
            ).fetchone()[0]
            by_status = {
                r["mapping_status"]: r["count"]
                for r in conn.execute(
                    "SELECT mapping_status, COUNT(*) AS count FROM supplier_hotels GROUP BY mapping_status"
                )
            }
            by_supplier = [
                {
                    "supplier_code": r["supplier_code"],
                    "total_hotels": r["total_hotels"],
                    "mapped_hotels": r["mapped_hotels"],
                    "mapping_percentage": round(r["mapped_hotels"] * 100.0 / r["total_hotels"], 2),
                }
                for r in conn.execute(
                    """
                    SELECT supplier_code,
                           COUNT(*) AS total_hotels,
                           SUM(CASE WHEN master_hotel_id IS NOT NULL THEN 1 ELSE 0 END) AS mapped_hotels
                    FROM supplier_hotels
                    GROUP BY supplier_code
                    ORDER BY supplier_code
                    """
                )
            ]
            total_masters = conn.execute(
                "SELECT COUNT(*) FROM master_hotels WHERE status = 'active'"
            ).fetchone()[0]
        return {
            "total_suppliers": total_suppliers,
            "total_master_hotels": total_masters,
            "by_status": by_status,
            "by_supplier": by_supplier,
            "pending_reviews": by_status.get(MappingStatus.PENDING_REVIEW.value, 0),
        }

    def iter_mappings(
        self, supplier_code: str | None = None, status: MappingStatus | None = None
    ) -> Iterator[dict[str, Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        if supplier_code:
            clauses.append("sh.supplier_code = ?")
            params.append(supplier_code)
        if status is not None:
            clauses.append("sh.mapping_status = ?")
            params.append(status.value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        query = f"""
            SELECT
                sh.supplier_code,
                sh.supplier_hotel_id,
                sh.hotel_name AS supplier_hotel_name,
                sh.address_line1 AS supplier_address,
                sh.city AS supplier_city,
                sh.country_code AS supplier_country,
                sh.master_hotel_id,
                mh.hotel_name AS master_hotel_name,
                mh.address_line1 AS master_address,
                mh.city AS master_city,
                mh.country_code AS master_country,
                sh.mapping_status,
                sh.mapping_confidence_score AS confidence_score,
                sh.mapping_method,
                sh.mapped_at
            FROM supplier_hotels sh
            LEFT JOIN master_hotels mh ON mh.id = sh.master_hotel_id
            {where}
            ORDER BY sh.supplier_code, sh.supplier_hotel_id
        """
        with self._reading() as conn:
            rows = conn.execute(query, params).fetchall()
        for row in rows:
            yield dict(row)


def _row_to_master(row: sqlite3.Row) -> MasterHotelRecord:
    return MasterHotelRecord(
        id=row["id"],
        hotel_name=row["hotel_name"],
        hotel_name_normalized=row["hotel_name_normalized"] or "",
        address_line1=row["address_line1"],
        city=row["city"],
        country_code=row["country_code"],
        postal_code=row["postal_code"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        phone_number=row["phone_number"],
        chain_code=row["chain_code"],
        status=MasterStatus(row["status"]),
        created_at=_parse_dt(row["created_at"]),
        updated_at=_parse_dt(row["updated_at"]),
    )


def _row_to_supplier(row: sqlite3.Row) -> SupplierHotelRecord:
    return SupplierHotelRecord(
        id=row["id"],
        supplier_code=row["supplier_code"],
        supplier_hotel_id=row["supplier_hotel_id"],
        hotel_name=row["hotel_name"],
        hotel_name_normalized=row["hotel_name_normalized"] or "",
        address_line1=row["address_line1"],
        city=row["city"],
        country_code=row["country_code"],
        postal_code=row["postal_code"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        phone_number=row["phone_number"],
        chain_code=row["chain_code"],
        mapping_status=MappingStatus(row["mapping_status"]),
        master_hotel_id=row["master_hotel_id"],
        mapping_confidence_score=row["mapping_confidence_score"],
        mapping_method=row["mapping_method"],
        mapped_at=_parse_dt(row["mapped_at"]),
        version=row["version"],
        created_at=_parse_dt(row["created_at"]),
    )


def _row_to_potential_match(row: sqlite3.Row) -> PotentialMatch:
    criteria = json.loads(row["match_criteria"]) if row["match_criteria"] else {}
    return PotentialMatch(
        id=row["id"],
        supplier_hotel_id=row["supplier_hotel_id"],
        supplier_code=row["supplier_code"],
        master_hotel_id=row["master_hotel_id"],
        match_score=row["match_score"],
        criteria=MatchCriteria.from_dict(criteria),
        status=PotentialMatchStatus(row["status"]),
        created_at=_parse_dt(row["created_at"]),
    )


def _row_to_history(row: sqlite3.Row) -> MappingHistoryEntry:
    return MappingHistoryEntry(
        id=row["id"],
        supplier_hotel_id=row["supplier_hotel_id"],
        supplier_code=row["supplier_code"],
        old_master_hotel_id=row["old_master_hotel_id"],
        new_master_hotel_id=row["new_master_hotel_id"],
        action=HistoryAction(row["action"]),
        confidence_score=row["confidence_score"],
        mapping_method=row["mapping_method"],
        performed_by=row["performed_by"],
        performed_at=_parse_dt(row["performed_at"]),
    )
