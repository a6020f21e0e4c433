"""Tests for the SQLite mapping store."""

import pytest

from hotelmatch.errors import ConflictError, PersistenceError
from hotelmatch.store import SqliteMappingStore
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


def _supplier(hotel_id="S1", name="Grand Plaza", **kwargs):
    return SupplierHotelRecord(supplier_code="ACME", supplier_hotel_id=hotel_id, hotel_name=name, **kwargs)


def test_insert_and_get_master(store):
    master = store.insert_master(MasterHotelRecord(hotel_name="Grand Plaza", country_code="GB"))
    assert master.id is not None
    loaded = store.get_master(master.id)
    assert loaded.hotel_name == "Grand Plaza"
    assert loaded.status == MasterStatus.ACTIVE
    assert loaded.created_at is not None


def test_deactivated_master_not_listed(store):
    master = store.insert_master(MasterHotelRecord(hotel_name="Grand Plaza"))
    assert store.set_master_status(master.id, MasterStatus.INACTIVE)
    assert store.list_masters() == []
    assert len(store.list_masters(active_only=False)) == 1
    assert not store.set_master_status(9999, MasterStatus.INACTIVE)


def test_upsert_creates_then_updates(store):
    created, was_created = store.upsert_supplier(_supplier(city="London"))
    assert was_created
    assert created.mapping_status == MappingStatus.UNMAPPED
    assert created.version == 0

    updated, was_created = store.upsert_supplier(_supplier(name="Grand Plaza London", city="London"))
    assert not was_created
    assert updated.id == created.id
    assert updated.hotel_name == "Grand Plaza London"


def test_upsert_never_touches_mapping(store):
    master = store.insert_master(MasterHotelRecord(hotel_name="Grand Plaza"))
    supplier, _ = store.upsert_supplier(_supplier())
    store.update_supplier_mapping(
        supplier.id, 0, MappingStatus.MANUALLY_MAPPED, master.id, 1.0, "manual", None
    )

    refreshed, _ = store.upsert_supplier(_supplier(name="Renamed"))
    assert refreshed.mapping_status == MappingStatus.MANUALLY_MAPPED
    assert refreshed.master_hotel_id == master.id
    assert refreshed.hotel_name == "Renamed"


def test_update_mapping_compare_and_set(store):
    supplier, _ = store.upsert_supplier(_supplier())
    updated = store.update_supplier_mapping(
        supplier.id, 0, MappingStatus.PENDING_REVIEW, None, None, None, None
    )
    assert updated.version == 1

    with pytest.raises(ConflictError):
        store.update_supplier_mapping(
            supplier.id, 0, MappingStatus.NO_MATCH_AVAILABLE, None, None, None, None
        )
    assert store.get_supplier(supplier.id).mapping_status == MappingStatus.PENDING_REVIEW


def test_bump_version(store):
    supplier, _ = store.upsert_supplier(_supplier())
    assert store.bump_supplier_version(supplier.id, 0) == 1
    with pytest.raises(ConflictError):
        store.bump_supplier_version(supplier.id, 0)


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.insert_master(MasterHotelRecord(hotel_name="Grand Plaza"))
            raise RuntimeError("boom")
    assert store.list_masters() == []


def test_sqlite_errors_become_persistence_errors(store):
    with pytest.raises(PersistenceError):
        with store.transaction():
            store.insert_master(MasterHotelRecord(hotel_name="Grand Plaza"))
            store._conn.execute("INSERT INTO no_such_table VALUES (1)")
    assert store.list_masters() == []


def test_potential_matches_resolution(store):
    m1 = store.insert_master(MasterHotelRecord(hotel_name="A"))
    m2 = store.insert_master(MasterHotelRecord(hotel_name="B"))
    supplier, _ = store.upsert_supplier(_supplier())
    store.insert_potential_matches([
        PotentialMatch(supplier.id, "ACME", m1.id, 0.7, MatchCriteria(name_similarity=1.0, distance_meters=12)),
        PotentialMatch(supplier.id, "ACME", m2.id, 0.65),
    ])

    pending = store.list_potential_matches(supplier.id, PotentialMatchStatus.PENDING)
    assert [p.master_hotel_id for p in pending] == [m1.id, m2.id]
    assert pending[0].criteria.distance_meters == 12

    assert store.resolve_potential_matches(supplier.id, m2.id) == 2
    statuses = {p.master_hotel_id: p.status for p in store.list_potential_matches(supplier.id)}
    assert statuses == {m1.id: PotentialMatchStatus.REJECTED, m2.id: PotentialMatchStatus.ACCEPTED}


def test_reject_single_potential_match(store):
    m1 = store.insert_master(MasterHotelRecord(hotel_name="A"))
    supplier, _ = store.upsert_supplier(_supplier())
    store.insert_potential_matches([PotentialMatch(supplier.id, "ACME", m1.id, 0.7)])
    assert store.reject_potential_match(supplier.id, m1.id)
    assert not store.reject_potential_match(supplier.id, m1.id)


def test_history_is_appended_in_order(store):
    supplier, _ = store.upsert_supplier(_supplier())
    store.append_history(MappingHistoryEntry(supplier.id, "ACME", HistoryAction.MAPPED, new_master_hotel_id=1))
    store.append_history(MappingHistoryEntry(
        supplier.id, "ACME", HistoryAction.REMAPPED, old_master_hotel_id=1, new_master_hotel_id=2,
        performed_by="alice",
    ))
    history = store.list_history(supplier.id)
    assert [h.action for h in history] == [HistoryAction.MAPPED, HistoryAction.REMAPPED]
    assert history[1].performed_by == "alice"
    assert history[0].performed_at is not None


def test_pending_reviews_ordered_by_candidate_count(store):
    m1 = store.insert_master(MasterHotelRecord(hotel_name="A"))
    m2 = store.insert_master(MasterHotelRecord(hotel_name="B"))
    one, _ = store.upsert_supplier(_supplier("S1", country_code="GB"))
    two, _ = store.upsert_supplier(_supplier("S2", country_code="FR"))
    for s in (one, two):
        store.update_supplier_mapping(s.id, 0, MappingStatus.PENDING_REVIEW, None, None, None, None)
    store.insert_potential_matches([PotentialMatch(one.id, "ACME", m1.id, 0.7)])
    store.insert_potential_matches([
        PotentialMatch(two.id, "ACME", m1.id, 0.7),
        PotentialMatch(two.id, "ACME", m2.id, 0.6),
    ])

    rows = store.list_pending_reviews()
    assert [(s.id, n) for s, n in rows] == [(two.id, 2), (one.id, 1)]
    assert [s.id for s, _ in store.list_pending_reviews(country_code="GB")] == [one.id]
    assert [s.id for s, _ in store.list_pending_reviews(limit=1, offset=1)] == [one.id]


def test_file_database_persists(tmp_path):
    path = tmp_path / "data" / "mappings.db"
    first = SqliteMappingStore(path)
    first.init_schema()
    first.insert_master(MasterHotelRecord(hotel_name="Grand Plaza"))
    first.close()

    second = SqliteMappingStore(path)
    second.init_schema()
    assert [m.hotel_name for m in second.list_masters()] == ["Grand Plaza"]
    second.close()
