"""Candidate generation: narrow the master registry before scoring."""

from __future__ import annotations

import math

import structlog

from hotelmatch.config import CandidateConfig
from hotelmatch.geo import bounding_box, haversine_distance
from hotelmatch.normalize import normalize_country_code
from hotelmatch.store import MappingStore
from hotelmatch.types import MasterHotelRecord, SupplierHotelRecord

log = structlog.get_logger()


class CandidateGenerator:
    """Blocking over the master registry by country and bounding box.

    Only active masters are returned. When the supplier has coordinates the
    search is limited to a box of ``search_radius_m`` around it, with masters
    lacking coordinates still included; an empty box falls back to the
    country-only query.
    """

    def __init__(self, store: MappingStore, config: CandidateConfig | None = None) -> None:
        self.store = store
        self.config = config or CandidateConfig()

    def candidates_for(self, supplier: SupplierHotelRecord) -> list[MasterHotelRecord]:
        country = normalize_country_code(supplier.country_code)

        if supplier.has_coordinates and self.config.use_bounding_box:
            bbox = bounding_box(supplier.latitude, supplier.longitude, self.config.search_radius_m)
            masters = self.store.find_master_candidates(country, bbox, None)
            if masters:
                masters.sort(key=lambda m: (self._distance(supplier, m), m.id or 0))
                log.debug(
                    "candidates_bbox",
                    supplier_hotel_id=supplier.supplier_hotel_id,
                    count=len(masters),
                )
                return masters[: self.config.max_candidates]
            log.debug("candidates_bbox_empty", supplier_hotel_id=supplier.supplier_hotel_id)

        masters = self.store.find_master_candidates(country, None, self.config.max_candidates)
        if supplier.has_coordinates:
            masters.sort(key=lambda m: (self._distance(supplier, m), m.id or 0))
        log.debug(
            "candidates_country",
            supplier_hotel_id=supplier.supplier_hotel_id,
            country_code=country,
            count=len(masters),
        )
        return masters

    @staticmethod
    def _distance(supplier: SupplierHotelRecord, master: MasterHotelRecord) -> float:
        # Masters without coordinates sort after every located one
        if not master.has_coordinates:
            return math.inf
        return haversine_distance(
            supplier.latitude, supplier.longitude, master.latitude, master.longitude
        )
