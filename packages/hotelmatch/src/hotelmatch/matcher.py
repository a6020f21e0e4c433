"""Orchestration: score candidates for a supplier hotel and decide the action."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

import structlog

from hotelmatch.config import MatchConfig
from hotelmatch.scoring import score_pair
from hotelmatch.types import (
    MasterHotelRecord,
    MatchResult,
    Recommendation,
    RecommendedAction,
    SupplierHotelRecord,
)

log = structlog.get_logger()


@dataclass
class MatcherStats:
    """Statistics collected during matching."""

    suppliers: int = 0
    comparisons: int = 0
    below_reject_floor: int = 0
    no_candidates: int = 0
    decisions: dict[str, int] = field(default_factory=lambda: {
        a.value: 0 for a in RecommendedAction
    })


class Matcher:
    """Hotel matcher: composite scoring plus decision bands.

    Results depend only on the inputs and the configuration, so one instance
    can be shared across worker threads. Only ``stats`` is mutated, under a lock.
    """

    def __init__(self, config: MatchConfig | None = None) -> None:
        self.config = config or MatchConfig()
        self.stats = MatcherStats()
        self._stats_lock = threading.Lock()

    def match_supplier_hotel(
        self,
        supplier: SupplierHotelRecord,
        candidates: list[MasterHotelRecord],
    ) -> list[MatchResult]:
        """Score every candidate and keep those at or above the reject floor.

        Sorted by descending confidence, ties broken by master id.
        """
        reject = self.config.thresholds.reject
        results: list[MatchResult] = []
        for master in candidates:
            result = score_pair(supplier, master, self.config)
            if result.confidence_score >= reject:
                results.append(result)

        results.sort(key=lambda r: (-r.confidence_score, r.master_hotel_id))

        with self._stats_lock:
            self.stats.suppliers += 1
            self.stats.comparisons += len(candidates)
            self.stats.below_reject_floor += len(candidates) - len(results)
            if not candidates:
                self.stats.no_candidates += 1

        log.debug(
            "supplier_scored",
            supplier_hotel_id=supplier.supplier_hotel_id,
            candidates=len(candidates),
            kept=len(results),
            best_score=round(results[0].confidence_score, 4) if results else None,
        )
        return results

    def recommend(self, matches: list[MatchResult]) -> Recommendation:
        """Apply decision bands to a list sorted by descending confidence."""
        t = self.config.thresholds

        if not matches:
            action = RecommendedAction.CREATE_NEW
            best = None
        else:
            best = matches[0]
            if best.confidence_score >= t.auto_accept:
                action = RecommendedAction.AUTO_MAP
            elif best.confidence_score >= t.manual_review_min:
                action = RecommendedAction.MANUAL_REVIEW
            else:
                action = RecommendedAction.CREATE_NEW
                best = None

        with self._stats_lock:
            self.stats.decisions[action.value] += 1

        return Recommendation(action=action, best_match=best)
