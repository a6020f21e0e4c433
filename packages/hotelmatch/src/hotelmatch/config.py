"""Configuration for the hotelmatch supplier-to-master matching engine."""

from __future__ import annotations

import os
from dataclasses import dataclass, field


@dataclass
class ScoringWeights:
    name_similarity: float = 0.40
    distance: float = 0.30
    address: float = 0.15
    postal_code: float = 0.10
    other: float = 0.05


@dataclass
class Thresholds:
    auto_accept: float = 0.90
    manual_review_min: float = 0.60
    reject: float = 0.40


@dataclass
class DistanceBands:
    """Upper edges (meters) of the stepped distance score bands."""

    exact: float = 50.0
    high_confidence: float = 100.0
    medium_confidence: float = 200.0
    low_confidence: float = 500.0
    decay_meters: float = 1000.0


@dataclass
class CandidateConfig:
    max_candidates: int = 1000
    search_radius_m: float = 5000.0
    use_bounding_box: bool = True


@dataclass
class ReviewConfig:
    top_n: int = 5  # PotentialMatch rows persisted per manual review


@dataclass
class BatchConfig:
    max_workers: int = 4


@dataclass
class MatchConfig:
    scoring: ScoringWeights = field(default_factory=ScoringWeights)
    thresholds: Thresholds = field(default_factory=Thresholds)
    distance: DistanceBands = field(default_factory=DistanceBands)
    candidates: CandidateConfig = field(default_factory=CandidateConfig)
    review: ReviewConfig = field(default_factory=ReviewConfig)
    batch: BatchConfig = field(default_factory=BatchConfig)


@dataclass
class ServiceConfig:
    db_path: str = "hotelmatch.db"
    match: MatchConfig = field(default_factory=MatchConfig)


def load_config(db_path: str | None = None) -> ServiceConfig:
    """Build a ServiceConfig from HOTELMATCH_* environment variables.

    An explicit ``db_path`` wins over HOTELMATCH_DB_PATH.
    """
    config = ServiceConfig()
    config.db_path = db_path or os.environ.get("HOTELMATCH_DB_PATH") or config.db_path

    workers = os.environ.get("HOTELMATCH_MAX_WORKERS")
    if workers:
        config.match.batch.max_workers = max(1, int(workers))

    max_candidates = os.environ.get("HOTELMATCH_MAX_CANDIDATES")
    if max_candidates:
        config.match.candidates.max_candidates = max(1, int(max_candidates))

    radius = os.environ.get("HOTELMATCH_SEARCH_RADIUS_M")
    if radius:
        config.match.candidates.search_radius_m = float(radius)

    return config
