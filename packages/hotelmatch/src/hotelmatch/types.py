"""Core types for the hotelmatch matching engine."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum


class MappingStatus(str, Enum):
    UNMAPPED = "unmapped"
    PENDING_REVIEW = "pending_review"
    AUTO_MAPPED = "auto_mapped"
    MANUALLY_MAPPED = "manually_mapped"
    NO_MATCH_AVAILABLE = "no_match_available"


class MasterStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class PotentialMatchStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class HistoryAction(str, Enum):
    MAPPED = "mapped"
    REMAPPED = "remapped"
    UNMAPPED = "unmapped"


class RecommendedAction(str, Enum):
    AUTO_MAP = "auto_map"
    MANUAL_REVIEW = "manual_review"
    CREATE_NEW = "create_new"


@dataclass
class MasterHotelRecord:
    hotel_name: str
    id: int | None = None
    hotel_name_normalized: str = ""
    address_line1: str | None = None
    city: str | None = None
    country_code: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    phone_number: str | None = None
    chain_code: str | None = None
    status: MasterStatus = MasterStatus.ACTIVE
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class SupplierHotelRecord:
    supplier_code: str
    supplier_hotel_id: str
    hotel_name: str
    id: int | None = None
    hotel_name_normalized: str = ""
    address_line1: str | None = None
    city: str | None = None
    country_code: str | None = None
    postal_code: str | None = None
    latitude: float | None = None
    longitude: float | None = None
    phone_number: str | None = None
    chain_code: str | None = None
    mapping_status: MappingStatus = MappingStatus.UNMAPPED
    master_hotel_id: int | None = None
    mapping_confidence_score: float | None = None
    mapping_method: str | None = None
    mapped_at: datetime | None = None
    version: int = 0
    created_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


@dataclass
class MatchCriteria:
    """Per-signal breakdown behind a confidence score.

    A field left as None means the signal could not be computed because
    one side lacked the input.
    """

    name_similarity: float | None = None
    distance_meters: int | None = None
    distance_score: float | None = None
    address_similarity: float | None = None
    postal_code_match: bool | None = None
    phone_match: bool | None = None
    chain_match: bool | None = None
    country_mismatch: bool = False

    def to_dict(self) -> dict:
        return {k: v for k, v in asdict(self).items() if v is not None}

    @classmethod
    def from_dict(cls, data: dict) -> MatchCriteria:
        known = {k: data[k] for k in cls.__dataclass_fields__ if k in data}
        return cls(**known)


@dataclass
class MatchResult:
    master_hotel_id: int
    confidence_score: float
    match_method: str
    criteria: MatchCriteria = field(default_factory=MatchCriteria)


@dataclass
class Recommendation:
    action: RecommendedAction
    best_match: MatchResult | None = None


@dataclass
class PotentialMatch:
    supplier_hotel_id: int
    supplier_code: str
    master_hotel_id: int
    match_score: float
    criteria: MatchCriteria = field(default_factory=MatchCriteria)
    status: PotentialMatchStatus = PotentialMatchStatus.PENDING
    id: int | None = None
    created_at: datetime | None = None


@dataclass
class MappingHistoryEntry:
    supplier_hotel_id: int
    supplier_code: str
    action: HistoryAction
    old_master_hotel_id: int | None = None
    new_master_hotel_id: int | None = None
    confidence_score: float | None = None
    mapping_method: str | None = None
    performed_by: str = "system"
    performed_at: datetime | None = None
    id: int | None = None


@dataclass
class ImportOutcome:
    """Result of importing one supplier record."""

    supplier_hotel_id: int
    recommended_action: RecommendedAction | None
    mapping_status: MappingStatus
    created: bool = True
    error: str | None = None


@dataclass
class RecordError:
    index: int
    supplier_hotel_id: str | None
    error: str


@dataclass
class BatchImportResult:
    outcomes: list[ImportOutcome] = field(default_factory=list)
    errors: list[RecordError] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.outcomes)

    @property
    def failed(self) -> int:
        return len(self.errors)

    def count_by_action(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for outcome in self.outcomes:
            key = outcome.recommended_action.value if outcome.recommended_action else "none"
            counts[key] = counts.get(key, 0) + 1
        return counts


@dataclass
class MasterImportResult:
    masters: list[MasterHotelRecord] = field(default_factory=list)
    errors: list[RecordError] = field(default_factory=list)


@dataclass
class PendingReview:
    supplier: SupplierHotelRecord
    candidate_count: int


@dataclass
class RankedCandidate:
    potential_match: PotentialMatch
    master: MasterHotelRecord
