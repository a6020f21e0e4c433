"""Mapping status state machine.

Transitions are pure functions of the current state; they return a
``TransitionResult`` describing the new status and the audit action to
record, or the error that forbids the move. Persisting the outcome is the
service's job.

    unmapped ──auto_map──────────────▶ auto_mapped
        │  └──queue_for_review──▶ pending_review
        │                              │
        ├──────────confirm─────────────┼──▶ manually_mapped
        └──────────mark_no_match───────┴──▶ no_match_available

Settled states (auto_mapped, manually_mapped, no_match_available) can be
re-adjudicated only by a reviewer holding the row's current version.
"""

from __future__ import annotations

from dataclasses import dataclass

from hotelmatch.errors import ConflictError, HotelMatchError
from hotelmatch.types import HistoryAction, MappingStatus

SETTLED_STATES = frozenset({
    MappingStatus.AUTO_MAPPED,
    MappingStatus.MANUALLY_MAPPED,
    MappingStatus.NO_MATCH_AVAILABLE,
})


@dataclass(frozen=True)
class TransitionResult:
    ok: bool
    status: MappingStatus | None = None
    history_action: HistoryAction | None = None
    error: HotelMatchError | None = None

    @classmethod
    def allow(cls, status: MappingStatus, history_action: HistoryAction | None = None) -> TransitionResult:
        return cls(ok=True, status=status, history_action=history_action)

    @classmethod
    def deny(cls, error: HotelMatchError) -> TransitionResult:
        return cls(ok=False, error=error)


def _settled_guard(current: MappingStatus, version_checked: bool) -> TransitionResult | None:
    if current in SETTLED_STATES and not version_checked:
        return TransitionResult.deny(ConflictError(
            f"mapping is already {current.value}; pass the current version to change it"
        ))
    return None


def auto_map(current: MappingStatus) -> TransitionResult:
    """Automatic commit of a high-confidence match."""
    if current is not MappingStatus.UNMAPPED:
        return TransitionResult.deny(ConflictError(
            f"automatic mapping requires status unmapped, found {current.value}"
        ))
    return TransitionResult.allow(MappingStatus.AUTO_MAPPED, HistoryAction.MAPPED)


def queue_for_review(current: MappingStatus) -> TransitionResult:
    if current is not MappingStatus.UNMAPPED:
        return TransitionResult.deny(ConflictError(
            f"queueing for review requires status unmapped, found {current.value}"
        ))
    return TransitionResult.allow(MappingStatus.PENDING_REVIEW)


def confirm(current: MappingStatus, has_master: bool, version_checked: bool = False) -> TransitionResult:
    """Reviewer confirmation; ``remapped`` when a master pointer already existed."""
    denied = _settled_guard(current, version_checked)
    if denied is not None:
        return denied
    action = HistoryAction.REMAPPED if has_master else HistoryAction.MAPPED
    return TransitionResult.allow(MappingStatus.MANUALLY_MAPPED, action)


def reject(current: MappingStatus) -> TransitionResult:
    """Rejecting one candidate never changes the overall status."""
    return TransitionResult.allow(current)


def mark_no_match(current: MappingStatus, version_checked: bool = False) -> TransitionResult:
    denied = _settled_guard(current, version_checked)
    if denied is not None:
        return denied
    return TransitionResult.allow(MappingStatus.NO_MATCH_AVAILABLE, HistoryAction.UNMAPPED)
