"""Composite scoring of (supplier, master) candidate pairs."""

from __future__ import annotations

from hotelmatch.config import MatchConfig
from hotelmatch.geo import distance_score, haversine_distance
from hotelmatch.normalize import normalize_country_code, normalize_postal_code, phone_suffix
from hotelmatch.similarity import address_similarity, name_similarity
from hotelmatch.types import MasterHotelRecord, MatchCriteria, MatchResult, SupplierHotelRecord

PHONE_BONUS = 0.5
CHAIN_BONUS = 0.5


def score_pair(
    supplier: SupplierHotelRecord,
    master: MasterHotelRecord,
    config: MatchConfig,
) -> MatchResult:
    """Score one candidate pair as a weighted sum of the available signals.

    A component whose inputs are missing on either side is left out of the
    sum entirely; the weights are not renormalized over what remains.
    """
    criteria = MatchCriteria()
    weights = config.scoring
    score = 0.0

    # 1. Name similarity
    name_sim = name_similarity(supplier.hotel_name, master.hotel_name)
    criteria.name_similarity = name_sim
    score += name_sim * weights.name_similarity

    # 2. Geographic distance
    if supplier.has_coordinates and master.has_coordinates:
        distance = haversine_distance(
            supplier.latitude, supplier.longitude, master.latitude, master.longitude
        )
        dist_score = distance_score(distance, config.distance)
        criteria.distance_meters = round(distance)
        criteria.distance_score = dist_score
        score += dist_score * weights.distance

    # 3. Street address
    if supplier.address_line1 and master.address_line1:
        addr_sim = address_similarity(supplier.address_line1, master.address_line1)
        criteria.address_similarity = addr_sim
        score += addr_sim * weights.address

    # 4. Postal code
    if supplier.postal_code and master.postal_code:
        postal_match = (
            normalize_postal_code(supplier.postal_code)
            == normalize_postal_code(master.postal_code)
        )
        criteria.postal_code_match = postal_match
        score += (1.0 if postal_match else 0.0) * weights.postal_code

    # 5. Other: phone suffix and chain code
    other = 0.0
    if supplier.phone_number and master.phone_number:
        suffix = phone_suffix(supplier.phone_number)
        phone_match = suffix is not None and suffix == phone_suffix(master.phone_number)
        criteria.phone_match = phone_match
        if phone_match:
            other += PHONE_BONUS

    if supplier.chain_code and master.chain_code:
        chain_match = supplier.chain_code == master.chain_code
        criteria.chain_match = chain_match
        if chain_match:
            other += CHAIN_BONUS

    # Country mismatch vetoes only the "other" term
    supplier_country = normalize_country_code(supplier.country_code)
    master_country = normalize_country_code(master.country_code)
    if supplier_country and master_country and supplier_country != master_country:
        criteria.country_mismatch = True
        other = 0.0

    score += other * weights.other

    score = max(0.0, min(1.0, score))

    return MatchResult(
        master_hotel_id=master.id if master.id is not None else 0,
        confidence_score=score,
        match_method=determine_match_method(criteria, score, config),
        criteria=criteria,
    )


def determine_match_method(criteria: MatchCriteria, score: float, config: MatchConfig) -> str:
    """Label a scored pair for audit, in fixed priority order."""
    bands = config.distance
    distance = criteria.distance_meters
    name_sim = criteria.name_similarity

    if name_sim == 1.0 and criteria.postal_code_match is True:
        return "exact_name_postal"

    if name_sim == 1.0 and distance is not None and distance <= bands.exact:
        return "exact_name_geo"

    if score >= config.thresholds.auto_accept:
        return "high_confidence_fuzzy"

    if (
        distance is not None
        and distance <= bands.high_confidence
        and name_sim is not None
        and name_sim >= 0.85
    ):
        return "fuzzy_name_geo"

    if score >= 0.70:
        return "medium_confidence_fuzzy"

    if distance is not None and distance <= bands.medium_confidence:
        return "geographic_proximity"

    return "low_confidence"
