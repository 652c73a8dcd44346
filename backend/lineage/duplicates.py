"""Tiered duplicate detection for newly entered people.

Three tiers are evaluated in order and the first one with matches wins:

- CRITICAL: identical normalized name and birth date (blocks the save)
- HIGH: very similar name plus close birth date and shared parents
- MEDIUM: generic weighted similarity over the whole population
"""

import logging
from collections.abc import Iterable

from .config import MatchingConfig, load_matching_config
from .models import DuplicateMatch, DuplicateTier, Person, ValidationResult
from .name_matching import (
    date_bucket_similarity,
    date_proximity,
    days_between,
    fuzzy_name_similarity,
    name_similarity,
    normalize_text,
    place_similarity,
)

logger = logging.getLogger("lineage.duplicates")

TIER_MESSAGES = {
    DuplicateTier.CRITICAL: (
        "A person with the same full name and birth date already exists. "
        "Please check that this is not the same person."
    ),
    DuplicateTier.HIGH: (
        "Very similar people were found. "
        "Please confirm they are not duplicates before continuing."
    ),
    DuplicateTier.MEDIUM: "People with similar details were found. Review before continuing.",
}


# ============================================================================
# Signal helpers
# ============================================================================

def shared_parent_fraction(person1: Person, person2: Person) -> float:
    """Fraction of matching parents among those known on both sides."""
    matches = 0
    total = 0
    for a, b in ((person1.father_id, person2.father_id), (person1.mother_id, person2.mother_id)):
        if a is not None and b is not None:
            total += 1
            if a == b:
                matches += 1
    return matches / total if total else 0.0


def _parent_agreement(person1: Person, person2: Person) -> float:
    """Like shared_parent_fraction, but two missing parents also agree."""
    matches = 0
    total = 0
    for a, b in ((person1.father_id, person2.father_id), (person1.mother_id, person2.mother_id)):
        if a is not None and b is not None:
            total += 1
            if a == b:
                matches += 1
        elif a is None and b is None:
            total += 1
            matches += 1
    return matches / total if total else 0.0


def _birth_dates_match(person1: Person, person2: Person, tolerance_days: int) -> bool:
    if person1.birth_date is None and person2.birth_date is None:
        return True
    if person1.birth_date is None or person2.birth_date is None:
        return False
    return days_between(person1.birth_date, person2.birth_date) <= tolerance_days


# ============================================================================
# Tiers
# ============================================================================

def find_critical_matches(
    candidate: Person,
    others: list[Person],
    tolerance_days: int = 0,
) -> list[DuplicateMatch]:
    """Exact duplicates: same normalized name and birth date within tolerance."""
    matches = []
    candidate_name = normalize_text(candidate.name)

    for other in others:
        if candidate_name != normalize_text(other.name):
            continue
        if not _birth_dates_match(candidate, other, tolerance_days):
            continue

        reasons = [
            "Identical full name",
            "Identical birth date" if tolerance_days == 0 else "Very close birth date",
        ]
        if candidate.father_id is not None and candidate.father_id == other.father_id:
            reasons.append("Same father")
        if candidate.mother_id is not None and candidate.mother_id == other.mother_id:
            reasons.append("Same mother")
        if (
            candidate.birth_place
            and other.birth_place
            and normalize_text(candidate.birth_place) == normalize_text(other.birth_place)
        ):
            reasons.append("Same birth place")

        matches.append(DuplicateMatch(
            candidate=candidate,
            matched=other,
            tier=DuplicateTier.CRITICAL,
            reasons=reasons,
            score=1.0,
        ))
    return matches


def find_high_matches(
    candidate: Person,
    others: list[Person],
    tolerance_days: int = 0,
    config: MatchingConfig | None = None,
) -> list[DuplicateMatch]:
    """Probable duplicates: very similar name, close birth date and shared parents.

    Only signals that are present contribute, and the final score is
    normalized by the weights that actually contributed.
    """
    config = config or load_matching_config()
    expanded_tolerance = max(tolerance_days, config.high_min_tolerance_days)
    matches = []

    for other in others:
        similarity = name_similarity(candidate.name, other.name)
        if similarity < config.high_name_threshold:
            continue

        reasons = [f"Very similar name ({int(similarity * 100)}%)"]
        score = similarity * config.high_name_weight
        weight = config.high_name_weight

        proximity = date_proximity(candidate.birth_date, other.birth_date, expanded_tolerance)
        if proximity >= config.high_date_min_proximity:
            reasons.append("Close birth date")
            score += proximity * config.high_date_weight
            weight += config.high_date_weight

        parents = shared_parent_fraction(candidate, other)
        if parents >= config.high_parents_min_fraction:
            reasons.append("Same parents")
            score += parents * config.high_parents_weight
            weight += config.high_parents_weight

        final_score = score / weight if weight > 0 else 0.0
        if final_score >= config.high_score_threshold:
            matches.append(DuplicateMatch(
                candidate=candidate,
                matched=other,
                tier=DuplicateTier.HIGH,
                reasons=reasons,
                score=min(1.0, final_score),
            ))
    return matches


def compare_people(
    person1: Person,
    person2: Person,
    config: MatchingConfig | None = None,
) -> tuple[float, list[str]]:
    """
    Generic similarity score (0.0 to 1.0) between two people.

    Weights (defaults):
    - Name similarity: 40%
    - Birth date closeness: 25%
    - Parents: 20%
    - Birth place: 10%
    - Death date closeness: 5%

    Returns:
        (score, reasons) where reasons lists every signal above the
        configured reason threshold.
    """
    config = config or load_matching_config()
    reasons = []

    signals = [
        (
            fuzzy_name_similarity(person1.name, person2.name),
            config.name_weight,
            None,
        ),
        (
            date_bucket_similarity(person1.birth_date, person2.birth_date),
            config.birth_date_weight,
            "Similar birth dates",
        ),
        (
            _parent_agreement(person1, person2),
            config.parents_weight,
            "Same parents",
        ),
        (
            place_similarity(person1.birth_place, person2.birth_place),
            config.birth_place_weight,
            "Similar birth places",
        ),
        (
            date_bucket_similarity(person1.death_date, person2.death_date),
            config.death_date_weight,
            "Similar death dates",
        ),
    ]

    total = 0.0
    total_weight = 0.0
    for value, weight, reason in signals:
        total += value * weight
        total_weight += weight
        if value > config.reason_threshold:
            reasons.append(reason or f"Similar names ({int(value * 100)}%)")

    score = total / total_weight if total_weight > 0 else 0.0
    return max(0.0, min(1.0, score)), reasons


def find_similar_people(
    candidate: Person,
    others: Iterable[Person],
    threshold: float | None = None,
    config: MatchingConfig | None = None,
) -> list[DuplicateMatch]:
    """Generic detector: everyone scoring at least `threshold`, best first."""
    config = config or load_matching_config()
    threshold = config.medium_threshold if threshold is None else threshold
    matches = []

    for other in others:
        if other.id == candidate.id:
            continue
        score, reasons = compare_people(candidate, other, config)
        if score >= threshold:
            matches.append(DuplicateMatch(
                candidate=candidate,
                matched=other,
                tier=DuplicateTier.MEDIUM,
                reasons=reasons,
                score=score,
            ))

    matches.sort(key=lambda m: m.score, reverse=True)
    return matches


# ============================================================================
# Entry points
# ============================================================================

def evaluate_duplicates(
    candidate: Person,
    population: Iterable[Person],
    tolerance_days: int = 0,
    config: MatchingConfig | None = None,
) -> ValidationResult:
    """Run the three tiers and return the first non-empty one.

    Errors propagate; use find_duplicates for the fail-open behaviour.
    """
    if tolerance_days < 0:
        raise ValueError("tolerance_days must be >= 0")
    config = config or load_matching_config()
    others = [p for p in population if p.id != candidate.id]
    if not others:
        return ValidationResult()

    tiers = (
        (DuplicateTier.CRITICAL, lambda: find_critical_matches(candidate, others, tolerance_days)),
        (DuplicateTier.HIGH, lambda: find_high_matches(candidate, others, tolerance_days, config)),
        (DuplicateTier.MEDIUM, lambda: find_similar_people(candidate, others, config.medium_threshold, config)),
    )
    for tier, find_matches in tiers:
        matches = find_matches()
        if matches:
            logger.info(f"{len(matches)} {tier.value} duplicate(s) found for '{candidate.name}'")
            return ValidationResult(
                has_duplicate=True,
                tier=tier,
                matches=matches,
                message=TIER_MESSAGES[tier],
            )

    logger.debug(f"No duplicates for '{candidate.name}' among {len(others)} people")
    return ValidationResult()


def find_duplicates(
    candidate: Person,
    population: Iterable[Person],
    tolerance_days: int = 0,
    config: MatchingConfig | None = None,
) -> ValidationResult:
    """Duplicate check that never blocks the caller on an internal error.

    Any exception during evaluation is logged and reported as "no duplicate",
    so this is soft validation, not an integrity guarantee.
    """
    try:
        return evaluate_duplicates(candidate, population, tolerance_days, config)
    except Exception:
        logger.exception(f"Duplicate check failed for '{candidate.name}', allowing save")
        return ValidationResult()


def find_all_duplicate_pairs(
    population: Iterable[Person],
    threshold: float = 0.8,
    config: MatchingConfig | None = None,
) -> list[DuplicateMatch]:
    """Scan the whole population and report each similar pair once."""
    people = list(population)
    seen: set[frozenset[str]] = set()
    pairs = []

    for person in people:
        for match in find_similar_people(person, people, threshold, config):
            key = frozenset((person.id, match.matched.id))
            if key in seen:
                continue
            seen.add(key)
            pairs.append(match)

    logger.info(f"{len(pairs)} duplicate pair(s) found among {len(people)} people")
    return pairs
