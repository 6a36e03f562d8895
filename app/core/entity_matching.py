"""Matching free-form entity names against tracked organizations.

Two heuristics live here:
  1. ``match_entities``: substring / word-overlap relevance of names to an org id
  2. ``resolve_references``: map mentions in text to known entities by name,
     alias, or RapidFuzz token_set_ratio for recognized organization names
"""

from __future__ import annotations

import re

from rapidfuzz import fuzz

from app.core.entity_recognition import Recognizer
from app.core.schemas_entities import (
    EntityMatch,
    EntityMatches,
    KnownEntity,
    ReferenceResolution,
    ResolvedReference,
)

STRONG_MATCH_THRESHOLD = 0.7
POTENTIAL_MATCH_THRESHOLD = 0.3
SUBSTRING_RELEVANCE = 0.9

# token_set_ratio (0-100) at or above which an unmatched org resolves fuzzily
FUZZY_RESOLVE_THRESHOLD = 85


def calculate_relevance(org_id: str, entity: str) -> float:
    """Relevance of a name to an org id: 0.9 on containment, else word overlap ratio."""
    entity_lower = entity.lower()
    org_lower = org_id.lower()

    if entity_lower in org_lower or org_lower in entity_lower:
        return SUBSTRING_RELEVANCE

    org_words = org_lower.split("_")
    entity_words = entity_lower.split()
    common = [w for w in org_words if w in entity_words]
    return len(common) / max(len(org_words), len(entity_words), 1)


def match_entities(org_id: str, entity_list: list[str]) -> EntityMatches:
    """Bucket entities into strong (> 0.7), potential (> 0.3) and no match."""
    matches = EntityMatches()
    for entity in entity_list:
        score = calculate_relevance(org_id, entity)
        if score > STRONG_MATCH_THRESHOLD:
            matches.strong_matches.append(EntityMatch(entity=entity, score=score))
        elif score > POTENTIAL_MATCH_THRESHOLD:
            matches.potential_matches.append(EntityMatch(entity=entity, score=score))
        else:
            matches.no_match.append(entity)
    return matches


def resolve_references(
    text: str,
    known_entities: list[KnownEntity],
    recognizer: Recognizer,
) -> ReferenceResolution:
    """
    Resolve entity mentions in text to known entities.

    Args:
        text: Text containing mentions
        known_entities: Canonical names with their aliases
        recognizer: Used to find organization names not covered by any alias

    Returns:
        Resolved references plus recognized organizations that matched nothing
    """
    resolution = ReferenceResolution()
    seen: set[tuple[str, str]] = set()

    for known in known_entities:
        for term, match_type in [(known.name, "exact")] + [(a, "alias") for a in known.aliases]:
            if not term.strip():
                continue
            for found in re.finditer(rf"\b{re.escape(term)}\b", text, flags=re.IGNORECASE):
                key = (found.group(0).lower(), known.name)
                if key in seen:
                    continue
                seen.add(key)
                resolution.resolved.append(
                    ResolvedReference(mention=found.group(0), entity=known.name, match_type=match_type)
                )

    resolved_mentions = {mention for mention, _ in seen}
    candidates = recognizer.recognize(text, ["organizations"]).entities["organizations"]

    for candidate in candidates:
        if candidate.lower() in resolved_mentions:
            continue

        best_name, best_score = None, 0.0
        for known in known_entities:
            score = fuzz.token_set_ratio(candidate, known.name)
            if score > best_score:
                best_name, best_score = known.name, score

        if best_name is not None and best_score >= FUZZY_RESOLVE_THRESHOLD:
            resolution.resolved.append(
                ResolvedReference(mention=candidate, entity=best_name, match_type="fuzzy")
            )
        else:
            resolution.unresolved_candidates.append(candidate)

    return resolution
