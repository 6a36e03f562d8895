"""Deterministic influence scoring for organizations (0-100)."""

import re

from app.core.schemas_entities import EntityProfile, InfluenceFactors

MAX_SCORE = 100

_BILLION = re.compile(r"billion|\bbn\b|\d\s*B\b", re.IGNORECASE)
_MILLION = re.compile(r"million|\bmm\b|\d\s*M\b", re.IGNORECASE)


def _size_points(revenue: str) -> int:
    if not revenue:
        return 0
    if _BILLION.search(revenue):
        return 30
    if _MILLION.search(revenue):
        return 10
    return 0


def influence_factors(profile: EntityProfile) -> InfluenceFactors:
    """Per-factor contributions before clamping."""
    return InfluenceFactors(
        size=_size_points(profile.metadata.revenue),
        public_status=20 if profile.metadata.public_private == "public" else 0,
        media_coverage=5 * len(profile.stakeholders.media_outlets),
        regulatory_attention=10 * len(profile.stakeholders.regulators),
    )


def influence_score(profile: EntityProfile) -> int:
    """Sum of factors, clamped to [0, 100]."""
    factors = influence_factors(profile)
    total = factors.size + factors.public_status + factors.media_coverage + factors.regulatory_attention
    return max(0, min(MAX_SCORE, total))
