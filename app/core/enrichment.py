"""Entity profile enrichment.

Builds or refreshes the derived fields of an entity profile (industry,
aliases, keywords, crisis indicators) and owns the only write path into the
append-only intelligence feed.

Cache policy: a plain ``enrich`` is served from the profile cache when
possible; ``deep=True`` always goes to the store and rebuilds. Earlier
versions of this service let a cached profile win over a deep request, which
made deep enrichment a no-op for any entity touched since process start.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, TypeVar

from app.core.entity_recognition import CORPORATE_SUFFIXES
from app.core.exceptions import ConflictError, ValidationError
from app.core.logging import get_logger, log_with_context
from app.core.profile_store import ProfileStore
from app.core.schemas_entities import (
    EnrichmentStatus,
    EntityProfile,
    Intelligence,
    MonitoringConfig,
    ProfileMetadata,
    Relationships,
    Stakeholders,
    utc_now,
)
from app.core.taxonomy import classify_industry, define_crisis_indicators

logger = get_logger(__name__)

T = TypeVar("T")

STOP_WORDS = {"the", "and", "of", "in", "for"}

_SUFFIX_PATTERN = re.compile(
    r"[\s,]+(?:" + "|".join(CORPORATE_SUFFIXES) + r")\.?$"
)

# intelligence_type -> Intelligence field
INTELLIGENCE_FIELDS: dict[str, str] = {
    "narrative_theme": "narrative_themes",
    "development": "recent_developments",
    "catalyst": "upcoming_catalysts",
    "risk": "risk_factors",
    "opportunity": "opportunities",
    "cascade_trigger": "cascade_triggers",
}


def slugify(name: str) -> str:
    """Deterministic entity id: lower-case, non-alphanumeric runs become '_'."""
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def _union(*lists: list[str]) -> list[str]:
    merged: dict[str, None] = {}
    for items in lists:
        for item in items:
            merged.setdefault(item, None)
    return list(merged)


def strip_corporate_suffix(name: str) -> str:
    return _SUFFIX_PATTERN.sub("", name.strip()).strip()


def find_aliases(name: str) -> list[str]:
    """Initials for multi-word names plus the suffix-stripped name."""
    aliases: list[str] = []

    words = name.split()
    if len(words) > 1:
        aliases.append("".join(w[0] for w in words))

    stripped = strip_corporate_suffix(name)
    if stripped and stripped != name.strip():
        aliases.append(stripped)

    return _union(aliases)


def generate_keywords(name: str) -> list[str]:
    """
    Monitoring keywords derived from a name.

    Every word lower-cased, plus the phrase of significant words (longer than
    two characters, not a stop word, corporate suffix excluded) when there are
    at least two of them.
    """
    words = name.split()
    keywords = [w.lower() for w in words]

    significant = [
        w for w in strip_corporate_suffix(name).split()
        if w.lower() not in STOP_WORDS and len(w) > 2
    ]
    if len(significant) > 1:
        keywords.append(" ".join(significant).lower())

    return _union(keywords)


def build_profile(name: str, existing: EntityProfile | None = None) -> EntityProfile:
    """
    Build a profile's derived fields, merging into ``existing`` when given.

    Lists are unioned with what is stored; metadata, stakeholders,
    intelligence and relationships are carried over untouched.
    """
    industry = classify_industry(name)
    crisis_indicators = define_crisis_indicators(industry.primary)
    keywords = _union([name], generate_keywords(name))
    aliases = find_aliases(name)

    if existing is None:
        return EntityProfile(
            id=slugify(name),
            name=name,
            aliases=aliases,
            industry=industry,
            metadata=ProfileMetadata(),
            stakeholders=Stakeholders(),
            monitoring_config=MonitoringConfig(
                keywords=keywords,
                regulatory_filings=industry.primary == "financial_services",
                executive_changes=True,
                ma_activity=True,
                crisis_indicators=crisis_indicators,
            ),
            intelligence=Intelligence(),
            relationships=Relationships(),
            last_updated=utc_now(),
            enrichment_status=EnrichmentStatus.PARTIAL,
        )

    stored = existing.monitoring_config
    monitoring = MonitoringConfig(
        keywords=_union(stored.keywords, keywords),
        rss_feeds=list(stored.rss_feeds),
        api_endpoints=list(stored.api_endpoints),
        social_accounts=list(stored.social_accounts),
        regulatory_filings=industry.primary == "financial_services",
        executive_changes=True,
        ma_activity=True,
        crisis_indicators=_union(crisis_indicators, stored.crisis_indicators),
    )
    return existing.model_copy(
        update={
            "name": name,
            "aliases": _union(existing.aliases, aliases),
            "industry": industry,
            "monitoring_config": monitoring,
            "last_updated": utc_now(),
            "enrichment_status": EnrichmentStatus.PARTIAL,
        },
        deep=True,
    )


class EnrichmentPipeline:
    """Creates, refreshes and appends intelligence to entity profiles."""

    def __init__(self, store: ProfileStore, conflict_retries: int = 2):
        self.store = store
        self.conflict_retries = conflict_retries

    def _with_retries(self, entity_id: str, attempt_fn: Callable[[], T]) -> T:
        for attempt in range(self.conflict_retries + 1):
            try:
                return attempt_fn()
            except ConflictError:
                if attempt >= self.conflict_retries:
                    raise
                log_with_context(
                    logger, logging.INFO, "Retrying after revision conflict",
                    entity_id=entity_id, attempt=attempt + 1,
                )
        raise ConflictError(entity_id)  # pragma: no cover

    def enrich(self, name: str, deep: bool = False, timeout: float | None = None) -> EntityProfile:
        """
        Get or create the profile for an organization name.

        Args:
            name: Organization display name
            deep: Rebuild derived fields even if a profile exists
            timeout: Deadline for each store call

        Returns:
            The cached, stored or freshly built profile

        Raises:
            ValidationError: If the name has no alphanumeric characters
            PersistenceError: If the store fails
            ConflictError: If concurrent writers keep winning
        """
        entity_id = slugify(name)
        if not entity_id:
            raise ValidationError(f"Organization name {name!r} yields an empty entity id")

        if not deep:
            cached = self.store.cached(entity_id)
            if cached is not None:
                logger.debug(f"Profile cache hit for {entity_id}")
                return cached

        def attempt() -> EntityProfile:
            existing = self.store.get(entity_id, timeout=timeout)
            if existing is not None and not deep:
                logger.debug(f"Profile store hit for {entity_id}")
                return existing

            profile = build_profile(name, existing)
            saved = self.store.upsert(profile, exists=existing is not None, timeout=timeout)
            log_with_context(
                logger, logging.INFO, "Enriched entity profile",
                entity_id=entity_id, created=existing is None, deep=deep,
                industry=saved.industry.primary,
            )
            return saved

        return self._with_retries(entity_id, attempt)

    def add_intelligence(
        self,
        entity_id: str,
        intelligence_type: str,
        data: Any,
        timeout: float | None = None,
    ) -> EntityProfile:
        """
        Append one intelligence item to an entity's feed.

        Raises:
            ValidationError: Unknown intelligence type
            NotFoundError: Entity not in the store
            ConflictError: If concurrent writers keep winning
        """
        field_name = INTELLIGENCE_FIELDS.get(intelligence_type)
        if field_name is None:
            raise ValidationError(
                f"Unknown intelligence type {intelligence_type!r}; "
                f"expected one of {sorted(INTELLIGENCE_FIELDS)}"
            )

        def attempt() -> EntityProfile:
            profile = self.store.require(entity_id, timeout=timeout)
            getattr(profile.intelligence, field_name).append(data)
            profile.last_updated = utc_now()
            return self.store.update(entity_id, profile, timeout=timeout)

        saved = self._with_retries(entity_id, attempt)
        log_with_context(
            logger, logging.INFO, "Appended intelligence item",
            entity_id=entity_id, intelligence_type=intelligence_type,
        )
        return saved
