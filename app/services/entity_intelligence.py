"""Entity Intelligence Service.

Composition root for the entity components. Each public method is one
operation of the tool surface and returns a pydantic model.

Usage:
    from app.services.entity_intelligence import get_entity_service

    service = get_entity_service()
    profile = service.enrich_entity_profile("Gamma Systems Inc")
    network = service.map_organization_network(profile.id, depth=2)
"""

from __future__ import annotations

import random
from datetime import datetime
from functools import lru_cache
from typing import Any

from app.core.behavior import BehaviorPredictor
from app.core.config import get_settings
from app.core.entity_matching import match_entities, resolve_references
from app.core.entity_recognition import PatternRecognizer, Recognizer
from app.core.enrichment import EnrichmentPipeline
from app.core.evolution import EvolutionTracker
from app.core.influence import influence_factors, influence_score
from app.core.profile_cache import ProfileCache, TTLProfileCache
from app.core.profile_store import EntityStoreBackend, ProfileStore
from app.core.relationship_graph import RelationshipGraph
from app.core.schemas_entities import (
    BehaviorPrediction,
    EntityConnections,
    EntityMatches,
    EntityProfile,
    EvolutionSummary,
    IndustryClassification,
    InfluenceScore,
    IntelligenceUpdateAck,
    KnownEntity,
    OrganizationNetwork,
    RecognitionResult,
    ReferenceResolution,
)
from app.core.taxonomy import classify_industry


class EntityIntelligenceService:
    """Entity recognition, enrichment, graph and scoring operations."""

    def __init__(
        self,
        backend: EntityStoreBackend,
        cache: ProfileCache | None = None,
        recognizer: Recognizer | None = None,
        rng: random.Random | None = None,
        store_timeout_seconds: float = 10.0,
        conflict_retries: int = 2,
        default_network_depth: int = 2,
    ):
        self.rng = rng or random.Random()
        self.store = ProfileStore(backend, cache=cache, timeout_seconds=store_timeout_seconds)
        self.recognizer = recognizer or PatternRecognizer(rng=self.rng)
        self.enrichment = EnrichmentPipeline(self.store, conflict_retries=conflict_retries)
        self.graph = RelationshipGraph(self.store)
        self.evolution = EvolutionTracker(self.store)
        self.predictor = BehaviorPredictor(self.store, rng=self.rng)
        self.default_network_depth = default_network_depth

    def recognize_entities(self, text: str, entity_types: list[str] | None = None) -> RecognitionResult:
        return self.recognizer.recognize(text, entity_types)

    def enrich_entity_profile(
        self, organization_name: str, deep_enrich: bool = False, timeout: float | None = None
    ) -> EntityProfile:
        return self.enrichment.enrich(organization_name, deep=deep_enrich, timeout=timeout)

    def get_entity_profile(self, entity_id: str, timeout: float | None = None) -> EntityProfile:
        return self.store.require(entity_id, timeout=timeout)

    def track_entity_evolution(
        self,
        entity_id: str,
        timeframe: str | None = None,
        now: datetime | None = None,
        timeout: float | None = None,
    ) -> EvolutionSummary:
        return self.evolution.evolution(entity_id, timeframe, now=now, timeout=timeout)

    def find_entity_connections(
        self,
        entity_id: str,
        connection_types: list[str] | None = None,
        depth: int = 2,
        timeout: float | None = None,
    ) -> EntityConnections:
        # depth is accepted for the tool contract; only direct connections are resolved
        return self.graph.find_connections(entity_id, connection_types, timeout=timeout)

    def match_entities_to_org(self, organization_id: str, entity_list: list[str]) -> EntityMatches:
        return match_entities(organization_id, entity_list)

    def update_entity_intelligence(
        self, entity_id: str, intelligence_type: str, data: Any, timeout: float | None = None
    ) -> IntelligenceUpdateAck:
        profile = self.enrichment.add_intelligence(entity_id, intelligence_type, data, timeout=timeout)
        return IntelligenceUpdateAck(
            entity_id=entity_id,
            intelligence_type=intelligence_type,
            updated=profile.last_updated,
        )

    def predict_entity_behavior(
        self, entity_id: str, scenario: str, timeout: float | None = None
    ) -> BehaviorPrediction:
        return self.predictor.predict(entity_id, scenario, timeout=timeout)

    def classify_industry(self, organization_name: str, context: str | None = None) -> IndustryClassification:
        return classify_industry(organization_name, context)

    def map_organization_network(
        self, organization_id: str, depth: int | None = None, timeout: float | None = None
    ) -> OrganizationNetwork:
        depth = self.default_network_depth if depth is None else depth
        return self.graph.map_network(organization_id, depth=depth, timeout=timeout)

    def calculate_influence_score(self, organization_id: str, timeout: float | None = None) -> InfluenceScore:
        profile = self.store.require(organization_id, timeout=timeout)
        return InfluenceScore(
            organization_id=organization_id,
            influence_score=influence_score(profile),
            factors=influence_factors(profile),
        )

    def resolve_entity_references(
        self, text: str, known_entities: list[KnownEntity] | None = None
    ) -> ReferenceResolution:
        return resolve_references(text, known_entities or [], self.recognizer)


@lru_cache(maxsize=1)
def get_entity_service() -> EntityIntelligenceService:
    """Process-wide service wired to Supabase from settings."""
    from app.db.entity_profiles import SupabaseEntityStore

    settings = get_settings()
    rng = random.Random(settings.ENTITY_RANDOM_SEED) if settings.ENTITY_RANDOM_SEED is not None else None
    return EntityIntelligenceService(
        backend=SupabaseEntityStore(),
        cache=TTLProfileCache(ttl_seconds=settings.ENTITY_CACHE_TTL_SECONDS),
        rng=rng,
        store_timeout_seconds=settings.ENTITY_STORE_TIMEOUT_SECONDS,
        conflict_retries=settings.ENTITY_CONFLICT_RETRIES,
        default_network_depth=settings.ENTITY_NETWORK_DEFAULT_DEPTH,
    )
