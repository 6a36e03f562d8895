"""Tests for entity-to-organization matching and reference resolution."""

import random

from app.core.entity_matching import calculate_relevance, match_entities, resolve_references
from app.core.entity_recognition import PatternRecognizer
from app.core.schemas_entities import KnownEntity


class TestCalculateRelevance:
    def test_containment(self):
        assert calculate_relevance("acme_corp", "Acme") == 0.9
        assert calculate_relevance("acme", "Acme Corp") == 0.9

    def test_word_overlap(self):
        assert calculate_relevance("acme_corp", "Acme Corporation") == 0.5

    def test_unrelated(self):
        assert calculate_relevance("acme_corp", "Globex") == 0.0


def test_match_entities_buckets():
    matches = match_entities("acme_corp", ["Acme", "Acme Corporation", "Globex"])

    assert [(m.entity, m.score) for m in matches.strong_matches] == [("Acme", 0.9)]
    assert [(m.entity, m.score) for m in matches.potential_matches] == [("Acme Corporation", 0.5)]
    assert matches.no_match == ["Globex"]


def test_match_entities_via_service(service):
    matches = service.match_entities_to_org("acme_corp", [])
    assert matches.strong_matches == [] and matches.potential_matches == [] and matches.no_match == []


class TestResolveReferences:
    TEXT = "Acme Corp shares rose while Acme lagged. Globex Inc and Initech Corp responded."

    KNOWN = [
        KnownEntity(name="Acme Corp", aliases=["Acme"]),
        KnownEntity(name="Initech Holdings Corp"),
    ]

    def _resolve(self, known=None):
        return resolve_references(self.TEXT, self.KNOWN if known is None else known, PatternRecognizer(random.Random(1)))

    def test_exact_alias_and_fuzzy(self):
        resolution = self._resolve()

        assert [(r.mention, r.entity, r.match_type) for r in resolution.resolved] == [
            ("Acme Corp", "Acme Corp", "exact"),
            ("Acme", "Acme Corp", "alias"),
            ("Initech Corp", "Initech Holdings Corp", "fuzzy"),
        ]
        assert resolution.unresolved_candidates == ["Globex Inc"]

    def test_no_known_entities(self):
        resolution = self._resolve(known=[])

        assert resolution.resolved == []
        assert resolution.unresolved_candidates == ["Acme Corp", "Globex Inc", "Initech Corp"]

    def test_via_service(self, service):
        resolution = service.resolve_entity_references(self.TEXT, self.KNOWN)
        assert len(resolution.resolved) == 3
