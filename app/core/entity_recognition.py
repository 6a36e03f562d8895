"""Entity recognition from free text.

The pipeline only depends on the ``Recognizer`` protocol. ``PatternRecognizer``
is the default: a regex stand-in for real NER, good enough to pull corporate
names, acronyms and capitalized person names out of press copy.
"""

from __future__ import annotations

import random
import re
from typing import Protocol

from app.core.schemas_entities import EntityConfidence, RecognitionResult

ENTITY_CATEGORIES = ("organizations", "people", "locations", "products", "events")

CORPORATE_SUFFIXES = ("Inc", "Corp", "LLC", "Ltd", "Company", "Co", "Group", "Partners", "LP", "LLP")

_ORG_PATTERNS = [
    re.compile(
        r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+(?:" + "|".join(CORPORATE_SUFFIXES) + r")\b"
    ),
    re.compile(r"\b[A-Z]{2,}\b"),  # acronyms
]
_PERSON_PATTERN = re.compile(r"\b[A-Z][a-z]+\s+[A-Z][a-z]+(?:\s+[A-Z][a-z]+)?\b")

# Placeholder confidence range [low, low + span)
CONFIDENCE_FLOOR = 0.7
CONFIDENCE_SPAN = 0.3


class Recognizer(Protocol):
    """Anything that can turn text into categorized entities."""

    def recognize(self, text: str, entity_types: list[str] | None = None) -> RecognitionResult:
        ...


def _dedupe(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


class PatternRecognizer:
    """Regex-based recognizer for organizations and people.

    locations, products and events are reserved categories with no matcher.
    Confidence values are placeholders drawn from ``rng``; pass a seeded
    ``random.Random`` for reproducible output.
    """

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def recognize(self, text: str, entity_types: list[str] | None = None) -> RecognitionResult:
        wanted = set(entity_types) if entity_types else set(ENTITY_CATEGORIES)
        entities: dict[str, list[str]] = {category: [] for category in ENTITY_CATEGORIES}

        organizations: list[str] = []
        for pattern in _ORG_PATTERNS:
            organizations.extend(pattern.findall(text))
        organizations = _dedupe(organizations)

        if "organizations" in wanted:
            entities["organizations"] = organizations

        if "people" in wanted:
            org_set = set(organizations)
            people = [m for m in _PERSON_PATTERN.findall(text) if m not in org_set]
            entities["people"] = _dedupe(people)

        return RecognitionResult(
            entities=entities,
            total_found=sum(len(found) for found in entities.values()),
            confidence_scores=self._confidence_scores(entities),
        )

    def _confidence_scores(self, entities: dict[str, list[str]]) -> dict[str, list[EntityConfidence]]:
        return {
            category: [
                EntityConfidence(
                    entity=entity,
                    confidence=self.rng.random() * CONFIDENCE_SPAN + CONFIDENCE_FLOOR,
                )
                for entity in found
            ]
            for category, found in entities.items()
        }
