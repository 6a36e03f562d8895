"""Rule-based entity behavior prediction.

A stand-in for a real model: the scenario is matched against ordered keyword
buckets and a canned reaction is returned. The output shape is the contract.
"""

from __future__ import annotations

import random

from app.core.profile_store import ProfileStore
from app.core.schemas_entities import BehaviorPrediction

# Ordered: the first bucket with a keyword in the scenario wins
REACTION_RULES: list[tuple[tuple[str, ...], str]] = [
    (("crisis", "scandal"), "Defensive response with rapid PR campaign"),
    (("opportunity", "partnership"), "Cautious exploration with due diligence"),
    (("competition", "threat"), "Aggressive counter-positioning"),
]
DEFAULT_REACTION = "Measured response with internal assessment"

KEY_FACTORS = [
    "Historical response patterns",
    "Current market position",
    "Leadership style",
    "Stakeholder pressure",
    "Financial capacity",
]
RECOMMENDED_APPROACH = "Proactive engagement with transparent communication"

PROBABILITY_FLOOR = 0.6
PROBABILITY_SPAN = 0.3


def predict_reaction(scenario: str) -> str:
    scenario_lower = scenario.lower()
    for keywords, reaction in REACTION_RULES:
        if any(keyword in scenario_lower for keyword in keywords):
            return reaction
    return DEFAULT_REACTION


class BehaviorPredictor:
    """Predicts an organization's reaction to a scenario."""

    def __init__(self, store: ProfileStore, rng: random.Random | None = None):
        self.store = store
        self.rng = rng or random.Random()

    def predict(self, entity_id: str, scenario: str, timeout: float | None = None) -> BehaviorPrediction:
        # Only existence matters today; the profile is the input a real model would use
        self.store.require(entity_id, timeout=timeout)

        return BehaviorPrediction(
            entity_id=entity_id,
            scenario=scenario,
            likely_reaction=predict_reaction(scenario),
            probability=self.rng.random() * PROBABILITY_SPAN + PROBABILITY_FLOOR,
            key_factors=list(KEY_FACTORS),
            recommended_approach=RECOMMENDED_APPROACH,
        )
