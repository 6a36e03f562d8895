"""Tool execution layer for the Entity Intelligence Service.

Maps tool calls to service operations. Each tool returns a consistent dict
with "success", "data", "error" and "error_kind". Only an unknown tool name
raises (UnknownToolError); every other failure comes back as an envelope.
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import EntityServiceError, UnknownToolError
from app.core.logging import get_logger, log_with_context
from app.core.schemas_entities import (
    CalculateInfluenceScoreArgs,
    ClassifyIndustryArgs,
    EnrichEntityProfileArgs,
    FindEntityConnectionsArgs,
    MapOrganizationNetworkArgs,
    MatchEntitiesToOrgArgs,
    PredictEntityBehaviorArgs,
    RecognizeEntitiesArgs,
    ResolveEntityReferencesArgs,
    TrackEntityEvolutionArgs,
    UpdateEntityIntelligenceArgs,
)
from app.services.entity_intelligence import EntityIntelligenceService, get_entity_service

logger = get_logger(__name__)

_TIMEOUT_PROPERTY = {
    "type": "number",
    "description": "Optional deadline in seconds for each backing store call",
}


# =============================================================================
# Tool definitions
# =============================================================================

TOOL_DEFINITIONS: list[dict[str, Any]] = [
    {
        "name": "recognize_entities",
        "description": "Extract and identify entities (organizations, people) from any text.",
        "input_schema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "Text to extract entities from"},
                "entity_types": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Categories to extract (organizations, people, locations, products, events)",
                },
            },
            "required": ["text"],
        },
    },
    {
        "name": "enrich_entity_profile",
        "description": "Get or create a comprehensive profile for an organization.",
        "input_schema": {
            "type": "object",
            "properties": {
                "organization_name": {"type": "string", "description": "Name of the organization"},
                "deep_enrich": {
                    "type": "boolean",
                    "description": "Rebuild derived fields even if a profile already exists",
                },
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["organization_name"],
        },
    },
    {
        "name": "track_entity_evolution",
        "description": "Summarize how an entity has changed over time.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Entity identifier"},
                "timeframe": {"type": "string", "description": 'Window to analyze, e.g. "30d", "6m", "1y"'},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["entity_id"],
        },
    },
    {
        "name": "find_entity_connections",
        "description": "List an entity's direct relationships (subsidiaries, joint ventures, partners, competitors).",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Primary entity identifier"},
                "connection_types": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Connection types to keep (subsidiary, joint_venture, partnership, competitor)",
                },
                "depth": {"type": "number", "description": "Degrees of separation to explore"},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["entity_id"],
        },
    },
    {
        "name": "match_entities_to_org",
        "description": "Score how strongly each named entity relates to an organization.",
        "input_schema": {
            "type": "object",
            "properties": {
                "organization_id": {"type": "string", "description": "Organization identifier"},
                "entity_list": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Entity names to match",
                },
            },
            "required": ["organization_id", "entity_list"],
        },
    },
    {
        "name": "update_entity_intelligence",
        "description": "Append an intelligence item to an entity profile.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Entity identifier"},
                "intelligence_type": {
                    "type": "string",
                    "enum": ["narrative_theme", "development", "catalyst", "risk", "opportunity", "cascade_trigger"],
                    "description": "Type of intelligence item",
                },
                "data": {"type": "object", "description": "Intelligence data to add"},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["entity_id", "intelligence_type", "data"],
        },
    },
    {
        "name": "predict_entity_behavior",
        "description": "Predict how an entity is likely to react to a scenario.",
        "input_schema": {
            "type": "object",
            "properties": {
                "entity_id": {"type": "string", "description": "Entity identifier"},
                "scenario": {"type": "string", "description": "Scenario to predict a reaction to"},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["entity_id", "scenario"],
        },
    },
    {
        "name": "classify_industry",
        "description": "Classify an organization into industry categories.",
        "input_schema": {
            "type": "object",
            "properties": {
                "organization_name": {"type": "string", "description": "Name of the organization"},
                "context": {"type": "string", "description": "Additional context about the organization"},
            },
            "required": ["organization_name"],
        },
    },
    {
        "name": "map_organization_network",
        "description": "Map the relationship network around an organization.",
        "input_schema": {
            "type": "object",
            "properties": {
                "organization_id": {"type": "string", "description": "Organization identifier"},
                "depth": {"type": "number", "description": "Network depth to explore"},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["organization_id"],
        },
    },
    {
        "name": "calculate_influence_score",
        "description": "Calculate the influence score of an organization with a factor breakdown.",
        "input_schema": {
            "type": "object",
            "properties": {
                "organization_id": {"type": "string", "description": "Organization identifier"},
                "timeout_seconds": _TIMEOUT_PROPERTY,
            },
            "required": ["organization_id"],
        },
    },
    {
        "name": "resolve_entity_references",
        "description": "Resolve entity mentions in text to known entities by name, alias or fuzzy match.",
        "input_schema": {
            "type": "object",
            "properties": {
                "text": {"type": "string", "description": "Text with entity references"},
                "known_entities": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string"},
                            "aliases": {"type": "array", "items": {"type": "string"}},
                        },
                    },
                    "description": "Known entities and their aliases",
                },
            },
            "required": ["text"],
        },
    },
]


def get_tool_definitions() -> list[dict[str, Any]]:
    """Return all tool definitions."""
    return TOOL_DEFINITIONS


# =============================================================================
# Handlers
# =============================================================================

Handler = Callable[[EntityIntelligenceService, Any], BaseModel]

_TOOL_HANDLERS: dict[str, tuple[type[BaseModel], Handler]] = {
    "recognize_entities": (
        RecognizeEntitiesArgs,
        lambda svc, a: svc.recognize_entities(a.text, a.entity_types),
    ),
    "enrich_entity_profile": (
        EnrichEntityProfileArgs,
        lambda svc, a: svc.enrich_entity_profile(a.organization_name, a.deep_enrich, timeout=a.timeout_seconds),
    ),
    "track_entity_evolution": (
        TrackEntityEvolutionArgs,
        lambda svc, a: svc.track_entity_evolution(a.entity_id, a.timeframe, timeout=a.timeout_seconds),
    ),
    "find_entity_connections": (
        FindEntityConnectionsArgs,
        lambda svc, a: svc.find_entity_connections(
            a.entity_id, a.connection_types, a.depth, timeout=a.timeout_seconds
        ),
    ),
    "match_entities_to_org": (
        MatchEntitiesToOrgArgs,
        lambda svc, a: svc.match_entities_to_org(a.organization_id, a.entity_list),
    ),
    "update_entity_intelligence": (
        UpdateEntityIntelligenceArgs,
        lambda svc, a: svc.update_entity_intelligence(
            a.entity_id, a.intelligence_type, a.data, timeout=a.timeout_seconds
        ),
    ),
    "predict_entity_behavior": (
        PredictEntityBehaviorArgs,
        lambda svc, a: svc.predict_entity_behavior(a.entity_id, a.scenario, timeout=a.timeout_seconds),
    ),
    "classify_industry": (
        ClassifyIndustryArgs,
        lambda svc, a: svc.classify_industry(a.organization_name, a.context),
    ),
    "map_organization_network": (
        MapOrganizationNetworkArgs,
        lambda svc, a: svc.map_organization_network(a.organization_id, a.depth, timeout=a.timeout_seconds),
    ),
    "calculate_influence_score": (
        CalculateInfluenceScoreArgs,
        lambda svc, a: svc.calculate_influence_score(a.organization_id, timeout=a.timeout_seconds),
    ),
    "resolve_entity_references": (
        ResolveEntityReferencesArgs,
        lambda svc, a: svc.resolve_entity_references(a.text, a.known_entities),
    ),
}


def _failure(kind: str, message: str) -> dict:
    return {"success": False, "data": {}, "error": message, "error_kind": kind}


def execute_entity_tool(
    tool_name: str,
    tool_args: dict | None,
    service: EntityIntelligenceService | None = None,
) -> dict:
    """
    Route and execute an entity intelligence tool.

    Args:
        tool_name: One of the names in TOOL_DEFINITIONS
        tool_args: Tool arguments
        service: Service instance (defaults to the process-wide one)

    Returns:
        {"success", "data", "error", "error_kind"}

    Raises:
        UnknownToolError: If tool_name is not a known tool
    """
    entry = _TOOL_HANDLERS.get(tool_name)
    if entry is None:
        raise UnknownToolError(tool_name)
    args_model, handler = entry

    log_with_context(logger, logging.INFO, "Executing entity tool", tool_name=tool_name)

    try:
        args = args_model.model_validate(tool_args or {})
    except PydanticValidationError as e:
        return _failure("validation_error", f"Invalid arguments for {tool_name}: {e}")

    try:
        result = handler(service or get_entity_service(), args)
        return {"success": True, "data": result.model_dump(mode="json"), "error": None, "error_kind": None}
    except EntityServiceError as e:
        log_with_context(
            logger, logging.WARNING, f"Entity tool failed: {e.message}",
            tool_name=tool_name, error_kind=e.kind,
        )
        return _failure(e.kind, e.message)
    except Exception as e:
        logger.error(f"Entity tool {tool_name} failed: {e}", exc_info=True)
        return _failure("internal_error", str(e))
