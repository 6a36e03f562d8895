"""API endpoints for the entity intelligence tool surface."""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from app.agents.entity_intelligence_tools import execute_entity_tool, get_tool_definitions
from app.core.exceptions import EntityServiceError, NotFoundError, UnknownToolError
from app.core.logging import get_logger
from app.services.entity_intelligence import EntityIntelligenceService, get_entity_service

logger = get_logger(__name__)

router = APIRouter()


@router.get("/entities/tools")
def list_entity_tools() -> list[dict[str, Any]]:
    """List tool definitions (name, description, input_schema)."""
    return get_tool_definitions()


@router.post("/entities/tools/{tool_name}")
def invoke_entity_tool(
    tool_name: str = Path(..., description="Tool name"),
    tool_args: dict[str, Any] | None = Body(None),
    service: EntityIntelligenceService = Depends(get_entity_service),
) -> dict[str, Any]:
    """
    Invoke one tool.

    Failures inside the tool come back as a 200 envelope with
    success=false and an error_kind; an unknown tool name is a 404.
    """
    try:
        return execute_entity_tool(tool_name, tool_args, service=service)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.get("/entities/{entity_id}")
def get_entity_profile(
    entity_id: str = Path(..., description="Entity id (slugified organization name)"),
    service: EntityIntelligenceService = Depends(get_entity_service),
) -> dict[str, Any]:
    """Get a stored entity profile."""
    try:
        return service.get_entity_profile(entity_id).model_dump(mode="json")
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except EntityServiceError as e:
        logger.error(f"Error getting entity {entity_id}: {e.message}")
        raise HTTPException(status_code=502, detail=e.message)
