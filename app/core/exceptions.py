"""Error taxonomy for entity intelligence operations.

Every recoverable failure carries a ``kind`` that the tool dispatcher copies
into the result envelope. ``UnknownToolError`` is deliberately outside the
hierarchy: it is the only condition the dispatcher lets escape.
"""


class EntityServiceError(Exception):
    """Base class for recoverable entity service failures."""

    kind = "entity_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(EntityServiceError):
    """Entity id absent from the backing store."""

    kind = "not_found"

    def __init__(self, entity_id: str, message: str | None = None):
        super().__init__(message or f"Entity not found: {entity_id}")
        self.entity_id = entity_id


class PersistenceError(EntityServiceError):
    """Backing store read or write failed (including deadline expiry)."""

    kind = "persistence_error"


class ValidationError(EntityServiceError):
    """Malformed or missing arguments."""

    kind = "validation_error"


class ConflictError(EntityServiceError):
    """A write lost an optimistic-concurrency race."""

    kind = "conflict"

    def __init__(self, entity_id: str, expected_revision: int | None = None):
        detail = f" (expected revision {expected_revision})" if expected_revision is not None else ""
        super().__init__(f"Concurrent modification of entity {entity_id}{detail}")
        self.entity_id = entity_id
        self.expected_revision = expected_revision


class UnknownToolError(Exception):
    """Raised for an unrecognized tool name."""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name
