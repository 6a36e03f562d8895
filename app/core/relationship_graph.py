"""Relationship graph traversal over declared organization relationships.

Traversal is breadth-first with a visited set, so organizations reached by
several paths (or through cycles) are fetched and emitted once. Each visited
node costs one sequential store read; total reads are bounded by
branching_factor ** depth.
"""

from __future__ import annotations

from collections import deque

from app.core.influence import influence_score
from app.core.logging import get_logger
from app.core.profile_store import ProfileStore
from app.core.schemas_entities import (
    Connection,
    EntityConnections,
    EntityProfile,
    IndustryGroup,
    NetworkEdge,
    NetworkNode,
    OrganizationNetwork,
)

logger = get_logger(__name__)

RELATIONSHIP_WEIGHTS: dict[str, float] = {
    "subsidiary": 1.0,
    "parent": 1.0,
    "joint_venture": 0.7,
    "partnership": 0.5,
    "competitor": 0.3,
}
UNKNOWN_RELATIONSHIP_WEIGHT = 0.1

# Plural filter names accepted by find_connections
CONNECTION_TYPE_ALIASES: dict[str, str] = {
    "subsidiaries": "subsidiary",
    "joint_ventures": "joint_venture",
    "partners": "partnership",
    "partnerships": "partnership",
    "competitors": "competitor",
}


def relationship_weight(relationship_type: str) -> float:
    return RELATIONSHIP_WEIGHTS.get(relationship_type, UNKNOWN_RELATIONSHIP_WEIGHT)


def declared_relationships(profile: EntityProfile) -> list[tuple[str, str]]:
    """(entity_id, type) pairs for subsidiaries, joint ventures and partnerships."""
    rel = profile.relationships
    return (
        [(entity_id, "subsidiary") for entity_id in rel.subsidiaries]
        + [(entity_id, "joint_venture") for entity_id in rel.joint_ventures]
        + [(entity_id, "partnership") for entity_id in rel.strategic_partnerships]
    )


def group_by_industry(nodes: list[NetworkNode]) -> list[IndustryGroup]:
    """Partition nodes by primary industry, in first-seen order.

    This is a coarse grouping step, not a community-detection algorithm.
    """
    groups: dict[str, list[str]] = {}
    for node in nodes:
        groups.setdefault(node.industry, []).append(node.id)
    return [
        IndustryGroup(industry=industry, members=members, size=len(members))
        for industry, members in groups.items()
    ]


class RelationshipGraph:
    """Builds organization networks and direct-connection lists."""

    def __init__(self, store: ProfileStore):
        self.store = store

    def map_network(self, root_id: str, depth: int = 2, timeout: float | None = None) -> OrganizationNetwork:
        """
        Breadth-first map of an organization's relationship network.

        Args:
            root_id: Entity id to start from (level 0)
            depth: Number of levels to visit; 0 yields an empty network
            timeout: Deadline for each store read

        Returns:
            Nodes, edges and industry groups. Ids without a stored profile
            are skipped silently.
        """
        network = OrganizationNetwork()
        visited: set[str] = set()
        queue: deque[tuple[str, int]] = deque([(root_id, 0)])

        while queue and queue[0][1] < depth:
            current_id, level = queue.popleft()
            if current_id in visited:
                continue
            visited.add(current_id)

            profile = self.store.get(current_id, timeout=timeout)
            if profile is None:
                logger.debug(f"Network mapping skipped missing entity {current_id}")
                continue

            network.nodes.append(
                NetworkNode(
                    id=profile.id,
                    name=profile.name,
                    industry=profile.industry.primary or "unknown",
                    level=level,
                    influence=influence_score(profile),
                )
            )

            for target_id, rel_type in declared_relationships(profile):
                network.edges.append(
                    NetworkEdge(
                        source=profile.id,
                        target=target_id,
                        type=rel_type,
                        weight=relationship_weight(rel_type),
                    )
                )
                if level + 1 < depth:
                    queue.append((target_id, level + 1))

        network.clusters = group_by_industry(network.nodes)
        logger.info(
            f"Mapped network for {root_id}: {len(network.nodes)} nodes, {len(network.edges)} edges"
        )
        return network

    def find_connections(
        self,
        entity_id: str,
        connection_types: list[str] | None = None,
        timeout: float | None = None,
    ) -> EntityConnections:
        """Direct relationships of one entity, including main competitors."""
        profile = self.store.require(entity_id, timeout=timeout)

        direct = [Connection(entity=target, type=rel_type) for target, rel_type in declared_relationships(profile)]
        direct += [Connection(entity=c, type="competitor") for c in profile.stakeholders.main_competitors]

        if connection_types:
            wanted = {CONNECTION_TYPE_ALIASES.get(t, t) for t in connection_types}
            direct = [c for c in direct if c.type in wanted]

        return EntityConnections(entity_id=entity_id, direct=direct)
