"""Pydantic schemas for entity profiles, history, and intelligence results."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================


class EnrichmentStatus(str, Enum):
    """How far a profile's derived fields have been populated."""
    PARTIAL = "partial"
    COMPLETE = "complete"


# ============================================================================
# Entity Profile
# ============================================================================


class IndustryClassification(BaseModel):
    """Industry assignment from the taxonomy."""

    primary: str
    secondary: list[str] = Field(default_factory=list)
    subcategories: list[str] = Field(default_factory=list)


class ProfileMetadata(BaseModel):
    """Scalar facts about an organization. Only overwritten by explicit updates.

    Rows written by other services may carry numbers (founded=1998,
    employees=5000); they are kept as their string form.
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    founded: str = ""
    headquarters: str = ""
    employees: str = ""
    revenue: str = ""
    public_private: Literal["public", "private"] = "private"
    ticker: Optional[str] = None
    website: str = ""
    social_handles: dict[str, str] = Field(default_factory=dict)


class Stakeholders(BaseModel):
    """Named stakeholder lists (names or entity ids)."""

    executives: list[str] = Field(default_factory=list)
    board_members: list[str] = Field(default_factory=list)
    major_investors: list[str] = Field(default_factory=list)
    key_customers: list[str] = Field(default_factory=list)
    main_competitors: list[str] = Field(default_factory=list)
    regulators: list[str] = Field(default_factory=list)
    media_outlets: list[str] = Field(default_factory=list)
    activist_groups: list[str] = Field(default_factory=list)


class MonitoringConfig(BaseModel):
    """What to watch for an entity."""

    keywords: list[str] = Field(default_factory=list)
    rss_feeds: list[str] = Field(default_factory=list)
    api_endpoints: list[str] = Field(default_factory=list)
    social_accounts: list[str] = Field(default_factory=list)
    regulatory_filings: bool = False
    executive_changes: bool = True
    ma_activity: bool = True
    crisis_indicators: list[str] = Field(default_factory=list)


class Intelligence(BaseModel):
    """Append-only intelligence feed."""

    narrative_themes: list[Any] = Field(default_factory=list)
    recent_developments: list[Any] = Field(default_factory=list)
    upcoming_catalysts: list[Any] = Field(default_factory=list)
    risk_factors: list[Any] = Field(default_factory=list)
    opportunities: list[Any] = Field(default_factory=list)
    cascade_triggers: list[Any] = Field(default_factory=list)


class Relationships(BaseModel):
    """Declared corporate relationships (entity ids)."""

    subsidiaries: list[str] = Field(default_factory=list)
    joint_ventures: list[str] = Field(default_factory=list)
    strategic_partnerships: list[str] = Field(default_factory=list)


class EntityProfile(BaseModel):
    """Canonical record for an organization, keyed by slugified name."""

    id: str
    name: str
    aliases: list[str] = Field(default_factory=list)
    industry: IndustryClassification
    metadata: ProfileMetadata = Field(default_factory=ProfileMetadata)
    stakeholders: Stakeholders = Field(default_factory=Stakeholders)
    monitoring_config: MonitoringConfig = Field(default_factory=MonitoringConfig)
    intelligence: Intelligence = Field(default_factory=Intelligence)
    relationships: Relationships = Field(default_factory=Relationships)
    last_updated: datetime = Field(default_factory=utc_now)
    enrichment_status: EnrichmentStatus = EnrichmentStatus.PARTIAL
    revision: int = Field(default=0, ge=0, description="0 = never persisted")

    def to_row(self) -> dict[str, Any]:
        """Serialize for the backing store."""
        return self.model_dump(mode="json")


class HistoryRecord(BaseModel):
    """One change event for an entity. Written elsewhere, read-only here."""

    entity_id: str
    timestamp: datetime
    change_type: str
    significance: str = "low"
    description: str = ""
    impact_score: Optional[float] = None


# ============================================================================
# Operation results
# ============================================================================


class EntityConfidence(BaseModel):
    entity: str
    confidence: float


class RecognitionResult(BaseModel):
    """Categorized entities found in a text."""

    entities: dict[str, list[str]]
    total_found: int
    confidence_scores: dict[str, list[EntityConfidence]]


class NetworkNode(BaseModel):
    id: str
    name: str
    industry: str
    level: int
    influence: int


class NetworkEdge(BaseModel):
    source: str
    target: str
    type: str
    weight: float


class IndustryGroup(BaseModel):
    """Nodes sharing a primary industry. Not a graph community."""

    industry: str
    members: list[str]
    size: int


class OrganizationNetwork(BaseModel):
    nodes: list[NetworkNode] = Field(default_factory=list)
    edges: list[NetworkEdge] = Field(default_factory=list)
    clusters: list[IndustryGroup] = Field(default_factory=list)


class Connection(BaseModel):
    entity: str
    type: str


class EntityConnections(BaseModel):
    entity_id: str
    direct: list[Connection] = Field(default_factory=list)
    indirect: list[Connection] = Field(default_factory=list)
    network_map: dict[str, Any] = Field(default_factory=dict)


class InfluenceFactors(BaseModel):
    size: int
    public_status: int
    media_coverage: int
    regulatory_attention: int


class InfluenceScore(BaseModel):
    organization_id: str
    influence_score: int
    factors: InfluenceFactors


class Milestone(BaseModel):
    date: datetime
    event: str
    impact: Optional[float] = None


class EvolutionSummary(BaseModel):
    entity_id: str
    timeframe: Optional[str] = None
    changes: list[HistoryRecord] = Field(default_factory=list)
    trend_analysis: dict[str, Any]
    key_milestones: list[Milestone] = Field(default_factory=list)


class BehaviorPrediction(BaseModel):
    entity_id: str
    scenario: str
    likely_reaction: str
    probability: float
    key_factors: list[str]
    recommended_approach: str


class EntityMatch(BaseModel):
    entity: str
    score: float


class EntityMatches(BaseModel):
    strong_matches: list[EntityMatch] = Field(default_factory=list)
    potential_matches: list[EntityMatch] = Field(default_factory=list)
    no_match: list[str] = Field(default_factory=list)


class KnownEntity(BaseModel):
    name: str
    aliases: list[str] = Field(default_factory=list)


class ResolvedReference(BaseModel):
    mention: str
    entity: str
    match_type: Literal["exact", "alias", "fuzzy"]


class ReferenceResolution(BaseModel):
    resolved: list[ResolvedReference] = Field(default_factory=list)
    unresolved_candidates: list[str] = Field(default_factory=list)


class IntelligenceUpdateAck(BaseModel):
    success: bool = True
    entity_id: str
    intelligence_type: str
    updated: datetime


# ============================================================================
# Tool arguments
# ============================================================================


class ToolArgs(BaseModel):
    """Common tool arguments."""

    timeout_seconds: Optional[float] = Field(
        None, gt=0, description="Deadline for each backing store call"
    )


class RecognizeEntitiesArgs(ToolArgs):
    text: str
    entity_types: Optional[list[str]] = None


class EnrichEntityProfileArgs(ToolArgs):
    organization_name: str = Field(..., min_length=1)
    deep_enrich: bool = False


class TrackEntityEvolutionArgs(ToolArgs):
    entity_id: str = Field(..., min_length=1)
    timeframe: Optional[str] = None


class FindEntityConnectionsArgs(ToolArgs):
    entity_id: str = Field(..., min_length=1)
    connection_types: Optional[list[str]] = None
    depth: int = Field(2, ge=1)


class MatchEntitiesToOrgArgs(ToolArgs):
    organization_id: str = Field(..., min_length=1)
    entity_list: list[str]


class UpdateEntityIntelligenceArgs(ToolArgs):
    entity_id: str = Field(..., min_length=1)
    intelligence_type: str
    data: Any


class PredictEntityBehaviorArgs(ToolArgs):
    entity_id: str = Field(..., min_length=1)
    scenario: str


class ClassifyIndustryArgs(ToolArgs):
    organization_name: str = Field(..., min_length=1)
    context: Optional[str] = None


class MapOrganizationNetworkArgs(ToolArgs):
    organization_id: str = Field(..., min_length=1)
    depth: Optional[int] = Field(None, ge=0)


class CalculateInfluenceScoreArgs(ToolArgs):
    organization_id: str = Field(..., min_length=1)


class ResolveEntityReferencesArgs(ToolArgs):
    text: str
    known_entities: list[KnownEntity] = Field(default_factory=list)
