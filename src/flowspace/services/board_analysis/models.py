"""
Service models for board analysis.

Derived entities (clusters, topics, hierarchies, chains, diagnostics,
patches) are rebuilt on every analysis call and never shared between calls.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ...shared.config.settings import Settings, get_settings
from ...shared.models.base import BaseModel
from ...shared.models.board import BoardStats, Position


class Severity(str, Enum):
    """Diagnostic severity levels, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Priority(str, Enum):
    """Patch priority levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


PRIORITY_ORDER: Dict[str, int] = {"high": 0, "medium": 1, "low": 2}


class DiagnosticType(str, Enum):
    """Discriminant of the diagnostic tagged union."""
    DEAD_END = "dead_end"
    MISSING_LABEL = "missing_label"
    CIRCULAR_DEPENDENCIES = "circular_dependencies"
    UNREACHABLE = "unreachable"
    MULTIPLE_STARTS = "multiple_starts"
    NO_END_POINTS = "no_end_points"
    ISOLATED_NODE = "isolated_node"
    INVALID_DECISION = "invalid_decision"
    BROKEN_CONNECTION = "broken_connection"
    OVERLAPPING_ELEMENTS = "overlapping_elements"
    CASE_INCONSISTENCY = "case_inconsistency"
    TERMINOLOGY_INCONSISTENCY = "terminology_inconsistency"
    ABBREVIATION_INCONSISTENCY = "abbreviation_inconsistency"


# Static severity lookup keyed by rule code. A rule code is the diagnostic
# type, optionally refined with a variant suffix.
SEVERITY_RULES: Dict[str, Severity] = {
    "dead_end": Severity.MEDIUM,
    "missing_label.empty": Severity.HIGH,
    "missing_label.short": Severity.LOW,
    "missing_label.generic": Severity.MEDIUM,
    "circular_dependencies": Severity.MEDIUM,
    "circular_dependencies.strict": Severity.HIGH,
    "unreachable": Severity.HIGH,
    "multiple_starts": Severity.MEDIUM,
    "no_end_points": Severity.HIGH,
    "isolated_node": Severity.HIGH,
    "invalid_decision.too_few_branches": Severity.HIGH,
    "invalid_decision.unlabeled_branches": Severity.MEDIUM,
    "broken_connection.source": Severity.CRITICAL,
    "broken_connection.target": Severity.CRITICAL,
    "overlapping_elements": Severity.LOW,
    "case_inconsistency": Severity.LOW,
    "terminology_inconsistency": Severity.MEDIUM,
    "abbreviation_inconsistency": Severity.LOW,
}


# === Derived structure ===

class BoundingBox(BaseModel):
    """Axis-aligned bounding box."""

    min_x: float
    max_x: float
    min_y: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height


class Cluster(BaseModel):
    """A proximity grouping of at least two visual elements."""

    id: str
    element_ids: List[str] = Field(..., min_length=2)
    bounds: BoundingBox
    center: Position
    size: int
    density: Optional[float] = Field(default=None, description="Members per 10,000 square units; null for a zero-area box")


class Overlap(BaseModel):
    """Two visual elements placed closer than the overlap threshold."""

    element_ids: List[str]
    distance: int


class Topic(BaseModel):
    """A ranked keyword."""

    keyword: str
    frequency: int
    element_ids: List[str] = Field(default_factory=list)
    center: Position


class HierarchyNode(BaseModel):
    id: str
    label: str = ""
    children: List[str] = Field(default_factory=list)


class Hierarchy(BaseModel):
    """A rooted, leveled tree derived from connections."""

    root: str
    root_label: str = ""
    levels: List[List[HierarchyNode]] = Field(default_factory=list)
    depth: int = 0
    breadth: int = 0


class ChainStep(BaseModel):
    id: str
    label: str = ""
    position: Position = Field(default_factory=Position)


class DependencyChain(BaseModel):
    """A simple directed path of connected text elements."""

    id: str
    steps: List[ChainStep] = Field(default_factory=list)
    length: int = 0


class DependencyAnalysis(BaseModel):
    chains: List[DependencyChain] = Field(default_factory=list)
    total_connections: int = 0
    average_chain_length: float = 0.0


class DuplicatePair(BaseModel):
    """Two elements whose normalized labels are identical."""

    text: str
    element_ids: List[str]
    positions: List[Position] = Field(default_factory=list)


class SimilarPair(BaseModel):
    """Two canonical labels whose edit-distance similarity exceeds the threshold."""

    element_ids: List[str]
    texts: List[str]
    similarity: int = Field(..., description="Similarity percentage")


class DuplicateReport(BaseModel):
    exact: List[DuplicatePair] = Field(default_factory=list)
    similar: List[SimilarPair] = Field(default_factory=list)


# === Findings and remediation ===

class Diagnostic(BaseModel):
    """
    One structural finding.

    ``type`` is the discriminant; ``code`` refines it for the severity lookup
    (e.g. ``missing_label.generic``).
    """

    type: DiagnosticType
    code: str
    severity: Severity
    message: str
    element_ids: List[str] = Field(default_factory=list)
    edge_ids: List[str] = Field(default_factory=list)
    payload: Dict[str, Any] = Field(default_factory=dict)


class PatchSource(str, Enum):
    HEURISTIC = "heuristic"
    ENRICHMENT = "enrichment"


class Patch(BaseModel):
    """A proposed, advisory remediation."""

    id: str
    type: str
    priority: Priority
    target_element_ids: List[str] = Field(default_factory=list)
    target_edge_ids: List[str] = Field(default_factory=list)
    action: Dict[str, Any] = Field(default_factory=dict)
    reasoning: str = ""
    auto_applicable: bool = False
    requires_user_input: bool = False
    source: PatchSource = PatchSource.HEURISTIC
    diagnostic_type: Optional[str] = None


# === Enrichment collaborator payloads ===

class EnrichmentModel(BaseModel):
    """Base for enrichment payloads; unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore")


class MissingElementSuggestion(EnrichmentModel):
    type: str = "missing_step"
    description: str = ""
    suggested_location: str = ""
    severity: str = "medium"


class ClarityIssue(EnrichmentModel):
    node_id: Optional[str] = None
    current_label: str = ""
    issue: str = ""
    suggested_label: str = ""
    reasoning: str = ""


class CycleAssessment(EnrichmentModel):
    cycle: List[str] = Field(default_factory=list)
    is_intentional: bool = False
    reasoning: str = ""
    recommendation: str = ""


class OverallAssessment(EnrichmentModel):
    score: int = 0
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    priority_fixes: List[str] = Field(default_factory=list)

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, v):
        try:
            return max(0, min(100, int(round(float(v)))))
        except (TypeError, ValueError):
            return 0


class EnrichmentResult(EnrichmentModel):
    """Qualitative output of an optional enrichment provider."""

    main_themes: List[str] = Field(default_factory=list)
    key_insights: List[str] = Field(default_factory=list)
    summary: str = ""
    logical_issues: List[Dict[str, Any]] = Field(default_factory=list)
    missing_elements: List[MissingElementSuggestion] = Field(default_factory=list)
    clarity_issues: List[ClarityIssue] = Field(default_factory=list)
    circular_logic_analysis: List[CycleAssessment] = Field(default_factory=list)
    overall_assessment: Optional[OverallAssessment] = None


# === Configuration and report ===

class AnalysisOptions(BaseModel):
    """Per-call analysis configuration."""

    strict_mode: bool = False
    check_terminology: bool = True
    suggest_fixes: bool = True
    use_enrichment: bool = True
    cluster_distance_threshold: float = Field(default=300.0, gt=0)
    overlap_distance_threshold: float = Field(default=50.0, gt=0)
    similarity_threshold: float = Field(default=0.80, ge=0.0, le=1.0)
    max_topics: int = Field(default=20, ge=1)
    enrichment_timeout_seconds: float = Field(default=10.0, gt=0)
    max_pairwise_elements: int = Field(default=500, ge=2)

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None, **overrides: Any) -> "AnalysisOptions":
        """Seed options from settings, then apply overrides (snake or camel case)."""
        settings = settings or get_settings()
        options = cls(**settings.analysis_defaults)
        if not overrides:
            return options
        return cls.model_validate({**options.model_dump(), **_snake_keys(overrides)})


def _snake_keys(values: Dict[str, Any]) -> Dict[str, Any]:
    by_alias = {to_camel(name): name for name in AnalysisOptions.model_fields}
    return {by_alias.get(key, key): value for key, value in values.items()}


class Summary(BaseModel):
    total_issues: int = 0
    critical_issues: int = 0
    high_severity: int = 0
    medium_severity: int = 0
    low_severity: int = 0
    patches_available: int = 0
    auto_applicable_patches: int = 0
    health_score: int = 100

    @field_validator('health_score')
    @classmethod
    def clamp_health_score(cls, v):
        return max(0, min(100, v))


class AnalysisReport(BaseModel):
    """Everything one analysis call produces."""

    analysis_type: str = "heuristic"
    topics: List[Topic] = Field(default_factory=list)
    clusters: List[Cluster] = Field(default_factory=list)
    hierarchies: List[Hierarchy] = Field(default_factory=list)
    dependencies: DependencyAnalysis = Field(default_factory=DependencyAnalysis)
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    diagnostic_groups: Dict[str, List[Diagnostic]] = Field(default_factory=dict)
    terminology_issues: List[Diagnostic] = Field(default_factory=list)
    duplicates: DuplicateReport = Field(default_factory=DuplicateReport)
    recommended_patches: List[Patch] = Field(default_factory=list)
    stats: BoardStats = Field(default_factory=BoardStats)
    summary: Summary = Field(default_factory=Summary)
    overall_assessment: OverallAssessment = Field(default_factory=OverallAssessment)
    insights: Optional[EnrichmentResult] = None

    @property
    def issues(self) -> List[Diagnostic]:
        return self.diagnostics

    def diagnostics_of(self, diagnostic_type: str) -> List[Diagnostic]:
        """All diagnostics with the given type."""
        return [d for d in self.diagnostics if d.type == diagnostic_type]
