"""
Board Analysis Service implementation.

Runs the full heuristic pipeline over one board snapshot: extraction,
spatial clustering, topics, hierarchies, cycles, duplicates, dependency
chains, structural diagnostics, terminology, patches and the final report.
An optional enrichment provider may add qualitative insights on top.
"""

import time
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import Settings, ValidationError, get_logger, get_metrics, get_settings
from .core import (
    DiagnosticRuleEngine, PatchGenerator, analyze_dependencies, build_hierarchies,
    check_terminology, compile_report, detect_cycles, extract_board, extract_topics,
    find_duplicates, identify_spatial_clusters,
)
from .enrichment import CallableEnrichmentProvider, EnrichmentProvider, run_enrichment
from .models import AnalysisOptions, AnalysisReport, Diagnostic, DiagnosticType, EnrichmentResult

OptionsInput = Union[AnalysisOptions, Mapping[str, Any], None]


class BoardAnalysisService:
    """
    Stateless board analysis engine.

    Holds configuration and the optional enrichment provider only; every
    call builds its own derived structures, so one instance can serve
    concurrent calls.
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 enrichment_provider: Optional[EnrichmentProvider] = None):
        """
        Initialize the board analysis service.

        Args:
            settings: Process-wide defaults (cached settings when omitted)
            enrichment_provider: Optional provider, or a plain callable
                ``(graph, report) -> result``
        """
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()
        self.settings = settings or get_settings()

        if enrichment_provider is not None and not isinstance(enrichment_provider, EnrichmentProvider):
            enrichment_provider = CallableEnrichmentProvider(enrichment_provider)
        self.enrichment_provider = enrichment_provider

    def resolve_options(self, options: OptionsInput = None) -> AnalysisOptions:
        """
        Merge per-call options with the settings defaults.

        Raises:
            ValidationError: if an option is unknown or out of range
        """
        if isinstance(options, AnalysisOptions):
            return options
        if options is not None and not isinstance(options, Mapping):
            raise ValidationError(f"Analysis options must be a mapping, got {type(options).__name__}")
        overrides = dict(options or {})
        bad_keys = [key for key in overrides if not isinstance(key, str)]
        if bad_keys:
            raise ValidationError(f"Analysis option names must be strings, got {bad_keys!r}")
        try:
            return AnalysisOptions.from_settings(self.settings, **overrides)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid analysis options: {e}") from e

    def analyze(self, snapshot: Any, options: OptionsInput = None) -> AnalysisReport:
        """
        Analyze one board snapshot.

        Args:
            snapshot: Raw snapshot ``{elements, connections, strokes, metadata}``
            options: AnalysisOptions or a mapping of option overrides

        Returns:
            Complete analysis report

        Raises:
            ValidationError: if options are invalid
            InvalidSnapshotError: if the snapshot is not a mapping
        """
        opts = self.resolve_options(options)
        start_time = time.time()

        board = extract_board(snapshot)
        self.logger.info(
            f"Analyzing board: {board.stats.node_count} nodes, "
            f"{board.stats.edge_count} connections, {board.stats.stroke_count} strokes"
        )

        clusters = identify_spatial_clusters(board.visual_elements, opts.cluster_distance_threshold)
        topics = extract_topics(board.text_elements, opts.max_topics)
        hierarchies = build_hierarchies(board)
        cycles = detect_cycles(board.to_networkx(include_dangling_sources=False))
        duplicates = find_duplicates(
            board.text_elements, opts.similarity_threshold, opts.max_pairwise_elements
        )
        dependencies = analyze_dependencies(board)

        engine = DiagnosticRuleEngine(
            strict_mode=opts.strict_mode,
            overlap_threshold=opts.overlap_distance_threshold,
            max_pairwise=opts.max_pairwise_elements,
        )
        diagnostics = engine.run(board, cycles)
        terminology = check_terminology(board) if opts.check_terminology else []

        def build(diags: List[Diagnostic], enrichment: Optional[EnrichmentResult]) -> AnalysisReport:
            patches = []
            if opts.suggest_fixes:
                patches = PatchGenerator().generate(
                    diags + terminology, enrichment, clusters, board.stats
                )
            return compile_report(
                diagnostics=diags,
                terminology_issues=terminology,
                patches=patches,
                topics=topics,
                clusters=clusters,
                hierarchies=hierarchies,
                dependencies=dependencies,
                duplicates=duplicates,
                stats=board.stats,
                enrichment=enrichment,
            )

        report = build(diagnostics, None)

        if opts.use_enrichment and self.enrichment_provider is not None:
            enrichment = run_enrichment(
                self.enrichment_provider, board, report.to_dict(), opts.enrichment_timeout_seconds
            )
            if enrichment is not None:
                report = build(apply_cycle_assessments(diagnostics, enrichment), enrichment)

        duration = time.time() - start_time
        self.metrics.record_analysis(duration, report.summary.total_issues,
                                     report.analysis_type == "enriched")
        self.logger.info(
            f"Board analysis complete: {report.summary.total_issues} issues, "
            f"health score {report.summary.health_score} ({duration:.3f}s)"
        )
        return report

    def get_service_stats(self) -> Dict[str, Any]:
        """Get analysis statistics from the metrics collector."""
        return {
            'analyses': self.metrics.get_counter('board_analyses_total'),
            'duration': self.metrics.get_timer_stats('board_analysis_duration'),
            'enrichment_failures': self.metrics.get_counter('enrichment_failures_total'),
            'enrichment_timeouts': self.metrics.get_counter('enrichment_timeouts_total'),
            'enrichment_provider': self.enrichment_provider.name if self.enrichment_provider else None,
        }


def _same_cycle(first: Sequence[str], second: Sequence[str]) -> bool:
    if len(first) != len(second) or not first:
        return False
    doubled = list(first) + list(first)
    return any(doubled[i:i + len(second)] == list(second) for i in range(len(first)))


def apply_cycle_assessments(diagnostics: Sequence[Diagnostic],
                            enrichment: EnrichmentResult) -> List[Diagnostic]:
    """
    Copy circular-dependency diagnostics with the provider's verdict.

    A cycle assessment matches a diagnostic when both describe the same
    cycle, in any rotation. Unmatched diagnostics are returned unchanged.
    """
    if not enrichment.circular_logic_analysis:
        return list(diagnostics)

    refined = []
    for diagnostic in diagnostics:
        if diagnostic.type == DiagnosticType.CIRCULAR_DEPENDENCIES.value:
            cycle = diagnostic.payload.get("cycle", [])
            match = next(
                (a for a in enrichment.circular_logic_analysis if _same_cycle(cycle, a.cycle)),
                None,
            )
            if match is not None:
                diagnostic = diagnostic.model_copy(update={"payload": {
                    **diagnostic.payload,
                    "isIntentional": match.is_intentional,
                    "reasoning": match.reasoning,
                }})
        refined.append(diagnostic)
    return refined


def analyze_board(snapshot: Any,
                  options: OptionsInput = None,
                  enrichment_provider: Optional[EnrichmentProvider] = None) -> AnalysisReport:
    """
    Analyze a board with a one-off service.

    Args:
        snapshot: Raw board snapshot
        options: AnalysisOptions or a mapping of overrides
        enrichment_provider: Optional enrichment provider or callable

    Returns:
        Complete analysis report
    """
    return BoardAnalysisService(enrichment_provider=enrichment_provider).analyze(snapshot, options)
