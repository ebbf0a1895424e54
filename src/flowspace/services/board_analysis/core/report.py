"""
Report compilation.
"""

from typing import Dict, List, Optional, Sequence

from ....shared.models.board import BoardStats
from ..models import (
    AnalysisReport, Cluster, DependencyAnalysis, Diagnostic, DuplicateReport,
    EnrichmentResult, Hierarchy, OverallAssessment, Patch, Severity, Summary, Topic,
)

SEVERITY_WEIGHTS: Dict[str, int] = {
    Severity.CRITICAL.value: 20,
    Severity.HIGH.value: 10,
    Severity.MEDIUM.value: 5,
    Severity.LOW.value: 2,
}

PRIORITY_FIX_LIMIT = 5


def count_severities(diagnostics: Sequence[Diagnostic]) -> Dict[str, int]:
    counts = {severity.value: 0 for severity in Severity}
    for diagnostic in diagnostics:
        counts[diagnostic.severity] = counts.get(diagnostic.severity, 0) + 1
    return counts


def calculate_health_score(severity_counts: Dict[str, int]) -> int:
    """``100 - 20*critical - 10*high - 5*medium - 2*low``, clamped to [0, 100]."""
    penalty = sum(
        weight * severity_counts.get(severity, 0)
        for severity, weight in SEVERITY_WEIGHTS.items()
    )
    return max(0, min(100, 100 - penalty))


def group_diagnostics(diagnostics: Sequence[Diagnostic]) -> Dict[str, List[Diagnostic]]:
    groups: Dict[str, List[Diagnostic]] = {}
    for diagnostic in diagnostics:
        groups.setdefault(diagnostic.type, []).append(diagnostic)
    return groups


def compile_report(*,
                   diagnostics: Sequence[Diagnostic] = (),
                   terminology_issues: Sequence[Diagnostic] = (),
                   patches: Sequence[Patch] = (),
                   topics: Sequence[Topic] = (),
                   clusters: Sequence[Cluster] = (),
                   hierarchies: Sequence[Hierarchy] = (),
                   dependencies: Optional[DependencyAnalysis] = None,
                   duplicates: Optional[DuplicateReport] = None,
                   stats: Optional[BoardStats] = None,
                   enrichment: Optional[EnrichmentResult] = None) -> AnalysisReport:
    """
    Merge every sub-analysis into one report.

    Terminology issues are counted alongside structural diagnostics. When
    enrichment supplied an overall assessment it is used as is; otherwise a
    heuristic assessment is built from the health score and the top patch
    reasonings. Never fails: empty inputs give a well-formed report with zero
    issues and a score of 100.

    Returns:
        AnalysisReport
    """
    all_diagnostics = list(diagnostics) + list(terminology_issues)
    counts = count_severities(all_diagnostics)
    health_score = calculate_health_score(counts)

    summary = Summary(
        total_issues=len(all_diagnostics),
        critical_issues=counts[Severity.CRITICAL.value],
        high_severity=counts[Severity.HIGH.value],
        medium_severity=counts[Severity.MEDIUM.value],
        low_severity=counts[Severity.LOW.value],
        patches_available=len(patches),
        auto_applicable_patches=sum(1 for p in patches if p.auto_applicable),
        health_score=health_score,
    )

    if enrichment is not None and enrichment.overall_assessment is not None:
        assessment = enrichment.overall_assessment
    else:
        assessment = OverallAssessment(
            score=health_score,
            priority_fixes=[p.reasoning for p in list(patches)[:PRIORITY_FIX_LIMIT]],
        )

    return AnalysisReport(
        analysis_type="enriched" if enrichment is not None else "heuristic",
        topics=list(topics),
        clusters=list(clusters),
        hierarchies=list(hierarchies),
        dependencies=dependencies or DependencyAnalysis(),
        diagnostics=all_diagnostics,
        diagnostic_groups=group_diagnostics(all_diagnostics),
        terminology_issues=list(terminology_issues),
        duplicates=duplicates or DuplicateReport(),
        recommended_patches=list(patches),
        stats=stats or BoardStats(),
        summary=summary,
        overall_assessment=assessment,
        insights=enrichment,
    )
