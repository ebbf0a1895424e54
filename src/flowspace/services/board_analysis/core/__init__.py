"""
Core analysis components for the board analysis service.
"""

from .extraction import extract_board, stroke_centroid
from .spatial import identify_spatial_clusters, detect_overlaps
from .topics import extract_topics
from .hierarchy import build_hierarchies
from .cycles import detect_cycles
from .duplicates import find_duplicates, edit_distance, similarity
from .dependencies import analyze_dependencies
from .diagnostics import DiagnosticRuleEngine
from .terminology import check_terminology, normalize_term
from .patches import PatchGenerator
from .report import calculate_health_score, compile_report, count_severities

__all__ = [
    "extract_board",
    "stroke_centroid",
    "identify_spatial_clusters",
    "detect_overlaps",
    "extract_topics",
    "build_hierarchies",
    "detect_cycles",
    "find_duplicates",
    "edit_distance",
    "similarity",
    "analyze_dependencies",
    "DiagnosticRuleEngine",
    "check_terminology",
    "normalize_term",
    "PatchGenerator",
    "calculate_health_score",
    "compile_report",
    "count_severities",
]
