"""
Board Analysis Service for Flowspace.

Turns a raw whiteboard snapshot into structured insight:
- Spatial clusters, keyword topics and hierarchies
- Cycles, dependency chains and duplicate labels
- Structural and terminology diagnostics with ranked patches
- A compiled report with a 0-100 health score
"""

from .service import BoardAnalysisService, analyze_board
from .enrichment import EnrichmentProvider, CallableEnrichmentProvider
from .models import (
    AnalysisOptions, AnalysisReport, Diagnostic, DiagnosticType, EnrichmentResult,
    Patch, Severity, Priority,
)

__all__ = [
    "BoardAnalysisService",
    "analyze_board",
    "EnrichmentProvider",
    "CallableEnrichmentProvider",
    "AnalysisOptions",
    "AnalysisReport",
    "Diagnostic",
    "DiagnosticType",
    "EnrichmentResult",
    "Patch",
    "Severity",
    "Priority",
]
