"""
Flowspace Insight - semantic graph analysis and validation for collaborative whiteboards.
"""

__version__ = "1.0.0"
__author__ = "Flowspace Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.exceptions import FlowspaceError, ValidationError, InvalidSnapshotError
from .services.board_analysis import BoardAnalysisService, AnalysisOptions, AnalysisReport, analyze_board

__all__ = [
    "get_settings",
    "FlowspaceError",
    "ValidationError",
    "InvalidSnapshotError",
    "BoardAnalysisService",
    "AnalysisOptions",
    "AnalysisReport",
    "analyze_board",
]
