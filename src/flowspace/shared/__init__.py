"""
Shared components for Flowspace.

Contains common models, utilities, and infrastructure used across all services:

- Board graph models and the pydantic base model
- Centralized configuration management
- Shared exception hierarchy
- Logging and metrics
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "BoardGraph", "BoardStats", "Connection", "Element",
    "ElementKind", "Position",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "FlowspaceError", "ConfigurationError", "ValidationError",
    "InvalidSnapshotError", "EnrichmentError", "StorageError",

    # From infrastructure
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
    "timed_operation",
]
