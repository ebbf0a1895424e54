"""
Common exceptions for Flowspace.
"""


class FlowspaceError(Exception):
    """Base exception for all Flowspace errors."""
    pass


class ConfigurationError(FlowspaceError):
    """Raised when there are configuration issues."""
    pass


class ValidationError(FlowspaceError):
    """Raised when data validation fails."""
    pass


class InvalidSnapshotError(ValidationError):
    """Raised when a board snapshot has the wrong top-level shape."""
    pass


class EnrichmentError(FlowspaceError):
    """Raised when an enrichment provider misbehaves."""
    pass


class StorageError(FlowspaceError):
    """Raised when vector store operations fail."""
    pass
