"""
Centralized configuration management for Flowspace.

Process-wide analysis defaults are loaded here from environment variables
(prefixed with ``FLOWSPACE_``) or a ``.env`` file. Per-call overrides live in
``AnalysisOptions``.
"""

from functools import lru_cache
from typing import Any, Dict, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from ..exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Centralized settings for Flowspace.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    app_name: str = Field(default="Flowspace Insight", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === Analysis Defaults ===
    strict_mode: bool = Field(default=False, description="Escalate circular-logic severity")
    check_terminology: bool = Field(default=True, description="Run the terminology checker")
    suggest_fixes: bool = Field(default=True, description="Generate remediation patches")
    use_enrichment: bool = Field(default=True, description="Call the enrichment provider when one is configured")

    # === Thresholds ===
    cluster_distance_threshold: float = Field(default=300.0, gt=0, description="Spatial clustering radius")
    overlap_distance_threshold: float = Field(default=50.0, gt=0, description="Overlap detection distance")
    similarity_threshold: float = Field(default=0.80, ge=0.0, le=1.0, description="Fuzzy duplicate threshold")
    max_topics: int = Field(default=20, ge=1, description="Number of topics kept")

    # === Limits ===
    enrichment_timeout_seconds: float = Field(default=10.0, gt=0, description="Enrichment call timeout")
    max_pairwise_elements: int = Field(default=500, ge=2, description="Element-count guard for O(n^2) scans")

    # === Monitoring Settings ===
    enable_metrics: bool = Field(default=True, description="Enable metrics collection")

    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    @property
    def monitoring_config(self) -> Dict[str, Any]:
        """Get monitoring configuration."""
        return {
            'enabled': self.enable_metrics,
            'max_history': 1000,
        }

    @property
    def analysis_defaults(self) -> Dict[str, Any]:
        """Defaults used to seed ``AnalysisOptions``."""
        return {
            'strict_mode': self.strict_mode,
            'check_terminology': self.check_terminology,
            'suggest_fixes': self.suggest_fixes,
            'use_enrichment': self.use_enrichment,
            'cluster_distance_threshold': self.cluster_distance_threshold,
            'overlap_distance_threshold': self.overlap_distance_threshold,
            'similarity_threshold': self.similarity_threshold,
            'max_topics': self.max_topics,
            'enrichment_timeout_seconds': self.enrichment_timeout_seconds,
            'max_pairwise_elements': self.max_pairwise_elements,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    model_config = {
        "env_prefix": "FLOWSPACE_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.

    Raises:
        ConfigurationError: if an environment value is invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid Flowspace configuration: {e}") from e
