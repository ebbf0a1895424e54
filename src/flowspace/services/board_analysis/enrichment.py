"""
Optional enrichment collaborator boundary.

An enrichment provider receives the canonical board graph and the heuristic
report and may return qualitative insights. It is never required: a missing
provider, a ``None`` result, an error, an invalid payload and a timeout all
mean "no enrichment" and the heuristic report stands on its own.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import Any, Callable, Dict, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ...shared import EnrichmentError, get_logger, get_metrics
from ...shared.models.board import BoardGraph
from .models import EnrichmentResult

logger = get_logger(__name__)

EnrichmentPayload = Union[EnrichmentResult, Mapping[str, Any], None]


class EnrichmentProvider(ABC):
    """Abstract interface for enrichment providers."""

    @abstractmethod
    def enrich(self, graph: BoardGraph, heuristic_report: Dict[str, Any]) -> EnrichmentPayload:
        """
        Produce qualitative insights for a board.

        Args:
            graph: Canonical board graph
            heuristic_report: Heuristic report as a camelCase dictionary

        Returns:
            EnrichmentResult, an equivalent mapping, or None
        """
        pass

    @property
    def name(self) -> str:
        return type(self).__name__


class CallableEnrichmentProvider(EnrichmentProvider):
    """Adapts a plain ``(graph, report) -> result`` function."""

    def __init__(self, func: Callable[[BoardGraph, Dict[str, Any]], EnrichmentPayload],
                 name: Optional[str] = None):
        self._func = func
        self._name = name or getattr(func, "__name__", "callable")

    @property
    def name(self) -> str:
        return self._name

    def enrich(self, graph: BoardGraph, heuristic_report: Dict[str, Any]) -> EnrichmentPayload:
        return self._func(graph, heuristic_report)


def run_enrichment(provider: Optional[EnrichmentProvider],
                   graph: BoardGraph,
                   heuristic_report: Dict[str, Any],
                   timeout_seconds: float) -> Optional[EnrichmentResult]:
    """
    Call a provider under a timeout.

    The call runs on a worker thread. On timeout the worker is abandoned and
    its result, if it ever arrives, is discarded.

    Returns:
        Validated EnrichmentResult, or None when enrichment is unavailable
    """
    if provider is None:
        return None

    metrics = get_metrics()
    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="flowspace-enrichment")
    try:
        future = executor.submit(provider.enrich, graph, heuristic_report)
        return _coerce_result(future.result(timeout=timeout_seconds))
    except FutureTimeoutError:
        metrics.counter('enrichment_timeouts_total', tags={'provider': provider.name})
        logger.warning(f"Enrichment provider {provider.name} timed out after {timeout_seconds}s")
        return None
    except EnrichmentError as e:
        metrics.counter('enrichment_failures_total', tags={'provider': provider.name})
        logger.warning(f"Enrichment provider {provider.name} returned an unusable result: {e}")
        return None
    except Exception as e:
        metrics.counter('enrichment_failures_total', tags={'provider': provider.name})
        logger.warning(f"Enrichment provider {provider.name} failed: {e}")
        return None
    finally:
        executor.shutdown(wait=False, cancel_futures=True)


def _coerce_result(raw: EnrichmentPayload) -> Optional[EnrichmentResult]:
    """
    Validate a provider result.

    Raises:
        EnrichmentError: if the result is not a mapping or fails validation
    """
    if raw is None:
        return None
    if isinstance(raw, EnrichmentResult):
        return raw
    if not isinstance(raw, Mapping):
        raise EnrichmentError(f"expected a mapping, got {type(raw).__name__}")
    try:
        return EnrichmentResult.model_validate(dict(raw))
    except PydanticValidationError as e:
        raise EnrichmentError(f"invalid payload: {e}") from e
