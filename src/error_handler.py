"""Error types and HTTP mapping for the catalog gateway."""
from typing import Any, Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    status_code = 500

    def __init__(self, message: str, *, identifier: Optional[str] = None) -> None:
        super().__init__(message)
        self.identifier = identifier


class InvalidRequest(CatalogError):
    """Caller error: missing identifier, unsupported method."""

    status_code = 400


class ConfigurationError(CatalogError):
    """Deployment misconfiguration, e.g. no upstream API key."""


class UpstreamCandidateFailure(CatalogError):
    """A single endpoint candidate failed. Never surfaced to the caller."""

    status_code = 502

    def __init__(self, message: str, *, endpoint: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status = status


class ResolutionFailure(CatalogError):
    """Every endpoint candidate was exhausted."""

    status_code = 502


class NormalizationFailure(CatalogError):
    pass


class NoValidPrice(NormalizationFailure):
    pass


class NoValidSizes(NormalizationFailure):
    pass


class ErrorHandler:
    def handle_exception(self, exc: Exception, context: Dict[str, Any] = None) -> Tuple[int, Dict[str, Any]]:
        if isinstance(exc, CatalogError):
            logger.warning("%s (status=%s, context=%s)", exc, exc.status_code, context or {})
            return exc.status_code, {"error": str(exc)}

        logger.error("Unhandled exception in catalog gateway: %s", exc, exc_info=True)
        return 500, {
            "error": "An internal error occurred while fetching product data. Please try again later.",
            "detail": str(exc),
        }
