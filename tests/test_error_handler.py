from src.error_handler import (
    ConfigurationError,
    ErrorHandler,
    InvalidRequest,
    NoValidPrice,
    NormalizationFailure,
    ResolutionFailure,
)


def test_catalog_errors_map_to_their_status():
    eh = ErrorHandler()
    assert eh.handle_exception(InvalidRequest("SKU or ID parameter is required")) == (
        400,
        {"error": "SKU or ID parameter is required"},
    )
    status, body = eh.handle_exception(ConfigurationError("API key not configured"))
    assert status == 500
    assert body["error"] == "API key not configured"
    assert eh.handle_exception(ResolutionFailure("all failed"))[0] == 502


def test_normalization_failure_keeps_identifier():
    exc = NoValidPrice("No valid price found for SKU-1", identifier="SKU-1")
    assert isinstance(exc, NormalizationFailure)
    status, body = ErrorHandler().handle_exception(exc)
    assert status == 500
    assert "SKU-1" in body["error"]


def test_handle_exception_returns_payload():
    eh = ErrorHandler()
    status, out = eh.handle_exception(Exception("boom"), context={"k": "v"})
    assert status == 500
    assert "internal error" in out["error"].lower()
    assert "boom" in out["detail"]
