"""
Unit tests for the user-friendly error handler.
"""

from glossa_core.error_handler import (
    create_error_response,
    format_error_for_logging,
    format_user_friendly_error,
    get_error_category,
)
from glossa_core.errors import BridgeError, DictionaryError


def test_format_missing_manifest():
    """Missing manifest is critical and not retryable."""
    error = DictionaryError("Dictionary manifest not found: dictionaries/manifest.yaml")

    result = format_user_friendly_error(error)

    assert "manifest" in result["message"].lower()
    assert "--dictionary" in result["suggestion"]
    assert result["severity"] == "critical"
    assert result["can_retry"] is False
    assert result["technical"] == str(error)


def test_format_bad_source_shape():
    error = DictionaryError("Dictionary source skills.json must be a mapping, got list")

    result = format_user_friendly_error(error)

    assert "wrong shape" in result["message"]


def test_format_timeout_error():
    """Timeouts are warnings worth retrying."""
    error = TimeoutError("Timeout 30000ms exceeded.")

    result = format_user_friendly_error(error)

    assert "too long" in result["message"]
    assert result["severity"] == "warning"
    assert result["can_retry"] is True


def test_format_navigation_error():
    error = RuntimeError("page.goto: net::ERR_NAME_NOT_RESOLVED at https://example.invalid/")

    result = format_user_friendly_error(error)

    assert "could not be loaded" in result["message"]


def test_format_unknown_error():
    """Unknown errors fall back to a generic message."""
    error = RuntimeError("Some random error")

    result = format_user_friendly_error(error)

    assert "unexpected" in result["message"].lower()
    assert "--verbose" in result["suggestion"]
    assert result["severity"] == "error"
    assert result["can_retry"] is True


def test_technical_details_override():
    result = format_user_friendly_error(RuntimeError("x"), technical_details="details")
    assert result["technical"] == "details"


def test_error_categories():
    assert get_error_category(DictionaryError("Dictionary manifest not found: x")) == "dictionary"
    assert get_error_category(TimeoutError("Timeout 5000ms exceeded")) == "network"
    assert get_error_category(BridgeError("Could not install page bridge: Target closed")) == "browser"
    assert get_error_category(PermissionError("Permission denied: out.html")) == "filesystem"
    assert get_error_category(RuntimeError("odd")) == "unknown"


def test_format_for_logging_includes_context():
    text = format_error_for_logging(DictionaryError("Dictionary manifest not found: x"), "check")

    lines = text.splitlines()
    assert lines[0] == "Context: check"
    assert lines[1].startswith("Error: ")
    assert lines[-1] == "Technical: Dictionary manifest not found: x"


def test_create_error_response():
    response = create_error_response(TimeoutError("Timeout 30000ms exceeded."), "run")

    assert response["success"] is False
    assert response["error"]["category"] == "network"
    assert response["error"]["can_retry"] is True
    assert "stacktrace" not in response["error"]


def test_create_error_response_with_stacktrace():
    try:
        raise DictionaryError("Dictionary manifest not found: x")
    except DictionaryError as e:
        response = create_error_response(e, include_stacktrace=True)

    assert "DictionaryError" in response["error"]["stacktrace"]
    assert response["error"]["technical_details"] == "Dictionary manifest not found: x"
