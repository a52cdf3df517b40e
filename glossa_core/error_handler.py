"""
User-Friendly Error Handler.

Converts technical errors into helpful messages with actionable suggestions.
"""

import logging
import traceback
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def format_user_friendly_error(
    error: Exception,
    context: str = "general",
    technical_details: Optional[str] = None
) -> Dict:
    """
    Convert technical error to user-friendly message.

    Args:
        error: The exception that occurred
        context: Context where error occurred (e.g., "dictionary", "run")
        technical_details: Additional technical information

    Returns:
        Dictionary with user-friendly error information:
        {
            "message": str,          # User-friendly message
            "suggestion": str,       # Actionable suggestion
            "technical": str,        # Technical details
            "severity": str,         # "critical", "error", "warning"
            "can_retry": bool        # Whether retry might help
        }
    """
    error_str = str(error)

    for pattern, friendly_error in ERROR_MAPPINGS.items():
        if pattern.lower() in error_str.lower():
            result = friendly_error.copy()
            result["technical"] = technical_details or error_str
            logger.debug(f"Mapped error to user-friendly: {result['message']}")
            return result

    return {
        "message": "An unexpected error occurred",
        "suggestion": "Re-run with --verbose and check the log output",
        "technical": technical_details or error_str,
        "severity": "error",
        "can_retry": True
    }


# Error mappings: pattern -> user-friendly info. First match wins.
ERROR_MAPPINGS = {
    # Dictionary errors
    "dictionary manifest not found": {
        "message": "The dictionary manifest does not exist",
        "suggestion": "Pass --dictionary PATH or set GLOSSA_DICTIONARY to a manifest.yaml",
        "severity": "critical",
        "can_retry": False
    },
    "dictionary source not found": {
        "message": "A dictionary file listed in the manifest is missing",
        "suggestion": "Check the paths in the manifest; they are relative to the manifest's folder",
        "severity": "critical",
        "can_retry": False
    },
    "must be a mapping": {
        "message": "A dictionary file has the wrong shape",
        "suggestion": "Dictionary files must hold a flat 'source phrase: translation' mapping",
        "severity": "critical",
        "can_retry": False
    },
    "must be a list of files": {
        "message": "A manifest section has the wrong shape",
        "suggestion": "List exact:, template: and substring: sources as YAML lists of file paths",
        "severity": "critical",
        "can_retry": False
    },
    "non-string entry": {
        "message": "A dictionary file contains a non-text entry",
        "suggestion": "Quote numeric or boolean keys and values so they load as strings",
        "severity": "error",
        "can_retry": False
    },
    "page profile key": {
        "message": "The manifest's profile section is invalid",
        "suggestion": "Only known selector keys may be overridden under profile:",
        "severity": "error",
        "can_retry": False
    },
    "invalid dictionary": {
        "message": "A dictionary file could not be parsed",
        "suggestion": "Validate the JSON/YAML syntax of the file named below",
        "severity": "critical",
        "can_retry": False
    },

    # Browser errors
    "executable doesn't exist": {
        "message": "The Playwright browser is not installed",
        "suggestion": "Run: python -m playwright install chromium",
        "severity": "critical",
        "can_retry": False
    },
    "target closed": {
        "message": "The browser was closed during the operation",
        "suggestion": "Start the command again",
        "severity": "error",
        "can_retry": True
    },
    "has been closed": {
        "message": "The browser was closed during the operation",
        "suggestion": "Start the command again",
        "severity": "error",
        "can_retry": True
    },
    "bridge": {
        "message": "Could not attach to the page",
        "suggestion": "The page may have navigated away while attaching; try again",
        "severity": "error",
        "can_retry": True
    },

    # Network/timeout errors
    "net::err": {
        "message": "The page could not be loaded",
        "suggestion": "Check that the URL is correct and reachable",
        "severity": "error",
        "can_retry": True
    },
    "timeout": {
        "message": "The page took too long to respond",
        "suggestion": "Check your connection or raise GLOSSA_NAVIGATION_TIMEOUT_MS",
        "severity": "warning",
        "can_retry": True
    },

    # Permission errors
    "permission denied": {
        "message": "Permission denied while reading or writing a file",
        "suggestion": "Check file permissions or choose another output path",
        "severity": "error",
        "can_retry": False
    },
}


def get_error_category(error: Exception) -> str:
    """
    Categorize error type.

    Returns:
        Category name: "dictionary", "network", "browser", "filesystem", "unknown"
    """
    error_str = str(error).lower()

    if any(k in error_str for k in ["dictionary", "manifest", "profile key"]):
        return "dictionary"
    elif any(k in error_str for k in ["timeout", "net::err", "connection"]):
        return "network"
    elif any(k in error_str for k in ["browser", "target", "executable", "bridge", "closed"]):
        return "browser"
    elif any(k in error_str for k in ["permission", "no such file", "is a directory"]):
        return "filesystem"
    else:
        return "unknown"


def format_error_for_logging(error: Exception, context: str = "") -> str:
    """
    Format error for CLI output and logs.

    Args:
        error: The exception
        context: Additional context

    Returns:
        Multi-line formatted error string
    """
    friendly = format_user_friendly_error(error, context)

    lines = [
        f"Error: {friendly['message']}",
        f"Suggestion: {friendly['suggestion']}",
        f"Technical: {friendly['technical']}"
    ]

    if context:
        lines.insert(0, f"Context: {context}")

    return "\n".join(lines)


def create_error_response(
    error: Exception,
    context: str = "",
    include_stacktrace: bool = False
) -> Dict:
    """
    Create standardized error response, e.g. for `check --json`.

    Args:
        error: The exception
        context: Where the error occurred
        include_stacktrace: Whether to include full stacktrace

    Returns:
        Standardized error response dictionary
    """
    friendly = format_user_friendly_error(error, context)

    response = {
        "success": False,
        "error": {
            "message": friendly["message"],
            "suggestion": friendly["suggestion"],
            "severity": friendly["severity"],
            "can_retry": friendly["can_retry"],
            "category": get_error_category(error),
        }
    }

    if include_stacktrace:
        response["error"]["stacktrace"] = traceback.format_exc()
        response["error"]["technical_details"] = friendly["technical"]

    return response
