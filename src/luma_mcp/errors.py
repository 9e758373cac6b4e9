"""Error taxonomy for the Luma MCP server.

Every failure raised by this package is a ``LumaError`` tagged with one
``ErrorType``. The tool dispatcher is the only place that turns arbitrary
exceptions into ``LumaError``; the server layer turns ``LumaError`` into a
failed tool result carrying the structured error response.
"""

from enum import Enum
from typing import Any

from mcp.types import INTERNAL_ERROR, INVALID_PARAMS, INVALID_REQUEST, METHOD_NOT_FOUND


class ErrorType(Enum):
    """Closed set of error kinds surfaced to MCP clients"""

    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_PARAMS = "INVALID_PARAMS"
    METHOD_NOT_FOUND = "METHOD_NOT_FOUND"
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    TOOL_EXECUTION_FAILED = "TOOL_EXECUTION_FAILED"

    @property
    def code(self) -> int:
        """JSON-RPC error code for this kind"""
        return _ERROR_CODES.get(self, INTERNAL_ERROR)


_ERROR_CODES = {
    ErrorType.INVALID_REQUEST: INVALID_REQUEST,
    ErrorType.INVALID_PARAMS: INVALID_PARAMS,
    ErrorType.METHOD_NOT_FOUND: METHOD_NOT_FOUND,
}

# Human readable meaning of the upstream statuses callers commonly hit
UPSTREAM_STATUS_MESSAGES = {
    401: "Unauthorized: Invalid API key or insufficient permissions",
    404: "Not found: Event or resource does not exist",
    429: "Rate limited: Too many requests. Wait 1 minute before retrying",
}


class LumaError(Exception):
    """Base exception for all Luma MCP server errors"""

    def __init__(self, error_type: ErrorType, message: str, details: dict[str, Any] | None = None):
        self.error_type = error_type
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def status(self) -> int | None:
        """Upstream HTTP status, when this error came from a non-2xx response"""
        return self.details.get("status")

    def to_error_response(self) -> dict[str, Any]:
        """Structured error payload returned with a failed tool result"""
        response = {"error": True, "code": self.error_type.code, "error_type": self.error_type.value, "message": self.message}
        if self.details:
            response["details"] = self.details
        return response


def wrap_tool_error(error: Exception) -> LumaError:
    """Pass typed errors through, wrap anything else once"""
    if isinstance(error, LumaError):
        return error
    return LumaError(ErrorType.TOOL_EXECUTION_FAILED, f"Tool execution failed: {error}", {"error": str(error), "exception": type(error).__name__})


# Specific error helpers
def upstream_error(status: int, body: str) -> LumaError:
    """Create error for a non-2xx response from the Luma API"""
    meaning = UPSTREAM_STATUS_MESSAGES.get(status, f"API error ({status}): {body}")
    return LumaError(ErrorType.UPSTREAM_ERROR, f"Luma API error: {meaning}", {"status": status, "body": body})


def network_error(cause: Exception) -> LumaError:
    """Create error for a transport failure talking to the Luma API"""
    reason = str(cause) or type(cause).__name__
    return LumaError(ErrorType.NETWORK_ERROR, f"Network error: {reason}", {"cause": type(cause).__name__})


def invalid_response_error(reason: str, details: dict[str, Any] | None = None) -> LumaError:
    """Create error for a response that does not match the expected schema"""
    return LumaError(ErrorType.INVALID_RESPONSE, f"Invalid API response: {reason}", details)


def invalid_params_error(message: str, details: dict[str, Any] | None = None) -> LumaError:
    """Create error for bad or missing tool arguments"""
    return LumaError(ErrorType.INVALID_PARAMS, message, details)


def method_not_found_error(tool_name: str) -> LumaError:
    """Create error for an unknown tool name"""
    return LumaError(ErrorType.METHOD_NOT_FOUND, f"Unknown tool: {tool_name}", {"tool": tool_name})


def no_calendars_error() -> LumaError:
    """Create error for an empty credential store"""
    return LumaError(ErrorType.INVALID_REQUEST, "No calendars configured. Use configure_profile(name, api_key) to add one, or set LUMA_API_KEY.", {"suggestion": "configure_profile"})


def unknown_profile_error(name: str, available: list[str]) -> LumaError:
    """Create error for a profile name that is not in the store"""
    return LumaError(ErrorType.INVALID_PARAMS, f"Calendar not found: {name}", {"profile": name, "available_profiles": available, "suggestion": "Use list_profiles() to see configured calendars"})
