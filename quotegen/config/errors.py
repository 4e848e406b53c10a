"""QuoteGen error handling.

Custom exceptions and error codes for the quote pipeline.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Error code constants."""

    # Request Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_JSON_BODY = "INVALID_JSON_BODY"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"

    # Configuration Errors
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # LLM Errors
    LLM_ERROR = "LLM_ERROR"
    LLM_OVERLOADED = "LLM_OVERLOADED"
    LLM_INVALID_JSON = "LLM_INVALID_JSON"

    # Pipeline Errors
    PIPELINE_FAILED = "PIPELINE_FAILED"


class QuoteGenError(Exception):
    """Base exception for QuoteGen errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize QuoteGenError.

        Args:
            code: Error code from ErrorCode constants
            message: Human-readable error message
            details: Additional error context
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to the API error body.

        Returns:
            Dictionary with error, code, and details.
        """
        return {
            "error": self.message,
            "code": self.code,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"QuoteGenError(code={self.code!r}, message={self.message!r})"


class ValidationError(QuoteGenError):
    """Request validation error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        code: str = ErrorCode.VALIDATION_ERROR,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field


class ConfigurationError(QuoteGenError):
    """Invalid or missing configuration detected at start-up."""

    def __init__(self, problems: list):
        super().__init__(
            code=ErrorCode.CONFIGURATION_ERROR,
            message="Invalid configuration: " + "; ".join(problems),
            details={"problems": list(problems)}
        )
        self.problems = list(problems)


class LLMError(QuoteGenError):
    """Text-generation service error surfaced after retries."""

    def __init__(
        self,
        message: str,
        model: str,
        transient: bool = False,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=ErrorCode.LLM_OVERLOADED if transient else ErrorCode.LLM_ERROR,
            message=message,
            details={**(details or {}), "model": model}
        )
        self.model = model
        self.transient = transient


class PlanParseError(QuoteGenError):
    """The model's reply did not contain a parseable JSON object."""

    def __init__(self, raw_response: str, parse_error: Optional[str] = None):
        super().__init__(
            code=ErrorCode.LLM_INVALID_JSON,
            message="AI did not return a valid JSON object",
            details={
                "parse_error": parse_error,
                "raw_response": (raw_response or "")[:2000]
            }
        )
        self.raw_response = raw_response
