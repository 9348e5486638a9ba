"""
Custom exception hierarchy for the content bridge.

All bridge-specific exceptions inherit from AppException, so the HTTP
surface and any host pipeline can handle them uniformly.

Hierarchy:
    AppException
    ├── SourceAPIException              — Remote API errors (non-2xx, bad JSON)
    │   ├── SourceAPITimeoutException   — Request cancelled after its timeout
    │   └── SourceAPIConnectionException
    ├── TransformationException         — Record → document mapping failures
    │   ├── MissingRequiredFieldsException
    │   ├── SourcePathException
    │   ├── OutputPathException
    │   └── MarkdownWriteException      — Markdown file could not be written
    └── ValidationException             — Invalid bridge configuration
"""

from typing import Any


class AppException(Exception):
    """
    Base exception for all bridge errors.

    Attributes:
        message:     Human-readable error description.
        status_code: HTTP status code to return to the client.
        error_code:  Machine-readable error identifier (e.g. "SOURCE_API_TIMEOUT").
        details:     Optional dict with extra context for debugging.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred.",
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the exception into a JSON-friendly dict."""
        payload: dict[str, Any] = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            payload["details"] = self.details
        return payload


# ─── Source API Errors ────────────────────────────────────────────────


class SourceAPIException(AppException):
    """Raised when the remote API returns an error or an unreadable body."""

    def __init__(
        self,
        message: str = "Failed to fetch data from the source API.",
        status_code: int = 502,
        error_code: str = "SOURCE_API_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, error_code, details)


class SourceAPITimeoutException(SourceAPIException):
    """Raised when a page request exceeds its timeout and is cancelled."""

    def __init__(
        self,
        message: str = "Source API request timed out.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=504,
            error_code="SOURCE_API_TIMEOUT",
            details=details,
        )


class SourceAPIConnectionException(SourceAPIException):
    """Raised when unable to establish connection to the source API."""

    def __init__(
        self,
        message: str = "Unable to connect to the source API.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=502,
            error_code="SOURCE_API_CONNECTION_ERROR",
            details=details,
        )


# ─── Transformation Errors ───────────────────────────────────────────


class TransformationException(AppException):
    """Raised when a record cannot be turned into a content document."""

    def __init__(
        self,
        message: str = "Data transformation failed.",
        status_code: int = 422,
        error_code: str = "TRANSFORMATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, error_code, details)


class MissingRequiredFieldsException(TransformationException):
    """Raised when the resolved front matter lacks required keys."""

    def __init__(
        self,
        missing: list[str],
        details: dict[str, Any] | None = None,
    ) -> None:
        self.missing = list(missing)
        super().__init__(
            message=(
                "Missing required frontMatter fields: "
                + ", ".join(self.missing)
            ),
            error_code="MISSING_REQUIRED_FIELDS",
            details={**(details or {}), "missing": self.missing},
        )


class SourcePathException(TransformationException):
    """Raised when the sourcePath mapping is absent or resolves to nothing."""

    def __init__(
        self,
        message: str = "sourcePath mapping returned empty value.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_SOURCE_PATH",
            details=details,
        )


class OutputPathException(TransformationException):
    """Raised when a markdown artifact path is empty or leaves its directory."""

    def __init__(
        self,
        message: str = "Invalid markdown output path.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            error_code="INVALID_OUTPUT_PATH",
            details=details,
        )


class MarkdownWriteException(TransformationException):
    """Raised when a markdown artifact cannot be written to disk."""

    def __init__(
        self,
        message: str = "Failed to write markdown file.",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            status_code=500,
            error_code="MARKDOWN_WRITE_ERROR",
            details=details,
        )


# ─── Validation Errors ───────────────────────────────────────────────


class ValidationException(AppException):
    """Raised when bridge configuration or request data fails validation."""

    def __init__(
        self,
        message: str = "Validation error.",
        status_code: int = 422,
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, status_code, error_code, details)
