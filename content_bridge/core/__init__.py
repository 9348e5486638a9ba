from content_bridge.core.exceptions import (
    AppException,
    MarkdownWriteException,
    MissingRequiredFieldsException,
    OutputPathException,
    SourceAPIConnectionException,
    SourceAPIException,
    SourceAPITimeoutException,
    SourcePathException,
    TransformationException,
    ValidationException,
)
from content_bridge.core.logging import bind_source, get_logger, setup_logging

__all__ = [
    "AppException",
    "MarkdownWriteException",
    "MissingRequiredFieldsException",
    "OutputPathException",
    "SourceAPIConnectionException",
    "SourceAPIException",
    "SourceAPITimeoutException",
    "SourcePathException",
    "TransformationException",
    "ValidationException",
    "bind_source",
    "get_logger",
    "setup_logging",
]
