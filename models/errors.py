"""Error models and exception hierarchy for file type validation."""

from typing import Optional

from models.validation import ValidationErrorCode


# --- File Validation Exception Hierarchy ---

class FileValidationError(Exception):
    """Base exception for file validation errors."""

    error_code: Optional[ValidationErrorCode] = None

    def __init__(self, message: str, mime_type: Optional[str] = None):
        super().__init__(message)
        self.mime_type = mime_type


class FileNotReadableError(FileValidationError):
    """File does not exist or cannot be read."""
    error_code = ValidationErrorCode.NOT_READABLE


class MimeTypeNotDetectedError(FileValidationError):
    """No MIME type could be established for the file."""
    error_code = ValidationErrorCode.NOT_DETECTED


class MimeTypeError(FileValidationError):
    """File MIME type not allowed."""
    error_code = ValidationErrorCode.FALSE_TYPE


class InvalidOptionError(ValueError):
    """Validator configuration value has an unsupported shape."""
    pass
