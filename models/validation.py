"""Validation models and enums for file type checking."""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union


PathValue = Union[str, "os.PathLike[str]"]


class ValidationErrorCode(Enum):
    """Closed set of failure codes reported by the MIME validators."""
    NOT_READABLE = "NotReadable"
    NOT_DETECTED = "NotDetected"
    FALSE_TYPE = "FalseType"


@dataclass
class ValidationTarget:
    """File being validated plus the metadata the uploader declared for it."""
    path: str
    filename: Optional[str] = None
    declared_type: Optional[str] = None
    size: Optional[int] = None
    upload_error: Optional[int] = None

    @property
    def basename(self) -> str:
        """Name used in messages: declared filename first, else the path's basename."""
        return self.filename or os.path.basename(self.path)

    @classmethod
    def from_value(
        cls, value: Union[PathValue, Mapping[str, Any]], file_info: Optional[Mapping[str, Any]] = None
    ) -> "ValidationTarget":
        """
        Build a target from a bare path or an upload record.

        Upload records use the keys ``tmp_name``, ``name``, ``size``, ``type``
        and ``error``. When ``file_info`` is given the path comes from
        ``value`` and the remaining metadata from ``file_info``.

        Args:
            value: File path or upload record
            file_info: Optional upload record for the legacy two-argument call

        Returns:
            ValidationTarget: Normalized target
        """
        if isinstance(value, Mapping):
            info: Mapping[str, Any] = value
            path = value.get("tmp_name") or value.get("path") or ""
        else:
            info = file_info or {}
            path = value

        return cls(
            path=os.fspath(path),
            filename=info.get("name") or None,
            declared_type=info.get("type") or None,
            size=info.get("size"),
            upload_error=info.get("error"),
        )


@dataclass
class ValidationResult:
    """Outcome of a single validation call."""
    is_valid: bool
    filename: str
    mime_type: Optional[str] = None
    error_code: Optional[ValidationErrorCode] = None
    message: Optional[str] = None

    @property
    def messages(self) -> Dict[str, str]:
        """Failure messages keyed by error code value (empty on success)."""
        if self.error_code is None or self.message is None:
            return {}
        return {self.error_code.value: self.message}
