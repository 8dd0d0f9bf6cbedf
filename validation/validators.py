"""MIME type and image validators for uploaded files."""

import logging
import os
from string import Formatter
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from models.errors import (
    FileNotReadableError,
    FileValidationError,
    InvalidOptionError,
    MimeTypeError,
    MimeTypeNotDetectedError,
)
from models.validation import PathValue, ValidationErrorCode, ValidationResult, ValidationTarget
from validation.sniffer import MimeSniffer

MimeTypeValue = Union[None, str, Sequence[str]]

IMAGE_MIME_TYPES = [
    "application/cdf",
    "application/dicom",
    "application/fractals",
    "application/postscript",
    "application/vnd.hp-hpgl",
    "application/vnd.oasis.opendocument.graphics",
    "application/x-cdf",
    "application/x-cmu-raster",
    "application/x-ima",
    "application/x-inventor",
    "application/x-koan",
    "application/x-portable-anymap",
    "application/x-world-x-3dmf",
    "image/bmp",
    "image/c",
    "image/cgm",
    "image/fif",
    "image/gif",
    "image/jpeg",
    "image/jpm",
    "image/jpx",
    "image/jp2",
    "image/naplps",
    "image/pjpeg",
    "image/png",
    "image/svg",
    "image/svg+xml",
    "image/tiff",
    "image/vnd.adobe.photoshop",
    "image/vnd.djvu",
    "image/vnd.fpx",
    "image/vnd.net-fpx",
    "image/webp",
    "image/x-cmu-raster",
    "image/x-cmx",
    "image/x-coreldraw",
    "image/x-cpi",
    "image/x-emf",
    "image/x-ico",
    "image/x-icon",
    "image/x-jg",
    "image/x-ms-bmp",
    "image/x-niff",
    "image/x-pict",
    "image/x-pcx",
    "image/x-png",
    "image/x-portable-anymap",
    "image/x-portable-bitmap",
    "image/x-portable-greymap",
    "image/x-portable-pixelmap",
    "image/x-quicktime",
    "image/x-rgb",
    "image/x-tiff",
    "image/x-unknown",
    "image/x-windows-bmp",
    "image/x-xpmi",
]

HEADER_CHECK_OPTIONS = ("enable_header_check", "enableHeaderCheck")
MAGIC_FILE_OPTIONS = ("magic_file", "magicFile")
MESSAGE_FIELDS = ("name", "type", "allowed")


def normalize_mime_types(value: MimeTypeValue) -> List[str]:
    """
    Turn a MIME type option into an ordered list of entries.

    Strings are split on commas, every piece is stripped and empty pieces
    are dropped. Duplicates and order are kept.

    Args:
        value: None, a (comma-separated) string, or a sequence of strings

    Returns:
        List[str]: Normalized entries

    Raises:
        InvalidOptionError: If value is not a string or a sequence of strings
    """
    if value is None:
        return []

    if isinstance(value, str):
        items: Sequence[Any] = [value]
    elif isinstance(value, Sequence):
        items = value
    else:
        raise InvalidOptionError(f"Invalid MIME type option of type {type(value).__name__}")

    entries = []
    for item in items:
        if not isinstance(item, str):
            raise InvalidOptionError(f"MIME type entries must be strings, got {type(item).__name__}")
        entries.extend(piece.strip() for piece in item.split(",") if piece.strip())
    return entries


def mime_type_matches(entry: str, mime_type: str) -> bool:
    """
    Check a single allow-list entry against an effective MIME type.

    Comparison ignores case. Full entries (``image/jpeg``) need an exact
    match. Bare entries (``image``, ``jpeg``) match either half of the
    effective type.
    """
    entry = entry.lower()
    mime_type = mime_type.lower()
    if entry == mime_type:
        return True
    if "/" in entry:
        return False

    major, _, subtype = mime_type.partition("/")
    return entry in (major, subtype)


def _effective_mime_type(mime_type: str) -> str:
    """Drop parameters and normalize case: 'Image/JPEG; charset=binary' -> 'image/jpeg'."""
    return mime_type.split(";", 1)[0].strip().lower()


class MimeTypeValidator:
    """Validates a file's MIME type against an allow-list."""

    default_mime_types: List[str] = []

    message_templates = {
        ValidationErrorCode.FALSE_TYPE: "File '{name}' has an incorrect mimetype of '{type}', allowed: '{allowed}'",
        ValidationErrorCode.NOT_DETECTED: "The mimetype of file '{name}' could not be detected",
        ValidationErrorCode.NOT_READABLE: "File '{name}' is not readable or does not exist",
    }

    def __init__(
        self,
        options: Union[MimeTypeValue, Mapping[Any, Any]] = None,
        sniffer: Optional[MimeSniffer] = None,
    ):
        self.mime_types: List[str] = []
        self.header_check = False
        self.magic_file: Optional[str] = None
        self.message_templates = dict(self.message_templates)
        self._sniffer = sniffer
        self._owns_sniffer = sniffer is None
        self._result: Optional[ValidationResult] = None

        if isinstance(options, Mapping):
            mime_types = self._apply_options(options)
        else:
            mime_types = normalize_mime_types(options)

        self.mime_types = mime_types or list(self.default_mime_types)

    def _apply_options(self, options: Mapping[Any, Any]) -> List[str]:
        """
        Apply a configuration mapping and collect its MIME-bearing entries.

        Integer keys and the ``mime_type`` key carry MIME types; the remaining
        recognized keys configure the validator and anything else is ignored.
        """
        mime_types: List[str] = []
        for key in sorted(k for k in options if isinstance(k, int)):
            mime_types.extend(normalize_mime_types(options[key]))

        for key, value in options.items():
            if isinstance(key, int):
                continue
            if key == "mime_type":
                mime_types.extend(normalize_mime_types(value))
            elif key in HEADER_CHECK_OPTIONS:
                self.header_check = bool(value)
            elif key in MAGIC_FILE_OPTIONS:
                self.set_magic_file(value)
            elif key == "messages":
                if not isinstance(value, Mapping):
                    raise InvalidOptionError(f"messages option must be a mapping, got {type(value).__name__}")
                for code, template in value.items():
                    self.set_message(template, code)
            else:
                logging.debug(f"Ignoring unknown validator option: {key}")

        return mime_types

    # --- Allow-list ---

    def get_mime_type(self, as_list: bool = False) -> Union[str, List[str]]:
        """
        Get the configured allow-list.

        Args:
            as_list: Return the entries as a list instead of a comma-joined string

        Returns:
            Union[str, List[str]]: Allow-list in insertion order
        """
        if as_list:
            return list(self.mime_types)
        return ",".join(self.mime_types)

    def set_mime_type(self, value: MimeTypeValue) -> "MimeTypeValidator":
        """Replace the allow-list with the normalized entries of value."""
        self.mime_types = normalize_mime_types(value)
        return self

    def add_mime_type(self, value: MimeTypeValue) -> "MimeTypeValidator":
        """Append the normalized entries of value to the allow-list."""
        self.mime_types.extend(normalize_mime_types(value))
        return self

    # --- Header check ---

    def enable_header_check(self) -> "MimeTypeValidator":
        self.header_check = True
        return self

    def disable_header_check(self) -> "MimeTypeValidator":
        self.header_check = False
        return self

    def get_header_check(self) -> bool:
        return self.header_check

    # --- Detection ---

    def get_magic_file(self) -> Optional[str]:
        return self.magic_file

    def set_magic_file(self, magic_file: Optional[str]) -> "MimeTypeValidator":
        """
        Use a custom libmagic database for header detection.

        Raises:
            InvalidOptionError: If magic_file is not an existing readable file
        """
        if magic_file is not None:
            if not isinstance(magic_file, (str, os.PathLike)):
                raise InvalidOptionError(f"Magic file must be a path, got {type(magic_file).__name__}")
            magic_file = os.fspath(magic_file)
            if not os.path.isfile(magic_file) or not os.access(magic_file, os.R_OK):
                raise InvalidOptionError(f"Magic file '{magic_file}' does not exist or is not readable")

        self.magic_file = magic_file
        if self._owns_sniffer:
            # rebuilt lazily against the new database
            self._sniffer = None
        return self

    def get_sniffer(self) -> Optional[MimeSniffer]:
        """
        Get the MIME sniffer, creating the libmagic detector on first use.

        Returns:
            Optional[MimeSniffer]: The sniffer, or None if libmagic cannot be loaded
        """
        if self._sniffer is None:
            try:
                from validation.detection import MimeTypeDetector
            except ImportError as e:
                logging.warning(f"python-magic not available, header detection disabled: {e}")
                return None

            self._sniffer = MimeTypeDetector(magic_file=self.magic_file)
        return self._sniffer

    # --- Messages ---

    def set_message(self, template: str, code: Union[ValidationErrorCode, str]) -> "MimeTypeValidator":
        """
        Override the message template of one error code.

        Templates may use the ``{name}``, ``{type}`` and ``{allowed}`` fields.

        Raises:
            InvalidOptionError: If code is unknown or the template is not a valid message template
        """
        try:
            error_code = ValidationErrorCode(code)
        except ValueError:
            raise InvalidOptionError(f"Unknown validation error code: {code}") from None

        if not isinstance(template, str):
            raise InvalidOptionError(f"Message template must be a string, got {type(template).__name__}")

        try:
            fields = [parsed[1] for parsed in Formatter().parse(template) if parsed[1] is not None]
        except ValueError as e:
            raise InvalidOptionError(f"Malformed message template {template!r}: {e}") from None

        for field in fields:
            base = field.split(".", 1)[0].split("[", 1)[0]
            if base not in MESSAGE_FIELDS:
                raise InvalidOptionError(
                    f"Unknown field {{{field}}} in message template, use {', '.join(MESSAGE_FIELDS)}"
                )

        try:
            template.format(**{field: "" for field in MESSAGE_FIELDS})
        except (AttributeError, IndexError, KeyError, ValueError) as e:
            raise InvalidOptionError(f"Message template {template!r} cannot be formatted: {e}") from None

        self.message_templates[error_code] = template
        return self

    def get_message_templates(self) -> Dict[ValidationErrorCode, str]:
        return dict(self.message_templates)

    def get_messages(self) -> Dict[str, str]:
        """Failure messages of the last validation, keyed by error code value."""
        if self._result is None:
            return {}
        return self._result.messages

    def get_result(self) -> Optional[ValidationResult]:
        return self._result

    # --- Validation ---

    def is_valid(
        self, value: Union[PathValue, Mapping[str, Any]], file_info: Optional[Mapping[str, Any]] = None
    ) -> bool:
        """
        Check whether a file's MIME type is in the allow-list.

        Args:
            value: File path or upload record (``tmp_name``, ``name``, ``type``, ...)
            file_info: Upload record when value is a bare path

        Returns:
            bool: True if the file is readable and its type is allowed
        """
        return self.validate(value, file_info).is_valid

    def validate(
        self, value: Union[PathValue, Mapping[str, Any]], file_info: Optional[Mapping[str, Any]] = None
    ) -> ValidationResult:
        """
        Validate a file and return the full result.

        Args:
            value: File path or upload record
            file_info: Upload record when value is a bare path

        Returns:
            ValidationResult: Outcome, effective MIME type and failure message
        """
        target = ValidationTarget.from_value(value, file_info)

        try:
            mime_type = self._check(target)
        except FileValidationError as e:
            logging.info(f"File validation failed for {target.basename}: {e}")
            self._result = ValidationResult(
                is_valid=False,
                filename=target.basename,
                mime_type=e.mime_type,
                error_code=e.error_code,
                message=str(e),
            )
        else:
            self._result = ValidationResult(is_valid=True, filename=target.basename, mime_type=mime_type)

        return self._result

    def _check(self, target: ValidationTarget) -> str:
        """Run the readability, detection and allow-list checks, raising on the first failure."""
        path = target.path
        if not path or not os.path.isfile(path) or not os.access(path, os.R_OK):
            raise FileNotReadableError(self._format(ValidationErrorCode.NOT_READABLE, target))

        mime_type = self._detect(target)
        if not any(mime_type_matches(entry, mime_type) for entry in self.mime_types):
            raise MimeTypeError(self._format(ValidationErrorCode.FALSE_TYPE, target, mime_type), mime_type)

        return mime_type

    def _detect(self, target: ValidationTarget) -> str:
        """Establish the effective MIME type of a readable target."""
        mime_type = None
        if not self.header_check:
            mime_type = target.declared_type

        sniffer = None if mime_type else self.get_sniffer()
        if sniffer is not None:
            try:
                mime_type = sniffer.sniff(target.path, target.filename)
            except OSError as e:
                logging.warning(f"Could not read {target.path}: {e}")
                raise FileNotReadableError(self._format(ValidationErrorCode.NOT_READABLE, target)) from e

        if not mime_type:
            raise MimeTypeNotDetectedError(self._format(ValidationErrorCode.NOT_DETECTED, target))

        return _effective_mime_type(mime_type)

    def _format(self, code: ValidationErrorCode, target: ValidationTarget, mime_type: Optional[str] = None) -> str:
        return self.message_templates[code].format(
            name=target.basename,
            type=mime_type or "",
            allowed=self.get_mime_type(),
        )


class IsImageValidator(MimeTypeValidator):
    """Validates that a file is an image, by default against common image MIME types."""

    default_mime_types = IMAGE_MIME_TYPES

    message_templates = {
        ValidationErrorCode.FALSE_TYPE: "File '{name}' is no image, '{type}' detected, allowed: '{allowed}'",
        ValidationErrorCode.NOT_DETECTED: "The mimetype of file '{name}' could not be detected",
        ValidationErrorCode.NOT_READABLE: "File '{name}' is not readable or does not exist",
    }
