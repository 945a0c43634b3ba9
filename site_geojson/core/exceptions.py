"""Unified conversion exception taxonomy.

Provides a shared base exception hierarchy for every stage of the
spreadsheet-to-GeoJSON conversion. Every domain exception inherits from
``PipelineError`` and carries structured context fields so that the HTTP
boundary, the orchestrator result, and the logs all describe a failure
the same way.

Taxonomy categories
-------------------
- ``ValidationError``: input/content violations (missing file,
  malformed table, unparsable cell), never retryable.
- ``PermanentError``: unrecoverable failures (I/O, timeout), not retryable.

No conversion is ever retried automatically; ``retryable`` is reported
for diagnostics only.

Every exception exposes ``to_error_dict()`` for a stable structured
error payload suitable for logging and the HTTP error body.
"""

from __future__ import annotations


class PipelineError(Exception):
    """Base exception for all conversion-domain errors.

    Attributes:
        message: Human-readable error description.
        stage: Pipeline stage where the error occurred
            (e.g. ``"normalize_delimiter"``, ``"build_features"``).
        code: Machine-readable error code (e.g. ``"FIELD_UNPARSABLE"``).
        retryable: Whether the operation could succeed if repeated.
        correlation_id: Conversion request identifier.
    """

    #: Default stage for subclasses (override via class attribute or kwarg).
    default_stage: str = ""
    #: Default code for subclasses (override via class attribute or kwarg).
    default_code: str = ""

    def __init__(
        self,
        message: str = "",
        *,
        stage: str = "",
        code: str = "",
        retryable: bool = False,
        correlation_id: str = "",
    ) -> None:
        self.message = message
        self.stage = stage or self.default_stage
        self.code = code or self.default_code
        self.retryable = retryable
        self.correlation_id = correlation_id
        super().__init__(message)

    @property
    def category(self) -> str:
        """Return the error category based on concrete class."""
        if isinstance(self, ValidationError):
            return "validation"
        if isinstance(self, PermanentError):
            return "permanent"
        return "transient" if self.retryable else "permanent"

    def to_error_dict(self) -> dict[str, object]:
        """Return a structured error payload with stable keys."""
        return {
            "category": self.category,
            "code": self.code,
            "stage": self.stage,
            "message": self.message,
            "retryable": self.retryable,
            "correlation_id": self.correlation_id,
        }


# ---------------------------------------------------------------------------
# Category base classes
# ---------------------------------------------------------------------------


class ValidationError(PipelineError):
    """Input or content validation failure. Never retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


class PermanentError(PipelineError):
    """Unrecoverable failure. Not retryable."""

    def __init__(self, message: str = "", **kwargs: object) -> None:
        kwargs.setdefault("retryable", False)
        super().__init__(message, **kwargs)  # type: ignore[arg-type]


# ---------------------------------------------------------------------------
# Conversion error kinds
# ---------------------------------------------------------------------------


class InputMissingError(ValidationError):
    """Raised when no spreadsheet was supplied or it does not exist."""

    default_stage = "received"
    default_code = "INPUT_MISSING"


class ArtifactIOError(PermanentError):
    """Raised when an input, intermediate, or output artifact cannot be read or written."""

    default_code = "IO_FAILED"


class DecodeFailureError(ValidationError):
    """Base for malformed spreadsheet or delimited-text content."""

    default_code = "DECODE_FAILED"


class SpreadsheetDecodeError(DecodeFailureError):
    """Raised when the uploaded workbook cannot be decoded."""

    default_stage = "export_sheet"
    default_code = "SPREADSHEET_DECODE_FAILED"


class TableDecodeError(DecodeFailureError):
    """Raised when the delimited text contains a malformed line."""

    default_stage = "decode_table"
    default_code = "TABLE_DECODE_FAILED"


class FieldError(ValidationError):
    """Base for per-row column errors raised by the feature builder.

    Attributes:
        column: The column that is missing or unparsable.
        row_number: One-based data row number (0 when unknown).
    """

    default_stage = "build_features"

    def __init__(
        self,
        message: str = "",
        *,
        column: str = "",
        row_number: int = 0,
        **kwargs: object,
    ) -> None:
        self.column = column
        self.row_number = row_number
        super().__init__(message, **kwargs)

    def to_error_dict(self) -> dict[str, object]:
        """Return the structured payload extended with column context."""
        payload = super().to_error_dict()
        payload["column"] = self.column
        payload["row_number"] = self.row_number
        return payload


class FieldMissingError(FieldError):
    """Raised when a required column is absent from a row."""

    default_code = "FIELD_MISSING"


class FieldUnparsableError(FieldError):
    """Raised when a numeric column holds a non-numeric or non-finite value."""

    default_code = "FIELD_UNPARSABLE"


class ReprojectionError(ValidationError):
    """Raised when a coordinate cannot be transformed to a finite result."""

    default_stage = "reproject"
    default_code = "REPROJECTION_FAILED"


class ConversionTimeoutError(PermanentError):
    """Raised when a conversion exceeds its time budget."""

    default_code = "CONVERSION_TIMEOUT"
