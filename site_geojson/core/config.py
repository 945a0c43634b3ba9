"""Conversion configuration loaded from environment variables.

All configuration values have defaults suitable for local development.
Azure Functions app settings (or ``local.settings.json`` when running
locally) are the source of truth in deployment.

Fail-fast validation:
    ``from_env()`` raises ``ConfigValidationError`` if any value is out
    of its valid range.
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

from site_geojson.core.constants import (
    DEFAULT_SOURCE_DELIMITER,
    DEFAULT_TARGET_DELIMITER,
    DEFAULT_TEXT_ENCODING,
    QUOTE_CHAR,
    UTM33N_PROJ4,
    WGS84_PROJ4,
)
from site_geojson.core.exceptions import PipelineError

DEFAULT_CONVERSION_TIMEOUT_S = 60.0

_BASE_DIR = Path(tempfile.gettempdir()) / "site-geojson"


class RowErrorPolicy(StrEnum):
    """What the feature builder does with a row it cannot convert."""

    ABORT = "abort"
    SKIP = "skip"


class ConfigValidationError(PipelineError):
    """Raised when configuration values are out of valid range.

    Attributes:
        key: The configuration key that failed validation.
        value: The invalid value.
        message: Human-readable description of the valid range.
    """

    default_stage = "config"
    default_code = "CONFIG_VALIDATION_FAILED"

    def __init__(self, key: str, value: object, message: str) -> None:
        self.key = key
        self.value = value
        super().__init__(f"Invalid configuration {key}={value!r}: {message}")


@dataclass(frozen=True, slots=True)
class ConversionConfig:
    """Immutable conversion configuration.

    Loaded once at function startup and passed explicitly to the
    orchestrator; nothing in the pipeline reads the environment itself.

    Attributes:
        work_dir: Root for per-request intermediate text artifacts.
        output_dir: Root for per-request GeoJSON artifacts.
        upload_dir: Root for per-request uploaded spreadsheets.
        source_delimiter: Separator written by the spreadsheet export.
        target_delimiter: Separator read by the tabular decoder.
        text_encoding: Encoding of the intermediate text artifact.
        row_error_policy: ``abort`` (default) or ``skip`` for bad rows.
        conversion_timeout_s: Time budget for one conversion in seconds.
        source_crs: Projected CRS definition of the input coordinates.
        target_crs: Geographic CRS definition of the output coordinates.
    """

    work_dir: Path = field(default_factory=lambda: _BASE_DIR / "work")
    output_dir: Path = field(default_factory=lambda: _BASE_DIR / "output")
    upload_dir: Path = field(default_factory=lambda: _BASE_DIR / "uploads")
    source_delimiter: str = DEFAULT_SOURCE_DELIMITER
    target_delimiter: str = DEFAULT_TARGET_DELIMITER
    text_encoding: str = DEFAULT_TEXT_ENCODING
    row_error_policy: RowErrorPolicy = RowErrorPolicy.ABORT
    conversion_timeout_s: float = DEFAULT_CONVERSION_TIMEOUT_S
    source_crs: str = UTM33N_PROJ4
    target_crs: str = WGS84_PROJ4

    @classmethod
    def from_env(cls) -> ConversionConfig:
        """Load and validate configuration from environment variables.

        Raises:
            ConfigValidationError: If a value is out of range, a delimiter
                is unusable, or the row error policy is unknown.
            ValueError: If ``CONVERSION_TIMEOUT_S`` cannot be parsed.
        """
        policy_raw = os.getenv("ROW_ERROR_POLICY", RowErrorPolicy.ABORT.value).strip().lower()
        try:
            policy = RowErrorPolicy(policy_raw)
        except ValueError as exc:
            raise ConfigValidationError(
                "ROW_ERROR_POLICY", policy_raw, "must be 'abort' or 'skip'"
            ) from exc

        config = cls(
            work_dir=Path(os.getenv("WORK_DIR", str(_BASE_DIR / "work"))),
            output_dir=Path(os.getenv("OUTPUT_DIR", str(_BASE_DIR / "output"))),
            upload_dir=Path(os.getenv("UPLOAD_DIR", str(_BASE_DIR / "uploads"))),
            source_delimiter=os.getenv("SOURCE_DELIMITER", DEFAULT_SOURCE_DELIMITER),
            target_delimiter=os.getenv("TARGET_DELIMITER", DEFAULT_TARGET_DELIMITER),
            text_encoding=os.getenv("TEXT_ENCODING", DEFAULT_TEXT_ENCODING),
            row_error_policy=policy,
            conversion_timeout_s=float(
                os.getenv("CONVERSION_TIMEOUT_S", str(DEFAULT_CONVERSION_TIMEOUT_S))
            ),
            source_crs=os.getenv("SOURCE_CRS", UTM33N_PROJ4),
            target_crs=os.getenv("TARGET_CRS", WGS84_PROJ4),
        )
        _validate(config)
        return config


def _validate(config: ConversionConfig) -> None:
    """Validate configuration ranges.  Raises ``ConfigValidationError``."""
    for key, value in (
        ("SOURCE_DELIMITER", config.source_delimiter),
        ("TARGET_DELIMITER", config.target_delimiter),
    ):
        if len(value) != 1:
            raise ConfigValidationError(key, value, "must be a single character")
        if value in (QUOTE_CHAR, "\r", "\n"):
            raise ConfigValidationError(key, value, "must not be a quote or line break")

    if config.source_delimiter == config.target_delimiter:
        raise ConfigValidationError(
            "TARGET_DELIMITER",
            config.target_delimiter,
            "must differ from SOURCE_DELIMITER",
        )

    if config.conversion_timeout_s <= 0:
        raise ConfigValidationError(
            "CONVERSION_TIMEOUT_S",
            config.conversion_timeout_s,
            "must be > 0 (seconds)",
        )

    if not config.text_encoding:
        raise ConfigValidationError("TEXT_ENCODING", config.text_encoding, "must not be empty")

    if not config.source_crs:
        raise ConfigValidationError("SOURCE_CRS", config.source_crs, "must not be empty")

    if not config.target_crs:
        raise ConfigValidationError("TARGET_CRS", config.target_crs, "must not be empty")
