"""Conversion state machine states and the explicit conversion result.

``ConversionResult`` replaces an "empty result on error" convention: a
conversion either succeeds with an artifact path or fails with a typed
``PipelineError``; callers never have to guess from a missing value.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from site_geojson.core.exceptions import PipelineError


class ConversionState(StrEnum):
    """States of one conversion, in the order they are visited."""

    RECEIVED = "received"
    DECODING = "decoding"
    NORMALIZING = "normalizing"
    TABULATING = "tabulating"
    REPROJECTING = "reprojecting"
    SERIALIZED = "serialized"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether no further transition is possible."""
        return self in (ConversionState.SUCCEEDED, ConversionState.FAILED)


@dataclass(frozen=True, slots=True)
class ConversionResult:
    """Outcome of one conversion request.

    Attributes:
        request_id: Identifier keying every artifact of the request.
        state: Terminal state, ``SUCCEEDED`` or ``FAILED``.
        artifact_path: Serialised FeatureCollection (success only).
        error: Failure reason (failure only).
        feature_count: Number of features written.
        skipped_rows: One-based row numbers omitted under the skip policy.
        states: Every state visited, in order, ending with ``state``.
    """

    request_id: str
    state: ConversionState
    artifact_path: Path | None = None
    error: PipelineError | None = None
    feature_count: int = 0
    skipped_rows: tuple[int, ...] = ()
    states: tuple[ConversionState, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        """Whether the conversion produced a complete artifact."""
        return self.state is ConversionState.SUCCEEDED

    @property
    def failed_in(self) -> ConversionState | None:
        """The state that was active when the conversion failed."""
        if self.ok or len(self.states) < 2:
            return None
        return self.states[-2]

    def to_error_dict(self) -> dict[str, object]:
        """Structured failure payload; empty for successful conversions."""
        if self.error is None:
            return {}
        payload = self.error.to_error_dict()
        payload["correlation_id"] = payload.get("correlation_id") or self.request_id
        return payload
