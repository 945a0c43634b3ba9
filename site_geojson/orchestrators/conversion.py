"""Conversion orchestrator for the spreadsheet-to-GeoJSON pipeline.

Drives one conversion request through a strictly sequential state
machine:

    RECEIVED -> DECODING -> NORMALIZING -> TABULATING -> REPROJECTING
             -> SERIALIZED -> SUCCEEDED

Any error moves the conversion straight to FAILED; later stages are
skipped and no artifact path is returned. Each state is entered before
its work runs, so ``ConversionResult.failed_in`` names the stage whose
work failed.

Stage work:
    RECEIVED      check that the spreadsheet exists
    DECODING      first worksheet -> delimited text (source delimiter)
    NORMALIZING   source delimiter -> target delimiter, in place
    TABULATING    open the text artifact as a lazy row sequence
    REPROJECTING  rows -> reprojected SiteFeatures
    SERIALIZED    FeatureCollection -> GeoJSON artifact

Artifacts are keyed by the request id (see
``site_geojson.utils.artifact_paths``); the input spreadsheet and the
intermediate text file are never deleted here, cleanup is the caller's
policy.

Timeout: a monotonic deadline of ``conversion_timeout_s`` is checked on
every transition and before every row. Expiry fails the conversion with
``ConversionTimeoutError``. The bound is cooperative: a stage is never
interrupted, so a slow workbook load runs to completion and the expiry
is reported on the next transition.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from site_geojson.activities.build_features import build_features
from site_geojson.activities.decode_table import open_table
from site_geojson.activities.export_sheet import export_first_sheet
from site_geojson.activities.normalize_delimiter import normalize_delimiter
from site_geojson.activities.reproject import CoordinateReprojector
from site_geojson.activities.write_geojson import write_feature_collection
from site_geojson.core.config import ConversionConfig
from site_geojson.core.exceptions import (
    ConversionTimeoutError,
    InputMissingError,
    PermanentError,
    PipelineError,
)
from site_geojson.models.geojson import FeatureCollection
from site_geojson.models.result import ConversionResult, ConversionState
from site_geojson.utils.artifact_paths import (
    build_intermediate_path,
    build_output_path,
    new_request_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from site_geojson.activities.build_features import FeatureBuildReport

logger = logging.getLogger("site_geojson.orchestrators.conversion")


class _ConversionRun:
    """Mutable bookkeeping for a single run: visited states and deadline."""

    def __init__(self, request_id: str, timeout_s: float, clock: Callable[[], float]) -> None:
        self.request_id = request_id
        self.timeout_s = timeout_s
        self._clock = clock
        self._deadline = clock() + timeout_s
        self.states: list[ConversionState] = []

    @property
    def state(self) -> ConversionState | None:
        return self.states[-1] if self.states else None

    def advance(self, state: ConversionState) -> None:
        """Enter ``state`` after checking the deadline."""
        self.check_deadline()
        self.states.append(state)
        logger.debug("Conversion state | request_id=%s | state=%s", self.request_id, state)

    def check_deadline(self) -> None:
        if self._clock() > self._deadline:
            stage = self.state.value if self.state else ""
            msg = f"Conversion exceeded {self.timeout_s:g}s time budget"
            raise ConversionTimeoutError(msg, stage=stage, correlation_id=self.request_id)


class ConversionOrchestrator:
    """Runs spreadsheet-to-GeoJSON conversions with a fixed configuration.

    Holds no per-request state, so one instance may serve concurrent
    requests.

    Args:
        config: Conversion configuration; defaults to ``ConversionConfig()``.
        clock: Monotonic time source, in seconds.
    """

    def __init__(
        self,
        config: ConversionConfig | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or ConversionConfig()
        self._clock = clock

    def run(
        self,
        spreadsheet_path: Path | str | None,
        *,
        request_id: str | None = None,
    ) -> ConversionResult:
        """Convert one spreadsheet and report the outcome.

        Never raises for pipeline failures; they are returned as a
        ``FAILED`` result carrying the ``PipelineError``.
        """
        run = _ConversionRun(
            new_request_id(request_id),
            self.config.conversion_timeout_s,
            self._clock,
        )
        logger.info(
            "Conversion started | request_id=%s | source=%s",
            run.request_id,
            spreadsheet_path,
        )

        try:
            artifact_path, report = self._execute(run, spreadsheet_path)
        except PipelineError as exc:
            if not exc.correlation_id:
                exc.correlation_id = run.request_id
            return self._fail(run, exc)
        except Exception as exc:
            logger.exception(
                "Unexpected conversion error | request_id=%s | state=%s",
                run.request_id,
                run.state,
            )
            error = PermanentError(
                f"Unexpected error: {exc}",
                stage=run.state.value if run.state else "",
                code="CONVERSION_FAILED",
                correlation_id=run.request_id,
            )
            return self._fail(run, error)

        run.states.append(ConversionState.SUCCEEDED)
        logger.info(
            "Conversion succeeded | request_id=%s | features=%d | skipped=%d | artifact=%s",
            run.request_id,
            len(report.features),
            len(report.skipped_rows),
            artifact_path,
        )
        return ConversionResult(
            request_id=run.request_id,
            state=ConversionState.SUCCEEDED,
            artifact_path=artifact_path,
            feature_count=len(report.features),
            skipped_rows=tuple(report.skipped_rows),
            states=tuple(run.states),
        )

    # -----------------------------------------------------------------------
    # Stages
    # -----------------------------------------------------------------------

    def _execute(
        self, run: _ConversionRun, spreadsheet_path: Path | str | None
    ) -> tuple[Path, FeatureBuildReport]:
        cfg = self.config

        run.advance(ConversionState.RECEIVED)
        source = _check_input(spreadsheet_path)

        run.advance(ConversionState.DECODING)
        intermediate = build_intermediate_path(cfg.work_dir, run.request_id, source.name)
        export_first_sheet(
            source,
            intermediate,
            delimiter=cfg.source_delimiter,
            encoding=cfg.text_encoding,
        )

        run.advance(ConversionState.NORMALIZING)
        normalize_delimiter(
            intermediate,
            cfg.source_delimiter,
            cfg.target_delimiter,
            encoding=cfg.text_encoding,
        )

        run.advance(ConversionState.TABULATING)
        reprojector = CoordinateReprojector(cfg.source_crs, cfg.target_crs)
        with open_table(
            intermediate,
            delimiter=cfg.target_delimiter,
            encoding=cfg.text_encoding,
        ) as rows:
            run.advance(ConversionState.REPROJECTING)
            report = build_features(
                rows,
                reprojector,
                policy=cfg.row_error_policy,
                on_row=lambda _row_number: run.check_deadline(),
            )

        run.advance(ConversionState.SERIALIZED)
        collection = FeatureCollection.from_sites(report.features)
        output = build_output_path(cfg.output_dir, run.request_id, source.name)
        write_feature_collection(collection, output)

        return output, report

    @staticmethod
    def _fail(run: _ConversionRun, error: PipelineError) -> ConversionResult:
        failed_in = run.state
        run.states.append(ConversionState.FAILED)
        logger.error(
            "Conversion failed | request_id=%s | state=%s | code=%s | stage=%s | reason=%s",
            run.request_id,
            failed_in,
            error.code,
            error.stage,
            error.message,
        )
        return ConversionResult(
            request_id=run.request_id,
            state=ConversionState.FAILED,
            error=error,
            states=tuple(run.states),
        )


def _check_input(spreadsheet_path: Path | str | None) -> Path:
    """Resolve the input path.  Raises ``InputMissingError``."""
    if spreadsheet_path is None or str(spreadsheet_path) == "":
        msg = "No spreadsheet supplied"
        raise InputMissingError(msg)
    path = Path(spreadsheet_path)
    if not path.is_file():
        msg = f"Spreadsheet not found: {path.name}"
        raise InputMissingError(msg)
    return path


def convert_spreadsheet(
    spreadsheet_path: Path | str | None,
    *,
    request_id: str | None = None,
    config: ConversionConfig | None = None,
) -> ConversionResult:
    """Convert one spreadsheet with a fresh orchestrator.

    Args:
        spreadsheet_path: Workbook on disk.
        request_id: Identifier for artifact naming; generated if omitted.
        config: Conversion configuration; defaults to ``ConversionConfig()``.

    Returns:
        The ``ConversionResult`` of the run.
    """
    return ConversionOrchestrator(config).run(spreadsheet_path, request_id=request_id)
