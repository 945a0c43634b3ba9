"""Thin HTTP ingress boundary for the conversion endpoint.

Keeps ``function_app.py`` limited to trigger bindings by handling the
transport concerns here:

- **extract_upload**: pulls the multipart ``file`` field from the request.
- **save_upload**: stores the upload under a per-request directory.
- **handle_convert_request**: runs the conversion and maps the
  ``ConversionResult`` to a status code and JSON body.

Failure bodies carry only ``"Conversion failed."`` plus
the error code and request id; the full reason is logged.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, NamedTuple, Protocol

from site_geojson.activities.write_geojson import read_feature_collection
from site_geojson.core.config import ConversionConfig
from site_geojson.core.exceptions import ArtifactIOError, InputMissingError, PipelineError
from site_geojson.orchestrators.conversion import ConversionOrchestrator
from site_geojson.utils.artifact_paths import build_upload_path, new_request_id

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("site_geojson.core.ingress")

UPLOAD_FIELD = "file"
DEFAULT_UPLOAD_NAME = "upload.xlsx"

MSG_NO_FILE = "No file uploaded."
MSG_CONVERSION_FAILED = "Conversion failed."


class UploadedFile(Protocol):
    """The part of a multipart file (werkzeug ``FileStorage``) we use."""

    filename: str | None

    def read(self) -> bytes: ...


class JsonResponse(NamedTuple):
    """Status code and JSON-serialisable body for the HTTP trigger."""

    status_code: int
    body: dict[str, Any]


def extract_upload(req: Any) -> UploadedFile | None:
    """Return the uploaded ``file`` field of ``req``, or ``None``."""
    files = getattr(req, "files", None)
    if not files:
        return None
    return files.get(UPLOAD_FIELD)


def save_upload(upload: UploadedFile, upload_dir: Path, request_id: str) -> Path:
    """Write ``upload`` to ``<upload_dir>/<request_id>/<filename>``.

    Raises:
        ArtifactIOError: If the upload cannot be stored.
    """
    target = build_upload_path(upload_dir, request_id, upload.filename or DEFAULT_UPLOAD_NAME)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(upload.read())
    except OSError as exc:
        msg = f"Cannot store upload {target.name}: {exc}"
        raise ArtifactIOError(msg, stage="upload", correlation_id=request_id) from exc
    return target


def handle_convert_request(
    req: Any,
    *,
    config: ConversionConfig | None = None,
    orchestrator: ConversionOrchestrator | None = None,
) -> JsonResponse:
    """Convert the spreadsheet uploaded with ``req``.

    Returns:
        200 with the FeatureCollection, 400 when no file was uploaded,
        500 with ``{"error", "code", "request_id"}`` on any other failure.
    """
    config = config or ConversionConfig()
    orchestrator = orchestrator or ConversionOrchestrator(config)
    request_id = new_request_id()

    upload = extract_upload(req)
    if upload is None:
        logger.warning("Convert request without file | request_id=%s", request_id)
        return _error_response(400, MSG_NO_FILE, InputMissingError(MSG_NO_FILE), request_id)

    logger.info(
        "Convert request received | request_id=%s | filename=%s",
        request_id,
        upload.filename,
    )

    try:
        upload_path = save_upload(upload, config.upload_dir, request_id)
    except ArtifactIOError as exc:
        logger.error("Upload storage failed | request_id=%s | reason=%s", request_id, exc.message)
        return _error_response(500, MSG_CONVERSION_FAILED, exc, request_id)

    result = orchestrator.run(upload_path, request_id=request_id)
    if not result.ok or result.artifact_path is None:
        return _error_response(500, MSG_CONVERSION_FAILED, result.error, request_id)

    try:
        collection = read_feature_collection(result.artifact_path)
    except ArtifactIOError as exc:
        logger.error("Artifact read failed | request_id=%s | reason=%s", request_id, exc.message)
        return _error_response(500, MSG_CONVERSION_FAILED, exc, request_id)

    return JsonResponse(200, collection.model_dump(mode="json"))


def _error_response(
    status_code: int,
    message: str,
    error: PipelineError | None,
    request_id: str,
) -> JsonResponse:
    body: dict[str, Any] = {"error": message, "request_id": request_id}
    if error is not None:
        body["code"] = error.code
    return JsonResponse(status_code, body)
