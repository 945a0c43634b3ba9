"""Azure Functions entry point: site directory spreadsheet to GeoJSON.

This module registers the HTTP trigger using the Python v2 programming
model.

All business logic lives in the site_geojson package. This file is purely
the wiring layer between the Azure Functions HTTP binding and
application code.
"""

from __future__ import annotations

import json
import logging

import azure.functions as func

from site_geojson.core.config import ConversionConfig
from site_geojson.core.ingress import handle_convert_request
from site_geojson.orchestrators.conversion import ConversionOrchestrator

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)

logger = logging.getLogger("site_geojson.function_app")

# Fail fast on bad app settings: an invalid value stops the host at load time.
CONFIG = ConversionConfig.from_env()
ORCHESTRATOR = ConversionOrchestrator(CONFIG)


# ---------------------------------------------------------------------------
# HTTP: Convert uploaded spreadsheet
# ---------------------------------------------------------------------------


@app.function_name("convert_spreadsheet")
@app.route(route="convert", methods=["POST"])
def convert_spreadsheet(req: func.HttpRequest) -> func.HttpResponse:
    """Convert an uploaded ``.xlsx`` site directory to a GeoJSON FeatureCollection.

    Expects a ``multipart/form-data`` body with the workbook in the
    ``file`` field. Responds with the FeatureCollection on success, or a
    ``{"error": ...}`` object with status 400 (no file) or 500 (any
    conversion failure).
    """
    response = handle_convert_request(req, config=CONFIG, orchestrator=ORCHESTRATOR)

    logger.info(
        "Convert request completed | status=%d | request_id=%s",
        response.status_code,
        response.body.get("request_id", ""),
    )

    return func.HttpResponse(
        json.dumps(response.body, ensure_ascii=False),
        status_code=response.status_code,
        mimetype="application/json",
        charset="utf-8",
    )
