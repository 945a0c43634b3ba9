"""GeoJSON artifact activity.

Writes the ``FeatureCollection`` of one conversion to its output path
and reads it back for the HTTP response.

Writes go to a sibling temporary file that is renamed into place, so a
reader never sees a half-written collection at the artifact path.
"""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

from site_geojson.core.exceptions import ArtifactIOError
from site_geojson.models.geojson import FeatureCollection

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger("site_geojson.activities.write_geojson")

_STAGE = "write_geojson"


def write_feature_collection(collection: FeatureCollection, output_path: Path) -> Path:
    """Serialise ``collection`` to ``output_path`` (UTF-8, indented JSON).

    Returns:
        ``output_path``.

    Raises:
        ArtifactIOError: If the artifact cannot be written.
    """
    tmp_path = output_path.with_name(f"{output_path.name}.tmp")
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_text(collection.to_json(), encoding="utf-8")
        os.replace(tmp_path, output_path)
    except OSError as exc:
        if tmp_path.exists():
            tmp_path.unlink()
        msg = f"Cannot write GeoJSON artifact {output_path.name}: {exc}"
        raise ArtifactIOError(msg, stage=_STAGE) from exc

    logger.info(
        "GeoJSON written | path=%s | features=%d",
        output_path,
        len(collection.features),
    )
    return output_path


def read_feature_collection(path: Path) -> FeatureCollection:
    """Load and validate a previously written artifact.

    Raises:
        ArtifactIOError: If the file cannot be read or is not a valid
            FeatureCollection.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"Cannot read GeoJSON artifact {path.name}: {exc}"
        raise ArtifactIOError(msg, stage=_STAGE) from exc

    try:
        return FeatureCollection.model_validate_json(content)
    except PydanticValidationError as exc:
        msg = f"GeoJSON artifact {path.name} is not a valid FeatureCollection"
        raise ArtifactIOError(msg, stage=_STAGE) from exc
