"""Per-request artifact path generation.

Every file a conversion touches is namespaced by the request id:

    <upload_dir>/<request-id>/<original-filename>
    <work_dir>/<request-id>/<source-stem>.csv
    <output_dir>/<request-id>/<source-stem>.geojson

so concurrent conversions never write to the same path. Filename
components are sanitised to a lowercase slug (``a-z``, ``0-9``, ``-``,
``_``); caller-supplied request ids are sanitised the same way.
"""

from __future__ import annotations

import re
import uuid
from pathlib import Path, PurePath

from site_geojson.core.constants import INTERMEDIATE_SUFFIX, OUTPUT_SUFFIX

# Allow only lowercase alphanumeric, hyphen, and underscore
_SLUG_RE = re.compile(r"[^a-z0-9_-]+")


def sanitise_slug(value: str) -> str:
    """Convert a string to a path-safe slug.

    - Lowercase
    - Spaces and dots become hyphens
    - Strips all characters except ``a-z``, ``0-9``, ``-``, ``_``
    - Collapses consecutive hyphens
    - Falls back to ``"unknown"`` if the result is empty
    """
    slug = value.lower().strip().replace(" ", "-").replace(".", "-")
    slug = _SLUG_RE.sub("", slug)
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug if slug else "unknown"


def new_request_id(request_id: str | None = None) -> str:
    """Return a sanitised ``request_id``, or a fresh uuid4 hex when absent."""
    if request_id:
        return sanitise_slug(request_id)
    return uuid.uuid4().hex


def _stem(source_name: str | PurePath) -> str:
    return sanitise_slug(PurePath(source_name).stem)


def build_upload_path(upload_dir: Path, request_id: str, filename: str) -> Path:
    """Path for an uploaded spreadsheet; the original suffix is kept."""
    suffix = PurePath(filename).suffix.lower()
    if not re.fullmatch(r"\.[a-z0-9]{1,8}", suffix):
        suffix = ""
    return upload_dir / request_id / f"{_stem(filename)}{suffix}"


def build_intermediate_path(work_dir: Path, request_id: str, source_name: str | PurePath) -> Path:
    """Path of the delimited-text artifact for one conversion."""
    return work_dir / request_id / f"{_stem(source_name)}{INTERMEDIATE_SUFFIX}"


def build_output_path(output_dir: Path, request_id: str, source_name: str | PurePath) -> Path:
    """Path of the GeoJSON artifact for one conversion."""
    return output_dir / request_id / f"{_stem(source_name)}{OUTPUT_SUFFIX}"
