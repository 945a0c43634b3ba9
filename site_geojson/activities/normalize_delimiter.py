"""Delimiter normalization activity.

Rewrites the field separator of a delimited text file in place, e.g.
``;`` (spreadsheet export convention) to ``,`` (what the tabular decoder
reads).

The rewrite is quote-aware: the file is parsed with the ``csv`` module
using the source delimiter, so separators inside quoted fields are never
touched, and every field is written back quoted whenever it contains the
source or target delimiter, a quote, or a line break. Content with no
unquoted source delimiter is left byte-for-byte unchanged, which makes
the operation idempotent.

A failed write is not rolled back.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import TYPE_CHECKING

from site_geojson.core.constants import (
    DEFAULT_SOURCE_DELIMITER,
    DEFAULT_TARGET_DELIMITER,
    DEFAULT_TEXT_ENCODING,
    QUOTE_CHAR,
)
from site_geojson.core.exceptions import ArtifactIOError, TableDecodeError

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger("site_geojson.activities.normalize_delimiter")

_STAGE = "normalize_delimiter"


def normalize_delimiter(
    path: Path,
    source: str = DEFAULT_SOURCE_DELIMITER,
    target: str = DEFAULT_TARGET_DELIMITER,
    *,
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> bool:
    """Replace the field separator of ``path`` from ``source`` to ``target``.

    Args:
        path: Delimited text file, rewritten in place.
        source: Current field separator.
        target: Desired field separator.
        encoding: Text encoding of the file.

    Returns:
        ``True`` if the file was rewritten, ``False`` if it already used
        ``target`` (no unquoted ``source`` present).

    Raises:
        ArtifactIOError: If the file cannot be read or written back.
        TableDecodeError: If the file is not valid text in ``encoding``
            or has malformed quoting.
    """
    try:
        content = path.read_text(encoding=encoding)
    except UnicodeDecodeError as exc:
        msg = f"{path.name} is not valid {encoding} text: {exc}"
        raise TableDecodeError(msg, stage=_STAGE) from exc
    except OSError as exc:
        msg = f"Cannot read {path.name}: {exc}"
        raise ArtifactIOError(msg, stage=_STAGE) from exc

    normalized = normalize_text(content, source, target)
    if normalized == content:
        logger.debug("Delimiter already normalized | file=%s", path.name)
        return False

    try:
        with path.open("w", encoding=encoding, newline="") as fh:
            fh.write(normalized)
    except OSError as exc:
        msg = f"Cannot write {path.name}: {exc}"
        raise ArtifactIOError(msg, stage=_STAGE) from exc

    logger.info(
        "Delimiter normalized | file=%s | %r -> %r",
        path.name,
        source,
        target,
    )
    return True


def normalize_text(content: str, source: str, target: str) -> str:
    """Return ``content`` with its field separator changed to ``target``.

    Raises:
        TableDecodeError: If the quoting in ``content`` is malformed.
    """
    if source == target or not has_unquoted(content, source, target):
        return content

    reader = csv.reader(io.StringIO(content, newline=""), delimiter=source, strict=True)
    out = io.StringIO()
    try:
        for row in reader:
            out.write(target.join(_quote_field(value, source, target) for value in row))
            out.write("\n")
    except csv.Error as exc:
        msg = f"Malformed quoting at line {reader.line_num}: {exc}"
        raise TableDecodeError(msg, stage=_STAGE) from exc
    return out.getvalue()


def has_unquoted(content: str, char: str, *separators: str) -> bool:
    """Whether ``char`` occurs in ``content`` outside a quoted field.

    A quote opens a quoted field only at the start of a field: the start
    of a line, or right after ``char`` or one of ``separators``. A quote
    anywhere else is a literal character, as ``csv.reader`` reads it.
    Inside a quoted field a doubled quote is an escaped quote.
    """
    field_start = True
    quoted = False
    i = 0
    while i < len(content):
        ch = content[i]
        if quoted:
            if ch == QUOTE_CHAR:
                if content[i + 1 : i + 2] == QUOTE_CHAR:
                    i += 1
                else:
                    quoted = False
        elif ch == char:
            return True
        elif ch == QUOTE_CHAR and field_start:
            quoted = True
        field_start = not quoted and (ch in separators or ch in "\r\n")
        i += 1
    return False


def _quote_field(value: str, *specials: str) -> str:
    if _needs_quoting(value, specials):
        escaped = value.replace(QUOTE_CHAR, QUOTE_CHAR * 2)
        return f"{QUOTE_CHAR}{escaped}{QUOTE_CHAR}"
    return value


def _needs_quoting(value: str, specials: Iterable[str]) -> bool:
    if QUOTE_CHAR in value or "\n" in value or "\r" in value:
        return True
    return any(special in value for special in specials)
