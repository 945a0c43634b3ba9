"""Tabular decoding activity.

Turns a delimited text stream into a lazy, single-use sequence of
Source Rows (``dict[str, str]`` keyed by the header line). Decoding is
fail-fast: the first malformed line aborts the whole sequence with a
``TableDecodeError``. Re-decoding requires reopening the artifact.

A line is malformed when its quoting is invalid, it carries more or
fewer fields than the header, or its bytes are not valid in the
artifact encoding. Blank lines are skipped.
"""

from __future__ import annotations

import csv
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from site_geojson.core.constants import DEFAULT_TARGET_DELIMITER, DEFAULT_TEXT_ENCODING
from site_geojson.core.exceptions import ArtifactIOError, TableDecodeError

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path
    from typing import TextIO

logger = logging.getLogger("site_geojson.activities.decode_table")

# Key DictReader uses for surplus fields; never a real column name.
_EXTRA_FIELDS_KEY = "\x00extra"


def decode_rows(
    stream: TextIO,
    *,
    delimiter: str = DEFAULT_TARGET_DELIMITER,
) -> Iterator[dict[str, str]]:
    """Yield one Source Row per data line of ``stream``.

    Args:
        stream: Text stream opened with ``newline=""``.
        delimiter: Field separator.

    Yields:
        Mapping of column name to cell text, in header order.

    Raises:
        TableDecodeError: On the first malformed line.
    """
    reader = csv.DictReader(
        stream,
        delimiter=delimiter,
        strict=True,
        restkey=_EXTRA_FIELDS_KEY,
    )
    try:
        header = reader.fieldnames
        if header is None:
            return
        width = len(header)
        for row in reader:
            if _EXTRA_FIELDS_KEY in row:
                extra = len(row[_EXTRA_FIELDS_KEY])  # type: ignore[arg-type]
                msg = (
                    f"Line {reader.line_num} has {width + extra} fields, "
                    f"header has {width}"
                )
                raise TableDecodeError(msg)
            if any(value is None for value in row.values()):
                present = sum(1 for value in row.values() if value is not None)
                msg = f"Line {reader.line_num} has {present} fields, header has {width}"
                raise TableDecodeError(msg)
            yield row
    except csv.Error as exc:
        msg = f"Malformed line {reader.line_num}: {exc}"
        raise TableDecodeError(msg) from exc
    except UnicodeDecodeError as exc:
        msg = f"Undecodable text near line {reader.line_num}: {exc}"
        raise TableDecodeError(msg) from exc


@contextmanager
def open_table(
    path: Path,
    *,
    delimiter: str = DEFAULT_TARGET_DELIMITER,
    encoding: str = DEFAULT_TEXT_ENCODING,
) -> Iterator[Iterator[dict[str, str]]]:
    """Open ``path`` and yield its lazy row iterator.

    The file is closed when the ``with`` block exits, after which the
    iterator must not be consumed further.

    Raises:
        ArtifactIOError: If the file cannot be opened.
    """
    try:
        fh = path.open(encoding=encoding, newline="")
    except OSError as exc:
        msg = f"Cannot open {path.name}: {exc}"
        raise ArtifactIOError(msg, stage="decode_table") from exc

    logger.debug("Table opened | file=%s | delimiter=%r", path.name, delimiter)
    with fh:
        yield decode_rows(fh, delimiter=delimiter)
