"""CSV exporter for logbook tables."""

from __future__ import annotations

import csv
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union

from utils.db import RecordStore, SqlValue

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = "%Y-%m-%d_%H-%M-%S"


def export_file_name(table: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime(TIMESTAMP_FORMAT)
    return f"{table}_Export_{stamp}.csv"


def _quote(text: str) -> str:
    return '"' + text.replace('"', '""') + '"'


def _field(value: SqlValue) -> str:
    # NULL is an empty unquoted field so it stays distinct from an empty string
    if value is None:
        return ""
    if isinstance(value, bytes):
        return _quote(value.hex())
    if isinstance(value, str):
        return _quote(value)
    return str(value)


def export_table(
    store: RecordStore,
    table: str,
    directory: Union[str, Path],
    *,
    now: Optional[datetime] = None,
) -> Optional[Path]:
    """Write ``table`` to ``<directory>/<table>_Export_<timestamp>.csv``.

    The primary-key column is left out of the header and every row.  Text
    cells are quoted with embedded quotes doubled; numbers are written bare
    and NULL leaves the field empty.  Returns the file path, or ``None``
    when the export failed.
    """

    dump = store.dump_table(table)
    if dump is None:
        logger.error("Export of %s aborted: table could not be read", table)
        return None

    keep: List[int] = [i for i, name in enumerate(dump.columns) if name != dump.primary_key]
    path = Path(directory) / export_file_name(table, now)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as fh:
            header = csv.writer(fh, lineterminator="\n")
            header.writerow([dump.columns[i] for i in keep])
            for row in dump.rows:
                fh.write(",".join(_field(row[i]) for i in keep) + "\n")
    except OSError:
        logger.exception("File IO error while exporting %s to %s", table, path)
        return None

    logger.info("Exported %d row(s) of %s to %s", len(dump.rows), table, path)
    return path


__all__ = ["export_table", "export_file_name"]
