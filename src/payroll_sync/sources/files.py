"""
File-backed row source.

Reads one file per entity kind from a data directory. CSV files are read
with csv.DictReader (every value is a string, empty cells are ""); JSON
files must hold a top-level array. The whole file is parsed into memory
before any row is handed on.

File IO is blocking, so it runs in the default thread pool executor to keep
the event loop free.
"""
import asyncio
import csv
import json
import logging
from pathlib import Path
from typing import Dict, List, Union

from payroll_sync.errors import SourceFormatError, SourceNotFoundError
from payroll_sync.models.sync import EntityKind
from payroll_sync.sources.base import RawRow

logger = logging.getLogger(__name__)


class FileRowSource:
    """Row source over `<data_dir>/<file name for kind>`."""

    def __init__(self, data_dir: Union[str, Path], file_names: Dict[EntityKind, str]):
        """
        Args:
            data_dir: Directory holding the source files.
            file_names: File name (relative to data_dir) for each entity kind.
                The suffix picks the parser: ".json" or anything else as CSV.
        """
        self.data_dir = Path(data_dir)
        self.file_names = dict(file_names)

    def path_for(self, kind: EntityKind) -> Path:
        return self.data_dir / self.file_names[kind]

    async def fetch_rows(self, kind: EntityKind) -> List[RawRow]:
        """
        Read every row of the file configured for `kind`.

        Raises:
            SourceNotFoundError: if the file does not exist.
            SourceFormatError: if the file cannot be decoded into rows.
        """
        path = self.path_for(kind)
        loop = asyncio.get_event_loop()
        rows = await loop.run_in_executor(None, lambda: read_rows(path))
        logger.info("Read %d %s rows from %s", len(rows), kind.value, path)
        return rows


def read_rows(path: Path) -> List[RawRow]:
    """Parse a CSV or JSON file into a list of raw rows (blocking)."""
    if not path.is_file():
        raise SourceNotFoundError(f"File not found: {path.resolve()}")

    try:
        if path.suffix.lower() == ".json":
            return _read_json(path)
        return _read_csv(path)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise SourceFormatError(f"Could not read {path}: {exc}") from exc


def _read_csv(path: Path) -> List[RawRow]:
    # utf-8-sig strips a leading BOM written by spreadsheet exports
    with path.open("r", encoding="utf-8-sig", newline="") as f:
        # Cells beyond the header land under the None key; drop them
        return [
            {k: v for k, v in row.items() if k is not None}
            for row in csv.DictReader(f)
        ]


def _read_json(path: Path) -> List[RawRow]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8-sig"))
    except json.JSONDecodeError as exc:
        raise SourceFormatError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(payload, list):
        raise SourceFormatError(
            f"Expected a JSON array of rows in {path}, got {type(payload).__name__}"
        )
    return payload
