"""CSV provisioning feed.

Reads a header-driven CSV file or stream lazily, one row at a time.
"""

from __future__ import annotations

import csv
from collections.abc import Iterator
from pathlib import Path
from typing import TextIO

from directory.application.column_mapping import ColumnMapping
from directory.ports.exceptions import SourceReadError


class CsvFeed:
    """Iterable of raw rows from a CSV source.

    Each row maps header names to trimmed-on-extraction string values.
    Columns beyond the header are dropped. Problems reading the source
    (missing file, undecodable bytes, malformed CSV, no header row) raise
    SourceReadError from the iteration.
    """

    def __init__(
        self,
        source: str | Path | TextIO,
        encoding: str = "utf-8-sig",
        delimiter: str = ",",
    ):
        """Initialize the feed.

        Args:
            source: File path or an open text stream
            encoding: Encoding used when opening a path
            delimiter: Field delimiter
        """
        self._source = source
        self._encoding = encoding
        self._delimiter = delimiter

    @property
    def location(self) -> str | None:
        """Where the rows come from, for the job record."""
        if isinstance(self._source, (str, Path)):
            return str(self._source)
        return getattr(self._source, "name", None)

    def __iter__(self) -> Iterator[dict[str | None, str | None]]:
        if isinstance(self._source, (str, Path)):
            try:
                stream = open(self._source, encoding=self._encoding, newline="")
            except OSError as e:
                raise SourceReadError(f"Cannot open feed {self._source}: {e}") from e
            with stream:
                yield from self._rows(stream)
        else:
            yield from self._rows(self._source)

    def _rows(self, stream: TextIO) -> Iterator[dict[str | None, str | None]]:
        reader = csv.DictReader(stream, delimiter=self._delimiter)
        try:
            if not reader.fieldnames:
                raise SourceReadError("Feed has no header row")
            for row in reader:
                row.pop(None, None)
                yield row
        except (csv.Error, UnicodeDecodeError, OSError) as e:
            raise SourceReadError(
                f"Cannot read feed at line {reader.line_num}: {e}"
            ) from e

    @staticmethod
    def template(mapping: ColumnMapping | None = None) -> str:
        """Header line of an empty feed for the given mapping."""
        return (mapping or ColumnMapping.DEFAULT).template_header() + "\n"
