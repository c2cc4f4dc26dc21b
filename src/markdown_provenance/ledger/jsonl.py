"""Append-only JSON-lines storage.

One pydantic model per line.  Writers only ever append; readers skip blank
and malformed lines so a torn final write or a hand-edited line never hides
the rest of the history.

Concurrent appends from separate processes are not coordinated.  The CLI
runs one upload per process, so no file lock is taken.
"""
from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import BaseModel, ValidationError

from markdown_provenance.errors import LedgerStorageError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class JsonLinesLog(Generic[RecordT]):
    """A JSON-lines file of ``RecordT`` entries.

    Parameters
    ----------
    path:
        Location of the ``.jsonl`` file.  The file and its parent
        directories are created on the first append.
    model:
        Pydantic model class each line is validated against.
    """

    def __init__(self, path: Path, model: type[RecordT]) -> None:
        self._path = path
        self._model = model

    @property
    def path(self) -> Path:
        return self._path

    def append(self, record: RecordT) -> None:
        """Durably append *record* as a single line.

        Raises
        ------
        LedgerStorageError
            If the directory or file cannot be created or written.
        """
        line = record.model_dump_json(by_alias=True) + "\n"
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            separator = b"\n" if self._ends_mid_line() else b""
            with self._path.open("ab") as fh:
                fh.write(separator + line.encode("utf-8"))
                fh.flush()
                os.fsync(fh.fileno())
        except OSError as exc:
            raise LedgerStorageError(
                f"Could not append to {self._path}: {exc}"
            ) from exc

    def __iter__(self) -> Iterator[RecordT]:
        """Yield every well-formed record in file order."""
        if not self._path.exists():
            return
        try:
            with self._path.open("r", encoding="utf-8", errors="replace") as fh:
                for line_number, line in enumerate(fh, start=1):
                    text = line.strip()
                    if not text:
                        continue
                    try:
                        yield self._model.model_validate_json(text)
                    except ValidationError:
                        logger.debug("Skipping malformed line %d in %s", line_number, self._path)
        except OSError as exc:
            raise LedgerStorageError(f"Could not read {self._path}: {exc}") from exc

    def read_all(self) -> list[RecordT]:
        return list(self)

    def _ends_mid_line(self) -> bool:
        """Return True when the file's last byte is not a newline."""
        if not self._path.exists() or self._path.stat().st_size == 0:
            return False
        with self._path.open("rb") as fh:
            fh.seek(-1, os.SEEK_END)
            return fh.read(1) != b"\n"


__all__ = ["JsonLinesLog"]
