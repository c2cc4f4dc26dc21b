"""Local transaction log.

Every completed upload is recorded as one line of
``~/.markdown-provenance/transactions.jsonl``::

    {"timestamp": "...", "file": "post.md", "txId": "...", "url": "...",
     "cid": "bafkrei...", "size": 1234, "tags": {"Author": "..."}}

The log doubles as the fast, authoritative dedup cache: a record found here
is trusted without asking the network.
"""
from __future__ import annotations

import datetime
import logging
from pathlib import Path

from pydantic import BaseModel, Field

from markdown_provenance.ledger.jsonl import JsonLinesLog

logger = logging.getLogger(__name__)


def _utc_now_iso() -> str:
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


class LedgerRecord(BaseModel):
    """One completed upload.

    Attributes
    ----------
    timestamp:
        ISO-8601 UTC time the record was written.
    file:
        Display name of the uploaded document.
    tx_id:
        Arweave data item id (``txId`` on disk).
    url:
        Explorer URL for the transaction.
    cid:
        Content identifier of the uploaded bytes.
    size:
        Size of the uploaded bytes.
    tags:
        Tags submitted with the item, by name.  Empty for records written
        before tags were logged.
    """

    timestamp: str = Field(default_factory=_utc_now_iso)
    file: str
    tx_id: str = Field(alias="txId", min_length=1)
    url: str
    cid: str = Field(min_length=1)
    size: int = Field(ge=0)
    tags: dict[str, str] = Field(default_factory=dict)

    model_config = {"frozen": True, "populate_by_name": True}


class LocalLedger:
    """Append-only record of prior uploads, queryable by content identifier.

    Parameters
    ----------
    path:
        Location of the ``transactions.jsonl`` file.
    """

    def __init__(self, path: Path) -> None:
        self._log: JsonLinesLog[LedgerRecord] = JsonLinesLog(path, LedgerRecord)

    @property
    def path(self) -> Path:
        return self._log.path

    def append(self, record: LedgerRecord) -> None:
        """Persist *record*; raises LedgerStorageError on I/O failure."""
        self._log.append(record)
        logger.debug("Logged %s (cid=%s) to %s", record.tx_id, record.cid, self.path)

    def find_by_content_id(self, cid: str) -> LedgerRecord | None:
        """Return the most recent record for *cid*, or None.

        A missing log file is treated as an empty history.
        """
        found: LedgerRecord | None = None
        for record in self._log:
            if record.cid == cid:
                found = record
        return found

    def records(self) -> list[LedgerRecord]:
        """Return all well-formed records, oldest first."""
        return self._log.read_all()

    def __len__(self) -> int:
        return sum(1 for _ in self._log)


__all__ = [
    "LedgerRecord",
    "LocalLedger",
]
