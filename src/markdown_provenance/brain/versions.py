"""History of published brain documents (``brain-versions.jsonl``)."""
from __future__ import annotations

import datetime
from pathlib import Path

from pydantic import BaseModel, Field

from markdown_provenance.ledger.jsonl import JsonLinesLog


class BrainVersionEntry(BaseModel):
    """One published brain document."""

    timestamp: str = Field(
        default_factory=lambda: datetime.datetime.now(datetime.timezone.utc).isoformat()
    )
    tx_id: str = Field(alias="txId", min_length=1)
    arweave_url: str = Field(alias="arweaveUrl")
    ipfs_cid: str = Field(alias="ipfsCid")
    size: int = Field(ge=0)
    transaction_count: int = Field(alias="transactionCount", ge=0)

    model_config = {"frozen": True, "populate_by_name": True}


class BrainVersionLog:
    """Append-only log of brain uploads, oldest first."""

    def __init__(self, path: Path) -> None:
        self._log: JsonLinesLog[BrainVersionEntry] = JsonLinesLog(path, BrainVersionEntry)

    def append(self, entry: BrainVersionEntry) -> None:
        self._log.append(entry)

    def entries(self) -> list[BrainVersionEntry]:
        return self._log.read_all()

    def latest(self) -> BrainVersionEntry | None:
        entries = self.entries()
        return entries[-1] if entries else None


__all__ = [
    "BrainVersionEntry",
    "BrainVersionLog",
]
