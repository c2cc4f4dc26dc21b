"""Ledger sub-package for markdown-provenance.

Provides the two dedup sources of truth: the local append-only
transaction log and the remote Arweave GraphQL index.
"""
from __future__ import annotations

from markdown_provenance.ledger.jsonl import JsonLinesLog
from markdown_provenance.ledger.local import LedgerRecord, LocalLedger
from markdown_provenance.ledger.remote import RemoteLedgerQuery, RemoteMatch

__all__ = [
    "JsonLinesLog",
    "LedgerRecord",
    "LocalLedger",
    "RemoteLedgerQuery",
    "RemoteMatch",
]
