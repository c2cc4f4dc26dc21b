"""Brain sub-package for markdown-provenance.

Builds and publishes the self-describing index ("brain") document and keeps
its version history.
"""
from __future__ import annotations

from markdown_provenance.brain.document import (
    MAX_TRANSACTIONS_IN_BRAIN,
    read_instructions,
    render_brain_document,
)
from markdown_provenance.brain.sync import BrainSync, BrainSyncOutcome, SyncStatus
from markdown_provenance.brain.versions import BrainVersionEntry, BrainVersionLog

__all__ = [
    "MAX_TRANSACTIONS_IN_BRAIN",
    "BrainSync",
    "BrainSyncOutcome",
    "BrainVersionEntry",
    "BrainVersionLog",
    "SyncStatus",
    "read_instructions",
    "render_brain_document",
]
