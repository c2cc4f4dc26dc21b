"""markdown-provenance: permanent, verifiable provenance records for markdown.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import markdown_provenance
>>> markdown_provenance.__version__
'0.1.0'

Addressing
----------
>>> from markdown_provenance import identify
>>> identify(b"")
'bafkreihdwdcefgh4dqkjv67uzcmw7ojee6xedzdetojuzjevtenxquvyku'

Uploading
---------
>>> from markdown_provenance import Provenance
>>> provenance = Provenance()                     # doctest: +SKIP
>>> provenance.upload_file("post.md")             # doctest: +SKIP

Brain
-----
>>> from markdown_provenance import BrainSync, BrainSyncOutcome, SyncStatus
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ---------------------------------------------------------------------------
# Addressing and tags
# ---------------------------------------------------------------------------
from markdown_provenance.addressing.cid import ContentAddresser, identify
from markdown_provenance.tags import CONTENT_ID_TAG, UploadTag

# ---------------------------------------------------------------------------
# Configuration and errors
# ---------------------------------------------------------------------------
from markdown_provenance.config import ProvenanceConfig
from markdown_provenance.errors import (
    ConfigurationError,
    ConnectivityError,
    ContentNotFoundError,
    InsufficientFundsError,
    LedgerStorageError,
    NameNotRegisteredError,
    PointerPublishError,
    ProvenanceError,
    SigningError,
    SubmissionError,
    UploadRejectedError,
)

# ---------------------------------------------------------------------------
# Ledgers
# ---------------------------------------------------------------------------
from markdown_provenance.ledger.local import LedgerRecord, LocalLedger
from markdown_provenance.ledger.remote import RemoteLedgerQuery, RemoteMatch

# ---------------------------------------------------------------------------
# Signing
# ---------------------------------------------------------------------------
from markdown_provenance.signing.data_item import DataItem
from markdown_provenance.signing.signer import ArweaveSigner
from markdown_provenance.signing.wallet import Wallet

# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------
from markdown_provenance.service import DedupSource, ProvenanceService, UploadResult
from markdown_provenance.pointer.publisher import PointerPublisher, PointerUpdate
from markdown_provenance.brain.sync import BrainSync, BrainSyncOutcome, SyncStatus
from markdown_provenance.convenience import Provenance

__all__ = [
    # Version
    "__version__",
    # Addressing
    "CONTENT_ID_TAG",
    "ContentAddresser",
    "UploadTag",
    "identify",
    # Configuration
    "ProvenanceConfig",
    # Errors
    "ConfigurationError",
    "ConnectivityError",
    "ContentNotFoundError",
    "InsufficientFundsError",
    "LedgerStorageError",
    "NameNotRegisteredError",
    "PointerPublishError",
    "ProvenanceError",
    "SigningError",
    "SubmissionError",
    "UploadRejectedError",
    # Ledgers
    "LedgerRecord",
    "LocalLedger",
    "RemoteLedgerQuery",
    "RemoteMatch",
    # Signing
    "ArweaveSigner",
    "DataItem",
    "Wallet",
    # Orchestration
    "DedupSource",
    "ProvenanceService",
    "UploadResult",
    # Pointer
    "PointerPublisher",
    "PointerUpdate",
    # Brain
    "BrainSync",
    "BrainSyncOutcome",
    "SyncStatus",
    # Convenience
    "Provenance",
]
