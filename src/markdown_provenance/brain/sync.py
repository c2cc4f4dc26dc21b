"""Brain sync workflow.

Renders the brain document from the local history, uploads it (always as a
new item, since it changes on every run), records the version, and finally
points the ArNS name at it.  The pointer step is best-effort: once the
upload succeeded the brain is permanently on Arweave, so a pointer failure
is returned in the outcome rather than raised.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol

from markdown_provenance.brain.document import read_instructions, render_brain_document
from markdown_provenance.brain.versions import BrainVersionEntry, BrainVersionLog
from markdown_provenance.errors import PointerPublishError
from markdown_provenance.ledger.local import LocalLedger
from markdown_provenance.pointer.publisher import PointerUpdate
from markdown_provenance.service import ProvenanceService, UploadResult
from markdown_provenance.tags import AGENT_BRAIN_TYPE, ARNS_NAME_TAG, UploadTag

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    def publish(self, name: str, target_tx_id: str) -> PointerUpdate: ...


class SyncStatus(str, Enum):
    """Overall state of a brain sync."""

    PRIMARY_SUCCEEDED = "primary_succeeded"
    POINTER_FAILED = "pointer_failed"


@dataclass(frozen=True)
class BrainSyncOutcome:
    """Result of :meth:`BrainSync.sync`.

    Attributes
    ----------
    upload:
        The brain upload.  Always successful when an outcome exists.
    arns_name:
        Name the pointer update targeted.
    transaction_count:
        Number of history entries the brain was built from.
    pointer:
        The pointer update, when it succeeded.
    pointer_error:
        Why the pointer update failed, when it did.
    """

    upload: UploadResult
    arns_name: str
    transaction_count: int
    pointer: PointerUpdate | None = None
    pointer_error: str | None = None

    @property
    def status(self) -> SyncStatus:
        if self.pointer_error is not None:
            return SyncStatus.POINTER_FAILED
        return SyncStatus.PRIMARY_SUCCEEDED


class BrainSync:
    """Publishes the brain document and updates its ArNS pointer.

    Parameters
    ----------
    service:
        Upload service used to submit the rendered document.
    ledger:
        Local history the brain summarises (read only).
    versions:
        Log of previously published brains.
    publisher:
        ArNS pointer publisher.
    arns_name:
        Registered name to update.
    wallet_address:
        Address shown in the Identity section.
    instructions_path:
        Markdown file with agent instructions (optional on disk).
    gateway_url:
        Base URL for transaction links in the document.
    """

    def __init__(
        self,
        service: ProvenanceService,
        ledger: LocalLedger,
        versions: BrainVersionLog,
        publisher: Publisher,
        arns_name: str,
        wallet_address: str,
        instructions_path: Path,
        gateway_url: str = "https://arweave.net",
    ) -> None:
        self._service = service
        self._ledger = ledger
        self._versions = versions
        self._publisher = publisher
        self._arns_name = arns_name
        self._wallet_address = wallet_address
        self._instructions_path = instructions_path
        self._gateway_url = gateway_url

    def render(self) -> tuple[str, int]:
        """Return the brain markdown and the number of transactions it lists."""
        transactions = self._ledger.records()
        document = render_brain_document(
            arns_name=self._arns_name,
            wallet_address=self._wallet_address,
            transactions=transactions,
            brain_versions=self._versions.entries(),
            instructions=read_instructions(self._instructions_path),
            gateway_url=self._gateway_url,
        )
        return document, len(transactions)

    def sync(self) -> BrainSyncOutcome:
        """Upload a fresh brain and point the ArNS name at it.

        Raises
        ------
        SubmissionError
            If the brain upload itself fails.
        LedgerStorageError
            If the version log cannot be written.
        """
        document, transaction_count = self.render()
        content = document.encode("utf-8")
        logger.info(
            "Uploading brain for %s (%d bytes, %d transactions)",
            self._arns_name, len(content), transaction_count,
        )
        upload = self._service.submit_fresh(
            content,
            tags=[UploadTag(ARNS_NAME_TAG, self._arns_name)],
            doc_type=AGENT_BRAIN_TYPE,
        )
        self._versions.append(
            BrainVersionEntry(
                tx_id=upload.transaction_id,
                arweave_url=upload.arweave_url,
                ipfs_cid=upload.ipfs_cid,
                size=upload.file_size,
                transaction_count=transaction_count,
            )
        )

        try:
            pointer = self._publisher.publish(self._arns_name, upload.transaction_id)
        except PointerPublishError as exc:
            logger.warning("ArNS update failed for %s: %s", self._arns_name, exc)
            return BrainSyncOutcome(
                upload=upload,
                arns_name=self._arns_name,
                transaction_count=transaction_count,
                pointer_error=str(exc),
            )

        return BrainSyncOutcome(
            upload=upload,
            arns_name=self._arns_name,
            transaction_count=transaction_count,
            pointer=pointer,
        )


__all__ = [
    "BrainSync",
    "BrainSyncOutcome",
    "Publisher",
    "SyncStatus",
]
