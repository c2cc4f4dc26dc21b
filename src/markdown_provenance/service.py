"""Upload orchestration with two-level deduplication.

:class:`ProvenanceService` is the single entry point for putting a document
on Arweave.  For every call it:

1. computes the content identifier,
2. checks the local transaction log (no network),
3. checks the Arweave GraphQL index (best-effort),
4. otherwise signs and submits the content with the full tag set, and
5. appends a :class:`~markdown_provenance.ledger.local.LedgerRecord`
   only after the submission succeeded.

The same bytes are therefore submitted at most once as long as either
lookup can see the earlier upload.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from markdown_provenance.addressing.cid import ContentAddresser
from markdown_provenance.ledger.local import LedgerRecord, LocalLedger
from markdown_provenance.ledger.remote import RemoteMatch
from markdown_provenance.tags import (
    ATTESTATION_TYPE,
    AUTHOR_TAG,
    UploadTag,
    application_tags,
    merge_tags,
)

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://arweave.net"
DEFAULT_VIEWBLOCK_URL = "https://viewblock.io/arweave/tx"


# ---------------------------------------------------------------------------
# Collaborator interfaces
# ---------------------------------------------------------------------------


class RemoteLookup(Protocol):
    def find_by_content_id(self, cid: str) -> RemoteMatch | None: ...


class Submitter(Protocol):
    def submit(self, content: bytes, tags: Sequence[UploadTag]) -> str: ...


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


class DedupSource(str, Enum):
    """Where an existing upload was found."""

    LOCAL = "local"
    REMOTE = "arweave"


@dataclass(frozen=True)
class UploadResult:
    """Outcome of one :meth:`ProvenanceService.upload` call.

    Attributes
    ----------
    transaction_id:
        Arweave data item id, new or previously existing.
    viewblock_url:
        Explorer link for the transaction.
    arweave_url:
        Direct gateway link to the content.
    ipfs_cid:
        Content identifier of the uploaded bytes.
    file_size:
        Size of the content in bytes.
    already_exists:
        False only when this call submitted the content.
    source:
        Which lookup resolved an existing upload; None for new uploads.
    """

    transaction_id: str
    viewblock_url: str
    arweave_url: str
    ipfs_cid: str
    file_size: int
    already_exists: bool
    source: DedupSource | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "transactionId": self.transaction_id,
            "viewblockUrl": self.viewblock_url,
            "arweaveUrl": self.arweave_url,
            "ipfsCid": self.ipfs_cid,
            "fileSize": self.file_size,
            "alreadyExists": self.already_exists,
            "source": self.source.value if self.source is not None else None,
        }


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ProvenanceService:
    """Deduplicating, recording uploader.

    Parameters
    ----------
    local_ledger:
        The local transaction log.  This service is its only writer.
    remote:
        Remote index lookup (normally a ``RemoteLedgerQuery``).
    submitter:
        Signs and submits content (normally an ``ArweaveSigner``).
    addresser:
        Content identifier function.
    app_version:
        Value of the ``App-Version`` tag.
    cache_remote_hits:
        Append a local record when an upload is found only remotely, so the
        next lookup for the same content needs no network round-trip.
    gateway_url:
        Base URL for direct content links.
    viewblock_url:
        Base URL for explorer links.
    """

    def __init__(
        self,
        local_ledger: LocalLedger,
        remote: RemoteLookup,
        submitter: Submitter,
        addresser: ContentAddresser | None = None,
        app_version: str = "0.1.0",
        cache_remote_hits: bool = True,
        gateway_url: str = DEFAULT_GATEWAY_URL,
        viewblock_url: str = DEFAULT_VIEWBLOCK_URL,
    ) -> None:
        self._local = local_ledger
        self._remote = remote
        self._submitter = submitter
        self._addresser = addresser or ContentAddresser()
        self._app_version = app_version
        self._cache_remote_hits = cache_remote_hits
        self._gateway_url = gateway_url.rstrip("/")
        self._viewblock_url = viewblock_url.rstrip("/")

    def upload(
        self,
        content: bytes,
        display_name: str,
        author: str | None = None,
        extra_tags: Iterable[UploadTag] = (),
        *,
        skip_dedup: bool = False,
    ) -> UploadResult:
        """Upload *content* unless it is already on Arweave.

        Parameters
        ----------
        content:
            Exact bytes to store.
        display_name:
            Name recorded in the local log (usually the file name).
        author:
            Optional ``Author`` tag value.
        extra_tags:
            Additional tags.  A caller-supplied ``IPFS-CID`` tag is replaced
            by the computed identifier.
        skip_dedup:
            Submit without consulting either lookup.

        Returns
        -------
        UploadResult
            ``already_exists`` tells whether a submission took place.

        Raises
        ------
        SubmissionError
            If the signed upload fails.  Nothing is logged in that case.
        LedgerStorageError
            If the upload succeeded but the local record could not be written.
        """
        cid = self._addresser.identify(content)
        size = len(content)
        logger.debug("Content identifier for %s: %s (%d bytes)", display_name, cid, size)

        if not skip_dedup:
            existing = self._find_existing(cid, size, display_name)
            if existing is not None:
                return existing

        tags = list(extra_tags)
        if author:
            tags.insert(0, UploadTag(AUTHOR_TAG, author))
        result, submitted_tags = self._submit(content, cid, tags)
        self._local.append(
            LedgerRecord(
                file=display_name,
                tx_id=result.transaction_id,
                url=result.viewblock_url,
                cid=cid,
                size=size,
                tags={tag.name: tag.value for tag in submitted_tags},
            )
        )
        logger.info("Uploaded %s as %s", display_name, result.transaction_id)
        return result

    def submit_fresh(
        self,
        content: bytes,
        tags: Iterable[UploadTag],
        doc_type: str | None = None,
    ) -> UploadResult:
        """Submit *content* without dedup and without a local record.

        Used for documents that change on every run (the brain index), which
        keep their own history.
        """
        cid = self._addresser.identify(content)
        result, _ = self._submit(content, cid, list(tags), doc_type=doc_type)
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_existing(self, cid: str, size: int, display_name: str) -> UploadResult | None:
        record = self._local.find_by_content_id(cid)
        if record is not None:
            logger.info("Found existing upload of %s in local log: %s", cid, record.tx_id)
            return UploadResult(
                transaction_id=record.tx_id,
                viewblock_url=record.url,
                arweave_url=self._arweave_url(record.tx_id),
                ipfs_cid=record.cid,
                file_size=record.size,
                already_exists=True,
                source=DedupSource.LOCAL,
            )

        match = self._remote.find_by_content_id(cid)
        if match is None:
            return None

        logger.info("Found existing upload of %s on Arweave: %s", cid, match.transaction_id)
        result = self._result(
            match.transaction_id, cid, size, already_exists=True, source=DedupSource.REMOTE
        )
        if self._cache_remote_hits:
            self._local.append(
                LedgerRecord(
                    file=display_name,
                    tx_id=match.transaction_id,
                    url=result.viewblock_url,
                    cid=cid,
                    size=size,
                    tags={tag.name: tag.value for tag in match.tags},
                )
            )
        return result

    def _submit(
        self,
        content: bytes,
        cid: str,
        tags: list[UploadTag],
        doc_type: str | None = None,
    ) -> tuple[UploadResult, list[UploadTag]]:
        base = application_tags(self._app_version, doc_type or ATTESTATION_TYPE)
        submitted = merge_tags(base, tags, cid)
        logger.debug("Tags: %s", ", ".join(f"{t.name}: {t.value}" for t in submitted))
        tx_id = self._submitter.submit(content, submitted)
        return self._result(tx_id, cid, len(content), already_exists=False), submitted

    def _result(
        self,
        tx_id: str,
        cid: str,
        size: int,
        already_exists: bool,
        source: DedupSource | None = None,
    ) -> UploadResult:
        return UploadResult(
            transaction_id=tx_id,
            viewblock_url=f"{self._viewblock_url}/{tx_id}",
            arweave_url=self._arweave_url(tx_id),
            ipfs_cid=cid,
            file_size=size,
            already_exists=already_exists,
            source=source,
        )

    def _arweave_url(self, tx_id: str) -> str:
        return f"{self._gateway_url}/{tx_id}"


__all__ = [
    "DedupSource",
    "ProvenanceService",
    "RemoteLookup",
    "Submitter",
    "UploadResult",
]
