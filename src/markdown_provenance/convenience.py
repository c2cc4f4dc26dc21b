"""Convenience API for markdown-provenance: wiring for the common case.

Example
-------
::

    from markdown_provenance import Provenance
    provenance = Provenance()
    result = provenance.upload_file("post.md", author="Ada")
    print(result.arweave_url)

"""
from __future__ import annotations

import logging
from pathlib import Path

import requests

from markdown_provenance.brain.sync import BrainSync, BrainSyncOutcome
from markdown_provenance.brain.versions import BrainVersionLog
from markdown_provenance.config import ProvenanceConfig
from markdown_provenance.errors import ContentNotFoundError
from markdown_provenance.ledger.local import LedgerRecord, LocalLedger
from markdown_provenance.ledger.remote import RemoteLedgerQuery
from markdown_provenance.pointer.publisher import PointerPublisher
from markdown_provenance.service import ProvenanceService, UploadResult
from markdown_provenance.signing.signer import ArweaveSigner
from markdown_provenance.signing.wallet import Wallet
from markdown_provenance.tags import FILE_NAME_TAG, SOURCE_TAG, UploadTag

logger = logging.getLogger(__name__)

MARKDOWN_EXTENSIONS = frozenset({".md", ".markdown"})


def read_document(path: Path) -> bytes:
    """Read *path* as bytes.

    Raises
    ------
    ContentNotFoundError
        If the path is not a readable file.
    """
    resolved = path.expanduser().resolve()
    if not resolved.is_file():
        raise ContentNotFoundError(f"File not found: {resolved}")
    try:
        return resolved.read_bytes()
    except OSError as exc:
        raise ContentNotFoundError(f"Cannot read {resolved}: {exc}") from exc


def is_markdown(path: Path) -> bool:
    return path.suffix.lower() in MARKDOWN_EXTENSIONS


class Provenance:
    """Builds the services from one :class:`ProvenanceConfig`.

    The wallet is loaded on first use by an operation that signs, and before
    that operation touches the network.

    Parameters
    ----------
    config:
        Configuration; ``ProvenanceConfig.load()`` when omitted.
    session:
        Shared ``requests.Session`` for all HTTP clients.
    """

    def __init__(
        self,
        config: ProvenanceConfig | None = None,
        session: requests.Session | None = None,
    ) -> None:
        from markdown_provenance import __version__

        self._config = config or ProvenanceConfig.load()
        self._session = session or requests.Session()
        self._version = __version__
        self._ledger = LocalLedger(self._config.transactions_file)
        self._signer: ArweaveSigner | None = None

    @property
    def config(self) -> ProvenanceConfig:
        return self._config

    @property
    def ledger(self) -> LocalLedger:
        return self._ledger

    def signer(self) -> ArweaveSigner:
        """Return the signer, loading and validating the wallet once."""
        if self._signer is None:
            wallet = Wallet.from_path(self._config.require_wallet_path())
            self._signer = ArweaveSigner(
                wallet,
                upload_url=self._config.upload_url,
                session=self._session,
                timeout=self._config.submit_timeout_seconds,
            )
        return self._signer

    def service(self) -> ProvenanceService:
        return ProvenanceService(
            local_ledger=self._ledger,
            remote=RemoteLedgerQuery(self._config.graphql_url, session=self._session),
            submitter=self.signer(),
            app_version=self._version,
            cache_remote_hits=self._config.cache_remote_hits,
            gateway_url=self._config.gateway_url,
            viewblock_url=self._config.viewblock_url,
        )

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def upload_file(
        self,
        path: Path | str,
        author: str | None = None,
        file_name: str | None = None,
        source: str | None = None,
    ) -> UploadResult:
        """Upload a document unless it is already on Arweave.

        Parameters
        ----------
        path:
            Document to upload.
        author:
            ``Author`` tag; falls back to the configured author.
        file_name:
            Optional ``File-Name`` tag (a custom name for later lookup).
        source:
            Optional ``Source`` tag (URL or URI of the original).

        Raises
        ------
        ContentNotFoundError
            If the file is missing.
        ConfigurationError
            If the wallet is missing or invalid.
        SubmissionError
            If the upload fails.
        """
        document = Path(path)
        content = read_document(document)
        service = self.service()

        extra: list[UploadTag] = []
        if file_name:
            extra.append(UploadTag(FILE_NAME_TAG, file_name))
        if source:
            extra.append(UploadTag(SOURCE_TAG, source))

        return service.upload(
            content,
            display_name=document.name,
            author=author or self._config.author,
            extra_tags=extra,
        )

    def brain_sync(self) -> BrainSyncOutcome:
        """Publish the brain document and update the ArNS pointer.

        Raises
        ------
        ConfigurationError
            If the ArNS name or wallet is missing.
        SubmissionError
            If the brain upload fails.
        """
        arns_name = self._config.require_arns_name()
        signer = self.signer()
        publisher = PointerPublisher(
            signer,
            cu_url=self._config.cu_url,
            mu_url=self._config.mu_url,
            ario_process_id=self._config.ario_process_id,
            ttl_seconds=self._config.arns_ttl_seconds,
            session=self._session,
            timeout=self._config.submit_timeout_seconds,
        )
        sync = BrainSync(
            service=self.service(),
            ledger=self._ledger,
            versions=BrainVersionLog(self._config.brain_versions_file),
            publisher=publisher,
            arns_name=arns_name,
            wallet_address=signer.address,
            instructions_path=self._config.brain_instructions_file,
            gateway_url=self._config.gateway_url,
        )
        return sync.sync()

    def history(self) -> list[LedgerRecord]:
        return self._ledger.records()

    def __repr__(self) -> str:
        return f"Provenance(data_dir={str(self._config.data_dir)!r})"


__all__ = [
    "Provenance",
    "is_markdown",
    "read_document",
]
