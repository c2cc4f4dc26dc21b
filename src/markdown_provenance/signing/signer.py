"""Signed submission to the Turbo upload service.

:class:`ArweaveSigner` wraps content and tags into an ANS-104 data item,
signs it with the wallet and POSTs the raw item to Turbo.  Each submission
is bounded by a timeout and never retried here; callers decide whether to
try again based on the error class:

- :class:`~markdown_provenance.errors.InsufficientFundsError`: fund the
  wallet (Turbo uploads above the free tier need credits).
- :class:`~markdown_provenance.errors.ConnectivityError`: network trouble,
  timeouts, or a Turbo outage.
- :class:`~markdown_provenance.errors.UploadRejectedError`: anything else.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence

import requests
from cryptography.exceptions import UnsupportedAlgorithm

from markdown_provenance.errors import (
    ConnectivityError,
    InsufficientFundsError,
    SigningError,
    UploadRejectedError,
)
from markdown_provenance.signing.data_item import DataItem
from markdown_provenance.signing.wallet import Wallet
from markdown_provenance.tags import UploadTag

logger = logging.getLogger(__name__)

DEFAULT_SUBMIT_TIMEOUT_SECONDS = 60.0


class ArweaveSigner:
    """Signs data items with a wallet and submits them to Turbo.

    Parameters
    ----------
    wallet:
        The signing wallet.  Never exposed to other components.
    upload_url:
        Turbo upload service base URL.
    session:
        Optional ``requests.Session`` (injected in tests).
    timeout:
        Upper bound, in seconds, for one submission.
    """

    def __init__(
        self,
        wallet: Wallet,
        upload_url: str = "https://upload.ardrive.io",
        session: requests.Session | None = None,
        timeout: float = DEFAULT_SUBMIT_TIMEOUT_SECONDS,
    ) -> None:
        self._wallet = wallet
        self._upload_url = upload_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout = timeout

    @property
    def address(self) -> str:
        """Address of the signing wallet."""
        return self._wallet.address

    def sign(
        self,
        content: bytes,
        tags: Sequence[UploadTag],
        target: str | None = None,
        anchor: bytes | None = None,
    ) -> DataItem:
        """Return a signed data item for *content*.

        Raises
        ------
        SigningError
            If the item cannot be built or signed.
        """
        try:
            item = DataItem.create(content, self._wallet, tags=tags, target=target, anchor=anchor)
            item.sign(self._wallet)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningError(f"Failed to sign data item: {exc}") from exc
        return item

    def submit(self, content: bytes, tags: Sequence[UploadTag]) -> str:
        """Sign and upload *content*; return the data item id.

        Raises
        ------
        SigningError
            If signing fails.  No request is sent.
        InsufficientFundsError
            If Turbo reports an insufficient balance.
        ConnectivityError
            On connection errors, timeouts or 5xx responses.
        UploadRejectedError
            On any other rejection or an unreadable reply.
        """
        item = self.sign(content, tags)
        raw = item.to_bytes()
        logger.debug("Submitting data item %s (%d bytes)", item.id, len(raw))

        try:
            response = self._session.post(
                f"{self._upload_url}/v1/tx",
                data=raw,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            raise ConnectivityError(
                f"Upload timed out after {self._timeout:.0f}s: {exc}"
            ) from exc
        except requests.RequestException as exc:
            raise ConnectivityError(f"Upload failed, network error: {exc}") from exc

        _raise_for_upload_status(response)

        try:
            body = response.json()
            tx_id = str(body["id"])
        except (ValueError, KeyError, TypeError) as exc:
            raise UploadRejectedError(
                f"Upload service returned an unreadable response: {exc}",
                status_code=response.status_code,
            ) from exc

        if tx_id != item.id:
            logger.warning("Upload service returned id %s for data item %s", tx_id, item.id)
        return tx_id

    def __repr__(self) -> str:
        return f"ArweaveSigner(address={self.address!r}, upload_url={self._upload_url!r})"


def _raise_for_upload_status(response: requests.Response) -> None:
    status = response.status_code
    if 200 <= status < 300:
        return
    detail = (response.text or "").strip()[:500]
    message = f"Upload rejected with HTTP {status}: {detail or response.reason}"
    if status == 402 or "insufficient" in detail.lower():
        raise InsufficientFundsError(message, status_code=status)
    if status >= 500 or status == 408:
        raise ConnectivityError(message, status_code=status)
    raise UploadRejectedError(message, status_code=status)


__all__ = [
    "ArweaveSigner",
    "DEFAULT_SUBMIT_TIMEOUT_SECONDS",
]
