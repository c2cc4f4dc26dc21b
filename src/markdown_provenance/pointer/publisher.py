"""ArNS pointer updates.

An ArNS name is owned by an ANT (Arweave Name Token) process on AO.  To
point ``<name>.ar.io`` at a new transaction the publisher:

1. asks the AR.IO registry process which ANT process owns the name
   (a read-only dry-run against an AO compute unit),
2. sends a signed ``Set-Record`` message for the root undername ``@`` to
   that ANT process through an AO messenger unit, and
3. reads the message result back to surface handler errors such as the
   wallet not being an owner or controller.

Publishing is a best-effort step.  Every failure is raised as a
:class:`~markdown_provenance.errors.PointerPublishError` so the calling
workflow can report it without failing the upload that preceded it.
"""
from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass

import requests

from markdown_provenance.config import DEFAULT_ARIO_PROCESS_ID, DEFAULT_ARNS_TTL_SECONDS
from markdown_provenance.errors import (
    ConfigurationError,
    NameNotRegisteredError,
    PointerPublishError,
    SubmissionError,
)
from markdown_provenance.signing.signer import ArweaveSigner
from markdown_provenance.tags import APP_NAME, UploadTag

logger = logging.getLogger(__name__)

ROOT_UNDERNAME = "@"
AO_MESSAGE_TAGS: tuple[UploadTag, ...] = (
    UploadTag("Data-Protocol", "ao"),
    UploadTag("Variant", "ao.TN.1"),
    UploadTag("Type", "Message"),
)


@dataclass(frozen=True)
class PointerUpdate:
    """A completed ArNS record update.

    Attributes
    ----------
    name:
        The ArNS name that was updated.
    target_tx_id:
        Transaction the root record now points at.
    ttl_seconds:
        Cache lifetime set on the record.
    process_id:
        ANT process that owns the name.
    message_id:
        Id of the ``Set-Record`` message.
    """

    name: str
    target_tx_id: str
    ttl_seconds: int
    process_id: str
    message_id: str

    @property
    def url(self) -> str:
        return f"https://{self.name}.ar.io"


class PointerPublisher:
    """Points an ArNS name's root record at a transaction.

    Parameters
    ----------
    signer:
        Signs the AO message with the wallet that controls the ANT.
    cu_url:
        AO compute unit base URL (dry-runs and message results).
    mu_url:
        AO messenger unit base URL (message delivery).
    ario_process_id:
        AR.IO registry process id.
    ttl_seconds:
        TTL for the updated record.  Must be positive.
    session:
        Optional ``requests.Session`` (injected in tests).
    timeout:
        Per-request timeout in seconds.
    """

    def __init__(
        self,
        signer: ArweaveSigner,
        cu_url: str = "https://cu.ardrive.io",
        mu_url: str = "https://mu.ao-testnet.xyz",
        ario_process_id: str = DEFAULT_ARIO_PROCESS_ID,
        ttl_seconds: int = DEFAULT_ARNS_TTL_SECONDS,
        session: requests.Session | None = None,
        timeout: float = 60.0,
    ) -> None:
        if ttl_seconds <= 0:
            raise ConfigurationError(
                f"ArNS TTL must be a positive number of seconds, got {ttl_seconds}"
            )
        self._signer = signer
        self._cu_url = cu_url.rstrip("/")
        self._mu_url = mu_url.rstrip("/")
        self._ario_process_id = ario_process_id
        self._ttl_seconds = ttl_seconds
        self._session = session or requests.Session()
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve_process_id(self, name: str) -> str:
        """Return the ANT process id registered for *name*.

        Raises
        ------
        NameNotRegisteredError
            If the registry has no record for *name*.
        PointerPublishError
            If the registry cannot be queried.
        """
        reply = self._dry_run(
            self._ario_process_id,
            [UploadTag("Action", "Record"), UploadTag("Name", name)],
        )
        messages = reply.get("Messages") or []
        if not messages or _tag_value(messages[0], "Error") is not None:
            raise NameNotRegisteredError(name)

        data = messages[0].get("Data")
        try:
            record = json.loads(data) if isinstance(data, str) else data
        except json.JSONDecodeError as exc:
            raise PointerPublishError(
                f"Registry returned unreadable record for {name!r}: {exc}"
            ) from exc
        if not isinstance(record, dict) or not record.get("processId"):
            raise NameNotRegisteredError(name)
        process_id = str(record["processId"])
        logger.debug("ArNS name %s is owned by ANT process %s", name, process_id)
        return process_id

    def publish(self, name: str, target_tx_id: str) -> PointerUpdate:
        """Point the root record of *name* at *target_tx_id*.

        Raises
        ------
        PointerPublishError
            On any failure, including :class:`NameNotRegisteredError`.
        """
        process_id = self.resolve_process_id(name)
        tags = [
            *AO_MESSAGE_TAGS,
            UploadTag("App-Name", APP_NAME),
            UploadTag("Action", "Set-Record"),
            UploadTag("Sub-Domain", ROOT_UNDERNAME),
            UploadTag("Transaction-Id", target_tx_id),
            UploadTag("TTL-Seconds", str(self._ttl_seconds)),
        ]
        message_id = self._send_message(process_id, tags)
        self._check_result(process_id, message_id)
        logger.info("ArNS %s now points at %s (message %s)", name, target_tx_id, message_id)
        return PointerUpdate(
            name=name,
            target_tx_id=target_tx_id,
            ttl_seconds=self._ttl_seconds,
            process_id=process_id,
            message_id=message_id,
        )

    # ------------------------------------------------------------------
    # AO transport
    # ------------------------------------------------------------------

    def _dry_run(self, process_id: str, tags: list[UploadTag]) -> dict[str, object]:
        body = {
            "Id": "1234",
            "Target": process_id,
            "Owner": "1234",
            "Anchor": "0",
            "Data": "1234",
            "Tags": [tag.to_dict() for tag in [*tags, *AO_MESSAGE_TAGS]],
        }
        try:
            response = self._session.post(
                f"{self._cu_url}/dry-run",
                params={"process-id": process_id},
                json=body,
                timeout=self._timeout,
            )
            response.raise_for_status()
            reply = response.json()
        except requests.RequestException as exc:
            raise PointerPublishError(f"ArNS registry lookup failed: {exc}") from exc
        except ValueError as exc:
            raise PointerPublishError(f"ArNS registry returned invalid JSON: {exc}") from exc
        if not isinstance(reply, dict):
            raise PointerPublishError("ArNS registry returned an unexpected payload")
        if reply.get("Error"):
            raise PointerPublishError(f"ArNS registry lookup failed: {reply['Error']}")
        return reply

    def _send_message(self, process_id: str, tags: list[UploadTag]) -> str:
        try:
            item = self._signer.sign(
                b"",
                tags,
                target=process_id,
                anchor=secrets.token_urlsafe(24).encode("ascii"),
            )
        except SubmissionError as exc:
            raise PointerPublishError(f"Could not sign ArNS update: {exc}") from exc

        try:
            response = self._session.post(
                self._mu_url,
                data=item.to_bytes(),
                headers={
                    "Content-Type": "application/octet-stream",
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise PointerPublishError(f"Could not deliver ArNS update: {exc}") from exc

        try:
            return str(response.json().get("id") or item.id)
        except (ValueError, AttributeError):
            return item.id

    def _check_result(self, process_id: str, message_id: str) -> None:
        try:
            response = self._session.get(
                f"{self._cu_url}/result/{message_id}",
                params={"process-id": process_id},
                timeout=self._timeout,
            )
            response.raise_for_status()
            result = response.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Could not read ArNS update result for %s: %s", message_id, exc)
            return

        if not isinstance(result, dict):
            return
        if result.get("Error"):
            raise PointerPublishError(f"ANT process rejected the update: {result['Error']}")
        for message in result.get("Messages") or []:
            error = _tag_value(message, "Error")
            if error is not None:
                detail = message.get("Data") or error
                raise PointerPublishError(f"ANT process rejected the update: {detail}")


def _tag_value(message: object, name: str) -> str | None:
    if not isinstance(message, dict):
        return None
    for tag in message.get("Tags") or []:
        if isinstance(tag, dict) and tag.get("name") == name:
            return str(tag.get("value"))
    return None


__all__ = [
    "PointerPublisher",
    "PointerUpdate",
]
