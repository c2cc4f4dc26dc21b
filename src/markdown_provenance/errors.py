"""Exception hierarchy for markdown-provenance.

Every error the library raises derives from :class:`ProvenanceError`, so
callers (and the CLI) can catch the whole family in one place while still
telling the classes apart.

Classes
-------
- ProvenanceError         Base class.
- ConfigurationError      Missing or invalid settings / wallet material.
- ContentNotFoundError    Input file missing or unreadable.
- LedgerStorageError      The local transaction log could not be written.
- SubmissionError         Base for failures of a signed upload.
- SigningError            The data item could not be signed.
- InsufficientFundsError  The upload service refused for lack of balance.
- ConnectivityError       The upload service could not be reached in time.
- UploadRejectedError     Any other rejection by the upload service.
- PointerPublishError     The ArNS pointer update failed.
- NameNotRegisteredError  The ArNS name has no registry record.
"""
from __future__ import annotations


class ProvenanceError(Exception):
    """Base class for all markdown-provenance errors."""


# ---------------------------------------------------------------------------
# Local / deterministic failures
# ---------------------------------------------------------------------------


class ConfigurationError(ProvenanceError):
    """Raised when configuration or wallet material is missing or invalid.

    Always raised before any network activity takes place.
    """


class ContentNotFoundError(ProvenanceError):
    """Raised when the input document does not exist or cannot be read."""


class LedgerStorageError(ProvenanceError):
    """Raised when a record cannot be appended to the local log."""


# ---------------------------------------------------------------------------
# Submission failures
# ---------------------------------------------------------------------------


class SubmissionError(ProvenanceError):
    """Base class for failures of a single signed upload attempt.

    Attributes
    ----------
    status_code:
        HTTP status returned by the upload service, when there was one.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SigningError(SubmissionError):
    """Raised when the data item cannot be signed with the wallet key."""


class InsufficientFundsError(SubmissionError):
    """Raised when the upload service reports an insufficient balance."""


class ConnectivityError(SubmissionError):
    """Raised on connection failures, timeouts and server-side outages."""


class UploadRejectedError(SubmissionError):
    """Raised when the upload service rejects the item for another reason."""


# ---------------------------------------------------------------------------
# Pointer failures (non-fatal to the overall workflow)
# ---------------------------------------------------------------------------


class PointerPublishError(ProvenanceError):
    """Raised when the ArNS pointer cannot be updated."""


class NameNotRegisteredError(PointerPublishError):
    """Raised when the ArNS name is not present in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(
            f"ArNS name {name!r} not found. "
            "Make sure the name is registered at https://arns.ar.io"
        )
        self.name = name


__all__ = [
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
]
