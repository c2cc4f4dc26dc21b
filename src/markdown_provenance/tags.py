"""Upload tags and tag-set assembly.

Arweave data items carry an ordered list of ``(name, value)`` tags.  The
network does not enforce name uniqueness, but this package always emits
each name once, and the ``IPFS-CID`` tag in particular exactly once with
the computed identifier as its value, because remote dedup queries by it.
"""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

CONTENT_ID_TAG = "IPFS-CID"
CONTENT_TYPE_TAG = "Content-Type"
APP_NAME_TAG = "App-Name"
APP_VERSION_TAG = "App-Version"
TYPE_TAG = "Type"
AUTHOR_TAG = "Author"
FILE_NAME_TAG = "File-Name"
SOURCE_TAG = "Source"
ARNS_NAME_TAG = "ArNS-Name"

APP_NAME = "Markdown Provenance"
MARKDOWN_CONTENT_TYPE = "text/markdown"
ATTESTATION_TYPE = "Attestation"
AGENT_BRAIN_TYPE = "Agent-Brain"


@dataclass(frozen=True)
class UploadTag:
    """A single ``(name, value)`` tag attached to a data item.

    Attributes
    ----------
    name:
        Tag name, e.g. ``"Content-Type"``.
    value:
        Tag value, always a string on the wire.
    """

    name: str
    value: str

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("tag name must not be empty")

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "value": self.value}


def application_tags(version: str, doc_type: str = ATTESTATION_TYPE) -> list[UploadTag]:
    """Return the fixed tags every upload from this application carries."""
    return [
        UploadTag(CONTENT_TYPE_TAG, MARKDOWN_CONTENT_TYPE),
        UploadTag(APP_NAME_TAG, APP_NAME),
        UploadTag(APP_VERSION_TAG, version),
        UploadTag(TYPE_TAG, doc_type),
    ]


def merge_tags(
    base: Iterable[UploadTag],
    extra: Iterable[UploadTag],
    content_id: str,
) -> list[UploadTag]:
    """Merge tag sets into a list with unique names.

    Tags from *extra* replace same-named tags from *base* in place, keeping
    the original position; new names are appended in order.  The
    ``IPFS-CID`` tag is always present exactly once and always carries
    *content_id*, whatever either input says.

    Parameters
    ----------
    base:
        Application-level tags.
    extra:
        Caller-supplied tags (author, file name, source, ...).
    content_id:
        The computed content identifier.

    Returns
    -------
    list[UploadTag]
        The tag list to sign and submit.
    """
    merged: dict[str, str] = {}
    for tag in [*base, *extra]:
        if tag.name == CONTENT_ID_TAG:
            continue
        merged[tag.name] = tag.value
    merged[CONTENT_ID_TAG] = content_id
    return [UploadTag(name, value) for name, value in merged.items()]


__all__ = [
    "AGENT_BRAIN_TYPE",
    "APP_NAME",
    "ARNS_NAME_TAG",
    "AUTHOR_TAG",
    "CONTENT_ID_TAG",
    "FILE_NAME_TAG",
    "SOURCE_TAG",
    "TYPE_TAG",
    "UploadTag",
    "application_tags",
    "merge_tags",
]
