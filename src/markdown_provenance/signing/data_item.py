"""ANS-104 data items.

A data item is the unit Arweave bundlers accept: raw bytes plus tags,
signed by the owner.  Binary layout for Arweave (RSA) signatures::

    signature type     2 bytes, little endian (1)
    signature        512 bytes
    owner            512 bytes (RSA modulus)
    target           1 byte presence flag (+ 32 bytes)
    anchor           1 byte presence flag (+ 32 bytes)
    tag count          8 bytes, little endian
    tag bytes length   8 bytes, little endian
    tags             Avro-encoded array of {name: bytes, value: bytes}
    data             remaining bytes

The signature covers the SHA-384 deep hash of the item's fields and the
item id is ``base64url(sha256(signature))``.
"""
from __future__ import annotations

import hashlib
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Union

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from markdown_provenance.signing.encoding import b64url_decode, b64url_encode
from markdown_provenance.signing.wallet import OWNER_LENGTH, Wallet
from markdown_provenance.tags import UploadTag

SIGNATURE_TYPE_ARWEAVE = 1
SIGNATURE_LENGTH = 512
TARGET_LENGTH = 32
ANCHOR_LENGTH = 32
ARWEAVE_PUBLIC_EXPONENT = 65537

DeepHashInput = Union[bytes, Sequence["DeepHashInput"]]


# ---------------------------------------------------------------------------
# Deep hash
# ---------------------------------------------------------------------------


def _sha384(data: bytes) -> bytes:
    return hashlib.sha384(data).digest()


def deep_hash(data: DeepHashInput) -> bytes:
    """Arweave deep hash (SHA-384) of a blob or nested list of blobs."""
    if isinstance(data, (bytes, bytearray)):
        tag = b"blob" + str(len(data)).encode("ascii")
        return _sha384(_sha384(tag) + _sha384(bytes(data)))

    acc = _sha384(b"list" + str(len(data)).encode("ascii"))
    for chunk in data:
        acc = _sha384(acc + deep_hash(chunk))
    return acc


# ---------------------------------------------------------------------------
# Avro tag encoding
# ---------------------------------------------------------------------------


def _encode_long(value: int) -> bytes:
    zigzag = (value << 1) ^ (value >> 63)
    out = bytearray()
    while zigzag & ~0x7F:
        out.append((zigzag & 0x7F) | 0x80)
        zigzag >>= 7
    out.append(zigzag)
    return bytes(out)


def _decode_long(raw: bytes, offset: int) -> tuple[int, int]:
    shift = 0
    result = 0
    while True:
        if offset >= len(raw):
            raise ValueError("truncated Avro long")
        byte = raw[offset]
        offset += 1
        result |= (byte & 0x7F) << shift
        if not byte & 0x80:
            break
        shift += 7
    return (result >> 1) ^ -(result & 1), offset


def _encode_bytes(value: bytes) -> bytes:
    return _encode_long(len(value)) + value


def encode_tags(tags: Sequence[UploadTag]) -> bytes:
    """Avro-encode *tags*; an empty tag list encodes to no bytes at all."""
    if not tags:
        return b""
    body = b"".join(
        _encode_bytes(tag.name.encode("utf-8")) + _encode_bytes(tag.value.encode("utf-8"))
        for tag in tags
    )
    return _encode_long(len(tags)) + body + _encode_long(0)


def decode_tags(raw: bytes) -> list[UploadTag]:
    """Inverse of :func:`encode_tags`."""
    tags: list[UploadTag] = []
    offset = 0
    while offset < len(raw):
        count, offset = _decode_long(raw, offset)
        if count == 0:
            break
        if count < 0:
            # Negative block counts are followed by the block's byte size.
            count = -count
            _, offset = _decode_long(raw, offset)
        for _ in range(count):
            values: list[str] = []
            for _part in range(2):
                length, offset = _decode_long(raw, offset)
                values.append(raw[offset:offset + length].decode("utf-8"))
                offset += length
            tags.append(UploadTag(values[0], values[1]))
    return tags


# ---------------------------------------------------------------------------
# Data item
# ---------------------------------------------------------------------------


@dataclass
class DataItem:
    """An ANS-104 data item, signed or not yet signed.

    Attributes
    ----------
    data:
        Payload bytes.
    tags:
        Tags in submission order.
    owner:
        512-byte RSA modulus of the signing wallet.
    target:
        Optional 32-byte recipient (an AO process id for messages).
    anchor:
        Optional 32-byte anchor.
    signature:
        512-byte signature once :meth:`sign` has run.
    """

    data: bytes
    owner: bytes
    tags: tuple[UploadTag, ...] = field(default_factory=tuple)
    target: bytes = b""
    anchor: bytes = b""
    signature: bytes = b""

    def __post_init__(self) -> None:
        if len(self.owner) != OWNER_LENGTH:
            raise ValueError(f"owner must be {OWNER_LENGTH} bytes, got {len(self.owner)}")
        if self.target and len(self.target) != TARGET_LENGTH:
            raise ValueError(f"target must be {TARGET_LENGTH} bytes, got {len(self.target)}")
        if self.anchor and len(self.anchor) != ANCHOR_LENGTH:
            raise ValueError(f"anchor must be {ANCHOR_LENGTH} bytes, got {len(self.anchor)}")

    @classmethod
    def create(
        cls,
        data: bytes,
        wallet: Wallet,
        tags: Sequence[UploadTag] = (),
        target: str | None = None,
        anchor: bytes | None = None,
    ) -> "DataItem":
        """Build an unsigned item owned by *wallet*.

        Parameters
        ----------
        target:
            Base64url id of the recipient, if any.
        anchor:
            Raw 32-byte anchor, if any.
        """
        return cls(
            data=data,
            owner=wallet.owner,
            tags=tuple(tags),
            target=b64url_decode(target) if target else b"",
            anchor=anchor or b"",
        )

    @property
    def raw_tags(self) -> bytes:
        return encode_tags(self.tags)

    def signature_data(self) -> bytes:
        """Return the deep hash the signature is computed over."""
        return deep_hash([
            b"dataitem",
            b"1",
            str(SIGNATURE_TYPE_ARWEAVE).encode("ascii"),
            self.owner,
            self.target,
            self.anchor,
            self.raw_tags,
            self.data,
        ])

    def sign(self, wallet: Wallet) -> str:
        """Sign the item with *wallet* and return its id."""
        if wallet.owner != self.owner:
            raise ValueError("wallet does not own this data item")
        self.signature = wallet.sign(self.signature_data())
        return self.id

    @property
    def is_signed(self) -> bool:
        return len(self.signature) == SIGNATURE_LENGTH

    @property
    def id(self) -> str:
        if not self.is_signed:
            raise ValueError("data item is not signed")
        return b64url_encode(hashlib.sha256(self.signature).digest())

    def verify(self) -> bool:
        """Check the signature against the embedded owner."""
        if not self.is_signed:
            return False
        public_key = rsa.RSAPublicNumbers(
            e=ARWEAVE_PUBLIC_EXPONENT, n=int.from_bytes(self.owner, "big")
        ).public_key()
        try:
            public_key.verify(
                self.signature,
                self.signature_data(),
                padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.AUTO),
                hashes.SHA256(),
            )
        except InvalidSignature:
            return False
        return True

    def to_bytes(self) -> bytes:
        """Serialise the signed item for submission."""
        if not self.is_signed:
            raise ValueError("data item must be signed before serialisation")
        raw_tags = self.raw_tags
        parts = [
            SIGNATURE_TYPE_ARWEAVE.to_bytes(2, "little"),
            self.signature,
            self.owner,
            b"\x01" + self.target if self.target else b"\x00",
            b"\x01" + self.anchor if self.anchor else b"\x00",
            len(self.tags).to_bytes(8, "little"),
            len(raw_tags).to_bytes(8, "little"),
            raw_tags,
            self.data,
        ]
        return b"".join(parts)


__all__ = [
    "DataItem",
    "decode_tags",
    "deep_hash",
    "encode_tags",
]
