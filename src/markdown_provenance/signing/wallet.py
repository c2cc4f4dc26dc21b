"""Arweave wallet loading.

An Arweave wallet is an RSA-4096 private key serialised as a JSON Web Key.
The key stays inside :class:`Wallet`; other components only see the
owner (public modulus), the derived address and the ``sign`` operation.
"""
from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Mapping
from pathlib import Path

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa

from markdown_provenance.errors import ConfigurationError
from markdown_provenance.signing.encoding import b64url_decode, b64url_encode, int_to_bytes

logger = logging.getLogger(__name__)

ARWEAVE_KEY_BITS = 4096
OWNER_LENGTH = ARWEAVE_KEY_BITS // 8
_JWK_MEMBERS = ("n", "e", "d", "p", "q", "dp", "dq", "qi")


class Wallet:
    """An Arweave signing key.

    Construct with :meth:`from_path` or :meth:`from_jwk`.

    Parameters
    ----------
    private_key:
        The RSA private key.  Must have a 4096-bit modulus.
    """

    def __init__(self, private_key: rsa.RSAPrivateKey) -> None:
        if private_key.key_size != ARWEAVE_KEY_BITS:
            raise ConfigurationError(
                f"Arweave wallets use {ARWEAVE_KEY_BITS}-bit RSA keys, "
                f"got {private_key.key_size} bits."
            )
        self._private_key = private_key
        modulus = private_key.public_key().public_numbers().n
        self._owner = int_to_bytes(modulus, OWNER_LENGTH)

    @classmethod
    def from_jwk(cls, jwk: Mapping[str, object]) -> "Wallet":
        """Build a wallet from a parsed JWK mapping.

        Raises
        ------
        ConfigurationError
            If members are missing or do not form a valid RSA key.
        """
        missing = [member for member in _JWK_MEMBERS if not isinstance(jwk.get(member), str)]
        if missing:
            raise ConfigurationError(
                f"Wallet JWK is missing RSA member(s): {', '.join(missing)}"
            )
        try:
            values = {
                member: int.from_bytes(b64url_decode(str(jwk[member])), "big")
                for member in _JWK_MEMBERS
            }
            public_numbers = rsa.RSAPublicNumbers(e=values["e"], n=values["n"])
            private_key = rsa.RSAPrivateNumbers(
                p=values["p"],
                q=values["q"],
                d=values["d"],
                dmp1=values["dp"],
                dmq1=values["dq"],
                iqmp=values["qi"],
                public_numbers=public_numbers,
            ).private_key()
        except ValueError as exc:
            raise ConfigurationError(f"Wallet JWK is not a valid RSA key: {exc}") from exc
        return cls(private_key)

    @classmethod
    def from_path(cls, path: Path) -> "Wallet":
        """Load and validate a JWK wallet file.

        Raises
        ------
        ConfigurationError
            If the file does not exist, cannot be read or is not a valid JWK.
        """
        if not path.is_file():
            raise ConfigurationError(f"Wallet file not found at: {path}")
        try:
            jwk = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise ConfigurationError(f"Cannot read wallet file {path}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Failed to parse wallet JSON: {exc}") from exc
        if not isinstance(jwk, dict):
            raise ConfigurationError(f"Wallet file {path} does not contain a JSON object.")
        wallet = cls.from_jwk(jwk)
        logger.debug("Loaded wallet %s from %s", wallet.address, path)
        return wallet

    @property
    def owner(self) -> bytes:
        """The 512-byte public modulus, as embedded in data items."""
        return self._owner

    @property
    def address(self) -> str:
        """The wallet address: base64url(sha256(owner))."""
        return b64url_encode(hashlib.sha256(self._owner).digest())

    def sign(self, message: bytes) -> bytes:
        """Sign *message* with RSA-PSS / SHA-256 and maximum salt length."""
        return self._private_key.sign(
            message,
            padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.MAX_LENGTH),
            hashes.SHA256(),
        )

    def __repr__(self) -> str:
        return f"Wallet(address={self.address!r})"


__all__ = [
    "ARWEAVE_KEY_BITS",
    "OWNER_LENGTH",
    "Wallet",
]
