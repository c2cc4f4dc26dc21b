"""Shared fixtures for the markdown-provenance test-suite."""
from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest
import requests
from cryptography.hazmat.primitives.asymmetric import rsa

from markdown_provenance.signing.encoding import b64url_encode, int_to_bytes
from markdown_provenance.signing.wallet import Wallet


def _b64_int(value: int) -> str:
    return b64url_encode(int_to_bytes(value))


def make_response(
    status: int,
    body: object = None,
    reason: str = "",
) -> requests.Response:
    """Build a real ``requests.Response`` with a JSON or raw body."""
    response = requests.Response()
    response.status_code = status
    response.reason = reason
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, bytes):
        response._content = body
    elif isinstance(body, str):
        response._content = body.encode("utf-8")
    else:
        response._content = json.dumps(body).encode("utf-8")
    return response


@pytest.fixture()
def response_factory() -> Callable[..., requests.Response]:
    return make_response


@pytest.fixture(scope="session")
def wallet_jwk() -> dict[str, str]:
    """A freshly generated Arweave-style JWK (RSA-4096)."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=4096)
    numbers = key.private_numbers()
    public = numbers.public_numbers
    return {
        "kty": "RSA",
        "n": _b64_int(public.n),
        "e": _b64_int(public.e),
        "d": _b64_int(numbers.d),
        "p": _b64_int(numbers.p),
        "q": _b64_int(numbers.q),
        "dp": _b64_int(numbers.dmp1),
        "dq": _b64_int(numbers.dmq1),
        "qi": _b64_int(numbers.iqmp),
    }


@pytest.fixture(scope="session")
def wallet(wallet_jwk: dict[str, str]) -> Wallet:
    return Wallet.from_jwk(wallet_jwk)


@pytest.fixture()
def wallet_file(tmp_path: Path, wallet_jwk: dict[str, str]) -> Path:
    path = tmp_path / "wallet.json"
    path.write_text(json.dumps(wallet_jwk), encoding="utf-8")
    return path
