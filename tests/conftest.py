import asyncio
import json
import struct
from types import SimpleNamespace

import aiohttp
import pytest
from solders.pubkey import Pubkey  # type: ignore


def make_key(n: int) -> Pubkey:
    return Pubkey.from_bytes(bytes([n]) * 32)


def mint_bytes(supply=1_000_000_000, decimals=6, mint_authority=None, freeze_authority=None,
               is_initialized=1, mint_option=None, freeze_option=None) -> bytes:
    if mint_option is None:
        mint_option = 0 if mint_authority is None else 1
    if freeze_option is None:
        freeze_option = 0 if freeze_authority is None else 1
    return struct.pack(
        "<I32sQBBI32s",
        mint_option,
        bytes(mint_authority) if mint_authority else bytes(32),
        supply,
        decimals,
        is_initialized,
        freeze_option,
        bytes(freeze_authority) if freeze_authority else bytes(32),
    )


def _padded(value: bytes, size: int | None) -> bytes:
    if size is not None:
        value = value.ljust(size, b"\x00")
    return struct.pack("<I", len(value)) + value


def metadata_bytes(mint: Pubkey, name=b"Example", symbol=b"EX", uri=b"https://example/m.json",
                   update_authority=None, tail=True, pad=True) -> bytes:
    data = bytes([4]) + bytes(update_authority or make_key(200)) + bytes(mint)
    data += _padded(name, 32 if pad else None)
    data += _padded(symbol, 10 if pad else None)
    data += _padded(uri, 200 if pad else None)
    if tail:
        # seller fee 500 bps, no creators, primary sale not happened, mutable
        data += struct.pack("<HBBB", 500, 0, 0, 1)
    return data


class FakeRpcClient:
    """Stands in for solana-py's AsyncClient.get_account_info."""

    def __init__(self, accounts=None, errors=None, delays=None):
        self.accounts = dict(accounts or {})
        self.errors = dict(errors or {})
        self.delays = dict(delays or {})
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def get_account_info(self, pubkey):
        self.calls.append(pubkey)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(pubkey, 0))
            if pubkey in self.errors:
                raise self.errors[pubkey]
            if pubkey not in self.accounts:
                return SimpleNamespace(value=None)
            return SimpleNamespace(value=SimpleNamespace(data=self.accounts[pubkey]))
        finally:
            self.in_flight -= 1


class FakeResponse:
    def __init__(self, status: int, body: bytes):
        self.status = status
        self.body = body

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    def raise_for_status(self):
        if self.status >= 400:
            raise aiohttp.ClientError(f"HTTP {self.status}")

    async def json(self, content_type="application/json"):
        # mirrors aiohttp: blank body is None, content_type=None skips the header check
        if not self.body.strip():
            return None
        return json.loads(self.body.decode("utf-8"))


class FakeSession:
    """Stands in for aiohttp.ClientSession.get; values are bodies, (status, body) or exceptions."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.calls = []

    def get(self, uri):
        self.calls.append(uri)
        response = self.responses.get(uri, (404, b""))
        if isinstance(response, Exception):
            raise response
        if isinstance(response, bytes):
            response = (200, response)
        return FakeResponse(*response)


@pytest.fixture
def mint_key() -> Pubkey:
    return make_key(1)
