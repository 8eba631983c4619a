import asyncio
import logging
import socket
from dataclasses import replace
from urllib.parse import urlparse

import aiohttp
import httpx
from solana.exceptions import SolanaRpcException
from solana.rpc.core import RPCException
from solders.pubkey import Pubkey  # type: ignore

from .errors import FetchFailed, UriInvalidJson, UriUnreachable
from .models import AccountLookup, OffchainMetadata

logger = logging.getLogger(__name__)

RPC_ERRORS = (SolanaRpcException, RPCException, httpx.HTTPError, asyncio.TimeoutError, ValueError)


class AccountFetcher:
    """Adapter over a solana-py ``AsyncClient`` returning a three-way AccountLookup."""

    def __init__(self, client) -> None:
        self.client = client

    async def fetch(self, address: Pubkey) -> AccountLookup:
        try:
            response = await self.client.get_account_info(address)
            value = response.value
        except RPC_ERRORS as exc:
            logger.debug(f"getAccountInfo failed for {address}: {exc!r}")
            return AccountLookup.failed(address, FetchFailed(address, str(exc) or type(exc).__name__))
        except AttributeError as exc:
            logger.debug(f"getAccountInfo returned a malformed response for {address}: {exc}")
            return AccountLookup.failed(address, FetchFailed(address, f"malformed response: {exc}"))

        if value is None:
            return AccountLookup.missing(address)

        data = getattr(value, "data", None)
        if not isinstance(data, (bytes, bytearray)):
            return AccountLookup.failed(address, FetchFailed(address, f"unexpected account data {type(data).__name__}"))
        return AccountLookup.found(address, bytes(data))


def _clean_uri(uri: str) -> str:
    return uri.strip("\x00").strip()


async def _count_addresses(host: str) -> int:
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(host, None, proto=socket.IPPROTO_TCP)
    return len({info[4][0] for info in infos})


class UriResolver:
    """Fetches the off-chain JSON document a metadata account points to."""

    def __init__(self, session, lookup_website: bool = False) -> None:
        self.session = session
        self.lookup_website = lookup_website

    async def resolve(self, uri: str) -> OffchainMetadata | None:
        uri = _clean_uri(uri)
        if not uri:
            logger.warning("Metadata does not include a uri, off-chain metadata will not be retrieved")
            return None

        try:
            async with self.session.get(uri) as response:
                response.raise_for_status()
                try:
                    document = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError) as exc:
                    raise UriInvalidJson(uri, str(exc)) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UriUnreachable(uri, str(exc) or type(exc).__name__) from exc

        if not isinstance(document, dict):
            raise UriInvalidJson(uri, f"expected an object, got {type(document).__name__}")

        metadata = OffchainMetadata.from_document(uri, document)
        if self.lookup_website and metadata.website:
            metadata = await self._with_website_addresses(metadata)
        return metadata

    async def _with_website_addresses(self, metadata: OffchainMetadata) -> OffchainMetadata:
        website = metadata.website.strip().strip('"')
        try:
            host = urlparse(website if "://" in website else f"https://{website}").hostname
            if not host:
                logger.warning(f"Could not find a host in website {metadata.website!r}")
                return metadata
            count = await _count_addresses(host)
        # UnicodeError (bad IDNA label) is a ValueError
        except (OSError, ValueError) as exc:
            logger.warning(f"Website lookup failed for {metadata.website!r}: {exc}")
            return metadata
        return replace(metadata, website_addresses=count)
