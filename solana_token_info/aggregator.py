import asyncio
import logging
import time

import aiohttp
from solana.rpc.async_api import AsyncClient
from solders.pubkey import Pubkey  # type: ignore

from .errors import DerivationExhausted, MalformedAccount, MetadataMismatch, UriInvalidJson, UriUnreachable
from .fetchers import AccountFetcher, UriResolver
from .models import AccountStatus, Outcome, Stage, StageIssue, TokenInfo
from .token_info import TOKEN_METADATA_PROGRAM_ID, decode_metadata, decode_mint, get_metadata_pda

logger = logging.getLogger(__name__)


def _issue(stage: Stage, exc: Exception) -> StageIssue:
    return StageIssue(stage=stage, reason=str(exc), error=type(exc).__name__)


class TokenInfoAggregator:
    """Runs the mint -> metadata -> uri pipeline for each requested mint.

    ``accounts`` and ``uris`` are shared by every pipeline and are only read
    from, so one instance can serve any number of concurrent ``collect`` calls.
    """

    def __init__(
        self,
        accounts: AccountFetcher,
        uris: UriResolver,
        program_id: Pubkey = TOKEN_METADATA_PROGRAM_ID,
    ) -> None:
        self.accounts = accounts
        self.uris = uris
        self.program_id = program_id

    async def collect(self, mint: Pubkey) -> TokenInfo:
        start = time.perf_counter()
        info = await self._collect(mint)
        logger.info(f"Information collected for: {mint} ({info.outcome.value}) in {time.perf_counter() - start:.3f}s")
        return info

    async def _collect(self, mint: Pubkey) -> TokenInfo:
        stage = Stage.MINT_FETCH
        resolved = {}

        def partial(issue: StageIssue) -> TokenInfo:
            logger.warning(f"{mint}: {issue.stage.value} skipped ({issue.reason})")
            return TokenInfo(mint=mint, outcome=Outcome.PARTIAL, issues=(issue,), **resolved)

        try:
            lookup = await self.accounts.fetch(mint)
            if lookup.status is AccountStatus.FAILED:
                logger.error(f"Error fetching mint account {mint}: {lookup.error}")
                return TokenInfo(mint=mint, outcome=Outcome.FAILED, issues=(_issue(stage, lookup.error),))
            if lookup.status is AccountStatus.MISSING:
                logger.error(f"No mint account found for mint address: {mint}")
                issue = StageIssue(stage=stage, reason="mint account does not exist")
                return TokenInfo(mint=mint, outcome=Outcome.FAILED, issues=(issue,))

            stage = Stage.MINT_DECODE
            try:
                resolved["mint_account"] = decode_mint(lookup.data)
            except MalformedAccount as exc:
                logger.error(f"Could not decode mint account {mint}: {exc}")
                return TokenInfo(mint=mint, outcome=Outcome.FAILED, issues=(_issue(stage, exc),))

            stage = Stage.DERIVATION
            try:
                metadata_address = get_metadata_pda(mint, self.program_id)
            except DerivationExhausted as exc:
                return partial(_issue(stage, exc))
            resolved["metadata_address"] = metadata_address

            stage = Stage.METADATA_FETCH
            lookup = await self.accounts.fetch(metadata_address)
            if lookup.status is AccountStatus.FAILED:
                return partial(_issue(stage, lookup.error))
            if lookup.status is AccountStatus.MISSING:
                return partial(StageIssue(stage=stage, reason=f"no metadata account at {metadata_address}"))

            stage = Stage.METADATA_DECODE
            try:
                metadata = decode_metadata(lookup.data, mint)
            except (MalformedAccount, MetadataMismatch) as exc:
                return partial(_issue(stage, exc))
            resolved["metadata"] = metadata

            stage = Stage.URI
            try:
                offchain = await self.uris.resolve(metadata.uri)
            except (UriUnreachable, UriInvalidJson) as exc:
                return partial(_issue(stage, exc))
        except Exception as exc:
            # Anything a stage does not expect ends this token only, keeping what was resolved
            logger.exception(f"Unexpected error collecting {mint} at {stage.value}")
            outcome = Outcome.PARTIAL if "mint_account" in resolved else Outcome.FAILED
            return TokenInfo(mint=mint, outcome=outcome, issues=(_issue(stage, exc),), **resolved)

        return TokenInfo(mint=mint, outcome=Outcome.FULL, offchain=offchain, **resolved)

    async def collect_all(self, mints) -> list[TokenInfo]:
        """Collect every mint concurrently; results follow the order of ``mints``."""
        mints = list(mints)
        # gather returns results in argument order whatever order the pipelines finish in
        return list(await asyncio.gather(*[self.collect(mint) for mint in mints]))


async def fetch_token_infos(
    mints,
    rpc_url: str,
    timeout: float = 10,
    lookup_website: bool = False,
) -> list[TokenInfo]:
    """Open one RPC client and one HTTP session, shared by every pipeline."""
    http_timeout = aiohttp.ClientTimeout(total=timeout)
    async with AsyncClient(rpc_url, timeout=timeout) as client:
        async with aiohttp.ClientSession(timeout=http_timeout) as session:
            aggregator = TokenInfoAggregator(AccountFetcher(client), UriResolver(session, lookup_website))
            return await aggregator.collect_all(mints)
