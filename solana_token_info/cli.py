import argparse
import asyncio
import logging
import sys
import time

import base58
from solders.pubkey import Pubkey  # type: ignore

from . import config
from .aggregator import fetch_token_infos
from .report import format_token_info

logger = logging.getLogger("solana_token_info")


# Colour errors red on the console
class ColoredFormatter(logging.Formatter):
    RED = '\x1b[91m'
    RESET = '\x1b[0m'

    def format(self, record):
        message = super().format(record)
        if record.levelno >= logging.ERROR:
            message = f'{self.RED}{message}{self.RESET}'
        return message


def setup_logging(level: str) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ColoredFormatter(fmt='%(asctime)s [%(levelname)s] %(message)s', datefmt='%Y-%m-%d %H:%M:%S'))
    logger.handlers[:] = [handler]
    logger.setLevel(level.upper())
    logger.propagate = False


def parse_pubkey(text: str) -> Pubkey:
    try:
        raw = base58.b58decode(text.strip())
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"{text!r} is not base58: {exc}") from exc
    if len(raw) != 32:
        raise argparse.ArgumentTypeError(f"{text!r} decodes to {len(raw)} bytes, expected 32")
    return Pubkey.from_bytes(raw)


parser = argparse.ArgumentParser(prog="token-info", description="Simple CLI that returns token information")
parser.add_argument("pubkeys", nargs="+", type=parse_pubkey, metavar="PUBKEY", help="token mint public key")
parser.add_argument("--rpc-url", default=config.RPC_URL, help="Solana JSON-RPC endpoint (default: %(default)s)")
parser.add_argument("--timeout", type=float, default=config.HTTP_TIMEOUT, help="per-request timeout in seconds")
parser.add_argument("--lookup-website", action="store_true", help="count DNS records of the token website")
parser.add_argument("--log-level", default=config.LOG_LEVEL, help="logging level (default: %(default)s)")


async def _amain(args) -> int:
    start = time.perf_counter()
    infos = await fetch_token_infos(
        args.pubkeys,
        rpc_url=args.rpc_url,
        timeout=args.timeout,
        lookup_website=args.lookup_website,
    )
    for info in infos:
        print(format_token_info(info))
        print()
    logger.info(f"Total elapsed time {time.perf_counter() - start:.3f}s for {len(infos)} token(s)")
    return 0


def main(argv=None) -> int:
    args = parser.parse_args(argv)
    setup_logging(args.log_level)
    try:
        return asyncio.run(_amain(args))
    except KeyboardInterrupt:
        logger.error("Interrupted, discarding unfinished results")
        return 130


if __name__ == "__main__":
    sys.exit(main())
