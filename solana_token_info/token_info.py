#  token_info.py
import logging

from construct import (
    Bytes,
    ConstructError,
    GreedyBytes,
    If,
    Int8ul,
    Int16ul,
    Int32ul,
    Prefixed,
    PrefixedArray,
    Struct,
    Tell,
    this,
)
from solders.pubkey import Pubkey  # type: ignore
from spl.token._layouts import MINT_LAYOUT

from .errors import DerivationExhausted, MalformedAccount, MetadataMismatch
from .models import MetadataAccount, MintAccount

logger = logging.getLogger(__name__)

# Constants
TOKEN_METADATA_PROGRAM_ID = Pubkey.from_string("metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s")  # Metaplex Metadata Program ID

METADATA_SEED = b"metadata"
MAX_SEEDS = 16
MAX_SEED_LEN = 32
MAX_BUMP_ATTEMPTS = 256

MINT_SIZE = MINT_LAYOUT.sizeof()  # 82

# Borsh string: u32 length followed by that many bytes, NUL padded up to a fixed capacity
BORSH_STRING = Prefixed(Int32ul, GreedyBytes)

CREATOR_LAYOUT = Struct(
    "address" / Bytes(32),
    "verified" / Int8ul,
    "share" / Int8ul,
)

# Define the metadata layout based on the Metaplex standard, up to and including the uri
METADATA_LAYOUT = Struct(
    "key" / Int8ul,
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / BORSH_STRING,
    "symbol" / BORSH_STRING,
    "uri" / BORSH_STRING,
    "end" / Tell,
)

# Fields after the uri; absent on some older or hand-built accounts
METADATA_TAIL_LAYOUT = Struct(
    "seller_fee_basis_points" / Int16ul,
    "creators_option" / Int8ul,
    "creators" / If(this.creators_option == 1, PrefixedArray(Int32ul, CREATOR_LAYOUT)),
    "primary_sale_happened" / Int8ul,
    "is_mutable" / Int8ul,
)


def _create_program_address(seeds, program_id: Pubkey):
    """Return the derived address, or None when the hash lands on the ed25519 curve."""
    try:
        return Pubkey.create_program_address(seeds, program_id)
    except Exception as exc:
        # solders signals an on-curve candidate with its PubkeyError
        if type(exc).__name__ != "PubkeyError":
            raise
        return None


def find_program_address(seeds, program_id: Pubkey, max_attempts: int = MAX_BUMP_ATTEMPTS):
    """Return ``(address, bump)`` for the canonical (highest valid) bump.

    Bumps are tried from 255 downwards; the first one solders accepts as an
    off-curve program address wins. Raises DerivationExhausted when
    ``max_attempts`` bumps are all rejected.
    """
    seeds = [bytes(seed) for seed in seeds]
    if len(seeds) >= MAX_SEEDS:
        raise ValueError(f"at most {MAX_SEEDS - 1} seeds allowed before the bump, got {len(seeds)}")
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise ValueError(f"seed longer than {MAX_SEED_LEN} bytes: {len(seed)}")

    attempts = min(max_attempts, MAX_BUMP_ATTEMPTS)
    for bump in range(255, 255 - attempts, -1):
        address = _create_program_address(seeds + [bytes([bump])], program_id)
        if address is not None:
            return address, bump
    raise DerivationExhausted(program_id, attempts)


# Function to get the token metadata address
def get_metadata_pda(mint_address: Pubkey, program_id: Pubkey = TOKEN_METADATA_PROGRAM_ID) -> Pubkey:
    return find_program_address(
        [
            METADATA_SEED,
            bytes(program_id),
            bytes(mint_address),
        ],
        program_id,
    )[0]


def _optional_key(tag: int, raw: bytes, field: str):
    if tag == 0:
        return None
    if tag == 1:
        return Pubkey.from_bytes(raw)
    raise MalformedAccount(f"invalid {field} option tag {tag}")


def _flag(value: int, field: str) -> bool:
    if value not in (0, 1):
        raise MalformedAccount(f"invalid {field} flag {value}")
    return bool(value)


def decode_mint(data: bytes) -> MintAccount:
    """Parse an SPL token mint account (exactly 82 bytes)."""
    data = bytes(data)
    if len(data) != MINT_SIZE:
        raise MalformedAccount(f"mint account must be {MINT_SIZE} bytes, got {len(data)}")

    mint_info = MINT_LAYOUT.parse(data)
    mint = MintAccount(
        mint_authority=_optional_key(mint_info.mint_authority_option, mint_info.mint_authority, "mint_authority"),
        supply=mint_info.supply,
        decimals=mint_info.decimals,
        is_initialized=_flag(int(mint_info.is_initialized), "is_initialized"),
        freeze_authority=_optional_key(
            mint_info.freeze_authority_option, mint_info.freeze_authority, "freeze_authority"
        ),
    )
    if mint.unusual_decimals:
        logger.warning(f"Mint reports {mint.decimals} decimals, above the usual maximum")
    return mint


def encode_mint(mint: MintAccount) -> bytes:
    return MINT_LAYOUT.build(
        dict(
            mint_authority_option=0 if mint.mint_authority is None else 1,
            mint_authority=bytes(mint.mint_authority) if mint.mint_authority else bytes(32),
            supply=mint.supply,
            decimals=mint.decimals,
            is_initialized=int(mint.is_initialized),
            freeze_authority_option=0 if mint.freeze_authority is None else 1,
            freeze_authority=bytes(mint.freeze_authority) if mint.freeze_authority else bytes(32),
        )
    )


def _text(raw: bytes, field: str) -> str:
    # Only the padding after the text is dropped, interior NULs are kept
    try:
        return raw.rstrip(b"\x00").decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedAccount(f"{field} is not valid UTF-8: {exc}") from exc


def decode_metadata(data: bytes, expected_mint: Pubkey) -> MetadataAccount:
    """Parse a Metaplex metadata account and check it belongs to ``expected_mint``.

    Only the fields shared by fungible tokens are kept. Creators are skipped;
    collection, uses and the other NFT extensions after ``is_mutable`` are ignored.
    """
    data = bytes(data)
    try:
        account_info = METADATA_LAYOUT.parse(data)
        tail = data[account_info.end:]
        tail_info = METADATA_TAIL_LAYOUT.parse(tail) if tail else None
    except ConstructError as exc:
        raise MalformedAccount(f"metadata account ({len(data)} bytes) does not match the layout: {exc}") from exc

    seller_fee_basis_points = primary_sale_happened = is_mutable = None
    if tail_info is not None:
        if tail_info.creators_option not in (0, 1):
            raise MalformedAccount(f"invalid creators option tag {tail_info.creators_option}")
        seller_fee_basis_points = tail_info.seller_fee_basis_points
        primary_sale_happened = _flag(tail_info.primary_sale_happened, "primary_sale_happened")
        is_mutable = _flag(tail_info.is_mutable, "is_mutable")

    name = _text(account_info.name, "name")
    symbol = _text(account_info.symbol, "symbol")
    uri = _text(account_info.uri, "uri")

    mint = Pubkey.from_bytes(account_info.mint)
    if mint != expected_mint:
        raise MetadataMismatch(expected_mint, mint)

    return MetadataAccount(
        key=account_info.key,
        update_authority=Pubkey.from_bytes(account_info.update_authority),
        mint=mint,
        name=name,
        symbol=symbol,
        uri=uri,
        seller_fee_basis_points=seller_fee_basis_points,
        primary_sale_happened=primary_sale_happened,
        is_mutable=is_mutable,
    )
