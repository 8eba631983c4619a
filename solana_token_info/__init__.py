from .aggregator import TokenInfoAggregator, fetch_token_infos
from .errors import (
    DerivationExhausted,
    FetchFailed,
    MalformedAccount,
    MetadataMismatch,
    TokenInfoError,
    UriInvalidJson,
    UriUnreachable,
)
from .fetchers import AccountFetcher, UriResolver
from .models import (
    AccountLookup,
    AccountStatus,
    MetadataAccount,
    MintAccount,
    OffchainMetadata,
    Outcome,
    Stage,
    StageIssue,
    TokenInfo,
)
from .report import format_token_info
from .token_info import (
    TOKEN_METADATA_PROGRAM_ID,
    decode_metadata,
    decode_mint,
    encode_mint,
    find_program_address,
    get_metadata_pda,
)

__all__ = [
    "AccountFetcher",
    "AccountLookup",
    "AccountStatus",
    "DerivationExhausted",
    "FetchFailed",
    "MalformedAccount",
    "MetadataAccount",
    "MetadataMismatch",
    "MintAccount",
    "OffchainMetadata",
    "Outcome",
    "Stage",
    "StageIssue",
    "TOKEN_METADATA_PROGRAM_ID",
    "TokenInfo",
    "TokenInfoAggregator",
    "TokenInfoError",
    "UriInvalidJson",
    "UriResolver",
    "UriUnreachable",
    "decode_metadata",
    "decode_mint",
    "encode_mint",
    "fetch_token_infos",
    "find_program_address",
    "format_token_info",
    "get_metadata_pda",
]
