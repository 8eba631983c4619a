from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from solders.pubkey import Pubkey  # type: ignore

from .errors import FetchFailed

# Conventional upper bound for SPL decimals; larger values are reported, not rejected
MAX_CONVENTIONAL_DECIMALS = 18


class AccountStatus(str, Enum):
    FOUND = "found"
    MISSING = "missing"
    FAILED = "failed"


class Outcome(str, Enum):
    FULL = "full"
    PARTIAL = "partial"
    FAILED = "failed"


class Stage(str, Enum):
    MINT_FETCH = "mint_fetch"
    MINT_DECODE = "mint_decode"
    DERIVATION = "derivation"
    METADATA_FETCH = "metadata_fetch"
    METADATA_DECODE = "metadata_decode"
    URI = "uri"


@dataclass(frozen=True)
class AccountLookup:
    address: Pubkey
    status: AccountStatus
    data: bytes | None = None
    error: FetchFailed | None = None

    @classmethod
    def found(cls, address: Pubkey, data: bytes) -> "AccountLookup":
        return cls(address=address, status=AccountStatus.FOUND, data=data)

    @classmethod
    def missing(cls, address: Pubkey) -> "AccountLookup":
        return cls(address=address, status=AccountStatus.MISSING)

    @classmethod
    def failed(cls, address: Pubkey, error: FetchFailed) -> "AccountLookup":
        return cls(address=address, status=AccountStatus.FAILED, error=error)


@dataclass(frozen=True)
class MintAccount:
    mint_authority: Pubkey | None
    supply: int
    decimals: int
    is_initialized: bool
    freeze_authority: Pubkey | None

    @property
    def unusual_decimals(self) -> bool:
        return self.decimals > MAX_CONVENTIONAL_DECIMALS

    def ui_supply(self) -> str:
        """Supply scaled by decimals, e.g. 1000000000 with 6 decimals -> "1000"."""
        if self.decimals == 0:
            return str(self.supply)
        whole, fraction = divmod(self.supply, 10 ** self.decimals)
        text = f"{whole}.{fraction:0{self.decimals}d}"
        return text.rstrip("0").rstrip(".")


@dataclass(frozen=True)
class MetadataAccount:
    key: int
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str
    seller_fee_basis_points: int | None = None
    primary_sale_happened: bool | None = None
    is_mutable: bool | None = None


@dataclass(frozen=True)
class OffchainMetadata:
    uri: str
    document: dict[str, Any] = field(default_factory=dict)
    name: str | None = None
    symbol: str | None = None
    description: str | None = None
    image: str | None = None
    website: str | None = None
    website_addresses: int | None = None

    @classmethod
    def from_document(cls, uri: str, document: dict[str, Any]) -> "OffchainMetadata":
        def text(key: str) -> str | None:
            value = document.get(key)
            return value if isinstance(value, str) else None

        return cls(
            uri=uri,
            document=document,
            name=text("name"),
            symbol=text("symbol"),
            description=text("description"),
            image=text("image"),
            website=text("website") or text("external_url"),
        )


@dataclass(frozen=True)
class StageIssue:
    stage: Stage
    reason: str
    error: str | None = None


@dataclass(frozen=True)
class TokenInfo:
    mint: Pubkey
    outcome: Outcome
    mint_account: MintAccount | None = None
    metadata_address: Pubkey | None = None
    metadata: MetadataAccount | None = None
    offchain: OffchainMetadata | None = None
    issues: tuple[StageIssue, ...] = ()

    @property
    def is_complete(self) -> bool:
        return self.outcome is Outcome.FULL

    @property
    def failed_stage(self) -> Stage | None:
        if self.outcome is not Outcome.FAILED or not self.issues:
            return None
        return self.issues[-1].stage

    @property
    def description(self) -> str | None:
        return self.offchain.description if self.offchain else None
