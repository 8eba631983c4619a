import pytest

from solana_token_info import cli
from solana_token_info.models import (
    MetadataAccount,
    MintAccount,
    OffchainMetadata,
    Outcome,
    Stage,
    StageIssue,
    TokenInfo,
)
from solana_token_info.report import format_token_info

from conftest import make_key

USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"


def full_info() -> TokenInfo:
    mint = make_key(1)
    return TokenInfo(
        mint=mint,
        outcome=Outcome.FULL,
        mint_account=MintAccount(
            mint_authority=make_key(9),
            supply=1_000_000_000,
            decimals=6,
            is_initialized=True,
            freeze_authority=None,
        ),
        metadata_address=make_key(5),
        metadata=MetadataAccount(
            key=4,
            update_authority=make_key(200),
            mint=mint,
            name="Example",
            symbol="EX",
            uri="https://example/m.json",
            seller_fee_basis_points=500,
            primary_sale_happened=True,
            is_mutable=False,
        ),
        offchain=OffchainMetadata.from_document("https://example/m.json", {"Description": "demo token", "tags": []}),
    )


def test_format_full_token() -> None:
    text = format_token_info(full_info())
    assert "outcome: full" in text
    assert "total supply: 1000" in text
    assert f"mint authority: {make_key(9)}" in text
    assert "freeze authority: none" in text
    assert "name: Example" in text
    assert "symbol: EX" in text
    assert "seller fee basis points: 500" in text
    assert "primary sale happened: true" in text
    assert "is mutable: false" in text
    assert "description: demo token" in text
    assert "tags" not in text
    assert "skipped" not in text


def test_format_partial_token_reports_skipped_stage() -> None:
    info = TokenInfo(
        mint=make_key(2),
        outcome=Outcome.PARTIAL,
        mint_account=full_info().mint_account,
        issues=(StageIssue(stage=Stage.METADATA_FETCH, reason="no metadata account"),),
    )
    text = format_token_info(info)
    assert "outcome: partial" in text
    assert "skipped metadata_fetch: no metadata account" in text
    assert "information collected from metadata" not in text


def test_format_failed_token() -> None:
    info = TokenInfo(
        mint=make_key(3),
        outcome=Outcome.FAILED,
        issues=(StageIssue(stage=Stage.MINT_FETCH, reason="boom", error="FetchFailed"),),
    )
    text = format_token_info(info)
    assert "failed at mint_fetch [FetchFailed]: boom" in text
    assert "total supply" not in text


def test_parse_pubkey() -> None:
    assert str(cli.parse_pubkey(USDC)) == USDC


@pytest.mark.parametrize("argv", [[], ["not-base58-0OIl"], ["abc"]])
def test_bad_arguments_exit_non_zero(argv) -> None:
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)
    assert exc.value.code != 0


def test_main_prints_every_token_in_order(monkeypatch, capsys) -> None:
    seen = {}

    async def fake_fetch(mints, rpc_url, timeout, lookup_website):
        seen.update(mints=mints, rpc_url=rpc_url, timeout=timeout, lookup_website=lookup_website)
        failed = TokenInfo(mint=mints[1], outcome=Outcome.FAILED,
                           issues=(StageIssue(stage=Stage.MINT_FETCH, reason="boom", error="FetchFailed"),))
        return [full_info(), failed]

    monkeypatch.setattr(cli, "fetch_token_infos", fake_fetch)
    code = cli.main([str(make_key(1)), USDC, "--rpc-url", "http://localhost:8899", "--timeout", "3"])

    assert code == 0
    assert [str(key) for key in seen["mints"]] == [str(make_key(1)), USDC]
    assert seen["rpc_url"] == "http://localhost:8899"
    assert seen["timeout"] == 3.0
    assert seen["lookup_website"] is False
    out = capsys.readouterr().out
    assert out.index(str(make_key(1))) < out.index(USDC)
    assert "failed at mint_fetch" in out
