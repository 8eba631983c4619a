from .models import Outcome, TokenInfo


def _authority(key) -> str:
    return str(key) if key is not None else "none"


def format_token_info(info: TokenInfo) -> str:
    """Human readable summary of one TokenInfo, in the order the pipeline ran."""
    text = f"token: {info.mint}\noutcome: {info.outcome.value}\n"

    mint = info.mint_account
    if mint is not None:
        text += "\ninformation collected from account:\n"
        text += f"total supply: {mint.ui_supply()}\n"
        text += f"decimals: {mint.decimals}\n"
        text += f"mint authority: {_authority(mint.mint_authority)}\n"
        text += f"freeze authority: {_authority(mint.freeze_authority)}\n"
        text += f"initialized: {str(mint.is_initialized).lower()}\n"

    metadata = info.metadata
    if metadata is not None:
        text += "\ninformation collected from metadata:\n"
        text += f"key: {metadata.key}\n"
        text += f"update authority: {metadata.update_authority}\n"
        text += f"mint: {metadata.mint}\n"
        text += f"name: {metadata.name}\n"
        text += f"symbol: {metadata.symbol}\n"
        text += f"uri: {metadata.uri}\n"
        if metadata.seller_fee_basis_points is not None:
            text += f"seller fee basis points: {metadata.seller_fee_basis_points}\n"
        if metadata.primary_sale_happened is not None:
            text += f"primary sale happened: {str(metadata.primary_sale_happened).lower()}\n"
        if metadata.is_mutable is not None:
            text += f"is mutable: {str(metadata.is_mutable).lower()}\n"

    offchain = info.offchain
    if offchain is not None:
        text += "\ninformation collected from uri:\n"
        for key, value in offchain.document.items():
            if isinstance(value, (dict, list)):
                continue
            text += f"{key.lower()}: {value}\n"
        if offchain.website_addresses is not None:
            text += f"number of website dns records: {offchain.website_addresses}\n"

    if info.issues:
        label = "failed at" if info.outcome is Outcome.FAILED else "skipped"
        text += "\n"
        for issue in info.issues:
            error = f" [{issue.error}]" if issue.error else ""
            text += f"{label} {issue.stage.value}{error}: {issue.reason}\n"

    return text.rstrip("\n")
