"""
PumpSwap AMM addresses for creator fee collection.

Graduated tokens accrue creator fees as wrapped SOL in a token account
owned by a per-creator vault authority PDA.
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from jinvault.core.accounts import derive_address
from jinvault.core.pubkeys import SOL_MINT, TOKEN_PROGRAM


@dataclass
class PumpSwapAddresses:
    """PumpSwap program addresses."""

    PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA"
    )
    EVENT_AUTHORITY: Final[Pubkey] = Pubkey.from_string(
        "GS4CU59F31iL7aR2Q8zVS8DRrcRnXX1yjQ66TqNVQnaR"
    )


class PumpSwapAddressProvider:
    """PDA derivations for the PumpSwap creator vault."""

    @property
    def program_id(self) -> Pubkey:
        return PumpSwapAddresses.PROGRAM

    def derive_creator_vault_authority(self, creator: Pubkey) -> Pubkey:
        """Derive the PDA that owns the creator's fee token account.

        Args:
            creator: Coin creator address

        Returns:
            Vault authority address
        """
        vault_authority, _ = derive_address(
            [b"creator_vault", bytes(creator)], PumpSwapAddresses.PROGRAM
        )
        return vault_authority

    def derive_creator_vault_ata(self, creator: Pubkey) -> Pubkey:
        """Wrapped SOL token account holding the creator's AMM fees."""
        return get_associated_token_address(
            self.derive_creator_vault_authority(creator), SOL_MINT, TOKEN_PROGRAM
        )

    def get_collect_fee_accounts(self, creator: Pubkey) -> dict[str, Pubkey]:
        """Get all accounts needed to collect AMM creator fees into `creator`'s WSOL account."""
        return {
            "quote_mint": SOL_MINT,
            "quote_token_program": TOKEN_PROGRAM,
            "coin_creator": creator,
            "coin_creator_vault_authority": self.derive_creator_vault_authority(creator),
            "coin_creator_vault_ata": self.derive_creator_vault_ata(creator),
            "coin_creator_token_account": get_associated_token_address(
                creator, SOL_MINT, TOKEN_PROGRAM
            ),
            "event_authority": PumpSwapAddresses.EVENT_AUTHORITY,
            "program": PumpSwapAddresses.PROGRAM,
        }
