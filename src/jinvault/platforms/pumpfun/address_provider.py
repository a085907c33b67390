"""
Pump.fun program addresses and PDA derivations.

Pump.fun tokens are minted under Token-2022, so token accounts tied to the
bonding curve default to that program unless the caller says otherwise.
"""

from dataclasses import dataclass
from typing import Final

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from jinvault.core.accounts import derive_address
from jinvault.core.pubkeys import TOKEN_2022_PROGRAM, SystemAddresses


@dataclass
class PumpFunAddresses:
    """Pump.fun program addresses."""

    PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"
    )
    GLOBAL: Final[Pubkey] = Pubkey.from_string(
        "4wTV1YmiEkRvAtNtsSGPtUrqRYQMe5SKy2uB4Jjaxnjf"
    )
    EVENT_AUTHORITY: Final[Pubkey] = Pubkey.from_string(
        "Ce6TQqeHC9p8KetsN6JsjHK7UTZk7nasjjnr7XxXp9F1"
    )
    FEE: Final[Pubkey] = Pubkey.from_string(
        "CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM"
    )
    FEE_PROGRAM: Final[Pubkey] = Pubkey.from_string(
        "pfeeUxB6jkeY1Hxd7CsFCAjcbHA9rWtchMGdZ6VojVZ"
    )


class PumpFunAddressProvider:
    """Derives every pump.fun account the client touches."""

    @property
    def program_id(self) -> Pubkey:
        return PumpFunAddresses.PROGRAM

    def derive_bonding_curve(self, mint: Pubkey) -> Pubkey:
        """Derive the bonding curve PDA for a token.

        Args:
            mint: Token mint address

        Returns:
            Bonding curve address
        """
        bonding_curve, _ = derive_address(
            [b"bonding-curve", bytes(mint)], PumpFunAddresses.PROGRAM
        )
        return bonding_curve

    def derive_associated_bonding_curve(
        self,
        mint: Pubkey,
        bonding_curve: Pubkey,
        token_program: Pubkey = TOKEN_2022_PROGRAM,
    ) -> Pubkey:
        """Derive the token account that holds the curve's token reserves."""
        return get_associated_token_address(bonding_curve, mint, token_program)

    def derive_user_token_account(
        self, user: Pubkey, mint: Pubkey, token_program: Pubkey = TOKEN_2022_PROGRAM
    ) -> Pubkey:
        """Derive user's associated token account address.

        Args:
            user: User's wallet address
            mint: Token mint address
            token_program: Token program owning the mint

        Returns:
            User's associated token account address
        """
        return get_associated_token_address(user, mint, token_program)

    def derive_creator_vault(self, creator: Pubkey) -> Pubkey:
        """Derive the creator vault address.

        Args:
            creator: Creator address

        Returns:
            Creator vault address
        """
        creator_vault, _ = derive_address(
            [b"creator-vault", bytes(creator)], PumpFunAddresses.PROGRAM
        )
        return creator_vault

    def derive_event_authority(self) -> Pubkey:
        event_authority, _ = derive_address(
            [b"__event_authority"], PumpFunAddresses.PROGRAM
        )
        return event_authority

    def derive_global_volume_accumulator(self) -> Pubkey:
        """Derive the global volume accumulator PDA.

        Returns:
            Global volume accumulator address
        """
        derived_address, _ = derive_address(
            [b"global_volume_accumulator"], PumpFunAddresses.PROGRAM
        )
        return derived_address

    def derive_user_volume_accumulator(self, user: Pubkey) -> Pubkey:
        """Derive the user volume accumulator PDA.

        Args:
            user: User address

        Returns:
            User volume accumulator address
        """
        derived_address, _ = derive_address(
            [b"user_volume_accumulator", bytes(user)], PumpFunAddresses.PROGRAM
        )
        return derived_address

    def derive_fee_config(self) -> Pubkey:
        """Derive the fee config PDA, owned by the pump.fun fee program."""
        fee_config, _ = derive_address(
            [b"fee_config", bytes(PumpFunAddresses.PROGRAM)],
            PumpFunAddresses.FEE_PROGRAM,
        )
        return fee_config

    def get_buy_instruction_accounts(
        self,
        mint: Pubkey,
        user: Pubkey,
        creator: Pubkey,
        token_program: Pubkey = TOKEN_2022_PROGRAM,
    ) -> dict[str, Pubkey]:
        """Get all accounts needed for a buy instruction.

        Args:
            mint: Token mint address
            user: User's wallet address
            creator: Creator recorded on the bonding curve
            token_program: Token program owning the mint

        Returns:
            Dictionary of account addresses for buy instruction
        """
        bonding_curve = self.derive_bonding_curve(mint)
        return {
            "global": PumpFunAddresses.GLOBAL,
            "fee": PumpFunAddresses.FEE,
            "mint": mint,
            "bonding_curve": bonding_curve,
            "associated_bonding_curve": self.derive_associated_bonding_curve(
                mint, bonding_curve, token_program
            ),
            "user_token_account": self.derive_user_token_account(
                user, mint, token_program
            ),
            "user": user,
            "system_program": SystemAddresses.SYSTEM_PROGRAM,
            "token_program": token_program,
            "creator_vault": self.derive_creator_vault(creator),
            "event_authority": PumpFunAddresses.EVENT_AUTHORITY,
            "program": PumpFunAddresses.PROGRAM,
            "global_volume_accumulator": self.derive_global_volume_accumulator(),
            "user_volume_accumulator": self.derive_user_volume_accumulator(user),
            "fee_config": self.derive_fee_config(),
            "fee_program": PumpFunAddresses.FEE_PROGRAM,
        }

    def get_sell_instruction_accounts(
        self,
        mint: Pubkey,
        user: Pubkey,
        token_program: Pubkey = TOKEN_2022_PROGRAM,
    ) -> dict[str, Pubkey]:
        """Get all accounts needed for a sell instruction."""
        bonding_curve = self.derive_bonding_curve(mint)
        return {
            "global": PumpFunAddresses.GLOBAL,
            "fee": PumpFunAddresses.FEE,
            "mint": mint,
            "bonding_curve": bonding_curve,
            "associated_bonding_curve": self.derive_associated_bonding_curve(
                mint, bonding_curve, token_program
            ),
            "user_token_account": self.derive_user_token_account(
                user, mint, token_program
            ),
            "user": user,
            "system_program": SystemAddresses.SYSTEM_PROGRAM,
            "token_program": token_program,
            "event_authority": PumpFunAddresses.EVENT_AUTHORITY,
            "program": PumpFunAddresses.PROGRAM,
        }

    def get_claim_instruction_accounts(self, creator: Pubkey) -> dict[str, Pubkey]:
        """Get all accounts needed to collect creator fees."""
        return {
            "creator": creator,
            "creator_vault": self.derive_creator_vault(creator),
            "system_program": SystemAddresses.SYSTEM_PROGRAM,
            "event_authority": self.derive_event_authority(),
            "program": PumpFunAddresses.PROGRAM,
        }
