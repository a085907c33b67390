"""
Creator fee collection from the pump.fun and PumpSwap creator vaults.
"""

from jinvault.core.client import SolanaClient
from jinvault.core.pubkeys import LAMPORTS_PER_SOL
from jinvault.core.wallet import Wallet
from jinvault.interfaces.core import ClaimResult, ClaimSource
from jinvault.platforms.pumpfun.instruction_builder import PumpFunInstructionBuilder
from jinvault.platforms.pumpswap.instruction_builder import PumpSwapInstructionBuilder
from jinvault.utils.logger import get_logger

logger = get_logger(__name__)

PUMPFUN_CLAIM_COMPUTE_UNITS = 100_000
PUMPFUN_CLAIM_PRIORITY_FEE = 100_000
PUMPSWAP_CLAIM_COMPUTE_UNITS = 150_000
PUMPSWAP_CLAIM_PRIORITY_FEE = 50_000


class FeeClaimer:
    """Claims whichever creator vault holds fees.

    The bonding curve vault is checked first; the AMM vault only when the
    first one is missing or empty. Two empty vaults is a successful claim of
    zero.
    """

    def __init__(self, client: SolanaClient, wallet: Wallet):
        self.client = client
        self.wallet = wallet
        self.pumpfun_builder = PumpFunInstructionBuilder()
        self.pumpswap_builder = PumpSwapInstructionBuilder()

    async def claim_fees(self) -> ClaimResult:
        """Claim accumulated creator fees.

        Returns:
            ClaimResult with the claimed amount in lamports
        """
        try:
            creator = self.wallet.pubkey
            creator_vault = self.pumpfun_builder.address_provider.derive_creator_vault(creator)
            logger.debug(f"Creator vault PDA: {creator_vault}")

            vault = await self.client.get_account_info(creator_vault)
            if vault is None:
                logger.info("Creator vault not found, checking PumpSwap...")
                return await self._claim_pumpswap_fees()

            rent_exempt = await self.client.get_minimum_balance_for_rent_exemption(0)
            claimable = vault.lamports - rent_exempt
            if claimable <= 0:
                logger.info("No fees in pump.fun vault, checking PumpSwap...")
                return await self._claim_pumpswap_fees()

            logger.info(
                f"Creator vault balance: {claimable / LAMPORTS_PER_SOL:.6f} SOL (claimable)"
            )

            instruction = self.pumpfun_builder.build_collect_creator_fee_instruction(creator)
            signature = await self.client.build_and_send_transaction(
                [instruction],
                self.wallet.keypair,
                compute_unit_limit=PUMPFUN_CLAIM_COMPUTE_UNITS,
                priority_fee=PUMPFUN_CLAIM_PRIORITY_FEE,
            )

            logger.info(f"Fees claimed successfully: {signature}")
            return ClaimResult(
                success=True,
                amount=claimable,
                signature=signature,
                source=ClaimSource.BONDING_CURVE,
            )
        except Exception as e:
            logger.exception("Error claiming pump.fun fees")
            return ClaimResult(success=False, error_message=str(e))

    async def _claim_pumpswap_fees(self) -> ClaimResult:
        try:
            creator = self.wallet.pubkey
            vault_ata = self.pumpswap_builder.address_provider.derive_creator_vault_ata(creator)

            vault = await self.client.get_token_account(vault_ata)
            if vault is None or vault.amount == 0:
                logger.info("PumpSwap creator vault not found or empty")
                return ClaimResult(success=True, amount=0)

            logger.info(f"PumpSwap vault balance: {vault.amount / LAMPORTS_PER_SOL} SOL")

            instructions = self.pumpswap_builder.build_claim_instructions(creator)
            signature = await self.client.build_and_send_transaction(
                instructions,
                self.wallet.keypair,
                compute_unit_limit=PUMPSWAP_CLAIM_COMPUTE_UNITS,
                priority_fee=PUMPSWAP_CLAIM_PRIORITY_FEE,
            )

            logger.info(f"PumpSwap fees claimed: {signature}")
            return ClaimResult(
                success=True,
                amount=vault.amount,
                signature=signature,
                source=ClaimSource.AMM,
            )
        except Exception as e:
            logger.exception("Error claiming PumpSwap fees")
            return ClaimResult(success=False, error_message=str(e))
