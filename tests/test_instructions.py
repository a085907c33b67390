"""Tests for pump.fun and PumpSwap instruction encoding."""

import struct

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from jinvault.core.pubkeys import SOL_MINT, SYSTEM_PROGRAM, TOKEN_2022_PROGRAM, TOKEN_PROGRAM
from jinvault.platforms.pumpfun.address_provider import PumpFunAddresses, PumpFunAddressProvider
from jinvault.platforms.pumpfun.instruction_builder import (
    BUY_DISCRIMINATOR,
    COLLECT_CREATOR_FEE_DISCRIMINATOR,
    SELL_DISCRIMINATOR,
    PumpFunInstructionBuilder,
)
from jinvault.platforms.pumpswap.address_provider import PumpSwapAddresses, PumpSwapAddressProvider
from jinvault.platforms.pumpswap.instruction_builder import (
    COLLECT_COIN_CREATOR_FEE_DISCRIMINATOR,
    PumpSwapInstructionBuilder,
)


def _flags(ix):
    return [(meta.is_signer, meta.is_writable) for meta in ix.accounts]


class TestPumpFunBuy:

    def test_data_layout(self, mint):
        user, creator = Pubkey.new_unique(), Pubkey.new_unique()
        ix = PumpFunInstructionBuilder().build_buy_instruction(
            mint, user, creator, token_amount=123_456, max_sol_cost=1_100_000_000
        )

        data = bytes(ix.data)
        assert len(data) == 25
        assert data[:8] == BUY_DISCRIMINATOR
        assert struct.unpack_from("<QQ", data, 8) == (123_456, 1_100_000_000)
        assert data[24] == 0
        assert ix.program_id == PumpFunAddresses.PROGRAM

    def test_account_order(self, mint):
        user, creator = Pubkey.new_unique(), Pubkey.new_unique()
        provider = PumpFunAddressProvider()
        ix = PumpFunInstructionBuilder(provider).build_buy_instruction(mint, user, creator, 1, 1)
        bonding_curve = provider.derive_bonding_curve(mint)

        keys = [meta.pubkey for meta in ix.accounts]
        assert len(keys) == 16
        assert keys[0] == PumpFunAddresses.GLOBAL
        assert keys[1] == PumpFunAddresses.FEE
        assert keys[2] == mint
        assert keys[3] == bonding_curve
        assert keys[4] == get_associated_token_address(bonding_curve, mint, TOKEN_2022_PROGRAM)
        assert keys[5] == get_associated_token_address(user, mint, TOKEN_2022_PROGRAM)
        assert keys[6] == user
        assert keys[7] == SYSTEM_PROGRAM
        assert keys[8] == TOKEN_2022_PROGRAM
        assert keys[9] == provider.derive_creator_vault(creator)
        assert keys[11] == PumpFunAddresses.PROGRAM
        assert keys[13] == provider.derive_user_volume_accumulator(user)
        assert keys[15] == PumpFunAddresses.FEE_PROGRAM

    def test_only_user_signs(self, mint):
        user = Pubkey.new_unique()
        ix = PumpFunInstructionBuilder().build_buy_instruction(mint, user, Pubkey.new_unique(), 1, 1)

        signers = [meta.pubkey for meta in ix.accounts if meta.is_signer]
        assert signers == [user]
        writable = {i for i, (_, w) in enumerate(_flags(ix)) if w}
        assert writable == {1, 3, 4, 5, 6, 9, 13}

    def test_classic_token_program(self, mint):
        user = Pubkey.new_unique()
        ix = PumpFunInstructionBuilder().build_buy_instruction(
            mint, user, Pubkey.new_unique(), 1, 1, token_program=TOKEN_PROGRAM
        )
        assert ix.accounts[8].pubkey == TOKEN_PROGRAM
        assert ix.accounts[5].pubkey == get_associated_token_address(user, mint)


class TestPumpFunSell:

    def test_data_and_accounts(self, mint):
        user = Pubkey.new_unique()
        ix = PumpFunInstructionBuilder().build_sell_instruction(
            mint, user, token_amount=5_000_000, min_sol_output=891_000
        )

        data = bytes(ix.data)
        assert len(data) == 24
        assert data[:8] == SELL_DISCRIMINATOR
        assert struct.unpack_from("<QQ", data, 8) == (5_000_000, 891_000)
        assert len(ix.accounts) == 11
        assert ix.accounts[6].pubkey == user
        assert ix.accounts[6].is_signer
        assert ix.accounts[10].pubkey == PumpFunAddresses.PROGRAM


class TestPumpFunCollect:

    def test_accounts(self):
        creator = Pubkey.new_unique()
        provider = PumpFunAddressProvider()
        ix = PumpFunInstructionBuilder(provider).build_collect_creator_fee_instruction(creator)

        assert bytes(ix.data) == COLLECT_CREATOR_FEE_DISCRIMINATOR
        assert [meta.pubkey for meta in ix.accounts] == [
            creator,
            provider.derive_creator_vault(creator),
            SYSTEM_PROGRAM,
            provider.derive_event_authority(),
            PumpFunAddresses.PROGRAM,
        ]
        assert _flags(ix)[0] == (True, True)
        assert _flags(ix)[1] == (False, True)

    def test_creator_vault_is_per_creator(self):
        provider = PumpFunAddressProvider()
        a, b = Pubkey.new_unique(), Pubkey.new_unique()
        assert provider.derive_creator_vault(a) != provider.derive_creator_vault(b)
        assert provider.derive_creator_vault(a) == provider.derive_creator_vault(a)


class TestPumpSwapClaim:

    def test_vault_ata_is_wsol_account_of_authority(self):
        creator = Pubkey.new_unique()
        provider = PumpSwapAddressProvider()
        authority = provider.derive_creator_vault_authority(creator)

        assert provider.derive_creator_vault_ata(creator) == get_associated_token_address(
            authority, SOL_MINT
        )

    def test_claim_sequence(self):
        creator = Pubkey.new_unique()
        instructions = PumpSwapInstructionBuilder().build_claim_instructions(creator)

        assert len(instructions) == 3
        create_ix, collect_ix, close_ix = instructions
        assert create_ix.program_id != PumpSwapAddresses.PROGRAM
        assert collect_ix.program_id == PumpSwapAddresses.PROGRAM
        assert close_ix.program_id == TOKEN_PROGRAM

        creator_wsol = get_associated_token_address(creator, SOL_MINT)
        assert close_ix.accounts[0].pubkey == creator_wsol
        assert close_ix.accounts[1].pubkey == creator

    def test_collect_instruction(self):
        creator = Pubkey.new_unique()
        provider = PumpSwapAddressProvider()
        ix = PumpSwapInstructionBuilder(provider).build_collect_creator_fee_instruction(creator)

        assert bytes(ix.data) == COLLECT_COIN_CREATOR_FEE_DISCRIMINATOR
        keys = [meta.pubkey for meta in ix.accounts]
        assert len(keys) == 8
        assert keys[0] == SOL_MINT
        assert keys[2] == creator
        assert keys[4] == provider.derive_creator_vault_ata(creator)
        assert keys[5] == get_associated_token_address(creator, SOL_MINT)
        assert keys[6] == PumpSwapAddresses.EVENT_AUTHORITY
        assert keys[7] == PumpSwapAddresses.PROGRAM
        assert [meta.pubkey for meta in ix.accounts if meta.is_signer] == [creator]
