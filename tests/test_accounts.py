"""Tests for PDA derivation and SPL account decoding."""

import hashlib

import pytest
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address as spl_ata

from jinvault.core.accounts import (
    MintInfo,
    anchor_discriminator,
    decode_mint,
    decode_token_account,
    derive_address,
)
from jinvault.core.pubkeys import TOKEN_2022_PROGRAM
from jinvault.platforms.pumpfun.address_provider import PumpFunAddresses, PumpFunAddressProvider
from jinvault.platforms.pumpfun.instruction_builder import (
    BUY_DISCRIMINATOR,
    SELL_DISCRIMINATOR,
)
from tests.helpers import make_mint_bytes, make_token_account_bytes


class TestDeriveAddress:

    def test_is_deterministic(self):
        mint = Pubkey.new_unique()
        first = derive_address([b"bonding-curve", bytes(mint)], PumpFunAddresses.PROGRAM)
        second = derive_address([b"bonding-curve", bytes(mint)], PumpFunAddresses.PROGRAM)
        assert first == second

    def test_matches_solders(self):
        mint = Pubkey.new_unique()
        seeds = [b"bonding-curve", bytes(mint)]
        assert derive_address(seeds, PumpFunAddresses.PROGRAM) == Pubkey.find_program_address(
            seeds, PumpFunAddresses.PROGRAM
        )

    def test_address_is_off_curve(self):
        address, _ = derive_address([b"creator-vault", bytes(Pubkey.new_unique())], PumpFunAddresses.PROGRAM)
        assert not address.is_on_curve()


class TestAnchorDiscriminator:

    def test_pumpfun_instruction_discriminators(self):
        assert anchor_discriminator("buy") == BUY_DISCRIMINATOR
        assert anchor_discriminator("sell") == SELL_DISCRIMINATOR

    def test_account_namespace(self):
        expected = hashlib.sha256(b"account:BondingCurve").digest()[:8]
        assert anchor_discriminator("BondingCurve", "account") == expected


class TestAssociatedTokenAddress:

    def test_user_account_defaults_to_token_2022(self):
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        provider = PumpFunAddressProvider()
        assert provider.derive_user_token_account(owner, mint) == spl_ata(
            owner, mint, TOKEN_2022_PROGRAM
        )

    def test_wallet_account_follows_token_program(self, wallet):
        mint = Pubkey.new_unique()
        assert wallet.get_associated_token_address(mint) == spl_ata(wallet.pubkey, mint)
        assert wallet.get_associated_token_address(mint, TOKEN_2022_PROGRAM) == spl_ata(
            wallet.pubkey, mint, TOKEN_2022_PROGRAM
        )


class TestDecodeMint:

    def test_decodes_supply_and_decimals(self):
        info = decode_mint(make_mint_bytes(1_000_000_000_000_000, 6), TOKEN_2022_PROGRAM)
        assert info == MintInfo(
            supply=1_000_000_000_000_000, decimals=6, token_program=TOKEN_2022_PROGRAM
        )
        assert info.ui_supply == 1_000_000_000

    def test_too_short_raises(self):
        with pytest.raises(ValueError):
            decode_mint(b"\x00" * 40)


class TestDecodeTokenAccount:

    def test_decodes_fields(self):
        mint, owner = Pubkey.new_unique(), Pubkey.new_unique()
        info = decode_token_account(make_token_account_bytes(mint, owner, 42))
        assert (info.mint, info.owner, info.amount) == (mint, owner, 42)

    def test_too_short_raises(self):
        with pytest.raises(ValueError):
            decode_token_account(b"\x00" * 64)
