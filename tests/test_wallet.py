"""Tests for wallet loading."""

import pytest
from solders.keypair import Keypair

from jinvault.core.pubkeys import TOKEN_2022_PROGRAM
from jinvault.core.wallet import Wallet


class TestWallet:

    def test_from_base58(self, private_key, keypair):
        wallet = Wallet(private_key)
        assert wallet.pubkey == keypair.pubkey()

    @pytest.mark.parametrize("key", ["", "0OIl", "3yZe7d"])
    def test_invalid_key(self, key):
        with pytest.raises(ValueError, match="Invalid wallet private key"):
            Wallet(key)

    def test_ata_depends_on_token_program(self, mint):
        wallet = Wallet.from_keypair(Keypair())
        assert wallet.get_associated_token_address(mint) != wallet.get_associated_token_address(
            mint, TOKEN_2022_PROGRAM
        )
