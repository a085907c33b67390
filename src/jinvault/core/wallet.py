"""
Wallet management for Solana transactions.
"""

import base58
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from jinvault.core.pubkeys import TOKEN_PROGRAM


class Wallet:
    """Manages the creator wallet that claims fees and pays out rewards."""

    def __init__(self, private_key: str):
        """Initialize wallet from private key.

        Args:
            private_key: Base58 encoded private key

        Raises:
            ValueError: If the key is not valid base58 or not a 64-byte keypair
        """
        self._keypair = self._load_keypair(private_key)

    @classmethod
    def from_keypair(cls, keypair: Keypair) -> "Wallet":
        """Wrap an already loaded keypair."""
        wallet = cls.__new__(cls)
        wallet._keypair = keypair
        return wallet

    @property
    def pubkey(self) -> Pubkey:
        """Get the public key of the wallet."""
        return self._keypair.pubkey()

    @property
    def keypair(self) -> Keypair:
        """Get the keypair for signing transactions."""
        return self._keypair

    def get_associated_token_address(
        self, mint: Pubkey, token_program: Pubkey = TOKEN_PROGRAM
    ) -> Pubkey:
        """Get the associated token account address for a mint.

        Args:
            mint: Token mint address
            token_program: Token program owning the mint

        Returns:
            Associated token account address
        """
        return get_associated_token_address(self.pubkey, mint, token_program)

    @staticmethod
    def _load_keypair(private_key: str) -> Keypair:
        """Load keypair from private key.

        Args:
            private_key: Base58 encoded private key

        Returns:
            Solana keypair
        """
        try:
            private_key_bytes = base58.b58decode(private_key)
            return Keypair.from_bytes(private_key_bytes)
        except Exception as e:
            raise ValueError(f"Invalid wallet private key: {e!s}") from e
