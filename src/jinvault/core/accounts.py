"""
Program-derived address derivation and SPL account layouts.

Everything here is pure: no RPC calls, same input gives the same output.
"""

import hashlib
import struct
from collections.abc import Sequence
from dataclasses import dataclass

from solders.pubkey import Pubkey

# SPL mint layout (shared by Token and Token-2022 base state)
# - mint_authority: COption<Pubkey> (4 + 32 bytes)
# - supply: u64 (8 bytes)
# - decimals: u8 (1 byte)
# - is_initialized: bool (1 byte)
# - freeze_authority: COption<Pubkey> (4 + 32 bytes)
MINT_SUPPLY_OFFSET = 36
MINT_DECIMALS_OFFSET = 44
MINT_MIN_SIZE = 82

# SPL token account layout
# - mint: Pubkey (32 bytes)
# - owner: Pubkey (32 bytes)
# - amount: u64 (8 bytes)
TOKEN_ACCOUNT_MIN_SIZE = 72


@dataclass(frozen=True)
class MintInfo:
    """Decoded SPL mint."""

    supply: int
    decimals: int
    token_program: Pubkey | None = None

    @property
    def ui_supply(self) -> float:
        """Supply in decimal form."""
        return self.supply / 10**self.decimals


@dataclass(frozen=True)
class TokenAccountInfo:
    """Decoded SPL token account."""

    mint: Pubkey
    owner: Pubkey
    amount: int


def derive_address(seeds: Sequence[bytes], program_id: Pubkey) -> tuple[Pubkey, int]:
    """Derive a program-derived address.

    Args:
        seeds: Seed byte strings
        program_id: Program owning the derived address

    Returns:
        Tuple of (address, bump seed)
    """
    return Pubkey.find_program_address(list(seeds), program_id)


def anchor_discriminator(name: str, namespace: str = "global") -> bytes:
    """Compute an Anchor discriminator (first 8 bytes of sha256("namespace:name")).

    Args:
        name: Instruction or account name
        namespace: "global" for instructions, "account" for accounts

    Returns:
        8-byte discriminator
    """
    return hashlib.sha256(f"{namespace}:{name}".encode()).digest()[:8]


def decode_mint(data: bytes, token_program: Pubkey | None = None) -> MintInfo:
    """Decode supply and decimals from raw mint account data.

    Raises:
        ValueError: If data is shorter than a mint account
    """
    if len(data) < MINT_MIN_SIZE:
        raise ValueError(f"Mint data too short: {len(data)} bytes")

    supply = struct.unpack_from("<Q", data, MINT_SUPPLY_OFFSET)[0]
    decimals = data[MINT_DECIMALS_OFFSET]
    return MintInfo(supply=supply, decimals=decimals, token_program=token_program)


def decode_token_account(data: bytes) -> TokenAccountInfo:
    """Decode mint, owner and amount from raw token account data.

    Raises:
        ValueError: If data is shorter than a token account
    """
    if len(data) < TOKEN_ACCOUNT_MIN_SIZE:
        raise ValueError(f"Token account data too short: {len(data)} bytes")

    return TokenAccountInfo(
        mint=Pubkey.from_bytes(data[0:32]),
        owner=Pubkey.from_bytes(data[32:64]),
        amount=struct.unpack_from("<Q", data, 64)[0],
    )

