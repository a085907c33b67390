"""Builders for raw account data used across tests."""

import struct
from types import SimpleNamespace

from solders.pubkey import Pubkey

from jinvault.platforms.pumpfun.curve_manager import CURVE_DISCRIMINATOR


def make_curve_bytes(
    virtual_token_reserves: int = 1_073_000_000_000_000,
    virtual_sol_reserves: int = 30_000_000_000,
    real_token_reserves: int = 793_100_000_000_000,
    real_sol_reserves: int = 0,
    token_total_supply: int = 1_000_000_000_000_000,
    complete: bool = False,
    creator: Pubkey | None = None,
) -> bytes:
    """Raw bonding curve account data; omit `creator` for the short layout."""
    data = CURVE_DISCRIMINATOR + struct.pack(
        "<5Q",
        virtual_token_reserves,
        virtual_sol_reserves,
        real_token_reserves,
        real_sol_reserves,
        token_total_supply,
    ) + bytes([1 if complete else 0])
    if creator is not None:
        data += bytes(creator)
    return data


def make_mint_bytes(supply: int, decimals: int) -> bytes:
    data = bytearray(82)
    struct.pack_into("<Q", data, 36, supply)
    data[44] = decimals
    data[45] = 1
    return bytes(data)


def make_token_account_bytes(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    data = bytearray(165)
    data[0:32] = bytes(mint)
    data[32:64] = bytes(owner)
    struct.pack_into("<Q", data, 64, amount)
    return bytes(data)


def make_account(data: bytes = b"", lamports: int = 0, owner: Pubkey | None = None):
    """Stand-in for an RPC account: only the fields the client reads."""
    return SimpleNamespace(data=data, lamports=lamports, owner=owner or Pubkey.default())
