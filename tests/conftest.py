"""Shared fixtures for the distributor test suite."""

from unittest.mock import AsyncMock, MagicMock

import base58
import pytest
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.core.wallet import Wallet


@pytest.fixture
def keypair() -> Keypair:
    return Keypair()


@pytest.fixture
def private_key(keypair) -> str:
    return base58.b58encode(bytes(keypair)).decode()


@pytest.fixture
def wallet(keypair) -> Wallet:
    return Wallet.from_keypair(keypair)


@pytest.fixture
def mint() -> Pubkey:
    return Pubkey.new_unique()


@pytest.fixture
def mock_client() -> MagicMock:
    """SolanaClient with every network method replaced by an AsyncMock."""
    client = MagicMock(spec=SolanaClient)
    client.get_balance = AsyncMock(return_value=0)
    client.get_account_info = AsyncMock(return_value=None)
    client.get_minimum_balance_for_rent_exemption = AsyncMock(return_value=890_880)
    client.get_mint_info = AsyncMock(return_value=None)
    client.get_token_account = AsyncMock(return_value=None)
    client.get_token_account_balance = AsyncMock(return_value=0)
    client.get_token_largest_accounts = AsyncMock(return_value=[])
    client.build_and_send_transaction = AsyncMock(return_value="sig")
    client.send_and_confirm = AsyncMock(return_value="sig")
    client.close = AsyncMock()
    return client
