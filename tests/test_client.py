"""Tests for the RPC wrapper, with the solana-py client mocked out."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from solders.hash import Hash
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from jinvault.core.client import SolanaClient
from jinvault.core.errors import TransactionFailedError
from jinvault.core.pubkeys import TOKEN_2022_PROGRAM
from tests.helpers import make_account, make_mint_bytes

COMPUTE_BUDGET_PROGRAM = Pubkey.from_string("ComputeBudget111111111111111111111111111111")


@pytest.fixture
def rpc():
    rpc = MagicMock()
    rpc.get_account_info = AsyncMock(return_value=SimpleNamespace(value=None))
    rpc.get_latest_blockhash = AsyncMock(
        return_value=SimpleNamespace(value=SimpleNamespace(blockhash=Hash.default()))
    )
    rpc.confirm_transaction = AsyncMock(
        return_value=SimpleNamespace(value=[SimpleNamespace(err=None)])
    )
    return rpc


@pytest.fixture
def client(rpc):
    client = SolanaClient("http://localhost:8899")
    client._client = rpc
    return client


class TestSolanaClient:

    @pytest.mark.asyncio
    async def test_missing_token_account_has_zero_balance(self, client):
        assert await client.get_token_account_balance(Pubkey.new_unique()) == 0

    @pytest.mark.asyncio
    async def test_mint_info_records_token_program(self, client, rpc):
        account = make_account(make_mint_bytes(10**15, 6), owner=TOKEN_2022_PROGRAM)
        rpc.get_account_info.return_value = SimpleNamespace(value=account)

        info = await client.get_mint_info(Pubkey.new_unique())

        assert info.supply == 10**15
        assert info.decimals == 6
        assert info.token_program == TOKEN_2022_PROGRAM

    @pytest.mark.asyncio
    async def test_build_transaction_prepends_compute_budget(self, client, keypair):
        program = Pubkey.new_unique()
        instruction = Instruction(program, b"\x01", [])

        tx = await client.build_transaction(
            [instruction], keypair, compute_unit_limit=200_000, priority_fee=50_000
        )

        keys = tx.message.account_keys
        programs = [keys[ix.program_id_index] for ix in tx.message.instructions]
        assert programs == [COMPUTE_BUDGET_PROGRAM, COMPUTE_BUDGET_PROGRAM, program]
        assert keys[0] == keypair.pubkey()

    @pytest.mark.asyncio
    async def test_confirmed_with_error(self, client, rpc, keypair):
        rpc.send_raw_transaction = AsyncMock(
            return_value=SimpleNamespace(value=str(keypair.sign_message(b"tx")))
        )
        rpc.confirm_transaction.return_value = SimpleNamespace(
            value=[SimpleNamespace(err="InstructionError")]
        )
        tx = await client.build_transaction([Instruction(Pubkey.new_unique(), b"", [])], keypair)

        with pytest.raises(TransactionFailedError, match="InstructionError"):
            await client.send_and_confirm(tx)
