"""Tests for CLI command dispatch."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from jinvault.cli import main, parse_args, run_command
from jinvault.interfaces.core import (
    ChainClient,
    ClaimResult,
    ClaimSource,
    HolderTiers,
    InitResult,
    SwapResult,
)


@pytest.fixture
def chain():
    chain = MagicMock(spec=ChainClient)
    chain.initialize = AsyncMock(return_value=InitResult(ready=True))
    chain.get_wallet_address.return_value = "wallet"
    chain.get_sol_balance = AsyncMock(return_value=2_500_000_000)
    chain.get_token_balance = AsyncMock(return_value=1_500_000)
    chain.get_holders_by_tier = AsyncMock(return_value=HolderTiers())
    chain.claim_fees = AsyncMock(
        return_value=ClaimResult(success=True, amount=10, source=ClaimSource.AMM)
    )
    chain.buyback = AsyncMock(return_value=SwapResult(success=True))
    chain.sell_token = AsyncMock(return_value=SwapResult(success=False, error_message="x"))
    return chain


class TestRunCommand:

    @pytest.mark.asyncio
    async def test_status(self, chain, capsys):
        code = await run_command(parse_args(["status"]), {}, chain)

        assert code == 0
        payload = json.loads(capsys.readouterr().out)
        assert payload["sol_balance"] == 2.5
        assert payload["token_balance"] == 1.5
        assert payload["admin_login"] is False

    @pytest.mark.asyncio
    async def test_status_reports_admin_login(self, chain, capsys):
        await run_command(parse_args(["status"]), {"admin": {"password": "secret"}}, chain)

        assert json.loads(capsys.readouterr().out)["admin_login"] is True

    @pytest.mark.asyncio
    async def test_claim_serializes_enum(self, chain, capsys):
        assert await run_command(parse_args(["claim"]), {}, chain) == 0
        assert json.loads(capsys.readouterr().out)["source"] == "amm"

    @pytest.mark.asyncio
    async def test_buyback_converts_sol(self, chain):
        await run_command(parse_args(["buyback", "--sol", "0.25"]), {}, chain)
        chain.buyback.assert_awaited_once_with(250_000_000)

    @pytest.mark.asyncio
    async def test_sell_failure_exit_code(self, chain):
        code = await run_command(parse_args(["sell", "--amount", "3"]), {}, chain)

        assert code == 1
        chain.sell_token.assert_awaited_once_with(3_000_000)


@pytest.mark.asyncio
async def test_main_reports_bad_config(tmp_path):
    args = parse_args(["--config", str(tmp_path / "missing.yaml"), "status"])
    assert await main(args) == 2
