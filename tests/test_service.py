"""Tests for chain client selection and initialization."""

from unittest.mock import AsyncMock

import pytest
from solders.pubkey import Pubkey

from jinvault.auth.sessions import DEFAULT_SESSION_TTL
from jinvault.interfaces.core import DistributionConfig, SwapDirection, SwapResult
from jinvault.platforms.pumpfun.address_provider import PumpFunAddressProvider
from jinvault.service import (
    DISABLED_MESSAGE,
    DisabledChainClient,
    SolanaChainClient,
    create_chain_client,
    create_session_manager,
)


def _client(private_key, token_mint, **kwargs):
    return SolanaChainClient("http://localhost:8899", private_key, token_mint, **kwargs)


class TestInitialize:

    @pytest.mark.asyncio
    async def test_ready(self, private_key, keypair, mint):
        client = _client(private_key, str(mint), holders_limit=10)

        init = await client.initialize()

        assert init.ready
        assert client.get_wallet_address() == str(keypair.pubkey())
        bonding_curve = PumpFunAddressProvider().derive_bonding_curve(mint)
        assert client.classifier.excluded_owners == {keypair.pubkey(), bonding_curve}
        assert client.classifier.limit == 10

    @pytest.mark.asyncio
    async def test_idempotent(self, private_key, mint):
        client = _client(private_key, str(mint))
        await client.initialize()
        orchestrator = client.orchestrator

        assert (await client.initialize()).ready
        assert client.orchestrator is orchestrator

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "key,mint_address,error",
        [
            (None, "mint", "private_key not configured"),
            ("key", None, "token_mint not configured"),
            ("not-a-key", str(Pubkey.default()), "Invalid wallet private key or token address"),
        ],
    )
    async def test_not_ready(self, key, mint_address, error):
        init = await _client(key, mint_address).initialize()
        assert not init.ready
        assert init.error == error

    @pytest.mark.asyncio
    async def test_invalid_mint(self, private_key):
        init = await _client(private_key, "xyz").initialize()
        assert init.error == "Invalid wallet private key or token address"

    @pytest.mark.asyncio
    async def test_operations_report_init_error(self):
        client = _client(None, None)

        assert (await client.claim_fees()).error_message == "private_key not configured"
        assert (await client.buyback(1)).error_message == "private_key not configured"
        assert (await client.execute_distribution()).error == "private_key not configured"
        assert await client.get_sol_balance() == 0
        assert (await client.get_holders_by_tier()).is_empty
        assert client.get_wallet_address() is None


class TestOperations:

    @pytest.mark.asyncio
    async def test_buyback_and_sell_go_through_router(self, private_key, mint):
        client = _client(private_key, str(mint))
        await client.initialize()
        client.router.quote_and_swap = AsyncMock(return_value=SwapResult(success=True))

        await client.buyback(5_000)
        await client.sell_token(7_000)

        calls = [call.args for call in client.router.quote_and_swap.await_args_list]
        assert calls == [(SwapDirection.BUY, 5_000), (SwapDirection.SELL, 7_000)]

    @pytest.mark.asyncio
    async def test_distribution_uses_configured_split(self, private_key, mint):
        split = DistributionConfig(major_holders_percentage=60, medium_holders_percentage=30)
        client = _client(private_key, str(mint), distribution=split)
        await client.initialize()
        client.orchestrator.execute = AsyncMock()

        await client.execute_distribution()

        client.orchestrator.execute.assert_awaited_once_with(split)


class TestReadFailures:

    @pytest.mark.asyncio
    async def test_sol_balance_rpc_error(self, private_key, mint):
        client = _client(private_key, str(mint))
        client.client.get_balance = AsyncMock(side_effect=ConnectionError("rpc down"))

        assert await client.get_sol_balance() == 0

    @pytest.mark.asyncio
    async def test_token_balance_rpc_error(self, private_key, mint):
        client = _client(private_key, str(mint))
        client.client.get_mint_info = AsyncMock(side_effect=ConnectionError("rpc down"))

        assert await client.get_token_balance() == 0

    @pytest.mark.asyncio
    async def test_holders_rpc_error(self, private_key, mint):
        client = _client(private_key, str(mint))
        await client.initialize()
        client.classifier.classify = AsyncMock(side_effect=ConnectionError("rpc down"))

        assert (await client.get_holders_by_tier()).is_empty


class TestDisabledClient:

    @pytest.mark.asyncio
    async def test_every_operation_disabled(self):
        client = DisabledChainClient()

        assert (await client.initialize()).error == DISABLED_MESSAGE
        assert (await client.claim_fees()).error_message == DISABLED_MESSAGE
        assert (await client.buyback(1)).error_message == DISABLED_MESSAGE
        assert (await client.sell_token(1)).error_message == DISABLED_MESSAGE
        assert (await client.execute_distribution()).error == DISABLED_MESSAGE
        assert await client.get_token_balance() == 0
        assert client.get_wallet_address() is None

    def test_factory(self):
        assert isinstance(create_chain_client({"enabled": False}), DisabledChainClient)

        client = create_chain_client(
            {
                "rpc_endpoint": "http://localhost:8899",
                "private_key": "key",
                "token_mint": "mint",
                "trade": {"buy_slippage_bps": 250},
                "holders": {"limit": 5},
            }
        )
        assert isinstance(client, SolanaChainClient)
        assert client.buy_slippage_bps == 250
        assert client.holders_limit == 5


class TestSessionManagerFactory:

    def test_reads_admin_section(self):
        manager = create_session_manager({"admin": {"password": "hunter2", "session_ttl": 60}})

        assert manager.enabled
        assert manager.ttl == 60
        assert manager.login("hunter2") is not None

    @pytest.mark.parametrize("cfg", [{}, {"admin": {"password": ""}}, {"admin": None}])
    def test_login_disabled_without_password(self, cfg):
        manager = create_session_manager(cfg)

        assert not manager.enabled
        assert manager.ttl == DEFAULT_SESSION_TTL
        assert manager.login("") is None
