"""Tests for the lending pool client."""

import pytest
from eth_abi import encode

from xyra.identity import UniversalIdentity
from xyra.lending.abis import (
    POOL_BORROW,
    POOL_GET_HEALTH_FACTOR,
    POOL_GET_MAX_WITHDRAWABLE,
    POOL_GET_USER_SHARES,
    POOL_GET_USER_TOTAL_COLLATERAL,
    POOL_GET_USER_TOTAL_DEBT,
    POOL_GET_USER_UNDERLYING_BALANCE,
    POOL_SUPPLY,
)
from xyra.lending.payload import ActionKind
from xyra.lending.settlement import SettlementClient

from conftest import POOL, SOLANA_ADDRESS, TOKEN, WALLET, FakeEVMProvider


def uint(value: int) -> bytes:
    return encode(["uint256"], [value])


class TestSettlementActions:
    """Tests for typed pool calls."""

    def test_requires_pool_address(self):
        with pytest.raises(ValueError):
            SettlementClient(FakeEVMProvider(7001), "")

    @pytest.mark.asyncio
    async def test_borrow_for_solana_identity(self):
        """Test the beneficiary struct carries the Solana key bytes and chain 901."""
        provider = FakeEVMProvider(7001)
        pool = SettlementClient(provider, POOL)
        beneficiary = UniversalIdentity.from_address(901, SOLANA_ADDRESS)

        handle = await pool.borrow(TOKEN, 1_000, beneficiary)

        tx = provider.sent[0]
        asset, amount, (chain_id, identity) = POOL_BORROW.decode_input(tx["data"])
        assert tx["to"].lower() == POOL
        assert tx["value"] == 0
        assert asset.lower() == TOKEN
        assert amount == 1_000
        assert chain_id == 901
        assert identity == beneficiary.identity_bytes
        assert provider.waited == [(handle.tx_hash, 1)]

    @pytest.mark.asyncio
    async def test_execute_dispatches_by_kind(self):
        provider = FakeEVMProvider(7001)
        pool = SettlementClient(provider, POOL)
        submitted = []

        await pool.execute(
            ActionKind.SUPPLY, TOKEN, 7, UniversalIdentity.from_address(7001, WALLET),
            on_submitted=submitted.append,
        )

        assert provider.sent[0]["data"][:4] == POOL_SUPPLY.selector
        assert len(submitted) == 1


class TestSettlementViews:
    """Tests for pass-through views."""

    @pytest.mark.asyncio
    async def test_views(self):
        provider = FakeEVMProvider(7001, call_responses={
            POOL_GET_USER_SHARES.selector: uint(11),
            POOL_GET_USER_UNDERLYING_BALANCE.selector: uint(22),
            POOL_GET_USER_TOTAL_COLLATERAL.selector: uint(33),
            POOL_GET_USER_TOTAL_DEBT.selector: uint(44),
            POOL_GET_HEALTH_FACTOR.selector: uint(55),
            POOL_GET_MAX_WITHDRAWABLE.selector: uint(66),
        })
        pool = SettlementClient(provider, POOL)
        user = UniversalIdentity.from_address(11155111, WALLET)

        assert await pool.get_user_shares(user, TOKEN) == 11
        assert await pool.get_underlying_balance(user, TOKEN) == 22
        assert await pool.get_total_collateral_usd(user) == 33
        assert await pool.get_total_debt_usd(user) == 44
        assert await pool.get_health_factor(user) == 55
        assert await pool.get_max_withdrawable(user, TOKEN) == 66

    @pytest.mark.asyncio
    async def test_views_key_by_user_id(self):
        provider = FakeEVMProvider(7001, call_responses={POOL_GET_HEALTH_FACTOR.selector: uint(1)})
        pool = SettlementClient(provider, POOL)
        user = UniversalIdentity.from_address(11155111, WALLET)

        await pool.get_health_factor(user)

        (user_id,) = POOL_GET_HEALTH_FACTOR.decode_input(provider.calls[0][1])
        assert user_id == user.user_id
