"""Tests for the allowance sequencer."""

import pytest
from eth_abi import encode

from xyra.errors import AllowanceFailure, RevertedOnChain, SubmissionFailure
from xyra.lending.abis import ERC20_ALLOWANCE, ERC20_APPROVE, ERC20_BALANCE_OF, ERC20_DECIMALS
from xyra.lending.allowance import AllowanceSequencer

from conftest import POOL, TOKEN, FakeEVMProvider


def uint(value: int) -> bytes:
    return encode(["uint256"], [value])


def provider_with_allowance(current: int) -> FakeEVMProvider:
    return FakeEVMProvider(7001, call_responses={ERC20_ALLOWANCE.selector: uint(current)})


class TestAllowanceSequencer:
    """Tests for approve-before-act sequencing."""

    @pytest.mark.asyncio
    async def test_sufficient_allowance_skips_approval(self):
        """Test no transaction is sent when the allowance already covers the amount."""
        provider = provider_with_allowance(1_000)
        sequencer = AllowanceSequencer(provider)

        assert await sequencer.ensure_allowance(TOKEN, POOL, 1_000) is None
        assert provider.sent == []

    @pytest.mark.asyncio
    async def test_reads_allowance_for_wallet_and_spender(self):
        provider = provider_with_allowance(1_000)
        await AllowanceSequencer(provider).ensure_allowance(TOKEN, POOL, 10)

        to, data = provider.calls[0]
        owner, spender = ERC20_ALLOWANCE.decode_input(data)
        assert to == TOKEN
        assert owner.lower() == provider.address
        assert spender.lower() == POOL

    @pytest.mark.asyncio
    async def test_insufficient_allowance_approves_exact_amount(self):
        """Test approval is for exactly the amount, never unlimited."""
        provider = provider_with_allowance(5)
        sequencer = AllowanceSequencer(provider, confirmations=1)

        handle = await sequencer.ensure_allowance(TOKEN, POOL, 10**17)

        assert len(provider.sent) == 1
        tx = provider.sent[0]
        spender, amount = ERC20_APPROVE.decode_input(tx["data"])
        assert tx["to"] == TOKEN
        assert tx["value"] == 0
        assert spender.lower() == POOL
        assert amount == 10**17
        assert provider.waited == [(handle.tx_hash, 1)]

    @pytest.mark.asyncio
    async def test_rejected_approval(self):
        provider = provider_with_allowance(0)
        provider.send_errors[0] = SubmissionFailure("user rejected")

        with pytest.raises(AllowanceFailure) as exc_info:
            await AllowanceSequencer(provider).ensure_allowance(TOKEN, POOL, 1)
        assert exc_info.value.retryable

    @pytest.mark.asyncio
    async def test_reverted_approval(self):
        provider = provider_with_allowance(0)
        provider.wait_errors[0] = RevertedOnChain("reverted", tx_hash="0xabc")

        with pytest.raises(AllowanceFailure) as exc_info:
            await AllowanceSequencer(provider).ensure_allowance(TOKEN, POOL, 1)
        assert exc_info.value.tx_hash == "0xabc"

    @pytest.mark.asyncio
    async def test_token_reads(self):
        provider = FakeEVMProvider(7001, call_responses={
            ERC20_BALANCE_OF.selector: uint(123),
            ERC20_DECIMALS.selector: encode(["uint8"], [6]),
        })
        sequencer = AllowanceSequencer(provider)

        assert await sequencer.balance_of(TOKEN, provider.address) == 123
        assert await sequencer.decimals(TOKEN) == 6
