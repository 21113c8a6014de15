"""Pytest configuration and fixtures."""

import os
from typing import Optional

import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "false"
os.environ["LENDING_POOL_ADDRESS"] = "0x1111111111111111111111111111111111111111"
os.environ.pop("WALLET_PRIVATE_KEY", None)
os.environ.pop("WALLET_SEED_PHRASE", None)

from xyra.config import Settings
from xyra.wallet.base import TransactionHandle
from xyra.wallet.evm import EVMProvider

POOL = "0x1111111111111111111111111111111111111111"
WALLET = "0x2222222222222222222222222222222222222222"
TOKEN = "0x3333333333333333333333333333333333333333"
COUNTER_TOKEN = "0x4444444444444444444444444444444444444444"

TEST_PRIVATE_KEY = "0x" + "11" * 32
TEST_MNEMONIC = (
    "abandon abandon abandon abandon abandon abandon "
    "abandon abandon abandon abandon abandon about"
)

SOLANA_ADDRESS = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class FakeEVMProvider:
    """In-memory stand-in for EVMProvider.

    Records every call and submission; each submitted tx is confirmed to
    exactly the depth asked for.
    """

    def __init__(self, chain_id: int, address: str = WALLET, call_responses: Optional[dict] = None):
        self.chain_id = chain_id
        self.address = address
        self.call_responses = call_responses or {}
        self.calls: list[tuple[str, bytes]] = []
        self.sent: list[dict] = []
        self.waited: list[tuple[str, int]] = []
        self.send_errors: dict[int, Exception] = {}
        self.wait_errors: dict[int, Exception] = {}

    async def get_chain_id(self) -> int:
        return self.chain_id

    async def call(self, to: str, data: bytes) -> bytes:
        self.calls.append((to, data))
        return self.call_responses[data[:4]]

    async def send_transaction(self, to: str, data: bytes, value: int = 0) -> str:
        index = len(self.sent)
        if index in self.send_errors:
            raise self.send_errors[index]
        self.sent.append({"to": to, "data": data, "value": value})
        return "0x" + f"{index + 1:064x}"

    async def wait_for_confirmation(self, tx_hash: str, confirmations: int = 1) -> TransactionHandle:
        index = len(self.waited)
        self.waited.append((tx_hash, confirmations))
        if index in self.wait_errors:
            raise self.wait_errors[index]
        return TransactionHandle(tx_hash=tx_hash, confirmations=confirmations, block_number=100 + index)


@pytest.fixture
def settings() -> Settings:
    """Settings with a test pool and signing key."""
    return Settings(lending_pool_address=POOL, wallet_private_key=TEST_PRIVATE_KEY)


@pytest.fixture(autouse=True)
def clear_nonce_cache():
    """Nonce cache is class-level; isolate tests from each other."""
    EVMProvider._nonce_cache.clear()
    yield
    EVMProvider._nonce_cache.clear()
