"""Settlement (lending pool) contract client.

Typed action calls take the beneficiary as the UniversalIdentity struct.
Views are thin pass-throughs: rates, collateral and health are computed by the
contract, never here.
"""

import logging
from typing import Callable, Optional

from eth_utils import to_checksum_address

from xyra.identity.universal import UniversalIdentity
from xyra.lending.abis import (
    POOL_BORROW,
    POOL_GET_HEALTH_FACTOR,
    POOL_GET_MAX_WITHDRAWABLE,
    POOL_GET_USER_SHARES,
    POOL_GET_USER_TOTAL_COLLATERAL,
    POOL_GET_USER_TOTAL_DEBT,
    POOL_GET_USER_UNDERLYING_BALANCE,
    POOL_REPAY,
    POOL_SUPPLY,
    POOL_WITHDRAW,
    ContractFunction,
)
from xyra.lending.payload import ActionKind
from xyra.wallet.base import TransactionHandle

logger = logging.getLogger(__name__)

ACTION_FUNCTIONS: dict[ActionKind, ContractFunction] = {
    ActionKind.SUPPLY: POOL_SUPPLY,
    ActionKind.BORROW: POOL_BORROW,
    ActionKind.WITHDRAW: POOL_WITHDRAW,
    ActionKind.REPAY: POOL_REPAY,
}


class SettlementClient:
    """Client for the lending pool on the settlement chain."""

    def __init__(self, provider, pool_address: str, confirmations: int = 1):
        if not pool_address:
            raise ValueError("LENDING_POOL_ADDRESS not configured")
        self.provider = provider
        self.pool_address = to_checksum_address(pool_address)
        self.confirmations = confirmations

    # ======================
    # Typed actions
    # ======================

    async def execute(
        self,
        kind: ActionKind,
        asset: str,
        amount: int,
        on_behalf_of: UniversalIdentity,
        on_submitted: Optional[Callable[[str], None]] = None,
    ) -> TransactionHandle:
        """Call the pool method for ``kind`` and wait for it to be mined."""
        function = ACTION_FUNCTIONS[ActionKind(kind)]
        data = function.encode_call(to_checksum_address(asset), amount, on_behalf_of.as_abi_tuple())

        logger.info(
            f"Pool {function.name}({asset}, {amount}) for chain {on_behalf_of.origin_chain_id} "
            f"identity {on_behalf_of.identity_hex}"
        )
        tx_hash = await self.provider.send_transaction(self.pool_address, data)
        if on_submitted is not None:
            on_submitted(tx_hash)
        return await self.provider.wait_for_confirmation(tx_hash, self.confirmations)

    async def supply(self, asset: str, amount: int, on_behalf_of: UniversalIdentity) -> TransactionHandle:
        return await self.execute(ActionKind.SUPPLY, asset, amount, on_behalf_of)

    async def borrow(self, asset: str, amount: int, on_behalf_of: UniversalIdentity) -> TransactionHandle:
        return await self.execute(ActionKind.BORROW, asset, amount, on_behalf_of)

    async def withdraw(self, asset: str, amount: int, on_behalf_of: UniversalIdentity) -> TransactionHandle:
        return await self.execute(ActionKind.WITHDRAW, asset, amount, on_behalf_of)

    async def repay(self, asset: str, amount: int, on_behalf_of: UniversalIdentity) -> TransactionHandle:
        return await self.execute(ActionKind.REPAY, asset, amount, on_behalf_of)

    # ======================
    # Views
    # ======================

    async def _view(self, function: ContractFunction, *args) -> int:
        data = await self.provider.call(self.pool_address, function.encode_call(*args))
        return function.decode_output(data)[0]

    async def get_user_shares(self, user: UniversalIdentity, asset: str) -> int:
        return await self._view(POOL_GET_USER_SHARES, user.user_id, to_checksum_address(asset))

    async def get_underlying_balance(self, user: UniversalIdentity, asset: str) -> int:
        return await self._view(
            POOL_GET_USER_UNDERLYING_BALANCE, user.as_abi_tuple(), to_checksum_address(asset)
        )

    async def get_total_collateral_usd(self, user: UniversalIdentity) -> int:
        return await self._view(POOL_GET_USER_TOTAL_COLLATERAL, user.user_id)

    async def get_total_debt_usd(self, user: UniversalIdentity) -> int:
        return await self._view(POOL_GET_USER_TOTAL_DEBT, user.user_id)

    async def get_health_factor(self, user: UniversalIdentity) -> int:
        return await self._view(POOL_GET_HEALTH_FACTOR, user.user_id)

    async def get_max_withdrawable(self, user: UniversalIdentity, asset: str) -> int:
        return await self._view(POOL_GET_MAX_WITHDRAWABLE, user.user_id, to_checksum_address(asset))
