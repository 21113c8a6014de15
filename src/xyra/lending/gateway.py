"""Gateway client: relays an action from an origin chain to the settlement chain.

Two primitives against the origin chain's gateway contract:
- deposit_with_message: native value + message (gateway ``depositAndCall``)
- call_with_message: message only (gateway ``call``)

Both block until the relay confirmation depth is reached.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from eth_utils import to_checksum_address

from xyra.chains import ZERO_ADDRESS
from xyra.config import Settings, get_settings
from xyra.lending.abis import GATEWAY_CALL, GATEWAY_DEPOSIT_AND_CALL
from xyra.wallet.base import TransactionHandle

logger = logging.getLogger(__name__)

SubmittedCallback = Callable[[str], None]


@dataclass(frozen=True)
class RevertOptions:
    """What the settlement network does if the relayed call fails."""

    revert_address: str
    call_on_revert: bool = True
    abort_address: str = ZERO_ADDRESS
    revert_message: bytes = b"Revert"
    on_revert_gas_limit: int = 100_000_000

    @classmethod
    def for_initiator(cls, initiator: str, settings: Optional[Settings] = None) -> "RevertOptions":
        """Return funds and control to the initiator on revert."""
        settings = settings or get_settings()
        return cls(
            revert_address=initiator,
            call_on_revert=True,
            abort_address=ZERO_ADDRESS,
            revert_message=settings.revert_message.encode(),
            on_revert_gas_limit=settings.on_revert_gas_limit,
        )

    def as_abi_tuple(self) -> tuple:
        return (
            to_checksum_address(self.revert_address),
            self.call_on_revert,
            to_checksum_address(self.abort_address),
            self.revert_message,
            self.on_revert_gas_limit,
        )


class GatewayClient:
    """Relay primitives against one gateway contract."""

    def __init__(self, provider, gateway_address: str, confirmations: int = 3):
        self.provider = provider
        self.gateway_address = gateway_address
        self.confirmations = confirmations

    async def deposit_with_message(
        self,
        destination: str,
        payload: bytes,
        native_value: int,
        revert_options: RevertOptions,
        on_submitted: Optional[SubmittedCallback] = None,
    ) -> TransactionHandle:
        """Forward ``native_value`` and ``payload`` to ``destination`` atomically."""
        data = GATEWAY_DEPOSIT_AND_CALL.encode_call(
            to_checksum_address(destination), payload, revert_options.as_abi_tuple()
        )
        logger.info(f"Gateway depositAndCall -> {destination} (value={native_value})")
        return await self._submit_and_wait(data, native_value, on_submitted)

    async def call_with_message(
        self,
        destination: str,
        payload: bytes,
        revert_options: RevertOptions,
        on_submitted: Optional[SubmittedCallback] = None,
    ) -> TransactionHandle:
        """Forward ``payload`` to ``destination`` without value."""
        data = GATEWAY_CALL.encode_call(
            to_checksum_address(destination), payload, revert_options.as_abi_tuple()
        )
        logger.info(f"Gateway call -> {destination}")
        return await self._submit_and_wait(data, 0, on_submitted)

    async def _submit_and_wait(
        self,
        data: bytes,
        value: int,
        on_submitted: Optional[SubmittedCallback],
    ) -> TransactionHandle:
        tx_hash = await self.provider.send_transaction(self.gateway_address, data, value=value)
        if on_submitted is not None:
            on_submitted(tx_hash)
        return await self.provider.wait_for_confirmation(tx_hash, self.confirmations)
