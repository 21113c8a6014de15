"""ERC-20 allowance sequencing for direct supply and repay.

Flow:
1. Read allowance(owner, spender)
2. If it covers the amount, do nothing
3. Otherwise approve exactly the amount (never unlimited)
4. Wait for the approval to be mined before the caller proceeds

Concurrent approvals from the same account are not serialised: two racing
dispatches may both approve, which is harmless.
"""

import logging
from typing import Optional

from xyra.errors import AllowanceFailure, RevertedOnChain, SubmissionFailure
from xyra.lending.abis import ERC20_ALLOWANCE, ERC20_APPROVE, ERC20_BALANCE_OF, ERC20_DECIMALS
from xyra.wallet.base import TransactionHandle

logger = logging.getLogger(__name__)


class AllowanceSequencer:
    """Approve-then-act helper bound to one wallet provider."""

    def __init__(self, provider, confirmations: int = 1):
        self.provider = provider
        self.confirmations = confirmations

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        data = await self.provider.call(token, ERC20_ALLOWANCE.encode_call(owner, spender))
        return ERC20_ALLOWANCE.decode_output(data)[0]

    async def balance_of(self, token: str, owner: str) -> int:
        data = await self.provider.call(token, ERC20_BALANCE_OF.encode_call(owner))
        return ERC20_BALANCE_OF.decode_output(data)[0]

    async def decimals(self, token: str) -> int:
        data = await self.provider.call(token, ERC20_DECIMALS.encode_call())
        return ERC20_DECIMALS.decode_output(data)[0]

    async def ensure_allowance(
        self,
        token: str,
        spender: str,
        amount: int,
    ) -> Optional[TransactionHandle]:
        """Make sure ``spender`` may pull ``amount`` of ``token`` from the wallet.

        Returns:
            The mined approval, or None when the existing allowance suffices

        Raises:
            AllowanceFailure: If the approval is rejected or reverts
        """
        owner = self.provider.address
        current = await self.get_allowance(token, owner, spender)

        if current >= amount:
            logger.debug(f"Allowance {current} covers {amount} for {spender}, skipping approval")
            return None

        logger.info(f"Allowance {current} < {amount} on {token}, approving exactly {amount}")

        try:
            tx_hash = await self.provider.send_transaction(token, ERC20_APPROVE.encode_call(spender, amount))
            handle = await self.provider.wait_for_confirmation(tx_hash, self.confirmations)
        except (SubmissionFailure, RevertedOnChain) as e:
            raise AllowanceFailure(
                f"Approval of {amount} on {token} for {spender} failed: {e.message}",
                tx_hash=e.tx_hash,
            ) from e

        logger.info(f"Token approval tx: {handle.tx_hash}")
        return handle
