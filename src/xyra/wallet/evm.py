"""EVM wallet provider: web3.py transport plus a local eth-account key.

Provides what the dispatch layer needs from a wallet:
- the live chain id (with chain-change notification)
- read-only eth_call
- signing and submission with nonce management
- confirmation polling to a required depth
"""

import asyncio
import logging
import threading
from typing import Callable, Optional, Union

from eth_account import Account
from web3 import Web3
from web3.exceptions import ContractLogicError, TransactionNotFound

from xyra.errors import RevertedOnChain, SubmissionFailure
from xyra.wallet.base import TransactionHandle

logger = logging.getLogger(__name__)

ChainListener = Callable[[int, int], None]


class EVMProvider:
    """Signer and RPC access for one EVM chain at a time."""

    # Class-level nonce cache shared by providers signing for the same address,
    # keyed by (chain_id, address): nonces are per chain
    _nonce_cache: dict[tuple[int, str], int] = {}
    _nonce_lock = threading.Lock()

    def __init__(
        self,
        rpc_url: str,
        private_key: Optional[Union[str, bytes]] = None,
        poll_interval: float = 2.0,
    ):
        self.rpc_url = rpc_url
        self.poll_interval = poll_interval
        self._web3: Optional[Web3] = None
        self._account = Account.from_key(private_key) if private_key else None
        self._chain_id: Optional[int] = None
        self._chain_listeners: list[ChainListener] = []

    @property
    def web3(self) -> Web3:
        """Lazy load web3 instance."""
        if self._web3 is None:
            self._web3 = Web3(Web3.HTTPProvider(self.rpc_url))
        return self._web3

    @property
    def can_sign(self) -> bool:
        return self._account is not None

    @property
    def address(self) -> str:
        if self._account is None:
            raise ValueError("Provider is read-only: no private key configured")
        return self._account.address

    # ======================
    # Chain tracking
    # ======================

    def add_chain_listener(self, listener: ChainListener) -> None:
        """Register a callback fired with (old_chain_id, new_chain_id)."""
        self._chain_listeners.append(listener)

    async def _rpc(self, fn: Callable, *args):
        """Run a blocking web3 call in a worker thread so polling does not stall the loop."""
        return await asyncio.to_thread(fn, *args)

    async def get_chain_id(self) -> int:
        """Read the chain id the provider is currently connected to."""
        try:
            chain_id = int(await self._rpc(lambda: self.web3.eth.chain_id))
        except Exception as e:
            raise SubmissionFailure(f"Could not read chain id from {self.rpc_url}: {e}") from e

        previous = self._chain_id
        self._chain_id = chain_id
        if previous is not None and previous != chain_id:
            logger.info(f"Wallet chain changed: {previous} -> {chain_id}")
            for listener in self._chain_listeners:
                listener(previous, chain_id)
        return chain_id

    async def switch_rpc(self, rpc_url: str) -> int:
        """Point the provider at another chain and notify listeners."""
        self.rpc_url = rpc_url
        self._web3 = None
        return await self.get_chain_id()

    # ======================
    # Reads
    # ======================

    async def call(self, to: str, data: bytes) -> bytes:
        """Execute a read-only contract call."""
        request = {"to": Web3.to_checksum_address(to), "data": Web3.to_hex(data)}
        try:
            result = await self._rpc(self.web3.eth.call, request)
        except ContractLogicError as e:
            raise RevertedOnChain(f"Call to {to} reverted: {e}", reason=str(e)) from e
        except Exception as e:
            raise SubmissionFailure(f"eth_call to {to} failed: {e}") from e
        return bytes(result)

    # ======================
    # Writes
    # ======================

    def _get_next_nonce(self, chain_id: int, address: str) -> int:
        """Get next nonce for address on chain_id, never reusing one handed out earlier."""
        key = (chain_id, address)
        with self._nonce_lock:
            chain_nonce = self.web3.eth.get_transaction_count(address, "pending")
            cached_nonce = self._nonce_cache.get(key, 0)
            next_nonce = max(chain_nonce, cached_nonce)
            self._nonce_cache[key] = next_nonce + 1
            return next_nonce

    def _reset_nonce_cache(self, chain_id: Optional[int], address: str) -> None:
        with self._nonce_lock:
            self._nonce_cache.pop((chain_id, address), None)

    async def send_transaction(self, to: str, data: bytes, value: int = 0) -> str:
        """Sign and submit a transaction.

        Returns:
            Transaction hash (0x-prefixed hex)

        Raises:
            RevertedOnChain: If gas estimation shows the call would revert
            SubmissionFailure: If the node rejects the transaction
        """
        account_address = self.address
        tx = {
            "from": account_address,
            "to": Web3.to_checksum_address(to),
            "data": Web3.to_hex(data),
            "value": int(value),
        }

        chain_id: Optional[int] = None
        try:
            chain_id = int(await self._rpc(lambda: self.web3.eth.chain_id))
            tx["chainId"] = chain_id
            tx["nonce"] = await self._rpc(self._get_next_nonce, chain_id, account_address)
            tx["gas"] = await self._rpc(self.web3.eth.estimate_gas, tx)
            tx["gasPrice"] = await self._rpc(lambda: self.web3.eth.gas_price)
        except ContractLogicError as e:
            self._reset_nonce_cache(chain_id, account_address)
            raise RevertedOnChain(f"Transaction to {to} would revert: {e}", reason=str(e)) from e
        except Exception as e:
            self._reset_nonce_cache(chain_id, account_address)
            raise SubmissionFailure(f"Could not prepare transaction to {to}: {e}") from e

        signed_tx = self._account.sign_transaction(tx)

        try:
            # web3.py 6.x uses raw_transaction, older versions use rawTransaction
            raw_tx = getattr(signed_tx, "raw_transaction", None) or signed_tx.rawTransaction
            tx_hash = Web3.to_hex(await self._rpc(self.web3.eth.send_raw_transaction, raw_tx))
        except Exception as e:
            # Reset nonce cache on failure so next tx gets fresh nonce
            self._reset_nonce_cache(chain_id, account_address)
            raise SubmissionFailure(f"Transaction to {to} was rejected: {e}") from e

        logger.info(f"Submitted tx {tx_hash} to {to} on chain {chain_id} (value={value})")
        return tx_hash

    async def wait_for_confirmation(
        self,
        tx_hash: str,
        confirmations: int = 1,
        timeout: Optional[float] = None,
    ) -> TransactionHandle:
        """Wait until the transaction is mined and buried ``confirmations`` deep.

        Waits indefinitely unless ``timeout`` is given. Timing out or
        cancelling only abandons the wait, the transaction stays submitted.

        Raises:
            RevertedOnChain: If the receipt reports failure
            SubmissionFailure: If the node errors while polling
            asyncio.TimeoutError: If ``timeout`` elapses first
        """
        if timeout is not None:
            return await asyncio.wait_for(self._poll_receipt(tx_hash, confirmations), timeout)
        return await self._poll_receipt(tx_hash, confirmations)

    async def _poll_receipt(self, tx_hash: str, confirmations: int) -> TransactionHandle:
        while True:
            try:
                receipt = await self._rpc(self.web3.eth.get_transaction_receipt, tx_hash)
            except TransactionNotFound:
                receipt = None
            except Exception as e:
                raise SubmissionFailure(f"Node error while waiting for {tx_hash}: {e}", tx_hash=tx_hash) from e

            if receipt is not None:
                if receipt["status"] == 0:
                    raise RevertedOnChain(f"Transaction {tx_hash} reverted", tx_hash=tx_hash)

                tx_block = receipt["blockNumber"]
                try:
                    head = await self._rpc(lambda: self.web3.eth.block_number)
                except Exception as e:
                    raise SubmissionFailure(
                        f"Node error reading block height for {tx_hash}: {e}", tx_hash=tx_hash
                    ) from e

                confirms = head - tx_block + 1
                if confirms >= confirmations:
                    logger.info(f"Tx {tx_hash} confirmed ({confirms}/{confirmations} blocks)")
                    return TransactionHandle(
                        tx_hash=tx_hash,
                        confirmations=confirms,
                        block_number=tx_block,
                        receipt=dict(receipt),
                    )
                logger.debug(f"Tx {tx_hash}: {confirms}/{confirmations} confirmations")

            await asyncio.sleep(self.poll_interval)
