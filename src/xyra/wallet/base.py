"""Connected wallet and transaction handle types.

A wallet is tagged with its VM kind once, when it connects. The router matches
on that tag at its boundary instead of dispatching through subclasses.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from xyra.chains import VmKind, get_chain

if TYPE_CHECKING:
    from xyra.wallet.evm import EVMProvider


@dataclass
class TransactionHandle:
    """A submitted transaction and how deeply it is confirmed."""

    tx_hash: str
    confirmations: int = 0
    block_number: Optional[int] = None
    receipt: dict = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "tx_hash": self.tx_hash,
            "confirmations": self.confirmations,
            "block_number": self.block_number,
        }


@dataclass(frozen=True)
class ConnectedWallet:
    """The user's wallet as the dispatch layer sees it."""

    vm_kind: VmKind
    address: str
    evm: Optional["EVMProvider"] = None
    cluster_chain_id: Optional[int] = None  # SVM wallets report a fixed cluster

    @classmethod
    def from_evm(cls, provider: "EVMProvider") -> "ConnectedWallet":
        return cls(vm_kind=VmKind.EVM, address=provider.address, evm=provider)

    @classmethod
    def from_solana(cls, address: str, chain_key: str = "solana_devnet") -> "ConnectedWallet":
        chain = get_chain(chain_key)
        return cls(vm_kind=VmKind.SVM, address=address, cluster_chain_id=chain.numeric_id)

    async def current_chain_id(self) -> int:
        """Ask the wallet which chain it is on right now."""
        if self.vm_kind is VmKind.EVM:
            if self.evm is None:
                raise ValueError("EVM wallet has no provider attached")
            return await self.evm.get_chain_id()
        if self.cluster_chain_id is None:
            raise ValueError("Solana wallet has no cluster configured")
        return self.cluster_chain_id
