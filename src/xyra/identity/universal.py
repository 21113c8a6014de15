"""Universal identity: the chain-agnostic account key of the lending pool.

The settlement contract stores every position under
``keccak256(abi.encode(uint256 chainId, bytes identity))``. The client must
derive exactly the same key, so both sides use the standard ABI tuple encoding.
"""

from dataclasses import dataclass

from eth_abi import encode
from eth_utils import keccak

from xyra.identity.address import canonicalize_address

USER_ID_SCHEMA = ["uint256", "bytes"]


def compute_user_id(chain_id: int, identity_bytes: bytes) -> bytes:
    """Derive the 32-byte account key for (chain id, canonical address bytes)."""
    return keccak(encode(USER_ID_SCHEMA, [int(chain_id), bytes(identity_bytes)]))


@dataclass(frozen=True)
class UniversalIdentity:
    """An account owner on some origin chain."""

    origin_chain_id: int
    identity_bytes: bytes

    @classmethod
    def from_address(cls, chain_id: int, address: str) -> "UniversalIdentity":
        """Canonicalize a human address, then bind it to its origin chain."""
        return cls(origin_chain_id=int(chain_id), identity_bytes=canonicalize_address(address))

    @property
    def user_id(self) -> bytes:
        return compute_user_id(self.origin_chain_id, self.identity_bytes)

    @property
    def user_id_hex(self) -> str:
        return "0x" + self.user_id.hex()

    @property
    def identity_hex(self) -> str:
        return "0x" + self.identity_bytes.hex()

    def as_abi_tuple(self) -> tuple[int, bytes]:
        """Struct form ``(chainId, identity)`` used by the contract's typed methods."""
        return (self.origin_chain_id, self.identity_bytes)
