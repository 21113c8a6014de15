"""Action payload: the wire format shared with the settlement contract.

A relayed action reaches the lending pool's ``onCall`` as an opaque message.
The pool decodes it with the fixed tuple

    (string action, bytes identity, uint256 chainId,
     address asset, address counterAsset, uint256 amount)

Field order and types are versionless; any change breaks every deployed pool.
"""

from dataclasses import dataclass, replace
from enum import Enum

from eth_abi import decode, encode
from eth_utils import to_checksum_address

from xyra.chains import ZERO_ADDRESS
from xyra.identity.universal import UniversalIdentity

PAYLOAD_SCHEMA = ["string", "bytes", "uint256", "address", "address", "uint256"]


class ActionKind(str, Enum):
    """Logical lending actions."""
    SUPPLY = "supply"
    BORROW = "borrow"
    WITHDRAW = "withdraw"
    REPAY = "repay"

    @property
    def pulls_value(self) -> bool:
        """Whether the action moves funds from the caller into the pool."""
        return self in (ActionKind.SUPPLY, ActionKind.REPAY)


@dataclass(frozen=True)
class ActionRequest:
    """One submitted lending action."""

    kind: ActionKind
    beneficiary: UniversalIdentity
    settlement_asset: str  # ZRC-20 the position is held in
    amount: int  # base units
    counter_asset: str = ZERO_ADDRESS  # destination token for borrow/withdraw

    def __post_init__(self):
        object.__setattr__(self, "kind", ActionKind(self.kind))
        object.__setattr__(self, "settlement_asset", to_checksum_address(self.settlement_asset))
        object.__setattr__(self, "counter_asset", to_checksum_address(self.counter_asset))
        if self.amount < 0:
            raise ValueError(f"Amount must be non-negative, got {self.amount}")

    def relay_view(self) -> "ActionRequest":
        """The request as carried in a relayed message.

        For supply/repay the real amount travels as the deposit's native value,
        so the message carries amount 0 and no counter asset.
        """
        if self.kind.pulls_value:
            return replace(self, amount=0, counter_asset=ZERO_ADDRESS)
        return self


def encode_payload(request: ActionRequest) -> bytes:
    """Serialize an action into the settlement contract's message format."""
    return encode(
        PAYLOAD_SCHEMA,
        [
            request.kind.value,
            request.beneficiary.identity_bytes,
            request.beneficiary.origin_chain_id,
            request.settlement_asset,
            request.counter_asset,
            request.amount,
        ],
    )


def decode_payload(payload: bytes) -> ActionRequest:
    """Parse a message produced by :func:`encode_payload`."""
    kind, identity, chain_id, asset, counter_asset, amount = decode(PAYLOAD_SCHEMA, payload)
    return ActionRequest(
        kind=ActionKind(kind),
        beneficiary=UniversalIdentity(origin_chain_id=chain_id, identity_bytes=identity),
        settlement_asset=asset,
        counter_asset=counter_asset,
        amount=amount,
    )
