"""Contract call signatures and calldata helpers.

Calldata is built directly from the function signature (4-byte selector +
ABI-encoded arguments), so no provider round-trip is needed to prepare a
transaction.
"""

from dataclasses import dataclass
from typing import Any, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

# struct UniversalIdentityLib.UniversalIdentity { uint256 chainId; bytes identity; }
UNIVERSAL_IDENTITY_TUPLE = "(uint256,bytes)"

# struct RevertOptions {
#   address revertAddress; bool callOnRevert; address abortAddress;
#   bytes revertMessage; uint256 onRevertGasLimit;
# }
REVERT_OPTIONS_TUPLE = "(address,bool,address,bytes,uint256)"


@dataclass(frozen=True)
class ContractFunction:
    """A contract function identified by name and argument types."""

    name: str
    inputs: tuple[str, ...]
    outputs: tuple[str, ...] = ()

    @property
    def signature(self) -> str:
        return f"{self.name}({','.join(self.inputs)})"

    @property
    def selector(self) -> bytes:
        return function_signature_to_4byte_selector(self.signature)

    def encode_call(self, *args: Any) -> bytes:
        """Build calldata for this function."""
        return self.selector + encode(list(self.inputs), list(args))

    def decode_output(self, data: bytes) -> tuple:
        return decode(list(self.outputs), data)

    def decode_input(self, calldata: bytes) -> tuple:
        """Decode calldata produced by :meth:`encode_call`."""
        if calldata[:4] != self.selector:
            raise ValueError(f"Calldata is not a {self.signature} call")
        return decode(list(self.inputs), calldata[4:])


def fn(name: str, inputs: Sequence[str], outputs: Sequence[str] = ()) -> ContractFunction:
    return ContractFunction(name, tuple(inputs), tuple(outputs))


# ======================
# ERC-20 / ZRC-20
# ======================

ERC20_ALLOWANCE = fn("allowance", ["address", "address"], ["uint256"])
ERC20_APPROVE = fn("approve", ["address", "uint256"], ["bool"])
ERC20_BALANCE_OF = fn("balanceOf", ["address"], ["uint256"])
ERC20_DECIMALS = fn("decimals", [], ["uint8"])

# ======================
# Lending pool (settlement contract)
# ======================

_ACTION_INPUTS = ["address", "uint256", UNIVERSAL_IDENTITY_TUPLE]

POOL_SUPPLY = fn("supply", _ACTION_INPUTS)
POOL_BORROW = fn("borrow", _ACTION_INPUTS)
POOL_WITHDRAW = fn("withdraw", _ACTION_INPUTS)
POOL_REPAY = fn("repay", _ACTION_INPUTS)

POOL_GET_USER_SHARES = fn("getUserShares", ["bytes32", "address"], ["uint256"])
POOL_GET_USER_UNDERLYING_BALANCE = fn(
    "getUserUnderlyingBalance", [UNIVERSAL_IDENTITY_TUPLE, "address"], ["uint256"]
)
POOL_GET_USER_TOTAL_COLLATERAL = fn("getUserTotalCollateral", ["bytes32"], ["uint256"])
POOL_GET_USER_TOTAL_DEBT = fn("getUserTotalDebt", ["bytes32"], ["uint256"])
POOL_GET_HEALTH_FACTOR = fn("getHealthFactor", ["bytes32"], ["uint256"])
POOL_GET_MAX_WITHDRAWABLE = fn("getMaxWithdrawableByShares", ["bytes32", "address"], ["uint256"])

# ======================
# Gateway (origin chains)
# ======================

GATEWAY_CALL = fn("call", ["address", "bytes", REVERT_OPTIONS_TUPLE])
GATEWAY_DEPOSIT_AND_CALL = fn("depositAndCall", ["address", "bytes", REVERT_OPTIONS_TUPLE])
