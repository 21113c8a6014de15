"""Error taxonomy for action dispatch.

Every failure the dispatch layer can report is one of these classes. Callers
branch on the class (or on ``kind``) to offer the right remedy: fix the
address, switch network, re-approve, or resubmit.
"""

from typing import Optional


class XyraError(Exception):
    """Base class for all dispatch failures."""

    kind: str = "error"
    retryable: bool = False
    remedy: str = ""

    def __init__(self, message: str, *, tx_hash: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.tx_hash = tx_hash

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting."""
        return {
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
            "remedy": self.remedy,
            "tx_hash": self.tx_hash,
        }


class InvalidAddress(XyraError):
    """Address string is neither a valid hex nor a valid base58 address."""

    kind = "invalid_address"
    remedy = "Correct the address and try again"

    def __init__(self, address: str, reason: str = "unrecognised address format"):
        self.address = address
        super().__init__(f"Invalid address {address!r}: {reason}")


class UnknownChain(XyraError):
    """Chain key or numeric id is not in the registry."""

    kind = "unknown_chain"
    remedy = "Switch the wallet to a supported network"

    def __init__(self, chain: object):
        self.chain = chain
        super().__init__(f"Unsupported chain: {chain}")


class AllowanceFailure(XyraError):
    """The ERC-20 approval preceding a direct action did not go through."""

    kind = "allowance_failure"
    retryable = True
    remedy = "Re-approve the token and resubmit"


class SubmissionFailure(XyraError):
    """The wallet rejected the transaction or the node returned an error."""

    kind = "submission_failure"
    retryable = True
    remedy = "Resubmit the transaction"


class RevertedOnChain(XyraError):
    """The settlement or gateway contract reverted."""

    kind = "reverted_on_chain"
    remedy = "Inspect the revert reason before resubmitting"

    def __init__(self, message: str, *, tx_hash: Optional[str] = None, reason: Optional[str] = None):
        super().__init__(message, tx_hash=tx_hash)
        self.reason = reason


class RouteNotImplemented(XyraError):
    """The wallet/path combination is not supported (Solana relayed actions)."""

    kind = "not_implemented"
    remedy = "Connect an EVM wallet to submit this action"
