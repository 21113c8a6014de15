"""Cross-chain transaction tracking."""

from xyra.tracking.cctx import FINAL_STATUSES, CctxTracker, CrossChainTx

__all__ = ["CctxTracker", "CrossChainTx", "FINAL_STATUSES"]
