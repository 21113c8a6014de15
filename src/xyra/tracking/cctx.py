"""Cross-chain transaction (CCTX) tracking on ZetaChain.

A relayed action is confirmed on its origin chain by the gateway client; what
happens next (inbound observed, pool called, possible revert) is recorded by
the settlement network as one or more CCTXs keyed by the inbound tx hash.

API: GET {zeta_api_url}/zeta-chain/crosschain/inboundHashToCctxData/{hash}
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

import httpx

from xyra.config import get_settings

logger = logging.getLogger(__name__)

PENDING_INBOUND = "PendingInbound"
PENDING_OUTBOUND = "PendingOutbound"
OUTBOUND_MINED = "OutboundMined"
PENDING_REVERT = "PendingRevert"
REVERTED = "Reverted"
ABORTED = "Aborted"

FINAL_STATUSES = {OUTBOUND_MINED, REVERTED, ABORTED}


@dataclass
class CrossChainTx:
    """One CCTX spawned by an inbound transaction."""

    index: str
    status: str
    status_message: str = ""
    outbound_hashes: list[str] = field(default_factory=list)

    @property
    def is_final(self) -> bool:
        return self.status in FINAL_STATUSES

    @property
    def succeeded(self) -> bool:
        return self.status == OUTBOUND_MINED

    @classmethod
    def from_api(cls, data: dict) -> "CrossChainTx":
        status = data.get("cctx_status") or {}
        outbound = data.get("outbound_params") or []
        return cls(
            index=data.get("index", ""),
            status=status.get("status", PENDING_INBOUND),
            status_message=status.get("status_message", ""),
            outbound_hashes=[o["hash"] for o in outbound if o.get("hash")],
        )


class CctxTracker:
    """Queries the settlement network for relayed action progress."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        poll_interval: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url or get_settings().zeta_api_url).rstrip("/")
        self.poll_interval = poll_interval
        self._transport = transport

    async def get_cctxs(self, inbound_hash: str) -> list[CrossChainTx]:
        """Get the CCTXs for an inbound hash (empty while not yet indexed)."""
        url = f"{self.api_url}/zeta-chain/crosschain/inboundHashToCctxData/{inbound_hash}"

        async with httpx.AsyncClient(timeout=30.0, transport=self._transport) as client:
            response = await client.get(url)

        if response.status_code == 404:
            logger.debug(f"CCTX for {inbound_hash} not indexed yet")
            return []
        response.raise_for_status()

        data = response.json()
        return [CrossChainTx.from_api(item) for item in data.get("CrossChainTxs", [])]

    async def wait_for_final(self, inbound_hash: str) -> list[CrossChainTx]:
        """Poll until every CCTX for ``inbound_hash`` reaches a final status.

        No built-in timeout; bound it with ``asyncio.wait_for``.
        """
        while True:
            cctxs = await self.get_cctxs(inbound_hash)
            if cctxs and all(c.is_final for c in cctxs):
                for cctx in cctxs:
                    logger.info(f"CCTX {cctx.index}: {cctx.status} {cctx.status_message}".rstrip())
                return cctxs
            await asyncio.sleep(self.poll_interval)
