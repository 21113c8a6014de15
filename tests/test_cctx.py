"""Tests for cross-chain transaction tracking."""

import httpx
import pytest

from xyra.tracking import CctxTracker, CrossChainTx

API_URL = "https://zeta.test/lcd"
INBOUND = "0x" + "cd" * 32


def cctx_json(status: str, outbound_hash: str = "") -> dict:
    return {
        "index": "0x" + "01" * 32,
        "cctx_status": {"status": status, "status_message": f"status {status}"},
        "outbound_params": [{"hash": outbound_hash}],
    }


def tracker_for(handler) -> CctxTracker:
    return CctxTracker(api_url=API_URL, poll_interval=0, transport=httpx.MockTransport(handler))


class TestCrossChainTx:
    """Tests for CCTX parsing."""

    def test_from_api(self):
        cctx = CrossChainTx.from_api(cctx_json("OutboundMined", "0xbeef"))

        assert cctx.status == "OutboundMined"
        assert cctx.outbound_hashes == ["0xbeef"]
        assert cctx.is_final
        assert cctx.succeeded

    def test_pending_is_not_final(self):
        cctx = CrossChainTx.from_api(cctx_json("PendingOutbound"))

        assert not cctx.is_final
        assert cctx.outbound_hashes == []

    def test_reverted_is_final_but_failed(self):
        cctx = CrossChainTx.from_api(cctx_json("Reverted"))
        assert cctx.is_final
        assert not cctx.succeeded


class TestCctxTracker:
    """Tests for the CCTX API client."""

    @pytest.mark.asyncio
    async def test_get_cctxs(self):
        requested = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request.url.path)
            return httpx.Response(200, json={"CrossChainTxs": [cctx_json("OutboundMined", "0xbeef")]})

        cctxs = await tracker_for(handler).get_cctxs(INBOUND)

        assert requested == [f"/lcd/zeta-chain/crosschain/inboundHashToCctxData/{INBOUND}"]
        assert len(cctxs) == 1
        assert cctxs[0].succeeded

    @pytest.mark.asyncio
    async def test_not_indexed_yet(self):
        cctxs = await tracker_for(lambda request: httpx.Response(404)).get_cctxs(INBOUND)
        assert cctxs == []

    @pytest.mark.asyncio
    async def test_server_error_raises(self):
        with pytest.raises(httpx.HTTPStatusError):
            await tracker_for(lambda request: httpx.Response(500)).get_cctxs(INBOUND)

    @pytest.mark.asyncio
    async def test_wait_for_final(self):
        """Test polling continues through 404 and pending states."""
        responses = [
            httpx.Response(404),
            httpx.Response(200, json={"CrossChainTxs": [cctx_json("PendingOutbound")]}),
            httpx.Response(200, json={"CrossChainTxs": [cctx_json("OutboundMined", "0xbeef")]}),
        ]

        cctxs = await tracker_for(lambda request: responses.pop(0)).wait_for_final(INBOUND)

        assert responses == []
        assert cctxs[0].status == "OutboundMined"
