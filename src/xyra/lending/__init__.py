"""Lending action dispatch.

Provides:
- ActionRequest / payload codec shared with the settlement contract
- AllowanceSequencer, GatewayClient, SettlementClient
- ExecutionRouter: the Direct vs Relayed state machine
"""

from xyra.lending.allowance import AllowanceSequencer
from xyra.lending.gateway import GatewayClient, RevertOptions
from xyra.lending.payload import ActionKind, ActionRequest, decode_payload, encode_payload
from xyra.lending.router import (
    ExecutionResult,
    ExecutionRouter,
    ExecutionState,
    RoutingPath,
    decide_route,
)
from xyra.lending.settlement import SettlementClient

__all__ = [
    # Payload
    "ActionKind",
    "ActionRequest",
    "encode_payload",
    "decode_payload",
    # Clients
    "AllowanceSequencer",
    "GatewayClient",
    "RevertOptions",
    "SettlementClient",
    # Router
    "ExecutionRouter",
    "ExecutionResult",
    "ExecutionState",
    "RoutingPath",
    "decide_route",
]
