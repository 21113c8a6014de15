"""Execution router - turns an ActionRequest into the right on-chain call.

Flow:
1. Resolve the wallet's live chain id through the registry
2. Decide the path: Direct when the wallet is on the settlement chain,
   Relayed otherwise
3. Direct: approve (supply/repay only), then call the pool's typed method,
   wait for 1 confirmation
4. Relayed: encode the payload, send it through the origin chain's gateway
   (with native value for supply/repay), wait for 3 confirmations.
   Only the origin chain's native asset can be deposited this way; an
   ERC-20 supply/repay fails with RouteNotImplemented before anything is sent

States:
    idle -> routing_decision -> [awaiting_approval ->] submitting
         -> awaiting_confirmation -> settled
    failed is reachable from every non-terminal state and is terminal.
Nothing is retried; a new user action starts a new dispatch.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from xyra.chains import ChainDescriptor, TokenDescriptor, VmKind, get_chain_by_id, get_settlement_chain
from xyra.config import Settings, get_settings
from xyra.errors import RouteNotImplemented, XyraError
from xyra.lending.allowance import AllowanceSequencer
from xyra.lending.gateway import GatewayClient, RevertOptions
from xyra.lending.payload import ActionKind, ActionRequest, encode_payload
from xyra.lending.settlement import SettlementClient
from xyra.wallet.base import ConnectedWallet, TransactionHandle

logger = logging.getLogger(__name__)


class RoutingPath(str, Enum):
    """How an action reaches the settlement contract."""
    DIRECT = "direct"
    RELAYED = "relayed"


class ExecutionState(str, Enum):
    """Dispatch state machine states."""
    IDLE = "idle"
    ROUTING_DECISION = "routing_decision"
    AWAITING_APPROVAL = "awaiting_approval"
    SUBMITTING = "submitting"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    SETTLED = "settled"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ExecutionState.SETTLED, ExecutionState.FAILED)


_TRANSITIONS: dict[ExecutionState, set[ExecutionState]] = {
    ExecutionState.IDLE: {ExecutionState.ROUTING_DECISION},
    ExecutionState.ROUTING_DECISION: {ExecutionState.AWAITING_APPROVAL, ExecutionState.SUBMITTING},
    ExecutionState.AWAITING_APPROVAL: {ExecutionState.SUBMITTING},
    ExecutionState.SUBMITTING: {ExecutionState.AWAITING_CONFIRMATION},
    ExecutionState.AWAITING_CONFIRMATION: {ExecutionState.SETTLED},
    ExecutionState.SETTLED: set(),
    ExecutionState.FAILED: set(),
}


class InvalidTransition(RuntimeError):
    """Raised when the state machine is driven out of order."""


def decide_route(connected_chain_id: int, settlement_chain_id: int) -> RoutingPath:
    """Direct on the settlement chain, Relayed everywhere else."""
    if int(connected_chain_id) == int(settlement_chain_id):
        return RoutingPath.DIRECT
    return RoutingPath.RELAYED


@dataclass
class ExecutionResult:
    """Outcome of one dispatch."""

    success: bool
    action: ActionKind
    state: ExecutionState
    path: Optional[RoutingPath] = None
    tx_hash: Optional[str] = None
    approval_tx_hash: Optional[str] = None
    confirmations: int = 0
    block_number: Optional[int] = None
    error: Optional[XyraError] = None
    history: list[ExecutionState] = field(default_factory=list)

    @property
    def error_kind(self) -> Optional[str]:
        return self.error.kind if self.error else None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "action": self.action.value,
            "state": self.state.value,
            "path": self.path.value if self.path else None,
            "tx_hash": self.tx_hash,
            "approval_tx_hash": self.approval_tx_hash,
            "confirmations": self.confirmations,
            "block_number": self.block_number,
            "error": self.error.to_dict() if self.error else None,
            "history": [s.value for s in self.history],
        }


TransitionListener = Callable[[ExecutionState, ExecutionState], None]


class Execution:
    """State of a single dispatch."""

    def __init__(self, request: ActionRequest, listener: Optional[TransitionListener] = None):
        self.request = request
        self.state = ExecutionState.IDLE
        self.history: list[ExecutionState] = [ExecutionState.IDLE]
        self.path: Optional[RoutingPath] = None
        self.tx_hash: Optional[str] = None
        self.approval_tx_hash: Optional[str] = None
        self.handle: Optional[TransactionHandle] = None
        self._listener = listener

    def transition(self, new_state: ExecutionState) -> None:
        if self.state.is_terminal:
            raise InvalidTransition(f"{self.state.value} is terminal")
        if new_state is not ExecutionState.FAILED and new_state not in _TRANSITIONS[self.state]:
            raise InvalidTransition(f"{self.state.value} -> {new_state.value} is not allowed")

        old_state = self.state
        self.state = new_state
        self.history.append(new_state)
        logger.info(f"[{self.request.kind.value}] {old_state.value} -> {new_state.value}")
        if self._listener is not None:
            self._listener(old_state, new_state)

    def mark_submitted(self, tx_hash: str) -> None:
        self.tx_hash = tx_hash
        self.transition(ExecutionState.AWAITING_CONFIRMATION)

    def result(self, error: Optional[XyraError] = None) -> ExecutionResult:
        handle = self.handle
        return ExecutionResult(
            success=error is None and self.state is ExecutionState.SETTLED,
            action=self.request.kind,
            state=self.state,
            path=self.path,
            tx_hash=self.tx_hash,
            approval_tx_hash=self.approval_tx_hash,
            confirmations=handle.confirmations if handle else 0,
            block_number=handle.block_number if handle else None,
            error=error,
            history=list(self.history),
        )


class ExecutionRouter:
    """Dispatches lending actions from whichever chain the wallet is on."""

    def __init__(
        self,
        lending_pool_address: Optional[str] = None,
        settings: Optional[Settings] = None,
        settlement_chain: Optional[ChainDescriptor] = None,
    ):
        self.settings = settings or get_settings()
        self.lending_pool_address = lending_pool_address or self.settings.lending_pool_address
        if not self.lending_pool_address:
            raise ValueError("LENDING_POOL_ADDRESS not configured")
        self.settlement_chain = settlement_chain or get_settlement_chain()

    async def dispatch(
        self,
        request: ActionRequest,
        wallet: ConnectedWallet,
        on_transition: Optional[TransitionListener] = None,
    ) -> ExecutionResult:
        """Run one action to settlement or failure.

        Never raises for dispatch failures: the typed error is returned on
        the result with ``state == FAILED``.
        """
        execution = Execution(request, on_transition)

        try:
            execution.transition(ExecutionState.ROUTING_DECISION)
            chain_id = await wallet.current_chain_id()
            connected_chain = get_chain_by_id(chain_id)
            execution.path = decide_route(connected_chain.numeric_id, self.settlement_chain.numeric_id)

            logger.info(
                f"Routing {request.kind.value} from {connected_chain.label} "
                f"({wallet.vm_kind.value}) via {execution.path.value} path"
            )

            if execution.path is RoutingPath.RELAYED:
                if wallet.vm_kind is VmKind.SVM:
                    raise RouteNotImplemented(
                        f"Relayed {request.kind.value} from {connected_chain.label} is not implemented"
                    )
                await self._run_relayed(execution, wallet, connected_chain)
            else:
                await self._run_direct(execution, wallet)

        except XyraError as e:
            if e.tx_hash and execution.tx_hash is None:
                execution.tx_hash = e.tx_hash
            logger.warning(f"[{request.kind.value}] failed in {execution.state.value}: {e.kind}: {e.message}")
            execution.transition(ExecutionState.FAILED)
            return execution.result(error=e)

        return execution.result()

    async def _run_direct(self, execution: Execution, wallet: ConnectedWallet) -> None:
        request = execution.request
        provider = wallet.evm

        if request.kind.pulls_value:
            execution.transition(ExecutionState.AWAITING_APPROVAL)
            sequencer = AllowanceSequencer(provider, self.settings.approval_confirmations)
            approval = await sequencer.ensure_allowance(
                request.settlement_asset, self.lending_pool_address, request.amount
            )
            if approval is not None:
                execution.approval_tx_hash = approval.tx_hash

        execution.transition(ExecutionState.SUBMITTING)
        pool = SettlementClient(provider, self.lending_pool_address, self.settings.direct_confirmations)
        execution.handle = await pool.execute(
            request.kind,
            request.settlement_asset,
            request.amount,
            request.beneficiary,
            on_submitted=execution.mark_submitted,
        )
        execution.transition(ExecutionState.SETTLED)

    @staticmethod
    def _origin_token(chain: ChainDescriptor, settlement_asset: str) -> TokenDescriptor:
        """The connected chain's token that deposits into ``settlement_asset``."""
        for token in chain.tokens:
            if token.settlement_asset_address.lower() == settlement_asset.lower():
                return token
        raise RouteNotImplemented(f"{settlement_asset} cannot be deposited from {chain.label}")

    async def _run_relayed(
        self,
        execution: Execution,
        wallet: ConnectedWallet,
        connected_chain: ChainDescriptor,
    ) -> None:
        request = execution.request
        if request.kind.pulls_value:
            token = self._origin_token(connected_chain, request.settlement_asset)
            if not token.is_native:
                raise RouteNotImplemented(
                    f"Relayed {request.kind.value} of {token.symbol} from {connected_chain.label} "
                    f"needs an ERC-20 gateway deposit, only native {connected_chain.native_symbol} "
                    f"can be deposited"
                )

        payload = encode_payload(request.relay_view())
        revert_options = RevertOptions.for_initiator(wallet.address, self.settings)
        gateway = GatewayClient(wallet.evm, connected_chain.gateway_address, self.settings.relay_confirmations)

        execution.transition(ExecutionState.SUBMITTING)
        if request.kind.pulls_value:
            execution.handle = await gateway.deposit_with_message(
                self.lending_pool_address,
                payload,
                request.amount,
                revert_options,
                on_submitted=execution.mark_submitted,
            )
        else:
            execution.handle = await gateway.call_with_message(
                self.lending_pool_address,
                payload,
                revert_options,
                on_submitted=execution.mark_submitted,
            )
        execution.transition(ExecutionState.SETTLED)
