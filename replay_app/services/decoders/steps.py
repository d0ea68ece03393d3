"""
Enriched Step Assembler.

Wraps decoded-event batches with the originating transaction hash, the source
contract and function, and an optional cross-contract causality annotation.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence
import logging

from .base import (
    ContractName,
    CrossContractHook,
    DecodedEvent,
    EnrichedStep,
    normalize_tx_hash,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContractEdge:
    """Known call path between two protocol contracts"""
    from_contract: ContractName
    to_contract: ContractName
    label: str

    @property
    def id(self) -> str:
        return f"{self.from_contract.value}→{self.to_contract.value}"


CONTRACT_EDGES = (
    ContractEdge(ContractName.CRE_WORKFLOW, ContractName.SOLVENCY_CONSUMER, "reports"),
    ContractEdge(ContractName.CRE_WORKFLOW, ContractName.MILESTONE_CONSUMER, "reports"),
    ContractEdge(ContractName.SOLVENCY_CONSUMER, ContractName.FUNDING_ENGINE, "rescue hook"),
    ContractEdge(ContractName.MILESTONE_CONSUMER, ContractName.FUNDING_ENGINE, "tranche hook"),
    ContractEdge(ContractName.RESERVE_VERIFIER, ContractName.FUNDING_ENGINE, "verifies"),
    ContractEdge(ContractName.RESERVE_VERIFIER, ContractName.SOLVENCY_CONSUMER, "verifies"),
)


def find_edge(from_contract: ContractName, to_contract: ContractName) -> Optional[ContractEdge]:
    for edge in CONTRACT_EDGES:
        if edge.from_contract == from_contract and edge.to_contract == to_contract:
            return edge
    return None


def infer_cross_contract_hook(source_contract: ContractName,
                              events: Iterable[DecodedEvent]) -> Optional[CrossContractHook]:
    """
    Detect a call on `source_contract` that made another contract emit.

    The first event from a different contract reachable over a known edge
    becomes the hook; its event name is the reason.
    """
    for event in events:
        if event.contract in (source_contract, ContractName.CRE_WORKFLOW):
            continue
        edge = find_edge(source_contract, event.contract)
        if edge is None:
            continue
        return CrossContractHook(
            from_contract=source_contract,
            to_contract=event.contract,
            reason=f"{edge.label}: {event.event}",
        )
    return None


def merge_batches(*batches: Sequence[DecodedEvent]) -> tuple:
    """Concatenate decoded batches, keeping each batch's order"""
    merged: List[DecodedEvent] = []
    for batch in batches:
        merged.extend(batch or ())
    return tuple(merged)


def assemble_step(step: str, source_contract: Any, fn: str, events: Sequence[DecodedEvent] = (),
                  tx_hash: Any = None, hook: Optional[CrossContractHook] = None,
                  data: Optional[Dict[str, Any]] = None, infer_hook: bool = False) -> EnrichedStep:
    """
    Build an EnrichedStep for the UI.

    Args:
        step: Human label ("Investor deposits 10 ETH")
        source_contract: Contract the transaction was sent to (name or ContractName)
        fn: Function called on it
        events: Receipt Decoder output
        tx_hash: Transaction hash (bytes or hex string)
        hook: Explicit cross-contract annotation
        data: Free-form extra values for the UI
        infer_hook: Derive the hook from the events when none is given
    """
    source = ContractName.parse(source_contract)
    events = tuple(events or ())
    if hook is None and infer_hook:
        hook = infer_cross_contract_hook(source, events)
        if hook is not None:
            logger.debug(f"Inferred hook {hook.edge_id} for step '{step}'")

    return EnrichedStep(
        step=step,
        source_contract=source,
        fn=fn,
        events=events,
        hash=normalize_tx_hash(tx_hash) if tx_hash else None,
        cross_contract_hook=hook,
        data=dict(data) if data is not None else None,
    )
