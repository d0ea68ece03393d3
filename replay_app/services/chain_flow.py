"""
Chain Reaction Flow

Derives which contracts and edges of the protocol graph a set of replayed steps
touched, and which hero events belong on which edge.
"""

from typing import Dict, List, Sequence, Set
import logging

from .decoders.base import ContractName, DecodedEvent, EnrichedStep
from .decoders.steps import CONTRACT_EDGES, find_edge

logger = logging.getLogger(__name__)

# Hero events drawn on a specific edge
EDGE_HERO_EVENTS: Dict[str, str] = {
    'RescueFundingActivated': find_edge(ContractName.SOLVENCY_CONSUMER, ContractName.FUNDING_ENGINE).id,
    'RescueFundingInitiated': find_edge(ContractName.SOLVENCY_CONSUMER, ContractName.FUNDING_ENGINE).id,
    'TrancheReleased': find_edge(ContractName.MILESTONE_CONSUMER, ContractName.FUNDING_ENGINE).id,
    'FundingEngineVerified': find_edge(ContractName.RESERVE_VERIFIER, ContractName.FUNDING_ENGINE).id,
}

EDGE_IDS = tuple(edge.id for edge in CONTRACT_EDGES)


def active_contracts(steps: Sequence[EnrichedStep]) -> Set[ContractName]:
    """Contracts a step was sent to; the CRE workflow is active whenever anything is"""
    contracts = {s.source_contract for s in steps if s.source_contract}
    if contracts:
        contracts.add(ContractName.CRE_WORKFLOW)
    return contracts


def active_edges(steps: Sequence[EnrichedStep]) -> Set[str]:
    """Edge ids lit up by hooks, plus the report/verify edges of active contracts"""
    edges = {s.cross_contract_hook.edge_id for s in steps if s.cross_contract_hook}
    contracts = {s.source_contract for s in steps}

    if ContractName.SOLVENCY_CONSUMER in contracts:
        edges.add(find_edge(ContractName.CRE_WORKFLOW, ContractName.SOLVENCY_CONSUMER).id)
    if ContractName.MILESTONE_CONSUMER in contracts:
        edges.add(find_edge(ContractName.CRE_WORKFLOW, ContractName.MILESTONE_CONSUMER).id)
    if ContractName.RESERVE_VERIFIER in contracts:
        edges.add(find_edge(ContractName.RESERVE_VERIFIER, ContractName.FUNDING_ENGINE).id)
        edges.add(find_edge(ContractName.RESERVE_VERIFIER, ContractName.SOLVENCY_CONSUMER).id)
    return edges


def hero_events(steps: Sequence[EnrichedStep]) -> List[DecodedEvent]:
    """All hero events across steps, in step order"""
    return [e for s in steps for e in s.events if e.is_hero]


def edge_hero_labels(events: Sequence[DecodedEvent]) -> Dict[str, List[str]]:
    """Group hero event names by the edge they are drawn on, de-duplicated in order"""
    labels: Dict[str, List[str]] = {}
    for event in events:
        edge_id = EDGE_HERO_EVENTS.get(event.event)
        if edge_id is None:
            continue
        names = labels.setdefault(edge_id, [])
        if event.event not in names:
            names.append(event.event)
    return labels


def flow_summary(steps: Sequence[EnrichedStep]) -> Dict[str, object]:
    """Everything the flow diagram needs in one JSON-safe dict"""
    heroes = hero_events(steps)
    edges = active_edges(steps)
    return {
        'active_contracts': sorted(c.value for c in active_contracts(steps)),
        'active_edges': [edge_id for edge_id in EDGE_IDS if edge_id in edges],
        'hero_events': [e.to_dict() for e in heroes],
        'edge_hero_labels': edge_hero_labels(heroes),
    }
