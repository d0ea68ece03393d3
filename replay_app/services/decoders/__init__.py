"""
Cross-contract receipt decoders for the project-financing protocol.

Pipeline (leaves first):
- formatter: raw decoded value -> display string (unit and enum heuristics)
- matcher: one log + one AbiEntry -> Optional[DecodedEvent]
- classifier: hero event membership
- registry: receipt logs + AbiEntries -> ordered DecodedEvents
- steps: DecodedEvent batches -> EnrichedStep for the UI

Contracts covered:
- SolvencyConsumer (solvency oracle)
- MilestoneConsumer (milestone verifier)
- TokenizedFundingEngine (funding rounds, tranches, rescue rounds)
- ReserveVerifier (proof of reserves)
"""

from .base import (
    # Enums
    ContractName,
    CONTRACT_COLORS,
    CONTRACT_SHORT,
    # Dataclasses
    AbiEntry,
    RawLog,
    DecodedEvent,
    CrossContractHook,
    EnrichedStep,
    # Helpers
    format_ether,
    format_address,
    normalize_tx_hash,
)
from .formatter import format_arg
from .classifier import HERO_EVENTS, EventClassifier, is_hero
from .matcher import AbiMatcher
from .registry import ReceiptDecoder, decode_receipt_events
from .steps import CONTRACT_EDGES, assemble_step, infer_cross_contract_hook, merge_batches
from .abis import build_abi_entries, load_abi, load_artifact, get_read_abi

__all__ = [
    'ContractName',
    'CONTRACT_COLORS',
    'CONTRACT_SHORT',
    'AbiEntry',
    'RawLog',
    'DecodedEvent',
    'CrossContractHook',
    'EnrichedStep',
    'format_ether',
    'format_address',
    'normalize_tx_hash',
    'format_arg',
    'HERO_EVENTS',
    'EventClassifier',
    'is_hero',
    'AbiMatcher',
    'ReceiptDecoder',
    'decode_receipt_events',
    'CONTRACT_EDGES',
    'assemble_step',
    'infer_cross_contract_hook',
    'merge_batches',
    'build_abi_entries',
    'load_abi',
    'load_artifact',
    'get_read_abi',
]
