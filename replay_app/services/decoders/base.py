"""
Base classes and data structures for the cross-contract receipt decoder.
Provides the shared types for the Solvency, Milestone, Funding and Reserve contracts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Any, Tuple, Sequence
import logging

from hexbytes import HexBytes

logger = logging.getLogger(__name__)

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


# ============================================================================
# ENUMS
# ============================================================================

class ContractName(str, Enum):
    """Known protocol participants"""
    CRE_WORKFLOW = "CRE Workflow"
    SOLVENCY_CONSUMER = "SolvencyConsumer"
    MILESTONE_CONSUMER = "MilestoneConsumer"
    FUNDING_ENGINE = "TokenizedFundingEngine"
    RESERVE_VERIFIER = "ReserveVerifier"

    @classmethod
    def parse(cls, value: Any) -> "ContractName":
        """Accept an enum member, its value, its member name or its short label."""
        if isinstance(value, cls):
            return value
        text = str(value).strip()
        for member in cls:
            if text in (member.value, member.name) or text.lower() == CONTRACT_SHORT[member].lower():
                return member
        raise ValueError(f"Unknown contract name: {value!r}")


# Badge colors per contract (tailwind-ish names kept for the UI, hex for charts)
CONTRACT_COLORS: Dict[ContractName, Dict[str, str]] = {
    ContractName.CRE_WORKFLOW: {"badge": "primary", "hex": "#3b82f6"},
    ContractName.SOLVENCY_CONSUMER: {"badge": "success", "hex": "#10b981"},
    ContractName.MILESTONE_CONSUMER: {"badge": "warning", "hex": "#f97316"},
    ContractName.FUNDING_ENGINE: {"badge": "info", "hex": "#a855f7"},
    ContractName.RESERVE_VERIFIER: {"badge": "secondary", "hex": "#06b6d4"},
}

# Short display name for badges
CONTRACT_SHORT: Dict[ContractName, str] = {
    ContractName.CRE_WORKFLOW: "CRE",
    ContractName.SOLVENCY_CONSUMER: "Solvency",
    ContractName.MILESTONE_CONSUMER: "Milestone",
    ContractName.FUNDING_ENGINE: "Funding",
    ContractName.RESERVE_VERIFIER: "Reserves",
}


# ============================================================================
# DATA CLASSES
# ============================================================================

@dataclass(frozen=True)
class AbiEntry:
    """A contract ABI paired with its deployed address for one decoding call"""
    name: ContractName
    abi: Sequence[Dict[str, Any]]
    address: str

    def matches(self, address: str) -> bool:
        return bool(address) and address.lower() == self.address.lower()


@dataclass(frozen=True)
class RawLog:
    """Raw event log as it appears in a transaction receipt"""
    address: str
    data: HexBytes
    topics: Tuple[HexBytes, ...]
    log_index: Optional[int] = None

    @classmethod
    def from_receipt_log(cls, log: Any) -> "RawLog":
        """
        Build from a web3 receipt log (AttributeDict with HexBytes) or a
        JSON-RPC style dict with hex strings.
        """
        if isinstance(log, RawLog):
            return log
        data = log.get("data") or b""
        return cls(
            address=str(log.get("address") or ""),
            data=HexBytes(data),
            topics=tuple(HexBytes(t) for t in (log.get("topics") or [])),
            log_index=_as_int(log.get("logIndex")),
        )

    def topic0(self) -> Optional[HexBytes]:
        return self.topics[0] if self.topics else None

    def to_log_entry(self) -> Dict[str, Any]:
        """Shape expected by web3's event-data decoder"""
        return {
            "address": self.address,
            "data": self.data,
            "topics": list(self.topics),
            "logIndex": self.log_index if self.log_index is not None else 0,
            "transactionIndex": 0,
            "transactionHash": HexBytes(b"\x00" * 32),
            "blockHash": HexBytes(b"\x00" * 32),
            "blockNumber": 0,
        }


@dataclass(frozen=True)
class DecodedEvent:
    """Decoded event, tagged with the contract that emitted it"""
    contract: ContractName
    event: str
    args: Dict[str, str] = field(default_factory=dict)
    is_hero: bool = False

    def to_dict(self) -> dict:
        return {
            'contract': self.contract.value,
            'event': self.event,
            'args': dict(self.args),
            'is_hero': self.is_hero,
        }


@dataclass(frozen=True)
class CrossContractHook:
    """Causality annotation: a call on one contract triggered another"""
    from_contract: ContractName
    to_contract: ContractName
    reason: str

    @property
    def edge_id(self) -> str:
        return f"{self.from_contract.value}→{self.to_contract.value}"

    def to_dict(self) -> dict:
        return {
            'from': self.from_contract.value,
            'to': self.to_contract.value,
            'reason': self.reason,
        }


@dataclass(frozen=True)
class EnrichedStep:
    """
    One replayed step: a decoded-event batch plus where it came from.

    Assembled by the caller; `events` is exactly a Receipt Decoder output.
    """
    step: str
    source_contract: ContractName
    fn: str
    events: Tuple[DecodedEvent, ...] = ()
    hash: Optional[str] = None
    cross_contract_hook: Optional[CrossContractHook] = None
    data: Optional[Dict[str, Any]] = None

    @property
    def hero_events(self) -> List[DecodedEvent]:
        return [e for e in self.events if e.is_hero]

    def to_dict(self) -> dict:
        result = {
            'step': self.step,
            'source_contract': self.source_contract.value,
            'fn': self.fn,
            'events': [e.to_dict() for e in self.events],
        }
        if self.hash:
            result['hash'] = self.hash
        if self.cross_contract_hook:
            result['cross_contract_hook'] = self.cross_contract_hook.to_dict()
        if self.data is not None:
            result['data'] = dict(self.data)
        return result


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

WEI_PER_ETH = 10**18


def format_ether(wei: int) -> str:
    """Exact base-10^18 scaling, trailing zeros stripped ("2", "1.5", "0.000001")"""
    sign = "-" if wei < 0 else ""
    whole, frac = divmod(abs(wei), WEI_PER_ETH)
    frac_str = str(frac).rjust(18, "0").rstrip("0")
    return f"{sign}{whole}.{frac_str}" if frac_str else f"{sign}{whole}"


def format_address(address: str, length: int = 8) -> str:
    """Format address for display"""
    if not address:
        return ""
    return f"{address[:length]}...{address[-4:]}"


def normalize_tx_hash(tx_hash: Any) -> str:
    """Always return a 0x-prefixed hex hash string."""
    if isinstance(tx_hash, (bytes, bytearray)):
        return "0x" + bytes(tx_hash).hex()
    hex_str = str(tx_hash)
    if hex_str.startswith('0x'):
        return hex_str
    return f"0x{hex_str}"


def _as_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str):
        return int(value, 16) if value.startswith("0x") else int(value)
    return int(value)
