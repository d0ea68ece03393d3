"""
ABI Loading Module for the Receipt Decoder

Loads contract ABIs from Foundry build artifacts with caching.
Artifacts are stored at: <ARTIFACTS_DIR>/<Name>.sol/<Name>.json

Minimal read-only ABIs are embedded for contract reads when no artifact is
available.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from ...config.network_config import ARTIFACTS_DIR, ZERO_ADDRESS, ContractAddressMap
from .base import AbiEntry, ContractName

logger = logging.getLogger(__name__)

# Decoding order for a replay session (first match wins)
DECODE_ORDER = (
    (ContractName.SOLVENCY_CONSUMER, 'solvency_consumer'),
    (ContractName.MILESTONE_CONSUMER, 'milestone_consumer'),
    (ContractName.FUNDING_ENGINE, 'funding_engine'),
    (ContractName.RESERVE_VERIFIER, 'reserve_verifier'),
)


@lru_cache(maxsize=32)
def _read_artifact(path: str) -> Dict[str, Any]:
    with open(path, encoding='utf-8') as f:
        artifact = json.load(f)
    bytecode = artifact.get('bytecode') or {}
    return {
        'abi': artifact.get('abi') or [],
        'bytecode': bytecode.get('object', '0x') if isinstance(bytecode, dict) else bytecode,
    }


def artifact_path(contract_name: str, artifacts_dir: Optional[Union[str, Path]] = None) -> Path:
    root = Path(artifacts_dir) if artifacts_dir else ARTIFACTS_DIR
    return root / f"{contract_name}.sol" / f"{contract_name}.json"


def load_artifact(contract_name: Union[str, ContractName],
                  artifacts_dir: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
    """
    Load a Foundry build artifact.

    Args:
        contract_name: Solidity contract name ("SolvencyConsumer")
        artifacts_dir: Override for the Foundry out/ directory

    Returns:
        Dict with 'abi' (list) and 'bytecode' (0x hex string)

    Raises:
        FileNotFoundError: if the artifact was never built
    """
    name = contract_name.value if isinstance(contract_name, ContractName) else str(contract_name)
    path = artifact_path(name, artifacts_dir)
    if not path.is_file():
        raise FileNotFoundError(f"No build artifact for {name} at {path}")
    artifact = _read_artifact(str(path))
    logger.debug(f"Loaded artifact for {name} ({len(artifact['abi'])} ABI items)")
    return artifact


def load_abi(contract_name: Union[str, ContractName],
             artifacts_dir: Optional[Union[str, Path]] = None) -> List[Dict[str, Any]]:
    return load_artifact(contract_name, artifacts_dir)['abi']


def build_abi_entries(addresses: ContractAddressMap,
                      artifacts_dir: Optional[Union[str, Path]] = None) -> List[AbiEntry]:
    """
    Pair each deployed (non-zero) address with its artifact ABI.

    Contracts without an artifact are skipped with a warning; their logs will
    simply not decode.
    """
    entries = []
    for name, field in DECODE_ORDER:
        address = getattr(addresses, field)
        if not address or address.lower() == ZERO_ADDRESS:
            logger.debug(f"{name.value} not deployed, skipping")
            continue
        try:
            abi = load_abi(name, artifacts_dir)
        except FileNotFoundError as e:
            logger.warning(f"{e}; events from {name.value} will not decode")
            continue
        entries.append(AbiEntry(name=name, abi=tuple(abi), address=address))
    return entries


def clear_cache():
    _read_artifact.cache_clear()


# ============================================================
# MINIMAL READ ABIs - only the view functions the dashboard calls
# ============================================================

SOLVENCY_READ_ABI = [
    {
        "name": "getLatestSolvency",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "projectId", "type": "bytes32"}],
        "outputs": [
            {"name": "overallScore", "type": "uint8"},
            {"name": "riskLevel", "type": "uint8"},
            {"name": "financialHealth", "type": "uint8"},
            {"name": "costExposure", "type": "uint8"},
            {"name": "fundingMomentum", "type": "uint8"},
            {"name": "runwayAdequacy", "type": "uint8"},
            {"name": "rescueTriggered", "type": "bool"},
            {"name": "timestamp", "type": "uint64"},
        ],
    },
    {
        "name": "getProjectFinancials",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "projectId", "type": "bytes32"}],
        "outputs": [
            {"name": "totalBudget", "type": "uint256"},
            {"name": "capitalDeployed", "type": "uint256"},
            {"name": "capitalRemaining", "type": "uint256"},
            {"name": "fundingVelocity", "type": "uint256"},
            {"name": "burnRate", "type": "uint256"},
        ],
    },
]

MILESTONE_READ_ABI = [
    {
        "name": "getLatestMilestone",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "projectId", "type": "bytes32"},
            {"name": "milestoneId", "type": "uint8"},
        ],
        "outputs": [
            {"name": "progressPercentage", "type": "uint8"},
            {"name": "verificationScore", "type": "uint8"},
            {"name": "approved", "type": "bool"},
            {"name": "timestamp", "type": "uint64"},
        ],
    },
]

FUNDING_READ_ABI = [
    {
        "name": "getRoundInfo",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "roundId", "type": "uint256"}],
        "outputs": [
            {"name": "projectId", "type": "bytes32"},
            {"name": "roundType", "type": "uint8"},
            {"name": "status", "type": "uint8"},
            {"name": "targetAmount", "type": "uint256"},
            {"name": "totalDeposited", "type": "uint256"},
            {"name": "totalReleased", "type": "uint256"},
            {"name": "deadline", "type": "uint256"},
            {"name": "investorCount", "type": "uint256"},
        ],
    },
    {
        "name": "getRoundTranches",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "roundId", "type": "uint256"}],
        "outputs": [
            {"name": "milestoneIds", "type": "uint8[]"},
            {"name": "basisPoints", "type": "uint16[]"},
            {"name": "released", "type": "bool[]"},
        ],
    },
    {
        "name": "getProjectRounds",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "projectId", "type": "bytes32"}],
        "outputs": [{"name": "", "type": "uint256[]"}],
    },
]

RESERVE_READ_ABI = [
    {
        "name": "getProjectVerification",
        "type": "function",
        "stateMutability": "view",
        "inputs": [{"name": "projectId", "type": "bytes32"}],
        "outputs": [
            {"name": "porReported", "type": "uint256"},
            {"name": "onchainBalance", "type": "uint256"},
            {"name": "claimed", "type": "uint256"},
            {"name": "status", "type": "uint8"},
            {"name": "reserveRatio", "type": "uint256"},
            {"name": "timestamp", "type": "uint64"},
        ],
    },
    {
        "name": "getEngineVerification",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [
            {"name": "engine", "type": "address"},
            {"name": "contractBalance", "type": "uint256"},
            {"name": "reportedDeposits", "type": "uint256"},
            {"name": "status", "type": "uint8"},
            {"name": "timestamp", "type": "uint64"},
        ],
    },
]

_READ_ABIS = {
    ContractName.SOLVENCY_CONSUMER: SOLVENCY_READ_ABI,
    ContractName.MILESTONE_CONSUMER: MILESTONE_READ_ABI,
    ContractName.FUNDING_ENGINE: FUNDING_READ_ABI,
    ContractName.RESERVE_VERIFIER: RESERVE_READ_ABI,
}


def get_read_abi(contract: ContractName, artifacts_dir: Optional[Union[str, Path]] = None) -> List[Dict[str, Any]]:
    """Artifact ABI if built, embedded read ABI otherwise"""
    try:
        return load_abi(contract, artifacts_dir)
    except FileNotFoundError:
        if contract not in _READ_ABIS:
            raise
        logger.debug(f"Using embedded read ABI for {contract.value}")
        return _READ_ABIS[contract]


def get_function_abi(abi: List[Dict[str, Any]], fn_name: str) -> Optional[Dict[str, Any]]:
    for item in abi:
        if item.get("type") == "function" and item.get("name") == fn_name:
            return item
    return None
