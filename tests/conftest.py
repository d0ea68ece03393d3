"""
Shared fixtures: small contract ABIs and receipt logs built with eth-abi,
so decoding runs end to end without a node.
"""
import sys
import os

import pytest
from eth_abi import encode
from eth_utils import event_abi_to_log_topic
from hexbytes import HexBytes

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from replay_app.services.decoders.base import AbiEntry, ContractName

FUNDING_ADDRESS = "0x00000000000000000000000000000000000000f1"
SOLVENCY_ADDRESS = "0x00000000000000000000000000000000000000a1"
MILESTONE_ADDRESS = "0x00000000000000000000000000000000000000b1"
RESERVE_ADDRESS = "0x00000000000000000000000000000000000000c1"
OTHER_ADDRESS = "0x00000000000000000000000000000000000000ee"

PROJECT_ID = bytes.fromhex("5265766974616c697a6174696f6e50726f746f636f6c00000000000000000001")

FUNDING_ROUND_CREATED = {
    "type": "event",
    "name": "FundingRoundCreated",
    "anonymous": False,
    "inputs": [
        {"name": "projectId", "type": "bytes32", "indexed": True},
        {"name": "roundId", "type": "uint256", "indexed": True},
        {"name": "targetAmount", "type": "uint256", "indexed": False},
    ],
}

INVESTMENT_RECEIVED = {
    "type": "event",
    "name": "InvestmentReceived",
    "anonymous": False,
    "inputs": [
        {"name": "roundId", "type": "uint256", "indexed": True},
        {"name": "investor", "type": "address", "indexed": True},
        {"name": "amount", "type": "uint256", "indexed": False},
    ],
}

TRANCHE_RELEASED = {
    "type": "event",
    "name": "TrancheReleased",
    "anonymous": False,
    "inputs": [
        {"name": "roundId", "type": "uint256", "indexed": True},
        {"name": "milestoneId", "type": "uint8", "indexed": False},
        {"name": "amount", "type": "uint256", "indexed": False},
    ],
}

SOLVENCY_UPDATED = {
    "type": "event",
    "name": "SolvencyUpdated",
    "anonymous": False,
    "inputs": [
        {"name": "projectId", "type": "bytes32", "indexed": True},
        {"name": "overallScore", "type": "uint8", "indexed": False},
        {"name": "riskLevel", "type": "uint8", "indexed": False},
    ],
}

MILESTONE_COMPLETED = {
    "type": "event",
    "name": "MilestoneCompleted",
    "anonymous": False,
    "inputs": [
        {"name": "projectId", "type": "bytes32", "indexed": True},
        {"name": "milestoneId", "type": "uint8", "indexed": False},
    ],
}

OWNERSHIP_TRANSFERRED = {
    "type": "event",
    "name": "OwnershipTransferred",
    "anonymous": False,
    "inputs": [
        {"name": "previousOwner", "type": "address", "indexed": True},
        {"name": "newOwner", "type": "address", "indexed": True},
    ],
}


def build_log(event_abi, values, address, log_index=0):
    """Encode a receipt log for event_abi with the given argument values"""
    topics = [HexBytes(event_abi_to_log_topic(event_abi))]
    data_types, data_values = [], []
    for param in event_abi["inputs"]:
        value = values[param["name"]]
        if param["indexed"]:
            topics.append(HexBytes(encode([param["type"]], [value])))
        else:
            data_types.append(param["type"])
            data_values.append(value)
    return {
        "address": address,
        "topics": topics,
        "data": HexBytes(encode(data_types, data_values)),
        "logIndex": log_index,
    }


@pytest.fixture
def funding_entry():
    return AbiEntry(
        name=ContractName.FUNDING_ENGINE,
        abi=(FUNDING_ROUND_CREATED, INVESTMENT_RECEIVED, TRANCHE_RELEASED, OWNERSHIP_TRANSFERRED),
        address=FUNDING_ADDRESS,
    )


@pytest.fixture
def solvency_entry():
    return AbiEntry(name=ContractName.SOLVENCY_CONSUMER, abi=(SOLVENCY_UPDATED,), address=SOLVENCY_ADDRESS)


@pytest.fixture
def milestone_entry():
    return AbiEntry(name=ContractName.MILESTONE_CONSUMER, abi=(MILESTONE_COMPLETED,), address=MILESTONE_ADDRESS)


@pytest.fixture
def round_created_log():
    return build_log(
        FUNDING_ROUND_CREATED,
        {"projectId": PROJECT_ID, "roundId": 7, "targetAmount": 10 * 10**18},
        FUNDING_ADDRESS,
    )
