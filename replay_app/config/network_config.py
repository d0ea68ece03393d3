"""
Network Configuration Module

Contains the node endpoints, deployed contract addresses and artifact paths
for replaying protocol transactions against a local Anvil node or a Tenderly
Virtual TestNet. Values come from the environment (.env is loaded by the
entry points).
"""

from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Mapping, Optional
import os

# Network detection: Tenderly Virtual TestNet or local Anvil
NETWORK = os.getenv('REPLAY_NETWORK', 'anvil').lower()
IS_TENDERLY = NETWORK == 'tenderly'

ANVIL_RPC_URL = os.getenv('ANVIL_RPC_URL', 'http://127.0.0.1:8545')
RPC_URL = os.getenv('REPLAY_RPC_URL', '') if IS_TENDERLY else ANVIL_RPC_URL

# Tenderly virtual testnets fork Sepolia
CHAIN_IDS = {
    'anvil': 31337,
    'tenderly': 11155111,
}

# Foundry build output: out/<Name>.sol/<Name>.json
REPO_ROOT = Path(__file__).resolve().parent.parent.parent
ARTIFACTS_DIR = Path(os.getenv('REPLAY_ARTIFACTS_DIR', str(REPO_ROOT / 'out')))

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Project ID (same across both networks)
PROJECT_ID = "0x5265766974616c697a6174696f6e50726f746f636f6c00000000000000000001"

# Receipt waiting
RECEIPT_TIMEOUT = int(os.getenv('REPLAY_RECEIPT_TIMEOUT', '120'))
RECEIPT_POLL_INTERVAL = float(os.getenv('REPLAY_RECEIPT_POLL_INTERVAL', '0.5'))

# Env var per deployed contract (updated by deploy scripts)
ADDRESS_ENV_VARS = {
    'solvency_consumer': 'REPLAY_SOLVENCY_ADDRESS',
    'milestone_consumer': 'REPLAY_MILESTONE_ADDRESS',
    'funding_engine': 'REPLAY_FUNDING_ADDRESS',
    'reserve_verifier': 'REPLAY_RESERVE_ADDRESS',
}

# Accepted spellings when addresses come from a JSON payload
_ADDRESS_ALIASES = {
    'solvencyConsumer': 'solvency_consumer',
    'milestoneConsumer': 'milestone_consumer',
    'fundingEngine': 'funding_engine',
    'reserveVerifier': 'reserve_verifier',
}


@dataclass(frozen=True)
class ContractAddressMap:
    """Deployed addresses of the four protocol contracts"""
    solvency_consumer: str = ZERO_ADDRESS
    milestone_consumer: str = ZERO_ADDRESS
    funding_engine: str = ZERO_ADDRESS
    reserve_verifier: str = ZERO_ADDRESS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ContractAddressMap":
        environ = os.environ if environ is None else environ
        return cls(**{field: environ.get(var) or ZERO_ADDRESS for field, var in ADDRESS_ENV_VARS.items()})

    @classmethod
    def from_dict(cls, data: Mapping[str, str]) -> "ContractAddressMap":
        """Accepts snake_case or the camelCase keys used by the deploy scripts"""
        values = {}
        for key, value in (data or {}).items():
            field = _ADDRESS_ALIASES.get(key, key)
            if field in ADDRESS_ENV_VARS and value:
                values[field] = value
        return cls(**values)

    def is_configured(self) -> bool:
        return all(addr.lower() != ZERO_ADDRESS for addr in asdict(self).values())

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


CONTRACT_ADDRESSES = ContractAddressMap.from_env()
