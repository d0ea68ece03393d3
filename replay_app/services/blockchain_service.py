"""
Blockchain Service Module

Replays protocol transactions from a node: fetches receipts, runs them through
the receipt decoder and assembles EnrichedSteps, and reads contract state for
the dashboard panels. This is the only module that talks to a node; signing
and submitting transactions happen elsewhere.
"""

from typing import Any, Dict, Iterable, List, Optional, Union
from pathlib import Path
import logging

from web3 import Web3

from ..config.network_config import (
    NETWORK, RPC_URL, CHAIN_IDS, PROJECT_ID, ZERO_ADDRESS,
    RECEIPT_TIMEOUT, RECEIPT_POLL_INTERVAL,
    CONTRACT_ADDRESSES, ContractAddressMap,
)
from .decoders.abis import DECODE_ORDER, build_abi_entries, get_read_abi, get_function_abi
from .decoders.base import AbiEntry, ContractName, CrossContractHook, DecodedEvent, EnrichedStep, normalize_tx_hash
from .decoders.formatter import format_arg
from .decoders.registry import ReceiptDecoder
from .decoders.steps import assemble_step

logger = logging.getLogger(__name__)

_ADDRESS_FIELDS = dict(DECODE_ORDER)


class ReplayService:
    """
    Replays transaction receipts into EnrichedSteps for one deployment.

    The decoder is built lazily from the deployment's artifacts and reused for
    every receipt.
    """

    def __init__(self, w3: Web3, addresses: ContractAddressMap = CONTRACT_ADDRESSES,
                 artifacts_dir: Optional[Union[str, Path]] = None, network: str = NETWORK):
        self.w3 = w3
        self.addresses = addresses
        self.artifacts_dir = artifacts_dir
        self.network = network
        self._decoder: Optional[ReceiptDecoder] = None

    @classmethod
    def connect(cls, rpc_url: str = RPC_URL, addresses: Optional[ContractAddressMap] = None,
                artifacts_dir: Optional[Union[str, Path]] = None, network: str = NETWORK) -> "ReplayService":
        """Connect to a node over HTTP. Raises ConnectionError if unreachable."""
        logger.info(f"Connecting to {network} node: {rpc_url[:50]}")
        w3 = Web3(Web3.HTTPProvider(rpc_url))
        if not w3.is_connected():
            raise ConnectionError(f"Failed to connect to {network} node at {rpc_url}")
        service = cls(w3, addresses or CONTRACT_ADDRESSES, artifacts_dir, network)
        logger.info(f"ReplayService connected to chain ID {w3.eth.chain_id}")
        return service

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def abi_entries(self) -> List[AbiEntry]:
        return list(self.decoder.abi_entries)

    @property
    def decoder(self) -> ReceiptDecoder:
        if self._decoder is None:
            entries = build_abi_entries(self.addresses, self.artifacts_dir)
            self._decoder = ReceiptDecoder(entries, codec=getattr(self.w3, "codec", None))
            logger.info(f"Receipt decoder ready with {len(entries)} contract ABIs")
        return self._decoder

    def wait_for_receipt(self, tx_hash: Any, timeout: float = RECEIPT_TIMEOUT):
        """Block until the transaction is mined; web3's TimeExhausted propagates"""
        return self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=timeout, poll_latency=RECEIPT_POLL_INTERVAL
        )

    def fetch_logs(self, tx_hash: Any, wait: bool = False) -> List[Any]:
        receipt = self.wait_for_receipt(tx_hash) if wait else self.w3.eth.get_transaction_receipt(tx_hash)
        return list(receipt.get('logs') or [])

    def decode_receipt(self, receipt: Any) -> List[DecodedEvent]:
        return self.decoder.decode(receipt.get('logs') or [])

    def replay(self, tx_hash: Any, step: str, source_contract: Any, fn: str,
               data: Optional[Dict[str, Any]] = None, hook: Optional[CrossContractHook] = None,
               wait: bool = False) -> EnrichedStep:
        """
        Fetch one receipt and turn it into an EnrichedStep.

        The cross-contract hook is inferred from the decoded events unless one
        is passed explicitly.
        """
        tx_hash = normalize_tx_hash(tx_hash)
        events = self.decoder.decode(self.fetch_logs(tx_hash, wait=wait))
        enriched = assemble_step(step, source_contract, fn, events, tx_hash=tx_hash, hook=hook,
                                 data=data, infer_hook=True)
        heroes = len(enriched.hero_events)
        logger.info(f"Replayed {tx_hash[:18]}... ({enriched.source_contract.value}.{fn}): "
                    f"{len(events)} events, {heroes} hero")
        return enriched

    def replay_many(self, calls: Iterable[Dict[str, Any]]) -> List[EnrichedStep]:
        """Replay a sequence of {hash, step, source_contract, fn[, data]} dicts in order"""
        steps = []
        for call in calls:
            steps.append(self.replay(
                call['hash'],
                call.get('step') or call['fn'],
                call['source_contract'],
                call['fn'],
                data=call.get('data'),
            ))
        return steps

    # ------------------------------------------------------------------
    # Contract reads
    # ------------------------------------------------------------------

    def address_of(self, contract: Any) -> str:
        contract = ContractName.parse(contract)
        field = _ADDRESS_FIELDS.get(contract)
        if field is None:
            raise ValueError(f"{contract.value} has no deployed address")
        return getattr(self.addresses, field)

    def read(self, contract: Any, fn: str, *args: Any) -> Any:
        """Call a view function and return its raw result"""
        contract = ContractName.parse(contract)
        address = self.address_of(contract)
        if address.lower() == ZERO_ADDRESS:
            raise ValueError(f"{contract.value} is not deployed")
        abi = get_read_abi(contract, self.artifacts_dir)
        instance = self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=abi)
        return getattr(instance.functions, fn)(*args).call()

    def read_named(self, contract: Any, fn: str, *args: Any, formatted: bool = False) -> Dict[str, Any]:
        """Call a view function and key its outputs by ABI name"""
        contract = ContractName.parse(contract)
        result = self.read(contract, fn, *args)
        fn_abi = get_function_abi(get_read_abi(contract, self.artifacts_dir), fn) or {}
        outputs = fn_abi.get('outputs') or []
        values = result if isinstance(result, (list, tuple)) and len(outputs) > 1 else [result]

        named = {}
        for index, (param, value) in enumerate(zip(outputs, values)):
            name = param.get('name') or f"output{index}"
            named[name] = format_arg(name, value, param.get('type')) if formatted else value
        return named

    def snapshot(self, project_id: str = PROJECT_ID, formatted: bool = True) -> Dict[str, Optional[Dict[str, Any]]]:
        """
        Latest on-chain state for the dashboard panels.

        A read that fails (contract not deployed, no data yet) is reported as
        None rather than failing the whole snapshot.
        """
        reads = {
            'solvency': (ContractName.SOLVENCY_CONSUMER, 'getLatestSolvency', (project_id,)),
            'financials': (ContractName.SOLVENCY_CONSUMER, 'getProjectFinancials', (project_id,)),
            'rounds': (ContractName.FUNDING_ENGINE, 'getProjectRounds', (project_id,)),
            'reserves': (ContractName.RESERVE_VERIFIER, 'getProjectVerification', (project_id,)),
        }
        snapshot: Dict[str, Optional[Dict[str, Any]]] = {}
        for key, (contract, fn, args) in reads.items():
            try:
                snapshot[key] = self.read_named(contract, fn, *args, formatted=formatted)
            except Exception as e:
                logger.warning(f"Read {contract.value}.{fn} failed: {e}")
                snapshot[key] = None
        return snapshot

    def network_status(self) -> Dict[str, Any]:
        status = {
            'network': self.network,
            'expected_chain_id': CHAIN_IDS.get(self.network),
            'chain_id': None,
            'block_number': None,
            'connected': False,
        }
        try:
            status['chain_id'] = self.w3.eth.chain_id
            status['block_number'] = self.w3.eth.block_number
            status['connected'] = True
        except Exception as e:
            logger.warning(f"Network status check failed: {e}")
        return status


def parse_replay_requests(text: str, default_contract: Any = ContractName.FUNDING_ENGINE,
                          default_fn: str = "") -> List[Dict[str, Any]]:
    """
    Parse replay requests, one per line: 'hash[,contract[,fn[,step]]]'.

    Blank lines and '#' comments are ignored. Missing fields fall back to the
    defaults; the step label falls back to the function name, then 'Step N'.
    Raises ValueError on an unknown contract name.
    """
    calls = []
    for raw_line in (text or "").splitlines():
        line = raw_line.split('#', 1)[0].strip()
        if not line:
            continue
        parts = [p.strip() for p in line.split(',')]
        parts += [''] * (4 - len(parts))
        tx_hash, contract, fn, step = parts[:4]
        fn = fn or default_fn
        calls.append({
            'hash': normalize_tx_hash(tx_hash),
            'source_contract': ContractName.parse(contract or default_contract),
            'fn': fn,
            'step': step or fn or f"Step {len(calls) + 1}",
        })
    return calls
