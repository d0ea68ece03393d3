"""
Unit tests for ReplayService against an in-memory web3 stand-in.

Tests:
- replay fetches the receipt, decodes it and infers the hook
- request parsing for the dashboard / CLI
- contract reads keyed by ABI output names
- snapshot and network status degrade instead of raising
"""
import json
import sys
import os

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from replay_app.config.network_config import ContractAddressMap
from replay_app.services.blockchain_service import ReplayService, parse_replay_requests
from replay_app.services.decoders import abis
from replay_app.services.decoders.base import ContractName

from conftest import (
    FUNDING_ADDRESS,
    FUNDING_ROUND_CREATED,
    PROJECT_ID,
    SOLVENCY_ADDRESS,
    SOLVENCY_UPDATED,
    build_log,
)

TX_HASH = "0x" + "cd" * 32


class FakeCall:
    def __init__(self, result):
        self.result = result

    def call(self):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeFunctions:
    def __init__(self, results):
        self._results = results

    def __getattr__(self, name):
        if name not in self._results:
            raise ValueError(f"execution reverted: {name}")
        return lambda *args: FakeCall(self._results[name])


class FakeContract:
    def __init__(self, results):
        self.functions = FakeFunctions(results)


class FakeEth:
    def __init__(self, receipts=None, results=None, chain_id=31337, block_number=42):
        self.receipts = receipts or {}
        self.results = results or {}
        self._chain_id = chain_id
        self.block_number = block_number
        self.contract_calls = []

    @property
    def chain_id(self):
        if isinstance(self._chain_id, Exception):
            raise self._chain_id
        return self._chain_id

    def get_transaction_receipt(self, tx_hash):
        return self.receipts[tx_hash]

    def wait_for_transaction_receipt(self, tx_hash, timeout=None, poll_latency=None):
        return self.receipts[tx_hash]

    def contract(self, address, abi):
        self.contract_calls.append(address)
        return FakeContract(self.results.get(address.lower(), {}))


class FakeWeb3:
    def __init__(self, eth):
        self.eth = eth


@pytest.fixture
def artifacts_dir(tmp_path):
    abis.clear_cache()
    for name, abi in (("TokenizedFundingEngine", [FUNDING_ROUND_CREATED]),
                      ("SolvencyConsumer", [SOLVENCY_UPDATED])):
        folder = tmp_path / f"{name}.sol"
        folder.mkdir()
        (folder / f"{name}.json").write_text(json.dumps({"abi": abi, "bytecode": {"object": "0x"}}))
    yield tmp_path
    abis.clear_cache()


@pytest.fixture
def addresses():
    return ContractAddressMap(solvency_consumer=SOLVENCY_ADDRESS, funding_engine=FUNDING_ADDRESS)


class TestReplay:

    def test_replay_rescue_step(self, artifacts_dir, addresses):
        """Solvency report that triggers a funding-engine event gets a hook."""
        logs = [
            build_log(SOLVENCY_UPDATED, {"projectId": PROJECT_ID, "overallScore": 30, "riskLevel": 3},
                      SOLVENCY_ADDRESS, 0),
            build_log(FUNDING_ROUND_CREATED, {"projectId": PROJECT_ID, "roundId": 2, "targetAmount": 5 * 10**18},
                      FUNDING_ADDRESS, 1),
        ]
        w3 = FakeWeb3(FakeEth(receipts={TX_HASH: {"logs": logs}}))
        service = ReplayService(w3, addresses, artifacts_dir)

        step = service.replay(TX_HASH, "Risk spike", "Solvency", "onReport")

        assert step.hash == TX_HASH
        assert step.source_contract == ContractName.SOLVENCY_CONSUMER
        assert [e.event for e in step.events] == ["SolvencyUpdated", "FundingRoundCreated"]
        assert step.events[0].args["riskLevel"] == "CRITICAL"
        assert step.cross_contract_hook.edge_id == "SolvencyConsumer→TokenizedFundingEngine"

    def test_replay_empty_receipt(self, artifacts_dir, addresses):
        w3 = FakeWeb3(FakeEth(receipts={TX_HASH: {"logs": []}}))
        step = ReplayService(w3, addresses, artifacts_dir).replay(TX_HASH, "Noop", "Funding", "pause")
        assert step.events == ()
        assert step.cross_contract_hook is None

    def test_replay_many_in_order(self, artifacts_dir, addresses):
        other = "0x" + "ef" * 32
        w3 = FakeWeb3(FakeEth(receipts={TX_HASH: {"logs": []}, other: {"logs": []}}))
        service = ReplayService(w3, addresses, artifacts_dir)
        steps = service.replay_many([
            {"hash": other, "source_contract": "Funding", "fn": "invest"},
            {"hash": TX_HASH, "source_contract": "Solvency", "fn": "onReport", "step": "Report"},
        ])
        assert [s.step for s in steps] == ["invest", "Report"]
        assert [s.hash for s in steps] == [other, TX_HASH]

    def test_decoder_built_once(self, artifacts_dir, addresses):
        service = ReplayService(FakeWeb3(FakeEth()), addresses, artifacts_dir)
        assert service.decoder is service.decoder
        assert [e.name for e in service.abi_entries()] == [
            ContractName.SOLVENCY_CONSUMER, ContractName.FUNDING_ENGINE]


class TestParseReplayRequests:

    def test_defaults(self):
        calls = parse_replay_requests("cd" * 32, default_contract="Funding", default_fn="invest")
        assert calls == [{
            "hash": TX_HASH,
            "source_contract": ContractName.FUNDING_ENGINE,
            "fn": "invest",
            "step": "invest",
        }]

    def test_full_lines_and_comments(self):
        text = f"""
        # rescue scenario
        {TX_HASH}, Solvency, onReport, Risk spike
        {TX_HASH},MilestoneConsumer
        """
        calls = parse_replay_requests(text)
        assert [c["source_contract"] for c in calls] == [ContractName.SOLVENCY_CONSUMER,
                                                         ContractName.MILESTONE_CONSUMER]
        assert calls[0]["step"] == "Risk spike"
        assert calls[1]["step"] == "Step 2"

    def test_unknown_contract(self):
        with pytest.raises(ValueError):
            parse_replay_requests(f"{TX_HASH},Oracle")

    def test_blank(self):
        assert parse_replay_requests("") == []


class TestReads:

    def test_read_named_formatted(self, tmp_path, addresses):
        """Embedded read ABI names the outputs when no artifact exists."""
        abis.clear_cache()
        solvency = (30, 3, 40, 20, 10, 50, True, 1700000000)
        eth = FakeEth(results={SOLVENCY_ADDRESS: {"getLatestSolvency": solvency}})
        service = ReplayService(FakeWeb3(eth), addresses, tmp_path)

        named = service.read_named("Solvency", "getLatestSolvency", PROJECT_ID, formatted=True)

        assert named["overallScore"] == "30"
        assert named["riskLevel"] == "CRITICAL"
        assert named["rescueTriggered"] == "true"
        assert named["timestamp"] == "1700000000"

    def test_read_undeployed(self, tmp_path, addresses):
        service = ReplayService(FakeWeb3(FakeEth()), addresses, tmp_path)
        with pytest.raises(ValueError):
            service.read(ContractName.RESERVE_VERIFIER, "getProjectVerification", PROJECT_ID)

    def test_snapshot_degrades(self, tmp_path, addresses):
        """Failed reads become None instead of failing the snapshot."""
        abis.clear_cache()
        eth = FakeEth(results={FUNDING_ADDRESS: {"getProjectRounds": [1, 2]}})
        snapshot = ReplayService(FakeWeb3(eth), addresses, tmp_path).snapshot()

        assert snapshot["solvency"] is None
        assert snapshot["financials"] is None
        assert snapshot["reserves"] is None
        assert snapshot["rounds"] == {"output0": "1,2"}


class TestNetworkStatus:

    def test_connected(self, addresses):
        status = ReplayService(FakeWeb3(FakeEth()), addresses, network="anvil").network_status()
        assert status == {
            "network": "anvil",
            "expected_chain_id": 31337,
            "chain_id": 31337,
            "block_number": 42,
            "connected": True,
        }

    def test_offline(self, addresses):
        eth = FakeEth(chain_id=ConnectionError("refused"))
        status = ReplayService(FakeWeb3(eth), addresses, network="tenderly").network_status()
        assert status["connected"] is False
        assert status["expected_chain_id"] == 11155111
