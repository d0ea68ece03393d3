"""
Unit tests for the event stream DataFrame.
"""
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from replay_app.services.decoders.base import ContractName, DecodedEvent
from replay_app.services.decoders.steps import assemble_step
from replay_app.services.event_table import EVENT_COLUMNS, format_args, hero_summary, steps_to_dataframe

TX_HASH = "0x" + "12" * 32


def sample_steps():
    return [
        assemble_step("Create round", ContractName.FUNDING_ENGINE, "createFundingRound", [
            DecodedEvent(ContractName.FUNDING_ENGINE, "FundingRoundCreated",
                         {"roundId": "1", "targetAmount": "10 ETH"}, True),
            DecodedEvent(ContractName.FUNDING_ENGINE, "RoleGranted", {}, False),
        ], tx_hash=TX_HASH),
        assemble_step("Report", ContractName.SOLVENCY_CONSUMER, "onReport", [
            DecodedEvent(ContractName.SOLVENCY_CONSUMER, "SolvencyUpdated", {"riskLevel": "LOW"}, True),
        ]),
    ]


class TestStepsToDataFrame:

    def test_one_row_per_event(self):
        df = steps_to_dataframe(sample_steps())
        assert list(df.columns) == EVENT_COLUMNS
        assert len(df) == 3
        assert list(df['event']) == ["FundingRoundCreated", "RoleGranted", "SolvencyUpdated"]
        assert list(df['short']) == ["Funding", "Funding", "Solvency"]

    def test_row_values(self):
        row = steps_to_dataframe(sample_steps()).iloc[0]
        assert row['step'] == "Create round"
        assert row['tx_hash'] == TX_HASH
        assert row['contract'] == "TokenizedFundingEngine"
        assert bool(row['hero']) is True
        assert row['args'] == "roundId=1, targetAmount=10 ETH"

    def test_missing_hash_is_blank(self):
        df = steps_to_dataframe(sample_steps())
        assert df.iloc[2]['tx_hash'] == ""

    def test_empty(self):
        df = steps_to_dataframe([])
        assert df.empty
        assert list(df.columns) == EVENT_COLUMNS


class TestHeroSummary:

    def test_counts(self):
        summary = hero_summary(steps_to_dataframe(sample_steps()))
        assert list(summary['contract']) == ["SolvencyConsumer", "TokenizedFundingEngine"]
        assert list(summary['hero_events']) == [1, 1]

    def test_empty(self):
        summary = hero_summary(steps_to_dataframe([]))
        assert summary.empty
        assert list(summary.columns) == ['contract', 'hero_events']


def test_format_args():
    assert format_args({}) == ""
    assert format_args({"a": "1", "b": "x"}) == "a=1, b=x"
