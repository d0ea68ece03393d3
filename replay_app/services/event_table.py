"""
Event stream table

Flattens replayed steps into a pandas DataFrame, one row per decoded event,
for the dashboard grid and CSV export.
"""

from typing import Sequence
import logging

import pandas as pd

from .decoders.base import CONTRACT_SHORT, EnrichedStep

logger = logging.getLogger(__name__)

EVENT_COLUMNS = ['step', 'tx_hash', 'contract', 'short', 'event', 'hero', 'args']


def format_args(args: dict) -> str:
    """'roundId=7, targetAmount=10 ETH'"""
    return ", ".join(f"{k}={v}" for k, v in args.items())


def steps_to_dataframe(steps: Sequence[EnrichedStep]) -> pd.DataFrame:
    """One row per decoded event, in step then log order"""
    rows = []
    for step in steps:
        for event in step.events:
            rows.append({
                'step': step.step,
                'tx_hash': step.hash or "",
                'contract': event.contract.value,
                'short': CONTRACT_SHORT.get(event.contract, event.contract.value),
                'event': event.event,
                'hero': event.is_hero,
                'args': format_args(event.args),
            })
    return pd.DataFrame(rows, columns=EVENT_COLUMNS)


def hero_summary(df: pd.DataFrame) -> pd.DataFrame:
    """Hero event count per contract, most active first"""
    if df.empty:
        return pd.DataFrame(columns=['contract', 'hero_events'])
    heroes = df[df['hero']]
    summary = (
        heroes.groupby('contract')
        .size()
        .reset_index(name='hero_events')
        .sort_values(['hero_events', 'contract'], ascending=[False, True])
        .reset_index(drop=True)
    )
    return summary
