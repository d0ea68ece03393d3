"""
Hero event classification.

A hero event is a state transition worth highlighting to the user (a round
created, a tranche released, a rescue triggered, reserves verified, a risk
alert raised). Classification is exact, case-sensitive name membership and is
not scoped per contract.
"""

from typing import Iterable, FrozenSet

HERO_EVENTS: FrozenSet[str] = frozenset({
    'SolvencyUpdated',
    'RiskAlertTriggered',
    'RescueFundingInitiated',
    'RescueFundingActivated',
    'TrancheReleased',
    'InvestmentReceived',
    'FundsClaimedByInvestor',
    'RescuePremiumDeposited',
    'MilestoneCompleted',
    'MilestoneVerified',
    'ReservesVerified',
    'FundingEngineVerified',
    'FundingRoundCreated',
    'ReserveDeficitDetected',
})


class EventClassifier:
    """Captures an immutable hero set once and answers membership queries"""

    def __init__(self, hero_events: Iterable[str] = HERO_EVENTS):
        self.hero_events: FrozenSet[str] = frozenset(hero_events)

    def is_hero(self, event_name: str) -> bool:
        return event_name in self.hero_events

    def __repr__(self) -> str:
        return f"EventClassifier({len(self.hero_events)} hero events)"


DEFAULT_CLASSIFIER = EventClassifier()


def is_hero(event_name: str) -> bool:
    """Check an event name against the default hero set"""
    return DEFAULT_CLASSIFIER.is_hero(event_name)
