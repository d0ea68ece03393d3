"""
Unit tests for hero event classification.
"""
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from replay_app.services.decoders.classifier import HERO_EVENTS, EventClassifier, is_hero


class TestHeroEvents:

    def test_known_hero_events(self):
        for name in ('FundingRoundCreated', 'TrancheReleased', 'RescueFundingActivated',
                     'ReservesVerified', 'RiskAlertTriggered'):
            assert is_hero(name), name

    def test_hero_set_size(self):
        assert len(HERO_EVENTS) == 14

    def test_non_hero(self):
        assert not is_hero('OwnershipTransferred')
        assert not is_hero('Transfer')
        assert not is_hero('')

    def test_case_sensitive(self):
        """Membership is exact."""
        assert not is_hero('fundingroundcreated')
        assert not is_hero('FundingRoundCreated ')


class TestEventClassifier:

    def test_custom_set(self):
        classifier = EventClassifier({'Deposit'})
        assert classifier.is_hero('Deposit')
        assert not classifier.is_hero('FundingRoundCreated')

    def test_set_is_captured(self):
        """Mutating the source set afterwards has no effect."""
        names = {'Deposit'}
        classifier = EventClassifier(names)
        names.add('Withdraw')
        assert not classifier.is_hero('Withdraw')
