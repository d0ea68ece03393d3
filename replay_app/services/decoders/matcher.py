"""
ABI Matcher - decides whether one contract ABI produced a given log.

A log carries only an emitter address and an opaque topic0, so each attempt is:
1. address check (case-insensitive) against the entry's deployed address
2. topic0 lookup in the entry's event index (anonymous events as fallback)
3. decode via web3's event-data decoder

A failed attempt returns None instead of raising, so callers can simply try the
next entry.
"""

from functools import lru_cache
from typing import Dict, List, Optional, Any, Tuple
import logging

from eth_utils import event_abi_to_log_topic
from web3 import Web3
from web3._utils.events import get_event_data

from .base import AbiEntry, DecodedEvent, RawLog
from .classifier import EventClassifier, DEFAULT_CLASSIFIER
from .formatter import format_arg

logger = logging.getLogger(__name__)

# Internal routing info, never shown
SUPPRESSED_ARGS = frozenset({'projectId'})

UNKNOWN_EVENT = "Unknown"


@lru_cache(maxsize=1)
def default_codec():
    """ABI codec of a provider-less Web3 instance (decoding needs no node)"""
    return Web3().codec


def index_event_abis(abi: List[Dict[str, Any]]) -> Tuple[Dict[bytes, Dict[str, Any]], List[Dict[str, Any]]]:
    """
    Split an ABI's events into a topic0 -> event ABI map and a list of
    anonymous events (which have no topic0 to match on).
    """
    topic_map: Dict[bytes, Dict[str, Any]] = {}
    anonymous: List[Dict[str, Any]] = []
    for item in abi or []:
        if not isinstance(item, dict) or item.get("type") != "event":
            continue
        event_abi = dict(item, anonymous=bool(item.get("anonymous", False)))
        if event_abi["anonymous"]:
            anonymous.append(event_abi)
            continue
        try:
            topic = bytes(event_abi_to_log_topic(event_abi))
        except Exception as e:
            logger.debug(f"Skipping malformed event ABI {item.get('name')}: {e}")
            continue
        # First declaration wins on a colliding signature
        topic_map.setdefault(topic, event_abi)
    return topic_map, anonymous


class AbiMatcher:
    """Tagged decode attempt for one AbiEntry"""

    def __init__(self, entry: AbiEntry, classifier: EventClassifier = DEFAULT_CLASSIFIER, codec=None):
        self.entry = entry
        self.classifier = classifier
        self.codec = codec
        self.topic_map, self.anonymous_events = index_event_abis(list(entry.abi))

    def __repr__(self) -> str:
        return f"AbiMatcher({self.entry.name.value} @ {self.entry.address[:10]}..., {len(self.topic_map)} events)"

    def try_decode(self, log: RawLog) -> Optional[DecodedEvent]:
        """
        Decode the log against this entry.

        Returns:
            DecodedEvent on success, None if the address differs or no event
            in the ABI decodes the log
        """
        if not self.entry.matches(log.address):
            return None

        for event_abi in self._candidates(log):
            try:
                event_data = get_event_data(self.codec or default_codec(), event_abi, log.to_log_entry())
            except Exception as e:
                logger.debug(f"{self.entry.name.value}: {event_abi.get('name')} did not decode log "
                             f"{log.log_index}: {e}")
                continue
            return self._build_event(event_abi, event_data)

        logger.debug(f"{self.entry.name.value}: no event matches topic0 of log {log.log_index}")
        return None

    def _candidates(self, log: RawLog) -> List[Dict[str, Any]]:
        topic0 = log.topic0()
        if topic0 is not None:
            event_abi = self.topic_map.get(bytes(topic0))
            if event_abi is not None:
                return [event_abi]
        return self.anonymous_events

    def _build_event(self, event_abi: Dict[str, Any], event_data: Any) -> DecodedEvent:
        event_name = event_data.get("event") or event_abi.get("name") or UNKNOWN_EVENT
        decoded_args = dict(event_data.get("args") or {})

        # Indexed args decode first; restore the ABI-declared order
        args: Dict[str, str] = {}
        for param in event_abi.get("inputs", []):
            name = param.get("name")
            if not name or name in SUPPRESSED_ARGS or name not in decoded_args:
                continue
            args[name] = format_arg(name, decoded_args[name], param.get("type"))

        return DecodedEvent(
            contract=self.entry.name,
            event=event_name,
            args=args,
            is_hero=self.classifier.is_hero(event_name),
        )
