"""
Receipt Decoder - central routing of receipt logs to contract ABIs.

Routes every log in a receipt to the first AbiEntry (in caller order) whose
address matches and whose ABI decodes it. Logs nobody claims are dropped:
real receipts routinely carry logs from infrastructure contracts (token
transfers and the like) that the caller does not care about.
"""

from typing import Any, Iterable, List, Optional, Sequence
import logging

from .base import AbiEntry, DecodedEvent, RawLog
from .classifier import EventClassifier, DEFAULT_CLASSIFIER
from .matcher import AbiMatcher

logger = logging.getLogger(__name__)


class ReceiptDecoder:
    """
    Decodes receipt logs against a fixed, ordered set of AbiEntries.

    Stateless between calls; the per-entry event indexes are built once so the
    same decoder can be reused for every receipt of a replay session.
    """

    def __init__(self, abi_entries: Sequence[AbiEntry], classifier: EventClassifier = DEFAULT_CLASSIFIER,
                 codec=None):
        self.abi_entries = tuple(abi_entries)
        self.matchers = [AbiMatcher(entry, classifier=classifier, codec=codec) for entry in self.abi_entries]

    def __repr__(self) -> str:
        names = ", ".join(entry.name.value for entry in self.abi_entries)
        return f"ReceiptDecoder([{names}])"

    def decode_log(self, log: RawLog) -> Optional[DecodedEvent]:
        """First matching entry wins"""
        for matcher in self.matchers:
            event = matcher.try_decode(log)
            if event is not None:
                return event
        return None

    def decode(self, logs: Iterable[Any]) -> List[DecodedEvent]:
        """
        Decode all logs in order.

        Args:
            logs: Receipt logs (web3 AttributeDicts, JSON dicts or RawLogs)

        Returns:
            DecodedEvents in input log order, at most one per log
        """
        decoded: List[DecodedEvent] = []
        if not self.matchers:
            return decoded

        skipped = 0
        for raw in logs or []:
            try:
                log = RawLog.from_receipt_log(raw)
            except Exception as e:
                logger.debug(f"Skipping malformed log: {e}")
                skipped += 1
                continue

            event = self.decode_log(log)
            if event is None:
                skipped += 1
                continue
            decoded.append(event)

        logger.debug(f"Decoded {len(decoded)} events, skipped {skipped} logs")
        return decoded


def decode_receipt_events(logs: Iterable[Any], abi_entries: Sequence[AbiEntry],
                          classifier: EventClassifier = DEFAULT_CLASSIFIER, codec=None) -> List[DecodedEvent]:
    """
    Decode all events from a transaction receipt across multiple contract ABIs.

    Tries each ABI against each log, silently skipping unrecognized logs.
    Empty logs or empty abi_entries give an empty list.
    """
    if not abi_entries:
        return []
    return ReceiptDecoder(abi_entries, classifier=classifier, codec=codec).decode(logs)
