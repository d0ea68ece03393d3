"""
Value formatting for decoded event arguments.

Raw values arrive in incompatible units (wei vs whole ETH, enum codes vs labels,
32-byte hashes vs short ids). The only contract across this boundary is the
field name, so the rules below are keyed on it:

- identifier keys stay as digits (truncated when huge)
- integers above 10^15 are treated as wei and shown in ETH
- riskLevel / risk / status codes map to their enum labels
- long 0x strings are shortened
"""

from decimal import Decimal
from typing import Any, Optional
import logging
import re

from .base import format_ether

logger = logging.getLogger(__name__)

# Keys that are IDs/hashes, not amounts
ID_KEYS = frozenset({'tokenId', 'id', 'roundId', 'messageId'})

# Above this an integer is assumed to be a wei amount
WEI_THRESHOLD = 10**15

ID_MAX_LENGTH = 12
ID_PREFIX_LENGTH = 8
HEX_MAX_LENGTH = 18
HEX_PREFIX_LENGTH = 10
ELLIPSIS = "..."

# Enums matching Solidity
RISK_LABELS = ('LOW', 'MEDIUM', 'HIGH', 'CRITICAL')
VERIFICATION_LABELS = ('UNVERIFIED', 'VERIFIED', 'DEFICIT')

ENUM_LABELS = {
    'riskLevel': RISK_LABELS,
    'risk': RISK_LABELS,
    'status': VERIFICATION_LABELS,
}

# JSON-RPC decoders hand back native numbers up to 48 bits, big integers above
SMALL_INT_BITS = 48

_INT_TYPE = re.compile(r'^u?int(\d*)$')


def format_arg(key: str, value: Any, abi_type: Optional[str] = None) -> str:
    """
    Render one decoded argument as a display string. Never raises.

    Args:
        key: Argument name from the event ABI
        value: Decoded Python value
        abi_type: Solidity type from the ABI ("uint8", "uint256", ...), if known
    """
    try:
        return _format(key, value, abi_type)
    except Exception as e:
        logger.debug(f"Falling back to raw value for {key}: {e}")
        return _raw(value)


def _format(key: str, value: Any, abi_type: Optional[str]) -> str:
    # bool is an int subclass, check it first
    if isinstance(value, bool):
        return 'true' if value else 'false'

    if isinstance(value, int):
        if abi_type is not None:
            if _is_small_int_type(abi_type):
                return _format_small(key, value)
            return _format_big(key, value)
        # Untyped: big-integer rules first, enum labels for small values
        if key in ID_KEYS or value > WEI_THRESHOLD:
            return _format_big(key, value)
        if key in ENUM_LABELS:
            return _format_small(key, value)
        return str(value)

    if isinstance(value, (float, Decimal)):
        return _format_small(key, value)

    if isinstance(value, (bytes, bytearray)):
        return _format_hex("0x" + bytes(value).hex())

    if isinstance(value, str):
        return _format_hex(value)

    if isinstance(value, (list, tuple)):
        return ",".join(_raw(v) for v in value)

    return str(value)


def _format_big(key: str, value: int) -> str:
    # IDs stay as numbers, not formatted as ETH
    if key in ID_KEYS:
        s = str(value)
        return f"{s[:ID_PREFIX_LENGTH]}{ELLIPSIS}" if len(s) > ID_MAX_LENGTH else s
    if value > WEI_THRESHOLD:
        return f"{format_ether(value)} ETH"
    return str(value)


def _format_small(key: str, value: Any) -> str:
    labels = ENUM_LABELS.get(key)
    if labels is not None and _is_integral(value):
        index = int(value)
        if 0 <= index < len(labels):
            return labels[index]
    return _numeral(value)


def _format_hex(value: str) -> str:
    # Long hashes/addresses are display noise
    if value.startswith('0x') and len(value) > HEX_MAX_LENGTH:
        return f"{value[:HEX_PREFIX_LENGTH]}{ELLIPSIS}"
    return value


def _is_small_int_type(abi_type: str) -> bool:
    match = _INT_TYPE.match(abi_type)
    if not match:
        return False
    bits = int(match.group(1) or 256)
    return bits <= SMALL_INT_BITS


def _is_integral(value: Any) -> bool:
    if isinstance(value, int):
        return True
    try:
        return value == int(value)
    except (ValueError, OverflowError):
        return False


def _numeral(value: Any) -> str:
    if _is_integral(value):
        return str(int(value))
    return str(value)


def _raw(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    return str(value)
