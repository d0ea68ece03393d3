"""
Transaction Replay - decode one receipt with the same engine as app.py

Usage:
    python replay_tx.py <tx_hash>
    python replay_tx.py <tx_hash> --contract Solvency --fn onReport
    python replay_tx.py <tx_hash> --json       # Print the EnrichedStep as JSON
    python replay_tx.py <tx_hash> --verbose    # Enable debug logging (write to decoder_debug.log)
    python replay_tx.py <tx_hash> -v           # Short for --verbose

Contract names accept the full name (TokenizedFundingEngine) or the short
label (Funding). Defaults to TokenizedFundingEngine.

Debug Mode:
    Set DECODER_DEBUG=1 environment variable to enable verbose logging to decoder_debug.log
    Or use --verbose flag to enable debug mode for this run only
"""

import json
import os
import sys
from typing import List, Optional

from dotenv import load_dotenv
load_dotenv()


def print_section(title: str, char: str = "="):
    """Print a section header"""
    print(f"\n{char * 60}")
    print(f" {title}")
    print(f"{char * 60}")


def flag_value(argv: List[str], flag: str) -> Optional[str]:
    """Value following a flag, or None when the flag is absent"""
    if flag not in argv:
        return None
    index = argv.index(flag)
    if index + 1 >= len(argv):
        raise ValueError(f"{flag} needs a value")
    return argv[index + 1]


def replay_transaction(tx_hash: str, contract: str, fn: str, as_json: bool = False):
    """Fetch, decode and print one transaction"""
    from replay_app.logging_config import get_debug_logger
    from replay_app.services.blockchain_service import ReplayService
    from replay_app.services.chain_flow import flow_summary
    from replay_app.services.decoders.base import CONTRACT_SHORT

    logger = get_debug_logger(__name__)

    service = ReplayService.connect()
    step = service.replay(tx_hash, fn or "replay", contract, fn or "unknown")

    if as_json:
        print(json.dumps(step.to_dict(), indent=2))
        return step

    print_section(f"{step.source_contract.value}.{step.fn}")
    print(f"Hash: {step.hash}")
    print(f"Events: {len(step.events)} ({len(step.hero_events)} hero)")

    print_section("Event Stream", "-")
    if not step.events:
        print("  (no events from known contracts)")
    for i, event in enumerate(step.events, 1):
        marker = "*" if event.is_hero else " "
        print(f" {marker} {i:2}. [{CONTRACT_SHORT[event.contract]}] {event.event}")
        for key, value in event.args.items():
            print(f"        {key}: {value}")

    if step.cross_contract_hook:
        hook = step.cross_contract_hook
        print_section("Cross-Contract Hook", "-")
        print(f"  {hook.edge_id}: {hook.reason}")

    summary = flow_summary([step])
    print_section("Flow", "-")
    print(f"  Contracts: {', '.join(summary['active_contracts'])}")
    print(f"  Edges:     {', '.join(summary['active_edges']) or '-'}")

    logger.debug(f"Replayed {tx_hash}: {step.to_dict()}")
    return step


def main():
    if len(sys.argv) < 2 or sys.argv[1].startswith("-"):
        print(__doc__)
        sys.exit(1)

    tx_hash = sys.argv[1]
    argv = sys.argv[2:]

    as_json = "--json" in argv
    verbose = "--verbose" in argv or "-v" in argv
    try:
        contract = flag_value(argv, "--contract") or "TokenizedFundingEngine"
        fn = flag_value(argv, "--fn") or ""
    except ValueError as e:
        print(f"[!] {e}")
        sys.exit(1)

    if not tx_hash.startswith("0x") or len(tx_hash) != 66:
        print(f"[!] Invalid transaction hash: {tx_hash}")
        sys.exit(1)

    if verbose:
        os.environ["DECODER_DEBUG"] = "1"

    # Import after DECODER_DEBUG is set so logging_config picks it up
    from replay_app.logging_config import setup_logging
    setup_logging()

    try:
        replay_transaction(tx_hash, contract, fn, as_json=as_json)
    except (ConnectionError, ValueError) as e:
        print(f"[!] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
