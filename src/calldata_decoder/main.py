#!/usr/bin/env python3
"""
Command-line entry point for the calldata decoder.

This script orchestrates the decode workflow:
1. Parse command-line arguments
2. Load the trust profile and build the decoder
3. Decode the calldata (or raw transaction)
4. Render the report and optional explanation
"""

import argparse
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from .config import DecoderSettings
from .core import CalldataDecoder
from .errors import DecoderError
from .explainer import Narrator
from .models import DecodeOptions, Severity
from .raw_tx_parser import parse_raw_transaction
from .reporting import format_report, to_dict
from .trust import create_empty_profile, load_profile

# Load environment variables
load_dotenv(override=True)

logger = logging.getLogger(__name__)

BLOCKING_SEVERITIES = (Severity.CRITICAL, Severity.UNKNOWN)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Decode Ethereum calldata and explain what signing it changes',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (can also be set in .env file):
  TARGET_ADDRESS        Contract the calldata is sent to
  TRUST_PROFILE         Path to the Safe trust profile JSON
  ABI_REGISTRY_DIR      Local ABI registry directory (default: ./abis)
  CHAIN_ID              Chain used for the ABI registry (default: 1)
  FOURBYTE_API_URL      4byte.directory signatures endpoint
  FOURBYTE_TIMEOUT      Lookup timeout in seconds (default: 5)
  BATCH_MAX_WORKERS     Concurrent batch sub-call analyses (default: 8)
  EXPLAINER_MODEL       Model used by --explain (default: gpt-4o-mini)
  OPENAI_API_KEY        OpenAI API key for --explain (optional)

Priority: Command-line arguments > Environment variables > Defaults

Exit codes: 0 ok, 1 CRITICAL or UNKNOWN result, 2 invalid input
        """
    )
    parser.add_argument(
        'calldata',
        nargs='?',
        help='Hex calldata (0x prefix optional)'
    )
    parser.add_argument(
        '--target',
        default=os.getenv('TARGET_ADDRESS'),
        help='Target contract address (env: TARGET_ADDRESS)'
    )
    parser.add_argument(
        '--operation',
        type=int,
        choices=[0, 1],
        default=0,
        help='0 = CALL, 1 = DELEGATECALL (default: 0)'
    )
    parser.add_argument(
        '--profile',
        type=Path,
        default=os.getenv('TRUST_PROFILE'),
        help='Path to trust profile JSON (env: TRUST_PROFILE)'
    )
    parser.add_argument(
        '--abi-dir',
        type=Path,
        default=None,
        help='Local ABI registry directory (env: ABI_REGISTRY_DIR, default: ./abis)'
    )
    parser.add_argument(
        '--chain-id',
        type=int,
        default=None,
        help='Chain ID for the ABI registry (env: CHAIN_ID, default: 1)'
    )
    parser.add_argument(
        '--offline',
        action='store_true',
        default=False,
        help='Never query 4byte.directory'
    )
    parser.add_argument(
        '--raw-tx',
        help='Signed raw transaction hex; calldata, target and chain are taken from it'
    )
    parser.add_argument(
        '--json',
        action='store_true',
        default=False,
        help='Print the result as JSON'
    )
    parser.add_argument(
        '--explain',
        action='store_true',
        default=False,
        help='Add a plain-language explanation (OpenAI-compatible API)'
    )
    parser.add_argument(
        '--init-profile',
        metavar='SAFE_ADDRESS',
        help='Print an empty trust profile template for a Safe and exit'
    )
    parser.add_argument(
        '--debug',
        action='store_true',
        default=False,
        help='Enable debug mode to log to file (default: False)'
    )
    return parser


def configure_logging(debug: bool) -> None:
    if debug:
        # Create output directory for log file
        output_dir = Path("output")
        output_dir.mkdir(exist_ok=True)

        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(output_dir / 'decode_calldata.log')
            ]
        )
    else:
        # Disable logging output when debug is False
        logging.basicConfig(
            level=logging.CRITICAL,
            format='%(asctime)s - %(levelname)s - %(message)s',
            handlers=[
                logging.NullHandler()
            ]
        )


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.debug)

    try:
        if args.init_profile:
            print(json.dumps(create_empty_profile(args.init_profile), indent=2))
            return 0

        settings = DecoderSettings.from_env()
        overrides = {}
        if args.abi_dir:
            overrides['abi_registry_dir'] = args.abi_dir
        if args.chain_id is not None:
            overrides['chain_id'] = args.chain_id

        calldata = args.calldata
        target = args.target
        if args.raw_tx:
            tx = parse_raw_transaction(args.raw_tx)
            calldata = tx.input
            target = target or tx.to
            if tx.chain_id and args.chain_id is None:
                overrides['chain_id'] = tx.chain_id
            logger.info(f"Raw {tx.type} transaction to {tx.to} on chain {tx.chain_id}")

        if not calldata:
            parser.error("calldata is required (or pass --raw-tx)")

        settings = dataclasses.replace(settings, **overrides)
        profile = load_profile(args.profile) if args.profile else None

        decoder = CalldataDecoder(settings)
        result = decoder.decode(calldata, DecodeOptions(
            target_address=target,
            operation=args.operation,
            profile=profile,
            offline=args.offline,
            chain_id=settings.chain_id,
        ))
    except DecoderError as e:
        logger.error(f"Decode failed: {e}")
        print(f"Error [{e.code.value}]: {e.message}", file=sys.stderr)
        return 2

    explanation = None
    if args.explain:
        narration = Narrator(model=settings.explainer_model).explain(result)
        explanation = narration.text or f"_Explanation unavailable: {narration.error}_"

    if args.json:
        output = to_dict(result)
        if explanation is not None:
            output['explanation'] = explanation
        print(json.dumps(output, indent=2))
    else:
        print(format_report(result, explanation))

    if result.header_severity in BLOCKING_SEVERITIES:
        logger.warning(f"Result severity {result.header_severity.value} - do not sign without review")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
