#!/usr/bin/env python3
"""
Inspect a source's checkpoint directory.

Usage:
    # List persisted entries of the configured checkpoint directory
    logsource-checkpoint --config source.yaml list
    
    # Show the decoded initial positions
    logsource-checkpoint show ./checkpoints/source
    
    # Show a specific entry as JSON
    logsource-checkpoint show ./checkpoints/source --batch-id 3 --json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from logsource.checkpoint.ledger import INITIAL_BATCH_ID, PositionLedger
from logsource.checkpoint.metadata_log import FileMetadataLog
from logsource.errors import MalformedCheckpointError
from logsource.source.config import SourceConfig
from logsource.source.partition import canonical
from logsource.utils.config import Config
from logsource.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="logsource-checkpoint",
        description="Inspect logsource checkpoint directories",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Path to YAML configuration file",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: logging.level from configuration)",
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    list_parser = subparsers.add_parser("list", help="List persisted batch ids")
    list_parser.add_argument(
        "directory",
        nargs="?",
        help="Checkpoint directory (default: source.checkpoint_dir)",
    )
    
    show_parser = subparsers.add_parser("show", help="Show decoded positions of an entry")
    show_parser.add_argument(
        "directory",
        nargs="?",
        help="Checkpoint directory (default: source.checkpoint_dir)",
    )
    show_parser.add_argument(
        "--batch-id",
        type=int,
        default=INITIAL_BATCH_ID,
        help=f"Entry to show (default: {INITIAL_BATCH_ID})",
    )
    show_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the raw JSON body instead of one line per partition",
    )
    
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point; returns the process exit code."""
    args = parse_args(argv)
    config = Config(args.config)
    configure_logging(
        log_level=args.log_level or config.get("logging.level", "WARNING"),
        log_format=config.get("logging.format", "console"),
        log_output=config.get("logging.output", "stderr"),
    )
    
    directory = Path(args.directory or SourceConfig.from_config(config).checkpoint_dir)
    if not directory.is_dir():
        print(f"error: {directory} is not a directory", file=sys.stderr)
        return 1
    
    log = FileMetadataLog(directory)
    
    if args.command == "list":
        for batch_id in log.batch_ids():
            print(batch_id)
        return 0
    
    ledger = PositionLedger(log)
    try:
        offset = ledger.load(args.batch_id)
    except MalformedCheckpointError as e:
        logger.error("Checkpoint is malformed", batch_id=args.batch_id, error=str(e))
        print(f"error: {e}", file=sys.stderr)
        return 2
    
    if offset is None:
        print(f"error: no checkpoint entry {args.batch_id} in {directory}", file=sys.stderr)
        return 1
    
    if args.json:
        print(json.dumps(json.loads(offset.to_json()), indent=2))
    else:
        for partition, seq_no in canonical(offset.partition_to_seq_nos):
            print(f"{partition}\t{seq_no}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
