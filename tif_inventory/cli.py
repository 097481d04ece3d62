#!/usr/bin/env python
"""
TIFF Inventory Tool - Command Line Interface
=============================================

CLI for reporting on and consolidating TIFF scans.

Usage:
    tif-inventory report --origin /path/to/scans [--destination /path/to/reports]

    # Tags report only
    tif-inventory tags --origin ./scans --timezone Europe/Madrid

    # Rebuild the deduplicated tree
    tif-inventory consolidate --origin ./scans --files-root ./tifs
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from .config import Config, ConfigError, DEFAULT_PATTERN
from .logger_module import InventoryLogger
from .main_orchestrator import InventoryOrchestrator, PipelineStage


COMMAND_STAGES = {
    'report': [PipelineStage.STATS_REPORT, PipelineStage.TAGS_REPORT],
    'stats': [PipelineStage.STATS_REPORT],
    'tags': [PipelineStage.TAGS_REPORT],
    'consolidate': [PipelineStage.CONSOLIDATION],
    'all': [PipelineStage.STATS_REPORT, PipelineStage.TAGS_REPORT, PipelineStage.CONSOLIDATION],
}


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        description="Report on and consolidate TIFF image collections",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  report       stats.csv and tags.csv under the destination
  stats        stats.csv only
  tags         tags.csv only
  consolidate  rebuild the deduplicated tree under --files-root (erased first!)
  all          reports, then consolidation

Settings not given on the command line are read from the environment
(TIF_INVENTORY_ORIGIN, TIF_INVENTORY_DESTINATION, TIF_INVENTORY_FILES_ROOT,
TIF_INVENTORY_TIMEZONE, TIF_INVENTORY_LOG_DIR) or a .env file.
        """
    )

    parser.add_argument(
        'command',
        choices=sorted(COMMAND_STAGES),
        help='What to run'
    )

    parser.add_argument(
        '--origin', '-s',
        type=Path,
        help='Directory to search for images'
    )

    parser.add_argument(
        '--destination', '-o',
        type=Path,
        help='Directory for stats.csv / tags.csv (default: origin)'
    )

    parser.add_argument(
        '--files-root',
        type=Path,
        help='Root of the consolidated tree (default: ./.tifs)'
    )

    parser.add_argument(
        '--pattern',
        default=None,
        help=f'Glob pattern relative to origin (default: {DEFAULT_PATTERN})'
    )

    parser.add_argument(
        '--timezone',
        default=None,
        help='IANA timezone of the tag dates (default: local time)'
    )

    parser.add_argument(
        '--log-dir',
        type=Path,
        help='Write a session log file to this directory'
    )

    # Output control
    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress progress output'
    )

    return parser


def validate_args(args: argparse.Namespace) -> bool:
    """Validate command line arguments."""
    if args.origin is not None:
        if not args.origin.exists():
            print(f"Error: Origin directory not found: {args.origin}")
            return False
        if not args.origin.is_dir():
            print(f"Error: Not a directory: {args.origin}")
            return False

    if args.verbose and args.quiet:
        print("Error: Cannot specify both --verbose and --quiet")
        return False

    return True


def build_config(args: argparse.Namespace) -> Config:
    """Merge command line arguments over the environment."""
    return Config.from_env(
        origin=args.origin,
        destination=args.destination,
        files_root=args.files_root,
        pattern=args.pattern,
        timezone=args.timezone,
        log_dir=args.log_dir,
    )


def print_summary(orchestrator: InventoryOrchestrator):
    """Print pipeline summary."""
    summary = orchestrator.get_summary()

    print("\n" + "=" * 60)
    print("PROCESSING COMPLETE")
    print("=" * 60)

    print(f"\nFiles matched: {summary['files_matched']}")
    if summary['stats_rows']:
        print(f"Stats rows: {summary['stats_rows']}")
    if summary['tags_rows']:
        print(f"Tags rows: {summary['tags_rows']}")
    if summary['groups']:
        print(f"Groups: {summary['groups']} ({summary['files_copied']} files copied)")

    print("\nOutputs:")
    for output in summary['outputs']:
        print(f"  {output}")


def run_cli(args: argparse.Namespace) -> int:
    """Run the selected command with given arguments."""
    try:
        config = build_config(args)
        stages = COMMAND_STAGES[args.command]
        config.validate(consolidating=PipelineStage.CONSOLIDATION in stages)
    except ConfigError as e:
        print(f"Error: {e}")
        return 1

    action_logger = InventoryLogger(config.log_dir, console=not args.quiet)
    orchestrator = InventoryOrchestrator(config, action_logger)

    if not args.quiet:
        print(f"\nOrigin: {config.origin}")
        print(f"Pattern: {config.pattern}")
        if args.command != 'consolidate':
            print(f"Reports: {config.destination}")
        if PipelineStage.CONSOLIDATION in stages:
            print(f"Consolidated tree: {config.files_root}")
        print()

    try:
        asyncio.run(orchestrator.run(stages))

        if not args.quiet:
            print_summary(orchestrator)
        return 0

    except KeyboardInterrupt:
        print("\n\nInterrupted!")
        return 130

    except Exception as e:
        print(f"\nError: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 1

    finally:
        action_logger.close()


def main():
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    # Module loggers stay quiet unless asked; the session logger reports progress
    log_level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(levelname)s: %(message)s')

    if not validate_args(args):
        sys.exit(1)

    sys.exit(run_cli(args))


if __name__ == "__main__":
    main()
