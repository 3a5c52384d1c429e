"""
Command-line interface for the file sorter.

Handles argument parsing, console output and the run log, and turns the
run summary into an exit code.
"""

import argparse
import signal
import sys
import threading
from contextlib import ExitStack
from dataclasses import replace
from pathlib import Path
from typing import Callable, List, Optional

from .config import Config, DEFAULT_CONFIG, load_rules
from .errors import ConfigurationError
from .operations import organize_files, prepare_run
from .report import RULE
from .run_log import open_run_log

EXIT_OK = 0
EXIT_CONFIG_ERROR = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_CANCELLED = 130


def _categories_epilog(config: Config) -> str:
    lines = ["Categories:"]
    for category, subcategories in config.category_tree().items():
        if subcategories:
            lines.append(f"  {category:<14}- {', '.join(subcategories)}")
        else:
            lines.append(f"  {category}")
    return "\n".join(lines)


def create_parser(config: Config = DEFAULT_CONFIG) -> argparse.ArgumentParser:
    """
    Create the argument parser for the CLI.

    Args:
        config: Configuration to use for default values in help text

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Sort files into category and subcategory folders by extension",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
{_categories_epilog(config)}

Safety:
  Existing files are never overwritten: a clashing name gets a _1, _2, ... suffix.
  Every run is appended to {config.log_file_name} in the destination folder.
  Use --dry-run to preview changes before applying.
        """
    )

    parser.add_argument(
        "source",
        type=str,
        help="Directory to sort"
    )

    parser.add_argument(
        "destination",
        type=str,
        nargs="?",
        default=None,
        help=f"Root of the category tree (default: SOURCE/{config.default_destination_name})"
    )

    parser.add_argument(
        "--copy", "-c",
        action="store_true",
        help="Copy files instead of moving them"
    )

    parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Also sort files in subfolders of the source"
    )

    parser.add_argument(
        "--dry-run", "-n",
        action="store_true",
        help="Preview changes without moving files"
    )

    parser.add_argument(
        "--log-file", "-l",
        type=str,
        default=None,
        help=f"Log file to append to (default: DESTINATION/{config.log_file_name}, none for dry runs)"
    )

    parser.add_argument(
        "--rules",
        type=str,
        default=None,
        help="JSON file with extra extension rules, e.g. {\".log\": \"Documents/Logs\"}"
    )

    parser.add_argument(
        "--skip-hidden",
        action="store_true",
        help="Leave hidden files (starting with .) where they are"
    )

    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Only print errors and the summary"
    )

    return parser


def build_config(args: argparse.Namespace, config: Config = DEFAULT_CONFIG) -> Config:
    """Apply --rules and --skip-hidden on top of the base configuration."""
    if args.rules:
        config = config.with_rules(load_rules(Path(args.rules).expanduser()))
    if args.skip_hidden:
        config = replace(config, skip_hidden=True)
    return config


def run(
    args: argparse.Namespace,
    config: Config = DEFAULT_CONFIG,
    should_stop: Optional[Callable[[], bool]] = None,
) -> int:
    """
    Run the file sorter with the given arguments.

    Args:
        args: Parsed command-line arguments
        config: Configuration to use
        should_stop: Polled between files to cancel the run

    Returns:
        Exit code (0 success, 1 configuration error, 2 some files failed,
        130 cancelled)
    """
    try:
        config = build_config(args, config)
        destination = Path(args.destination) if args.destination else None
        source, destination = prepare_run(
            Path(args.source), destination, config=config, dry_run=args.dry_run
        )
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if args.log_file:
        log_file = Path(args.log_file).expanduser().resolve()
    elif args.dry_run:
        log_file = None
    else:
        log_file = destination / config.log_file_name

    with ExitStack() as stack:
        log = None
        if log_file is not None:
            try:
                log = stack.enter_context(open_run_log(log_file))
            except OSError as e:
                print(f"Error: cannot open log file '{log_file}': {e}", file=sys.stderr)
                return EXIT_CONFIG_ERROR

        def output(message: str) -> None:
            if not args.quiet or message.startswith(RULE):
                print(message)
            if log is not None:
                log.info(message)

        def error(message: str) -> None:
            print(message, file=sys.stderr)
            if log is not None:
                log.error(message)

        summary = organize_files(
            source,
            destination,
            copy=args.copy,
            recursive=args.recursive,
            dry_run=args.dry_run,
            config=config,
            output=output,
            should_stop=should_stop,
            exclude=[log_file] if log_file is not None else [],
            error_output=error,
        )

    if summary.cancelled:
        return EXIT_CANCELLED
    if summary.failed:
        return EXIT_PARTIAL_FAILURE
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Ctrl+C stops the run after the file currently being placed.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    config = DEFAULT_CONFIG
    parser = create_parser(config)
    args = parser.parse_args(argv)

    stop = threading.Event()

    def request_stop(signum, frame):
        print("\nStopping after the current file...", file=sys.stderr)
        stop.set()

    previous_handler = signal.signal(signal.SIGINT, request_stop)
    try:
        return run(args, config, should_stop=stop.is_set)
    finally:
        signal.signal(signal.SIGINT, previous_handler)


if __name__ == "__main__":
    sys.exit(main())
