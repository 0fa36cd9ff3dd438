"""
Command-line interface for the Nalanda validation bot.

This module provides the CLI using argparse and runs the validation,
connectivity check and desktop front-end commands.
"""

import argparse
import getpass
import os
import sys
from pathlib import Path
from typing import Optional

from .config import Config, BROWSER_MODES, DISCOVERY_MODES
from .errors import RunAborted
from .logging_utils import (
    AutomationCallbacks,
    setup_logging,
    get_logger,
    log_section,
    log_error,
    log_success,
)
from .models import RunSummary
from .network_utils import (
    check_site_connectivity,
    format_connectivity_error,
    is_cdp_available,
    is_vpn_proxy_error,
)
from .orchestrator import RunOrchestrator
from .report import ReportWriteError, write_days_csv, write_summary_json


DEFAULT_PASSWORD_ENV = 'NALANDA_PASSWORD'


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns:
        Configured ArgumentParser
    """
    parser = argparse.ArgumentParser(
        prog='nalanda_bot',
        description='Automated validation of pending working days on Nalanda',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate the current month and the 6 previous ones
  NALANDA_PASSWORD=... python -m nalanda_bot run --username jdoe

  # Review only the last 2 months and keep a JSON summary
  python -m nalanda_bot run --username jdoe --months-back 2 --summary-json out/run.json

  # Attach to a shared browser already listening on port 9222
  python -m nalanda_bot run --username jdoe --browser-mode attach

  # Watch the browser while it works
  python -m nalanda_bot run --username jdoe --headed --verbose

  # Check that Nalanda is reachable
  python -m nalanda_bot check

  # Open the desktop front-end
  python -m nalanda_bot gui
        """
    )

    # Subcommands
    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Run command
    run_parser = subparsers.add_parser(
        'run',
        help='Validate every pending working day',
        allow_abbrev=False
    )

    run_parser.add_argument(
        '--username',
        type=str,
        required=True,
        metavar='USER',
        help='Nalanda user name'
    )

    run_parser.add_argument(
        '--password-env',
        type=str,
        default=DEFAULT_PASSWORD_ENV,
        metavar='VAR',
        help=f'Environment variable holding the password (default: {DEFAULT_PASSWORD_ENV}); '
             f'prompted for when unset'
    )

    run_parser.add_argument(
        '--months-back',
        type=int,
        default=Config.months_back,
        metavar='N',
        help=f'Prior months to review after the current one (default: {Config.months_back})'
    )

    run_parser.add_argument(
        '--browser-mode',
        choices=BROWSER_MODES,
        default=Config.browser_mode,
        help='launch a private Chromium, attach to a shared one, or auto-detect'
    )

    run_parser.add_argument(
        '--cdp-url',
        type=str,
        default=Config.cdp_url,
        metavar='URL',
        help='Remote-debugging endpoint for --browser-mode attach/auto'
    )

    run_parser.add_argument(
        '--executable-path',
        type=str,
        metavar='PATH',
        help='Chromium binary to use (auto-detected when omitted)'
    )

    run_parser.add_argument(
        '--headed',
        action='store_true',
        help='Show the launched browser window'
    )

    run_parser.add_argument(
        '--discovery',
        choices=DISCOVERY_MODES,
        default=Config.discovery,
        help='How pending days are found (default: auto)'
    )

    run_parser.add_argument(
        '--summary-json',
        type=str,
        metavar='PATH',
        help='Write the run summary as JSON'
    )

    run_parser.add_argument(
        '--summary-csv',
        type=str,
        metavar='PATH',
        help='Write one CSV row per processed day'
    )

    run_parser.add_argument(
        '--force',
        action='store_true',
        help='Overwrite existing summary files'
    )

    run_parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose logging (debug level)'
    )

    # Check command
    check_parser = subparsers.add_parser(
        'check',
        help='Check connectivity to Nalanda and the shared browser'
    )

    check_parser.add_argument(
        '--cdp-url',
        type=str,
        metavar='URL',
        help='Also probe this remote-debugging endpoint'
    )

    check_parser.add_argument(
        '--timeout',
        type=int,
        default=10,
        metavar='SECONDS',
        help='Connection timeout (default: 10)'
    )

    check_parser.add_argument(
        '--verbose',
        '-v',
        action='store_true',
        help='Enable verbose logging (debug level)'
    )

    # GUI command
    subparsers.add_parser(
        'gui',
        help='Open the desktop front-end'
    )

    return parser


def validate_args(args: argparse.Namespace) -> bool:
    """
    Validate command-line arguments.

    Args:
        args: Parsed arguments

    Returns:
        True if valid, False otherwise
    """
    if args.command != 'run':
        return True

    logger = get_logger()

    if args.months_back < 1:
        log_error("--months-back must be at least 1", logger)
        return False

    # Refuse up front rather than after a long run
    for path in (args.summary_json, args.summary_csv):
        if path and Path(path).exists() and not args.force:
            log_error(f"Output file already exists: {path}. Use --force to overwrite.", logger)
            return False

    return True


def read_password(env_var: str) -> Optional[str]:
    """
    Read the password from the environment, or prompt for it.

    The password is never accepted on the command line.

    Returns:
        The password, or None if none was given
    """
    password = os.environ.get(env_var)
    if password:
        return password

    if not sys.stdin.isatty():
        return None

    password = getpass.getpass("Nalanda password: ")
    return password or None


def write_reports(config: Config, summary: RunSummary) -> bool:
    """
    Write the requested summary files.

    Returns:
        True if every requested file was written
    """
    logger = get_logger()
    ok = True

    if config.summary_json:
        try:
            path = write_summary_json(summary, config.summary_json, force=config.force)
            log_success(f"Summary written to {path}", logger)
        except ReportWriteError as e:
            log_error(str(e), logger)
            ok = False

    if config.summary_csv:
        try:
            path = write_days_csv(summary, config.summary_csv, force=config.force)
            log_success(f"Day report written to {path}", logger)
        except ReportWriteError as e:
            log_error(str(e), logger)
            ok = False

    return ok


def cmd_run(args: argparse.Namespace) -> int:
    """
    Execute the run command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    logger = get_logger()

    # Create configuration from arguments
    config = Config(
        months_back=args.months_back,
        browser_mode=args.browser_mode,
        cdp_url=args.cdp_url,
        executable_path=args.executable_path,
        headless=not args.headed,
        discovery=args.discovery,
        summary_json=args.summary_json,
        summary_csv=args.summary_csv,
        force=args.force,
        verbose=args.verbose
    )

    try:
        config.validate()
    except ValueError as e:
        log_error(f"Configuration error: {e}", logger)
        return 1

    password = read_password(args.password_env)
    if not password:
        log_error(f"No password given. Set {args.password_env} or run interactively.", logger)
        return 1

    log_section("Validating Pending Working Days", logger)

    # Entries are already mirrored to the console logger
    callbacks = AutomationCallbacks(on_log=lambda entry: None)

    try:
        summary = RunOrchestrator(config).run(
            args.username,
            password,
            config.months_back,
            callbacks
        )

    except KeyboardInterrupt:
        logger.info("")
        logger.warning("Operation cancelled by user")
        return 130  # Standard exit code for SIGINT

    except RunAborted as e:
        logger.info("")
        log_error(f"Run aborted: {e}", logger)
        if e.summary is not None:
            logger.info(e.summary.format_summary())
            write_reports(config, e.summary)
        return 1

    logger.info(summary.format_summary())

    if not write_reports(config, summary):
        return 1

    failed = summary.failed_days()
    if failed:
        logger.warning(f"Run completed; {len(failed)} day(s) failed after retries")
    else:
        logger.info("Run completed successfully")
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """
    Execute the check command.

    Returns:
        Exit code (0 if everything probed is reachable)
    """
    logger = get_logger()
    config = Config()

    log_section("Connectivity Check", logger)

    success, error_msg = check_site_connectivity(config.base_url, timeout=args.timeout)
    if not success:
        log_error(
            format_connectivity_error(config.base_url, error_msg, is_vpn_proxy_error(error_msg)),
            logger
        )
        return 1
    log_success(f"Nalanda reachable: {config.base_url}", logger)

    if args.cdp_url:
        if not is_cdp_available(args.cdp_url, timeout=args.timeout):
            log_error(f"No browser answers on {args.cdp_url}", logger)
            return 1
        log_success(f"Shared browser reachable: {args.cdp_url}", logger)

    return 0


def cmd_gui(args: argparse.Namespace) -> int:
    """Launch the desktop front-end."""
    # Imported here so the CLI works without a display
    from .gui import main as gui_main

    return gui_main()


def main(argv=None):
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv)

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Set up logging
    setup_logging(verbose=args.verbose if hasattr(args, 'verbose') else False)

    logger = get_logger()

    # Show header
    logger.info("")
    logger.info("=" * 70)
    logger.info("  Nalanda Validation Bot")
    logger.info("=" * 70)

    # Check if command was specified
    if not args.command:
        parser.print_help()
        return 1

    # Validate arguments
    if not validate_args(args):
        return 1

    # Execute command
    if args.command == 'run':
        return cmd_run(args)
    elif args.command == 'check':
        return cmd_check(args)
    elif args.command == 'gui':
        return cmd_gui(args)
    else:
        log_error(f"Unknown command: {args.command}", logger)
        return 1


if __name__ == '__main__':
    sys.exit(main())
