#!/usr/bin/env python3
"""
backup-local: rotating rsync backups onto a removable drive.

Main entry point for the backup application.
"""

import argparse
import logging
import logging.handlers
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import coloredlogs

from backup_local.backup_manager import BackupManager, format_backup_summary
from backup_local.commands import SystemCommands
from backup_local.config import AppConfig, load_config
from backup_local.notifications import send_monitor_notification
from backup_local.rotation import day_of_year, rotation_index, select_slot
from backup_local.schedule_checker import ScheduleChecker

APP_LOGGER = "backup_local"
LOG_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"


def setup_logging(config: AppConfig, verbose: bool = False) -> logging.Logger:
    """Set up logging to the log file, and to the console when interactive."""
    log_file_path = Path(config.log_file)
    log_file_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(APP_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    level = logging.DEBUG if verbose else getattr(logging, config.log_level)
    logger.setLevel(level)

    file_handler = logging.handlers.RotatingFileHandler(
        log_file_path, maxBytes=1024 * 1024, backupCount=5, encoding="utf-8"
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(file_handler)

    if verbose or sys.stdout.isatty():
        coloredlogs.install(level=level, logger=logger, stream=sys.stdout, fmt=LOG_FORMAT)

    return logger


def positive_int(value: str) -> int:
    try:
        day = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid day-of-year: {value!r}")
    if day < 1:
        raise argparse.ArgumentTypeError(f"day-of-year must be 1 or greater, got {day}")
    return day


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="backup-local",
        description="Mount the backup drive and rsync into today's rotation slot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  backup-local                      # Run from cron, honouring the schedule
  backup-local --force              # Run now regardless of the schedule
  backup-local --day 32 --dry-run   # Show what slot 'f' would receive
  backup-local --print-slot         # Print today's slot label and exit
        """,
    )

    parser.add_argument(
        "-c",
        "--config",
        default="config.yaml",
        help="Path to the YAML configuration file (default: %(default)s)",
    )
    parser.add_argument(
        "-d",
        "--day",
        type=positive_int,
        help="Day-of-year used to select the slot (default: today)",
    )
    parser.add_argument(
        "-n",
        "--dry-run",
        action="store_true",
        help="Run rsync with --dry-run and leave the slot untouched",
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        help="Ignore the configured schedule",
    )
    parser.add_argument(
        "-p",
        "--print-slot",
        action="store_true",
        help="Print the slot label for the day and exit",
    )
    parser.add_argument(
        "-V",
        "--verbose",
        action="store_true",
        help="Log messages to the console while processing",
    )

    return parser.parse_args(argv)


def notify(config: AppConfig, dry_run: bool, success: bool, logger: logging.Logger) -> None:
    if not config.monitor_url or dry_run:
        return
    if success:
        send_monitor_notification(config.monitor_url, "up", "OK", logger=logger)
    else:
        send_monitor_notification(config.monitor_url, "down", "FAILED", logger=logger)


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    start_time = datetime.now()
    args = parse_arguments(argv)
    day = args.day if args.day is not None else day_of_year(start_time.date())

    if args.print_slot:
        if args.verbose:
            print(f"day {day}: rotation index {rotation_index(day)}, slot {select_slot(day)}")
        else:
            print(select_slot(day))
        return 0

    config = None
    logger = None

    try:
        config = load_config(args.config)
        logger = setup_logging(config, verbose=args.verbose)

        if args.dry_run:
            logger.info("Starting backup process in DRY RUN mode")
        else:
            logger.info("Starting backup-local backup process")

        if not (args.force or args.dry_run or args.day is not None):
            if not ScheduleChecker.should_run(config.schedule, start_time):
                next_run = ScheduleChecker.next_run_time(config.schedule, start_time)
                logger.info(f"No backup scheduled today; next run at {next_run:%Y-%m-%d %H:%M}")
                return 0

        backup_manager = BackupManager(config, commands=SystemCommands(), dry_run=args.dry_run)

        logger.info("Performing pre-flight checks...")
        preflight_errors = backup_manager.perform_preflight_checks()
        if preflight_errors:
            logger.critical("Pre-flight checks failed:")
            for error in preflight_errors:
                logger.critical(f"  - {error}")
            notify(config, args.dry_run, False, logger)
            return 1
        logger.info("Pre-flight checks passed")

        result = backup_manager.run(day)
        logger.info("\n" + format_backup_summary(result))
        notify(config, args.dry_run, result.success, logger)

        if not result.success:
            logger.warning("Backup failed - check logs for details")
            return 2

        logger.info("Backup completed successfully")
        return 0

    except FileNotFoundError as e:
        print(f"ERROR: Configuration file error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        error_msg = f"Configuration validation error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg)
        return 1

    except KeyboardInterrupt:
        error_msg = "Backup process interrupted by user"
        print(f"\nINTERRUPTED: {error_msg}", file=sys.stderr)
        if logger:
            logger.warning(error_msg)
            notify(config, args.dry_run, False, logger)
        return 130

    except Exception as e:
        error_msg = f"Unexpected error: {e}"
        print(f"ERROR: {error_msg}", file=sys.stderr)
        if logger:
            logger.critical(error_msg, exc_info=True)
            notify(config, args.dry_run, False, logger)
        return 1

    finally:
        if logger:
            total_time = (datetime.now() - start_time).total_seconds()
            logger.info(f"Backup process completed in {total_time:.2f} seconds")


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
