"""Core backup management: mount the drive, copy into the rotation slot, unmount."""

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from humanfriendly import format_size, format_timespan

from .commands import SystemCommands, parse_rsync_stats
from .config import AppConfig
from .rotation import requires_checksum, rotation_index, select_slot


class BackupResult:
    """Result of a backup run."""

    def __init__(
        self,
        day: int,
        slot: str,
        destination: str,
        success: bool,
        bytes_transferred: int = 0,
        error_message: str = "",
        execution_time: float = 0.0,
        checksum: bool = False,
        dry_run: bool = False,
    ):
        self.day = day
        self.slot = slot
        self.destination = destination
        self.success = success
        self.bytes_transferred = bytes_transferred
        self.error_message = error_message
        self.execution_time = execution_time
        self.checksum = checksum
        self.dry_run = dry_run


def is_directory_accessible(path: str) -> bool:
    return os.path.isdir(path) and os.access(path, os.R_OK | os.X_OK)


class BackupManager:
    """Main backup management class."""

    def __init__(
        self,
        config: AppConfig,
        commands: Optional[SystemCommands] = None,
        dry_run: bool = False,
    ):
        self.config = config
        self.commands = commands if commands is not None else SystemCommands()
        self.dry_run = dry_run
        self.logger = logging.getLogger(__name__)

    @property
    def required_commands(self) -> List[str]:
        names = ["rsync"]
        if self.config.volume:
            names.extend(["mount", "umount"])
        return names

    def destination_for(self, slot: str) -> str:
        return str(Path(self.config.mount_point) / slot)

    def perform_preflight_checks(self) -> List[str]:
        """
        Perform pre-flight checks before starting the backup.

        Returns:
            List of error messages (empty if all checks pass)
        """
        errors = []

        for name in self.commands.missing_requirements(self.required_commands):
            errors.append(f"Required command is not installed or not on PATH: {name}")

        if not Path(self.config.mount_point).is_dir():
            errors.append(f"Mount point does not exist: {self.config.mount_point}")

        for source in self.config.sources:
            if not is_directory_accessible(source):
                errors.append(f"Source directory not accessible: {source}")

        return errors

    def _check_free_space(self) -> str:
        required = self.config.min_free_space_bytes
        if required <= 0:
            return ""
        try:
            free = self.commands.free_space(self.config.mount_point)
        except OSError as e:
            return f"Could not determine free space on {self.config.mount_point}: {e}"
        if free < required:
            return (
                f"Insufficient space on {self.config.mount_point}: "
                f"{format_size(free)} available, {format_size(required)} required"
            )
        return ""

    def _copy_to_slot(self, destination: str, checksum: bool) -> Tuple[bool, int, str]:
        """
        Copy all sources into a slot directory on the mounted drive.

        Returns:
            Tuple of (success, bytes_transferred, error_message)
        """
        space_error = self._check_free_space()
        if space_error:
            self.logger.error(space_error)
            return False, 0, space_error

        if not self.dry_run:
            Path(destination).mkdir(parents=True, exist_ok=True)

        copy_result = self.commands.copy(
            self.config.sources,
            destination,
            checksum=checksum,
            excludes=self.config.excludes,
            dry_run=self.dry_run,
        )
        if not copy_result.success:
            error_message = f"rsync copy failed: {copy_result.error_message}"
            self.logger.error(error_message)
            return False, 0, error_message

        bytes_transferred = parse_rsync_stats(copy_result.output)
        self.logger.info(
            f"Copied into {destination}: {format_size(bytes_transferred)} transferred"
        )
        return True, bytes_transferred, ""

    def run(self, day: int) -> BackupResult:
        """
        Copy the configured sources into the rotation slot for ``day``.

        The drive is mounted first when a volume is configured and it is not
        already mounted; in that case it is unmounted again afterwards, also
        when the copy fails.
        """
        start_time = datetime.now()
        slot = select_slot(day)
        checksum = requires_checksum(slot)
        destination = self.destination_for(slot)
        volume = self.config.volume
        mount_point = self.config.mount_point

        self.logger.info(
            f"Day {day} selects slot '{slot}' (rotation index {rotation_index(day)})"
        )
        if checksum:
            self.logger.info(f"Slot '{slot}' is the archive slot, comparing file checksums")

        success, bytes_transferred, error_message = False, 0, ""
        mounted_here = False

        if volume and not self.commands.is_mounted(mount_point):
            mount_result = self.commands.mount(volume, mount_point)
            if mount_result.success:
                mounted_here = True
            else:
                error_message = f"Could not mount {volume} on {mount_point}: {mount_result.error_message}"
                self.logger.error(error_message)
        elif volume:
            self.logger.info(f"{mount_point} is already mounted")

        if not error_message:
            try:
                success, bytes_transferred, error_message = self._copy_to_slot(
                    destination, checksum
                )
            finally:
                if mounted_here:
                    unmount_result = self.commands.unmount(mount_point)
                    if not unmount_result.success:
                        self.logger.error(
                            f"Could not unmount {mount_point}: {unmount_result.error_message}"
                        )
                        if success:
                            success = False
                            error_message = (
                                f"Could not unmount {mount_point}: {unmount_result.error_message}"
                            )

        return BackupResult(
            day=day,
            slot=slot,
            destination=destination,
            success=success,
            bytes_transferred=bytes_transferred,
            error_message=error_message,
            execution_time=(datetime.now() - start_time).total_seconds(),
            checksum=checksum,
            dry_run=self.dry_run,
        )


def format_backup_summary(result: BackupResult) -> str:
    """Format a backup result into a readable summary."""
    status = "SUCCESS" if result.success else "FAILED"
    summary = ["=== Local Backup Summary ==="]
    if result.dry_run:
        summary.append("(dry run, nothing was written)")
    summary.append(f"[{status}] day {result.day} -> slot '{result.slot}'")
    summary.append(f"  Destination: {result.destination}")
    summary.append(f"  Verification: {'checksum' if result.checksum else 'size and mtime'}")
    summary.append(f"  Execution time: {format_timespan(result.execution_time)}")
    if result.success:
        summary.append(
            f"  Bytes transferred: {result.bytes_transferred:,} ({format_size(result.bytes_transferred)})"
        )
    else:
        summary.append(f"  Error: {result.error_message}")
    return "\n".join(summary)
