"""Wrappers around the external tools a backup run depends on."""

import logging
import os
import re
import shutil
import subprocess
from typing import List, Optional, Sequence

MOUNT_TIMEOUT = 120
COPY_TIMEOUT = 6 * 3600

_TRANSFERRED_RE = re.compile(r"Total transferred file size:\s*([\d,.]+)")


class CommandResult:
    """Result of running an external command."""

    def __init__(self, success: bool, output: str = "", error_message: str = ""):
        self.success = success
        self.output = output
        self.error_message = error_message

    def __repr__(self) -> str:
        return f"CommandResult(success={self.success!r}, error_message={self.error_message!r})"


def parse_rsync_stats(output: str) -> int:
    """Parse ``rsync --stats`` output to extract bytes transferred."""
    match = _TRANSFERRED_RE.search(output or "")
    if not match:
        return 0
    try:
        return int(match.group(1).replace(",", "").replace(".", ""))
    except ValueError:
        return 0


class SystemCommands:
    """Runs mount, rsync and umount on the local machine."""

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def _run(self, cmd: List[str], timeout: int) -> CommandResult:
        self.logger.debug(f"Running command: {' '.join(cmd)}")
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            error_msg = f"{cmd[0]} timed out after {timeout} seconds"
            self.logger.error(error_msg)
            return CommandResult(False, error_message=error_msg)
        except (FileNotFoundError, subprocess.SubprocessError) as e:
            error_msg = f"{cmd[0]} could not be run: {e}"
            self.logger.error(error_msg)
            return CommandResult(False, error_message=error_msg)

        if result.returncode == 0:
            return CommandResult(True, output=result.stdout)

        error_msg = f"{cmd[0]} exited with status {result.returncode}: {result.stderr.strip()}"
        self.logger.error(error_msg)
        return CommandResult(False, output=result.stdout, error_message=error_msg)

    def missing_requirements(self, names: Sequence[str]) -> List[str]:
        """Return the commands that are not available on PATH."""
        return [name for name in names if shutil.which(name) is None]

    def is_mounted(self, mount_point: str) -> bool:
        return os.path.ismount(mount_point)

    def free_space(self, path: str) -> int:
        """Free bytes on the filesystem holding ``path``."""
        return shutil.disk_usage(path).free

    def mount(self, volume: str, mount_point: str) -> CommandResult:
        """Mount ``volume`` (device, UUID=... or LABEL=...) on ``mount_point``."""
        self.logger.info(f"Mounting {volume} on {mount_point}")
        return self._run(["mount", volume, mount_point], MOUNT_TIMEOUT)

    def unmount(self, mount_point: str) -> CommandResult:
        self.logger.info(f"Unmounting {mount_point}")
        return self._run(["umount", mount_point], MOUNT_TIMEOUT)

    def copy(
        self,
        sources: Sequence[str],
        destination: str,
        checksum: bool = False,
        excludes: Optional[Sequence[str]] = None,
        dry_run: bool = False,
    ) -> CommandResult:
        """
        Mirror the source directories into ``destination`` using rsync.

        Args:
            sources: Source directories
            destination: Destination directory
            checksum: Compare file contents instead of size and mtime
            excludes: rsync exclude patterns
            dry_run: Only report what would be transferred

        Returns:
            CommandResult carrying the rsync statistics on success
        """
        cmd = build_rsync_command(sources, destination, checksum, excludes, dry_run)
        self.logger.info(f"Running rsync command: {' '.join(cmd)}")
        return self._run(cmd, COPY_TIMEOUT)


def build_rsync_command(
    sources: Sequence[str],
    destination: str,
    checksum: bool = False,
    excludes: Optional[Sequence[str]] = None,
    dry_run: bool = False,
) -> List[str]:
    """Build the rsync argument list for a backup run."""
    cmd = ["rsync", "--archive", "--delete", "--stats"]
    if checksum:
        cmd.append("--checksum")
    if dry_run:
        cmd.append("--dry-run")
    for pattern in excludes or []:
        cmd.append(f"--exclude={pattern}")
    cmd.extend(sources)
    cmd.append(destination.rstrip("/") + "/")
    return cmd
