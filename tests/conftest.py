"""Shared fixtures for backup-local tests."""

import pytest

from backup_local.commands import CommandResult
from backup_local.config import AppConfig

RSYNC_STATS = """
Number of files: 12 (reg: 10, dir: 2)
Number of regular files transferred: 3
Total file size: 52,480 bytes
Total transferred file size: 4,096 bytes
Literal data: 4,096 bytes
"""


class FakeCommands:
    """Records calls instead of running mount, rsync and umount."""

    def __init__(self):
        self.calls = []
        self.mounted = False
        self.missing = []
        self.free = 10**12
        self.mount_result = CommandResult(True)
        self.copy_result = CommandResult(True, output=RSYNC_STATS)
        self.unmount_result = CommandResult(True)
        self.copy_error = None

    def missing_requirements(self, names):
        self.calls.append(("missing_requirements", list(names)))
        return [name for name in names if name in self.missing]

    def is_mounted(self, mount_point):
        return self.mounted

    def free_space(self, path):
        return self.free

    def mount(self, volume, mount_point):
        self.calls.append(("mount", volume, mount_point))
        if self.mount_result.success:
            self.mounted = True
        return self.mount_result

    def unmount(self, mount_point):
        self.calls.append(("unmount", mount_point))
        if self.unmount_result.success:
            self.mounted = False
        return self.unmount_result

    def copy(self, sources, destination, checksum=False, excludes=None, dry_run=False):
        self.calls.append(
            ("copy", list(sources), destination, checksum, list(excludes or []), dry_run)
        )
        if self.copy_error is not None:
            raise self.copy_error
        return self.copy_result

    def names(self):
        return [call[0] for call in self.calls if call[0] != "missing_requirements"]


@pytest.fixture
def fake_commands():
    return FakeCommands()


@pytest.fixture
def source_dir(tmp_path):
    source = tmp_path / "source"
    source.mkdir()
    (source / "notes.txt").write_text("hello")
    return source


@pytest.fixture
def mount_dir(tmp_path):
    mount = tmp_path / "media" / "backup"
    mount.mkdir(parents=True)
    return mount


@pytest.fixture
def app_config(source_dir, mount_dir):
    return AppConfig(
        volume="UUID=1234-ABCD",
        mount_point=str(mount_dir),
        sources=[str(source_dir)],
        excludes=["*.tmp"],
    )
