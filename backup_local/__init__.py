"""
backup-local: rotating rsync backups onto a removable drive.

The drive is mounted, the configured directories are mirrored into one of
six slot folders chosen by a Tower-of-Hanoi rotation over the day of the
year, and the drive is unmounted again.
"""

__version__ = "0.1.0"
