"""Tower-of-Hanoi rotation over the six backup slots.

Each day of the year is mapped to one of the slot labels ``a`` to ``f``.
Slot ``a`` is rewritten every other day, ``b`` every fourth day, ``c`` every
eighth and so on, so older copies live proportionally longer before they
are overwritten. Slot ``f`` collects every remaining rank and is the slot
that holds data the longest; it is copied with full content checksums.
"""

from datetime import date
from typing import Union

# Bit position k for each residue 2**k mod 37. Index 0 (no bit set) holds 32;
# residues no power of two below 2**32 produces hold 0.
LOOKUP_TABLE = (
    32, 0, 1, 26, 2, 23, 27, 0, 3, 16, 24, 30, 28, 11, 0, 13, 4, 7, 17,
    0, 25, 22, 31, 15, 29, 10, 12, 6, 0, 21, 14, 9, 5, 20, 8, 19, 18,
)

SLOT_LABELS = ("a", "b", "c", "d", "e")
ARCHIVE_SLOT = "f"
ALL_SLOTS = SLOT_LABELS + (ARCHIVE_SLOT,)


def _validate_day(day: int) -> None:
    if isinstance(day, bool) or not isinstance(day, int):
        raise TypeError(f"day must be an integer, got {type(day).__name__}")
    if day < 1:
        raise ValueError(f"day must be a positive day-of-year, got {day}")


def rotation_index(day: int) -> int:
    """
    Isolate the lowest set bit of ``day`` and reduce it modulo 37.

    Args:
        day: Day-of-year, 1 or greater

    Returns:
        Index into LOOKUP_TABLE, between 0 and 36
    """
    _validate_day(day)
    return (-day & day) % len(LOOKUP_TABLE)


def select_slot(day: int) -> str:
    """
    Select the backup slot label for a day-of-year.

    Args:
        day: Day-of-year, 1 or greater. Values past 366 are accepted.

    Returns:
        One of 'a', 'b', 'c', 'd', 'e' or 'f'

    Raises:
        TypeError: If day is not an integer
        ValueError: If day is zero or negative
    """
    rank = LOOKUP_TABLE[rotation_index(day)]
    if rank < len(SLOT_LABELS):
        return SLOT_LABELS[rank]
    return ARCHIVE_SLOT


def requires_checksum(slot: str) -> bool:
    """Whether a slot is copied with content checksums instead of size/mtime."""
    if slot not in ALL_SLOTS:
        raise ValueError(f"Unknown slot label: {slot!r}")
    return slot == ARCHIVE_SLOT


def day_of_year(when: Union[date, None] = None) -> int:
    """Ordinal day within the year for a date, today when omitted."""
    if when is None:
        when = date.today()
    return when.timetuple().tm_yday
