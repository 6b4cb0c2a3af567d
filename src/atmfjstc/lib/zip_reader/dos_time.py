"""
Utilities for decoding the MS-DOS date/time pairs used for ZIP entry modification times.
"""

from datetime import datetime, timedelta
from typing import Tuple


DOSDateTimeFields = Tuple[int, int, int, int, int, int]


def decode_dos_date_time(dos_date: int, dos_time: int) -> DOSDateTimeFields:
    """
    Splits a DOS date/time pair into its raw fields.

    Returns:
        A (year, month, day, hour, minute, second) tuple. The values are not validated, so e.g. a day of 0 or 60+
        seconds may occur in corrupt or sloppily written archives.
    """
    return (
        (dos_date >> 9) + 1980,
        (dos_date >> 5) & 0xF,
        dos_date & 0x1F,
        (dos_time >> 11) & 0x1F,
        (dos_time >> 5) & 0x3F,
        (dos_time & 0x3F) * 2,
    )


def dos_date_time_to_datetime(dos_date: int, dos_time: int) -> datetime:
    """
    Converts a DOS date/time pair to a naive `datetime`.

    Out of range fields are carried over rather than rejected: day 0 is the last day of the previous month, month 0 is
    December of the previous year, 25:00 is 01:00 on the next day etc.
    """
    year, month, day, hour, minute, second = decode_dos_date_time(dos_date, dos_time)

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1

    return datetime(year, month, 1) + timedelta(days=day - 1, hours=hour, minutes=minute, seconds=second)
