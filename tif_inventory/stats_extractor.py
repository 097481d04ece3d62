"""
Filesystem statistics for a single file.
"""
import asyncio
import logging
import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Union

logger = logging.getLogger(__name__)

Stat = Union[str, int, float]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

STATS_COLUMNS = [
    'File Path',
    'Size',
    'Accessed Time',
    'Accessed Time (ms)',
    'Modified Time',
    'Modified Time (ms)',
    'Created Time',
    'Created Time (ms)',
    'Birth Time',
    'Birth Time (ms)',
]


def to_iso(ns: int) -> str:
    """Render a nanosecond timestamp as ISO-8601 UTC with millisecond precision."""
    dt = EPOCH + timedelta(milliseconds=ns // 1_000_000)
    return dt.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def to_ms(ns: int) -> float:
    return ns / 1_000_000


def birth_time_ns(st: os.stat_result) -> int:
    """
    Birth time in nanoseconds.

    Platforms that don't report a birth time (most Linux filesystems through
    os.stat) fall back to the change time.
    """
    birth_ns = getattr(st, 'st_birthtime_ns', None)
    if birth_ns is not None:
        return birth_ns
    birth = getattr(st, 'st_birthtime', None)
    if birth is not None:
        return int(birth * 1_000_000_000)
    return st.st_ctime_ns


def stats_to_record(file_path: Union[str, Path], st: os.stat_result) -> Dict[str, Stat]:
    """Flatten a stat result into a stats report row."""
    birth_ns = birth_time_ns(st)
    return {
        'File Path': str(file_path),
        'Size': st.st_size,
        'Accessed Time': to_iso(st.st_atime_ns),
        'Accessed Time (ms)': to_ms(st.st_atime_ns),
        'Modified Time': to_iso(st.st_mtime_ns),
        'Modified Time (ms)': to_ms(st.st_mtime_ns),
        'Created Time': to_iso(st.st_ctime_ns),
        'Created Time (ms)': to_ms(st.st_ctime_ns),
        'Birth Time': to_iso(birth_ns),
        'Birth Time (ms)': to_ms(birth_ns),
    }


async def extract_stats_record(file_path: Union[str, Path]) -> Dict[str, Stat]:
    """
    Retrieve filesystem statistics for a file.

    Args:
        file_path: Path to the file

    Returns:
        A stats report row

    Raises:
        OSError: If the path doesn't exist or can't be accessed
    """
    st = await asyncio.to_thread(os.stat, file_path)
    logger.debug(f"Stats: {file_path} ({st.st_size} bytes)")
    return stats_to_record(file_path, st)
