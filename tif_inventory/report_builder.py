"""
Report builder for the TIFF inventory tool.
Runs a per-file extractor over a batch concurrently and writes the rows to CSV.
"""
import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Union, Any

import pandas as pd

from .stats_extractor import STATS_COLUMNS, extract_stats_record
from .tag_extractor import TAG_COLUMNS, extract_tag_record


logger = logging.getLogger(__name__)

Record = Dict[str, Any]
Extractor = Callable[[Path], Awaitable[Record]]


def records_to_frame(records: Sequence[Record], columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Build a dataframe with a fixed column order (header kept for empty batches)."""
    return pd.DataFrame(list(records), columns=columns)


def records_to_csv(records: Sequence[Record], columns: Optional[List[str]] = None) -> str:
    """Serialize rows to CSV text."""
    return records_to_frame(records, columns).to_csv(index=False)


def write_csv(records: Sequence[Record], destination: Path, columns: Optional[List[str]] = None):
    """Write rows to `destination`, replacing any existing file."""
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    records_to_frame(records, columns).to_csv(destination, index=False)


async def collect_records(file_paths: Sequence[Union[str, Path]], extractor: Extractor) -> List[Record]:
    """
    Run `extractor` on every path concurrently.

    Rows come back in input order whatever the completion order. The first
    failure propagates and no rows are returned; extractions still running
    at that point are cancelled and awaited before the error is re-raised.
    """
    tasks = [asyncio.ensure_future(extractor(path)) for path in file_paths]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def build_report(
    file_paths: Sequence[Union[str, Path]],
    extractor: Extractor,
    destination: Union[str, Path],
    columns: Optional[List[str]] = None,
) -> List[Record]:
    """
    Extract a row per file and persist the batch as CSV.

    All-or-nothing: if any extraction fails the error propagates and the
    destination is left untouched.

    Args:
        file_paths: Files to report on, in output order
        extractor: Async per-file extractor
        destination: CSV file to write (overwritten)
        columns: Column order for the CSV header

    Returns:
        The rows that were written
    """
    logger.info(f"Building report for {len(file_paths)} files -> {destination}")
    records = await collect_records(file_paths, extractor)
    await asyncio.to_thread(write_csv, records, Path(destination), columns)
    logger.info(f"Wrote {len(records)} rows to {destination}")
    return records


async def build_stats_report(file_paths: Sequence[Union[str, Path]],
                             destination: Union[str, Path]) -> List[Record]:
    """Filesystem statistics report (one row per file)."""
    return await build_report(file_paths, extract_stats_record, destination, STATS_COLUMNS)


async def build_tags_report(file_paths: Sequence[Union[str, Path]],
                            destination: Union[str, Path], tz=None) -> List[Record]:
    """Embedded metadata report (one row per file)."""
    async def extractor(path):
        return await extract_tag_record(path, tz)

    return await build_report(file_paths, extractor, destination, TAG_COLUMNS)
