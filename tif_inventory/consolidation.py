"""
Consolidation Module for the TIFF inventory tool.
Groups duplicate/variant files by base name and rebuilds a deduplicated tree.

    <root>/<key>/<key>.tif            (single member)
    <root>/<key>/<key> (1).tif ...    (several members, insertion order)

The root is erased and rebuilt on every run.
"""
import asyncio
import logging
import re
import shutil
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union
from dataclasses import dataclass, field

from .config import TIFF_EXTENSION
from .logger_module import InventoryLogger


logger = logging.getLogger(__name__)

# Trailing " (N)" added by file managers and browsers to copies
DUPLICATE_SUFFIX = re.compile(r'(.*) \(\d+\)')

GroupMap = Dict[str, List[Path]]


@dataclass
class ConsolidationSummary:
    """What a consolidation run produced."""
    root: Path
    groups: int = 0
    files_copied: int = 0
    destinations: List[Path] = field(default_factory=list)


def derive_group_key(file_path: Union[str, Path]) -> str:
    """
    Group key for a file: its base name without a trailing duplicate suffix.

    Only the last suffix is stripped ("Photo (2) (3)" -> "Photo (2)").
    A name that is nothing but a suffix keeps its full name.
    """
    name = Path(file_path).stem
    match = DUPLICATE_SUFFIX.fullmatch(name)
    if match and match.group(1):
        return match.group(1)
    return name


def group_paths(file_paths: Sequence[Union[str, Path]]) -> GroupMap:
    """
    Group paths by key, keeping first-seen order.

    Repeated paths collapse; distinct paths sharing a key are all kept.
    """
    groups: GroupMap = {}
    for file_path in file_paths:
        file_path = Path(file_path)
        members = groups.setdefault(derive_group_key(file_path), [])
        if file_path not in members:
            members.append(file_path)
    return groups


def destination_names(key: str, count: int, extension: str = TIFF_EXTENSION) -> List[str]:
    """File names for a group of `count` members."""
    if count == 1:
        return [f"{key}{extension}"]
    return [f"{key} ({index}){extension}" for index in range(1, count + 1)]


def _reset_directory(root: Path):
    if root.exists():
        shutil.rmtree(root)
    root.mkdir(parents=True)


def _ensure_directory(directory: Path):
    directory.mkdir(parents=True, exist_ok=True)


async def reset_destination(root: Path):
    """Remove everything at `root` and recreate it empty."""
    await asyncio.to_thread(_reset_directory, root)


async def materialize_group(root: Path, key: str, members: List[Path],
                            extension: str = TIFF_EXTENSION) -> List[Path]:
    """
    Copy one group into `<root>/<key>/`.

    The directory is created first, then every member is copied concurrently.

    Returns:
        Destination paths, in member order
    """
    directory = root / key
    await asyncio.to_thread(_ensure_directory, directory)

    destinations = [directory / name for name in destination_names(key, len(members), extension)]
    await asyncio.gather(*(
        asyncio.to_thread(shutil.copy2, source, dest)
        for source, dest in zip(members, destinations)
    ))
    return destinations


async def consolidate(
    file_paths: Sequence[Union[str, Path]],
    destination_root: Union[str, Path],
    extension: str = TIFF_EXTENSION,
    action_logger: Optional[InventoryLogger] = None,
) -> ConsolidationSummary:
    """
    Rebuild `destination_root` as a deduplicated copy of `file_paths`.

    Phases run one after another: reset, group, materialize. A failure
    aborts the run; groups already copied stay on disk.

    Args:
        file_paths: Matched source files
        destination_root: Root of the rebuilt tree (erased first)
        extension: Extension given to every copy
        action_logger: Optional session logger

    Returns:
        ConsolidationSummary
    """
    root = Path(destination_root)
    summary = ConsolidationSummary(root=root)

    await reset_destination(root)
    logger.info(f"Reset destination: {root}")
    if action_logger:
        action_logger.destination_reset(root)

    groups = group_paths(file_paths)
    logger.info(f"Grouped {len(file_paths)} files into {len(groups)} groups")

    for key, members in groups.items():
        if action_logger:
            action_logger.group_built(key, members)
        destinations = await materialize_group(root, key, members, extension)
        if action_logger:
            for source, dest in zip(members, destinations):
                action_logger.file_copied(source, dest)
        summary.groups += 1
        summary.files_copied += len(destinations)
        summary.destinations.extend(destinations)

    logger.info(f"Copied {summary.files_copied} files into {summary.groups} groups under {root}")
    return summary
