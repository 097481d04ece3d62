"""
File Scanner Module for the TIFF inventory tool.
Matches the image files below an origin directory and hands them to the
pipeline as a single fallible result.
"""
import logging
from pathlib import Path
from typing import Optional, List, Union
from dataclasses import dataclass, field

from .config import DEFAULT_PATTERN


logger = logging.getLogger(__name__)


class EnumerationError(RuntimeError):
    """Raised when the input files could not be enumerated."""


@dataclass
class ScanResult:
    """
    Outcome of a scan: either a list of matched paths or an error.

    Usage:
        result = scan_for_images(origin)
        paths = result.unwrap()  # raises EnumerationError on failure
    """
    ok: bool
    paths: List[Path] = field(default_factory=list)
    error: Optional[str] = None

    @staticmethod
    def Ok(paths: List[Path]) -> 'ScanResult':
        return ScanResult(ok=True, paths=list(paths))

    @staticmethod
    def Err(error: str) -> 'ScanResult':
        return ScanResult(ok=False, error=error)

    def unwrap(self) -> List[Path]:
        """Get the matched paths or raise if the scan failed."""
        if not self.ok:
            raise EnumerationError(self.error)
        return self.paths


def scan_for_images(origin: Union[str, Path], pattern: str = DEFAULT_PATTERN) -> ScanResult:
    """
    Match files below `origin` against a glob pattern.

    Args:
        origin: Root directory to search
        pattern: Glob pattern relative to origin (default: every .tif, recursively)

    Returns:
        ScanResult with the matched files sorted by path, or the reason
        the directory couldn't be searched
    """
    origin = Path(origin)
    if not origin.exists():
        return ScanResult.Err(f"Origin not found: {origin}")
    if not origin.is_dir():
        return ScanResult.Err(f"Origin is not a directory: {origin}")

    try:
        paths = sorted(p for p in origin.glob(pattern) if p.is_file())
    except (OSError, ValueError) as e:
        return ScanResult.Err(f"Failed to scan {origin}: {e}")

    logger.info(f"Matched {len(paths)} files under {origin} ({pattern})")
    return ScanResult.Ok(paths)
