"""
Configuration for the TIFF inventory tool.
"""
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


# === Fixed format ===
TIFF_EXTENSION = '.tif'
DEFAULT_PATTERN = '**/*.tif'

# === Default output names ===
STATS_FILENAME = 'stats.csv'
TAGS_FILENAME = 'tags.csv'
DEFAULT_FILES_ROOT = '.tifs'

# === Environment variables ===
ENV_ORIGIN = 'TIF_INVENTORY_ORIGIN'
ENV_DESTINATION = 'TIF_INVENTORY_DESTINATION'
ENV_FILES_ROOT = 'TIF_INVENTORY_FILES_ROOT'
ENV_TIMEZONE = 'TIF_INVENTORY_TIMEZONE'
ENV_LOG_DIR = 'TIF_INVENTORY_LOG_DIR'


class ConfigError(ValueError):
    """Raised when the configuration cannot drive a run."""


@dataclass
class Config:
    """Main configuration class."""

    # === Source directory ===
    origin: Optional[Path] = None

    # === Output directories ===
    # Reports land in `destination` (falls back to origin)
    destination: Optional[Path] = None
    # Consolidated copies land in `files_root` (falls back to ./.tifs)
    files_root: Optional[Path] = None

    # === Matching ===
    pattern: str = DEFAULT_PATTERN
    extension: str = TIFF_EXTENSION

    # === Date reparse ===
    # IANA zone name used to interpret tag dates; None means local time
    timezone: Optional[str] = None

    # === Logging ===
    log_dir: Optional[Path] = None

    def __post_init__(self):
        if self.origin is not None:
            self.origin = Path(self.origin).resolve()
        if self.destination is not None:
            self.destination = Path(self.destination).resolve()
        elif self.origin is not None:
            self.destination = self.origin
        self.files_root = Path(self.files_root or DEFAULT_FILES_ROOT).resolve()
        if self.log_dir is not None:
            self.log_dir = Path(self.log_dir).resolve()

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None, **overrides) -> 'Config':
        """
        Build a configuration from the environment.

        A `.env` file is loaded first (without clobbering variables that are
        already set). Keyword overrides that are not None win over the
        environment.

        Args:
            env_file: Optional explicit `.env` path (default: search upwards from cwd)
            **overrides: Field values, typically from the command line

        Returns:
            A resolved Config
        """
        load_dotenv(env_file)

        values = {
            'origin': os.environ.get(ENV_ORIGIN) or None,
            'destination': os.environ.get(ENV_DESTINATION) or None,
            'files_root': os.environ.get(ENV_FILES_ROOT) or None,
            'timezone': os.environ.get(ENV_TIMEZONE) or None,
            'log_dir': os.environ.get(ENV_LOG_DIR) or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def stats_path(self) -> Path:
        return self.destination / STATS_FILENAME

    @property
    def tags_path(self) -> Path:
        return self.destination / TAGS_FILENAME

    def validate(self, consolidating: bool = False):
        """
        Check that the configuration can drive a run.

        Args:
            consolidating: Also check the consolidation root against the origin

        Raises:
            ConfigError: If the origin is missing, the timezone is unknown,
                or the consolidation root would overlap the origin
        """
        if self.origin is None:
            raise ConfigError("No origin")
        if not self.origin.is_dir():
            raise ConfigError(f"Origin is not a directory: {self.origin}")

        if self.timezone:
            try:
                ZoneInfo(self.timezone)
            except (ZoneInfoNotFoundError, ValueError) as e:
                raise ConfigError(f"Unknown timezone: {self.timezone}") from e

        if consolidating:
            if self.files_root == self.origin:
                raise ConfigError("Origin and destination are the same")
            # Reset erases the whole root, sources included
            if self.files_root in self.origin.parents:
                raise ConfigError(
                    f"Destination {self.files_root} contains origin {self.origin}"
                )
            # Copies below the origin would be matched again by the next scan
            if self.origin in self.files_root.parents:
                raise ConfigError(
                    f"Destination {self.files_root} is inside origin {self.origin}"
                )

    def ensure_directories_exist(self):
        """Create the report destination directory if it doesn't exist."""
        self.destination.mkdir(parents=True, exist_ok=True)
