"""
Logging module for the TIFF inventory tool.
Provides structured session logging to both console and file.
"""
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional
from enum import Enum


class LogAction(Enum):
    """Types of actions that can be logged."""
    # Pipeline stage transitions
    STAGE_START = "STAGE_START"
    STAGE_END = "STAGE_END"

    # Path matching
    FILES_MATCHED = "FILES_MATCHED"

    # Extraction
    STATS_EXTRACTED = "STATS_EXTRACTED"
    TAGS_EXTRACTED = "TAGS_EXTRACTED"

    # Reports
    REPORT_WRITTEN = "REPORT_WRITTEN"

    # Consolidation
    DESTINATION_RESET = "DESTINATION_RESET"
    GROUP_BUILT = "GROUP_BUILT"
    FILE_COPIED = "FILE_COPIED"

    # Errors and warnings
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"


class InventoryLogger:
    """
    Logger for an inventory session.
    Logs to the console and, when a log directory is given, to a timestamped file.
    """

    def __init__(self, log_dir: Optional[Path] = None, session_name: Optional[str] = None,
                 console: bool = True):
        """
        Initialize the logger.

        Args:
            log_dir: Directory where log files will be stored (None: console only)
            session_name: Optional name for this session (default: timestamp)
            console: Whether to echo INFO messages to the console
        """
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_name = session_name or timestamp
        self.log_file: Optional[Path] = None

        self.logger = logging.getLogger(f"tif_inventory.session.{self.session_name}")
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False

        # Prevent duplicate handlers (a session with the same name may still hold files open)
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)

        # File handler - detailed
        if log_dir is not None:
            self.log_dir = Path(log_dir)
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / f"session_{self.session_name}.log"
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

        # Console handler - less verbose
        if console:
            console_handler = logging.StreamHandler()
            console_handler.setLevel(logging.INFO)
            console_handler.setFormatter(logging.Formatter('%(levelname)-8s | %(message)s'))
            self.logger.addHandler(console_handler)

        self.log(LogAction.INFO, f"Session started: {self.session_name}")
        if self.log_file:
            self.log(LogAction.INFO, f"Log file: {self.log_file}")

    def log(self, action: LogAction, message: str, **kwargs):
        """
        Log an action with optional extra data.

        Args:
            action: The type of action being logged
            message: Human-readable message
            **kwargs: Additional data to include in the log
        """
        extra_str = ""
        if kwargs:
            extra_str = " | " + " | ".join(f"{k}={v}" for k, v in kwargs.items())

        full_message = f"[{action.value}] {message}{extra_str}"

        if action == LogAction.ERROR:
            self.logger.error(full_message)
        elif action == LogAction.WARNING:
            self.logger.warning(full_message)
        elif action in (LogAction.STATS_EXTRACTED, LogAction.TAGS_EXTRACTED, LogAction.FILE_COPIED):
            # Per-file lines are debug-only (noisy)
            self.logger.debug(full_message)
        else:
            self.logger.info(full_message)

    def stage_start(self, stage_name: str, detail: str = ""):
        """Log the start of a pipeline stage."""
        self.log(LogAction.STAGE_START, f"=== STAGE START: {stage_name} === {detail}")

    def stage_end(self, stage_name: str, detail: str = ""):
        """Log the end of a pipeline stage."""
        self.log(LogAction.STAGE_END, f"=== STAGE END: {stage_name} === {detail}")

    def files_matched(self, origin: Path, pattern: str, count: int):
        self.log(LogAction.FILES_MATCHED, f"Matched {count} files under {origin}",
                 pattern=pattern)

    def stats_extracted(self, path: Path, size: int):
        self.log(LogAction.STATS_EXTRACTED, f"Stats: {path}", size_bytes=size)

    def tags_extracted(self, path: Path, date_time: str):
        self.log(LogAction.TAGS_EXTRACTED, f"Tags: {path}", date_time=date_time)

    def report_written(self, destination: Path, rows: int):
        """Log a CSV report being persisted."""
        self.log(LogAction.REPORT_WRITTEN, f"Report written: {destination}", rows=rows)

    def destination_reset(self, root: Path):
        self.log(LogAction.DESTINATION_RESET, f"Reset destination: {root}")

    def group_built(self, key: str, members: list):
        """Log a consolidation group."""
        member_list = ", ".join(str(m) for m in members[:5])
        if len(members) > 5:
            member_list += f" ... +{len(members)-5} more"
        self.log(LogAction.GROUP_BUILT, f"Group '{key}': {len(members)} files",
                 files=member_list)

    def file_copied(self, source: Path, dest: Path):
        """Log file copy."""
        self.log(LogAction.FILE_COPIED, f"{source} -> {dest}")

    def error(self, message: str, exception: Optional[Exception] = None):
        """Log an error."""
        if exception:
            self.log(LogAction.ERROR, f"{message}: {type(exception).__name__}: {exception}")
        else:
            self.log(LogAction.ERROR, message)

    def warning(self, message: str):
        """Log a warning."""
        self.log(LogAction.WARNING, message)

    def info(self, message: str):
        """Log info message."""
        self.log(LogAction.INFO, message)

    def close(self):
        """Close the logger and finalize the session."""
        self.log(LogAction.INFO, "Session ended")
        for handler in list(self.logger.handlers):
            handler.close()
            self.logger.removeHandler(handler)
