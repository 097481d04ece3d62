"""
TIFF Inventory Tool
===================

A tool for cataloguing and consolidating collections of TIFF scans.

Modules:
- config: Configuration settings
- logger_module: Structured session logging
- value_normalizer: Display-safe tag values
- stats_extractor: Filesystem statistics per file
- tag_extractor: Embedded metadata per file (Pillow)
- file_scanner: Image file matching
- report_builder: Concurrent extraction and CSV reports (pandas)
- consolidation: Duplicate grouping and the deduplicated tree
- main_orchestrator: Pipeline orchestrator
"""

from .config import (
    Config, ConfigError, TIFF_EXTENSION, DEFAULT_PATTERN,
    STATS_FILENAME, TAGS_FILENAME, DEFAULT_FILES_ROOT
)
from .logger_module import InventoryLogger, LogAction
from .value_normalizer import Tag, normalize_tag_value, normalize_scalar, MISSING
from .stats_extractor import STATS_COLUMNS, extract_stats_record, stats_to_record
from .tag_extractor import (
    TAG_COLUMNS, MetadataMissingError, extract_tag_record, load_tags,
    reparse_date_time, tags_to_record
)
from .file_scanner import ScanResult, EnumerationError, scan_for_images
from .report_builder import (
    build_report, build_stats_report, build_tags_report,
    collect_records, records_to_csv, write_csv
)
from .consolidation import (
    ConsolidationSummary, consolidate, derive_group_key, group_paths,
    destination_names
)
from .main_orchestrator import (
    InventoryOrchestrator, PipelineState, PipelineStage, run_pipeline
)

__version__ = "1.0.0"
__all__ = [
    'Config', 'ConfigError', 'TIFF_EXTENSION', 'DEFAULT_PATTERN',
    'STATS_FILENAME', 'TAGS_FILENAME', 'DEFAULT_FILES_ROOT',
    'InventoryLogger', 'LogAction',
    'Tag', 'normalize_tag_value', 'normalize_scalar', 'MISSING',
    'STATS_COLUMNS', 'extract_stats_record', 'stats_to_record',
    'TAG_COLUMNS', 'MetadataMissingError', 'extract_tag_record', 'load_tags',
    'reparse_date_time', 'tags_to_record',
    'ScanResult', 'EnumerationError', 'scan_for_images',
    'build_report', 'build_stats_report', 'build_tags_report',
    'collect_records', 'records_to_csv', 'write_csv',
    'ConsolidationSummary', 'consolidate', 'derive_group_key', 'group_paths',
    'destination_names',
    'InventoryOrchestrator', 'PipelineState', 'PipelineStage', 'run_pipeline',
]
