"""
File Sorter - Sort files into category and subcategory folders by extension.

This package classifies files by extension, places them in a destination
tree without overwriting anything, and keeps an append-only run log.
"""

from .config import Config, DEFAULT_RULES, load_rules
from .errors import ConfigurationError, FileSorterError, NameConflictError
from .operations import organize_files, place_file
from .records import PlacementAction, PlacementRecord, RunSummary
from .report import RunReporter
from .utils import discover_files, resolve_unique_name

__version__ = "1.0.0"
__all__ = [
    "Config",
    "DEFAULT_RULES",
    "load_rules",
    "ConfigurationError",
    "FileSorterError",
    "NameConflictError",
    "organize_files",
    "place_file",
    "PlacementAction",
    "PlacementRecord",
    "RunSummary",
    "RunReporter",
    "discover_files",
    "resolve_unique_name",
]
