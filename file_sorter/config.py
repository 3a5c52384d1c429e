"""
Configuration for the file sorter.

The extension rule table lives here as a read-only module-level mapping.
Config wraps it together with the other settings in a dataclass so that
every operation can be given a custom configuration in tests.
"""

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Mapping, Set, Tuple

from .errors import ConfigurationError

CategoryPath = Tuple[str, ...]

NO_EXTENSION_PATH: CategoryPath = ("No Extension", "Files Without Extension")
UNKNOWN_EXTENSION_PATH: CategoryPath = ("Other Files", "Miscellaneous")

# Grouped definitions: destination path -> extensions placed there
RULE_GROUPS: Dict[CategoryPath, Set[str]] = {
    ("Documents", "PDFs"): {".pdf"},
    ("Documents", "Word Documents"): {".doc", ".docx", ".odt", ".rtf"},
    ("Documents", "Text Files"): {".txt", ".md", ".rst"},
    ("Documents", "Spreadsheets"): {".xls", ".xlsx", ".ods", ".csv"},
    ("Documents", "Presentations"): {".ppt", ".pptx", ".odp", ".key"},
    ("Documents", "eBooks"): {".epub", ".mobi", ".azw3"},
    ("Media", "Images"): {".jpg", ".jpeg", ".png", ".gif", ".bmp", ".tiff", ".webp", ".heic", ".ico"},
    ("Media", "Vector Graphics"): {".svg", ".ai", ".eps"},
    ("Media", "Raw Photos"): {".raw", ".cr2", ".nef", ".arw", ".dng"},
    ("Media", "Audio"): {".mp3", ".wav", ".flac", ".aac", ".ogg", ".wma", ".m4a"},
    ("Media", "Videos"): {".mp4", ".avi", ".mkv", ".mov", ".wmv", ".flv", ".webm", ".m4v"},
    ("Archives", "Compressed"): {".zip", ".rar", ".7z", ".tar", ".gz", ".bz2", ".xz", ".tgz"},
    ("Archives", "Disk Images"): {".iso", ".img", ".dmg", ".vhd", ".vhdx"},
    ("Code", "Python"): {".py", ".pyw", ".ipynb"},
    ("Code", "Web"): {".html", ".htm", ".css", ".js", ".ts", ".jsx", ".tsx"},
    ("Code", "Scripts"): {".sh", ".bash", ".ps1", ".psm1", ".bat", ".cmd"},
    ("Code", "Source"): {".c", ".cpp", ".h", ".hpp", ".cs", ".java", ".go", ".rs", ".rb", ".php"},
    ("Code", "Data"): {".json", ".xml", ".yml", ".yaml", ".toml", ".ini", ".sql"},
    ("Applications", "Installers"): {".exe", ".msi", ".deb", ".rpm", ".pkg", ".apk", ".appimage"},
    ("Fonts",): {".ttf", ".otf", ".woff", ".woff2"},
}


def normalize_extension(extension: str) -> str:
    """Lowercase an extension and make sure it starts with a dot ("" stays "")."""
    ext = extension.strip().lower()
    if ext and not ext.startswith("."):
        ext = "." + ext
    return ext


def _check_path(path: Iterable[str], key: str) -> CategoryPath:
    segments = tuple(path)
    if not 1 <= len(segments) <= 2 or not all(s and s.strip() for s in segments):
        raise ConfigurationError(
            f"rule for '{key}' must have one or two non-empty path segments, got {segments!r}"
        )
    return segments


def build_rule_table(groups: Mapping[CategoryPath, Iterable[str]]) -> Mapping[str, CategoryPath]:
    """
    Flatten grouped definitions into an extension -> path mapping.

    Args:
        groups: Mapping of destination path to the extensions placed there

    Returns:
        Read-only mapping keyed by lowercase extension

    Raises:
        ConfigurationError: If an extension is listed under two paths
    """
    table: Dict[str, CategoryPath] = {}
    for path, extensions in groups.items():
        for extension in extensions:
            key = normalize_extension(extension)
            segments = _check_path(path, key)
            if key in table and table[key] != segments:
                raise ConfigurationError(
                    f"extension '{key}' is mapped to both "
                    f"{'/'.join(table[key])} and {'/'.join(segments)}"
                )
            table[key] = segments
    return MappingProxyType(table)


DEFAULT_RULES: Mapping[str, CategoryPath] = build_rule_table(RULE_GROUPS)


@dataclass
class Config:
    """
    Settings for a sorting run.

    Example:
        # Use defaults
        config = Config()

        # Route .log files somewhere specific
        config = Config().with_rules({".log": ("Documents", "Logs")})
    """

    # Extension rule table
    rules: Mapping[str, CategoryPath] = field(default_factory=lambda: DEFAULT_RULES)
    no_extension_path: CategoryPath = NO_EXTENSION_PATH
    unknown_extension_path: CategoryPath = UNKNOWN_EXTENSION_PATH

    # Conflict resolution safety bound
    max_conflict_attempts: int = 100

    # The tool's own artifacts, never picked up as input
    log_file_name: str = "file_sorter.log"
    script_name: str = "organize.py"

    # Destination folder created under the source when none is given
    default_destination_name: str = "Sorted"

    # Prefix of in-flight copies inside a destination folder
    temp_prefix: str = ".file_sorter-"

    skip_hidden: bool = False

    def __post_init__(self):
        table: Dict[str, CategoryPath] = {}
        for extension, path in self.rules.items():
            key = normalize_extension(extension)
            if not key:
                raise ConfigurationError(
                    "files without an extension are routed by no_extension_path, not by a rule"
                )
            segments = _check_path(path, key)
            if key in table and table[key] != segments:
                raise ConfigurationError(f"extension '{key}' is defined twice with different paths")
            table[key] = segments
        self.rules = MappingProxyType(table)
        self.no_extension_path = _check_path(self.no_extension_path, "")
        self.unknown_extension_path = _check_path(self.unknown_extension_path, "*")
        if self.max_conflict_attempts < 1:
            raise ConfigurationError("max_conflict_attempts must be at least 1")

    @property
    def excluded_names(self) -> FrozenSet[str]:
        """File names discovery skips: the launcher script and the log file."""
        return frozenset({self.script_name, self.log_file_name})

    def classify(self, extension: str) -> CategoryPath:
        """
        Get the destination path for a file extension.

        Args:
            extension: File extension including dot (e.g., ".pdf"), or ""

        Returns:
            Tuple of one or two folder names below the destination root
        """
        ext = extension.lower()
        if not ext:
            return self.no_extension_path
        return self.rules.get(ext, self.unknown_extension_path)

    def with_rules(self, overrides: Mapping[str, Iterable[str]]) -> "Config":
        """Return a copy of this config with overrides merged over the rule table."""
        merged: Dict[str, CategoryPath] = dict(self.rules)
        seen: Dict[str, CategoryPath] = {}
        for extension, path in overrides.items():
            key = normalize_extension(extension)
            segments = tuple(path)
            if key in seen and seen[key] != segments:
                raise ConfigurationError(f"extension '{key}' is overridden twice with different paths")
            seen[key] = merged[key] = segments
        return replace(self, rules=merged)

    def category_tree(self) -> Dict[str, List[str]]:
        """Categories of the rule table with their sorted subcategories."""
        tree: Dict[str, Set[str]] = {}
        for path in list(self.rules.values()) + [self.no_extension_path, self.unknown_extension_path]:
            subcategories = tree.setdefault(path[0], set())
            if len(path) > 1:
                subcategories.add(path[1])
        return {category: sorted(subs) for category, subs in sorted(tree.items())}


def load_rules(path: Path) -> Dict[str, CategoryPath]:
    """
    Read rule overrides from a JSON file.

    The file holds one object mapping extensions to either a
    "Category/Subcategory" string or a list of path segments:

        {".log": "Documents/Logs", "blend": ["Media", "3D"]}

    Raises:
        ConfigurationError: If the file cannot be read or is malformed
    """
    try:
        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"cannot read rules file '{path}': {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"rules file '{path}' must contain a JSON object")

    rules: Dict[str, CategoryPath] = {}
    for extension, target in data.items():
        if isinstance(target, str):
            segments = tuple(part for part in target.split("/") if part)
        elif isinstance(target, list) and all(isinstance(part, str) for part in target):
            segments = tuple(target)
        else:
            raise ConfigurationError(f"rule for '{extension}' in '{path}' must be a string or a list of strings")
        key = normalize_extension(extension)
        segments = _check_path(segments, key)
        if key in rules and rules[key] != segments:
            raise ConfigurationError(f"extension '{key}' is defined twice in '{path}' with different paths")
        rules[key] = segments
    return rules


# Default configuration instance
DEFAULT_CONFIG = Config()
