"""
Pure utility functions for the file sorter.

These functions have no side effects apart from reading the file system.
They are easy to unit test in isolation.
"""

from pathlib import Path
from typing import Collection, Iterable, List, Optional

from .config import CategoryPath, Config, DEFAULT_CONFIG
from .errors import NameConflictError


def get_category_path(file_path: Path, config: Config = DEFAULT_CONFIG) -> CategoryPath:
    """
    Determine the destination folder for a file based on its extension.

    Args:
        file_path: Path to the file
        config: Configuration to use

    Returns:
        Folder names below the destination root (e.g., ("Documents", "PDFs"))
    """
    # Path(".bashrc").suffix and Path("notes.").suffix are both ""
    return config.classify(file_path.suffix)


def is_hidden(name: str) -> bool:
    """Check if a file/folder name is hidden (starts with dot)."""
    return name.startswith(".")


def format_duration(seconds: float) -> str:
    """
    Format an elapsed time for the run summary.

    Example:
        >>> format_duration(3725.5)
        '1h 02m 05s'
    """
    if seconds < 60:
        return f"{seconds:.2f}s"
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m {secs:02d}s"
    return f"{minutes}m {secs:02d}s"


def resolve_unique_name(
    folder: Path,
    proposed_name: str,
    max_attempts: int = 100,
    reserved: Collection[str] = (),
) -> str:
    """
    Find a filename that is not yet taken inside a folder.

    Tries the proposed name first, then name_1, name_2, ... keeping the
    extension, e.g. report.pdf -> report_1.pdf.

    The result is only free at the time of the check. Another process may
    take the name before the file is written; this is fine for a single
    interactive run but not for concurrent runs into one destination.

    Args:
        folder: Folder the file will be placed in
        proposed_name: Desired filename
        max_attempts: Number of numbered candidates to try
        reserved: Names already claimed in this folder but not yet on disk

    Returns:
        A filename that does not exist in the folder

    Raises:
        NameConflictError: If every candidate up to max_attempts is taken
    """
    def taken(name: str) -> bool:
        return name in reserved or (folder / name).exists()

    if not taken(proposed_name):
        return proposed_name

    candidate = Path(proposed_name)
    for counter in range(1, max_attempts + 1):
        name = f"{candidate.stem}_{counter}{candidate.suffix}"
        if not taken(name):
            return name

    raise NameConflictError(folder, proposed_name, max_attempts)


def is_within(path: Path, parent: Path) -> bool:
    """Check if path is parent itself or lies somewhere below it."""
    try:
        path.relative_to(parent)
    except ValueError:
        return False
    return True


def should_skip_file(
    file_path: Path,
    config: Config = DEFAULT_CONFIG,
    exclude: Iterable[Path] = (),
) -> bool:
    """
    Check if a discovered file must be left alone.

    Skips the tool's own script and log file, in-flight copies, explicitly
    excluded paths (or anything below them), and hidden files when the
    configuration asks for it.
    """
    name = file_path.name
    if name in config.excluded_names or name.startswith(config.temp_prefix):
        return True

    if config.skip_hidden and is_hidden(name):
        return True

    for excluded in exclude:
        if is_within(file_path, excluded):
            return True

    return False


def discover_files(
    source: Path,
    recursive: bool = False,
    config: Config = DEFAULT_CONFIG,
    exclude: Iterable[Path] = (),
) -> List[Path]:
    """
    List the files to sort.

    The listing is taken once and sorted, so files placed during the run are
    never picked up again and a second call gives the same order.

    Args:
        source: Directory to scan
        recursive: If True, include files in nested directories
        config: Configuration to use
        exclude: Paths to leave out, with everything below them

    Returns:
        Regular files in sorted order
    """
    excluded = [Path(p) for p in exclude]
    candidates = source.rglob("*") if recursive else source.iterdir()

    files = []
    for path in candidates:
        if not path.is_file() or path.is_symlink():
            continue
        if should_skip_file(path, config=config, exclude=excluded):
            continue
        files.append(path)

    return sorted(files, key=lambda p: p.relative_to(source).parts)


def format_category_path(path: CategoryPath, name: Optional[str] = None) -> str:
    """Join category segments (and an optional filename) with forward slashes."""
    parts = list(path)
    if name is not None:
        parts.append(name)
    return "/".join(parts)
