"""
Core file operations for the file sorter.

place_file performs the file system work for one file and returns a record
describing what happened. organize_files runs it over a whole source
directory and uses a callback for output to keep the CLI out of the core.
"""

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from .config import CategoryPath, Config, DEFAULT_CONFIG
from .errors import ConfigurationError, FolderCreationError, NameConflictError
from .records import PlacementAction, PlacementRecord, RunSummary
from .report import RunReporter
from .utils import discover_files, get_category_path, resolve_unique_name

logger = logging.getLogger(__name__)

# Type alias for output callback
OutputCallback = Callable[[str], None]

# Names claimed per destination folder during a dry run
Reservations = Dict[Path, Set[str]]


def _default_output(message: str) -> None:
    """Default output callback that prints to stdout."""
    print(message)


def prepare_run(
    source: Path,
    destination: Optional[Path] = None,
    config: Config = DEFAULT_CONFIG,
    dry_run: bool = False,
) -> Tuple[Path, Path]:
    """
    Validate the source and make sure the destination root exists.

    Args:
        source: Directory to sort
        destination: Destination root (default: source / config.default_destination_name)
        config: Configuration to use
        dry_run: If True, the destination root is not created

    Returns:
        Resolved (source, destination) paths

    Raises:
        ConfigurationError: If the source is not a readable directory or the
            destination cannot be created
    """
    source = Path(source).expanduser().resolve()
    if not source.is_dir():
        raise ConfigurationError(f"'{source}' is not a valid directory")
    if not os.access(source, os.R_OK | os.X_OK):
        raise ConfigurationError(f"'{source}' is not readable")

    if destination is None:
        destination = source / config.default_destination_name
    destination = Path(destination).expanduser().resolve()

    if destination.exists() and not destination.is_dir():
        raise ConfigurationError(f"destination '{destination}' exists and is not a directory")

    if not dry_run:
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(f"cannot create destination '{destination}': {e}") from e

    return source, destination


def ensure_folder(destination_root: Path, segments: CategoryPath) -> List[CategoryPath]:
    """
    Create the category folder (and its parents) below the destination root.

    Safe to call repeatedly: existing folders are left as they are.

    Returns:
        The segment prefixes that did not exist before, outermost first

    Raises:
        FolderCreationError: If a folder cannot be created, e.g. a file has
            its name. Its created attribute holds the levels made before that.
    """
    created = []
    current = destination_root
    for depth, segment in enumerate(segments, start=1):
        current = current / segment
        if not current.is_dir():
            try:
                current.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise FolderCreationError(destination_root.joinpath(*segments), created, e) from e
            created.append(tuple(segments[:depth]))
    return created


def _missing_folders(destination_root: Path, segments: CategoryPath) -> List[CategoryPath]:
    """Dry-run counterpart of ensure_folder: report, don't create."""
    missing = []
    current = destination_root
    for depth, segment in enumerate(segments, start=1):
        current = current / segment
        if not current.is_dir():
            missing.append(tuple(segments[:depth]))
    return missing


def _refuse_overwrite(destination: Path) -> None:
    if destination.exists():
        raise FileExistsError(errno.EEXIST, "destination already exists", str(destination))


def copy_file(source: Path, destination: Path, temp_prefix: str = DEFAULT_CONFIG.temp_prefix) -> None:
    """
    Copy a file with its timestamps and permission bits, all or nothing.

    The data is written to a temporary file next to the destination and only
    renamed to the final name once complete, so an interrupted copy never
    leaves a partial file under the final name.
    """
    fd, temp_name = tempfile.mkstemp(prefix=temp_prefix, dir=destination.parent)
    os.close(fd)
    temp = Path(temp_name)
    try:
        shutil.copy2(source, temp)
        _refuse_overwrite(destination)
        os.rename(temp, destination)
    except BaseException:
        temp.unlink(missing_ok=True)
        raise


def move_file(source: Path, destination: Path, temp_prefix: str = DEFAULT_CONFIG.temp_prefix) -> None:
    """
    Move a file without overwriting anything at the destination.

    Uses a rename when both paths are on the same file system. Otherwise the
    file is copied in full and the source removed afterwards; if the source
    cannot be removed the copy is discarded so the file exists exactly once.
    """
    _refuse_overwrite(destination)
    try:
        os.rename(source, destination)
        return
    except OSError as e:
        if e.errno != errno.EXDEV:
            raise

    logger.debug("cross-device move of %s, falling back to copy", source)
    copy_file(source, destination, temp_prefix)
    try:
        source.unlink()
    except OSError:
        destination.unlink(missing_ok=True)
        raise


def place_file(
    file_path: Path,
    destination_root: Path,
    copy: bool = False,
    config: Config = DEFAULT_CONFIG,
    dry_run: bool = False,
    reserved: Optional[Reservations] = None,
) -> PlacementRecord:
    """
    Place one file into its category folder.

    Classifies the file, creates the folder if needed, picks a free name and
    moves or copies the file there. Any failure along the way is captured in
    the returned record instead of being raised.

    Args:
        file_path: File to place
        destination_root: Root of the category tree
        copy: If True, copy instead of move
        config: Configuration to use
        dry_run: If True, only work out where the file would go
        reserved: Names claimed by earlier files of the same dry run

    Returns:
        PlacementRecord describing the outcome
    """
    segments = get_category_path(file_path, config=config)
    folder = destination_root.joinpath(*segments)

    if file_path.parent == folder:
        return PlacementRecord(
            source=file_path,
            folder=segments,
            action=PlacementAction.IN_PLACE,
            final_name=file_path.name,
            destination=file_path,
        )

    if dry_run:
        reserved = reserved if reserved is not None else {}
        created = []
        for path in _missing_folders(destination_root, segments):
            if destination_root.joinpath(*path) not in reserved:
                created.append(path)
                reserved[destination_root.joinpath(*path)] = set()
        claimed = reserved.setdefault(folder, set())
        try:
            final_name = resolve_unique_name(
                folder, file_path.name, config.max_conflict_attempts, reserved=claimed
            )
        except NameConflictError as e:
            return PlacementRecord(
                source=file_path, folder=segments, action=PlacementAction.FAILED,
                error=str(e), created_folders=tuple(created),
            )
        claimed.add(final_name)
        return PlacementRecord(
            source=file_path,
            folder=segments,
            action=PlacementAction.WOULD_COPY if copy else PlacementAction.WOULD_MOVE,
            final_name=final_name,
            destination=folder / final_name,
            created_folders=tuple(created),
        )

    try:
        created = ensure_folder(destination_root, segments)
    except FolderCreationError as e:
        return PlacementRecord(
            source=file_path,
            folder=segments,
            action=PlacementAction.FAILED,
            error=str(e),
            created_folders=tuple(e.created),
        )

    try:
        final_name = resolve_unique_name(folder, file_path.name, config.max_conflict_attempts)
        destination = folder / final_name
        if copy:
            copy_file(file_path, destination, config.temp_prefix)
        else:
            move_file(file_path, destination, config.temp_prefix)
    except (NameConflictError, OSError) as e:
        return PlacementRecord(
            source=file_path,
            folder=segments,
            action=PlacementAction.FAILED,
            error=str(e),
            created_folders=tuple(created),
        )

    return PlacementRecord(
        source=file_path,
        folder=segments,
        action=PlacementAction.COPIED if copy else PlacementAction.MOVED,
        final_name=final_name,
        destination=destination,
        created_folders=tuple(created),
    )


def organize_files(
    source: Path,
    destination: Optional[Path] = None,
    copy: bool = False,
    recursive: bool = False,
    dry_run: bool = False,
    config: Config = DEFAULT_CONFIG,
    output: OutputCallback = _default_output,
    should_stop: Optional[Callable[[], bool]] = None,
    exclude: Iterable[Path] = (),
    error_output: Optional[OutputCallback] = None,
) -> RunSummary:
    """
    Sort every file of a source directory into the destination tree.

    Files are handled one at a time in discovery order. A failure only
    affects its own file; the run always ends with a summary.

    Args:
        source: Directory to sort
        destination: Destination root (default: source / config.default_destination_name)
        copy: If True, copy files instead of moving them
        recursive: If True, include files in subdirectories
        dry_run: If True, only preview changes without touching files
        config: Configuration to use
        output: Callback for output messages
        should_stop: Polled between files; returning True ends the run early
        exclude: Extra paths discovery must leave alone (e.g. the log file)
        error_output: Callback for the outcome line of a failed file
            (default: output)

    Returns:
        RunSummary with counters and one record per processed file

    Raises:
        ConfigurationError: If the source or destination is unusable
    """
    source, destination = prepare_run(source, destination, config=config, dry_run=dry_run)
    if error_output is None:
        error_output = output

    reporter = RunReporter(source, destination, copy=copy, recursive=recursive, dry_run=dry_run)
    output(reporter.render_header())

    excluded = [Path(p).expanduser().resolve() for p in exclude]
    if destination != source:
        excluded.append(destination)
    files = discover_files(source, recursive=recursive, config=config, exclude=excluded)
    reporter.set_discovered(len(files))

    if not files:
        output("No files found to sort.")

    reserved: Reservations = {}
    for file_path in files:
        if should_stop is not None and should_stop():
            reporter.cancel()
            output("Run cancelled, remaining files left untouched.")
            break

        output(reporter.render_processing(file_path))
        record = place_file(
            file_path,
            destination,
            copy=copy,
            config=config,
            dry_run=dry_run,
            reserved=reserved,
        )
        reporter.record(record)
        lines = reporter.render_record(record)
        for line in lines[:-1]:
            output(line)
        if record.succeeded:
            output(lines[-1])
        else:
            error_output(lines[-1])

    summary = reporter.finish()
    output(reporter.render_summary())
    return summary
