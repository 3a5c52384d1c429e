"""
Run reporter: collects placement records and renders the run log text.

Rendering never touches the file system or the console. The caller decides
where the text goes (see cli.run and run_log.open_run_log).
"""

from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Set

from .records import PlacementAction, PlacementRecord, RunSummary
from .utils import format_category_path, format_duration

SEPARATOR = "=" * 60
RULE = "-" * 60
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_ACTION_LABELS = {
    PlacementAction.MOVED: "MOVED",
    PlacementAction.COPIED: "COPIED",
    PlacementAction.WOULD_MOVE: "WOULD MOVE",
    PlacementAction.WOULD_COPY: "WOULD COPY",
    PlacementAction.IN_PLACE: "IN PLACE",
    PlacementAction.FAILED: "ERROR",
}


class RunReporter:
    """
    Accumulates one PlacementRecord per processed file.

    Example:
        reporter = RunReporter(source, destination, copy=True)
        reporter.record(place_file(path, destination, copy=True))
        reporter.finish()
        print(reporter.render_summary())
    """

    def __init__(
        self,
        source: Path,
        destination: Path,
        copy: bool = False,
        recursive: bool = False,
        dry_run: bool = False,
        now: Callable[[], datetime] = datetime.now,
    ):
        self._now = now
        self.summary = RunSummary(
            source=source,
            destination=destination,
            copy=copy,
            recursive=recursive,
            dry_run=dry_run,
            started_at=now(),
        )

    def set_discovered(self, count: int) -> None:
        self.summary.discovered = count

    def record(self, record: PlacementRecord) -> None:
        summary = self.summary
        summary.records.append(record)
        summary.total += 1
        if record.succeeded:
            summary.succeeded += 1
        else:
            summary.failed += 1

        for path in record.created_folders:
            subcategory = path[1] if len(path) > 1 else None
            summary.created_folders.add((path[0], subcategory))

    def cancel(self) -> None:
        self.summary.cancelled = True

    def finish(self) -> RunSummary:
        if self.summary.finished_at is None:
            self.summary.finished_at = self._now()
        return self.summary

    # --- rendering -------------------------------------------------------

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.summary.source).as_posix()
        except ValueError:
            return str(path)

    def render_header(self) -> str:
        summary = self.summary
        mode = "copy" if summary.copy else "move"
        if summary.recursive:
            mode += ", recursive"
        if summary.dry_run:
            mode += " [DRY RUN]"
        return "\n".join([
            SEPARATOR,
            f"File sorting run started {summary.started_at.strftime(TIMESTAMP_FORMAT)}",
            f"Source:      {summary.source}",
            f"Destination: {summary.destination}",
            f"Mode:        {mode}",
            SEPARATOR,
        ])

    def render_processing(self, file_path: Path) -> str:
        return f"Processing: {self._relative(file_path)}"

    def render_record(self, record: PlacementRecord) -> List[str]:
        """Lines for one record: created folders first, then the outcome."""
        lines = []
        verb = "WOULD CREATE" if self.summary.dry_run else "CREATED"
        for path in record.created_folders:
            lines.append(f"  [{verb}] {format_category_path(path)}/")

        label = _ACTION_LABELS[record.action]
        name = self._relative(record.source)
        if record.action is PlacementAction.FAILED:
            lines.append(f"  [{label}] {name}: {record.error}")
        else:
            target = format_category_path(record.folder, record.final_name)
            lines.append(f"  [{label}] {name} -> {target}")
        return lines

    def render_folder_tree(self) -> List[str]:
        tree: Dict[str, Set[str]] = {}
        for category, subcategory in self.summary.created_folders:
            subcategories = tree.setdefault(category, set())
            if subcategory is not None:
                subcategories.add(subcategory)

        if not tree:
            return ["  (none)"]

        lines = []
        for category in sorted(tree):
            lines.append(f"  {category}/")
            for subcategory in sorted(tree[category]):
                lines.append(f"    {subcategory}/")
        return lines

    def render_summary(self, finished_at: Optional[datetime] = None) -> str:
        summary = self.summary
        end = finished_at or summary.finished_at or self._now()
        elapsed = max((end - summary.started_at).total_seconds(), 0.0)

        title = "Summary [DRY RUN]" if summary.dry_run else "Summary"
        lines = [
            RULE,
            f"{title} (finished {end.strftime(TIMESTAMP_FORMAT)})",
            f"  Total files: {summary.total}",
            f"  Succeeded:   {summary.succeeded}",
            f"  Failed:      {summary.failed}",
            f"  Duration:    {format_duration(elapsed)}",
        ]
        if summary.cancelled:
            lines.append(f"  Cancelled:   {summary.remaining} file(s) not processed")

        lines.append("")
        lines.append("Would create folders:" if summary.dry_run else "Created folders:")
        lines.extend(self.render_folder_tree())
        lines.append(SEPARATOR)
        return "\n".join(lines)
