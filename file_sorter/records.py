"""
Data model shared by the placement engine and the run reporter.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import List, Optional, Set, Tuple

from .config import CategoryPath

FolderPair = Tuple[str, Optional[str]]


class PlacementAction(str, Enum):
    """What happened to one file."""
    MOVED = "moved"
    COPIED = "copied"
    WOULD_MOVE = "would move"
    WOULD_COPY = "would copy"
    IN_PLACE = "already in place"
    FAILED = "failed"


@dataclass(frozen=True)
class PlacementRecord:
    """Outcome of placing one file. Built once, never modified."""
    source: Path
    folder: CategoryPath
    action: PlacementAction
    final_name: Optional[str] = None
    destination: Optional[Path] = None
    error: Optional[str] = None
    created_folders: Tuple[CategoryPath, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.action is not PlacementAction.FAILED


@dataclass
class RunSummary:
    """Counters and records of a single run."""
    source: Path
    destination: Path
    copy: bool = False
    recursive: bool = False
    dry_run: bool = False
    started_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    discovered: int = 0
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    cancelled: bool = False

    created_folders: Set[FolderPair] = field(default_factory=set)
    records: List[PlacementRecord] = field(default_factory=list)

    @property
    def remaining(self) -> int:
        """Discovered files the run never reached (only non-zero when cancelled)."""
        return self.discovered - self.total
