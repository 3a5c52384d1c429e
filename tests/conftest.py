"""
Pytest fixtures for file sorter tests.

Provides reusable test fixtures for creating source and destination
directories, test files, and output capture.
"""

import pytest
from pathlib import Path

from file_sorter.config import Config


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Create a temporary directory for testing."""
    return tmp_path


@pytest.fixture
def source_dir(temp_dir: Path) -> Path:
    """Directory holding the files to sort."""
    d = temp_dir / "source"
    d.mkdir()
    return d


@pytest.fixture
def dest_dir(temp_dir: Path) -> Path:
    """Destination root (not created yet)."""
    return temp_dir / "sorted"


@pytest.fixture
def test_config() -> Config:
    """Create a test configuration with a small conflict bound."""
    return Config(max_conflict_attempts=3)


@pytest.fixture
def sample_files(source_dir: Path) -> dict:
    """
    Create one file per classification path.

    Returns a dict mapping file name to the folder it should end up in.
    """
    expected = {
        "report.pdf": ("Documents", "PDFs"),
        "photo.jpg": ("Media", "Images"),
        "archive": ("No Extension", "Files Without Extension"),
        "data.xyz": ("Other Files", "Miscellaneous"),
    }
    for name in expected:
        (source_dir / name).write_text(f"content of {name}")
    return expected


@pytest.fixture
def nested_files(source_dir: Path) -> list:
    """Create same-named files in three subfolders."""
    files = []
    for folder in ["a", "b", "c"]:
        sub = source_dir / folder
        sub.mkdir()
        f = sub / "notes.txt"
        f.write_text(f"notes from {folder}")
        files.append(f)
    return files


@pytest.fixture
def capture_output() -> list:
    """Create a list to capture output from operations."""
    return []


@pytest.fixture
def output_callback(capture_output: list):
    """Create an output callback that captures messages."""
    def callback(message: str) -> None:
        capture_output.append(message)
    return callback
