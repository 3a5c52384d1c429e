#!/usr/bin/env python3
"""
File Sorter - Sort files into category and subcategory folders.

This script scans a directory and moves (or copies) its files into a
destination tree such as Documents/PDFs/ or Media/Images/, based on their
file extension. Every run is appended to a log file in the destination.

SAFETY POLICY:
    This script NEVER deletes or overwrites files.
    - If a file already exists at the destination, _1, _2, ... is added to the name
    - A failed copy leaves nothing behind; a failed move leaves the file where it was
    - Use --dry-run to preview changes before applying them

Usage:
    python organize.py <source>                      # Move files into <source>/Sorted
    python organize.py <source> <destination>        # Move files into <destination>
    python organize.py <source> --copy --recursive   # Copy, including subfolders
    python organize.py <source> --dry-run            # Preview changes without moving files

Example:
    python organize.py ~/Downloads ~/Sorted --dry-run  # See what would happen
    python organize.py ~/Downloads ~/Sorted            # Actually sort the files

The work is done by the file_sorter package; this file only forwards the
command line to it. The script is never picked up as input itself, even
when it sits in the folder being sorted.
"""

import sys

from file_sorter.cli import main


# =============================================================================
# SCRIPT ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
