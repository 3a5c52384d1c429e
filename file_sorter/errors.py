"""
Exceptions raised by the file sorter.

Only ConfigurationError aborts a run. Everything else is caught per file
and turned into a failed placement record.
"""


class FileSorterError(Exception):
    """Base class for all file sorter errors."""


class ConfigurationError(FileSorterError, ValueError):
    """The run cannot start: bad source, destination or rule definitions."""


class NameConflictError(FileSorterError):
    """No free filename was found within the allowed number of attempts."""

    def __init__(self, folder, proposed_name: str, attempts: int):
        self.folder = folder
        self.proposed_name = proposed_name
        self.attempts = attempts
        super().__init__(
            f"could not find a free name for '{proposed_name}' in '{folder}' "
            f"after {attempts} attempts"
        )


class FolderCreationError(FileSorterError, OSError):
    """A category folder could not be created.

    created lists the segment prefixes made before the failure, so they can
    still be reported even though the file itself was not placed.
    """

    def __init__(self, folder, created, cause: OSError):
        self.folder = folder
        self.created = list(created)
        self.cause = cause
        super().__init__(f"cannot create folder '{folder}': {cause}")
