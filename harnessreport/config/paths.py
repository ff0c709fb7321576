"""Location of the persistent run statistics file."""

from __future__ import annotations

from pathlib import Path

STATISTICS_FILE_PREFIX = ".surefire-"


def statistics_file_path(reports_directory: str | Path, configuration_hash: str) -> Path:
    """Compute the statistics file for a reports directory and configuration.

    The build layer lays reports out as ``<module>/target/<reports-dir>``, so
    two levels above the reports directory is the module root, which is
    shared by every execution of the module. The configuration hash keeps
    unrelated plugin configurations from writing to the same file.

    Pure: the path is not resolved and nothing is created.

    Example:
        >>> statistics_file_path("app/target/reports", "abc123")
        PosixPath('app/.surefire-abc123')
    """
    return Path(reports_directory).parent.parent / f"{STATISTICS_FILE_PREFIX}{configuration_hash}"
