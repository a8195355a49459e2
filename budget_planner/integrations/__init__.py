"""Integrations module for external storage.

Provides unified access to storage systems through fsspec abstraction.
"""

from budget_planner.integrations.storage import (
    file_exists,
    get_filesystem,
    read_file,
    remove_file,
    write_file,
)

__all__ = [
    "file_exists",
    "get_filesystem",
    "read_file",
    "remove_file",
    "write_file",
]
