"""
scan_files.py - Directory Listing Module

Provides the non-recursive file listing that feeds the preview
"""

from pathlib import Path
from typing import List
import logging

from .models_fs import FileItem

logger = logging.getLogger(__name__)


class FolderReadError(OSError):
    """The folder itself could not be listed"""


def read_folder(directory: Path, include_hidden: bool = False) -> List[FileItem]:
    """
    List the files of a single directory (non-recursive)

    Args:
        directory: Target directory
        include_hidden: Whether to include hidden files

    Returns:
        File list, sorted by name (case-insensitive)

    Raises:
        FolderReadError: Directory missing or unreadable
    """
    directory = Path(directory).expanduser().resolve()
    if not directory.is_dir():
        raise FolderReadError(f"Directory does not exist: {directory}")

    try:
        items = list(directory.iterdir())
    except OSError as e:
        raise FolderReadError(f"Cannot read directory {directory}: {e}") from e

    results: List[FileItem] = []
    for item in items:
        # Skip hidden files
        if not include_hidden and item.name.startswith('.'):
            continue

        try:
            # Only process files, not directories
            if not item.is_file():
                continue
            results.append(FileItem.from_path(item))
        except OSError as e:
            # Skip inaccessible files
            logger.warning("Cannot access %s: %s", item, e)

    results.sort(key=lambda f: (f.name.lower(), f.name))
    logger.debug("Listed %d files in %s", len(results), directory)
    return results


def list_suffixes(directory: Path, include_hidden: bool = False) -> List[str]:
    """
    List all file suffixes in the directory

    Args:
        directory: Target directory
        include_hidden: Whether to include hidden files

    Returns:
        Suffix list (deduplicated, sorted, lowercase, without the dot)
    """
    try:
        files = read_folder(directory, include_hidden=include_hidden)
    except FolderReadError:
        return []
    return sorted({f.ext.lower()[1:] for f in files if f.ext and f.ext != "."})
