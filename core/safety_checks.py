"""
safety_checks.py - Safety Check Module

Provides checks run before a file is touched
"""

from pathlib import Path
from typing import Tuple, Optional
import os


MAX_NAME_LENGTH = 255


def check_target_name(name: str) -> Tuple[bool, Optional[str]]:
    """
    Check that a target is a plain filename inside the same directory

    Args:
        name: Target filename

    Returns:
        (is_valid, error_reason)
    """
    if not name:
        return False, "Target filename is empty"

    if name in (".", ".."):
        return False, f"Target filename is reserved: {name}"

    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    for sep in separators:
        if sep in name:
            return False, f"Target filename contains a path separator: {name}"

    if "\0" in name:
        return False, "Target filename contains a NUL character"

    if len(name) > MAX_NAME_LENGTH:
        return False, f"Filename exceeds {MAX_NAME_LENGTH} characters"

    return True, None


def check_folder(path: Path) -> Tuple[bool, Optional[str]]:
    """
    Check that a folder exists and is writable

    Args:
        path: Folder to check

    Returns:
        (is_writable, error_reason)
    """
    if not path.is_dir():
        return False, f"Directory does not exist: {path}"
    if not os.access(path, os.W_OK):
        return False, f"Directory is not writable: {path}"
    return True, None
