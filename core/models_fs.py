"""
models_fs.py - Core Data Structure Definitions

Contains:
- FileItem: File information supplied by the directory listing
- PreviewEntry: Projected outcome of the rule pipeline for one file
- RenameResult / UndoResult: Outcome of a rename or undo batch
- RenameOptions: Configuration shared by the front ends
"""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import os
import platform


def _parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp (a trailing Z is accepted)"""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    text = str(value)
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _format_timestamp(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def split_name(name: str):
    """Split a filename into (base, ext); ext is the final .suffix or empty"""
    return os.path.splitext(name)


@dataclass(frozen=True)
class FileItem:
    """File information data class"""
    name: str                           # Filename (with extension)
    base: str                           # Filename (without extension)
    ext: str                            # Extension (e.g., .png), may be empty
    size: int = 0                       # File size (bytes)
    mtime: Optional[datetime] = None    # Modification time
    birthtime: Optional[datetime] = None  # Creation time, where the platform records it

    @classmethod
    def from_name(cls, name: str, **kwargs) -> "FileItem":
        """Create FileItem from a bare filename"""
        base, ext = split_name(name)
        return cls(name=name, base=base, ext=ext, **kwargs)

    @classmethod
    def from_path(cls, p: Path) -> "FileItem":
        """Create FileItem from Path object"""
        stat = p.stat()
        birth = getattr(stat, "st_birthtime", None)
        if birth is None and platform.system() == "Windows":
            # st_ctime is the creation time on Windows
            birth = stat.st_ctime
        return cls.from_name(
            p.name,
            size=stat.st_size,
            mtime=datetime.fromtimestamp(stat.st_mtime),
            birthtime=datetime.fromtimestamp(birth) if birth is not None else None,
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileItem":
        """Create FileItem from its boundary form (timestamps as ISO strings)"""
        name = data["name"]
        base, ext = split_name(name)
        return cls(
            name=name,
            base=data.get("base", base),
            ext=data.get("ext", ext),
            size=int(data.get("size") or 0),
            mtime=_parse_timestamp(data.get("mtime")),
            birthtime=_parse_timestamp(data.get("birthtime")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ext": self.ext,
            "base": self.base,
            "size": self.size,
            "mtime": _format_timestamp(self.mtime),
            "birthtime": _format_timestamp(self.birthtime),
        }


@dataclass(frozen=True)
class PreviewEntry:
    """Projected rename of one file"""
    original: str
    renamed: str
    conflict: bool = False      # Would collide with another entry or an untouched file
    skip: bool = False          # Excluded by an extension filter
    changed: bool = False       # renamed != original and not skipped

    @property
    def will_rename(self) -> bool:
        """Whether executing the batch would touch this file"""
        return self.changed and not self.skip and not self.conflict

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PreviewEntry":
        return cls(
            original=data["original"],
            renamed=data["renamed"],
            conflict=bool(data.get("conflict", False)),
            skip=bool(data.get("skip", False)),
            changed=bool(data.get("changed", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "original": self.original,
            "renamed": self.renamed,
            "conflict": self.conflict,
            "skip": self.skip,
            "changed": self.changed,
        }


@dataclass(frozen=True)
class FileError:
    """Per-file failure"""
    file: str
    error: str

    def to_dict(self) -> Dict[str, str]:
        return {"file": self.file, "error": self.error}


@dataclass(frozen=True)
class UndoEntry:
    """Inverse mapping for one renamed file: current name -> original name"""
    from_name: str
    to_name: str

    @classmethod
    def from_dict(cls, data: Dict[str, str]) -> "UndoEntry":
        return cls(from_name=data["from"], to_name=data["to"])

    def to_dict(self) -> Dict[str, str]:
        return {"from": self.from_name, "to": self.to_name}


def _error_lines(errors: List[FileError], limit: int) -> List[str]:
    lines = ["Failure Details:"]
    for err in errors[:limit]:
        lines.append(f"  - {err.file}: {err.error}")
    if len(errors) > limit:
        lines.append(f"  ... and {len(errors) - limit} more failures")
    return lines


@dataclass
class RenameResult:
    """Rename execution result"""
    success: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[FileError] = field(default_factory=list)
    undo_map: List[UndoEntry] = field(default_factory=list)

    def add_error(self, file: str, error: str) -> None:
        self.failed += 1
        self.errors.append(FileError(file=file, error=error))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": [e.to_dict() for e in self.errors],
            "undo_map": [u.to_dict() for u in self.undo_map],
        }

    def summary(self, error_limit: int = 10) -> str:
        """Generate summary"""
        lines = [
            f"Execution Result:",
            f"  - Success: {self.success}",
            f"  - Failed: {self.failed}",
            f"  - Skipped: {self.skipped}",
        ]
        if self.errors:
            lines.extend(_error_lines(self.errors, error_limit))
        return "\n".join(lines)


@dataclass
class UndoResult:
    """Undo execution result"""
    success: int = 0
    failed: int = 0
    errors: List[FileError] = field(default_factory=list)

    def add_error(self, file: str, error: str) -> None:
        self.failed += 1
        self.errors.append(FileError(file=file, error=error))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "failed": self.failed,
            "errors": [e.to_dict() for e in self.errors],
        }

    def summary(self, error_limit: int = 10) -> str:
        lines = [
            f"Undo Result:",
            f"  - Restored: {self.success}",
            f"  - Failed: {self.failed}",
        ]
        if self.errors:
            lines.extend(_error_lines(self.errors, error_limit))
        return "\n".join(lines)


@dataclass
class RenameOptions:
    """Rename options configuration"""
    # Listing options
    include_hidden: bool = False    # Whether to include hidden files

    # Execution options
    log_dir: Optional[Path] = None  # Where to write JSON result logs (None = no log)
    temp_prefix: str = "__brtemp_"  # Prefix of phase-1 temporary names

    # Reporting
    error_sample_limit: int = 10    # Failures shown in summaries


def normalize_for_comparison(name: str) -> str:
    """Normalize filename for comparison (names are compared case-insensitively)"""
    return name.casefold()
