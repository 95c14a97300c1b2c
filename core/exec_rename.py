"""
exec_rename.py - Rename Execution Module

Responsibilities:
- Two-phase execution (first rename to temporary name, then to final name)
- Undo of a finished batch from its inverse mapping
- Per-file error collection and result logging
"""

from pathlib import Path
from typing import Dict, List, Optional, Callable, Sequence, Set, Tuple
from datetime import datetime
import json
import logging
import os
import re
import time
import uuid

from .models_fs import (
    PreviewEntry, RenameResult, UndoResult, UndoEntry, RenameOptions,
    normalize_for_comparison,
)
from .safety_checks import check_target_name

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


def _generate_temp_name(original: str, prefix: str) -> str:
    """Generate a temporary filename unique within the directory"""
    stamp = int(time.time() * 1000)
    unique_id = uuid.uuid4().hex[:8]
    return f"{prefix}{stamp}_{unique_id}_{original}"


def _temp_name_pattern(prefix: str) -> "re.Pattern":
    return re.compile(re.escape(prefix) + r"\d+_[0-9a-f]{8}_(.+)$", re.DOTALL)


def _rename_no_clobber(src: Path, dst: Path) -> None:
    """Rename, refusing to replace an existing file (POSIX rename would)"""
    # A case-only rename on a case-insensitive filesystem sees itself
    if dst.exists() and not os.path.samefile(src, dst):
        raise FileExistsError(f"Target already exists: {dst.name}")
    os.rename(src, dst)


def execute_rename(
    folder: Path,
    previews: Sequence[PreviewEntry],
    options: Optional[RenameOptions] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RenameResult:
    """
    Execute a preview batch (two-phase)

    Entries that are skipped, unchanged or conflicting are counted as
    skipped and never touched.

    Args:
        folder: Directory holding the files
        previews: Preview entries for the batch
        options: Rename options
        progress_callback: Progress callback (current, total, message)

    Returns:
        Execution result, including the undo map
    """
    if options is None:
        options = RenameOptions()

    folder = Path(folder)
    result = RenameResult()

    pending: List[PreviewEntry] = []
    for p in previews:
        if not p.will_rename:
            result.skipped += 1
            continue
        valid, error = check_target_name(p.renamed)
        if not valid:
            logger.warning("Not renaming %s: %s", p.original, error)
            result.add_error(p.original, error)
            continue
        pending.append(p)

    total = len(pending)
    if total == 0:
        _maybe_save_log(result, options, folder)
        return result

    # Phase 1: Rename all to temporary names
    staged: List[Tuple[str, str, str]] = []  # (temp, final, original)

    for i, p in enumerate(pending):
        if progress_callback:
            progress_callback(i + 1, total * 2, f"[Phase 1] {p.original} -> temp name")

        temp_name = _generate_temp_name(p.original, options.temp_prefix)
        try:
            os.rename(folder / p.original, folder / temp_name)
            staged.append((temp_name, p.renamed, p.original))
            logger.debug("Staged %s as %s", p.original, temp_name)
        except OSError as e:
            logger.warning("Phase 1 failed for %s: %s", p.original, e)
            result.add_error(p.original, str(e))

    # Phase 2: Rename from temporary names to final names
    # Entries that failed phase 1 count as done so progress still ends at total * 2
    done = total * 2 - len(staged)
    if progress_callback and not staged:
        progress_callback(done, total * 2, "[Phase 2] nothing staged")
    for i, (temp_name, final_name, original) in enumerate(staged):
        if progress_callback:
            progress_callback(done + i + 1, total * 2, f"[Phase 2] temp name -> {final_name}")

        temp_path = folder / temp_name
        try:
            _rename_no_clobber(temp_path, folder / final_name)
            result.success += 1
            result.undo_map.append(UndoEntry(from_name=final_name, to_name=original))
            logger.info("Renamed %s -> %s", original, final_name)
        except OSError as e:
            # Try to restore
            try:
                os.rename(temp_path, folder / original)
            except OSError as restore_error:
                logger.error("Could not restore %s, left as %s: %s", original, temp_name, restore_error)
            logger.warning("Phase 2 failed for %s: %s", original, e)
            result.add_error(original, str(e))

    _maybe_save_log(result, options, folder)
    return result


def execute_undo(
    folder: Path,
    undo_map: Sequence[UndoEntry],
    progress_callback: Optional[ProgressCallback] = None,
) -> UndoResult:
    """
    Reverse a finished batch

    Each entry is renamed directly. Entries run in passes: a pass takes
    every pending entry whose target is not still held by another pending
    entry, so chains such as a renumbering unwind in a valid order. Entries
    left over form cycles (e.g. a swap); they are attempted once and fail
    instead of overwriting.

    Args:
        folder: Directory holding the files
        undo_map: Inverse mapping returned by execute_rename
        progress_callback: Progress callback (current, total, message)

    Returns:
        Undo result
    """
    folder = Path(folder)
    result = UndoResult()
    total = len(undo_map)
    step = 0

    pending = list(undo_map)
    while pending:
        ready = _unblocked(pending)
        if not ready:
            logger.debug("Undo: %d entries form a cycle", len(pending))
            ready = set(range(len(pending)))
        batch = [e for i, e in enumerate(pending) if i in ready]
        pending = [e for i, e in enumerate(pending) if i not in ready]

        for entry in batch:
            step += 1
            if progress_callback:
                progress_callback(step, total, f"[Undo] {entry.from_name} -> {entry.to_name}")
            try:
                _rename_no_clobber(folder / entry.from_name, folder / entry.to_name)
                result.success += 1
                logger.info("Restored %s -> %s", entry.from_name, entry.to_name)
            except OSError as e:
                logger.warning("Undo failed for %s: %s", entry.from_name, e)
                result.add_error(entry.from_name, str(e))

    return result


def _unblocked(pending: List[UndoEntry]) -> Set[int]:
    """Indexes of entries whose target name is not the current name of another pending entry"""
    holders: Dict[str, Set[int]] = {}
    for i, entry in enumerate(pending):
        holders.setdefault(normalize_for_comparison(entry.from_name), set()).add(i)

    return {
        i for i, entry in enumerate(pending)
        if not holders.get(normalize_for_comparison(entry.to_name), set()) - {i}
    }


def _maybe_save_log(result: RenameResult, options: RenameOptions, folder: Optional[Path] = None) -> None:
    if options.log_dir is None:
        return
    try:
        log_file = save_result_log(result, Path(options.log_dir), folder)
        logger.info("Result log written to %s", log_file)
    except OSError as e:
        logger.error("Could not write result log: %s", e)


def save_result_log(result: RenameResult, log_dir: Path, folder: Optional[Path] = None) -> Path:
    """Save execution result log"""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    log_file = log_dir / f"rename_result_{timestamp}.json"

    data = {
        "timestamp": timestamp,
        "folder": str(folder) if folder is not None else None,
        **result.to_dict(),
    }

    with open(log_file, 'w', encoding='utf-8') as f:
        json.dump(data, f, ensure_ascii=False, indent=2)

    return log_file


def load_undo_map(log_file: Path) -> List[UndoEntry]:
    """
    Read the undo map back from a result log

    Raises:
        OSError: Log cannot be read
        ValueError: Log is not a result log
    """
    with open(log_file, 'r', encoding='utf-8') as f:
        data = json.load(f)

    try:
        return [UndoEntry.from_dict(item) for item in data["undo_map"]]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Not a rename result log: {log_file}") from e


def cleanup_temp_files(folder: Path, temp_prefix: str = "__brtemp_") -> int:
    """
    Restore files left under a temporary name (for exception recovery)

    Args:
        folder: Directory
        temp_prefix: Prefix used for temporary names

    Returns:
        Number of restored files
    """
    pattern = _temp_name_pattern(temp_prefix)
    count = 0
    for item in Path(folder).iterdir():
        if not item.is_file():
            continue
        match = pattern.match(item.name)
        if not match:
            continue
        original_path = item.parent / match.group(1)
        if original_path.exists():
            logger.warning("Cannot restore %s: %s exists", item.name, original_path.name)
            continue
        try:
            os.rename(item, original_path)
            count += 1
            logger.info("Recovered %s -> %s", item.name, original_path.name)
        except OSError as e:
            logger.warning("Cannot restore %s: %s", item.name, e)
    return count
