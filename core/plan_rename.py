"""
plan_rename.py - Rename Preview Generation Module

Responsibilities:
- Apply the extension filter
- Thread each file through the rule pipeline with its sequential index
- Conflict detection (within the batch and against untouched files)
- Output one PreviewEntry per file, in batch order
"""

from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Set
from collections import defaultdict
import logging

from .models_fs import FileItem, PreviewEntry, normalize_for_comparison
from .rules import Rule, FilterExtRule
from .rule_engine import NameParts, apply_rules

logger = logging.getLogger(__name__)


class ConflictDetector:
    """Conflict detector"""

    def __init__(self, originals: Sequence[str]):
        """
        Initialize conflict detector

        Args:
            originals: Every filename currently in the batch (skipped ones included)
        """
        self.originals: Set[str] = {self._normalize(n) for n in originals}

    @staticmethod
    def _normalize(name: str) -> str:
        return normalize_for_comparison(name)

    def duplicate_targets(self, entries: List[PreviewEntry]) -> Set[int]:
        """Indexes of non-skipped entries sharing a target name with another entry"""
        by_target: Dict[str, List[int]] = defaultdict(list)
        for i, entry in enumerate(entries):
            if not entry.skip:
                by_target[self._normalize(entry.renamed)].append(i)

        return {i for indexes in by_target.values() if len(indexes) > 1 for i in indexes}

    def occupied_targets(self, entries: List[PreviewEntry], conflicts: Set[int]) -> Set[int]:
        """
        Indexes of changed entries whose target is an original name that stays in place

        A name is vacated only by a changed, non-skipped, non-conflicting
        entry. Marking a conflict can keep another name occupied, so this
        repeats until nothing new is marked.
        """
        conflicts = set(conflicts)
        while True:
            vacated = {
                self._normalize(e.original)
                for i, e in enumerate(entries)
                if e.changed and not e.skip and i not in conflicts
            }
            occupied = self.originals - vacated

            newly = {
                i for i, e in enumerate(entries)
                if i not in conflicts and e.changed and not e.skip
                and self._normalize(e.renamed) in occupied
            }
            if not newly:
                return conflicts
            conflicts |= newly


def allowed_extensions(rules: Sequence[Rule]) -> Optional[Set[str]]:
    """
    Extension set from the first non-empty extension filter

    Returns:
        Lowercase extensions without dot, or None when files are not filtered
    """
    for rule in rules:
        if isinstance(rule, FilterExtRule) and rule.extensions:
            return {e.lower().lstrip(".") for e in rule.extensions}
    return None


def _ext_key(ext: str) -> str:
    return ext.lower()[1:] if ext.startswith(".") else ext.lower()


def generate_preview(files: Sequence[FileItem], rules: Sequence[Rule]) -> List[PreviewEntry]:
    """
    Generate the rename preview for a batch

    Args:
        files: Files in batch order
        rules: Ordered rule list

    Returns:
        One entry per file, in the same order
    """
    if not rules:
        return [PreviewEntry(original=f.name, renamed=f.name) for f in files]

    allowed = allowed_extensions(rules)
    pipeline = [r for r in rules if not isinstance(r, FilterExtRule)]

    entries: List[PreviewEntry] = []
    seq_index = 0
    for f in files:
        if allowed is not None and _ext_key(f.ext) not in allowed:
            entries.append(PreviewEntry(original=f.name, renamed=f.name, skip=True))
            continue

        parts = NameParts(base=f.base, ext=f.ext, mtime=f.mtime, birthtime=f.birthtime)
        parts = apply_rules(parts, pipeline, seq_index)
        seq_index += 1

        renamed = parts.name
        entries.append(PreviewEntry(original=f.name, renamed=renamed, changed=renamed != f.name))

    detector = ConflictDetector([f.name for f in files])
    conflicts = detector.duplicate_targets(entries)
    conflicts = detector.occupied_targets(entries, conflicts)

    if conflicts:
        logger.debug("Preview found %d conflicting entries", len(conflicts))
        entries = [
            replace(e, conflict=True) if i in conflicts else e
            for i, e in enumerate(entries)
        ]

    return entries


@dataclass(frozen=True)
class PreviewStats:
    """Counts shown next to a preview"""
    total: int
    changed: int
    conflicts: int
    skipped: int


def preview_stats(entries: Sequence[PreviewEntry]) -> PreviewStats:
    return PreviewStats(
        total=len(entries),
        changed=sum(1 for e in entries if e.changed and not e.skip),
        conflicts=sum(1 for e in entries if e.conflict),
        skipped=sum(1 for e in entries if e.skip),
    )


def can_execute(entries: Sequence[PreviewEntry]) -> bool:
    """A batch may run only if something changes and nothing conflicts"""
    stats = preview_stats(entries)
    return stats.changed > 0 and stats.conflicts == 0
