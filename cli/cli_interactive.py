"""
cli_interactive.py - Interactive CLI

Provides a menu-style interactive interface
"""

import os
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Optional, List

from core import (
    FileItem, PreviewEntry, UndoEntry, RenameOptions, Rule, RULE_TYPES,
    FolderReadError, read_folder, list_suffixes, generate_preview, preview_stats,
    execute_rename, execute_undo, update_rule, describe_rule,
)
from core.rules import parse_extensions


@dataclass
class Session:
    """State of one interactive session"""
    folder: Optional[Path] = None
    files: List[FileItem] = field(default_factory=list)
    rules: List[Rule] = field(default_factory=list)
    last_undo_map: List[UndoEntry] = field(default_factory=list)
    options: RenameOptions = field(default_factory=RenameOptions)

    def preview(self) -> List[PreviewEntry]:
        return generate_preview(self.files, self.rules)

    def reload(self) -> None:
        if self.folder is not None:
            self.files = read_folder(self.folder, include_hidden=self.options.include_hidden)

    def move_rule(self, index: int, target: int) -> None:
        """Move the rule at index to position target"""
        rule = self.rules.pop(index)
        self.rules.insert(target, rule)


def clear_screen():
    """Clear screen"""
    os.system('cls' if os.name == 'nt' else 'clear')


def print_header(title: str):
    """Print header"""
    print()
    print("=" * 60)
    print(f"  {title}")
    print("=" * 60)
    print()


def pause():
    input("Press Enter to return...")


def input_directory(prompt: str = "Please enter directory path") -> Optional[Path]:
    """Input and validate directory"""
    while True:
        path_str = input(f"{prompt} (q to return): ").strip()
        if path_str.lower() == 'q':
            return None

        path = Path(path_str).expanduser().resolve()
        if path.is_dir():
            return path
        else:
            print(f"Error: Directory does not exist: {path}")


def input_choice(prompt: str, choices: List[str], default: Optional[str] = None) -> Optional[str]:
    """Input choice"""
    choices_str = "/".join(choices)
    default_str = f" [{default}]" if default else ""

    while True:
        value = input(f"{prompt} ({choices_str}){default_str}: ").strip()
        if not value and default:
            return default
        if value.lower() == 'q':
            return None
        if value in choices:
            return value
        print(f"Invalid choice, please enter: {choices_str}")


def input_bool(prompt: str, default: bool = False) -> bool:
    """Input boolean value"""
    default_str = "Y/n" if default else "y/N"
    value = input(f"{prompt} ({default_str}): ").strip().lower()
    if not value:
        return default
    return value == 'y'


def input_int(prompt: str, default: int = 0, min_val: Optional[int] = 0) -> int:
    """Input integer"""
    while True:
        value = input(f"{prompt} [{default}]: ").strip()
        if not value:
            return default
        try:
            num = int(value)
            if min_val is not None and num < min_val:
                print(f"Value cannot be less than {min_val}")
                continue
            return num
        except ValueError:
            print("Please enter a valid integer")


def input_text(prompt: str, default: str = "") -> str:
    """Input text; empty input keeps the default"""
    default_str = f" [{default}]" if default else ""
    value = input(f"{prompt}{default_str}: ")
    return value if value else default


# Fields that accept negative numbers
_SIGNED_FIELDS = {"position", "start"}


def prompt_rule_fields(rule: Rule) -> Rule:
    """Ask for every field of a rule, offering the current values as defaults"""
    changes = {}
    for f in fields(rule):
        label = f.name.replace("_", " ").capitalize()
        current = getattr(rule, f.name)
        if isinstance(current, Enum):
            choice = input_choice(label, [m.value for m in type(current)], current.value)
            if choice is not None:
                changes[f.name] = choice
        elif isinstance(current, bool):
            changes[f.name] = input_bool(label, current)
        elif isinstance(current, int):
            min_val = None if f.name in _SIGNED_FIELDS else 0
            changes[f.name] = input_int(label, current, min_val=min_val)
        elif isinstance(current, list):
            changes[f.name] = parse_extensions(input_text(f"{label} (comma separated)", ", ".join(current)))
        else:
            changes[f.name] = input_text(label, current)
    return update_rule(rule, **changes)


def show_rules(session: Session) -> None:
    if not session.rules:
        print("  (no rules)")
        return
    for i, rule in enumerate(session.rules, 1):
        print(f"  {i}. {rule.label}: {describe_rule(rule)}")


def show_preview(previews: List[PreviewEntry], limit: int = 30) -> None:
    print("-" * 70)
    for p in previews[:limit]:
        if p.conflict:
            tag = " [Conflict]"
        elif p.skip:
            tag = " [Skip]"
        elif p.changed:
            tag = ""
        else:
            tag = " [-]"
        print(f"  {p.original:<30} -> {p.renamed}{tag}")
    if len(previews) > limit:
        print(f"  ... and {len(previews) - limit} more files")
    print("-" * 70)
    stats = preview_stats(previews)
    print(f"{stats.changed} will rename, {stats.skipped} skipped, {stats.conflicts} conflicts")


def menu_open_folder(session: Session):
    """Open folder menu"""
    print_header("Open Folder")

    directory = input_directory("Please enter target directory")
    if directory is None:
        return

    session.options.include_hidden = input_bool("Include hidden files", default=False)
    try:
        session.folder = directory
        session.reload()
    except FolderReadError as e:
        print(f"Error: {e}")
        session.folder = None
        session.files = []
        pause()
        return

    session.last_undo_map = []
    print(f"Loaded {len(session.files)} files")
    suffixes = list_suffixes(directory, include_hidden=session.options.include_hidden)
    if suffixes:
        print(f"Extensions: {', '.join(suffixes)}")
    pause()


def menu_add_rule(session: Session):
    """Add rule menu"""
    print_header("Add Rule")

    tags = list(RULE_TYPES)
    for i, tag in enumerate(tags, 1):
        print(f"  {i:>2}. {RULE_TYPES[tag].label}")
    print()

    choice = input_choice("Select rule type", [str(i) for i in range(1, len(tags) + 1)])
    if choice is None:
        return

    rule = RULE_TYPES[tags[int(choice) - 1]]()
    rule = prompt_rule_fields(rule)
    session.rules.append(rule)
    print(f"\nAdded {rule.label}: {describe_rule(rule)}")
    pause()


def menu_remove_rule(session: Session):
    """Remove rule menu"""
    print_header("Remove Rule")
    show_rules(session)
    if not session.rules:
        pause()
        return

    print()
    choice = input_choice("Rule to remove", [str(i) for i in range(1, len(session.rules) + 1)])
    if choice is None:
        return
    removed = session.rules.pop(int(choice) - 1)
    print(f"Removed {removed.label}")
    pause()


def menu_move_rule(session: Session):
    """Move rule menu"""
    print_header("Move Rule")
    show_rules(session)
    if len(session.rules) < 2:
        pause()
        return

    print()
    positions = [str(i) for i in range(1, len(session.rules) + 1)]
    choice = input_choice("Rule to move", positions)
    if choice is None:
        return
    target = input_choice("New position", positions)
    if target is None:
        return
    session.move_rule(int(choice) - 1, int(target) - 1)
    print()
    show_rules(session)
    pause()


def reload_after_batch(session: Session) -> None:
    """Re-list the folder after a batch; a vanished folder closes it"""
    try:
        session.reload()
    except FolderReadError as e:
        print(f"Error: {e}")
        session.folder = None
        session.files = []
        session.last_undo_map = []


def menu_preview(session: Session):
    """Preview menu"""
    print_header("Preview")
    if session.folder is None:
        print("Open a folder first")
        pause()
        return

    show_rules(session)
    print()
    show_preview(session.preview())
    pause()


def menu_execute(session: Session):
    """Execute rename menu"""
    print_header("Execute Rename")
    if session.folder is None:
        print("Open a folder first")
        pause()
        return

    previews = session.preview()
    stats = preview_stats(previews)
    if stats.conflicts:
        show_preview(previews)
        print(f"\n{stats.conflicts} conflict(s) detected, fix the rules before renaming")
        pause()
        return
    if stats.changed == 0:
        print("No files need renaming")
        pause()
        return

    show_preview(previews)
    print()
    if not input_bool(f"Rename {stats.changed} files", default=False):
        print("Cancelled")
        pause()
        return

    print("\nExecuting...")
    result = execute_rename(session.folder, previews, options=session.options)
    print()
    print(result.summary(session.options.error_sample_limit))

    if result.success > 0:
        session.last_undo_map = list(result.undo_map)
    reload_after_batch(session)
    pause()


def menu_undo(session: Session):
    """Undo menu"""
    print_header("Undo Last Rename")
    if session.folder is None or not session.last_undo_map:
        print("Nothing to undo")
        pause()
        return

    if not input_bool(f"Restore {len(session.last_undo_map)} files", default=False):
        print("Cancelled")
        pause()
        return

    result = execute_undo(session.folder, session.last_undo_map)
    session.last_undo_map = []
    print(result.summary(session.options.error_sample_limit))
    reload_after_batch(session)
    pause()


def interactive_mode() -> int:
    """Interactive mode main loop"""
    session = Session()
    while True:
        clear_screen()
        print_header("Batch Rename Tool")

        if session.folder is not None:
            print(f"Folder: {session.folder} ({len(session.files)} files)")
        print("Rules:")
        show_rules(session)
        print()

        print("Please select function:")
        print()
        print("  1. Open folder")
        print("  2. Add rule")
        print("  3. Remove rule")
        print("  4. Move rule")
        print("  5. Clear rules")
        print("  6. Preview")
        print("  7. Execute rename")
        print("  8. Undo last rename")
        print()
        print("  q. Exit")
        print()

        choice = input("Please select (1-8/q): ").strip().lower()

        if choice == 'q':
            print("Goodbye!")
            return 0
        elif choice == '1':
            menu_open_folder(session)
        elif choice == '2':
            menu_add_rule(session)
        elif choice == '3':
            menu_remove_rule(session)
        elif choice == '4':
            menu_move_rule(session)
        elif choice == '5':
            session.rules.clear()
        elif choice == '6':
            menu_preview(session)
        elif choice == '7':
            menu_execute(session)
        elif choice == '8':
            menu_undo(session)
        else:
            print("Invalid choice")
            input("Press Enter to continue...")


if __name__ == "__main__":
    import sys
    sys.exit(interactive_mode())
