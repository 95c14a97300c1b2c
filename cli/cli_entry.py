"""
cli_entry.py - CLI Entry Point

Supports:
- Command-line argument mode
- Interactive mode
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from core import (
    RenameOptions, RuleConfigError, FolderReadError,
    PrefixRule, SuffixRule, ReplaceRule, RegexRule, RemoveCharsRule, CaseRule,
    SequentialRule, InsertAtRule, RemoveAtRule, FilterExtRule, ChangeExtRule,
    TrimSpacesRule, RemoveSpecialRule, DateRenameRule,
    CaseMode, Placement, TrimMode,
    read_folder, generate_preview, preview_stats, execute_rename, execute_undo,
    load_undo_map, cleanup_temp_files, check_folder, configure_logging,
    rule_from_dict, describe_rule,
)

from .cli_interactive import interactive_mode


class RuleAction(argparse.Action):
    """Append a rule to args.rules, keeping the command-line order"""

    def __init__(self, option_strings, dest, build=None, **kwargs):
        self.build = build
        kwargs.setdefault("default", None)
        super().__init__(option_strings, "rules", **kwargs)

    def __call__(self, parser, namespace, values, option_string=None):
        rules = list(getattr(namespace, self.dest, None) or [])
        try:
            rules.append(self.build(values))
        except (RuleConfigError, ValueError) as e:
            parser.error(f"{option_string}: {e}")
        setattr(namespace, self.dest, rules)


def _rule_from_json(text: str):
    return rule_from_dict(json.loads(text))


def add_rule_options(parser: argparse.ArgumentParser) -> None:
    """Rule options; applied in the order they are given"""
    group = parser.add_argument_group("rules (applied in the order given)")
    group.add_argument("--prefix", action=RuleAction, metavar="TEXT",
                       build=lambda v: PrefixRule(value=v), help="Add prefix")
    group.add_argument("--suffix", action=RuleAction, metavar="TEXT",
                       build=lambda v: SuffixRule(value=v), help="Add suffix")
    group.add_argument("--replace", action=RuleAction, nargs=2, metavar=("FIND", "REPLACE"),
                       build=lambda v: ReplaceRule(find=v[0], replace=v[1]),
                       help="Replace text (case-insensitive)")
    group.add_argument("--replace-exact", action=RuleAction, nargs=2, metavar=("FIND", "REPLACE"),
                       build=lambda v: ReplaceRule(find=v[0], replace=v[1], case_sensitive=True),
                       help="Replace text (case-sensitive)")
    group.add_argument("--regex", action=RuleAction, nargs=2, metavar=("PATTERN", "REPLACE"),
                       build=lambda v: RegexRule(find=v[0], replace=v[1]),
                       help="Regex replace ($1, $& in REPLACE)")
    group.add_argument("--remove-chars", action=RuleAction, metavar="CHARS",
                       build=lambda v: RemoveCharsRule(chars=v), help="Remove these characters")
    group.add_argument("--case", action=RuleAction, choices=[m.value for m in CaseMode],
                       build=lambda v: CaseRule(mode=CaseMode(v)), help="Change case")
    group.add_argument("--number", action=RuleAction, nargs="?", const=Placement.SUFFIX.value,
                       choices=[p.value for p in Placement], metavar="POSITION",
                       build=lambda v: SequentialRule(position=Placement(v)),
                       help="Sequential number (start 1, 3 digits, '_' separator)")
    group.add_argument("--insert", action=RuleAction, nargs=2, metavar=("TEXT", "POS"),
                       build=lambda v: InsertAtRule(value=v[0], position=int(v[1])),
                       help="Insert text at position (negative counts from end)")
    group.add_argument("--remove-at", action=RuleAction, nargs=2, metavar=("START", "COUNT"),
                       build=lambda v: RemoveAtRule(start=int(v[0]), count=int(v[1])),
                       help="Remove COUNT characters at START")
    group.add_argument("--filter-ext", action=RuleAction, metavar="EXTS",
                       build=lambda v: rule_from_dict({"type": FilterExtRule.type, "extensions": v}),
                       help="Only rename these extensions (e.g. 'jpg,png')")
    group.add_argument("--ext", action=RuleAction, metavar="EXT",
                       build=lambda v: ChangeExtRule(value=v), help="Change extension ('' removes it)")
    group.add_argument("--trim", action=RuleAction, nargs="?", const=TrimMode.TRIM.value,
                       choices=[m.value for m in TrimMode], metavar="MODE",
                       build=lambda v: TrimSpacesRule(mode=TrimMode(v)), help="Trim whitespace")
    group.add_argument("--remove-special", action=RuleAction, nargs=0,
                       build=lambda v: RemoveSpecialRule(), help="Remove special characters")
    group.add_argument("--date", action=RuleAction, nargs="?", const=Placement.PREFIX.value,
                       choices=[p.value for p in Placement], metavar="POSITION",
                       build=lambda v: DateRenameRule(position=Placement(v)),
                       help="Add modification date (YYYY-MM-DD)")
    group.add_argument("--rule", action=RuleAction, metavar="JSON", build=_rule_from_json,
                       help='Any rule as JSON, e.g. \'{"type": "sequential", "start": 10}\'')


def create_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser"""
    parser = argparse.ArgumentParser(
        prog="rule-renamer",
        description="Rule-based Batch Rename Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive mode
  python main.py --cli

  # Preview a rule pipeline
  python main.py --cli preview ./photos --filter-ext jpg --case lower --number

  # Rename and keep a log for undo
  python main.py --cli rename ./photos --prefix "trip_" --log-dir ./logs --yes

  # Undo a logged batch
  python main.py --cli undo ./photos --log ./logs/rename_result_20240101_120000_000000.json
"""
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Subcommands")

    # list subcommand
    list_parser = subparsers.add_parser("list", help="List files")
    list_parser.add_argument("directory", type=str, help="Target directory")
    list_parser.add_argument("--include-hidden", action="store_true", help="Include hidden files")

    # preview subcommand
    preview_parser = subparsers.add_parser("preview", help="Preview a rename")
    preview_parser.add_argument("directory", type=str, help="Target directory")
    preview_parser.add_argument("--include-hidden", action="store_true", help="Include hidden files")
    preview_parser.add_argument("--limit", type=int, default=50, help="Rows to show")
    add_rule_options(preview_parser)

    # rename subcommand
    rename_parser = subparsers.add_parser("rename", help="Rename files")
    rename_parser.add_argument("directory", type=str, help="Target directory")
    rename_parser.add_argument("--include-hidden", action="store_true", help="Include hidden files")
    rename_parser.add_argument("--limit", type=int, default=20, help="Preview rows to show")
    rename_parser.add_argument("--log-dir", type=str, help="Write a JSON result log (needed for undo)")
    rename_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")
    add_rule_options(rename_parser)

    # undo subcommand
    undo_parser = subparsers.add_parser("undo", help="Undo a logged rename")
    undo_parser.add_argument("directory", type=str, help="Target directory")
    undo_parser.add_argument("--log", type=str, required=True, help="Result log written by rename")
    undo_parser.add_argument("--yes", "-y", action="store_true", help="Skip confirmation")

    # recover subcommand
    recover_parser = subparsers.add_parser("recover", help="Restore files left under temporary names")
    recover_parser.add_argument("directory", type=str, help="Target directory")

    return parser


def status_tag(entry) -> str:
    """Status label of a preview entry"""
    if entry.conflict:
        return "Conflict"
    if entry.skip:
        return "Skip"
    if entry.changed:
        return "Rename"
    return "-"


def print_preview(previews, limit: int) -> None:
    print("-" * 80)
    for p in previews[:limit]:
        print(f"  {p.original:<35} -> {p.renamed:<35} {status_tag(p)}")
    if len(previews) > limit:
        print(f"  ... and {len(previews) - limit} more files")
    print("-" * 80)
    stats = preview_stats(previews)
    print(f"{stats.total} files, {stats.changed} will rename, "
          f"{stats.skipped} skipped, {stats.conflicts} conflicts")


def _load(args):
    """Resolve the directory and list it; returns (directory, files) or None"""
    directory = Path(args.directory).expanduser().resolve()
    try:
        files = read_folder(directory, include_hidden=getattr(args, "include_hidden", False))
    except FolderReadError as e:
        print(f"Error: {e}")
        return None
    return directory, files


def _print_rules(rules) -> None:
    print("Rules:")
    for i, rule in enumerate(rules, 1):
        print(f"  {i}. {rule.label}: {describe_rule(rule)}")


def cmd_list(args):
    """Handle list command"""
    loaded = _load(args)
    if loaded is None:
        return 1
    directory, files = loaded

    if not files:
        print("No files found")
        return 0

    print(f"Found {len(files)} files in {directory}:")
    print("-" * 80)
    for f in files:
        size_kb = f.size / 1024
        modified = f.mtime.strftime("%Y-%m-%d %H:%M") if f.mtime else "unknown"
        print(f"  {f.name:<50} {size_kb:>10.1f} KB  {modified}")
    print("-" * 80)

    return 0


def cmd_preview(args):
    """Handle preview command"""
    loaded = _load(args)
    if loaded is None:
        return 1
    directory, files = loaded
    rules = args.rules or []

    print(f"Directory: {directory}")
    if rules:
        _print_rules(rules)
    print()

    previews = generate_preview(files, rules)
    print_preview(previews, args.limit)

    return 1 if preview_stats(previews).conflicts else 0


def cmd_rename(args):
    """Handle rename command"""
    loaded = _load(args)
    if loaded is None:
        return 1
    directory, files = loaded
    rules = args.rules or []

    ok, error = check_folder(directory)
    if not ok:
        print(f"Error: {error}")
        return 1

    if not rules:
        print("No rules given")
        return 1

    _print_rules(rules)
    previews = generate_preview(files, rules)
    print()
    print_preview(previews, args.limit)

    stats = preview_stats(previews)
    if stats.conflicts:
        print(f"\n{stats.conflicts} conflict(s) detected, fix the rules before renaming")
        return 1

    if stats.changed == 0:
        print("No files need renaming")
        return 0

    if not args.yes:
        confirm = input(f"\nRename {stats.changed} files? (y/N): ").strip().lower()
        if confirm != 'y':
            print("Cancelled")
            return 0

    options = RenameOptions(
        include_hidden=args.include_hidden,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )

    print("\nExecuting...")
    result = execute_rename(directory, previews, options=options)
    print(result.summary(options.error_sample_limit))
    if options.log_dir and result.undo_map:
        print(f"\nResult log saved in {options.log_dir} (use the 'undo' command to revert)")

    return 0 if result.failed == 0 else 1


def cmd_undo(args):
    """Handle undo command"""
    directory = Path(args.directory).expanduser().resolve()
    ok, error = check_folder(directory)
    if not ok:
        print(f"Error: {error}")
        return 1

    try:
        undo_map = load_undo_map(Path(args.log))
    except (OSError, ValueError) as e:
        print(f"Error: Cannot read log: {e}")
        return 1

    if not undo_map:
        print("Nothing to undo")
        return 0

    print(f"Will restore {len(undo_map)} files:")
    for entry in undo_map[:20]:
        print(f"  {entry.from_name:<40} -> {entry.to_name}")
    if len(undo_map) > 20:
        print(f"  ... and {len(undo_map) - 20} more")

    if not args.yes:
        confirm = input("\nConfirm undo? (y/N): ").strip().lower()
        if confirm != 'y':
            print("Cancelled")
            return 0

    result = execute_undo(directory, undo_map)
    print(result.summary())

    return 0 if result.failed == 0 else 1


def cmd_recover(args):
    """Handle recover command"""
    directory = Path(args.directory).expanduser().resolve()
    ok, error = check_folder(directory)
    if not ok:
        print(f"Error: {error}")
        return 1

    count = cleanup_temp_files(directory)
    print(f"Restored {count} file(s)")
    return 0


def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if args.command is None:
        # No subcommand, enter interactive mode
        return interactive_mode()

    # Handle subcommands
    if args.command == "list":
        return cmd_list(args)
    elif args.command == "preview":
        return cmd_preview(args)
    elif args.command == "rename":
        return cmd_rename(args)
    elif args.command == "undo":
        return cmd_undo(args)
    elif args.command == "recover":
        return cmd_recover(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
