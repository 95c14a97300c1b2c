"""
core - Rule-based Batch Rename Core Module

Provides the rule pipeline, preview generation, two-phase execution and undo.
"""

from .models_fs import (
    FileItem,
    PreviewEntry,
    FileError,
    UndoEntry,
    RenameResult,
    UndoResult,
    RenameOptions,
)

from .rules import (
    Rule,
    RuleConfigError,
    CaseMode,
    Placement,
    TrimMode,
    DateSource,
    PrefixRule,
    SuffixRule,
    ReplaceRule,
    RemoveCharsRule,
    CaseRule,
    SequentialRule,
    InsertAtRule,
    RemoveAtRule,
    FilterExtRule,
    ChangeExtRule,
    TrimSpacesRule,
    RemoveSpecialRule,
    DateRenameRule,
    RegexRule,
    RULE_TYPES,
    new_rule,
    rule_from_dict,
    rule_to_dict,
    update_rule,
    describe_rule,
)

from .rule_engine import (
    NameParts,
    apply_rule,
    apply_rules,
    format_date,
)

from .scan_files import (
    read_folder,
    list_suffixes,
    FolderReadError,
)

from .plan_rename import (
    generate_preview,
    allowed_extensions,
    preview_stats,
    can_execute,
    PreviewStats,
    ConflictDetector,
)

from .exec_rename import (
    execute_rename,
    execute_undo,
    save_result_log,
    load_undo_map,
    cleanup_temp_files,
)

from .safety_checks import (
    check_target_name,
    check_folder,
)

from .logging_setup import configure_logging

__all__ = [
    # Data models
    "FileItem",
    "PreviewEntry",
    "FileError",
    "UndoEntry",
    "RenameResult",
    "UndoResult",
    "RenameOptions",

    # Rules
    "Rule",
    "RuleConfigError",
    "CaseMode",
    "Placement",
    "TrimMode",
    "DateSource",
    "PrefixRule",
    "SuffixRule",
    "ReplaceRule",
    "RemoveCharsRule",
    "CaseRule",
    "SequentialRule",
    "InsertAtRule",
    "RemoveAtRule",
    "FilterExtRule",
    "ChangeExtRule",
    "TrimSpacesRule",
    "RemoveSpecialRule",
    "DateRenameRule",
    "RegexRule",
    "RULE_TYPES",
    "new_rule",
    "rule_from_dict",
    "rule_to_dict",
    "update_rule",
    "describe_rule",

    # Rule engine
    "NameParts",
    "apply_rule",
    "apply_rules",
    "format_date",

    # Listing
    "read_folder",
    "list_suffixes",
    "FolderReadError",

    # Preview
    "generate_preview",
    "allowed_extensions",
    "preview_stats",
    "can_execute",
    "PreviewStats",
    "ConflictDetector",

    # Execution
    "execute_rename",
    "execute_undo",
    "save_result_log",
    "load_undo_map",
    "cleanup_temp_files",

    # Safety checks
    "check_target_name",
    "check_folder",

    # Logging
    "configure_logging",
]
