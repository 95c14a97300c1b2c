"""
Tests for two-phase rename execution, undo and recovery
"""

import json
import os
from pathlib import Path

import pytest

from core import exec_rename
from core.exec_rename import (
    cleanup_temp_files,
    execute_rename,
    execute_undo,
    load_undo_map,
    save_result_log,
)
from core.models_fs import PreviewEntry, RenameOptions, RenameResult, UndoEntry
from core.plan_rename import generate_preview
from core.rules import Placement, PrefixRule, ReplaceRule, SequentialRule
from core.scan_files import read_folder


def preview_for(folder, rules):
    return generate_preview(read_folder(folder), rules)


def content(folder, name):
    return (folder / name).read_text(encoding="utf-8")


def snapshot(folder):
    """Name -> content for every file in the folder"""
    return {p.name: p.read_text(encoding="utf-8") for p in folder.iterdir() if p.is_file()}


def renumber(start):
    """Replace each base name with its batch number"""
    return SequentialRule(start=start, padding=1, separator="", position=Placement.REPLACE)


class TestExecuteRename:

    def test_rename_and_undo(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt")
        result = execute_rename(folder, preview_for(folder, [PrefixRule(value="x_")]))

        assert (result.success, result.failed, result.skipped) == (2, 0, 0)
        assert list_names(folder) == ["x_a.txt", "x_b.txt"]
        assert content(folder, "x_a.txt") == "a.txt"
        assert result.undo_map == [
            UndoEntry(from_name="x_a.txt", to_name="a.txt"),
            UndoEntry(from_name="x_b.txt", to_name="b.txt"),
        ]

        undo = execute_undo(folder, result.undo_map)
        assert (undo.success, undo.failed) == (2, 0)
        assert list_names(folder) == ["a.txt", "b.txt"]
        assert content(folder, "a.txt") == "a.txt"

    def test_swap(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt")
        rules = [
            ReplaceRule(find="a", replace="#"),
            ReplaceRule(find="b", replace="a"),
            ReplaceRule(find="#", replace="b"),
        ]
        result = execute_rename(folder, preview_for(folder, rules))

        assert result.success == 2
        assert list_names(folder) == ["a.txt", "b.txt"]
        assert content(folder, "a.txt") == "b.txt"
        assert content(folder, "b.txt") == "a.txt"

    def test_undo_of_swap_does_not_overwrite(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt")
        rules = [
            ReplaceRule(find="a", replace="#"),
            ReplaceRule(find="b", replace="a"),
            ReplaceRule(find="#", replace="b"),
        ]
        result = execute_rename(folder, preview_for(folder, rules))
        undo = execute_undo(folder, result.undo_map)

        assert undo.failed == 2
        assert content(folder, "a.txt") == "b.txt"
        assert content(folder, "b.txt") == "a.txt"

    def test_untouched_entries_are_skipped(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt", "c.md")
        previews = [
            PreviewEntry("a.txt", "a.txt"),
            PreviewEntry("b.txt", "z.txt", changed=True, conflict=True),
            PreviewEntry("c.md", "c.md", skip=True),
        ]
        result = execute_rename(folder, previews)

        assert (result.success, result.failed, result.skipped) == (0, 0, 3)
        assert result.undo_map == []
        assert list_names(folder) == ["a.txt", "b.txt", "c.md"]

    def test_progress(self, make_files):
        folder = make_files("a.txt", "b.txt")
        calls = []
        execute_rename(
            folder,
            preview_for(folder, [PrefixRule(value="x_")]),
            progress_callback=lambda current, total, message: calls.append((current, total)),
        )
        assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_no_temp_files_left(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt", "c.txt")
        execute_rename(folder, preview_for(folder, [PrefixRule(value="n")]))
        assert not any(name.startswith("__brtemp_") for name in list_names(folder))


class TestUndoChains:
    """Undo of batches whose new names reuse names the batch gave up"""

    @pytest.mark.parametrize("names, start, renamed", [
        (("2.txt", "3.txt"), 1, ["1.txt", "2.txt"]),
        (("1.txt", "2.txt"), 2, ["2.txt", "3.txt"]),
    ])
    def test_shift_round_trip(self, make_files, list_names, names, start, renamed):
        folder = make_files(*names)
        before = snapshot(folder)

        result = execute_rename(folder, preview_for(folder, [renumber(start)]))
        assert (result.success, result.failed) == (2, 0)
        assert list_names(folder) == renamed

        undo = execute_undo(folder, result.undo_map)
        assert (undo.success, undo.failed) == (2, 0)
        assert snapshot(folder) == before

    def test_long_chain_in_any_order(self, make_files):
        folder = make_files("1.txt", "2.txt", "3.txt", "4.txt")
        before = snapshot(folder)

        result = execute_rename(folder, preview_for(folder, [renumber(2)]))
        assert sorted(snapshot(folder)) == ["2.txt", "3.txt", "4.txt", "5.txt"]
        assert content(folder, "5.txt") == "4.txt"

        undo = execute_undo(folder, list(reversed(result.undo_map)))
        assert (undo.success, undo.failed) == (4, 0)
        assert snapshot(folder) == before

    def test_rotation_plus_chain(self, make_files):
        # Rotation a -> b -> c -> a is a cycle; the chain 1 -> 2 beside it still unwinds
        folder = make_files("1.txt", "a.txt", "b.txt", "c.txt")
        undo_map = [
            UndoEntry("2.txt", "1.txt"),
            UndoEntry("a.txt", "b.txt"),
            UndoEntry("b.txt", "c.txt"),
            UndoEntry("c.txt", "a.txt"),
        ]
        (folder / "1.txt").rename(folder / "2.txt")

        undo = execute_undo(folder, undo_map)
        assert (undo.success, undo.failed) == (1, 3)
        assert content(folder, "1.txt") == "1.txt"
        assert content(folder, "a.txt") == "a.txt"
        assert content(folder, "b.txt") == "b.txt"

    def test_undo_progress(self, make_files):
        folder = make_files("2.txt", "3.txt")
        result = execute_rename(folder, preview_for(folder, [renumber(1)]))
        calls = []
        execute_undo(folder, result.undo_map, lambda current, total, message: calls.append((current, total)))
        assert calls == [(1, 2), (2, 2)]


class TestExecuteFailures:

    def test_invalid_target_name(self, make_files, list_names):
        folder = make_files("a.txt")
        result = execute_rename(folder, [PreviewEntry("a.txt", "sub/a.txt", changed=True)])

        assert result.failed == 1
        assert "separator" in result.errors[0].error
        assert list_names(folder) == ["a.txt"]

    def test_phase_one_failure(self, make_files, list_names, monkeypatch):
        folder = make_files("a.txt", "b.txt")
        real_rename = os.rename

        def fake_rename(src, dst):
            if Path(src).name == "a.txt":
                raise PermissionError("locked")
            real_rename(src, dst)

        monkeypatch.setattr(exec_rename.os, "rename", fake_rename)
        result = execute_rename(folder, preview_for(folder, [PrefixRule(value="x_")]))

        assert (result.success, result.failed) == (1, 1)
        assert result.errors[0].file == "a.txt"
        assert "locked" in result.errors[0].error
        assert list_names(folder) == ["a.txt", "x_b.txt"]
        assert result.undo_map == [UndoEntry("x_b.txt", "b.txt")]

    @pytest.mark.parametrize("locked, expected", [
        ({"a.txt"}, [(1, 4), (2, 4), (4, 4)]),
        ({"a.txt", "b.txt"}, [(1, 4), (2, 4), (4, 4)]),
    ])
    def test_progress_completes_after_phase_one_failure(self, make_files, monkeypatch, locked, expected):
        folder = make_files("a.txt", "b.txt")
        real_rename = os.rename

        def fake_rename(src, dst):
            if Path(src).name in locked:
                raise PermissionError("locked")
            real_rename(src, dst)

        monkeypatch.setattr(exec_rename.os, "rename", fake_rename)
        calls = []
        execute_rename(
            folder,
            preview_for(folder, [PrefixRule(value="x_")]),
            progress_callback=lambda current, total, message: calls.append((current, total)),
        )
        assert calls == expected

    def test_phase_two_failure_restores_original(self, make_files, list_names, monkeypatch):
        folder = make_files("a.txt", "b.txt")
        real_rename = os.rename

        def fake_rename(src, dst):
            if Path(dst).name == "x_a.txt":
                raise PermissionError("denied")
            real_rename(src, dst)

        monkeypatch.setattr(exec_rename.os, "rename", fake_rename)
        result = execute_rename(folder, preview_for(folder, [PrefixRule(value="x_")]))

        assert (result.success, result.failed) == (1, 1)
        assert result.errors[0].file == "a.txt"
        assert list_names(folder) == ["a.txt", "x_b.txt"]
        assert content(folder, "a.txt") == "a.txt"

    def test_phase_two_refuses_to_overwrite(self, make_files, list_names):
        folder = make_files("a.txt", "b.txt")
        # Entry built by hand: the preview would have flagged this
        result = execute_rename(folder, [PreviewEntry("a.txt", "b.txt", changed=True)])

        assert result.failed == 1
        assert list_names(folder) == ["a.txt", "b.txt"]
        assert content(folder, "b.txt") == "b.txt"

    def test_missing_source(self, make_files):
        folder = make_files("a.txt")
        result = execute_rename(folder, [PreviewEntry("gone.txt", "x.txt", changed=True)])
        assert (result.success, result.failed) == (0, 1)

    def test_undo_refuses_to_overwrite(self, make_files, list_names):
        folder = make_files("a.txt")
        result = execute_rename(folder, preview_for(folder, [PrefixRule(value="x_")]))
        (folder / "a.txt").write_text("new", encoding="utf-8")

        undo = execute_undo(folder, result.undo_map)
        assert (undo.success, undo.failed) == (0, 1)
        assert list_names(folder) == ["a.txt", "x_a.txt"]
        assert content(folder, "a.txt") == "new"


class TestResultLog:

    def test_log_written_and_read_back(self, make_files, tmp_path):
        folder = make_files("a.txt", "b.txt")
        log_dir = tmp_path / "logs"
        result = execute_rename(
            folder,
            preview_for(folder, [PrefixRule(value="x_")]),
            options=RenameOptions(log_dir=log_dir),
        )

        logs = list(log_dir.glob("rename_result_*.json"))
        assert len(logs) == 1
        data = json.loads(logs[0].read_text(encoding="utf-8"))
        assert data["success"] == 2
        assert data["folder"] == str(folder)
        assert data["undo_map"][0] == {"from": "x_a.txt", "to": "a.txt"}
        assert load_undo_map(logs[0]) == result.undo_map

    def test_no_log_by_default(self, make_files, tmp_path):
        folder = make_files("a.txt")
        execute_rename(folder, preview_for(folder, [PrefixRule(value="x_")]))
        assert not list(tmp_path.rglob("rename_result_*.json"))

    def test_bad_log(self, tmp_path):
        log = tmp_path / "other.json"
        log.write_text(json.dumps({"hello": 1}), encoding="utf-8")
        with pytest.raises(ValueError):
            load_undo_map(log)

    def test_save_result_log(self, tmp_path):
        result = RenameResult(success=1, undo_map=[UndoEntry("b", "a")])
        result.add_error("c", "boom")
        path = save_result_log(result, tmp_path / "nested" / "logs")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["failed"] == 1
        assert data["errors"] == [{"file": "c", "error": "boom"}]
        assert data["folder"] is None


class TestCleanupTempFiles:

    def test_restores_stranded_file(self, make_files, list_names):
        folder = make_files("__brtemp_1700000000000_deadbeef_a b.txt", "other.txt")
        assert cleanup_temp_files(folder) == 1
        assert list_names(folder) == ["a b.txt", "other.txt"]

    def test_keeps_file_when_original_taken(self, make_files, list_names):
        folder = make_files("__brtemp_1700000000000_deadbeef_a.txt", "a.txt")
        assert cleanup_temp_files(folder) == 0
        assert list_names(folder) == ["__brtemp_1700000000000_deadbeef_a.txt", "a.txt"]

    def test_custom_prefix(self, make_files, list_names):
        folder = make_files("tmp-1_0123abcd_a.txt")
        assert cleanup_temp_files(folder, temp_prefix="tmp-") == 1
        assert list_names(folder) == ["a.txt"]


class TestResultSummary:

    def test_error_sample_limit(self):
        result = RenameResult()
        for i in range(5):
            result.add_error(f"f{i}", "boom")
        text = result.summary(error_limit=2)
        assert "Failed: 5" in text
        assert "f1: boom" in text
        assert "f2" not in text
        assert "3 more failures" in text
