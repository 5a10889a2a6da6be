"""Tests for the scanner and executable association lookup."""

from __future__ import annotations

import os

import pytest

from dustpan.core.scanner import find_associated_files, scan


class TestScan:
    def test_reports_only_stale_files(self, tmp_path, make_file, custom_only, now):
        root = tmp_path / "A"
        make_file(root / "old.txt", 40)
        make_file(root / "B" / "recent.txt", 2)

        results = scan(custom_only(root), now=now)

        assert len(results) == 1
        candidate = results[0]
        assert candidate.file_path == str(root / "old.txt")
        assert candidate.file_name == "old.txt"
        assert candidate.should_delete is True
        assert candidate.days_since_access == 40

    def test_descends_into_subdirectories(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "a" / "b" / "c" / "deep.txt", 30)
        make_file(tmp_path / "a" / "top.txt", 30)

        paths = {c.file_path for c in scan(custom_only(tmp_path), now=now)}

        assert paths == {str(tmp_path / "a" / "b" / "c" / "deep.txt"), str(tmp_path / "a" / "top.txt")}

    def test_hidden_entries_never_reported_or_descended(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / ".secret.txt", 100)
        make_file(tmp_path / ".hidden" / "old.txt", 100)
        make_file(tmp_path / "visible.txt", 100)

        results = scan(custom_only(tmp_path, smart_filter=False), now=now)

        assert [c.file_name for c in results] == ["visible.txt"]

    def test_smart_filter_excludes_cache_files(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "A" / "cache.tmp", 100)
        make_file(tmp_path / "A" / "report.pdf", 100)

        filtered = scan(custom_only(tmp_path), now=now)
        unfiltered = scan(custom_only(tmp_path, smart_filter=False), now=now)

        assert [c.file_name for c in filtered] == ["report.pdf"]
        assert {c.file_name for c in unfiltered} == {"cache.tmp", "report.pdf"}

    def test_smart_filter_does_not_prune_directories(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "build" / "notes.txt", 100)

        results = scan(custom_only(tmp_path), now=now)

        assert [c.file_name for c in results] == ["notes.txt"]

    def test_threshold_respected(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "month.txt", 31)

        assert scan(custom_only(tmp_path, threshold_days=30), now=now)
        assert not scan(custom_only(tmp_path, threshold_days=60), now=now)

    def test_missing_root_is_skipped(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "real" / "old.txt", 40)

        results = scan(custom_only(tmp_path / "missing", tmp_path / "real"), now=now)

        assert [c.file_name for c in results] == ["old.txt"]

    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores permissions")
    def test_unreadable_directory_is_skipped(self, tmp_path, make_file, custom_only, now):
        locked = tmp_path / "locked"
        make_file(locked / "old.txt", 40)
        make_file(tmp_path / "open" / "old.txt", 40)
        locked.chmod(0)
        try:
            results = scan(custom_only(tmp_path), now=now)
        finally:
            locked.chmod(0o755)

        assert [c.file_path for c in results] == [str(tmp_path / "open" / "old.txt")]

    def test_overlapping_roots_report_once(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "inner" / "old.txt", 40)

        results = scan(custom_only(tmp_path, tmp_path / "inner"), now=now)

        assert len(results) == 1

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_directory_links_are_not_followed(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "real" / "old.txt", 40)
        (tmp_path / "loop").symlink_to(tmp_path, target_is_directory=True)

        results = scan(custom_only(tmp_path), now=now)

        assert [c.file_path for c in results] == [str(tmp_path / "real" / "old.txt")]

    def test_broken_link_is_skipped(self, tmp_path, make_file, custom_only, now):
        make_file(tmp_path / "old.txt", 40)
        (tmp_path / "dangling.txt").symlink_to(tmp_path / "gone.txt")

        results = scan(custom_only(tmp_path), now=now)

        assert [c.file_name for c in results] == ["old.txt"]

    def test_content_is_deterministic(self, tmp_path, make_file, custom_only, now):
        for name in ("a.txt", "b.txt", "sub/c.txt", "sub/deeper/d.txt"):
            make_file(tmp_path / name, 20)

        first = {c.file_path for c in scan(custom_only(tmp_path), now=now)}
        second = {c.file_path for c in scan(custom_only(tmp_path), now=now)}

        assert first == second
        assert len(first) == 4


class TestFindAssociatedFiles:
    @pytest.fixture
    def app_dir(self, tmp_path):
        for name in ("app.exe", "app.dll", "app.ini", "App.Config", "appdata.dat",
                     "app.txt", "other.dll", "readme.ini"):
            (tmp_path / name).write_bytes(b"x")
        (tmp_path / "app.cfg").mkdir()
        return tmp_path

    def test_matches_stem_and_support_extension(self, app_dir):
        found = find_associated_files(str(app_dir / "app.exe"))

        assert found == sorted(
            str(app_dir / name) for name in ("App.Config", "app.dll", "app.ini", "appdata.dat")
        )

    def test_case_insensitive_exe_suffix(self, app_dir):
        (app_dir / "app.exe").rename(app_dir / "APP.EXE")

        found = find_associated_files(str(app_dir / "APP.EXE"))

        assert str(app_dir / "app.dll") in found

    def test_non_executable_has_no_associations(self, app_dir):
        assert find_associated_files(str(app_dir / "app.txt")) == []

    def test_missing_directory(self, tmp_path):
        assert find_associated_files(str(tmp_path / "nowhere" / "app.exe")) == []

    def test_not_run_during_scan(self, app_dir, custom_only, now, monkeypatch):
        calls = []
        monkeypatch.setattr("dustpan.core.scanner.find_associated_files", lambda p: calls.append(p) or [])
        old = now - 100 * 86400
        for entry in app_dir.iterdir():
            os.utime(entry, (old, old))

        scan(custom_only(app_dir), now=now)

        assert calls == []
