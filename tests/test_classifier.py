"""Tests for the classifier rules."""

from __future__ import annotations

import pytest

from dustpan.core.classifier import Classifier, days_since_access, is_hidden, is_stale

NOW = 1_700_000_000.0
DAY = 86400


class TestIsStale:
    @pytest.mark.parametrize("threshold", [1, 14, 365])
    def test_boundary_is_not_stale(self, threshold):
        assert not is_stale(NOW - threshold * DAY, NOW, threshold)

    @pytest.mark.parametrize("threshold", [1, 14, 365])
    def test_just_past_boundary_is_stale(self, threshold):
        assert is_stale(NOW - threshold * DAY - 1, NOW, threshold)

    def test_recent_file(self):
        assert not is_stale(NOW - 2 * DAY, NOW, 14)

    def test_future_access_time(self):
        assert not is_stale(NOW + 5 * DAY, NOW, 1)


class TestDaysSinceAccess:
    def test_truncates_to_whole_days(self):
        assert days_since_access(NOW - 40 * DAY - 3600, NOW) == 40
        assert days_since_access(NOW - DAY + 1, NOW) == 0

    def test_clock_skew_yields_zero(self):
        assert days_since_access(NOW + 10 * DAY, NOW) == 0


class TestHidden:
    def test_dot_names(self):
        assert is_hidden(".bashrc")
        assert is_hidden(".git")
        assert not is_hidden("report.txt")
        assert not is_hidden("a.hidden")


class TestSmartFilter:
    @pytest.mark.parametrize(
        "name",
        [
            "library.DLL",
            "module.so",
            "main.o",
            "Main.class",
            "cache.tmp",
            "server.log",
            "notes.txt.bak",
            "app.sqlite",
            "thumbs.db",
            "package-lock.json.lock",
            "node_modules_backup.zip",
            "build_notes.txt",
        ],
    )
    def test_excluded(self, name):
        assert Classifier(smart_filter=True).is_excluded(name)

    @pytest.mark.parametrize("name", ["report.pdf", "photo.jpg", "setup.exe", "archive.zip"])
    def test_kept(self, name):
        assert not Classifier(smart_filter=True).is_excluded(name)

    def test_substring_match_is_broad(self):
        # "distance" contains "dist"; the filter does not look at word boundaries.
        assert Classifier().is_excluded("distance.txt")

    def test_disabled_excludes_nothing(self):
        classifier = Classifier(smart_filter=False)
        assert not classifier.is_excluded("cache.tmp")
        assert not classifier.is_excluded("library.dll")
