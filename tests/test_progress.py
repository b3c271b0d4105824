"""Tests for ProgressTracker."""

from __future__ import annotations

import time

from kotlin_explorer.progress import ProgressTracker


class TestProgressTracker:
    def test_basic_flow(self):
        tracker = ProgressTracker()
        tracker.start_phase("compile")
        tracker.complete_phase("compile", detail="3 class files")

        summary = tracker.get_summary()
        assert len(summary["phases"]) == 1
        assert summary["phases"][0]["status"] == "completed"
        assert summary["phases"][0]["detail"] == "3 class files"

    def test_fail_phase(self):
        tracker = ProgressTracker()
        tracker.start_phase("optimize")
        tracker.fail_phase("optimize", "exit code 1")

        summary = tracker.get_summary()
        assert summary["phases"][0]["status"] == "failed"
        assert summary["phases"][0]["error"] == "exit code 1"

    def test_skip_phase(self):
        tracker = ProgressTracker()
        tracker.skip_phase("push", "compile failed")

        summary = tracker.get_summary()
        assert summary["phases"][0]["status"] == "skipped"

    def test_duration(self):
        tracker = ProgressTracker()
        tracker.start_phase("list_dex")
        time.sleep(0.01)
        tracker.complete_phase("list_dex")

        p = tracker.phases[0]
        assert p.duration is not None
        assert p.duration >= 0.01

    def test_callback(self):
        events = []
        tracker = ProgressTracker()
        tracker.callbacks.append(lambda p: events.append((p.phase, p.status)))

        tracker.start_phase("a")
        tracker.complete_phase("a")

        assert events == [("a", "running"), ("a", "completed")]

    def test_callback_error_is_contained(self):
        tracker = ProgressTracker()
        tracker.callbacks.append(lambda p: 1 / 0)
        tracker.start_phase("a")
        tracker.complete_phase("a")
        assert tracker.phases[0].status == "completed"

    def test_fraction(self):
        tracker = ProgressTracker(total=4)
        assert tracker.fraction == 0.0
        tracker.start_phase("a")
        assert tracker.fraction == 0.0
        tracker.complete_phase("a")
        assert tracker.fraction == 0.25
        tracker.start_phase("b")
        tracker.fail_phase("b", "boom")
        tracker.skip_phase("c", "b failed")
        tracker.skip_phase("d", "b failed")
        assert tracker.fraction == 1.0
        assert tracker.get_summary()["fraction"] == 1.0

    def test_fraction_without_total(self):
        assert ProgressTracker().fraction == 1.0
