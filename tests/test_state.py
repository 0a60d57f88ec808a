"""Tests for the reloadable project store."""

import shutil
import threading

import pytest

from nino.exceptions import DiscoveryError
from nino.model import ProjectData
from nino.state import ProjectStore


class TestProjectStore:
    def test_loads_on_construction(self, workspace):
        store = ProjectStore([str(workspace)])

        assert sorted(store.snapshot()) == ["billing", "source"]
        assert store.input_paths == [str(workspace)]

    def test_reload_publishes_new_model(self, workspace):
        store = ProjectStore([str(workspace)])
        before = store.snapshot()
        (workspace / "billing" / "extra-tables.yaml").write_text(
            "version: v1\ntables:\n  - name: payments\n    columns:\n      - name: id\n"
        )

        after = store.reload()

        assert store.snapshot() is after
        assert after is not before
        assert after["billing"].table("payments") is not None
        # the old snapshot is untouched
        assert before["billing"].table("payments") is None

    def test_failed_reload_keeps_current_model(self, workspace):
        store = ProjectStore([str(workspace)])
        before = store.snapshot()
        shutil.rmtree(workspace)

        with pytest.raises(DiscoveryError):
            store.reload()
        assert store.snapshot() is before

    def test_injected_loader_and_project(self):
        calls = []

        def loader(paths):
            calls.append(paths)
            return ProjectData()

        initial = ProjectData()
        store = ProjectStore(["a", "b"], loader=loader, project=initial)

        assert store.snapshot() is initial
        assert calls == []
        store.reload()
        assert calls == [["a", "b"]]

    def test_reloads_are_serialized(self):
        active = []
        overlap = []

        def loader(paths):
            active.append(1)
            if len(active) > 1:
                overlap.append(True)
            threading.Event().wait(0.01)
            active.pop()
            return ProjectData()

        store = ProjectStore(["a"], loader=loader, project=ProjectData())
        threads = [threading.Thread(target=store.reload) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert overlap == []
