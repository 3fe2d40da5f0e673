"""Tests for the staging engine façade, end to end with a fake git client."""

import asyncio
import logging
from pathlib import Path
from typing import List, Tuple

import pytest

from autostage.config.schema import AutoStageConfig
from autostage.engine import Engine
from autostage.git.models import VcsOutcome
from autostage.scheduler.debounce import PathState


def _collector() -> Tuple[List[Tuple[str, bool, str]], object]:
    results: List[Tuple[str, bool, str]] = []

    def on_result(path: str, success: bool, message: str) -> None:
        results.append((path, success, message))

    return results, on_result


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_new_file_is_added(self, fake_repo, fake_git, immediate_config):
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)
        path = str(fake_repo / "a.txt")

        engine.request_add(path)
        await engine.wait_idle()

        assert fake_git.add_calls == [("add", str(fake_repo), "a.txt")]
        assert results == [(path, True, "File added successfully")]

    @pytest.mark.asyncio
    async def test_excluded_file_makes_no_git_calls(self, fake_repo, fake_git, immediate_config):
        immediate_config.filter.exclude_patterns = [r"\.txt$"]
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)
        path = str(fake_repo / "a.txt")

        engine.request_add(path)
        await engine.wait_idle()

        assert fake_git.calls == []
        assert results == []
        status = engine.get_status(path)
        assert status.would_process is False
        assert status.reason == "File matches exclude pattern"

    @pytest.mark.asyncio
    async def test_tracked_file_is_left_alone(self, fake_repo, fake_git, immediate_config):
        fake_git.tracked.add("a.txt")
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)

        engine.request_add(str(fake_repo / "a.txt"))
        await engine.wait_idle()

        assert fake_git.calls == [("ls-files", str(fake_repo), "a.txt")]
        assert results == []

    @pytest.mark.asyncio
    async def test_failed_add_is_reported_once(self, fake_repo, fake_git, immediate_config):
        fake_git.add_ok = False
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)
        path = str(fake_repo / "a.txt")

        engine.request_add(path)
        await engine.wait_idle()

        assert len(results) == 1
        assert results[0][0] == path
        assert results[0][1] is False
        assert results[0][2].startswith("Git add failed: fatal:")

    @pytest.mark.asyncio
    async def test_relative_path_is_made_absolute(self, fake_repo, fake_git, immediate_config, monkeypatch):
        monkeypatch.chdir(fake_repo)
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)

        engine.request_add("a.txt")
        await engine.wait_idle()

        assert results == [(str(fake_repo / "a.txt"), True, "File added successfully")]

    @pytest.mark.asyncio
    async def test_nested_file_uses_repo_relative_path(self, fake_repo, fake_git, immediate_config):
        (fake_repo / "src").mkdir()
        (fake_repo / "src" / "m.py").write_text("x = 1\n")
        engine = Engine(immediate_config, client=fake_git, on_result=lambda *a: None)

        engine.request_add(str(fake_repo / "src" / "m.py"))
        await engine.wait_idle()

        assert fake_git.add_calls == [("add", str(fake_repo), str(Path("src") / "m.py"))]

    @pytest.mark.asyncio
    async def test_empty_path_ignored(self, fake_git, immediate_config):
        engine = Engine(immediate_config, client=fake_git)
        assert engine.request_add("") is PathState.IDLE
        assert engine.scheduler.pending_count == 0


class TestDebounceAndDedup:
    @pytest.mark.asyncio
    async def test_burst_is_one_attempt(self, fake_repo, fake_git, immediate_config):
        immediate_config.stage.delay_ms = 50
        engine = Engine(immediate_config, client=fake_git, on_result=lambda *a: None)
        path = str(fake_repo / "a.txt")

        for _ in range(3):
            engine.request_add(path)
            await asyncio.sleep(0.01)
        await engine.wait_idle()

        assert len(fake_git.add_calls) == 1

    @pytest.mark.asyncio
    async def test_no_second_add_while_in_flight(self, fake_repo, fake_git, immediate_config):
        fake_git.hold_add = asyncio.Event()
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)
        path = str(fake_repo / "a.txt")

        engine.request_add(path)
        for _ in range(5):
            await asyncio.sleep(0)
        assert len(fake_git.add_calls) == 1

        assert engine.request_add(path) is PathState.IN_FLIGHT
        for _ in range(5):
            await asyncio.sleep(0)
        assert len(fake_git.add_calls) == 1

        fake_git.hold_add.set()
        await engine.wait_idle()
        assert len(fake_git.add_calls) == 1
        assert len(results) == 1


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_cleanup_with_pending_requests(self, fake_repo, fake_git):
        cfg = AutoStageConfig()
        cfg.stage.delay_ms = 10_000
        engine = Engine(cfg, client=fake_git)
        for i in range(5):
            f = fake_repo / f"f{i}.py"
            f.write_text("x")
            engine.request_add(str(f))
        assert engine.scheduler.active_timers == 5

        engine.cleanup()

        assert engine.scheduler.active_timers == 0
        assert engine.scheduler.pending_count == 0
        assert engine.cache_snapshot() == {}
        await engine.wait_idle()
        assert fake_git.calls == []

    @pytest.mark.asyncio
    async def test_cleanup_mid_flight_suppresses_result(self, fake_repo, fake_git, immediate_config):
        fake_git.hold_add = asyncio.Event()
        results, on_result = _collector()
        engine = Engine(immediate_config, client=fake_git, on_result=on_result)

        engine.request_add(str(fake_repo / "a.txt"))
        for _ in range(5):
            await asyncio.sleep(0)
        assert len(fake_git.add_calls) == 1

        engine.cleanup()
        fake_git.hold_add.set()
        await engine.wait_idle()

        assert results == []

    def test_setup_clears_cache_and_applies_config(self, fake_repo, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        engine.get_status(str(fake_repo / "a.txt"))
        assert engine.cache_snapshot()

        new_cfg = AutoStageConfig()
        new_cfg.stage.delay_ms = 0
        new_cfg.filter.include_patterns = [r"\.py$"]
        engine.setup(new_cfg)

        assert engine.cache_snapshot() == {}
        assert engine.scheduler.delay_ms == 0
        assert engine.get_status(str(fake_repo / "a.txt")).reason == "File does not match include pattern"

    def test_multiple_engines_are_independent(self, fake_repo, fake_git):
        one = Engine(AutoStageConfig(), client=fake_git)
        two = Engine(AutoStageConfig(), client=fake_git)
        one.get_status(str(fake_repo / "a.txt"))
        assert one.cache_snapshot()
        assert two.cache_snapshot() == {}


class TestStatus:
    def test_snapshot_fields(self, fake_repo, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        snap = engine.get_status(str(fake_repo / "a.txt"))
        assert snap.enabled is True
        assert snap.in_git_repo is True
        assert snap.git_root == str(fake_repo)
        assert snap.relative_path == "a.txt"
        assert snap.would_process is True
        assert snap.reason == "OK"
        assert fake_git.calls == []

    def test_disabled_reason(self, fake_repo, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        engine.disable()
        snap = engine.get_status(str(fake_repo / "a.txt"))
        assert snap.would_process is False
        assert snap.reason == "Plugin disabled"

    def test_outside_repo(self, tmp_path, fake_git):
        loose = tmp_path / "loose.txt"
        loose.write_text("x")
        engine = Engine(AutoStageConfig(), client=fake_git)
        snap = engine.get_status(str(loose))
        assert snap.in_git_repo is False
        assert snap.git_root is None
        assert snap.relative_path is None
        assert snap.reason == "Not in git repository"

    @pytest.mark.asyncio
    async def test_file_status_not_a_repo(self, tmp_path, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        result = await engine.file_status(str(tmp_path / "x.txt"))
        assert result.outcome is VcsOutcome.NOT_A_REPO
        assert result.message == "Not in git repo"
        assert fake_git.calls == []

    @pytest.mark.asyncio
    async def test_file_status_untracked(self, fake_repo, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        result = await engine.file_status(str(fake_repo / "a.txt"))
        assert result.status_code == "??"


class TestToggle:
    def test_toggle_flips(self, fake_git):
        engine = Engine(AutoStageConfig(), client=fake_git)
        assert engine.toggle() is False
        assert engine.toggle() is True

    def test_enable_notifies(self, fake_git, caplog):
        engine = Engine(AutoStageConfig(), client=fake_git)
        with caplog.at_level(logging.INFO, logger="autostage"):
            engine.disable()
            engine.enable()
        assert "Auto git add disabled" in caplog.text
        assert "Auto git add enabled" in caplog.text

    def test_notifications_can_be_silenced(self, fake_git, caplog):
        cfg = AutoStageConfig()
        cfg.notify.show_notifications = False
        engine = Engine(cfg, client=fake_git)
        with caplog.at_level(logging.DEBUG, logger="autostage"):
            engine.disable()
        assert "Auto git add disabled" not in caplog.text

    @pytest.mark.asyncio
    async def test_default_notification_logged(self, fake_repo, fake_git, immediate_config, caplog):
        engine = Engine(immediate_config, client=fake_git)
        with caplog.at_level(logging.INFO, logger="autostage"):
            engine.request_add(str(fake_repo / "a.txt"))
            await engine.wait_idle()
        assert "Added to git: a.txt" in caplog.text
