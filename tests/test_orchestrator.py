"""Tests for background agent execution."""

from pathlib import Path

import pytest

from conftest import chest_table, write_table
from loot_editor.agents import AgentOrchestrator, AgentResult, ScannerAgentTask
from loot_editor.errors import InvalidRoot
from loot_editor.settings import AppSettings


class FailingTask:
    name = "failing"

    def run(self) -> None:
        raise ValueError("boom")


class TestAgentOrchestrator:
    """Test task submission and results."""

    def test_scanner_task(self, modpack: Path) -> None:
        write_table(modpack / "kubejs" / "data" / "kube" / "loot_table" / "t.json", chest_table("a"))

        with AgentOrchestrator() as orchestrator:
            result = orchestrator.submit(ScannerAgentTask(modpack)).result(timeout=30)

        assert isinstance(result, AgentResult)
        assert result.agent_name == "modpack-scan"
        assert [d.qualified_name for d in result.payload] == ["kube:t"]
        assert result.duration >= 0

    def test_failure_is_delivered_through_future(self, tmp_path: Path) -> None:
        with AgentOrchestrator() as orchestrator:
            with pytest.raises(ValueError):
                orchestrator.submit(FailingTask()).result(timeout=30)
            with pytest.raises(InvalidRoot):
                orchestrator.submit(ScannerAgentTask(tmp_path / "missing")).result(timeout=30)

    def test_worker_count_from_settings(self, app_settings: AppSettings) -> None:
        app_settings.max_workers = 3
        orchestrator = AgentOrchestrator(app_settings.scan)
        try:
            assert orchestrator.max_workers == 3
        finally:
            orchestrator.shutdown()

    def test_configured_worker_count_has_a_floor(self, app_settings: AppSettings) -> None:
        app_settings.max_workers = 1
        orchestrator = AgentOrchestrator(app_settings.scan)
        try:
            assert orchestrator.max_workers == 2
        finally:
            orchestrator.shutdown()

    def test_default_worker_count(self) -> None:
        orchestrator = AgentOrchestrator()
        try:
            assert orchestrator.max_workers >= 2
        finally:
            orchestrator.shutdown()
