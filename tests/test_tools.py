"""Tests for the MCP tool boundary."""

from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest

from memory_bank.config import AppConfig, MemoryBankConfig
from memory_bank.guidance import CHANGE_TYPES
from memory_bank.store import NOT_FOUND_MESSAGE, MemoryBankStore
from memory_bank.tools import ToolDefinition, get_memory_bank_tools, normalize_path


def fixed_clock() -> datetime:
    return datetime(2026, 2, 18, 9, 30, 0)


class ReadOnlyStore:
    """FileStore where every write fails."""

    def exists(self, path: Path) -> bool:
        return False

    def is_dir(self, path: Path) -> bool:
        return False

    def list_dir(self, path: Path) -> list[str]:
        return []

    def read_text(self, path: Path) -> str:
        raise FileNotFoundError(str(path))

    def write_text(self, path: Path, content: str) -> None:
        raise PermissionError("read-only file system")

    def make_dir(self, path: Path) -> None:
        pass


@pytest.fixture
def tools() -> dict[str, ToolDefinition]:
    return get_memory_bank_tools(clock=fixed_clock)


class TestNormalizePath:
    def test_trailing_separator(self, tmp_path: Path):
        assert normalize_path(str(tmp_path) + os.sep) == tmp_path

    def test_dot_segments(self, tmp_path: Path):
        assert normalize_path(f"{tmp_path}/a/../b") == tmp_path / "b"

    def test_home_expanded(self):
        assert normalize_path("~/proj") == Path.home() / "proj"

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_rejected(self, raw):
        with pytest.raises(ValueError):
            normalize_path(raw)


class TestToolDefinitions:
    def test_names(self, tools: dict[str, ToolDefinition]):
        assert set(tools) == {"init-memory-bank", "get-memory-bank-info", "update-memory-bank"}

    def test_change_type_enum(self, tools: dict[str, ToolDefinition]):
        schema = tools["update-memory-bank"].parameters
        assert schema["properties"]["changeType"]["enum"] == list(CHANGE_TYPES)
        assert schema["required"] == ["rootPath", "changeType", "description"]

    def test_to_mcp(self, tools: dict[str, ToolDefinition]):
        listed = tools["init-memory-bank"].to_mcp()
        assert listed["name"] == "init-memory-bank"
        assert listed["inputSchema"]["properties"]["force"]["type"] == "boolean"


class TestInitTool:
    def test_initialized_report(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        assert text.startswith("[MEMORY BANK: INITIALIZED]")
        assert "- productContext.md\n" in text
        assert "- systemPatterns.md\n" in text
        assert "✓ Read projectBrief.md" not in text
        assert (tmp_path / "memory-bank" / "decisionLog.md").exists()

    def test_seed_reported(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        (tmp_path / "projectBrief.md").write_text("Build a chat app", encoding="utf-8")
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        assert "✓ Read projectBrief.md and integrated into productContext.md" in text

    def test_exists_report(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        assert text.startswith("[MEMORY BANK: EXISTS]")
        assert "- activeContext.md" in text
        assert "set force: true" in text

    def test_force(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path), "force": True})
        assert text.startswith("[MEMORY BANK: INITIALIZED]")

    def test_force_string_keeps_edits(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        edited = tmp_path / "memory-bank" / "activeContext.md"
        edited.write_text("my notes", encoding="utf-8")

        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path), "force": "false"})
        assert text.startswith("Error initializing Memory Bank: force must be a boolean")
        assert edited.read_text(encoding="utf-8") == "my notes"

    def test_force_null_means_no_force(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path), "force": None})
        assert text.startswith("[MEMORY BANK: EXISTS]")

    def test_missing_root(self, tools: dict[str, ToolDefinition]):
        text = tools["init-memory-bank"].handler({})
        assert text == "Error initializing Memory Bank: rootPath is required"

    def test_write_failure_is_text(self, tmp_path: Path):
        tools = get_memory_bank_tools(files=ReadOnlyStore(), clock=fixed_clock)
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        assert text == "Error initializing Memory Bank: read-only file system"

    def test_custom_dir_name(self, tmp_path: Path):
        config = AppConfig(memory_bank=MemoryBankConfig(dir_name=".memory"))
        tools = get_memory_bank_tools(config, clock=fixed_clock)
        text = tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        assert "Read and update each .memory/*.md file" in text
        assert (tmp_path / ".memory" / "progress.md").exists()


class TestInfoTool:
    def test_not_found(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        text = tools["get-memory-bank-info"].handler({"rootPath": str(tmp_path)})
        assert text == NOT_FOUND_MESSAGE

    def test_after_init(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["init-memory-bank"].handler({"rootPath": str(tmp_path)})
        text = tools["get-memory-bank-info"].handler({"rootPath": str(tmp_path) + "/"})
        assert "<productContext>" in text
        assert "</systemPatterns>" in text

    def test_read_failure_is_text(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        # A directory named like a document cannot be read as text
        (tmp_path / "memory-bank" / "progress.md").mkdir(parents=True)
        text = tools["get-memory-bank-info"].handler({"rootPath": str(tmp_path)})
        assert text.startswith("Error reading Memory Bank: ")


class TestUpdateTool:
    def test_plan(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        text = tools["update-memory-bank"].handler(
            {"rootPath": str(tmp_path), "changeType": "feature", "description": "dark mode"}
        )
        assert "**PRIORITY 1: progress.md**" in text
        assert "Timestamp: 2026-02-18 09:30:00" in text

    def test_unknown_type(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        text = tools["update-memory-bank"].handler(
            {"rootPath": str(tmp_path), "changeType": "chore", "description": "x"}
        )
        assert "GENERAL CHANGE PROCESSING WORKFLOW" in text

    def test_no_side_effects(self, tools: dict[str, ToolDefinition], tmp_path: Path):
        tools["update-memory-bank"].handler(
            {"rootPath": str(tmp_path), "changeType": "bugfix", "description": "x"}
        )
        assert not (tmp_path / "memory-bank").exists()

    def test_null_description(self, tools: dict[str, ToolDefinition]):
        text = tools["update-memory-bank"].handler({"changeType": "decision", "description": None})
        assert "Change Description: \n" in text
        assert "None" not in text

    def test_goes_through_store_facade(self, tools: dict[str, ToolDefinition], monkeypatch):
        seen = []
        original = MemoryBankStore.build_guidance

        def spy(self, change_type, description):
            seen.append((change_type, description))
            return original(self, change_type, description)

        monkeypatch.setattr(MemoryBankStore, "build_guidance", spy)
        tools["update-memory-bank"].handler({"changeType": "refactor", "description": "split"})
        assert seen == [("refactor", "split")]
