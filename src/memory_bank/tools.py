"""MCP tools for Memory Bank access.

Each tool takes the raw ``arguments`` dict of a tools/call request and always
returns text: conflicts, missing Memory Banks and I/O failures all come back
as readable messages rather than exceptions.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from memory_bank.config import AppConfig
from memory_bank.guidance import CHANGE_TYPES
from memory_bank.schema import describe
from memory_bank.store import FileStore, InitResult, MemoryBankStore

logger = logging.getLogger(__name__)

_ROOT_PATH_SCHEMA = {
    "type": "string",
    "description": (
        "Project root directory path\n"
        'Windows example: "C:/Users/name/project"\n'
        'macOS/Linux example: "/home/name/project"'
    ),
}


@dataclass
class ToolDefinition:
    """A tool exposed over MCP, handled in-process."""

    name: str
    description: str
    parameters: dict[str, Any]
    handler: Callable[[dict], str]

    def to_mcp(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "inputSchema": self.parameters}


def normalize_path(raw: str) -> Path:
    """Normalize a caller-supplied root path (`~` expanded, trailing separator dropped)."""
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("rootPath is required")
    return Path(os.path.normpath(os.path.expanduser(raw.strip())))


def format_init_report(result: InitResult, seed_filename: str, dir_name: str) -> str:
    if result.conflict:
        existing = "\n".join(f"- {f}" for f in result.existing_files)
        return (
            "[MEMORY BANK: EXISTS]\n\n"
            f"{dir_name} directory already exists and contains files. "
            "To re-initialize, use force: true parameter.\n\n"
            f"Existing files:\n{existing}\n\n"
            "Suggestions:\n"
            "- Use get-memory-bank-info to read existing content\n"
            "- If you really need to re-initialize, set force: true"
        )

    created = "\n".join(f"- {f}" for f in result.created_files)
    roles = "\n".join(f"- {doc.filename}: {doc.purpose}" for doc in describe())
    seed_line = (
        f"✓ Read {seed_filename} and integrated into productContext.md\n\n"
        if result.seed_applied
        else ""
    )
    return (
        "[MEMORY BANK: INITIALIZED]\n\n"
        "Memory Bank has been successfully initialized!\n\n"
        f"Created files:\n{created}\n\n"
        f"{seed_line}"
        "[ATTENTION] Next steps to execute:\n"
        f"1. Read and update each {dir_name}/*.md file\n"
        "2. Fill in relevant content following the guidance in each file\n"
        "3. Do not use get-memory-bank-info before completing initial edits\n"
        "4. After completing edits, you can start using Memory Bank\n\n"
        f"Important file descriptions:\n{roles}\n\n"
        "Maintenance Tips:\n"
        "- Keep each file under 300 lines for optimal performance\n"
        f"- Archive old content daily/weekly to {dir_name}/archive/\n"
        "- Use update-memory-bank tool for detailed maintenance guidance\n"
        "- Check file sizes after each work session"
    )


def get_memory_bank_tools(
    config: AppConfig | None = None,
    *,
    files: FileStore | None = None,
    clock: Callable[[], datetime] = datetime.now,
) -> dict[str, ToolDefinition]:
    """Return a dict of tool_name -> ToolDefinition for the three Memory Bank tools."""
    config = config or AppConfig()

    def _store(raw_root: str) -> MemoryBankStore:
        return MemoryBankStore(
            normalize_path(raw_root),
            dir_name=config.memory_bank.dir_name,
            seed_filename=config.memory_bank.seed_filename,
            files=files,
            clock=clock,
        )

    def init_memory_bank(args: dict) -> str:
        try:
            force = args.get("force")
            if force is None:
                force = False
            elif not isinstance(force, bool):
                raise ValueError(f"force must be a boolean, got {force!r}")
            result = _store(args.get("rootPath", "")).initialize(force=force)
        except Exception as e:
            logger.exception("init-memory-bank failed")
            return f"Error initializing Memory Bank: {e}"
        return format_init_report(
            result, config.memory_bank.seed_filename, config.memory_bank.dir_name
        )

    def get_memory_bank_info(args: dict) -> str:
        try:
            return _store(args.get("rootPath", "")).read_all()
        except Exception as e:
            logger.exception("get-memory-bank-info failed")
            return f"Error reading Memory Bank: {e}"

    def update_memory_bank(args: dict) -> str:
        # rootPath is optional here: guidance never touches the disk.
        try:
            plan = _store(args.get("rootPath") or ".").build_guidance(
                str(args.get("changeType") or ""),
                str(args.get("description") or ""),
            )
            return plan.render()
        except Exception as e:
            logger.exception("update-memory-bank failed")
            return f"Error generating Memory Bank guidance: {e}"

    tools = [
        ToolDefinition(
            name="init-memory-bank",
            description=(
                "Initialize memory-bank directory and core files.\n"
                "This tool will:\n"
                "- Create memory-bank directory\n"
                "- Generate initial templates for 5 core files\n"
                "- Read and integrate projectBrief.md if it exists\n"
                "- Provide next steps guidance"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "rootPath": _ROOT_PATH_SCHEMA,
                    "force": {
                        "type": "boolean",
                        "description": "Force re-initialization (will overwrite existing files)",
                    },
                },
                "required": ["rootPath"],
            },
            handler=init_memory_bank,
        ),
        ToolDefinition(
            name="get-memory-bank-info",
            description=(
                "Read and return all Memory Bank file contents.\n"
                "- Reads the core .md files in the memory-bank directory\n"
                "- Returns formatted content for AI to understand project context\n"
                "- Use this tool at the beginning of each work session"
            ),
            parameters={
                "type": "object",
                "properties": {"rootPath": _ROOT_PATH_SCHEMA},
                "required": ["rootPath"],
            },
            handler=get_memory_bank_info,
        ),
        ToolDefinition(
            name="update-memory-bank",
            description=(
                "Generate detailed Memory Bank file update instructions with immediate "
                "execution guidance.\n"
                "This tool provides comprehensive, actionable instructions for updating "
                "Memory Bank files:\n"
                "- Detailed descriptions of each file's role and update strategy\n"
                "- Direct operation commands (not requests for confirmation)\n"
                "- Specific content templates and formatting guidelines\n"
                "- File relationship and update priority logic\n"
                "- Immediate execution emphasis for AI agents"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "rootPath": _ROOT_PATH_SCHEMA,
                    "changeType": {
                        "type": "string",
                        "enum": list(CHANGE_TYPES),
                        "description": "Type of change to determine update suggestions",
                    },
                    "description": {
                        "type": "string",
                        "description": "Brief description of the change",
                    },
                },
                "required": ["rootPath", "changeType", "description"],
            },
            handler=update_memory_bank,
        ),
    ]
    return {tool.name: tool for tool in tools}
