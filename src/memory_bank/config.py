"""Configuration loading from environment variables and memory-bank.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

from memory_bank.store import DEFAULT_DIR_NAME, DEFAULT_SEED_FILENAME

_CONFIG_FILENAME = "memory-bank.toml"


@dataclass
class MemoryBankConfig:
    """Where the Memory Bank lives inside a project root."""

    dir_name: str = DEFAULT_DIR_NAME
    seed_filename: str = DEFAULT_SEED_FILENAME


@dataclass
class ServerConfig:
    """MCP server identity."""

    name: str = "memory-bank-mcp"
    version: str = "1.0.0"
    protocol_version: str = "2024-11-05"


@dataclass
class AppConfig:
    """Top-level configuration."""

    memory_bank: MemoryBankConfig = field(default_factory=MemoryBankConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from environment variables and optional memory-bank.toml.

    Priority: environment variables > memory-bank.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        # Search current dir and ~/.memory-bank/
        for candidate in [
            Path.cwd() / _CONFIG_FILENAME,
            Path.home() / ".memory-bank" / _CONFIG_FILENAME,
        ]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    bank_data = file_data.get("memory_bank", {})
    server_data = file_data.get("server", {})
    defaults = ServerConfig()

    return AppConfig(
        memory_bank=MemoryBankConfig(
            dir_name=os.getenv("MEMORY_BANK_DIR", bank_data.get("dir_name", DEFAULT_DIR_NAME)),
            seed_filename=os.getenv(
                "MEMORY_BANK_SEED", bank_data.get("seed_filename", DEFAULT_SEED_FILENAME)
            ),
        ),
        server=ServerConfig(
            name=server_data.get("name", defaults.name),
            version=server_data.get("version", defaults.version),
            protocol_version=server_data.get("protocol_version", defaults.protocol_version),
        ),
        log_level=os.getenv("MEMORY_BANK_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
