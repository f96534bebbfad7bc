"""Memory Bank storage: init, aggregate read, and guidance entry point.

Markdown files under ``<root>/memory-bank/`` are the source of truth. Only the
five canonical documents are read or written; anything else in the directory
is left alone. File access goes through a small ``FileStore`` so the facade
can run against the local disk or an in-memory fake.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Protocol, runtime_checkable

from memory_bank.guidance import MutationPlan, build_guidance, format_timestamp
from memory_bank.schema import get_document, is_canonical
from memory_bank.templates import render_initial_templates, splice_seed

logger = logging.getLogger(__name__)

DEFAULT_DIR_NAME = "memory-bank"
DEFAULT_SEED_FILENAME = "projectBrief.md"

NOT_FOUND_MESSAGE = (
    "[MEMORY BANK: NOT FOUND]\n\n"
    "Memory Bank directory does not exist. Use init-memory-bank to initialize."
)

READ_FRAME = """
This is the current Memory Bank content, including project context, decisions, progress, and patterns:

{content}

Keep in mind:
1. After you finish significant changes, use 'update-memory-bank' to get update guidance.
2. Follow the guidance to update relevant Memory Bank files.
3. Maintain consistency across all Memory Bank files.
"""


@runtime_checkable
class FileStore(Protocol):
    """Minimal file access used by MemoryBankStore."""

    def exists(self, path: Path) -> bool: ...

    def is_dir(self, path: Path) -> bool: ...

    def list_dir(self, path: Path) -> list[str]:
        """Entry names in a directory, in whatever order the backend yields."""
        ...

    def read_text(self, path: Path) -> str: ...

    def write_text(self, path: Path, content: str) -> None: ...

    def make_dir(self, path: Path) -> None:
        """Create a directory and its parents. Idempotent."""
        ...


class LocalFileStore:
    """FileStore backed by the local filesystem (UTF-8 text)."""

    def exists(self, path: Path) -> bool:
        return path.exists()

    def is_dir(self, path: Path) -> bool:
        return path.is_dir()

    def list_dir(self, path: Path) -> list[str]:
        return [entry.name for entry in path.iterdir()]

    def read_text(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def write_text(self, path: Path, content: str) -> None:
        path.write_text(content, encoding="utf-8")

    def make_dir(self, path: Path) -> None:
        path.mkdir(parents=True, exist_ok=True)


@dataclass
class InitResult:
    """Outcome of MemoryBankStore.initialize()."""

    created_files: list[str] = field(default_factory=list)
    existing_files: list[str] = field(default_factory=list)
    seed_applied: bool = False

    @property
    def conflict(self) -> bool:
        """True when initialization was refused because files already exist."""
        return not self.created_files and bool(self.existing_files)


class MemoryBankStore:
    """Read/write access to one project's Memory Bank."""

    def __init__(
        self,
        root: Path,
        *,
        dir_name: str = DEFAULT_DIR_NAME,
        seed_filename: str = DEFAULT_SEED_FILENAME,
        files: FileStore | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.root = Path(root)
        self.dir_name = dir_name
        self.seed_filename = seed_filename
        self.files: FileStore = files or LocalFileStore()
        self._clock = clock

    @property
    def container(self) -> Path:
        return self.root / self.dir_name

    @property
    def seed_path(self) -> Path:
        return self.root / self.seed_filename

    def _now(self) -> str:
        return format_timestamp(self._clock())

    # ── Initialization ────────────────────────────────────────

    def initialize(self, force: bool = False) -> InitResult:
        """Create the container and write fresh templates for all documents.

        Refuses (returns a conflict result, writes nothing) when the container
        already holds files and ``force`` is False. With ``force`` every
        canonical document is rewritten; other files are not touched.
        """
        if not force and self.files.is_dir(self.container):
            existing = sorted(self.files.list_dir(self.container))
            if existing:
                logger.warning(
                    "Memory Bank already exists at %s (%d files), not overwriting",
                    self.container,
                    len(existing),
                )
                return InitResult(existing_files=existing)

        self.files.make_dir(self.container)

        templates = render_initial_templates(self._now())
        seed_text = self._read_seed()
        if seed_text:
            templates = splice_seed(templates, seed_text, self.seed_filename)

        result = InitResult(seed_applied=bool(seed_text))
        for filename, content in templates.items():
            self.files.write_text(self.container / filename, content)
            result.created_files.append(filename)
        logger.info(
            "Initialized Memory Bank at %s (%d files, seed=%s)",
            self.container,
            len(result.created_files),
            result.seed_applied,
        )
        return result

    def _read_seed(self) -> str:
        """Project brief text, or "" when absent or unreadable."""
        if not self.files.exists(self.seed_path):
            return ""
        try:
            return self.files.read_text(self.seed_path)
        except OSError as e:
            logger.warning("Failed to read %s: %s", self.seed_path, e)
            return ""

    # ── Read ──────────────────────────────────────────────────

    def read_documents(self) -> dict[str, str] | None:
        """Canonical documents present in the container, in priority order.

        Returns None when the Memory Bank is not initialized (no container,
        or no canonical document in it). I/O errors propagate.
        """
        if not self.files.is_dir(self.container):
            return None

        present = [name for name in self.files.list_dir(self.container) if is_canonical(name)]
        if not present:
            return None

        present.sort(key=lambda name: get_document(name).priority)
        return {name: self.files.read_text(self.container / name) for name in present}

    def read_all(self) -> str:
        """Aggregate every present document into one framed context blob."""
        documents = self.read_documents()
        if documents is None:
            return NOT_FOUND_MESSAGE

        blocks = []
        for filename, content in documents.items():
            tag = get_document(filename).name
            blocks.append(f"<{tag}>\n\n{content}\n\n</{tag}>")
        return READ_FRAME.format(content="\n\n".join(blocks))

    # ── Guidance ──────────────────────────────────────────────

    def build_guidance(self, change_type: str, description: str) -> MutationPlan:
        """Edit plan for a change. Pure; reads and writes nothing."""
        return build_guidance(change_type, description, self._now())
