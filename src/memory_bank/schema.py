"""Canonical Memory Bank documents.

The five documents below are the whole Memory Bank. Templates, guidance text
and the read path all derive their filenames, section headers and ordering
from this registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping


@dataclass(frozen=True)
class CanonicalDocument:
    """Static description of one Memory Bank file."""

    filename: str
    title: str
    intro: str
    role: str
    purpose: str
    update_triggers: tuple[str, ...]
    update_strategy: str
    sections: Mapping[str, str]
    priority: int
    upkeep: str
    footer: str = "Log of updates made."

    @property
    def name(self) -> str:
        """Filename without the .md suffix, used as the aggregation tag."""
        return self.filename.removesuffix(".md")


def heading(section: str) -> str:
    return f"## {section}"


_DOCUMENTS: tuple[CanonicalDocument, ...] = (
    CanonicalDocument(
        filename="productContext.md",
        title="Product Context",
        intro=(
            "This file provides a high-level overview of the project and the expected "
            "product that will be created. Initially it is based upon projectBrief.md "
            "(if provided) and all other available project-related information in the "
            "working directory. This file is intended to be updated as the project "
            "evolves, and should be used to inform all other modes of the project's "
            "goals and context."
        ),
        role="Core file for project overview and product definition",
        purpose=(
            "Define project goals, core features and overall architecture, providing "
            "strategic guidance for all development activities"
        ),
        update_triggers=(
            "Architecture changes",
            "New feature additions",
            "Product goal adjustments",
            "Core business logic changes",
        ),
        update_strategy="Maintain high-level perspective, focus on long-term goals and core value",
        sections=MappingProxyType(
            {
                "Project Goal": (
                    "Core project objectives and value proposition, update when major "
                    "goals are adjusted"
                ),
                "Key Features": (
                    "List of core product features, add corresponding descriptions when "
                    "new features are completed"
                ),
                "Overall Architecture": (
                    "High-level description of system architecture, must be updated "
                    "synchronously when architecture changes"
                ),
            }
        ),
        priority=1,
        upkeep="Maintain high-level perspective, avoid excessive details",
        footer="Log of updates made will be appended as footnotes to the end of this file.",
    ),
    CanonicalDocument(
        filename="activeContext.md",
        title="Active Context",
        intro=(
            "This file tracks the project's current status, including recent changes, "
            "current goals, and open questions."
        ),
        role="Tracking file for current project status and real-time information",
        purpose=(
            "Record current work focus, recent changes and pending issues, maintain "
            "real-time visibility of project status"
        ),
        update_triggers=(
            "Any code changes",
            "New task start",
            "Issue discovery",
            "Status transitions",
        ),
        update_strategy=(
            "Update frequently, maintain information freshness, regularly clean up "
            "outdated content"
        ),
        sections=MappingProxyType(
            {
                "Current Focus": "Current main work focus, must be updated when tasks switch",
                "Recent Changes": "Recent change records, all changes need to be recorded here",
                "Open Questions/Issues": (
                    "Pending issues and questions, add immediately when issues are discovered"
                ),
            }
        ),
        priority=2,
        upkeep="Keep changes from last 7 days",
    ),
    CanonicalDocument(
        filename="progress.md",
        title="Progress",
        intro="This file tracks the project's progress using a task list format.",
        role="Task progress management and completion status tracking file",
        purpose="Manage task lifecycle, track the complete process from planning to completion",
        update_triggers=(
            "Task creation",
            "Task completion",
            "Task status changes",
            "Milestone achievement",
        ),
        update_strategy=(
            "Maintain chronological order, regularly move completed tasks to completed area"
        ),
        sections=MappingProxyType(
            {
                "Completed Tasks": (
                    "List of completed tasks, move to this section immediately when tasks "
                    "are completed"
                ),
                "Current Tasks": "Ongoing tasks, add when tasks start, remove when completed",
                "Next Steps": "Planned follow-up tasks, add during planning",
            }
        ),
        priority=3,
        upkeep="Archive completed tasks regularly",
    ),
    CanonicalDocument(
        filename="decisionLog.md",
        title="Decision Log",
        intro=(
            "This file records architectural and implementation decisions using a list "
            "format."
        ),
        role="Record file for important decisions and technical choices",
        purpose=(
            "Record the process, reasons and impact of key decisions, providing basis "
            "for future reference"
        ),
        update_triggers=(
            "Architecture decisions",
            "Technology selection",
            "Important business logic decisions",
            "Design pattern choices",
        ),
        update_strategy=(
            "Detailed recording of decision background, considerations and final "
            "choices, convenient for future review"
        ),
        sections=MappingProxyType(
            {
                "Decision": "Specific decision content",
                "Rationale": "Reasons and considerations for the decision",
                "Implementation Details": "Specific implementation details of the decision",
            }
        ),
        priority=4,
        upkeep="Keep all important decision records",
    ),
    CanonicalDocument(
        filename="systemPatterns.md",
        title="System Patterns *Optional*",
        intro=(
            "This file documents recurring patterns and standards used in the project.\n"
            "It is optional, but recommended to be updated as the project evolves."
        ),
        role="Documentation file for patterns and standards used in the project",
        purpose=(
            "Record repeatedly used code patterns, architectural patterns and testing "
            "patterns, promote consistency"
        ),
        update_triggers=(
            "New pattern discovery",
            "Standard changes",
            "Best practice summaries",
        ),
        update_strategy="Summarize and abstract common patterns, regularly organize and update",
        sections=MappingProxyType(
            {
                "Coding Patterns": "Common patterns at the coding level",
                "Architectural Patterns": "Design patterns at the architectural level",
                "Testing Patterns": "Testing-related patterns and standards",
            }
        ),
        priority=5,
        upkeep="Continuously update and optimize pattern descriptions",
    ),
)

_BY_FILENAME: Mapping[str, CanonicalDocument] = MappingProxyType(
    {doc.filename: doc for doc in _DOCUMENTS}
)

PRODUCT_CONTEXT = "productContext.md"
ACTIVE_CONTEXT = "activeContext.md"
PROGRESS = "progress.md"
DECISION_LOG = "decisionLog.md"
SYSTEM_PATTERNS = "systemPatterns.md"


def describe() -> tuple[CanonicalDocument, ...]:
    """All canonical documents, most important first."""
    return _DOCUMENTS


def filenames() -> tuple[str, ...]:
    return tuple(doc.filename for doc in _DOCUMENTS)


def get_document(filename: str) -> CanonicalDocument:
    """Look up a canonical document. Raises KeyError for anything else."""
    return _BY_FILENAME[filename]


def is_canonical(filename: str) -> bool:
    return filename in _BY_FILENAME
