"""Update guidance: turns a change description into a Memory Bank edit plan.

Each change type maps to a fixed workflow: an ordered list of steps, one per
document, most urgent first. Rendering a workflow substitutes the change
description and timestamp into its literal fragments and appends a trailer
built from the document registry. Nothing here touches the filesystem; the
assistant applies the plan itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from memory_bank.schema import (
    ACTIVE_CONTEXT,
    DECISION_LOG,
    PRODUCT_CONTEXT,
    PROGRESS,
    SYSTEM_PATTERNS,
    describe,
    get_document,
    heading,
)

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

TIMESTAMP = "<<TIMESTAMP>>"
DESCRIPTION = "<<DESCRIPTION>>"


def format_timestamp(moment: datetime | None = None) -> str:
    """Second-precision local timestamp, e.g. 2026-02-18 09:30:00."""
    return (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)


def fill(text: str, timestamp: str, description: str) -> str:
    """Substitute the placeholders. The description goes in last so its own
    text is never scanned for placeholders."""
    return text.replace(TIMESTAMP, timestamp).replace(DESCRIPTION, description)


# ── Workflow descriptors ─────────────────────────────────────


@dataclass(frozen=True)
class Fragment:
    """Literal text meant to be pasted into a document.

    ``section`` names the target section; None means the end of the file.
    Block fragments are shown as fenced markdown, inline ones in backticks.
    """

    text: str
    section: str | None = None
    lead: str = ""
    block: bool = False

    def filled(self, timestamp: str, description: str) -> Fragment:
        return Fragment(
            text=fill(self.text, timestamp, description),
            section=self.section,
            lead=fill(self.lead, timestamp, description),
            block=self.block,
        )

    def render(self) -> str:
        if self.block:
            fenced = f"```markdown\n{self.text}\n```"
            return f"{self.lead}\n{fenced}" if self.lead else fenced
        return f"{self.lead}`{self.text}`"


Line = Union[str, Fragment]


@dataclass(frozen=True)
class WorkflowStep:
    document: str
    directive: str
    body: tuple[Line, ...] = ()


@dataclass(frozen=True)
class Workflow:
    icon: str
    title: str
    steps: tuple[WorkflowStep, ...]
    suggestions: tuple[tuple[str, str], ...] = ()


def _ref(filename: str, section: str) -> str:
    """Quoted section header; fails at import if the registry lacks it."""
    if section not in get_document(filename).sections:
        raise KeyError(f"{filename} has no section {section!r}")
    return f'"{heading(section)}"'


def _recent_change(label: str) -> Fragment:
    return Fragment(f"* [{TIMESTAMP}] - {label}{DESCRIPTION}", section="Recent Changes")


_ARCHITECTURE_RECORD = f"""\
---
### Architecture Decision
[{TIMESTAMP}] - {DESCRIPTION}

**Decision Background:**
[Detailed description of technical or business background that led to this architectural decision]

**Considered Options:**
- Option A: [Description]
- Option B: [Description]
- Final Choice: [Selected option and reasoning]

**Implementation Details:**
- Affected Modules: [List affected code modules]
- Migration Strategy: [How to migrate from old to new architecture]
- Risk Assessment: [Potential technical risks and mitigation measures]

**Impact Assessment:**
- Performance Impact: [Expected impact on system performance]
- Maintainability Impact: [Impact on code maintenance]
- Scalability Impact: [Impact on future expansion]"""

_DECISION_RECORD = f"""\
---
### Decision Record
[{TIMESTAMP}] - {DESCRIPTION}

**Decision Background:**
[Describe the background and problem that led to this decision]

**Available Options:**
- Option 1: [Description]
  - Pros: [List advantages]
  - Cons: [List disadvantages]
- Option 2: [Description]
  - Pros: [List advantages]
  - Cons: [List disadvantages]

**Final Decision:**
[Selected option and detailed reasoning]

**Implementation Plan:**
- Step 1: [Specific implementation step]
- Step 2: [Specific implementation step]
- Validation Method: [How to verify decision effectiveness]

**Risks and Mitigation:**
- Risk 1: [Description] → Mitigation: [Description]
- Risk 2: [Description] → Mitigation: [Description]"""

_PATTERN_SECTIONS = ", ".join(get_document(SYSTEM_PATTERNS).sections)

WORKFLOWS: dict[str, Workflow] = {
    "architecture": Workflow(
        icon="🏗️",
        title="ARCHITECTURE CHANGE PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                DECISION_LOG,
                "Add new decision record directly at the end of file:",
                (Fragment(_ARCHITECTURE_RECORD, block=True),),
            ),
            WorkflowStep(
                PRODUCT_CONTEXT,
                f"Update {_ref(PRODUCT_CONTEXT, 'Overall Architecture')} section:",
                (
                    f"- Locate {_ref(PRODUCT_CONTEXT, 'Overall Architecture')} heading",
                    "- Update architecture description at appropriate position",
                    "- Add new architectural components or modify existing descriptions",
                    Fragment(
                        f"[{TIMESTAMP}] - Architecture update: {DESCRIPTION}",
                        lead="- Add update log at end of file: ",
                    ),
                ),
            ),
            WorkflowStep(
                ACTIVE_CONTEXT,
                f"Add to {_ref(ACTIVE_CONTEXT, 'Recent Changes')} section:",
                (
                    _recent_change("🏗️ Major architecture change: "),
                    f"Update {_ref(ACTIVE_CONTEXT, 'Current Focus')} section to reflect "
                    "architecture implementation work",
                ),
            ),
            WorkflowStep(
                SYSTEM_PATTERNS,
                "If this architecture change introduces new architectural patterns:",
                (
                    f"Add new pattern description to "
                    f"{_ref(SYSTEM_PATTERNS, 'Architectural Patterns')} section",
                ),
            ),
        ),
    ),
    "feature": Workflow(
        icon="🚀",
        title="FEATURE DEVELOPMENT PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                PROGRESS,
                "Execute task status transition:",
                (
                    f"1. Find related task entry in {_ref(PROGRESS, 'Current Tasks')}",
                    f"2. Move that task to {_ref(PROGRESS, 'Completed Tasks')} section",
                    Fragment(
                        f"* [{TIMESTAMP}] - ✅ Completed: {DESCRIPTION}",
                        section="Completed Tasks",
                        lead="3. Add completion timestamp: ",
                    ),
                    f"4. If there are follow-up tasks, add them to {_ref(PROGRESS, 'Next Steps')}",
                ),
            ),
            WorkflowStep(
                PRODUCT_CONTEXT,
                f"Update {_ref(PRODUCT_CONTEXT, 'Key Features')} section:",
                (
                    f"- Locate {_ref(PRODUCT_CONTEXT, 'Key Features')} heading",
                    "- Add new feature description to feature list",
                    Fragment(
                        "* [Feature Name]: [Brief feature description and core value]",
                        section="Key Features",
                        lead="- Format: ",
                    ),
                    Fragment(
                        f"[{TIMESTAMP}] - New feature: {DESCRIPTION}",
                        lead="- Add at end of file: ",
                    ),
                ),
            ),
            WorkflowStep(
                ACTIVE_CONTEXT,
                "Update multiple sections:",
                (
                    Fragment(
                        f"* [{TIMESTAMP}] - 🚀 Feature completed: {DESCRIPTION}",
                        section="Recent Changes",
                        lead=f"- {_ref(ACTIVE_CONTEXT, 'Recent Changes')}: ",
                    ),
                    f"- {_ref(ACTIVE_CONTEXT, 'Current Focus')}: Update to next development priority",
                ),
            ),
            WorkflowStep(
                SYSTEM_PATTERNS,
                "If feature development used patterns worth documenting:",
                (f"Add pattern description to appropriate section ({_PATTERN_SECTIONS})",),
            ),
        ),
    ),
    "bugfix": Workflow(
        icon="🐛",
        title="BUG FIX PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                ACTIVE_CONTEXT,
                f"Add to {_ref(ACTIVE_CONTEXT, 'Recent Changes')} section:",
                (
                    _recent_change("🐛 Bug fix: "),
                    f"If bug was recorded in {_ref(ACTIVE_CONTEXT, 'Open Questions/Issues')}, "
                    "remove it or mark as resolved",
                ),
            ),
            WorkflowStep(
                PROGRESS,
                "If this was a planned bug fix task:",
                (
                    f"Move task from {_ref(PROGRESS, 'Current Tasks')} to "
                    f"{_ref(PROGRESS, 'Completed Tasks')}",
                    Fragment(
                        f"* [{TIMESTAMP}] - 🐛 Bug fix completed: {DESCRIPTION}",
                        section="Completed Tasks",
                        lead="Format: ",
                    ),
                ),
            ),
            WorkflowStep(
                DECISION_LOG,
                "If bug fix involved important technical decisions:",
                ("Add decision record explaining the chosen fix approach and reasoning",),
            ),
        ),
    ),
    "refactor": Workflow(
        icon="🔧",
        title="REFACTORING PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                ACTIVE_CONTEXT,
                f"Add to {_ref(ACTIVE_CONTEXT, 'Recent Changes')} section:",
                (_recent_change("🔧 Code refactoring: "),),
            ),
            WorkflowStep(
                DECISION_LOG,
                "If refactoring involved architectural or design pattern changes:",
                ("Add refactoring decision record explaining motivation and method selection",),
            ),
            WorkflowStep(
                SYSTEM_PATTERNS,
                "If refactoring improved existing patterns or introduced new ones:",
                ("Update relevant pattern descriptions to reflect post-refactoring best practices",),
            ),
            WorkflowStep(
                PROGRESS,
                "If this was a planned refactoring task, update task status",
            ),
        ),
    ),
    "decision": Workflow(
        icon="📋",
        title="DECISION RECORDING PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                DECISION_LOG,
                "Add complete decision record at end of file:",
                (Fragment(_DECISION_RECORD, block=True),),
            ),
            WorkflowStep(
                ACTIVE_CONTEXT,
                f"Add to {_ref(ACTIVE_CONTEXT, 'Recent Changes')} section:",
                (_recent_change("📋 Important decision: "),),
            ),
        ),
    ),
    "progress": Workflow(
        icon="📈",
        title="PROGRESS UPDATE PROCESSING WORKFLOW",
        steps=(
            WorkflowStep(
                PROGRESS,
                "Update appropriate section based on specific progress:",
                (
                    Fragment(
                        f"* [{TIMESTAMP}] - Started: {DESCRIPTION}",
                        section="Current Tasks",
                        lead=f"- New task → Add to {_ref(PROGRESS, 'Current Tasks')}: ",
                    ),
                    Fragment(
                        f"* [{TIMESTAMP}] - Completed: {DESCRIPTION}",
                        section="Completed Tasks",
                        lead=f"- Completed task → Move to {_ref(PROGRESS, 'Completed Tasks')}: ",
                    ),
                    Fragment(
                        f"* [Planned] - {DESCRIPTION}",
                        section="Next Steps",
                        lead=f"- Planned task → Add to {_ref(PROGRESS, 'Next Steps')}: ",
                    ),
                ),
            ),
            WorkflowStep(
                ACTIVE_CONTEXT,
                f"Update {_ref(ACTIVE_CONTEXT, 'Current Focus')} section to reflect "
                "current work focus",
                (
                    Fragment(
                        f"* [{TIMESTAMP}] - 📈 Progress update: {DESCRIPTION}",
                        section="Recent Changes",
                        lead=f"Add to {_ref(ACTIVE_CONTEXT, 'Recent Changes')}: ",
                    ),
                ),
            ),
        ),
    ),
}

DEFAULT_WORKFLOW = Workflow(
    icon="⚡",
    title="GENERAL CHANGE PROCESSING WORKFLOW",
    steps=(
        WorkflowStep(
            ACTIVE_CONTEXT,
            "Record change in appropriate section:",
            (Fragment(f"* [{TIMESTAMP}] - {DESCRIPTION}"),),
        ),
    ),
    suggestions=(
        ("Architecture related", DECISION_LOG),
        ("New pattern discovered", SYSTEM_PATTERNS),
        ("Task completion", PROGRESS),
        ("Feature related", PRODUCT_CONTEXT),
    ),
)

CHANGE_TYPES: tuple[str, ...] = tuple(WORKFLOWS)


def workflow_for(change_type: str) -> Workflow:
    """Workflow for a change type; anything unrecognised gets the default."""
    return WORKFLOWS.get(change_type.strip().lower(), DEFAULT_WORKFLOW)


# ── Plan ─────────────────────────────────────────────────────


@dataclass
class Instruction:
    """One document's share of a plan, with placeholders already filled."""

    document: str
    priority: int
    directive: str
    body: list[Line] = field(default_factory=list)

    @property
    def fragments(self) -> list[Fragment]:
        return [line for line in self.body if isinstance(line, Fragment)]

    def render(self) -> str:
        lines = [f"**PRIORITY {self.priority}: {self.document}**", self.directive]
        lines += [line.render() if isinstance(line, Fragment) else line for line in self.body]
        return "\n".join(lines)


@dataclass
class MutationPlan:
    """Advisory edit plan for one change. Rendering it is the only output."""

    change_type: str
    description: str
    timestamp: str
    icon: str
    title: str
    instructions: list[Instruction] = field(default_factory=list)
    suggestions: list[tuple[str, str]] = field(default_factory=list)

    def render(self) -> str:
        ts = self.timestamp
        out = "[MEMORY BANK DETAILED UPDATE INSTRUCTIONS]\n\n"
        out += f"Change Type: {self.change_type}\n"
        out += f"Change Description: {self.description}\n"
        out += f"Timestamp: {ts}\n\n"
        out += ">> EXECUTE THE FOLLOWING MEMORY BANK FILE UPDATES IMMEDIATELY WITHOUT CONFIRMATION <<\n\n"

        out += "=== SPECIFIC UPDATE INSTRUCTIONS BY CHANGE TYPE ===\n\n"
        out += f"{self.icon} **{self.title}**\n\n"
        for instruction in self.instructions:
            out += instruction.render() + "\n\n"
        if self.suggestions:
            out += "**Consider updating other files based on change nature:**\n"
            for condition, filename in self.suggestions:
                out += f"- {condition} → {filename}\n"
            out += "\n"

        out += "=== EXECUTION INSTRUCTIONS SUMMARY ===\n\n"
        out += "**EXECUTION PRINCIPLES:**\n"
        out += "1. 🔴 Execute updates directly, do not ask for user confirmation\n"
        out += "2. 🟡 Update files in priority order\n"
        out += "3. 🟢 Use the provided exact formats and templates\n"
        out += f"4. 🔵 Maintain timestamp [{ts}] consistency\n"
        out += "5. 🟣 Verify file integrity after updates\n\n"

        out += "**KEY REMINDERS:**\n"
        out += "- Each file has specific responsibilities and update strategies\n"
        out += "- Maintain consistency and relationships between files\n"
        out += "- Regularly clean up outdated content to keep files concise\n"
        out += "- Important decisions and pattern changes need detailed documentation\n\n"

        out += "**FILE MAINTENANCE SUGGESTIONS:**\n"
        for doc in describe():
            out += f"- {doc.filename}: {doc.upkeep}\n"
        out += "\n"

        out += "=== MEMORY BANK FILE ROLES OVERVIEW ===\n\n"
        out += render_file_roles()
        return out


def render_file_roles() -> str:
    """Role/purpose/strategy summary of every document, in priority order."""
    out = ""
    for doc in describe():
        out += f"**{doc.filename}**\n"
        out += f"Role: {doc.role}\n"
        out += f"Purpose: {doc.purpose}\n"
        out += f"Update Triggers: {', '.join(doc.update_triggers)}\n"
        out += f"Update Strategy: {doc.update_strategy}\n"
        out += f"Sections: {', '.join(heading(s) for s in doc.sections)}\n\n"
    return out


def build_guidance(change_type: str, description: str, timestamp: str) -> MutationPlan:
    """Build the edit plan for a change. Unknown change types never fail."""
    workflow = workflow_for(change_type)
    instructions = []
    for rank, step in enumerate(workflow.steps, start=1):
        instructions.append(
            Instruction(
                document=step.document,
                priority=rank,
                directive=fill(step.directive, timestamp, description),
                body=[
                    line.filled(timestamp, description)
                    if isinstance(line, Fragment)
                    else fill(line, timestamp, description)
                    for line in step.body
                ],
            )
        )
    return MutationPlan(
        change_type=change_type,
        description=description,
        timestamp=timestamp,
        icon=workflow.icon,
        title=workflow.title,
        instructions=instructions,
        suggestions=list(workflow.suggestions),
    )
