"""Tests for the update guidance engine."""

from __future__ import annotations

import re
from datetime import datetime

import pytest

from memory_bank.guidance import (
    CHANGE_TYPES,
    DEFAULT_WORKFLOW,
    DESCRIPTION,
    TIMESTAMP,
    WORKFLOWS,
    Fragment,
    build_guidance,
    fill,
    format_timestamp,
    workflow_for,
)
from memory_bank.schema import describe, get_document

TS = "2026-02-18 09:30:00"
TS_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}")


class TestFormatTimestamp:
    def test_format(self):
        assert format_timestamp(datetime(2026, 2, 3, 4, 5, 6)) == "2026-02-03 04:05:06"

    def test_defaults_to_now(self):
        assert TS_PATTERN.fullmatch(format_timestamp())


class TestFill:
    def test_substitutes_both(self):
        assert fill(f"[{TIMESTAMP}] {DESCRIPTION}", TS, "x") == f"[{TS}] x"

    def test_description_not_rescanned(self):
        assert fill(DESCRIPTION, TS, TIMESTAMP) == TIMESTAMP


class TestWorkflowTable:
    def test_closed_set_of_change_types(self):
        assert set(CHANGE_TYPES) == {
            "architecture",
            "feature",
            "bugfix",
            "refactor",
            "decision",
            "progress",
        }

    @pytest.mark.parametrize(
        "change_type, order",
        [
            ("architecture", ["decisionLog", "productContext", "activeContext", "systemPatterns"]),
            ("feature", ["progress", "productContext", "activeContext", "systemPatterns"]),
            ("bugfix", ["activeContext", "progress", "decisionLog"]),
            ("refactor", ["activeContext", "decisionLog", "systemPatterns", "progress"]),
            ("decision", ["decisionLog", "activeContext"]),
            ("progress", ["progress", "activeContext"]),
        ],
    )
    def test_step_order(self, change_type: str, order: list[str]):
        plan = build_guidance(change_type, "x", TS)
        assert [i.document for i in plan.instructions] == [f"{name}.md" for name in order]
        assert [i.priority for i in plan.instructions] == list(range(1, len(order) + 1))

    def test_fragment_sections_exist_in_target_document(self):
        for workflow in [*WORKFLOWS.values(), DEFAULT_WORKFLOW]:
            for step in workflow.steps:
                for line in step.body:
                    if isinstance(line, Fragment) and line.section:
                        assert line.section in get_document(step.document).sections

    def test_lookup_ignores_case_and_spaces(self):
        assert workflow_for(" Architecture ") is WORKFLOWS["architecture"]


class TestBuildGuidance:
    def test_architecture_first_targets_decision_log(self):
        plan = build_guidance("architecture", "switch to microservices", TS)
        first = plan.instructions[0]
        assert first.document == "decisionLog.md"
        block = first.fragments[0]
        assert block.block
        assert "switch to microservices" in block.text
        assert TS_PATTERN.search(block.text)

    def test_rendered_plan_has_no_placeholders(self):
        for change_type in [*CHANGE_TYPES, "unknown"]:
            text = build_guidance(change_type, "desc", TS).render()
            assert TIMESTAMP not in text
            assert DESCRIPTION not in text

    def test_fragments_carry_description_and_timestamp(self):
        plan = build_guidance("bugfix", "fix login crash", TS)
        fragment = plan.instructions[0].fragments[0]
        assert fragment.text == f"* [{TS}] - 🐛 Bug fix: fix login crash"
        assert fragment.section == "Recent Changes"

    def test_unknown_type_uses_default(self):
        plan = build_guidance("unknown-category", "x", TS)
        assert [i.document for i in plan.instructions] == ["activeContext.md"]
        assert plan.instructions[0].priority == 1
        suggested = {filename for _, filename in plan.suggestions}
        assert suggested == {
            "decisionLog.md",
            "systemPatterns.md",
            "progress.md",
            "productContext.md",
        }
        text = plan.render()
        assert "GENERAL CHANGE PROCESSING WORKFLOW" in text
        assert "**PRIORITY 1: activeContext.md**" in text
        assert "- Architecture related → decisionLog.md" in text

    def test_empty_description(self):
        plan = build_guidance("feature", "", TS)
        text = plan.render()
        assert "Change Description: \n" in text
        assert f"`* [{TS}] - ✅ Completed: `" in text

    def test_description_is_verbatim(self):
        desc = "use `{braces}` and <<TIMESTAMP>> literally"
        plan = build_guidance("decision", desc, TS)
        assert desc in plan.instructions[0].fragments[0].text

    def test_header(self):
        text = build_guidance("refactor", "extract module", TS).render()
        assert text.startswith("[MEMORY BANK DETAILED UPDATE INSTRUCTIONS]\n\n")
        assert "Change Type: refactor\n" in text
        assert "Change Description: extract module\n" in text
        assert f"Timestamp: {TS}\n" in text

    def test_trailer_from_registry(self):
        text = build_guidance("progress", "x", TS).render()
        assert f"4. 🔵 Maintain timestamp [{TS}] consistency" in text
        overview = text[text.index("=== MEMORY BANK FILE ROLES OVERVIEW ===") :]
        positions = [overview.index(f"**{doc.filename}**") for doc in describe()]
        assert positions == sorted(positions)
        for doc in describe():
            assert f"Role: {doc.role}" in overview
            assert f"- {doc.filename}: {doc.upkeep}" in text

    def test_instructions_precede_trailer(self):
        text = build_guidance("architecture", "x", TS).render()
        assert text.index("**PRIORITY 1: decisionLog.md**") < text.index(
            "=== EXECUTION INSTRUCTIONS SUMMARY ==="
        )

    def test_block_rendered_fenced(self):
        text = build_guidance("decision", "adopt uv", TS).render()
        assert "```markdown\n---\n### Decision Record\n" in text
        assert f"[{TS}] - adopt uv" in text

    def test_deterministic(self):
        a = build_guidance("feature", "dark mode", TS).render()
        b = build_guidance("feature", "dark mode", TS).render()
        assert a == b
