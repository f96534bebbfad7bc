"""Initial content for the canonical Memory Bank documents."""

from __future__ import annotations

from memory_bank.schema import PRODUCT_CONTEXT, describe, get_document, heading

PLACEHOLDER = "*   "

SEED_SECTION = "Project Goal"


def render_document(filename: str, timestamp: str) -> str:
    """Render the empty template for one canonical document."""
    doc = get_document(filename)
    parts = [
        f"# {doc.title}",
        f"{doc.intro}\n{timestamp} - {doc.footer}",
        "*",
    ]
    for section in doc.sections:
        parts.append(heading(section))
        parts.append(PLACEHOLDER)
    return "\n\n".join(parts) + "\n"


def render_initial_templates(timestamp: str) -> dict[str, str]:
    """Render every canonical document, keyed by filename in priority order."""
    return {doc.filename: render_document(doc.filename, timestamp) for doc in describe()}


def splice_seed(
    templates: dict[str, str],
    seed_text: str,
    seed_name: str = "projectBrief.md",
) -> dict[str, str]:
    """Fold a project brief into productContext's Project Goal section.

    The brief is restated verbatim, followed by an instruction to extract the
    goals from it and a fresh placeholder for the result. Returns a new dict.
    """
    if not seed_text:
        return templates

    anchor = f"{heading(SEED_SECTION)}\n\n{PLACEHOLDER}"
    replacement = (
        f"{heading(SEED_SECTION)}\n\n"
        f"*Based on {seed_name} content:*\n\n"
        f"{seed_text}\n\n"
        f"*Extract and define project goals from the above content:*\n\n"
        f"{PLACEHOLDER}"
    )
    spliced = dict(templates)
    spliced[PRODUCT_CONTEXT] = templates[PRODUCT_CONTEXT].replace(anchor, replacement, 1)
    return spliced
