"""Memory Bank: persistent project context for coding assistants.

Layout (per project):
    <root>/
    ├── projectBrief.md                # Optional seed, read once on init
    └── memory-bank/
        ├── productContext.md          # 1. Goals, features, architecture
        ├── activeContext.md           # 2. Current focus, recent changes, open issues
        ├── progress.md                # 3. Completed / current / next tasks
        ├── decisionLog.md             # 4. Decisions, rationale, implementation
        └── systemPatterns.md          # 5. Coding, architectural, testing patterns

The assistant edits these files itself; update-memory-bank only tells it how.
"""
