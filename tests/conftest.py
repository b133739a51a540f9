"""Root conftest — shared test configuration."""

import os

# Ensure tests never reach a real database through settings defaults
os.environ.setdefault(
    "DATABASE_URL",
    "sqlite+aiosqlite:///test.db",
)
os.environ.setdefault("LOG_FORMAT", "text")
