"""Database Declarations — SQLAlchemy Base shared by models/ and alembic.

Invariants:
    - Engine and sessions live in infrastructure/database.py, not here
    - Nothing in this package opens a connection
"""
