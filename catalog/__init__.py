"""Library Catalog Package — works, authors, genres and copies behind one dispatch.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
