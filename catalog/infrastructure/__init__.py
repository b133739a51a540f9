"""Infrastructure Layer — storage gateway, session management, logging setup.

Invariants:
    - Infrastructure never imports services/
    - All SQLAlchemy failures leave this layer as StorageError (core/errors.py)

Design Decisions:
    - The SQL gateway satisfies core/repository_protocols.py structurally,
      so services depend on the protocol and tests swap in an in-memory store
"""
