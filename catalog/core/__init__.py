"""Core Layer — pure catalog logic: entities, validation, integrity rules, state machine.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Functions here never perform IO; repository_protocols.py only declares the
      async contracts the shell implements

Design Decisions:
    - Functional core separated from imperative shell: services/ does the awaiting,
      core/ decides on the results
"""
