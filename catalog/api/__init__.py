"""API Layer — FastAPI routes, outcome presenter and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - All endpoints return structured JSON responses

Design Decisions:
    - Thin routes delegate to OperationDispatch; presenters.py owns the
      Outcome → status code mapping
"""
