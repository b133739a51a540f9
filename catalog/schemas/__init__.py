"""Pydantic Schemas — response contracts for the HTTP binding.

Invariants:
    - Schemas describe what leaves the API; core entities stay frozen dataclasses
    - Enum fields serialized by value

Design Decisions:
    - Separate from models/: schemas are API contracts, models are persistence
"""
