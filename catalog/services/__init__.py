"""Services Layer — aggregate queries, integrity guard, mutation controller, handlers.

Invariants:
    - Handlers split by entity kind (one class per kind, eight operations each)
    - Operation dispatch uses explicit dict mapping (no auto-discovery)
    - Services see storage only through the CatalogStore protocol

Design Decisions:
    - One handler file per entity kind for locality
"""
