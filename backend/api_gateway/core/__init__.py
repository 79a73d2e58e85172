"""Core Layer — error model, path normalization, domain types, boundary protocols.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - No IO: everything here is pure and deterministic

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
