"""Pydantic Schemas — content contracts served by the gateway.

Invariants:
    - Schemas define the wire shape (camelCase aliases), not storage
"""
