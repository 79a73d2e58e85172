"""API Layer — routes, middleware, envelopes, and error handlers.

Invariants:
    - Routes registered explicitly in main.py (no auto-discovery)
    - Every response is a success or error envelope (or a 308 redirect)

Design Decisions:
    - Thin routes delegate to services (ADR: impureim sandwich)
"""
