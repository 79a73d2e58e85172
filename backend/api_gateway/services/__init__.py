"""Services Layer — provider-agnostic operations consumed by route handlers.

Invariants:
    - Services depend on core protocols, never on concrete providers
"""
