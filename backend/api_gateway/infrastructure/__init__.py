"""Infrastructure Layer — content providers, provider selection, logging setup.

Invariants:
    - Providers implement core.provider_protocols.ContentProvider
    - All external calls wrapped with retry/timeout/error mapping

Design Decisions:
    - Resilient wrappers over raw clients (ADR: single responsibility)
"""
