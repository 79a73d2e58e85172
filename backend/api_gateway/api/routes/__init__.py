"""Route Modules — one file per route family.

Invariants:
    - Each module defines its own APIRouter with prefix and tags
    - Routes never contain business logic (delegate to services/helpers)
    - not_found.router is included last
"""
