"""Serverless Path Normalizer — maps rewritten paths back to canonical gateway paths.

A serverless host mounts the gateway under a fixed segment (``/api`` by
default) and forwards ``/api/v1/status`` as-is. The gateway routes on
``/v1/status``, so the mount prefix is stripped before routing.

Invariants:
    - Pure and total: any string in, a string out, no exceptions
    - Query string (everything from the first "?") is never modified
    - Idempotent: a normalized path never matches the prefix pattern again
      (as long as the canonical space has no route under the mount segment)
    - Sibling paths sharing only text ("/apiary") are returned unchanged
"""

DEFAULT_MOUNT_PREFIX = "/api"


def normalize_serverless_path(
    raw: str, mount_prefix: str = DEFAULT_MOUNT_PREFIX,
) -> str:
    """Strip the serverless mount prefix from a path+query string."""
    prefix = mount_prefix.rstrip("/")
    if not prefix:
        return raw
    path, sep, query = raw.partition("?")
    suffix = sep + query

    if path in (prefix, prefix + "/"):
        return "/" + suffix
    if path.startswith(prefix + "/"):
        return path[len(prefix):] + suffix
    return raw
