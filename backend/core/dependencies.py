"""
Upkeep — Core request dependencies.

Authentication is handled upstream (reverse proxy / session layer). What the
maintenance core needs from the request is the opaque identity recorded as
``changed_by`` in the change log; an absent header means a system-initiated
change.
"""

from typing import Optional

from fastapi import Request

ACTOR_HEADER = "X-User-Id"


def get_actor(request: Request) -> Optional[str]:
    """Return the caller's opaque user id, or None for system changes."""
    actor = request.headers.get(ACTOR_HEADER)
    if actor is None:
        return None
    actor = actor.strip()
    return actor or None
