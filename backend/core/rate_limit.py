"""
Upkeep — Shared slowapi rate limiter instance.

The app factory attaches it to app.state; routers that need throttling
import it for @limiter.limit() decorators.
Key function: get_remote_address (IP-based limiting).
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)
