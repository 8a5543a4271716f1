"""
api/limiter.py -- Shared slowapi rate limiter instance.

Imported by api/main.py (to mount as middleware and register the 429 handler)
and api/routes/auth.py (to limit login and signup with @limiter.limit()).

A single shared instance means every route counts against the same in-memory
store. Per-module instances would each keep their own counters.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")
