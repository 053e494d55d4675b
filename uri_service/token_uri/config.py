"""
Configuration helpers for the token URI service.

Everything is read from the environment once at import time. Tests that
need different values build their own store / authorizer instead of
reloading this module.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

# Fallback base path for every token that has no base-path configuration
# of its own. Fixed for the lifetime of a store. Unset means "" for a fresh
# store, or whatever the state file recorded for a persisted one.
DEFAULT_BASE_URI: Optional[str] = os.environ.get("TOKEN_URI_DEFAULT_BASE_URI")

# Shared secret presented in the `X-Admin-Token` header on write calls.
# Unset means every write is rejected.
ADMIN_TOKEN: Optional[str] = os.environ.get("TOKEN_URI_ADMIN_TOKEN") or None

# Where the filesystem store keeps its JSON snapshot. Unset means the
# configuration only lives in memory.
_state_path = os.environ.get("TOKEN_URI_STATE_PATH")
STATE_PATH: Optional[Path] = Path(_state_path).resolve() if _state_path else None

LOG_LEVEL: str = os.environ.get("TOKEN_URI_LOG_LEVEL", "INFO").upper()

# Upper bound on entries in a single bulk configuration call.
MAX_BATCH_SIZE: int = 500
