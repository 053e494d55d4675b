"""
Admin check for write endpoints.

Callers present a shared secret in the `X-Admin-Token` header. This is
the only access control in the service; anything richer (roles, signed
requests) belongs in front of it.
"""

from __future__ import annotations

import hmac
from typing import Optional

from .errors import Unauthorized

ADMIN_TOKEN_HEADER = "X-Admin-Token"


class AdminAuthorizer:
    """Accepts a caller iff it presents the configured admin token."""

    def __init__(self, admin_token: Optional[str]) -> None:
        self._admin_token = admin_token

    @property
    def enabled(self) -> bool:
        return bool(self._admin_token)

    def check(self, presented: Optional[str]) -> None:
        if not self._admin_token:
            raise Unauthorized("writes are disabled: no admin token configured")
        if not presented or not hmac.compare_digest(
            presented.encode("utf-8"), self._admin_token.encode("utf-8")
        ):
            raise Unauthorized("missing or invalid admin token")
