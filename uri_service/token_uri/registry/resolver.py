"""
Token URI resolution.

Given a token id, pick the location string callers should fetch its
metadata document from. Precedence, first match wins:

1. the token's explicit URI, returned verbatim;
2. otherwise the token's own base path if it has one, else the
   collection default, with the decimal id appended (after a `/`
   separator when missing) if the token's `use_id_in_path` is set;
3. otherwise that base path unchanged.
"""

from __future__ import annotations

from .config_store import ConfigStore, TokenURIConfig


def compose_uri(token_id: int, cfg: TokenURIConfig, default_base_uri: str) -> str:
    if cfg.explicit_uri:
        return cfg.explicit_uri

    base = cfg.base_uri if cfg.is_configured else default_base_uri

    # use_id_in_path comes from the token's record even when the base is
    # the collection default. No write path produces that combination today.
    if cfg.use_id_in_path:
        if not base.endswith("/"):
            base += "/"
        return base + str(token_id)

    return base


class UriResolver:
    """Read-only view over a `ConfigStore` that answers `resolve(id)`."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    def resolve(self, token_id: int) -> str:
        cfg, default_base_uri = self._store.read_for_resolve(token_id)
        return compose_uri(token_id, cfg, default_base_uri)
