"""
In-memory configuration store for token URIs.

Holds one `TokenURIConfig` per token id (materialised on first write;
absent ids read as the zero record) and the collection-level settings.
Every mutation runs under a single lock and either applies fully or
leaves the store as it was.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..config import MAX_BATCH_SIZE
from ..errors import BatchTooLarge, InvalidArgument, LengthMismatch
from .events import ConfigEvent, ConfigurationChanged, ExplicitURIChanged, Listener

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenURIConfig:
    explicit_uri: str = ""
    base_uri: str = ""
    use_id_in_path: bool = False
    is_configured: bool = False


@dataclass
class CollectionConfig:
    default_base_uri: str = ""
    contract_metadata_uri: str = ""


_EMPTY = TokenURIConfig()


def _check_token_id(token_id: int) -> None:
    if token_id < 0:
        raise InvalidArgument(f"token id must be non-negative, got {token_id}")


class ConfigStore:
    """Per-token URI configuration plus collection-level metadata."""

    def __init__(self, default_base_uri: str = "", contract_metadata_uri: str = "") -> None:
        self._collection = CollectionConfig(
            default_base_uri=default_base_uri,
            contract_metadata_uri=contract_metadata_uri,
        )
        self._tokens: Dict[int, TokenURIConfig] = {}
        self._listeners: List[Listener] = []
        self._lock = threading.RLock()

    @property
    def default_base_uri(self) -> str:
        return self._collection.default_base_uri

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_token_config(self, token_id: int) -> TokenURIConfig:
        with self._lock:
            return self._tokens.get(token_id, _EMPTY)

    def read_for_resolve(self, token_id: int) -> Tuple[TokenURIConfig, str]:
        """Token record and default base path, read together."""
        with self._lock:
            return self._tokens.get(token_id, _EMPTY), self._collection.default_base_uri

    def get_collection_metadata_uri(self) -> str:
        with self._lock:
            return self._collection.contract_metadata_uri

    def token_ids(self) -> List[int]:
        """Ids with a materialised record, ascending."""
        with self._lock:
            return sorted(self._tokens)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def set_collection_metadata_uri(self, uri: str) -> None:
        with self._mutating():
            self._collection.contract_metadata_uri = uri
        logger.debug("contract metadata uri set to %r", uri)

    def set_base_path_config(self, token_id: int, base_uri: str, use_id_in_path: bool) -> None:
        """
        Give `token_id` its own base path, replacing any earlier one.

        The explicit override, if any, is left alone and keeps winning
        at resolve time.
        """
        _check_token_id(token_id)
        if not base_uri:
            raise InvalidArgument("base_uri must not be empty")

        with self._mutating([token_id]):
            self._write_base_path(token_id, base_uri, use_id_in_path)

        logger.debug("token %d base path -> %r (use_id_in_path=%s)", token_id, base_uri, use_id_in_path)
        self._notify([ConfigurationChanged(token_id, base_uri, bool(use_id_in_path))])

    def set_base_path_config_batch(
        self,
        token_ids: Sequence[int],
        base_uris: Sequence[str],
        use_id_in_path: Sequence[bool],
    ) -> None:
        """
        Apply many base-path configurations as one unit.

        All entries are validated before anything is written; readers
        never see part of a batch.
        """
        if not (len(token_ids) == len(base_uris) == len(use_id_in_path)):
            raise LengthMismatch(
                f"got {len(token_ids)} ids, {len(base_uris)} base uris, "
                f"{len(use_id_in_path)} flags"
            )
        if len(token_ids) > MAX_BATCH_SIZE:
            raise BatchTooLarge(f"batch of {len(token_ids)} exceeds limit of {MAX_BATCH_SIZE}")
        for token_id, base_uri in zip(token_ids, base_uris):
            _check_token_id(token_id)
            if not base_uri:
                raise InvalidArgument(f"base_uri for token {token_id} must not be empty")

        entries = list(zip(token_ids, base_uris, use_id_in_path))
        with self._mutating(token_ids):
            for token_id, base_uri, flag in entries:
                self._write_base_path(token_id, base_uri, flag)

        logger.debug("applied batch base path config for %d tokens", len(entries))
        self._notify([ConfigurationChanged(t, b, bool(f)) for t, b, f in entries])

    def set_explicit_uri(self, token_id: int, uri: str) -> None:
        _check_token_id(token_id)
        if not uri:
            raise InvalidArgument("uri must not be empty")

        with self._mutating([token_id]):
            self._write_explicit(token_id, uri)

        logger.debug("token %d explicit uri -> %r", token_id, uri)
        self._notify([ExplicitURIChanged(token_id, uri)])

    def clear_explicit_uri(self, token_id: int) -> None:
        """Drop the explicit override for `token_id`, set or not."""
        _check_token_id(token_id)
        with self._mutating([token_id]):
            self._write_explicit(token_id, "")

        logger.debug("token %d explicit uri cleared", token_id)
        self._notify([ExplicitURIChanged(token_id, "")])

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready view of the whole store."""
        with self._lock:
            tokens = {
                str(token_id): {
                    "explicit_uri": cfg.explicit_uri,
                    "base_uri": cfg.base_uri,
                    "use_id_in_path": cfg.use_id_in_path,
                    "is_configured": cfg.is_configured,
                }
                for token_id, cfg in sorted(self._tokens.items())
            }
            return {
                "default_base_uri": self._collection.default_base_uri,
                "contract_metadata_uri": self._collection.contract_metadata_uri,
                "tokens": tokens,
            }

    def load_dict(self, data: Dict[str, Any], default_base_uri: Optional[str] = None) -> None:
        """
        Replace the store's contents with a `to_dict()` document.

        `default_base_uri`, when given, overrides the one in `data`.
        Listeners are not notified.
        """
        raw_tokens = data.get("tokens") or {}
        if not isinstance(raw_tokens, dict):
            raise ValueError("snapshot 'tokens' must be a mapping")

        tokens: Dict[int, TokenURIConfig] = {}
        for key, fields in raw_tokens.items():
            if not isinstance(fields, dict):
                raise ValueError(f"snapshot entry for token {key} must be a mapping")
            token_id = int(key)
            _check_token_id(token_id)
            tokens[token_id] = TokenURIConfig(
                explicit_uri=str(fields.get("explicit_uri", "")),
                base_uri=str(fields.get("base_uri", "")),
                use_id_in_path=bool(fields.get("use_id_in_path", False)),
                is_configured=bool(fields.get("is_configured", False)),
            )

        if default_base_uri is None:
            default_base_uri = str(data.get("default_base_uri", ""))

        with self._lock:
            self._tokens = tokens
            self._collection = CollectionConfig(
                default_base_uri=default_base_uri,
                contract_metadata_uri=str(data.get("contract_metadata_uri", "")),
            )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    @contextmanager
    def _mutating(self, token_ids: Iterable[int] = ()) -> Iterator[None]:
        """
        Hold the lock for one mutation and run `_committed()` at the end.

        If the body or the hook raises, the records of `token_ids` and the
        collection settings are put back as they were.
        """
        with self._lock:
            saved_tokens = {t: self._tokens.get(t) for t in token_ids}
            saved_collection = replace(self._collection)
            try:
                yield
                self._committed()
            except BaseException:
                for token_id, cfg in saved_tokens.items():
                    if cfg is None:
                        self._tokens.pop(token_id, None)
                    else:
                        self._tokens[token_id] = cfg
                self._collection = saved_collection
                raise

    # Callers of the _write_* helpers hold the lock.
    def _write_base_path(self, token_id: int, base_uri: str, use_id_in_path: bool) -> None:
        current = self._tokens.get(token_id, _EMPTY)
        self._tokens[token_id] = replace(
            current,
            base_uri=base_uri,
            use_id_in_path=bool(use_id_in_path),
            is_configured=True,
        )

    def _write_explicit(self, token_id: int, uri: str) -> None:
        current = self._tokens.get(token_id, _EMPTY)
        self._tokens[token_id] = replace(current, explicit_uri=uri)

    def _committed(self) -> None:
        """Hook run under the lock after each successful mutation."""

    def _notify(self, events: Sequence[ConfigEvent]) -> None:
        for event in events:
            for listener in self._listeners:
                listener(event)
