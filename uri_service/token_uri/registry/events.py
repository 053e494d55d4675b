"""
Notifications emitted by the configuration store.

Listeners are plain callables taking one event. They run after the
mutation has committed, so a listener that raises does not undo the
write; the exception propagates to the caller of the mutating method.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConfigurationChanged:
    """A token's base-path rule was written."""

    token_id: int
    base_uri: str
    use_id_in_path: bool


@dataclass(frozen=True)
class ExplicitURIChanged:
    """A token's explicit override was set, or cleared (`uri == ""`)."""

    token_id: int
    uri: str


ConfigEvent = Union[ConfigurationChanged, ExplicitURIChanged]
Listener = Callable[[ConfigEvent], None]


def log_event(event: ConfigEvent) -> None:
    """Listener that writes one INFO record per notification."""
    if isinstance(event, ConfigurationChanged):
        logger.info(
            "base path configured: token_id=%d base_uri=%s use_id_in_path=%s",
            event.token_id,
            event.base_uri,
            event.use_id_in_path,
        )
    elif event.uri:
        logger.info("explicit uri set: token_id=%d uri=%s", event.token_id, event.uri)
    else:
        logger.info("explicit uri cleared: token_id=%d", event.token_id)
