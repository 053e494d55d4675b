"""
Filesystem-backed configuration store.

The whole store is kept as one JSON document:

    {
      "default_base_uri": "...",
      "contract_metadata_uri": "...",
      "tokens": {"<token_id>": {"explicit_uri": ..., "base_uri": ...,
                                "use_id_in_path": ..., "is_configured": ...}}
    }

It is rewritten after every successful mutation by writing a sibling
temp file and renaming it over the original, so readers of the file
only ever see a complete snapshot.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .config_store import ConfigStore

logger = logging.getLogger(__name__)


class FilesystemConfigStore(ConfigStore):
    """`ConfigStore` persisted to a JSON file at `path`."""

    def __init__(self, path: Path, default_base_uri: Optional[str] = None) -> None:
        super().__init__(default_base_uri=default_base_uri or "")
        self._path = Path(path)

        if self._path.exists():
            data = json.loads(self._path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError(f"state file must contain a JSON object: {self._path}")
            self.load_dict(data, default_base_uri=default_base_uri)
            logger.info("loaded %d token configs from %s", len(self.token_ids()), self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _committed(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self.to_dict(), indent=2, sort_keys=True)

        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
