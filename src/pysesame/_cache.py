"""Persisted accessory contexts, keyed by lock UUID."""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pysesame.models.context import AccessoryContext

_logger = logging.getLogger(__name__)


class ContextStore:
    """JSON file holding one :class:`AccessoryContext` per lock."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._contexts: dict[str, dict[str, Any]] | None = None

    def _load(self) -> dict[str, dict[str, Any]]:
        if self._contexts is not None:
            return self._contexts
        contexts: dict[str, dict[str, Any]] = {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raw = {}
        except (OSError, json.JSONDecodeError):
            _logger.warning("Ignoring unreadable context cache %s", self._path, exc_info=True)
            raw = {}
        if isinstance(raw, dict):
            for uuid, data in raw.items():
                if isinstance(data, dict):
                    contexts[str(uuid)] = data
        self._contexts = contexts
        return contexts

    def get(self, uuid: str) -> AccessoryContext:
        """Restore the context for *uuid*, or defaults on first run."""
        return AccessoryContext.restore(self._load().get(uuid))

    def put(self, uuid: str, context: AccessoryContext) -> None:
        contexts = self._load()
        contexts[uuid] = context.model_dump(mode="json")
        self._write(contexts)

    def prune(self, keep: Iterable[str]) -> list[str]:
        """Drop contexts of locks not in *keep*; return the removed uuids."""
        contexts = self._load()
        wanted = set(keep)
        stale = sorted(uuid for uuid in contexts if uuid not in wanted)
        if not stale:
            return []
        for uuid in stale:
            del contexts[uuid]
        self._write(contexts)
        return stale

    def _write(self, contexts: dict[str, dict[str, Any]]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(contexts, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self._path)
