"""Persistence of the last session descriptor (one record per wallet)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import SessionDescriptor

logger = logging.getLogger(__name__)


class InMemorySessionStateStore:
    def __init__(self, descriptor: Optional[SessionDescriptor] = None):
        self._descriptor = descriptor

    def load(self) -> Optional[SessionDescriptor]:
        return self._descriptor

    def save(self, descriptor: SessionDescriptor) -> None:
        self._descriptor = descriptor

    def clear(self) -> None:
        self._descriptor = None


class FileSessionStateStore:
    """Stores the descriptor as a JSON file; an unreadable file counts as empty."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[SessionDescriptor]:
        if not self.path.exists():
            return None
        try:
            return SessionDescriptor.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as exc:
            logger.warning(f"Ignoring unreadable session state at {self.path}: {exc}")
            return None

    def save(self, descriptor: SessionDescriptor) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(descriptor.model_dump_json(indent=2), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


__all__ = ["FileSessionStateStore", "InMemorySessionStateStore"]
