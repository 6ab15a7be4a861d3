"""Storage protocol for the persisted sheet database document."""

from __future__ import annotations

import copy
from typing import Any, Optional, Protocol

Document = dict[str, Any]


class Storage(Protocol):
    """Synchronous key-value style store holding one JSON-serializable document."""

    def load(self) -> Optional[Document]:  # pragma: no cover - interface definition
        """Return the stored document, or None when nothing has been saved yet."""
        ...

    def save(self, document: Document) -> None:  # pragma: no cover - interface definition
        ...


class MemoryStorage:
    """Storage implementation that keeps a private copy of the document in memory."""

    def __init__(self, document: Optional[Document] = None) -> None:
        self._document = copy.deepcopy(document) if document is not None else None
        self.save_count = 0

    def load(self) -> Optional[Document]:
        if self._document is None:
            return None
        return copy.deepcopy(self._document)

    def save(self, document: Document) -> None:
        self._document = copy.deepcopy(document)
        self.save_count += 1
