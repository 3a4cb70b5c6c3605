"""Store de escopos em memória (v1).

Store minimalista, sem I/O, usada em testes e em deployments de processo
único. Todas as coleções compartilham um único lock re-entrante, então cada
operação é atômica em relação às demais threads do processo.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator

from .collection import DocumentCollection, Documents


class _MemoryCollection(DocumentCollection):
    def __init__(self, *, name: str, lock: threading.RLock, documents: Documents):
        super().__init__(name=name, lock=lock)
        self._documents = documents

    def _load_documents(self) -> Documents:
        return self._documents

    def _save_documents(self, documents: Documents) -> None:
        # o dicionário já é o estado vivo da coleção
        return None


class MemoryScopeStore:
    """Store canônica em memória para o engine de escopos."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._collections: Dict[str, Documents] = {}

    @contextmanager
    def collection(self, name: str) -> Iterator[DocumentCollection]:
        with self._lock:
            documents = self._collections.setdefault(name, {})
        handle = _MemoryCollection(name=name, lock=self._lock, documents=documents)
        try:
            yield handle
        finally:
            handle.close()

    def collection_names(self) -> list:
        with self._lock:
            return sorted(self._collections)


__all__ = ["MemoryScopeStore"]
