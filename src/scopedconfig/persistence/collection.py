"""Implementação base das operações de coleção sobre um dicionário de documentos.

As stores do pacote diferem apenas em onde o dicionário `{id: documento}`
vive (memória ou arquivo). Toda operação roda inteira sob o lock da store,
o que torna `conditional_upsert` atômico dentro do processo.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, List, Optional, Sequence

from scopedconfig.core.errors import NotFoundError, StoreError

from .store import (
    BASE_SCOPE,
    VALUE_FIELD,
    ConditionalResult,
    FieldFilter,
    ScopeDocument,
    UpsertResult,
    set_path,
    unset_path,
)


Documents = Dict[str, Dict[str, Any]]


class DocumentCollection:
    """Handle de coleção com as sete operações do contrato `ScopeCollection`."""

    def __init__(self, *, name: str, lock: threading.RLock):
        self.name = name
        self._lock = lock
        self._closed = False

    # ------------------------------------------------------------------
    # Armazenamento (implementado pelas subclasses)
    # ------------------------------------------------------------------
    def _load_documents(self) -> Documents:
        raise NotImplementedError

    def _save_documents(self, documents: Documents) -> None:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Ciclo de vida do handle
    # ------------------------------------------------------------------
    def close(self) -> None:
        self._closed = True

    def _ensure_open(self) -> None:
        if self._closed:
            raise StoreError(
                f"collection handle '{self.name}' is closed",
                details={"collection": self.name},
            )

    def _not_found(self, doc_id: str) -> NotFoundError:
        return NotFoundError(
            f"scope '{doc_id}' not found in {self.name}",
            details={"collection": self.name, "scope": doc_id},
        )

    @staticmethod
    def _to_document(doc_id: str, raw: Dict[str, Any]) -> ScopeDocument:
        return ScopeDocument(id=doc_id, value=copy.deepcopy(raw.get(VALUE_FIELD) or {}))

    # ------------------------------------------------------------------
    # Operações
    # ------------------------------------------------------------------
    def find_by_id(self, doc_id: str) -> ScopeDocument:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            if doc_id not in documents:
                raise self._not_found(doc_id)
            return self._to_document(doc_id, documents[doc_id])

    def upsert_by_id(self, doc_id: str, value: Dict[str, Any]) -> UpsertResult:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            result = UpsertResult.UPDATED if doc_id in documents else UpsertResult.CREATED
            documents[doc_id] = {VALUE_FIELD: copy.deepcopy(value)}
            self._save_documents(documents)
            return result

    def conditional_upsert(self, doc_id: str, match: FieldFilter, value: Any) -> ConditionalResult:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            raw = documents.get(doc_id)
            if raw is None:
                raw = {VALUE_FIELD: {}}
            elif not match.matches(raw):
                return ConditionalResult.NOT_APPLIED
            set_path(raw, match.path, copy.deepcopy(value))
            documents[doc_id] = raw
            self._save_documents(documents)
            return ConditionalResult.APPLIED

    def find(self, ids: Optional[Sequence[str]] = None) -> List[ScopeDocument]:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            if ids:
                wanted = [i for i in dict.fromkeys(ids) if i in documents]
            else:
                wanted = [i for i in documents if i != BASE_SCOPE]
            return [self._to_document(i, documents[i]) for i in wanted]

    def set_field_by_id(self, doc_id: str, path: str, value: Any) -> UpsertResult:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            result = UpsertResult.UPDATED if doc_id in documents else UpsertResult.CREATED
            raw = documents.setdefault(doc_id, {VALUE_FIELD: {}})
            set_path(raw, path, copy.deepcopy(value))
            self._save_documents(documents)
            return result

    def unset_field_by_id(self, doc_id: str, path: str) -> None:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            if doc_id not in documents:
                raise self._not_found(doc_id)
            unset_path(documents[doc_id], path)
            self._save_documents(documents)

    def remove_by_id(self, doc_id: str) -> None:
        self._ensure_open()
        with self._lock:
            documents = self._load_documents()
            if doc_id not in documents:
                raise self._not_found(doc_id)
            del documents[doc_id]
            self._save_documents(documents)


__all__ = ["DocumentCollection", "Documents"]
