"""
Contrato do store persistente de escopos.

O engine não implementa persistência: ele consome uma coleção de documentos
indexada por id através dos protocolos definidos aqui. Cada documento é
`{id: escopo, value: record codificado}`; o id `""` é o default (base) e
qualquer outro id é a camada de override de um pool.

Operações de uma coleção:
    - find_by_id(id)                      → ScopeDocument | NotFoundError
    - upsert_by_id(id, value)             → CREATED | UPDATED
    - conditional_upsert(id, match, value)→ APPLIED | NOT_APPLIED
    - find(ids=None)                      → lista de documentos
    - set_field_by_id(id, path, value)    → CREATED | UPDATED
    - unset_field_by_id(id, path)         → None | NotFoundError
    - remove_by_id(id)                    → None | NotFoundError

Caminhos de campo são nomes pontuados prefixados pelo segmento do container
do valor (`value.<campo>[.<subcampo>...]`).

Este módulo também expõe os helpers de caminho compartilhados pelas
implementações de store do pacote.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, ContextManager, Dict, List, Optional, Protocol, Sequence, Tuple, runtime_checkable


BASE_SCOPE = ""
VALUE_FIELD = "value"

_MISSING = object()


class UpsertResult(str, Enum):
    CREATED = "created"
    UPDATED = "updated"


class ConditionalResult(str, Enum):
    APPLIED = "applied"
    NOT_APPLIED = "not_applied"


@dataclass(frozen=True)
class ScopeDocument:
    """Unidade persistida: um escopo e o record codificado."""

    id: str
    value: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, VALUE_FIELD: self.value}


@dataclass(frozen=True)
class FieldFilter:
    """Casa quando o campo em `path` está ausente ou vale um de `values`."""

    path: str
    values: Tuple[Any, ...] = ("",)
    or_missing: bool = True

    def matches(self, document: Dict[str, Any]) -> bool:
        current = get_path(document, self.path, _MISSING)
        if current is _MISSING:
            return self.or_missing
        return any(current == v and type(current) is type(v) for v in self.values)


@runtime_checkable
class ScopeCollection(Protocol):
    """Handle de uma coleção de escopos, válido dentro de um `with`."""

    def find_by_id(self, doc_id: str) -> ScopeDocument:
        ...

    def upsert_by_id(self, doc_id: str, value: Dict[str, Any]) -> UpsertResult:
        ...

    def conditional_upsert(self, doc_id: str, match: FieldFilter, value: Any) -> ConditionalResult:
        """Grava `value` em `match.path` apenas se o filtro casar.

        Documento ausente é criado com o campo. Documento existente que não
        casa o filtro resulta em NOT_APPLIED (equivalente a duplicate-key).
        """
        ...

    def find(self, ids: Optional[Sequence[str]] = None) -> List[ScopeDocument]:
        """Sem `ids`, retorna todos os documentos exceto o default (`""`)."""
        ...

    def set_field_by_id(self, doc_id: str, path: str, value: Any) -> UpsertResult:
        ...

    def unset_field_by_id(self, doc_id: str, path: str) -> None:
        ...

    def remove_by_id(self, doc_id: str) -> None:
        ...


@runtime_checkable
class ScopeStore(Protocol):
    """Fonte de handles de coleção; cada chamada do engine abre o seu."""

    def collection(self, name: str) -> ContextManager[ScopeCollection]:
        ...


# ---------------------------------------------------------------------------
# Helpers de caminho pontuado
# ---------------------------------------------------------------------------

def split_path(path: str) -> List[str]:
    parts = path.split(".")
    if not path or any(not p for p in parts):
        raise ValueError(f"invalid field path: {path!r}")
    return parts


def get_path(document: Dict[str, Any], path: str, default: Any = None) -> Any:
    node: Any = document
    for part in split_path(path):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return node


def set_path(document: Dict[str, Any], path: str, value: Any) -> None:
    parts = split_path(path)
    node = document
    for part in parts[:-1]:
        child = node.get(part)
        if not isinstance(child, dict):
            child = {}
            node[part] = child
        node = child
    node[parts[-1]] = value


def unset_path(document: Dict[str, Any], path: str) -> None:
    parts = split_path(path)
    node: Any = document
    for part in parts[:-1]:
        if not isinstance(node, dict) or part not in node:
            return
        node = node[part]
    if isinstance(node, dict):
        node.pop(parts[-1], None)


__all__ = [
    "BASE_SCOPE",
    "VALUE_FIELD",
    "ConditionalResult",
    "FieldFilter",
    "ScopeCollection",
    "ScopeDocument",
    "ScopeStore",
    "UpsertResult",
    "get_path",
    "set_path",
    "split_path",
    "unset_path",
]
