# src/scopedconfig/core/config/settings.py
"""
Settings imutáveis de uma instância do engine.

`EngineSettings` é fixado na construção do engine e nunca muda depois:

    - collection_name: coleção do store (`scoped_<namespace>`)
    - allow_empty: zero-values (0, "", False) contam como override legítimo
    - shallow_merge: merge por campo inteiro em vez de recursivo
    - allowed_pools: política declarada de pools; o engine não a aplica
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Mapping

from .errors import (
    InvalidSettingsRootTypeError,
    SettingsTypeConflictError,
    UnknownSettingsOptionError,
)
from .merge import deep_merge


COLLECTION_PREFIX = "scoped_"

_BOOL_OPTIONS = ("allow_empty", "shallow_merge")
_KNOWN_OPTIONS = frozenset(_BOOL_OPTIONS + ("allowed_pools",))


def collection_for(namespace: str) -> str:
    """Mapeia o namespace do consumidor para o identificador da coleção."""
    return f"{COLLECTION_PREFIX}{namespace}"


@dataclass(frozen=True)
class EngineSettings:
    collection_name: str
    allow_empty: bool = False
    shallow_merge: bool = False
    allowed_pools: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def for_namespace(
        cls,
        namespace: str,
        *,
        allow_empty: bool = False,
        shallow_merge: bool = False,
        allowed_pools: Iterable[str] = (),
    ) -> "EngineSettings":
        return cls(
            collection_name=collection_for(namespace),
            allow_empty=allow_empty,
            shallow_merge=shallow_merge,
            allowed_pools=frozenset(allowed_pools),
        )

    def pool_allowed(self, scope: str) -> bool:
        """Consulta a política declarada; sem pools declarados, tudo é permitido."""
        if not self.allowed_pools:
            return True
        return scope in self.allowed_pools


def _block(settings: Mapping[str, Any], *keys: str) -> Dict[str, Any]:
    node: Any = settings
    for depth, key in enumerate(keys):
        if not isinstance(node, Mapping):
            raise InvalidSettingsRootTypeError(
                f"Bloco '{'.'.join(keys[:depth])}' deve ser dict, recebido: {type(node).__name__}",
                key_path=".".join(keys[:depth]),
            )
        node = node.get(key)
        if node is None:
            return {}
    if not isinstance(node, dict):
        raise InvalidSettingsRootTypeError(
            f"Bloco '{'.'.join(keys)}' deve ser dict, recebido: {type(node).__name__}",
            key_path=".".join(keys),
        )
    return node


def settings_for_namespace(settings: Mapping[str, Any], namespace: str) -> EngineSettings:
    """
    Resolve o `EngineSettings` de um namespace a partir dos settings carregados.

    O bloco `namespaces.<namespace>` é mesclado (deep-merge) sobre o bloco
    `defaults`; ambos são opcionais.

    Raises:
        InvalidSettingsRootTypeError: Se um dos blocos não for dict.
        UnknownSettingsOptionError: Se o bloco resolvido tiver opção desconhecida.
        SettingsTypeConflictError: Se uma opção tiver tipo inválido.
    """
    if not isinstance(settings, Mapping):
        raise InvalidSettingsRootTypeError(
            f"Settings root deve ser dict, recebido: {type(settings).__name__}"
        )

    defaults = _block(settings, "defaults")
    own = _block(settings, "namespaces", namespace)
    resolved = deep_merge(defaults, own, prefix=("namespaces", namespace))

    def origin(option: str) -> str:
        # chave onde a opção efetiva foi declarada
        return f"namespaces.{namespace}.{option}" if option in own else f"defaults.{option}"

    unknown = sorted(set(resolved) - _KNOWN_OPTIONS)
    if unknown:
        raise UnknownSettingsOptionError(
            f"Namespace '{namespace}': opções desconhecidas {unknown} em "
            f"{[origin(o) for o in unknown]} (válidas: {sorted(_KNOWN_OPTIONS)})",
            key_path=origin(unknown[0]),
        )

    for option in _BOOL_OPTIONS:
        if option in resolved and not isinstance(resolved[option], bool):
            raise SettingsTypeConflictError(
                f"Namespace '{namespace}': '{origin(option)}' deve ser bool, "
                f"recebido: {type(resolved[option]).__name__}",
                key_path=origin(option),
            )

    pools = resolved.get("allowed_pools") or []
    if not isinstance(pools, list) or not all(isinstance(p, str) for p in pools):
        where = origin("allowed_pools")
        raise SettingsTypeConflictError(
            f"Namespace '{namespace}': '{where}' deve ser lista de strings",
            key_path=where,
        )

    return EngineSettings.for_namespace(
        namespace,
        allow_empty=bool(resolved.get("allow_empty", False)),
        shallow_merge=bool(resolved.get("shallow_merge", False)),
        allowed_pools=pools,
    )


__all__ = ["COLLECTION_PREFIX", "EngineSettings", "collection_for", "settings_for_namespace"]
