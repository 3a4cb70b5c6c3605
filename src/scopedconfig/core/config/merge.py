# src/scopedconfig/core/config/merge.py
"""
Sobreposição de camadas de settings do engine.

Usado em dois pontos:
    - arquivo local de overrides sobre o arquivo de defaults (`load_settings`)
    - bloco `namespaces.<ns>` sobre o bloco `defaults` (`settings_for_namespace`)

Regras por chave:
    - bloco (dict) sobre bloco → sobreposição recursiva
    - `allowed_pools` e demais listas → a lista do override substitui a da base
    - `None` em qualquer lado → o valor do override vale (inclusive `None`)
    - demais valores → o override vale se o tipo for o mesmo da base

Diferente do merge de records (`core.record.merge`), aqui não há política de
vazio nem tombstones: `false` e `[]` no override são valores legítimos.

Erros:
    - Tipos diferentes na mesma chave → `SettingsTypeConflictError` com o
      caminho pontilhado da chave (`key_path`) e o arquivo de origem
      (`source`), quando informado
"""

from copy import deepcopy
from typing import Any, Dict, Optional, Tuple

from .errors import SettingsTypeConflictError


def _kind(value: Any) -> str:
    if isinstance(value, dict):
        return "bloco"
    if isinstance(value, list):
        return "lista"
    return type(value).__name__


def _overlay(
    base: Dict[str, Any],
    override: Dict[str, Any],
    path: Tuple[str, ...],
    source: Optional[str],
) -> Dict[str, Any]:
    result: Dict[str, Any] = dict(base)

    for key, incoming in override.items():
        key_path = path + (str(key),)
        current = result.get(key)

        if current is None or incoming is None:
            result[key] = deepcopy(incoming)
        elif isinstance(current, dict) and isinstance(incoming, dict):
            result[key] = _overlay(current, incoming, key_path, source)
        elif type(current) is type(incoming):
            result[key] = deepcopy(incoming)
        else:
            dotted = ".".join(key_path)
            origin = f" (arquivo {source})" if source else ""
            raise SettingsTypeConflictError(
                f"Chave '{dotted}'{origin}: esperado {_kind(current)}, recebido {_kind(incoming)}",
                key_path=dotted,
                source=source,
            )

    return result


def deep_merge(
    base: Dict[str, Any],
    override: Dict[str, Any],
    *,
    source: Optional[str] = None,
    prefix: Tuple[str, ...] = (),
) -> Dict[str, Any]:
    """
    Sobrepõe `override` a `base` e devolve um novo dicionário.

    Args:
        base: Camada inferior (ex.: arquivo de defaults, bloco `defaults`).
        override: Camada superior.
        source: Rótulo da camada superior usado nas mensagens de erro
            (ex.: `"local"`).
        prefix: Caminho em que as duas camadas estão ancoradas, para que as
            mensagens apontem a chave completa (ex.: `("namespaces", "autoscale")`).

    Returns:
        Dict[str, Any]: Resultado, sem compartilhar sub-estruturas com `override`.

    Raises:
        SettingsTypeConflictError: Raiz não-dict ou tipos diferentes na mesma chave.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        anchor = ".".join(prefix) or "<raiz>"
        raise SettingsTypeConflictError(
            f"Camadas de settings em '{anchor}' devem ser dict, recebido: "
            f"{type(base).__name__} e {type(override).__name__}",
            key_path=".".join(prefix) or None,
            source=source,
        )
    return _overlay(deepcopy(base), override, tuple(prefix), source)


__all__ = ["deep_merge"]
