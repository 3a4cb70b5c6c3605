"""
Merge estrutural de records de configuração.

Este módulo implementa o algoritmo que combina um record base (ex.: o
default global) com um override do mesmo tipo (ex.: o record de um pool),
campo a campo, opcionalmente registrando a herança de cada campo.

Política de merge (v1):
    - record + record → merge recursivo por campo (modo deep, default)
    - modo shallow → o campo inteiro é substituído se o override não for vazio
    - mapa → merge por chave; valor vazio no override remove a chave (tombstone)
    - datetime/date/time/timedelta → escalar atômico, nunca decomposto
    - escalares, sequências e demais valores → override substitui a base
      quando não é vazio segundo a `EmptinessPolicy`
    - tipos incompatíveis ou campo não atribuível → `MergeError`

Rastreamento de herança:
    - ativo apenas nas leituras default → pool (`track_inheritance=True`)
    - para cada campo com marcador associado grava `True` quando o valor veio
      da base e `False` quando foi sobrescrito
    - com `track_inheritance=False` os marcadores não são lidos nem escritos

Invariantes:
    - Um override composto só de campos vazios produz a base inalterada
    - Um mapa mesclado nunca contém chave cujo valor no override é vazio
    - `merge_into` muta a base in place; em caso de erro, campos já mesclados
      permanecem aplicados (sem transação dentro de uma chamada)

Limites explícitos:
    - Não acessa o store
    - Não recursa em valores de mapas (a entrada é substituída por inteiro)
"""

from __future__ import annotations

import copy
import numbers
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Tuple, TypeVar

from ..errors import MergeError, ValidationError
from .emptiness import EmptinessPolicy
from .schema import FieldSpec, describe, is_record


T = TypeVar("T")


@dataclass(frozen=True)
class _MergeContext:
    policy: EmptinessPolicy
    shallow: bool
    track_inheritance: bool


def _category(value: Any) -> str:
    if value is None:
        return "none"
    if is_record(value):
        return "record"
    if isinstance(value, Mapping):
        return "mapping"
    if isinstance(value, (datetime, date, time)):
        return "time"
    if isinstance(value, timedelta):
        return "duration"
    if isinstance(value, Enum):
        return "enum"
    if isinstance(value, str):
        return "str"
    if isinstance(value, (bytes, bytearray)):
        return "bytes"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, (list, tuple, set, frozenset)):
        return "sequence"
    return "object"


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _assign(record: Any, spec: FieldSpec, value: Any, path: str) -> None:
    try:
        spec.set(record, value)
    except (AttributeError, TypeError) as exc:
        # FrozenInstanceError é subclasse de AttributeError
        raise MergeError(
            f"error trying to set field {path}: {exc}",
            details={"path": path, "record_type": type(record).__name__},
            hint="Records usados no merge não podem ser frozen.",
        ) from exc


def _resolve_kind(current: Any, incoming: Any, path: str) -> str:
    base_cat = _category(current)
    over_cat = _category(incoming)

    if base_cat == "record" and over_cat == "record":
        if type(current) is not type(incoming):
            raise MergeError(
                f"cannot merge {type(incoming).__name__} into {type(current).__name__} at {path}",
                details={
                    "path": path,
                    "base_type": type(current).__name__,
                    "override_type": type(incoming).__name__,
                },
            )
        return "record"

    if over_cat == "mapping" and base_cat in ("mapping", "none"):
        return "mapping"
    if base_cat == "mapping" and over_cat == "none":
        return "mapping"

    if "none" in (base_cat, over_cat) or base_cat == over_cat:
        return "leaf"

    raise MergeError(
        f"cannot assign {type(incoming).__name__} to field {path} holding {type(current).__name__}",
        details={
            "path": path,
            "base_type": type(current).__name__,
            "override_type": type(incoming).__name__,
        },
    )


def _merge_mapping(current: Any, incoming: Any, ctx: _MergeContext) -> Tuple[Any, bool]:
    if incoming is None:
        return current, False

    result = dict(current) if current is not None else {}
    merged = False
    changed = False
    for key, value in incoming.items():
        if not ctx.policy.is_empty(value):
            result[key] = copy.deepcopy(value)
            merged = True
            changed = True
        elif key in result:
            # tombstone
            del result[key]
            changed = True

    if not changed:
        return current, False
    return result, merged


def _merge_value(current: Any, incoming: Any, ctx: _MergeContext, path: str) -> Tuple[Any, bool]:
    kind = _resolve_kind(current, incoming, path)

    if kind == "record":
        return current, _merge_record(current, incoming, ctx, path)

    if kind == "mapping":
        return _merge_mapping(current, incoming, ctx)

    if ctx.policy.is_empty(incoming):
        return current, False
    return copy.deepcopy(incoming), True


def _merge_record(base: Any, override: Any, ctx: _MergeContext, path: str) -> bool:
    schema = describe(type(base))
    merged = False

    for spec in schema.mergeable():
        field_path = _join(path, spec.name)
        current = spec.get(base)
        incoming = spec.get(override)

        if ctx.shallow:
            if not ctx.policy.is_empty(incoming):
                _assign(base, spec, copy.deepcopy(incoming), field_path)
                merged = True
            continue

        value, field_merged = _merge_value(current, incoming, ctx, field_path)
        if value is not current:
            _assign(base, spec, value, field_path)

        companion = schema.companion(spec)
        if ctx.track_inheritance and companion is not None:
            _assign(base, companion, not field_merged, _join(path, companion.name))

        if field_merged:
            merged = True

    return merged


def merge_into(
    base: Any,
    override: Any,
    *,
    policy: EmptinessPolicy,
    shallow: bool = False,
    track_inheritance: bool = False,
) -> bool:
    """
    Mescla `override` sobre `base`, mutando `base` in place.

    Args:
        base: Record destino (mutado).
        override: Record do mesmo tipo com os valores a aplicar.
        policy: Política de vazio que decide o que conta como ausente.
        shallow: Substitui campos inteiros em vez de recursar.
        track_inheritance: Preenche os marcadores `<campo>_inherited`.

    Returns:
        bool: True se algum campo foi sobrescrito pelo override.

    Raises:
        ValidationError: Se `base`/`override` não forem records do mesmo tipo.
        MergeError: Se um campo não puder ser atribuído. Campos mesclados
            antes da falha permanecem aplicados em `base`.
    """
    if not is_record(base) or not is_record(override):
        raise ValidationError(
            "received objects must be dataclass instances",
            details={"base_type": type(base).__name__, "override_type": type(override).__name__},
        )
    if type(base) is not type(override):
        raise ValidationError(
            "received objects must be the same type",
            details={"base_type": type(base).__name__, "override_type": type(override).__name__},
        )

    ctx = _MergeContext(policy=policy, shallow=shallow, track_inheritance=track_inheritance)
    return _merge_record(base, override, ctx, "")


def merge_records(
    base: T,
    override: T,
    *,
    allow_empty: bool = False,
    shallow: bool = False,
    track_inheritance: bool = False,
) -> Tuple[T, bool]:
    """Variante pura de `merge_into`: retorna (record mesclado, houve override).

    Nenhum dos inputs é mutado.
    """
    result = copy.deepcopy(base)
    overridden = merge_into(
        result,
        override,
        policy=EmptinessPolicy(allow_empty=allow_empty),
        shallow=shallow,
        track_inheritance=track_inheritance,
    )
    return result, overridden


__all__ = ["merge_into", "merge_records"]
