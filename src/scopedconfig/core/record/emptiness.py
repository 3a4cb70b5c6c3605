"""
Política de "vazio" usada pelo merge estrutural.

Um valor vazio no override significa "não sobrescrever": o valor da base é
mantido. Em mapas, um valor vazio funciona como tombstone e remove a chave.

Política (v1):
    - `None` é sempre vazio
    - com `allow_empty=False` também são vazios os valores zero do tipo:
      `False`, zero numérico (inclusive `Decimal`/`Fraction`), `timedelta(0)`,
      `""`/`b""`, coleções de tamanho zero, `datetime.min`/`date.min`/`time.min`,
      Enums cujo valor é zero e records cujos campos são todos zero
    - com `allow_empty=True` apenas `None` é vazio; `0`, `""` e `False`
      passam a ser overrides legítimos
"""

from __future__ import annotations

import numbers
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from .schema import describe, is_record


_SIZED_CONTAINERS = (list, tuple, set, frozenset, dict)


@dataclass(frozen=True)
class EmptinessPolicy:
    """Decide se um valor conta como ausente para fins de merge."""

    allow_empty: bool = False

    def is_empty(self, value: Any) -> bool:
        if value is None:
            return True
        if self.allow_empty:
            return False
        return is_zero(value)


def is_zero(value: Any) -> bool:
    """Compara estruturalmente `value` com o valor zero do seu tipo."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value is False
    if isinstance(value, Enum):
        return is_zero(value.value)
    # int, float, Decimal, Fraction, complex...
    if isinstance(value, numbers.Number):
        return value == 0
    if isinstance(value, timedelta):
        return value == timedelta(0)
    if isinstance(value, (str, bytes, bytearray)):
        return len(value) == 0
    if isinstance(value, _SIZED_CONTAINERS):
        return len(value) == 0
    # datetime é subclasse de date: testar primeiro
    if isinstance(value, datetime):
        return value.replace(tzinfo=None) == datetime.min
    if isinstance(value, date):
        return value == date.min
    if isinstance(value, time):
        return value.replace(tzinfo=None) == time.min
    if is_record(value):
        schema = describe(type(value))
        return all(is_zero(spec.get(value)) for spec in schema.fields)
    return False


__all__ = ["EmptinessPolicy", "is_zero"]
