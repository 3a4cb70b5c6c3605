"""
Descritores de campo dos records de configuração.

Um *record* é uma dataclass da biblioteca padrão definida pelo consumidor
(ex.: regras de autoscale, mapas de ambiente de agentes). Este módulo
materializa, uma única vez por tipo, a lista de descritores de campo que o
merge estrutural percorre, evitando inspeção ad hoc durante o merge.

Cada descritor (`FieldSpec`) declara:
    - o nome do campo e seu acesso (get/set)
    - se o campo é um marcador de herança (`<campo>_inherited`)
    - o nome do marcador de herança associado, quando existir

A associação campo ↔ marcador é **explícita**: o marcador declara a qual
campo pertence via `inherited_flag("campo")`, e o vínculo fica registrado
no metadata do campo da dataclass. Nenhuma associação é inferida por nome.

Invariantes:
    - Apenas o tipo raiz do engine precisa de valor zero (default em todo
      campo init); records aninhados são sempre construídos pelo chamador
    - Marcadores de herança são sempre do tipo `bool`
    - Cada campo possui no máximo um marcador associado

Limites explícitos:
    - Não executa merge
    - Não serializa records
    - Não valida semântica de domínio dos valores
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Tuple, Type

from ..errors import ValidationError


INHERITED_OF = "scopedconfig.inherited_of"


def inherited_flag(of: str, *, default: bool = False) -> Any:
    """Declara um marcador de herança vinculado ao campo `of`.

    Uso::

        @dataclass
        class AgentConfig:
            image: str = ""
            image_inherited: bool = inherited_flag("image")

    O marcador é preenchido pelo engine apenas nas leituras em duas camadas
    (default → pool): `True` quando o valor final veio da base, `False`
    quando o pool o sobrescreveu.
    """
    return dataclasses.field(default=default, metadata={INHERITED_OF: of})


@dataclass(frozen=True)
class FieldSpec:
    """Descritor imutável de um campo de record."""

    name: str
    inherited_by: Optional[str] = None
    marker: bool = False
    has_default: bool = True

    @property
    def private(self) -> bool:
        return self.name.startswith("_")

    def get(self, record: Any) -> Any:
        return getattr(record, self.name)

    def set(self, record: Any, value: Any) -> None:
        setattr(record, self.name, value)


@dataclass(frozen=True)
class RecordSchema:
    """Lista ordenada de descritores de um tipo de record."""

    record_type: type
    fields: Tuple[FieldSpec, ...]

    def mergeable(self) -> Tuple[FieldSpec, ...]:
        """Campos percorridos pelo merge: públicos e que não são marcadores."""
        return tuple(f for f in self.fields if not f.marker and not f.private)

    def field(self, name: str) -> FieldSpec:
        for spec in self.fields:
            if spec.name == name:
                return spec
        raise KeyError(name)

    def companion(self, spec: FieldSpec) -> Optional[FieldSpec]:
        if spec.inherited_by is None:
            return None
        return self.field(spec.inherited_by)

    def require_zero(self) -> None:
        """Garante que o tipo pode ser instanciado sem argumentos."""
        missing = [f.name for f in self.fields if not f.has_default]
        if missing:
            raise ValidationError(
                f"field '{missing[0]}' of {self.record_type.__name__} has no default value",
                details={"record_type": self.record_type.__name__, "field": missing[0], "fields": missing},
                hint="Declare um default para todos os campos do record.",
            )

    def zero(self) -> Any:
        """Nova instância com todos os campos no valor default."""
        self.require_zero()
        return self.record_type()


def is_record(value: Any) -> bool:
    """Retorna True para instâncias de dataclass (não para a classe em si)."""
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def is_record_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _has_default(f: "dataclasses.Field[Any]") -> bool:
    if not f.init:
        return True
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def _is_bool_annotation(annotation: Any) -> bool:
    return annotation is bool or annotation == "bool"


@lru_cache(maxsize=None)
def describe(record_type: Type[Any]) -> RecordSchema:
    """
    Constrói (e memoriza) o `RecordSchema` de um tipo de record.

    Decisões arquiteturais:
        - O record deve ser uma dataclass da biblioteca padrão
        - Defaults não são exigidos aqui (ver `RecordSchema.require_zero`)
        - Vínculos de herança são lidos do metadata (`inherited_flag`)

    Raises:
        ValidationError: tipo não é dataclass, vínculo de herança para campo
            inexistente ou marcador que não é `bool`.
    """
    if not is_record_type(record_type):
        raise ValidationError(
            "a dataclass type is required as value",
            details={"received": getattr(record_type, "__name__", repr(record_type))},
        )

    dc_fields = dataclasses.fields(record_type)
    names = {f.name for f in dc_fields}

    links: Dict[str, str] = {}
    for f in dc_fields:
        target = f.metadata.get(INHERITED_OF)
        if target is None:
            continue
        if target not in names:
            raise ValidationError(
                f"inherited flag '{f.name}' points to unknown field '{target}'",
                details={"record_type": record_type.__name__, "field": f.name, "target": target},
            )
        if not _is_bool_annotation(f.type):
            raise ValidationError(
                f"inherited flag '{f.name}' must be declared as bool",
                details={"record_type": record_type.__name__, "field": f.name},
            )
        if target in links:
            raise ValidationError(
                f"field '{target}' already has inherited flag '{links[target]}'",
                details={"record_type": record_type.__name__, "field": target},
            )
        links[target] = f.name

    specs = tuple(
        FieldSpec(
            name=f.name,
            inherited_by=links.get(f.name),
            marker=INHERITED_OF in f.metadata,
            has_default=_has_default(f),
        )
        for f in dc_fields
    )
    return RecordSchema(record_type=record_type, fields=specs)


__all__ = [
    "INHERITED_OF",
    "FieldSpec",
    "RecordSchema",
    "describe",
    "inherited_flag",
    "is_record",
    "is_record_type",
]
