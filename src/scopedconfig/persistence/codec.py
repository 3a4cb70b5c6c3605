"""
Codec de serialização de records.

O store guarda documentos de dados simples (compatíveis com JSON); o codec
converte records (dataclasses) de/para essa forma. O consumidor pode trocar o
codec por outro que satisfaça o protocolo `RecordCodec`.

Decisões (v1):
- Codec default baseado em `pydantic.TypeAdapter` em modo JSON: records
  aninhados, Optional, Enum e datetime fazem round-trip sem código manual
- Chaves ausentes no documento assumem o default do campo
- Chaves desconhecidas no documento são ignoradas
- Falhas de conversão viram `CodecError` (família `StoreError`)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict, Protocol, Type, TypeVar, runtime_checkable

import pydantic
from pydantic import TypeAdapter
from pydantic_core import PydanticSerializationError, to_jsonable_python

from scopedconfig.core.errors import CodecError


T = TypeVar("T")


@runtime_checkable
class RecordCodec(Protocol):
    def encode(self, record: Any) -> Dict[str, Any]:
        ...

    def decode(self, data: Dict[str, Any], record_type: Type[T]) -> T:
        ...

    def encode_value(self, value: Any) -> Any:
        ...


@lru_cache(maxsize=None)
def _adapter(record_type: type) -> TypeAdapter:
    return TypeAdapter(record_type)


class PydanticRecordCodec:
    """Codec default: dataclass ↔ dict JSON-compatível via pydantic."""

    def encode(self, record: Any) -> Dict[str, Any]:
        try:
            data = _adapter(type(record)).dump_python(record, mode="json")
        except (PydanticSerializationError, pydantic.PydanticSchemaGenerationError) as e:
            raise CodecError(
                f"failed to encode {type(record).__name__}: {e}",
                details={"record_type": type(record).__name__},
            ) from e
        if not isinstance(data, dict):
            raise CodecError(
                f"{type(record).__name__} did not encode to a mapping",
                details={"record_type": type(record).__name__},
            )
        return data

    def decode(self, data: Dict[str, Any], record_type: Type[T]) -> T:
        try:
            return _adapter(record_type).validate_python(data or {})
        except pydantic.ValidationError as e:
            raise CodecError(
                f"stored document is not a valid {record_type.__name__}",
                details={"record_type": record_type.__name__, "error_count": e.error_count()},
                hint="Verifique valores gravados via set_field para este escopo.",
            ) from e
        except pydantic.PydanticSchemaGenerationError as e:
            raise CodecError(
                f"cannot build a codec for {record_type.__name__}: {e}",
                details={"record_type": record_type.__name__},
            ) from e

    def encode_value(self, value: Any) -> Any:
        """Converte um valor avulso (set_field) para dados simples."""
        try:
            return to_jsonable_python(value)
        except PydanticSerializationError as e:
            raise CodecError(
                f"failed to encode value of type {type(value).__name__}",
                details={"value_type": type(value).__name__},
            ) from e


__all__ = ["PydanticRecordCodec", "RecordCodec"]
