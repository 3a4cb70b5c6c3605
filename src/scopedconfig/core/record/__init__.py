"""
Camada de records do ScopedConfig.

Responsabilidades do pacote:
    - Descritores de campo por tipo de record (`schema`)
    - Política de vazio usada no merge (`emptiness`)
    - Merge estrutural com tombstones e marcadores de herança (`merge`)

Este pacote não acessa o store; é puramente funcional sobre records.
"""

from .emptiness import EmptinessPolicy, is_zero
from .merge import merge_into, merge_records
from .schema import FieldSpec, RecordSchema, describe, inherited_flag, is_record, is_record_type

__all__ = [
    "EmptinessPolicy",
    "FieldSpec",
    "RecordSchema",
    "describe",
    "inherited_flag",
    "is_record",
    "is_record_type",
    "is_zero",
    "merge_into",
    "merge_records",
]
