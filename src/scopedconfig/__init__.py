"""
ScopedConfig: configuração hierárquica por pool.

Uma configuração default global (escopo `""`) é sobreposta, campo a campo,
pela configuração de cada pool. Campos vazios no pool herdam o default;
marcadores `<campo>_inherited` indicam de onde veio cada valor final.

Uso típico::

    from scopedconfig import MemoryScopeStore, find_scoped_config

    cfg = find_scoped_config("autoscale", record_type=AutoScaleRule, store=MemoryScopeStore())
    cfg.save_base(AutoScaleRule(max_units=10))
    cfg.set_field("pool-a", "max_units", 20)
    rule = cfg.load("pool-a")
"""

from scopedconfig.core.config import load_settings
from scopedconfig.core.engine import ScopedConfig, find_scoped_config
from scopedconfig.core.errors import (
    CodecError,
    MergeError,
    NotFoundError,
    ScopedConfigError,
    StoreError,
    ValidationError,
)
from scopedconfig.core.record import EmptinessPolicy, inherited_flag, merge_into, merge_records
from scopedconfig.persistence import BASE_SCOPE, FileScopeStore, MemoryScopeStore, PydanticRecordCodec

__all__ = [
    "BASE_SCOPE",
    "CodecError",
    "EmptinessPolicy",
    "FileScopeStore",
    "MemoryScopeStore",
    "MergeError",
    "NotFoundError",
    "PydanticRecordCodec",
    "ScopedConfig",
    "ScopedConfigError",
    "StoreError",
    "ValidationError",
    "find_scoped_config",
    "inherited_flag",
    "load_settings",
    "merge_into",
    "merge_records",
]
