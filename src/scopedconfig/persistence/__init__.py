"""
Persistência do ScopedConfig.

Responsabilidades do pacote:
    - Contrato do store de escopos (`store`)
    - Stores em memória e em arquivo (`memory_store`, `file_store`)
    - Codec de records para documentos (`codec`)
"""

from .codec import PydanticRecordCodec, RecordCodec
from .file_store import FileScopeStore
from .memory_store import MemoryScopeStore
from .store import (
    BASE_SCOPE,
    ConditionalResult,
    FieldFilter,
    ScopeCollection,
    ScopeDocument,
    ScopeStore,
    UpsertResult,
)

__all__ = [
    "BASE_SCOPE",
    "ConditionalResult",
    "FieldFilter",
    "FileScopeStore",
    "MemoryScopeStore",
    "PydanticRecordCodec",
    "RecordCodec",
    "ScopeCollection",
    "ScopeDocument",
    "ScopeStore",
    "UpsertResult",
]
