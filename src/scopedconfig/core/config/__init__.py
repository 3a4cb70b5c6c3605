# src/scopedconfig/core/config/__init__.py
"""
Camada de settings do ScopedConfig.

Este pacote carrega e resolve os settings de cada instância do engine
(`allow_empty`, `shallow_merge`, `allowed_pools`) a partir de arquivos
YAML/JSON de defaults e overrides locais.

Responsabilidades do pacote:
    - Carregamento de arquivos de settings (defaults + overrides locais)
    - Resolução via deep-merge determinístico
    - Resolução por namespace (`defaults` + `namespaces.<ns>`)

Limites explícitos:
    - Não acessa o store
    - Não executa merge de records de configuração
"""

from .errors import (
    InvalidSettingsRootTypeError,
    SettingsError,
    SettingsNotFoundError,
    SettingsTypeConflictError,
    UnknownSettingsOptionError,
    UnsupportedSettingsFormatError,
)
from .loader import load_settings
from .merge import deep_merge
from .settings import COLLECTION_PREFIX, EngineSettings, collection_for, settings_for_namespace

__all__ = [
    "COLLECTION_PREFIX",
    "EngineSettings",
    "InvalidSettingsRootTypeError",
    "SettingsError",
    "SettingsNotFoundError",
    "SettingsTypeConflictError",
    "UnknownSettingsOptionError",
    "UnsupportedSettingsFormatError",
    "collection_for",
    "deep_merge",
    "load_settings",
    "settings_for_namespace",
]
