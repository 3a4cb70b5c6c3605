"""
Engine de configuração por escopo.

Ponto de entrada para consumidores: `ScopedConfig` (instância por tipo de
record e namespace) e o atalho `find_scoped_config`.
"""

from .scoped_config import ScopedConfig, find_scoped_config

__all__ = ["ScopedConfig", "find_scoped_config"]
