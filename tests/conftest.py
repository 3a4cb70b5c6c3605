# tests/conftest.py
"""
Fixtures compartilhados para testes do ScopedConfig.

Este módulo define fixtures reutilizáveis que fornecem:
- conteúdo de arquivos de settings (defaults + overrides locais)
- stores de escopo isoladas (memória e arquivo)
- engines prontos para o record de autoscale usado nos testes

Decisões arquiteturais:
    - Fixtures são mantidas simples e explícitas
    - Cada teste recebe uma store nova (sem estado compartilhado)
    - Records de teste vivem em `tests/fixtures/records.py`

Invariantes:
    - Nenhuma fixture depende de variáveis de ambiente
    - Stores em arquivo usam apenas `tmp_path`

Limites explícitos:
    - Não substituir testes de integração com um banco real
"""

import pytest

from scopedconfig import FileScopeStore, MemoryScopeStore, find_scoped_config
from tests.fixtures.records import AutoScaleRule


# =====================================================
# Settings files
# =====================================================

@pytest.fixture
def settings_defaults_yaml() -> str:
    """
    YAML de settings padrão semelhante ao uso real do engine.

    Representa o conteúdo típico de um `scopedconfig.defaults.yaml`: flags
    globais em `defaults` e ajustes por namespace em `namespaces`.

    Returns:
        str: Conteúdo YAML dos settings padrão.
    """
    return """\
defaults:
  allow_empty: false
  shallow_merge: false
namespaces:
  autoscale:
    allowed_pools: [pool-a, pool-b]
  node-metadata:
    shallow_merge: true
"""


@pytest.fixture
def settings_local_yaml() -> str:
    """YAML de overrides locais (apenas as chaves alteradas)."""
    return """\
namespaces:
  autoscale:
    allow_empty: true
    allowed_pools: [pool-c]
"""


# =====================================================
# Stores + engine
# =====================================================

@pytest.fixture
def memory_store() -> MemoryScopeStore:
    return MemoryScopeStore()


@pytest.fixture(params=["json", "yaml"])
def file_store(request, tmp_path) -> FileScopeStore:
    """Store em arquivo, parametrizada pelos dois formatos suportados."""
    return FileScopeStore(root_dir=tmp_path / "scopes", format=request.param)


@pytest.fixture
def autoscale(memory_store):
    """Engine deep-merge (allow_empty=False) para `AutoScaleRule` no namespace `autoscale`."""
    return find_scoped_config("autoscale", record_type=AutoScaleRule, store=memory_store)
