# src/scopedconfig/core/config/errors.py
"""
Exceções canônicas da camada de settings do ScopedConfig.

Este módulo define a hierarquia de exceções utilizadas durante o
carregamento e a resolução dos arquivos de settings do engine
(flags `allow_empty`, `shallow_merge` e `allowed_pools` por namespace).

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais são tratados como falhas fatais
    - Mensagens de erro são claras e direcionadas ao operador

Invariantes:
    - Todas as exceções de settings herdam de `SettingsError`
    - Nenhuma exceção aqui representa falha do store ou do merge de records

Limites explícitos:
    - Não realiza fallback ou recovery
    - Não depende do engine nem do store
"""

from typing import Optional


class SettingsError(Exception):
    """
    Exceção base para erros relacionados aos settings do engine.

    Esta hierarquia permite:
        - captura genérica de erros de settings
        - distinção clara entre falhas de settings e falhas de operação

    Atributos:
        key_path: Caminho pontilhado da chave problemática
            (ex.: `namespaces.autoscale.allow_empty`), quando conhecido.
        source: Papel do arquivo de origem (`defaults` ou `local`), quando
            conhecido.
    """

    def __init__(self, message: str, *, key_path: Optional[str] = None, source: Optional[str] = None):
        super().__init__(message)
        self.key_path = key_path
        self.source = source


class SettingsNotFoundError(SettingsError):
    """
    Exceção levantada quando o arquivo de settings base (defaults)
    não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - O arquivo de defaults é obrigatório
        - O arquivo local é opcional e sua ausência não é erro
    """


class UnsupportedSettingsFormatError(SettingsError):
    """
    Exceção levantada quando o formato do arquivo de settings
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidSettingsRootTypeError(SettingsError):
    """
    Exceção levantada quando o conteúdo raiz (ou um bloco obrigatório)
    dos settings não é um dicionário (`dict`).
    """


class SettingsTypeConflictError(SettingsError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    dos arquivos de settings, ou quando uma opção tem tipo inválido.

    Exemplo de conflito:
        - base:     {"defaults": {"allow_empty": false}}
        - override: {"defaults": "strict"}

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class UnknownSettingsOptionError(SettingsError):
    """
    Exceção levantada quando um bloco de settings declara uma opção
    desconhecida pelo engine.

    Opções válidas (v1): `allow_empty`, `shallow_merge`, `allowed_pools`.
    """
