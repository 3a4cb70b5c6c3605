# src/scopedconfig/core/config/loader.py
"""
Leitura dos arquivos de settings do engine.

Duas camadas, cada uma identificada pelo seu papel nas mensagens de erro:
    - `defaults`: obrigatória
    - `local`: opcional; quando existe, é sobreposta aos defaults

Formato esperado (YAML ou JSON):

    defaults:
      allow_empty: false
      shallow_merge: false
      allowed_pools: []
    namespaces:
      autoscale:
        shallow_merge: true

Apenas as seções `defaults` e `namespaces` são aceitas no nível raiz; uma
seção desconhecida (ex.: `namespace:` com erro de digitação) é rejeitada em
vez de ser ignorada silenciosamente.

Limites explícitos:
    - Não valida as opções de cada namespace (ver `settings_for_namespace`)
    - Não constrói engines nem acessa o store
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml  # PyYAML

from .errors import (
    InvalidSettingsRootTypeError,
    SettingsNotFoundError,
    UnknownSettingsOptionError,
    UnsupportedSettingsFormatError,
)
from .merge import deep_merge


logger = logging.getLogger(__name__)

SECTIONS = ("defaults", "namespaces")

_PARSERS = {
    ".yaml": yaml.safe_load,
    ".yml": yaml.safe_load,
    ".json": json.load,
}


def _read_layer(path: Path, role: str) -> Dict[str, Any]:
    """
    Lê uma camada de settings e valida as seções do nível raiz.

    Arquivo vazio (ou `null`) equivale a uma camada sem seções.
    """
    if not path.is_file():
        raise SettingsNotFoundError(
            f"Arquivo de settings '{role}' não encontrado: {path}",
            source=role,
        )

    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise UnsupportedSettingsFormatError(
            f"Arquivo de settings '{role}' com extensão '{path.suffix}' não suportada "
            f"(use {', '.join(sorted(_PARSERS))})",
            source=role,
        )

    with path.open("r", encoding="utf-8") as f:
        data = parser(f)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidSettingsRootTypeError(
            f"Arquivo de settings '{role}' ({path.name}) deve conter um mapeamento, "
            f"recebido: {type(data).__name__}",
            source=role,
        )

    unknown = sorted(str(k) for k in data if k not in SECTIONS)
    if unknown:
        raise UnknownSettingsOptionError(
            f"Seções desconhecidas no arquivo de settings '{role}': {unknown} "
            f"(válidas: {list(SECTIONS)})",
            key_path=unknown[0],
            source=role,
        )

    logger.debug("settings layer loaded", extra={"settings_source": role, "settings_path": str(path)})
    return data


def load_settings(
    *,
    defaults_path: str,
    local_path: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Carrega os defaults e, se existir, sobrepõe o arquivo local.

    Args:
        defaults_path (str): Arquivo de defaults (obrigatório).
        local_path (Optional[str]): Arquivo local; ausente no disco → ignorado.

    Returns:
        Dict[str, Any]: Settings resolvidos, com no máximo as seções
        `defaults` e `namespaces`.

    Raises:
        SettingsNotFoundError: Arquivo de defaults inexistente.
        UnsupportedSettingsFormatError: Extensão fora de YAML/JSON.
        InvalidSettingsRootTypeError: Conteúdo raiz não é um mapeamento.
        UnknownSettingsOptionError: Seção raiz desconhecida.
        SettingsTypeConflictError: Chave do arquivo local com tipo diferente
            do arquivo de defaults (a mensagem traz o caminho completo).
    """
    effective = _read_layer(Path(defaults_path), "defaults")

    if local_path is None:
        return effective

    local_file = Path(local_path)
    if not local_file.exists():
        logger.debug("local settings absent, using defaults only", extra={"settings_path": str(local_file)})
        return effective

    return deep_merge(effective, _read_layer(local_file, "local"), source="local")


__all__ = ["SECTIONS", "load_settings"]
