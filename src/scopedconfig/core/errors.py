"""
ScopedConfig: Canonical Exceptions (v1)

Este módulo define a hierarquia de exceções tipadas do engine de configuração
por escopo e o payload canônico usado para expô-las a camadas externas
(ex.: a API HTTP construída sobre o engine).

Taxonomia:
- ValidationError: entrada não é um record ou tipos base/saída divergem
- NotFoundError: documento inexistente no store
- StoreError: falha de conexão/I-O do store (e dados ilegíveis, via CodecError)
- MergeError: um valor não pôde ser atribuído durante o merge estrutural

Regras:
- Exceções carregam apenas dados estruturados (serializáveis) em `details`.
- Esta camada não realiza retry nem fallback; o chamador decide.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Catálogo canônico de códigos de erro (v1)
# ---------------------------------------------------------------------------

SCOPED_CONFIG_VALIDATION = "SCOPED_CONFIG_VALIDATION"
SCOPED_CONFIG_NOT_FOUND = "SCOPED_CONFIG_NOT_FOUND"
SCOPED_CONFIG_STORE = "SCOPED_CONFIG_STORE"
SCOPED_CONFIG_CODEC = "SCOPED_CONFIG_CODEC"
SCOPED_CONFIG_MERGE = "SCOPED_CONFIG_MERGE"
SCOPED_CONFIG_INTERNAL = "SCOPED_CONFIG_INTERNAL"


@dataclass(eq=False)
class ScopedConfigError(Exception):
    """Base class para exceções do engine de configuração por escopo.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Não embedar stack trace em payloads de erro
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any] = field(default_factory=dict)
    hint: Optional[str] = None

    code = SCOPED_CONFIG_INTERNAL

    def __str__(self) -> str:
        return self.message


@dataclass(eq=False)
class ValidationError(ScopedConfigError):
    """Valor recebido não é um record válido para o engine."""

    code = SCOPED_CONFIG_VALIDATION


@dataclass(eq=False)
class NotFoundError(ScopedConfigError):
    """Documento (escopo) inexistente no store."""

    code = SCOPED_CONFIG_NOT_FOUND


@dataclass(eq=False)
class StoreError(ScopedConfigError):
    """Falha de conexão ou I/O no store persistente."""

    code = SCOPED_CONFIG_STORE


@dataclass(eq=False)
class CodecError(StoreError):
    """Documento persistido não pôde ser convertido de/para o record."""

    code = SCOPED_CONFIG_CODEC


@dataclass(eq=False)
class MergeError(ScopedConfigError):
    """Um campo não pôde ser atribuído durante o merge estrutural.

    `details["path"]` aponta o campo (caminho pontuado) que falhou. Campos
    mesclados antes da falha permanecem aplicados no destino.
    """

    code = SCOPED_CONFIG_MERGE


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ErrorPayload:
    """
    Payload serializável de erro do engine.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def exception_to_payload(exc: BaseException) -> ErrorPayload:
    """Converte exceções em ErrorPayload (serializável, acionável).

    Regras:
    - ScopedConfigError: já vem com message/details/hint e código estável.
    - Outras exceções: encapsular como SCOPED_CONFIG_INTERNAL sem expor stack trace.
    """
    if isinstance(exc, ScopedConfigError):
        return ErrorPayload(
            type=exc.code,
            message=exc.message or "Erro no engine de configuração",
            details=dict(exc.details or {}),
            hint=exc.hint,
        )

    return ErrorPayload(
        type=SCOPED_CONFIG_INTERNAL,
        message=str(exc) or "Erro inesperado no engine de configuração",
        details={"exception_class": exc.__class__.__name__},
        hint="Verifique o log técnico e a configuração do store",
    )


__all__ = [
    "ScopedConfigError",
    "ValidationError",
    "NotFoundError",
    "StoreError",
    "CodecError",
    "MergeError",
    "ErrorPayload",
    "exception_to_payload",
    "SCOPED_CONFIG_VALIDATION",
    "SCOPED_CONFIG_NOT_FOUND",
    "SCOPED_CONFIG_STORE",
    "SCOPED_CONFIG_CODEC",
    "SCOPED_CONFIG_MERGE",
    "SCOPED_CONFIG_INTERNAL",
]
