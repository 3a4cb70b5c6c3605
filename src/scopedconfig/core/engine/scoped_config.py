"""
Engine de configuração por escopo (default global + overrides por pool).

O engine orquestra leituras e escritas por escopo sobre um store de
documentos, usando o merge estrutural de `core.record`:

    consumidor → ScopedConfig → store (1 ou 2 documentos) → merge → resultado

Escopos:
    - `""` é o default (base) aplicado a todos os pools
    - qualquer outro id é a camada de override de um pool

Operações:
    - save / save_base / save_merge
    - load / load_base / load_with_base / load_pools / load_all
    - set_field / set_field_atomic / remove_field / remove

Concorrência:
    - Cada chamada abre e fecha o seu próprio handle de coleção
    - save, set_field, save_merge, remove e remove_field são last-writer-wins
    - save_merge faz read-modify-write sem guarda: duas chamadas concorrentes
      no mesmo escopo podem perder uma das atualizações
    - set_field_atomic é a única operação atômica (um único vencedor)

Erros:
    - ValidationError: valor não é record do tipo do engine
    - NotFoundError: absorvido em valor zero nas leituras e em remove_field;
      propagado em remove
    - StoreError / MergeError: sempre propagados, sem retry
"""

from __future__ import annotations

import copy
import logging
from contextlib import contextmanager
from typing import Any, Dict, Generic, Iterator, Mapping, Optional, Sequence, Type, TypeVar

from scopedconfig.core.config.settings import EngineSettings, settings_for_namespace
from scopedconfig.core.errors import NotFoundError, ValidationError
from scopedconfig.core.record import EmptinessPolicy, describe, is_record, merge_into
from scopedconfig.persistence.codec import PydanticRecordCodec, RecordCodec
from scopedconfig.persistence.store import (
    BASE_SCOPE,
    VALUE_FIELD,
    ConditionalResult,
    FieldFilter,
    ScopeCollection,
    ScopeStore,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScopedConfig(Generic[T]):
    """Engine canônico de configuração por escopo para um tipo de record."""

    def __init__(
        self,
        settings: EngineSettings,
        *,
        record_type: Type[T],
        store: ScopeStore,
        codec: Optional[RecordCodec] = None,
    ):
        self.schema = describe(record_type)
        self.schema.require_zero()
        self.settings = settings
        self.record_type = record_type
        self.store = store
        self.codec: RecordCodec = codec or PydanticRecordCodec()
        self._policy = EmptinessPolicy(allow_empty=settings.allow_empty)

    @classmethod
    def from_settings(
        cls,
        settings: Mapping[str, Any],
        namespace: str,
        *,
        record_type: Type[T],
        store: ScopeStore,
        codec: Optional[RecordCodec] = None,
    ) -> "ScopedConfig[T]":
        """Constrói o engine a partir de settings carregados por `load_settings`."""
        return cls(
            settings_for_namespace(settings, namespace),
            record_type=record_type,
            store=store,
            codec=codec,
        )

    @property
    def collection_name(self) -> str:
        return self.settings.collection_name

    def pool_allowed(self, scope: str) -> bool:
        return self.settings.pool_allowed(scope)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    @contextmanager
    def _collection(self) -> Iterator[ScopeCollection]:
        with self.store.collection(self.collection_name) as coll:
            yield coll

    def _extra(self, scope: str, **fields: Any) -> Dict[str, Any]:
        extra = {"collection": self.collection_name, "scope": scope}
        extra.update(fields)
        return extra

    def _require_record(self, value: Any, *, role: str = "value") -> None:
        if not is_record(value):
            raise ValidationError(
                "a dataclass instance is required as value",
                details={"role": role, "received": type(value).__name__},
            )
        if type(value) is not self.record_type:
            raise ValidationError(
                "received object must be the same type",
                details={
                    "role": role,
                    "expected": self.record_type.__name__,
                    "received": type(value).__name__,
                },
            )

    @staticmethod
    def _field_path(name: str) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("field name must be a non-empty string", details={"field": name})
        return f"{VALUE_FIELD}.{name.lower()}"

    def _find_or_zero(self, coll: ScopeCollection, scope: str) -> T:
        try:
            document = coll.find_by_id(scope)
        except NotFoundError:
            logger.debug("scope not stored, using zero value", extra=self._extra(scope))
            return self.schema.zero()
        return self.codec.decode(document.value, self.record_type)

    def _merge(self, base: T, override: T, *, track_inheritance: bool) -> bool:
        return merge_into(
            base,
            override,
            policy=self._policy,
            shallow=self.settings.shallow_merge,
            track_inheritance=track_inheritance,
        )

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------
    def save(self, scope: str, value: T) -> None:
        """Persiste `value` como está (sem merge) no escopo."""
        self._require_record(value)
        document = self.codec.encode(value)
        with self._collection() as coll:
            result = coll.upsert_by_id(scope, document)
        logger.debug("scope saved", extra=self._extra(scope, result=result.value))

    def save_base(self, value: T) -> None:
        self.save(BASE_SCOPE, value)

    def save_merge(self, scope: str, value: T) -> None:
        """
        Mescla `value` sobre o record atual do escopo e persiste o resultado.

        O merge segue o modo deep/shallow do engine e não rastreia herança.
        Não é seguro sob concorrência no mesmo escopo (read-modify-write).
        """
        self._require_record(value)
        with self._collection() as coll:
            previous = self._find_or_zero(coll, scope)
            self._merge(previous, value, track_inheritance=False)
            result = coll.upsert_by_id(scope, self.codec.encode(previous))
        logger.debug("scope merged and saved", extra=self._extra(scope, result=result.value))

    def set_field(self, scope: str, field_name: str, value: Any) -> None:
        """Grava um único campo (nome case-insensitive), criando o escopo se preciso."""
        path = self._field_path(field_name)
        encoded = self.codec.encode_value(value)
        with self._collection() as coll:
            coll.set_field_by_id(scope, path, encoded)
        logger.debug("field set", extra=self._extra(scope, field=path))

    def set_field_atomic(self, scope: str, field_name: str, value: Any) -> bool:
        """
        Grava o campo apenas se ele estiver ausente ou for `""` no escopo.

        Returns:
            bool: True se este chamador gravou o campo; False se o campo já
            estava ocupado (sem erro).
        """
        path = self._field_path(field_name)
        encoded = self.codec.encode_value(value)
        with self._collection() as coll:
            result = coll.conditional_upsert(scope, FieldFilter(path=path), encoded)
        applied = result is ConditionalResult.APPLIED
        if applied:
            logger.debug("field set atomically", extra=self._extra(scope, field=path))
        else:
            logger.debug("field already set, atomic write not applied", extra=self._extra(scope, field=path))
        return applied

    def remove_field(self, scope: str, field_name: str) -> None:
        """Remove um campo; escopo ou campo inexistente conta como sucesso."""
        path = self._field_path(field_name)
        with self._collection() as coll:
            try:
                coll.unset_field_by_id(scope, path)
            except NotFoundError:
                logger.debug("scope not stored, nothing to unset", extra=self._extra(scope, field=path))
                return
        logger.debug("field removed", extra=self._extra(scope, field=path))

    def remove(self, scope: str) -> None:
        """Remove o escopo inteiro. Escopo inexistente propaga `NotFoundError`."""
        with self._collection() as coll:
            coll.remove_by_id(scope)
        logger.debug("scope removed", extra=self._extra(scope))

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------
    def load(self, scope: str) -> T:
        """Resolve o escopo em duas camadas: default `""` + override do pool."""
        return self.load_with_base(scope)

    def load_base(self) -> T:
        return self.load_with_base(BASE_SCOPE)

    def load_with_base(self, scope: str, base: Optional[T] = None) -> T:
        """
        Resolve o escopo sobre uma base fornecida pelo chamador.

        Sem `base`, o default `""` é lido do store (ausente → valor zero).
        Com `base`, o default armazenado não é lido. Para `scope == ""` a base
        é retornada diretamente. Caso contrário o record do pool (ausente →
        valor zero) é mesclado sobre uma cópia da base com rastreamento de
        herança. O `base` do chamador nunca é mutado.
        """
        if base is not None:
            self._require_record(base, role="base")

        with self._collection() as coll:
            if base is None:
                base_value = self._find_or_zero(coll, BASE_SCOPE)
            else:
                base_value = copy.deepcopy(base)

            if scope == BASE_SCOPE:
                logger.debug("base loaded", extra=self._extra(scope))
                return base_value

            pool_value = self._find_or_zero(coll, scope)

        overridden = self._merge(base_value, pool_value, track_inheritance=True)
        logger.debug("scope loaded", extra=self._extra(scope, overridden=overridden))
        return base_value

    def load_pools(self, filter_scopes: Optional[Sequence[str]] = None) -> Dict[str, T]:
        """
        Resolve o default e cada pool de forma independente.

        Args:
            filter_scopes: Pools desejados; vazio/None → todos os pools
                armazenados.

        Returns:
            Dict[str, T]: `""` → default bruto, e `<pool>` → default + pool
            para cada pool armazenado (pools pedidos e inexistentes não
            aparecem).
        """
        with self._collection() as coll:
            base_value = self._find_or_zero(coll, BASE_SCOPE)
            documents = coll.find(list(filter_scopes) if filter_scopes else None)

        result: Dict[str, T] = {BASE_SCOPE: base_value}
        for document in documents:
            if document.id == BASE_SCOPE:
                continue
            merged = copy.deepcopy(base_value)
            pool_value = self.codec.decode(document.value, self.record_type)
            self._merge(merged, pool_value, track_inheritance=True)
            result[document.id] = merged

        logger.debug("pools loaded", extra=self._extra(BASE_SCOPE, pools=len(result) - 1))
        return result

    def load_all(self) -> Dict[str, T]:
        return self.load_pools(None)


def find_scoped_config(
    namespace: str,
    *,
    record_type: Type[T],
    store: ScopeStore,
    codec: Optional[RecordCodec] = None,
    allow_empty: bool = False,
    shallow_merge: bool = False,
    allowed_pools: Sequence[str] = (),
) -> ScopedConfig[T]:
    """Atalho: engine para o namespace `namespace` (coleção `scoped_<namespace>`)."""
    settings = EngineSettings.for_namespace(
        namespace,
        allow_empty=allow_empty,
        shallow_merge=shallow_merge,
        allowed_pools=allowed_pools,
    )
    return ScopedConfig(settings, record_type=record_type, store=store, codec=codec)


__all__ = ["ScopedConfig", "find_scoped_config"]
