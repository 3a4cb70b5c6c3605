"""Store de escopos em arquivo (v1).

Cada coleção é persistida em um arquivo próprio dentro de `root_dir`:

    <root_dir>/<coleção>.json   (format="json")
    <root_dir>/<coleção>.yaml   (format="yaml")

Conteúdo do arquivo:

    {"documents": {"<escopo>": {"value": {...}}, ...}}

Decisões (v1):
- JSON com chaves ordenadas e indentação, como o Manifest do projeto
- YAML via PyYAML (`safe_load`/`safe_dump`)
- Escrita atômica: arquivo temporário no mesmo diretório + `os.replace`
- Um lock re-entrante por store serializa as operações do processo

Limites explícitos:
- Não oferece atomicidade entre processos distintos
- Falhas de I/O e arquivos corrompidos são propagados como `StoreError`
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Union

import yaml  # PyYAML

from scopedconfig.core.errors import StoreError

from .collection import DocumentCollection, Documents


logger = logging.getLogger(__name__)

_SUFFIXES = {"json": ".json", "yaml": ".yaml"}


class _FileCollection(DocumentCollection):
    def __init__(self, *, name: str, lock: threading.RLock, store: "FileScopeStore"):
        super().__init__(name=name, lock=lock)
        self._store = store

    def _load_documents(self) -> Documents:
        return self._store._read(self.name)

    def _save_documents(self, documents: Documents) -> None:
        self._store._write(self.name, documents)


class FileScopeStore:
    """Store canônica (v1) em arquivos JSON ou YAML."""

    def __init__(self, *, root_dir: Union[str, Path], format: str = "json"):
        if format not in _SUFFIXES:
            raise ValueError(f"unsupported store format: {format!r}")
        self.root_dir = Path(root_dir)
        self.format = format
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def collection_path(self, name: str) -> Path:
        """Caminho determinístico do arquivo de uma coleção."""
        return self.root_dir / f"{name}{_SUFFIXES[self.format]}"

    @contextmanager
    def collection(self, name: str) -> Iterator[DocumentCollection]:
        handle = _FileCollection(name=name, lock=self._lock, store=self)
        try:
            yield handle
        finally:
            handle.close()

    # ------------------------------------------------------------------
    # Persist / Load
    # ------------------------------------------------------------------
    def _read(self, name: str) -> Documents:
        path = self.collection_path(name)
        if not path.exists():
            return {}
        try:
            text = path.read_text(encoding="utf-8")
            data = yaml.safe_load(text) if self.format == "yaml" else json.loads(text)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning("failed to read scope collection", extra={"collection": name, "path": str(path)})
            raise StoreError(
                f"failed to read collection file {path}: {e}",
                details={"collection": name, "path": str(path)},
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict) or not isinstance(data.get("documents") or {}, dict):
            raise StoreError(
                f"collection file {path} is malformed",
                details={"collection": name, "path": str(path)},
                hint="O arquivo deve conter um mapa 'documents'.",
            )
        return dict(data.get("documents") or {})

    def _serialize(self, documents: Documents) -> str:
        payload: Dict[str, Any] = {"documents": documents}
        if self.format == "yaml":
            return yaml.safe_dump(payload, sort_keys=True, allow_unicode=True)
        return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True)

    def _write(self, name: str, documents: Documents) -> None:
        path = self.collection_path(name)
        tmp_name = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", dir=str(path.parent))
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self._serialize(documents))
            os.replace(tmp_name, path)
        except (OSError, TypeError, yaml.YAMLError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            logger.warning("failed to write scope collection", extra={"collection": name, "path": str(path)})
            raise StoreError(
                f"failed to write collection file {path}: {e}",
                details={"collection": name, "path": str(path)},
            ) from e


__all__ = ["FileScopeStore"]
