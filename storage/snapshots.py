"""
Persistencia de snapshots: un archivo JSON por pasada.

Nombre: <prefijo><epoch en ms>.json. Todos los sellos tienen la misma cantidad
de dígitos, así que el orden lexicográfico de nombres es el cronológico y no
hace falta un índice.
"""
import asyncio
import json
import logging
import os
import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from core.normalizer import NormalizedResult

logger = logging.getLogger(__name__)


class SnapshotStorageError(Exception):
    """Fallo de E/S al escribir o leer un snapshot."""


class SnapshotNotFoundError(Exception):
    """Todavía no se escribió ningún snapshot."""


@dataclass
class Snapshot:
    id: str
    created_at: datetime
    results: list[NormalizedResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "created_at": self.created_at.isoformat(),
            "results": [r.to_dict() for r in self.results],
        }


class SnapshotStore:
    """
    Escribe y localiza snapshots en un directorio plano.
    La E/S de disco corre en threads para no bloquear el event loop.
    """

    def __init__(self, directory: Path | str = ".", prefix: str = "auto_results_"):
        self.directory = Path(directory)
        self.prefix = prefix
        self._pattern = re.compile(rf"^{re.escape(prefix)}(\d+)\.json$")
        self._last_stamp = 0

    # ─── Escritura ────────────────────────────────────────────────────────────

    async def persist(self, results: list[NormalizedResult]) -> str:
        """Serializa el ResultSet en un archivo nuevo y retorna su nombre."""
        stamp = self._next_stamp()
        snapshot_id = f"{self.prefix}{stamp}.json"
        payload = json.dumps(
            [r.to_dict() for r in results], indent=2, ensure_ascii=False
        )
        try:
            await asyncio.to_thread(self._write, snapshot_id, payload)
        except OSError as e:
            raise SnapshotStorageError(f"No se pudo escribir {snapshot_id}: {e}") from e

        logger.info(f"Guardados {len(results)} resultados en {snapshot_id}")
        return snapshot_id

    def _next_stamp(self) -> int:
        # Dos pasadas en el mismo milisegundo no deben pisarse
        stamp = max(time.time_ns() // 1_000_000, self._last_stamp + 1)
        self._last_stamp = stamp
        return stamp

    def _write(self, snapshot_id: str, payload: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        final = self.directory / snapshot_id
        tmp = self.directory / f".{snapshot_id}.tmp"
        try:
            with open(tmp, "x", encoding="utf-8") as fh:
                fh.write(payload)
            # Falla si ya existe un snapshot con ese nombre en lugar de pisarlo
            os.link(tmp, final)
        finally:
            tmp.unlink(missing_ok=True)

    # ─── Lectura ──────────────────────────────────────────────────────────────

    async def list_ids(self) -> list[str]:
        """Nombres de snapshots, del más nuevo al más viejo."""
        try:
            names = await asyncio.to_thread(self._list_names)
        except OSError as e:
            raise SnapshotStorageError(f"No se pudo listar {self.directory}: {e}") from e
        return sorted(names, reverse=True)

    async def latest_raw(self) -> tuple[str, bytes]:
        """(nombre, bytes) del snapshot más reciente, tal cual está en disco."""
        ids = await self.list_ids()
        if not ids:
            raise SnapshotNotFoundError("No hay snapshots todavía")

        snapshot_id = ids[0]
        try:
            data = await asyncio.to_thread((self.directory / snapshot_id).read_bytes)
        except OSError as e:
            raise SnapshotStorageError(f"No se pudo leer {snapshot_id}: {e}") from e
        return snapshot_id, data

    async def latest(self) -> Snapshot:
        snapshot_id, data = await self.latest_raw()
        try:
            records = json.loads(data.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as e:
            raise SnapshotStorageError(f"Snapshot corrupto {snapshot_id}: {e}") from e
        if not isinstance(records, list):
            raise SnapshotStorageError(f"Snapshot corrupto {snapshot_id}: se esperaba una lista")

        return Snapshot(
            id=snapshot_id,
            created_at=self.created_at(snapshot_id),
            results=[
                NormalizedResult(title=str(r.get("title", "")), link=str(r.get("link", "")))
                for r in records
                if isinstance(r, dict)
            ],
        )

    def created_at(self, snapshot_id: str) -> datetime:
        match = self._pattern.match(snapshot_id)
        if not match:
            raise ValueError(f"'{snapshot_id}' no es un nombre de snapshot")
        return datetime.fromtimestamp(int(match.group(1)) / 1000, tz=timezone.utc)

    def _list_names(self) -> list[str]:
        if not self.directory.exists():
            return []
        return [
            entry.name
            for entry in self.directory.iterdir()
            if entry.is_file() and self._pattern.match(entry.name)
        ]
