"""
Deduplicación de resultados por link.
La misma URL suele venir de más de un proveedor en la misma pasada.
"""
import logging
from collections.abc import Iterable

from .normalizer import NormalizedResult

logger = logging.getLogger(__name__)


class Deduplicator:
    """
    Conserva la primera aparición de cada link no vacío, en orden de llegada.
    Los registros sin link se descartan: no hay clave con qué compararlos.
    """

    def __init__(self):
        self._seen: set[str] = set()

    def is_duplicate(self, result: NormalizedResult) -> bool:
        return result.link in self._seen

    def mark_seen(self, result: NormalizedResult) -> None:
        self._seen.add(result.link)

    def unique(self, results: Iterable[NormalizedResult]) -> list[NormalizedResult]:
        kept: list[NormalizedResult] = []
        dropped_empty = 0
        for result in results:
            if not result.link:
                dropped_empty += 1
                continue
            if self.is_duplicate(result):
                continue
            self.mark_seen(result)
            kept.append(result)

        if dropped_empty:
            logger.debug(f"Deduplicación: {dropped_empty} registros sin link descartados")
        return kept


def deduplicate(results: Iterable[NormalizedResult]) -> list[NormalizedResult]:
    """Atajo para una pasada: cada llamada usa su propio set de links vistos."""
    return Deduplicator().unique(results)
