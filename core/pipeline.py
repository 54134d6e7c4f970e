"""
Pipeline de agregación: una pasada completa.

Diseño de concurrencia:
- Todos los proveedores corren a la vez sobre el mismo event loop.
- Cada proveedor aísla sus propios fallos; la pasada sigue con lo que haya.
"""
import asyncio
import enum
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timezone

from providers import BaseProvider, ProviderResult, ProviderStatus
from storage import SnapshotStore
from .deduplicator import deduplicate
from .matcher import TermMatcher
from .normalizer import NormalizedResult, normalize

logger = logging.getLogger(__name__)


class PassStatus(str, enum.Enum):
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class PassOutcome:
    results: list[NormalizedResult]
    snapshot_id: str
    providers: list[ProviderResult] = field(default_factory=list)
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def status(self) -> PassStatus:
        """Procedencia de los resultados. Ningún valor implica error."""
        attempted = [p for p in self.providers if p.status != ProviderStatus.SKIPPED]
        failures = sum(1 for p in attempted if p.degraded)
        if attempted and failures == len(attempted):
            return PassStatus.FAILED
        if failures:
            return PassStatus.PARTIAL
        return PassStatus.SUCCESS

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.finished_at:
            return (self.finished_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "filename": self.snapshot_id,
            "results": [r.to_dict() for r in self.results],
            "providers": [p.to_dict() for p in self.providers],
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


class AggregationPipeline:
    """
    Coordina una pasada:
    1. Consulta todos los proveedores en paralelo con la misma query
    2. Concatena en el orden fijo de proveedores
    3. Normaliza, deduplica por link y filtra por términos
    4. Persiste el snapshot
    """

    def __init__(
        self,
        providers: Sequence[BaseProvider],
        terms: Sequence[str],
        store: SnapshotStore,
    ):
        self.providers = list(providers)
        self.terms = tuple(terms)
        self.store = store
        self.matcher = TermMatcher(self.terms)

    @property
    def query(self) -> str:
        return " ".join(self.terms)

    async def run(self) -> PassOutcome:
        """Ejecuta una pasada. Solo propaga errores de persistencia."""
        started_at = datetime.now(timezone.utc)
        query = self.query
        logger.info(f"Pasada iniciada: '{query}' en {len(self.providers)} proveedores")

        reports = await self._fan_out(query)

        raw = [item for report in reports for item in report.items]
        unique = deduplicate(normalize(item) for item in raw)
        filtered = self.matcher.filter(unique)

        snapshot_id = await self.store.persist(filtered)

        outcome = PassOutcome(
            results=filtered,
            snapshot_id=snapshot_id,
            providers=reports,
            started_at=started_at,
            finished_at=datetime.now(timezone.utc),
        )
        logger.info(
            f"Pasada finalizada ({outcome.status.value}): "
            f"{len(raw)} crudos, {len(unique)} únicos, {len(filtered)} filtrados "
            f"en {outcome.duration_seconds:.1f}s"
        )
        return outcome

    async def _fan_out(self, query: str) -> list[ProviderResult]:
        results = await asyncio.gather(
            *(provider.search(query) for provider in self.providers),
            return_exceptions=True,
        )

        reports: list[ProviderResult] = []
        for provider, result in zip(self.providers, results):
            if isinstance(result, ProviderResult):
                reports.append(result)
                continue
            # Un proveedor que rompe el contrato y lanza igual no corta la pasada
            if isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            logger.error(f"Proveedor {provider.name} lanzó una excepción: {result!r}")
            reports.append(
                ProviderResult(
                    provider.name,
                    status=ProviderStatus.DEGRADED,
                    reason=str(result)[:200] or result.__class__.__name__,
                )
            )
        return reports
