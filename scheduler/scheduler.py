"""
Scheduler de pasadas automáticas usando APScheduler.
Gestiona el ciclo de vida del job recurrente y evita pasadas superpuestas.

Estado explícito por instancia (sin globales): cada SchedulerController tiene
su propio AsyncIOScheduler y a lo sumo un job armado.
"""
import enum
import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from apscheduler.job import Job
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import Settings, settings as default_settings
from core.pipeline import AggregationPipeline, PassOutcome
from providers import build_providers
from storage import SnapshotStore

logger = logging.getLogger(__name__)

JOB_ID = "aggregation_pass"


class SchedulerState(str, enum.Enum):
    IDLE = "idle"
    RUNNING = "running"


class PassInProgressError(Exception):
    """Se pidió una pasada mientras otra sigue en curso."""


@dataclass
class StopOutcome:
    cleared: int

    @property
    def was_running(self) -> bool:
        return self.cleared > 0


@dataclass
class SchedulerStatus:
    running: bool
    live_handle_count: int
    in_flight: bool
    next_run_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "running": self.running,
            "live_handles": self.live_handle_count,
            "in_flight": self.in_flight,
            "next_run_at": self.next_run_at.isoformat() if self.next_run_at else None,
        }


class SchedulerController:
    """
    Máquina de estados IDLE --start--> RUNNING --stop--> IDLE.

    Aparte del estado hay un guard de pasada en curso: una pasada (manual o
    programada) que llega mientras otra corre se omite, no se encola.
    """

    def __init__(
        self,
        pipeline: AggregationPipeline,
        interval_seconds: Optional[int] = None,
        timezone: Optional[str] = None,
    ):
        self.pipeline = pipeline
        self.interval_seconds = interval_seconds or default_settings.SCAN_INTERVAL_SECONDS
        self._scheduler = AsyncIOScheduler(
            timezone=timezone or default_settings.SCHEDULER_TIMEZONE
        )
        self._job: Optional[Job] = None
        self._state = SchedulerState.IDLE
        self._pass_ids = itertools.count(1)
        self._active_pass: Optional[int] = None

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def in_flight(self) -> bool:
        return self._active_pass is not None

    # ─── Pasadas ──────────────────────────────────────────────────────────────

    async def run_pass(self, triggered_by: str = "manual") -> Optional[PassOutcome]:
        """
        Ejecuta una pasada si no hay otra en curso; si la hay retorna None.
        Los errores de persistencia se propagan al llamador.
        """
        if self._active_pass is not None:
            logger.warning(
                f"Pasada ({triggered_by}) omitida: la #{self._active_pass} sigue en curso"
            )
            return None

        token = next(self._pass_ids)
        self._active_pass = token
        try:
            logger.info(f"Pasada #{token} ({triggered_by}) iniciada")
            return await self.pipeline.run()
        finally:
            # Una pasada que sobrevivió a un stop() no libera el guard de otra más nueva
            if self._active_pass == token:
                self._active_pass = None

    async def _tick(self) -> None:
        """Job ejecutado por APScheduler. Nunca desarma el trigger."""
        try:
            outcome = await self.run_pass(triggered_by="scheduler")
            if outcome is not None:
                logger.info(
                    f"Pasada programada finalizada: {len(outcome.results)} resultados "
                    f"en {outcome.snapshot_id}"
                )
        except Exception as e:
            # run_pass ya liberó el guard en su finally
            logger.exception(f"Error en pasada programada: {e}")

    # ─── Ciclo de vida ────────────────────────────────────────────────────────

    async def start(self) -> PassOutcome:
        """
        (Re)arma el scheduler: pasada inmediata y luego una cada intervalo.
        Si ya estaba corriendo, primero desarma el job anterior.
        """
        if self.in_flight:
            raise PassInProgressError(
                f"La pasada #{self._active_pass} sigue en curso, reintentar luego"
            )

        if self._state == SchedulerState.RUNNING or self._job is not None:
            logger.info("Scheduler ya estaba corriendo, se re-arma")
            self.stop()

        outcome = await self.run_pass(triggered_by="start")
        if outcome is None:
            raise PassInProgressError("Otra pasada comenzó antes que la inicial")

        self._arm()
        return outcome

    def _arm(self) -> None:
        if not self._scheduler.running:
            self._scheduler.start()

        self._job = self._scheduler.add_job(
            self._tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Pasada periódica de agregación",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
        )
        self._state = SchedulerState.RUNNING
        logger.info(f"Scheduler iniciado: una pasada cada {self.interval_seconds}s")

    def stop(self) -> StopOutcome:
        """
        Idempotente. Desarma todos los jobs registrados y libera el guard.
        Una pasada ya en curso termina igual y escribe su snapshot.
        """
        cleared = len(self._scheduler.get_jobs())
        if cleared:
            self._scheduler.remove_all_jobs()

        self._job = None
        self._active_pass = None
        self._state = SchedulerState.IDLE

        if cleared:
            logger.info(f"Scheduler detenido ({cleared} job(s) desarmados)")
        else:
            logger.info("Stop pedido pero el scheduler no estaba corriendo")
        return StopOutcome(cleared=cleared)

    def shutdown(self) -> StopOutcome:
        """Stop + apagado de APScheduler. Para el cierre del proceso."""
        outcome = self.stop()
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        return outcome

    def status(self) -> SchedulerStatus:
        live = len(self._scheduler.get_jobs())
        running = (
            self._state == SchedulerState.RUNNING
            and self._job is not None
            and live > 0
        )
        return SchedulerStatus(
            running=running,
            live_handle_count=live,
            in_flight=self.in_flight,
            next_run_at=self._job.next_run_time if running else None,
        )


def create_controller(settings: Settings | None = None) -> SchedulerController:
    """Arma el grafo completo (proveedores → pipeline → controller) desde la config."""
    cfg = settings or default_settings
    store = SnapshotStore(cfg.SNAPSHOT_DIR, cfg.SNAPSHOT_PREFIX)
    pipeline = AggregationPipeline(build_providers(cfg), cfg.query_terms, store)
    return SchedulerController(
        pipeline,
        interval_seconds=cfg.SCAN_INTERVAL_SECONDS,
        timezone=cfg.SCHEDULER_TIMEZONE,
    )
