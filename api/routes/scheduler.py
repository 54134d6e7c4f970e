"""
Rutas del scheduler y de snapshots.
Control del ciclo de vida y lectura de snapshots; start es idempotente (re-arma).
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from scheduler import PassInProgressError, SchedulerController
from storage import SnapshotNotFoundError, SnapshotStorageError
from ..deps import ControllerDep, require_api_secret

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["scheduler"],
    dependencies=[Depends(require_api_secret)],
)


@router.post("/start-scheduler")
async def start_scheduler(controller: SchedulerController = ControllerDep):
    """
    Corre una pasada inmediata y arma la búsqueda periódica.
    Además del 500 por fallas al escribir el snapshot, el único otro error es
    409 cuando ya hay una pasada en curso.
    """
    try:
        outcome = await controller.start()
    except PassInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except SnapshotStorageError as e:
        logger.error(f"Start falló al persistir: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return {"message": "Scheduler started", **outcome.to_dict()}


@router.post("/stop-scheduler")
async def stop_scheduler(controller: SchedulerController = ControllerDep):
    outcome = controller.stop()
    if not outcome.was_running:
        return JSONResponse(status_code=400, content={"message": "Scheduler not running"})
    return {"message": "Scheduler stopped", "cleared": outcome.cleared}


@router.get("/scheduler-status")
async def scheduler_status(controller: SchedulerController = ControllerDep):
    return controller.status().to_dict()


@router.get("/latest-results")
async def latest_results(controller: SchedulerController = ControllerDep):
    """Resultados del snapshot más reciente."""
    try:
        snapshot = await controller.pipeline.store.latest()
    except SnapshotNotFoundError:
        return JSONResponse(status_code=404, content={"message": "No results found"})
    except SnapshotStorageError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return [r.to_dict() for r in snapshot.results]


@router.get("/download-latest")
async def download_latest(controller: SchedulerController = ControllerDep):
    """El snapshot más reciente como archivo adjunto."""
    try:
        filename, data = await controller.pipeline.store.latest_raw()
    except SnapshotNotFoundError:
        return JSONResponse(
            status_code=404, content={"message": "No results found to download"}
        )
    except SnapshotStorageError as e:
        logger.error(f"Error enviando snapshot: {e}")
        raise HTTPException(status_code=500, detail="Error downloading the file")

    return Response(
        content=data,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
