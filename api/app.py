"""
Aplicación FastAPI principal.
Expone el control del scheduler y la lectura de snapshots.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import settings
from scheduler import SchedulerController, create_controller
from .routes import scheduler as scheduler_routes

logger = logging.getLogger(__name__)


def create_app(controller: Optional[SchedulerController] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Inicialización y teardown de la aplicación."""
        logger.info(f"Iniciando {settings.APP_NAME} v{settings.APP_VERSION}")
        if not settings.auth_enabled:
            logger.warning("API_SECRET vacío: las rutas no exigen autenticación")

        app.state.controller = controller or create_controller()

        if settings.SCAN_ON_STARTUP:
            await app.state.controller.start()

        yield

        # uvicorn traduce SIGTERM/SIGINT en este teardown
        app.state.controller.shutdown()
        logger.info("Aplicación detenida")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Agrega búsquedas de listas IPTV/M3U de varios motores y guarda snapshots",
        lifespan=lifespan,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ─── API Routes ───────────────────────────────────────────────────────────
    app.include_router(scheduler_routes.router)

    return app


app = create_app()
