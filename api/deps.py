"""
Dependencias de FastAPI compartidas por las rutas.
"""
import secrets
from typing import Optional

from fastapi import Depends, Header, HTTPException, Request

from config import settings
from scheduler import SchedulerController


async def require_api_secret(x_api_key: Optional[str] = Header(None)) -> None:
    """Compara el header X-API-Key contra el secreto compartido."""
    if not settings.auth_enabled:
        return
    if not x_api_key or not secrets.compare_digest(
        x_api_key.encode(), settings.API_SECRET.encode()
    ):
        raise HTTPException(status_code=401, detail="API key inválida o ausente")


def get_controller(request: Request) -> SchedulerController:
    return request.app.state.controller


ControllerDep = Depends(get_controller)
