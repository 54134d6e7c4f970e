"""
Clase base abstracta para todos los proveedores de búsqueda.
Define el contrato que cada motor externo debe implementar.
"""
import enum
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

import httpx
from tenacity import AsyncRetrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from config import settings

logger = logging.getLogger(__name__)

RawResult = dict[str, Any]


class ProviderStatus(str, enum.Enum):
    OK = "ok"
    DEGRADED = "degraded"
    SKIPPED = "skipped"


class RateLimitedError(Exception):
    """El proveedor respondió HTTP 429."""


class ProviderResponseError(Exception):
    """El proveedor devolvió un payload inválido o un error explícito."""


# ─────────────────────────────────────────────────────────────────────────────
# Resultado estructurado por proveedor
# ─────────────────────────────────────────────────────────────────────────────

@dataclass
class ProviderResult:
    """
    Lo que devuelve un proveedor en una pasada.
    `items` conserva lo recolectado antes de un fallo (puede estar vacío).
    """
    provider: str
    items: list[RawResult] = field(default_factory=list)
    status: ProviderStatus = ProviderStatus.OK
    reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.status == ProviderStatus.DEGRADED

    def to_dict(self) -> dict:
        return {
            "provider": self.provider,
            "status": self.status.value,
            "count": len(self.items),
            "reason": self.reason,
        }


# ─────────────────────────────────────────────────────────────────────────────
# Base Provider
# ─────────────────────────────────────────────────────────────────────────────

class BaseProvider(ABC):
    """
    Contrato base para todos los proveedores.

    Cada subclase implementa `_fetch` con la lógica específica del motor y
    agrega los registros a `collected` a medida que llegan. El método público
    `search` gestiona el cliente HTTP y convierte cualquier fallo en un
    resultado degradado: nunca propaga excepciones.
    """

    name: str = "base"

    DEFAULT_HEADERS = {
        "User-Agent": "iptv-searcher/1.0",
        "Accept": "application/json",
    }

    def __init__(self, api_key: str = "", config: dict | None = None):
        self.api_key = api_key
        self.config = config or {}
        self.max_retries = self.config.get("max_retries", settings.MAX_RETRIES)
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @abstractmethod
    async def _fetch(
        self,
        query: str,
        client: httpx.AsyncClient,
        collected: list[RawResult],
    ) -> None:
        """
        Implementación específica del proveedor.
        Recibe el cliente HTTP ya configurado.
        """
        ...

    async def search(self, query: str) -> ProviderResult:
        """
        Punto de entrada público. Gestiona cliente HTTP y errores.
        """
        if not self.is_configured:
            self.logger.info(f"[{self.name}] Sin credenciales, se omite")
            return ProviderResult(
                self.name, status=ProviderStatus.SKIPPED, reason="missing_credentials"
            )

        collected: list[RawResult] = []
        reason: Optional[str] = None

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.get("timeout", settings.API_TIMEOUT)),
            headers=self.DEFAULT_HEADERS,
            follow_redirects=True,
        ) as client:
            try:
                await self._fetch(query, client, collected)
            except RateLimitedError as e:
                self.logger.warning(f"[{self.name}] Rate limit alcanzado: {e}")
                reason = "rate_limited"
            except httpx.TimeoutException as e:
                self.logger.warning(f"[{self.name}] Timeout: {e}")
                reason = "timeout"
            except httpx.HTTPStatusError as e:
                self.logger.warning(
                    f"[{self.name}] HTTP {e.response.status_code}: {e.request.url}"
                )
                reason = f"http_{e.response.status_code}"
            except Exception as e:
                self.logger.error(f"[{self.name}] Error inesperado: {e}", exc_info=True)
                reason = str(e)[:200] or e.__class__.__name__

        if reason is not None:
            return ProviderResult(
                self.name, collected, status=ProviderStatus.DEGRADED, reason=reason
            )

        self.logger.info(f"[{self.name}] {len(collected)} resultados encontrados")
        return ProviderResult(self.name, collected)

    async def _request_json(
        self,
        client: httpx.AsyncClient,
        method: str,
        url: str,
        **kwargs,
    ) -> dict:
        """
        Un round trip HTTP. Reintenta solo errores de transporte;
        429 se traduce a RateLimitedError y corta la paginación.
        """
        async for attempt in AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=0.5, max=8),
            reraise=True,
        ):
            with attempt:
                resp = await client.request(method, url, **kwargs)

        if resp.status_code == 429:
            raise RateLimitedError(f"HTTP 429 en {url}")
        resp.raise_for_status()
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderResponseError(f"JSON inválido: {e}") from e
        if not isinstance(data, dict):
            raise ProviderResponseError(f"Se esperaba un objeto JSON, llegó {type(data).__name__}")
        return data

    @staticmethod
    def _records(data: dict, key: str) -> list[RawResult]:
        """Extrae la lista de registros bajo `key`, ignorando basura."""
        items = data.get(key) or []
        if not isinstance(items, list):
            raise ProviderResponseError(f"'{key}' no es una lista")
        return [item for item in items if isinstance(item, dict)]
