"""
Proveedor Google Custom Search (JSON API).
URL: https://www.googleapis.com/customsearch/v1

Estrategia:
1. Paginar de a 10 resultados (start = 1, 11, ..., 91): la API no entrega más de 100.
2. Cortar en la primera página vacía o ante un 429.
"""
import httpx

from config import settings
from .base import BaseProvider, RawResult


class GoogleSearchProvider(BaseProvider):
    """Motor web A: requiere API key y el ID del buscador (cx)."""

    name = "google"
    API_URL = "https://www.googleapis.com/customsearch/v1"
    PAGE_SIZE = 10

    def __init__(self, api_key: str = "", cse_id: str = "", config: dict | None = None):
        super().__init__(api_key, config)
        self.cse_id = cse_id
        self.max_start = self.config.get("max_start", settings.GOOGLE_MAX_START)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.cse_id)

    async def _fetch(
        self,
        query: str,
        client: httpx.AsyncClient,
        collected: list[RawResult],
    ) -> None:
        for start in range(1, self.max_start + 1, self.PAGE_SIZE):
            data = await self._request_json(
                client,
                "GET",
                self.API_URL,
                params={
                    "q": query,
                    "key": self.api_key,
                    "cx": self.cse_id,
                    "num": self.PAGE_SIZE,
                    "start": start,
                },
            )
            items = self._records(data, "items")
            if not items:
                self.logger.debug(f"Google: página vacía en start={start}, fin")
                break
            collected.extend(items)
