"""
Proveedor SerpAPI (agregador de motores, engine=google).
URL: https://serpapi.com/search
"""
import httpx

from config import settings
from .base import BaseProvider, ProviderResponseError, RawResult


class SerpApiProvider(BaseProvider):
    """Motor agregador C."""

    name = "serpapi"
    API_URL = "https://serpapi.com/search"

    def __init__(self, api_key: str = "", config: dict | None = None):
        super().__init__(api_key, config)
        self.engine = self.config.get("engine", "google")
        self.num_results = self.config.get("num_results", settings.SERPAPI_NUM_RESULTS)

    async def _fetch(
        self,
        query: str,
        client: httpx.AsyncClient,
        collected: list[RawResult],
    ) -> None:
        data = await self._request_json(
            client,
            "GET",
            self.API_URL,
            params={
                "q": query,
                "api_key": self.api_key,
                "engine": self.engine,
                "num": self.num_results,
            },
        )
        # SerpAPI informa errores de cuenta/cuota con 200 y un campo "error"
        if data.get("error"):
            raise ProviderResponseError(f"SerpAPI: {data['error']}")
        collected.extend(self._records(data, "organic_results"))
