"""
Proveedor Exa (búsqueda semántica).
URL: https://api.exa.ai/search

Exa entiende consultas en lenguaje natural, así que admite un prompt propio
(EXA_QUERY) en lugar de la lista de términos unida por espacios.
"""
from typing import Optional

import httpx

from config import settings
from .base import BaseProvider, RawResult


class ExaSearchProvider(BaseProvider):
    """Motor semántico B. Una sola llamada, hasta `num_results` resultados."""

    name = "exa"
    API_URL = "https://api.exa.ai/search"

    def __init__(
        self,
        api_key: str = "",
        prompt: Optional[str] = None,
        config: dict | None = None,
    ):
        super().__init__(api_key, config)
        self.prompt = prompt
        self.num_results = self.config.get("num_results", settings.EXA_NUM_RESULTS)

    async def _fetch(
        self,
        query: str,
        client: httpx.AsyncClient,
        collected: list[RawResult],
    ) -> None:
        data = await self._request_json(
            client,
            "POST",
            self.API_URL,
            json={
                "query": self.prompt or query,
                "numResults": self.num_results,
                "useAutoprompt": True,
            },
            headers={"x-api-key": self.api_key},
        )
        collected.extend(self._records(data, "results"))
