"""
Proveedores de búsqueda disponibles.
El orden de `build_providers` es el orden de concatenación de resultados.
"""
from config import Settings, settings as default_settings
from .base import BaseProvider, ProviderResult, ProviderStatus, RawResult
from .google import GoogleSearchProvider
from .exa import ExaSearchProvider
from .serpapi import SerpApiProvider


def build_providers(settings: Settings | None = None) -> list[BaseProvider]:
    """
    Instancia los tres proveedores con las credenciales configuradas.
    Un proveedor sin credenciales queda como no-op (ver BaseProvider.search).
    """
    cfg = settings or default_settings
    http = {"timeout": cfg.API_TIMEOUT, "max_retries": cfg.MAX_RETRIES}
    return [
        GoogleSearchProvider(
            api_key=cfg.GOOGLE_SEARCH_API_KEY,
            cse_id=cfg.GOOGLE_CSE_ID,
            config={**http, "max_start": cfg.GOOGLE_MAX_START},
        ),
        ExaSearchProvider(
            api_key=cfg.EXA_KEY,
            prompt=cfg.EXA_QUERY,
            config={**http, "num_results": cfg.EXA_NUM_RESULTS},
        ),
        SerpApiProvider(
            api_key=cfg.SERPAPI_API_KEY,
            config={**http, "num_results": cfg.SERPAPI_NUM_RESULTS},
        ),
    ]


__all__ = [
    "BaseProvider",
    "ProviderResult",
    "ProviderStatus",
    "RawResult",
    "GoogleSearchProvider",
    "ExaSearchProvider",
    "SerpApiProvider",
    "build_providers",
]
