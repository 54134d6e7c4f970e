"""
Configuración central de IPTV Searcher.
Usa pydantic-settings para tipado y validación de variables de entorno.
"""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- App ---
    APP_NAME: str = "IPTV Searcher"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    # Secreto compartido para el header X-API-Key. Vacío = sin autenticación.
    API_SECRET: str = ""

    # --- Web Server ---
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # --- Scheduler ---
    SCAN_INTERVAL_SECONDS: int = Field(60, ge=1)
    SCAN_ON_STARTUP: bool = False
    SCHEDULER_TIMEZONE: str = "UTC"

    # --- HTTP Client ---
    API_TIMEOUT: int = Field(30, gt=0)
    MAX_RETRIES: int = Field(3, ge=1, description="Intentos por request ante errores de transporte")

    # --- Búsqueda ---
    SEARCH_TERMS: list[str] = ["iptv", "m3u", "bein", "بث مباشر"]
    # Exa es un buscador semántico: admite un prompt en lenguaje natural
    EXA_QUERY: Optional[str] = None
    EXA_NUM_RESULTS: int = 100
    SERPAPI_NUM_RESULTS: int = 100
    GOOGLE_MAX_START: int = 91

    # --- Credenciales de proveedores (opcionales) ---
    GOOGLE_SEARCH_API_KEY: str = ""
    GOOGLE_CSE_ID: str = ""
    EXA_KEY: str = ""
    SERPAPI_API_KEY: str = ""

    # --- Snapshots ---
    SNAPSHOT_DIR: Path = Path(".")
    SNAPSHOT_PREFIX: str = "auto_results_"

    @property
    def query_terms(self) -> tuple[str, ...]:
        return tuple(self.SEARCH_TERMS)

    @property
    def auth_enabled(self) -> bool:
        return bool(self.API_SECRET)


settings = Settings()
