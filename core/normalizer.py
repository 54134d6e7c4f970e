"""
Normalización de registros crudos de proveedores a {title, link}.
Cada motor nombra distinto el mismo campo (Google/SerpAPI: link, Exa: url).
"""
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# Orden de preferencia para el campo URL
LINK_FIELDS = ("link", "url")
TITLE_FIELD = "title"


@dataclass(frozen=True)
class NormalizedResult:
    title: str
    link: str

    def to_dict(self) -> dict:
        return {"title": self.title, "link": self.link}


def normalize(raw: Any) -> NormalizedResult:
    """
    RawResult -> NormalizedResult. Nunca falla.
    El título cae al link si falta; el link queda "" si no hay ninguno.
    """
    if not isinstance(raw, Mapping):
        return NormalizedResult(title="", link="")

    link = ""
    for name in LINK_FIELDS:
        value = _text(raw.get(name))
        if value:
            link = value
            break

    title = _text(raw.get(TITLE_FIELD)) or link
    return NormalizedResult(title=title, link=link)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""
