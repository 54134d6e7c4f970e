"""
Filtro de resultados por términos de búsqueda.
Se evalúa solo sobre el link: el título no participa del filtro.
"""
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .normalizer import NormalizedResult


@dataclass
class MatchResult:
    matched: bool
    terms_found: list[str]


class TermMatcher:
    """
    Evalúa si un link es relevante para la lista de términos.

    - Búsqueda case-insensitive por substring
    - Semántica OR: alcanza con un término
    """

    def __init__(self, terms: Sequence[str]):
        self.raw_terms = tuple(terms)
        # Términos vacíos matchearían cualquier link
        self._lowered = [(t, t.lower()) for t in self.raw_terms if t]

    def match(self, link: str) -> MatchResult:
        link_norm = (link or "").lower()
        found = [term for term, needle in self._lowered if needle in link_norm]
        return MatchResult(matched=bool(found), terms_found=found)

    def filter(self, results: Iterable[NormalizedResult]) -> list[NormalizedResult]:
        return [r for r in results if self.match(r.link).matched]
