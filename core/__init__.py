from .normalizer import NormalizedResult, normalize
from .matcher import TermMatcher
from .deduplicator import Deduplicator, deduplicate

__all__ = ["NormalizedResult", "normalize", "TermMatcher", "Deduplicator", "deduplicate"]
