"""
Read-only detection and stripping over the pattern catalog
"""
from typing import List, Optional, Sequence

from .patterns import DANGEROUS_PATTERNS, CatalogEntry


class Detector:
    """Applies a pattern catalog to text"""

    def __init__(self, catalog: Optional[Sequence[CatalogEntry]] = None):
        self.catalog = tuple(DANGEROUS_PATTERNS if catalog is None else catalog)

    def matches(self, text: Optional[str]) -> bool:
        """True when any catalog entry finds a match in the unmodified text"""
        if not text:
            return False
        return any(entry.pattern.search(text) for entry in self.catalog)

    def find(self, text: Optional[str]) -> List[str]:
        """Names of every catalog entry that matches the unmodified text"""
        if not text:
            return []
        return [entry.name for entry in self.catalog if entry.pattern.search(text)]

    def strip(self, text: Optional[str]) -> str:
        """
        Remove every catalog match, entry by entry

        Each entry runs over the output of the previous ones, so the order of
        the catalog decides what later entries get to see.
        """
        if not text:
            return ""
        for entry in self.catalog:
            text = entry.pattern.sub("", text)
        return text


default_detector = Detector()
