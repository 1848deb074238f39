"""Keyword-based category classification for the enhanced conversion path."""

from typing import List, Optional, Sequence, Tuple

from catalog.config import (
    CATEGORY_RULES,
    FILE_CATEGORY_FALLBACKS,
    OTHER_CATEGORY,
    SUBCATEGORY_MAPPING,
)

__all__ = ["CategoryClassifier", "default_classifier"]


class CategoryClassifier:
    """Assigns top-level categories and subcategory labels by substring match.

    Tables are ordered; the first matching entry wins, so keyword lists must
    not overlap ambiguously. Both lookups are total.
    """

    def __init__(
        self,
        rules: Sequence[Tuple[str, Sequence[str]]] = CATEGORY_RULES,
        file_fallbacks: Sequence[Tuple[Sequence[str], str]] = FILE_CATEGORY_FALLBACKS,
        subcategory_mapping: Sequence[Tuple[str, str]] = SUBCATEGORY_MAPPING,
        default: str = OTHER_CATEGORY,
    ):
        self.rules: List[Tuple[str, List[str]]] = [(c, [k.lower() for k in kws]) for c, kws in rules]
        self.file_fallbacks = [([k.lower() for k in kws], c) for kws, c in file_fallbacks]
        self.subcategory_mapping = [(k.lower(), label) for k, label in subcategory_mapping]
        self.default = default

    @staticmethod
    def _search_text(*parts: Optional[str]) -> str:
        return " ".join(p for p in parts if p).lower()

    def main_category(
        self,
        name: str,
        category_context: str = "",
        series_context: str = "",
        file_name: str = "",
    ) -> str:
        search_text = self._search_text(name, category_context, series_context, file_name)
        for category, keywords in self.rules:
            if any(keyword in search_text for keyword in keywords):
                return category

        lower_file = (file_name or "").lower()
        for keywords, category in self.file_fallbacks:
            if any(keyword in lower_file for keyword in keywords):
                return category

        return self.default

    def subcategory(self, name: str, category_context: str = "", series_context: str = "") -> str:
        search_text = self._search_text(name, category_context, series_context)
        for key, label in self.subcategory_mapping:
            if key in search_text:
                return label
        return category_context or series_context or ""


def default_classifier() -> CategoryClassifier:
    """Classifier built from the configured tables."""
    return CategoryClassifier()
