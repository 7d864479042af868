"""
Read-only lookup over the service category taxonomy.

The taxonomy is reference data (main section -> category -> leaf
services).  Account logic never depends on its contents: a leaf picked
from it is just a non-empty category name.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TAXONOMY_PATH = Path(__file__).resolve().parent.parent / "data" / "taxonomy.json"

Taxonomy = Mapping[str, Mapping[str, Sequence[str]]]


def load_default_taxonomy(path: Optional[Path] = None) -> Dict[str, Dict[str, Tuple[str, ...]]]:
    """Load the packaged taxonomy JSON, keeping the file's ordering."""
    source = path or DEFAULT_TAXONOMY_PATH
    with open(source, encoding="utf-8") as fh:
        raw = json.load(fh)
    taxonomy = {
        section: {category: tuple(leaves) for category, leaves in categories.items()}
        for section, categories in raw.items()
    }
    logger.debug("Loaded taxonomy with %d sections from %s", len(taxonomy), source)
    return taxonomy


class TaxonomyService:
    """Lookups over an injected ``section -> category -> leaves`` mapping."""

    def __init__(self, lookup: Taxonomy):
        self._lookup = lookup

    def sections(self) -> Tuple[str, ...]:
        return tuple(self._lookup)

    def categories(self, main_section: str) -> Tuple[str, ...]:
        return tuple(self._lookup.get(main_section, {}))

    def get_subcategories(self, main_section: str, category: str) -> Tuple[str, ...]:
        """Leaf services of ``category`` in ``main_section``, in display order.

        Unknown sections or categories give an empty tuple.
        """
        return tuple(self._lookup.get(main_section, {}).get(category, ()))

    def contains_leaf(self, name: str) -> bool:
        name = name.strip()
        return any(name in leaves for categories in self._lookup.values() for leaves in categories.values())


_default_service: Optional[TaxonomyService] = None


def get_taxonomy_service() -> TaxonomyService:
    """Shared service over the packaged taxonomy (FastAPI dependency)."""
    global _default_service
    if _default_service is None:
        _default_service = TaxonomyService(load_default_taxonomy())
    return _default_service
