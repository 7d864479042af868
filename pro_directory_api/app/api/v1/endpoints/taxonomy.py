"""
Read-only endpoints over the service category taxonomy.
"""

from typing import List

from fastapi import APIRouter, Depends, Query

from pro_directory_api.app.core.security import get_current_user
from pro_directory_api.app.services.taxonomy_service import TaxonomyService, get_taxonomy_service

router = APIRouter()


@router.get("/sections", response_model=List[str])
def list_sections(
    current_user: dict = Depends(get_current_user),
    taxonomy: TaxonomyService = Depends(get_taxonomy_service),
) -> List[str]:
    return list(taxonomy.sections())


@router.get("/categories", response_model=List[str])
def list_categories(
    main_section: str = Query(..., examples=["Build Home"]),
    current_user: dict = Depends(get_current_user),
    taxonomy: TaxonomyService = Depends(get_taxonomy_service),
) -> List[str]:
    """Categories of a main section; empty for an unknown section."""
    return list(taxonomy.categories(main_section))


@router.get("/subcategories", response_model=List[str])
def list_subcategories(
    main_section: str = Query(..., examples=["Build Home"]),
    category: str = Query(..., examples=["Construction & Building"]),
    current_user: dict = Depends(get_current_user),
    taxonomy: TaxonomyService = Depends(get_taxonomy_service),
) -> List[str]:
    """Leaf services of a category, in display order.

    Unknown sections or categories return an empty list rather than 404.
    """
    return list(taxonomy.get_subcategories(main_section, category))
