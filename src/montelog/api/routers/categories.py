"""Category listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from montelog.api.deps import get_category_service
from montelog.models import Category
from montelog.services import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("")
async def list_categories(
    categories: CategoryService = Depends(get_category_service),
) -> dict[str, list[Category]]:
    return {"categories": await categories.get_all_categories()}
