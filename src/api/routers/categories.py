"""Category endpoints."""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session
from schemas.category import CategoryListResponse
from services import category_service

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.get("", response_model=CategoryListResponse)
async def list_categories(
    db: AsyncSession = Depends(get_async_session),
) -> CategoryListResponse:
    """All categories with their published prompt counts."""
    return CategoryListResponse(categories=await category_service.list_categories(db))
