"""Service layer for categories."""
from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models.category import Category
from models.prompt import Prompt
from schemas.category import CategoryResponse


async def list_categories(db: AsyncSession) -> list[CategoryResponse]:
    """All categories ordered by name, each with its count of published prompts."""
    stmt = (
        select(Category, func.count(Prompt.id).label("prompt_count"))
        .outerjoin(
            Prompt,
            and_(Prompt.category_id == Category.id, Prompt.published.is_(True)),
        )
        .group_by(Category.id)
        .order_by(Category.name)
    )
    rows = (await db.execute(stmt)).all()
    return [
        CategoryResponse(
            id=category.id,
            name=category.name,
            slug=category.slug,
            description=category.description,
            prompt_type=category.prompt_type,
            prompt_count=int(prompt_count or 0),
        )
        for category, prompt_count in rows
    ]


async def get_by_slug(db: AsyncSession, slug: str) -> Category | None:
    """Get a category by slug."""
    return await db.scalar(select(Category).where(Category.slug == slug))
