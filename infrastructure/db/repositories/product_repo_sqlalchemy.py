from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from domain.entities import Product
from domain.interfaces import ProductRepository
from infrastructure.db.models import ProductModel
from infrastructure.db.repositories.session_guard import rollback_on_error


class ProductRepoSqlalchemy(ProductRepository):
    """SQLAlchemy implementation of ProductRepository."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @rollback_on_error
    async def get_product(self, product_id: int) -> Optional[Product]:
        product_model = await self.db.get(ProductModel, product_id)
        return product_model.to_domain() if product_model else None

    @rollback_on_error
    async def get_low_stock(self, threshold: int) -> list[Product]:
        """Products whose stock is at or below the threshold."""
        stmt = select(ProductModel).where(ProductModel.stock <= threshold).order_by(ProductModel.id)
        result = await self.db.execute(stmt)
        return [model.to_domain() for model in result.scalars().all()]
