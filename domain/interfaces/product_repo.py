from typing_extensions import Protocol
from typing import Optional
from domain.entities import Product


class ProductRepository(Protocol):
    async def get_product(self, product_id: int) -> Optional[Product]: ...
    async def get_low_stock(self, threshold: int) -> list[Product]: ...
