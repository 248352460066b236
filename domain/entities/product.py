from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional


@dataclass
class Product:
    id: Optional[int]
    name: str
    stock: int
    price: Decimal = Decimal("0")
    category: Optional[str] = None
    updated_at: Optional[datetime] = None
