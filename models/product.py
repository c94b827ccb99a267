# models/product.py
from dataclasses import dataclass
from decimal import Decimal
# Product model representing an item on the storefront shelf.
@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    category_id: str = ""
    stock: int = 0
    is_on_shelf: bool = True
