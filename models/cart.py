# models/cart.py
from dataclasses import dataclass

from models.product import Product
from utils.errors import InvalidAmount
from utils.money import Money, non_negative


def check_quantity(qty) -> int:
    if isinstance(qty, bool) or not isinstance(qty, int) or qty < 1:
        raise InvalidAmount(f"Quantity must be a positive integer, got {qty!r}")
    return qty


# One cart line: a product and how many of it.
@dataclass
class CartLine:
    product: Product
    quantity: int = 1

    def __post_init__(self):
        check_quantity(self.quantity)

    @property
    def unit_price(self) -> Money:
        return non_negative(self.product.price, "unit price")

    @property
    def line_subtotal(self) -> Money:
        return self.unit_price * self.quantity


class Cart:
    def __init__(self):
        self.lines: list[CartLine] = []

    def find(self, product_id: str) -> CartLine | None:
        for line in self.lines:
            if line.product.id == product_id:
                return line
        return None

    def add(self, product: Product, qty: int = 1):
        check_quantity(qty)
        existing = self.find(product.id)
        if existing is not None:
            existing.quantity += qty
        else:
            self.lines.append(CartLine(product, qty))

    def remove(self, product_id: str):
        self.lines = [line for line in self.lines if line.product.id != product_id]

    def update_quantity(self, product_id: str, delta: int):
        # Quantity never goes below zero; a line that reaches zero is dropped.
        line = self.find(product_id)
        if line is None:
            return
        new_qty = max(0, line.quantity + delta)
        if new_qty == 0:
            self.remove(product_id)
        else:
            line.quantity = new_qty

    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    def clear(self):
        self.lines.clear()
