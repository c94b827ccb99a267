from datetime import datetime
from decimal import Decimal

import pytest

from data.repository import MockDataRepository
from models.cart import CartLine
from models.product import Product
from services.session_service import StorefrontSession

FIXED_NOW = datetime(2025, 6, 1, 12, 0, 0)


def fixed_clock():
    return FIXED_NOW


def make_line(price, qty=1, product_id="x1"):
    return CartLine(Product(product_id, f"Item {product_id}", Decimal(str(price)), stock=100), qty)


@pytest.fixture
def repo():
    return MockDataRepository()


@pytest.fixture
def session(repo):
    return StorefrontSession(repo, now=fixed_clock)
