# app/database.py
import asyncio
import math
import uuid
from decimal import Decimal, ROUND_HALF_UP, localcontext
from typing import Optional, Dict, Any, List, Iterable

from .core import pick_product_fields
from .errors import NotFoundError, ValidationError
from .logger import get_logger

# This file holds the in-memory product store and its concurrency lock.

logger = get_logger("store")

SEED_PRODUCTS: List[Dict[str, Any]] = [
    {
        "name": "Laptop Pro",
        "description": "High-performance laptop for professionals.",
        "price": 1500.00,
        "category": "Electronics",
        "inStock": True,
    },
    {
        "name": "Wireless Mouse X",
        "description": "Ergonomic wireless mouse with customizable buttons.",
        "price": 45.00,
        "category": "Accessories",
        "inStock": True,
    },
    {
        "name": "Mechanical Keyboard RGB",
        "description": "Full-size mechanical keyboard with per-key RGB lighting.",
        "price": 120.00,
        "category": "Accessories",
        "inStock": False,
    },
    {
        "name": "USB-C Hub",
        "description": "Multi-port USB-C adapter for modern laptops.",
        "price": 35.00,
        "category": "Accessories",
        "inStock": True,
    },
    {
        "name": "Smartphone Z",
        "description": "Latest generation smartphone with advanced camera.",
        "price": 999.00,
        "category": "Electronics",
        "inStock": True,
    },
    {
        "name": "Bluetooth Headphones",
        "description": "Over-ear headphones with noise cancellation.",
        "price": 199.00,
        "category": "Audio",
        "inStock": True,
    },
    {
        "name": "Smart Watch",
        "description": "Fitness tracker and smartwatch combined.",
        "price": 250.00,
        "category": "Wearables",
        "inStock": False,
    },
]


def _make_product_dict(product_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
    product = {"id": product_id, "inStock": True}
    product.update(pick_product_fields(fields))
    return product


def _average_price(prices: List[float]) -> float:
    # exact decimal sum; a float sum of large prices overflows to inf
    with localcontext() as ctx:
        ctx.prec = 400
        total = sum((Decimal(str(p)) for p in prices), Decimal(0))
        average = (total / len(prices)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return float(average)


class ProductStore:
    """
    Ordered in-memory collection of products.

    Every operation runs under a single asyncio lock so each one is atomic
    with respect to the others. Callers always receive copies of the stored
    records.
    """

    def __init__(self, seed: Optional[Iterable[Dict[str, Any]]] = None, lock: Optional[asyncio.Lock] = None):
        self._products: List[Dict[str, Any]] = []
        self._lock = lock if lock is not None else asyncio.Lock()
        if seed:
            self._load(seed)

    def __len__(self) -> int:
        return len(self._products)

    def _load(self, seed: Iterable[Dict[str, Any]]):
        for fields in seed:
            self._products.append(_make_product_dict(uuid.uuid4().hex, fields))

    def _index_of(self, product_id: str) -> int:
        for i, p in enumerate(self._products):
            if p["id"] == product_id:
                return i
        raise NotFoundError(f"Product with ID {product_id} not found.")

    async def reset(self, seed: Optional[Iterable[Dict[str, Any]]] = None):
        async with self._lock:
            self._products = []
            if seed:
                self._load(seed)

    # ---------------------------
    # CRUD
    # ---------------------------
    async def create(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            product = _make_product_dict(uuid.uuid4().hex, fields)
            self._products.append(product)
            logger.debug("created product %s", product["id"])
            return dict(product)

    async def get(self, product_id: str) -> Dict[str, Any]:
        async with self._lock:
            return dict(self._products[self._index_of(product_id)])

    async def update(self, product_id: str, fields: Dict[str, Any]) -> Dict[str, Any]:
        async with self._lock:
            idx = self._index_of(product_id)
            merged = dict(self._products[idx])
            merged.update(pick_product_fields(fields))
            merged["id"] = self._products[idx]["id"]
            self._products[idx] = merged
            logger.debug("updated product %s", product_id)
            return dict(merged)

    async def delete(self, product_id: str) -> None:
        async with self._lock:
            idx = self._index_of(product_id)
            del self._products[idx]
            logger.debug("deleted product %s", product_id)

    # ---------------------------
    # Queries
    # ---------------------------
    async def list_page(self, category: Optional[str] = None, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        if page < 1 or limit < 1:
            raise ValidationError("Page and limit must be positive integers.")

        async with self._lock:
            matching = list(self._products)
            if category:
                wanted = category.lower()
                matching = [p for p in matching if p["category"].lower() == wanted]

            start = (page - 1) * limit
            data = [dict(p) for p in matching[start:start + limit]]

        total = len(matching)
        return {
            "page": page,
            "limit": limit,
            "totalProducts": total,
            "totalPages": math.ceil(total / limit),
            "data": data,
        }

    async def search(self, query: str) -> List[Dict[str, Any]]:
        if not isinstance(query, str) or not query.strip():
            raise ValidationError("Search query (q) is required and must be a non-empty string.")
        term = query.lower()
        async with self._lock:
            return [dict(p) for p in self._products if term in p["name"].lower()]

    async def stats(self) -> Dict[str, Any]:
        async with self._lock:
            products = list(self._products)

        count_by_category: Dict[str, int] = {}
        for p in products:
            count_by_category[p["category"]] = count_by_category.get(p["category"], 0) + 1

        in_stock = sum(1 for p in products if p["inStock"])
        average = _average_price([p["price"] for p in products]) if products else 0

        return {
            "totalProducts": len(products),
            "totalCategories": len(count_by_category),
            "countByCategory": count_by_category,
            "totalInStock": in_stock,
            "totalOutOfStock": len(products) - in_stock,
            "averagePrice": average,
        }
