from typing import Optional, Dict, Any, List

from .core import (
    validate_product_create, validate_product_update,
    resolve_pagination, require_search_query
)
from .database import ProductStore

# This file contains the logic behind each /api/products endpoint.
# Route functions in main.py only extract input and pick the status code.

async def list_products_logic(store: ProductStore, category: Optional[str] = None,
                              page: Optional[str] = None, limit: Optional[str] = None) -> Dict[str, Any]:
    paging = resolve_pagination(page, limit)
    return await store.list_page(category=category, page=paging["page"], limit=paging["limit"])

async def search_products_logic(store: ProductStore, q: Optional[str]) -> List[Dict[str, Any]]:
    return await store.search(require_search_query(q))

async def product_stats_logic(store: ProductStore) -> Dict[str, Any]:
    return await store.stats()

async def get_product_logic(store: ProductStore, product_id: str) -> Dict[str, Any]:
    return await store.get(product_id)

async def create_product_logic(store: ProductStore, body: Any) -> Dict[str, Any]:
    payload = validate_product_create(body)
    return await store.create(payload)

async def update_product_logic(store: ProductStore, product_id: str, body: Any) -> Dict[str, Any]:
    payload = validate_product_update(body)
    return await store.update(product_id, payload)

async def delete_product_logic(store: ProductStore, product_id: str) -> None:
    await store.delete(product_id)
