# sdk/products.py
import os
from typing import Optional, Dict, Any, List

import httpx
import requests


class ProductsApiError(Exception):
    """Error response from the products API ({success: false, message, errors?})."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message
        self.errors = errors or []


def _decode(r) -> Any:
    """Return the JSON body of a successful response or raise ProductsApiError."""
    if r.status_code >= 400:
        try:
            body = r.json()
        except ValueError:
            raise ProductsApiError(r.status_code, r.text or "request failed")
        raise ProductsApiError(r.status_code, body.get("message", "request failed"), body.get("errors"))
    if r.status_code == 204 or not r.content:
        return None
    return r.json()


def _product_payload(**fields) -> Dict[str, Any]:
    payload = {}
    for key, value in fields.items():
        if value is None:
            continue
        payload["inStock" if key == "in_stock" else key] = value
    return payload


class ProductsClient:
    def __init__(self, base_url: str = "http://localhost:3000", api_key: Optional[str] = None,
                 timeout: int = 10, session=None):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key if api_key is not None else os.getenv("API_KEY")
        self.timeout = timeout
        # any requests.Session-like object works (tests pass a TestClient)
        self.session = session if session is not None else requests.Session()
        if self.api_key:
            self.session.headers.update({"x-api-key": self.api_key})

    @property
    def products_url(self) -> str:
        return f"{self.base_url}/api/products"

    def ping(self) -> str:
        r = self.session.get(f"{self.base_url}/", timeout=self.timeout)
        if r.status_code >= 400:
            raise ProductsApiError(r.status_code, r.text)
        return r.text

    # Listing / search
    def list_products(self, category: Optional[str] = None, page: Optional[int] = None, limit: Optional[int] = None):
        params = {}
        if category:
            params["category"] = category
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        r = self.session.get(self.products_url, params=params, timeout=self.timeout)
        return _decode(r)

    def search_products(self, q: str):
        r = self.session.get(f"{self.products_url}/search", params={"q": q}, timeout=self.timeout)
        return _decode(r)

    def get_stats(self):
        r = self.session.get(f"{self.products_url}/stats", timeout=self.timeout)
        return _decode(r)

    # CRUD
    def get_product(self, product_id: str):
        r = self.session.get(f"{self.products_url}/{product_id}", timeout=self.timeout)
        return _decode(r)

    def create_product(self, name: str, description: str, price: float, category: str,
                       in_stock: Optional[bool] = None):
        payload = _product_payload(name=name, description=description, price=price,
                                   category=category, in_stock=in_stock)
        r = self.session.post(self.products_url, json=payload, timeout=self.timeout)
        return _decode(r)

    def update_product(self, product_id: str, **fields):
        r = self.session.put(f"{self.products_url}/{product_id}", json=_product_payload(**fields), timeout=self.timeout)
        return _decode(r)

    def delete_product(self, product_id: str) -> None:
        r = self.session.delete(f"{self.products_url}/{product_id}", timeout=self.timeout)
        _decode(r)

    # Async variants
    def _async_client(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> httpx.AsyncClient:
        headers = {"x-api-key": self.api_key} if self.api_key else {}
        return httpx.AsyncClient(base_url=self.base_url, headers=headers, timeout=self.timeout, transport=transport)

    async def create_product_async(self, name: str, description: str, price: float, category: str,
                                   in_stock: Optional[bool] = None, transport=None):
        payload = _product_payload(name=name, description=description, price=price,
                                   category=category, in_stock=in_stock)
        async with self._async_client(transport) as client:
            r = await client.post("/api/products", json=payload)
            return _decode(r)

    async def update_product_async(self, product_id: str, transport=None, **fields):
        async with self._async_client(transport) as client:
            r = await client.put(f"/api/products/{product_id}", json=_product_payload(**fields))
            return _decode(r)


if __name__ == "__main__":
    import argparse
    from rich import print

    parser = argparse.ArgumentParser(description="Products API CLI")
    parser.add_argument("--base-url", default=os.getenv("PRODUCTS_API_URL", "http://127.0.0.1:3000"))
    parser.add_argument("--api-key", default=None, help="Defaults to $API_KEY")
    subparsers = parser.add_subparsers(dest="command", required=True)

    lp = subparsers.add_parser("list-products", help="List products (paginated)")
    lp.add_argument("--category", help="Filter products by category")
    lp.add_argument("--page", type=int, help="1-based page number")
    lp.add_argument("--limit", type=int, help="Page size")

    sp = subparsers.add_parser("search", help="Search for products by name")
    sp.add_argument("--q", required=True, help="Text to look for in product names")

    subparsers.add_parser("stats", help="Show catalogue statistics")

    gp = subparsers.add_parser("get-product", help="Get a product by its ID")
    gp.add_argument("--product-id", required=True, help="ID of the product")

    cp = subparsers.add_parser("create-product", help="Create a new product")
    cp.add_argument("--name", required=True, help="Product name")
    cp.add_argument("--description", required=True, help="Product description")
    cp.add_argument("--price", type=float, required=True, help="Price")
    cp.add_argument("--category", required=True, help="Product category")
    cp.add_argument("--out-of-stock", action="store_true", help="Create as out of stock")

    up = subparsers.add_parser("update-product", help="Update fields of a product")
    up.add_argument("--product-id", required=True, help="ID of the product")
    up.add_argument("--name")
    up.add_argument("--description")
    up.add_argument("--price", type=float)
    up.add_argument("--category")
    up.add_argument("--in-stock", choices=["true", "false"])

    dp = subparsers.add_parser("delete-product", help="Delete a product")
    dp.add_argument("--product-id", required=True, help="ID of the product")

    args = parser.parse_args()
    c = ProductsClient(base_url=args.base_url, api_key=args.api_key)

    try:
        if args.command == "list-products":
            print(c.list_products(args.category, args.page, args.limit))
        elif args.command == "search":
            print(c.search_products(args.q))
        elif args.command == "stats":
            print(c.get_stats())
        elif args.command == "get-product":
            print(c.get_product(args.product_id))
        elif args.command == "create-product":
            print(c.create_product(args.name, args.description, args.price, args.category,
                                   in_stock=False if args.out_of_stock else None))
        elif args.command == "update-product":
            in_stock = None if args.in_stock is None else args.in_stock == "true"
            print(c.update_product(args.product_id, name=args.name, description=args.description,
                                   price=args.price, category=args.category, in_stock=in_stock))
        elif args.command == "delete-product":
            c.delete_product(args.product_id)
            print(f"[green]Deleted {args.product_id}[/green]")
    except ProductsApiError as e:
        print(f"[red]{e}[/red]")
        for err in e.errors:
            print(f"  [red]- {err}[/red]")
        raise SystemExit(1)
