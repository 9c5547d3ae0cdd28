#!/usr/bin/env python
import os
from rich import print

from sdk.products import ProductsClient, ProductsApiError

def main():
    c = ProductsClient(base_url=os.getenv("PRODUCTS_API_URL", "http://127.0.0.1:3000"))

    # -----------------------------
    # Liveness
    # -----------------------------
    print(c.ping())

    # -----------------------------
    # List products (seeded catalogue)
    # -----------------------------
    print("\nListing products, 2 per page...")
    print(c.list_products(page=2, limit=2))

    print("\nListing Accessories only...")
    print(c.list_products(category="accessories"))

    # -----------------------------
    # Create product
    # -----------------------------
    print("\nCreating a product...")
    prod = c.create_product("Gaming Mouse", "Lightweight mouse with 8K polling.", 79.99, "Accessories")
    print(prod)

    # -----------------------------
    # Search product
    # -----------------------------
    print("\nSearching for 'mouse'...")
    print(c.search_products("mouse"))

    # -----------------------------
    # Update product
    # -----------------------------
    print("\nMarking it out of stock...")
    print(c.update_product(prod["id"], in_stock=False))

    # -----------------------------
    # Validation failure
    # -----------------------------
    print("\nCreating an invalid product...")
    try:
        c.create_product("", "no name", 0, "Accessories")
    except ProductsApiError as e:
        print(e.status_code, e.message, e.errors)

    # -----------------------------
    # Stats
    # -----------------------------
    print("\nCatalogue stats...")
    print(c.get_stats())

    # -----------------------------
    # Delete product
    # -----------------------------
    print("\nDeleting the product...")
    c.delete_product(prod["id"])
    try:
        c.get_product(prod["id"])
    except ProductsApiError as e:
        print(e.status_code, e.message)

if __name__ == "__main__":
    main()
