import asyncio
import os
from sdk.products import ProductsClient, ProductsApiError

async def rename(client, product_id, name):
    try:
        resp = await client.update_product_async(product_id, name=name)
        print(f"✅ renamed to {resp['name']}")
    except ProductsApiError as e:
        print(f"❌ rename to {name} failed: {e}")

async def create(client, name, price):
    try:
        resp = await client.create_product_async(name, f"{name} created concurrently.", price, "Demo")
        print(f"✅ created {resp['name']} ({resp['id']})")
    except ProductsApiError as e:
        print(f"❌ create {name} failed: {e}")

async def main():
    c = ProductsClient(base_url=os.getenv("PRODUCTS_API_URL", "http://127.0.0.1:3000"))

    product = c.create_product("Contested Widget", "Renamed by several clients at once.", 10, "Demo")
    print(f"\n🖥️  Created product: {product}")

    print("\n⚡ Simulating concurrent writes...")
    await asyncio.gather(
        rename(c, product["id"], "Widget A"),
        rename(c, product["id"], "Widget B"),
        *(create(c, f"Gadget {i}", 5 + i) for i in range(5)),
    )

    # Show final state
    print("\n📦 Final product state:", c.get_product(product["id"]))
    print("📊 Demo category:", c.list_products(category="demo", limit=50)["totalProducts"])

if __name__ == "__main__":
    asyncio.run(main())
