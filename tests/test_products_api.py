# tests/test_products_api.py
import pytest
from fastapi import APIRouter
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import ProductStore
from app.main import create_app, check_route_precedence

NEW = {"name": "Gaming Mouse", "description": "Lightweight mouse.", "price": 79.99, "category": "Accessories"}


def _first_id(client):
    return client.get("/api/products").json()["data"][0]["id"]


def test_root_is_plain_text(anon_client):
    r = anon_client.get("/")
    assert r.status_code == 200
    assert "Products API" in r.text


# ---------------------------
# Create / read round trip
# ---------------------------
def test_create_then_get_round_trip(client, store):
    r = client.post("/api/products", json=NEW)
    assert r.status_code == 201
    created = r.json()
    assert created["id"]
    assert created["inStock"] is True
    assert len(store) == 8

    fetched = client.get(f"/api/products/{created['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == created


def test_create_drops_unknown_keys(client):
    created = client.post("/api/products", json=dict(NEW, id="mine", colour="red")).json()
    assert created["id"] != "mine"
    assert "colour" not in created


def test_create_validation_lists_every_error(client, store):
    r = client.post("/api/products", json={"description": "d", "price": 0, "category": "c"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert body["errors"] == [
        "Name is required and must be a non-empty string.",
        "Price is required and must be a positive number.",
    ]
    assert len(store) == 7


def test_create_negative_price(client):
    r = client.post("/api/products", json=dict(NEW, price=-5))
    assert r.status_code == 400
    assert "Price is required and must be a positive number." in r.json()["errors"]


def test_create_without_body(client):
    r = client.post("/api/products")
    assert r.status_code == 400
    assert len(r.json()["errors"]) == 4


def test_malformed_json_is_a_validation_error(client):
    r = client.post("/api/products", content=b"{not json", headers={"content-type": "application/json"})
    assert r.status_code == 400
    body = r.json()
    assert body["success"] is False
    assert body["errors"]


def test_get_missing_product(client):
    r = client.get("/api/products/does-not-exist")
    assert r.status_code == 404
    assert r.json() == {"success": False, "message": "Product with ID does-not-exist not found."}


# ---------------------------
# Update / delete
# ---------------------------
def test_partial_update_keeps_other_fields(client):
    pid = _first_id(client)
    before = client.get(f"/api/products/{pid}").json()

    r = client.put(f"/api/products/{pid}", json={"inStock": False, "id": "other"})
    assert r.status_code == 200
    after = r.json()
    assert after["id"] == pid
    assert after["inStock"] is False
    for key in ("name", "description", "price", "category"):
        assert after[key] == before[key]


def test_update_empty_body(client):
    r = client.put(f"/api/products/{_first_id(client)}", json={})
    assert r.status_code == 400
    assert r.json()["errors"] == ["Request body cannot be empty for product update."]


def test_update_unknown_keys_only(client):
    r = client.put(f"/api/products/{_first_id(client)}", json={"colour": "red"})
    assert r.status_code == 400
    assert r.json()["errors"] == ["No valid fields provided for product update."]


def test_update_missing_product(client, store):
    r = client.put("/api/products/nope", json={"name": "x"})
    assert r.status_code == 404
    assert len(store) == 7


def test_delete_then_404(client, store):
    pid = _first_id(client)
    r = client.delete(f"/api/products/{pid}")
    assert r.status_code == 204
    assert r.content == b""
    assert len(store) == 6

    assert client.delete(f"/api/products/{pid}").status_code == 404
    assert client.get(f"/api/products/{pid}").status_code == 404
    assert len(store) == 6


# ---------------------------
# Listing
# ---------------------------
def test_list_defaults(client):
    body = client.get("/api/products").json()
    assert body["page"] == 1
    assert body["limit"] == 10
    assert body["totalProducts"] == 7
    assert body["totalPages"] == 1
    assert len(body["data"]) == 7


def test_list_second_page_of_two(client):
    body = client.get("/api/products", params={"page": 2, "limit": 2}).json()
    assert [p["name"] for p in body["data"]] == ["Mechanical Keyboard RGB", "USB-C Hub"]
    assert body["totalPages"] == 4


def test_list_filters_by_category(client):
    body = client.get("/api/products", params={"category": "electronics"}).json()
    assert [p["name"] for p in body["data"]] == ["Laptop Pro", "Smartphone Z"]
    assert body["totalProducts"] == 2


def test_list_non_numeric_paging_falls_back(client):
    body = client.get("/api/products", params={"page": "abc", "limit": "xyz"}).json()
    assert body["page"] == 1
    assert body["limit"] == 10


@pytest.mark.parametrize("params", [{"page": 0}, {"limit": -3}])
def test_list_rejects_non_positive_paging(client, params):
    r = client.get("/api/products", params=params)
    assert r.status_code == 400
    assert r.json()["message"] == "Page and limit must be positive integers."


# ---------------------------
# Search / stats
# ---------------------------
def test_search_case_insensitive(client):
    lower = client.get("/api/products/search", params={"q": "mouse"})
    upper = client.get("/api/products/search", params={"q": "MOUSE"})
    assert lower.status_code == 200
    assert lower.json() == upper.json()
    assert [p["name"] for p in lower.json()] == ["Wireless Mouse X"]


def test_search_without_query(client):
    r = client.get("/api/products/search")
    assert r.status_code == 400
    assert r.json()["message"] == "Search query (q) is required and must be a non-empty string."


def test_stats(client):
    body = client.get("/api/products/stats").json()
    assert body["totalProducts"] == 7
    assert sum(body["countByCategory"].values()) == 7
    assert body["totalInStock"] + body["totalOutOfStock"] == 7
    assert body["averagePrice"] == 449.71


# ---------------------------
# Routing and error envelope
# ---------------------------
def test_fixed_segments_are_not_treated_as_ids(client):
    assert client.get("/api/products/stats").status_code == 200
    assert isinstance(client.get("/api/products/search", params={"q": "a"}).json(), list)


def test_route_precedence_check_rejects_wildcard_first():
    router = APIRouter()

    @router.get("/items/{item_id}")
    async def get_item(item_id: str):
        return {}

    @router.get("/items/search")
    async def search_items():
        return []

    with pytest.raises(RuntimeError):
        check_route_precedence(router.routes)


def test_route_precedence_ignores_other_methods():
    router = APIRouter()

    @router.delete("/items/{item_id}")
    async def delete_item(item_id: str):
        return None

    @router.get("/items/search")
    async def search_items():
        return []

    check_route_precedence(router.routes)


def test_unknown_route_uses_error_envelope(client):
    r = client.get("/nowhere")
    assert r.status_code == 404
    assert r.json()["success"] is False


def test_unhandled_errors_hide_details():
    class BrokenStore(ProductStore):
        async def stats(self):
            raise RuntimeError("secret internals")

    app = create_app(Settings(api_key="k"), store=BrokenStore())
    client = TestClient(app, headers={"x-api-key": "k"}, raise_server_exceptions=False)
    r = client.get("/api/products/stats")
    assert r.status_code == 500
    assert r.json() == {"success": False, "message": "Something went wrong on the server."}
    assert "secret" not in r.text


# ---------------------------
# Non-finite and very large prices
# ---------------------------
def test_infinite_price_is_rejected(client, store):
    raw = b'{"name": "Inf", "description": "d", "price": Infinity, "category": "c"}'
    r = client.post("/api/products", content=raw, headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert r.json()["errors"] == ["Price is required and must be a positive number."]
    assert len(store) == 7

    pid = _first_id(client)
    r = client.put(f"/api/products/{pid}", content=b'{"price": NaN}', headers={"content-type": "application/json"})
    assert r.status_code == 400
    assert client.get("/api/products/stats").status_code == 200


def test_stats_survive_huge_prices(client):
    for _ in range(2):
        assert client.post("/api/products", json=dict(NEW, price=1e308)).status_code == 201
    r = client.get("/api/products/stats")
    assert r.status_code == 200
    assert r.json()["totalProducts"] == 9
    assert r.json()["averagePrice"] == 1e308
