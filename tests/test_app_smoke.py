from __future__ import annotations

from fastapi.testclient import TestClient


def _client() -> TestClient:
    import app as app_module

    return TestClient(app_module.create_app())


def test_app_smoke_routes(reload_endpoints):
    client = _client()

    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}
    assert r.headers["x-request-id"].startswith("_")

    r = client.get("/products/all")
    assert r.status_code == 200
    assert r.json() == {"products": []}


def test_request_ids_differ_per_request(reload_endpoints):
    client = _client()
    first = client.get("/health").headers["x-request-id"]
    second = client.get("/health").headers["x-request-id"]
    assert first != second


def test_product_crud_over_http(reload_endpoints):
    client = _client()

    r = client.post("/products/", json={"name": "Laptop", "price": 1500, "stock": 10})
    assert r.status_code == 200
    body = r.json()
    assert body["message"] == "Data successfully written"
    product_id = body["ids"][0]

    r = client.get(f"/products/{product_id}")
    assert r.status_code == 200
    assert r.json()["product"]["name"] == "Laptop"

    r = client.patch(f"/products/{product_id}", json={"field": "stock", "value": 3})
    assert r.status_code == 200
    assert r.json()["records"][0]["stock"] == 3

    r = client.delete(f"/products/{product_id}")
    assert r.status_code == 200

    r = client.get(f"/products/{product_id}")
    assert r.status_code == 404
    assert r.json()["error"]["kind"] == "NOT_FOUND"


def test_create_maps_store_failures_to_status(reload_endpoints):
    client = _client()

    r = client.post("/users/", json={"id": 42, "username": "omer"})
    assert r.status_code == 400
    assert r.json()["error"]["kind"] == "INVALID_IDENTIFIER"

    r = client.post("/users/", json=[{"id": 1234567890}, {"id": 1234567890}])
    assert r.status_code == 409
    assert r.json()["error"]["kind"] == "DUPLICATE_IDENTIFIER"

    r = client.get("/users/all")
    assert r.json() == {"users": []}


def test_batch_delete_over_http(reload_endpoints):
    client = _client()
    client.post("/categories/", json=[{"id": 1000000001, "name": "a"}, {"id": 1000000003, "name": "c"}])

    r = client.request("DELETE", "/categories/", json={"ids": [1000000001, 1000000002, 1000000003]})
    assert r.status_code == 200
    results = r.json()["results"]
    assert [item["result"]["status"] for item in results] == [200, 404, 200]

    r = client.request("DELETE", "/categories/", json={"ids": "x"})
    assert r.status_code == 400
    assert r.json()["error"]["kind"] == "INVALID_INPUT"

    r = client.request("DELETE", "/categories/", json={"ids": []})
    assert r.status_code == 400


def test_link_and_basket_routes(reload_endpoints):
    client = _client()
    product_id = client.post("/products/", json={"name": "Laptop"}).json()["ids"][0]
    category_id = client.post("/categories/", json={"name": "Electronics"}).json()["ids"][0]
    user_id = client.post("/users/", json={"username": "omer"}).json()["ids"][0]

    r = client.post(f"/products/{product_id}/categories", json={"category_id": category_id})
    assert r.status_code == 200
    assert client.get(f"/categories/{category_id}").json()["category"]["product_ids"] == [product_id]

    r = client.post(f"/users/{user_id}/basket", json={"product_id": product_id, "quantity": 2})
    assert r.status_code == 200
    assert client.get(f"/users/{user_id}").json()["user"]["basket"] == [{"product_id": product_id, "quantity": 2}]


def test_invalid_path_id_is_reported_as_invalid_input(reload_endpoints):
    client = _client()
    r = client.get("/products/not-a-number")
    assert r.status_code == 400
    assert r.json()["error"]["kind"] == "INVALID_INPUT"
