from __future__ import annotations

from sqlalchemy.exc import OperationalError

from app.services.category_service import CategoryService
from factories import ADMIN_HEADERS, make_listing


def test_root(client) -> None:
    assert client.get("/").json() == {"status": "ok"}


def test_list_and_get_categories(client, electronics_tree) -> None:
    response = client.get("/api/categories")
    assert response.status_code == 200
    assert [c["name"] for c in response.json()] == ["Books", "Computers", "Electronics", "Laptops"]

    response = client.get("/api/categories/2")
    assert response.status_code == 200
    assert response.json()["parent_id"] == 1


def test_get_missing_category_returns_404(client) -> None:
    response = client.get("/api/categories/99")
    assert response.status_code == 404
    assert response.json()["detail"]["error"] == "NotFoundError"


def test_top_level_and_tree(client, electronics_tree) -> None:
    assert [c["id"] for c in client.get("/api/categories/top-level").json()] == [4, 1]

    tree = client.get("/api/categories/tree").json()
    assert [node["name"] for node in tree] == ["Books", "Electronics"]
    computers = tree[1]["children"][0]
    assert computers["name"] == "Computers"
    assert computers["children"][0] == {"id": 3, "name": "Laptops", "parent_id": 2, "children": []}


def test_category_path(client, electronics_tree) -> None:
    assert client.get("/api/categories/3/path").json() == [
        {"id": 1, "name": "Electronics"},
        {"id": 2, "name": "Computers"},
        {"id": 3, "name": "Laptops"},
    ]
    assert client.get("/api/categories/999/path").json() == []


def test_mutations_require_admin_key(client, electronics_tree) -> None:
    response = client.post("/api/categories", json={"name": "Tablets"})
    assert response.status_code == 403

    response = client.put("/api/categories/3", json={"name": "X"}, headers={"X-Admin-Key": "wrong"})
    assert response.status_code == 403

    response = client.delete("/api/categories/3")
    assert response.status_code == 403


def test_create_category(client, electronics_tree) -> None:
    response = client.post("/api/categories", json={"name": "Tablets", "parent_id": 1}, headers=ADMIN_HEADERS)
    assert response.status_code == 201
    body = response.json()
    assert body["name"] == "Tablets"
    assert body["parent_id"] == 1


def test_create_duplicate_category_returns_409(client, electronics_tree) -> None:
    response = client.post("/api/categories", json={"name": "Books"}, headers=ADMIN_HEADERS)
    assert response.status_code == 409
    detail = response.json()["detail"]
    assert detail["error"] == "DuplicateNameError"
    assert detail["field"] == "name"


def test_create_with_blank_name_returns_422(client) -> None:
    response = client.post("/api/categories", json={"name": "   "}, headers=ADMIN_HEADERS)
    assert response.status_code == 422


def test_update_self_parent_returns_400(client, electronics_tree) -> None:
    response = client.put("/api/categories/2", json={"parent_id": 2}, headers=ADMIN_HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "SelfParentError"


def test_update_circular_parent_returns_400(client, electronics_tree) -> None:
    response = client.put("/api/categories/1", json={"parent_id": 3}, headers=ADMIN_HEADERS)
    assert response.status_code == 400
    assert response.json()["detail"]["type"] == "circular_reference"


def test_update_moves_category(client, electronics_tree) -> None:
    response = client.put("/api/categories/3", json={"parent_id": 4}, headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert [item["id"] for item in client.get("/api/categories/3/path").json()] == [4, 3]


def test_update_missing_category_returns_404(client) -> None:
    response = client.put("/api/categories/42", json={"name": "Ghost"}, headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_delete_guards(client, electronics_tree) -> None:
    electronics_tree.add(make_listing(1, category_id=3))
    electronics_tree.commit()

    response = client.delete("/api/categories/2", headers=ADMIN_HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "HasSubcategoriesError"

    response = client.delete("/api/categories/3", headers=ADMIN_HEADERS)
    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "HasListingsError"


def test_delete_category(client, electronics_tree) -> None:
    response = client.delete("/api/categories/4", headers=ADMIN_HEADERS)
    assert response.status_code == 200
    assert response.json() == {"message": "Category 'Books' deleted successfully", "id": 4}
    assert client.get("/api/categories/4").status_code == 404


def test_corrupt_hierarchy_is_reported_without_hanging(client, electronics_tree) -> None:
    from app.models.categories import Category

    root = electronics_tree.query(Category).filter(Category.id == 1).first()
    root.parent_id = 3
    electronics_tree.commit()

    response = client.get("/api/categories/3/path")
    assert response.status_code == 500
    assert response.json()["detail"]["type"] == "corrupt_hierarchy"


def test_out_of_range_category_ids_return_404(client, electronics_tree) -> None:
    huge = 18446744073709551616
    assert client.get(f"/api/categories/{huge}").status_code == 404
    assert client.get(f"/api/categories/{huge}/path").json() == []
    assert client.put(f"/api/categories/{huge}", json={"name": "Ghost"}, headers=ADMIN_HEADERS).status_code == 404
    assert client.delete(f"/api/categories/{huge}", headers=ADMIN_HEADERS).status_code == 404

    response = client.put("/api/categories/3", json={"parent_id": huge}, headers=ADMIN_HEADERS)
    assert response.status_code == 404


def test_unexpected_error_hides_internals(client, monkeypatch) -> None:
    def boom(self):
        raise RuntimeError("secret stack detail")

    monkeypatch.setattr(CategoryService, "list_categories", boom)
    response = client.get("/api/categories")
    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["type"] == "internal_error"
    assert "secret" not in str(detail)


def test_database_outage_returns_503_without_driver_text(client, monkeypatch) -> None:
    def unavailable(self):
        raise OperationalError("SELECT categories", {}, Exception("could not connect to 10.0.0.5"))

    monkeypatch.setattr(CategoryService, "get_tree", unavailable)
    response = client.get("/api/categories/tree")
    assert response.status_code == 503
    detail = response.json()["detail"]
    assert detail["error"] == "DatabaseConnectionError"
    assert "10.0.0.5" not in str(detail)
    assert "SELECT" not in str(detail)
