def test_health(api):
    assert api.get("/api/v1/health").json() == {"ok": True}
    assert api.get("/api/v1/health/redis").json()["ok"] is True


def test_category_tree_proxy(api):
    tree = api.get("/api/v1/categories/tree").json()
    assert [n["path"] for n in tree] == ["root", "other"]
    assert tree[0]["productCount"] == 10
    assert tree[0]["children"][0]["children"][0]["path"] == "root/a/a1"


def test_category_tree_unavailable_is_empty(api, wired):
    wired.tree_status = 500
    response = api.get("/api/v1/categories/tree")
    assert response.status_code == 200
    assert response.json() == []


def test_category_search(api):
    found = api.get("/api/v1/categories/search", params={"q": "b"}).json()
    assert [n["path"] for n in found] == ["root/b"]


def test_baskets(api, wired):
    assert api.get("/api/v1/baskets").json()["items"][0]["id"] == 7

    response = api.post("/api/v1/baskets/7/products", json={"productIds": [3, 4]})
    assert response.status_code == 200
    assert response.json() == {"basket_id": 7, "added": 2}
    assert wired.basket_posts == [(7, {"productIds": [3, 4]})]

    assert api.post("/api/v1/baskets/404/products", json={"productIds": [1]}).status_code == 404
    assert api.post("/api/v1/baskets/7/products", json={"productIds": []}).status_code == 422
