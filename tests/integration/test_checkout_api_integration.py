def _add_card(client, headers, pm="pm_card_visa"):
    res = client.post("/users/creditcards", json={"payment_method_id": pm}, headers=headers)
    assert res.status_code == 201
    return res.json()


def test_buy_then_history(client, gateway, make_user, make_product, auth_headers):
    user = make_user()
    headers = auth_headers(user)
    _add_card(client, headers)
    a = make_product("A", 500)
    b = make_product("B", 1200)

    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": a, "quantity": 2}, {"product_id": b, "quantity": 1}], "payment_method_id": "pm_card_visa"},
        headers=headers,
    )
    assert res.status_code == 200
    assert res.json() == {"success": True, "stripe_payment_intent_id": "pi_test_1"}
    assert gateway.calls[-1][1]["amount"] == 2200

    hist = client.get("/users/history", headers=headers)
    assert hist.status_code == 200
    rows = hist.json()
    assert len(rows) == 2
    assert {r["stripe_payment_intent_id"] for r in rows} == {"pi_test_1"}
    assert sorted((r["product_name"], r["quantity"], r["total_price_cents"]) for r in rows) == [
        ("A", 2, 1000),
        ("B", 1, 1200),
    ]


def test_buy_requires_auth(client):
    res = client.post("/users/buy", json={"items": [{"product_id": 1, "quantity": 1}], "payment_method_id": "pm"})
    assert res.status_code == 401


def test_buy_without_card(client, gateway, make_user, make_product, auth_headers):
    user = make_user()
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": make_product(), "quantity": 1}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 400
    assert res.json() == {"detail": "No Stripe customer on file. Add a credit card first."}
    assert gateway.calls == []


def test_buy_unknown_product(client, gateway, make_user, auth_headers, count_purchases):
    user = make_user(customer_id="cus_known")
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": 999, "quantity": 1}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 400
    assert "999" in res.json()["detail"]
    assert gateway.calls == []
    assert count_purchases() == 0


def test_buy_empty_items(client, make_user, auth_headers):
    res = client.post("/users/buy", json={"items": [], "payment_method_id": "pm_x"}, headers=auth_headers(make_user()))
    assert res.status_code == 400
    assert res.json() == {"detail": "items and payment_method_id are required"}


def test_buy_zero_quantity(client, make_user, make_product, auth_headers):
    user = make_user(customer_id="cus_known")
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": make_product(), "quantity": 0}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 400
    assert res.json() == {"detail": "Quantity must be > 0"}


def test_buy_wrong_types(client, make_user, auth_headers):
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": "abc", "quantity": 1}], "payment_method_id": "pm_x"},
        headers=auth_headers(make_user()),
    )
    assert res.status_code == 400
    assert res.json()["detail"].startswith("Invalid request")


def test_buy_record_failure_returns_500(monkeypatch, client, reconciliation, make_user, make_product, auth_headers):
    from sqlalchemy.exc import SQLAlchemyError

    def _boom(conn, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr("storefront.checkout.repository.insert_purchases", _boom)
    user = make_user(customer_id="cus_known")
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": make_product(), "quantity": 1}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 500
    assert res.json() == {"detail": "Server error"}
    assert [e.processor_ref for e in reconciliation.events] == ["pi_test_1"]


def test_history_empty(client, make_user, auth_headers):
    res = client.get("/users/history", headers=auth_headers(make_user()))
    assert res.status_code == 200
    assert res.json() == []


def test_history_is_per_user(client, make_user, make_product, auth_headers):
    alice = make_user("alice", customer_id="cus_a")
    bob = make_user("bob", customer_id="cus_b")
    p = make_product()
    body = {"items": [{"product_id": p, "quantity": 1}], "payment_method_id": "pm_x"}
    assert client.post("/users/buy", json=body, headers=auth_headers(alice)).status_code == 200

    assert len(client.get("/users/history", headers=auth_headers(alice)).json()) == 1
    assert client.get("/users/history", headers=auth_headers(bob)).json() == []


def test_buy_product_id_out_of_range(client, gateway, make_user, auth_headers, count_purchases):
    user = make_user(customer_id="cus_known")
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": 2**63, "quantity": 1}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 400
    assert res.json()["detail"].startswith("Invalid request")
    assert gateway.calls == []
    assert count_purchases() == 0


def test_buy_quantity_too_large(client, gateway, make_user, make_product, auth_headers):
    user = make_user(customer_id="cus_known")
    res = client.post(
        "/users/buy",
        json={"items": [{"product_id": make_product(), "quantity": 2**63}], "payment_method_id": "pm_x"},
        headers=auth_headers(user),
    )
    assert res.status_code == 400
    assert gateway.calls == []
