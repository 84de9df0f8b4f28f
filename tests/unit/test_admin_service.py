from datetime import datetime

import pytest

import storefront.admin.service as svc
from storefront.errors import InvalidInput
from storefront.infra.database import purchases


@pytest.fixture()
def sales(store, make_user, make_product):
    alice = make_user("alice")
    bob = make_user("bob")
    widget = make_product("Widget", 500)
    gadget = make_product("Gadget", 1200)
    rows = [
        (alice.user_id, widget, 1, 500, datetime(2024, 3, 1, 9, 0)),
        (alice.user_id, gadget, 2, 2400, datetime(2024, 3, 2, 23, 30)),
        (bob.user_id, widget, 3, 1500, datetime(2024, 3, 5, 12, 0)),
    ]
    with store.begin() as conn:
        for user_id, product_id, qty, total, at in rows:
            conn.execute(purchases.insert().values(
                user_id=user_id,
                product_id=product_id,
                quantity=qty,
                total_price_cents=total,
                stripe_payment_intent_id="pi_seed",
                purchased_at=at,
            ))
    return {"alice": alice, "bob": bob, "widget": widget, "gadget": gadget}


def test_get_sales_all_newest_first(store, sales):
    res = svc.get_sales(store)
    assert [r["username"] for r in res] == ["bob", "alice", "alice"]
    assert [r["total_price_cents"] for r in res] == [1500, 2400, 500]
    assert res[0]["product_name"] == "Widget"


def test_get_sales_to_includes_whole_day(store, sales):
    res = svc.get_sales(store, date_from="2024-03-02", date_to="2024-03-02")
    assert [(r["username"], r["quantity"]) for r in res] == [("alice", 2)]


def test_get_sales_from_only(store, sales):
    res = svc.get_sales(store, date_from="2024-03-03")
    assert [r["username"] for r in res] == ["bob"]


def test_get_sales_by_username(store, sales):
    res = svc.get_sales(store, username="alice")
    assert {r["username"] for r in res} == {"alice"}
    assert len(res) == 2


def test_get_sales_unknown_username(store, sales):
    assert svc.get_sales(store, username="nobody") == []


@pytest.mark.parametrize("kwargs, label", [({"date_from": "03/01/2024"}, "from"), ({"date_to": "2024-13-01"}, "to")])
def test_get_sales_invalid_date(store, kwargs, label):
    with pytest.raises(InvalidInput) as exc:
        svc.get_sales(store, **kwargs)
    assert exc.value.detail == f"Invalid '{label}' date: use YYYY-MM-DD"
