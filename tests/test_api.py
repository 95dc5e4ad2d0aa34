from datetime import datetime, timedelta
from decimal import Decimal

from bookstore.models import Invoice, InvoiceDetail, Order, OrderDetail


def promotion_payload(store_date, **overrides):
    payload = {
        "name": "Tuần lễ sách",
        "type": "percent",
        "discount_value": 20,
        "start_date": (store_date - timedelta(days=3)).isoformat(),
        "end_date": (store_date + timedelta(days=3)).isoformat(),
        "min_price": 200000,
        "quantity": 1,
        "book_ids": [],
    }
    payload.update(overrides)
    return payload


# ==================== Promotions ====================

async def test_create_and_list_promotions(client, store_date):
    response = await client.post("/api/v1/promotions", json=promotion_payload(store_date))

    assert response.status_code == 201
    body = response.json()
    assert body["promotion_code"] == "KM01"
    assert body["used_quantity"] == 0
    assert body["remaining_quantity"] == 1

    listed = await client.get("/api/v1/promotions")
    assert listed.status_code == 200
    assert [p["promotion_code"] for p in listed.json()] == ["KM01"]


async def test_create_rejects_long_window(client, store_date):
    response = await client.post("/api/v1/promotions", json=promotion_payload(
        store_date,
        end_date=(store_date + timedelta(days=40)).isoformat(),
    ))

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "duration_exceeded"
    assert body["message"] == "Thời gian áp dụng khuyến mãi tối đa là 30 ngày."


async def test_create_missing_fields(client):
    response = await client.post("/api/v1/promotions", json={"name": "Thiếu"})

    assert response.status_code == 400
    assert response.json()["error"] == "missing_parameter"


async def test_check_then_redeem_until_exhausted(client, store_date):
    created = await client.post("/api/v1/promotions", json=promotion_payload(store_date))
    promotion_id = created.json()["id"]

    check = await client.post("/api/v1/promotions/check", json={"code": "km01", "total_amount": 500000})
    assert check.status_code == 200
    quote = check.json()
    assert quote["approved"] is True
    assert Decimal(str(quote["discount_amount"])) == Decimal("100000")
    assert Decimal(str(quote["final_amount"])) == Decimal("400000")

    first = await client.post(f"/api/v1/promotions/{promotion_id}/redeem")
    assert first.status_code == 200
    assert first.json()["used_quantity"] == 1

    second = await client.post(f"/api/v1/promotions/{promotion_id}/redeem")
    assert second.status_code == 409
    assert second.json()["error"] == "exhausted"

    check_again = await client.post("/api/v1/promotions/check", json={"code": "KM01", "total_amount": 500000})
    assert check_again.status_code == 409
    assert check_again.json()["message"] == "Mã khuyến mãi đã hết lượt sử dụng"


async def test_check_errors(client, store_date):
    await client.post("/api/v1/promotions", json=promotion_payload(store_date, quantity=None))

    missing = await client.post("/api/v1/promotions/check", json={"code": "KM01"})
    assert missing.status_code == 400
    assert missing.json()["error"] == "missing_parameter"

    unknown = await client.post("/api/v1/promotions/check", json={"code": "XX", "total_amount": 1})
    assert unknown.status_code == 404
    assert unknown.json()["message"] == "Mã khuyến mãi không hợp lệ"

    for bad_total in ("abc", [1], True):
        invalid = await client.post("/api/v1/promotions/check", json={"code": "KM01", "total_amount": bad_total})
        assert invalid.status_code == 400
        assert invalid.json()["error"] == "invalid_parameter"

    below = await client.post("/api/v1/promotions/check", json={"code": "KM01", "total_amount": 150000})
    assert below.status_code == 400
    body = below.json()
    assert body["error"] == "below_minimum"
    assert Decimal(body["context"]["shortfall"]) == Decimal("50000")


async def test_check_expired(client, store_date):
    await client.post("/api/v1/promotions", json=promotion_payload(
        store_date,
        start_date=(store_date - timedelta(days=10)).isoformat(),
        end_date=(store_date - timedelta(days=1)).isoformat(),
    ))

    response = await client.post("/api/v1/promotions/check", json={"code": "KM01", "total_amount": 500000})

    assert response.status_code == 400
    assert response.json()["error"] == "expired"
    assert response.json()["context"]["reason"] == "expired"


async def test_available_promotions(client, store_date):
    await client.post("/api/v1/promotions", json=promotion_payload(store_date, min_price=100000))
    await client.post("/api/v1/promotions", json=promotion_payload(store_date, min_price=900000))

    response = await client.get("/api/v1/promotions/available", params={"total_price": 300000})

    assert response.status_code == 200
    assert [p["promotion_code"] for p in response.json()] == ["KM01"]

    missing = await client.get("/api/v1/promotions/available")
    assert missing.status_code == 400


async def test_update_and_delete_promotion(client, store_date):
    created = await client.post("/api/v1/promotions", json=promotion_payload(store_date, book_ids=[1]))
    promotion_id = created.json()["id"]

    updated = await client.put(
        f"/api/v1/promotions/{promotion_id}",
        json=promotion_payload(store_date, name="Đã sửa", book_ids=[2, 3]),
    )
    assert updated.status_code == 200
    assert updated.json()["name"] == "Đã sửa"
    assert updated.json()["book_ids"] == [2, 3]

    deleted = await client.delete(f"/api/v1/promotions/{promotion_id}")
    assert deleted.status_code == 200
    assert deleted.json()["message"] == "Xóa khuyến mãi thành công"

    again = await client.delete(f"/api/v1/promotions/{promotion_id}")
    assert again.status_code == 404

    missing = await client.put("/api/v1/promotions/999", json=promotion_payload(store_date))
    assert missing.status_code == 404


# ==================== Reports ====================

async def test_yearly_and_daily_revenue(client, seeded):
    async with seeded() as session:
        session.add_all([
            Invoice(created_at=datetime(2024, 2, 29, 10, 0), details=[
                InvoiceDetail(book_id=1, quantity=2, unit_price=Decimal("50000")),
            ]),
            Order(order_date=datetime(2024, 2, 29, 20, 0), details=[
                OrderDetail(book_id=2, quantity=1, unit_price=Decimal("80000")),
            ]),
        ])
        await session.commit()

    yearly = await client.get("/api/v1/reports/revenue/yearly", params={"year": 2024})
    assert yearly.status_code == 200
    monthly = yearly.json()["monthly"]
    assert len(monthly) == 12
    assert monthly[1]["total_revenue"] == 180000
    assert monthly[1]["total_sold"] == 3

    daily = await client.get(
        "/api/v1/reports/revenue/daily",
        params={"month": 2, "year": 2024, "channel": "online"},
    )
    assert daily.status_code == 200
    body = daily.json()
    assert body["channel"] == "online"
    assert len(body["daily"]) == 29
    assert body["daily"][28]["total_revenue"] == 80000

    total = await client.get("/api/v1/reports/revenue/monthly-total", params={"month": 2, "year": 2024})
    assert total.json()["total_revenue"] == 180000

    top = await client.get("/api/v1/reports/top-sellers", params={"month": 2, "year": 2024})
    assert top.status_code == 200
    assert [item["book_id"] for item in top.json()["items"]] == [1, 2]


async def test_report_parameter_errors(client):
    no_year = await client.get("/api/v1/reports/revenue/yearly")
    assert no_year.status_code == 400
    assert no_year.json() == {"error": "missing_parameter", "message": "Thiếu tham số năm", "context": {"year": None}}

    no_month = await client.get("/api/v1/reports/revenue/daily", params={"year": 2024})
    assert no_month.status_code == 400
    assert no_month.json()["message"] == "Thiếu tham số tháng hoặc năm"

    no_year_top = await client.get("/api/v1/reports/top-sellers", params={"month": 1})
    assert no_year_top.status_code == 400

    bad_month = await client.get("/api/v1/reports/revenue/daily", params={"month": 13, "year": 2024})
    assert bad_month.status_code == 400
    assert bad_month.json()["error"] == "invalid_parameter"

    for params in ({"year": -1}, {"year": 9999}):
        bad_year = await client.get("/api/v1/reports/revenue/yearly", params=params)
        assert bad_year.status_code == 400
        assert bad_year.json()["error"] == "invalid_parameter"

    year_zero = await client.get("/api/v1/reports/revenue/daily", params={"month": 1, "year": 0})
    assert year_zero.status_code == 400


async def test_empty_year_is_zero_filled(client):
    response = await client.get("/api/v1/reports/revenue/yearly", params={"year": 1999})

    assert response.status_code == 200
    assert [point["total_revenue"] for point in response.json()["monthly"]] == [0.0] * 12


# ==================== Rules ====================

async def test_get_and_update_rules(client):
    current = await client.get("/api/v1/rules")
    assert current.status_code == 200
    assert current.json()["max_promotion_duration"] == 30

    updated = await client.put("/api/v1/rules", json={
        "min_import_quantity": 100,
        "min_stock_before_import": 200,
        "min_stock_after_sale": 10,
        "max_promotion_duration": 60,
    })
    assert updated.status_code == 200
    assert updated.json()["max_promotion_duration"] == 60

    assert (await client.get("/api/v1/rules")).json()["max_promotion_duration"] == 60


async def test_invalid_rules_are_rejected_whole(client):
    response = await client.put("/api/v1/rules", json={
        "min_import_quantity": 100,
        "min_stock_before_import": -5,
        "min_stock_after_sale": 10,
        "max_promotion_duration": 0,
    })

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "invalid_rules"
    assert set(body["context"]["fields"]) == {"min_stock_before_import", "max_promotion_duration"}

    current = (await client.get("/api/v1/rules")).json()
    assert current["min_import_quantity"] == 150


async def test_root_endpoint(client):
    response = await client.get("/")
    assert response.status_code == 200
