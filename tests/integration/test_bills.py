"""Integration tests: bill lifecycle and payments against a real database."""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import AsyncClient

from billboard.utils.time import get_utc_now
from tests.conftest import requires_db

pytestmark = requires_db


def _bill_payload(item_id: str, **overrides) -> dict:
    payload = {
        "bill_date": get_utc_now().date().isoformat(),
        "items": [{"item_id": item_id, "quantity": "3", "unit_price": "100"}],
        "tax_rate": "10",
        "discount": "20",
    }
    payload.update(overrides)
    return payload


async def _create_bill(async_client: AsyncClient, api_base: str, shop: dict, **overrides) -> dict:
    resp = await async_client.post(
        f"{api_base}/shops/{shop['shop_id']}/bills",
        headers=shop["headers"],
        json=_bill_payload(shop["item_id"], **overrides),
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


async def _get_item(async_client: AsyncClient, api_base: str, shop: dict) -> dict:
    resp = await async_client.get(
        f"{api_base}/shops/{shop['shop_id']}/items/{shop['item_id']}",
        headers=shop["headers"],
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]


@pytest.mark.asyncio
async def test_create_bill_computes_ledger_and_decrements_stock(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bill = await _create_bill(async_client, api_base, seeded_shop, customer_id=seeded_shop["customer_id"])

    assert Decimal(bill["subtotal"]) == Decimal("300")
    assert Decimal(bill["tax_amount"]) == Decimal("30")
    assert Decimal(bill["total_amount"]) == Decimal("310")
    assert Decimal(bill["balance"]) == Decimal("310")
    assert Decimal(bill["paid_amount"]) == Decimal("0")
    assert bill["status"] == "draft"
    assert bill["bill_number"].startswith(f"BILL-{get_utc_now().year}-")
    assert bill["customer"]["id"] == seeded_shop["customer_id"]
    assert len(bill["items"]) == 1
    assert bill["items"][0]["item_name"].startswith("Widget")
    assert bill["payments"] == []

    item = await _get_item(async_client, api_base, seeded_shop)
    assert Decimal(item["quantity"]) == Decimal("7")


@pytest.mark.asyncio
async def test_full_payment_marks_paid_and_locks_bill(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bill = await _create_bill(async_client, api_base, seeded_shop)
    bills_url = f"{api_base}/shops/{seeded_shop['shop_id']}/bills"

    resp = await async_client.post(
        f"{bills_url}/{bill['id']}/payments",
        headers=seeded_shop["headers"],
        json={
            "amount": "310",
            "payment_date": get_utc_now().date().isoformat(),
            "payment_method": "cash",
        },
    )
    assert resp.status_code == 200, resp.text
    assert Decimal(resp.json()["data"]["amount"]) == Decimal("310")

    resp = await async_client.get(f"{bills_url}/{bill['id']}", headers=seeded_shop["headers"])
    paid = resp.json()["data"]
    assert Decimal(paid["paid_amount"]) == Decimal("310")
    assert Decimal(paid["balance"]) == Decimal("0")
    assert paid["status"] == "paid"
    assert len(paid["payments"]) == 1

    # Paid bills are read-only
    resp = await async_client.put(
        f"{bills_url}/{bill['id']}",
        headers=seeded_shop["headers"],
        json=_bill_payload(seeded_shop["item_id"], discount="0", notes="edited"),
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "INVALID_STATE"

    resp = await async_client.get(f"{bills_url}/{bill['id']}", headers=seeded_shop["headers"])
    unchanged = resp.json()["data"]
    assert Decimal(unchanged["total_amount"]) == Decimal("310")
    assert unchanged["notes"] is None

    resp = await async_client.delete(f"{bills_url}/{bill['id']}", headers=seeded_shop["headers"])
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_partial_payment_past_due_is_overdue(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    past = (get_utc_now().date() - timedelta(days=5)).isoformat()
    bill = await _create_bill(async_client, api_base, seeded_shop, bill_date=past, due_date=past)

    resp = await async_client.post(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills/{bill['id']}/payments",
        headers=seeded_shop["headers"],
        json={"amount": "100", "payment_date": past, "payment_method": "card"},
    )
    assert resp.status_code == 200, resp.text

    resp = await async_client.get(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills/{bill['id']}",
        headers=seeded_shop["headers"],
    )
    data = resp.json()["data"]
    assert data["status"] == "overdue"
    assert Decimal(data["balance"]) == Decimal("210")

    resp = await async_client.get(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills/stats",
        headers=seeded_shop["headers"],
    )
    stats = resp.json()["data"]
    assert stats["total_bills"] == 1
    assert Decimal(stats["overdue_amount"]) == Decimal("210")
    assert Decimal(stats["paid_amount"]) == Decimal("100")


@pytest.mark.asyncio
async def test_update_draft_replaces_lines(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bill = await _create_bill(async_client, api_base, seeded_shop)

    resp = await async_client.put(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills/{bill['id']}",
        headers=seeded_shop["headers"],
        json={
            "bill_date": bill["bill_date"],
            "items": [{"item_id": seeded_shop["item_id"], "quantity": "1", "unit_price": "50"}],
            "notes": "revised",
        },
    )
    assert resp.status_code == 200, resp.text
    updated = resp.json()["data"]
    assert updated["bill_number"] == bill["bill_number"]
    assert Decimal(updated["total_amount"]) == Decimal("50")
    assert Decimal(updated["balance"]) == Decimal("50")
    assert updated["notes"] == "revised"
    assert len(updated["items"]) == 1
    assert updated["status"] == "draft"


@pytest.mark.asyncio
async def test_delete_draft_then_not_found(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bill = await _create_bill(async_client, api_base, seeded_shop)
    bill_url = f"{api_base}/shops/{seeded_shop['shop_id']}/bills/{bill['id']}"

    resp = await async_client.delete(bill_url, headers=seeded_shop["headers"])
    assert resp.status_code == 200, resp.text

    resp = await async_client.get(bill_url, headers=seeded_shop["headers"])
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "BILL_NOT_FOUND"

    resp = await async_client.get(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills", headers=seeded_shop["headers"]
    )
    assert all(b["id"] != bill["id"] for b in resp.json()["data"])

    # Payments are refused once the bill is gone
    resp = await async_client.post(
        f"{bill_url}/payments",
        headers=seeded_shop["headers"],
        json={"amount": "10", "payment_date": bill["bill_date"], "payment_method": "cash"},
    )
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_invalid_date_and_unknown_item(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bills_url = f"{api_base}/shops/{seeded_shop['shop_id']}/bills"

    resp = await async_client.post(
        bills_url,
        headers=seeded_shop["headers"],
        json=_bill_payload(seeded_shop["item_id"], bill_date="2026-13-40"),
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "INVALID_DATE"

    resp = await async_client.post(
        bills_url,
        headers=seeded_shop["headers"],
        json=_bill_payload("00000000-0000-0000-0000-000000000000"),
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "ITEM_NOT_FOUND"

    item = await _get_item(async_client, api_base, seeded_shop)
    assert Decimal(item["quantity"]) == Decimal("10")


@pytest.mark.asyncio
async def test_non_member_is_denied(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    resp = await async_client.post(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills",
        headers=seeded_shop["outsider_headers"],
        json=_bill_payload(seeded_shop["item_id"]),
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["code"] == "ACCESS_DENIED"

    resp = await async_client.get(
        f"{api_base}/shops/{seeded_shop['shop_id']}/bills",
        headers=seeded_shop["outsider_headers"],
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_concurrent_creates_get_distinct_numbers(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bills = await asyncio.gather(
        *[_create_bill(async_client, api_base, seeded_shop) for _ in range(4)]
    )
    numbers = [bill["bill_number"] for bill in bills]
    assert len(set(numbers)) == len(numbers)


@pytest.mark.asyncio
async def test_list_bills_filters(
    async_client: AsyncClient, api_base: str, seeded_shop: dict
):
    bills_url = f"{api_base}/shops/{seeded_shop['shop_id']}/bills"
    today = get_utc_now().date()
    early = (today - timedelta(days=10)).isoformat()
    middle = (today - timedelta(days=5)).isoformat()

    ordered = await _create_bill(
        async_client, api_base, seeded_shop,
        bill_date=early, notes="Spring ORDER for Acme", customer_id=seeded_shop["customer_id"],
    )
    walk_in = await _create_bill(async_client, api_base, seeded_shop, bill_date=middle, notes="walk-in")
    latest = await _create_bill(async_client, api_base, seeded_shop)

    resp = await async_client.post(
        f"{bills_url}/{walk_in['id']}/payments",
        headers=seeded_shop["headers"],
        json={"amount": "310", "payment_date": middle, "payment_method": "cash"},
    )
    assert resp.status_code == 200, resp.text

    async def listed(**params) -> list:
        resp = await async_client.get(bills_url, headers=seeded_shop["headers"], params=params)
        assert resp.status_code == 200, resp.text
        return [bill["id"] for bill in resp.json()["data"]]

    assert await listed() == [latest["id"], walk_in["id"], ordered["id"]]

    assert await listed(search="spring order") == [ordered["id"]]
    assert await listed(search=walk_in["bill_number"].lower()) == [walk_in["id"]]
    assert await listed(search="no such text") == []

    assert await listed(status="paid") == [walk_in["id"]]
    assert await listed(status="draft") == [latest["id"], ordered["id"]]
    assert await listed(customer_id=seeded_shop["customer_id"]) == [ordered["id"]]

    # Both ends of the date range are inclusive
    assert await listed(start_date=middle) == [latest["id"], walk_in["id"]]
    assert await listed(end_date=middle) == [walk_in["id"], ordered["id"]]
    assert await listed(start_date=early, end_date=early) == [ordered["id"]]
    assert await listed(start_date=middle, end_date=middle, status="draft") == []
