"""Tests for the /v1/warranties endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from backoffice.main import app
from backoffice.routes.warranties import get_warranty_service

from tests.conftest import CREATOR_ID, CUSTOMER_ID, INVOICE_ID, PRODUCT_ID, TECHNICIAN_ID


@pytest.fixture
async def client(service):
    """Test client whose requests run against the SQLite-backed service."""
    app.dependency_overrides[get_warranty_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac
    app.dependency_overrides.clear()


async def _create(client: AsyncClient, **fields) -> dict:
    body = {"creatorId": CREATOR_ID, **fields}
    response = await client.post("/v1/warranties", json=body)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_generates_code(client: AsyncClient):
    data = await _create(
        client,
        customerId=CUSTOMER_ID,
        productId=PRODUCT_ID,
        serialNumber="SN-001",
        issueDescription="No power",
    )

    assert data["code"] == "WR-20261019-0001"
    assert data["status"] == "PENDING"
    assert data["customerId"] == CUSTOMER_ID
    assert data["serialNumber"] == "SN-001"
    assert data["charged"] is False
    assert data["actualReturnDate"] is None
    assert "receivedDate" in data
    assert "createdAt" in data


@pytest.mark.asyncio
async def test_create_missing_customer_is_400(client: AsyncClient):
    response = await client.post(
        "/v1/warranties",
        json={"creatorId": CREATOR_ID, "customerId": 999, "productId": PRODUCT_ID},
    )

    assert response.status_code == 400
    assert response.json() == {
        "error": {
            "code": "VALIDATION_FAILED",
            "message": "Customer with ID 999 not found",
            "detail": {"entity": "customer", "id": 999},
        }
    }

    listed = await client.get("/v1/warranties")
    assert listed.json() == []


@pytest.mark.asyncio
async def test_create_duplicate_code_is_conflict(client: AsyncClient):
    await _create(client, code="WR-MANUAL")

    response = await client.post("/v1/warranties", json={"creatorId": CREATOR_ID, "code": "WR-MANUAL"})

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "CONFLICT"
    assert response.json()["error"]["message"] == "Warranty code must be unique"


@pytest.mark.asyncio
async def test_create_requires_creator(client: AsyncClient):
    response = await client.post("/v1/warranties", json={"customerId": CUSTOMER_ID})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_get_by_id_includes_relations(client: AsyncClient):
    created = await _create(
        client,
        customerId=CUSTOMER_ID,
        productId=PRODUCT_ID,
        invoiceId=INVOICE_ID,
        technicianId=TECHNICIAN_ID,
    )

    response = await client.get(f"/v1/warranties/{created['id']}")

    assert response.status_code == 200
    data = response.json()
    assert data["code"] == created["code"]
    assert data["customer"]["code"] == "KH000001"
    assert data["product"]["warrantyMonths"] == 12
    assert data["invoice"]["code"] == "HD000001"
    assert data["creator"] == {"id": CREATOR_ID, "name": "Front Desk", "email": "frontdesk@example.com"}
    assert data["technician"]["name"] == "Technician"


@pytest.mark.asyncio
async def test_get_missing_is_404(client: AsyncClient):
    response = await client.get("/v1/warranties/999")

    assert response.status_code == 404
    assert response.json() == {
        "error": {
            "code": "NOT_FOUND",
            "message": "Warranty with ID 999 not found",
            "detail": {"id": 999},
        }
    }


@pytest.mark.asyncio
async def test_get_by_code(client: AsyncClient):
    created = await _create(client, customerId=CUSTOMER_ID)

    response = await client.get(f"/v1/warranties/code/{created['code']}")
    missing = await client.get("/v1/warranties/code/WR-NOPE")

    assert response.status_code == 200
    assert response.json()["id"] == created["id"]
    assert missing.status_code == 404
    assert missing.json()["error"]["message"] == "Warranty with code WR-NOPE not found"


@pytest.mark.asyncio
async def test_list_with_filters(client: AsyncClient):
    await _create(client, customerId=CUSTOMER_ID, receivedDate="2026-10-10T08:00:00Z")
    await _create(client, productId=PRODUCT_ID, receivedDate="2026-10-12T08:00:00Z", status="processing")

    everything = await client.get("/v1/warranties")
    by_customer = await client.get("/v1/warranties", params={"customerId": str(CUSTOMER_ID)})
    by_status = await client.get("/v1/warranties", params={"status": "PROCESSING"})
    by_lowercase_status = await client.get("/v1/warranties", params={"status": "processing"})
    by_code = await client.get("/v1/warranties", params={"code": "0002"})

    assert [w["code"] for w in everything.json()] == ["WR-20261019-0002", "WR-20261019-0001"]
    assert [w["code"] for w in by_customer.json()] == ["WR-20261019-0001"]
    assert [w["code"] for w in by_status.json()] == ["WR-20261019-0002"]
    assert by_lowercase_status.status_code == 200
    assert [w["code"] for w in by_lowercase_status.json()] == ["WR-20261019-0002"]
    assert [w["code"] for w in by_code.json()] == ["WR-20261019-0002"]


@pytest.mark.asyncio
async def test_list_rejects_bad_filter_values(client: AsyncClient):
    bad_id = await client.get("/v1/warranties", params={"customerId": "abc"})
    bad_date = await client.get("/v1/warranties", params={"startDate": "yesterday"})
    bad_status = await client.get("/v1/warranties", params={"status": "lost"})

    assert bad_id.status_code == 400
    assert bad_id.json()["error"]["code"] == "VALIDATION_FAILED"
    assert bad_id.json()["error"]["message"] == "customerId must be an integer"
    assert bad_date.status_code == 400
    assert bad_date.json()["error"]["message"] == "startDate must be an ISO-8601 date"
    assert bad_status.status_code == 400
    assert bad_status.json()["error"] == {
        "code": "VALIDATION_FAILED",
        "message": "status must be one of PENDING, PROCESSING, COMPLETED, REJECTED",
        "detail": {"status": "LOST"},
    }


@pytest.mark.asyncio
async def test_patch_to_completed_stamps_return_date(client: AsyncClient):
    created = await _create(client)

    response = await client.patch(
        f"/v1/warranties/{created['id']}",
        json={"status": "COMPLETED", "diagnosis": "Replaced battery"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "COMPLETED"
    assert data["diagnosis"] == "Replaced battery"
    assert data["actualReturnDate"] is not None
    assert data["code"] == created["code"]


@pytest.mark.asyncio
async def test_patch_missing_is_404(client: AsyncClient):
    response = await client.patch("/v1/warranties/999", json={"status": "REJECTED"})
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "NOT_FOUND"


@pytest.mark.asyncio
async def test_delete_returns_record(client: AsyncClient):
    created = await _create(client)

    response = await client.delete(f"/v1/warranties/{created['id']}")
    after = await client.get(f"/v1/warranties/{created['id']}")

    assert response.status_code == 200
    assert response.json()["code"] == created["code"]
    assert after.status_code == 404


@pytest.mark.asyncio
async def test_summary(client: AsyncClient):
    first = await _create(client)
    await _create(client)
    await client.patch(f"/v1/warranties/{first['id']}", json={"status": "REJECTED"})

    response = await client.get("/v1/warranties/summary")

    assert response.status_code == 200
    assert response.json() == {
        "pending": 1,
        "processing": 0,
        "completed": 0,
        "rejected": 1,
        "total": 2,
    }


@pytest.mark.asyncio
async def test_id_zero_is_not_found(client: AsyncClient):
    fetched = await client.get("/v1/warranties/0")
    patched = await client.patch("/v1/warranties/0", json={"notes": "x"})
    deleted = await client.delete("/v1/warranties/0")

    for response in (fetched, patched, deleted):
        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "NOT_FOUND",
            "message": "Warranty with ID 0 not found",
            "detail": {"id": 0},
        }
