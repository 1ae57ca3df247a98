from datetime import date, timedelta

import pytest
from sqlalchemy import event

from app.core.errors import NotFoundError
from app.services import stock
from tests.conftest import make_account, make_batch


def test_medicine_with_contents(client, headers):
    content = client.post("/api/contents", json={"name": "Paracetamol"}, headers=headers).json()

    created = client.post(
        "/api/medicines",
        json={"name": "Calpol 650", "hsn": "3004", "contents": [content["id"]]},
        headers=headers,
    )

    assert created.status_code == 201, created.text
    assert [row["name"] for row in created.json()["contents"]] == ["Paracetamol"]


def test_medicine_with_unknown_content_is_not_created(client, headers):
    response = client.post("/api/medicines", json={"name": "Ghost", "contents": [42]}, headers=headers)

    assert response.status_code == 404
    assert client.get("/api/medicines", headers=headers).json() == []


def test_duplicate_names_conflict(client, headers):
    assert client.post("/api/contents", json={"name": "Ibuprofen"}, headers=headers).status_code == 201
    assert client.post("/api/medicines", json={"name": "Brufen"}, headers=headers).status_code == 201

    content = client.post("/api/contents", json={"name": "Ibuprofen"}, headers=headers)
    medicine = client.post("/api/medicines", json={"name": "Brufen"}, headers=headers)

    assert content.status_code == 400
    assert medicine.json() == {"error": "Medicine name must be unique"}


def test_link_and_unlink_content(client, headers, medicine):
    content = client.post("/api/contents", json={"name": "Caffeine"}, headers=headers).json()

    linked = client.post(f"/api/medicines/{medicine.id}/contents", json={"contentId": content["id"]}, headers=headers)
    assert linked.status_code == 201
    listed = client.get(f"/api/medicines/{medicine.id}/contents", headers=headers)
    assert [row["id"] for row in listed.json()] == [content["id"]]

    removed = client.delete(f"/api/medicines/{medicine.id}/contents/{content['id']}", headers=headers)
    assert removed.status_code == 204
    assert client.get(f"/api/medicines/{medicine.id}/contents", headers=headers).json() == []


def test_medicine_search_by_prefix(client, headers):
    for name in ("Azithral 500", "Amlodipine 5mg", "Dolo 650"):
        client.post("/api/medicines", json={"name": name}, headers=headers)

    response = client.get("/api/medicines/search", params={"q": "a"}, headers=headers)

    assert [row["name"] for row in response.json()] == ["Amlodipine 5mg", "Azithral 500"]


def test_medicine_stock_create_merges_on_key(client, headers, medicine):
    payload = {
        "medicineId": medicine.id,
        "batchNumber": "LOT-9",
        "incomingDate": "2026-02-01",
        "expiryDate": "2027-02-01",
        "quantityAvailable": 12,
        "price": "4.50",
    }

    first = client.post("/api/medicine-stocks", json=payload, headers=headers).json()
    second = client.post("/api/medicine-stocks", json={**payload, "quantityAvailable": 3}, headers=headers).json()

    assert second["id"] == first["id"]
    assert second["quantity_available"] == 15


def test_medicine_stock_missing_fields(client, headers, medicine):
    response = client.post("/api/medicine-stocks", json={"medicineId": medicine.id}, headers=headers)

    assert response.status_code == 400
    assert response.json()["error"].startswith("Missing required field(s): batchNumber")


def test_medicine_stock_for_unknown_medicine(client, headers):
    response = client.post(
        "/api/medicine-stocks",
        json={
            "medicineId": 777,
            "batchNumber": "LOT-1",
            "incomingDate": "2026-02-01",
            "expiryDate": "2027-02-01",
            "quantity": 1,
        },
        headers=headers,
    )

    assert response.status_code == 400


def test_stock_is_scoped_to_account(client, db, headers, medicine, batch):
    stranger = make_account(db, name="Other Pharmacy", email="other@pharmacy.test")
    foreign = make_batch(db, stranger, medicine, batch_number="FOREIGN")

    listed = client.get("/api/medicine-stocks", headers=headers).json()

    assert [row["id"] for row in listed] == [batch.id]
    assert client.get(f"/api/medicine-stocks/{foreign.id}", headers=headers).status_code == 404


def test_stock_search_skips_empty_batches(client, db, headers, account, medicine, batch):
    make_batch(db, account, medicine, batch_number="EMPTY", quantity=0)

    response = client.get("/api/medicine-stocks/search", params={"q": "para"}, headers=headers)

    rows = response.json()
    assert [row["batch_number"] for row in rows] == ["B1"]
    assert rows[0]["medicine_name"] == "Paracetamol 500mg"


def test_stock_summary_counts(client, db, headers, account, medicine):
    make_batch(db, account, medicine, batch_number="LOW", quantity=3)
    make_batch(db, account, medicine, batch_number="SOON", quantity=50, expiry_date=date.today() + timedelta(days=10))
    make_batch(db, account, medicine, batch_number="FINE", quantity=50)

    response = client.get("/api/medicine-stocks/summary", headers=headers)

    assert response.json() == {"low_stock_count": 1, "expiring_soon_count": 1}


def test_medicine_stock_update_and_delete(client, headers, batch):
    updated = client.put(f"/api/medicine-stocks/{batch.id}", json={"quantityAvailable": 4}, headers=headers)
    assert updated.json()["quantity_available"] == 4

    assert client.delete(f"/api/medicine-stocks/{batch.id}", headers=headers).status_code == 204
    assert client.get(f"/api/medicine-stocks/{batch.id}", headers=headers).status_code == 404


def test_provider_and_patient_crud(client, headers):
    provider = client.post(
        "/api/providers",
        json={"name": "Apex Pharma", "contactEmail": "sales@apex.test"},
        headers=headers,
    )
    assert provider.status_code == 201
    patient = client.post("/api/patients", json={"name": "Ravi", "dateOfBirth": "1990-05-04"}, headers=headers)
    assert patient.status_code == 201

    renamed = client.put(f"/api/patients/{patient.json()['id']}", json={"phone": "9833333333"}, headers=headers)
    assert renamed.json()["phone"] == "9833333333"
    assert renamed.json()["name"] == "Ravi"

    assert client.delete(f"/api/providers/{provider.json()['id']}", headers=headers).status_code == 204
    assert client.get("/api/providers", headers=headers).json() == []


def test_customer_names_are_unique(client, headers):
    assert client.post("/api/customers", json={"name": "Walk-in"}, headers=headers).status_code == 201

    response = client.post("/api/customers", json={"name": "Walk-in"}, headers=headers)

    assert response.status_code == 400


def test_batch_merge_locks_the_medicine_before_looking_up(engine, db, account, medicine):
    statements = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    event.listen(engine, "before_cursor_execute", record)
    try:
        stock.merge_or_create_batch(
            db,
            account_id=account.id,
            medicine_id=medicine.id,
            batch_number="LOT-2",
            incoming_date=date(2026, 2, 1),
            expiry_date=date(2027, 2, 1),
            quantity=5,
            price="3.00",
        )
    finally:
        event.remove(engine, "before_cursor_execute", record)

    selects = [sql for sql in statements if sql.lstrip().upper().startswith("SELECT")]
    assert "FROM medicines" in selects[0]
    assert any("FROM batches" in sql for sql in selects[1:])


def test_batch_merge_for_unknown_medicine(db, account):
    with pytest.raises(NotFoundError):
        stock.merge_or_create_batch(
            db,
            account_id=account.id,
            medicine_id=31337,
            batch_number="LOT-3",
            incoming_date=date(2026, 2, 1),
            expiry_date=date(2027, 2, 1),
            quantity=1,
            price="1.00",
        )
