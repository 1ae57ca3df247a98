from datetime import date, timedelta

import pytest
from sqlalchemy import func, select

from app.core.errors import ConflictError, InsufficientStockError
from app.models import Batch, Bill, Patient, SellingLog
from app.schemas.billing import SaleBillHeader, SaleEntry, SellingLogUpdate
from app.services import sales
from tests.conftest import make_batch


def _count(db, model):
    return db.scalar(select(func.count()).select_from(model))


def _sale(bill, entries):
    return {"bill": bill, "entries": entries}


def _line(medicine_id, batch_number="B1", quantity=2, **extra):
    line = {"medicineId": medicine_id, "batchNumber": batch_number, "quantity": quantity, "price": "15.00"}
    line.update(extra)
    return line


def test_sale_decrements_the_targeted_batch(client, db, headers, patient, medicine, batch):
    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id, "doctorName": "Dr. Mehta"}, [_line(medicine.id)]),
        headers=headers,
    )

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["stocks"][0]["quantity_available"] == 8
    assert body["logs"][0]["quantity_sold"] == 2
    assert body["logs"][0]["hsn_code"] == "3004"
    assert body["logs"][0]["expiry_date"] == batch.expiry_date.isoformat()
    db.refresh(batch)
    assert batch.quantity_available == 8
    assert _count(db, Bill) == 1
    assert _count(db, SellingLog) == 1


def test_sale_creates_patient_from_name(client, db, headers, account, medicine, batch):
    response = client.post(
        "/api/bills",
        json=_sale({"patient": {"name": "AutoPatient"}}, [_line(medicine.id, quantity=1)]),
        headers=headers,
    )

    assert response.status_code == 201, response.text
    patient = db.scalar(select(Patient).where(Patient.name == "AutoPatient"))
    assert patient is not None
    assert patient.account_id == account.id
    assert response.json()["bill"]["patient_id"] == patient.id


def test_sale_reuses_patient_with_same_name(db, account, patient, medicine, batch):
    header = SaleBillHeader(patient={"name": patient.name})
    entry = SaleEntry(medicineId=medicine.id, batchNumber="B1", quantity=1, price="10")

    result = sales.create_sale(db, header, [entry], account.id)

    assert result.bill.patient_id == patient.id
    assert _count(db, Patient) == 1


def test_sale_without_patient_is_rejected(client, db, headers, medicine, batch):
    response = client.post("/api/bills", json=_sale({}, [_line(medicine.id)]), headers=headers)

    assert response.status_code == 400
    assert _count(db, Bill) == 0


def test_oversell_changes_nothing(client, db, headers, patient, medicine, batch):
    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id}, [_line(medicine.id, quantity=100)]),
        headers=headers,
    )

    assert response.status_code == 400
    assert "only 10 available" in response.json()["error"]
    db.refresh(batch)
    assert batch.quantity_available == 10
    assert _count(db, Bill) == 0
    assert _count(db, SellingLog) == 0


def test_failed_line_rolls_back_earlier_lines(client, db, headers, account, patient, medicine, batch):
    other = make_batch(db, account, medicine, batch_number="B2", quantity=1)

    response = client.post(
        "/api/bills",
        json=_sale(
            {"patientId": patient.id},
            [_line(medicine.id, "B1", 3), _line(medicine.id, "B2", 5)],
        ),
        headers=headers,
    )

    assert response.status_code == 400
    db.refresh(batch)
    db.refresh(other)
    assert batch.quantity_available == 10
    assert other.quantity_available == 1
    assert _count(db, SellingLog) == 0


def test_sale_from_unknown_batch_is_rejected(client, db, headers, patient, medicine):
    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id}, [_line(medicine.id, "MISSING")]),
        headers=headers,
    )

    assert response.status_code == 400
    assert "MISSING" in response.json()["error"]
    assert _count(db, Bill) == 0


def test_sale_takes_earliest_expiry_for_shared_batch_number(db, account, patient, medicine):
    later = make_batch(db, account, medicine, expiry_date=date.today() + timedelta(days=400))
    sooner = make_batch(db, account, medicine, expiry_date=date.today() + timedelta(days=90))
    header = SaleBillHeader(patientId=patient.id)

    result = sales.create_sale(db, header, [SaleEntry(medicineId=medicine.id, batchNumber="B1", quantity=4, price="1")], account.id)

    assert result.stocks[0].id == sooner.id
    db.refresh(later)
    assert later.quantity_available == 10


def test_sale_honours_explicit_batch_id(db, account, patient, medicine):
    later = make_batch(db, account, medicine, expiry_date=date.today() + timedelta(days=400))
    make_batch(db, account, medicine, expiry_date=date.today() + timedelta(days=90))
    entry = SaleEntry(medicineId=medicine.id, batchNumber="B1", batchId=later.id, quantity=4, price="1")

    result = sales.create_sale(db, SaleBillHeader(patientId=patient.id), [entry], account.id)

    assert result.stocks[0].id == later.id
    assert result.stocks[0].quantity_available == 6


def test_sale_is_scoped_to_account(client, db, headers, patient, medicine):
    from tests.conftest import make_account

    stranger = make_account(db, name="Other Pharmacy", email="other@pharmacy.test")
    make_batch(db, stranger, medicine)

    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id}, [_line(medicine.id)]),
        headers=headers,
    )

    assert response.status_code == 400


@pytest.fixture
def sold(db, account, patient, medicine, batch):
    header = SaleBillHeader(patientId=patient.id)
    result = sales.create_sale(db, header, [SaleEntry(medicineId=medicine.id, batchNumber="B1", quantity=2, price="15")], account.id)
    return result.logs[0]


def test_raising_sold_quantity_takes_more_stock(db, account, batch, sold):
    sales.update_selling_log(db, sold.id, SellingLogUpdate(quantitySold=5), account.id)

    db.refresh(batch)
    assert batch.quantity_available == 5


def test_lowering_sold_quantity_returns_stock(db, account, batch, sold):
    sales.update_selling_log(db, sold.id, SellingLogUpdate(quantitySold=1), account.id)

    db.refresh(batch)
    assert batch.quantity_available == 9


def test_raising_sold_quantity_beyond_stock_fails(db, account, batch, sold):
    with pytest.raises(InsufficientStockError):
        sales.update_selling_log(db, sold.id, SellingLogUpdate(quantitySold=20), account.id)

    db.refresh(batch)
    db.refresh(sold)
    assert batch.quantity_available == 8
    assert sold.quantity_sold == 2


def test_price_only_update_leaves_stock(db, account, batch, sold):
    log = sales.update_selling_log(db, sold.id, SellingLogUpdate(price="18.25"), account.id)

    assert str(log.unit_price_inclusive_gst) == "18.25"
    db.refresh(batch)
    assert batch.quantity_available == 8


def test_deleting_selling_log_restores_stock(client, db, headers, batch, sold):
    response = client.delete(f"/api/selling-logs/{sold.id}", headers=headers)

    assert response.status_code == 204
    db.refresh(batch)
    assert batch.quantity_available == 10
    assert _count(db, SellingLog) == 0


def test_bill_with_lines_cannot_be_deleted(db, account, sold):
    with pytest.raises(ConflictError):
        sales.delete_bill(db, sold.bill_id, account.id)


def test_empty_bill_can_be_deleted(client, db, headers, sold):
    bill_id = sold.bill_id
    assert client.delete(f"/api/selling-logs/{sold.id}", headers=headers).status_code == 204

    response = client.delete(f"/api/bills/{bill_id}", headers=headers)

    assert response.status_code == 204
    assert _count(db, Bill) == 0


def test_standalone_selling_log_against_bill(client, db, headers, batch, sold, medicine):
    response = client.post(
        "/api/selling-logs",
        json={"billId": sold.bill_id, "medicineId": medicine.id, "batchNumber": "B1", "quantitySold": 3, "price": "15"},
        headers=headers,
    )

    assert response.status_code == 201, response.text
    db.refresh(batch)
    assert batch.quantity_available == 5
    listed = client.get("/api/selling-logs", params={"bill_id": sold.bill_id}, headers=headers)
    assert len(listed.json()) == 2


def test_bill_detail_includes_patient(client, headers, patient, sold):
    response = client.get(f"/api/bills/{sold.bill_id}", headers=headers)

    assert response.status_code == 200
    assert response.json()["patient"]["name"] == patient.name


def test_sale_line_with_zero_quantity_is_a_bad_request(client, db, headers, patient, medicine, batch):
    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id}, [_line(medicine.id, quantity=0)]),
        headers=headers,
    )

    assert response.status_code == 400
    assert "quantity" in response.json()["error"]
    assert _count(db, Bill) == 0


def test_sale_line_with_blank_batch_number_is_a_bad_request(client, db, headers, patient, medicine, batch):
    response = client.post(
        "/api/bills",
        json=_sale({"patientId": patient.id}, [_line(medicine.id, "   ")]),
        headers=headers,
    )

    assert response.status_code == 400
    assert _count(db, Bill) == 0


def test_standalone_selling_log_cannot_oversell(client, db, headers, batch, sold, medicine):
    response = client.post(
        "/api/selling-logs",
        json={"billId": sold.bill_id, "medicineId": medicine.id, "batchNumber": "B1", "quantitySold": 50},
        headers=headers,
    )

    assert response.status_code == 400
    assert "only 8 available" in response.json()["error"]
    db.refresh(batch)
    assert batch.quantity_available == 8
    assert _count(db, SellingLog) == 1


def test_standalone_selling_log_for_unknown_batch(client, db, headers, sold, medicine):
    response = client.post(
        "/api/selling-logs",
        json={"billId": sold.bill_id, "medicineId": medicine.id, "batchNumber": "NOPE", "quantitySold": 1},
        headers=headers,
    )

    assert response.status_code == 400
    assert _count(db, SellingLog) == 1


def test_standalone_selling_log_for_unknown_bill(client, db, headers, batch, medicine):
    response = client.post(
        "/api/selling-logs",
        json={"billId": 4040, "medicineId": medicine.id, "batchNumber": "B1", "quantitySold": 1},
        headers=headers,
    )

    assert response.status_code == 400
    db.refresh(batch)
    assert batch.quantity_available == 10
    assert _count(db, SellingLog) == 0


def test_standalone_selling_log_for_another_accounts_bill(client, db, headers, batch, medicine):
    from tests.conftest import make_account

    stranger = make_account(db, name="Other Pharmacy", email="other@pharmacy.test")
    make_batch(db, stranger, medicine)
    foreign = sales.create_sale(
        db,
        SaleBillHeader(patient={"name": "Someone Else"}),
        [SaleEntry(medicineId=medicine.id, batchNumber="B1", quantity=1, price="5")],
        stranger.id,
    )
    foreign_bill_id = foreign.bill.id

    response = client.post(
        "/api/selling-logs",
        json={"billId": foreign_bill_id, "medicineId": medicine.id, "batchNumber": "B1", "quantitySold": 1},
        headers=headers,
    )

    assert response.status_code == 400
    assert response.json() == {"error": "Bill not found"}
    db.refresh(batch)
    assert batch.quantity_available == 10
    assert _count(db, SellingLog) == 1
