"""Report payment API tests."""

from decimal import Decimal
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from reportpay.main import app
from reportpay.models.audit_log import AuditLog
from reportpay.models.idempotency_record import IdempotencyRecord
from reportpay.models.report import Report, ReportStatus
from reportpay.models.report_payment import ReportPayment
from tests.conftest import DEFAULT_TENANT_ID, make_report


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


def body(practitioner_id, reports, gross, discount="0.00", **extra):
    return {
        "practitioner_id": str(practitioner_id),
        "report_ids": [str(r.id) for r in reports],
        "gross_value": gross,
        "discount": discount,
        **extra,
    }


class TestReportsApi:
    def test_list_pending_with_configured_value(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id, "ct", minutes_ago=30)
        b = make_report(db_session, practitioner.id, "mri", minutes_ago=90)

        response = client.get(
            "/v1/reports/",
            params={
                "practitioner_id": str(practitioner.id),
                "status": "pending",
                "order_by": "signed_at:asc",
            },
        )

        assert response.status_code == 200
        assert response.headers["X-Total-Count"] == "2"
        data = response.json()
        assert [item["id"] for item in data] == [str(b.id), str(a.id)]
        assert Decimal(data[0]["configured_value"]) == Decimal("50.00")
        assert data[0]["status"] == "pending"
        assert data[0]["paid_value"] is None

    def test_invalid_tenant_header(self, client):
        response = client.get("/v1/reports/", headers={"X-Tenant-Id": "not-a-uuid"})
        assert response.status_code == 400

    def test_get_report_not_found(self, client):
        response = client.get(f"/v1/reports/{uuid4()}")
        assert response.status_code == 404


class TestCreatePayment:
    def test_create(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id, "ct")
        b = make_report(db_session, practitioner.id, "mri")

        response = client.post(
            "/v1/report_payments/",
            json=body(practitioner.id, [a, b], "150.00", "50.00", method="bank_transfer"),
            headers={"X-User-Id": "operator-1"},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["net_value"]) == Decimal("100.00")
        assert set(data["report_ids"]) == {str(a.id), str(b.id)}

        report = client.get(f"/v1/reports/{a.id}").json()
        assert report["status"] == "paid"
        assert report["payment_id"] == data["payment_id"]
        assert Decimal(report["paid_value"]) == Decimal("100.00")

    def test_already_paid(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        b = make_report(db_session, practitioner.id)
        first = client.post("/v1/report_payments/", json=body(practitioner.id, [a], "100.00"))
        assert first.status_code == 201

        response = client.post("/v1/report_payments/", json=body(practitioner.id, [a, b], "200.00"))

        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "already_paid"
        assert detail["already_paid_ids"] == [str(a.id)]
        assert client.get(f"/v1/reports/{b.id}").json()["status"] == "pending"

    def test_value_drift(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        response = client.post("/v1/report_payments/", json=body(practitioner.id, [a], "90.00"))
        assert response.status_code == 409
        detail = response.json()["detail"]
        assert detail["code"] == "value_drift"
        assert Decimal(detail["expected_gross_value"]) == Decimal("100.00")

    def test_report_not_found(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        payload = body(practitioner.id, [a], "100.00")
        missing = str(uuid4())
        payload["report_ids"].append(missing)
        response = client.post("/v1/report_payments/", json=payload)
        assert response.status_code == 404
        assert response.json()["detail"]["report_ids"] == [missing]

    def test_cross_practitioner(self, client, db_session, practitioner, other_practitioner):
        a = make_report(db_session, practitioner.id)
        b = make_report(db_session, other_practitioner.id)
        response = client.post("/v1/report_payments/", json=body(practitioner.id, [a, b], "180.00"))
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "cross_practitioner"

    def test_invalid_discount(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        response = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00", "150.00")
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "invalid_discount"

    def test_percentage_disagreeing_with_discount(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        b = make_report(db_session, practitioner.id)
        response = client.post(
            "/v1/report_payments/",
            json=body(practitioner.id, [a, b], "200.00", "0.00", discount_percentage="10"),
        )
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert detail["code"] == "invalid_discount"
        assert detail["discount_percentage"] == "10"
        assert detail["gross_value"] == "200.00"
        assert db_session.query(ReportPayment).count() == 0

    def test_empty_batch(self, client, practitioner):
        response = client.post("/v1/report_payments/", json=body(practitioner.id, [], "0.00"))
        assert response.status_code == 422

    def test_duplicate_ids(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        response = client.post("/v1/report_payments/", json=body(practitioner.id, [a, a], "200.00"))
        assert response.status_code == 422

    def test_negative_discount(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        response = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00", "-1.00")
        )
        assert response.status_code == 422


class TestIdempotentCreate:
    def test_same_key_replays(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        payload = body(practitioner.id, [a], "100.00")
        headers = {"Idempotency-Key": "pay-1"}

        first = client.post("/v1/report_payments/", json=payload, headers=headers)
        second = client.post("/v1/report_payments/", json=payload, headers=headers)

        assert first.status_code == 201
        assert second.status_code == 201
        assert second.headers["Idempotency-Replayed"] == "true"
        assert second.json() == first.json()
        assert db_session.query(ReportPayment).count() == 1

    def test_failed_request_is_not_recorded(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        headers = {"Idempotency-Key": "pay-2"}

        rejected = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "90.00"), headers=headers
        )
        accepted = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00"), headers=headers
        )

        assert rejected.status_code == 409
        assert accepted.status_code == 201
        record = db_session.query(IdempotencyRecord).one()
        assert record.response_status == 201


    def test_key_cannot_pay_another_batch(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        b = make_report(db_session, practitioner.id)
        headers = {"Idempotency-Key": "pay-3"}

        first = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00"), headers=headers
        )
        reused = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [b], "100.00"), headers=headers
        )

        assert first.status_code == 201
        assert reused.status_code == 422
        assert reused.json()["detail"]["code"] == "idempotency_key_reused"
        assert "Idempotency-Replayed" not in reused.headers
        db_session.expire_all()
        assert db_session.get(Report, b.id).status == ReportStatus.PENDING.value
        assert db_session.query(ReportPayment).count() == 1


class TestReadPayments:
    def test_list_get_receipt_and_stats(self, client, db_session, practitioner, other_practitioner):
        a = make_report(db_session, practitioner.id)
        b = make_report(db_session, other_practitioner.id)
        paid_a = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00", method="pix")
        ).json()
        client.post(
            "/v1/report_payments/",
            json=body(other_practitioner.id, [b], "80.00", "8.00", method="cash"),
        )

        listed = client.get("/v1/report_payments/", params={"practitioner_id": str(practitioner.id)})
        assert listed.status_code == 200
        assert [p["id"] for p in listed.json()] == [paid_a["payment_id"]]

        by_method = client.get("/v1/report_payments/", params={"method": "cash"}).json()
        assert len(by_method) == 1
        assert by_method[0]["practitioner_id"] == str(other_practitioner.id)

        payment = client.get(f"/v1/report_payments/{paid_a['payment_id']}").json()
        assert payment["report_ids"] == [str(a.id)]

        receipt = client.get(f"/v1/report_payments/{paid_a['payment_id']}/receipt").json()
        assert receipt["practitioner_name"] == "Dr. Ana Souza"
        assert len(receipt["lines"]) == 1

        stats = client.get("/v1/report_payments/stats", params={"days": 7}).json()
        assert stats["payment_count"] == 2
        assert Decimal(stats["total_net_value"]) == Decimal("172.00")

    def test_unknown_payment(self, client):
        assert client.get(f"/v1/report_payments/{uuid4()}").status_code == 404
        assert client.get(f"/v1/report_payments/{uuid4()}/receipt").status_code == 404


class TestUpdatePayment:
    def test_patch_method_and_observations(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        created = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00", "5.00")
        ).json()

        response = client.patch(
            f"/v1/report_payments/{created['payment_id']}",
            json={"method": "cash", "observations": "Paid at the front desk"},
            headers={"X-User-Id": "operator-7"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["method"] == "cash"
        assert data["observations"] == "Paid at the front desk"
        assert Decimal(data["net_value"]) == Decimal("95.00")
        assert data["report_ids"] == [str(a.id)]

        entry = db_session.query(AuditLog).filter(AuditLog.action == "updated").one()
        assert str(entry.resource_id) == created["payment_id"]
        assert entry.actor_id == "operator-7"
        assert entry.changes["method"] == {"old": "pix", "new": "cash"}

    def test_amounts_cannot_be_patched(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        created = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00")
        ).json()

        response = client.patch(
            f"/v1/report_payments/{created['payment_id']}", json={"net_value": "1.00"}
        )

        assert response.status_code == 422
        payment = client.get(f"/v1/report_payments/{created['payment_id']}").json()
        assert Decimal(payment["net_value"]) == Decimal("100.00")

    def test_method_cannot_be_null(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        created = client.post(
            "/v1/report_payments/", json=body(practitioner.id, [a], "100.00")
        ).json()
        response = client.patch(
            f"/v1/report_payments/{created['payment_id']}", json={"method": None}
        )
        assert response.status_code == 422

    def test_unknown_payment(self, client):
        response = client.patch(f"/v1/report_payments/{uuid4()}", json={"method": "cash"})
        assert response.status_code == 404


class TestPricesAndPractitioners:
    def test_upsert_price(self, client, practitioner):
        response = client.put(
            "/v1/report_prices/",
            json={"practitioner_id": str(practitioner.id), "exam_type": "ct", "value": "120.00"},
        )
        assert response.status_code == 200
        assert Decimal(response.json()["value"]) == Decimal("120.00")

        prices = client.get(
            "/v1/report_prices/", params={"practitioner_id": str(practitioner.id)}
        ).json()
        assert {p["exam_type"]: Decimal(p["value"]) for p in prices} == {
            "ct": Decimal("120.00"),
            "mri": Decimal("50.00"),
        }

    def test_upsert_price_unknown_practitioner(self, client):
        response = client.put(
            "/v1/report_prices/",
            json={"practitioner_id": str(uuid4()), "exam_type": "ct", "value": "1.00"},
        )
        assert response.status_code == 404

    def test_price_change_reprices_pending_reports(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id)
        client.put(
            "/v1/report_prices/",
            json={"practitioner_id": str(practitioner.id), "exam_type": "ct", "value": "130.00"},
        )
        report = client.get(f"/v1/reports/{a.id}").json()
        assert Decimal(report["configured_value"]) == Decimal("130.00")

    def test_delete_price_values_reports_at_zero(self, client, db_session, practitioner):
        a = make_report(db_session, practitioner.id, "mri")
        prices = client.get(
            "/v1/report_prices/", params={"practitioner_id": str(practitioner.id)}
        ).json()
        mri = next(p for p in prices if p["exam_type"] == "mri")

        response = client.delete(f"/v1/report_prices/{mri['id']}")

        assert response.status_code == 204
        report = client.get(f"/v1/reports/{a.id}").json()
        assert Decimal(report["configured_value"]) == Decimal("0.00")
        remaining = client.get(
            "/v1/report_prices/", params={"practitioner_id": str(practitioner.id)}
        ).json()
        assert [p["exam_type"] for p in remaining] == ["ct"]

    def test_delete_unknown_price(self, client):
        assert client.delete(f"/v1/report_prices/{uuid4()}").status_code == 404

    def test_delete_price_of_other_tenant(self, client, practitioner):
        prices = client.get("/v1/report_prices/").json()
        response = client.delete(
            f"/v1/report_prices/{prices[0]['id']}", headers={"X-Tenant-Id": str(uuid4())}
        )
        assert response.status_code == 404

    def test_list_practitioners(self, client, practitioner, other_practitioner):
        response = client.get("/v1/practitioners/")
        assert response.status_code == 200
        assert [p["name"] for p in response.json()] == ["Dr. Ana Souza", "Dr. Bruno Lima"]

    def test_other_tenant_sees_nothing(self, client, practitioner):
        response = client.get("/v1/practitioners/", headers={"X-Tenant-Id": str(uuid4())})
        assert response.json() == []


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["app"] == "reportpay"


def test_default_tenant_header_value(client, db_session, practitioner):
    make_report(db_session, practitioner.id)
    response = client.get("/v1/reports/", headers={"X-Tenant-Id": str(DEFAULT_TENANT_ID)})
    assert response.headers["X-Total-Count"] == "1"
