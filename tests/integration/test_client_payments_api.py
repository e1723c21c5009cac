"""
Integration tests for the client payments API.

These tests verify:
1. POST /v1/client-payments - Opening spot cash and installment agreements
2. GET /v1/client-payments/{id} - Schedule, progress and status read-back
3. POST /v1/client-payments/{id}/record-payment - Payment recording
4. PATCH /v1/client-payments/{id} - Client edits and ledger backfill
5. Error responses for invalid input and forbidden state transitions
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from dateutil.relativedelta import relativedelta
from httpx import AsyncClient


async def create_agreement(client: AsyncClient, body: dict) -> dict:
    response = await client.post("/v1/client-payments", json=body)
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Agreement Creation Tests
# =============================================================================

class TestCreateAgreement:
    """Tests for POST /v1/client-payments."""

    @pytest.mark.asyncio
    async def test_installment_agreement_is_current_after_signing(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        """
        A new installment agreement has its down payment recorded.

        The agreement should have:
        - 12 monthly dues of 10,000
        - The first due paid and in the ledger
        - The next due one month after the start date
        """
        data = await create_agreement(client, installment_request)

        start = date.fromisoformat(installment_request["start_date"])

        assert data["payment_type"] == "installment"
        assert data["status"] == "CURRENT"
        assert Decimal(data["total_amount"]) == Decimal("120000")
        assert data["total_installments"] == 12
        assert data["completed_payments"] == 1
        assert data["next_payment_date"] == (start + relativedelta(months=1)).isoformat()

        schedule = data["schedule"]
        assert len(schedule) == 12
        assert all(Decimal(entry["amount"]) == Decimal("10000") for entry in schedule)
        assert schedule[0]["status"] == "PAID"
        assert all(entry["status"] == "PENDING" for entry in schedule[1:])

        assert len(data["transactions"]) == 1
        assert data["transactions"][0]["notes"] == "Monthly installment payment #1"
        assert data["transactions"][0]["payment_method"] is None

        assert Decimal(data["progress"]["paid_amount"]) == Decimal("10000")
        assert Decimal(data["progress"]["remaining_amount"]) == Decimal("110000")
        assert data["progress"]["percent"] == 8
        assert Decimal(data["expected_payment_amount"]) == Decimal("10000")

    @pytest.mark.asyncio
    async def test_spot_cash_agreement_is_completed(
        self,
        client: AsyncClient,
        spot_cash_request: dict,
    ):
        """Spot cash is paid in full at signing; the price is the sum of the lots."""
        data = await create_agreement(client, spot_cash_request)

        assert data["status"] == "COMPLETED"
        assert Decimal(data["total_amount"]) == Decimal("50000")
        assert data["total_installments"] == 1
        assert data["next_payment_date"] is None
        assert len(data["lots"]) == 2

        assert len(data["schedule"]) == 1
        assert data["schedule"][0]["status"] == "PAID"

        assert len(data["transactions"]) == 1
        assert Decimal(data["transactions"][0]["amount"]) == Decimal("50000")
        assert data["transactions"][0]["notes"] == "Full payment (spot cash)"

        assert data["progress"]["percent"] == 100
        assert Decimal(data["progress"]["remaining_amount"]) == Decimal("0")
        assert Decimal(data["expected_payment_amount"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_back_dated_agreement_seeds_prior_payments(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        """Payments made before the agreement was entered are seeded into the ledger."""
        start = date.today() - relativedelta(months=3)
        body = {
            **installment_request,
            "start_date": start.isoformat(),
            "completed_payments": 4,
        }

        data = await create_agreement(client, body)

        assert data["completed_payments"] == 4
        assert data["status"] == "CURRENT"
        assert data["next_payment_date"] == (start + relativedelta(months=4)).isoformat()
        assert [txn["payment_number"] for txn in data["transactions"]] == [1, 2, 3, 4]
        assert [entry["status"] for entry in data["schedule"][:4]] == ["PAID"] * 4
        assert data["progress"]["percent"] == 33

    @pytest.mark.asyncio
    async def test_zero_completed_payments_still_records_down_payment(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        data = await create_agreement(client, {**installment_request, "completed_payments": 0})

        assert data["completed_payments"] == 1
        assert len(data["transactions"]) == 1

    @pytest.mark.asyncio
    async def test_installment_years_above_limit_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "installment_years": 7},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert "installment_years" in data["message"]

    @pytest.mark.asyncio
    async def test_completed_payments_above_total_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "completed_payments": 13},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_missing_lots_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "lots": []},
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert "request_id" in data

    @pytest.mark.asyncio
    async def test_fractional_lot_price_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        lot = {**installment_request["lots"][0], "price": 100000.555}
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "lots": [lot]},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

        listed = (await client.get("/v1/client-payments", params={"user_id": "client_juan"})).json()
        assert listed["agreements"] == []

    @pytest.mark.asyncio
    async def test_lot_prices_summing_past_the_ledger_limit_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        lot = {**installment_request["lots"][0], "price": 600_000_000_000}
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "lots": [lot, {**lot, "lot_id": "13"}]},
        )

        assert response.status_code == 422
        assert "too large" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_unknown_payment_type_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        response = await client.post(
            "/v1/client-payments",
            json={**installment_request, "payment_type": "layaway"},
        )

        assert response.status_code == 422


# =============================================================================
# Agreement Retrieval Tests
# =============================================================================

class TestGetAgreement:
    """Tests for GET /v1/client-payments endpoints."""

    @pytest.mark.asyncio
    async def test_get_agreement_round_trip(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.get(f"/v1/client-payments/{created['id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["id"] == created["id"]
        assert data["client_name"] == "Juan Dela Cruz"
        assert data["contact_number"] == "09171234567"
        assert data["status"] == "CURRENT"
        assert data["as_of"] == date.today().isoformat()
        assert data["lots"][0]["block_lot_no"] == "Block 3 Lot 7"
        assert len(data["schedule"]) == 12

    @pytest.mark.asyncio
    async def test_overdue_agreement_is_super_late(
        self,
        client: AsyncClient,
        overdue_installment_request: dict,
    ):
        """Only the down payment made and the second due two months past."""
        created = await create_agreement(client, overdue_installment_request)

        response = await client.get(f"/v1/client-payments/{created['id']}")
        data = response.json()

        assert data["status"] == "SUPER_LATE"
        assert data["schedule"][0]["status"] == "PAID"
        assert data["schedule"][1]["status"] == "SUPER_LATE"
        assert data["schedule"][-1]["status"] == "PENDING"

    @pytest.mark.asyncio
    async def test_unknown_agreement_returns_404(self, client: AsyncClient):
        agreement_id = uuid4()

        response = await client.get(f"/v1/client-payments/{agreement_id}")

        assert response.status_code == 404
        data = response.json()
        assert data["error"] == "AGREEMENT_NOT_FOUND"
        assert str(agreement_id) in data["message"]

    @pytest.mark.asyncio
    async def test_malformed_agreement_id_rejected(self, client: AsyncClient):
        response = await client.get("/v1/client-payments/not-a-uuid")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_list_agreements_filters_by_user(
        self,
        client: AsyncClient,
        installment_request: dict,
        spot_cash_request: dict,
    ):
        await create_agreement(client, installment_request)
        await create_agreement(client, spot_cash_request)

        response = await client.get("/v1/client-payments", params={"user_id": "client_maria"})

        assert response.status_code == 200
        agreements = response.json()["agreements"]
        assert len(agreements) == 1
        assert agreements[0]["client_name"] == "Maria Santos"
        assert agreements[0]["status"] == "COMPLETED"

        response = await client.get("/v1/client-payments")
        assert len(response.json()["agreements"]) == 2

    @pytest.mark.asyncio
    async def test_transactions_ordered_by_payment_number(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, {**installment_request, "completed_payments": 3})

        response = await client.get(f"/v1/client-payments/{created['id']}/transactions")

        assert response.status_code == 200
        data = response.json()
        assert data["agreement_id"] == created["id"]
        assert [txn["payment_number"] for txn in data["transactions"]] == [1, 2, 3]

    @pytest.mark.asyncio
    async def test_schedule_preview(self, client: AsyncClient):
        response = await client.post(
            "/v1/client-payments/schedule-preview",
            json={
                "payment_type": "installment",
                "total_amount": 100000,
                "installment_years": 1,
                "start_date": "2024-01-31",
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_installments"] == 12
        assert data["schedule"][1]["due_date"] == "2024-02-29"
        assert Decimal(data["schedule"][0]["amount"]) == Decimal("8333")
        assert Decimal(data["schedule"][-1]["amount"]) == Decimal("8337")
        assert sum(Decimal(entry["amount"]) for entry in data["schedule"]) == Decimal("100000")


# =============================================================================
# Payment Recording Tests
# =============================================================================

class TestRecordPayment:
    """Tests for POST /v1/client-payments/{id}/record-payment."""

    @pytest.mark.asyncio
    async def test_record_payment_advances_agreement(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)
        start = date.fromisoformat(installment_request["start_date"])

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json=payment_request,
        )

        assert response.status_code == 201, response.text
        data = response.json()

        assert data["transaction"]["payment_number"] == 2
        assert data["transaction"]["payment_method"] == "CASH"
        assert data["receipt_data"]["receipt_number"] == "AYCO-002"
        assert data["receipt_data"]["property_name"] == "Evergreen Heights"
        assert data["receipt_data"]["total_installments"] == 12
        assert data["counters"]["completed_payments"] == 2
        assert data["counters"]["next_payment_date"] == (start + relativedelta(months=2)).isoformat()
        assert data["counters"]["is_completed"] is False
        assert "KNOW ALL MEN BY THESE PRESENTS:" in data["receipt_text"]
        assert "AR No.: AYCO-002" in data["receipt_text"]

        detail = (await client.get(f"/v1/client-payments/{created['id']}")).json()
        assert detail["completed_payments"] == 2
        assert len(detail["transactions"]) == 2
        assert Decimal(detail["progress"]["paid_amount"]) == Decimal("20000")
        assert detail["schedule"][1]["status"] == "PAID"

    @pytest.mark.asyncio
    async def test_record_payment_rounds_amount_up(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json={**payment_request, "amount": "9999.25", "reference_number": "OR-5521"},
        )

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["transaction"]["amount"]) == Decimal("10000")
        assert data["receipt_data"]["receipt_number"] == "OR-5521"

    @pytest.mark.asyncio
    async def test_negative_amount_rejected_and_counters_unchanged(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json={**payment_request, "amount": -5},
        )

        assert response.status_code == 422
        assert response.json()["message"] == "amount must be positive"

        detail = (await client.get(f"/v1/client-payments/{created['id']}")).json()
        assert detail["completed_payments"] == 1
        assert len(detail["transactions"]) == 1

    @pytest.mark.asyncio
    async def test_oversized_amount_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json={**payment_request, "amount": "1000000000000"},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

        detail = (await client.get(f"/v1/client-payments/{created['id']}")).json()
        assert detail["completed_payments"] == 1

    @pytest.mark.asyncio
    async def test_invalid_method_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json={**payment_request, "payment_method": "GCASH"},
        )

        assert response.status_code == 422
        assert response.json()["message"] == "invalid payment method"

    @pytest.mark.asyncio
    async def test_missing_payment_date_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)
        body = {key: value for key, value in payment_request.items() if key != "payment_date"}

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json=body,
        )

        assert response.status_code == 422
        assert response.json()["message"] == "payment date is required"

    @pytest.mark.asyncio
    async def test_spot_cash_payment_rejected(
        self,
        client: AsyncClient,
        spot_cash_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, spot_cash_request)

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json=payment_request,
        )

        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "INVALID_STATE"
        assert data["message"] == "agreement already completed"

    @pytest.mark.asyncio
    async def test_final_payment_completes_agreement(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, {**installment_request, "completed_payments": 11})
        url = f"/v1/client-payments/{created['id']}/record-payment"

        response = await client.post(url, json=payment_request)

        assert response.status_code == 201
        data = response.json()
        assert data["transaction"]["payment_number"] == 12
        assert data["counters"]["is_completed"] is True
        assert data["counters"]["next_payment_date"] is None

        detail = (await client.get(f"/v1/client-payments/{created['id']}")).json()
        assert detail["status"] == "COMPLETED"
        assert detail["progress"]["percent"] == 100
        assert Decimal(detail["expected_payment_amount"]) == Decimal("0")

        response = await client.post(url, json=payment_request)
        assert response.status_code == 409
        assert response.json()["error"] == "INVALID_STATE"

    @pytest.mark.asyncio
    async def test_payment_on_unknown_agreement_returns_404(
        self,
        client: AsyncClient,
        payment_request: dict,
    ):
        response = await client.post(
            f"/v1/client-payments/{uuid4()}/record-payment",
            json=payment_request,
        )

        assert response.status_code == 404


# =============================================================================
# Agreement Update Tests
# =============================================================================

class TestUpdateAgreement:
    """Tests for PATCH /v1/client-payments/{id}."""

    @pytest.mark.asyncio
    async def test_raising_completed_payments_backfills_ledger(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, installment_request)
        start = date.fromisoformat(installment_request["start_date"])

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"completed_payments": 4},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["completed_payments"] == 4
        assert data["next_payment_date"] == (start + relativedelta(months=4)).isoformat()
        assert data["status"] == "CURRENT"
        assert [txn["payment_number"] for txn in data["transactions"]] == [1, 2, 3, 4]

        backfilled = data["transactions"][1:]
        assert all(txn["notes"] == "Payment recorded" for txn in backfilled)
        assert all(txn["payment_date"] == date.today().isoformat() for txn in backfilled)
        assert all(Decimal(txn["amount"]) == Decimal("10000") for txn in backfilled)
        assert [entry["status"] for entry in data["schedule"][:4]] == ["PAID"] * 4

        stored = (await client.get(f"/v1/client-payments/{created['id']}/transactions")).json()
        assert len(stored["transactions"]) == 4

    @pytest.mark.asyncio
    async def test_completed_payments_clamped_at_total(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"completed_payments": 50},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["completed_payments"] == 12
        assert data["next_payment_date"] is None
        assert data["status"] == "COMPLETED"
        assert len(data["transactions"]) == 12
        assert Decimal(data["expected_payment_amount"]) == Decimal("0")

    @pytest.mark.asyncio
    async def test_client_fields_update_leaves_counters_alone(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"contact_number": "09179876543", "address": "Lipa City, Batangas"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["contact_number"] == "09179876543"
        assert data["address"] == "Lipa City, Batangas"
        assert data["client_name"] == installment_request["client_name"]
        assert data["completed_payments"] == 1
        assert len(data["transactions"]) == 1

    @pytest.mark.asyncio
    async def test_recording_continues_after_update(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = await create_agreement(client, installment_request)
        await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"completed_payments": 3},
        )

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json=payment_request,
        )

        assert response.status_code == 201
        assert response.json()["transaction"]["payment_number"] == 4

    @pytest.mark.asyncio
    async def test_lowering_completed_payments_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, {**installment_request, "completed_payments": 3})

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"completed_payments": 2},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

        detail = (await client.get(f"/v1/client-payments/{created['id']}")).json()
        assert detail["completed_payments"] == 3

    @pytest.mark.asyncio
    async def test_spot_cash_counter_cannot_be_edited(
        self,
        client: AsyncClient,
        spot_cash_request: dict,
    ):
        created = await create_agreement(client, spot_cash_request)

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"completed_payments": 2},
        )

        assert response.status_code == 422
        assert "spot cash" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_blank_client_name_rejected(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = await create_agreement(client, installment_request)

        response = await client.patch(
            f"/v1/client-payments/{created['id']}",
            json={"client_name": "   "},
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_update_unknown_agreement_returns_404(self, client: AsyncClient):
        response = await client.patch(
            f"/v1/client-payments/{uuid4()}",
            json={"contact_number": "09170000000"},
        )

        assert response.status_code == 404


# =============================================================================
# Service Health Tests
# =============================================================================

class TestHealth:
    """Tests for GET /health and request tracing."""

    @pytest.mark.asyncio
    async def test_health_reports_database(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["database"] == "ok"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    @pytest.mark.asyncio
    async def test_error_body_carries_request_id(self, client: AsyncClient):
        response = await client.get(
            f"/v1/client-payments/{uuid4()}",
            headers={"X-Request-ID": "req-404"},
        )

        assert response.json()["request_id"] == "req-404"
