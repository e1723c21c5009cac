"""
Integration tests for metrics tracking.

These tests verify:
1. Metrics endpoint returns valid Prometheus format
2. Business metrics (agreements, payments, statuses) are tracked
3. Technical metrics (latency, conflicts, HTTP requests) are recorded
"""

import pytest
from httpx import AsyncClient

from payment_lifecycle.core.metrics import REGISTRY


def sample(name: str, labels: dict | None = None) -> float:
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


# =============================================================================
# Metrics Endpoint Tests
# =============================================================================

class TestMetricsEndpoint:
    """Tests for GET /metrics endpoint."""

    @pytest.mark.asyncio
    async def test_metrics_endpoint_returns_prometheus_format(
        self,
        client: AsyncClient,
    ):
        response = await client.get("/metrics")

        assert response.status_code == 200

        content_type = response.headers.get("content-type", "")
        assert "text/plain" in content_type or "text/openmetrics" in content_type
        assert "# HELP evergreen_payments_recorded_total" in response.text

    @pytest.mark.asyncio
    async def test_metrics_include_custom_metrics(
        self,
        client: AsyncClient,
    ):
        content = (await client.get("/metrics")).text

        assert "evergreen_agreements_created_total" in content
        assert "evergreen_payment_amount_total" in content
        assert "evergreen_record_payment_latency_seconds" in content
        assert "evergreen_payment_conflicts_total" in content


# =============================================================================
# Business Metrics Tests
# =============================================================================

class TestBusinessMetrics:
    """Tests for agreement and payment counters."""

    @pytest.mark.asyncio
    async def test_agreement_creation_is_counted(
        self,
        client: AsyncClient,
        spot_cash_request: dict,
    ):
        labels = {"payment_type": "spot_cash"}
        before = sample("evergreen_agreements_created_total", labels)

        response = await client.post("/v1/client-payments", json=spot_cash_request)
        assert response.status_code == 201

        assert sample("evergreen_agreements_created_total", labels) == before + 1

    @pytest.mark.asyncio
    async def test_recorded_payment_is_counted(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = (await client.post("/v1/client-payments", json=installment_request)).json()

        count_before = sample("evergreen_payments_recorded_total", {"method": "CASH"})
        amount_before = sample("evergreen_payment_amount_total")
        latency_before = sample("evergreen_record_payment_latency_seconds_count")

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json=payment_request,
        )
        assert response.status_code == 201

        assert sample("evergreen_payments_recorded_total", {"method": "CASH"}) == count_before + 1
        assert sample("evergreen_payment_amount_total") == amount_before + 10000
        assert sample("evergreen_record_payment_latency_seconds_count") == latency_before + 1

    @pytest.mark.asyncio
    async def test_rejected_payment_is_not_counted(
        self,
        client: AsyncClient,
        installment_request: dict,
        payment_request: dict,
    ):
        created = (await client.post("/v1/client-payments", json=installment_request)).json()
        before = sample("evergreen_payments_recorded_total", {"method": "CASH"})

        response = await client.post(
            f"/v1/client-payments/{created['id']}/record-payment",
            json={**payment_request, "amount": 0},
        )
        assert response.status_code == 422

        assert sample("evergreen_payments_recorded_total", {"method": "CASH"}) == before

    @pytest.mark.asyncio
    async def test_served_status_is_counted(
        self,
        client: AsyncClient,
        overdue_installment_request: dict,
    ):
        created = (await client.post("/v1/client-payments", json=overdue_installment_request)).json()
        before = sample("evergreen_agreement_status_total", {"status": "SUPER_LATE"})

        await client.get(f"/v1/client-payments/{created['id']}")

        assert sample("evergreen_agreement_status_total", {"status": "SUPER_LATE"}) == before + 1


# =============================================================================
# HTTP Metrics Tests
# =============================================================================

class TestHttpMetrics:
    """Tests for request-level metrics from the logging middleware."""

    @pytest.mark.asyncio
    async def test_requests_are_labelled_by_route_template(
        self,
        client: AsyncClient,
        installment_request: dict,
    ):
        created = (await client.post("/v1/client-payments", json=installment_request)).json()
        labels = {
            "method": "GET",
            "endpoint": "/v1/client-payments/{agreement_id}",
            "status": "200",
        }
        before = sample("evergreen_http_requests_total", labels)

        await client.get(f"/v1/client-payments/{created['id']}")

        assert sample("evergreen_http_requests_total", labels) == before + 1
