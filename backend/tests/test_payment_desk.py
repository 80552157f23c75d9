"""End-to-end tests for PaymentDesk against in-process and HTTP backends."""

from decimal import Decimal
from uuid import uuid4

import httpx
import pytest

from reportpay.main import app
from reportpay.models.report import ReportStatus
from reportpay.models.report_payment import PaymentMethod
from reportpay.repositories.report_price_repository import ReportPriceRepository
from reportpay.repositories.report_repository import ReportRepository
from reportpay.schemas.report_price import ReportPriceUpsert
from reportpay.services.payment_authority import HttpPaymentAuthority, LocalPaymentAuthority
from reportpay.services.payment_desk import PaymentDesk
from reportpay.services.payment_errors import (
    CrossPractitionerError,
    EmptyBatchError,
    PartialConflictError,
    RefreshRequiredError,
    TransientError,
    UnknownReportError,
    ValueDriftError,
)
from reportpay.services.report_source import HttpReportSource, LocalReportSource
from tests.conftest import DEFAULT_TENANT_ID, make_report


@pytest.fixture
def scenario(db_session, practitioner, other_practitioner):
    """A (100.00) and B (150.00) for Dr. Ana, C (80.00) for Dr. Bruno."""
    ReportPriceRepository(db_session).upsert(
        ReportPriceUpsert(practitioner_id=practitioner.id, exam_type="pet", value=Decimal("150")),
        DEFAULT_TENANT_ID,
    )
    return {
        "a": make_report(db_session, practitioner.id, "ct", minutes_ago=30),
        "b": make_report(db_session, practitioner.id, "pet", minutes_ago=20),
        "c": make_report(db_session, other_practitioner.id, "ct", minutes_ago=10),
    }


@pytest.fixture
def make_desk(session_factory):
    def factory(authority=None):
        return PaymentDesk(
            DEFAULT_TENANT_ID,
            LocalReportSource(session_factory),
            authority or LocalPaymentAuthority(session_factory, registered_by="operator"),
        )

    return factory


class FlakyAuthority:
    """Fails with a transient error ``failures`` times, then delegates."""

    def __init__(self, inner, failures=1):
        self.inner = inner
        self.failures = failures
        self.keys = []

    async def submit_payment(self, tenant_id, request, idempotency_key=None):
        self.keys.append(idempotency_key)
        if self.failures:
            self.failures -= 1
            raise TransientError("connection reset")
        return await self.inner.submit_payment(tenant_id, request, idempotency_key)


class TestSelection:
    @pytest.mark.asyncio
    async def test_gross_and_net(self, make_desk, scenario):
        desk = make_desk()
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        desk.toggle(scenario["b"].id)

        assert desk.gross_value == Decimal("250.00")
        validated = desk.engine.validate(desk.selector.snapshot(Decimal("50")))
        assert validated.net_value == Decimal("200.00")

    @pytest.mark.asyncio
    async def test_cross_practitioner_keeps_selection(self, make_desk, scenario):
        desk = make_desk()
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        desk.toggle(scenario["b"].id)

        with pytest.raises(CrossPractitionerError):
            desk.toggle(scenario["c"].id)

        assert desk.selector.selected_report_ids == {scenario["a"].id, scenario["b"].id}

    @pytest.mark.asyncio
    async def test_refresh_filters_by_practitioner(self, make_desk, scenario, practitioner):
        desk = make_desk()
        pending = await desk.refresh(practitioner_id=practitioner.id)
        assert [r.id for r in pending] == [scenario["a"].id, scenario["b"].id]

    @pytest.mark.asyncio
    async def test_unknown_report(self, make_desk, scenario):
        desk = make_desk()
        await desk.refresh()
        with pytest.raises(UnknownReportError):
            desk.toggle(uuid4())

    @pytest.mark.asyncio
    async def test_empty_submit(self, make_desk, scenario):
        desk = make_desk()
        await desk.refresh()
        with pytest.raises(EmptyBatchError):
            await desk.submit(PaymentMethod.PIX)


class TestSubmit:
    @pytest.mark.asyncio
    async def test_success_marks_reports_paid(self, make_desk, scenario, db_session, practitioner):
        desk = make_desk()
        await desk.refresh()
        a, b = scenario["a"], scenario["b"]
        desk.toggle(a.id)
        desk.toggle(b.id)

        result = await desk.submit(PaymentMethod.PIX, discount=Decimal("50.00"))

        assert result.net_value == Decimal("200.00")
        assert desk.selector.selected_report_ids == frozenset()
        assert desk.selector.practitioner_id is None

        paid = desk.paid_reports
        assert paid[a.id].status == ReportStatus.PAID
        assert paid[a.id].paid_value == Decimal("100.00")
        assert paid[b.id].paid_value == Decimal("150.00")
        assert paid[a.id].payment_id == paid[b.id].payment_id == result.payment_id
        assert {r.id for r in desk.pending_reports} == {scenario["c"].id}

        db_session.expire_all()
        stored = ReportRepository(db_session).get_by_id(b.id)
        assert Decimal(str(stored.paid_value)) == Decimal("150.00")

        pending = await desk.refresh(practitioner_id=practitioner.id)
        assert pending == []

    @pytest.mark.asyncio
    async def test_discount_percentage(self, make_desk, scenario):
        desk = make_desk()
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        desk.toggle(scenario["b"].id)

        result = await desk.submit(PaymentMethod.PIX, discount_percentage=Decimal("10"))

        assert result.batch.discount == Decimal("25.00")
        assert result.net_value == Decimal("225.00")

    @pytest.mark.asyncio
    async def test_concurrent_operators(self, make_desk, scenario):
        a, b = scenario["a"], scenario["b"]
        first, second = make_desk(), make_desk()
        await first.refresh()
        await second.refresh()
        first.toggle(a.id)
        second.toggle(a.id)
        second.toggle(b.id)

        await first.submit(PaymentMethod.PIX)
        with pytest.raises(PartialConflictError) as exc_info:
            await second.submit(PaymentMethod.PIX)

        assert exc_info.value.already_paid_ids == [a.id]
        assert second.refresh_required
        assert second.selector.selected_report_ids == {a.id, b.id}
        with pytest.raises(RefreshRequiredError):
            second.toggle(b.id)
        with pytest.raises(RefreshRequiredError):
            await second.submit(PaymentMethod.PIX)

        await second.refresh()
        assert not second.refresh_required
        assert second.selector.state.reports[a.id].is_paid
        assert second.drop_paid() == [a.id]

        result = await second.submit(PaymentMethod.PIX)
        assert result.batch.report_ids == [b.id]

    @pytest.mark.asyncio
    async def test_value_drift_then_refresh(self, make_desk, scenario, db_session, practitioner):
        desk = make_desk()
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        ReportPriceRepository(db_session).upsert(
            ReportPriceUpsert(practitioner_id=practitioner.id, exam_type="ct", value=Decimal("120")),
            DEFAULT_TENANT_ID,
        )

        with pytest.raises(ValueDriftError):
            await desk.submit(PaymentMethod.PIX)
        assert desk.refresh_required

        await desk.refresh()
        assert desk.gross_value == Decimal("120.00")
        result = await desk.submit(PaymentMethod.PIX)
        assert result.net_value == Decimal("120.00")

    @pytest.mark.asyncio
    async def test_clear_allowed_when_stale(self, make_desk, scenario):
        first, second = make_desk(), make_desk()
        await first.refresh()
        await second.refresh()
        first.toggle(scenario["a"].id)
        second.toggle(scenario["a"].id)
        await first.submit(PaymentMethod.PIX)
        with pytest.raises(PartialConflictError):
            await second.submit(PaymentMethod.PIX)

        second.clear()
        assert second.selector.selected_report_ids == frozenset()

    @pytest.mark.asyncio
    async def test_transient_retry_reuses_key(self, make_desk, scenario, session_factory):
        authority = FlakyAuthority(LocalPaymentAuthority(session_factory))
        desk = make_desk(authority)
        await desk.refresh()
        desk.toggle(scenario["a"].id)

        with pytest.raises(TransientError):
            await desk.submit(PaymentMethod.PIX)
        assert desk.selector.selected_report_ids == {scenario["a"].id}
        assert not desk.refresh_required

        await desk.submit(PaymentMethod.PIX)
        assert authority.keys[0] == authority.keys[1]

    @pytest.mark.asyncio
    async def test_changed_batch_gets_new_key(self, make_desk, scenario, session_factory):
        authority = FlakyAuthority(LocalPaymentAuthority(session_factory))
        desk = make_desk(authority)
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        with pytest.raises(TransientError):
            await desk.submit(PaymentMethod.PIX)

        desk.toggle(scenario["b"].id)
        await desk.submit(PaymentMethod.PIX)
        assert authority.keys[0] != authority.keys[1]


class TestLocalReportSource:
    @pytest.mark.asyncio
    async def test_reads_every_page(
        self, db_session, practitioner, session_factory, monkeypatch
    ):
        monkeypatch.setattr("reportpay.services.report_source.PAGE_SIZE", 2)
        created = [
            make_report(db_session, practitioner.id, minutes_ago=minutes_ago)
            for minutes_ago in (50, 40, 30, 20, 10)
        ]

        reports = await LocalReportSource(session_factory).list_reports(DEFAULT_TENANT_ID)

        assert [r.id for r in reports] == [r.id for r in created]
        assert all(r.configured_value == Decimal("100.00") for r in reports)

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size(
        self, db_session, practitioner, session_factory, monkeypatch
    ):
        monkeypatch.setattr("reportpay.services.report_source.PAGE_SIZE", 2)
        for minutes_ago in (30, 20, 10, 5):
            make_report(db_session, practitioner.id, minutes_ago=minutes_ago)

        reports = await LocalReportSource(session_factory).list_reports(
            DEFAULT_TENANT_ID, practitioner_id=practitioner.id, status=ReportStatus.PENDING
        )

        assert len(reports) == 4


class TestOverHttp:
    @pytest.mark.asyncio
    async def test_desk_against_api(self, scenario):
        transport = httpx.ASGITransport(app=app)
        desk = PaymentDesk(
            DEFAULT_TENANT_ID,
            HttpReportSource(base_url="http://testserver", transport=transport),
            HttpPaymentAuthority(base_url="http://testserver", transport=transport),
        )
        await desk.refresh()
        desk.toggle(scenario["a"].id)
        desk.toggle(scenario["b"].id)

        result = await desk.submit(PaymentMethod.BANK_TRANSFER, discount=Decimal("50"))
        assert result.net_value == Decimal("200.00")

        await desk.refresh()
        assert {r.id for r in desk.pending_reports} == {scenario["c"].id}

    @pytest.mark.asyncio
    async def test_conflict_over_api(self, scenario, session_factory):
        transport = httpx.ASGITransport(app=app)
        remote = PaymentDesk(
            DEFAULT_TENANT_ID,
            HttpReportSource(base_url="http://testserver", transport=transport),
            HttpPaymentAuthority(base_url="http://testserver", transport=transport),
        )
        local = PaymentDesk(
            DEFAULT_TENANT_ID,
            LocalReportSource(session_factory),
            LocalPaymentAuthority(session_factory),
        )
        await remote.refresh()
        await local.refresh()
        remote.toggle(scenario["a"].id)
        local.toggle(scenario["a"].id)

        await local.submit(PaymentMethod.PIX)
        with pytest.raises(PartialConflictError) as exc_info:
            await remote.submit(PaymentMethod.PIX)
        assert exc_info.value.already_paid_ids == [scenario["a"].id]
        assert remote.refresh_required
