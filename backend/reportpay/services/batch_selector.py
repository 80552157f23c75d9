"""In-memory selection of reports for one pending payment.

The selection is an immutable ``BatchState`` advanced by a pure reducer over
explicit actions. Gross and net values are derived from the state on demand,
never stored, so they cannot go stale across toggles.

Rules enforced by the reducer:

- a paid report is never selected;
- every selected report belongs to the same practitioner, and the
  practitioner is unset again once the selection empties;
- nothing but ``SubmitFail``/``SubmitSucceed`` is accepted while a
  submission is in flight.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from types import MappingProxyType
from uuid import UUID

from reportpay.core.money import ZERO, sum_money, to_money
from reportpay.schemas.report import ReportResponse
from reportpay.services.payment_errors import (
    AlreadyPaidError,
    BatchBusyError,
    CrossPractitionerError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchState:
    practitioner_id: UUID | None = None
    reports: Mapping[UUID, ReportResponse] = field(default_factory=lambda: MappingProxyType({}))
    busy: bool = False

    @property
    def selected_report_ids(self) -> frozenset[UUID]:
        return frozenset(self.reports)

    @property
    def is_empty(self) -> bool:
        return not self.reports


EMPTY_BATCH = BatchState()


# Actions


@dataclass(frozen=True)
class Select:
    report: ReportResponse


@dataclass(frozen=True)
class Deselect:
    report_id: UUID


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class Sync:
    """Replace selected snapshots with freshly fetched copies."""

    reports: tuple[ReportResponse, ...]


@dataclass(frozen=True)
class SubmitStart:
    pass


@dataclass(frozen=True)
class SubmitSucceed:
    pass


@dataclass(frozen=True)
class SubmitFail:
    pass


BatchAction = Select | Deselect | Clear | Sync | SubmitStart | SubmitSucceed | SubmitFail


def _with_reports(state: BatchState, reports: dict[UUID, ReportResponse]) -> BatchState:
    if not reports:
        return replace(state, practitioner_id=None, reports=MappingProxyType({}))
    return replace(state, reports=MappingProxyType(reports))


def reduce(state: BatchState, action: BatchAction) -> BatchState:
    """Return the state that follows ``action``. Raises instead of changing state on a rule violation."""
    if isinstance(action, SubmitStart):
        if state.busy:
            raise BatchBusyError()
        return replace(state, busy=True)
    if isinstance(action, SubmitSucceed):
        return EMPTY_BATCH
    if isinstance(action, SubmitFail):
        return replace(state, busy=False)

    if state.busy:
        raise BatchBusyError()

    if isinstance(action, Clear):
        return EMPTY_BATCH

    if isinstance(action, Select):
        report = action.report
        if report.is_paid:
            raise AlreadyPaidError([report.id])
        if state.is_empty:
            return BatchState(
                practitioner_id=report.practitioner_id,
                reports=MappingProxyType({report.id: report}),
            )
        if report.practitioner_id != state.practitioner_id:
            raise CrossPractitionerError(state.practitioner_id, report.practitioner_id)
        if report.id in state.reports:
            return state
        return _with_reports(state, {**state.reports, report.id: report})

    if isinstance(action, Deselect):
        if action.report_id not in state.reports:
            return state
        remaining = {
            report_id: report
            for report_id, report in state.reports.items()
            if report_id != action.report_id
        }
        return _with_reports(state, remaining)

    if isinstance(action, Sync):
        fresh = {report.id: report for report in action.reports if report.id in state.reports}
        if not fresh:
            return state
        return _with_reports(state, {**state.reports, **fresh})

    raise TypeError(f"Unknown batch action: {action!r}")


# Derived values


def gross_value(state: BatchState) -> Decimal:
    """Sum of the configured values of the selected reports."""
    return sum_money(report.configured_value for report in state.reports.values())


def net_value(state: BatchState, discount: Decimal = ZERO) -> Decimal:
    return max(ZERO, gross_value(state) - to_money(discount))


@dataclass(frozen=True)
class PaymentBatch:
    """Snapshot of a selection plus the operator's discount."""

    practitioner_id: UUID | None
    reports: tuple[ReportResponse, ...]
    discount: Decimal = ZERO
    discount_percentage: Decimal | None = None

    @property
    def selected_report_ids(self) -> frozenset[UUID]:
        return frozenset(report.id for report in self.reports)

    @property
    def gross_value(self) -> Decimal:
        return sum_money(report.configured_value for report in self.reports)

    @property
    def net_value(self) -> Decimal:
        return max(ZERO, self.gross_value - to_money(self.discount))


class BatchSelector:
    """Holds the current ``BatchState`` for one operator session."""

    def __init__(self, state: BatchState = EMPTY_BATCH):
        self._state = state

    @property
    def state(self) -> BatchState:
        return self._state

    @property
    def busy(self) -> bool:
        return self._state.busy

    @property
    def practitioner_id(self) -> UUID | None:
        return self._state.practitioner_id

    @property
    def selected_report_ids(self) -> frozenset[UUID]:
        return self._state.selected_report_ids

    @property
    def selected_reports(self) -> list[ReportResponse]:
        return list(self._state.reports.values())

    @property
    def gross_value(self) -> Decimal:
        return gross_value(self._state)

    def dispatch(self, action: BatchAction) -> BatchState:
        self._state = reduce(self._state, action)
        return self._state

    def toggle(self, report: ReportResponse) -> BatchState:
        """Add ``report`` if absent, remove it if present."""
        if self._state.busy:
            raise BatchBusyError()
        if report.is_paid:
            raise AlreadyPaidError([report.id])
        if report.id in self._state.reports:
            return self.dispatch(Deselect(report.id))
        return self.dispatch(Select(report))

    def deselect(self, report_id: UUID) -> BatchState:
        """Remove a report whatever its status; no-op when it is not selected."""
        return self.dispatch(Deselect(report_id))

    def sync(self, reports: Iterable[ReportResponse]) -> BatchState:
        return self.dispatch(Sync(tuple(reports)))

    def clear(self) -> BatchState:
        if not self._state.is_empty:
            logger.debug("Clearing batch of %d reports", len(self._state.reports))
        return self.dispatch(Clear())

    def snapshot(
        self,
        discount: Decimal = ZERO,
        discount_percentage: Decimal | None = None,
    ) -> PaymentBatch:
        return PaymentBatch(
            practitioner_id=self._state.practitioner_id,
            reports=tuple(self._state.reports.values()),
            discount=discount,
            discount_percentage=discount_percentage,
        )
