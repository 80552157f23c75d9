"""Validation and amount computation for a payment batch.

Everything here is pure: no I/O, no clock, no shared state.
"""

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from reportpay.core.money import HUNDRED, ZERO, percentage_of, to_money
from reportpay.schemas.report import ReportResponse
from reportpay.services.batch_selector import PaymentBatch
from reportpay.services.payment_errors import (
    AlreadyPaidError,
    CrossPractitionerError,
    EmptyBatchError,
    InvalidDiscountError,
)


@dataclass(frozen=True)
class ValidatedBatch:
    """A batch that passed validation, with every amount fixed."""

    practitioner_id: UUID
    reports: tuple[ReportResponse, ...]
    gross_value: Decimal
    discount: Decimal
    net_value: Decimal
    discount_percentage: Decimal | None = None

    @property
    def report_ids(self) -> list[UUID]:
        return sorted((report.id for report in self.reports), key=str)


class ReconciliationEngine:
    """Turns a selection snapshot and a discount into a submittable batch."""

    def validate(self, batch: PaymentBatch) -> ValidatedBatch:
        if not batch.reports or batch.practitioner_id is None:
            raise EmptyBatchError()

        paid = [report.id for report in batch.reports if report.is_paid]
        if paid:
            raise AlreadyPaidError(paid)

        for report in batch.reports:
            if report.practitioner_id != batch.practitioner_id:
                raise CrossPractitionerError(batch.practitioner_id, report.practitioner_id)

        gross = batch.gross_value
        discount = check_discount(batch.discount, gross)
        percentage = batch.discount_percentage
        if percentage is not None:
            check_discount_percentage(percentage, discount, gross)

        return ValidatedBatch(
            practitioner_id=batch.practitioner_id,
            reports=batch.reports,
            gross_value=gross,
            discount=discount,
            net_value=gross - discount,
            discount_percentage=percentage,
        )

    @staticmethod
    def discount_for_percentage(gross_value: Decimal, percentage: Decimal) -> Decimal:
        """Discount amount for a percentage (0-100) of the gross value."""
        percentage = Decimal(str(percentage))
        if not ZERO <= percentage <= HUNDRED:
            raise InvalidDiscountError(ZERO, to_money(gross_value), percentage)
        return percentage_of(gross_value, percentage)


def check_discount(discount: Decimal, gross_value: Decimal) -> Decimal:
    """Return the discount rounded to cents if ``0 <= discount <= gross_value``."""
    amount = Decimal(str(discount))
    gross = to_money(gross_value)
    # Bounds are checked before rounding so 0.001 over the gross is still rejected
    if amount < ZERO or amount > gross:
        raise InvalidDiscountError(amount, gross)
    return to_money(amount)


def check_discount_percentage(
    percentage: Decimal, discount: Decimal, gross_value: Decimal
) -> Decimal:
    """Require ``discount`` to be exactly ``percentage`` of the gross value.

    Both amounts are compared after rounding to cents, the same way
    ``discount_for_percentage`` derives the discount.
    """
    percentage = Decimal(str(percentage))
    gross = to_money(gross_value)
    amount = to_money(discount)
    if not ZERO <= percentage <= HUNDRED or percentage_of(gross, percentage) != amount:
        raise InvalidDiscountError(amount, gross, percentage)
    return percentage
