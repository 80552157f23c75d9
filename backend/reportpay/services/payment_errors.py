"""Error taxonomy for report payment batches.

Selection errors (``AlreadyPaidError``, ``CrossPractitionerError``) and
pre-submission errors (``EmptyBatchError``, ``InvalidDiscountError``) leave
the batch untouched. ``PartialConflictError`` and ``ValueDriftError`` reject
the whole batch and require fresh report statuses before a retry.
``TransientError`` may be retried as-is.
"""

from collections.abc import Iterable
from decimal import Decimal
from uuid import UUID


class ReportPaymentError(Exception):
    """Base class for every report payment failure."""

    pass


class AlreadyPaidError(ReportPaymentError):
    """A paid report cannot join a batch."""

    def __init__(self, report_ids: Iterable[UUID]):
        self.report_ids = sorted(report_ids, key=str)
        joined = ", ".join(str(report_id) for report_id in self.report_ids)
        super().__init__(f"Reports already paid: {joined}")


class CrossPractitionerError(ReportPaymentError):
    """A batch may only hold reports of one practitioner."""

    def __init__(self, expected: UUID | None, actual: UUID | None):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Batch belongs to practitioner {expected}; report belongs to {actual}"
        )


class EmptyBatchError(ReportPaymentError):
    """Nothing is selected."""

    def __init__(self) -> None:
        super().__init__("No reports selected for payment")


class InvalidDiscountError(ReportPaymentError):
    """Discount is out of range or disagrees with its stated percentage."""

    def __init__(
        self,
        discount: Decimal,
        gross_value: Decimal,
        percentage: Decimal | None = None,
    ):
        self.discount = discount
        self.gross_value = gross_value
        self.percentage = percentage
        if percentage is None:
            message = f"Discount {discount} must be between 0 and the gross value {gross_value}"
        elif not 0 <= percentage <= 100:
            message = f"Discount percentage {percentage} must be between 0 and 100"
        else:
            message = f"Discount {discount} is not {percentage}% of the gross value {gross_value}"
        super().__init__(message)


class BatchBusyError(ReportPaymentError):
    """The batch cannot change while a submission is in flight."""

    def __init__(self) -> None:
        super().__init__("A payment submission is in progress")


class PartialConflictError(ReportPaymentError):
    """Some reports were paid by a concurrent submission; nothing was committed."""

    def __init__(self, already_paid_ids: Iterable[UUID]):
        self.already_paid_ids = sorted(already_paid_ids, key=str)
        joined = ", ".join(str(report_id) for report_id in self.already_paid_ids)
        super().__init__(f"Reports already paid by another payment: {joined}")


class ValueDriftError(ReportPaymentError):
    """Configured prices changed after selection; nothing was committed."""

    def __init__(self, submitted: Decimal, current: Decimal):
        self.submitted = submitted
        self.current = current
        super().__init__(
            f"Gross value {submitted} no longer matches configured prices ({current})"
        )


class TransientError(ReportPaymentError):
    """Transport failure or timeout; the commit is all-or-nothing so retry is safe."""

    pass


class AuthorizationError(ReportPaymentError):
    """The payment authority refused the caller's credentials."""

    def __init__(self, status_code: int, message: str = "Not authorized to register payments"):
        self.status_code = status_code
        super().__init__(message)


class PaymentRejectedError(ReportPaymentError):
    """Any other non-success answer from the payment authority."""

    def __init__(self, status_code: int, detail: object):
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"Payment rejected ({status_code}): {detail}")


class ReportNotFoundError(ReportPaymentError):
    """Some report ids do not exist in the tenant."""

    def __init__(self, report_ids: Iterable[UUID]):
        self.report_ids = sorted(report_ids, key=str)
        joined = ", ".join(str(report_id) for report_id in self.report_ids)
        super().__init__(f"Reports not found: {joined}")


class UnknownReportError(ReportPaymentError):
    """The operator referenced a report that is not in the current view."""

    def __init__(self, report_id: UUID):
        self.report_id = report_id
        super().__init__(f"Report {report_id} is not in the current view")


class RefreshRequiredError(ReportPaymentError):
    """Local report statuses are stale; refresh before mutating the batch."""

    def __init__(self) -> None:
        super().__init__("Report statuses are stale; refresh before continuing")
