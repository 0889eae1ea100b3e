"""
Quantity reconciliation for pack transitions.

Pure, side-effect-free arithmetic. Nothing here touches the database; the
transition services feed in the totals they read under lock and commit the
results themselves.
"""

from dataclasses import dataclass

from .choices import ProcessStatus
from .exceptions import (
    CountOutOfRange,
    InsufficientAvailableUnits,
    InvalidCountExceedsTotal,
    NegativeOrNonIntegerCount,
)


# Counters are stored in 64-bit columns
MAX_COUNT = 2**63 - 1


@dataclass(frozen=True)
class SendComputation:
    """Result of reconciling a send against a pack's cumulative totals."""

    available: int
    new_sent: int
    new_invalid: int
    residue: int
    is_complete: bool

    @property
    def status(self) -> str:
        return classify_send_status(self.residue)


def check_count(value, field: str, allow_zero: bool = True) -> int:
    """
    Validate a single count.

    Args:
        value: The count to validate
        field: Field name used in the error
        allow_zero: If False, zero is rejected as well

    Returns:
        The validated count

    Raises:
        NegativeOrNonIntegerCount: If value is not an int, is negative, or is
            zero when allow_zero is False
        CountOutOfRange: If value exceeds MAX_COUNT
    """
    # bool is an int subclass but never a meaningful count
    if isinstance(value, bool) or not isinstance(value, int):
        raise NegativeOrNonIntegerCount(field, value)
    if value < 0:
        raise NegativeOrNonIntegerCount(field, value)
    if value == 0 and not allow_zero:
        raise NegativeOrNonIntegerCount(
            field, value, f"'{field}' must be a positive integer, got 0"
        )
    if value > MAX_COUNT:
        raise CountOutOfRange(field, value)
    return value


def compute_accept(total_count: int, invalid_count: int) -> int:
    """
    Units accepted out of total_count once invalid_count are rejected.

    Raises:
        NegativeOrNonIntegerCount: If either count is negative or not an int
        InvalidCountExceedsTotal: If invalid_count > total_count
    """
    check_count(total_count, "total_count")
    check_count(invalid_count, "invalid_count")

    if invalid_count > total_count:
        raise InvalidCountExceedsTotal(invalid_count, total_count)

    return total_count - invalid_count


def compute_send(
    total_count: int,
    cumulative_sent: int,
    cumulative_invalid: int,
    requested_send: int,
    requested_invalid: int,
) -> SendComputation:
    """
    Reconcile a send against what the pack has already forwarded or rejected.

    available = total - cumulative_sent - cumulative_invalid
    residue = total - new_sent - new_invalid

    Raises:
        NegativeOrNonIntegerCount: If any count is negative or not an int
        InsufficientAvailableUnits: If requested_send + requested_invalid > available
    """
    check_count(total_count, "total_count")
    check_count(cumulative_sent, "cumulative_sent")
    check_count(cumulative_invalid, "cumulative_invalid")
    check_count(requested_send, "send_count")
    check_count(requested_invalid, "invalid_count")

    available = total_count - cumulative_sent - cumulative_invalid
    requested = requested_send + requested_invalid

    if available < 0 or requested > available:
        raise InsufficientAvailableUnits(requested, max(available, 0))

    new_sent = cumulative_sent + requested_send
    new_invalid = cumulative_invalid + requested_invalid
    residue = total_count - new_sent - new_invalid

    return SendComputation(
        available=available,
        new_sent=new_sent,
        new_invalid=new_invalid,
        residue=residue,
        is_complete=residue == 0,
    )


def classify_send_status(residue: int) -> str:
    """Fully sent when nothing remains, partially sent otherwise."""
    if residue == 0:
        return ProcessStatus.SENT
    return ProcessStatus.PARTIALLY_SENT
