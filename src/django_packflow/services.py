"""Service functions for pack transitions.

Provides:
- intake: Register a new pack at a department
- send: Forward part of a pack to another department
- accept: Confirm a pending delivery at the receiving department

Each operation is one all-or-nothing transaction. The pack row is locked with
select_for_update() so concurrent sends and accepts on the same pack are
serialized, while unrelated packs proceed independently.
"""

import functools
import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError
from django.db import OperationalError, transaction
from django.db.models import Sum

from . import topology
from .choices import ProcessStatus
from .conf import get_conflict_retries, is_topology_enforced
from .exceptions import (
    ConcurrentModificationConflict,
    DepartmentNotReachable,
    NoPendingProcess,
    NotFound,
    PackAlreadyComplete,
    PackAwaitingAcceptance,
)
from .models import (
    Department,
    Employee,
    OutsourceCompany,
    Product,
    ProductPack,
    ProductProcess,
)
from .reconciliation import check_count, compute_accept, compute_send

logger = logging.getLogger(__name__)

# SQLSTATEs for serialization failure and deadlock
CONFLICT_SQLSTATES = {"40001", "40P01"}

CONFLICT_MESSAGES = (
    "deadlock",
    "could not serialize",
    "database is locked",
    "database table is locked",
    "lock wait timeout",
)


@dataclass
class SendResult:
    """Outcome of a send: the source's new record and the split-off pack."""

    source_process: ProductProcess
    new_pack: ProductPack
    pending_process: ProductProcess
    remaining: int
    is_complete: bool
    total_sent: int
    total_invalid: int


@dataclass
class AcceptResult:
    """Outcome of an accept."""

    process: ProductProcess
    pack: ProductPack
    is_complete: bool
    pending_process_id: object


def _retry_on_conflict(operation: str):
    """
    Run the wrapped operation in its own transaction, retrying on conflicts.

    Deadlocks, serialization failures and locked databases surface as
    OperationalError. Any other OperationalError propagates unchanged. On a
    conflict the whole operation is re-run up to
    PACKFLOW_CONFLICT_RETRIES times, then ConcurrentModificationConflict is
    raised. Inside a caller's transaction there is nothing safe to retry, so
    the first conflict is raised immediately.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            attempts = get_conflict_retries()
            if transaction.get_connection().in_atomic_block:
                attempts = 1

            for attempt in range(1, attempts + 1):
                try:
                    with transaction.atomic():
                        return func(*args, **kwargs)
                except OperationalError as e:
                    if not _is_conflict(e):
                        raise
                    if attempt == attempts:
                        raise ConcurrentModificationConflict(operation, attempt) from e
                    logger.warning(
                        "%s conflicted with a concurrent writer (attempt %d/%d): %s",
                        operation, attempt, attempts, e,
                    )

        return wrapper
    return decorator


def _is_conflict(error: OperationalError) -> bool:
    """Check if error is a lock or serialization conflict worth retrying."""
    cause = error.__cause__ or error
    sqlstate = getattr(cause, "pgcode", None) or getattr(cause, "sqlstate", None)
    if sqlstate in CONFLICT_SQLSTATES:
        return True
    message = str(error).lower()
    return any(marker in message for marker in CONFLICT_MESSAGES)


def _get(queryset, ref, kind: str):
    """Fetch by instance or primary key, raising NotFound when missing."""
    model = queryset.model
    if isinstance(ref, model):
        ref = ref.pk
    try:
        return queryset.get(pk=ref)
    except (model.DoesNotExist, ValidationError, ValueError, TypeError):
        raise NotFound(kind, ref)


def _get_company(ref) -> OutsourceCompany | None:
    if ref is None:
        return None
    return _get(OutsourceCompany.objects.all(), ref, "Outsource company")


def _locked_pack(ref) -> ProductPack:
    return _get(
        ProductPack.objects.select_for_update().select_related("department"),
        ref,
        "Product pack",
    )


@_retry_on_conflict("intake")
def intake(
    *,
    department,
    product,
    employee,
    total_count: int,
    invalid_count: int = 0,
    invalid_reason: str = "",
    outsource_company=None,
) -> ProductPack:
    """
    Register a new pack (warehouse receipt) at a department.

    Creates the lineage root pack together with its accepted process record.

    Args:
        department: Department instance or id receiving the units
        product: Product instance or id
        employee: Employee instance or id performing the intake
        total_count: Units received (positive)
        invalid_count: Units rejected on receipt
        invalid_reason: Why units were rejected
        outsource_company: Optional OutsourceCompany instance or id

    Returns:
        The created ProductPack

    Raises:
        NegativeOrNonIntegerCount: If a count is invalid
        InvalidCountExceedsTotal: If invalid_count > total_count
        NotFound: If a referenced entity is missing
    """
    check_count(total_count, "total_count", allow_zero=False)
    accepted = compute_accept(total_count, invalid_count)

    dept = _get(Department.objects.all(), department, "Department")
    prod = _get(Product.objects.all(), product, "Product")
    actor = _get(Employee.objects.all(), employee, "Employee")
    company = _get_company(outsource_company)

    is_over = accepted == 0

    pack = ProductPack.objects.create(
        product=prod,
        department=dept,
        department_name=dept.name,
        total_count=total_count,
        invalid_count=invalid_count,
        residue_count=accepted,
        process_is_over=is_over,
    )

    process = ProductProcess.objects.create(
        pack=pack,
        status=ProcessStatus.ACCEPTED,
        department=dept,
        employee=actor,
        accept_count=accepted,
        sent_count=0,
        invalid_count=invalid_count,
        residue_count=accepted,
        invalid_reason=invalid_reason or "",
        outsource_company=company,
        is_outsourced=company is not None,
        process_is_over=is_over,
    )

    pack.current_process = process
    pack.save(update_fields=["current_process", "updated_at"])

    logger.info(
        "Intake of %s units (%s invalid) into pack %s at %s",
        total_count, invalid_count, pack.pk, dept.name,
    )
    return pack


@_retry_on_conflict("send")
def send(
    *,
    pack,
    target_department,
    employee,
    send_count: int,
    invalid_count: int = 0,
    invalid_reason: str = "",
    outsource_company=None,
) -> SendResult:
    """
    Forward part of a pack to another department.

    Appends a send record to the source pack and splits off a new pack at the
    target department, carrying a single Pending record until it is accepted.

    Args:
        pack: Source ProductPack instance or id
        target_department: Department instance or id receiving the units
        employee: Employee instance or id performing the send
        send_count: Units to forward (positive)
        invalid_count: Units rejected at the source during this send
        invalid_reason: Why units were rejected
        outsource_company: Optional OutsourceCompany instance or id

    Returns:
        SendResult

    Raises:
        NegativeOrNonIntegerCount: If a count is invalid
        NotFound: If a referenced entity is missing
        PackAwaitingAcceptance: If the source pack has not been accepted yet
        PackAlreadyComplete: If the source pack's flow is already over
        DepartmentNotReachable: If topology is enforced and target is not a next step
        InsufficientAvailableUnits: If send_count + invalid_count exceeds what is left
    """
    check_count(send_count, "send_count", allow_zero=False)
    check_count(invalid_count, "invalid_count")

    source = _locked_pack(pack)
    target = _get(Department.objects.all(), target_department, "Department")
    actor = _get(Employee.objects.all(), employee, "Employee")
    company = _get_company(outsource_company)

    if source.processes.filter(status=ProcessStatus.PENDING).exists():
        raise PackAwaitingAcceptance(source.pk)

    if source.process_is_over:
        raise PackAlreadyComplete(source.pk)

    if is_topology_enforced():
        from_role = source.department.resolved_role
        to_role = target.resolved_role
        if not topology.is_transition_allowed(from_role, to_role):
            raise DepartmentNotReachable(from_role, to_role)

    totals = source.processes.exclude(status=ProcessStatus.PENDING).aggregate(
        sent=Sum("sent_count", default=0),
        invalid=Sum("invalid_count", default=0),
    )
    computation = compute_send(
        source.total_count,
        totals["sent"],
        totals["invalid"],
        send_count,
        invalid_count,
    )

    if source.current_process_id is not None:
        accepted = source.current_process.accept_count
    else:
        accepted = source.total_count

    source_process = ProductProcess.objects.create(
        pack=source,
        status=computation.status,
        department=source.department,
        employee=actor,
        accept_count=accepted,
        sent_count=send_count,
        invalid_count=invalid_count,
        residue_count=computation.residue,
        invalid_reason=invalid_reason or "",
        sender_department=source.department,
        receiver_department=target,
        outsource_company=company,
        is_outsourced=company is not None,
        process_is_over=computation.is_complete,
    )

    source.sent_count = computation.new_sent
    source.invalid_count = computation.new_invalid
    source.residue_count = computation.residue
    source.process_is_over = computation.is_complete
    source.current_process = source_process
    source.save(update_fields=[
        "sent_count",
        "invalid_count",
        "residue_count",
        "process_is_over",
        "current_process",
        "updated_at",
    ])

    new_pack = ProductPack.objects.create(
        parent_id=source.lineage_root_id,
        product_id=source.product_id,
        department=target,
        department_name=target.name,
        total_count=send_count,
        residue_count=send_count,
        process_is_over=False,
    )

    pending = ProductProcess.objects.create(
        pack=new_pack,
        status=ProcessStatus.PENDING,
        department=target,
        employee=actor,
        accept_count=0,
        sent_count=send_count,
        invalid_count=0,
        residue_count=send_count,
        sender_department=source.department,
        receiver_department=target,
        outsource_company=company,
        is_outsourced=company is not None,
    )

    new_pack.current_process = pending
    new_pack.save(update_fields=["current_process", "updated_at"])

    logger.info(
        "Sent %s units (%s invalid) from pack %s at %s to %s as pack %s; %s remaining",
        send_count, invalid_count, source.pk, source.department_name,
        target.name, new_pack.pk, computation.residue,
    )

    return SendResult(
        source_process=source_process,
        new_pack=new_pack,
        pending_process=pending,
        remaining=computation.residue,
        is_complete=computation.is_complete,
        total_sent=computation.new_sent,
        total_invalid=computation.new_invalid,
    )


@_retry_on_conflict("accept")
def accept(
    *,
    pack,
    employee,
    invalid_count: int = 0,
    invalid_reason: str = "",
) -> AcceptResult:
    """
    Confirm a pending delivery at the receiving department.

    The Pending record is consumed and replaced by an accepted record. All
    units not marked invalid are accepted; there is no partial accept. When
    the pack's department is the terminal role the pack's flow is over.

    Args:
        pack: ProductPack instance or id
        employee: Employee instance or id confirming receipt
        invalid_count: Units found defective on inspection
        invalid_reason: Why units were rejected

    Returns:
        AcceptResult

    Raises:
        NegativeOrNonIntegerCount: If invalid_count is invalid
        NotFound: If the pack or employee is missing
        NoPendingProcess: If the pack has no delivery waiting
        InvalidCountExceedsTotal: If invalid_count > pack.total_count
        UnknownDepartmentRole: If the pack's department has no known role
    """
    check_count(invalid_count, "invalid_count")

    target = _locked_pack(pack)
    actor = _get(Employee.objects.all(), employee, "Employee")

    pending = target.processes.filter(status=ProcessStatus.PENDING).first()
    if pending is None:
        raise NoPendingProcess(target.pk)

    accepted = compute_accept(target.total_count, invalid_count)
    is_terminal = topology.is_terminal(target.department.resolved_role)
    is_over = is_terminal or accepted == 0

    pending_id = pending.pk
    pending.delete()

    process = ProductProcess.objects.create(
        pack=target,
        status=ProcessStatus.ACCEPTED,
        department=target.department,
        employee=actor,
        accept_count=accepted,
        sent_count=0,
        invalid_count=invalid_count,
        residue_count=0,
        invalid_reason=invalid_reason or "",
        sender_department_id=pending.sender_department_id,
        receiver_department_id=pending.receiver_department_id,
        outsource_company_id=pending.outsource_company_id,
        is_outsourced=pending.is_outsourced,
        process_is_over=is_over,
    )

    target.invalid_count = invalid_count
    target.residue_count = accepted
    target.process_is_over = is_over
    target.current_process = process
    target.save(update_fields=[
        "invalid_count",
        "residue_count",
        "process_is_over",
        "current_process",
        "updated_at",
    ])

    logger.info(
        "Accepted %s units (%s invalid) of pack %s at %s%s",
        accepted, invalid_count, target.pk, target.department_name,
        "; flow complete" if is_over else "",
    )

    return AcceptResult(
        process=process,
        pack=target,
        is_complete=is_over,
        pending_process_id=pending_id,
    )
