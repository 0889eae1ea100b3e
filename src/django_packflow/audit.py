"""
Invariant audit for stored packs.

Checks a pack's counters and process log against the conservation and
lineage rules the transition services maintain. Returns error messages
rather than raising, so a whole table can be scanned in one pass.

Usage:
    from django_packflow.audit import audit_pack

    errors = audit_pack(pack)
    if errors:
        ...
"""

from django.db.models import Sum

from . import topology
from .choices import ProcessStatus
from .exceptions import UnknownDepartmentRole


def audit_pack(pack) -> list[str]:
    """
    Check one pack for invariant violations.

    Checks:
    - sent + invalid + residue == total on the pack counters
    - the non-pending process log sums to the pack's sent and invalid counters
    - at most one Pending record
    - the parent, if any, is a lineage root
    - current_process belongs to this pack
    - process_is_over agrees with the latest record
    - process_is_over is set only at the terminal role or with nothing left
    - a pack with nothing left is over

    Returns:
        List of error messages (empty if consistent)
    """
    errors = []

    if pack.sent_count + pack.invalid_count + pack.residue_count != pack.total_count:
        errors.append(
            f"counters do not conserve units: sent={pack.sent_count} "
            f"invalid={pack.invalid_count} residue={pack.residue_count} "
            f"total={pack.total_count}"
        )

    processes = pack.processes.all()
    pending_count = processes.filter(status=ProcessStatus.PENDING).count()
    if pending_count > 1:
        errors.append(f"{pending_count} pending records, expected at most 1")

    totals = processes.exclude(status=ProcessStatus.PENDING).aggregate(
        sent=Sum("sent_count", default=0),
        invalid=Sum("invalid_count", default=0),
    )
    if pending_count == 0:
        if totals["sent"] != pack.sent_count:
            errors.append(
                f"history sent total {totals['sent']} != pack sent_count {pack.sent_count}"
            )
        if totals["invalid"] != pack.invalid_count:
            errors.append(
                f"history invalid total {totals['invalid']} != pack invalid_count {pack.invalid_count}"
            )

    if pack.parent_id is not None and pack.parent.parent_id is not None:
        errors.append(f"parent {pack.parent_id} is not a lineage root")

    if pack.process_is_over and pack.residue_count != 0 and not _at_terminal(pack):
        errors.append(
            f"process_is_over is set with residue={pack.residue_count} "
            f"at non-terminal department {pack.department_name!r}"
        )
    if pack.residue_count == 0 and not pack.process_is_over:
        errors.append("residue is 0 but process_is_over is not set")

    current = pack.current_process
    if current is None:
        if processes.exists():
            errors.append("current_process is unset but the pack has process records")
    else:
        if current.pack_id != pack.pk:
            errors.append(f"current_process {current.pk} belongs to pack {current.pack_id}")
        elif current.process_is_over != pack.process_is_over:
            errors.append(
                f"process_is_over={pack.process_is_over} disagrees with latest record"
            )

    return errors


def _at_terminal(pack) -> bool:
    try:
        return topology.is_terminal(pack.department.resolved_role)
    except UnknownDepartmentRole:
        return False


def audit_packs(queryset) -> dict:
    """
    Audit every pack in queryset.

    Returns:
        Dict mapping pack id (str) to its error list, for failing packs only
    """
    failures = {}
    for pack in queryset.select_related("parent", "department", "current_process"):
        errors = audit_pack(pack)
        if errors:
            failures[str(pack.pk)] = errors
    return failures
