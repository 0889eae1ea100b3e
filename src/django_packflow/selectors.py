"""
Pack Flow Selectors - Public read-only API for the packflow app.

Query functions for the API layer; writes go through services.

Usage:
    from django_packflow.selectors import get_pending_packs, get_pack_stats
"""

from django.core.exceptions import ValidationError
from django.db.models import Q, QuerySet, Sum

from . import topology
from .choices import ProcessStatus
from .exceptions import UnknownDepartmentRole
from .models import Department, ProductPack, ProductProcess


# =============================================================================
# PACK SELECTORS
# =============================================================================

def _packs() -> QuerySet[ProductPack]:
    return ProductPack.objects.select_related(
        "product", "department", "current_process"
    ).prefetch_related("product__colors", "product__sizes")


def get_pack(pack_id) -> ProductPack | None:
    """Get a pack with its latest process, or None if not found."""
    try:
        return _packs().filter(pk=pack_id).first()
    except (ValidationError, ValueError, TypeError):
        return None


def get_pending_packs(department) -> QuerySet[ProductPack]:
    """Packs delivered to department and not yet accepted."""
    return _packs().filter(
        department=department,
        processes__status=ProcessStatus.PENDING,
    ).distinct()


def get_accepted_packs(department) -> QuerySet[ProductPack]:
    """Packs at department whose latest record is an accept or intake."""
    return _packs().filter(
        department=department,
        current_process__status=ProcessStatus.ACCEPTED,
    )


def get_department_history(department) -> QuerySet[ProductPack]:
    """Every pack that has been at department, newest first."""
    return _packs().filter(department=department)


def get_pack_history(pack) -> QuerySet[ProductProcess]:
    """Process records of a pack, newest first."""
    return ProductProcess.objects.filter(pack=pack).select_related(
        "department", "employee", "sender_department",
        "receiver_department", "outsource_company",
    ).order_by("-created_at")


def get_pack_stats(pack) -> dict:
    """
    Summed counts over a pack's process records.

    Pending records are excluded: they describe units in transit, not
    units this pack has handled. Send records repeat the accepted count,
    so accept_count only sums accepted records.

    The pack row is re-read so the counts match the stored history even
    when the caller holds a stale instance.
    """
    totals = ProductProcess.objects.filter(pack=pack).exclude(
        status=ProcessStatus.PENDING
    ).aggregate(
        accept_count=Sum(
            "accept_count", filter=Q(status=ProcessStatus.ACCEPTED), default=0
        ),
        sent_count=Sum("sent_count", default=0),
        invalid_count=Sum("invalid_count", default=0),
    )
    totals.update(ProductPack.objects.values(
        "residue_count", "total_count", "process_is_over"
    ).get(pk=getattr(pack, "pk", pack)))
    return totals


# =============================================================================
# LINEAGE SELECTORS
# =============================================================================

def get_lineage(pack) -> QuerySet[ProductPack]:
    """The root pack and every pack split off from it, oldest first."""
    root_id = pack.lineage_root_id
    return ProductPack.objects.filter(
        Q(pk=root_id) | Q(parent_id=root_id)
    ).select_related("current_process").order_by("created_at")


def summarize_lineage(pack) -> list[dict]:
    """
    Per-department totals across a pack's lineage, in production order.

    Departments whose role cannot be resolved are listed last.

    Returns:
        List of dicts with department, stage, pack_count, total_count,
        sent_count, invalid_count, residue_count and pending_count.
    """
    summary = {}
    for item in get_lineage(pack):
        entry = summary.setdefault(item.department_id, {
            "department_id": item.department_id,
            "department_name": item.department_name,
            "stage": None,
            "pack_count": 0,
            "total_count": 0,
            "sent_count": 0,
            "invalid_count": 0,
            "residue_count": 0,
            "pending_count": 0,
        })
        entry["pack_count"] += 1
        entry["total_count"] += item.total_count
        entry["sent_count"] += item.sent_count
        entry["invalid_count"] += item.invalid_count
        if item.current_process is not None and item.current_process.is_pending:
            entry["pending_count"] += item.total_count
        else:
            entry["residue_count"] += item.residue_count

    departments = Department.objects.in_bulk(list(summary))
    for department_id, entry in summary.items():
        try:
            entry["stage"] = topology.stage_index(departments[department_id].resolved_role)
        except UnknownDepartmentRole:
            entry["stage"] = None

    return sorted(
        summary.values(),
        key=lambda e: (e["stage"] is None, e["stage"] or 0, e["department_name"]),
    )


# =============================================================================
# DEPARTMENT SELECTORS
# =============================================================================

def get_next_departments(department) -> list[Department]:
    """
    Departments a pack at department may be sent to, in topology order.

    Raises:
        UnknownDepartmentRole: If department's role cannot be resolved
    """
    allowed = topology.next_roles(department.resolved_role)
    if not allowed:
        return []

    candidates = []
    for candidate in Department.objects.all():
        try:
            role = candidate.resolved_role
        except UnknownDepartmentRole:
            continue
        if role in allowed:
            candidates.append((allowed.index(role), candidate.name, candidate))

    return [c for _, _, c in sorted(candidates, key=lambda c: (c[0], c[1]))]
