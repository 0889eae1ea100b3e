"""Models for django-packflow.

Provides:
- Department, Employee, Color, Size, Product, OutsourceCompany: reference data
- ProductPack: one batch of a product at one department
- ProductProcess: append-only log of intake, send, pending and accept events
"""

import uuid

from django.conf import settings
from django.db import models

from .choices import DepartmentRole, ProcessStatus
from .topology import resolve_role


class PackflowBaseModel(models.Model):
    """Base model with UUID primary key and timestamps."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class Department(PackflowBaseModel):
    """
    A production department.

    The topology role comes from `role` when set, otherwise it is resolved
    from `name` through the alias table.
    """

    name = models.CharField(
        max_length=100,
        unique=True,
        help_text="Department name, e.g. 'Bichuv' or 'Autsorspechat'"
    )
    role = models.CharField(
        max_length=32,
        choices=DepartmentRole.choices,
        blank=True,
        default="",
        help_text="Canonical role; blank = resolve from name"
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name

    @property
    def resolved_role(self) -> DepartmentRole:
        """Canonical role. Raises UnknownDepartmentRole if unresolvable."""
        return resolve_role(self.role or self.name)


class Employee(PackflowBaseModel):
    name = models.CharField(max_length=200)
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="employees",
    )
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="packflow_employee",
        help_text="Login account, if the employee has one"
    )

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Color(PackflowBaseModel):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Size(PackflowBaseModel):
    name = models.CharField(max_length=100, unique=True)

    class Meta:
        ordering = ["name"]

    def __str__(self):
        return self.name


class Product(PackflowBaseModel):
    """A garment design."""

    model = models.CharField(max_length=200, help_text="Garment model name")
    colors = models.ManyToManyField(Color, blank=True, related_name="products")
    sizes = models.ManyToManyField(Size, blank=True, related_name="products")

    class Meta:
        ordering = ["model"]

    def __str__(self):
        return self.model


class OutsourceCompany(PackflowBaseModel):
    name = models.CharField(max_length=200, unique=True)
    phone = models.CharField(max_length=50, blank=True, default="")

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "outsource companies"

    def __str__(self):
        return self.name


class ProductPack(PackflowBaseModel):
    """
    One batch of a product at one department.

    Packs split off by a send all point at the same lineage root through
    `parent`; the root itself has no parent.

    The counters are a projection of the process log maintained by the
    transition services:
        sent_count + invalid_count + residue_count == total_count
    """

    parent = models.ForeignKey(
        "self",
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="fragments",
        help_text="Lineage root (null = this pack is the root)"
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.PROTECT,
        related_name="packs",
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="packs",
    )
    department_name = models.CharField(
        max_length=100,
        help_text="Department name at the time the pack was created"
    )
    total_count = models.PositiveBigIntegerField(
        help_text="Units in this pack; fixed at creation"
    )
    sent_count = models.PositiveBigIntegerField(
        default=0,
        help_text="Units forwarded to other departments"
    )
    invalid_count = models.PositiveBigIntegerField(
        default=0,
        help_text="Units rejected as invalid"
    )
    residue_count = models.PositiveBigIntegerField(
        default=0,
        help_text="Units on hand, neither forwarded nor rejected"
    )
    process_is_over = models.BooleanField(default=False)
    current_process = models.ForeignKey(
        "ProductProcess",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
        help_text="Latest process record"
    )

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["department", "process_is_over"], name="packflow_pack_dept_over_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(
                    total_count=models.F("sent_count")
                    + models.F("invalid_count")
                    + models.F("residue_count")
                ),
                name="packflow_pack_counts_conserved",
            ),
        ]

    def __str__(self):
        return f"{self.product} x{self.total_count} @ {self.department_name}"

    @property
    def lineage_root_id(self):
        return self.parent_id or self.id


class ProductProcess(PackflowBaseModel):
    """
    Immutable record of one action on a pack.

    `sent_count` and `invalid_count` are what this action contributed; the
    cumulative totals are sums over the pack's non-pending records. The
    Pending record is the single mutable exception: it is deleted when the
    delivery is accepted.
    """

    pack = models.ForeignKey(
        ProductPack,
        on_delete=models.CASCADE,
        related_name="processes",
    )
    status = models.CharField(
        max_length=32,
        choices=ProcessStatus.choices,
    )
    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name="processes",
        help_text="Department that owns this record"
    )
    employee = models.ForeignKey(
        Employee,
        on_delete=models.PROTECT,
        related_name="processes",
        help_text="Employee who performed the action"
    )
    accept_count = models.PositiveBigIntegerField(default=0)
    sent_count = models.PositiveBigIntegerField(default=0)
    invalid_count = models.PositiveBigIntegerField(default=0)
    residue_count = models.PositiveBigIntegerField(default=0)
    invalid_reason = models.TextField(blank=True, default="")
    sender_department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    receiver_department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="+",
    )
    outsource_company = models.ForeignKey(
        OutsourceCompany,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name="processes",
    )
    is_outsourced = models.BooleanField(default=False)
    process_is_over = models.BooleanField(default=False)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["pack", "status"], name="packflow_proc_pack_status_idx"),
            models.Index(fields=["department", "status"], name="packflow_proc_dept_status_idx"),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["pack"],
                condition=models.Q(status="Pending"),
                name="packflow_one_pending_per_pack",
            ),
        ]

    def __str__(self):
        return f"{self.pack_id}: {self.get_status_display()} @ {self.department_id}"

    @property
    def is_pending(self) -> bool:
        return self.status == ProcessStatus.PENDING
