"""Choice enums shared by models, topology and reconciliation."""

from django.db import models


class DepartmentRole(models.TextChoices):
    """Canonical department roles along the production chain."""

    CUTTING = "bichuv", "Cutting"
    SORTING = "tasnif", "Sorting"
    PRINTING = "pechat", "Printing"
    PRINTING_OUTSOURCED = "pechat_usluga", "Printing (outsourced)"
    EMBROIDERY = "vishivka", "Embroidery"
    EMBROIDERY_OUTSOURCED = "vishivka_usluga", "Embroidery (outsourced)"
    SEWING = "tikuv", "Sewing"
    SEWING_OUTSOURCED = "tikuv_usluga", "Sewing (outsourced)"
    CLEANING = "chistka", "Cleaning"
    QUALITY_CONTROL = "kontrol", "Quality control"
    IRONING = "dazmol", "Ironing"
    PACKING = "upakovka", "Packing"
    WAREHOUSE = "ombor", "Warehouse"


class ProcessStatus(models.TextChoices):
    PENDING = "Pending", "Pending"
    ACCEPTED = "QabulQilingan", "Accepted"
    PARTIALLY_SENT = "ToliqYuborilmagan", "Partially sent"
    SENT = "Yuborilgan", "Fully sent"
