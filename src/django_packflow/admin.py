"""Django admin configuration for packflow."""

from django.contrib import admin

from .models import (
    Color,
    Department,
    Employee,
    OutsourceCompany,
    Product,
    ProductPack,
    ProductProcess,
    Size,
)


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'role', 'created_at']
    list_filter = ['role']
    search_fields = ['name']


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['name', 'department', 'user']
    list_filter = ['department']
    search_fields = ['name']
    raw_id_fields = ['user']


@admin.register(Color)
class ColorAdmin(admin.ModelAdmin):
    search_fields = ['name']


@admin.register(Size)
class SizeAdmin(admin.ModelAdmin):
    search_fields = ['name']


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['model', 'created_at']
    search_fields = ['model']
    filter_horizontal = ['colors', 'sizes']


@admin.register(OutsourceCompany)
class OutsourceCompanyAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone']
    search_fields = ['name']


class ProductProcessInline(admin.TabularInline):
    """Inline for viewing a pack's process history."""

    model = ProductProcess
    extra = 0
    fk_name = 'pack'
    fields = [
        'status',
        'department',
        'employee',
        'accept_count',
        'sent_count',
        'invalid_count',
        'residue_count',
        'receiver_department',
        'created_at',
    ]
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ProductPack)
class ProductPackAdmin(admin.ModelAdmin):
    """Admin for ProductPack model (read-only; use the services to transition)."""

    list_display = [
        'id',
        'product',
        'department_name',
        'total_count',
        'sent_count',
        'invalid_count',
        'residue_count',
        'get_status',
        'process_is_over',
        'created_at',
    ]
    list_filter = ['department', 'process_is_over']
    search_fields = ['department_name', 'product__model']
    list_select_related = ['product', 'current_process']
    readonly_fields = [
        'id',
        'parent',
        'product',
        'department',
        'department_name',
        'total_count',
        'sent_count',
        'invalid_count',
        'residue_count',
        'process_is_over',
        'current_process',
        'created_at',
        'updated_at',
    ]
    fieldsets = [
        ('Pack', {
            'fields': ['id', 'product', 'department', 'department_name', 'parent']
        }),
        ('Counts', {
            'fields': ['total_count', 'sent_count', 'invalid_count', 'residue_count', 'process_is_over']
        }),
        ('Timestamps', {
            'fields': ['current_process', 'created_at', 'updated_at'],
            'classes': ['collapse']
        }),
    ]
    inlines = [ProductProcessInline]

    def get_status(self, obj):
        """Display the latest record's status."""
        if obj.current_process is None:
            return '-'
        return obj.current_process.get_status_display()
    get_status.short_description = 'Status'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ProductProcess)
class ProductProcessAdmin(admin.ModelAdmin):
    """Admin for ProductProcess model (read-only)."""

    list_display = ['pack', 'status', 'department', 'employee', 'sent_count', 'invalid_count', 'created_at']
    list_filter = ['status', 'department', 'is_outsourced']
    readonly_fields = [
        'id',
        'pack',
        'status',
        'department',
        'employee',
        'accept_count',
        'sent_count',
        'invalid_count',
        'residue_count',
        'invalid_reason',
        'sender_department',
        'receiver_department',
        'outsource_company',
        'is_outsourced',
        'process_is_over',
        'created_at',
        'updated_at',
    ]

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
