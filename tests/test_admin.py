"""Tests for packflow admin registration."""

import pytest
from django.contrib import admin
from django.test import RequestFactory

from django_packflow import services
from django_packflow.admin import ProductPackAdmin, ProductProcessAdmin
from django_packflow.models import (
    Color,
    Department,
    Employee,
    OutsourceCompany,
    Product,
    ProductPack,
    ProductProcess,
    Size,
)


@pytest.mark.parametrize("model", [
    Department, Employee, Color, Size, Product, OutsourceCompany, ProductPack, ProductProcess,
])
def test_models_registered(model):
    assert admin.site.is_registered(model)


@pytest.mark.django_db
class TestReadOnlyAdmins:
    """Packs and process records change only through the services."""

    @pytest.fixture
    def request_(self, django_user_model):
        request = RequestFactory().get("/admin/")
        request.user = django_user_model.objects.create_superuser(username="admin", password="admin")
        return request

    def test_process_admin_is_read_only(self, request_):
        model_admin = ProductProcessAdmin(ProductProcess, admin.site)
        assert not model_admin.has_add_permission(request_)
        assert not model_admin.has_change_permission(request_)
        assert not model_admin.has_delete_permission(request_)

    def test_pack_admin_blocks_add_and_delete(self, request_):
        model_admin = ProductPackAdmin(ProductPack, admin.site)
        assert not model_admin.has_add_permission(request_)
        assert not model_admin.has_delete_permission(request_)

    def test_status_column(self, cutting, product, employee):
        pack = services.intake(department=cutting, product=product, employee=employee, total_count=3)
        model_admin = ProductPackAdmin(ProductPack, admin.site)

        assert model_admin.get_status(pack) == "Accepted"
        assert model_admin.get_status(ProductPack()) == "-"

    def test_changelist_renders(self, admin_client, cutting, product, employee):
        services.intake(department=cutting, product=product, employee=employee, total_count=3)

        response = admin_client.get("/admin/django_packflow/productpack/")

        assert response.status_code == 200
