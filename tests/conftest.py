"""Pytest configuration for django-packflow tests."""

import pytest

from django_packflow.choices import DepartmentRole
from django_packflow.models import Department, Employee, OutsourceCompany, Product


@pytest.fixture
def departments(db):
    """One department per role, keyed by role value."""
    return {
        role.value: Department.objects.create(name=role.label, role=role.value)
        for role in DepartmentRole
    }


@pytest.fixture
def cutting(departments):
    return departments["bichuv"]


@pytest.fixture
def sorting(departments):
    return departments["tasnif"]


@pytest.fixture
def printing(departments):
    return departments["pechat"]


@pytest.fixture
def warehouse(departments):
    return departments["ombor"]


@pytest.fixture
def employee(cutting):
    """Create a test employee."""
    return Employee.objects.create(name="Aziza", department=cutting)


@pytest.fixture
def product(db):
    """Create a test product."""
    return Product.objects.create(model="T-shirt basic")


@pytest.fixture
def company(db):
    """Create a test outsource company."""
    return OutsourceCompany.objects.create(name="Print House", phone="+998 90 000 00 00")


@pytest.fixture
def user(db, django_user_model):
    """Create a test user."""
    return django_user_model.objects.create_user(username="testuser", password="test")
