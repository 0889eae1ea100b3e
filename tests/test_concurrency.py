"""Concurrent transitions on the same pack.

The pack row lock serializes writers: the loser of a race re-reads the
committed state and fails cleanly instead of double-counting units.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection

from django_packflow import services
from django_packflow.audit import audit_pack
from django_packflow.exceptions import PackFlowError
from django_packflow.models import ProductPack, ProductProcess


def _race(*calls):
    """Run calls in parallel threads started together; return sorted outcomes."""
    barrier = threading.Barrier(len(calls))

    def run(call):
        try:
            barrier.wait()
            call()
            return "ok"
        except PackFlowError as e:
            return type(e).__name__
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=len(calls)) as executor:
        outcomes = list(executor.map(run, calls))

    return sorted(outcomes)


@pytest.mark.django_db(transaction=True)
class TestConcurrentSend:
    """Two sends racing for the same units."""

    def test_only_one_send_fits(self, cutting, sorting, product, employee):
        root = services.intake(department=cutting, product=product, employee=employee, total_count=100)

        def send_sixty():
            services.send(pack=root.pk, target_department=sorting, employee=employee, send_count=60)

        outcomes = _race(send_sixty, send_sixty)

        assert outcomes == ["InsufficientAvailableUnits", "ok"]
        root.refresh_from_db()
        assert root.sent_count == 60
        assert root.residue_count == 40
        assert ProductPack.objects.filter(parent=root).count() == 1
        assert audit_pack(root) == []

    def test_both_sends_fit(self, cutting, sorting, product, employee):
        root = services.intake(department=cutting, product=product, employee=employee, total_count=100)

        def send_forty():
            services.send(pack=root.pk, target_department=sorting, employee=employee, send_count=40)

        outcomes = _race(send_forty, send_forty)

        assert outcomes == ["ok", "ok"]
        root.refresh_from_db()
        assert root.sent_count == 80
        assert root.residue_count == 20
        assert ProductPack.objects.filter(parent=root).count() == 2


@pytest.mark.django_db(transaction=True)
class TestConcurrentAccept:
    """Two accepts racing for the same delivery."""

    def test_exactly_one_accept_succeeds(self, cutting, sorting, product, employee):
        root = services.intake(department=cutting, product=product, employee=employee, total_count=100)
        delivered = services.send(
            pack=root, target_department=sorting, employee=employee, send_count=60,
        ).new_pack

        def accept():
            services.accept(pack=delivered.pk, employee=employee)

        outcomes = _race(accept, accept)

        assert outcomes == ["NoPendingProcess", "ok"]
        delivered.refresh_from_db()
        assert delivered.residue_count == 60
        assert ProductProcess.objects.filter(pack=delivered).count() == 1
        assert audit_pack(delivered) == []
