"""Tests for packflow selectors."""

import uuid

import pytest
from freezegun import freeze_time

from django_packflow import services
from django_packflow.choices import ProcessStatus
from django_packflow.models import Department
from django_packflow.selectors import (
    get_accepted_packs,
    get_department_history,
    get_lineage,
    get_next_departments,
    get_pack,
    get_pack_history,
    get_pack_stats,
    get_pending_packs,
    summarize_lineage,
)


@pytest.fixture
def flow(cutting, sorting, product, employee):
    """Root pack at cutting with one accepted and one pending delivery at sorting."""
    with freeze_time("2025-01-15 08:00:00"):
        root = services.intake(department=cutting, product=product, employee=employee, total_count=100)
    with freeze_time("2025-01-15 09:00:00"):
        first = services.send(pack=root, target_department=sorting, employee=employee, send_count=40)
    with freeze_time("2025-01-15 10:00:00"):
        services.accept(pack=first.new_pack, employee=employee, invalid_count=2)
    with freeze_time("2025-01-15 11:00:00"):
        second = services.send(
            pack=root, target_department=sorting, employee=employee,
            send_count=50, invalid_count=10,
        )
    return {
        "root": root,
        "accepted": first.new_pack,
        "pending": second.new_pack,
    }


@pytest.mark.django_db
class TestPackSelectors:
    """Tests for per-pack and per-department listings."""

    def test_get_pack(self, flow):
        pack = get_pack(flow["root"].pk)
        assert pack == flow["root"]
        assert pack.current_process.status == ProcessStatus.SENT

    def test_get_pack_missing(self, db):
        assert get_pack(uuid.uuid4()) is None
        assert get_pack("not-a-uuid") is None

    def test_pending_packs(self, flow, sorting):
        assert list(get_pending_packs(sorting)) == [flow["pending"]]

    def test_accepted_packs(self, flow, sorting, cutting):
        assert list(get_accepted_packs(sorting)) == [flow["accepted"]]
        assert list(get_accepted_packs(cutting)) == []

    def test_department_history_newest_first(self, flow, sorting):
        assert list(get_department_history(sorting)) == [flow["pending"], flow["accepted"]]

    def test_pack_history_newest_first(self, flow):
        statuses = [p.status for p in get_pack_history(flow["root"])]
        assert statuses == [
            ProcessStatus.SENT,
            ProcessStatus.PARTIALLY_SENT,
            ProcessStatus.ACCEPTED,
        ]

    def test_pack_stats(self, flow):
        stats = get_pack_stats(flow["root"])
        assert stats["sent_count"] == 90
        assert stats["invalid_count"] == 10
        assert stats["residue_count"] == 0
        assert stats["total_count"] == 100
        assert stats["process_is_over"] is True

    def test_pack_stats_conserve_after_sends(self, flow):
        # flow["root"] is the instance intake returned, before either send
        stats = get_pack_stats(flow["root"])
        assert stats["sent_count"] + stats["invalid_count"] + stats["residue_count"] == stats["total_count"]

    def test_pack_stats_count_accepted_units_once(self, flow):
        assert get_pack_stats(flow["root"])["accept_count"] == 100
        assert get_pack_stats(flow["accepted"])["accept_count"] == 38

    def test_pack_stats_by_id(self, flow):
        assert get_pack_stats(flow["root"].pk)["residue_count"] == 0

    def test_pack_stats_ignore_pending(self, flow):
        stats = get_pack_stats(flow["pending"])
        assert stats["sent_count"] == 0
        assert stats["accept_count"] == 0
        assert stats["residue_count"] == 50


@pytest.mark.django_db
class TestLineageSelectors:
    """Tests for lineage listing and summary."""

    def test_lineage_from_any_member(self, flow):
        expected = [flow["root"], flow["accepted"], flow["pending"]]
        assert list(get_lineage(flow["root"])) == expected
        assert list(get_lineage(flow["pending"])) == expected

    def test_summary_in_stage_order(self, flow, cutting, sorting):
        summary = summarize_lineage(flow["accepted"])

        assert [e["department_id"] for e in summary] == [cutting.id, sorting.id]
        assert [e["stage"] for e in summary] == [1, 2]

        cut, sort = summary
        assert cut["sent_count"] == 90
        assert cut["invalid_count"] == 10
        assert cut["residue_count"] == 0

        assert sort["pack_count"] == 2
        assert sort["total_count"] == 90
        assert sort["invalid_count"] == 2
        assert sort["residue_count"] == 38
        assert sort["pending_count"] == 50

    def test_unresolvable_department_listed_last(self, flow, employee, settings):
        settings.PACKFLOW_ENFORCE_TOPOLOGY = False
        laundry = Department.objects.create(name="Laundry")
        services.send(pack=flow["accepted"], target_department=laundry, employee=employee, send_count=10)

        summary = summarize_lineage(flow["root"])

        assert summary[-1]["department_id"] == laundry.id
        assert summary[-1]["stage"] is None


@pytest.mark.django_db
class TestGetNextDepartments:
    """Tests for next-department resolution."""

    def test_fan_out_in_topology_order(self, departments):
        result = get_next_departments(departments["tasnif"])
        assert result == [departments["pechat"], departments["pechat_usluga"]]

    def test_name_resolved_departments(self, db):
        tikuv = Department.objects.create(name="Tikuv")
        chistka = Department.objects.create(name="Chistka")
        Department.objects.create(name="Canteen")

        assert get_next_departments(tikuv) == [chistka]

    def test_outsourced_alias_department(self, departments):
        autsors = Department.objects.create(name="Autsorspechat")
        result = get_next_departments(autsors)
        assert result == [departments["vishivka"], departments["vishivka_usluga"]]

    def test_terminal_has_none(self, departments):
        assert get_next_departments(departments["ombor"]) == []
