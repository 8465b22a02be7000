"""Tests for status-driven side effects."""

from datetime import datetime, timezone

from backoffice.services.warranty_status import (
    DEFAULT_STATUS,
    WarrantyStatus,
    apply_status_side_effects,
)

NOW = datetime(2026, 10, 19, 15, 0, tzinfo=timezone.utc)


def test_default_status_is_pending():
    assert DEFAULT_STATUS is WarrantyStatus.PENDING


def test_completing_stamps_actual_return_date():
    patch = apply_status_side_effects({"status": WarrantyStatus.COMPLETED}, NOW)
    assert patch["actual_return_date"] == NOW


def test_completing_keeps_supplied_return_date():
    supplied = datetime(2026, 10, 1, tzinfo=timezone.utc)
    patch = apply_status_side_effects(
        {"status": WarrantyStatus.COMPLETED, "actual_return_date": supplied}, NOW
    )
    assert patch["actual_return_date"] == supplied


def test_other_statuses_do_not_stamp():
    for status in (WarrantyStatus.PENDING, WarrantyStatus.PROCESSING, WarrantyStatus.REJECTED):
        assert "actual_return_date" not in apply_status_side_effects({"status": status}, NOW)


def test_patch_without_status_is_unchanged():
    assert apply_status_side_effects({"notes": "called customer"}, NOW) == {"notes": "called customer"}


def test_input_patch_is_not_mutated():
    original = {"status": WarrantyStatus.COMPLETED}
    apply_status_side_effects(original, NOW)
    assert original == {"status": WarrantyStatus.COMPLETED}
