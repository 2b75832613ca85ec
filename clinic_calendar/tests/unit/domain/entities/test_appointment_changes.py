"""
Unit tests for AppointmentChanges.
"""

from datetime import datetime, timedelta

import pytest

from clinic_calendar.domain.entities.appointment import AppointmentStatus
from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.recurrence_rule import Frequency, RecurrenceRule
from clinic_calendar.domain.exceptions import InvalidAppointmentTimeError, ValidationError


def test_unknown_field_is_rejected():
    with pytest.raises(ValidationError, match="version"):
        AppointmentChanges(title="x", version=3)


@pytest.mark.parametrize("field_name", ["title", "start_at", "clinician_id", "status"])
def test_required_fields_cannot_be_cleared(field_name):
    with pytest.raises(ValidationError, match=field_name):
        AppointmentChanges(**{field_name: None})


def test_optional_fields_can_be_cleared(make_appointment):
    appointment = make_appointment()

    updated = AppointmentChanges(notes=None).apply_to(appointment)

    assert updated.notes is None
    assert appointment.notes is not None


def test_mapping_behaviour():
    changes = AppointmentChanges(title="Intake", status=AppointmentStatus.CONFIRMED)

    assert "title" in changes
    assert "notes" not in changes
    assert changes["status"] is AppointmentStatus.CONFIRMED
    assert len(changes) == 2
    assert set(changes) == {"title", "status"}
    assert dict(changes.items()) == {"title": "Intake", "status": AppointmentStatus.CONFIRMED}
    assert changes == AppointmentChanges(status=AppointmentStatus.CONFIRMED, title="Intake")


def test_changes_rule_reflects_presence_not_value():
    assert AppointmentChanges(recurrence_rule=None).changes_rule
    assert AppointmentChanges(recurrence_rule=RecurrenceRule(frequency=Frequency.DAILY)).changes_rule
    assert not AppointmentChanges(title="x").changes_rule


def test_apply_to_keeps_duration_when_only_start_moves(make_appointment):
    appointment = make_appointment()
    new_start = appointment.start_at + timedelta(days=1, hours=2)

    updated = AppointmentChanges(start_at=new_start).apply_to(appointment)

    assert updated.start_at == new_start
    assert updated.duration == appointment.duration
    assert updated.id == appointment.id


def test_apply_to_never_applies_rule(make_appointment):
    appointment = make_appointment()

    updated = AppointmentChanges(
        title="New", recurrence_rule=RecurrenceRule(frequency=Frequency.DAILY, count=3)
    ).apply_to(appointment)

    assert updated.title == "New"
    assert updated.recurrence_rule is None


def test_apply_to_overrides_win(make_appointment):
    appointment = make_appointment()

    updated = AppointmentChanges(title="New").apply_to(appointment, title="Override", version=7)

    assert updated.title == "Override"
    assert updated.version == 7


def test_apply_to_rejects_inverted_window(make_appointment):
    appointment = make_appointment()

    with pytest.raises(InvalidAppointmentTimeError):
        AppointmentChanges(end_at=appointment.start_at - timedelta(minutes=1)).apply_to(appointment)


def test_appointment_rejects_end_before_start(make_appointment):
    with pytest.raises(InvalidAppointmentTimeError):
        make_appointment(start_at=datetime(2025, 1, 6, 9, 0), end_at=datetime(2025, 1, 6, 8, 0))
