"""
Unit tests for the series mutation coordinator.

The ``weekly_series`` fixture is a ten-occurrence Monday/Wednesday series
starting Monday 2025-01-06 09:00:

    index  0      1      2       3       4       5       6       7       8      9
    day    Jan 6  Jan 8  Jan 13  Jan 15  Jan 20  Jan 22  Jan 27  Jan 29  Feb 3  Feb 5
"""

import copy
from datetime import date, datetime, timedelta

import pytest

from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.recurrence_rule import Frequency, RecurrenceRule, Weekday
from clinic_calendar.domain.entities.series_plan import MutationScope
from clinic_calendar.domain.exceptions import (
    InvalidAppointmentTimeError,
    InvalidScopeTransitionError,
    OccurrenceNotFoundError,
    RecurrenceError,
    SeriesNotFoundError,
)
from clinic_calendar.domain.services.recurrence.occurrence_generator import OccurrenceGenerator


def starts(appointments) -> list[datetime]:
    return sorted(a.start_at for a in appointments)


def regenerate(appointment) -> list[datetime]:
    """Starts a master's rule yields from its own position."""
    occurrences = OccurrenceGenerator().generate(
        appointment.recurrence_rule, appointment.start_at, appointment.end_at
    )
    return [o.start for o in occurrences]


def apply(series, plan) -> list:
    """Rows left once ``plan`` is applied, in storage order."""
    deleted = set(plan.deleted_ids)
    updated = {a.id: a for a in plan.updates}
    return [updated.get(a.id, a) for a in series if a.id not in deleted] + list(plan.creates)


def create_series(coordinator, make_appointment, rule, start_at) -> list:
    template = make_appointment(start_at=start_at, is_recurring=True, recurrence_rule=rule)
    return list(coordinator.plan_creation(template).creates)


class TestPlanCreation:
    """Tests for plan_creation."""

    def test_standalone_appointment(self, coordinator, make_appointment):
        template = make_appointment()

        plan = coordinator.plan_creation(template)

        assert plan.creates == (template,)
        assert not plan.updates and not plan.deletes

    def test_recurring_series_layout(self, weekly_series, weekly_rule):
        master, *children = weekly_series

        assert len(weekly_series) == 10
        assert master.is_master
        assert master.recurrence_rule == weekly_rule
        assert all(child.series_master_id == master.id for child in children)
        assert all(child.recurrence_rule is None and child.is_recurring for child in children)
        assert len({a.id for a in weekly_series}) == 10
        assert starts(weekly_series) == regenerate(master)

    def test_master_moves_to_first_occurrence(self, coordinator, make_appointment):
        sunday = datetime(2025, 1, 5, 10, 0)
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, by_weekdays=(Weekday.TU, Weekday.TH), count=3)

        plan = coordinator.plan_creation(
            make_appointment(start_at=sunday, is_recurring=True, recurrence_rule=rule)
        )

        assert plan.creates[0].start_at == datetime(2025, 1, 7, 10, 0)
        assert plan.creates[0].end_at == datetime(2025, 1, 7, 11, 0)

    def test_rule_without_occurrences_raises(self, coordinator, make_appointment):
        rule = RecurrenceRule(frequency=Frequency.DAILY, until=date(2024, 12, 31))

        with pytest.raises(InvalidAppointmentTimeError):
            coordinator.plan_creation(make_appointment(is_recurring=True, recurrence_rule=rule))


class TestPlanDelete:
    """Tests for plan_delete."""

    def test_single_child_deletes_only_that_row(self, coordinator, weekly_series):
        target = weekly_series[3]

        plan = coordinator.plan_delete(weekly_series, target, MutationScope.SINGLE)

        assert plan.deletes == (target,)
        assert not plan.updates and not plan.creates

    def test_single_master_promotes_earliest_child(self, coordinator, weekly_series):
        master, heir, *rest = weekly_series

        plan = coordinator.plan_delete(weekly_series, master, MutationScope.SINGLE)

        promoted, *repointed = plan.updates
        assert plan.deletes == (master,)
        assert promoted.id == heir.id
        assert promoted.is_master
        assert promoted.recurrence_rule.count == 9
        assert promoted.recurrence_rule.by_weekdays == (Weekday.MO, Weekday.WE)
        assert [a.id for a in repointed] == [a.id for a in rest]
        assert all(a.series_master_id == heir.id for a in repointed)
        # The promoted rule reproduces the surviving occurrences.
        assert regenerate(promoted) == starts(weekly_series[1:])

    def test_single_master_with_until_keeps_rule(self, coordinator, make_appointment):
        rule = RecurrenceRule(frequency=Frequency.DAILY, until=date(2025, 1, 9))
        series = list(coordinator.plan_creation(make_appointment(is_recurring=True, recurrence_rule=rule)).creates)

        plan = coordinator.plan_delete(series, series[0], MutationScope.SINGLE)

        assert plan.updates[0].recurrence_rule == rule

    def test_single_on_lone_master_deletes_it(self, coordinator, weekly_series):
        master = weekly_series[0]

        plan = coordinator.plan_delete([master], master, MutationScope.SINGLE)

        assert plan.deletes == (master,)
        assert not plan.updates

    def test_future_truncates_master(self, coordinator, weekly_series):
        target = weekly_series[4]

        plan = coordinator.plan_delete(weekly_series, target, MutationScope.FUTURE)

        (truncated,) = plan.updates
        assert truncated.id == weekly_series[0].id
        assert truncated.recurrence_rule.until == date(2025, 1, 19)
        assert truncated.recurrence_rule.count is None
        assert [a.id for a in plan.deletes] == [a.id for a in weekly_series[4:]]
        assert regenerate(truncated) == starts(weekly_series[:4])

    def test_future_on_master_deletes_everything(self, coordinator, weekly_series):
        plan = coordinator.plan_delete(weekly_series, weekly_series[0], MutationScope.FUTURE)

        assert set(plan.deleted_ids) == {a.id for a in weekly_series}
        assert not plan.updates

    def test_all_from_child_deletes_everything(self, coordinator, weekly_series):
        plan = coordinator.plan_delete(weekly_series, weekly_series[7], MutationScope.ALL)

        assert set(plan.deleted_ids) == {a.id for a in weekly_series}
        assert not plan.updates and not plan.creates

    def test_standalone_single_delete(self, coordinator, make_appointment):
        appointment = make_appointment()

        plan = coordinator.plan_delete([appointment], appointment, MutationScope.SINGLE)

        assert plan.deletes == (appointment,)

    @pytest.mark.parametrize("scope", [MutationScope.FUTURE, MutationScope.ALL])
    def test_series_scope_on_standalone_raises(self, coordinator, make_appointment, scope):
        appointment = make_appointment()

        with pytest.raises(InvalidScopeTransitionError):
            coordinator.plan_delete([appointment], appointment, scope)

    def test_planning_is_deterministic_and_leaves_inputs_alone(self, coordinator, weekly_series):
        snapshot = copy.deepcopy(weekly_series)

        first = coordinator.plan_delete(weekly_series, weekly_series[5], MutationScope.FUTURE)
        second = coordinator.plan_delete(weekly_series, weekly_series[5], MutationScope.FUTURE)

        assert first == second
        assert weekly_series == snapshot


class TestPlanUpdate:
    """Tests for plan_update."""

    def test_single_keeps_occurrence_in_series(self, coordinator, weekly_series):
        target = weekly_series[2]

        plan = coordinator.plan_update(
            weekly_series, target, MutationScope.SINGLE, AppointmentChanges(title="Rescheduled")
        )

        (updated,) = plan.updates
        assert updated.id == target.id
        assert updated.title == "Rescheduled"
        assert updated.series_master_id == weekly_series[0].id
        assert updated.version == target.version
        assert not plan.creates and not plan.deletes

    def test_single_move_keeps_duration(self, coordinator, weekly_series):
        target = weekly_series[2]
        new_start = target.start_at + timedelta(hours=3)

        plan = coordinator.plan_update(
            weekly_series, target, MutationScope.SINGLE, AppointmentChanges(start_at=new_start)
        )

        assert plan.updates[0].start_at == new_start
        assert plan.updates[0].end_at == new_start + timedelta(hours=1)

    def test_single_rule_change_raises(self, coordinator, weekly_series):
        changes = AppointmentChanges(recurrence_rule=RecurrenceRule(frequency=Frequency.DAILY, count=2))

        with pytest.raises(InvalidScopeTransitionError):
            coordinator.plan_update(weekly_series, weekly_series[2], MutationScope.SINGLE, changes)

    def test_single_on_standalone(self, coordinator, make_appointment):
        appointment = make_appointment()

        plan = coordinator.plan_update(
            [appointment], appointment, MutationScope.SINGLE, AppointmentChanges(notes=None)
        )

        assert plan.updates[0].notes is None

    def test_future_on_standalone_raises(self, coordinator, make_appointment):
        appointment = make_appointment()

        with pytest.raises(InvalidScopeTransitionError):
            coordinator.plan_update(
                [appointment], appointment, MutationScope.FUTURE, AppointmentChanges(title="x")
            )

    def test_future_split_conserves_occurrences(self, coordinator, weekly_series):
        master, target = weekly_series[0], weekly_series[4]

        plan = coordinator.plan_update(
            weekly_series, target, MutationScope.FUTURE, AppointmentChanges(title="Group session")
        )

        (truncated,) = plan.updates
        new_master, *new_children = plan.creates
        assert truncated.id == master.id
        assert truncated.recurrence_rule.until == date(2025, 1, 19)
        assert [a.id for a in plan.deletes] == [a.id for a in weekly_series[4:]]

        assert new_master.id not in {a.id for a in weekly_series}
        assert new_master.is_master
        assert new_master.start_at == target.start_at
        assert new_master.recurrence_rule.count == 6
        assert all(child.series_master_id == new_master.id for child in new_children)
        assert all(a.title == "Group session" for a in plan.creates)

        survivors = [a for a in weekly_series if a.id not in set(plan.deleted_ids)]
        assert starts(survivors + list(plan.creates)) == starts(weekly_series)
        assert regenerate(truncated) == starts(survivors)
        assert regenerate(new_master) == starts(plan.creates)

    def test_future_split_moves_time_of_day(self, coordinator, weekly_series):
        target = weekly_series[4]
        later = target.start_at + timedelta(hours=2)

        plan = coordinator.plan_update(
            weekly_series, target, MutationScope.FUTURE, AppointmentChanges(start_at=later)
        )

        assert starts(plan.creates) == [a.start_at + timedelta(hours=2) for a in weekly_series[4:]]
        assert all(a.end_at - a.start_at == timedelta(hours=1) for a in plan.creates)

    def test_future_split_moving_day_shifts_weekdays(self, coordinator, weekly_series):
        target = weekly_series[4]

        plan = coordinator.plan_update(
            weekly_series,
            target,
            MutationScope.FUTURE,
            AppointmentChanges(start_at=datetime(2025, 1, 21, 9, 0)),
        )

        new_master = plan.creates[0]
        assert new_master.recurrence_rule.by_weekdays == (Weekday.TU, Weekday.TH)
        assert [a.day for a in plan.creates] == [
            date(2025, 1, 21),
            date(2025, 1, 23),
            date(2025, 1, 28),
            date(2025, 1, 30),
            date(2025, 2, 4),
            date(2025, 2, 6),
        ]
        assert regenerate(new_master) == starts(plan.creates)

    def test_future_with_new_rule_expands_it(self, coordinator, weekly_series):
        rule = RecurrenceRule(frequency=Frequency.DAILY, count=3)

        plan = coordinator.plan_update(
            weekly_series, weekly_series[4], MutationScope.FUTURE, AppointmentChanges(recurrence_rule=rule)
        )

        assert [a.day for a in plan.creates] == [date(2025, 1, 20), date(2025, 1, 21), date(2025, 1, 22)]
        assert plan.creates[0].recurrence_rule == rule
        assert len(plan.deletes) == 6

    def test_future_clearing_rule_leaves_standalone(self, coordinator, weekly_series):
        plan = coordinator.plan_update(
            weekly_series, weekly_series[4], MutationScope.FUTURE, AppointmentChanges(recurrence_rule=None)
        )

        (standalone,) = plan.creates
        assert not standalone.is_recurring
        assert standalone.recurrence_rule is None
        assert standalone.series_master_id is None
        assert len(plan.deletes) == 6

    def test_future_on_master_rewrites_series_in_place(self, coordinator, weekly_series):
        master = weekly_series[0]

        plan = coordinator.plan_update(
            weekly_series, master, MutationScope.FUTURE, AppointmentChanges(title="Renamed")
        )

        (updated_master,) = plan.updates
        assert updated_master.id == master.id
        assert updated_master.title == "Renamed"
        assert len(plan.creates) == 9
        assert len(plan.deletes) == 9
        assert all(a.series_master_id == master.id for a in plan.creates)
        assert starts(plan.updates + plan.creates) == starts(weekly_series)

    def test_all_with_new_rule_regenerates_children(self, coordinator, weekly_series):
        master = weekly_series[0]
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, by_weekdays=(Weekday.FR,), count=4)

        plan = coordinator.plan_update(
            weekly_series, weekly_series[6], MutationScope.ALL, AppointmentChanges(recurrence_rule=rule)
        )

        (updated_master,) = plan.updates
        assert updated_master.id == master.id
        assert updated_master.start_at == datetime(2025, 1, 10, 9, 0)
        assert updated_master.recurrence_rule == rule
        assert [a.day for a in plan.creates] == [date(2025, 1, 17), date(2025, 1, 24), date(2025, 1, 31)]
        assert {a.id for a in plan.deletes} == {a.id for a in weekly_series[1:]}

    def test_all_clearing_rule_keeps_master_as_standalone(self, coordinator, weekly_series):
        plan = coordinator.plan_update(
            weekly_series, weekly_series[3], MutationScope.ALL, AppointmentChanges(recurrence_rule=None)
        )

        (standalone,) = plan.updates
        assert standalone.id == weekly_series[0].id
        assert not standalone.is_recurring
        assert standalone.recurrence_rule is None
        assert len(plan.deletes) == 9
        assert not plan.creates


class TestSeriesValidation:
    """A loaded series must have exactly one master and no foreign rows."""

    def test_missing_master_raises(self, coordinator, weekly_series):
        with pytest.raises(SeriesNotFoundError):
            coordinator.plan_delete(weekly_series[1:], weekly_series[1], MutationScope.ALL)

    def test_two_masters_raise(self, coordinator, weekly_series, make_appointment, weekly_rule):
        intruder = make_appointment(
            start_at=datetime(2025, 3, 3, 9, 0), is_recurring=True, recurrence_rule=weekly_rule
        )

        with pytest.raises(RecurrenceError):
            coordinator.plan_delete(weekly_series + [intruder], weekly_series[1], MutationScope.ALL)

    def test_foreign_row_raises(self, coordinator, weekly_series, make_appointment):
        stranger = make_appointment(start_at=datetime(2025, 3, 3, 9, 0))

        with pytest.raises(RecurrenceError):
            coordinator.plan_delete(weekly_series + [stranger], weekly_series[1], MutationScope.ALL)

    def test_target_outside_series_raises(self, coordinator, weekly_series):
        with pytest.raises(OccurrenceNotFoundError):
            coordinator.plan_delete(weekly_series[:5], weekly_series[8], MutationScope.SINGLE)


class TestSeriesConsistency:
    """Mutations that must leave the series regenerable and free of duplicates."""

    def test_single_move_onto_sibling_raises(self, coordinator, weekly_series):
        target, sibling = weekly_series[2], weekly_series[3]

        with pytest.raises(InvalidScopeTransitionError):
            coordinator.plan_update(
                weekly_series, target, MutationScope.SINGLE, AppointmentChanges(start_at=sibling.start_at)
            )

    def test_single_move_to_free_time_keeps_series_deletable(self, coordinator, weekly_series):
        moved = coordinator.plan_update(
            weekly_series,
            weekly_series[2],
            MutationScope.SINGLE,
            AppointmentChanges(start_at=datetime(2025, 1, 14, 9, 0)),
        )
        series = apply(weekly_series, moved)

        plan = coordinator.plan_delete(series, series[5], MutationScope.ALL)

        assert set(plan.deleted_ids) == {a.id for a in weekly_series}

    def test_future_split_after_moving_target_earlier(self, coordinator, make_appointment):
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, by_weekdays=(Weekday.MO,), count=4)
        series = create_series(coordinator, make_appointment, rule, datetime(2025, 1, 6, 9, 0))
        moved = coordinator.plan_update(
            series, series[2], MutationScope.SINGLE, AppointmentChanges(start_at=datetime(2025, 1, 19, 9, 0))
        )
        series = apply(series, moved)

        plan = coordinator.plan_update(series, series[2], MutationScope.FUTURE, AppointmentChanges(title="Group"))

        rows = apply(series, plan)
        assert [a.day for a in sorted(rows, key=lambda a: a.start_at)] == [
            date(2025, 1, 6),
            date(2025, 1, 13),
            date(2025, 1, 19),
            date(2025, 1, 27),
        ]
        assert plan.creates[0].recurrence_rule.count == 2
        assert plan.updates[0].recurrence_rule.until == date(2025, 1, 19)

    def test_future_split_after_moving_target_before_sibling(self, coordinator, make_appointment):
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, by_weekdays=(Weekday.MO,), count=4)
        series = create_series(coordinator, make_appointment, rule, datetime(2025, 1, 6, 9, 0))
        moved = coordinator.plan_update(
            series, series[2], MutationScope.SINGLE, AppointmentChanges(start_at=datetime(2025, 1, 12, 9, 0))
        )
        series = apply(series, moved)

        plan = coordinator.plan_update(series, series[2], MutationScope.FUTURE, AppointmentChanges(title="Group"))

        rows = apply(series, plan)
        old_series = [a for a in rows if a.master_id == series[0].id]
        assert starts(rows) == [
            datetime(2025, 1, 6, 9, 0),
            datetime(2025, 1, 12, 9, 0),
            datetime(2025, 1, 13, 9, 0),
            datetime(2025, 1, 27, 9, 0),
        ]
        assert regenerate(plan.updates[0]) == starts(old_series)

    def test_future_move_across_weeks_of_multi_week_pattern_raises(self, coordinator, make_appointment):
        rule = RecurrenceRule(
            frequency=Frequency.WEEKLY, interval=2, by_weekdays=(Weekday.SA, Weekday.SU), count=6
        )
        series = create_series(coordinator, make_appointment, rule, datetime(2025, 1, 4, 9, 0))
        target = series[2]
        assert target.day == date(2025, 1, 18)

        with pytest.raises(InvalidScopeTransitionError):
            coordinator.plan_update(
                series, target, MutationScope.FUTURE, AppointmentChanges(start_at=datetime(2025, 1, 19, 9, 0))
            )

    def test_future_move_by_whole_week_of_multi_week_pattern(self, coordinator, make_appointment):
        rule = RecurrenceRule(
            frequency=Frequency.WEEKLY, interval=2, by_weekdays=(Weekday.SA, Weekday.SU), count=6
        )
        series = create_series(coordinator, make_appointment, rule, datetime(2025, 1, 4, 9, 0))

        plan = coordinator.plan_update(
            series, series[2], MutationScope.FUTURE, AppointmentChanges(start_at=datetime(2025, 1, 25, 9, 0))
        )

        assert [a.day for a in plan.creates] == [
            date(2025, 1, 25),
            date(2025, 1, 26),
            date(2025, 2, 8),
            date(2025, 2, 9),
        ]
        assert regenerate(plan.creates[0]) == starts(plan.creates)

    def test_future_move_across_weeks_of_weekly_pattern(self, coordinator, make_appointment):
        rule = RecurrenceRule(frequency=Frequency.WEEKLY, by_weekdays=(Weekday.SA, Weekday.SU), count=6)
        series = create_series(coordinator, make_appointment, rule, datetime(2025, 1, 4, 9, 0))

        plan = coordinator.plan_update(
            series, series[2], MutationScope.FUTURE, AppointmentChanges(start_at=datetime(2025, 1, 12, 9, 0))
        )

        assert regenerate(plan.creates[0]) == starts(plan.creates)
