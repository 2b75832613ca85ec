"""
Series mutation coordinator.

Plans every write needed to create, update or delete appointments in a
recurring series. Planning is purely in memory: the coordinator reads the
loaded series and returns a ``SeriesPlan`` that the repository applies in a
single transaction. Input appointments are never mutated.
"""

import logging
from datetime import date, timedelta
from uuid import UUID, uuid4

from clinic_calendar.domain.entities.appointment import Appointment
from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.recurrence_rule import RecurrenceRule
from clinic_calendar.domain.entities.series_plan import MutationScope, SeriesPlan
from clinic_calendar.domain.exceptions import (
    InvalidAppointmentTimeError,
    InvalidScopeTransitionError,
    OccurrenceNotFoundError,
    RecurrenceError,
    RuleParseError,
    SeriesNotFoundError,
)
from clinic_calendar.domain.services.recurrence.occurrence_generator import (
    Occurrence,
    OccurrenceGenerator,
)

logger = logging.getLogger(__name__)


def spawn_child(master: Appointment, occurrence: Occurrence) -> Appointment:
    """New child row of ``master`` placed at ``occurrence``."""
    return master.copy_with(
        id=uuid4(),
        start_at=occurrence.start,
        end_at=occurrence.end,
        is_recurring=True,
        recurrence_rule=None,
        series_master_id=master.id,
        version=1,
        created_at=None,
        updated_at=None,
    )


class SeriesMutationCoordinator:
    """
    Turns scheduling requests into atomic series plans.

    Delete scopes:
        SINGLE removes one row; deleting the master promotes the earliest
        remaining row. FUTURE removes the target and everything after it and
        truncates the master rule. ALL removes the whole series.

    Update scopes:
        SINGLE edits one row, which stays in its series. FUTURE splits the
        series at the target into two independent series. ALL (or FUTURE on
        the master) rewrites the master and regenerates every child.
    """

    def __init__(self, generator: OccurrenceGenerator | None = None):
        self.generator = generator or OccurrenceGenerator()

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def plan_creation(self, template: Appointment) -> SeriesPlan:
        """
        Plan the rows for a new appointment or series.

        ``template`` is the requested appointment. When it carries a
        recurrence rule it becomes the series master, moved to the first
        generated occurrence, followed by one child per further occurrence.

        Raises:
            InvalidAppointmentTimeError: If the rule yields no occurrence
        """
        rule = template.recurrence_rule
        if rule is None:
            return SeriesPlan(creates=[template.copy_with(is_recurring=False, series_master_id=None)])

        master, children = self._expand(template, rule)
        logger.debug(f"Planned series {master.id} with {len(children) + 1} occurrence(s)")
        return SeriesPlan(creates=[master, *children])

    # ------------------------------------------------------------------
    # Deletion
    # ------------------------------------------------------------------

    def plan_delete(
        self,
        series: list[Appointment],
        target: Appointment,
        scope: MutationScope,
    ) -> SeriesPlan:
        """
        Plan a delete of ``target`` with the given scope.

        Args:
            series: Every row of the target's series; ignored for standalone targets
            target: Occurrence the request points at
            scope: Which occurrences to delete

        Returns:
            The plan to apply

        Raises:
            InvalidScopeTransitionError: If FUTURE or ALL targets a standalone appointment
            SeriesNotFoundError: If the series has no master
            OccurrenceNotFoundError: If ``target`` is not part of ``series``
        """
        if not target.is_recurring:
            if scope is not MutationScope.SINGLE:
                raise InvalidScopeTransitionError(
                    "Appointment is not part of a recurring series",
                    scope=scope.value,
                    appointment_id=str(target.id),
                )
            return SeriesPlan(deletes=[target])

        master, ordered, target = self._load(series, target)

        if scope is MutationScope.ALL or (scope is MutationScope.FUTURE and target.id == master.id):
            return SeriesPlan(deletes=ordered)

        if scope is MutationScope.FUTURE:
            doomed = [row for row in ordered if row.start_at >= target.start_at]
            if any(row.id == master.id for row in doomed):
                return SeriesPlan(deletes=ordered)
            return SeriesPlan(updates=[self._truncate(master, target.day)], deletes=doomed)

        if target.id != master.id:
            return SeriesPlan(deletes=[target])

        survivors = [row for row in ordered if row.id != master.id]
        if not survivors:
            return SeriesPlan(deletes=[master])

        heir = survivors[0]
        promoted = heir.copy_with(
            is_recurring=True,
            series_master_id=None,
            recurrence_rule=self._rebase(master, heir),
        )
        repointed = [row.copy_with(series_master_id=heir.id) for row in survivors[1:]]
        logger.info(f"Promoting appointment {heir.id} to master of series {master.id}")
        return SeriesPlan(updates=[promoted, *repointed], deletes=[master])

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def plan_update(
        self,
        series: list[Appointment],
        target: Appointment,
        scope: MutationScope,
        changes: AppointmentChanges,
    ) -> SeriesPlan:
        """
        Plan an update of ``target`` with the given scope.

        Args:
            series: Every row of the target's series; ignored for standalone targets
            target: Occurrence the request points at
            scope: Which occurrences the changes apply to
            changes: Field changes to apply

        Returns:
            The plan to apply

        Raises:
            InvalidScopeTransitionError: If the scope does not fit the target, a
                rule change is requested for a single occurrence, or a single
                occurrence is moved onto another occurrence of its series
            SeriesNotFoundError: If the series has no master
            OccurrenceNotFoundError: If ``target`` is not part of ``series``
            InvalidAppointmentTimeError: If the changes produce an invalid window
        """
        if scope is MutationScope.SINGLE:
            if changes.changes_rule:
                raise InvalidScopeTransitionError(
                    "Recurrence can only be changed for this and following occurrences",
                    scope=scope.value,
                    appointment_id=str(target.id),
                )
            if not target.is_recurring:
                return SeriesPlan(updates=[changes.apply_to(target)])
            _, ordered, target = self._load(series, target)
            updated = changes.apply_to(target)
            self._ensure_start_is_free(ordered, updated)
            return SeriesPlan(updates=[updated])

        if not target.is_recurring:
            raise InvalidScopeTransitionError(
                "Appointment is not part of a recurring series",
                scope=scope.value,
                appointment_id=str(target.id),
            )

        master, ordered, target = self._load(series, target)
        if scope is MutationScope.ALL or target.id == master.id:
            return self._rewrite_series(master, ordered, changes)
        return self._split_series(master, ordered, target, changes)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _load(
        self, series: list[Appointment], target: Appointment
    ) -> tuple[Appointment, list[Appointment], Appointment]:
        masters = [row for row in series if row.is_master]
        if not masters:
            raise SeriesNotFoundError(str(target.master_id) if target.master_id else None)
        if len(masters) > 1:
            raise RecurrenceError(f"Series of appointment {target.id} has more than one master")

        master = masters[0]
        if master.recurrence_rule is None:
            raise RuleParseError(f"Series master {master.id} has no recurrence rule")

        starts = set()
        for row in series:
            if row.id != master.id and row.series_master_id != master.id:
                raise RecurrenceError(f"Appointment {row.id} does not belong to series {master.id}")
            if row.start_at in starts:
                raise RecurrenceError(f"Series {master.id} has two occurrences at {row.start_at.isoformat()}")
            starts.add(row.start_at)

        by_id = {row.id: row for row in series}
        if target.id not in by_id:
            raise OccurrenceNotFoundError(str(target.id))

        ordered = sorted(series, key=lambda row: row.start_at)
        return master, ordered, by_id[target.id]

    def _expand(
        self, template: Appointment, rule: RecurrenceRule
    ) -> tuple[Appointment, list[Appointment]]:
        occurrences = self.generator.generate(rule, template.start_at, template.end_at)
        if not occurrences:
            raise InvalidAppointmentTimeError("Recurrence rule produces no occurrences")
        first, *rest = occurrences
        master = template.copy_with(
            start_at=first.start,
            end_at=first.end,
            is_recurring=True,
            recurrence_rule=rule,
            series_master_id=None,
        )
        return master, [spawn_child(master, occurrence) for occurrence in rest]

    def _truncate(self, master: Appointment, split_day: date) -> Appointment:
        """Master with its rule ending the day before ``split_day``."""
        until = split_day - timedelta(days=1)
        return master.copy_with(recurrence_rule=master.recurrence_rule.with_until(until))

    def _rebase(self, master: Appointment, heir: Appointment) -> RecurrenceRule:
        """Master rule re-seeded at ``heir``; counts shrink to what remains."""
        rule = master.recurrence_rule
        if rule.count is None:
            return rule
        remaining = self.generator.occurrences_from(rule, master.start_at, master.end_at, heir.day)
        return rule.with_count(max(len(remaining), 1))

    def _rewrite_series(
        self,
        master: Appointment,
        ordered: list[Appointment],
        changes: AppointmentChanges,
    ) -> SeriesPlan:
        children = [row for row in ordered if row.id != master.id]
        template = changes.apply_to(master)
        rule = changes["recurrence_rule"] if changes.changes_rule else master.recurrence_rule

        if rule is None:
            standalone = template.copy_with(is_recurring=False, recurrence_rule=None, series_master_id=None)
            return SeriesPlan(updates=[standalone], deletes=children)

        new_master, new_children = self._expand(template, rule)
        logger.info(f"Regenerating series {master.id}: {len(children)} replaced by {len(new_children)}")
        return SeriesPlan(creates=new_children, updates=[new_master], deletes=children)

    def _split_series(
        self,
        master: Appointment,
        ordered: list[Appointment],
        target: Appointment,
        changes: AppointmentChanges,
    ) -> SeriesPlan:
        occurrences, slots = self._rule_slots(master, ordered)
        position = slots.get(target.id)

        if position is None:
            # Target holds no rule slot; split on its current date.
            split_day = target.day
            doomed = [row for row in ordered if row.start_at >= target.start_at]
            tail = [occurrence for occurrence in occurrences if occurrence.day > target.day]
        else:
            split_day = occurrences[position].day
            doomed = [
                row
                for row in ordered
                if (slots[row.id] >= position if row.id in slots else row.start_at >= target.start_at)
            ]
            tail = occurrences[position + 1 :]

        if any(row.id == master.id for row in doomed):
            return self._rewrite_series(master, ordered, changes)

        truncated = self._truncate(master, split_day)
        template = changes.apply_to(
            target,
            id=uuid4(),
            series_master_id=None,
            version=1,
            created_at=None,
            updated_at=None,
        )

        if changes.changes_rule:
            rule = changes["recurrence_rule"]
            if rule is None:
                standalone = template.copy_with(is_recurring=False, recurrence_rule=None)
                return SeriesPlan(creates=[standalone], updates=[truncated], deletes=doomed)
            new_master, children = self._expand(template, rule)
        else:
            new_master, children = self._continue_series(master, target, template, tail)

        logger.info(
            f"Split series {master.id} at {target.start_at.isoformat()} into new series {new_master.id}"
        )
        return SeriesPlan(creates=[new_master, *children], updates=[truncated], deletes=doomed)

    def _continue_series(
        self,
        master: Appointment,
        target: Appointment,
        template: Appointment,
        tail: list[Occurrence],
    ) -> tuple[Appointment, list[Appointment]]:
        """
        New series taking over the rule occurrences in ``tail``.

        The new master sits at ``template``; the tail keeps its rule dates,
        moved by the same offset as the target's start.

        Raises:
            InvalidScopeTransitionError: If the move would break a multi-week
                weekday pattern across week boundaries
        """
        old_rule = master.recurrence_rule
        shift = template.start_at - target.start_at
        day_shift = (template.start_at.date() - target.start_at.date()).days

        if old_rule.uses_weekdays and old_rule.interval > 1:
            week_offsets = {(int(weekday) + day_shift) // 7 for weekday in old_rule.by_weekdays}
            if len(week_offsets) > 1:
                raise InvalidScopeTransitionError(
                    "Moving these occurrences would split their weekdays across weeks",
                    scope=MutationScope.FUTURE.value,
                    appointment_id=str(target.id),
                )

        rule = old_rule.shifted(day_shift)
        if old_rule.count is not None:
            rule = rule.with_count(len(tail) + 1)

        new_master = template.copy_with(is_recurring=True, recurrence_rule=rule)
        children = [
            spawn_child(
                new_master,
                Occurrence(start=occurrence.start + shift, end=occurrence.start + shift + template.duration),
            )
            for occurrence in tail
        ]
        return new_master, children

    def _rule_slots(
        self, master: Appointment, ordered: list[Appointment]
    ) -> tuple[list[Occurrence], dict[UUID, int]]:
        """
        Rule occurrences of the series and the slot each row holds.

        Rows still at a generated start hold that slot. Rows moved by single
        updates take the remaining slots in start order.
        """
        occurrences = self.generator.generate(master.recurrence_rule, master.start_at, master.end_at)
        index_by_start = {occurrence.start: index for index, occurrence in enumerate(occurrences)}

        slots = {row.id: index_by_start[row.start_at] for row in ordered if row.start_at in index_by_start}
        taken = set(slots.values())
        vacant = [index for index in range(len(occurrences)) if index not in taken]
        moved = [row for row in ordered if row.id not in slots]
        slots.update({row.id: index for row, index in zip(moved, vacant)})
        return occurrences, slots

    def _ensure_start_is_free(self, ordered: list[Appointment], updated: Appointment) -> None:
        """
        Reject a row landing on the start of another row in its series.

        Raises:
            InvalidScopeTransitionError: If another row already starts at ``updated.start_at``
        """
        for row in ordered:
            if row.id != updated.id and row.start_at == updated.start_at:
                raise InvalidScopeTransitionError(
                    f"Another occurrence of the series already starts at {updated.start_at.isoformat()}",
                    scope=MutationScope.SINGLE.value,
                    appointment_id=str(updated.id),
                )
