"""
Integration tests for the SQLAlchemy repositories on SQLite.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select, text

from clinic_calendar.domain.entities.appointment import AppointmentStatus
from clinic_calendar.domain.entities.appointment_changes import AppointmentChanges
from clinic_calendar.domain.entities.appointment_limit import AppointmentLimit
from clinic_calendar.domain.entities.series_plan import MutationScope, SeriesPlan
from clinic_calendar.domain.exceptions import ConcurrentSeriesModificationError, PlanApplicationError
from clinic_calendar.infrastructure.persistence.sqlalchemy.models import AppointmentModel
from clinic_calendar.infrastructure.persistence.sqlalchemy.repositories import (
    SQLAlchemyAppointmentLimitRepository,
    SQLAlchemyAppointmentRepository,
)

pytestmark = pytest.mark.integration


@pytest.fixture
def repository(session_factory) -> SQLAlchemyAppointmentRepository:
    return SQLAlchemyAppointmentRepository(session_factory)


async def row_count(session_factory) -> int:
    async with session_factory() as session:
        result = await session.execute(select(func.count(AppointmentModel.id)))
        return int(result.scalar_one())


@pytest.mark.asyncio
async def test_series_round_trip(repository, weekly_series, weekly_rule):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    series = await repository.find_series(weekly_series[0].id)

    assert [a.id for a in series] == [a.id for a in weekly_series]
    assert series[0].recurrence_rule == weekly_rule
    assert series[0].created_at is not None
    assert all(a.series_master_id == weekly_series[0].id for a in series[1:])
    assert [a.start_at for a in series] == [a.start_at for a in weekly_series]


@pytest.mark.asyncio
async def test_fields_survive_storage(repository, make_appointment):
    appointment = make_appointment(
        appointment_fee=Decimal("120.50"),
        status=AppointmentStatus.CONFIRMED,
        is_all_day=True,
    )
    await repository.apply_plan(SeriesPlan(creates=[appointment]))

    stored = await repository.get_by_id(appointment.id)

    assert stored.appointment_fee == Decimal("120.50")
    assert stored.status is AppointmentStatus.CONFIRMED
    assert stored.is_all_day is True
    assert stored.title == appointment.title
    assert stored.version == 1


@pytest.mark.asyncio
async def test_count_for_clinician_on_date(repository, make_appointment, clinician_id):
    await repository.apply_plan(
        SeriesPlan(
            creates=[
                make_appointment(),
                make_appointment(start_at=datetime(2025, 1, 6, 23, 30)),
                make_appointment(status=AppointmentStatus.CANCELLED),
                make_appointment(start_at=datetime(2025, 1, 7, 0, 0)),
            ]
        )
    )

    assert await repository.count_for_clinician_on_date(clinician_id, date(2025, 1, 6)) == 2


@pytest.mark.asyncio
async def test_list_by_date_range(repository, weekly_series, clinician_id):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    listed = await repository.list_by_date_range(datetime(2025, 1, 13), datetime(2025, 1, 20), clinician_id)

    assert [a.id for a in listed] == [weekly_series[2].id, weekly_series[3].id]


@pytest.mark.asyncio
async def test_promotion_plan_is_applied(repository, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))
    master, heir = weekly_series[0], weekly_series[1]

    applied = await repository.apply_plan(
        coordinator.plan_delete(weekly_series, master, MutationScope.SINGLE)
    )

    assert all(a.version == 2 for a in applied.updates)
    assert await repository.get_by_id(master.id) is None
    series = await repository.find_series(heir.id)
    assert len(series) == 9
    assert series[0].is_master
    assert series[0].recurrence_rule.count == 9


@pytest.mark.asyncio
async def test_split_plan_is_applied(repository, session_factory, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    plan = coordinator.plan_update(
        weekly_series, weekly_series[4], MutationScope.FUTURE, AppointmentChanges(title="Split")
    )
    await repository.apply_plan(plan)

    assert len(await repository.find_series(weekly_series[0].id)) == 4
    assert len(await repository.find_series(plan.creates[0].id)) == 6
    assert await row_count(session_factory) == 10


@pytest.mark.asyncio
async def test_stale_plan_rolls_back(repository, session_factory, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))
    plan = coordinator.plan_delete(weekly_series, weekly_series[0], MutationScope.ALL)
    await repository.apply_plan(SeriesPlan(updates=[weekly_series[8].copy_with(title="Other writer")]))

    with pytest.raises(ConcurrentSeriesModificationError):
        await repository.apply_plan(plan)

    assert await row_count(session_factory) == 10
    assert (await repository.get_by_id(weekly_series[8].id)).title == "Other writer"


@pytest.mark.asyncio
async def test_duplicate_insert_rolls_back_earlier_writes(repository, session_factory, weekly_series):
    await repository.apply_plan(SeriesPlan(creates=weekly_series[:1]))
    renamed = weekly_series[0].copy_with(title="Renamed")

    with pytest.raises(PlanApplicationError):
        await repository.apply_plan(SeriesPlan(creates=weekly_series[:2], updates=[renamed]))

    stored = await repository.get_by_id(weekly_series[0].id)
    assert stored.title == weekly_series[0].title
    assert stored.version == 1
    assert await row_count(session_factory) == 1


@pytest.mark.asyncio
async def test_sqlite_enforces_foreign_keys(repository, session_factory, weekly_series):
    async with session_factory() as session:
        enabled = (await session.execute(text("PRAGMA foreign_keys"))).scalar_one()

    with pytest.raises(PlanApplicationError):
        await repository.apply_plan(SeriesPlan(creates=weekly_series[1:3]))

    assert enabled == 1
    assert await row_count(session_factory) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("target_index", [0, 3, 9])
async def test_delete_all_plan_is_applied(repository, session_factory, weekly_series, coordinator, target_index):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    plan = coordinator.plan_delete(weekly_series, weekly_series[target_index], MutationScope.ALL)
    await repository.apply_plan(plan)

    assert await row_count(session_factory) == 0


@pytest.mark.asyncio
async def test_delete_future_on_master_plan_is_applied(repository, session_factory, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    plan = coordinator.plan_delete(weekly_series, weekly_series[0], MutationScope.FUTURE)
    await repository.apply_plan(plan)

    assert await row_count(session_factory) == 0


@pytest.mark.asyncio
async def test_delete_future_on_child_plan_is_applied(repository, session_factory, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    plan = coordinator.plan_delete(weekly_series, weekly_series[6], MutationScope.FUTURE)
    await repository.apply_plan(plan)

    series = await repository.find_series(weekly_series[0].id)
    assert [a.id for a in series] == [a.id for a in weekly_series[:6]]
    assert series[0].recurrence_rule.until == date(2025, 1, 26)
    assert await row_count(session_factory) == 6


@pytest.mark.asyncio
async def test_rewrite_all_plan_is_applied(repository, session_factory, weekly_series, coordinator):
    await repository.apply_plan(SeriesPlan(creates=weekly_series))

    plan = coordinator.plan_update(
        weekly_series, weekly_series[5], MutationScope.ALL, AppointmentChanges(title="Renamed")
    )
    await repository.apply_plan(plan)

    series = await repository.find_series(weekly_series[0].id)
    assert len(series) == 10
    assert all(a.title == "Renamed" for a in series)

@pytest.mark.asyncio
async def test_limit_upsert(session_factory, clinician_id):
    repository = SQLAlchemyAppointmentLimitRepository(session_factory)
    day = date(2025, 1, 6)

    created = await repository.upsert(AppointmentLimit(clinician_id=clinician_id, day=day, max_limit=4))
    updated = await repository.upsert(AppointmentLimit(clinician_id=clinician_id, day=day, max_limit=6))

    assert updated.id == created.id
    assert (await repository.get_for_day(clinician_id, day)).max_limit == 6
    assert await repository.get_for_day(clinician_id, date(2025, 1, 7)) is None
