from datetime import timedelta, timezone

import pytest

from deadline_api.backend import services
from deadline_api.backend.errors import NotFoundError, ValidationError
from deadline_api.backend.schemas import DeadlineUpdate


def _create(db, clock, title="Essay", hours=1, **kwargs):
    return services.create_deadline(
        db,
        title=title,
        description=kwargs.get("description"),
        deadline=clock.now + timedelta(hours=hours),
        caller_id=kwargs.get("caller_id", "admin-1"),
    )


def test_create_sets_defaults(db, clock):
    record = _create(db, clock, description="first draft")

    assert record.id
    assert record.is_active is True
    assert record.created_by == "admin-1"
    assert record.created_at == clock.now
    assert record.updated_at == clock.now
    assert record.deadline == clock.now + timedelta(hours=1)


@pytest.mark.parametrize("offset", [timedelta(0), timedelta(seconds=-1), timedelta(days=-3)])
def test_create_rejects_non_future_cutoff(db, clock, offset):
    with pytest.raises(ValidationError, match="must be in the future"):
        services.create_deadline(db, title="Late", description=None, deadline=clock.now + offset, caller_id="a")


def test_create_normalizes_aware_cutoff_to_utc(db, clock):
    aware = (clock.now + timedelta(hours=3)).replace(tzinfo=timezone.utc).astimezone(timezone(timedelta(hours=5)))
    record = services.create_deadline(db, title="TZ", description=None, deadline=aware, caller_id="a")
    assert record.deadline == clock.now + timedelta(hours=3)


def test_list_orders_newest_first(db, clock):
    first = _create(db, clock, title="first")
    clock.advance(minutes=1)
    second = _create(db, clock, title="second")

    assert [d.id for d in services.list_deadlines(db)] == [second.id, first.id]


def test_list_active_filters_and_orders_by_cutoff(db, clock):
    later = _create(db, clock, title="later", hours=5)
    sooner = _create(db, clock, title="sooner", hours=2)
    inactive = _create(db, clock, title="inactive", hours=3)
    services.toggle_deadline(db, inactive.id)
    expiring = _create(db, clock, title="expiring", hours=1)

    clock.advance(hours=1, seconds=1)

    active = services.list_active_deadlines(db)
    assert [d.id for d in active] == [sooner.id, later.id]
    assert expiring.id not in {d.id for d in active}


def test_get_missing_raises_not_found(db):
    with pytest.raises(NotFoundError):
        services.get_deadline(db, "does-not-exist")


def test_update_applies_partial_patch_and_refreshes_timestamp(db, clock):
    record = _create(db, clock, description="old")
    clock.advance(minutes=5)

    updated = services.update_deadline(db, record.id, DeadlineUpdate(title="Renamed"))

    assert updated.title == "Renamed"
    assert updated.description == "old"
    assert updated.updated_at == clock.now
    assert updated.created_at == clock.now - timedelta(minutes=5)


def test_update_rejects_past_cutoff(db, clock):
    record = _create(db, clock)
    with pytest.raises(ValidationError):
        services.update_deadline(db, record.id, DeadlineUpdate(deadline=clock.now - timedelta(minutes=1)))
    assert services.get_deadline(db, record.id).deadline == clock.now + timedelta(hours=1)


def test_update_accepts_future_cutoff_and_active_flag(db, clock):
    record = _create(db, clock)
    new_cutoff = clock.now + timedelta(days=2)

    updated = services.update_deadline(db, record.id, DeadlineUpdate(deadline=new_cutoff, isActive=False))

    assert updated.deadline == new_cutoff
    assert updated.is_active is False


def test_update_missing_raises_not_found(db, clock):
    with pytest.raises(NotFoundError):
        services.update_deadline(db, "nope", DeadlineUpdate(title="x"))


def test_toggle_twice_restores_original(db, clock):
    record = _create(db, clock)

    assert services.toggle_deadline(db, record.id).is_active is False
    assert services.toggle_deadline(db, record.id).is_active is True


def test_delete_keeps_submissions(db, clock):
    record = _create(db, clock)
    services.create_submission(db, title="t", content="c", deadline_id=record.id, caller_id="u1")

    services.delete_deadline(db, record.id)

    with pytest.raises(NotFoundError):
        services.get_deadline(db, record.id)
    mine = services.list_my_submissions(db, "u1")
    assert len(mine) == 1
    assert mine[0]["deadline"] is None
    assert mine[0]["deadline_id"] == record.id


def test_delete_missing_raises_not_found(db):
    with pytest.raises(NotFoundError):
        services.delete_deadline(db, "missing")
