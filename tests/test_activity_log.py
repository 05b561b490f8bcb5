"""
Activity log: append-only ordering, per-action detail schemas and the
activity summary.
"""

from datetime import timedelta

import pytest

from admin_identity.core.errors import NotFoundError, ValidationError
from admin_identity.services.activity_service import (
    get_activity_log,
    get_admin_activity_summary,
    log_activity,
    validate_activity_details,
)
from admin_identity.utils.time_utils import utcnow

from conftest import make_first_admin


@pytest.mark.asyncio
async def test_log_appends_in_order(db):
    admin = await make_first_admin(db)
    before = len(await get_activity_log(db, admin.id))

    await log_activity(db, admin, "login", {"ip": "1.2.3.4"})
    await log_activity(db, admin, "password_reset", {})

    entries = await get_activity_log(db, admin.id)
    assert len(entries) == before + 2
    assert [e.action for e in entries[-2:]] == ["login", "password_reset"]
    assert entries[-2].details == {"ip": "1.2.3.4"}
    assert entries[-1].details == {}
    assert entries[-2].timestamp <= entries[-1].timestamp

    # In-memory copy mirrors the store
    assert [e.action for e in admin.activity_log] == [e.action for e in entries]


@pytest.mark.asyncio
async def test_existing_entries_are_never_rewritten(db):
    admin = await make_first_admin(db)
    snapshots = []

    for i in range(5):
        await log_activity(db, admin, "custom_action", {"n": i})
        snapshots.append([e.model_dump() for e in await get_activity_log(db, admin.id)])

    for earlier, later in zip(snapshots, snapshots[1:]):
        assert len(later) == len(earlier) + 1
        assert later[:len(earlier)] == earlier


@pytest.mark.asyncio
async def test_caller_mutating_details_does_not_change_entry(db):
    admin = await make_first_admin(db)
    details = {"ip": "1.2.3.4", "tags": ["a"]}

    entry = await log_activity(db, admin, "login", details)
    details["ip"] = "9.9.9.9"
    details["tags"].append("b")

    assert entry.details == {"ip": "1.2.3.4", "tags": ["a"]}
    stored = await get_activity_log(db, admin.id)
    assert stored[-1].details == {"ip": "1.2.3.4", "tags": ["a"]}


@pytest.mark.asyncio
async def test_log_requires_action(db):
    admin = await make_first_admin(db)

    with pytest.raises(ValidationError):
        await log_activity(db, admin, "   ")


def test_known_action_details_are_validated():
    with pytest.raises(ValidationError) as exc_info:
        validate_activity_details("create_admin", {"new_admin_email": "b@x.com"})
    assert "new_admin_id" in exc_info.value.errors

    details = validate_activity_details("create_admin", {
        "new_admin_id": "abc",
        "new_admin_email": "b@x.com",
        "extra": 1,
    })
    assert details == {"new_admin_id": "abc", "new_admin_email": "b@x.com", "extra": 1}


def test_unknown_action_accepts_any_mapping():
    assert validate_activity_details("export_reports", {"rows": 10}) == {"rows": 10}
    assert validate_activity_details("export_reports", None) == {}

    with pytest.raises(ValidationError):
        validate_activity_details("export_reports", ["not", "a", "dict"])


@pytest.mark.asyncio
async def test_activity_summary_counts_actions_in_window(db):
    admin = await make_first_admin(db)
    await log_activity(db, admin, "login")
    await log_activity(db, admin, "login")
    await log_activity(db, admin, "logout")

    summary = await get_admin_activity_summary(db, admin.id, days=30)

    assert summary["actions"]["login"] == 2
    assert summary["actions"]["logout"] == 1
    assert summary["total_actions"] == 4  # includes first_admin_created

    future = await get_admin_activity_summary(db, admin.id, days=1, now=utcnow() + timedelta(days=3))
    assert future["total_actions"] == 0


@pytest.mark.asyncio
async def test_activity_log_for_unknown_admin(db):
    with pytest.raises(NotFoundError):
        await get_activity_log(db, "507f1f77bcf86cd799439011")
    with pytest.raises(NotFoundError):
        await get_activity_log(db, "not-an-object-id")
