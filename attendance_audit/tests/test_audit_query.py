"""
Tests for the audit query service
"""
import pytest
from datetime import datetime, timedelta, timezone

from attendance_audit.core.exceptions import PermissionDenied, CrossOrgForbidden, TargetNotFound
from attendance_audit.models.attendance import AttendanceStatus
from attendance_audit.services.adjustment_service import submit_adjustment
from attendance_audit.services.audit_query_service import (
    AUDIT_CSV_HEADERS,
    filter_trail,
    get_trail,
    get_user_history,
    trail_csv_rows,
)
from attendance_audit.utils.datetime_utils import now_utc
from attendance_audit.tests.conftest import REASON


@pytest.fixture
def populated(db, org_admin, super_admin, class_session, end_user, second_student, today):
    """Three adjustments on two students, by two different admins"""
    common = dict(session_id=class_session.id, occurrence_date=today)
    submit_adjustment(db, org_admin, target_user_id=end_user.id, new_status=AttendanceStatus.PRESENT,
                      reason="Scanner at the door was offline", **common)
    submit_adjustment(db, super_admin, target_user_id=second_student.id, new_status=AttendanceStatus.LATE,
                      reason="Arrived after the bus broke down", late_minutes=20, **common)
    submit_adjustment(db, org_admin, target_user_id=end_user.id, new_status=AttendanceStatus.ABSENT,
                      reason="Left before the roll was taken", **common)
    return class_session


def test_org_admin_reads_trail_most_recent_last(db, org_admin, populated, end_user, second_student):
    trail = get_trail(db, org_admin, populated.id)
    assert len(trail) == 3
    assert [e.target_user_id for e in trail] == [end_user.id, second_student.id, end_user.id]
    assert trail[-1].new_status == AttendanceStatus.ABSENT


def test_trail_for_one_occurrence(db, org_admin, populated, today):
    assert len(get_trail(db, org_admin, populated.id, today)) == 3
    assert get_trail(db, org_admin, populated.id, today - timedelta(days=1)) == []


@pytest.mark.parametrize("role_fixture", ["manager", "end_user"])
def test_trail_denied_below_admin(request, db, populated, role_fixture):
    actor = request.getfixturevalue(role_fixture)
    with pytest.raises(PermissionDenied):
        get_trail(db, actor, populated.id)


def test_platform_owner_reads_any_trail(db, platform_owner, populated):
    assert len(get_trail(db, platform_owner, populated.id)) == 3


def test_trail_other_org_forbidden(db, outsider_admin, populated):
    with pytest.raises(CrossOrgForbidden):
        get_trail(db, outsider_admin, populated.id)


def test_trail_unknown_session(db, org_admin):
    with pytest.raises(TargetNotFound):
        get_trail(db, org_admin, 4242)


def test_user_history(db, org_admin, populated, end_user, manager):
    history = get_user_history(db, org_admin, populated.id, end_user.id)
    assert [e.new_status for e in history] == [AttendanceStatus.PRESENT, AttendanceStatus.ABSENT]
    with pytest.raises(PermissionDenied):
        get_user_history(db, manager, populated.id, end_user.id)


def test_search_is_case_insensitive_over_names_and_reason(db, org_admin, populated):
    trail = get_trail(db, org_admin, populated.id)
    assert len(filter_trail(trail, search_text="FATIMA")) == 1
    assert len(filter_trail(trail, search_text="sam super")) == 1
    assert len(filter_trail(trail, search_text="scanner")) == 1
    assert len(filter_trail(trail, search_text="alice")) == 2
    assert filter_trail(trail, search_text="nobody matches this") == []
    assert len(filter_trail(trail, search_text="   ")) == 3


def test_since_days(db, org_admin, populated):
    trail = get_trail(db, org_admin, populated.id)
    now = datetime.now(timezone.utc)
    assert len(filter_trail(trail, since_days=7, now=now)) == 3
    assert filter_trail(trail, since_days=7, now=now + timedelta(days=8)) == []


def test_manual_only(db, org_admin, populated):
    trail = get_trail(db, org_admin, populated.id)
    assert len(filter_trail(trail, manual_only=True)) == 3


def test_filter_does_not_mutate_input(db, org_admin, populated):
    trail = get_trail(db, org_admin, populated.id)
    snapshot = list(trail)
    filtered = filter_trail(trail, manual_only=True, search_text="eli")
    assert filtered is not trail
    assert trail == snapshot
    assert len(filter_trail(trail)) == len(trail)


def test_csv_rows(db, org_admin, populated):
    rows = trail_csv_rows(get_trail(db, org_admin, populated.id))
    assert len(rows) == 3
    assert list(rows[0]) == AUDIT_CSV_HEADERS
    assert rows[0]["Action"] == "MARKED_PRESENT"
    assert rows[1]["Late Minutes"] == 20
    assert rows[2]["Late Minutes"] == ""
    assert rows[0]["Modified By"] == "Alice Admin"
    assert rows[0]["Date/Time"].endswith("Z")


def test_trail_ties_keep_insertion_order(db, org_admin, class_session, end_user, second_student, today):
    """Entries on different users with the same timestamp stay in the order they were written"""
    same_instant = now_utc()
    common = dict(session_id=class_session.id, occurrence_date=today, reason=REASON, now=same_instant)
    first = submit_adjustment(db, org_admin, target_user_id=end_user.id, new_status=AttendanceStatus.PRESENT, **common)
    second = submit_adjustment(db, org_admin, target_user_id=end_user.id, new_status=AttendanceStatus.ABSENT, **common)
    third = submit_adjustment(db, org_admin, target_user_id=second_student.id, new_status=AttendanceStatus.PRESENT, **common)
    
    trail = get_trail(db, org_admin, class_session.id)
    assert [e.id for e in trail] == [first.id, second.id, third.id]
    assert [e.sequence for e in trail] == [1, 2, 1]
