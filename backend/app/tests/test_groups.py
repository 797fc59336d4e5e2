"""
Tests for group creation and membership changes.
"""
import uuid

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from app.core.errors import (
    ConflictError, ForbiddenError, InternalError, NotFoundError, ValidationFailedError
)
from app.models.group import Group, GroupMember
from app.services import group_service
from app.services.group_service import (
    add_member, create_group, get_group_details, list_user_groups
)
from app.services.membership_service import is_member, member_ids


def test_create_group_adds_creator(db, make_user):
    """The creator is a member as soon as the group exists."""
    alice = make_user("alice@example.com")
    group = create_group("  Flatmates  ", alice, db)

    assert group.name == "Flatmates"
    assert group.created_by == alice
    assert member_ids(group.id, db) == {alice}


@pytest.mark.parametrize("name", ["", "   ", None])
def test_create_group_requires_name(db, make_user, name):
    alice = make_user("alice@example.com")
    with pytest.raises(ValidationFailedError) as exc_info:
        create_group(name, alice, db)
    assert exc_info.value.reason == "empty_group_name"
    assert db.query(Group).count() == 0


def test_create_group_is_atomic(db, session_factory, make_user):
    """A failing membership insert leaves no group behind."""
    alice = make_user("alice@example.com")

    def fail_insert(mapper, connection, target):
        raise OperationalError("INSERT INTO group_members", {}, Exception("disk I/O error"))

    event.listen(GroupMember, "before_insert", fail_insert)
    try:
        with pytest.raises(InternalError) as exc_info:
            create_group("Doomed", alice, db)
    finally:
        event.remove(GroupMember, "before_insert", fail_insert)

    assert exc_info.value.reason == "create_group_failed"
    other = session_factory()
    try:
        assert other.query(Group).filter(Group.name == "Doomed").count() == 0
        assert other.query(GroupMember).count() == 0
    finally:
        other.close()


def test_add_member(db, group_ab):
    group_id, alice, bob = group_ab
    assert member_ids(group_id, db) == {alice, bob}


def test_add_member_requires_membership(db, group_ab, make_user):
    """Non-members cannot add anyone."""
    group_id, _, _ = group_ab
    carol = make_user("carol@example.com")
    make_user("dave@example.com")

    with pytest.raises(ForbiddenError):
        add_member(group_id, carol, "dave@example.com", db)


def test_add_member_unknown_email(db, group_ab):
    """Unknown email is NotFound and the member set is unchanged."""
    group_id, alice, bob = group_ab

    with pytest.raises(NotFoundError) as exc_info:
        add_member(group_id, alice, "ghost@example.com", db)
    assert exc_info.value.reason == "user_not_found"
    assert member_ids(group_id, db) == {alice, bob}


def test_add_member_unknown_group(db, make_user):
    """A missing group has no members, so the requester is refused."""
    alice = make_user("alice@example.com")
    with pytest.raises(ForbiddenError) as exc_info:
        add_member(uuid.uuid4(), alice, "alice@example.com", db)
    assert exc_info.value.reason == "not_a_member"


def test_add_member_twice_conflicts(db, group_ab):
    group_id, alice, _ = group_ab
    with pytest.raises(ConflictError) as exc_info:
        add_member(group_id, alice, "bob@example.com", db)
    assert exc_info.value.reason == "already_member"


def test_add_member_lost_race_conflicts(session_factory, group_ab, make_user, monkeypatch):
    """
    Two adds of the same user both pass the pre-check; the second insert
    hits the membership key and reports Conflict, leaving a single row.
    """
    group_id, alice, _ = group_ab
    carol = make_user("carol@example.com")

    first = session_factory()
    add_member(group_id, alice, "carol@example.com", first)
    first.close()

    # The losing request read the member set before the winner committed
    monkeypatch.setattr(group_service, "is_member", lambda *args: False)
    second = session_factory()
    try:
        with pytest.raises(ConflictError):
            add_member(group_id, alice, "carol@example.com", second)
    finally:
        second.close()

    check = session_factory()
    try:
        rows = check.query(GroupMember).filter(
            GroupMember.group_id == group_id,
            GroupMember.user_id == carol
        ).count()
        assert rows == 1
    finally:
        check.close()


def test_list_user_groups(db, make_user):
    alice = make_user("alice@example.com")
    bob = make_user("bob@example.com")
    create_group("First", alice, db)
    create_group("Second", alice, db)
    create_group("Bob only", bob, db)

    names = {g.name for g in list_user_groups(alice, db)}
    assert names == {"First", "Second"}


def test_group_details(db, group_ab, make_user):
    group_id, alice, bob = group_ab

    details = get_group_details(group_id, bob, db)
    assert details.name == "Trip"
    assert {m.user_id for m in details.members} == {alice, bob}
    assert details.expenses == []

    carol = make_user("carol@example.com")
    with pytest.raises(ForbiddenError):
        get_group_details(group_id, carol, db)


def test_group_api_flow(client, register):
    """Create, add member, list and read a group through the API."""
    _, alice_headers = register("alice@example.com")
    bob_id, bob_headers = register("bob@example.com")
    _, carol_headers = register("carol@example.com")

    response = client.post("/api/groups", json={"name": "Ski trip"}, headers=alice_headers)
    assert response.status_code == 201
    group_id = response.json()["id"]

    response = client.post(
        f"/api/groups/{group_id}/members", json={"email": "bob@example.com"}, headers=alice_headers
    )
    assert response.status_code == 201

    response = client.post(
        f"/api/groups/{group_id}/members", json={"email": "bob@example.com"}, headers=alice_headers
    )
    assert response.status_code == 409

    response = client.post(
        f"/api/groups/{group_id}/members", json={"email": "nobody@example.com"}, headers=alice_headers
    )
    assert response.status_code == 404
    assert response.json() == {"error": "not_found", "details": "user_not_found"}

    response = client.get("/api/groups", headers=bob_headers)
    assert [g["name"] for g in response.json()] == ["Ski trip"]

    response = client.get(f"/api/groups/{group_id}", headers=bob_headers)
    assert response.status_code == 200
    assert bob_id in {m["user_id"] for m in response.json()["members"]}

    response = client.get(f"/api/groups/{group_id}", headers=carol_headers)
    assert response.status_code == 403


def test_create_group_empty_name_api(client, register):
    _, headers = register("alice@example.com")
    response = client.post("/api/groups", json={"name": "  "}, headers=headers)
    assert response.status_code == 422
    assert response.json() == {"error": "validation_failed", "details": "empty_group_name"}
