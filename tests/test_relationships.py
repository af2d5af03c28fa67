# tests/test_relationships.py
"""Tests for contact and block list rules."""

import pytest

from messenger.core.errors import AlreadyMember, NotMember, SelfReference, UnknownUser
from messenger.models import ListKind
from messenger.services.relationships import RelationshipService


def test_add_contact_lists_member_with_status(relationships, alice, bob) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, bob)

    members = relationships.list_members(alice, ListKind.CONTACT)
    assert [(m.login, m.status) for m in members] == [("bob", "At work")]


def test_adding_twice_reports_already_member(relationships, alice, bob) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, bob)

    with pytest.raises(AlreadyMember):
        relationships.add_to_list(alice, ListKind.CONTACT, bob)

    assert len(relationships.list_members(alice, ListKind.CONTACT)) == 1


@pytest.mark.parametrize("kind", list(ListKind))
def test_cannot_list_yourself(relationships, alice, kind) -> None:
    with pytest.raises(SelfReference):
        relationships.add_to_list(alice, kind, alice)

    assert relationships.list_members(alice, kind) == []


def test_unknown_target_is_rejected(relationships, alice) -> None:
    with pytest.raises(UnknownUser):
        relationships.add_to_list(alice, ListKind.BLOCK, "nobody")


def test_unknown_actor_is_rejected(relationships, bob) -> None:
    with pytest.raises(UnknownUser):
        relationships.add_to_list("nobody", ListKind.CONTACT, bob)
    with pytest.raises(UnknownUser):
        relationships.list_members("nobody", ListKind.CONTACT)


def test_remove_from_list(relationships, alice, bob, carol) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, bob)
    relationships.add_to_list(alice, ListKind.CONTACT, carol)

    relationships.remove_from_list(alice, ListKind.CONTACT, bob)

    assert [m.login for m in relationships.list_members(alice, ListKind.CONTACT)] == ["carol"]


def test_remove_missing_member_reports_not_member(relationships, alice, bob) -> None:
    with pytest.raises(NotMember):
        relationships.remove_from_list(alice, ListKind.BLOCK, bob)


def test_contact_and_block_lists_are_independent(relationships, alice, bob) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, bob)
    relationships.add_to_list(alice, ListKind.BLOCK, bob)

    assert relationships.is_listed(alice, ListKind.CONTACT, bob)
    assert relationships.is_listed(alice, ListKind.BLOCK, bob)

    relationships.remove_from_list(alice, ListKind.BLOCK, bob)
    assert relationships.is_listed(alice, ListKind.CONTACT, bob)
    assert not relationships.is_listed(alice, ListKind.BLOCK, bob)


def test_lists_are_not_shared_between_users(relationships, alice, bob, carol) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, carol)

    assert relationships.list_members(bob, ListKind.CONTACT) == []
    # bob listing carol is a separate row, not a duplicate of alice's.
    relationships.add_to_list(bob, ListKind.CONTACT, carol)
    assert [m.login for m in relationships.list_members(bob, ListKind.CONTACT)] == ["carol"]


def test_empty_list_is_not_an_error(relationships, alice) -> None:
    assert relationships.list_members(alice, ListKind.BLOCK) == []


def test_members_ordered_by_login(relationships, alice, bob, carol, dave) -> None:
    for login in (dave, bob, carol):
        relationships.add_to_list(alice, ListKind.CONTACT, login)

    assert [m.login for m in relationships.list_members(alice, ListKind.CONTACT)] == [
        "bob",
        "carol",
        "dave",
    ]


def test_concurrent_duplicate_insert_maps_to_already_member(
    mocker, relationships, alice, bob
) -> None:
    relationships.add_to_list(alice, ListKind.CONTACT, bob)
    # Simulate a racing session that passed the duplicate check before the first commit.
    mocker.patch.object(RelationshipService, "_is_listed", return_value=False)

    with pytest.raises(AlreadyMember):
        relationships.add_to_list(alice, ListKind.CONTACT, bob)

    assert len(relationships.list_members(alice, ListKind.CONTACT)) == 1
