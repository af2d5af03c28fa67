# tests/test_chat_messages.py
"""Tests for appending, viewing and paging chat messages."""

from datetime import UTC

import pytest

from messenger.core.errors import NotAMember, NotAuthorized, UnknownChat
from messenger.core.settings import Settings
from messenger.services.chats import ChatService


def test_append_message_from_member(chats, alice, bob) -> None:
    chat_id = chats.create_chat(alice, [bob])

    message = chats.append_message(bob, chat_id, "hello alice")

    assert message.chat_id == chat_id
    assert message.sender_login == "bob"
    assert message.msg_text == "hello alice"
    assert message.msg_timestamp.tzinfo is not None


def test_append_message_requires_membership(chats, alice, bob, carol) -> None:
    chat_id = chats.create_chat(alice, [bob])

    with pytest.raises(NotAMember):
        chats.append_message(carol, chat_id, "let me in")
    with pytest.raises(UnknownChat):
        chats.append_message(alice, chat_id + 1000, "anyone?")


def test_messages_returned_in_time_order(chats, alice, bob) -> None:
    chat_id = chats.create_chat(alice, [bob])
    for i in range(25):
        chats.append_message(alice if i % 2 else bob, chat_id, f"message {i}")

    messages = chats.view_messages(alice, chat_id)

    # Welcome message plus every appended one.
    assert len(messages) == 26
    assert [m.msg_text for m in messages[1:]] == [f"message {i}" for i in range(25)]
    stamps = [m.msg_timestamp for m in messages]
    assert all(earlier < later for earlier, later in zip(stamps, stamps[1:]))
    assert all(stamp.tzinfo == UTC for stamp in stamps)


def test_view_messages_requires_membership(chats, alice, bob, carol) -> None:
    chat_id = chats.create_chat(alice, [bob])

    with pytest.raises(NotAuthorized):
        chats.view_messages(carol, chat_id)
    with pytest.raises(NotAuthorized):
        chats.view_message_page(carol, chat_id)


def test_message_pages_walk_back_from_newest(chats, alice, bob) -> None:
    chat_id = chats.create_chat(alice, [bob])
    for i in range(24):
        chats.append_message(bob, chat_id, f"message {i}")

    newest = chats.view_message_page(alice, chat_id, 0)
    middle = chats.view_message_page(alice, chat_id, 1)
    oldest = chats.view_message_page(alice, chat_id, 2)

    assert newest.total == 25
    assert [m.msg_text for m in newest.messages] == [f"message {i}" for i in range(14, 24)]
    assert not newest.end_of_messages
    assert [m.msg_text for m in middle.messages] == [f"message {i}" for i in range(4, 14)]
    assert not middle.end_of_messages
    assert [m.msg_text for m in oldest.messages] == ["Welcome to the chat!"] + [
        f"message {i}" for i in range(4)
    ]
    assert oldest.end_of_messages


def test_single_page_chat_is_end_of_messages(chats, alice, bob) -> None:
    chat_id = chats.create_chat(alice, [bob])

    page = chats.view_message_page(bob, chat_id)

    assert len(page.messages) == 1
    assert page.end_of_messages


def test_exact_page_boundary(chats, alice, bob) -> None:
    chat_id = chats.create_chat(alice, [bob])
    for i in range(9):
        chats.append_message(alice, chat_id, f"message {i}")

    first = chats.view_message_page(bob, chat_id, 0)
    beyond = chats.view_message_page(bob, chat_id, 1)

    assert len(first.messages) == 10
    assert first.end_of_messages
    assert beyond.messages == []
    assert beyond.end_of_messages


def test_page_size_follows_settings(store, alice, bob) -> None:
    chats = ChatService(store, app_settings=Settings(MESSAGE_PAGE_SIZE=3))
    chat_id = chats.create_chat(alice, [bob])
    for i in range(4):
        chats.append_message(alice, chat_id, f"message {i}")

    page = chats.view_message_page(alice, chat_id, 0)

    assert [m.msg_text for m in page.messages] == ["message 1", "message 2", "message 3"]
    assert not page.end_of_messages


def test_negative_page_is_rejected(chats, alice) -> None:
    chat_id = chats.create_chat(alice, [])

    with pytest.raises(ValueError):
        chats.view_message_page(alice, chat_id, -1)


def test_visible_chats_ordered_by_latest_message(chats, alice, bob, carol) -> None:
    first = chats.create_chat(alice, [bob])
    second = chats.create_chat(carol, [bob])
    third = chats.create_chat(alice, [carol])

    chats.append_message(bob, first, "bumping the first chat")

    visible = chats.list_visible_chats(bob)

    assert [c.chat_id for c in visible] == [second, first]
    assert visible[-1].last_message_at >= visible[0].last_message_at
    assert third not in [c.chat_id for c in visible]


def test_visible_chats_include_chats_without_messages(chats, alice, bob) -> None:
    draft = chats.start_chat(alice)
    chats.add_founding_member(draft, bob)
    finished = chats.create_chat(alice, [bob])

    visible = chats.list_visible_chats(alice)

    assert [c.chat_id for c in visible] == [draft.chat_id, finished]
    assert visible[0].last_message_at is None


def test_visible_chats_for_user_without_chats(chats, alice) -> None:
    assert chats.list_visible_chats(alice) == []
