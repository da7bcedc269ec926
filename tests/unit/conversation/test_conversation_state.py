"""
Unit tests for Conversation and ConversationStore.
"""

import pytest

from chat_relay.conversation.state import (
    DEFAULT_SYSTEM_PROMPT,
    Conversation,
    ConversationStore,
)
from chat_relay.models.enums import Role


def add_pairs(conversation: Conversation, count: int, start: int = 1) -> None:
    for i in range(start, start + count):
        conversation.append_user(f"question {i}")
        conversation.append_assistant(f"answer {i}")


class TestConversationWindow:
    """Sliding window invariants."""

    def test_starts_with_single_system_exchange(self):
        conversation = Conversation("Be nice.", history_limit=3)
        snapshot = conversation.snapshot()
        assert len(snapshot) == 1
        assert snapshot[0].role == Role.SYSTEM
        assert snapshot[0].content == "Be nice."

    @pytest.mark.parametrize("history_limit", [1, 2, 6])
    @pytest.mark.parametrize("pairs", [0, 1, 2, 5, 9])
    def test_length_is_one_plus_twice_min_pairs_limit(self, history_limit, pairs):
        conversation = Conversation(history_limit=history_limit)
        add_pairs(conversation, pairs)
        assert len(conversation) == 1 + 2 * min(pairs, history_limit)

    def test_retains_most_recent_pairs(self):
        conversation = Conversation(history_limit=3)
        add_pairs(conversation, 7)

        contents = [exchange.content for exchange in conversation.snapshot()[1:]]
        assert contents == [
            "question 5", "answer 5",
            "question 6", "answer 6",
            "question 7", "answer 7",
        ]

    def test_three_queries_with_window_of_two(self):
        conversation = Conversation(history_limit=2)
        add_pairs(conversation, 3)

        snapshot = conversation.snapshot()
        assert len(snapshot) == 5
        user_contents = [e.content for e in snapshot if e.role == Role.USER]
        assert user_contents == ["question 2", "question 3"]

    def test_roles_alternate_after_eviction(self):
        conversation = Conversation(history_limit=2)
        add_pairs(conversation, 4)
        roles = [exchange.role for exchange in conversation.snapshot()]
        assert roles == [Role.SYSTEM, Role.USER, Role.ASSISTANT, Role.USER, Role.ASSISTANT]

    def test_user_append_evicts_before_reply(self):
        conversation = Conversation(history_limit=1)
        add_pairs(conversation, 1)
        conversation.append_user("question 2")

        contents = [exchange.content for exchange in conversation.snapshot()]
        assert contents == [DEFAULT_SYSTEM_PROMPT, "question 2"]

    def test_system_exchange_never_evicted(self):
        conversation = Conversation("System rules.", history_limit=1)
        add_pairs(conversation, 20)
        assert conversation.snapshot()[0].content == "System rules."
        assert conversation.system_prompt == "System rules."

    def test_snapshot_is_a_copy(self):
        conversation = Conversation(history_limit=2)
        snapshot = conversation.snapshot()
        conversation.append_user("later")
        assert len(snapshot) == 1

    def test_messages_in_upstream_format(self):
        conversation = Conversation("sys", history_limit=2)
        conversation.append_user("hi")
        assert conversation.messages() == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "hi"},
        ]

    def test_negative_history_limit_rejected(self):
        with pytest.raises(ValueError):
            Conversation(history_limit=-1)


class TestPendingUser:
    """Rollback of a user exchange whose call failed."""

    def test_discard_pending_user(self):
        conversation = Conversation(history_limit=2)
        add_pairs(conversation, 1)
        conversation.append_user("failed question")

        assert conversation.discard_pending_user() is True
        assert [e.content for e in conversation.snapshot()][-1] == "answer 1"

    def test_discard_without_pending_user_is_noop(self):
        conversation = Conversation(history_limit=2)
        add_pairs(conversation, 1)
        assert conversation.discard_pending_user() is False
        assert len(conversation) == 3

    def test_discard_never_removes_system(self):
        conversation = Conversation(history_limit=2)
        assert conversation.discard_pending_user() is False
        assert len(conversation) == 1

    def test_reset_system_prompt_keeps_history(self):
        conversation = Conversation("old", history_limit=2)
        add_pairs(conversation, 1)
        conversation.reset_system_prompt("new")
        snapshot = conversation.snapshot()
        assert snapshot[0].content == "new"
        assert len(snapshot) == 3


class TestConversationStore:
    """Per-channel conversations."""

    def test_same_id_returns_same_conversation(self):
        store = ConversationStore(history_limit=2)
        assert store.get("chan") is store.get("chan")

    def test_channels_are_isolated(self):
        store = ConversationStore(history_limit=2)
        store.get("a").append_user("for a")
        assert len(store.get("b")) == 1

    def test_new_conversations_use_store_settings(self):
        store = ConversationStore(system_prompt="Custom", history_limit=4)
        conversation = store.get("x")
        assert conversation.system_prompt == "Custom"
        assert conversation.history_limit == 4

    def test_set_system_prompt_updates_existing_and_future(self):
        store = ConversationStore(history_limit=2)
        existing = store.get("old")
        store.set_system_prompt("Loaded from file")
        assert existing.system_prompt == "Loaded from file"
        assert store.get("new").system_prompt == "Loaded from file"

    def test_least_recently_used_conversation_evicted(self):
        store = ConversationStore(max_conversations=2)
        store.get("a")
        store.get("b")
        store.get("a")  # refresh a
        store.get("c")

        assert len(store) == 2
        assert "a" in store
        assert "b" not in store
        assert "c" in store

    @pytest.mark.asyncio
    async def test_busy_conversation_not_evicted(self):
        store = ConversationStore(max_conversations=1)
        busy = store.get("busy")
        async with busy.lock:
            store.get("other")
            assert "busy" in store
            assert "other" in store

    def test_invalid_bound_rejected(self):
        with pytest.raises(ValueError):
            ConversationStore(max_conversations=0)
