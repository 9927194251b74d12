import pytest

from judge_core import Debate, InMemoryDebateStore, InMemoryMessageStore, InMemoryUserStatsStore
from judge_core.exceptions import StoreError


def test_get_returns_copy():
    store = InMemoryDebateStore()
    debate = store.create(Debate(theme="テーマ", player1_id="alice"))

    copy = store.get(debate.debate_id)
    copy.player1_score = 9
    assert store.get(debate.debate_id).player1_score == 0
    assert store.get("missing") is None


def test_update_rejects_unknown_fields_and_missing_debates():
    store = InMemoryDebateStore()
    debate = store.create(Debate(theme="テーマ", player1_id="alice"))

    with pytest.raises(StoreError):
        store.update(debate.debate_id, nonsense=1)
    with pytest.raises(StoreError):
        store.update("missing", status="active")

    updated = store.update(debate.debate_id, status="active", player2_id="bob")
    assert updated.status == "active"
    assert store.get(debate.debate_id).player2_id == "bob"


def test_list_debates_filters_by_status():
    store = InMemoryDebateStore()
    first = store.create(Debate(theme="一", player1_id="alice"))
    second = store.create(Debate(theme="二", player1_id="bob"))
    store.update(second.debate_id, status="finished")

    assert [d.debate_id for d in store.list_debates()] == [first.debate_id, second.debate_id]
    assert [d.debate_id for d in store.list_debates("finished")] == [second.debate_id]


def test_lock_is_shared_per_debate():
    store = InMemoryDebateStore()
    assert store.lock("a") is store.lock("a")
    assert store.lock("a") is not store.lock("b")


def test_messages_keep_order_and_evaluations():
    store = InMemoryMessageStore()
    first = store.append("d1", "alice", "一つ目")
    store.append("d1", "bob", "二つ目")
    store.append("d2", "carol", "別の討論")

    assert [m.content for m in store.list_for_debate("d1")] == ["一つ目", "二つ目"]
    assert store.count("d1") == 2

    store.set_evaluation(first.message_id, {"player1_score": 6})
    assert store.list_for_debate("d1")[0].ai_evaluation == {"player1_score": 6}
    with pytest.raises(StoreError):
        store.set_evaluation("missing", {})


def test_apply_outcome_is_idempotent():
    store = InMemoryUserStatsStore()
    assert store.apply_outcome("d1", "alice", "bob", "alice") is True
    assert store.apply_outcome("d1", "alice", "bob", "alice") is False

    assert (store.get("alice").wins, store.get("alice").debate_count) == (1, 1)
    assert (store.get("bob").losses, store.get("bob").debate_count) == (1, 1)


def test_apply_outcome_draw_and_exclusion():
    store = InMemoryUserStatsStore()
    store.apply_outcome("d1", "alice", "ai", None, excluded=["ai"])

    alice = store.get("alice")
    assert (alice.wins, alice.losses, alice.debate_count) == (0, 0, 1)
    assert store.get("ai").debate_count == 0
