"""
Tests for the in-memory vector store.
"""

import pytest

from flowspace.shared import StorageError, ValidationError
from flowspace.services.embeddings import EmbeddingItem, InMemoryVectorStore


@pytest.fixture
def store():
    return InMemoryVectorStore()


def _item(item_id, vector, text=""):
    return EmbeddingItem(id=item_id, text=text or item_id, vector=vector)


def test_query_orders_by_cosine_similarity(store):
    store.upsert("board-1", _item("east", [1.0, 0.0]))
    store.upsert("board-1", _item("north", [0.0, 1.0]))
    store.upsert("board-1", _item("northeast", [1.0, 1.0]))

    hits = store.query("board-1", [1.0, 0.1], k=2)

    assert [h.item.id for h in hits] == ["east", "northeast"]
    assert hits[0].score == pytest.approx(0.995, abs=1e-3)


def test_upsert_replaces_in_place(store):
    store.upsert("b", _item("a", [1.0, 0.0], "old"))
    store.upsert("b", _item("other", [0.0, 1.0]))
    stored = store.upsert("b", _item("a", [0.0, 1.0], "new"))

    assert stored.updated_at is not None
    assert store.get_stats()["total_items"] == 2
    hits = store.query("b", [0.0, 1.0], k=5)
    assert {h.item.text for h in hits} == {"new", "other"}


def test_namespaces_are_isolated(store):
    store.upsert("b1", _item("a", [1.0]))
    store.upsert("b2", _item("a", [1.0]))

    assert store.delete_namespace("b1") is True
    assert store.query("b1", [1.0]) == []
    assert len(store.query("b2", [1.0])) == 1
    assert store.list_namespaces() == ["b2"]
    assert store.delete_namespace("b1") is False


def test_instances_do_not_share_state():
    first, second = InMemoryVectorStore(), InMemoryVectorStore()
    first.upsert("b", _item("a", [1.0]))

    assert second.list_namespaces() == []


def test_dimension_mismatch_scores_zero(store):
    store.upsert("b", _item("a", [1.0, 0.0, 0.0]))

    hit, = store.query("b", [1.0, 0.0])
    assert hit.score == 0.0


def test_zero_vector_scores_zero(store):
    store.upsert("b", _item("a", [0.0, 0.0]))

    assert store.query("b", [1.0, 0.0])[0].score == 0.0


def test_negative_similarity_is_kept(store):
    store.upsert("b", _item("a", [-1.0, 0.0]))

    assert store.query("b", [1.0, 0.0])[0].score == pytest.approx(-1.0)


def test_empty_vector_rejected(store):
    with pytest.raises(ValidationError):
        store.upsert("b", _item("a", []))


def test_empty_namespace_rejected(store):
    with pytest.raises(StorageError):
        store.upsert("", _item("a", [1.0]))


def test_k(store):
    for i in range(10):
        store.upsert("b", _item(f"i{i}", [1.0, float(i)]))

    assert len(store.query("b", [1.0, 1.0])) == 5
    assert store.query("b", [1.0, 1.0], k=0) == []
